# hooks/manager.py
import importlib.util
import inspect
import logging
import os
from typing import Any, List

from context import RunContext
from .base import BasePlugin
from .clean_output import CleanOutputPlugin

logger = logging.getLogger(__name__)

PLUGINS_DIR_NAME = "plugins"
# 动态加载的插件模块统一加前缀，避免与项目模块重名
PLUGIN_MODULE_PREFIX = "devlog_plugin_"


class PluginManager:
    """
    [V4.6] 插件管理器
    [V5.0] 内置 CleanOutputPlugin 总是排在第一位；用户插件从 plugins/ 目录按文件名顺序加载。
    插件抛出的异常只记录日志：通知型钩子继续下一个插件，过滤型钩子保留上一步的值。
    """

    def __init__(self, context: RunContext):
        self.context = context
        self.plugins: List[BasePlugin] = [CleanOutputPlugin()]

    @property
    def plugin_names(self) -> List[str]:
        return [p.name for p in self.plugins]

    def load_plugins(self, plugins_dir: str = "") -> int:
        """扫描插件目录，返回新加载的插件数量"""
        plugins_dir = plugins_dir or os.path.join(
            self.context.global_config.SCRIPT_BASE_PATH, PLUGINS_DIR_NAME
        )
        if not os.path.isdir(plugins_dir):
            return 0

        logger.info(f"🔌 [Hooks] 正在扫描插件目录: {plugins_dir}")
        before = len(self.plugins)
        for filename in sorted(os.listdir(plugins_dir)):
            if filename.endswith(".py") and not filename.startswith("__"):
                self._load_plugin_file(os.path.join(plugins_dir, filename))
        return len(self.plugins) - before

    def _load_plugin_file(self, filepath: str):
        module_name = PLUGIN_MODULE_PREFIX + os.path.splitext(os.path.basename(filepath))[0]
        try:
            spec = importlib.util.spec_from_file_location(module_name, filepath)
            if not spec or not spec.loader:
                return
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        except Exception as e:
            logger.error(f"❌ [Hooks] 加载插件失败 {filepath}: {e}")
            return

        # 只实例化本文件定义的 BasePlugin 子类，忽略 import 进来的基类/其他插件
        classes = [
            obj
            for _, obj in inspect.getmembers(module, inspect.isclass)
            if issubclass(obj, BasePlugin)
            and obj is not BasePlugin
            and obj.__module__ == module_name
        ]
        if not classes:
            logger.warning(f"   ⚠️ [Hooks] 文件 {filepath} 中未发现 BasePlugin 子类")
            return

        for plugin_cls in classes:
            try:
                self.register(plugin_cls())
            except Exception as e:
                logger.error(f"❌ [Hooks] 实例化插件 {plugin_cls.__name__} 失败: {e}")
                continue
            logger.info(f"   ✅ [Hooks] 已加载插件: {plugin_cls.name}")

    def register(self, plugin: BasePlugin):
        self.plugins.append(plugin)

    def trigger(self, event_name: str, *args):
        """通知型钩子 (on_start / on_commits_collected / on_finish)"""
        for plugin in self.plugins:
            hook = getattr(plugin, event_name, None)
            if hook is None:
                continue
            try:
                hook(self.context, *args)
            except Exception as e:
                logger.error(f"❌ [Hooks] 插件 {plugin.name} 执行 {event_name} 失败: {e}")

    def filter(self, event_name: str, value: Any, *args) -> Any:
        """
        过滤型钩子 (on_commit_summarized / on_daily_report_generated)。
        value 依次经过每个插件；插件返回 None 时沿用上一步的值。
        """
        for plugin in self.plugins:
            hook = getattr(plugin, event_name, None)
            if hook is None:
                continue
            try:
                result = hook(self.context, value, *args)
            except Exception as e:
                logger.error(f"❌ [Hooks] 插件 {plugin.name} 执行 {event_name} 失败: {e}")
                continue
            if result is not None:
                value = result
        return value
