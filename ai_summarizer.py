# ai_summarizer.py
import importlib
import logging
import os
from typing import Optional

from config import GlobalConfig
from errors import ConfigurationError

# (V4.1) 导入 Registry 和基类
from llm.provider_abc import LLMProvider, PROVIDER_REGISTRY

logger = logging.getLogger(__name__)


# --- (V4.1) 动态加载器 ---
def load_providers_dynamically(script_base_path: str):
    """
    (V4.1) 扫描 llm/ 目录下的所有 .py 文件并导入它们。
    这将触发 @register_provider 装饰器，将类注册到 PROVIDER_REGISTRY 中。
    """
    llm_dir = os.path.join(script_base_path, "llm")
    if not os.path.exists(llm_dir):
        logger.warning(f"⚠️ 未找到 llm 目录: {llm_dir}")
        return

    for filename in sorted(os.listdir(llm_dir)):
        if filename.endswith(".py") and filename not in (
            "__init__.py",
            "provider_abc.py",
        ):
            # 构建模块名 (例如: llm.gemini_provider)
            module_name = f"llm.{filename[:-3]}"
            try:
                importlib.import_module(module_name)
            except Exception as e:
                logger.error(f"❌ 动态加载模块 {module_name} 失败: {e}")


# --- (V4.1) 重构后的工厂函数 ---
def get_llm_provider(
    provider_id: str, global_config: GlobalConfig, model_name: Optional[str] = None
) -> LLMProvider:
    """
    (V4.1) 工厂函数：基于 Registry Pattern 实现。
    [V5.0] 配置缺失统一抛出 ConfigurationError，在收集任何数据之前失败。
    """
    logger.info(f"ℹ️ 正在初始化 LLM 供应商: {provider_id}")

    # 1. 动态加载所有可能的 providers
    load_providers_dynamically(global_config.SCRIPT_BASE_PATH)

    # 2. 从注册表中查找
    if provider_id not in PROVIDER_REGISTRY:
        logger.error(f"❌ 未知的 LLM 供应商: '{provider_id}'")
        logger.error(f"   可用供应商: {sorted(PROVIDER_REGISTRY.keys())}")
        raise ConfigurationError(f"未知的 LLM 供应商: {provider_id}")

    # 3. 检查配置
    if not global_config.is_provider_configured(provider_id):
        logger.error(f"❌ 供应商 '{provider_id}' 未配置 API Key。")
        raise ConfigurationError(
            f"供应商 '{provider_id}' 未配置。 "
            f"请在您的 .env 文件中设置相应的 API 密钥。"
        )

    # 4. 实例化
    provider_class = PROVIDER_REGISTRY[provider_id]
    return provider_class(global_config, model_name)


class AIService:
    """
    (V5.0) 封装选定的 LLM 供应商，向 Reducer 暴露唯一的 complete(prompt)。
    调用计数、空回复与异常归类统一由 SummarizationReducer 负责。
    """

    def __init__(self, provider: LLMProvider):
        self.provider = provider
        logger.info(
            f"✅ 🤖 AI 服务已成功初始化 (Provider: {provider.__class__.__name__}, 模型: {provider.model_name})"
        )

    @classmethod
    def from_config(
        cls,
        provider_id: str,
        global_config: GlobalConfig,
        model_name: Optional[str] = None,
    ) -> "AIService":
        return cls(get_llm_provider(provider_id, global_config, model_name))

    async def complete(self, prompt: str) -> str:
        logger.debug(f"🤖 调用 LLM (prompt {len(prompt)} chars)")
        return await self.provider.complete(prompt)
