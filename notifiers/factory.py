# notifiers/factory.py
import logging
from typing import List, Type

from context import RunContext
from .base import BaseNotifier
from .feishu_notifier import FeishuNotifier

logger = logging.getLogger(__name__)

# [V5.0] 日报只推送飞书群；新渠道在这里追加
NOTIFIER_CLASSES: List[Type[BaseNotifier]] = [FeishuNotifier]


def get_active_notifiers(context: RunContext) -> List[BaseNotifier]:
    """
    返回当前配置下可用的通知渠道。
    一个都没有时返回空列表，由 Orchestrator 打印日报到控制台。
    """
    active: List[BaseNotifier] = []
    for notifier_cls in NOTIFIER_CLASSES:
        try:
            notifier = notifier_cls(context)
        except Exception as e:
            logger.error(f"⚠️ 初始化通知渠道 {notifier_cls.__name__} 失败: {e}")
            continue
        if notifier.is_enabled():
            logger.info(f"🔌 已激活通知渠道: {notifier.name}")
            active.append(notifier)
        else:
            logger.debug(f"通知渠道 {notifier.name} 未配置，跳过。")
    return active
