# notifiers/base.py
from abc import ABC, abstractmethod
from context import RunContext
import logging

logger = logging.getLogger(__name__)


class BaseNotifier(ABC):
    """
    [V4.3] 通知渠道抽象基类
    发送失败只返回 False，由调用方记录日志，不重试，也不影响本次运行的结果。
    """

    def __init__(self, context: RunContext):
        """
        初始化通知器，接收运行时上下文。
        """
        self.context = context
        self.global_config = context.global_config

    @property
    @abstractmethod
    def name(self) -> str:
        """返回通知渠道的名称 (日志显示用)"""
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        判断此通知器是否应该激活。
        例如：FeishuNotifier 检查 config.FEISHU_WEBHOOK 是否存在。
        """
        pass

    @abstractmethod
    def send(self, subject: str, content: str) -> bool:
        """
        执行发送逻辑。
        :param subject: 消息标题
        :param content: 消息正文 (Markdown 文本)
        :return: 是否发送成功
        """
        pass
