# plugins/secret_redactor.py
import logging
import re

from hooks.base import BasePlugin
from context import RunContext

logger = logging.getLogger(__name__)


class SecretRedactorPlugin(BasePlugin):
    """
    示例插件：日报发往群聊之前，遮盖 diff 摘要中可能带出的密钥
    """

    name = "SecretRedactor"

    PATTERNS = [
        re.compile(r"sk-[A-Za-z0-9_\-]{16,}"),  # OpenAI / DeepSeek 风格 key
        re.compile(r"gh[pousr]_[A-Za-z0-9]{20,}"),  # GitHub token
        re.compile(r"AKIA[0-9A-Z]{16}"),  # AWS access key id
        re.compile(r"(?i)(password|passwd|secret|token)(\s*[:=]\s*)\S+"),
    ]

    def redact(self, text: str) -> str:
        count = 0
        for pattern in self.PATTERNS:
            if pattern.groups >= 2:
                text, n = pattern.subn(r"\1\2***", text)
            else:
                text, n = pattern.subn("***", text)
            count += n
        if count:
            logger.info(f"🛡️ [SecretRedactor] 已遮盖 {count} 处疑似密钥。")
        return text

    def on_daily_report_generated(self, context: RunContext, report: str) -> str:
        return self.redact(report)
