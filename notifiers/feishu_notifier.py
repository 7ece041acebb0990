# notifiers/feishu_notifier.py
import logging

import requests

from .base import BaseNotifier

logger = logging.getLogger(__name__)


class FeishuNotifier(BaseNotifier):
    """
    [V4.4] 飞书 (Lark) 通知实现
    [V5.0] 仅保留群 Webhook 模式：发送纯文本日报。
    """

    @property
    def name(self) -> str:
        return "Feishu (Lark)"

    def is_enabled(self) -> bool:
        return bool(self.global_config.FEISHU_WEBHOOK)

    def build_payload(self, subject: str, content: str) -> dict:
        text = f"【{subject}】\n\n{content}" if subject else content
        return {"msg_type": "text", "content": {"text": text}}

    def send(self, subject: str, content: str) -> bool:
        url = self.global_config.FEISHU_WEBHOOK
        if not url:
            return False

        logger.info("ℹ️ [Feishu] 使用 Webhook 模式发送 (仅文本)...")
        try:
            resp = requests.post(url, json=self.build_payload(subject, content), timeout=10)
        except requests.RequestException as e:
            logger.error(f"❌ [Feishu] Webhook 网络错误: {e}")
            return False

        try:
            data = resp.json()
        except ValueError:
            logger.error(f"❌ [Feishu] Webhook 返回非 JSON 响应: HTTP {resp.status_code}")
            return False

        # 新版返回 code，旧版自定义机器人返回 StatusCode
        if data.get("code", data.get("StatusCode")) == 0:
            logger.info("✅ [Feishu] Webhook 推送成功。")
            return True
        logger.error(f"❌ [Feishu] Webhook 错误: {data}")
        return False
