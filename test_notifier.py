# test_notifier.py
import unittest
from unittest.mock import MagicMock, patch

import requests

from config import GlobalConfig
from context import RunContext
from models import ReportWindow
from notifiers.factory import get_active_notifiers
from notifiers.feishu_notifier import FeishuNotifier


def make_context(webhook: str = "https://open.feishu.cn/hook/abc") -> RunContext:
    return RunContext(
        repo_path="/repo",
        project_data_path="/tmp/data",
        llm_id="mock",
        model_name="mock",
        window=ReportWindow.today("UTC"),
        per_branch_limit=200,
        chunk_max_chars=80000,
        diff_excludes=(),
        fetch=False,
        send=True,
        save=False,
        global_config=GlobalConfig(FEISHU_WEBHOOK=webhook),
    )


def fake_response(payload=None, status=200):
    resp = MagicMock()
    resp.status_code = status
    if payload is None:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = payload
    return resp


class TestFeishuNotifier(unittest.TestCase):

    def test_payload(self):
        notifier = FeishuNotifier(make_context())
        payload = notifier.build_payload("日报", "正文")
        self.assertEqual(payload["msg_type"], "text")
        self.assertEqual(payload["content"]["text"], "【日报】\n\n正文")
        self.assertEqual(notifier.build_payload("", "正文")["content"]["text"], "正文")

    @patch("notifiers.feishu_notifier.requests.post")
    def test_send_success(self, mock_post):
        mock_post.return_value = fake_response({"code": 0, "msg": "success"})
        self.assertTrue(FeishuNotifier(make_context()).send("日报", "正文"))
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://open.feishu.cn/hook/abc")
        self.assertEqual(kwargs["json"]["msg_type"], "text")

    @patch("notifiers.feishu_notifier.requests.post")
    def test_legacy_status_code(self, mock_post):
        mock_post.return_value = fake_response({"StatusCode": 0})
        self.assertTrue(FeishuNotifier(make_context()).send("s", "c"))

    @patch("notifiers.feishu_notifier.requests.post")
    def test_api_error(self, mock_post):
        mock_post.return_value = fake_response({"code": 19001, "msg": "param invalid"})
        self.assertFalse(FeishuNotifier(make_context()).send("s", "c"))

    @patch("notifiers.feishu_notifier.requests.post")
    def test_network_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        self.assertFalse(FeishuNotifier(make_context()).send("s", "c"))

    @patch("notifiers.feishu_notifier.requests.post")
    def test_non_json_response(self, mock_post):
        mock_post.return_value = fake_response(None, status=502)
        self.assertFalse(FeishuNotifier(make_context()).send("s", "c"))

    def test_factory_respects_webhook(self):
        self.assertEqual(len(get_active_notifiers(make_context())), 1)
        self.assertEqual(get_active_notifiers(make_context(webhook="")), [])


if __name__ == "__main__":
    unittest.main()
