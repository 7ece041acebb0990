# test_registry.py
import asyncio
import os
import unittest

# 导入核心模块
from ai_summarizer import AIService, get_llm_provider, load_providers_dynamically
from config import GlobalConfig
from errors import ConfigurationError
from llm.provider_abc import PROVIDER_REGISTRY


class TestV4Registry(unittest.TestCase):

    def setUp(self):
        # 确保脚本路径正确，以便 scanner 能找到 llm/ 目录
        self.config = GlobalConfig(
            SCRIPT_BASE_PATH=os.path.dirname(os.path.abspath(__file__))
        )

    def test_dynamic_discovery(self):
        """测试是否能自动扫描到 llm/ 下的所有供应商"""
        load_providers_dynamically(self.config.SCRIPT_BASE_PATH)

        for provider_id in ("mock", "openai", "deepseek", "gemini", "ollama"):
            with self.subTest(provider=provider_id):
                self.assertIn(provider_id, PROVIDER_REGISTRY)

    def test_mock_completion(self):
        """测试 MockProvider 的实例化与调用"""
        provider = get_llm_provider("mock", self.config)
        summary = asyncio.run(provider.complete("第一行\n第二行"))
        self.assertTrue(summary.startswith("[Mock] 第一行"))

    def test_ai_service_delegates_to_provider(self):
        service = AIService.from_config("mock", self.config)
        self.assertEqual(service.provider.provider_id, "mock")
        reply = asyncio.run(service.complete("hello"))
        self.assertEqual(reply, "[Mock] hello (5 chars)")

    def test_unknown_provider(self):
        with self.assertRaises(ConfigurationError):
            get_llm_provider("no-such-llm", self.config)

    def test_missing_api_key(self):
        with self.assertRaises(ConfigurationError):
            get_llm_provider("openai", self.config)

    def test_model_name_override(self):
        config = GlobalConfig(
            SCRIPT_BASE_PATH=self.config.SCRIPT_BASE_PATH, DEEPSEEK_API_KEY="sk-test"
        )
        provider = get_llm_provider("deepseek", config, "deepseek-reasoner")
        self.assertEqual(provider.model_name, "deepseek-reasoner")
        self.assertEqual(get_llm_provider("deepseek", config).model_name, "deepseek-chat")


if __name__ == "__main__":
    unittest.main()
