# llm/deepseek_provider.py
"""
[V3.5] LLMProvider 针对 DeepSeek 的具体实现。
[V4.1] 使用 @register_provider 进行自动注册。
[V5.0] DeepSeek 为 OpenAI 兼容接口，直接复用 OpenAIProvider。
"""
from llm.openai_provider import OpenAIProvider
from llm.provider_abc import register_provider


@register_provider("deepseek")
class DeepSeekProvider(OpenAIProvider):
    """
    (V3.5) DeepSeek 策略实现 (OpenAI 兼容)。
    """

    def _credentials(self):
        return self.global_config.DEEPSEEK_API_KEY, self.global_config.DEEPSEEK_BASE_URL
