# llm/ollama_provider.py
from llm.openai_provider import OpenAIProvider
from llm.provider_abc import register_provider


@register_provider("ollama")
class OllamaProvider(OpenAIProvider):
    """
    [V4.7] Ollama 本地大模型策略实现。
    通过 OpenAI 兼容接口连接本地 Ollama 服务。
    """

    def _credentials(self):
        # Ollama 不需要真实 Key，但库要求必填
        return "ollama", self.global_config.OLLAMA_BASE_URL
