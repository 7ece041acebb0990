# llm/openai_provider.py
"""
[V5.0] OpenAI 兼容接口 (OpenAI / 企业网关)。
DeepSeek 与 Ollama 均复用此实现，仅凭证与地址不同。
"""
import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from config import GlobalConfig
from errors import CompletionError, ConfigurationError
from llm.provider_abc import LLMProvider, register_provider

logger = logging.getLogger(__name__)


def classify_openai_error(e: Exception) -> CompletionError:
    """openai 异常 -> CompletionError(kind)"""
    if isinstance(e, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return CompletionError("auth", str(e))
    if isinstance(e, openai.RateLimitError):
        return CompletionError("rate_limit", str(e))
    if isinstance(e, openai.APIConnectionError):
        # APITimeoutError 也是 APIConnectionError 的子类
        return CompletionError("transport", str(e))
    if isinstance(e, openai.APIStatusError):
        return CompletionError("http", f"HTTP {e.status_code}: {e.message}")
    return CompletionError("unknown", str(e))


@register_provider("openai")
class OpenAIProvider(LLMProvider):
    """
    (V5.0) OpenAI Chat Completions 策略实现。
    """

    def __init__(self, global_config: GlobalConfig, model_name: Optional[str] = None):
        super().__init__(global_config, model_name)
        api_key, base_url = self._credentials()
        if not api_key:
            logger.error(f"❌ {self.__class__.__name__} 缺少 API Key。请检查您的 .env 文件。")
            raise ConfigurationError(f"{self.provider_id} API Key 未设置。")

        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=global_config.LLM_TIMEOUT,
            max_retries=global_config.LLM_MAX_RETRIES,
        )
        logger.info(
            f"✅ {self.__class__.__name__} 初始化成功 (模型: {self.model_name}, 地址: {base_url})"
        )

    def _credentials(self):
        return self.global_config.OPENAI_API_KEY, self.global_config.OPENAI_BASE_URL

    async def complete(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.global_config.LLM_TEMPERATURE,
                stream=False,
            )
        except Exception as e:
            raise classify_openai_error(e) from e

        if not response.choices:
            raise CompletionError("empty", "未从 API 收到任何 choices")
        return (response.choices[0].message.content or "").strip()
