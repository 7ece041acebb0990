# llm/gemini_provider.py
"""
[V3.5] LLMProvider 针对 Google Gemini 的具体实现。
[V4.1] 使用 @register_provider 进行自动注册。
[V5.0] 改为异步调用 (client.aio)。
"""
import logging
from typing import Optional

from google import genai
from google.genai import types
from google.genai.errors import APIError

from config import GlobalConfig
from errors import CompletionError, ConfigurationError
from llm.provider_abc import LLMProvider, register_provider

logger = logging.getLogger(__name__)


def classify_gemini_error(e: APIError) -> CompletionError:
    if e.code in (401, 403):
        return CompletionError("auth", str(e))
    if e.code == 429:
        return CompletionError("rate_limit", str(e))
    return CompletionError("http", f"HTTP {e.code}: {e.message}")


@register_provider("gemini")
class GeminiProvider(LLMProvider):
    """
    (V3.5) Gemini 策略实现。
    """

    def __init__(self, global_config: GlobalConfig, model_name: Optional[str] = None):
        super().__init__(global_config, model_name)
        if not self.global_config.GEMINI_API_KEY:
            logger.error("❌ (V3.4) GEMINI_API_KEY 未设置。请检查您的 .env 文件。")
            raise ConfigurationError("GEMINI_API_KEY 未设置。")

        self.client = genai.Client(
            api_key=self.global_config.GEMINI_API_KEY,
            http_options=types.HttpOptions(
                timeout=int(self.global_config.LLM_TIMEOUT * 1000)
            ),
        )
        logger.info(f"✅ GeminiProvider (genai.Client 模式) 初始化成功 (模型: {self.model_name})")

    async def complete(self, prompt: str) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=f"models/{self.model_name}",
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.global_config.LLM_TEMPERATURE
                ),
            )
        except APIError as e:
            raise classify_gemini_error(e) from e
        except Exception as e:
            raise CompletionError("transport", str(e)) from e

        if not response or not response.text:
            raise CompletionError("empty", "API 调用成功，但回复内容为空")
        return response.text.strip()
