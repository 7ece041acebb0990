# llm/provider_abc.py
"""
[V3.5] 所有 LLM 供应商的抽象基类 (ABC)。
[V4.1] 新增 Registry Pattern 支持，允许动态注册供应商。
[V5.0] 接口收敛为单一的异步 complete(prompt)，提示词由 prompt_builder 负责。
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from config import GlobalConfig

# --- [V4.1] 注册表机制 START ---
# 全局注册表，存储 "provider_id" -> Provider Class 的映射
PROVIDER_REGISTRY: Dict[str, Type["LLMProvider"]] = {}


def register_provider(provider_id: str):
    """
    类装饰器：用于将具体的 Provider 实现类注册到全局注册表中。

    使用示例:
        @register_provider("gemini")
        class GeminiProvider(LLMProvider):
            ...
    """

    def decorator(cls):
        if provider_id in PROVIDER_REGISTRY:
            raise ValueError(
                f"Provider id '{provider_id}' 已经被注册过 ({PROVIDER_REGISTRY[provider_id].__name__})"
            )
        cls.provider_id = provider_id
        PROVIDER_REGISTRY[provider_id] = cls
        return cls

    return decorator


# --- [V4.1] 注册表机制 END ---


class LLMProvider(ABC):
    """
    (V5.0 接口) LLM 供应商的抽象接口。
    """

    provider_id: str = ""

    def __init__(self, global_config: GlobalConfig, model_name: Optional[str] = None):
        self.global_config = global_config
        self.model_name = model_name or global_config.model_for(self.provider_id)

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """
        单次调用，返回模型输出文本。
        失败时抛出 errors.CompletionError，不做重试。
        """
        pass
