# llm/mock_provider.py
"""
[测试样例] 一个模拟的 LLM 供应商
不进行任何网络调用，用于本地演练 (--llm mock) 与单元测试。
"""
import logging

from llm.provider_abc import LLMProvider, register_provider

logger = logging.getLogger(__name__)


# 核心测试点：使用装饰器注册 ID 为 "mock"
@register_provider("mock")
class MockProvider(LLMProvider):
    """
    模拟的 Provider，仅返回基于提示词首行的固定格式字符串。
    """

    async def complete(self, prompt: str) -> str:
        first_line = prompt.strip().split("\n", 1)[0]
        return f"[Mock] {first_line[:60]} ({len(prompt)} chars)"
