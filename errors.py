# errors.py
"""
[V5.0] 统一的异常类型
- ConfigurationError: 启动阶段的致命配置错误 (唯一会中止运行的错误)
- CompletionError: LLM 单次调用失败，由 Reducer 按层级降级处理
"""


class ConfigurationError(ValueError):
    """缺少必需凭证或配置值非法。"""


class CompletionError(Exception):
    """
    LLM 调用失败。
    kind 取值: auth / rate_limit / transport / http / empty / unknown
    """

    KINDS = ("auth", "rate_limit", "transport", "http", "empty", "unknown")

    def __init__(self, kind: str, message: str):
        if kind not in self.KINDS:
            kind = "unknown"
        self.kind = kind
        self.message = message
        super().__init__(f"{kind}: {message}")


class GitQueryError(RuntimeError):
    """git 查询失败 (命令出错或超时)，与 "结果为空" 区分开。"""
