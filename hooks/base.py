# hooks/base.py
from abc import ABC
from typing import List

from context import RunContext
from models import CommitRecord


class BasePlugin(ABC):
    """
    [V4.6] 插件基类
    定义所有生命周期钩子。用户自定义插件应继承此类。
    """

    # 插件名称 (建议子类覆盖)
    name: str = "BasePlugin"

    def on_start(self, context: RunContext):
        """
        [钩子] 流程开始时调用。
        """
        pass

    def on_commits_collected(self, context: RunContext, commits: List[CommitRecord]):
        """
        [钩子] 提交收集完成、进入 AI 摘要之前调用。
        """
        pass

    def on_commit_summarized(
        self, context: RunContext, summary: str, commit: CommitRecord
    ) -> str:
        """
        [Filter 钩子] 单提交合并摘要生成后调用。
        **必须返回字符串** (若不修改请直接返回 summary)。
        """
        return summary

    def on_daily_report_generated(self, context: RunContext, report: str) -> str:
        """
        [Filter 钩子] 当日日报生成后、发送前调用。
        可用于敏感词过滤、追加内容或格式调整。
        """
        return report

    def on_finish(self, context: RunContext):
        """
        [钩子] 流程结束时调用（无论是否有提交，只要未崩溃）。
        """
        pass
