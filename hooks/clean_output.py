# hooks/clean_output.py
import logging
import re

from hooks.base import BasePlugin
from context import RunContext
from models import CommitRecord

logger = logging.getLogger(__name__)

FENCE_START_RE = re.compile(r"^```(markdown|md)?\s*\n", re.IGNORECASE)


def strip_markdown_fence(text: str) -> str:
    """去除 LLM 可能输出的 ```markdown ... ``` 整体包裹"""
    if not text:
        return text

    cleaned = text.strip()
    if FENCE_START_RE.match(cleaned):
        cleaned = FENCE_START_RE.sub("", cleaned, count=1)
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
    return cleaned.strip()


class CleanOutputPlugin(BasePlugin):
    """
    [内置插件] 输出清洗器
    对单提交摘要和当日日报去除 markdown 代码块包裹。
    """

    name = "CleanMarkdownOutput"

    def on_commit_summarized(
        self, context: RunContext, summary: str, commit: CommitRecord
    ) -> str:
        return strip_markdown_fence(summary)

    def on_daily_report_generated(self, context: RunContext, report: str) -> str:
        cleaned = strip_markdown_fence(report)
        if cleaned != report.strip():
            logger.info("🧹 [CleanOutput] 已去除 AI 回复中的 Markdown 代码块包裹。")
        return cleaned
