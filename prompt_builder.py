# prompt_builder.py
"""
[V5.0] 提示词构建 (纯函数)
模板位于 templates/prompts/*.txt.j2，由 Jinja2 渲染。
降级拼接 (LLM 失败时的回退文本) 也放在这里，保证与提示词中的格式一致。
"""
import os
from functools import lru_cache
from typing import List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from config import SCRIPT_BASE_PATH
from models import CommitRecord, DiffChunk


COMMIT_SEPARATOR = "\n\n---\n\n"

EMPTY_DIFF_SUMMARY = "（无有效业务改动或改动已被过滤，例如 lockfile/构建产物/二进制，或空提交）"
DAILY_FALLBACK_NOTE = "（当日汇总失败，以下为逐提交原始小结拼接）"


def chunk_failed_placeholder(index: int, reason: str) -> str:
    return f"（片段{index}调用失败：{reason}）"


def chunk_empty_placeholder(index: int) -> str:
    return f"（片段{index}摘要为空）"


@lru_cache(maxsize=None)
def _get_env(templates_dir: str) -> Environment:
    # 纯文本提示词，不做 HTML 转义
    return Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=False,
        undefined=StrictUndefined,
    )


def _render(template_name: str, **kwargs) -> str:
    templates_dir = os.path.join(SCRIPT_BASE_PATH, "templates", "prompts")
    template = _get_env(templates_dir).get_template(template_name)
    return template.render(**kwargs)


def label_chunk_summaries(parts: Sequence[str]) -> str:
    """按位置标注各片段小结：【片段1】..."""
    return "\n\n".join(f"【片段{i}】\n{p}" for i, p in enumerate(parts, 1))


def format_commit_entry(
    commit: CommitRecord, summary: str, with_author: bool = True
) -> str:
    if with_author:
        head = f"[{commit.short_sha}] {commit.title} — {commit.author} — {commit.branch_label}"
    else:
        head = f"[{commit.short_sha}] {commit.title} — {commit.branch_label}"
    return f"{head}\n{summary}"


def render_chunk_prompt(commit: CommitRecord, chunk: DiffChunk) -> str:
    return _render("chunk_summary.txt.j2", commit=commit, chunk=chunk)


def render_commit_merge_prompt(
    commit: CommitRecord, parts: Sequence[str], failed_chunks: Sequence[int] = ()
) -> str:
    return _render(
        "commit_merge.txt.j2",
        commit=commit,
        joined=label_chunk_summaries(parts),
        failed_chunks=[str(i) for i in failed_chunks],
    )


def render_daily_prompt(
    date_label: str, repo: str, items: List[Tuple[CommitRecord, str]]
) -> str:
    body = COMMIT_SEPARATOR.join(
        format_commit_entry(commit, summary) for commit, summary in items
    )
    return _render("daily_merge.txt.j2", date_label=date_label, repo=repo, body=body)


def daily_fallback_text(items: List[Tuple[CommitRecord, str]]) -> str:
    """当日汇总失败时的原始拼接 (保持时间顺序)"""
    body = COMMIT_SEPARATOR.join(
        format_commit_entry(commit, summary, with_author=False)
        for commit, summary in items
    )
    return f"{DAILY_FALLBACK_NOTE}\n\n{body}"
