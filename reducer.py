# reducer.py
"""
[V5.0] 三级归约：片段摘要 -> 单提交摘要 -> 当日日报

每一级独立容错：
- 片段调用失败 -> 写入 "（片段N调用失败：原因）" 占位，继续下一个片段
- 提交合并失败 -> 按片段顺序拼接带标签的片段小结
- 当日汇总失败 -> 按时间顺序拼接各提交小结，并注明自动汇总失败
Reducer 永远产出文本，不向上抛出 LLM 错误。

调用严格串行：同一时刻只有一个 LLM 请求在途，片段、提交的处理顺序
与 Collector 给出的时间顺序一致。
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Tuple

import prompt_builder
from chunker import build_chunks
from diff_fetcher import DiffFetcher
from errors import CompletionError
from models import CommitRecord, DailyReport, DiffChunk, SummaryArtifact, SummaryTier

logger = logging.getLogger(__name__)

CompleteFn = Callable[[str], Awaitable[str]]
CommitFilter = Callable[[CommitRecord, str], str]


class SummarizationReducer:
    def __init__(
        self,
        complete: CompleteFn,
        fetcher: DiffFetcher,
        chunk_max_chars: int,
        commit_filter: Optional[CommitFilter] = None,
    ):
        self.complete = complete
        self.fetcher = fetcher
        self.chunk_max_chars = chunk_max_chars
        self.commit_filter = commit_filter
        self.calls = 0
        self.chunks_seen = 0

    async def _call(self, prompt: str) -> str:
        """单次调用；空回复视为失败"""
        self.calls += 1
        try:
            text = await self.complete(prompt)
        except CompletionError:
            raise
        except Exception as e:
            raise CompletionError("unknown", str(e)) from e
        text = (text or "").strip()
        if not text:
            raise CompletionError("empty", "模型返回空内容")
        return text

    # --- 第 1 级：片段 ---

    async def summarize_chunk(
        self, commit: CommitRecord, chunk: DiffChunk
    ) -> SummaryArtifact:
        prompt = prompt_builder.render_chunk_prompt(commit, chunk)
        try:
            text = await self._call(prompt)
        except CompletionError as e:
            if e.kind == "empty":
                placeholder = prompt_builder.chunk_empty_placeholder(chunk.index)
            else:
                placeholder = prompt_builder.chunk_failed_placeholder(chunk.index, str(e))
            logger.warning(
                f"⚠️ {commit.short_sha} 片段 {chunk.index}/{chunk.total} 摘要失败: {e}"
            )
            return SummaryArtifact(
                tier=SummaryTier.CHUNK,
                text=placeholder,
                sha=commit.sha,
                chunk_index=chunk.index,
                chunk_total=chunk.total,
                degraded=True,
                reason=str(e),
            )
        return SummaryArtifact(
            tier=SummaryTier.CHUNK,
            text=text,
            sha=commit.sha,
            chunk_index=chunk.index,
            chunk_total=chunk.total,
        )

    async def summarize_chunks(
        self, commit: CommitRecord, chunks: List[DiffChunk]
    ) -> List[SummaryArtifact]:
        results = []
        for chunk in chunks:
            logger.info(f"🤖 [{commit.short_sha}] 片段 {chunk.index}/{chunk.total} ({len(chunk.text)} chars)")
            results.append(await self.summarize_chunk(commit, chunk))
        return results

    # --- 第 2 级：单提交 ---

    async def merge_commit(
        self, commit: CommitRecord, parts: List[SummaryArtifact]
    ) -> SummaryArtifact:
        texts = [p.text for p in parts]
        failed = [p.chunk_index for p in parts if p.degraded]
        prompt = prompt_builder.render_commit_merge_prompt(commit, texts, failed)
        chunk_reason = f"片段 {', '.join(map(str, failed))} 失败" if failed else None

        try:
            merged = await self._call(prompt)
        except CompletionError as e:
            logger.warning(f"⚠️ {commit.short_sha} 合并摘要失败，改为拼接片段小结: {e}")
            return SummaryArtifact(
                tier=SummaryTier.COMMIT,
                text=prompt_builder.label_chunk_summaries(texts),
                sha=commit.sha,
                chunk_total=len(parts),
                degraded=True,
                reason="; ".join(r for r in (chunk_reason, f"合并失败: {e}") if r),
            )

        if self.commit_filter:
            merged = self.commit_filter(commit, merged)
        return SummaryArtifact(
            tier=SummaryTier.COMMIT,
            text=merged,
            sha=commit.sha,
            chunk_total=len(parts),
            degraded=bool(failed),
            reason=chunk_reason,
        )

    async def summarize_commit(self, commit: CommitRecord) -> SummaryArtifact:
        # fetch 内部是同步的 git 子进程调用，放到线程中执行
        diff = await asyncio.to_thread(self.fetcher.fetch, commit.sha)
        chunks = build_chunks(diff, self.chunk_max_chars) if diff.strip() else []
        if not chunks:
            logger.info(f"ℹ️ {commit.short_sha} 无有效 Diff，跳过 AI 摘要。")
            return SummaryArtifact(
                tier=SummaryTier.COMMIT,
                text=prompt_builder.EMPTY_DIFF_SUMMARY,
                sha=commit.sha,
                chunk_total=0,
            )

        self.chunks_seen += len(chunks)
        parts = await self.summarize_chunks(commit, chunks)
        return await self.merge_commit(commit, parts)

    # --- 第 3 级：当日 ---

    async def summarize_day(
        self,
        date_label: str,
        repo: str,
        items: List[Tuple[CommitRecord, SummaryArtifact]],
    ) -> SummaryArtifact:
        pairs = [(commit, summary.text) for commit, summary in items]
        prompt = prompt_builder.render_daily_prompt(date_label, repo, pairs)
        try:
            text = await self._call(prompt)
        except CompletionError as e:
            logger.warning(f"⚠️ 当日汇总失败，改为逐提交拼接: {e}")
            return SummaryArtifact(
                tier=SummaryTier.DAILY,
                text=prompt_builder.daily_fallback_text(pairs),
                degraded=True,
                reason=str(e),
            )
        return SummaryArtifact(tier=SummaryTier.DAILY, text=text)

    async def run(
        self, commits: List[CommitRecord], date_label: str, repo: str
    ) -> DailyReport:
        items: List[Tuple[CommitRecord, SummaryArtifact]] = []
        for i, commit in enumerate(commits, 1):
            logger.info(f"📝 ({i}/{len(commits)}) [{commit.short_sha}] {commit.title}")
            items.append((commit, await self.summarize_commit(commit)))

        daily = await self.summarize_day(date_label, repo, items)
        return DailyReport(
            date_label=date_label,
            repo=repo,
            text=daily.text,
            commits=items,
            degraded=daily.degraded,
            completion_calls=self.calls,
            chunk_count=self.chunks_seen,
        )
