# models.py
"""
[V5.0] 日报流水线的数据模型
"""
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class CommitMetadata:
    """提交的标题与作者"""

    title: str
    author: str


@dataclass(frozen=True)
class CommitRecord:
    """进入 Reducer 的提交 (构建后不可变)"""

    sha: str
    title: str
    author: str
    url: str
    branches: Tuple[str, ...]

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def branch_label(self) -> str:
        return ", ".join(self.branches)


@dataclass(frozen=True)
class ReportWindow:
    """
    报告时间窗口：配置时区的 "当天 0 点" 到 "现在"。
    每次运行重新计算，不做持久化。
    """

    since: datetime
    until: datetime
    timezone: str

    @classmethod
    def today(cls, tz_name: str, now: Optional[datetime] = None) -> "ReportWindow":
        tz = ZoneInfo(tz_name)
        current = now.astimezone(tz) if now else datetime.now(tz)
        midnight = datetime.combine(current.date(), time.min, tzinfo=tz)
        return cls(since=midnight, until=current, timezone=tz_name)

    @property
    def label(self) -> str:
        return self.since.strftime("%Y-%m-%d")


@dataclass
class CollectionResult:
    """Collector 的输出：分支归属映射 + 全局时间序"""

    branch_commits: Dict[str, List[str]] = field(default_factory=dict)
    commit_branches: Dict[str, Set[str]] = field(default_factory=dict)
    ordered_shas: List[str] = field(default_factory=list)

    def branches_of(self, sha: str) -> Tuple[str, ...]:
        return tuple(sorted(self.commit_branches.get(sha, ())))


@dataclass(frozen=True)
class DiffChunk:
    """diff 分片 (index 从 1 开始)"""

    index: int
    total: int
    text: str


class SummaryTier(str, Enum):
    CHUNK = "chunk"
    COMMIT = "commit"
    DAILY = "daily"


@dataclass(frozen=True)
class SummaryArtifact:
    """
    带层级标记的摘要文本。
    degraded=True 表示该层 LLM 调用失败，text 为降级内容，reason 记录原因。
    """

    tier: SummaryTier
    text: str
    sha: Optional[str] = None
    chunk_index: Optional[int] = None
    chunk_total: Optional[int] = None
    degraded: bool = False
    reason: Optional[str] = None


@dataclass
class DailyReport:
    """一次运行的最终产物"""

    date_label: str
    repo: str
    text: str
    commits: List[Tuple[CommitRecord, SummaryArtifact]]
    degraded: bool = False
    completion_calls: int = 0
    chunk_count: int = 0

    @property
    def degraded_commits(self) -> int:
        return sum(1 for _, summary in self.commits if summary.degraded)
