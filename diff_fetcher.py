# diff_fetcher.py
"""
[V5.0] Diff 获取：与唯一父提交比较，root commit 与空树比较。
任何失败都返回空字符串，由 Reducer 走 "无有效改动" 占位路径。
"""
import logging
from typing import Iterable, Tuple

from data_sources.base import DataSource

logger = logging.getLogger(__name__)


class DiffFetcher:
    def __init__(self, data_source: DataSource, path_excludes: Iterable[str]):
        self.data_source = data_source
        self.path_excludes: Tuple[str, ...] = tuple(path_excludes)

    def fetch(self, sha: str) -> str:
        try:
            parent = self.data_source.parent_id(sha)
            if parent is None:
                logger.info(f"ℹ️ {sha[:7]} 没有父提交，与空树比较。")
            diff = self.data_source.diff(parent, sha, self.path_excludes)
        except Exception as e:
            logger.error(f"❌ 获取 {sha[:7]} 的 Diff 失败，按空 Diff 处理: {e}")
            return ""
        return diff or ""
