# data_sources/local_git.py
import logging
import os
from typing import Iterable, List, Optional

from .base import DataSource
from models import CommitMetadata, ReportWindow
import git_utils  # 复用现有的 git_utils

logger = logging.getLogger(__name__)


class LocalGitDataSource(DataSource):
    """
    [V4.5] 本地 Git 数据源实现。
    通过调用 git 命令行工具分析本地仓库。
    """

    def __init__(self, repo_path: str, remote: str = "origin"):
        self.repo_path = repo_path
        self.remote = remote
        self._empty_tree: Optional[str] = None

    def validate(self) -> bool:
        if not os.path.exists(self.repo_path):
            logger.error(f"❌ 路径不存在: {self.repo_path}")
            return False
        if not git_utils.is_git_repository(self.repo_path):
            logger.error(f"❌ 指定路径不是 Git 仓库: {self.repo_path}")
            return False
        return True

    def refresh(self) -> bool:
        logger.info("🔄 正在拉取全部远端分支 (git fetch --all --prune --tags)...")
        ok = git_utils.fetch_all(self.repo_path)
        if not ok:
            logger.warning("⚠️ 拉取远端失败，将使用本地已有的远端引用继续。")
        return ok

    def list_remote_branches(self) -> List[str]:
        return git_utils.list_remote_branches(self.repo_path, self.remote)

    def list_commit_ids(
        self, ref: Optional[str], window: ReportWindow, exclude_merges: bool = True
    ) -> List[str]:
        return git_utils.list_commit_shas(
            self.repo_path, ref, window.since, window.until, exclude_merges
        )

    def commit_metadata(self, sha: str) -> Optional[CommitMetadata]:
        return git_utils.get_commit_metadata(self.repo_path, sha)

    def parent_id(self, sha: str) -> Optional[str]:
        return git_utils.get_parent_sha(self.repo_path, sha)

    def diff(
        self, base: Optional[str], sha: str, path_excludes: Iterable[str]
    ) -> Optional[str]:
        if base is None:
            if self._empty_tree is None:
                self._empty_tree = git_utils.get_empty_tree_sha(self.repo_path)
            base = self._empty_tree
        return git_utils.get_commit_diff(self.repo_path, base, sha, path_excludes)
