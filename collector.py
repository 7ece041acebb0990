# collector.py
"""
[V5.0] 提交收集器
覆盖远端全部分支：先逐分支统计 "今日提交" 得到归属关系，
再用一次全局扫描得到跨分支的时间顺序，两者取交集。
"""
import logging
import re
from typing import Dict, List, Set

from data_sources.base import DataSource
from models import CollectionResult, CommitRecord, ReportWindow

logger = logging.getLogger(__name__)

UNKNOWN = "(unknown)"


def filter_branches(
    branches: List[str], include: str = "", exclude: str = ""
) -> List[str]:
    """分支白名单/黑名单 (正则，search 语义)"""
    result = []
    for name in branches:
        if include and not re.search(include, name):
            continue
        if exclude and re.search(exclude, name):
            continue
        result.append(name)
    return result


def merge_branch_orders(
    branches: List[str], branch_commits: Dict[str, List[str]]
) -> List[str]:
    """按分支顺序依次合并各分支 (从旧到新) 的提交，保留首次出现的位置"""
    merged: List[str] = []
    seen: Set[str] = set()
    for branch in branches:
        for sha in branch_commits.get(branch, []):
            if sha not in seen:
                seen.add(sha)
                merged.append(sha)
    return merged


def build_commit_url(server_url: str, repo: str, sha: str) -> str:
    """缺少 owner/repo 时退化为不带仓库的链接"""
    if repo:
        return f"{server_url}/{repo}/commit/{sha}"
    return f"{server_url}/commit/{sha}"


class CommitCollector:
    """负责分支枚举、提交归属以及 CommitRecord 的构建"""

    def __init__(
        self,
        data_source: DataSource,
        per_branch_limit: int = 200,
        branch_include: str = "",
        branch_exclude: str = "",
    ):
        self.data_source = data_source
        self.per_branch_limit = per_branch_limit
        self.branch_include = branch_include
        self.branch_exclude = branch_exclude

    def list_branches(self) -> List[str]:
        branches = self.data_source.list_remote_branches()
        filtered = filter_branches(branches, self.branch_include, self.branch_exclude)
        if len(filtered) != len(branches):
            logger.info(f"🔎 分支过滤: {len(branches)} -> {len(filtered)}")
        return filtered

    def _branch_commits(self, branch: str, window: ReportWindow) -> List[str]:
        try:
            shas = self.data_source.list_commit_ids(branch, window)
        except Exception as e:
            # 单个分支失败不能阻塞其他分支
            logger.error(f"❌ 获取分支 {branch} 的提交失败，按空结果处理: {e}")
            return []
        # 从旧到新排列，截断时保留最新的 N 条
        return shas[-self.per_branch_limit :] if shas else []

    def collect(self, branches: List[str], window: ReportWindow) -> CollectionResult:
        result = CollectionResult()

        for branch in branches:
            shas = self._branch_commits(branch, window)
            result.branch_commits[branch] = shas
            for sha in shas:
                result.commit_branches.setdefault(sha, set()).add(branch)
            logger.info(f"   [{branch}] 今日提交 {len(shas)} 条")

        if not result.commit_branches:
            return result

        try:
            all_ordered = self.data_source.list_commit_ids(None, window)
        except Exception as e:
            # 全局扫描失败时退化为按分支顺序的首次出现合并，不丢弃已归属的提交
            logger.warning(f"⚠️ 全局提交扫描失败，改用各分支列表合并排序: {e}")
            all_ordered = merge_branch_orders(branches, result.branch_commits)

        seen: Set[str] = set()
        for sha in all_ordered:
            if sha in seen or sha not in result.commit_branches:
                continue
            seen.add(sha)
            result.ordered_shas.append(sha)

        dropped = len(result.commit_branches) - len(result.ordered_shas)
        if dropped:
            logger.warning(f"⚠️ {dropped} 个分支提交未出现在全局扫描中，已忽略。")
        return result

    def build_records(
        self, result: CollectionResult, server_url: str, repo: str
    ) -> List[CommitRecord]:
        records = []
        for sha in result.ordered_shas:
            branches = result.branches_of(sha)
            if not branches:
                continue
            meta = None
            try:
                meta = self.data_source.commit_metadata(sha)
            except Exception as e:
                logger.error(f"❌ 获取 {sha[:7]} 的提交信息失败: {e}")
            if meta is None:
                logger.warning(f"⚠️ 提交 {sha[:7]} 缺少元信息，使用占位值。")
            records.append(
                CommitRecord(
                    sha=sha,
                    title=meta.title if meta else UNKNOWN,
                    author=meta.author if meta else UNKNOWN,
                    url=build_commit_url(server_url, repo, sha),
                    branches=branches,
                )
            )
        return records

    def run(
        self, window: ReportWindow, server_url: str, repo: str
    ) -> List[CommitRecord]:
        """枚举分支 -> 收集 -> 构建记录"""
        branches = self.list_branches()
        logger.info(f"🌿 共 {len(branches)} 个远端分支参与统计")
        if not branches:
            return []
        result = self.collect(branches, window)
        return self.build_records(result, server_url, repo)
