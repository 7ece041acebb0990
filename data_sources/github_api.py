# data_sources/github_api.py
import fnmatch
import logging
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

from github import Auth, Github, GithubException
from github.Commit import Commit
from github.Repository import Repository

from .base import DataSource
from errors import GitQueryError
from models import CommitMetadata, ReportWindow

logger = logging.getLogger(__name__)


def parse_repo_name(url: str) -> Optional[str]:
    """从 URL 中解析 owner/repo"""
    # 支持 https://github.com/owner/repo 和 git@github.com:owner/repo.git
    try:
        if url.startswith("git@"):
            path = url.split(":", 1)[1]
        else:
            path = urlparse(url).path
        path = path.strip("/")
        if path.endswith(".git"):
            path = path[:-4]
        return path if path.count("/") == 1 else None
    except Exception:
        return None


def is_excluded(filename: str, patterns: Iterable[str]) -> bool:
    """fnmatch 版本的路径排除；'**/' 前缀同时匹配根目录文件"""
    for pattern in patterns:
        if fnmatch.fnmatch(filename, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatch(filename, pattern[3:]):
            return True
    return False


class GitHubAPIDataSource(DataSource):
    """
    [V4.8] GitHub 远程数据源实现
    使用 PyGithub 直接访问远程仓库，无需本地 git clone。
    [V5.0] 全分支视图由各分支结果合并，按 committer 时间排序。
    注意：GitHub 返回的 patch 自带上下文行，无法像本地那样压到 --unified=0。
    """

    def __init__(self, repo_url: str, token: str = ""):
        self.repo_url = repo_url
        self.repo: Optional[Repository] = None
        self._commits: Dict[str, Commit] = {}
        self._branches: Optional[List[str]] = None

        # 初始化 GitHub 客户端
        if not token:
            logger.warning(
                "⚠️ 未配置 GITHUB_TOKEN，API 请求可能会受到严格限制 (60次/小时)。建议在 .env 中配置。"
            )
            self.client = Github()  # 匿名访问
        else:
            self.client = Github(auth=Auth.Token(token))

    def validate(self) -> bool:
        repo_name = parse_repo_name(self.repo_url)
        if not repo_name:
            logger.error(f"❌ 无法从 URL 解析仓库名称: {self.repo_url}")
            return False

        try:
            logger.info(f"🌐 正在连接 GitHub API: {repo_name} ...")
            self.repo = self.client.get_repo(repo_name)
            logger.info(f"✅ 成功连接远程仓库: {self.repo.full_name}")
            return True
        except GithubException as e:
            logger.error(f"❌ 无法访问 GitHub 仓库: {e.status} {e.data}")
            return False
        except Exception as e:
            logger.error(f"❌ GitHub 连接发生未知错误: {e}")
            return False

    def list_remote_branches(self) -> List[str]:
        if not self.repo:
            return []
        if self._branches is None:
            try:
                self._branches = [b.name for b in self.repo.get_branches()]
            except Exception as e:
                logger.error(f"❌ 获取分支列表失败: {e}")
                return []
        return list(self._branches)

    def _branch_commits(
        self, branch: str, window: ReportWindow, exclude_merges: bool
    ) -> List[Commit]:
        # API 返回从新到旧
        commits = []
        for c in self.repo.get_commits(
            sha=branch, since=window.since, until=window.until
        ):
            self._commits[c.sha] = c
            if exclude_merges and len(c.parents) > 1:
                continue
            commits.append(c)
        commits.reverse()
        return commits

    def list_commit_ids(
        self, ref: Optional[str], window: ReportWindow, exclude_merges: bool = True
    ) -> List[str]:
        if not self.repo:
            return []

        if ref is not None:
            try:
                return [c.sha for c in self._branch_commits(ref, window, exclude_merges)]
            except Exception as e:
                logger.error(f"❌ 获取分支 {ref} 的提交列表失败: {e}")
                return []

        merged: Dict[str, Commit] = {}
        for branch in self.list_remote_branches():
            try:
                for c in self._branch_commits(branch, window, exclude_merges):
                    merged.setdefault(c.sha, c)
            except Exception as e:
                logger.error(f"❌ 获取分支 {branch} 的提交列表失败: {e}")
        ordered = sorted(merged.values(), key=lambda c: c.commit.committer.date)
        return [c.sha for c in ordered]

    def _get_commit(self, sha: str) -> Optional[Commit]:
        if sha not in self._commits:
            if not self.repo:
                return None
            try:
                self._commits[sha] = self.repo.get_commit(sha)
            except Exception as e:
                logger.error(f"❌ 获取提交 {sha[:7]} 失败: {e}")
                return None
        return self._commits[sha]

    def commit_metadata(self, sha: str) -> Optional[CommitMetadata]:
        c = self._get_commit(sha)
        if c is None:
            return None
        return CommitMetadata(
            title=c.commit.message.split("\n")[0],  # 只取首行
            author=c.commit.author.name,
        )

    def parent_id(self, sha: str) -> Optional[str]:
        c = self._get_commit(sha)
        if c is None:
            raise GitQueryError(f"无法获取提交 {sha[:7]}")
        if not c.parents:
            return None
        return c.parents[0].sha

    def diff(
        self, base: Optional[str], sha: str, path_excludes: Iterable[str]
    ) -> Optional[str]:
        """
        commit.files 中的 patch 即相对第一个父提交的 diff (root commit 则相对空树)，
        因此 base 只用于与本地数据源保持接口一致。
        """
        if not self.repo:
            return None
        patterns = list(path_excludes)
        try:
            # 列表接口返回的 Commit 不含 files，这里会消耗 1 次 API 请求
            full_commit = self.repo.get_commit(sha)
            diff_text = []
            for f in full_commit.files:
                if is_excluded(f.filename, patterns):
                    logger.debug(f"智能过滤: 已跳过文件 {f.filename}")
                    continue
                header = f"diff --git a/{f.filename} b/{f.filename}\n"
                header += f"--- a/{f.filename}\n+++ b/{f.filename}\n"
                patch = f.patch if f.patch else "(Binary file or too large)"
                diff_text.append(header + patch)
            return "\n".join(diff_text)
        except Exception as e:
            logger.error(f"❌ 获取 Diff 失败 ({sha[:7]}): {e}")
            return None
