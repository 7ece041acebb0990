# git_utils.py
import logging
import shlex
import subprocess
from datetime import datetime
from typing import Iterable, List, Optional

from errors import GitQueryError
from models import CommitMetadata
import utils

logger = logging.getLogger(__name__)

# --- Git 命令格式 ---
GIT_FETCH_ALL = "git fetch --all --prune --tags"
GIT_LIST_REMOTE_REFS = (
    'git for-each-ref --format="%(refname:short)|%(symref)" {refs_prefix}'
)
GIT_LOG_SHAS = (
    "git log {ref} {merges}--since={since} --until={until} "
    "--pretty=format:%H --reverse"
)
GIT_COMMIT_META = "git show -s --format=%s%x00%an {sha}"
GIT_PARENTS = "git rev-list --parents -n 1 {sha}"
GIT_EMPTY_TREE = "git hash-object -t tree /dev/null"
GIT_DIFF = "git diff --unified=0 --minimal --no-color {base} {sha} -- . {excludes}"

# git 内置的空树对象，hash-object 不可用时回退
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


def run_git_command(
    cmd: str, repo_path: str, context: str = "执行Git命令", timeout: int = 30
) -> Optional[str]:
    """
    (V3.0 修改) 统一的Git命令执行函数
    - 使用 cwd 参数在指定仓库路径下执行
    - 失败、超时一律返回 None，由调用方降级为空结果
    """
    try:
        logger.debug(f"在 {repo_path} 中执行命令: {cmd}")
        result = subprocess.run(
            cmd,
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=repo_path,
        )
        if result.returncode != 0:
            logger.error(f"{context}失败: {result.stderr.strip()}")
            return None
        return result.stdout
    except subprocess.TimeoutExpired:
        logger.error(f"{context}超时")
        return None
    except Exception as e:
        logger.error(f"{context}出错: {e}")
        return None


def is_git_repository(repo_path: str) -> bool:
    """检查指定路径是否为Git仓库"""
    try:
        result = subprocess.run(
            "git rev-parse --is-inside-work-tree",
            shell=True,
            capture_output=True,
            text=True,
            cwd=repo_path,
        )
        return result.returncode == 0
    except Exception:
        return False


def fetch_all(repo_path: str) -> bool:
    """拉取全部远端分支与标签 (失败不影响后续流程)"""
    output = run_git_command(GIT_FETCH_ALL, repo_path, "拉取远端", timeout=300)
    return output is not None


def parse_remote_refs(output: Optional[str], remote: str) -> List[str]:
    """
    解析 for-each-ref 的 "name|symref" 输出。
    排除符号引用 (如 origin/HEAD -> origin/main)，避免重复统计。
    """
    branches = []
    for line in utils.split_lines(output):
        name, _, symref = line.partition("|")
        name = name.strip()
        if symref.strip():
            continue
        # 新版 git 会把 refs/remotes/origin/HEAD 缩写为 "origin"
        if name in (remote, f"{remote}/HEAD"):
            continue
        branches.append(name)
    return branches


def list_remote_branches(repo_path: str, remote: str = "origin") -> List[str]:
    cmd = GIT_LIST_REMOTE_REFS.format(
        refs_prefix=shlex.quote(f"refs/remotes/{remote}")
    )
    output = run_git_command(cmd, repo_path, "列出远端分支")
    return parse_remote_refs(output, remote)


def list_commit_shas(
    repo_path: str,
    ref: Optional[str],
    since: datetime,
    until: datetime,
    exclude_merges: bool = True,
) -> List[str]:
    """
    列出 ref 可达、且在时间窗口内的提交，从旧到新。
    ref 为 None 时扫描所有引用 (--all)。
    """
    cmd = GIT_LOG_SHAS.format(
        ref=shlex.quote(ref) if ref else "--all",
        merges="--no-merges " if exclude_merges else "",
        since=shlex.quote(since.isoformat()),
        until=shlex.quote(until.isoformat()),
    )
    output = run_git_command(cmd, repo_path, f"获取 {ref or '--all'} 的提交列表")
    if output is None:
        raise GitQueryError(f"git log {ref or '--all'} 执行失败")
    return utils.split_lines(output)


def get_commit_metadata(repo_path: str, sha: str) -> Optional[CommitMetadata]:
    cmd = GIT_COMMIT_META.format(sha=shlex.quote(sha))
    output = run_git_command(cmd, repo_path, f"获取 {sha[:7]} 的提交信息")
    if output is None:
        return None
    title, _, author = output.strip().partition("\x00")
    return CommitMetadata(title=title.strip(), author=author.strip())


def get_parent_sha(repo_path: str, sha: str) -> Optional[str]:
    """
    非 merge 提交通常只有一个 parent；root commit 没有 parent (返回 None)。
    查询失败抛出 GitQueryError，不能当作 root commit 与空树比较。
    """
    cmd = GIT_PARENTS.format(sha=shlex.quote(sha))
    output = run_git_command(cmd, repo_path, f"获取 {sha[:7]} 的父提交")
    if output is None:
        raise GitQueryError(f"无法获取 {sha[:7]} 的父提交")
    parts = output.split()
    return parts[1] if len(parts) > 1 else None


def get_empty_tree_sha(repo_path: str) -> str:
    output = run_git_command(GIT_EMPTY_TREE, repo_path, "计算空树对象")
    return output.strip() if output and output.strip() else EMPTY_TREE_SHA


def build_exclude_pathspecs(patterns: Iterable[str]) -> str:
    """glob 列表 -> git 排除 pathspec (glob 语义，** 可匹配零层目录)"""
    return " ".join(shlex.quote(f":(glob,exclude){p}") for p in patterns)


def get_commit_diff(
    repo_path: str, base: str, sha: str, excludes: Iterable[str]
) -> Optional[str]:
    """
    (V5.0) 无上下文行的 diff (--unified=0 --minimal)，以减少送模 token。
    """
    cmd = GIT_DIFF.format(
        base=shlex.quote(base),
        sha=shlex.quote(sha),
        excludes=build_exclude_pathspecs(excludes),
    )
    return run_git_command(cmd, repo_path, f"获取 {sha[:7]} 的Diff", timeout=120)
