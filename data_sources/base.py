# data_sources/base.py
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from models import CommitMetadata, ReportWindow


class DataSource(ABC):
    """
    [V4.5] 数据源抽象基类
    [V5.0] 接口改为日报流水线需要的最小集合：分支、提交列表、元信息、父提交与 diff。
    list_commit_ids / parent_id 查询失败时抛出 errors.GitQueryError，
    以便调用方区分 "查询失败" 与 "结果为空 / root commit"。
    """

    @abstractmethod
    def validate(self) -> bool:
        """
        验证数据源是否可用。
        例如：本地路径是否存在且为 Git 仓库，或者远程仓库是否可访问。
        """
        pass

    def refresh(self) -> bool:
        """同步远端数据 (本地仓库执行 fetch)，默认无需操作"""
        return True

    @abstractmethod
    def list_remote_branches(self) -> List[str]:
        """列出远端分支名 (不含 HEAD 等符号别名)"""
        pass

    @abstractmethod
    def list_commit_ids(
        self, ref: Optional[str], window: ReportWindow, exclude_merges: bool = True
    ) -> List[str]:
        """
        列出 ref 可达且位于时间窗口内的提交 id，从旧到新。
        ref 为 None 表示所有分支的联合视图。
        """
        pass

    @abstractmethod
    def commit_metadata(self, sha: str) -> Optional[CommitMetadata]:
        pass

    @abstractmethod
    def parent_id(self, sha: str) -> Optional[str]:
        """返回唯一父提交；root commit 返回 None，查询失败抛出 GitQueryError"""
        pass

    @abstractmethod
    def diff(
        self, base: Optional[str], sha: str, path_excludes: Iterable[str]
    ) -> Optional[str]:
        """
        获取 base..sha 的 diff 文本 (无上下文行)。
        base 为 None 时与空树比较。
        """
        pass
