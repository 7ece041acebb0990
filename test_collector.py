# test_collector.py
import unittest
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from collector import (
    CommitCollector,
    build_commit_url,
    filter_branches,
    merge_branch_orders,
)
from data_sources.base import DataSource
from errors import GitQueryError
from models import CommitMetadata, ReportWindow

WINDOW = ReportWindow.today(
    "UTC", now=datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
)


class FakeDataSource(DataSource):
    """内存数据源：分支 -> 提交列表 (从旧到新)"""

    def __init__(
        self,
        branches: Optional[Dict[str, List[str]]] = None,
        global_order: Optional[List[str]] = None,
        metadata: Optional[Dict[str, CommitMetadata]] = None,
        parents: Optional[Dict[str, str]] = None,
        diffs: Optional[Dict[str, str]] = None,
        failing: Iterable[str] = (),
    ):
        self.branches = branches or {}
        self.global_order = global_order or []
        self.metadata = metadata or {}
        self.parents = parents or {}
        self.diffs = diffs or {}
        self.failing = set(failing)
        self.valid = True
        self.refreshed = False
        self.queried_refs: List[Optional[str]] = []

    def validate(self) -> bool:
        return self.valid

    def refresh(self) -> bool:
        self.refreshed = True
        return True

    def list_remote_branches(self) -> List[str]:
        return list(self.branches)

    def list_commit_ids(self, ref, window, exclude_merges=True) -> List[str]:
        self.queried_refs.append(ref)
        if ref is None:
            return list(self.global_order)
        if ref in self.failing:
            raise RuntimeError(f"cannot read {ref}")
        return list(self.branches[ref])

    def commit_metadata(self, sha):
        return self.metadata.get(sha)

    def parent_id(self, sha):
        return self.parents.get(sha)

    def diff(self, base, sha, path_excludes):
        return self.diffs.get(sha, "")


class GlobalScanFailsDataSource(FakeDataSource):
    def list_commit_ids(self, ref, window, exclude_merges=True):
        if ref is None:
            self.queried_refs.append(ref)
            raise GitQueryError("git log --all failed")
        return super().list_commit_ids(ref, window, exclude_merges)


def meta(title: str, author: str = "alice") -> CommitMetadata:
    return CommitMetadata(title=title, author=author)


class TestCommitCollector(unittest.TestCase):

    def test_attribution_and_global_order(self):
        """共享提交归属多个分支，顺序以全局扫描为准"""
        source = FakeDataSource(
            branches={"origin/main": ["a1", "b2"], "origin/dev": ["b2", "c3"]},
            global_order=["a1", "b2", "c3"],
            metadata={"a1": meta("feat A"), "b2": meta("fix B"), "c3": meta("docs C")},
        )
        records = CommitCollector(source).run(WINDOW, "https://github.com", "o/r")

        self.assertEqual([r.sha for r in records], ["a1", "b2", "c3"])
        self.assertEqual(records[1].branches, ("origin/dev", "origin/main"))
        self.assertEqual(records[0].branches, ("origin/main",))
        self.assertEqual(records[1].url, "https://github.com/o/r/commit/b2")
        self.assertEqual(records[2].title, "docs C")

    def test_intersection_drops_orphans(self):
        """只在全局扫描中出现，或只在分支中出现的提交都被丢弃"""
        source = FakeDataSource(
            branches={"origin/main": ["a1", "ghost"]},
            global_order=["zz", "a1", "yy"],
            metadata={"a1": meta("feat A")},
        )
        records = CommitCollector(source).run(WINDOW, "https://github.com", "o/r")
        self.assertEqual([r.sha for r in records], ["a1"])

    def test_per_branch_limit_keeps_newest(self):
        source = FakeDataSource(
            branches={"origin/main": ["s1", "s2", "s3"]},
            global_order=["s1", "s2", "s3"],
        )
        result = CommitCollector(source, per_branch_limit=2).collect(
            ["origin/main"], WINDOW
        )
        self.assertEqual(result.branch_commits["origin/main"], ["s2", "s3"])
        self.assertEqual(result.ordered_shas, ["s2", "s3"])

    def test_failing_branch_does_not_block_others(self):
        source = FakeDataSource(
            branches={"origin/bad": [], "origin/main": ["a1"]},
            global_order=["a1"],
            failing=["origin/bad"],
        )
        result = CommitCollector(source).collect(["origin/bad", "origin/main"], WINDOW)
        self.assertEqual(result.branch_commits["origin/bad"], [])
        self.assertEqual(result.ordered_shas, ["a1"])

    def test_global_scan_failure_falls_back_to_branch_order(self):
        """全局扫描失败时按分支列表合并，已归属的提交不丢失"""
        source = GlobalScanFailsDataSource(
            branches={"origin/main": ["a1", "b2"], "origin/dev": ["b2", "c3"]},
            metadata={"a1": meta("feat A"), "b2": meta("fix B"), "c3": meta("docs C")},
        )
        records = CommitCollector(source).run(WINDOW, "https://github.com", "o/r")

        self.assertEqual([r.sha for r in records], ["a1", "b2", "c3"])
        self.assertEqual(records[1].branches, ("origin/dev", "origin/main"))

    def test_zero_branches(self):
        source = FakeDataSource(branches={}, global_order=["a1"])
        records = CommitCollector(source).run(WINDOW, "https://github.com", "o/r")
        self.assertEqual(records, [])
        self.assertEqual(source.queried_refs, [])

    def test_no_branch_commits_skips_global_scan(self):
        source = FakeDataSource(branches={"origin/main": []}, global_order=["a1"])
        result = CommitCollector(source).collect(["origin/main"], WINDOW)
        self.assertEqual(result.ordered_shas, [])
        self.assertNotIn(None, source.queried_refs)

    def test_missing_metadata_uses_placeholder(self):
        source = FakeDataSource(
            branches={"origin/main": ["a1"]}, global_order=["a1"]
        )
        records = CommitCollector(source).run(WINDOW, "https://github.com", "o/r")
        self.assertEqual(records[0].title, "(unknown)")
        self.assertEqual(records[0].author, "(unknown)")

    def test_branch_filters(self):
        source = FakeDataSource(
            branches={
                "origin/main": ["a1"],
                "origin/dependabot/npm": ["b2"],
                "origin/release/1.0": ["c3"],
            },
            global_order=["a1", "b2", "c3"],
        )
        collector = CommitCollector(source, branch_exclude=r"dependabot/")
        self.assertEqual(
            collector.list_branches(), ["origin/main", "origin/release/1.0"]
        )


class TestHelpers(unittest.TestCase):

    def test_filter_branches(self):
        branches = ["origin/main", "origin/feat/x", "origin/wip/y"]
        self.assertEqual(
            filter_branches(branches, include=r"main|feat"), branches[:2]
        )
        self.assertEqual(filter_branches(branches, exclude=r"wip"), branches[:2])
        self.assertEqual(filter_branches(branches), branches)

    def test_merge_branch_orders(self):
        self.assertEqual(
            merge_branch_orders(
                ["origin/main", "origin/dev", "origin/gone"],
                {"origin/main": ["a1", "b2"], "origin/dev": ["b2", "c3", "a1"]},
            ),
            ["a1", "b2", "c3"],
        )

    def test_build_commit_url(self):
        self.assertEqual(
            build_commit_url("https://git.example.com", "team/app", "abc"),
            "https://git.example.com/team/app/commit/abc",
        )
        self.assertEqual(
            build_commit_url("https://github.com", "", "abc"),
            "https://github.com/commit/abc",
        )


if __name__ == "__main__":
    unittest.main()
