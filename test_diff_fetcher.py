# test_diff_fetcher.py
import unittest

from diff_fetcher import DiffFetcher
from errors import GitQueryError
from test_collector import FakeDataSource


class RecordingDataSource(FakeDataSource):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.diff_calls = []

    def diff(self, base, sha, path_excludes):
        self.diff_calls.append((base, sha, tuple(path_excludes)))
        return super().diff(base, sha, path_excludes)


class BrokenDataSource(FakeDataSource):
    def diff(self, base, sha, path_excludes):
        raise RuntimeError("git exploded")


class ParentLookupFailsDataSource(RecordingDataSource):
    def parent_id(self, sha):
        raise GitQueryError(f"cannot resolve parent of {sha}")


class TestDiffFetcher(unittest.TestCase):

    def test_diff_against_parent(self):
        source = RecordingDataSource(parents={"c2": "c1"}, diffs={"c2": "+x"})
        fetcher = DiffFetcher(source, ["**/*.lock"])

        self.assertEqual(fetcher.fetch("c2"), "+x")
        self.assertEqual(source.diff_calls, [("c1", "c2", ("**/*.lock",))])

    def test_root_commit_uses_empty_tree(self):
        source = RecordingDataSource(diffs={"root": "+init"})
        self.assertEqual(DiffFetcher(source, ()).fetch("root"), "+init")
        self.assertIsNone(source.diff_calls[0][0])

    def test_failure_returns_empty_string(self):
        self.assertEqual(DiffFetcher(BrokenDataSource(), ()).fetch("c1"), "")

    def test_parent_lookup_failure_is_not_treated_as_root(self):
        """父提交查询失败时返回空 Diff，而不是与空树比较"""
        source = ParentLookupFailsDataSource(diffs={"c2": "+whole repository"})
        self.assertEqual(DiffFetcher(source, ()).fetch("c2"), "")
        self.assertEqual(source.diff_calls, [])

    def test_none_diff_returns_empty_string(self):
        source = FakeDataSource()
        source.diffs = {"c1": None}
        self.assertEqual(DiffFetcher(source, ()).fetch("c1"), "")


if __name__ == "__main__":
    unittest.main()
