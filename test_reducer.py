# test_reducer.py
import unittest

import prompt_builder
from diff_fetcher import DiffFetcher
from errors import CompletionError
from models import CommitRecord, SummaryTier
from reducer import SummarizationReducer
from test_collector import FakeDataSource


def make_commit(sha: str, title: str = "feat: something") -> CommitRecord:
    return CommitRecord(
        sha=sha,
        title=title,
        author="alice",
        url=f"https://github.com/o/r/commit/{sha}",
        branches=("origin/main",),
    )


def file_diff(name: str, body_len: int = 30) -> str:
    return f"diff --git a/{name} b/{name}\n" + "x" * body_len + "\n"


class ScriptedLLM:
    """按顺序返回预设回复；回复为异常时抛出"""

    def __init__(self, responses):
        self.responses = list(responses)
        self.prompts = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class TestSummarizationReducer(unittest.IsolatedAsyncioTestCase):

    def make_reducer(self, llm, diffs, chunk_max_chars=40, commit_filter=None):
        fetcher = DiffFetcher(FakeDataSource(diffs=diffs), ())
        return SummarizationReducer(
            llm, fetcher, chunk_max_chars, commit_filter=commit_filter
        )

    async def test_single_chunk_commit(self):
        """1 个提交、1 个片段：片段 -> 合并 -> 当日，共 3 次调用"""
        llm = ScriptedLLM(["chunk summary", "commit summary", "daily report"])
        reducer = self.make_reducer(llm, {"a" * 40: file_diff("app.py")})

        report = await reducer.run([make_commit("a" * 40)], "2026-10-19", "o/r")

        self.assertEqual(report.text, "daily report")
        self.assertEqual(report.completion_calls, 3)
        self.assertEqual(report.chunk_count, 1)
        self.assertFalse(report.degraded)
        commit, summary = report.commits[0]
        self.assertEqual(summary.tier, SummaryTier.COMMIT)
        self.assertEqual(summary.text, "commit summary")
        self.assertFalse(summary.degraded)
        self.assertIn("DIFF PART BEGIN", llm.prompts[0])
        self.assertIn("# 2026-10-19 开发变更日报（o/r）", llm.prompts[2])

    async def test_failed_chunk_becomes_placeholder(self):
        """3 个片段，第 2 个失败：合并提示词包含占位并要求标注可能不完整"""
        diff = file_diff("a.py") + file_diff("b.py") + file_diff("c.py")
        llm = ScriptedLLM(
            [
                "part one",
                CompletionError("rate_limit", "429"),
                "part three",
                "merged",
                "daily",
            ]
        )
        reducer = self.make_reducer(llm, {"b" * 40: diff})

        report = await reducer.run([make_commit("b" * 40)], "2026-10-19", "o/r")

        self.assertEqual(report.chunk_count, 3)
        self.assertEqual(report.completion_calls, 5)
        merge_prompt = llm.prompts[3]
        self.assertIn("【片段1】\npart one", merge_prompt)
        self.assertIn("【片段2】\n（片段2调用失败：rate_limit: 429）", merge_prompt)
        self.assertIn("【片段3】\npart three", merge_prompt)
        self.assertIn("可能不完整", merge_prompt)

        _, summary = report.commits[0]
        self.assertEqual(summary.text, "merged")
        self.assertTrue(summary.degraded)
        self.assertEqual(report.degraded_commits, 1)

    async def test_empty_chunk_reply_is_placeholder(self):
        llm = ScriptedLLM(["   ", "merged", "daily"])
        reducer = self.make_reducer(llm, {"c" * 40: file_diff("a.py")})

        await reducer.run([make_commit("c" * 40)], "2026-10-19", "o/r")

        self.assertIn("（片段1摘要为空）", llm.prompts[1])

    async def test_empty_diff_skips_llm(self):
        """无 diff 的提交不调用模型，只有当日汇总一次调用"""
        llm = ScriptedLLM(["daily"])
        reducer = self.make_reducer(llm, {})

        report = await reducer.run([make_commit("d" * 40)], "2026-10-19", "o/r")

        self.assertEqual(report.completion_calls, 1)
        self.assertEqual(report.chunk_count, 0)
        _, summary = report.commits[0]
        self.assertEqual(summary.text, prompt_builder.EMPTY_DIFF_SUMMARY)
        self.assertFalse(summary.degraded)
        self.assertIn(prompt_builder.EMPTY_DIFF_SUMMARY, llm.prompts[0])

    async def test_commit_merge_fallback(self):
        """合并失败：按片段顺序拼接带标签的片段小结"""
        llm = ScriptedLLM(["part one", CompletionError("http", "500"), "daily"])
        reducer = self.make_reducer(llm, {"e" * 40: file_diff("a.py")})

        report = await reducer.run([make_commit("e" * 40)], "2026-10-19", "o/r")

        _, summary = report.commits[0]
        self.assertEqual(summary.text, "【片段1】\npart one")
        self.assertTrue(summary.degraded)
        self.assertIn("http: 500", summary.reason)
        self.assertEqual(report.text, "daily")

    async def test_daily_fallback_keeps_order(self):
        """当日汇总失败：按时间顺序拼接各提交小结"""
        llm = ScriptedLLM(
            ["p1", "first", "p2", "second", CompletionError("transport", "down")]
        )
        first, second = make_commit("f" * 40, "first"), make_commit("9" * 40, "second")
        reducer = self.make_reducer(
            llm, {first.sha: file_diff("a.py"), second.sha: file_diff("b.py")}
        )

        report = await reducer.run([first, second], "2026-10-19", "o/r")

        self.assertTrue(report.degraded)
        self.assertTrue(report.text.startswith(prompt_builder.DAILY_FALLBACK_NOTE))
        self.assertLess(report.text.index("[fffffff]"), report.text.index("[9999999]"))
        self.assertIn(prompt_builder.COMMIT_SEPARATOR, report.text)

    async def test_unexpected_exception_is_treated_as_failure(self):
        llm = ScriptedLLM([RuntimeError("boom"), "merged", "daily"])
        reducer = self.make_reducer(llm, {"1" * 40: file_diff("a.py")})

        report = await reducer.run([make_commit("1" * 40)], "2026-10-19", "o/r")

        self.assertIn("（片段1调用失败：unknown: boom）", llm.prompts[1])
        self.assertTrue(report.commits[0][1].degraded)

    async def test_commit_filter_applied_to_merged_summary(self):
        llm = ScriptedLLM(["part", "```markdown\nmerged\n```", "daily"])
        reducer = self.make_reducer(
            llm,
            {"2" * 40: file_diff("a.py")},
            commit_filter=lambda commit, text: text.replace("```markdown\n", "").replace("\n```", ""),
        )

        report = await reducer.run([make_commit("2" * 40)], "2026-10-19", "o/r")

        self.assertEqual(report.commits[0][1].text, "merged")


if __name__ == "__main__":
    unittest.main()
