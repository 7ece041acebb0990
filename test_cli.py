# test_cli.py
import unittest

import cli
from config import GlobalConfig
from errors import ConfigurationError


class TestCli(unittest.TestCase):

    def parse(self, *argv):
        return cli.setup_parser().parse_args(list(argv))

    def test_defaults_come_from_config(self):
        config = GlobalConfig(DEFAULT_LLM="deepseek", REPO="o/r")
        context = cli.build_context(self.parse("-r", "/srv/repos/app"), config)

        self.assertEqual(context.repo_path, "/srv/repos/app")
        self.assertEqual(context.llm_id, "deepseek")
        self.assertEqual(context.model_name, "deepseek-chat")
        self.assertEqual(context.per_branch_limit, 200)
        self.assertEqual(context.chunk_max_chars, 80000)
        self.assertTrue(context.fetch)
        self.assertTrue(context.send)
        self.assertFalse(context.save)
        self.assertTrue(context.project_data_path.endswith("app"))
        self.assertEqual(context.window.timezone, "America/Los_Angeles")

    def test_overrides(self):
        context = cli.build_context(
            self.parse(
                "-r", "https://github.com/o/r.git",
                "--llm", "Mock",
                "--model", "m1",
                "--tz", "UTC",
                "--per-branch-limit", "5",
                "--chunk-size", "100",
                "--repo", "team/app",
                "--no-fetch", "--no-send", "--save",
            ),
            GlobalConfig(),
        )
        self.assertEqual(context.repo_path, "https://github.com/o/r.git")
        self.assertEqual(context.llm_id, "mock")
        self.assertEqual(context.model_name, "m1")
        self.assertEqual(context.window.timezone, "UTC")
        self.assertEqual(context.per_branch_limit, 5)
        self.assertEqual(context.chunk_max_chars, 100)
        self.assertEqual(context.repo_label, "team/app")
        self.assertFalse(context.fetch)
        self.assertFalse(context.send)
        self.assertTrue(context.save)
        self.assertTrue(context.project_data_path.endswith("r"))

    def test_invalid_overrides(self):
        with self.assertRaises(ConfigurationError):
            cli.build_context(self.parse("--tz", "Nowhere/City"), GlobalConfig())
        with self.assertRaises(ConfigurationError):
            cli.build_context(self.parse("--chunk-size", "-1"), GlobalConfig())

    def test_zero_overrides_are_rejected_not_defaulted(self):
        """显式传入 0 不能被当作 "未指定" 而回退到配置默认值"""
        with self.assertRaises(ConfigurationError):
            cli.build_context(self.parse("--per-branch-limit", "0"), GlobalConfig())
        with self.assertRaises(ConfigurationError):
            cli.build_context(self.parse("--chunk-size", "0"), GlobalConfig())

    def test_project_name(self):
        self.assertEqual(cli.project_name_for("/a/b/app/"), "app")
        self.assertEqual(cli.project_name_for("git@github.com:o/r.git"), "r")


if __name__ == "__main__":
    unittest.main()
