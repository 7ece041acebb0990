# cli.py
"""
[V4.0] 命令行界面 (Interface) 层
[V4.1] 更新：移除 --llm 的 choices 限制，支持动态注册的供应商。
[V5.0] 每日变更日报：配置只在这里读取一次，组装 RunContext 后移交 Orchestrator。
"""
import argparse
import dataclasses
import logging
import os
import sys

import utils
from ai_summarizer import AIService
from config import GlobalConfig, load_env_file, validate_timezone
from context import RunContext
from data_sources.factory import is_remote_url
from errors import ConfigurationError
from models import ReportWindow
from orchestrator import ReportOrchestrator

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """
    (V4.0) 负责所有 argparse 的定义。
    """
    parser = argparse.ArgumentParser(
        description="Git 每日变更日报生成器 (V5.0)",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "-r",
        "--repo-path",
        type=str,
        default=".",
        help="[V3.0] 要分析的 Git 仓库根目录，或 GitHub 仓库 URL。\n(默认: 当前目录)",
    )

    # [V4.1 修改] 移除了 choices，支持动态供应商
    parser.add_argument(
        "--llm",
        type=str,
        default=None,
        help="[V3.4] (覆盖) LLM 供应商 (例如 'openai', 'deepseek', 'gemini', 'ollama', 'mock')。\n"
        "(默认: DEFAULT_LLM)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="(覆盖) 模型名称 (默认: MODEL_NAME 或供应商默认模型)",
    )
    parser.add_argument(
        "--tz",
        type=str,
        default=None,
        help="(覆盖) 报告时区 (默认: REPORT_TIMEZONE / TZ)",
    )
    parser.add_argument(
        "--per-branch-limit",
        type=int,
        default=None,
        help="(覆盖) 每个分支最多保留的最新提交数 (默认: PER_BRANCH_LIMIT)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="(覆盖) 单个 diff 片段的最大字符数 (默认: DIFF_CHUNK_MAX_CHARS)",
    )
    parser.add_argument(
        "--repo",
        type=str,
        default=None,
        help="(覆盖) owner/repo，用于提交链接与日报标题 (默认: REPO)",
    )

    # --- 标志 (Flags) ---
    parser.add_argument(
        "--no-fetch", action="store_true", help="不执行 git fetch --all --prune"
    )
    parser.add_argument(
        "--no-send", action="store_true", help="不发送飞书，只在控制台打印日报"
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="保存 Markdown 日报到 data/<project>/DailyChangelog_<date>.md",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")

    return parser


def resolve_repo_path(raw_path: str) -> str:
    # [V4.8 修复] 如果是远程 URL，保持原样；否则转为绝对路径
    if is_remote_url(raw_path):
        return raw_path
    return os.path.abspath(raw_path)


def project_name_for(repo_path: str) -> str:
    name = os.path.basename(repo_path.rstrip("/"))
    if name.endswith(".git"):
        name = name[:-4]
    return name or "repository"


def build_context(args: argparse.Namespace, global_config: GlobalConfig) -> RunContext:
    """合并 CLI 覆盖参数与 GlobalConfig，组装 RunContext"""
    overrides = {}
    if args.repo:
        overrides["REPO"] = args.repo
    if args.tz:
        overrides["REPORT_TIMEZONE"] = validate_timezone(args.tz)
    if overrides:
        global_config = dataclasses.replace(global_config, **overrides)

    per_branch_limit = (
        args.per_branch_limit
        if args.per_branch_limit is not None
        else global_config.PER_BRANCH_LIMIT
    )
    chunk_max_chars = (
        args.chunk_size if args.chunk_size is not None else global_config.DIFF_CHUNK_MAX_CHARS
    )
    if per_branch_limit <= 0 or chunk_max_chars <= 0:
        raise ConfigurationError("--per-branch-limit 与 --chunk-size 必须为正整数")

    repo_path = resolve_repo_path(args.repo_path)
    llm_id = (args.llm or global_config.DEFAULT_LLM).lower()
    project_data_path = os.path.join(
        global_config.SCRIPT_BASE_PATH,
        global_config.DATA_ROOT_DIR_NAME,
        project_name_for(repo_path),
    )

    return RunContext(
        repo_path=repo_path,
        project_data_path=project_data_path,
        llm_id=llm_id,
        model_name=args.model or global_config.model_for(llm_id),
        window=ReportWindow.today(global_config.REPORT_TIMEZONE),
        per_branch_limit=per_branch_limit,
        chunk_max_chars=chunk_max_chars,
        diff_excludes=global_config.DIFF_EXCLUDES,
        fetch=not args.no_fetch,
        send=not args.no_send,
        save=args.save,
        global_config=global_config,
    )


def run_cli(argv=None):
    """
    (V4.0) 主入口点。
    """
    parser = setup_parser()
    args = parser.parse_args(argv)
    utils.setup_logging(args.verbose)

    env_path = load_env_file()
    if env_path:
        logger.info(f"ℹ️ 已加载环境文件: {env_path}")

    # 配置错误在收集任何数据之前致命退出
    try:
        global_config = GlobalConfig.from_env()
        run_context = build_context(args, global_config)
        ai_service = AIService.from_config(
            run_context.llm_id, run_context.global_config, run_context.model_name
        )
    except ConfigurationError as e:
        logger.error(f"❌ 配置错误: {e}")
        sys.exit(1)

    logger.info("=" * 50)
    logger.info("🚀 (V5.0) DevLog-AIGC 每日变更日报启动...")
    logger.info(f"   [目标仓库]: {run_context.repo_path}")
    logger.info(f"   [仓库标识]: {run_context.repo_label}")
    logger.info(f"   [LLM 供应商]: {run_context.llm_id} ({run_context.model_name})")
    logger.info(f"   [报告日期]: {run_context.window.label} ({run_context.window.timezone})")
    logger.info("=" * 50)

    try:
        orchestrator = ReportOrchestrator(run_context, ai_service)
        orchestrator.run()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    logger.info("✅ (V4.0) Orchestrator 运行完毕。")
