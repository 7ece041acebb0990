# orchestrator.py
"""
[V4.6] 业务逻辑编排器
[V5.0] 日报流水线：Collector -> Fetcher -> Chunker -> Reducer -> Notifier
- 数据自上而下单向流动，发送结果不会影响日报本身
- 集成 Hook 系统 (Lifecycle & Plugins)
"""
import asyncio
import logging
from typing import List, Optional

import report_builder
from ai_summarizer import AIService
from collector import CommitCollector
from context import RunContext
from data_sources.base import DataSource
from data_sources.factory import get_data_source
from diff_fetcher import DiffFetcher
from errors import ConfigurationError
from hooks.manager import PluginManager
from models import CommitRecord, DailyReport
from notifiers.base import BaseNotifier
from notifiers.factory import get_active_notifiers
from reducer import SummarizationReducer

logger = logging.getLogger(__name__)


class ReportOrchestrator:
    """
    (V4.0) 负责执行报告生成的核心业务逻辑。
    ai_service 必须在启动阶段创建好 (配置错误在收集数据之前暴露)。
    """

    def __init__(
        self,
        context: RunContext,
        ai_service: AIService,
        data_source: Optional[DataSource] = None,
        notifiers: Optional[List[BaseNotifier]] = None,
    ):
        self.context = context
        self.global_config = context.global_config
        self.ai_service = ai_service

        # V4.5 初始化数据源
        self.data_source = data_source or get_data_source(context)
        self.notifiers = notifiers

        # [V4.6] 初始化并加载插件
        self.plugin_manager = PluginManager(context)
        self.plugin_manager.load_plugins()

        logger.info(
            f"✅ ReportOrchestrator 已初始化 (插件: {', '.join(self.plugin_manager.plugin_names)})"
        )

    def run(self) -> Optional[DailyReport]:
        return asyncio.run(self.run_async())

    def collect_commits(self) -> List[CommitRecord]:
        collector = CommitCollector(
            self.data_source,
            per_branch_limit=self.context.per_branch_limit,
            branch_include=self.global_config.BRANCH_INCLUDE,
            branch_exclude=self.global_config.BRANCH_EXCLUDE,
        )
        return collector.run(
            self.context.window,
            self.global_config.GIT_SERVER_URL,
            self.global_config.REPO,
        )

    def _filter_commit_summary(self, commit: CommitRecord, summary: str) -> str:
        return self.plugin_manager.filter("on_commit_summarized", summary, commit)

    async def run_async(self) -> Optional[DailyReport]:
        """
        执行核心业务流程。没有提交时返回 None (正常结束，不调用 LLM，也不发送)。
        """
        self.plugin_manager.trigger("on_start")

        # --- 0. 验证数据源 ---
        if not self.data_source.validate():
            raise ConfigurationError(f"数据源不可用: {self.context.repo_path}")

        if self.context.fetch:
            self.data_source.refresh()

        # --- 1. 收集提交 ---
        window = self.context.window
        logger.info(
            f"📅 统计窗口 ({window.timezone}): {window.since.isoformat()} -> {window.until.isoformat()}"
        )
        commits = self.collect_commits()
        if not commits:
            logger.info("📭 今天所有分支均无有效提交。结束。")
            self.plugin_manager.trigger("on_finish")
            return None

        logger.info(f"✅ 共 {len(commits)} 个有效提交进入 AI 摘要阶段")
        self.plugin_manager.trigger("on_commits_collected", commits)

        # --- 2. 三级归约 ---
        reducer = SummarizationReducer(
            self.ai_service.complete,
            DiffFetcher(self.data_source, self.context.diff_excludes),
            self.context.chunk_max_chars,
            commit_filter=self._filter_commit_summary,
        )
        report = await reducer.run(commits, window.label, self.context.repo_label)
        report.text = self.plugin_manager.filter("on_daily_report_generated", report.text)

        logger.info(
            f"📊 提交 {len(report.commits)} 个 | 片段 {report.chunk_count} 个 | "
            f"LLM 调用 {report.completion_calls} 次 | 降级提交 {report.degraded_commits} 个 | "
            f"当日汇总{'降级' if report.degraded else '成功'}"
        )

        # --- 3. 归档与发送 ---
        if self.context.save:
            report_builder.save_markdown_report(report, self.context)

        self._deliver(report)

        self.plugin_manager.trigger("on_finish")
        return report

    def _deliver(self, report: DailyReport) -> bool:
        """发送失败只记录日志并打印日报，不影响本次运行结果"""
        subject = report_builder.report_subject(report)

        if not self.context.send:
            logger.info("ℹ️ 已指定 --no-send，以下为最终日报文本：")
            print(f"\n{report.text}\n")
            return False

        notifiers = (
            self.notifiers
            if self.notifiers is not None
            else get_active_notifiers(self.context)
        )
        if not notifiers:
            logger.warning("⚠️ LARK_WEBHOOK_URL 未配置，以下为最终日报文本：")
            print(f"\n{report.text}\n")
            return False

        delivered = False
        for notifier in notifiers:
            try:
                ok = notifier.send(subject, report.text)
            except Exception as e:
                logger.error(f"❌ 通知渠道 {notifier.name} 发送异常: {e}")
                ok = False
            if ok:
                delivered = True
            else:
                logger.error(f"❌ 通知渠道 {notifier.name} 发送失败。")

        if delivered:
            logger.info("✅ 已发送飞书日报。")
        else:
            logger.warning("⚠️ 所有通知渠道均发送失败，以下为最终日报文本：")
            print(f"\n{report.text}\n")
        return delivered
