# report_builder.py
"""
[V5.0] 日报归档
把最终日报与逐提交小结整理为 Markdown，保存到项目数据目录。
"""
import logging
import os
from datetime import datetime
from typing import Optional

from context import RunContext
from models import DailyReport

logger = logging.getLogger(__name__)


def report_subject(report: DailyReport) -> str:
    return f"{report.date_label} 开发变更日报（{report.repo}）"


def generate_markdown_report(report: DailyReport) -> str:
    """日报正文 + 附录 (逐提交链接与小结)"""
    lines = [
        report.text.strip(),
        "",
        "---",
        "",
        f"## 附录：逐提交小结（共 {len(report.commits)} 个提交）",
        "",
    ]
    for commit, summary in report.commits:
        marker = " ⚠️" if summary.degraded else ""
        lines.append(
            f"### [{commit.short_sha}]({commit.url}) {commit.title}{marker}"
        )
        lines.append(f"- 作者: {commit.author}")
        lines.append(f"- 分支: {commit.branch_label}")
        lines.append("")
        lines.append(summary.text.strip())
        lines.append("")
    lines.append(
        f"_生成时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}，"
        f"LLM 调用 {report.completion_calls} 次_"
    )
    return "\n".join(lines)


def save_markdown_report(report: DailyReport, context: RunContext) -> Optional[str]:
    """保存 Markdown 日报到 data/<project>/ 目录"""
    filename = f"{context.global_config.OUTPUT_FILENAME_PREFIX}_{report.date_label}.md"
    full_path = os.path.join(context.project_data_path, filename)

    try:
        os.makedirs(context.project_data_path, exist_ok=True)
        with open(full_path, "w", encoding="utf-8") as f:
            f.write(generate_markdown_report(report))
        logger.info(f"✅ Markdown 日报已保存: {full_path}")
        return full_path
    except Exception as e:
        logger.error(f"❌ 保存 Markdown 日报失败 ({full_path}): {e}")
        return None
