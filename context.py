# context.py
"""
[V4.0] 运行时配置的数据模型
[V5.0] 增加报告时间窗口与分片参数
"""
from dataclasses import dataclass
from typing import Tuple

from config import GlobalConfig  # V4.0
from models import ReportWindow


@dataclass
class RunContext:
    """
    (V4.0) 封装一次运行所需的所有配置和状态。
    这是从 CLI 传递到 Orchestrator 的唯一对象。
    """

    # --- 核心路径 ---
    repo_path: str
    project_data_path: str

    # --- AI 参数 ---
    llm_id: str
    model_name: str

    # --- 范围参数 ---
    window: ReportWindow
    per_branch_limit: int
    chunk_max_chars: int
    diff_excludes: Tuple[str, ...]

    # --- 标志 ---
    fetch: bool
    send: bool
    save: bool

    # --- 全局配置 ---
    # 包含所有 API 密钥、常量和 .env 加载的数据
    global_config: GlobalConfig

    @property
    def repo_label(self) -> str:
        return self.global_config.REPO or "repository"
