# config.py
"""
[V4.0] 全局配置
[V5.0] 重构：环境变量只在启动时读取一次，构造为不可变的 GlobalConfig，
       之后由 RunContext 显式传递给各组件，组件不再直接读取环境。
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

import utils
from errors import ConfigurationError

# --- (V3.0) 脚本基础路径 ---
SCRIPT_BASE_PATH = os.path.abspath(os.path.dirname(__file__))


def load_env_file():
    """(V3.0) 优先加载脚本目录下的 .env，否则尝试 CWD"""
    env_path = os.path.join(SCRIPT_BASE_PATH, ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)
        return env_path
    load_dotenv()
    return None


# --- 智能过滤 (git pathspec glob) ---
DEFAULT_DIFF_EXCLUDES: Tuple[str, ...] = (
    "**/*.lock",
    "**/dist/**",
    "**/build/**",
    "**/.next/**",
    "**/.vite/**",
    "**/out/**",
    "**/coverage/**",
    "package-lock.json",
    "pnpm-lock.yaml",
    "yarn.lock",
    "**/*.min.*",
)

# 各供应商的默认模型
DEFAULT_MODELS = {
    "openai": "gpt-4.1-mini",
    "deepseek": "deepseek-chat",
    "gemini": "gemini-2.5-flash",
    "ollama": "qwen2.5:7b",
    "mock": "mock",
}


def _get_int(
    environ: Mapping[str, str], key: str, default: int, minimum: int = 1
) -> int:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} 必须是整数，当前值: {raw!r}")
    if value < minimum:
        raise ConfigurationError(f"{key} 不能小于 {minimum}，当前值: {value}")
    return value


def _get_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} 必须是数字，当前值: {raw!r}")


def validate_timezone(tz_name: str) -> str:
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(f"未知的时区: {tz_name!r}")
    return tz_name


@dataclass(frozen=True)
class GlobalConfig:
    """
    (V5.0) 日报生成器的全局应用配置。
    默认值即 "什么都没配置" 时的行为；用 from_env() 从环境构造。
    """

    # --- 路径配置 ---
    SCRIPT_BASE_PATH: str = SCRIPT_BASE_PATH
    DATA_ROOT_DIR_NAME: str = "data"
    OUTPUT_FILENAME_PREFIX: str = "DailyChangelog"

    # --- (V3.4) AI 供应商配置 ---
    DEFAULT_LLM: str = "openai"
    MODEL_NAME: str = ""
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    DEEPSEEK_API_KEY: str = ""
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com"
    GEMINI_API_KEY: str = ""
    OLLAMA_BASE_URL: str = "http://localhost:11434/v1"
    LLM_TEMPERATURE: float = 0.2
    LLM_TIMEOUT: float = 120.0
    LLM_MAX_RETRIES: int = 0

    # --- [V4.4] 飞书 (Feishu / Lark) 群 Webhook ---
    FEISHU_WEBHOOK: str = ""

    # --- 仓库信息 ---
    REPO: str = ""  # owner/repo
    GIT_SERVER_URL: str = "https://github.com"
    GITHUB_TOKEN: str = ""
    REMOTE_NAME: str = "origin"

    # --- 收集与分片 ---
    PER_BRANCH_LIMIT: int = 200
    DIFF_CHUNK_MAX_CHARS: int = 80000
    REPORT_TIMEZONE: str = "America/Los_Angeles"
    DIFF_EXCLUDES: Tuple[str, ...] = field(default=DEFAULT_DIFF_EXCLUDES)
    BRANCH_INCLUDE: str = ""
    BRANCH_EXCLUDE: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GlobalConfig":
        """(V5.0) 从环境变量构造配置，非法值立即抛出 ConfigurationError"""
        env = os.environ if environ is None else environ

        excludes = tuple(utils.split_csv(env.get("DIFF_EXCLUDES")))

        git_server_url = env.get("GIT_SERVER_URL") or env.get("GITHUB_SERVER_URL")
        timezone = env.get("REPORT_TIMEZONE") or env.get("TZ") or cls.REPORT_TIMEZONE

        return cls(
            DEFAULT_LLM=env.get("DEFAULT_LLM", cls.DEFAULT_LLM).strip().lower(),
            MODEL_NAME=env.get("MODEL_NAME", "").strip(),
            OPENAI_API_KEY=env.get("OPENAI_API_KEY", ""),
            OPENAI_BASE_URL=env.get("OPENAI_BASE_URL") or cls.OPENAI_BASE_URL,
            DEEPSEEK_API_KEY=env.get("DEEPSEEK_API_KEY", ""),
            GEMINI_API_KEY=env.get("GEMINI_API_KEY", ""),
            OLLAMA_BASE_URL=env.get("OLLAMA_BASE_URL") or cls.OLLAMA_BASE_URL,
            LLM_TEMPERATURE=_get_float(env, "LLM_TEMPERATURE", cls.LLM_TEMPERATURE),
            LLM_TIMEOUT=_get_float(env, "LLM_TIMEOUT", cls.LLM_TIMEOUT),
            LLM_MAX_RETRIES=_get_int(env, "LLM_MAX_RETRIES", 0, minimum=0),
            FEISHU_WEBHOOK=env.get("LARK_WEBHOOK_URL") or env.get("FEISHU_WEBHOOK", ""),
            REPO=env.get("REPO") or env.get("GITHUB_REPOSITORY", ""),
            GIT_SERVER_URL=(git_server_url or cls.GIT_SERVER_URL).rstrip("/"),
            GITHUB_TOKEN=env.get("GITHUB_TOKEN", ""),
            REMOTE_NAME=env.get("REMOTE_NAME") or cls.REMOTE_NAME,
            PER_BRANCH_LIMIT=_get_int(env, "PER_BRANCH_LIMIT", cls.PER_BRANCH_LIMIT),
            DIFF_CHUNK_MAX_CHARS=_get_int(
                env, "DIFF_CHUNK_MAX_CHARS", cls.DIFF_CHUNK_MAX_CHARS
            ),
            REPORT_TIMEZONE=validate_timezone(timezone),
            DIFF_EXCLUDES=excludes or DEFAULT_DIFF_EXCLUDES,
            BRANCH_INCLUDE=env.get("BRANCH_INCLUDE", ""),
            BRANCH_EXCLUDE=env.get("BRANCH_EXCLUDE", ""),
        )

    # (V3.4) 供应商配置验证辅助函数
    def is_provider_configured(self, provider: str) -> bool:
        """
        检查特定供应商是否已在环境中设置其 API 密钥。
        mock 与 ollama (本地) 不需要密钥。
        """
        if provider == "openai":
            return bool(self.OPENAI_API_KEY)
        if provider == "deepseek":
            return bool(self.DEEPSEEK_API_KEY)
        if provider == "gemini":
            return bool(self.GEMINI_API_KEY)
        if provider in ("ollama", "mock"):
            return True
        return False

    def model_for(self, provider: str) -> str:
        return self.MODEL_NAME or DEFAULT_MODELS.get(provider, "")
