# utils.py
import logging
import sys
from typing import List, Optional


# 将日志配置移到这里，作为一个可被调用的函数
def setup_logging(verbose: bool = False):
    """配置全局日志"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def split_lines(output: Optional[str]) -> List[str]:
    """把命令输出拆成去空白的非空行 (None 视为空输出)"""
    if not output:
        return []
    return [line.strip() for line in output.split("\n") if line.strip()]


def split_csv(value: Optional[str]) -> List[str]:
    """逗号分隔字符串 -> 列表"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
