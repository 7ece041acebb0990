# chunker.py
"""
[V5.0] Diff 分片
1) 按文件切分 (每个 "diff --git" 段为一个单元)
2) 贪心装箱，单元之间用空行分隔；单个超长单元按固定长度硬切
"""
import re
from typing import List

from models import DiffChunk

FILE_HEADER_RE = re.compile(r"^diff --git.*$", re.MULTILINE)
UNIT_SEPARATOR = "\n\n"


def split_by_unit(diff_text: str) -> List[str]:
    """按文件边界切分 diff，丢弃 "diff --git" 头行与空段"""
    if not diff_text:
        return []
    parts = FILE_HEADER_RE.split(diff_text)
    return [p.strip() for p in parts if p.strip()]


def pack(units: List[str], limit: int) -> List[str]:
    """
    贪心装箱。每个输出分片长度 <= limit，顺序与输入一致。
    超过 limit 的单元先冲刷当前缓冲，再切成若干 limit 长度的片段各自成片。
    """
    if limit <= 0:
        raise ValueError(f"limit 必须为正整数: {limit}")

    chunks: List[str] = []
    buf = ""
    for unit in units:
        candidate = f"{buf}{UNIT_SEPARATOR}{unit}" if buf else unit
        if len(candidate) <= limit:
            buf = candidate
            continue

        if buf:
            chunks.append(buf)
        if len(unit) > limit:
            chunks.extend(unit[i : i + limit] for i in range(0, len(unit), limit))
            buf = ""
        else:
            buf = unit
    if buf:
        chunks.append(buf)
    return chunks


def build_chunks(diff_text: str, limit: int) -> List[DiffChunk]:
    texts = pack(split_by_unit(diff_text), limit)
    total = len(texts)
    return [DiffChunk(index=i, total=total, text=t) for i, t in enumerate(texts, 1)]
