"""
Centralised configuration for the workbook reader and writer.

All regex patterns, header tokens, file signatures and tunable thresholds
live here so that the rest of the code can stay free of hard-coded values.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Dict, Tuple


# ---------------------------------------------------------------------------
# Environment helpers
# ---------------------------------------------------------------------------

def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)).strip())
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (shared across modules)
# ---------------------------------------------------------------------------

LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
WHITESPACE_RE = re.compile(r"\s+")
INTEGER_RE = re.compile(r"^[0-9]+$")
RANGE_RE = re.compile(r"^([0-9]+)-([0-9]+)$")
DIGIT_RUN_RE = re.compile(r"[0-9]+")
LEADING_DIGITS_RE = re.compile(r"^[0-9]+")
COLLATION_CHUNK_RE = re.compile(r"[0-9]+|[^0-9]+")

# CJK unified ideographs (ext. A, basic block, compatibility); collated by pinyin
HAN_RUN_RE = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]+")
TONE_SUFFIX_RE = re.compile(r"^(.*?)([1-5])$")

# Disk heading: "硬盘三（4T 西数）" -> "硬盘三"
DISK_NAME_RE = re.compile(r"^硬盘[^（(]*")


# ---------------------------------------------------------------------------
# Chinese numerals
# ---------------------------------------------------------------------------

CHINESE_DIGITS: Dict[str, int] = {
    "零": 0, "一": 1, "二": 2, "三": 3, "四": 4,
    "五": 5, "六": 6, "七": 7, "八": 8, "九": 9,
}

CHINESE_UNITS: Dict[str, int] = {
    "十": 10, "百": 100, "千": 1000, "万": 10000,
}

SECTION_UNIT = 10000


# ---------------------------------------------------------------------------
# Hard-disk sheet tokens
# ---------------------------------------------------------------------------

DISK_PREFIX = "硬盘"
HDD_SERIAL_HEADER = "序号"
HDD_TITLE_HEADER = "电影名称"
HDD_GENRE_HEADER = "类型"
HDD_HEADER_TOKENS: Tuple[str, ...] = (HDD_SERIAL_HEADER, HDD_TITLE_HEADER, HDD_GENRE_HEADER)

# Column order of one side-by-side group inside a disk-grouped sheet.
HDD_GROUP_KEYS: Tuple[str, ...] = ("serial", "title", "subtitle", "genre", "remark")


# ---------------------------------------------------------------------------
# Workbook file signatures
# ---------------------------------------------------------------------------

OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_SIGNATURE = b"PK\x03\x04"

ENGINE_BY_FORMAT: Dict[str, str] = {
    "xls": "xlrd",
    "xlsx": "openpyxl",
}


# ---------------------------------------------------------------------------
# ReaderConfig — tunable thresholds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReaderConfig:
    """Immutable bag of tunable thresholds used by the sheet reader."""

    # Flat layout: how many rows to scan when looking for the header row
    header_scan_rows: int = _env_int("FILMDB_HEADER_SCAN_ROWS", 30)

    # Disk-grouped layout
    hdd_group_size: int = len(HDD_GROUP_KEYS)
    min_repeated_serial_headers: int = 2


# Singleton default config
DEFAULT_CONFIG = ReaderConfig()
