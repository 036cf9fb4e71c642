"""
Candidate extraction, one function per sheet layout.

Each function takes a grid of normalised strings (all-blank rows already
removed) and returns raw candidate dicts in sheet order.  Validation is
the caller's job; see :mod:`filmdb.workbook.validator`.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from filmdb.ir import CategoryDefinition
from filmdb.workbook.config import (
    DEFAULT_CONFIG,
    DISK_NAME_RE,
    DISK_PREFIX,
    HDD_GROUP_KEYS,
    HDD_HEADER_TOKENS,
    ReaderConfig,
)
from filmdb.workbook.data_cleaner import DataCleaner
from filmdb.workbook.header_detector import HeaderDetector

Candidate = Dict[str, str]
Grid = Sequence[Sequence[str]]


def _cell(row: Sequence[str], idx: int) -> str:
    return row[idx] if 0 <= idx < len(row) else ""


# ---------------------------------------------------------------------------
# Row predicates (shared with the layout classifier)
# ---------------------------------------------------------------------------

def is_disk_heading_row(row: Sequence[str]) -> bool:
    """Exactly one non-blank cell, and it names a disk."""
    non_empty = [c for c in row if c != ""]
    return len(non_empty) == 1 and non_empty[0].startswith(DISK_PREFIX)


def is_hdd_header_row(row: Sequence[str]) -> bool:
    return all(token in row for token in HDD_HEADER_TOKENS)


def extract_disk_name(heading: str) -> str:
    """``"硬盘三（4T）"`` -> ``"硬盘三"``."""
    m = DISK_NAME_RE.match(heading)
    return (m.group(0) if m else heading).strip()


# ---------------------------------------------------------------------------
# Block layout
# ---------------------------------------------------------------------------

def extract_block_candidates(grid: Grid, category: CategoryDefinition) -> List[Candidate]:
    """
    Walk every row in strides of ``len(category.fields)`` columns; each
    non-blank stride is one candidate with fields in declared order.
    """
    keys = category.field_keys
    size = len(keys)
    candidates: List[Candidate] = []
    for row in grid:
        if DataCleaner.is_blank_row(row):
            continue
        for start in range(0, len(row), size):
            values = {key: _cell(row, start + offset) for offset, key in enumerate(keys)}
            if DataCleaner.is_blank_row(values.values()):
                continue
            candidates.append(values)
    return candidates


# ---------------------------------------------------------------------------
# Flat layout
# ---------------------------------------------------------------------------

def extract_flat_candidates(
    grid: Grid,
    category: CategoryDefinition,
    header_detector: Optional[HeaderDetector] = None,
) -> List[Candidate]:
    """One candidate per row below the detected header row."""
    if not grid:
        return []
    hd = header_detector or HeaderDetector()
    header_idx, _ = hd.select_header_row_index(grid, category)
    columns = hd.resolve_columns(grid[header_idx], category)
    return [
        {key: _cell(row, col) for key, col in columns.items()}
        for row in grid[header_idx + 1:]
    ]


# ---------------------------------------------------------------------------
# Disk-grouped layout (hard-disk sheet)
# ---------------------------------------------------------------------------

def extract_disk_grouped_candidates(
    grid: Grid,
    cfg: ReaderConfig = DEFAULT_CONFIG,
) -> List[Candidate]:
    """
    Disk heading rows set the current disk; repeated sub-header rows are
    skipped; every other row is split into groups of
    (serial, title, subtitle, genre, remark) tagged with the current disk.
    """
    size = cfg.hdd_group_size
    current_disk = ""
    candidates: List[Candidate] = []
    for row in grid:
        if DataCleaner.is_blank_row(row):
            continue
        if is_disk_heading_row(row):
            heading = next(c for c in row if c != "")
            current_disk = extract_disk_name(heading)
            continue
        if is_hdd_header_row(row):
            continue
        for start in range(0, len(row), size):
            group = {key: _cell(row, start + offset) for offset, key in enumerate(HDD_GROUP_KEYS)}
            if DataCleaner.is_blank_row(group.values()):
                continue
            candidates.append({"disk": current_disk, **group})
    return candidates
