"""
Sheet layout classifier.

The decision is made once per sheet and returned as a
:class:`~filmdb.ir.SheetLayout`; the reader then runs exactly one
extraction function for it.
"""

from __future__ import annotations

from typing import Sequence

from filmdb.ir import CategoryDefinition, CategoryId, SheetLayout
from filmdb.workbook.config import (
    DEFAULT_CONFIG,
    HDD_SERIAL_HEADER,
    HDD_TITLE_HEADER,
    ReaderConfig,
)
from filmdb.workbook.extraction import extract_block_candidates, is_disk_heading_row
from filmdb.workbook.validator import is_valid_record


def is_likely_disk_grouped(grid: Sequence[Sequence[str]], cfg: ReaderConfig = DEFAULT_CONFIG) -> bool:
    """
    True when the sheet has both a disk heading row and a sub-header row
    repeating ``序号`` (side-by-side groups) next to ``电影名称``.
    """
    has_heading = False
    has_repeated_header = False
    for row in grid:
        if not has_heading and is_disk_heading_row(row):
            has_heading = True
        if not has_repeated_header:
            serial_headers = sum(1 for c in row if c == HDD_SERIAL_HEADER)
            if serial_headers >= cfg.min_repeated_serial_headers and HDD_TITLE_HEADER in row:
                has_repeated_header = True
        if has_heading and has_repeated_header:
            return True
    return False


def has_valid_block_record(grid: Sequence[Sequence[str]], category: CategoryDefinition) -> bool:
    return any(is_valid_record(category, c) for c in extract_block_candidates(grid, category))


def classify_layout(
    grid: Sequence[Sequence[str]],
    category: CategoryDefinition,
    cfg: ReaderConfig = DEFAULT_CONFIG,
) -> SheetLayout:
    """
    Hard-disk sheets: DISK_GROUPED when the heuristic matches, else FLAT.
    Disc sheets: BLOCK when at least one stride group is a valid record,
    else FLAT.
    """
    if category.id == CategoryId.HDD:
        return SheetLayout.DISK_GROUPED if is_likely_disk_grouped(grid, cfg) else SheetLayout.FLAT
    return SheetLayout.BLOCK if has_valid_block_record(grid, category) else SheetLayout.FLAT
