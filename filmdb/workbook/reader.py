"""
WorkbookReader: turn a workbook buffer into sorted, validated records.

Encapsulates:
- format sniffing and engine selection (xlrd for ``.xls``, openpyxl for ``.xlsx``)
- sheet resolution per category (exact name, substring, position)
- layout classification and candidate extraction
- validation, drop counting and canonical sorting
"""

from __future__ import annotations

import io
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from filmdb.errors import MalformedWorkbook
from filmdb.ir import (
    CategoryDefinition,
    CategoryParseStats,
    CategoryRecords,
    MovieRecord,
    ParseReport,
    SheetLayout,
    create_empty_records,
)
from filmdb.logger import get_logger
from filmdb.schema import CATEGORIES
from filmdb.workbook.config import (
    DEFAULT_CONFIG,
    ENGINE_BY_FORMAT,
    OLE2_SIGNATURE,
    ZIP_SIGNATURE,
    ReaderConfig,
)
from filmdb.workbook.data_cleaner import DataCleaner
from filmdb.workbook.extraction import (
    Candidate,
    extract_block_candidates,
    extract_disk_grouped_candidates,
    extract_flat_candidates,
)
from filmdb.workbook.header_detector import HeaderDetector
from filmdb.workbook.layout import classify_layout
from filmdb.workbook.ordering import sort_category_records
from filmdb.workbook.validator import is_valid_record

logger = get_logger(__name__)

Grid = List[List[str]]


def detect_format(data: bytes) -> str:
    """Return ``"xls"`` or ``"xlsx"`` from the file signature."""
    if not data:
        raise MalformedWorkbook("Workbook buffer is empty")
    if data.startswith(OLE2_SIGNATURE):
        return "xls"
    if data.startswith(ZIP_SIGNATURE):
        return "xlsx"
    raise MalformedWorkbook("Buffer is neither an .xls nor an .xlsx workbook")


class WorkbookReader:
    """
    Parse a whole workbook into :data:`~filmdb.ir.CategoryRecords`.

    Each category is resolved and parsed independently: a sheet that fails
    to read leaves that category empty and does not abort the others.
    """

    def __init__(
        self,
        cfg: ReaderConfig = DEFAULT_CONFIG,
        header_detector: Optional[HeaderDetector] = None,
    ):
        self._cfg = cfg
        self._hd = header_detector or HeaderDetector(cfg)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def open_workbook(self, data: bytes) -> pd.ExcelFile:
        """
        Open *data* with the engine matching its signature.

        Raises :class:`MalformedWorkbook` if the buffer cannot be opened.
        """
        fmt = detect_format(data)
        try:
            xl = pd.ExcelFile(io.BytesIO(data), engine=ENGINE_BY_FORMAT[fmt])
            # Touch the sheet list so corrupt directories fail here, not later.
            _ = list(xl.sheet_names)
        except Exception as exc:
            raise MalformedWorkbook(f"Cannot open {fmt} workbook: {exc}") from exc
        return xl

    def parse(self, data: bytes) -> Tuple[CategoryRecords, ParseReport]:
        xl = self.open_workbook(data)
        sheet_names = [str(n) for n in xl.sheet_names]
        records = create_empty_records()
        report = ParseReport(sheet_names=sheet_names)

        for index, category in enumerate(CATEGORIES):
            stats = CategoryParseStats(category=category.id)
            report.categories[category.id.value] = stats

            sheet_name = self.resolve_sheet_name(sheet_names, category, index)
            if sheet_name is None:
                logger.info("No sheet for category %s; left empty", category.id.value)
                continue
            stats.sheet_name = sheet_name

            try:
                grid = self.read_grid(xl, sheet_name)
                parsed, layout, dropped = self.parse_grid(grid, category)
            except Exception as exc:
                logger.warning(
                    "Failed to read sheet %r for category %s: %s",
                    sheet_name, category.id.value, exc,
                )
                stats.error = str(exc)
                continue

            records[category.id] = parsed
            stats.layout = layout
            stats.kept = len(parsed)
            stats.dropped = dropped
            logger.info(
                "Parsed %s from sheet %r: layout=%s kept=%d dropped=%d",
                category.id.value, sheet_name, layout.value, len(parsed), dropped,
            )

        return records, report

    def parse_grid(
        self,
        grid: Sequence[Sequence[str]],
        category: CategoryDefinition,
    ) -> Tuple[List[MovieRecord], SheetLayout, int]:
        """
        Classify, extract, validate and sort one sheet.

        Returns ``(records, layout, dropped_count)``.
        """
        layout = classify_layout(grid, category, self._cfg)
        candidates = self.extract_candidates(grid, category, layout)
        kept, dropped = self.validate_candidates(category, candidates)
        if dropped:
            logger.debug("Dropped %d invalid rows for %s", dropped, category.id.value)
        records = [MovieRecord.from_values(values) for values in kept]
        return sort_category_records(category.id, records), layout, dropped

    def extract_candidates(
        self,
        grid: Sequence[Sequence[str]],
        category: CategoryDefinition,
        layout: SheetLayout,
    ) -> List[Candidate]:
        if layout == SheetLayout.BLOCK:
            return extract_block_candidates(grid, category)
        if layout == SheetLayout.DISK_GROUPED:
            return extract_disk_grouped_candidates(grid, self._cfg)
        return extract_flat_candidates(grid, category, self._hd)

    @staticmethod
    def validate_candidates(
        category: CategoryDefinition,
        candidates: Sequence[Candidate],
    ) -> Tuple[List[Candidate], int]:
        kept = [c for c in candidates if is_valid_record(category, c)]
        return kept, len(candidates) - len(kept)

    @staticmethod
    def resolve_sheet_name(
        sheet_names: Sequence[str],
        category: CategoryDefinition,
        index: int,
    ) -> Optional[str]:
        """
        Exact (trimmed) name, else substring, else the *index*-th sheet.

        The substring pass skips sheets named exactly after another
        category, so ``蓝光影碟目录`` never picks up ``精装蓝光影碟目录``.
        """
        for name in sheet_names:
            if name.strip() == category.sheet_name:
                return name
        claimed = {c.sheet_name for c in CATEGORIES if c.id != category.id}
        for name in sheet_names:
            if category.sheet_name in name and name.strip() not in claimed:
                return name
        if index < len(sheet_names):
            return sheet_names[index]
        return None

    @staticmethod
    def read_grid(xl: pd.ExcelFile, sheet_name: str) -> Grid:
        """Read a sheet as normalised strings, dropping all-blank rows."""
        df = xl.parse(sheet_name, header=None, keep_default_na=False, dtype=object)
        grid: Grid = []
        for row in df.itertuples(index=False, name=None):
            cells = DataCleaner.normalize_row(row)
            if not DataCleaner.is_blank_row(cells):
                grid.append(cells)
        return grid


# ---------------------------------------------------------------------------
# Module-level convenience
# ---------------------------------------------------------------------------

def parse_workbook_with_report(data: bytes) -> Tuple[CategoryRecords, ParseReport]:
    return WorkbookReader().parse(data)


def parse_workbook(data: bytes) -> CategoryRecords:
    """Parse a workbook buffer; raises :class:`MalformedWorkbook` if unreadable."""
    records, _ = WorkbookReader().parse(data)
    return records
