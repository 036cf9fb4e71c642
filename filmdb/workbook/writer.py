"""
WorkbookWriter: serialise the in-memory catalogue back into a workbook.

The output always has exactly four sheets in declared category order, named
by the canonical sheet names, each with a header row of field labels and
one plain-text row per record.  ``.xls`` is written with xlwt (legacy
binary format, the catalogue's native file type); ``.xlsx`` with openpyxl.
"""

from __future__ import annotations

import io
from typing import Iterable, List, Optional, Tuple

import xlwt
from openpyxl import Workbook

from filmdb.ir import CategoryDefinition, CategoryRecords, MovieRecord
from filmdb.logger import get_logger
from filmdb.schema import CATEGORIES
from filmdb.workbook.data_cleaner import normalize_text
from filmdb.workbook.ordering import sort_category_records

logger = get_logger(__name__)

SheetRows = Tuple[str, List[List[str]]]


def build_rows(category: CategoryDefinition, records: Iterable[MovieRecord]) -> List[List[str]]:
    """Header row of labels, then the sorted records projected in field order."""
    rows: List[List[str]] = [category.field_labels]
    for record in sort_category_records(category.id, records):
        rows.append([normalize_text(record.get(f.key)) for f in category.fields])
    return rows


def build_sheets(records: CategoryRecords) -> List[SheetRows]:
    return [
        (category.sheet_name, build_rows(category, records.get(category.id) or []))
        for category in CATEGORIES
    ]


def _write_xls(sheets: List[SheetRows]) -> bytes:
    wb = xlwt.Workbook(encoding="utf-8")
    for sheet_name, rows in sheets:
        ws = wb.add_sheet(sheet_name)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                ws.write(r, c, value)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _write_xlsx(sheets: List[SheetRows]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for sheet_name, rows in sheets:
        ws = wb.create_sheet(title=sheet_name)
        for row in rows:
            ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


WRITERS = {
    "xls": _write_xls,
    "xlsx": _write_xlsx,
}


def create_workbook_bytes(records: CategoryRecords, fmt: Optional[str] = None) -> bytes:
    """
    Serialise *records* into a single workbook buffer.

    *fmt* is ``"xls"`` (default) or ``"xlsx"``.
    """
    fmt = (fmt or "xls").lower().lstrip(".")
    writer = WRITERS.get(fmt)
    if writer is None:
        raise ValueError(f"Unsupported workbook format: {fmt!r}")
    sheets = build_sheets(records)
    data = writer(sheets)
    logger.debug(
        "Serialised %d records into %s (%d bytes)",
        sum(len(rows) - 1 for _, rows in sheets), fmt, len(data),
    )
    return data
