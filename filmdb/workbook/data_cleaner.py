"""
DataCleaner: value normalisation utilities for the workbook engine.

Responsibilities:
- Cell-level string conversion (``cell_to_str``)
- Empty-cell detection
- Record text normalisation (line breaks folded, whitespace trimmed)
- Header-text normalisation (compact form for alias matching)
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, List

import pandas as pd

from filmdb.workbook.config import LINE_BREAK_RE, WHITESPACE_RE


class DataCleaner:
    """Stateless helper that normalises raw cell values and header text."""

    # ----- cell → string ---------------------------------------------------

    @staticmethod
    def is_na(value: Any) -> bool:
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False

    @staticmethod
    def is_empty(value: Any) -> bool:
        if value is None or DataCleaner.is_na(value):
            return True
        return str(value).strip() == ""

    @staticmethod
    def cell_to_str(value: Any) -> str:
        """Convert an arbitrary cell value to a clean string."""
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        if DataCleaner.is_na(value):
            return ""
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        # Numeric cells come back as floats from the legacy format: 12.0 -> "12"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (datetime, date, pd.Timestamp)):
            if isinstance(value, datetime) and value.time() != datetime.min.time():
                return value.isoformat(sep=" ", timespec="seconds")
            return value.strftime("%Y-%m-%d")
        # Rich-text objects from openpyxl may expose .plain or .text
        plain_attr = getattr(value, "plain", None)
        if isinstance(plain_attr, str):
            return plain_attr.strip()
        text_attr = getattr(value, "text", None)
        if isinstance(text_attr, str):
            return text_attr.strip()
        text = str(value).strip()
        if text.lower() in {"nan", "none", "nat"}:
            return ""
        return text

    # ----- record text -----------------------------------------------------

    @staticmethod
    def normalize_text(value: Any) -> str:
        """
        Normalise a cell for storage and comparison.

        Missing values become ``""``; line breaks are folded into a single
        space and surrounding whitespace is trimmed.  Idempotent.
        """
        return LINE_BREAK_RE.sub(" ", DataCleaner.cell_to_str(value)).strip()

    @staticmethod
    def normalize_row(cells: Iterable[Any]) -> List[str]:
        return [DataCleaner.normalize_text(c) for c in cells]

    @staticmethod
    def is_blank_row(cells: Iterable[str]) -> bool:
        return all(c == "" for c in cells)

    # ----- header text -----------------------------------------------------

    @staticmethod
    def normalize_header(text: Any) -> str:
        """
        Collapse a header cell into a lower-case form with all whitespace
        removed, so that ``" 影碟 名称"`` and ``"ID"`` match ``"影碟名称"``
        and ``"id"``.
        """
        return WHITESPACE_RE.sub("", DataCleaner.normalize_text(text)).lower()


normalize_text = DataCleaner.normalize_text
normalize_header = DataCleaner.normalize_header
