"""
Per-category serial parsers.

All parsers return ``None`` on mismatch; callers treat ``None`` as
"unparseable, order by text" and never as an error.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from filmdb.workbook.config import INTEGER_RE, LEADING_DIGITS_RE, RANGE_RE
from filmdb.workbook.data_cleaner import normalize_text


class RangeSerial(NamedTuple):
    """Blu-ray serial ``a-b``: binder ``a``, slot ``b``."""

    a: int
    b: int

    def __str__(self) -> str:
        return f"{self.a}-{self.b}"


def parse_integer_serial(value: Any) -> Optional[int]:
    text = normalize_text(value)
    if not INTEGER_RE.match(text):
        return None
    return int(text)


def parse_range_serial(value: Any) -> Optional[RangeSerial]:
    m = RANGE_RE.match(normalize_text(value))
    if not m:
        return None
    return RangeSerial(int(m.group(1)), int(m.group(2)))


def parse_leading_integer(value: Any) -> Optional[int]:
    """Leading digit run of a serial, e.g. ``"12a"`` -> 12."""
    m = LEADING_DIGITS_RE.match(normalize_text(value))
    return int(m.group(0)) if m else None
