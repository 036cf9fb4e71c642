"""
Chinese-numeral and disk-number parsing.

Hard disks in the catalogue are named like ``硬盘三``, ``硬盘十二`` or
``硬盘10``; ordering them by value rather than by text needs a small
numeral parser.  Only a single 万 level is supported.
"""

from __future__ import annotations

from typing import Any, Optional

from filmdb.workbook.config import (
    CHINESE_DIGITS,
    CHINESE_UNITS,
    DIGIT_RUN_RE,
    DISK_PREFIX,
    INTEGER_RE,
    SECTION_UNIT,
)
from filmdb.workbook.data_cleaner import normalize_text


def parse_chinese_numeral(value: Any) -> Optional[int]:
    """
    Parse ``"十二"`` -> 12, ``"一百零五"`` -> 105, ``"12"`` -> 12.

    A digit before a unit defaults to 1 (``"十"`` is 10).  Returns ``None``
    when any character is neither a digit nor a unit, or when nothing was
    consumed.
    """
    text = normalize_text(value)
    if not text:
        return None
    if INTEGER_RE.match(text):
        return int(text)

    total = 0
    section = 0
    digit = 0
    consumed = False

    for char in text:
        if char in CHINESE_DIGITS:
            digit = CHINESE_DIGITS[char]
            consumed = True
            continue
        unit = CHINESE_UNITS.get(char)
        if unit is None:
            return None
        consumed = True
        if unit == SECTION_UNIT:
            total += (section + digit) * unit
            section = 0
            digit = 0
            continue
        section += (digit or 1) * unit
        digit = 0

    if not consumed:
        return None
    return total + section + digit


def parse_disk_order(disk_name: Any) -> Optional[int]:
    """
    Numeric position of a disk: the first Arabic digit run if there is one,
    otherwise the Chinese numeral following the ``硬盘`` prefix.
    """
    text = normalize_text(disk_name)
    if not text:
        return None
    m = DIGIT_RUN_RE.search(text)
    if m:
        return int(m.group(0))
    if text.startswith(DISK_PREFIX):
        text = text[len(DISK_PREFIX):].strip()
    return parse_chinese_numeral(text)
