"""
Candidate-record validation.

A candidate that fails validation is dropped by the reader; it is never an
error.  The same rules decide which legacy rows survive a load.
"""

from __future__ import annotations

from typing import Mapping

from filmdb.ir import CategoryDefinition, CategoryId
from filmdb.workbook.config import INTEGER_RE
from filmdb.workbook.data_cleaner import normalize_text


def is_valid_disc_record(category: CategoryDefinition, values: Mapping[str, str]) -> bool:
    """Serial and title present, and the serial matches the category pattern if any."""
    serial = normalize_text(values.get("serial"))
    title = normalize_text(values.get("title"))
    if not serial or not title:
        return False
    if category.serial_pattern is not None and not category.serial_pattern.match(serial):
        return False
    return True


def is_valid_hdd_record(values: Mapping[str, str]) -> bool:
    """Disk and title present, serial a plain integer."""
    disk = normalize_text(values.get("disk"))
    title = normalize_text(values.get("title"))
    if not disk or not title:
        return False
    return bool(INTEGER_RE.match(normalize_text(values.get("serial"))))


def is_valid_record(category: CategoryDefinition, values: Mapping[str, str]) -> bool:
    if category.id == CategoryId.HDD:
        return is_valid_hdd_record(values)
    return is_valid_disc_record(category, values)
