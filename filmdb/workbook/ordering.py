"""
Collation and per-category record ordering.

Every comparator is a three-way ``(left, right) -> int`` function that
resolves ties fully by text, so repeated sorts are idempotent.  Records
whose serial cannot be parsed never raise; they sort after the parseable
ones and are ordered among themselves by text.
"""

from __future__ import annotations

import unicodedata
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from pypinyin import Style, lazy_pinyin

from filmdb.ir import CategoryId, MovieRecord
from filmdb.workbook.config import COLLATION_CHUNK_RE, HAN_RUN_RE, TONE_SUFFIX_RE
from filmdb.workbook.data_cleaner import normalize_text
from filmdb.workbook.numerals import parse_disk_order
from filmdb.workbook.serials import (
    parse_integer_serial,
    parse_leading_integer,
    parse_range_serial,
)

Comparator = Callable[[MovieRecord, MovieRecord], int]


# ---------------------------------------------------------------------------
# Text collation
# ---------------------------------------------------------------------------

# (kind, number, text, tone, raw): digit runs < other characters < Han
CollationElement = Tuple[int, int, str, int, str]
CollationKey = Tuple[CollationElement, ...]


def _split_tone(syllable: str) -> Tuple[str, int]:
    m = TONE_SUFFIX_RE.match(syllable)
    if not m:
        return syllable, 0
    return m.group(1), int(m.group(2))


def _han_elements(run: str) -> List[CollationElement]:
    """
    One element per ideograph, ordered by toneless pinyin, then tone, then
    the character itself.  Pinyin is taken for the whole run so that
    polyphonic characters resolve from their neighbours.
    """
    syllables = lazy_pinyin(run, style=Style.TONE3, neutral_tone_with_five=True, errors=list)
    if len(syllables) != len(run):
        syllables = [
            lazy_pinyin(ch, style=Style.TONE3, neutral_tone_with_five=True, errors=list)[0]
            for ch in run
        ]
    elements = []
    for ch, syllable in zip(run, syllables):
        base, tone = _split_tone(syllable)
        elements.append((2, 0, base, tone, ch))
    return elements


def _text_elements(chunk: str) -> List[CollationElement]:
    elements: List[CollationElement] = []
    pos = 0
    for m in HAN_RUN_RE.finditer(chunk):
        elements.extend((1, 0, ch, 0, "") for ch in chunk[pos:m.start()])
        elements.extend(_han_elements(m.group(0)))
        pos = m.end()
    elements.extend((1, 0, ch, 0, "") for ch in chunk[pos:])
    return elements


def collation_key(text: str) -> CollationKey:
    """
    Sort key for Simplified-Chinese, numeric-aware comparison at base
    strength: case, width and accents are ignored, ``"Disc 9"`` sorts
    before ``"disc 10"`` and Han characters follow pinyin order
    (``阿甘`` before ``北京``), after Latin text.
    """
    folded = unicodedata.normalize("NFKD", unicodedata.normalize("NFKC", text or ""))
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch)).casefold()
    key: List[CollationElement] = []
    for chunk in COLLATION_CHUNK_RE.findall(folded):
        if chunk.isdigit():
            key.append((0, int(chunk), "", 0, ""))
        else:
            key.extend(_text_elements(chunk))
    return tuple(key)


def _sign(left, right) -> int:
    return (left > right) - (left < right)


def compare_text(left: str, right: str) -> int:
    return _sign(collation_key(left), collation_key(right))


def _compare_parsed(left: Optional[object], right: Optional[object]) -> int:
    """Parseable values first (ascending), unparseable ones tie at 0."""
    if left is not None and right is not None:
        return _sign(left, right)
    if left is not None:
        return -1
    if right is not None:
        return 1
    return 0


def _compare_serial_then_title(left: MovieRecord, right: MovieRecord) -> int:
    order = compare_text(normalize_text(left.get("serial")), normalize_text(right.get("serial")))
    if order:
        return order
    return compare_text(normalize_text(left.get("title")), normalize_text(right.get("title")))


# ---------------------------------------------------------------------------
# Comparators
# ---------------------------------------------------------------------------

def compare_integer_serial_records(left: MovieRecord, right: MovieRecord) -> int:
    """DVD / collector Blu-ray: numeric serial, then serial text, then title."""
    order = _compare_parsed(
        parse_integer_serial(left.get("serial")),
        parse_integer_serial(right.get("serial")),
    )
    if order:
        return order
    return _compare_serial_then_title(left, right)


def compare_range_serial_records(left: MovieRecord, right: MovieRecord) -> int:
    """Blu-ray: ``(a, b)`` lexicographic, then serial text, then title."""
    order = _compare_parsed(
        parse_range_serial(left.get("serial")),
        parse_range_serial(right.get("serial")),
    )
    if order:
        return order
    return _compare_serial_then_title(left, right)


def compare_hdd_records(left: MovieRecord, right: MovieRecord) -> int:
    """
    Hard-disk files: disk number, disk text, leading serial number,
    serial text, title.  ``硬盘一`` < ``硬盘二`` < ``硬盘10``.
    """
    left_disk = normalize_text(left.get("disk"))
    right_disk = normalize_text(right.get("disk"))
    order = _compare_parsed(parse_disk_order(left_disk), parse_disk_order(right_disk))
    if order:
        return order
    order = compare_text(left_disk, right_disk)
    if order:
        return order
    order = _compare_parsed(
        parse_leading_integer(left.get("serial")),
        parse_leading_integer(right.get("serial")),
    )
    if order:
        return order
    return _compare_serial_then_title(left, right)


COMPARATORS: Dict[CategoryId, Comparator] = {
    CategoryId.DVD: compare_integer_serial_records,
    CategoryId.BLURAY: compare_range_serial_records,
    CategoryId.COLLECTOR_BLURAY: compare_integer_serial_records,
    CategoryId.HDD: compare_hdd_records,
}


def sort_category_records(
    category_id: Union[CategoryId, str],
    records: Iterable[MovieRecord],
) -> List[MovieRecord]:
    """Return a new list in the category's canonical order."""
    try:
        comparator = COMPARATORS.get(CategoryId(category_id))
    except ValueError:
        comparator = None
    if comparator is None:
        return list(records)
    return sorted(records, key=cmp_to_key(comparator))
