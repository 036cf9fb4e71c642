import math

import pytest

from filmdb.workbook.data_cleaner import DataCleaner, normalize_header, normalize_text


class DummyText:
    text = "影碟名称"


class DummyPlain:
    plain = "序号"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ""),
        (float("nan"), ""),
        ("  卧虎藏龙  ", "卧虎藏龙"),
        ("Crouching\r\nTiger", "Crouching Tiger"),
        ("line1\nline2\rline3", "line1 line2 line3"),
        (" \n 英雄 \n ", "英雄"),
        (12.0, "12"),
        (12, "12"),
        (1.5, "1.5"),
    ],
)
def test_normalize_text(raw, expected):
    assert normalize_text(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [None, "", "  a \r\n b  ", "\n\n", "霸王别姬\n(1993)", 3.0, "  x\ty  "],
)
def test_normalize_text_is_idempotent(raw):
    once = normalize_text(raw)
    assert normalize_text(once) == once
    assert "\n" not in once and "\r" not in once
    assert once == once.strip()


def test_cell_to_str_richtext_like():
    assert DataCleaner.cell_to_str(DummyText()) == "影碟名称"
    assert DataCleaner.cell_to_str(DummyPlain()) == "序号"


def test_is_empty():
    assert DataCleaner.is_empty(None)
    assert DataCleaner.is_empty(math.nan)
    assert DataCleaner.is_empty("   ")
    assert not DataCleaner.is_empty("0")


def test_normalize_header_ignores_case_and_spaces():
    assert normalize_header(" 影碟 名称 ") == "影碟名称"
    assert normalize_header("ID") == "id"
    assert normalize_header("Comments\n") == "comments"
