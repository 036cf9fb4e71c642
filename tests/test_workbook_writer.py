import io

import pytest
import xlrd
from openpyxl import load_workbook

from filmdb.ir import CategoryId, MovieRecord, create_empty_records
from filmdb.workbook.ordering import sort_category_records
from filmdb.workbook.reader import parse_workbook
from filmdb.workbook.writer import build_rows, create_workbook_bytes
from filmdb.schema import get_category

SHEET_ORDER = ["DVD目录", "蓝光影碟目录", "精装蓝光影碟目录", "硬盘电影目录"]


def _rec(**values):
    return MovieRecord.from_values(values)


@pytest.fixture
def sample_records():
    records = create_empty_records()
    records[CategoryId.DVD] = [
        _rec(serial="10", title="霸王别姬", remark=""),
        _rec(serial="2", title="英雄", remark="导演剪辑版"),
    ]
    records[CategoryId.BLURAY] = [
        _rec(serial="2-1", title="Ran", remark=""),
        _rec(serial="1-10", title="Alien", remark="4K"),
        _rec(serial="1-9", title="Heat", remark=""),
    ]
    records[CategoryId.HDD] = [
        _rec(disk="硬盘二", serial="1", title="Up", subtitle="外挂", genre="mkv", remark=""),
        _rec(disk="硬盘一", serial="10", title="Ran", subtitle="", genre="", remark=""),
        _rec(disk="硬盘一", serial="9", title="Ikiru", subtitle="内嵌", genre="mp4", remark="修复版"),
    ]
    return records


def _content(records):
    return {
        cid: [r.values for r in sort_category_records(cid, items)]
        for cid, items in records.items()
    }


def test_build_rows_is_header_then_sorted_records(sample_records):
    rows = build_rows(get_category(CategoryId.BLURAY), sample_records[CategoryId.BLURAY])
    assert rows == [
        ["序号", "影碟名称", "备注"],
        ["1-9", "Heat", ""],
        ["1-10", "Alien", "4K"],
        ["2-1", "Ran", ""],
    ]


def test_xls_output_has_four_sheets_in_category_order(sample_records):
    data = create_workbook_bytes(sample_records, "xls")
    book = xlrd.open_workbook(file_contents=data)
    assert book.sheet_names() == SHEET_ORDER

    collector = book.sheet_by_name("精装蓝光影碟目录")
    assert collector.nrows == 1
    assert collector.row_values(0) == ["序号", "影碟名称", "备注"]

    hdd = book.sheet_by_name("硬盘电影目录")
    assert hdd.row_values(0) == ["所属硬盘", "序号", "电影名称", "字幕", "类型", "备注"]
    assert [hdd.cell_value(r, 2) for r in range(1, hdd.nrows)] == ["Ikiru", "Ran", "Up"]


def test_xlsx_output_has_four_sheets_in_category_order(sample_records):
    data = create_workbook_bytes(sample_records, "xlsx")
    wb = load_workbook(io.BytesIO(data))
    assert wb.sheetnames == SHEET_ORDER
    dvd_rows = [list(row) for row in wb["DVD目录"].iter_rows(values_only=True)]
    assert dvd_rows[0] == ["序号", "影碟名称", "备注"]
    assert [row[0] for row in dvd_rows[1:]] == ["2", "10"]


def test_default_format_is_xls(sample_records):
    data = create_workbook_bytes(sample_records)
    assert data[:8] == b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


@pytest.mark.parametrize("fmt", ["xls", "xlsx"])
def test_written_workbook_reads_back_to_the_same_content(sample_records, fmt):
    parsed = parse_workbook(create_workbook_bytes(sample_records, fmt))
    assert _content(parsed) == _content(sample_records)


def test_empty_catalogue_still_writes_every_sheet():
    data = create_workbook_bytes(create_empty_records(), "xls")
    book = xlrd.open_workbook(file_contents=data)
    assert book.sheet_names() == SHEET_ORDER
    assert all(book.sheet_by_index(i).nrows == 1 for i in range(4))
    assert all(not items for items in parse_workbook(data).values())


def test_unknown_format_is_rejected(sample_records):
    with pytest.raises(ValueError):
        create_workbook_bytes(sample_records, "csv")
