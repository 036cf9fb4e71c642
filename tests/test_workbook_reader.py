import pandas as pd
import pytest

from filmdb.errors import MalformedWorkbook
from filmdb.ir import CategoryId, SheetLayout
from filmdb.schema import get_category
from filmdb.workbook import reader as reader_module
from filmdb.workbook.reader import (
    WorkbookReader,
    detect_format,
    parse_workbook,
    parse_workbook_with_report,
)


def _values(records, *keys):
    return [tuple(r.get(k) for k in keys) for r in records]


def test_parse_legacy_workbook_recovers_every_layout(legacy_xls):
    records, report = parse_workbook_with_report(legacy_xls)

    assert _values(records[CategoryId.DVD], "serial", "title", "remark") == [
        ("1", "卧虎藏龙", ""),
        ("2", "英雄", "导演剪辑版"),
        ("10", "霸王别姬", ""),
    ]
    assert _values(records[CategoryId.BLURAY], "serial", "title") == [
        ("1-10", "Alien"),
        ("2-1", "Ran"),
        ("2-3", "Heat"),
    ]
    assert _values(records[CategoryId.COLLECTOR_BLURAY], "serial", "title", "remark") == [
        ("5", "Blade Runner", "铁盒"),
    ]
    assert _values(records[CategoryId.HDD], "disk", "serial", "title") == [
        ("硬盘一", "1", "Alien"),
        ("硬盘一", "2", "Heat"),
        ("硬盘一", "9", "Ikiru"),
        ("硬盘一", "10", "Ran"),
        ("硬盘二", "1", "Up"),
    ]

    dvd = report.stats_for(CategoryId.DVD)
    assert dvd.sheet_name == "DVD目录"
    assert dvd.layout == SheetLayout.BLOCK
    assert dvd.kept == 3
    # two header groups, the untitled disc and the non-numeric serial
    assert dvd.dropped == 4

    bluray = report.stats_for(CategoryId.BLURAY)
    assert bluray.layout == SheetLayout.FLAT
    assert (bluray.kept, bluray.dropped) == (3, 1)

    hdd = report.stats_for(CategoryId.HDD)
    assert hdd.layout == SheetLayout.DISK_GROUPED
    assert (hdd.kept, hdd.dropped) == (5, 1)
    assert report.total_kept == 12


def test_hdd_group_fields_are_kept(legacy_xls):
    records = parse_workbook(legacy_xls)
    alien = records[CategoryId.HDD][0]
    assert alien.values == {
        "disk": "硬盘一",
        "serial": "1",
        "title": "Alien",
        "subtitle": "外挂",
        "genre": "mkv",
        "remark": "导演版",
    }


def test_identifiers_are_distinct_even_for_duplicate_serials(build_xls):
    data = build_xls({"DVD目录": [["序号", "影碟名称"], [1, "A"], [1, "A"], [1, "B"]]})
    first = parse_workbook(data)
    second = parse_workbook(data)
    ids = [r.id for items in first.values() for r in items]
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert not set(ids) & {r.id for items in second.values() for r in items}


def test_xlsx_input_is_accepted(build_xlsx):
    data = build_xlsx({"DVD目录": [["序号", "影碟名称", "备注"], [2, "英雄", None], [1, "卧虎藏龙", "港版"]]})
    records = parse_workbook(data)
    assert _values(records[CategoryId.DVD], "serial", "title", "remark") == [
        ("1", "卧虎藏龙", "港版"),
        ("2", "英雄", ""),
    ]


def test_multiline_cells_are_normalised(build_xls):
    data = build_xls({"DVD目录": [[" 7 ", "霸王别姬\n(1993)", "  "]]})
    record = parse_workbook(data)[CategoryId.DVD][0]
    assert record.values == {"serial": "7", "title": "霸王别姬 (1993)", "remark": ""}


def test_missing_sheets_leave_categories_empty(build_xls):
    data = build_xls({"DVD目录": [["序号", "影碟名称"], [1, "A"]]})
    records, report = parse_workbook_with_report(data)
    assert len(records[CategoryId.DVD]) == 1
    for cid in (CategoryId.BLURAY, CategoryId.COLLECTOR_BLURAY, CategoryId.HDD):
        assert records[cid] == []
        assert report.stats_for(cid).sheet_name is None


def test_sheet_resolution_precedence():
    resolve = WorkbookReader.resolve_sheet_name
    dvd = get_category(CategoryId.DVD)
    bluray = get_category(CategoryId.BLURAY)
    hdd = get_category(CategoryId.HDD)

    assert resolve(["备份 DVD目录 2020", " DVD目录 "], dvd, 0) == " DVD目录 "
    assert resolve(["Sheet1", "我的DVD目录备份"], dvd, 0) == "我的DVD目录备份"
    assert resolve(["Sheet1", "Sheet2"], bluray, 1) == "Sheet2"
    assert resolve(["Sheet1", "Sheet2"], hdd, 3) is None

    collector_first = ["精装蓝光影碟目录", "蓝光影碟目录 (2020)"]
    assert resolve(collector_first, bluray, 1) == "蓝光影碟目录 (2020)"


def test_positional_fallback_reads_unnamed_sheets(build_xls):
    data = build_xls({
        "Sheet1": [["序号", "影碟名称"], [3, "DVD片"]],
        "Sheet2": [["序号", "影碟名称"], ["1-1", "蓝光片"]],
    })
    records = parse_workbook(data)
    assert _values(records[CategoryId.DVD], "title") == [("DVD片",)]
    assert _values(records[CategoryId.BLURAY], "title") == [("蓝光片",)]
    assert records[CategoryId.HDD] == []


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"serial,title\n1,Alien\n",
        b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64,
        b"PK\x03\x04not really a zip",
    ],
)
def test_unreadable_buffer_raises_malformed_workbook(data):
    with pytest.raises(MalformedWorkbook):
        parse_workbook(data)


def test_detect_format(legacy_xls, build_xlsx):
    assert detect_format(legacy_xls) == "xls"
    assert detect_format(build_xlsx({"a": [["x"]]})) == "xlsx"


def test_engine_is_chosen_by_signature(monkeypatch):
    engines = []

    class DummyExcelFile:
        sheet_names = []

        def __init__(self, buffer, engine=None):
            engines.append(engine)

    monkeypatch.setattr(reader_module.pd, "ExcelFile", DummyExcelFile)

    reader = WorkbookReader()
    reader.parse(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 8)
    reader.parse(b"PK\x03\x04" + b"\x00" * 8)

    assert engines == ["xlrd", "openpyxl"]


def test_failing_sheet_only_empties_its_category(monkeypatch, legacy_xls):
    original = WorkbookReader.read_grid

    def flaky_read_grid(xl, sheet_name):
        if sheet_name == "蓝光影碟目录":
            raise ValueError("corrupt sheet")
        return original(xl, sheet_name)

    monkeypatch.setattr(WorkbookReader, "read_grid", staticmethod(flaky_read_grid))

    records, report = parse_workbook_with_report(legacy_xls)
    assert records[CategoryId.BLURAY] == []
    assert report.stats_for(CategoryId.BLURAY).error == "corrupt sheet"
    assert len(records[CategoryId.DVD]) == 3
    assert len(records[CategoryId.HDD]) == 5


def test_read_grid_drops_blank_rows(build_xls):
    data = build_xls({"DVD目录": [["序号", "影碟名称"], [None, None], [1, "A"]]})
    reader = WorkbookReader()
    xl = reader.open_workbook(data)
    grid = reader.read_grid(xl, "DVD目录")
    assert grid == [["序号", "影碟名称"], ["1", "A"]]
    assert isinstance(xl, pd.ExcelFile)


def test_renamed_bluray_sheet_is_not_confused_with_collector_sheet(build_xls):
    data = build_xls({
        "精装蓝光影碟目录": [["序号", "影碟名称"], [5, "Blade Runner"]],
        "蓝光影碟目录 (旧)": [["序号", "影碟名称"], ["1-1", "Heat"]],
    })
    records, report = parse_workbook_with_report(data)
    assert report.stats_for(CategoryId.BLURAY).sheet_name == "蓝光影碟目录 (旧)"
    assert _values(records[CategoryId.BLURAY], "title") == [("Heat",)]
    assert _values(records[CategoryId.COLLECTOR_BLURAY], "title") == [("Blade Runner",)]
