"""
Pytest configuration and shared fixtures.
"""
import io
import os
import sys
from typing import Dict, Sequence

import pytest
import xlwt
from openpyxl import Workbook

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)


def _build_xls(sheets: Dict[str, Sequence[Sequence[object]]]) -> bytes:
    """Write a legacy .xls workbook; ``None`` cells are left untouched."""
    wb = xlwt.Workbook(encoding="utf-8")
    for name, rows in sheets.items():
        ws = wb.add_sheet(name)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is not None:
                    ws.write(r, c, value)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _build_xlsx(sheets: Dict[str, Sequence[Sequence[object]]]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def build_xls():
    return _build_xls


@pytest.fixture
def build_xlsx():
    return _build_xlsx


@pytest.fixture
def legacy_sheets():
    """
    A hand-maintained workbook: DVDs packed two-per-row for printing,
    Blu-rays in a flat table with alias headers under a title row, and
    hard disks grouped under disk heading rows.
    """
    return {
        "DVD目录": [
            ["序号", "影碟名称", "备注", "序号", "影碟名称", "备注"],
            [1, "卧虎藏龙", "", 2, "英雄", "导演剪辑版"],
            [10, "霸王别姬", "", None, None, None],
            [3, "", "缺片名", "abc", "无效序号", ""],
        ],
        "蓝光影碟目录": [
            ["我的蓝光收藏"],
            ["名称", "编号", "说明"],
            ["Heat", "2-3", ""],
            ["Alien", "1-10", "4K"],
            ["Ran", "2-1", ""],
            ["", "3-1", "空名称"],
        ],
        "精装蓝光影碟目录": [
            ["序号", "影碟名称", "备注"],
            [5, "Blade Runner", "铁盒"],
        ],
        "硬盘电影目录": [
            ["硬盘二（4T 西数）"],
            ["序号", "电影名称", "字幕", "类型", "备注", "序号", "电影名称", "字幕", "类型", "备注"],
            [1, "Up", "外挂", "mkv", "", "x", "坏序号", "", "", ""],
            ["硬盘一"],
            ["序号", "电影名称", "字幕", "类型", "备注", "序号", "电影名称", "字幕", "类型", "备注"],
            [2, "Heat", "内嵌", "mp4", "", 1, "Alien", "外挂", "mkv", "导演版"],
            [10, "Ran", "", "", "", 9, "Ikiru", "", "", ""],
        ],
    }


@pytest.fixture
def legacy_xls(legacy_sheets):
    return _build_xls(legacy_sheets)
