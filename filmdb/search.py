"""
搜索模块 (Search Module)
======================

为每条记录构建可做子串匹配的搜索字符串。目录规模为数百到数千条，
直接线性过滤即可，不需要索引结构。
"""

from typing import Iterable, List, Union

from filmdb.ir import CategoryId, MovieRecord
from filmdb.workbook.data_cleaner import normalize_text

# 全角句号统一折叠为 ASCII 句号，便于输入 "硬盘三。12。片名"
FULLWIDTH_PERIODS = ("。", "．")


def _fold_periods(text: str) -> str:
    for ch in FULLWIDTH_PERIODS:
        text = text.replace(ch, ".")
    return text


def normalize_keyword(keyword: str) -> str:
    """去除首尾空白、转小写并折叠全角句号。"""
    return _fold_periods((keyword or "").strip().lower())


def build_search_index(record: MovieRecord, category_id: Union[CategoryId, str]) -> str:
    """
    记录的搜索字符串：除 id 外全部字段值（规范化、小写）以 | 连接，末尾追加类别 id。
    """
    values = [normalize_text(v).lower() for v in record.values.values()]
    values.append(CategoryId(category_id).value.lower())
    return "|".join(values)


def build_hdd_search_key(record: MovieRecord) -> str:
    """硬盘记录的组合键 "<disk>.<serial>.<title>"（小写，全角句号已折叠）。"""
    composite = ".".join(
        normalize_text(record.get(key)) for key in ("disk", "serial", "title")
    )
    return _fold_periods(composite.lower())


def filter_records(
    category_id: Union[CategoryId, str],
    records: Iterable[MovieRecord],
    keyword: str,
) -> List[MovieRecord]:
    """
    按关键字过滤记录，保持原有顺序。

    空关键字返回全部记录；硬盘类别匹配组合键，其余类别匹配搜索字符串。
    """
    needle = normalize_keyword(keyword)
    records = list(records)
    if not needle:
        return records
    category_id = CategoryId(category_id)
    if category_id == CategoryId.HDD:
        return [r for r in records if needle in build_hdd_search_key(r)]
    return [r for r in records if needle in build_search_index(r, category_id)]
