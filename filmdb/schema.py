"""
类别模式模块 (Category Schema Module)
====================================

四种固定目录类别的声明式描述：工作表名、字段列表、表头别名、序号格式。

别名匹配只是数据，解析逻辑见 filmdb.workbook.header_detector。
"""

import re
from typing import Dict, List, Union

from filmdb.errors import UnknownCategoryError
from filmdb.ir import CategoryDefinition, CategoryId, FieldDefinition

INTEGER_SERIAL_PATTERN = re.compile(r"^[0-9]+$")
RANGE_SERIAL_PATTERN = re.compile(r"^[0-9]+-[0-9]+$")

SERIAL_ALIASES = ["编号", "no", "id"]
REMARK_ALIASES = ["说明", "comments"]


def _disc_fields(serial_placeholder: str) -> List[FieldDefinition]:
    return [
        FieldDefinition(
            key="serial",
            label="序号",
            aliases=list(SERIAL_ALIASES),
            required=True,
            placeholder=serial_placeholder,
        ),
        FieldDefinition(
            key="title",
            label="影碟名称",
            aliases=["电影名称", "名称", "片名"],
            required=True,
        ),
        FieldDefinition(key="remark", label="备注", aliases=list(REMARK_ALIASES)),
    ]


CATEGORIES: List[CategoryDefinition] = [
    CategoryDefinition(
        id=CategoryId.DVD,
        label="DVD目录",
        sheet_name="DVD目录",
        fields=_disc_fields("例如 12"),
        serial_pattern=INTEGER_SERIAL_PATTERN,
        serial_pattern_hint="序号需为整数，例如 12",
    ),
    CategoryDefinition(
        id=CategoryId.BLURAY,
        label="蓝光影碟目录",
        sheet_name="蓝光影碟目录",
        fields=_disc_fields("例如 3-12"),
        serial_pattern=RANGE_SERIAL_PATTERN,
        serial_pattern_hint="序号需为 int-int 格式，例如 3-12",
    ),
    CategoryDefinition(
        id=CategoryId.COLLECTOR_BLURAY,
        label="精装蓝光影碟目录",
        sheet_name="精装蓝光影碟目录",
        fields=_disc_fields("例如 8"),
        serial_pattern=INTEGER_SERIAL_PATTERN,
        serial_pattern_hint="序号需为整数，例如 8",
    ),
    CategoryDefinition(
        id=CategoryId.HDD,
        label="硬盘电影目录",
        sheet_name="硬盘电影目录",
        fields=[
            FieldDefinition(key="disk", label="所属硬盘", aliases=["硬盘", "硬盘号"], required=True),
            FieldDefinition(
                key="serial",
                label="序号",
                aliases=list(SERIAL_ALIASES),
                required=True,
                placeholder="例如 12",
            ),
            FieldDefinition(key="title", label="电影名称", aliases=["影碟名称", "名称", "片名"], required=True),
            FieldDefinition(key="subtitle", label="字幕", aliases=["字母", "首字母", "letter", "subtitle"]),
            FieldDefinition(key="genre", label="类型", aliases=["分类", "genre"]),
            FieldDefinition(key="remark", label="备注", aliases=list(REMARK_ALIASES)),
        ],
        serial_pattern=INTEGER_SERIAL_PATTERN,
        serial_pattern_hint="序号需为整数，例如 12",
    ),
]

CATEGORIES_BY_ID: Dict[CategoryId, CategoryDefinition] = {c.id: c for c in CATEGORIES}


def get_category(category_id: Union[CategoryId, str]) -> CategoryDefinition:
    """
    按 id 获取类别定义。

    抛出:
        UnknownCategoryError: id 不是四种类别之一
    """
    try:
        return CATEGORIES_BY_ID[CategoryId(category_id)]
    except ValueError as exc:
        raise UnknownCategoryError(f"Unknown category: {category_id!r}") from exc


def category_ids() -> List[str]:
    """按声明顺序返回全部类别 id（字符串形式，便于命令行 choices 使用）。"""
    return [c.id.value for c in CATEGORIES]
