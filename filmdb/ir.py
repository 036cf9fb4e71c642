"""
中间表示模块 (Intermediate Representation Module)
================================================

定义目录引擎的核心数据结构：CategoryId、FieldDefinition、CategoryDefinition、
MovieRecord、CategoryRecords 以及解析报告 ParseReport。
"""

import uuid
from enum import Enum
from typing import Dict, List, Mapping, Optional, Pattern

from pydantic import BaseModel, ConfigDict, Field


class CategoryId(str, Enum):
    """
    目录类别枚举，声明顺序即工作簿中工作表的固定顺序。
    """
    DVD = "dvd"
    BLURAY = "bluray"
    COLLECTOR_BLURAY = "collectorBluray"
    HDD = "hdd"


class SheetLayout(str, Enum):
    """
    工作表布局类型，由 filmdb.workbook.layout 判定，每种布局有独立的提取函数。
    """
    BLOCK = "block"
    FLAT = "flat"
    DISK_GROUPED = "disk_grouped"


class FieldDefinition(BaseModel):
    """
    字段定义，既用于解析表头，也用于（外部）表单渲染。

    属性:
        key: 稳定的字段标识
        label: 规范表头文本（写出时使用）
        aliases: 读取时可识别的其他表头文本
        required: 是否必填
        placeholder: 表单提示文本，可选
    """
    key: str
    label: str
    aliases: List[str] = Field(default_factory=list)
    required: bool = False
    placeholder: Optional[str] = None

    def header_texts(self) -> List[str]:
        """规范表头在前、别名在后的全部可识别表头。"""
        return [self.label, *self.aliases]


class CategoryDefinition(BaseModel):
    """
    类别定义：工作表名、字段顺序、序号格式约束。

    属性:
        id: 类别标识
        label: 显示名称
        sheet_name: 规范工作表名
        fields: 按声明顺序排列的字段
        search_field: 表单中搜索提示所引用的字段
        serial_pattern: 序号格式约束（可为空）
        serial_pattern_hint: 序号格式不符时给用户的提示
    """
    id: CategoryId
    label: str
    sheet_name: str
    fields: List[FieldDefinition]
    search_field: str = "title"
    serial_pattern: Optional[Pattern[str]] = None
    serial_pattern_hint: Optional[str] = None

    @property
    def field_keys(self) -> List[str]:
        return [f.key for f in self.fields]

    @property
    def field_labels(self) -> List[str]:
        return [f.label for f in self.fields]

    def get_field(self, key: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.key == key:
                return f
        return None


def new_record_id() -> str:
    """生成不透明的记录标识；不会写入工作簿，每次解析都会重新生成。"""
    return uuid.uuid4().hex


class MovieRecord(BaseModel):
    """
    单条目录记录：字段 key → 文本值，外加系统分配的 id。

    id 只在同一内存会话内稳定，重新打开文件后会得到新的 id。
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_record_id)
    values: Dict[str, str] = Field(default_factory=dict)

    def get(self, key: str, default: str = "") -> str:
        value = self.values.get(key)
        return default if value is None else value

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def same_content(self, other: "MovieRecord") -> bool:
        """忽略 id，只比较字段值。"""
        return self.values == other.values

    @classmethod
    def from_values(cls, values: Mapping[str, str], record_id: Optional[str] = None) -> "MovieRecord":
        if record_id is None:
            return cls(values=dict(values))
        return cls(id=record_id, values=dict(values))


# 类别 → 按该类别排序规则排列的记录列表
CategoryRecords = Dict[CategoryId, List[MovieRecord]]


def create_empty_records() -> CategoryRecords:
    """创建包含全部四个类别、记录均为空的 CategoryRecords。"""
    return {category_id: [] for category_id in CategoryId}


class CategoryParseStats(BaseModel):
    """
    单个类别的解析统计。

    属性:
        category: 类别标识
        sheet_name: 实际读取的工作表名；未能定位时为 None
        layout: 选定的布局；未读取时为 None
        kept: 通过校验的记录数
        dropped: 因校验失败被丢弃的候选行数
        error: 该工作表读取失败时的错误信息
    """
    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    category: CategoryId
    sheet_name: Optional[str] = None
    layout: Optional[SheetLayout] = None
    kept: int = 0
    dropped: int = 0
    error: Optional[str] = None


class ParseReport(BaseModel):
    """
    整个工作簿的解析报告，按类别声明顺序保存各类别统计。
    """
    sheet_names: List[str] = Field(default_factory=list)
    categories: Dict[str, CategoryParseStats] = Field(default_factory=dict)

    @property
    def total_kept(self) -> int:
        return sum(s.kept for s in self.categories.values())

    @property
    def total_dropped(self) -> int:
        return sum(s.dropped for s in self.categories.values())

    def stats_for(self, category_id: CategoryId) -> CategoryParseStats:
        return self.categories[CategoryId(category_id).value]
