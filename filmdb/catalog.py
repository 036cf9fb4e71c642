"""
目录服务模块 (Catalog Service Module)
====================================

一个内存会话中的目录：整体加载、增删改、序号建议、序列化与自动保存。

每次变更后都会重新排序该类别，并（若配置了 AutoSaveQueue）把整个
工作簿排队保存。
"""

from typing import Dict, List, Mapping, Optional, Union

from filmdb.errors import RecordNotFound, RecordValidationError
from filmdb.ir import (
    CategoryId,
    CategoryRecords,
    MovieRecord,
    ParseReport,
    create_empty_records,
)
from filmdb.logger import get_logger
from filmdb.schema import get_category
from filmdb.search import filter_records
from filmdb.storage import AutoSaveQueue
from filmdb.workbook.data_cleaner import normalize_text
from filmdb.workbook.numerals import parse_disk_order
from filmdb.workbook.ordering import sort_category_records
from filmdb.workbook.reader import WorkbookReader
from filmdb.workbook.serials import RangeSerial, parse_integer_serial, parse_range_serial
from filmdb.workbook.writer import create_workbook_bytes

logger = get_logger(__name__)

CategoryLike = Union[CategoryId, str]

# 每个蓝光收纳册容量；满册后序号换到下一册的 1 号
BLURAY_SLOTS_PER_BINDER = 510

HDD_DEFAULT_SUBTITLE = "外挂"
HDD_DEFAULT_GENRE = "mkv"


# ---------------------------------------------------------------------------
# 序号建议
# ---------------------------------------------------------------------------

def next_integer_serial(records: List[MovieRecord]) -> str:
    """现有最大整数序号 + 1；没有可解析序号时为 "1"。"""
    serials = [parse_integer_serial(r.get("serial")) for r in records]
    return str(max((s for s in serials if s is not None), default=0) + 1)


def next_bluray_serial(records: List[MovieRecord]) -> str:
    """
    最高 (a, b) 之后的下一个位置："1-1" 起步，b 达到每册容量后换册。
    """
    best = RangeSerial(1, 0)
    for r in records:
        parsed = parse_range_serial(r.get("serial"))
        if parsed is not None and parsed > best:
            best = parsed
    if best.b >= BLURAY_SLOTS_PER_BINDER:
        return str(RangeSerial(best.a + 1, 1))
    if best.b == 0:
        return "1-1"
    return str(RangeSerial(best.a, best.b + 1))


def next_hdd_serial(records: List[MovieRecord], disk: str) -> str:
    """同一硬盘内最大序号 + 1；未指定硬盘时返回空串。"""
    target = normalize_text(disk)
    if not target:
        return ""
    serials = [
        parse_integer_serial(r.get("serial"))
        for r in records
        if normalize_text(r.get("disk")) == target
    ]
    return str(max((s for s in serials if s is not None), default=0) + 1)


def highest_disk_name(records: List[MovieRecord]) -> str:
    """编号最大的硬盘名；都无法解析编号时取第一个出现的硬盘名。"""
    best_disk = ""
    best_order = -1
    for r in records:
        disk = normalize_text(r.get("disk"))
        if not disk:
            continue
        order = parse_disk_order(disk)
        if order is not None and order > best_order:
            best_order = order
            best_disk = disk
        elif order is None and not best_disk:
            best_disk = disk
    return best_disk


class Catalog:
    """
    内存目录。

    属性:
        autosave: 可选的自动保存队列；每次变更后提交整个工作簿
        output_format: 序列化格式（xls / xlsx）
        last_report: 最近一次加载的解析报告
    """

    def __init__(
        self,
        autosave: Optional[AutoSaveQueue] = None,
        output_format: str = "xls",
        reader: Optional[WorkbookReader] = None,
    ):
        self.autosave = autosave
        self.output_format = output_format
        self._reader = reader or WorkbookReader()
        self._records: CategoryRecords = create_empty_records()
        self.last_report: Optional[ParseReport] = None
        self.last_save = None

    # ------------------------------------------------------------------
    # 加载 / 序列化
    # ------------------------------------------------------------------

    def load_bytes(self, data: bytes) -> ParseReport:
        """
        整体替换当前记录（不合并）。

        解析失败时抛出 MalformedWorkbook，当前内存状态保持不变。
        """
        records, report = self._reader.parse(data)
        self._records = records
        self.last_report = report
        logger.info("Catalog loaded: %d records, %d rows dropped", report.total_kept, report.total_dropped)
        return report

    def load_empty(self) -> None:
        self._records = create_empty_records()
        self.last_report = None

    def to_bytes(self, fmt: Optional[str] = None) -> bytes:
        return create_workbook_bytes(self._records, fmt or self.output_format)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    @property
    def all_records(self) -> CategoryRecords:
        return {cid: list(items) for cid, items in self._records.items()}

    def records(self, category_id: CategoryLike) -> List[MovieRecord]:
        category = get_category(category_id)
        return list(self._records[category.id])

    def find(self, category_id: CategoryLike, record_id: str) -> MovieRecord:
        for r in self.records(category_id):
            if r.id == record_id:
                return r
        raise RecordNotFound(f"No record {record_id!r} in {CategoryId(category_id).value}")

    def search(self, category_id: CategoryLike, keyword: str) -> List[MovieRecord]:
        return filter_records(category_id, self.records(category_id), keyword)

    # ------------------------------------------------------------------
    # 表单辅助
    # ------------------------------------------------------------------

    def suggest_serial(self, category_id: CategoryLike, disk: str = "") -> str:
        category = get_category(category_id)
        records = self._records[category.id]
        if category.id == CategoryId.BLURAY:
            return next_bluray_serial(records)
        if category.id == CategoryId.HDD:
            return next_hdd_serial(records, disk)
        return next_integer_serial(records)

    def default_form_values(self, category_id: CategoryLike) -> Dict[str, str]:
        """
        新增表单的默认值；硬盘类别预填最大编号硬盘、"外挂"字幕、mkv 类型及下一个序号。
        """
        category = get_category(category_id)
        values = {f.key: "" for f in category.fields}
        if category.id == CategoryId.HDD:
            disk = highest_disk_name(self._records[category.id])
            values.update(
                disk=disk,
                subtitle=HDD_DEFAULT_SUBTITLE,
                genre=HDD_DEFAULT_GENRE,
                serial=next_hdd_serial(self._records[category.id], disk),
            )
        else:
            values["serial"] = self.suggest_serial(category.id)
        return values

    @staticmethod
    def validate_values(category_id: CategoryLike, values: Mapping[str, str]) -> Optional[str]:
        """
        编辑边界的校验：必填字段非空、序号符合格式。

        返回:
            错误信息；通过时返回 None
        """
        category = get_category(category_id)
        for f in category.fields:
            if f.required and not (values.get(f.key) or "").strip():
                return f"{f.label} 不能为空"
        serial = (values.get("serial") or "").strip()
        if category.serial_pattern is not None and serial and not category.serial_pattern.match(serial):
            return category.serial_pattern_hint or "序号格式不正确"
        return None

    # ------------------------------------------------------------------
    # 变更
    # ------------------------------------------------------------------

    def create(self, category_id: CategoryLike, values: Mapping[str, str]) -> MovieRecord:
        category = get_category(category_id)
        record = MovieRecord.from_values(self._clean_values(category.id, values))
        self._replace(category.id, self._records[category.id] + [record], "新增完成")
        return record

    def update(self, category_id: CategoryLike, record_id: str, values: Mapping[str, str]) -> MovieRecord:
        category = get_category(category_id)
        self.find(category.id, record_id)
        record = MovieRecord.from_values(self._clean_values(category.id, values), record_id=record_id)
        items = [record if r.id == record_id else r for r in self._records[category.id]]
        self._replace(category.id, items, "修改完成")
        return record

    def delete(self, category_id: CategoryLike, record_id: str) -> MovieRecord:
        category = get_category(category_id)
        record = self.find(category.id, record_id)
        items = [r for r in self._records[category.id] if r.id != record_id]
        self._replace(category.id, items, "删除完成")
        return record

    def save(self, label: str = "手动保存"):
        """把当前状态排队保存；未配置自动保存队列时抛出 RuntimeError。"""
        if self.autosave is None:
            raise RuntimeError("Catalog has no storage queue attached")
        self.last_save = self.autosave.submit(self.to_bytes(), label)
        return self.last_save

    # -- helpers -------------------------------------------------------------

    def _clean_values(self, category_id: CategoryId, values: Mapping[str, str]) -> Dict[str, str]:
        category = get_category(category_id)
        cleaned = {f.key: normalize_text(values.get(f.key)) for f in category.fields}
        error = self.validate_values(category_id, cleaned)
        if error:
            raise RecordValidationError(error)
        return cleaned

    def _replace(self, category_id: CategoryId, items: List[MovieRecord], label: str) -> None:
        self._records[category_id] = sort_category_records(category_id, items)
        if self.autosave is not None:
            self.last_save = self.autosave.submit(self.to_bytes(), label)
