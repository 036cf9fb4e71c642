"""
Workbook engine subpackage.

Public API:
  - WorkbookReader / parse_workbook / parse_workbook_with_report
  - create_workbook_bytes / build_rows      (writer)
  - sort_category_records / compare_text    (ordering)
  - parse_integer_serial / parse_range_serial / RangeSerial
  - parse_chinese_numeral / parse_disk_order
  - normalize_text / DataCleaner
  - classify_layout                         (layout classifier)
  - HeaderDetector
  - ReaderConfig / DEFAULT_CONFIG
"""

from filmdb.workbook.config import DEFAULT_CONFIG, ReaderConfig
from filmdb.workbook.data_cleaner import DataCleaner, normalize_text
from filmdb.workbook.header_detector import HeaderDetector
from filmdb.workbook.layout import classify_layout
from filmdb.workbook.numerals import parse_chinese_numeral, parse_disk_order
from filmdb.workbook.ordering import compare_text, sort_category_records
from filmdb.workbook.reader import WorkbookReader, parse_workbook, parse_workbook_with_report
from filmdb.workbook.serials import RangeSerial, parse_integer_serial, parse_range_serial
from filmdb.workbook.writer import build_rows, create_workbook_bytes

__all__ = [
    "DEFAULT_CONFIG",
    "ReaderConfig",
    "DataCleaner",
    "normalize_text",
    "HeaderDetector",
    "classify_layout",
    "parse_chinese_numeral",
    "parse_disk_order",
    "compare_text",
    "sort_category_records",
    "WorkbookReader",
    "parse_workbook",
    "parse_workbook_with_report",
    "RangeSerial",
    "parse_integer_serial",
    "parse_range_serial",
    "build_rows",
    "create_workbook_bytes",
]
