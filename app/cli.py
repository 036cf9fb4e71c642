import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from filmdb.catalog import Catalog
from filmdb.config import get_settings
from filmdb.errors import FilmDbError, MalformedWorkbook, StorageNotFound
from filmdb.ir import MovieRecord
from filmdb.logger import set_level
from filmdb.schema import category_ids, get_category
from filmdb.storage import AutoSaveQueue, LocalFileStorage


def parse_assignments(pairs: List[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for raw in pairs:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected key=value, got {raw!r}")
        values[key.strip()] = value
    return values


def format_record(category_id: str, index: int, record: MovieRecord) -> str:
    category = get_category(category_id)
    cells = [record.get(f.key) for f in category.fields]
    return f"{index:>5}  " + "\t".join(cells)


def print_records(category_id: str, records: List[MovieRecord]) -> None:
    category = get_category(category_id)
    print("#      " + "\t".join(category.field_labels))
    for idx, record in enumerate(records, start=1):
        print(format_record(category_id, idx, record))
    print(f"[{category.label}] {len(records)} records")


def pick_record(catalog: Catalog, category_id: str, index: int) -> MovieRecord:
    records = catalog.records(category_id)
    if not 1 <= index <= len(records):
        raise IndexError(f"index {index} out of range 1..{len(records)}")
    return records[index - 1]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Maintain the film catalogue workbook (DVD / Blu-ray / collector Blu-ray / hard disk)."
    )
    parser.add_argument(
        "--data-file",
        default=settings.DATA_FILE,
        help="Workbook path (default: FILMDB_DATA_FILE or data.xls).",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["xls", "xlsx"],
        default=settings.OUTPUT_FORMAT,
        help="Format used when saving (default: FILMDB_OUTPUT_FORMAT or xls).",
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        help="Logging level (default: FILMDB_LOG_LEVEL or INFO).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List records of a category in canonical order.")
    p_list.add_argument("category", choices=category_ids())

    p_search = sub.add_parser("search", help="Substring search; hdd also accepts disk.serial.title.")
    p_search.add_argument("category", choices=category_ids())
    p_search.add_argument("keyword")

    p_add = sub.add_parser("add", help="Add a record; serial is suggested when omitted.")
    p_add.add_argument("category", choices=category_ids())
    p_add.add_argument("values", nargs="*", metavar="key=value")

    p_update = sub.add_parser("update", help="Update the record at INDEX (as shown by list).")
    p_update.add_argument("category", choices=category_ids())
    p_update.add_argument("index", type=int)
    p_update.add_argument("values", nargs="+", metavar="key=value")

    p_delete = sub.add_parser("delete", help="Delete the record at INDEX (as shown by list).")
    p_delete.add_argument("category", choices=category_ids())
    p_delete.add_argument("index", type=int)

    p_export = sub.add_parser("export", help="Write the catalogue to another workbook file.")
    p_export.add_argument("output")

    sub.add_parser("report", help="Show which sheet and layout each category was read from.")
    return parser.parse_args(argv)


def load_catalog(catalog: Catalog, storage: LocalFileStorage) -> None:
    try:
        catalog.load_bytes(storage.load())
    except StorageNotFound:
        print(f"[warn] {storage.path} not found; starting with an empty catalogue.")
        catalog.load_empty()


def run_command(args: argparse.Namespace, catalog: Catalog) -> int:
    cmd = args.command
    if cmd == "list":
        print_records(args.category, catalog.records(args.category))
    elif cmd == "search":
        print_records(args.category, catalog.search(args.category, args.keyword))
    elif cmd == "add":
        given = parse_assignments(args.values)
        values = catalog.default_form_values(args.category)
        values.update(given)
        if "serial" not in given:
            values["serial"] = catalog.suggest_serial(args.category, disk=values.get("disk", ""))
        record = catalog.create(args.category, values)
        print("added:", format_record(args.category, catalog.records(args.category).index(record) + 1, record))
    elif cmd == "update":
        current = pick_record(catalog, args.category, args.index)
        values = dict(current.values)
        values.update(parse_assignments(args.values))
        record = catalog.update(args.category, current.id, values)
        print("updated:", format_record(args.category, catalog.records(args.category).index(record) + 1, record))
    elif cmd == "delete":
        current = pick_record(catalog, args.category, args.index)
        catalog.delete(args.category, current.id)
        print("deleted:", format_record(args.category, args.index, current))
    elif cmd == "export":
        output = Path(args.output).expanduser()
        fmt = "xlsx" if output.suffix.lower() == ".xlsx" else "xls"
        LocalFileStorage(output).save(catalog.to_bytes(fmt))
        print("exported:", output)
    elif cmd == "report":
        report = catalog.last_report
        if report is None:
            print("nothing loaded")
            return 0
        print("sheets:", ", ".join(report.sheet_names))
        for stats in report.categories.values():
            print(
                f"{stats.category}: sheet={stats.sheet_name} layout={stats.layout} "
                f"kept={stats.kept} dropped={stats.dropped}"
                + (f" error={stats.error}" if stats.error else "")
            )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    set_level(args.log_level)

    storage = LocalFileStorage(args.data_file)
    autosave = AutoSaveQueue(storage)
    catalog = Catalog(autosave=autosave, output_format=args.output_format)
    try:
        try:
            load_catalog(catalog, storage)
        except MalformedWorkbook as exc:
            print(f"[error] cannot read {storage.path}: {exc}")
            return 1
        try:
            code = run_command(args, catalog)
        except (FilmDbError, ValueError, IndexError) as exc:
            print(f"[error] {exc}")
            return 1
        autosave.join()
        if catalog.last_save is not None and catalog.last_save.exception() is not None:
            print(f"[error] autosave failed: {catalog.last_save.exception()}")
            return 1
        return code
    finally:
        autosave.close()


if __name__ == "__main__":
    raise SystemExit(main())
