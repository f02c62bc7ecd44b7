from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Iterator, Mapping

from openpyxl import load_workbook


def stream_csv_dict_rows(path: Path) -> Iterator[tuple[int, Mapping[str, Any]]]:
    """
    Yields `(source_row, dict)` for CSV data rows.

    `source_row` is 1-based for the first real data row encountered, header is not counted.
    `utf-8-sig` drops the BOM spreadsheet exports like to prepend.
    """
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for i, row in enumerate(reader, start=1):
            # csv.DictReader returns dict[str, str | None]
            yield i, row    # pairs


def stream_jsonl_dict_rows(path: Path) -> Iterator[tuple[int, Mapping[str, Any]]]:
    """
    Yields `(source_row, dict)` for JSONL lines.

    `source_row` counts objects, blank lines are skipped and not counted.
    """
    with path.open("r", encoding="utf-8") as f:
        n = 0
        for lineno, line in enumerate(f, start=1):
            s = line.strip()
            if not s:
                continue
            obj = json.loads(s)
            if not isinstance(obj, dict):
                raise ValueError(f"JSONL line {lineno} is not an object")
            n += 1
            yield n, obj


def stream_xlsx_dict_rows(path: Path, *, sheet_name: str | None = None) -> Iterator[tuple[int, Mapping[str, Any]]]:
    """
    Yields `(source_row, dict)` for a worksheet (the active one unless `sheet_name`).

    The first row is the header. Blank header cells get `column_<n>` names.
    Fully blank data rows are skipped but still counted, so `source_row + 1`
    stays the row number shown in the spreadsheet.
    """
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb[sheet_name] if sheet_name else wb.active
        rows = ws.iter_rows(values_only=True)

        header_cells = next(rows, None)
        if header_cells is None:
            return
        header = [
            str(h).strip() if h is not None and str(h).strip() else f"column_{n}"
            for n, h in enumerate(header_cells, start=1)
        ]

        for i, cells in enumerate(rows, start=1):
            if all(c is None or (isinstance(c, str) and not c.strip()) for c in cells):
                continue
            yield i, dict(zip(header, cells))
    finally:
        wb.close()


def stream_rows(path: Path, *, sheet_name: str | None = None) -> Iterator[tuple[int, Mapping[str, Any]]]:
    """Pick a reader from the file suffix."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return stream_csv_dict_rows(path)
    if suffix in (".jsonl", ".ndjson"):
        return stream_jsonl_dict_rows(path)
    if suffix in (".xlsx", ".xlsm"):
        return stream_xlsx_dict_rows(path, sheet_name=sheet_name)
    raise ValueError(f"Unsupported input file type: {path.name} (expected .csv, .jsonl or .xlsx)")
