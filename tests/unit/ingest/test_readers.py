from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook

from ratesheet_pipeline.ingest.readers import (
    stream_csv_dict_rows,
    stream_jsonl_dict_rows,
    stream_rows,
    stream_xlsx_dict_rows,
)


def test_csv_rows_are_numbered_from_one(write_csv) -> None:
    p = write_csv("\ufeffcode,destination\n44,UK\n33,France\n")
    rows = list(stream_csv_dict_rows(p))
    assert rows == [(1, {"code": "44", "destination": "UK"}), (2, {"code": "33", "destination": "France"})]


def test_jsonl_skips_blank_lines(tmp_path: Path) -> None:
    p = tmp_path / "rates.jsonl"
    p.write_text('{"code": "44"}\n\n{"code": "33"}\n', encoding="utf-8")
    assert list(stream_jsonl_dict_rows(p)) == [(1, {"code": "44"}), (2, {"code": "33"})]


def test_jsonl_rejects_non_objects(tmp_path: Path) -> None:
    p = tmp_path / "rates.jsonl"
    p.write_text('["44"]\n', encoding="utf-8")
    with pytest.raises(ValueError, match="line 1"):
        list(stream_jsonl_dict_rows(p))


def _write_xlsx(path: Path, rows: list[list[object]], *, title: str = "Codes") -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for r in rows:
        ws.append(r)
    wb.save(path)
    return path


def test_xlsx_rows_keep_spreadsheet_numbering(tmp_path: Path) -> None:
    p = _write_xlsx(
        tmp_path / "rates.xlsx",
        [
            ["Dst Code", "Destination", None],
            [44, "UK", "x"],
            [None, None, None],
            [33, "France", None],
        ],
    )
    rows = list(stream_xlsx_dict_rows(p))
    assert rows == [
        (1, {"Dst Code": 44, "Destination": "UK", "column_3": "x"}),
        (3, {"Dst Code": 33, "Destination": "France", "column_3": None}),
    ]


def test_xlsx_named_sheet(tmp_path: Path) -> None:
    p = tmp_path / "rates.xlsx"
    wb = Workbook()
    wb.active.append(["ignored"])
    other = wb.create_sheet("Rates 1")
    other.append(["code", "destination"])
    other.append(["1", "USA"])
    wb.save(p)

    assert list(stream_xlsx_dict_rows(p, sheet_name="Rates 1")) == [(1, {"code": "1", "destination": "USA"})]


def test_stream_rows_dispatches_on_suffix(tmp_path: Path, write_csv) -> None:
    p = write_csv("code\n1\n", name="RATES.CSV")
    assert list(stream_rows(p)) == [(1, {"code": "1"})]

    with pytest.raises(ValueError, match="Unsupported"):
        stream_rows(tmp_path / "rates.pdf")
