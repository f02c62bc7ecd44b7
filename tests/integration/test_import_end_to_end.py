from __future__ import annotations

import io
from pathlib import Path

import pytest

from ratesheet_pipeline.cli.loader import import_file
from ratesheet_pipeline.db.az_destinations import (
    export_destinations_csv,
    get_destination_by_code,
    get_regions,
    list_destinations,
    normalize_code,
)
from ratesheet_pipeline.db.import_runs import get_import_run
from ratesheet_pipeline.db.validation_errors import count_validation_errors

pytestmark = pytest.mark.integration


SHEET = """Dst Code,Destination,Country,Billing Increment,Grace Period
44,United Kingdom,Europe,60-6,
447,United Kingdom Mobile,Europe,1,3
1,USA,North America,,
"""


def _sheet(tmp_path: Path, text: str, name: str = "rates.csv") -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_import_then_reimport_counts(conn, tmp_path: Path) -> None:
    first = import_file(conn, input_path=_sheet(tmp_path, SHEET))
    assert (first.total, first.inserted, first.updated, first.skipped) == (3, 3, 0, 0)
    assert get_import_run(conn, run_id=first.run_id).status == "succeeded"

    uk = get_destination_by_code(conn, "44")
    assert uk is not None
    assert uk.billing_increment == "60/6"
    assert (uk.initial_period, uk.recurring_period) == (60, 6)
    assert uk.grace_period == 0
    assert get_destination_by_code(conn, "1").billing_increment == "60/60"

    changed = SHEET.replace("447,United Kingdom Mobile,Europe,1,3", "447,UK Mobile,Europe,1,3")
    second = import_file(conn, input_path=_sheet(tmp_path, changed, "rates2.csv"))
    assert (second.inserted, second.updated, second.skipped) == (0, 1, 2)


def test_replace_mode_drops_missing_codes(conn, tmp_path: Path) -> None:
    import_file(conn, input_path=_sheet(tmp_path, SHEET))
    summary = import_file(
        conn,
        input_path=_sheet(tmp_path, "code,destination\n33,France\n", "fr.csv"),
        mode="replace",
    )
    assert summary.inserted == 1
    page, total = list_destinations(conn)
    assert total == 1
    assert [d.code for d in page] == ["33"]


def test_rejected_sheet_persists_errors_only(conn, tmp_path: Path) -> None:
    summary = import_file(conn, input_path=_sheet(tmp_path, "code,destination,billingIncrement\n44,,abc\n"))
    assert summary.rejected
    assert get_import_run(conn, run_id=summary.run_id).status == "rejected"
    assert count_validation_errors(conn, run_id=summary.run_id) == 2
    assert list_destinations(conn)[1] == 0


def test_lookups_and_export(conn, tmp_path: Path) -> None:
    import_file(conn, input_path=_sheet(tmp_path, SHEET))

    assert normalize_code(conn, "447700900123").code == "447"
    assert normalize_code(conn, "4420").code == "44"
    assert normalize_code(conn, "99") is None
    assert get_regions(conn) == ["Europe", "North America"]

    page, total = list_destinations(conn, search="united", limit=1)
    assert total == 2
    assert [d.code for d in page] == ["44"]

    out = io.StringIO()
    assert export_destinations_csv(conn, out) == 3
    assert out.getvalue().splitlines()[0] == "code,destination,region,billingIncrement,gracePeriod"
    assert out.getvalue().splitlines()[1] == "1,USA,North America,60/60,0"
