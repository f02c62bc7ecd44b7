from __future__ import annotations

import io
from datetime import datetime, timezone
from uuid import UUID

from ratesheet_pipeline.db.az_destinations import AZDestination, upsert_params, write_destinations_csv


def test_upsert_params_split_the_increment_into_periods() -> None:
    params = upsert_params({"code": "44", "destination": "UK", "billing_increment": "30/6", "grace_period": 2})
    assert params == ("44", "UK", None, "30/6", 30, 6, 2, None, None)


def test_upsert_params_default_a_missing_increment() -> None:
    params = upsert_params({"code": "1", "destination": "USA", "billing_increment": None})
    assert params[3:6] == ("60/60", 60, 60)


def test_export_writes_header_and_rows() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    uk = AZDestination(
        id=UUID("00000000-0000-0000-0000-000000000044"),
        code="44",
        destination="United Kingdom",
        region=None,
        billing_increment="60/6",
        initial_period=60,
        recurring_period=6,
        grace_period=0,
        effective_date=None,
        time_class=None,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    out = io.StringIO()
    assert write_destinations_csv([uk], out) == 1
    assert out.getvalue() == "code,destination,region,billingIncrement,gracePeriod\n44,United Kingdom,,60/6,0\n"
