from __future__ import annotations

import pytest

from ratesheet_pipeline.parsing.template_fields import (
    COLUMN_LETTERS,
    TEMPLATE_FIELD_CATEGORIES,
    SheetType,
    TimeClass,
    category_of,
    parse_time_class,
    template_field_values,
)


def test_categories_are_the_closed_set() -> None:
    assert list(TEMPLATE_FIELD_CATEGORIES) == ["Dest/Orig", "Effective", "Rates", "Other"]


def test_field_values_are_unique_across_categories() -> None:
    all_values = [f.value for fields in TEMPLATE_FIELD_CATEGORIES.values() for f in fields]
    assert len(all_values) == len(set(all_values)) == len(template_field_values())


def test_category_lookup() -> None:
    assert category_of("code") == "Dest/Orig"
    assert category_of("initial_period") == "Rates"
    assert category_of("blocked_status") == "Other"
    assert category_of("nope") is None


def test_tables_are_immutable() -> None:
    with pytest.raises(TypeError):
        TEMPLATE_FIELD_CATEGORIES["Extra"] = ()  # type: ignore[index]


def test_sheet_types_and_time_classes() -> None:
    assert [s.value for s in SheetType] == ["rates1", "rates2", "codes", "origin_codes"]
    assert [t.value for t in TimeClass] == ["AnyDay", "Weekday", "Weekend", "Peak", "OffPeak"]


@pytest.mark.parametrize(
    "raw, expected",
    [("AnyDay", TimeClass.AnyDay), ("any day", TimeClass.AnyDay), ("Off-Peak", TimeClass.OffPeak), ("PEAK", TimeClass.Peak)],
)
def test_parse_time_class(raw: str, expected: TimeClass) -> None:
    assert parse_time_class(raw) == expected


def test_parse_time_class_unknown() -> None:
    assert parse_time_class("Lunch") is None
    assert parse_time_class("") is None


def test_column_letters() -> None:
    assert COLUMN_LETTERS[0] == "A"
    assert COLUMN_LETTERS[25] == "Z"
    assert COLUMN_LETTERS[-1] == "AM"
    assert len(COLUMN_LETTERS) == 39
