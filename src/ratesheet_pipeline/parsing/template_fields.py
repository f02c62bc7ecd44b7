from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class TemplateField:
    """A column identifier a rate-sheet template can map a sheet column onto."""
    value: str
    label: str


# Closed vocabulary of template fields, grouped the way the mapping screen shows them.
TEMPLATE_FIELD_CATEGORIES: Mapping[str, tuple[TemplateField, ...]] = MappingProxyType({
    "Dest/Orig": (
        TemplateField("zone", "Zone"),
        TemplateField("zone_area", "Zone (Area)"),
        TemplateField("code", "Code"),
        TemplateField("code_area", "Code (Area)"),
        TemplateField("origin_set", "Origin Set"),
        TemplateField("origin_set_area", "Origin Set (Area)"),
        TemplateField("origin_code", "Origin Code"),
        TemplateField("location", "Location"),
    ),
    "Effective": (
        TemplateField("effective_date_time", "Effective Date/Time"),
        TemplateField("effective_time", "Effective Time"),
        TemplateField("end_date_time", "End Date/Time"),
        TemplateField("end_time_only", "End Time Only"),
        TemplateField("origin_code_effective_date", "Origin Code Effective Date"),
        TemplateField("origin_code_end_date", "Origin Code End Date"),
    ),
    "Rates": (
        TemplateField("recurring_charge", "Recurring Charge"),
        TemplateField("recurring_period", "Recurring Period"),
        TemplateField("initial_charge", "Initial Charge"),
        TemplateField("initial_period", "Initial Period"),
        TemplateField("connection_charge", "Connection Charge"),
    ),
    "Other": (
        TemplateField("time_class", "Time Class"),
        TemplateField("delete_status", "Delete Status"),
        TemplateField("blocked_status", "Blocked Status"),
        TemplateField("rate_matching", "Rate Matching"),
        TemplateField("missing_invalid", "Missing/Invalid"),
        TemplateField("omit_rates", "Omit Rates"),
    ),
})


class SheetType(str, Enum):
    rates1 = "rates1"
    rates2 = "rates2"
    codes = "codes"
    origin_codes = "origin_codes"


SHEET_TYPE_LABELS: Mapping[SheetType, str] = MappingProxyType({
    SheetType.rates1: "Rates 1",
    SheetType.rates2: "Rates 2",
    SheetType.codes: "Codes",
    SheetType.origin_codes: "Origin Codes",
})


class TimeClass(str, Enum):
    AnyDay = "AnyDay"
    Weekday = "Weekday"
    Weekend = "Weekend"
    Peak = "Peak"
    OffPeak = "OffPeak"


TIME_CLASS_LABELS: Mapping[TimeClass, str] = MappingProxyType({
    TimeClass.AnyDay: "Any Day",
    TimeClass.Weekday: "Weekday",
    TimeClass.Weekend: "Weekend",
    TimeClass.Peak: "Peak",
    TimeClass.OffPeak: "Off-Peak",
})

DECIMAL_SEPARATORS: tuple[TemplateField, ...] = (
    TemplateField(".", "Period (.)"),
    TemplateField(",", "Comma (,)"),
)

CODE_SHEET_TARGETS: tuple[str, ...] = ("Rates 1 Sheet", "Rates 2 Sheet", "Both Sheets")

# spreadsheet column letters a template may point at: A..Z, AA..AM
COLUMN_LETTERS: tuple[str, ...] = tuple(
    [chr(c) for c in range(ord("A"), ord("Z") + 1)]
    + [f"A{chr(c)}" for c in range(ord("A"), ord("M") + 1)]
)


_FIELD_TO_CATEGORY: Mapping[str, str] = MappingProxyType({
    f.value: category
    for category, fields in TEMPLATE_FIELD_CATEGORIES.items()
    for f in fields
})


def template_field_values() -> frozenset[str]:
    """All known template field identifiers."""
    return frozenset(_FIELD_TO_CATEGORY)


def category_of(field: str) -> str | None:
    """Category a template field belongs to, `None` if unknown."""
    return _FIELD_TO_CATEGORY.get(field)


def parse_time_class(v: str | None) -> TimeClass | None:
    """
    Match a time class by value or label, ignoring case, spaces and dashes.
    Unknown or empty -> `None`.
    """
    if v is None:
        return None
    key = v.replace(" ", "").replace("-", "").lower()
    if not key:
        return None
    for tc in TimeClass:
        if tc.value.lower() == key:
            return tc
    return None
