from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping, Sequence

from .adapter import AZ_INPUT_ALIASES, adapt_row
from .primitives import (
    ParseError,
    normalize_cell,
    parse_optional_date,
    parse_optional_int,
    parse_optional_text,
    parse_verbatim_text,
    strip_cell,
)
from .template_fields import TimeClass, parse_time_class
from .types import ErrorKind, ValidationError

# Typing:
# Getter pulls a field's raw value out of the canonical mapping.
# Parser coerces that raw value into the schema type.
Getter = Callable[[Mapping[str, Any]], Any]
Parser = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class AZRateRow:
    """
    One AZ destination row, as mapped in from a rate sheet.

    `code`, `destination` and `billing_increment` stay as (trimmed) text here:
    checking them is the validator's job, so a row with bad values can still
    be represented and reported on.
    """
    code: str | None = None
    destination: str | None = None
    region: str | None = None
    billing_increment: str | None = None
    grace_period: int | None = None
    effective_date: date | None = None
    time_class: TimeClass | None = None
    source_row: int | None = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    def to_mapping(self) -> dict[str, Any]:
        """Values ready for the `az_destinations` insert."""
        return {
            "code": self.code,
            "destination": self.destination,
            "region": self.region,
            "billing_increment": self.billing_increment,
            "grace_period": self.grace_period,
            "effective_date": self.effective_date,
            "time_class": self.time_class.value if self.time_class is not None else None,
        }


def _parse_time_class(v: Any) -> TimeClass:
    tc = parse_time_class(str(v))
    if tc is None:
        allowed = ", ".join(t.value for t in TimeClass)
        raise ParseError(ErrorKind.invalid_format, f"time_class: unknown time class {v!r} (expected one of {allowed})")
    return tc


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Any given field's configurable expectations."""
    out_name: str               # attribute name on `AZRateRow`
    column: str                 # column label used in error reports
    getter: Getter
    parser: Parser
    cleaner: Parser = normalize_cell    # how an empty cell is recognised before parsing


@dataclass(frozen=True, slots=True)
class RowMapper:
    """
    Map a single raw row onto `AZRateRow`.

    Every field is attempted: a field that fails to parse is left `None` and
    reported, the remaining fields are still mapped.
    """
    fields: Sequence[FieldSpec]
    aliases: Mapping[str, str] = field(default_factory=lambda: AZ_INPUT_ALIASES)

    def map(self, raw: Mapping[str, Any], *, source_row: int) -> tuple[AZRateRow, list[ValidationError]]:
        canonical, extras = adapt_row(raw, aliases=self.aliases)

        out: dict[str, Any] = {}
        errors: list[ValidationError] = []
        for f in self.fields:
            raw_v = f.cleaner(f.getter(canonical))
            if raw_v is None:
                out[f.out_name] = None
                continue
            try:
                out[f.out_name] = f.parser(raw_v)
            except ParseError as e:
                out[f.out_name] = None
                errors.append(
                    ValidationError(
                        row=source_row,
                        column=f.column,
                        value=str(raw_v),
                        message=e.detail,
                        kind=e.kind,
                    )
                )

        return AZRateRow(**out, source_row=source_row, extras=extras), errors


az_row_mapper = RowMapper(
    fields=[
        FieldSpec("code", "code", lambda r: r.get("code"), parse_optional_text),
        FieldSpec("destination", "destination", lambda r: r.get("destination"), parse_optional_text),
        FieldSpec("region", "region", lambda r: r.get("region"), parse_optional_text),
        # placeholders like "N/A" must reach the increment check, not default to 60/60
        FieldSpec(
            "billing_increment",
            "billingIncrement",
            lambda r: r.get("billing_increment"),
            parse_verbatim_text,
            cleaner=strip_cell,
        ),
        FieldSpec(
            "grace_period",
            "gracePeriod",
            lambda r: r.get("grace_period"),
            lambda v: parse_optional_int(v, field="grace_period"),
        ),
        FieldSpec(
            "effective_date",
            "effectiveDate",
            lambda r: r.get("effective_date"),
            lambda v: parse_optional_date(v, field="effective_date"),
        ),
        FieldSpec("time_class", "timeClass", lambda r: r.get("time_class"), _parse_time_class),
    ],
)


def to_az_rate_row(raw: Mapping[str, Any], *, source_row: int) -> tuple[AZRateRow, list[ValidationError]]:
    """Map a single sheet row (keyed by its header names)."""
    return az_row_mapper.map(raw, source_row=source_row)
