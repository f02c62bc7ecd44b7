from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Literal


class ShortCodePrefix(str, Enum):
    """
    Single-letter prefixes of human-friendly short codes (`C42`, `R7`, ...).

    Each prefix addresses exactly one kind of business entity.
    """
    C = "C"
    I = "I"  # noqa: E741
    S = "S"
    P = "P"
    R = "R"

    @property
    def entity_kind(self) -> str:
        return _ENTITY_KIND[self]

    @property
    def table_name(self) -> str:
        return _TABLE_NAME[self]


_ENTITY_KIND: dict[ShortCodePrefix, str] = {
    ShortCodePrefix.C: "carrier",
    ShortCodePrefix.I: "carrier_interconnect",
    ShortCodePrefix.S: "carrier_service",
    ShortCodePrefix.P: "customer_rating_plan",
    ShortCodePrefix.R: "routing_plan",
}

_TABLE_NAME: dict[ShortCodePrefix, str] = {
    ShortCodePrefix.C: "carriers",
    ShortCodePrefix.I: "carrier_interconnects",
    ShortCodePrefix.S: "carrier_services",
    ShortCodePrefix.P: "customer_rating_plans",
    ShortCodePrefix.R: "routing_plans",
}

_PREFIXES = "".join(p.value for p in ShortCodePrefix)
_SHORT_CODE = re.compile(rf"([{_PREFIXES}])(\d+)", re.ASCII)
_UUID = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)

IdentifierType = Literal["uuid", "shortCode", "code"]


@dataclass(frozen=True, slots=True)
class ShortCode:
    prefix: ShortCodePrefix
    sequence: int

    def __str__(self) -> str:
        return generate_short_code(self.prefix, self.sequence)


@dataclass(frozen=True, slots=True)
class ResolvedIdentifier:
    """How an incoming identifier should be looked up."""
    type: IdentifierType
    value: str


def generate_short_code(prefix: ShortCodePrefix | str, sequence: int) -> str:
    """`(C, 42)` -> `"C42"`."""
    p = ShortCodePrefix(prefix)
    if sequence < 0:
        raise ValueError(f"short code sequence must be non-negative, got {sequence}")
    return f"{p.value}{sequence}"


def parse_short_code(short_code: str) -> ShortCode | None:
    """Split `"C42"` into prefix and sequence. `None` when it is not a short code."""
    m = _SHORT_CODE.fullmatch(short_code)
    if m is None:
        return None
    return ShortCode(prefix=ShortCodePrefix(m.group(1)), sequence=int(m.group(2)))


def is_valid_short_code(short_code: str) -> bool:
    return _SHORT_CODE.fullmatch(short_code) is not None


def is_uuid(value: str) -> bool:
    return _UUID.fullmatch(value) is not None


def resolve_identifier(identifier: str) -> ResolvedIdentifier:
    """
    Classify an identifier as a UUID, a short code, or an opaque business code.

    Checked in that order; the shapes cannot overlap (a UUID has hyphens, a
    short code is one letter plus digits), anything else is passed through as
    a code unchanged.
    """
    if is_uuid(identifier):
        return ResolvedIdentifier(type="uuid", value=identifier)
    if is_valid_short_code(identifier):
        return ResolvedIdentifier(type="shortCode", value=identifier)
    return ResolvedIdentifier(type="code", value=identifier)
