from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .types import ErrorKind


class BillingIncrement(str, Enum):
    """Canonical "initial period / subsequent increment" pairs, in seconds."""
    per_second = "1/1"
    six_six = "6/6"
    thirty_thirty = "30/30"
    per_minute = "60/60"
    thirty_six = "30/6"
    sixty_six = "60/6"
    sixty_one = "60/1"


# ordered as displayed in error messages
VALID_BILLING_INCREMENTS: tuple[str, ...] = tuple(b.value for b in BillingIncrement)

DEFAULT_BILLING_INCREMENT = BillingIncrement.per_minute

_SEPARATORS = re.compile(r"[-:]")
_WHITESPACE = re.compile(r"\s+")
_BARE_INT = re.compile(r"(\d+)", re.ASCII)
_PAIR = re.compile(r"(\d+)/(\d+)", re.ASCII)


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Exactly one of `normalized_value` / `error` is populated."""
    normalized_value: BillingIncrement | None
    error: str | None
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def normalize_billing_increment(value: Any) -> NormalizationResult:
    """
    Map free-text increment notation onto a `BillingIncrement`.

    Accepted notations: `60/6`, `60-6`, `60:6`, ` 60 / 6 `, and the symmetric
    shorthand `60` (meaning `60/60`). A missing value defaults to `60/60`.
    Error messages always quote the value as it was given.
    """
    if value is None or value == "":
        return NormalizationResult(DEFAULT_BILLING_INCREMENT, None)

    original = str(value)
    cleaned = original.strip().lower()
    if cleaned == "":
        return NormalizationResult(DEFAULT_BILLING_INCREMENT, None)

    cleaned = _SEPARATORS.sub("/", cleaned)
    cleaned = _WHITESPACE.sub("", cleaned)

    bare = _BARE_INT.fullmatch(cleaned)
    if bare:
        cleaned = f"{bare.group(1)}/{bare.group(1)}"

    pair = _PAIR.fullmatch(cleaned)
    if pair is None:
        return NormalizationResult(
            None,
            f'Invalid format "{original}". Expected format like "60/60", "60/1", "30/6", etc.',
            ErrorKind.invalid_format,
        )

    candidate = f"{pair.group(1)}/{pair.group(2)}"
    if candidate in VALID_BILLING_INCREMENTS:
        return NormalizationResult(BillingIncrement(candidate), None)

    return NormalizationResult(
        None,
        f'Invalid billing increment "{original}". Valid values: {", ".join(VALID_BILLING_INCREMENTS)}',
        ErrorKind.invalid_increment,
    )


def split_billing_increment(value: BillingIncrement | str) -> tuple[int, int]:
    """`"60/6"` -> `(60, 6)`, i.e. (initial period, recurring period)."""
    raw = value.value if isinstance(value, BillingIncrement) else str(value)
    first, second = raw.split("/", 1)
    return int(first), int(second)
