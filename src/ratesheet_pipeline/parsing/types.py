from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence


class ErrorKind(str, Enum):
    """Typed validation error classifications."""
    invalid_format = "invalid_format"           # not `int/int` after cleanup
    invalid_increment = "invalid_increment"     # `int/int` but not a canonical increment
    missing_required = "missing_required"


@dataclass(frozen=True, slots=True)
class ValidationError:
    """One problem found in one cell of an uploaded sheet."""
    row: int                # 1-based spreadsheet row, header is row 1
    column: str
    value: str              # the original cell value, `""` when empty
    message: str
    kind: ErrorKind = ErrorKind.missing_required


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """
    Outcome of validating a whole data set.

    `normalized_data` always has the same length and order as the input,
    including rows that failed.
    """
    errors: Sequence[ValidationError]
    normalized_data: Sequence[Any] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

