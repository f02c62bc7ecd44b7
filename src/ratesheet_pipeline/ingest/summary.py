from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Sequence
from uuid import UUID

from ratesheet_pipeline.parsing.types import ValidationError
from ratesheet_pipeline.parsing.validator import format_validation_errors


ImportMode = Literal["update", "replace"]


@dataclass(frozen=True)
class ImportSummary:
    """Schema for all summary data that will be recorded."""
    run_id: UUID
    input_path: str
    mode: ImportMode
    total: int
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    errors: Sequence[ValidationError] = field(default_factory=tuple)

    @property
    def rejected(self) -> bool:
        return len(self.errors) > 0

    def render_one_line(self) -> str:
        """How each line of summary is formatted for the terminal."""
        if self.rejected:
            return (
                f"az_destinations: total={self.total} rejected errors={len(self.errors)} "
                f"mode={self.mode} run_id={self.run_id}"
            )
        return (
            f"az_destinations: total={self.total} inserted={self.inserted} updated={self.updated} "
            f"skipped={self.skipped} mode={self.mode} run_id={self.run_id}"
        )

    def render_errors(self, max_errors: int = 10) -> str:
        return format_validation_errors(self.errors, max_errors=max_errors)
