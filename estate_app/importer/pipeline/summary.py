"""
Result types shared by the import pipeline steps.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from .dedupe import SkippedRow


class ImportStage(str, enum.Enum):
    """Lifecycle of one import attempt."""

    RECEIVED = "received"
    VALIDATED = "validated"
    DEDUPLICATED = "deduplicated"
    INSERTED = "inserted"
    LOGGED = "logged"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class ImportSummary:
    """Outcome of an import; ``total_rows == successful_rows + skipped_rows``."""

    total_rows: int
    successful_rows: int
    skipped_details: list[SkippedRow] = field(default_factory=list)
    activity_log_id: int | None = None
    stage: ImportStage = ImportStage.COMPLETE
    dry_run: bool = False

    @property
    def skipped_rows(self) -> int:
        return len(self.skipped_details)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "total_rows": self.total_rows,
            "successful_rows": self.successful_rows,
            "skipped_rows": self.skipped_rows,
            "skipped_details": [row.as_dict() for row in sorted(self.skipped_details, key=lambda r: r.row_number)],
            "activity_log_id": self.activity_log_id,
        }
        if self.dry_run:
            payload["dry_run"] = True
        return payload
