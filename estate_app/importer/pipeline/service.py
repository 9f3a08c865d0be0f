"""
Landlord import orchestration shared by the HTTP views and the CLI.

``import_landlords`` walks one attempt through
received -> validated -> deduplicated -> inserted -> logged -> complete and
ends in ``failed`` when the duplicate lookup or the insert raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from flask import current_app
from sqlalchemy.orm import Session

from config.monitoring import ImporterMonitoring
from estate_app.importer.adapters import LandlordCSVAdapter

from .dedupe import SkippedRow, filter_existing
from .errors import LandlordImportError
from .load import run_import
from .summary import ImportStage, ImportSummary
from .validation import (
    DEFAULT_ZONE,
    BatchValidationSummary,
    ValidationResult,
    partition_results,
    summarize_results,
    validate_batch,
)


@dataclass(frozen=True)
class ImportPreview:
    """Validation-only view of a file, shown before the admin confirms."""

    results: tuple[ValidationResult, ...]
    summary: BatchValidationSummary

    def as_dict(self) -> dict[str, Any]:
        return {
            **self.summary.as_dict(),
            "results": [result.as_dict() for result in self.results],
        }


class _StageTracker:
    def __init__(self, import_id: str) -> None:
        self.import_id = import_id
        self.stage = ImportStage.RECEIVED

    def advance(self, stage: ImportStage) -> None:
        current_app.logger.debug("Landlord import %s: %s -> %s", self.import_id, self.stage.value, stage.value)
        self.stage = stage


def _default_zone() -> str:
    return current_app.config.get("IMPORTER_DEFAULT_ZONE") or DEFAULT_ZONE


def read_csv_rows(payload: bytes) -> list[dict[str, str]]:
    """Parse uploaded CSV bytes into rows keyed by canonical field names."""

    return LandlordCSVAdapter.from_bytes(payload).read_rows()


def preview_landlords(rows: Sequence[Mapping[str, Any]]) -> ImportPreview:
    results = validate_batch(rows, default_zone=_default_zone())
    return ImportPreview(results=tuple(results), summary=summarize_results(results))


def import_landlords(
    rows: Sequence[Mapping[str, Any]],
    *,
    admin_id: int | None,
    file_name: str | None = None,
    source: str = "csv",
    dry_run: bool = False,
    session: Session | None = None,
) -> ImportSummary:
    """Validate, de-duplicate and insert landlord rows.

    Validation failures and store duplicates come back as skipped rows on the
    summary. ``LandlordImportError`` subclasses propagate unchanged after the
    attempt is recorded as failed; nothing is inserted in that case.
    """

    tracker = _StageTracker(file_name or source)
    total_rows = len(rows)
    current_app.logger.info(
        "Landlord import received %s rows from %s",
        total_rows,
        source,
        extra={"import_source": source, "file_name": file_name, "dry_run": dry_run},
    )

    results = validate_batch(rows, default_zone=_default_zone())
    valid, invalid = partition_results(results)
    skipped: list[SkippedRow] = [SkippedRow.from_invalid(result) for result in invalid]
    tracker.advance(ImportStage.VALIDATED)

    try:
        filtered = filter_existing(valid, session=session)
        skipped.extend(filtered.rejected)
        tracker.advance(ImportStage.DEDUPLICATED)

        if dry_run:
            summary = ImportSummary(
                total_rows=total_rows,
                successful_rows=len(filtered.to_insert),
                skipped_details=sorted(skipped, key=lambda row: row.row_number),
                stage=tracker.stage,
                dry_run=True,
            )
            ImporterMonitoring.record_import(outcome="dry_run", source=source)
            return summary

        summary = run_import(
            filtered.to_insert,
            sorted(skipped, key=lambda row: row.row_number),
            admin_id=admin_id,
            total_rows=total_rows,
            file_name=file_name,
            source=source,
            session=session,
        )
    except LandlordImportError as exc:
        tracker.advance(ImportStage.FAILED)
        ImporterMonitoring.record_import(outcome="failed", source=source)
        current_app.logger.error(
            "Landlord import failed: %s (%s)",
            exc,
            exc.details,
            extra={"import_source": source, "file_name": file_name},
        )
        raise

    tracker.advance(ImportStage.INSERTED)
    if summary.activity_log_id is not None:
        tracker.advance(ImportStage.LOGGED)
    tracker.advance(ImportStage.COMPLETE)
    summary.stage = tracker.stage

    ImporterMonitoring.record_import(
        outcome="succeeded",
        source=source,
        inserted=summary.successful_rows,
        invalid=len(invalid),
        duplicates=len(filtered.rejected),
    )
    current_app.logger.info(
        "Landlord import complete: %s total, %s inserted, %s skipped",
        summary.total_rows,
        summary.successful_rows,
        summary.skipped_rows,
        extra={"activity_log_id": summary.activity_log_id},
    )
    return summary
