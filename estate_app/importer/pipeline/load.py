"""
Importer step: insert surviving landlords and write the audit trail.

The insert is all-or-nothing. The activity log is written once per attempt
that gets this far; its per-row details are only written when the log itself
was stored. Audit failures are logged and counted but never undo the insert.
"""

from __future__ import annotations

from typing import Sequence

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config.monitoring import ImporterMonitoring
from estate_app.models import Landlord, LandlordStatus, OccupancyType, OnboardingStatus, db
from estate_app.services.activity_log_service import (
    ActionType,
    ActivityLogError,
    ActivityLogService,
    EntityType,
)

from .dedupe import SkippedRow
from .errors import LandlordInsertError
from .summary import ImportStage, ImportSummary
from .validation import ValidationResult


def _build_landlord(data: dict[str, object]) -> Landlord:
    return Landlord(
        title=data.get("title"),
        full_name=data["full_name"],
        phone=data["phone"],
        email=data.get("email"),
        house_address=data.get("house_address"),
        road=data["road"],
        zone=data.get("zone"),
        occupancy_type=OccupancyType(data["occupancy_type"]),
        date_of_birth=data.get("date_of_birth"),
        wedding_anniversary=data.get("wedding_anniversary"),
        celebrate_opt_in=bool(data.get("celebrate_opt_in")),
        onboarding_status=OnboardingStatus(data.get("onboarding_status") or "pending"),
        status=LandlordStatus(data.get("status") or "active"),
    )


def insert_landlords(rows: Sequence[ValidationResult], *, session: Session | None = None) -> int:
    """Insert all rows in one transaction and return the inserted count."""

    session = session or db.session
    if not rows:
        return 0
    landlords = [_build_landlord(row.normalized_data) for row in rows]
    try:
        session.add_all(landlords)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        current_app.logger.error("Landlord bulk insert violated a constraint: %s", exc.orig)
        raise LandlordInsertError("Failed to insert landlords", details=str(exc.orig)) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error("Landlord bulk insert failed: %s", exc, exc_info=True)
        raise LandlordInsertError("Failed to insert landlords", details=str(exc)) from exc
    return len(landlords)


def write_audit_trail(
    *,
    admin_id: int | None,
    total_rows: int,
    successful_rows: int,
    skipped: Sequence[SkippedRow],
    file_name: str | None = None,
    source: str = "csv",
    session: Session | None = None,
) -> int | None:
    """Write the import's activity log and its skipped-row details.

    Returns the activity log id, or ``None`` when the log could not be written.
    """

    session = session or db.session
    service = ActivityLogService(session)
    metadata = {
        "successful_rows": successful_rows,
        "skipped_rows": len(skipped),
        "source": source,
    }
    if file_name:
        metadata["file_name"] = file_name

    try:
        entry = service.log(
            admin_id=admin_id,
            action_type=ActionType.LANDLORD_CSV_IMPORT,
            entity_type=EntityType.LANDLORD,
            metadata=metadata,
            total_rows=total_rows,
            successful_rows=successful_rows,
            skipped_rows=len(skipped),
        )
    except (ActivityLogError, SQLAlchemyError) as exc:
        session.rollback()
        ImporterMonitoring.record_audit_failure(target="activity_log")
        current_app.logger.error(
            "Failed to write activity log for landlord import: %s",
            exc,
            extra={"total_rows": total_rows, "successful_rows": successful_rows},
        )
        return None

    if skipped:
        try:
            service.add_details(
                entry.id,
                (
                    {"row_number": row.row_number, "failure_reason": row.reason, "row_data": row.data}
                    for row in skipped
                ),
            )
        except SQLAlchemyError as exc:
            session.rollback()
            ImporterMonitoring.record_audit_failure(target="activity_log_details")
            current_app.logger.warning(
                "Failed to write %s activity log details for log %s: %s",
                len(skipped),
                entry.id,
                exc,
            )

    return entry.id


def run_import(
    to_insert: Sequence[ValidationResult],
    skipped: Sequence[SkippedRow],
    *,
    admin_id: int | None,
    total_rows: int | None = None,
    file_name: str | None = None,
    source: str = "csv",
    session: Session | None = None,
) -> ImportSummary:
    """Insert surviving rows, write the audit trail and summarize the attempt.

    ``total_rows`` defaults to the inserted plus skipped row count. Raises
    ``LandlordInsertError`` when the insert fails; no audit entry is written in
    that case.
    """

    successful_rows = insert_landlords(to_insert, session=session)
    if total_rows is None:
        total_rows = successful_rows + len(skipped)

    current_app.logger.info(
        "Landlord import inserted %s of %s rows (%s skipped)",
        successful_rows,
        total_rows,
        len(skipped),
        extra={"successful_rows": successful_rows, "skipped_rows": len(skipped)},
    )

    activity_log_id = write_audit_trail(
        admin_id=admin_id,
        total_rows=total_rows,
        successful_rows=successful_rows,
        skipped=skipped,
        file_name=file_name,
        source=source,
        session=session,
    )

    return ImportSummary(
        total_rows=total_rows,
        successful_rows=successful_rows,
        skipped_details=list(skipped),
        activity_log_id=activity_log_id,
        stage=ImportStage.LOGGED if activity_log_id is not None else ImportStage.INSERTED,
    )
