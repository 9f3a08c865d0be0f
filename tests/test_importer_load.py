from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from estate_app.importer.pipeline.dedupe import SkippedRow
from estate_app.importer.pipeline.errors import LandlordInsertError
from estate_app.importer.pipeline.load import insert_landlords, run_import, write_audit_trail
from estate_app.importer.pipeline.summary import ImportStage
from estate_app.importer.pipeline.validation import validate_batch
from estate_app.models import ActivityLog, ActivityLogDetail, Landlord, LandlordStatus, OccupancyType, db


def _results(*rows):
    results = validate_batch(list(rows))
    assert all(result.is_valid for result in results)
    return results


def _row(phone, **overrides):
    row = {"full_name": "Ada Obi", "phone": phone, "occupancy_type": "tenant", "road": "Road 4"}
    row.update(overrides)
    return row


def test_insert_landlords_persists_normalized_rows():
    results = _results(_row("08012345678", date_of_birth="25-12", celebrate_opt_in="yes"))

    inserted = insert_landlords(results)

    assert inserted == 1
    landlord = Landlord.query.one()
    assert landlord.phone == "+2348012345678"
    assert landlord.occupancy_type is OccupancyType.TENANT
    assert landlord.status is LandlordStatus.ACTIVE
    assert landlord.zone == "Zone D"
    assert landlord.date_of_birth == "12-25"
    assert landlord.celebrate_opt_in is True
    assert landlord.to_dict()["onboarding_status"] == "pending"


def test_insert_landlords_rolls_back_the_whole_batch(existing_landlord):
    # The second row collides with the stored phone; nothing from the batch survives.
    results = _results(_row("08022222222"), _row("08011111111"))

    with pytest.raises(LandlordInsertError) as excinfo:
        insert_landlords(results)

    assert str(excinfo.value) == "Failed to insert landlords"
    assert excinfo.value.details
    assert Landlord.query.count() == 1


def test_run_import_writes_log_and_details(import_admin):
    skipped = [SkippedRow(row_number=2, reason="Invalid phone number", data={"phone": "12"})]

    summary = run_import(
        _results(_row("08012345678")),
        skipped,
        admin_id=import_admin.id,
        total_rows=2,
        file_name="landlords.csv",
    )

    assert (summary.total_rows, summary.successful_rows, summary.skipped_rows) == (2, 1, 1)
    assert summary.stage is ImportStage.LOGGED
    log = db.session.get(ActivityLog, summary.activity_log_id)
    assert log.action_type == "landlord_csv_import"
    assert log.entity_type == "landlord"
    assert log.admin_id == import_admin.id
    assert (log.total_rows, log.successful_rows, log.skipped_rows) == (2, 1, 1)
    assert log.metadata_json == {
        "successful_rows": 1,
        "skipped_rows": 1,
        "source": "csv",
        "file_name": "landlords.csv",
    }
    details = ActivityLogDetail.query.all()
    assert [(d.row_number, d.failure_reason, d.row_data) for d in details] == [
        (2, "Invalid phone number", {"phone": "12"})
    ]


def test_run_import_logs_even_when_nothing_is_inserted(import_admin):
    skipped = [SkippedRow(row_number=1, reason="full_name is required", data={"full_name": ""})]

    summary = run_import([], skipped, admin_id=import_admin.id, total_rows=1)

    assert summary.successful_rows == 0
    assert summary.activity_log_id is not None
    assert Landlord.query.count() == 0


def test_audit_log_failure_does_not_undo_the_insert(import_admin):
    error = OperationalError("INSERT INTO activity_logs", {}, Exception("disk I/O error"))
    with patch("estate_app.importer.pipeline.load.ActivityLogService.log", side_effect=error):
        summary = run_import(_results(_row("08012345678")), [], admin_id=import_admin.id)

    assert summary.successful_rows == 1
    assert summary.activity_log_id is None
    assert summary.stage is ImportStage.INSERTED
    assert Landlord.query.count() == 1
    assert ActivityLog.query.count() == 0


def test_missing_admin_is_reported_as_audit_failure():
    assert write_audit_trail(admin_id=None, total_rows=1, successful_rows=1, skipped=[]) is None
    assert ActivityLog.query.count() == 0


def test_detail_failure_keeps_the_log_entry(import_admin):
    skipped = [SkippedRow(row_number=1, reason="Invalid email format", data={"email": "x"})]
    error = OperationalError("INSERT INTO activity_log_details", {}, Exception("disk full"))

    with patch("estate_app.importer.pipeline.load.ActivityLogService.add_details", side_effect=error):
        log_id = write_audit_trail(admin_id=import_admin.id, total_rows=1, successful_rows=0, skipped=skipped)

    assert log_id is not None
    assert db.session.get(ActivityLog, log_id).skipped_rows == 1
    assert ActivityLogDetail.query.count() == 0


def test_insert_failure_writes_no_audit_entry(import_admin, existing_landlord):
    with pytest.raises(LandlordInsertError):
        run_import(_results(_row("08011111111")), [], admin_id=import_admin.id)

    assert ActivityLog.query.count() == 0
