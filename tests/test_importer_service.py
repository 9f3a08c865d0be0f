from unittest.mock import MagicMock

import pytest
from prometheus_client import REGISTRY
from sqlalchemy.exc import OperationalError

from estate_app.importer.pipeline import (
    DuplicateCheckError,
    ImportStage,
    import_landlords,
    preview_landlords,
    read_csv_rows,
)
from estate_app.models import ActivityLog, ActivityLogDetail, Landlord


def _runs(outcome, source="csv"):
    return REGISTRY.get_sample_value("landlord_import_runs_total", {"outcome": outcome, "source": source}) or 0.0


def _row(full_name, phone, **overrides):
    row = {"full_name": full_name, "phone": phone, "occupancy_type": "owner", "road": "Road 1"}
    row.update(overrides)
    return row


def test_import_accounts_for_every_row(import_admin, existing_landlord):
    rows = [
        _row("Valid One", "08020000001"),
        _row("Bad Phone", "123"),
        _row("Stored Already", "0801 111 1111"),
        _row("In File Twice", "08020000001"),
        _row("", "08020000005"),
        _row("Valid Two", "+2348020000006", zone="Zone A"),
    ]

    summary = import_landlords(rows, admin_id=import_admin.id, file_name="estate.csv")

    assert summary.total_rows == 6
    assert summary.successful_rows == 2
    assert summary.skipped_rows == 4
    assert summary.total_rows == summary.successful_rows + summary.skipped_rows
    assert summary.stage is ImportStage.COMPLETE
    assert [(row.row_number, row.reason) for row in summary.skipped_details] == [
        (2, "Invalid phone number"),
        (3, "Phone number already exists"),
        (4, "Duplicate phone number in file"),
        (5, "full_name is required"),
    ]
    stored = {landlord.phone: landlord for landlord in Landlord.query.all()}
    assert set(stored) == {"+2348011111111", "+2348020000001", "+2348020000006"}
    assert stored["+2348020000006"].zone == "Zone A"


def test_import_writes_one_log_with_a_detail_per_skipped_row(import_admin):
    rows = [_row("Ada", "08020000001"), _row("Bola", "nope"), _row("Chi", "08020000003", email="bad")]

    summary = import_landlords(rows, admin_id=import_admin.id, file_name="estate.csv")

    log = ActivityLog.query.one()
    assert log.id == summary.activity_log_id
    assert (log.total_rows, log.successful_rows, log.skipped_rows) == (3, 1, 2)
    assert log.metadata_json["file_name"] == "estate.csv"
    details = ActivityLogDetail.query.order_by(ActivityLogDetail.row_number).all()
    assert [(d.row_number, d.failure_reason) for d in details] == [
        (2, "Invalid phone number"),
        (3, "Invalid email format"),
    ]
    assert details[0].row_data == rows[1]


def test_import_with_only_invalid_rows_still_logs(import_admin):
    summary = import_landlords([_row("", "")], admin_id=import_admin.id)

    assert summary.successful_rows == 0
    assert summary.skipped_details[0].reason == "full_name is required; phone is required"
    assert summary.activity_log_id is not None
    assert Landlord.query.count() == 0


def test_duplicate_lookup_failure_inserts_nothing(import_admin):
    session = MagicMock()
    session.execute.side_effect = OperationalError("SELECT", {}, Exception("server closed the connection"))
    before = _runs("failed")

    with pytest.raises(DuplicateCheckError):
        import_landlords([_row("Ada", "08020000001")], admin_id=import_admin.id, session=session)

    session.add_all.assert_not_called()
    session.commit.assert_not_called()
    assert Landlord.query.count() == 0
    assert ActivityLog.query.count() == 0
    assert _runs("failed") == before + 1


def test_dry_run_reports_without_writing(import_admin, existing_landlord):
    rows = [_row("Ada", "08020000001"), _row("Owner", "08011111111")]

    summary = import_landlords(rows, admin_id=import_admin.id, dry_run=True)

    assert summary.dry_run is True
    assert summary.successful_rows == 1
    assert [row.reason for row in summary.skipped_details] == ["Phone number already exists"]
    assert summary.activity_log_id is None
    assert summary.stage is ImportStage.DEDUPLICATED
    assert Landlord.query.count() == 1
    assert ActivityLog.query.count() == 0


def test_successful_import_is_counted(import_admin):
    before = _runs("succeeded", source="api")

    import_landlords([_row("Ada", "08020000001")], admin_id=import_admin.id, source="api")

    assert _runs("succeeded", source="api") == before + 1


def test_preview_uses_configured_default_zone(app):
    app.config["IMPORTER_DEFAULT_ZONE"] = "Zone C"
    try:
        preview = preview_landlords([_row("Ada", "08020000001"), _row("Bola", "08020000001")])
    finally:
        app.config["IMPORTER_DEFAULT_ZONE"] = "Zone D"

    assert (preview.summary.total, preview.summary.valid, preview.summary.invalid) == (2, 1, 1)
    assert preview.results[0].normalized_data["zone"] == "Zone C"
    payload = preview.as_dict()
    assert payload["total"] == 2
    assert payload["results"][1]["errors"] == ["Duplicate phone number in file"]


def test_read_csv_rows_feeds_the_importer(import_admin):
    payload = b"Name,Phone,Occupancy,Road,DOB,Opt In\nAda,0802 000 0001,Tenant,Road 7,25-12,yes\n"

    summary = import_landlords(read_csv_rows(payload), admin_id=import_admin.id)

    assert summary.successful_rows == 1
    landlord = Landlord.query.one()
    assert landlord.date_of_birth == "12-25"
    assert landlord.celebrate_opt_in is True
