import csv
import json
from pathlib import Path

from estate_app.importer import init_importer
from estate_app.models import ActivityLog, Landlord


def _write_csv(tmp_path: Path) -> Path:
    csv_file = tmp_path / "landlords.csv"
    csv_file.write_text(
        "full_name,phone,occupancy_type,road\n"
        "Ada Obi,08012345678,owner,Road 1\n"
        "Bola Ade,12345,tenant,Road 2\n"
        "Existing Person,0801 111 1111,owner,Road 9\n",
        encoding="utf-8",
    )
    return csv_file


def _invoke(runner, *args):
    return runner.invoke(args=["importer", "landlords", *args])


def test_cli_imports_file_and_prints_summary(runner, tmp_path, import_admin, existing_landlord):
    csv_path = _write_csv(tmp_path)

    result = _invoke(runner, "--file", str(csv_path), "--admin-email", import_admin.email)

    assert result.exit_code == 0, result.output
    assert "Import complete: 3 rows, 1 inserted, 2 skipped." in result.output
    assert "  Row 2: Invalid phone number" in result.output
    assert "  Row 3: Phone number already exists" in result.output
    log = ActivityLog.query.one()
    assert f"Activity log #{log.id}" in result.output
    assert log.metadata_json["source"] == "cli"
    assert log.metadata_json["file_name"] == "landlords.csv"
    assert Landlord.query.count() == 2


def test_cli_summary_json(runner, tmp_path, import_admin):
    csv_path = _write_csv(tmp_path)

    result = _invoke(runner, "--file", str(csv_path), "--admin-email", import_admin.email, "--summary-json")

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["total_rows"] == 3
    assert payload["successful_rows"] == 2
    assert payload["skipped_details"][0]["rowNumber"] == 2


def test_cli_dry_run_writes_nothing(runner, tmp_path, import_admin):
    csv_path = _write_csv(tmp_path)

    result = _invoke(runner, "--file", str(csv_path), "--admin-email", import_admin.email, "--dry-run")

    assert result.exit_code == 0, result.output
    assert "Dry run complete: 3 rows, 2 would be inserted, 1 skipped." in result.output
    assert Landlord.query.count() == 0
    assert ActivityLog.query.count() == 0


def test_cli_writes_error_csv(runner, tmp_path, import_admin):
    csv_path = _write_csv(tmp_path)
    errors_path = tmp_path / "errors.csv"

    result = _invoke(
        runner, "--file", str(csv_path), "--admin-email", import_admin.email, "--dry-run", "--errors-out",
        str(errors_path),
    )

    assert result.exit_code == 0, result.output
    with errors_path.open(encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert rows[0][:2] == ["row_number", "errors"]
    assert rows[1][:2] == ["2", "Invalid phone number"]


def test_cli_requires_bulk_import_permission(runner, tmp_path, restricted_admin):
    result = _invoke(runner, "--file", str(_write_csv(tmp_path)), "--admin-email", restricted_admin.email)

    assert result.exit_code != 0
    assert "does not have the bulk_import permission" in result.output
    assert Landlord.query.count() == 0


def test_cli_rejects_unknown_admin(runner, tmp_path):
    result = _invoke(runner, "--file", str(_write_csv(tmp_path)), "--admin-email", "nobody@example.com")

    assert result.exit_code != 0
    assert "No active admin found" in result.output


def test_cli_rejects_file_missing_required_columns(runner, tmp_path, import_admin):
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("full_name,phone\nAda,08012345678\n", encoding="utf-8")

    result = _invoke(runner, "--file", str(csv_path), "--admin-email", import_admin.email)

    assert result.exit_code != 0
    assert "Missing required columns: occupancy_type, road." in result.output


def test_disabled_importer_registers_stub_cli(app, runner):
    app.config["IMPORTER_ENABLED"] = False
    try:
        init_importer(app)
        result = runner.invoke(args=["importer"])
    finally:
        app.config["IMPORTER_ENABLED"] = True
        init_importer(app)

    assert result.exit_code != 0
    assert "Importer commands are unavailable" in result.output
    assert app.extensions["importer"]["enabled"] is True


def test_cli_reports_malformed_csv(runner, tmp_path, import_admin):
    csv_path = tmp_path / "huge.csv"
    csv_path.write_text(
        "full_name,phone,occupancy_type,road\n" + "A" * 200_000 + ",08012345678,owner,Road 1\n", encoding="utf-8"
    )

    result = _invoke(runner, "--file", str(csv_path), "--admin-email", import_admin.email)

    assert result.exit_code == 1
    assert "Malformed CSV" in result.output
    assert Landlord.query.count() == 0
