"""
CLI commands for the landlord importer.

``flask importer landlords --file landlords.csv --admin-email chair@example.org``
runs the same pipeline as the admin upload.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from flask.cli import ScriptInfo, with_appcontext

from estate_app.importer.adapters import CSVAdapterError
from estate_app.importer.error_report import build_error_csv
from estate_app.importer.pipeline import LandlordImportError, import_landlords, preview_landlords, read_csv_rows
from estate_app.models import AdminProfile
from estate_app.utils.importer import is_importer_enabled


@click.group(name="importer", invoke_without_command=True)
@click.pass_context
def importer_cli(ctx):
    """
    Landlord importer commands.
    """
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    if not is_importer_enabled(app):
        raise click.ClickException(
            "Importer is disabled via IMPORTER_ENABLED=false. " "Enable it to run importer CLI commands."
        )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def get_disabled_importer_group() -> click.Group:
    """
    Return a minimal command group that informs the operator the importer is disabled.
    """

    @click.group(name="importer", invoke_without_command=True)
    def disabled_group():
        raise click.ClickException("Importer commands are unavailable because IMPORTER_ENABLED=false.")

    return disabled_group


def _resolve_admin(email: str) -> AdminProfile:
    admin = AdminProfile.find_by_email(email)
    if admin is None or not admin.is_active:
        raise click.ClickException(f"No active admin found with email '{email}'.")
    if not admin.has_permission("bulk_import"):
        raise click.ClickException(f"Admin '{email}' does not have the bulk_import permission.")
    return admin


def _read_rows(csv_path: Path) -> list[dict[str, str]]:
    try:
        rows = read_csv_rows(csv_path.read_bytes())
    except CSVAdapterError as exc:
        raise click.ClickException(str(exc)) from exc
    if not rows:
        raise click.ClickException("CSV file contains no data rows.")
    return rows


@importer_cli.command("landlords")
@click.option(
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Landlord CSV to import.",
)
@click.option("--admin-email", required=True, help="Email of the admin the import is recorded against.")
@click.option("--dry-run", is_flag=True, help="Validate and check duplicates without writing anything.")
@click.option(
    "--errors-out",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    default=None,
    help="Write rows that failed validation to this CSV file.",
)
@click.option("--summary-json", is_flag=True, help="Emit the import summary as JSON.")
@with_appcontext
def import_landlords_command(
    file_path: Path,
    admin_email: str,
    dry_run: bool,
    errors_out: Optional[Path],
    summary_json: bool,
):
    """
    Import landlords from a CSV file.
    """
    admin = _resolve_admin(admin_email)
    csv_path = file_path.resolve()
    rows = _read_rows(csv_path)

    if errors_out is not None:
        preview = preview_landlords(rows)
        errors_out.write_text(build_error_csv(preview.results), encoding="utf-8")
        click.echo(f"Wrote {preview.summary.invalid} invalid row(s) to {errors_out}", err=summary_json)

    try:
        summary = import_landlords(
            rows,
            admin_id=admin.id,
            file_name=csv_path.name,
            source="cli",
            dry_run=dry_run,
        )
    except LandlordImportError as exc:
        detail = f" ({exc.details})" if exc.details else ""
        raise click.ClickException(f"{exc}{detail}") from exc

    if summary_json:
        click.echo(json.dumps(summary.as_dict(), indent=2, sort_keys=True))
        return

    label = "Dry run complete" if dry_run else "Import complete"
    click.echo(
        f"{label}: {summary.total_rows} rows, {summary.successful_rows} "
        f"{'would be inserted' if dry_run else 'inserted'}, {summary.skipped_rows} skipped."
    )
    for skipped in sorted(summary.skipped_details, key=lambda row: row.row_number):
        click.echo(f"  Row {skipped.row_number}: {skipped.reason}")
    if summary.activity_log_id is not None:
        click.echo(f"Activity log #{summary.activity_log_id}")
