"""
Landlord bulk-import endpoints for the admin console.

Preview, commit and error-CSV export all accept the same CSV upload; the
commit endpoint also takes a JSON body ``{"landlords": [...]}`` for
programmatic callers. Audit listings expose the activity log written by each
import.
"""

from __future__ import annotations

from dataclasses import replace
from functools import wraps
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, make_response, request
from flask_login import current_user
from sqlalchemy.exc import NoResultFound

from estate_app.importer.adapters import CSVAdapterError, CSVHeaderError
from estate_app.importer.contracts import describe_contract, get_landlord_canonical_headers
from estate_app.importer.error_report import build_error_csv
from estate_app.importer.pipeline import (
    LandlordImportError,
    import_landlords,
    preview_landlords,
    read_csv_rows,
)
from estate_app.importer.utils import max_upload_bytes, read_upload
from estate_app.services.activity_log_service import ActivityLogService, LogFilters
from estate_app.utils.importer import is_importer_enabled
from estate_app.utils.permissions import permission_required

landlord_import_blueprint = Blueprint("landlord_import", __name__, url_prefix="/admin/imports/landlords")

TEMPLATE_EXAMPLE_ROW = {
    "full_name": "John Doe",
    "phone": "08012345678",
    "occupancy_type": "owner",
    "road": "Road 1",
    "email": "john@example.com",
    "house_address": "12A",
    "zone": "Zone D",
    "date_of_birth": "25-12",
    "wedding_anniversary": "14-02",
    "celebrate_opt_in": "true",
}


def _json_error(message: str, status: HTTPStatus, **extra):
    payload = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


def _importer_enabled_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_importer_enabled():
            return _json_error("Importer is disabled.", HTTPStatus.NOT_FOUND)
        return f(*args, **kwargs)

    return decorated_function


class _UploadRejected(Exception):
    def __init__(self, message: str, status: HTTPStatus, **extra) -> None:
        super().__init__(message)
        self.status = status
        self.extra = extra


def _rows_from_upload() -> tuple[str, list[dict[str, str]]]:
    try:
        filename, payload = read_upload(request.files.get("file"), max_bytes=max_upload_bytes())
    except OverflowError as exc:
        raise _UploadRejected(str(exc), HTTPStatus.REQUEST_ENTITY_TOO_LARGE) from exc
    except ValueError as exc:
        raise _UploadRejected(str(exc), HTTPStatus.BAD_REQUEST) from exc

    try:
        rows = read_csv_rows(payload)
    except CSVHeaderError as exc:
        raise _UploadRejected(
            str(exc),
            HTTPStatus.BAD_REQUEST,
            missing_columns=list(exc.missing),
            duplicate_columns=list(exc.duplicates),
        ) from exc
    except CSVAdapterError as exc:
        raise _UploadRejected(str(exc), HTTPStatus.BAD_REQUEST) from exc

    if not rows:
        raise _UploadRejected("CSV file contains no data rows.", HTTPStatus.BAD_REQUEST)
    return filename, rows


def _rows_from_json() -> list[dict]:
    body = request.get_json(silent=True) or {}
    landlords = body.get("landlords") if isinstance(body, dict) else None
    if not isinstance(landlords, list) or not all(isinstance(row, dict) for row in landlords):
        raise _UploadRejected("Invalid request: landlords array required", HTTPStatus.BAD_REQUEST)
    if not landlords:
        raise _UploadRejected("Request contains no landlords to import.", HTTPStatus.BAD_REQUEST)
    return landlords


@landlord_import_blueprint.get("/contract")
@permission_required("bulk_import")
@_importer_enabled_required
def landlord_import_contract():
    return jsonify({"fields": describe_contract()})


@landlord_import_blueprint.get("/template.csv")
@permission_required("bulk_import")
@_importer_enabled_required
def landlord_import_template():
    headers = get_landlord_canonical_headers()
    csv_text = ",".join(headers) + "\n" + ",".join(TEMPLATE_EXAMPLE_ROW.get(h, "") for h in headers) + "\n"
    response = make_response(csv_text)
    response.headers["Content-Type"] = "text/csv; charset=utf-8"
    response.headers["Content-Disposition"] = "attachment; filename=landlord_import_template.csv"
    return response


@landlord_import_blueprint.post("/preview")
@permission_required("bulk_import")
@_importer_enabled_required
def landlord_import_preview():
    try:
        filename, rows = _rows_from_upload()
    except _UploadRejected as exc:
        return _json_error(str(exc), exc.status, **exc.extra)

    preview = preview_landlords(rows)
    current_app.logger.info(
        "Landlord import preview by admin %s: %s rows, %s valid, %s invalid",
        current_user.id,
        preview.summary.total,
        preview.summary.valid,
        preview.summary.invalid,
        extra={"admin_id": current_user.id, "file_name": filename},
    )
    return jsonify({"file_name": filename, **preview.as_dict()}), HTTPStatus.OK


@landlord_import_blueprint.post("")
@permission_required("bulk_import")
@_importer_enabled_required
def landlord_import_commit():
    try:
        if request.is_json:
            filename, source, rows = None, "api", _rows_from_json()
        else:
            filename, rows = _rows_from_upload()
            source = "csv"
    except _UploadRejected as exc:
        return _json_error(str(exc), exc.status, **exc.extra)

    try:
        summary = import_landlords(rows, admin_id=current_user.id, file_name=filename, source=source)
    except LandlordImportError as exc:
        return _json_error(str(exc), HTTPStatus.INTERNAL_SERVER_ERROR, details=exc.details)
    except Exception as exc:  # pragma: no cover
        current_app.logger.exception(
            "Unexpected landlord import failure",
            extra={"admin_id": current_user.id, "file_name": filename},
        )
        return _json_error("Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR, details=str(exc))

    return jsonify({"success": True, **summary.as_dict()}), HTTPStatus.OK


@landlord_import_blueprint.post("/errors.csv")
@permission_required("bulk_import")
@_importer_enabled_required
def landlord_import_error_csv():
    try:
        _, rows = _rows_from_upload()
    except _UploadRejected as exc:
        return _json_error(str(exc), exc.status, **exc.extra)

    preview = preview_landlords(rows)
    response = make_response(build_error_csv(preview.results))
    response.headers["Content-Type"] = "text/csv; charset=utf-8"
    filename = current_app.config.get("IMPORTER_ERROR_CSV_FILENAME", "import_errors.csv")
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response


@landlord_import_blueprint.get("/activity")
@permission_required("audit_log")
def landlord_import_activity():
    args = request.args
    try:
        filters = LogFilters.coerce(
            page=args.get("page"),
            page_size=args.get("page_size") or current_app.config.get("ACTIVITY_LOG_PAGE_SIZE_DEFAULT"),
            admin_id=args.get("admin_id"),
            action_type=args.get("action_type") or "landlord_csv_import",
            entity_type=args.get("entity_type"),
            entity_id=args.get("entity_id"),
            start_date=args.get("start_date"),
            end_date=args.get("end_date"),
        )
    except ValueError as exc:
        return _json_error(str(exc), HTTPStatus.BAD_REQUEST)

    max_page_size = current_app.config.get("ACTIVITY_LOG_PAGE_SIZE_MAX")
    if max_page_size and filters.page_size > max_page_size:
        filters = replace(filters, page_size=max_page_size)

    result = ActivityLogService().list_logs(filters)
    return jsonify(
        {
            "items": [entry.to_dict() for entry in result.items],
            "total": result.total,
            "page": result.page,
            "page_size": result.page_size,
            "total_pages": result.total_pages,
        }
    )


@landlord_import_blueprint.get("/activity/<int:log_id>")
@permission_required("audit_log")
def landlord_import_activity_detail(log_id: int):
    service = ActivityLogService()
    try:
        entry = service.get_log(log_id)
    except NoResultFound:
        return _json_error("Activity log not found.", HTTPStatus.NOT_FOUND)
    payload = entry.to_dict()
    payload["details"] = [detail.to_dict() for detail in service.get_details(log_id)]
    return jsonify(payload)
