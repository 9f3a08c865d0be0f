# estate_app/services/activity_log_service.py
"""
Activity log service: write and query the admin audit trail.

Every audited action goes through ``ActivityLogService.log`` so that the
action/entity taxonomy and the metadata rules (flat key/value pairs, at most
2 KB once serialized) are enforced in one place.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import Any, Iterable, Mapping, Sequence

from flask import current_app
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session

from estate_app.models import ActivityLog, ActivityLogDetail, db

METADATA_MAX_BYTES = 2048
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


class ActionType:
    LANDLORD_CREATED = "landlord_created"
    LANDLORD_UPDATED = "landlord_updated"
    LANDLORD_CSV_IMPORT = "landlord_csv_import"
    CHARGE_BULK_CREATED = "charge_bulk_created"
    PAYMENT_LOGGED = "payment_logged"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PAYMENT_TYPE_ASSIGNED = "payment_type_assigned"
    PAYMENT_TYPE_UNASSIGNED = "payment_type_unassigned"
    RECEIPT_GENERATED = "receipt_generated"
    RECEIPT_SENT_EMAIL = "receipt_sent_email"
    RECEIPT_SENT_WHATSAPP = "receipt_sent_whatsapp"
    ONBOARDING_TASK_COMPLETED = "onboarding_task_completed"
    CELEBRATION_APPROVED = "celebration_approved"
    CELEBRATION_SENT = "celebration_sent"
    CELEBRATION_SKIPPED = "celebration_skipped"
    ADMIN_LOGIN = "admin_login"


class EntityType:
    LANDLORD = "landlord"
    PAYMENT = "payment"
    RECEIPT = "receipt"
    CELEBRATION = "celebration"
    ONBOARDING_TASK = "onboarding_task"
    ADMIN = "admin"
    CHARGE = "charge"
    TRANSACTION = "transaction"


ACTION_TYPES: frozenset[str] = frozenset(
    value for name, value in vars(ActionType).items() if not name.startswith("_")
)
ENTITY_TYPES: frozenset[str] = frozenset(
    value for name, value in vars(EntityType).items() if not name.startswith("_")
)

# Actions that must never be lost silently; callers alert on failures.
CRITICAL_ACTIONS: frozenset[str] = frozenset(
    {
        ActionType.PAYMENT_CONFIRMED,
        ActionType.RECEIPT_GENERATED,
        ActionType.LANDLORD_CSV_IMPORT,
        ActionType.CHARGE_BULK_CREATED,
    }
)


class ActivityLogError(ValueError):
    """Raised when an activity log entry is rejected before it is written."""


def is_critical_action(action_type: str) -> bool:
    return action_type in CRITICAL_ACTIONS


def validate_metadata(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of ``metadata`` after checking it is flat and small.

    Values may be strings, numbers, booleans or ``None``. Lists and nested
    mappings are rejected, as is any payload over ``METADATA_MAX_BYTES`` once
    JSON-encoded.
    """
    if metadata is None:
        return {}
    if not isinstance(metadata, Mapping):
        raise ActivityLogError("Metadata must be a mapping of flat key/value pairs.")

    flat: dict[str, Any] = {}
    for key, value in metadata.items():
        if isinstance(value, (list, tuple, set)):
            raise ActivityLogError(f"Metadata cannot contain arrays. Found array at key: {key}")
        if isinstance(value, Mapping):
            raise ActivityLogError(f"Metadata cannot contain nested objects. Found object at key: {key}")
        flat[str(key)] = value

    size = len(json.dumps(flat, default=str).encode("utf-8"))
    if size > METADATA_MAX_BYTES:
        raise ActivityLogError(
            f"Metadata exceeds 2KB limit ({size} bytes). Store large payloads in activity_log_details instead."
        )
    return flat


@dataclass(frozen=True)
class LogFilters:
    """Filters accepted by ``ActivityLogService.list_logs``."""

    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    admin_id: int | None = None
    action_type: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    @classmethod
    def coerce(
        cls,
        *,
        page: int | str | None = None,
        page_size: int | str | None = None,
        admin_id: int | str | None = None,
        action_type: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        start_date: str | datetime | None = None,
        end_date: str | datetime | None = None,
    ) -> "LogFilters":
        """
        Coerce query-string style input into a validated ``LogFilters`` instance.
        """

        resolved_page = _coerce_positive_int(page, fallback=DEFAULT_PAGE)
        resolved_size = min(_coerce_positive_int(page_size, fallback=DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
        resolved_admin = _coerce_positive_int(admin_id, fallback=0) or None

        resolved_action = (action_type or "").strip().lower() or None
        if resolved_action and resolved_action not in ACTION_TYPES:
            raise ValueError(f"Unsupported action_type filter '{action_type}'.")
        resolved_entity = (entity_type or "").strip().lower() or None
        if resolved_entity and resolved_entity not in ENTITY_TYPES:
            raise ValueError(f"Unsupported entity_type filter '{entity_type}'.")

        resolved_start = _coerce_datetime(start_date)
        resolved_end = _coerce_datetime(end_date, end_of_day=True)
        if resolved_start and resolved_end and resolved_start > resolved_end:
            raise ValueError("start_date must be before end_date.")

        return cls(
            page=resolved_page,
            page_size=resolved_size,
            admin_id=resolved_admin,
            action_type=resolved_action,
            entity_type=resolved_entity,
            entity_id=str(entity_id).strip() if entity_id not in (None, "") else None,
            start_date=resolved_start,
            end_date=resolved_end,
        )


@dataclass(slots=True)
class LogListResult:
    items: list[ActivityLog]
    total: int
    page: int
    page_size: int
    total_pages: int


class ActivityLogService:
    """Facade for writing and querying the admin audit trail."""

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session or db.session

    def log(
        self,
        *,
        admin_id: int | None,
        action_type: str,
        entity_type: str,
        entity_id: str | int | None = None,
        metadata: Mapping[str, Any] | None = None,
        total_rows: int | None = None,
        successful_rows: int | None = None,
        skipped_rows: int | None = None,
        commit: bool = True,
    ) -> ActivityLog:
        """Validate and persist one activity log entry."""

        if admin_id is None:
            raise ActivityLogError("adminId is required for logging")
        if not action_type:
            raise ActivityLogError("actionType is required for logging")
        if not entity_type:
            raise ActivityLogError("entityType is required for logging")
        if action_type not in ACTION_TYPES:
            raise ActivityLogError(f"Unknown action type: {action_type}")
        if entity_type not in ENTITY_TYPES:
            raise ActivityLogError(f"Unknown entity type: {entity_type}")

        entry = ActivityLog(
            admin_id=admin_id,
            action_type=action_type,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            total_rows=total_rows,
            successful_rows=successful_rows,
            skipped_rows=skipped_rows,
            metadata_json=validate_metadata(metadata),
        )
        self.session.add(entry)
        if commit:
            self.session.commit()
        else:
            self.session.flush()

        current_app.logger.debug(
            "Activity logged: %s on %s by admin %s",
            action_type,
            entity_type,
            admin_id,
            extra={"activity_log_id": entry.id, "critical": is_critical_action(action_type)},
        )
        return entry

    def add_details(
        self,
        activity_log_id: int,
        details: Iterable[Mapping[str, Any]],
        *,
        commit: bool = True,
    ) -> list[ActivityLogDetail]:
        """Attach per-row failure details to an existing log entry.

        Each mapping carries ``row_number``, ``failure_reason`` and ``row_data``.
        """

        rows = [
            ActivityLogDetail(
                activity_log_id=activity_log_id,
                row_number=int(detail["row_number"]),
                failure_reason=str(detail["failure_reason"]),
                row_data=_json_safe(detail.get("row_data")),
            )
            for detail in details
        ]
        if not rows:
            return []
        self.session.add_all(rows)
        if commit:
            self.session.commit()
        else:
            self.session.flush()
        return rows

    def list_logs(self, filters: LogFilters | None = None) -> LogListResult:
        filters = filters or LogFilters()
        query = self._apply_filters(self.session.query(ActivityLog), filters)

        total = query.count()
        if total == 0:
            return LogListResult(items=[], total=0, page=filters.page, page_size=filters.page_size, total_pages=0)

        items = (
            query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .offset((filters.page - 1) * filters.page_size)
            .limit(filters.page_size)
            .all()
        )
        total_pages = (total + filters.page_size - 1) // filters.page_size
        return LogListResult(
            items=items, total=total, page=filters.page, page_size=filters.page_size, total_pages=total_pages
        )

    def get_log(self, log_id: int) -> ActivityLog:
        entry = self.session.get(ActivityLog, log_id)
        if entry is None:
            raise NoResultFound(f"Activity log {log_id} not found.")
        return entry

    def get_details(self, log_id: int) -> Sequence[ActivityLogDetail]:
        return (
            self.session.query(ActivityLogDetail)
            .filter(ActivityLogDetail.activity_log_id == log_id)
            .order_by(ActivityLogDetail.row_number.asc(), ActivityLogDetail.id.asc())
            .all()
        )

    @staticmethod
    def _apply_filters(query, filters: LogFilters):
        if filters.admin_id is not None:
            query = query.filter(ActivityLog.admin_id == filters.admin_id)
        if filters.action_type:
            query = query.filter(ActivityLog.action_type == filters.action_type)
        if filters.entity_type:
            query = query.filter(ActivityLog.entity_type == filters.entity_type)
        if filters.entity_id:
            query = query.filter(ActivityLog.entity_id == filters.entity_id)
        if filters.start_date:
            query = query.filter(ActivityLog.created_at >= filters.start_date)
        if filters.end_date:
            query = query.filter(ActivityLog.created_at <= filters.end_date)
        return query


def _json_safe(value: Any) -> Any:
    if value is None:
        return None
    return json.loads(json.dumps(value, default=str))


def _coerce_positive_int(candidate: int | str | None, *, fallback: int) -> int:
    if candidate in (None, ""):
        return fallback
    if isinstance(candidate, int):
        return max(1, candidate)
    if isinstance(candidate, str) and candidate.strip().isdigit():
        return max(1, int(candidate.strip()))
    raise ValueError(f"Expected positive integer, received '{candidate}'.")


def _coerce_datetime(candidate: str | datetime | None, *, end_of_day: bool = False) -> datetime | None:
    if candidate in (None, ""):
        return None
    if isinstance(candidate, datetime):
        return candidate if candidate.tzinfo else candidate.replace(tzinfo=timezone.utc)
    text = str(candidate).strip()
    for fmt in ("%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"):
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if fmt == "%Y-%m-%d":
            parsed = datetime.combine(parsed.date(), time.max if end_of_day else time.min)
        return parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"Unable to parse datetime value '{candidate}'. Expected ISO-like formats.")
