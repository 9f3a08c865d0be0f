"""
Duplicate-against-store filter.

Rows that passed validation are checked against the ``landlords`` table with
one ``IN`` lookup over all candidate phones. Rows whose phone already exists
are rejected; the rest go on to insertion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from estate_app.models import Landlord, db

from .errors import DuplicateCheckError
from .validation import ValidationResult

REASON_PHONE_EXISTS = "Phone number already exists"


@dataclass(frozen=True)
class SkippedRow:
    """A row left out of the import, with the reason and its original data."""

    row_number: int
    reason: str
    data: dict[str, Any]

    def as_dict(self) -> dict[str, Any]:
        return {"rowNumber": self.row_number, "reason": self.reason, "data": dict(self.data)}

    @classmethod
    def from_invalid(cls, result: ValidationResult) -> "SkippedRow":
        return cls(row_number=result.row_number, reason="; ".join(result.errors), data=dict(result.original_data))


@dataclass
class DuplicateFilterResult:
    to_insert: list[ValidationResult] = field(default_factory=list)
    rejected: list[SkippedRow] = field(default_factory=list)
    existing_phones: frozenset[str] = frozenset()
    queries_issued: int = 0


def fetch_existing_phones(phones: Sequence[str], *, session: Session | None = None) -> frozenset[str]:
    """Return the subset of ``phones`` already present in the landlord store."""

    session = session or db.session
    candidates = sorted(set(phones))
    if not candidates:
        return frozenset()
    try:
        rows = session.execute(select(Landlord.phone).where(Landlord.phone.in_(candidates))).scalars().all()
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error("Landlord duplicate check failed: %s", exc, exc_info=True)
        raise DuplicateCheckError("Failed to check duplicates", details=str(exc)) from exc
    return frozenset(rows)


def filter_existing(
    valid_rows: Sequence[ValidationResult],
    *,
    session: Session | None = None,
) -> DuplicateFilterResult:
    """Split validated rows into those to insert and those already stored.

    Raises ``DuplicateCheckError`` when the lookup fails, in which case the
    caller must not insert anything.
    """

    phones = [row.normalized_data["phone"] for row in valid_rows]
    if not phones:
        return DuplicateFilterResult()

    existing = fetch_existing_phones(phones, session=session)
    result = DuplicateFilterResult(existing_phones=existing, queries_issued=1)
    for row in valid_rows:
        if row.normalized_data["phone"] in existing:
            result.rejected.append(
                SkippedRow(row_number=row.row_number, reason=REASON_PHONE_EXISTS, data=dict(row.original_data))
            )
        else:
            result.to_insert.append(row)

    current_app.logger.info(
        "Landlord duplicate check: %s candidates, %s already stored",
        len(valid_rows),
        len(result.rejected),
        extra={"candidate_count": len(valid_rows), "existing_count": len(result.rejected)},
    )
    return result
