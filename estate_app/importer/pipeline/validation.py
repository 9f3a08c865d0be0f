"""
Row and batch validation for landlord imports.

This is the single validation module behind every import entry point (the
admin upload, the JSON API and the CLI). Problems are returned as data on
``ValidationResult``; nothing here raises for bad input.

Intra-file duplicate phones are detected with an explicit accumulator: each
call to ``validate_row`` receives the phones seen so far and returns the
updated set, and ``validate_batch`` threads it through the rows in file
order. The first occurrence of a phone wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from estate_app.importer.contracts import canonicalize_keys, get_landlord_required_headers

from .normalize import format_month_day, is_valid_month_day, is_valid_phone, normalize_phone, parse_opt_in

DEFAULT_ZONE = "Zone D"
OCCUPANCY_TYPES: tuple[str, ...] = ("owner", "tenant")
REQUIRED_FIELDS: tuple[str, ...] = get_landlord_required_headers()

_EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ERROR_INVALID_PHONE = "Invalid phone number"
ERROR_DUPLICATE_IN_FILE = "Duplicate phone number in file"
ERROR_OCCUPANCY = 'occupancy_type must be "owner" or "tenant"'
ERROR_INVALID_EMAIL = "Invalid email format"

# Matches the String column sizes on the landlords table.
FIELD_MAX_LENGTHS: dict[str, int] = {
    "title": 50,
    "full_name": 200,
    "email": 255,
    "house_address": 255,
    "road": 200,
    "zone": 100,
}


@dataclass(frozen=True)
class ValidationResult:
    """Per-row validation outcome.

    ``normalized_data`` is populated even for invalid rows so error exports
    can show what the row would have become.
    """

    row_number: int
    errors: tuple[str, ...]
    normalized_data: dict[str, Any]
    original_data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def as_dict(self) -> dict[str, Any]:
        return {
            "rowNumber": self.row_number,
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "normalizedData": dict(self.normalized_data),
        }


def _clean_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _normalize_month_day(
    field_name: str,
    value: object,
    errors: list[str],
) -> str | None:
    text = _clean_text(value)
    if text is None:
        return None
    if not is_valid_month_day(text):
        errors.append(f"Invalid {field_name} format (DD-MM or MM-DD)")
        return text
    return format_month_day(text)


def validate_row(
    row: Mapping[str, Any],
    seen_phones: frozenset[str] | set[str] = frozenset(),
    *,
    row_number: int,
    default_zone: str = DEFAULT_ZONE,
) -> tuple[ValidationResult, frozenset[str]]:
    """Validate and normalize one import row.

    Returns the result together with the phone accumulator to pass to the next
    row. ``seen_phones`` itself is never modified. Every check runs, so one row
    can report several errors, in this order: required fields, phone,
    occupancy type, date of birth, wedding anniversary, opt-in flag, email,
    then text lengths.
    """

    original = dict(row)
    data = canonicalize_keys(row)
    errors: list[str] = []
    seen = frozenset(seen_phones)

    for field_name in REQUIRED_FIELDS:
        if _is_blank(data.get(field_name)):
            errors.append(f"{field_name} is required")

    phone = None
    if not _is_blank(data.get("phone")):
        phone = normalize_phone(str(data["phone"]))
        if not is_valid_phone(phone):
            errors.append(ERROR_INVALID_PHONE)
        elif phone in seen:
            errors.append(ERROR_DUPLICATE_IN_FILE)
        else:
            seen = seen | {phone}

    occupancy = _clean_text(data.get("occupancy_type"))
    if occupancy is not None:
        if occupancy.lower() in OCCUPANCY_TYPES:
            occupancy = occupancy.lower()
        else:
            errors.append(ERROR_OCCUPANCY)

    date_of_birth = _normalize_month_day("date_of_birth", data.get("date_of_birth"), errors)
    wedding_anniversary = _normalize_month_day("wedding_anniversary", data.get("wedding_anniversary"), errors)

    opt_in = parse_opt_in(data.get("celebrate_opt_in"))
    if not opt_in.ok:
        errors.append(opt_in.error)

    email = _clean_text(data.get("email"))
    if email is not None and not _EMAIL_REGEX.match(email):
        errors.append(ERROR_INVALID_EMAIL)

    normalized = {
        "title": _clean_text(data.get("title")),
        "full_name": _clean_text(data.get("full_name")),
        "phone": phone,
        "email": email,
        "house_address": _clean_text(data.get("house_address")),
        "road": _clean_text(data.get("road")),
        "zone": _clean_text(data.get("zone")) or default_zone,
        "occupancy_type": occupancy,
        "date_of_birth": date_of_birth,
        "wedding_anniversary": wedding_anniversary,
        "celebrate_opt_in": opt_in.value,
        "onboarding_status": "pending",
        "status": "active",
    }

    for field_name, max_length in FIELD_MAX_LENGTHS.items():
        value = normalized[field_name]
        if value is not None and len(value) > max_length:
            errors.append(f"{field_name} must be at most {max_length} characters")

    result = ValidationResult(
        row_number=row_number,
        errors=tuple(errors),
        normalized_data=normalized,
        original_data=original,
    )
    return result, seen


def validate_batch(
    rows: Iterable[Mapping[str, Any]],
    *,
    default_zone: str = DEFAULT_ZONE,
) -> list[ValidationResult]:
    """Validate every row in file order; row numbers are 1-based positions."""

    results: list[ValidationResult] = []
    seen: frozenset[str] = frozenset()
    for row_number, row in enumerate(rows, start=1):
        result, seen = validate_row(row, seen, row_number=row_number, default_zone=default_zone)
        results.append(result)
    return results


@dataclass(frozen=True)
class BatchValidationSummary:
    """Counts shown to the admin before an import is confirmed."""

    total: int
    valid: int
    invalid: int

    def as_dict(self) -> dict[str, int]:
        return {"total": self.total, "valid": self.valid, "invalid": self.invalid}


def summarize_results(results: Sequence[ValidationResult]) -> BatchValidationSummary:
    valid = sum(1 for result in results if result.is_valid)
    return BatchValidationSummary(total=len(results), valid=valid, invalid=len(results) - valid)


def partition_results(
    results: Iterable[ValidationResult],
) -> tuple[list[ValidationResult], list[ValidationResult]]:
    valid: list[ValidationResult] = []
    invalid: list[ValidationResult] = []
    for result in results:
        (valid if result.is_valid else invalid).append(result)
    return valid, invalid
