"""
Pure normalization helpers for landlord import fields.

Phone numbers are canonicalized to ``+234`` followed by ten digits and
month-day dates to zero-padded ``MM-DD``. None of these functions raise on bad
input: validity is checked by the ``is_valid_*`` predicates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

COUNTRY_CODE = "+234"
_PHONE_PATTERN = re.compile(r"^(\+234|234)\d{10}$", re.ASCII)
_PHONE_STRIP_PATTERN = re.compile(r"[\s-]")
_MONTH_DAY_PART_PATTERN = re.compile(r"\d+", re.ASCII)

_OPT_IN_TRUE = frozenset({"true", "1", "yes"})
_OPT_IN_FALSE = frozenset({"false", "0", "no"})


def normalize_phone(raw: str | None) -> str:
    """Canonicalize a free-text phone number.

    Whitespace and hyphens are removed, then leading zeros. A number already
    carrying ``+`` is left alone, a bare ``234...`` gains a ``+`` and anything
    else is treated as a local number and prefixed with ``+234``.
    """
    if raw is None:
        return ""
    normalized = _PHONE_STRIP_PATTERN.sub("", str(raw)).lstrip("0")
    if not normalized:
        return ""
    if normalized.startswith("+"):
        return normalized
    if normalized.startswith("234"):
        return "+" + normalized
    return COUNTRY_CODE + normalized


def is_valid_phone(phone: str | None) -> bool:
    return bool(phone) and _PHONE_PATTERN.match(phone) is not None


def _split_month_day(raw: str) -> tuple[int, int] | None:
    parts = raw.strip().split("-")
    if len(parts) != 2:
        return None
    first, second = (part.strip() for part in parts)
    if not (_MONTH_DAY_PART_PATTERN.fullmatch(first) and _MONTH_DAY_PART_PATTERN.fullmatch(second)):
        return None
    return int(first), int(second)


def is_valid_month_day(raw: str | None) -> bool:
    """Accept ``DD-MM`` or ``MM-DD`` as long as either reading is in range.

    Inputs where both parts are 12 or less are ambiguous and always pass.
    """
    if raw is None:
        return False
    parts = _split_month_day(str(raw))
    if parts is None:
        return False
    first, second = parts
    day_first = 1 <= first <= 31 and 1 <= second <= 12
    month_first = 1 <= first <= 12 and 1 <= second <= 31
    return day_first or month_first


def format_month_day(raw: str) -> str:
    """Render a validated month-day string as zero-padded ``MM-DD``.

    Only a first part above 12 is read as day-first and swapped. Ambiguous
    low/low input such as ``05-07`` is kept month-first; stored celebration
    dates depend on exactly this reading, so it must not be "corrected" here.
    """
    parts = _split_month_day(raw)
    if parts is None:
        raise ValueError(f"Not a month-day value: {raw!r}")
    first, second = parts
    if first > 12:
        return f"{second:02d}-{first:02d}"
    return f"{first:02d}-{second:02d}"


@dataclass(frozen=True)
class OptInResult:
    """Outcome of parsing a ``celebrate_opt_in`` cell."""

    ok: bool
    value: bool = False
    error: str | None = None


def parse_opt_in(value: object) -> OptInResult:
    """Parse a boolean-like cell.

    Booleans pass through, ``None`` or blank means ``False``, and strings must
    be one of ``true/false/1/0/yes/no`` in any case.
    """
    if isinstance(value, bool):
        return OptInResult(ok=True, value=value)
    if value is None:
        return OptInResult(ok=True, value=False)
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        return OptInResult(ok=False, error="celebrate_opt_in must be true/false")

    token = value.strip().lower()
    if token == "":
        return OptInResult(ok=True, value=False)
    if token in _OPT_IN_TRUE:
        return OptInResult(ok=True, value=True)
    if token in _OPT_IN_FALSE:
        return OptInResult(ok=True, value=False)
    return OptInResult(ok=False, error="celebrate_opt_in must be true/false")
