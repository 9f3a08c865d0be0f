"""Canonical landlord import contract definitions.

Single source of truth for the columns a landlord CSV (or JSON payload) may
carry, which of them are required, and the header aliases the CSV adapter
accepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, Tuple


@dataclass(frozen=True)
class FieldSpec:
    """Metadata describing a canonical landlord field."""

    name: str
    description: str
    required: bool = False
    aliases: Tuple[str, ...] = ()

    def headers(self) -> Tuple[str, ...]:
        """Return the canonical header plus aliases for validation."""

        return (self.name, *self.aliases)


LANDLORD_CANONICAL_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec(
        name="title",
        description="Honorific (Mr, Mrs, Chief, Dr, ...).",
        aliases=("salutation",),
    ),
    FieldSpec(
        name="full_name",
        description="Landlord full name.",
        required=True,
        aliases=("name", "fullname"),
    ),
    FieldSpec(
        name="phone",
        description="Phone number; normalized to +234XXXXXXXXXX.",
        required=True,
        aliases=("phone_number", "mobile", "telephone"),
    ),
    FieldSpec(
        name="occupancy_type",
        description="Either 'owner' or 'tenant'.",
        required=True,
        aliases=("occupancy",),
    ),
    FieldSpec(
        name="road",
        description="Road or street the property sits on.",
        required=True,
        aliases=("street",),
    ),
    FieldSpec(
        name="email",
        description="Contact email address.",
        aliases=("email_address",),
    ),
    FieldSpec(
        name="house_address",
        description="House number or full address line.",
        aliases=("address", "house_number"),
    ),
    FieldSpec(
        name="zone",
        description="Estate zone; defaults to the configured zone when blank.",
    ),
    FieldSpec(
        name="date_of_birth",
        description="Birthday as DD-MM or MM-DD; stored as MM-DD.",
        aliases=("dob", "birthday"),
    ),
    FieldSpec(
        name="wedding_anniversary",
        description="Anniversary as DD-MM or MM-DD; stored as MM-DD.",
        aliases=("anniversary",),
    ),
    FieldSpec(
        name="celebrate_opt_in",
        description="Whether the landlord opts in to celebration messages (true/false, 1/0, yes/no).",
        aliases=("opt_in", "celebrate"),
    ),
)


def get_landlord_field_specs() -> Tuple[FieldSpec, ...]:
    return LANDLORD_CANONICAL_FIELDS


def get_landlord_required_headers() -> Tuple[str, ...]:
    return tuple(spec.name for spec in LANDLORD_CANONICAL_FIELDS if spec.required)


def get_landlord_optional_headers() -> Tuple[str, ...]:
    return tuple(spec.name for spec in LANDLORD_CANONICAL_FIELDS if not spec.required)


def get_landlord_canonical_headers() -> Tuple[str, ...]:
    return tuple(spec.name for spec in LANDLORD_CANONICAL_FIELDS)


def normalize_header(header: str) -> str:
    return header.strip().lower().replace(" ", "_").replace("-", "_").replace(".", "_")


def _build_alias_map(specs: Iterable[FieldSpec]) -> Mapping[str, str]:
    alias_map: dict[str, str] = {}
    for spec in specs:
        for header in spec.headers():
            alias_map[normalize_header(header)] = spec.name
    return alias_map


_LANDLORD_ALIAS_MAP = _build_alias_map(LANDLORD_CANONICAL_FIELDS)


def get_landlord_alias_map() -> Mapping[str, str]:
    return _LANDLORD_ALIAS_MAP


def canonicalize_keys(row: Mapping[str, object], alias_map: Mapping[str, str] | None = None) -> dict[str, object]:
    """
    Map a payload's keys onto canonical field names.

    Unknown keys are dropped. When two keys resolve to the same field the first
    one wins.
    """

    alias_map = alias_map or _LANDLORD_ALIAS_MAP
    canonical: dict[str, object] = {}
    for key, value in row.items():
        if not isinstance(key, str):
            continue
        field_name = alias_map.get(normalize_header(key))
        if field_name is None or field_name in canonical:
            continue
        canonical[field_name] = value
    return canonical


def describe_contract(fields: Sequence[FieldSpec] = LANDLORD_CANONICAL_FIELDS) -> list[dict[str, object]]:
    return [
        {
            "name": spec.name,
            "description": spec.description,
            "required": spec.required,
            "aliases": list(spec.aliases),
        }
        for spec in fields
    ]
