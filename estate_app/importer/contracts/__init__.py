"""
Canonical import contracts.
"""

from .landlord import (
    LANDLORD_CANONICAL_FIELDS,
    FieldSpec,
    canonicalize_keys,
    describe_contract,
    get_landlord_alias_map,
    get_landlord_canonical_headers,
    get_landlord_field_specs,
    get_landlord_optional_headers,
    get_landlord_required_headers,
    normalize_header,
)

__all__ = [
    "FieldSpec",
    "LANDLORD_CANONICAL_FIELDS",
    "canonicalize_keys",
    "describe_contract",
    "get_landlord_alias_map",
    "get_landlord_canonical_headers",
    "get_landlord_field_specs",
    "get_landlord_optional_headers",
    "get_landlord_required_headers",
    "normalize_header",
]
