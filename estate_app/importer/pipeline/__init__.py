"""
Landlord import pipeline: normalize, validate, de-duplicate, load.
"""

from .dedupe import REASON_PHONE_EXISTS, DuplicateFilterResult, SkippedRow, fetch_existing_phones, filter_existing
from .errors import DuplicateCheckError, LandlordImportError, LandlordInsertError
from .load import insert_landlords, run_import, write_audit_trail
from .normalize import (
    OptInResult,
    format_month_day,
    is_valid_month_day,
    is_valid_phone,
    normalize_phone,
    parse_opt_in,
)
from .service import ImportPreview, import_landlords, preview_landlords, read_csv_rows
from .summary import ImportStage, ImportSummary
from .validation import (
    BatchValidationSummary,
    ValidationResult,
    partition_results,
    summarize_results,
    validate_batch,
    validate_row,
)

__all__ = [
    "BatchValidationSummary",
    "DuplicateCheckError",
    "DuplicateFilterResult",
    "ImportPreview",
    "ImportStage",
    "ImportSummary",
    "LandlordImportError",
    "LandlordInsertError",
    "OptInResult",
    "REASON_PHONE_EXISTS",
    "SkippedRow",
    "ValidationResult",
    "fetch_existing_phones",
    "filter_existing",
    "format_month_day",
    "import_landlords",
    "insert_landlords",
    "is_valid_month_day",
    "is_valid_phone",
    "normalize_phone",
    "parse_opt_in",
    "partition_results",
    "preview_landlords",
    "read_csv_rows",
    "run_import",
    "summarize_results",
    "validate_batch",
    "validate_row",
    "write_audit_trail",
]
