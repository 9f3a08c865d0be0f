"""
Downloadable error CSV for rows that failed file-level validation.

Only rows rejected by the row validator are exported. Rows skipped because
their phone already exists in the store appear in the import summary instead.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence

from estate_app.importer.pipeline.validation import ValidationResult

ERROR_CSV_LEADING_COLUMNS: tuple[str, ...] = ("row_number", "errors")


def _original_columns(results: Iterable[ValidationResult]) -> list[str]:
    columns: list[str] = []
    seen: set[str] = set(ERROR_CSV_LEADING_COLUMNS)
    for result in results:
        for key in result.original_data:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return columns


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_error_csv(results: Sequence[ValidationResult]) -> str:
    """Render invalid results as CSV text, one line per failed row."""

    invalid = [result for result in results if not result.is_valid]
    columns = _original_columns(invalid)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([*ERROR_CSV_LEADING_COLUMNS, *columns])
    for result in invalid:
        writer.writerow(
            [
                result.row_number,
                "; ".join(result.errors),
                *(_cell(result.original_data.get(column)) for column in columns),
            ]
        )
    return buffer.getvalue()
