"""CSV adapter for landlord bulk import.

Validates the header row against the canonical landlord contract and streams
the remaining lines as plain dictionaries keyed by canonical field names.
Blank lines are skipped, so the Nth yielded row is row N of the import.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import IO, Iterator, Sequence

from estate_app.importer.contracts import (
    get_landlord_alias_map,
    get_landlord_required_headers,
    normalize_header,
)


class CSVAdapterError(Exception):
    """Base exception for CSV adapter failures."""


class CSVHeaderError(CSVAdapterError):
    """Raised when the CSV header row does not meet contract requirements."""

    def __init__(
        self,
        *,
        missing: Sequence[str] | None = None,
        duplicates: Sequence[str] | None = None,
    ) -> None:
        details: list[str] = []
        if missing:
            details.append(f"Missing required columns: {', '.join(sorted(missing))}.")
        if duplicates:
            details.append(
                "Duplicate canonical columns detected: "
                + ", ".join(sorted(duplicates))
                + ". Ensure each column appears only once."
            )

        message = "CSV header validation failed. " + " ".join(details) if details else "CSV header validation failed."
        super().__init__(message)
        self.missing = tuple(missing or ())
        self.duplicates = tuple(duplicates or ())


class CSVDecodeError(CSVAdapterError):
    """Raised when uploaded bytes are not valid UTF-8 text."""


class CSVMalformedError(CSVAdapterError):
    """Raised when the csv module cannot parse the payload (for example an oversized field)."""


@dataclass(frozen=True)
class HeaderValidationResult:
    raw_headers: tuple[str, ...]
    canonical_headers: tuple[str, ...]
    ignored_headers: tuple[str, ...]


@dataclass(frozen=True)
class LandlordCSVRow:
    """A parsed, non-blank CSV line."""

    row_number: int
    source_line: int
    data: dict[str, str]


@dataclass
class LandlordCSVStatistics:
    """Accumulated statistics from CSV parsing."""

    rows_processed: int = 0
    rows_skipped_blank: int = 0


def _sanitize_header(header: str | None) -> str:
    token = (header or "").strip()
    return token.lstrip("\ufeff")


def _validate_headers(raw_headers: Sequence[str]) -> HeaderValidationResult:
    sanitized_headers = tuple(_sanitize_header(header) for header in raw_headers)
    alias_map = get_landlord_alias_map()
    required_headers = set(get_landlord_required_headers())
    duplicates: list[str] = []
    ignored: list[str] = []
    seen: set[str] = set()
    resolved: list[str] = []

    for header in sanitized_headers:
        canonical = alias_map.get(normalize_header(header))
        if canonical is None:
            # Unknown columns are carried through under their own name.
            ignored.append(header)
            resolved.append(header)
            continue
        if canonical in seen:
            duplicates.append(canonical)
        else:
            seen.add(canonical)
        resolved.append(canonical)

    missing = sorted(required_headers - seen)
    if missing or duplicates:
        raise CSVHeaderError(missing=missing, duplicates=duplicates)

    return HeaderValidationResult(
        raw_headers=sanitized_headers,
        canonical_headers=tuple(resolved),
        ignored_headers=tuple(ignored),
    )


def _row_is_blank(row: dict[str, object | None]) -> bool:
    return all((value is None or (isinstance(value, str) and value.strip() == "")) for value in row.values())


class LandlordCSVAdapter:
    """CSV reader that enforces the landlord import contract."""

    def __init__(self, file_obj: IO[str]) -> None:
        self._file_obj = file_obj
        self._header_result: HeaderValidationResult | None = None
        self.statistics = LandlordCSVStatistics()

    @classmethod
    def from_bytes(cls, payload: bytes) -> "LandlordCSVAdapter":
        try:
            text = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CSVDecodeError("Uploaded file must be UTF-8 encoded CSV.") from exc
        return cls(io.StringIO(text, newline=""))

    @property
    def header(self) -> HeaderValidationResult | None:
        return self._header_result

    def _prepare_reader(self) -> csv.DictReader:
        self._file_obj.seek(0)
        reader = csv.DictReader(self._file_obj)
        if reader.fieldnames is None:
            raise CSVHeaderError(missing=get_landlord_required_headers())

        header_result = _validate_headers(reader.fieldnames)
        reader.fieldnames = list(header_result.canonical_headers)
        self._header_result = header_result
        return reader

    def iter_rows(self) -> Iterator[LandlordCSVRow]:
        try:
            reader = self._prepare_reader()
            row_number = 0
            for raw_row in reader:
                # Drop overflow cells (restkey None) and turn short-row gaps into "".
                row = {key: (value if value is not None else "") for key, value in raw_row.items() if key is not None}

                if _row_is_blank(row):
                    self.statistics.rows_skipped_blank += 1
                    continue

                row_number += 1
                self.statistics.rows_processed += 1
                yield LandlordCSVRow(row_number=row_number, source_line=reader.line_num, data=row)
        except csv.Error as exc:
            raise CSVMalformedError(f"Malformed CSV: {exc}") from exc

    def read_rows(self) -> list[dict[str, str]]:
        return [row.data for row in self.iter_rows()]
