"""
Exceptions raised by the landlord import pipeline.

Only infrastructure failures are exceptions. Validation problems and
duplicates are reported as data on the results.
"""


class LandlordImportError(Exception):
    """Base class for fatal import failures; nothing has been inserted."""

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details


class DuplicateCheckError(LandlordImportError):
    """The existing-phone lookup against the landlord store failed."""


class LandlordInsertError(LandlordImportError):
    """The bulk insert failed and the transaction was rolled back."""
