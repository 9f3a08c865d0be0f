"""
Importer adapters package.
"""

from .csv_landlords import (
    CSVAdapterError,
    CSVDecodeError,
    CSVHeaderError,
    CSVMalformedError,
    HeaderValidationResult,
    LandlordCSVAdapter,
    LandlordCSVRow,
    LandlordCSVStatistics,
)

__all__ = [
    "CSVAdapterError",
    "CSVDecodeError",
    "CSVHeaderError",
    "CSVMalformedError",
    "HeaderValidationResult",
    "LandlordCSVAdapter",
    "LandlordCSVRow",
    "LandlordCSVStatistics",
]
