"""
Importer-specific utilities for handling uploaded files.
"""

from __future__ import annotations

from typing import Iterable

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

CSV_EXTENSIONS: tuple[str, ...] = ("csv",)


def allowed_file(filename: str, allowed_extensions: Iterable[str] = CSV_EXTENSIONS) -> bool:
    """
    Validate the uploaded filename extension against the allowed set.
    """

    if not filename or "." not in filename:
        return False
    extension = filename.rsplit(".", 1)[1].lower()
    return extension in {ext.lower() for ext in allowed_extensions}


def max_upload_bytes(app=None) -> int:
    config = (app or current_app).config
    megabytes = int(config.get("IMPORTER_MAX_UPLOAD_MB", 5) or 5)
    return megabytes * 1024 * 1024


def read_upload(file_storage: FileStorage | None, *, max_bytes: int) -> tuple[str, bytes]:
    """
    Validate an uploaded CSV and return its safe filename and raw bytes.

    Raises ``ValueError`` for a missing or non-CSV upload and ``OverflowError``
    when the file is larger than ``max_bytes``.
    """

    if file_storage is None or not file_storage.filename:
        raise ValueError("No file uploaded.")
    if not allowed_file(file_storage.filename):
        raise ValueError("Unsupported file type; only CSV is allowed.")

    # Read one byte past the limit so oversize uploads are detected without
    # trusting the Content-Length header.
    payload = file_storage.stream.read(max_bytes + 1)
    if len(payload) > max_bytes:
        raise OverflowError("Upload exceeds maximum size limit.")
    if not payload.strip():
        raise ValueError("Uploaded file is empty.")

    filename = secure_filename(file_storage.filename) or "upload.csv"
    return filename, payload
