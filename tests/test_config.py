import logging

import pytest

from config.base import _coerce_bool, _coerce_int
from config.validation import validate_and_exit, validate_environment
from estate_app.utils.logging_config import JSONFormatter


@pytest.mark.parametrize(
    "value, expected",
    [("1", True), ("YES", True), ("on", True), ("0", False), ("off", False), (None, True), ("maybe", True)],
)
def test_coerce_bool(value, expected):
    assert _coerce_bool(value, default=True) is expected


@pytest.mark.parametrize("value, expected", [("10", 10), (" 3 ", 3), ("0", 5), ("-2", 5), ("ten", 5), (None, 5)])
def test_coerce_int(value, expected):
    assert _coerce_int(value, 5) == expected


def test_validation_skipped_outside_production():
    assert validate_environment("development") == (True, [])


def test_production_validation_collects_all_errors(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "your-secret-key")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("IMPORTER_MAX_UPLOAD_MB", "lots")
    monkeypatch.setenv("LOG_FORMAT", "xml")

    is_valid, errors = validate_environment("production")

    assert is_valid is False
    assert len(errors) == 4
    assert errors[0].startswith("SECRET_KEY is required")


def test_validate_and_exit_stops_on_errors(monkeypatch, capsys):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        validate_and_exit("production")

    assert excinfo.value.code == 1
    assert "ENVIRONMENT VALIDATION FAILED" in capsys.readouterr().err


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("estate", logging.INFO, __file__, 10, "imported %s rows", (3,), None)
    record.activity_log_id = 7

    payload = JSONFormatter("Estate Admin", "1.0.0").format(record)

    assert '"message": "imported 3 rows"' in payload
    assert '"activity_log_id": 7' in payload
    assert '"app": "Estate Admin"' in payload
