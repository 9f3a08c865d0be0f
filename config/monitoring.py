# config/monitoring.py

import os

from prometheus_client import Counter


class MonitoringConfig:
    """Logging and monitoring configuration"""

    MONITORING_ENABLED = os.environ.get("MONITORING_ENABLED", "false").lower() == "true"

    # Logging Configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")  # 'json' or 'text'
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_FILE_MAX_BYTES = int(os.environ.get("LOG_FILE_MAX_BYTES", 10485760))  # 10MB
    LOG_FILE_BACKUP_COUNT = int(os.environ.get("LOG_FILE_BACKUP_COUNT", 10))

    # Console and File Logging
    ENABLE_FILE_LOGGING = os.environ.get("ENABLE_FILE_LOGGING", "true").lower() == "true"
    ENABLE_CONSOLE_LOGGING = os.environ.get("ENABLE_CONSOLE_LOGGING", "true").lower() == "true"

    # Application Info
    APP_NAME = os.environ.get("APP_NAME", "Estate Admin")
    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")


class DevelopmentMonitoringConfig(MonitoringConfig):
    """Development-specific monitoring configuration"""

    LOG_LEVEL = "DEBUG"
    LOG_FORMAT = "text"  # More readable in development
    ENABLE_FILE_LOGGING = True
    ENABLE_CONSOLE_LOGGING = True


class ProductionMonitoringConfig(MonitoringConfig):
    """Production-specific monitoring configuration"""

    LOG_LEVEL = "INFO"
    LOG_FORMAT = "json"  # Structured logging for production
    ENABLE_FILE_LOGGING = True
    ENABLE_CONSOLE_LOGGING = False  # Usually handled by container orchestration


class TestingMonitoringConfig(MonitoringConfig):
    """Testing-specific monitoring configuration"""

    MONITORING_ENABLED = False
    LOG_LEVEL = "WARNING"
    LOG_FORMAT = "text"
    ENABLE_FILE_LOGGING = False
    ENABLE_CONSOLE_LOGGING = False


class ImporterMonitoring:
    """Prometheus metric helpers for the landlord bulk importer."""

    IMPORT_RUNS_COUNTER = Counter(
        "landlord_import_runs_total",
        "Landlord bulk import attempts by outcome.",
        labelnames=("outcome", "source"),
    )
    IMPORT_ROWS_COUNTER = Counter(
        "landlord_import_rows_total",
        "Landlord rows processed by disposition.",
        labelnames=("disposition",),
    )
    AUDIT_WRITE_FAILURES = Counter(
        "landlord_import_audit_write_failures_total",
        "Activity log writes that failed during a landlord import.",
        labelnames=("target",),
    )

    @classmethod
    def record_import(cls, *, outcome: str, source: str, inserted: int = 0, invalid: int = 0, duplicates: int = 0):
        cls.IMPORT_RUNS_COUNTER.labels(outcome=outcome, source=source).inc()
        if inserted:
            cls.IMPORT_ROWS_COUNTER.labels(disposition="inserted").inc(inserted)
        if invalid:
            cls.IMPORT_ROWS_COUNTER.labels(disposition="invalid").inc(invalid)
        if duplicates:
            cls.IMPORT_ROWS_COUNTER.labels(disposition="duplicate_store").inc(duplicates)

    @classmethod
    def record_audit_failure(cls, *, target: str):
        cls.AUDIT_WRITE_FAILURES.labels(target=target).inc()
