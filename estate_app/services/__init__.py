"""
Service layer helpers
"""

from .activity_log_service import (
    ACTION_TYPES,
    CRITICAL_ACTIONS,
    ENTITY_TYPES,
    ActionType,
    ActivityLogError,
    ActivityLogService,
    EntityType,
    LogFilters,
)

__all__ = [
    "ACTION_TYPES",
    "CRITICAL_ACTIONS",
    "ENTITY_TYPES",
    "ActionType",
    "ActivityLogError",
    "ActivityLogService",
    "EntityType",
    "LogFilters",
]
