# estate_app/models/__init__.py
"""
Database models package
"""

from .activity_log import ActivityLog, ActivityLogDetail
from .admin_profile import FEATURE_PERMISSIONS, AdminProfile, AdminRole, default_feature_permissions
from .base import BaseModel, db
from .landlord import Landlord, LandlordStatus, OccupancyType, OnboardingStatus

__all__ = [
    "db",
    "BaseModel",
    "AdminProfile",
    "AdminRole",
    "FEATURE_PERMISSIONS",
    "default_feature_permissions",
    "Landlord",
    "LandlordStatus",
    "OccupancyType",
    "OnboardingStatus",
    "ActivityLog",
    "ActivityLogDetail",
]
