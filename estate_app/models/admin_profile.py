# estate_app/models/admin_profile.py

from __future__ import annotations

import enum

from flask import current_app
from flask_login import UserMixin
from sqlalchemy import Enum
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Mapped, mapped_column
from werkzeug.security import check_password_hash, generate_password_hash

from .base import BaseModel, db


class AdminRole(str, enum.Enum):
    """Console roles. The chairman implicitly holds every feature permission."""

    CHAIRMAN = "chairman"
    ADMIN = "admin"


FEATURE_PERMISSIONS: tuple[str, ...] = (
    "dashboard",
    "landlords",
    "onboarding",
    "bulk_import",
    "payments",
    "receipts",
    "financial_overview",
    "celebrations",
    "audit_log",
    "settings",
)


def default_feature_permissions() -> dict[str, bool]:
    return {feature: True for feature in FEATURE_PERMISSIONS}


class AdminProfile(BaseModel, UserMixin):
    """An administrator of the estate console."""

    __tablename__ = "admin_profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(db.String(200), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    role: Mapped[AdminRole] = mapped_column(
        Enum(AdminRole, name="admin_role_enum"),
        nullable=False,
        default=AdminRole.ADMIN,
    )
    feature_permissions: Mapped[dict | None] = mapped_column(
        db.JSON,
        nullable=True,
        default=default_feature_permissions,
    )
    is_active: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<AdminProfile {self.email}>"

    @property
    def is_chairman(self) -> bool:
        return self.role == AdminRole.CHAIRMAN

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def has_permission(self, feature: str) -> bool:
        """Return True when the admin may use ``feature``.

        Features missing from ``feature_permissions`` fall back to the
        defaults, which enable everything.
        """
        if not self.is_active:
            return False
        if self.is_chairman:
            return True
        permissions = default_feature_permissions()
        permissions.update(self.feature_permissions or {})
        return bool(permissions.get(feature, False))

    @staticmethod
    def find_by_email(email):
        """Find an admin by email with error handling"""
        if not email:
            return None
        try:
            return AdminProfile.query.filter_by(email=email.strip().lower()).first()
        except SQLAlchemyError as e:
            current_app.logger.error("Database error finding admin by email %s: %s", email, e)
            return None
