# estate_app/models/activity_log.py
"""
Audit trail tables.

An ``ActivityLog`` row records one administrative action (for example a CSV
import attempt). Bulk actions additionally own ``ActivityLogDetail`` rows, one
per input row that was skipped. Both tables are append-only.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import db


class ActivityLog(db.Model):
    """A single audited admin action."""

    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    admin_id: Mapped[int | None] = mapped_column(
        ForeignKey("admin_profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action_type: Mapped[str] = mapped_column(db.String(64), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(db.String(64), nullable=False, index=True)
    entity_id: Mapped[str | None] = mapped_column(db.String(64), nullable=True, index=True)
    total_rows: Mapped[int | None] = mapped_column(db.Integer, nullable=True)
    successful_rows: Mapped[int | None] = mapped_column(db.Integer, nullable=True)
    skipped_rows: Mapped[int | None] = mapped_column(db.Integer, nullable=True)
    metadata_json: Mapped[dict | None] = mapped_column(db.JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    admin = relationship("AdminProfile", foreign_keys=[admin_id])
    details = relationship(
        "ActivityLogDetail",
        back_populates="activity_log",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ActivityLogDetail.row_number",
    )

    __table_args__ = (Index("idx_activity_logs_action_created", "action_type", "created_at"),)

    def __repr__(self):
        return f"<ActivityLog {self.id} {self.action_type}>"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "admin_id": self.admin_id,
            "admin_email": self.admin.email if self.admin else None,
            "action_type": self.action_type,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "total_rows": self.total_rows,
            "successful_rows": self.successful_rows,
            "skipped_rows": self.skipped_rows,
            "metadata": self.metadata_json or {},
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ActivityLogDetail(db.Model):
    """Per-row failure reason attached to a bulk ``ActivityLog``."""

    __tablename__ = "activity_log_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    activity_log_id: Mapped[int] = mapped_column(
        ForeignKey("activity_logs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    row_number: Mapped[int] = mapped_column(db.Integer, nullable=False)
    failure_reason: Mapped[str] = mapped_column(db.Text, nullable=False)
    row_data: Mapped[dict | None] = mapped_column(db.JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    activity_log = relationship("ActivityLog", back_populates="details")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "activity_log_id": self.activity_log_id,
            "row_number": self.row_number,
            "failure_reason": self.failure_reason,
            "row_data": self.row_data or {},
        }
