# estate_app/models/landlord.py

from __future__ import annotations

import enum

from sqlalchemy import CheckConstraint, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, db


class OccupancyType(str, enum.Enum):
    OWNER = "owner"
    TENANT = "tenant"


class OnboardingStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LandlordStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Landlord(BaseModel):
    """A landlord (owner or tenant household) registered on the estate.

    ``phone`` is stored in canonical ``+234XXXXXXXXXX`` form and is unique, so
    two imports racing on the same number fail at insert time instead of
    producing a duplicate record.
    """

    __tablename__ = "landlords"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str | None] = mapped_column(db.String(50), nullable=True)
    full_name: Mapped[str] = mapped_column(db.String(200), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(db.String(20), nullable=False, unique=True, index=True)
    email: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    house_address: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    road: Mapped[str] = mapped_column(db.String(200), nullable=False)
    zone: Mapped[str] = mapped_column(db.String(100), nullable=False, default="Zone D")
    occupancy_type: Mapped[OccupancyType] = mapped_column(
        Enum(OccupancyType, name="occupancy_type_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    # Month-day strings without a year, always zero-padded MM-DD.
    date_of_birth: Mapped[str | None] = mapped_column(db.String(5), nullable=True)
    wedding_anniversary: Mapped[str | None] = mapped_column(db.String(5), nullable=True)
    celebrate_opt_in: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=False)
    onboarding_status: Mapped[OnboardingStatus] = mapped_column(
        Enum(OnboardingStatus, name="onboarding_status_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OnboardingStatus.PENDING,
    )
    status: Mapped[LandlordStatus] = mapped_column(
        Enum(LandlordStatus, name="landlord_status_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LandlordStatus.ACTIVE,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("length(phone) = 14", name="ck_landlords_phone_canonical_length"),
        Index("idx_landlords_road_zone", "road", "zone"),
    )

    def __repr__(self):
        return f"<Landlord {self.full_name} {self.phone}>"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "full_name": self.full_name,
            "phone": self.phone,
            "email": self.email,
            "house_address": self.house_address,
            "road": self.road,
            "zone": self.zone,
            "occupancy_type": self.occupancy_type.value if self.occupancy_type else None,
            "date_of_birth": self.date_of_birth,
            "wedding_anniversary": self.wedding_anniversary,
            "celebrate_opt_in": self.celebrate_opt_in,
            "onboarding_status": self.onboarding_status.value if self.onboarding_status else None,
            "status": self.status.value if self.status else None,
        }
