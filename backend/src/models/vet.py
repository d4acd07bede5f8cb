"""
Vet profile model.

A vet profile is the bookable resource: appointments and weekly availability
hang off it. It can optionally be linked to a login account (users.id) so a
signed-in VET can be matched to their own calendar.
"""

from typing import Optional
from datetime import datetime
from sqlalchemy import String, ForeignKey, TIMESTAMP, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Vet(Base):
    """Veterinarian profile with an active flag and an optional linked user."""

    __tablename__ = "vets"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the vet profile."""

    name: Mapped[str] = mapped_column(String(255))
    """Display name of the vet."""

    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    """
    Optional contact email.

    Also used as the fallback key when resolving the profile of a VET user
    whose account is not linked through user_id.
    """

    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), unique=True, nullable=True)
    """Login account linked to this vet profile, if any."""

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    """Inactive vets cannot receive new bookings."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="vet_profile")
    availability = relationship("AvailabilitySlot", back_populates="vet", cascade="all, delete-orphan")
    appointments = relationship("Appointment", back_populates="vet")

    def __repr__(self) -> str:
        return f"<Vet(id={self.id}, name='{self.name}', active={self.active})>"
