"""
Pet model representing the animals that receive care at the clinic.

Each pet belongs to exactly one owner (a User with the OWNER role). Archived
pets stay in the database for history but can no longer be booked.
"""

from sqlalchemy import String, ForeignKey, TIMESTAMP, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional

from core.database import Base


class Pet(Base):
    """
    Pet entity owned by a single user.

    Pets are the subject of every appointment. Only the owner reference and
    the archived flag are consulted by the scheduler.
    """

    __tablename__ = "pets"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the pet."""

    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    """Reference to the owning user."""

    name: Mapped[str] = mapped_column(String(255))
    """Name of the pet."""

    species: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """Optional species (e.g. 'dog', 'cat')."""

    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    """True once the pet has been archived. Archived pets cannot be booked."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the pet was first created."""

    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the pet was last updated."""

    # Relationships
    owner = relationship("User", back_populates="pets")
    """Relationship to the owning User."""

    appointments = relationship("Appointment", back_populates="pet")
    """Relationship to all Appointment entities booked for this pet."""

    __table_args__ = (
        Index('idx_pets_owner', 'owner_id'),
    )

    def __repr__(self) -> str:
        return f"<Pet(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"
