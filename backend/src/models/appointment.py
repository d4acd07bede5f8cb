"""
Appointment model representing a scheduled visit of a pet with a vet.

Appointments are the core of the scheduling system. Each appointment links a
pet and a vet for an absolute time window on a single local day and moves
through the BOOKED / CANCELLED / COMPLETED lifecycle.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, ForeignKey, Index, TIMESTAMP, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from utils.datetime_utils import ensure_clinic_tz


class Appointment(Base):
    """
    Appointment entity representing a visit between a pet and a vet.

    Only BOOKED appointments take part in conflict detection; CANCELLED and
    COMPLETED rows keep their window for history but never block a booking.
    On PostgreSQL the baseline migration adds an exclusion constraint that
    rejects two overlapping BOOKED windows for the same vet.
    """

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the appointment."""

    pet_id: Mapped[int] = mapped_column(ForeignKey("pets.id"))
    """Reference to the pet being seen."""

    vet_id: Mapped[int] = mapped_column(ForeignKey("vets.id"))
    """Reference to the vet running the appointment."""

    start_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Start instant of the appointment (inclusive)."""

    end_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """End instant of the appointment (exclusive)."""

    status: Mapped[str] = mapped_column(String(20), default="BOOKED")  # 'BOOKED', 'CANCELLED', 'COMPLETED'
    """Current status of the appointment. Valid values: 'BOOKED', 'CANCELLED', 'COMPLETED'."""

    reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    """Optional owner-provided reason for the visit."""

    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    """Optional clinic notes."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the appointment was created."""

    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the appointment was last updated."""

    # Relationships
    pet = relationship("Pet", back_populates="appointments")
    """Relationship to the Pet being seen."""

    vet = relationship("Vet", back_populates="appointments")
    """Relationship to the assigned Vet."""

    payments = relationship("Payment", back_populates="appointment")
    """Relationship to payment records for this appointment."""

    __table_args__ = (
        CheckConstraint('end_time > start_time', name='ck_appointments_time_range'),
        CheckConstraint(
            "status IN ('BOOKED', 'CANCELLED', 'COMPLETED')",
            name='ck_appointments_status',
        ),
        Index('idx_appointments_pet', 'pet_id'),
        # Conflict detection loads one vet's booked appointments for one day
        Index('idx_appointments_vet_status_start', 'vet_id', 'status', 'start_time'),
        Index('idx_appointments_start', 'start_time'),
    )

    @property
    def local_start(self) -> datetime:
        """Start instant in the clinic timezone."""
        return ensure_clinic_tz(self.start_time)  # type: ignore[return-value]

    @property
    def local_end(self) -> datetime:
        """End instant in the clinic timezone."""
        return ensure_clinic_tz(self.end_time)  # type: ignore[return-value]

    @property
    def owner_id(self) -> int:
        """Owner of the pet this appointment is for."""
        return self.pet.owner_id

    def __repr__(self) -> str:
        return f"<Appointment(id={self.id}, vet_id={self.vet_id}, status='{self.status}', {self.start_time}-{self.end_time})>"
