"""
Vet availability model for the recurring weekly schedule.

Each record is one working window on one day of the week, stored as
minute-of-day bounds. Vets can have several windows per day (e.g. a morning
and an afternoon session); windows of the same vet and weekday never overlap,
although they may touch.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import TIMESTAMP, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from utils.datetime_utils import format_clock_time


class AvailabilitySlot(Base):
    """
    One recurring weekly availability window of a vet.

    The window is the half-open range [start_minutes, end_minutes) on
    `weekday`. An end of 1440 means the window runs to midnight.

    Non-overlap between siblings is checked by the slot manager; the table
    only enforces the per-row bounds.
    """

    __tablename__ = "vet_availability"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the availability window."""

    vet_id: Mapped[int] = mapped_column(ForeignKey("vets.id", ondelete="CASCADE"))
    """Reference to the vet profile that owns this window."""

    weekday: Mapped[int] = mapped_column()
    """Day of the week (0=Sunday, 1=Monday, ..., 6=Saturday)."""

    start_minutes: Mapped[int] = mapped_column()
    """Start of the window in minutes since local midnight (0-1439)."""

    end_minutes: Mapped[int] = mapped_column()
    """End of the window in minutes since local midnight (1-1440), exclusive."""

    # Metadata
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the window was created."""

    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the window was last updated."""

    # Relationships
    vet = relationship("Vet", back_populates="availability")
    """Relationship to the owning Vet."""

    __table_args__ = (
        CheckConstraint('weekday >= 0 AND weekday <= 6', name='ck_vet_availability_weekday'),
        CheckConstraint('start_minutes >= 0 AND start_minutes < 1440', name='ck_vet_availability_start'),
        CheckConstraint('end_minutes > 0 AND end_minutes <= 1440', name='ck_vet_availability_end'),
        CheckConstraint('start_minutes < end_minutes', name='ck_vet_availability_range'),
        Index('idx_vet_availability_vet_weekday_start', 'vet_id', 'weekday', 'start_minutes'),
    )

    @property
    def day_name(self) -> str:
        """Get the day name for display."""
        days = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
        return days[self.weekday]

    @property
    def start_clock(self) -> str:
        return format_clock_time(self.start_minutes)

    @property
    def end_clock(self) -> str:
        return format_clock_time(self.end_minutes)

    def __repr__(self) -> str:
        return f"<AvailabilitySlot(vet_id={self.vet_id}, day={self.day_name}, {self.start_clock}-{self.end_clock})>"
