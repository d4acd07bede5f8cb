"""
Scheduling engine for vet bookings.

Decides whether a proposed appointment window is legal for a vet:
- it must be fully contained in one of the vet's weekly availability windows
- it must not overlap any other BOOKED appointment of that vet

Also owns the per-vet serialization point that every check-then-write
sequence (create, reschedule, restore, slot edits) runs inside, so two
concurrent requests cannot both pass the checks and then both write.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Generator, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from core.constants import ERROR_OUTSIDE_AVAILABILITY, ERROR_SLOT_CONFLICT
from models import Appointment, AvailabilitySlot
from utils.appointment_queries import booked_appointments_for_vet_on_day
from utils.datetime_utils import (
    ensure_clinic_tz, intervals_overlap, minute_of_day, same_local_day, weekday_of
)
from utils.errors import api_error

logger = logging.getLogger(__name__)

# First key of the two-int advisory lock; the second key is the vet ID
VET_SCHEDULE_LOCK_NAMESPACE = 4207

_vet_locks: Dict[int, threading.Lock] = {}
_vet_locks_guard = threading.Lock()


def _get_vet_lock(vet_id: int) -> threading.Lock:
    with _vet_locks_guard:
        lock = _vet_locks.get(vet_id)
        if lock is None:
            lock = threading.Lock()
            _vet_locks[vet_id] = lock
        return lock


@contextmanager
def vet_schedule_lock(db: Session, vet_id: int) -> Generator[None, None, None]:
    """
    Serialize booking writes for one vet.

    Holds an in-process lock for the vet and, on PostgreSQL, a
    transaction-scoped advisory lock so separate worker processes are
    serialized too. The caller must commit inside the block; the advisory
    lock is released by that commit. If the block raises, the transaction
    is rolled back before the in-process lock is released, so a rejected
    request never leaves the advisory lock held.

    Usage:
        with vet_schedule_lock(db, vet_id):
            SchedulingService.ensure_bookable(db, vet_id, start, end)
            db.add(appointment)
            db.commit()
    """
    lock = _get_vet_lock(vet_id)
    with lock:
        try:
            bind = db.get_bind()
            if bind.dialect.name == "postgresql":
                db.execute(
                    text("SELECT pg_advisory_xact_lock(:namespace, :vet_id)"),
                    {"namespace": VET_SCHEDULE_LOCK_NAMESPACE, "vet_id": vet_id}
                )
            yield
        except BaseException:
            db.rollback()
            raise


class SchedulingService:
    """
    Availability containment and booking conflict checks.

    The decision functions (is_window_within_slots, has_appointment_conflicts)
    are pure and work on pre-fetched data; the public checks load that data
    and delegate to them. Nothing here writes to the database.
    """

    @staticmethod
    def is_window_within_slots(
        slots: List[AvailabilitySlot],
        start_minutes: int,
        end_minutes: int
    ) -> bool:
        """
        Check if a minute-of-day window is within at least one slot.

        Pure function - no database queries. Uses pre-fetched data.
        Containment is required; a window that only partially overlaps a slot
        is not available.

        Args:
            slots: Vet's availability windows for the weekday
            start_minutes: Window start (minute of day)
            end_minutes: Window end (minute of day)

        Returns:
            True if some slot contains the window, False otherwise
        """
        for slot in slots:
            if slot.start_minutes <= start_minutes and end_minutes <= slot.end_minutes:
                return True
        return False

    @staticmethod
    def has_appointment_conflicts(
        appointments: List[Appointment],
        start: datetime,
        end: datetime
    ) -> bool:
        """
        Check if a window overlaps any of the given appointments.

        Pure function - no database queries. Uses pre-fetched data.
        Touching windows (one ends exactly when the other starts) do not conflict.
        """
        for appointment in appointments:
            if intervals_overlap(start, end, appointment.local_start, appointment.local_end):
                return True
        return False

    @staticmethod
    def get_slots_for_weekday(db: Session, vet_id: int, weekday: int) -> List[AvailabilitySlot]:
        """Load a vet's availability windows for one weekday, ordered by start."""
        return db.query(AvailabilitySlot).filter(
            AvailabilitySlot.vet_id == vet_id,
            AvailabilitySlot.weekday == weekday
        ).order_by(AvailabilitySlot.start_minutes).all()

    @staticmethod
    def is_within_availability(
        db: Session,
        vet_id: int,
        start: datetime,
        end: datetime
    ) -> bool:
        """
        Check if [start, end) falls fully inside one of the vet's weekly windows.

        The window is projected onto the clinic's local weekday and minute of
        day. Windows that cross local midnight are never available.

        Args:
            db: Database session
            vet_id: Vet profile ID
            start: Window start instant
            end: Window end instant

        Returns:
            True if a single availability slot contains the whole window
        """
        start = ensure_clinic_tz(start)  # type: ignore[assignment]
        end = ensure_clinic_tz(end)  # type: ignore[assignment]
        if not same_local_day(start, end):
            return False

        start_minutes = minute_of_day(start)
        end_minutes = minute_of_day(end)
        if end_minutes <= start_minutes:
            return False

        slots = SchedulingService.get_slots_for_weekday(db, vet_id, weekday_of(start))
        return SchedulingService.is_window_within_slots(slots, start_minutes, end_minutes)

    @staticmethod
    def has_conflict(
        db: Session,
        vet_id: int,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[int] = None
    ) -> bool:
        """
        Check if [start, end) overlaps another BOOKED appointment of the vet.

        Args:
            db: Database session
            vet_id: Vet profile ID
            start: Window start instant
            end: Window end instant
            exclude_appointment_id: Appointment to ignore (itself, when rescheduling or restoring)

        Returns:
            True if the window conflicts with a booked appointment
        """
        start = ensure_clinic_tz(start)  # type: ignore[assignment]
        end = ensure_clinic_tz(end)  # type: ignore[assignment]
        booked = booked_appointments_for_vet_on_day(
            db, vet_id, start, exclude_appointment_id=exclude_appointment_id
        )
        return SchedulingService.has_appointment_conflicts(booked, start, end)

    @staticmethod
    def ensure_bookable(
        db: Session,
        vet_id: int,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[int] = None
    ) -> None:
        """
        Raise if the window cannot be booked for the vet.

        Raises:
            HTTPException: outside_availability (409) if no slot contains the
                window, slot_conflict (409) if it overlaps a booked appointment
        """
        if not SchedulingService.is_within_availability(db, vet_id, start, end):
            logger.info(f"Rejected window outside availability: vet_id={vet_id}, {start} - {end}")
            raise api_error(
                ERROR_OUTSIDE_AVAILABILITY,
                "The requested time is outside the vet's availability"
            )

        if SchedulingService.has_conflict(db, vet_id, start, end, exclude_appointment_id):
            logger.info(f"Rejected conflicting window: vet_id={vet_id}, {start} - {end}")
            raise api_error(
                ERROR_SLOT_CONFLICT,
                "The requested time overlaps another booked appointment"
            )
