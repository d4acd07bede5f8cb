"""
Availability service for managing vets' recurring weekly windows.

This module contains the slot manager used by the admin availability API:
adding, editing, deleting and listing a vet's weekly availability windows
while keeping windows of the same weekday from overlapping.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from core.constants import (
    MIN_WEEKDAY, MAX_WEEKDAY, MINUTES_PER_DAY,
    ERROR_INVALID_INPUT, ERROR_INVALID_FORMAT, ERROR_INVALID_RANGE,
    ERROR_NOT_FOUND, ERROR_SLOT_CONFLICT,
)
from core.sentinels import MISSING, MissingType
from models import AvailabilitySlot, Vet
from services.scheduling_service import vet_schedule_lock
from utils.datetime_utils import (
    InvalidTimeFormatError, format_clock_time, intervals_overlap,
    parse_clock_end_time, parse_clock_time,
)
from utils.errors import api_error

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Service class for availability slot operations.

    Slot writes for a vet run inside the same per-vet lock as bookings so the
    sibling overlap check and the write cannot interleave with another edit.
    """

    @staticmethod
    def _validate_weekday(weekday: int) -> None:
        if isinstance(weekday, bool) or not isinstance(weekday, int) or not MIN_WEEKDAY <= weekday <= MAX_WEEKDAY:
            raise api_error(ERROR_INVALID_INPUT, f"weekday must be between {MIN_WEEKDAY} and {MAX_WEEKDAY}")

    @staticmethod
    def _parse_range(start_clock: str, end_clock: str) -> tuple[int, int]:
        """
        Convert HH:MM bounds to minutes and validate the range.

        Raises:
            HTTPException: invalid_format for malformed clocks, invalid_range
                unless 0 <= start < end <= 1440
        """
        try:
            start_minutes = parse_clock_time(start_clock)
            end_minutes = parse_clock_end_time(end_clock)
        except InvalidTimeFormatError as e:
            raise api_error(ERROR_INVALID_FORMAT, str(e))

        if not (0 <= start_minutes <= MINUTES_PER_DAY and 0 <= end_minutes <= MINUTES_PER_DAY):
            raise api_error(ERROR_INVALID_RANGE, "Times must be within the day")
        if start_minutes >= end_minutes:
            raise api_error(ERROR_INVALID_RANGE, "Start time must be before end time")
        return start_minutes, end_minutes

    @staticmethod
    def _get_vet(db: Session, vet_id: int) -> Vet:
        vet = db.query(Vet).filter(Vet.id == vet_id).first()
        if not vet:
            db.rollback()
            raise api_error(ERROR_NOT_FOUND, "Vet not found")
        return vet

    @staticmethod
    def _get_owned_slot(db: Session, vet_id: int, slot_id: int) -> AvailabilitySlot:
        slot = db.query(AvailabilitySlot).filter(
            AvailabilitySlot.id == slot_id,
            AvailabilitySlot.vet_id == vet_id
        ).first()
        if not slot:
            db.rollback()
            raise api_error(ERROR_NOT_FOUND, "Availability slot not found")
        return slot

    @staticmethod
    def _check_siblings(
        db: Session,
        vet_id: int,
        weekday: int,
        start_minutes: int,
        end_minutes: int,
        exclude_slot_id: Optional[int] = None
    ) -> None:
        """Raise slot_conflict if the range overlaps another slot of the same vet and weekday."""
        query = db.query(AvailabilitySlot).filter(
            AvailabilitySlot.vet_id == vet_id,
            AvailabilitySlot.weekday == weekday
        )
        if exclude_slot_id is not None:
            query = query.filter(AvailabilitySlot.id != exclude_slot_id)

        for sibling in query.all():
            if intervals_overlap(start_minutes, end_minutes, sibling.start_minutes, sibling.end_minutes):
                raise api_error(
                    ERROR_SLOT_CONFLICT,
                    f"Overlaps existing slot {format_clock_time(sibling.start_minutes)}-"
                    f"{format_clock_time(sibling.end_minutes)}"
                )

    @staticmethod
    def add_slot(
        db: Session,
        vet_id: int,
        weekday: int,
        start_clock: str,
        end_clock: str
    ) -> AvailabilitySlot:
        """
        Add a weekly availability window for a vet.

        Args:
            db: Database session
            vet_id: Vet profile ID
            weekday: 0=Sunday ... 6=Saturday
            start_clock: Start time "HH:MM"
            end_clock: End time "HH:MM" ("24:00" allowed)

        Returns:
            The created slot

        Raises:
            HTTPException: invalid_input, not_found, invalid_format,
                invalid_range or slot_conflict
        """
        AvailabilityService._validate_weekday(weekday)
        start_minutes, end_minutes = AvailabilityService._parse_range(start_clock, end_clock)
        AvailabilityService._get_vet(db, vet_id)

        with vet_schedule_lock(db, vet_id):
            AvailabilityService._check_siblings(db, vet_id, weekday, start_minutes, end_minutes)
            slot = AvailabilitySlot(
                vet_id=vet_id,
                weekday=weekday,
                start_minutes=start_minutes,
                end_minutes=end_minutes
            )
            db.add(slot)
            db.commit()
            db.refresh(slot)

        logger.info(f"Added availability slot {slot.id} for vet {vet_id}: weekday={weekday}, {start_clock}-{end_clock}")
        return slot

    @staticmethod
    def update_slot(
        db: Session,
        vet_id: int,
        slot_id: int,
        weekday: Union[int, MissingType] = MISSING,
        start_clock: Union[str, MissingType] = MISSING,
        end_clock: Union[str, MissingType] = MISSING
    ) -> AvailabilitySlot:
        """
        Edit a weekly availability window.

        Fields left as MISSING keep their current value. The merged window is
        validated like a new one, ignoring the slot itself when checking for
        overlapping siblings, so saving unchanged values succeeds.

        Raises:
            HTTPException: not_found if the slot does not exist or belongs to
                another vet, plus the add_slot validation errors
        """
        with vet_schedule_lock(db, vet_id):
            slot = AvailabilityService._get_owned_slot(db, vet_id, slot_id)

            new_weekday = slot.weekday if isinstance(weekday, MissingType) else weekday
            AvailabilityService._validate_weekday(new_weekday)
            new_start_clock = format_clock_time(slot.start_minutes) if isinstance(start_clock, MissingType) else start_clock
            new_end_clock = format_clock_time(slot.end_minutes) if isinstance(end_clock, MissingType) else end_clock
            start_minutes, end_minutes = AvailabilityService._parse_range(new_start_clock, new_end_clock)

            AvailabilityService._check_siblings(
                db, vet_id, new_weekday, start_minutes, end_minutes, exclude_slot_id=slot.id
            )

            slot.weekday = new_weekday
            slot.start_minutes = start_minutes
            slot.end_minutes = end_minutes
            db.commit()
            db.refresh(slot)

        logger.info(f"Updated availability slot {slot_id} for vet {vet_id}")
        return slot

    @staticmethod
    def delete_slot(db: Session, vet_id: int, slot_id: int) -> None:
        """
        Delete a weekly availability window.

        Existing appointments inside the window are left untouched.

        Raises:
            HTTPException: not_found if the slot does not exist or belongs to another vet
        """
        slot = AvailabilityService._get_owned_slot(db, vet_id, slot_id)
        db.delete(slot)
        db.commit()
        logger.info(f"Deleted availability slot {slot_id} for vet {vet_id}")

    @staticmethod
    def list_slots(db: Session, vet_id: int, weekday: Optional[int] = None) -> List[AvailabilitySlot]:
        """
        List a vet's weekly availability windows ordered by weekday then start.

        Raises:
            HTTPException: not_found if the vet does not exist
        """
        AvailabilityService._get_vet(db, vet_id)
        query = db.query(AvailabilitySlot).filter(AvailabilitySlot.vet_id == vet_id)
        if weekday is not None:
            AvailabilityService._validate_weekday(weekday)
            query = query.filter(AvailabilitySlot.weekday == weekday)
        return query.order_by(AvailabilitySlot.weekday, AvailabilitySlot.start_minutes).all()
