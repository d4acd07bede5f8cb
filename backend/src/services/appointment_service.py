"""
Appointment service for the booking lifecycle.

This module contains the appointment state machine shared by every API
endpoint: creating, rescheduling, cancelling, restoring and completing
appointments, plus the read helpers used for listing.

    (none) --create--> BOOKED --cancel--> CANCELLED --restore--> BOOKED
    BOOKED --reschedule--> BOOKED
    BOOKED --complete (paid)--> COMPLETED (terminal)

Every write that makes an appointment BOOKED re-validates the window against
the vet's availability and other booked appointments inside the vet's
schedule lock.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple, Union

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import (
    APPOINTMENT_STATUS_BOOKED, APPOINTMENT_STATUS_CANCELLED, APPOINTMENT_STATUS_COMPLETED,
    APPOINTMENT_STATUSES, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE,
    ERROR_INVALID_INPUT, ERROR_NOT_FOUND, ERROR_PET_ARCHIVED, ERROR_VET_UNAVAILABLE,
    ERROR_SLOT_CONFLICT, ERROR_INVALID_STATE, ERROR_PAYMENT_REQUIRED,
    ERROR_UNSUPPORTED_TRANSITION,
)
from models import Appointment, Pet, Vet
from services.notification_service import NotificationService
from services.payment_service import PaymentService
from services.scheduling_service import SchedulingService, vet_schedule_lock
from utils.appointment_queries import base_appointment_query, filter_appointments
from utils.datetime_utils import parse_date_string, parse_datetime_to_clinic
from utils.errors import api_error

logger = logging.getLogger(__name__)

DateTimeInput = Union[str, datetime]


class AppointmentService:
    """
    Service class for appointment operations.

    Contains the appointment state machine that is shared across the
    appointment API endpoints. Authorization is the caller's job.
    """

    @staticmethod
    def _parse_window(start: DateTimeInput, end: DateTimeInput) -> Tuple[datetime, datetime]:
        """
        Parse both bounds into clinic-timezone instants and require end > start.

        Raises:
            HTTPException: invalid_input if a bound cannot be parsed or end <= start
        """
        try:
            start_time = parse_datetime_to_clinic(start)
            end_time = parse_datetime_to_clinic(end)
        except ValueError as e:
            raise api_error(ERROR_INVALID_INPUT, str(e))

        if end_time <= start_time:
            raise api_error(ERROR_INVALID_INPUT, "End time must be after start time")
        return start_time, end_time

    @staticmethod
    def _get_for_update(db: Session, appointment_id: int) -> Appointment:
        """Load an appointment with a row lock (no-op on SQLite)."""
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id
        ).with_for_update().first()
        if not appointment:
            db.rollback()
            raise api_error(ERROR_NOT_FOUND, "Appointment not found")
        return appointment

    @staticmethod
    def _require_status(db: Session, appointment: Appointment, expected: str, action: str) -> None:
        """Raise invalid_state unless the appointment is in the expected status, releasing its row lock first."""
        if appointment.status != expected:
            db.rollback()
            raise api_error(
                ERROR_INVALID_STATE,
                f"Cannot {action} an appointment that is {appointment.status}"
            )

    @staticmethod
    def _commit_booking(db: Session, appointment: Appointment, action: str) -> None:
        """
        Commit a write that leaves the appointment BOOKED.

        A storage-level integrity failure (the PostgreSQL overlap exclusion
        constraint) means another request won the slot.
        """
        try:
            db.commit()
        except IntegrityError as e:
            logger.warning(f"Appointment {action} conflict for vet {appointment.vet_id}: {e}")
            db.rollback()
            raise api_error(ERROR_SLOT_CONFLICT, "The requested time overlaps another booked appointment")
        db.refresh(appointment)

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Appointment:
        """
        Get an appointment by ID.

        Raises:
            HTTPException: not_found if it does not exist
        """
        appointment = base_appointment_query(db).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise api_error(ERROR_NOT_FOUND, "Appointment not found")
        return appointment

    @staticmethod
    def list_appointments(
        db: Session,
        vet_id: Optional[int] = None,
        owner_id: Optional[int] = None,
        status: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> Tuple[List[Appointment], int]:
        """
        List appointments ordered by start time.

        Args:
            db: Database session
            vet_id: Only this vet's appointments
            owner_id: Only appointments of this owner's pets
            status: Only appointments in this status
            date_from: Start bound, inclusive ("YYYY-MM-DD" or ISO datetime)
            date_to: End bound, exclusive ("YYYY-MM-DD" or ISO datetime)
            page: 1-based page number
            page_size: Items per page (at most MAX_PAGE_SIZE)

        Returns:
            Tuple of (appointments on the page, total matching count)

        Raises:
            HTTPException: invalid_input for a bad status, date or page
        """
        if status is not None and status not in APPOINTMENT_STATUSES:
            raise api_error(ERROR_INVALID_INPUT, f"Unknown status: {status}")
        if page < 1:
            raise api_error(ERROR_INVALID_INPUT, "page must be at least 1")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise api_error(ERROR_INVALID_INPUT, f"page_size must be between 1 and {MAX_PAGE_SIZE}")

        try:
            from_dt = parse_date_string(date_from) if date_from else None
            to_dt = parse_date_string(date_to) if date_to else None
        except ValueError as e:
            raise api_error(ERROR_INVALID_INPUT, str(e))

        query = filter_appointments(
            base_appointment_query(db),
            vet_id=vet_id,
            owner_id=owner_id,
            status=status,
            date_from=from_dt,
            date_to=to_dt
        )
        total = query.count()
        appointments = query.order_by(
            Appointment.start_time, Appointment.id
        ).offset((page - 1) * page_size).limit(page_size).all()
        return appointments, total

    @staticmethod
    def create_appointment(
        db: Session,
        pet_id: int,
        vet_id: int,
        start_time: DateTimeInput,
        end_time: DateTimeInput,
        reason: Optional[str] = None
    ) -> Appointment:
        """
        Book a new appointment.

        Args:
            db: Database session
            pet_id: Pet being booked
            vet_id: Vet to book with
            start_time: Start instant (ISO string or datetime)
            end_time: End instant (ISO string or datetime)
            reason: Optional reason for the visit

        Returns:
            The BOOKED appointment

        Raises:
            HTTPException: invalid_input, not_found (pet), pet_archived,
                vet_unavailable, outside_availability or slot_conflict
        """
        start, end = AppointmentService._parse_window(start_time, end_time)

        pet = db.query(Pet).filter(Pet.id == pet_id).first()
        if not pet:
            db.rollback()
            raise api_error(ERROR_NOT_FOUND, "Pet not found")
        if pet.archived:
            db.rollback()
            raise api_error(ERROR_PET_ARCHIVED, "Pet is archived and cannot be booked")

        vet = db.query(Vet).filter(Vet.id == vet_id).first()
        if not vet or not vet.active:
            db.rollback()
            raise api_error(ERROR_VET_UNAVAILABLE, "Vet is not available for booking")

        with vet_schedule_lock(db, vet_id):
            SchedulingService.ensure_bookable(db, vet_id, start, end)
            appointment = Appointment(
                pet_id=pet_id,
                vet_id=vet_id,
                start_time=start,
                end_time=end,
                status=APPOINTMENT_STATUS_BOOKED,
                reason=reason
            )
            db.add(appointment)
            AppointmentService._commit_booking(db, appointment, "create")

        logger.info(f"Created appointment {appointment.id} for pet {pet_id} with vet {vet_id}")
        NotificationService.notify_booked(appointment)
        return appointment

    @staticmethod
    def reschedule_appointment(
        db: Session,
        appointment_id: int,
        new_start_time: DateTimeInput,
        new_end_time: DateTimeInput
    ) -> Appointment:
        """
        Move a BOOKED appointment to a new window with the same vet.

        The appointment itself is ignored by the conflict check, so moving it
        onto (or partly onto) its own current window is allowed.

        Raises:
            HTTPException: not_found, invalid_state, invalid_input,
                outside_availability or slot_conflict
        """
        appointment = AppointmentService._get_for_update(db, appointment_id)
        AppointmentService._require_status(db, appointment, APPOINTMENT_STATUS_BOOKED, "reschedule")
        try:
            start, end = AppointmentService._parse_window(new_start_time, new_end_time)
        except HTTPException:
            db.rollback()
            raise

        with vet_schedule_lock(db, appointment.vet_id):
            SchedulingService.ensure_bookable(
                db, appointment.vet_id, start, end, exclude_appointment_id=appointment.id
            )
            appointment.start_time = start
            appointment.end_time = end
            AppointmentService._commit_booking(db, appointment, "reschedule")

        logger.info(f"Rescheduled appointment {appointment_id} to {start} - {end}")
        NotificationService.notify_rescheduled(appointment)
        return appointment

    @staticmethod
    def cancel_appointment(db: Session, appointment_id: int) -> Appointment:
        """
        Cancel a BOOKED appointment. Its window stops blocking other bookings.

        Raises:
            HTTPException: not_found or invalid_state
        """
        appointment = AppointmentService._get_for_update(db, appointment_id)
        AppointmentService._require_status(db, appointment, APPOINTMENT_STATUS_BOOKED, "cancel")

        appointment.status = APPOINTMENT_STATUS_CANCELLED
        db.commit()
        db.refresh(appointment)

        logger.info(f"Cancelled appointment {appointment_id}")
        NotificationService.notify_cancelled(appointment)
        return appointment

    @staticmethod
    def restore_appointment(db: Session, appointment_id: int) -> Appointment:
        """
        Re-book a CANCELLED appointment in its original window.

        The window is checked against the vet's current availability and the
        bookings made since it was cancelled.

        Raises:
            HTTPException: not_found, invalid_state, outside_availability or slot_conflict
        """
        appointment = AppointmentService._get_for_update(db, appointment_id)
        AppointmentService._require_status(db, appointment, APPOINTMENT_STATUS_CANCELLED, "restore")

        with vet_schedule_lock(db, appointment.vet_id):
            SchedulingService.ensure_bookable(
                db,
                appointment.vet_id,
                appointment.local_start,
                appointment.local_end,
                exclude_appointment_id=appointment.id
            )
            appointment.status = APPOINTMENT_STATUS_BOOKED
            AppointmentService._commit_booking(db, appointment, "restore")

        logger.info(f"Restored appointment {appointment_id}")
        NotificationService.notify_booked(appointment)
        return appointment

    @staticmethod
    def complete_appointment(db: Session, appointment_id: int) -> Appointment:
        """
        Mark a paid BOOKED appointment as COMPLETED. No notification is sent.

        Raises:
            HTTPException: not_found, invalid_state or payment_required
        """
        appointment = AppointmentService._get_for_update(db, appointment_id)
        AppointmentService._require_status(db, appointment, APPOINTMENT_STATUS_BOOKED, "complete")

        if not PaymentService.has_successful_payment(db, appointment.id):
            db.rollback()
            raise api_error(ERROR_PAYMENT_REQUIRED, "A successful payment is required to complete this appointment")

        appointment.status = APPOINTMENT_STATUS_COMPLETED
        db.commit()
        db.refresh(appointment)

        logger.info(f"Completed appointment {appointment_id}")
        return appointment

    @staticmethod
    def transition_appointment(db: Session, appointment_id: int, target_status: str) -> Appointment:
        """
        Move an appointment to a target status through the matching operation.

        BOOKED restores, CANCELLED cancels, COMPLETED completes.

        Raises:
            HTTPException: unsupported_transition for any other target, plus
                the errors of the dispatched operation
        """
        target = (target_status or "").strip().upper()
        if target == APPOINTMENT_STATUS_BOOKED:
            return AppointmentService.restore_appointment(db, appointment_id)
        if target == APPOINTMENT_STATUS_CANCELLED:
            return AppointmentService.cancel_appointment(db, appointment_id)
        if target == APPOINTMENT_STATUS_COMPLETED:
            return AppointmentService.complete_appointment(db, appointment_id)
        raise api_error(ERROR_UNSUPPORTED_TRANSITION, f"Unsupported target status: {target_status}")
