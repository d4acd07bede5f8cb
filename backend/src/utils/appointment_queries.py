"""
Utility functions for consistent appointment queries.

This module contains reusable query functions so the booking-conflict lookup
and the appointment list filters are applied the same way by every service
and API.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, Query, joinedload

from core.constants import APPOINTMENT_STATUS_BOOKED
from models import Appointment, Pet
from utils.datetime_utils import ensure_clinic_tz, local_day_bounds


def booked_appointments_for_vet_on_day(
    db: Session,
    vet_id: int,
    day_instant: datetime,
    exclude_appointment_id: Optional[int] = None
) -> List[Appointment]:
    """
    Load the BOOKED appointments of a vet that start on the local day of `day_instant`.

    Appointments never span two local days, so these are the only candidates
    that can overlap a window on that day.

    Args:
        db: Database session
        vet_id: Vet profile ID
        day_instant: Any instant on the day of interest
        exclude_appointment_id: Appointment to leave out (the one being rescheduled/restored)

    Returns:
        Booked appointments ordered by start time
    """
    day_start, day_end = local_day_bounds(day_instant)
    query = db.query(Appointment).filter(
        Appointment.vet_id == vet_id,
        Appointment.status == APPOINTMENT_STATUS_BOOKED,
        Appointment.start_time >= day_start,
        Appointment.start_time < day_end,
    )
    if exclude_appointment_id is not None:
        query = query.filter(Appointment.id != exclude_appointment_id)
    return query.order_by(Appointment.start_time).all()


def filter_appointments(
    query: Query[Appointment],
    vet_id: Optional[int] = None,
    owner_id: Optional[int] = None,
    status: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None
) -> Query[Appointment]:
    """
    Apply the list filters to an Appointment query.

    `date_from` is inclusive and `date_to` exclusive, both compared with the
    appointment start time. `owner_id` joins through the pet.
    """
    if vet_id is not None:
        query = query.filter(Appointment.vet_id == vet_id)
    if owner_id is not None:
        query = query.join(Pet, Appointment.pet_id == Pet.id).filter(Pet.owner_id == owner_id)
    if status is not None:
        query = query.filter(Appointment.status == status)
    if date_from is not None:
        query = query.filter(Appointment.start_time >= ensure_clinic_tz(date_from))
    if date_to is not None:
        query = query.filter(Appointment.start_time < ensure_clinic_tz(date_to))
    return query


def base_appointment_query(db: Session) -> Query[Appointment]:
    """Appointment query with the pet eagerly loaded (owner checks need it)."""
    return db.query(Appointment).options(joinedload(Appointment.pet))
