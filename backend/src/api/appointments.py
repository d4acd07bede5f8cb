# pyright: reportMissingTypeStubs=false
"""
Appointment API endpoints.

Owners book and manage appointments for their pets, vets manage the
appointments on their calendar, and admins can act on every appointment.
All scheduling rules live in AppointmentService; these handlers only
authorize the caller and translate requests and responses.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.dependencies import UserContext, require_admin_role, require_authenticated
from core.constants import (
    APPOINTMENT_STATUS_BOOKED, APPOINTMENT_STATUS_CANCELLED, APPOINTMENT_STATUS_COMPLETED,
    DEFAULT_PAGE_SIZE, MAX_REASON_LENGTH, ERROR_FORBIDDEN,
)
from core.database import get_db
from models import Appointment, Pet
from services.appointment_service import AppointmentService
from utils.errors import api_error
from utils.vet_resolver import resolve_vet_for_user
from api.responses import AppointmentListResponse, AppointmentResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request Models =====

class AppointmentCreateRequest(BaseModel):
    """Request model for booking an appointment."""
    pet_id: int
    vet_id: int
    start_time: str  # ISO 8601; no offset means clinic time
    end_time: str
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)


class AppointmentRescheduleRequest(BaseModel):
    """Request model for moving an appointment to a new window."""
    start_time: str
    end_time: str


class AppointmentStatusRequest(BaseModel):
    """Request model for the generic status transition endpoint."""
    status: str  # Target status: BOOKED, CANCELLED or COMPLETED


# ===== Authorization helpers =====

def _is_assigned_vet(db: Session, current_user: UserContext, appointment: Appointment) -> bool:
    if not current_user.is_vet():
        return False
    vet = resolve_vet_for_user(db, current_user.user_id, current_user.email)
    return vet is not None and vet.id == appointment.vet_id


def _is_pet_owner(current_user: UserContext, appointment: Appointment) -> bool:
    return current_user.is_owner() and appointment.pet.owner_id == current_user.user_id


def _authorize(
    db: Session,
    current_user: UserContext,
    appointment: Appointment,
    allow_vet: bool = True,
    allow_owner: bool = True
) -> None:
    """Raise forbidden unless the caller is an admin or an allowed party of the appointment."""
    if current_user.is_admin():
        return
    if allow_owner and _is_pet_owner(current_user, appointment):
        return
    if allow_vet and _is_assigned_vet(db, current_user, appointment):
        return
    raise api_error(ERROR_FORBIDDEN, "You do not have access to this appointment")


# ===== Endpoints =====

@router.get("", summary="List appointments", response_model=AppointmentListResponse)
async def list_appointments(
    vet_id: Optional[int] = Query(default=None),
    owner_id: Optional[int] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    date_from: Optional[str] = Query(default=None, description="Inclusive, YYYY-MM-DD or ISO datetime"),
    date_to: Optional[str] = Query(default=None, description="Exclusive, YYYY-MM-DD or ISO datetime"),
    page: int = Query(default=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE),
    current_user: UserContext = Depends(require_authenticated),
    db: Session = Depends(get_db)
) -> AppointmentListResponse:
    """
    List appointments visible to the caller.

    Admins see everything and may filter freely. Vets only see the calendar of
    the vet profile linked to their account. Owners only see their own pets.
    """
    try:
        if current_user.is_vet():
            vet = resolve_vet_for_user(db, current_user.user_id, current_user.email)
            if vet is None:
                raise api_error(ERROR_FORBIDDEN, "No vet profile is linked to this account")
            vet_id = vet.id
        elif current_user.is_owner():
            owner_id = current_user.user_id

        appointments, total = AppointmentService.list_appointments(
            db,
            vet_id=vet_id,
            owner_id=owner_id,
            status=status_filter,
            date_from=date_from,
            date_to=date_to,
            page=page,
            page_size=page_size
        )
        return AppointmentListResponse.from_page(appointments, total, page, page_size)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list appointments: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list appointments"
        )


@router.get("/{appointment_id}", summary="Get appointment", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: UserContext = Depends(require_authenticated),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """Get a single appointment (admin, assigned vet or pet owner)."""
    appointment = AppointmentService.get_appointment(db, appointment_id)
    _authorize(db, current_user, appointment)
    return AppointmentResponse.from_model(appointment)


@router.post("", summary="Book appointment", response_model=AppointmentResponse,
             status_code=status.HTTP_201_CREATED)
async def create_appointment(
    request: AppointmentCreateRequest,
    current_user: UserContext = Depends(require_authenticated),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """
    Book an appointment for a pet.

    Admins can book for any pet; owners only for their own pets.
    """
    try:
        if not current_user.is_admin():
            pet = db.query(Pet).filter(Pet.id == request.pet_id).first()
            if pet is not None and (not current_user.is_owner() or pet.owner_id != current_user.user_id):
                raise api_error(ERROR_FORBIDDEN, "You can only book appointments for your own pets")

        appointment = AppointmentService.create_appointment(
            db,
            pet_id=request.pet_id,
            vet_id=request.vet_id,
            start_time=request.start_time,
            end_time=request.end_time,
            reason=request.reason
        )
        return AppointmentResponse.from_model(appointment)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create appointment: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create appointment"
        )


@router.patch("/{appointment_id}/reschedule", summary="Reschedule appointment",
              response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    request: AppointmentRescheduleRequest,
    current_user: UserContext = Depends(require_authenticated),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """Move a booked appointment to a new window (admin, assigned vet or pet owner)."""
    try:
        appointment = AppointmentService.get_appointment(db, appointment_id)
        _authorize(db, current_user, appointment)
        appointment = AppointmentService.reschedule_appointment(
            db, appointment_id, request.start_time, request.end_time
        )
        return AppointmentResponse.from_model(appointment)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to reschedule appointment {appointment_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reschedule appointment"
        )


@router.patch("/{appointment_id}/cancel", summary="Cancel appointment",
              response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    current_user: UserContext = Depends(require_authenticated),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """Cancel a booked appointment (admin, assigned vet or pet owner)."""
    try:
        appointment = AppointmentService.get_appointment(db, appointment_id)
        _authorize(db, current_user, appointment)
        appointment = AppointmentService.cancel_appointment(db, appointment_id)
        return AppointmentResponse.from_model(appointment)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to cancel appointment {appointment_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to cancel appointment"
        )


@router.patch("/{appointment_id}/restore", summary="Restore cancelled appointment",
              response_model=AppointmentResponse)
async def restore_appointment(
    appointment_id: int,
    current_user: UserContext = Depends(require_authenticated),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """Re-book a cancelled appointment in its original window (admin or pet owner)."""
    try:
        appointment = AppointmentService.get_appointment(db, appointment_id)
        _authorize(db, current_user, appointment, allow_vet=False)
        appointment = AppointmentService.restore_appointment(db, appointment_id)
        return AppointmentResponse.from_model(appointment)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to restore appointment {appointment_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to restore appointment"
        )


@router.patch("/{appointment_id}/complete", summary="Complete appointment",
              response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: int,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """Mark a paid appointment as completed (admin only)."""
    try:
        appointment = AppointmentService.complete_appointment(db, appointment_id)
        return AppointmentResponse.from_model(appointment)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to complete appointment {appointment_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to complete appointment"
        )


@router.post("/{appointment_id}/status", summary="Transition appointment status",
             response_model=AppointmentResponse)
async def transition_appointment_status(
    appointment_id: int,
    request: AppointmentStatusRequest,
    current_user: UserContext = Depends(require_authenticated),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """
    Move an appointment to a target status.

    Permissions follow the operation the target maps to: CANCELLED as for
    cancel, BOOKED as for restore, COMPLETED admin only.
    """
    try:
        appointment = AppointmentService.get_appointment(db, appointment_id)
        target = request.status.strip().upper()
        if target == APPOINTMENT_STATUS_CANCELLED:
            _authorize(db, current_user, appointment)
        elif target == APPOINTMENT_STATUS_BOOKED:
            _authorize(db, current_user, appointment, allow_vet=False)
        elif target == APPOINTMENT_STATUS_COMPLETED:
            if not current_user.is_admin():
                raise api_error(ERROR_FORBIDDEN, "Admin access required")
        else:
            _authorize(db, current_user, appointment)

        appointment = AppointmentService.transition_appointment(db, appointment_id, request.status)
        return AppointmentResponse.from_model(appointment)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to transition appointment {appointment_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update appointment status"
        )
