# pyright: reportMissingTypeStubs=false
"""
Vet availability API endpoints.

Admins manage each vet's recurring weekly windows here. Bookings are only
accepted inside these windows.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth.dependencies import UserContext, require_admin_role
from core.database import get_db
from core.sentinels import MISSING
from services.availability_service import AvailabilityService
from api.responses import AvailabilitySlotListResponse, AvailabilitySlotResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class AvailabilitySlotCreateRequest(BaseModel):
    """Request model for adding a weekly window."""
    weekday: int  # 0=Sunday ... 6=Saturday
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM" ("24:00" allowed)


class AvailabilitySlotUpdateRequest(BaseModel):
    """Request model for editing a weekly window. Omitted fields are unchanged."""
    weekday: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


@router.get("/{vet_id}/availability", summary="List vet's weekly availability",
            response_model=AvailabilitySlotListResponse)
async def list_availability(
    vet_id: int,
    weekday: Optional[int] = Query(default=None),
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> AvailabilitySlotListResponse:
    """List a vet's weekly windows ordered by weekday then start time."""
    slots = AvailabilityService.list_slots(db, vet_id, weekday=weekday)
    return AvailabilitySlotListResponse(
        vet_id=vet_id,
        slots=[AvailabilitySlotResponse.from_model(slot) for slot in slots]
    )


@router.post("/{vet_id}/availability", summary="Add weekly availability window",
             response_model=AvailabilitySlotResponse, status_code=status.HTTP_201_CREATED)
async def add_availability(
    vet_id: int,
    request: AvailabilitySlotCreateRequest,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> AvailabilitySlotResponse:
    """Add a weekly window. Overlapping an existing window of the same day is rejected."""
    try:
        slot = AvailabilityService.add_slot(
            db, vet_id, request.weekday, request.start_time, request.end_time
        )
        return AvailabilitySlotResponse.from_model(slot)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to add availability for vet {vet_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add availability"
        )


@router.patch("/{vet_id}/availability/{slot_id}", summary="Edit weekly availability window",
              response_model=AvailabilitySlotResponse)
async def update_availability(
    vet_id: int,
    slot_id: int,
    request: AvailabilitySlotUpdateRequest,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> AvailabilitySlotResponse:
    """Edit a weekly window; fields not sent keep their current value."""
    sent = request.model_fields_set
    try:
        slot = AvailabilityService.update_slot(
            db,
            vet_id,
            slot_id,
            weekday=request.weekday if "weekday" in sent and request.weekday is not None else MISSING,
            start_clock=request.start_time if "start_time" in sent and request.start_time is not None else MISSING,
            end_clock=request.end_time if "end_time" in sent and request.end_time is not None else MISSING
        )
        return AvailabilitySlotResponse.from_model(slot)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to update availability slot {slot_id} for vet {vet_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update availability"
        )


@router.delete("/{vet_id}/availability/{slot_id}", summary="Delete weekly availability window",
               status_code=status.HTTP_204_NO_CONTENT)
async def delete_availability(
    vet_id: int,
    slot_id: int,
    current_user: UserContext = Depends(require_admin_role),
    db: Session = Depends(get_db)
) -> Response:
    """Delete a weekly window. Appointments already booked inside it are kept."""
    AvailabilityService.delete_slot(db, vet_id, slot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
