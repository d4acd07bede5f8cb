"""
Shared response models for API endpoints.

This module contains Pydantic response models that are shared across
multiple API endpoints to ensure consistency and reduce duplication.
"""

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from models import Appointment, AvailabilitySlot
from utils.datetime_utils import ensure_clinic_tz


class AppointmentResponse(BaseModel):
    """Response model for a single appointment."""
    id: int
    pet_id: int
    vet_id: int
    owner_id: int
    start_time: datetime  # Clinic timezone, ISO 8601 with offset
    end_time: datetime
    status: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            pet_id=appointment.pet_id,
            vet_id=appointment.vet_id,
            owner_id=appointment.owner_id,
            start_time=appointment.local_start,
            end_time=appointment.local_end,
            status=appointment.status,
            reason=appointment.reason,
            notes=appointment.notes,
            created_at=ensure_clinic_tz(appointment.created_at),
            updated_at=ensure_clinic_tz(appointment.updated_at),
        )


class AppointmentListResponse(BaseModel):
    """Response model for listing appointments."""
    appointments: List[AppointmentResponse]
    total: int
    page: int
    page_size: int
    total_pages: int  # At least 1, even when nothing matches
    has_prev: bool
    has_next: bool

    @classmethod
    def from_page(
        cls, appointments: List[Appointment], total: int, page: int, page_size: int
    ) -> "AppointmentListResponse":
        total_pages = max(1, math.ceil(total / page_size))
        return cls(
            appointments=[AppointmentResponse.from_model(a) for a in appointments],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_prev=page > 1,
            has_next=page < total_pages,
        )


class AvailabilitySlotResponse(BaseModel):
    """Response model for a weekly availability window."""
    id: int
    vet_id: int
    weekday: int  # 0=Sunday ... 6=Saturday
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM" ("24:00" for a window ending at midnight)
    start_minutes: int
    end_minutes: int

    @classmethod
    def from_model(cls, slot: AvailabilitySlot) -> "AvailabilitySlotResponse":
        return cls(
            id=slot.id,
            vet_id=slot.vet_id,
            weekday=slot.weekday,
            start_time=slot.start_clock,
            end_time=slot.end_clock,
            start_minutes=slot.start_minutes,
            end_minutes=slot.end_minutes,
        )


class AvailabilitySlotListResponse(BaseModel):
    """Response model for listing a vet's availability windows."""
    vet_id: int
    slots: List[AvailabilitySlotResponse]
