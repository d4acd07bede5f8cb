"""
Appointment notifications for pet owners.

Notifications are fire-and-forget: the caller builds a snapshot of the
appointment after the state change has been committed, and delivery runs on
a background thread pool. Failures are logged by the error boundary in
`_deliver` and never reach the request that triggered them.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from core.config import NOTIFICATION_WORKERS
from models import Appointment
from services.email_service import EmailService
from utils.datetime_utils import format_datetime

logger = logging.getLogger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """Get the shared notification thread pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=NOTIFICATION_WORKERS,
                thread_name_prefix="notifications"
            )
        return _executor


def shutdown_executor(wait: bool = True) -> None:
    """Stop the notification pool (application shutdown)."""
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None


class NotificationEvent(Enum):
    BOOKED = "booked"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AppointmentSnapshot:
    """Detached copy of the fields a notification needs (no ORM session required)."""
    appointment_id: int
    owner_email: str
    owner_name: str
    pet_name: str
    vet_name: str
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentSnapshot":
        pet = appointment.pet
        return cls(
            appointment_id=appointment.id,
            owner_email=pet.owner.email,
            owner_name=pet.owner.name,
            pet_name=pet.name,
            vet_name=appointment.vet.name,
            start_time=appointment.local_start,
            end_time=appointment.local_end,
        )


class NotificationService:
    """Service for sending appointment emails to pet owners."""

    @staticmethod
    def _build_message(event: NotificationEvent, snapshot: AppointmentSnapshot) -> tuple[str, str]:
        """Return (subject, body) for the event."""
        when = f"{format_datetime(snapshot.start_time)} - {snapshot.end_time.strftime('%H:%M')}"
        if event == NotificationEvent.BOOKED:
            subject = f"Appointment confirmed for {snapshot.pet_name}"
            line = f"{snapshot.pet_name} is booked with {snapshot.vet_name} on {when}."
        elif event == NotificationEvent.RESCHEDULED:
            subject = f"Appointment rescheduled for {snapshot.pet_name}"
            line = f"{snapshot.pet_name}'s appointment with {snapshot.vet_name} has moved to {when}."
        else:
            subject = f"Appointment cancelled for {snapshot.pet_name}"
            line = f"{snapshot.pet_name}'s appointment with {snapshot.vet_name} on {when} has been cancelled."
        body = f"Hi {snapshot.owner_name},\n\n{line}\n\nAppointment #{snapshot.appointment_id}\n"
        return subject, body

    @staticmethod
    def _deliver(event: NotificationEvent, snapshot: AppointmentSnapshot) -> None:
        """Error boundary: send one notification and log any failure."""
        try:
            subject, body = NotificationService._build_message(event, snapshot)
            EmailService.send_email(snapshot.owner_email, subject, body)
        except Exception as e:
            logger.exception(
                f"Failed to send {event.value} notification for appointment {snapshot.appointment_id}: {e}"
            )

    @staticmethod
    def dispatch(event: NotificationEvent, appointment: Appointment) -> Optional[Future[None]]:
        """
        Queue a notification for background delivery.

        Must be called after the state change has been committed. Never raises:
        failing to build the snapshot or to submit the task is logged and ignored.

        Returns:
            The background future, or None if nothing was queued
        """
        try:
            snapshot = AppointmentSnapshot.from_appointment(appointment)
            return get_executor().submit(NotificationService._deliver, event, snapshot)
        except Exception as e:
            logger.exception(f"Failed to queue {event.value} notification for appointment {appointment.id}: {e}")
            return None

    @staticmethod
    def notify_booked(appointment: Appointment) -> Optional[Future[None]]:
        return NotificationService.dispatch(NotificationEvent.BOOKED, appointment)

    @staticmethod
    def notify_rescheduled(appointment: Appointment) -> Optional[Future[None]]:
        return NotificationService.dispatch(NotificationEvent.RESCHEDULED, appointment)

    @staticmethod
    def notify_cancelled(appointment: Appointment) -> Optional[Future[None]]:
        return NotificationService.dispatch(NotificationEvent.CANCELLED, appointment)
