"""
Services package for shared business logic.

This package contains service classes that encapsulate business logic
shared across multiple API endpoints.
"""

from .appointment_service import AppointmentService
from .availability_service import AvailabilityService
from .scheduling_service import SchedulingService
from .payment_service import PaymentService
from .notification_service import NotificationService
from .email_service import EmailService

__all__ = [
    "AppointmentService",
    "AvailabilityService",
    "SchedulingService",
    "PaymentService",
    "NotificationService",
    "EmailService",
]
