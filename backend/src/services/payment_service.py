"""
Payment lookups for appointments.

Payments are captured elsewhere; the scheduler only asks whether an
appointment has been paid before it may be marked completed.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from core.constants import PAYMENT_STATUS_SUCCESS
from models import Payment

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for reading payment records."""

    @staticmethod
    def get_successful_payment(db: Session, appointment_id: int) -> Optional[Payment]:
        """Return the first SUCCESS payment for the appointment, if any."""
        return db.query(Payment).filter(
            Payment.appointment_id == appointment_id,
            Payment.status == PAYMENT_STATUS_SUCCESS
        ).order_by(Payment.id).first()

    @staticmethod
    def has_successful_payment(db: Session, appointment_id: int) -> bool:
        """Check if the appointment has at least one SUCCESS payment."""
        return PaymentService.get_successful_payment(db, appointment_id) is not None
