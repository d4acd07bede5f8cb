"""
Payment model for appointment charges.

Capturing money is handled outside this system; these rows only record the
outcome so the clinic can check that an appointment was paid before marking
it completed.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, ForeignKey, Index, TIMESTAMP, Integer, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Payment(Base):
    """Recorded payment attempt for an appointment."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    appointment_id: Mapped[int] = mapped_column(ForeignKey("appointments.id"))
    """Reference to the paid appointment."""

    amount_cents: Mapped[int] = mapped_column(Integer)
    """Charged amount in the smallest currency unit."""

    currency: Mapped[str] = mapped_column(String(3), default="USD")

    status: Mapped[str] = mapped_column(String(20))  # 'SUCCESS', 'FAILED'
    """Outcome of the payment. Only 'SUCCESS' rows count as paid."""

    receipt_no: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)
    """Receipt number issued by the payment processor."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    appointment = relationship("Appointment", back_populates="payments")

    __table_args__ = (
        CheckConstraint('amount_cents >= 0', name='ck_payments_amount_non_negative'),
        CheckConstraint("status IN ('SUCCESS', 'FAILED')", name='ck_payments_status'),
        Index('idx_payments_appointment_status', 'appointment_id', 'status'),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, appointment_id={self.appointment_id}, status='{self.status}')>"
