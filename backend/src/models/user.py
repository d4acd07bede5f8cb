"""
User model for everyone who signs in to the clinic system.

Pet owners, vets and clinic administrators share this table. The role column
is the authoritative source for authorization decisions; the role claim in a
JWT is only trusted after it has been re-read from here.
"""

from typing import Optional
from datetime import datetime
from sqlalchemy import String, TIMESTAMP, Boolean, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class User(Base):
    """User account for owners, vets and admins."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # Authentication
    email: Mapped[str] = mapped_column(String(255), unique=True)  # Globally unique
    name: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20))  # 'OWNER', 'VET', 'ADMIN'
    suspended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Metadata
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    # Relationships
    pets = relationship("Pet", back_populates="owner")
    vet_profile = relationship("Vet", back_populates="user", uselist=False)
    """Vet profile linked to this login account (VET users only)."""

    __table_args__ = (
        CheckConstraint("role IN ('OWNER', 'VET', 'ADMIN')", name="ck_users_role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
