"""initial_schema_baseline

Revision ID: 3f9a2c71d4e0
Revises: 
Create Date: 2026-10-17 09:12:44.318207

Baseline migration that creates every table from the current model
definitions (users, pets, vets, vet_availability, appointments, payments).

On PostgreSQL it also adds the storage-level guard against double booking:
an exclusion constraint that rejects two BOOKED appointments of the same vet
whose [start_time, end_time) ranges overlap.
"""
from typing import Sequence, Union
import sys
import os

# Add src directory to path to import models
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from alembic import op

# Import all models to ensure they're registered with Base.metadata
from core.database import Base
from models.user import User  # noqa: F401
from models.pet import Pet  # noqa: F401
from models.vet import Vet  # noqa: F401
from models.vet_availability import AvailabilitySlot  # noqa: F401
from models.appointment import Appointment  # noqa: F401
from models.payment import Payment  # noqa: F401


# revision identifiers, used by Alembic.
revision: str = '3f9a2c71d4e0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create all tables from SQLAlchemy models and the PostgreSQL overlap guard.
    """
    bind = op.get_bind()

    # Step 1: Create all tables from models
    Base.metadata.create_all(bind=bind)

    # Step 2: Exclusion constraint against overlapping BOOKED appointments (PostgreSQL only)
    if bind.dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            """
            ALTER TABLE appointments
            ADD CONSTRAINT excl_appointments_vet_booked_overlap
            EXCLUDE USING gist (
                vet_id WITH =,
                tstzrange(start_time, end_time, '[)') WITH &&
            )
            WHERE (status = 'BOOKED')
            """
        )


def downgrade() -> None:
    """
    Drop all database tables.

    This removes all tables, indexes, and constraints created by the baseline migration.
    """
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute("ALTER TABLE appointments DROP CONSTRAINT IF EXISTS excl_appointments_vet_booked_overlap")
    Base.metadata.drop_all(bind=bind)
