#!/usr/bin/env python3
"""
Database reset script for the VetCare scheduling backend.

This script drops every table and recreates them empty.
Use this to get a clean local database state for manual testing.
"""

import sys
import os

# Add backend/src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'backend', 'src'))

from sqlalchemy import inspect

from core.config import DATABASE_URL
from core.database import create_tables, drop_tables, engine

EXPECTED_TABLES = ['users', 'pets', 'vets', 'vet_availability', 'appointments', 'payments']


def reset_database():
    """Reset the database by dropping all tables and recreating them."""

    print("Resetting VetCare database...")
    print(f"Database URL: {DATABASE_URL}")

    # Refuse anything but a local SQLite database
    if not DATABASE_URL.startswith("sqlite"):
        print("ERROR: This script only works with a SQLite database!")
        print(f"Current database: {DATABASE_URL}")
        return

    drop_tables()
    create_tables()

    table_names = set(inspect(engine).get_table_names())
    print("Created tables:")
    for table in EXPECTED_TABLES:
        print(f"   {'ok' if table in table_names else 'MISSING'}  {table}")

    if all(table in table_names for table in EXPECTED_TABLES):
        print("Database reset complete.")
    else:
        print("Warning: Some tables may be missing")


def show_usage():
    """Show usage information."""
    print("VetCare Database Reset Script")
    print("=" * 40)
    print()
    print("Drops all existing tables and recreates them empty.")
    print()
    print("Usage:")
    print("  DATABASE_URL=sqlite:///./vetcare.db python reset_database.py")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] in ['--help', '-h']:
        show_usage()
    else:
        reset_database()
