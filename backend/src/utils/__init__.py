"""
Utility modules for the VetCare scheduling backend.

This package contains shared utility functions and helpers used across
the application, including datetime utilities, structured API errors,
database query helpers and vet profile resolution.
"""
