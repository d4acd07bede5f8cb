# Package initialization
# Import all models to ensure relationships are properly established
from .user import User
from .pet import Pet
from .vet import Vet
from .vet_availability import AvailabilitySlot
from .appointment import Appointment
from .payment import Payment

__all__ = [
    "User",
    "Pet",
    "Vet",
    "AvailabilitySlot",
    "Appointment",
    "Payment",
]
