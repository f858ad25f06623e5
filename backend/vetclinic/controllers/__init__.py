# Controllers package initialization
# This file makes the controllers directory a Python package
# and allows importing controller modules

from . import (
    appointment_controller,
    clinic_controller,
    health_controller,
    pet_controller,
    reminder_controller,
)

__all__ = [
    "appointment_controller",
    "clinic_controller",
    "health_controller",
    "pet_controller",
    "reminder_controller",
]
