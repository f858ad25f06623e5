# Services package initialization
# This file makes the services directory a Python package
# and allows importing service modules

from . import access_policy
from . import appointment_service
from . import approval_service
from . import availability_service
from . import booking_service
from . import extension_service
from . import lifecycle_service
from . import medical_record_service
from . import notification_service
from . import reminder_service
from . import review_service
from . import scheduler
from . import slot_generator
from . import working_hours_service

__all__ = [
    "access_policy",
    "appointment_service",
    "approval_service",
    "availability_service",
    "booking_service",
    "extension_service",
    "lifecycle_service",
    "medical_record_service",
    "notification_service",
    "reminder_service",
    "review_service",
    "scheduler",
    "slot_generator",
    "working_hours_service",
]
