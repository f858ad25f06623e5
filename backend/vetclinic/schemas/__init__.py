"""
Schemas package - Data Transfer Objects and validation.

This package contains DTOs that define the API contracts.
"""

from .dtos import (
    AppointmentResponse,
    BookingRequest,
    ExtendRequest,
    MedicalRecordRequest,
    MedicalRecordResponse,
    ReviewRequest,
    ReviewResponse,
    SlotResponse,
    WorkingHoursRequest,
    WorkingHoursResponse,
)

__all__ = [
    "AppointmentResponse",
    "BookingRequest",
    "ExtendRequest",
    "MedicalRecordRequest",
    "MedicalRecordResponse",
    "ReviewRequest",
    "ReviewResponse",
    "SlotResponse",
    "WorkingHoursRequest",
    "WorkingHoursResponse",
]
