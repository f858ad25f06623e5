"""
Domain package - pure business logic layer.

This package contains:
- entities.py: Domain entities, lifecycle states and schedule variants
- interfaces.py: Store, repository and sink contracts
"""

from .entities import (
    Appointment,
    AppointmentStatus,
    Clinic,
    EffectiveInterval,
    MedicalRecord,
    NotificationKind,
    Pet,
    Review,
    StatusTransition,
    TimeSlot,
    WorkingHours,
)
from .interfaces import (
    IAppointmentReader,
    IAppointmentRepository,
    IAppointmentWriter,
    IClinicRepository,
    IDocumentStore,
    IEventSink,
    IMedicalRecordRepository,
    IPetRepository,
    IReminderLedger,
    IReviewRepository,
    IWorkingHoursRepository,
)

__all__ = [
    # Domain entities
    "Appointment",
    "AppointmentStatus",
    "Clinic",
    "EffectiveInterval",
    "MedicalRecord",
    "NotificationKind",
    "Pet",
    "Review",
    "StatusTransition",
    "TimeSlot",
    "WorkingHours",
    # Contracts
    "IDocumentStore",
    "IAppointmentReader",
    "IAppointmentWriter",
    "IAppointmentRepository",
    "IWorkingHoursRepository",
    "IClinicRepository",
    "IPetRepository",
    "IMedicalRecordRepository",
    "IReviewRepository",
    "IEventSink",
    "IReminderLedger",
]
