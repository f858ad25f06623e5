from .appointment_repo import AppointmentRepository
from .clinic_repo import ClinicRepository
from .document_store import SqlDocumentStore
from .medical_record_repo import MedicalRecordRepository
from .pet_repo import PetRepository
from .reminder_ledger import StoreReminderLedger
from .review_repo import ReviewRepository
from .working_hours_repo import WorkingHoursRepository

__all__ = [
    "AppointmentRepository",
    "ClinicRepository",
    "MedicalRecordRepository",
    "PetRepository",
    "ReviewRepository",
    "SqlDocumentStore",
    "StoreReminderLedger",
    "WorkingHoursRepository",
]
