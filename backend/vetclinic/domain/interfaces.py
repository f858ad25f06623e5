"""
Abstract interfaces for the store, repositories and side-effect sinks.

These interfaces define contracts without implementation details,
enabling dependency injection and easier testing.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from .entities import (
    Appointment,
    Clinic,
    MedicalRecord,
    Pet,
    Review,
    WorkingHours,
)


class IDocumentStore(ABC):
    """Collection-oriented document store (the external persistence collaborator).

    Records are plain dicts carrying their ``id``. Filters are equality
    predicates combined with logical AND.
    """

    @abstractmethod
    def query(
        self, collection: str, filters: Optional[Mapping[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Return every record in ``collection`` matching all ``filters``."""
        pass

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Return one record, or None when absent."""
        pass

    @abstractmethod
    def create(self, collection: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Persist a new record, assigning its id and timestamps."""
        pass

    @abstractmethod
    def update(
        self, collection: str, record_id: str, partial: Mapping[str, Any]
    ) -> None:
        """Merge ``partial`` into an existing record."""
        pass

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        """Remove a record; deleting an absent id is a no-op."""
        pass


class IAppointmentReader(ABC):
    """Interface for appointment read operations."""

    @abstractmethod
    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get appointment by ID."""
        pass

    @abstractmethod
    def get_for_clinic_on_date(self, clinic_id: str, day: date) -> List[Appointment]:
        """Appointments of a clinic whose effective calendar date is ``day``."""
        pass

    @abstractmethod
    def get_by_clinic(
        self, clinic_id: str, status: Optional[str] = None
    ) -> List[Appointment]:
        """All appointments of a clinic, optionally narrowed to one status."""
        pass

    @abstractmethod
    def get_by_owner(
        self, owner_id: str, status: Optional[str] = None
    ) -> List[Appointment]:
        """All appointments booked by a pet owner."""
        pass

    @abstractmethod
    def get_by_status(self, status: str) -> List[Appointment]:
        """Every appointment in the given status, across clinics."""
        pass


class IAppointmentWriter(ABC):
    """Interface for appointment write operations."""

    @abstractmethod
    def create(self, appointment: Appointment) -> Appointment:
        """Create a new appointment."""
        pass

    @abstractmethod
    def update_fields(self, appointment_id: str, **fields: Any) -> None:
        """Persist a partial update (per-document atomic write)."""
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter):
    """Complete appointment repository interface."""

    pass


class IWorkingHoursRepository(ABC):
    @abstractmethod
    def get(self, clinic_id: str) -> Optional[WorkingHours]:
        """Stored hours, or None when the clinic never configured them."""
        pass

    @abstractmethod
    def upsert(self, hours: WorkingHours) -> WorkingHours:
        """Create or replace the clinic's hours."""
        pass


class IClinicRepository(ABC):
    @abstractmethod
    def get_by_id(self, clinic_id: str) -> Optional[Clinic]:
        pass

    @abstractmethod
    def get_by_owner(self, owner_id: str) -> List[Clinic]:
        pass

    @abstractmethod
    def update_rating(
        self, clinic_id: str, average_rating: float, review_count: int
    ) -> None:
        pass


class IPetRepository(ABC):
    @abstractmethod
    def get_by_id(self, pet_id: str) -> Optional[Pet]:
        pass


class IMedicalRecordRepository(ABC):
    @abstractmethod
    def create(self, record: MedicalRecord) -> MedicalRecord:
        pass

    @abstractmethod
    def get_by_pet(self, pet_id: str) -> List[MedicalRecord]:
        pass


class IReviewRepository(ABC):
    @abstractmethod
    def create(self, review: Review) -> Review:
        pass

    @abstractmethod
    def get_by_clinic(self, clinic_id: str) -> List[Review]:
        pass


class IEventSink(ABC):
    """Receives notification events after a successful state transition.

    The implementation owns delivery; callers treat it as best-effort.
    """

    @abstractmethod
    def emit(self, kind: str, payload: Mapping[str, Any]) -> None:
        """Deliver one event. ``payload["to_user_id"]`` names the recipient."""
        pass


class IReminderLedger(ABC):
    """Remembers which reminders were already sent."""

    @abstractmethod
    def has_sent(self, key: str) -> bool:
        pass

    @abstractmethod
    def mark_sent(self, key: str, sent_on: date) -> None:
        pass

    @abstractmethod
    def clear_before(self, day: date) -> int:
        """Forget entries recorded before ``day``; returns how many were removed."""
        pass
