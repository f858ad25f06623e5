"""
Appointment repository implementation over the document store.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from vetclinic.core.exceptions import ValidationError
from vetclinic.domain.entities import Appointment
from vetclinic.domain.interfaces import IAppointmentRepository, IDocumentStore

from .serialization import dump_value, load_date, load_instant, load_time

logger = logging.getLogger(__name__)

APPOINTMENTS = "appointments"


class AppointmentRepository(IAppointmentRepository):
    """Repository for Appointment persistence operations.

    Maps between domain entities and store records. Both the slot-based and
    the legacy ``date_time`` fields are read back, whichever are present.
    """

    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get appointment by ID."""
        record = self.store.get(APPOINTMENTS, appointment_id)
        return self._to_domain(record) if record else None

    def get_for_clinic_on_date(self, clinic_id: str, day: date) -> List[Appointment]:
        """Appointments of a clinic falling on ``day``.

        Slot-based records are matched on their stored date; legacy records
        only carry an instant, so the calendar date is derived per record.
        """
        appointments = self._load_many({"clinic_id": clinic_id})
        return [apt for apt in appointments if apt.calendar_date == day]

    def get_by_clinic(
        self, clinic_id: str, status: Optional[str] = None
    ) -> List[Appointment]:
        filters: Dict[str, Any] = {"clinic_id": clinic_id}
        if status:
            filters["status"] = status
        return self._load_many(filters)

    def get_by_owner(
        self, owner_id: str, status: Optional[str] = None
    ) -> List[Appointment]:
        filters: Dict[str, Any] = {"owner_id": owner_id}
        if status:
            filters["status"] = status
        return self._load_many(filters)

    def get_by_status(self, status: str) -> List[Appointment]:
        return self._load_many({"status": status})

    def create(self, appointment: Appointment) -> Appointment:
        """Create a new appointment and return it with its assigned id."""
        record = self.store.create(APPOINTMENTS, self._to_record(appointment))
        return self._to_domain(record)

    def update_fields(self, appointment_id: str, **fields: Any) -> None:
        self.store.update(
            APPOINTMENTS,
            appointment_id,
            {name: dump_value(value) for name, value in fields.items()},
        )

    def _load_many(self, filters: Dict[str, Any]) -> List[Appointment]:
        appointments = []
        for record in self.store.query(APPOINTMENTS, filters):
            try:
                appointments.append(self._to_domain(record))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed appointment record",
                    extra={"context": {"id": record.get("id"), "error": exc.message}},
                )
        return appointments

    @staticmethod
    def _to_record(appointment: Appointment) -> Dict[str, Any]:
        return {
            "clinic_id": appointment.clinic_id,
            "owner_id": appointment.owner_id,
            "pet_id": appointment.pet_id,
            "date": dump_value(appointment.date),
            "start_time": dump_value(appointment.start_time),
            "end_time": dump_value(appointment.end_time),
            "date_time": dump_value(appointment.date_time),
            "status": appointment.status,
            "reason": appointment.reason,
            "service": appointment.service,
            "notes": appointment.notes,
            "clinic_notes": appointment.clinic_notes,
            "has_review": appointment.has_review,
            "has_medical_record": appointment.has_medical_record,
            "medical_record_id": appointment.medical_record_id,
            "cancellation_reason": appointment.cancellation_reason,
            "completed_at": dump_value(appointment.completed_at),
            "cancelled_at": dump_value(appointment.cancelled_at),
        }

    @staticmethod
    def _to_domain(record: Dict[str, Any]) -> Appointment:
        """Convert a store record to a domain entity."""
        return Appointment(
            id=record["id"],
            clinic_id=record.get("clinic_id", ""),
            owner_id=record.get("owner_id", ""),
            pet_id=record.get("pet_id", ""),
            date=load_date(record.get("date")),
            start_time=load_time(record.get("start_time")),
            end_time=load_time(record.get("end_time")),
            date_time=load_instant(record.get("date_time")),
            status=record.get("status", "pending"),
            reason=record.get("reason") or "",
            service=record.get("service") or "",
            notes=record.get("notes") or "",
            clinic_notes=record.get("clinic_notes"),
            has_review=bool(record.get("has_review", False)),
            has_medical_record=bool(record.get("has_medical_record", False)),
            medical_record_id=record.get("medical_record_id"),
            cancellation_reason=record.get("cancellation_reason"),
            created_at=load_instant(record.get("created_at")),
            updated_at=load_instant(record.get("updated_at")),
            completed_at=load_instant(record.get("completed_at")),
            cancelled_at=load_instant(record.get("cancelled_at")),
        )
