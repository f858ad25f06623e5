import logging
from typing import Any, List, Optional, Sequence

from vetclinic.core.exceptions import InvalidStateError
from vetclinic.core.validation import parse_calendar_date
from vetclinic.domain.entities import AppointmentStatus, MedicalRecord
from vetclinic.domain.interfaces import IAppointmentRepository, IMedicalRecordRepository

from .base import require_appointment, require_status

logger = logging.getLogger(__name__)


class MedicalRecordService:
    """Issues medical records for appointments and lists them per pet."""

    def __init__(
        self,
        record_repo: IMedicalRecordRepository,
        appointment_repo: IAppointmentRepository,
    ):
        self.record_repo = record_repo
        self.appointment_repo = appointment_repo

    def create(
        self,
        appointment_id: str,
        vet_in_charge: str = "",
        diagnosis: str = "",
        treatment: str = "",
        prescriptions: Optional[Sequence[str]] = None,
        lab_results: str = "",
        notes: str = "",
        follow_up_date: Any = None,
    ) -> MedicalRecord:
        """Create the record and link it to the appointment.

        Only confirmed or completed appointments get a record, and only one.
        """
        appointment = require_appointment(self.appointment_repo, appointment_id)
        require_status(
            appointment, AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED
        )
        if appointment.has_medical_record:
            raise InvalidStateError("Appointment already has a medical record")

        record = self.record_repo.create(
            MedicalRecord(
                appointment_id=appointment_id,
                pet_id=appointment.pet_id,
                owner_id=appointment.owner_id,
                clinic_id=appointment.clinic_id,
                vet_in_charge=(vet_in_charge or "").strip(),
                diagnosis=(diagnosis or "").strip(),
                treatment=(treatment or "").strip(),
                prescriptions=[p.strip() for p in prescriptions or [] if p and p.strip()],
                lab_results=(lab_results or "").strip(),
                notes=(notes or "").strip(),
                follow_up_date=(
                    parse_calendar_date(follow_up_date, "follow_up_date")
                    if follow_up_date
                    else None
                ),
            )
        )

        self.appointment_repo.update_fields(
            appointment_id, medical_record_id=record.id, has_medical_record=True
        )
        logger.info(
            "Medical record created",
            extra={
                "context": {"record_id": record.id, "appointment_id": appointment_id}
            },
        )
        return record

    def list_for_pet(self, pet_id: str) -> List[MedicalRecord]:
        records = self.record_repo.get_by_pet(pet_id)
        return sorted(
            records,
            key=lambda r: r.created_at.isoformat() if r.created_at else "",
            reverse=True,
        )
