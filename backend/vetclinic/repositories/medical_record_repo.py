from typing import Any, Dict, List

from vetclinic.domain.entities import MedicalRecord
from vetclinic.domain.interfaces import IDocumentStore, IMedicalRecordRepository

from .serialization import dump_value, load_date, load_instant

MEDICAL_RECORDS = "medical_records"


class MedicalRecordRepository(IMedicalRecordRepository):
    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def create(self, record: MedicalRecord) -> MedicalRecord:
        created = self.store.create(
            MEDICAL_RECORDS,
            {
                "appointment_id": record.appointment_id,
                "pet_id": record.pet_id,
                "owner_id": record.owner_id,
                "clinic_id": record.clinic_id,
                "vet_in_charge": record.vet_in_charge,
                "diagnosis": record.diagnosis,
                "treatment": record.treatment,
                "prescriptions": list(record.prescriptions),
                "lab_results": record.lab_results,
                "notes": record.notes,
                "follow_up_date": dump_value(record.follow_up_date),
            },
        )
        return self._to_domain(created)

    def get_by_pet(self, pet_id: str) -> List[MedicalRecord]:
        return [
            self._to_domain(record)
            for record in self.store.query(MEDICAL_RECORDS, {"pet_id": pet_id})
        ]

    @staticmethod
    def _to_domain(record: Dict[str, Any]) -> MedicalRecord:
        return MedicalRecord(
            id=record["id"],
            appointment_id=record.get("appointment_id", ""),
            pet_id=record.get("pet_id", ""),
            owner_id=record.get("owner_id", ""),
            clinic_id=record.get("clinic_id", ""),
            vet_in_charge=record.get("vet_in_charge", ""),
            diagnosis=record.get("diagnosis", ""),
            treatment=record.get("treatment", ""),
            prescriptions=list(record.get("prescriptions") or []),
            lab_results=record.get("lab_results", ""),
            notes=record.get("notes", ""),
            follow_up_date=load_date(record.get("follow_up_date")),
            created_at=load_instant(record.get("created_at")),
        )
