from typing import Any, Dict, List, Optional

from vetclinic.domain.entities import Clinic
from vetclinic.domain.interfaces import IClinicRepository, IDocumentStore

CLINICS = "clinics"


class ClinicRepository(IClinicRepository):
    """Read access to clinic profiles plus the rating aggregate they carry."""

    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def get_by_id(self, clinic_id: str) -> Optional[Clinic]:
        record = self.store.get(CLINICS, clinic_id)
        return self._to_domain(record) if record else None

    def get_by_owner(self, owner_id: str) -> List[Clinic]:
        return [
            self._to_domain(record)
            for record in self.store.query(CLINICS, {"owner_id": owner_id})
        ]

    def update_rating(
        self, clinic_id: str, average_rating: float, review_count: int
    ) -> None:
        self.store.update(
            CLINICS,
            clinic_id,
            {"average_rating": average_rating, "review_count": review_count},
        )

    @staticmethod
    def _to_domain(record: Dict[str, Any]) -> Clinic:
        return Clinic(
            id=record["id"],
            owner_id=record.get("owner_id", ""),
            # older profiles used clinic_name
            name=record.get("name") or record.get("clinic_name") or "",
            average_rating=float(record.get("average_rating") or 0.0),
            review_count=int(record.get("review_count") or 0),
        )
