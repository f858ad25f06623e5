from typing import Any, Dict, List

from vetclinic.domain.entities import Review
from vetclinic.domain.interfaces import IDocumentStore, IReviewRepository

from .serialization import load_instant

REVIEWS = "reviews"


class ReviewRepository(IReviewRepository):
    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def create(self, review: Review) -> Review:
        created = self.store.create(
            REVIEWS,
            {
                "clinic_id": review.clinic_id,
                "user_id": review.user_id,
                "appointment_id": review.appointment_id,
                "rating": review.rating,
                "comment": review.comment,
            },
        )
        return self._to_domain(created)

    def get_by_clinic(self, clinic_id: str) -> List[Review]:
        return [
            self._to_domain(record)
            for record in self.store.query(REVIEWS, {"clinic_id": clinic_id})
        ]

    @staticmethod
    def _to_domain(record: Dict[str, Any]) -> Review:
        return Review(
            id=record["id"],
            clinic_id=record.get("clinic_id", ""),
            user_id=record.get("user_id", ""),
            appointment_id=record.get("appointment_id"),
            rating=int(record.get("rating", 0)),
            comment=record.get("comment", ""),
            created_at=load_instant(record.get("created_at")),
        )
