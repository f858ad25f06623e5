import logging

from vetclinic.core.exceptions import AuthorizationError, InvalidStateError
from vetclinic.domain.entities import AppointmentStatus, Review
from vetclinic.domain.interfaces import (
    IAppointmentRepository,
    IClinicRepository,
    IReviewRepository,
)

from .base import require_appointment, require_status

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(
        self,
        review_repo: IReviewRepository,
        appointment_repo: IAppointmentRepository,
        clinic_repo: IClinicRepository,
    ):
        self.review_repo = review_repo
        self.appointment_repo = appointment_repo
        self.clinic_repo = clinic_repo

    def submit(
        self, owner_id: str, appointment_id: str, rating: int, comment: str = ""
    ) -> Review:
        """Review a completed appointment; each appointment takes one review."""
        appointment = require_appointment(self.appointment_repo, appointment_id)
        if appointment.owner_id != owner_id:
            raise AuthorizationError("Only the booking owner can review this appointment")
        require_status(appointment, AppointmentStatus.COMPLETED)
        if appointment.has_review:
            raise InvalidStateError("This appointment has already been reviewed")

        # Validates the rating before anything is written
        review = Review(
            clinic_id=appointment.clinic_id,
            user_id=owner_id,
            appointment_id=appointment_id,
            rating=rating,
            comment=(comment or "").strip(),
        )

        # The flag is only set once the review exists
        created = self.review_repo.create(review)
        self.appointment_repo.update_fields(appointment_id, has_review=True)
        self.refresh_clinic_rating(appointment.clinic_id)

        logger.info(
            "Review submitted",
            extra={
                "context": {
                    "appointment_id": appointment_id,
                    "clinic_id": appointment.clinic_id,
                    "rating": rating,
                }
            },
        )
        return created

    def refresh_clinic_rating(self, clinic_id: str) -> float:
        """Recompute the clinic's average rating (2 dp) and review count."""
        ratings = [r.rating for r in self.review_repo.get_by_clinic(clinic_id)]
        average = round(sum(ratings) / len(ratings), 2) if ratings else 0.0
        self.clinic_repo.update_rating(clinic_id, average, len(ratings))
        return average
