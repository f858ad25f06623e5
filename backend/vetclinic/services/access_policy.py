from vetclinic.core.exceptions import AuthorizationError, NotFoundError
from vetclinic.domain.entities import Appointment, Clinic
from vetclinic.domain.interfaces import IClinicRepository


class AccessPolicy:
    """Ownership checks shared by the controllers.

    The booking owner acts on the pet side of an appointment; the owner of
    the appointment's clinic acts on the clinic side.
    """

    def __init__(self, clinic_repo: IClinicRepository):
        self.clinic_repo = clinic_repo

    def require_clinic_owner(self, clinic_id: str, user_id: str) -> Clinic:
        clinic = self.clinic_repo.get_by_id(clinic_id)
        if not clinic:
            raise NotFoundError.for_resource("Clinic", clinic_id)
        if clinic.owner_id != user_id:
            raise AuthorizationError("You do not manage this clinic")
        return clinic

    def require_booking_owner(self, appointment: Appointment, user_id: str) -> None:
        if appointment.owner_id != user_id:
            raise AuthorizationError("This appointment belongs to another owner")

    def require_participant(self, appointment: Appointment, user_id: str) -> None:
        """Either the booking owner or the clinic's owner."""
        if appointment.owner_id == user_id:
            return
        clinic = self.clinic_repo.get_by_id(appointment.clinic_id)
        if not clinic or clinic.owner_id != user_id:
            raise AuthorizationError("You cannot view this appointment")
