from vetclinic.core.exceptions import InvalidStateError, NotFoundError
from vetclinic.domain.entities import Appointment
from vetclinic.domain.interfaces import IAppointmentReader


def require_appointment(repo: IAppointmentReader, appointment_id: str) -> Appointment:
    appointment = repo.get_by_id(appointment_id)
    if not appointment:
        raise NotFoundError.for_resource("Appointment", appointment_id)
    return appointment


def require_status(appointment: Appointment, *statuses: str) -> None:
    """Raise ``InvalidStateError`` unless the appointment is in one of ``statuses``."""
    if appointment.status not in statuses:
        expected = " or ".join(statuses)
        raise InvalidStateError(
            f"Appointment is {appointment.status}; expected {expected}", "status"
        )
