import logging
from typing import Any, Optional

from vetclinic.core.exceptions import ConflictError, ValidationError
from vetclinic.core.validation import parse_time_of_day
from vetclinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    EffectiveInterval,
    NotificationKind,
    combine,
    format_time,
)
from vetclinic.domain.interfaces import (
    IAppointmentRepository,
    IClinicRepository,
    IEventSink,
    IPetRepository,
)

from .availability_service import AvailabilityChecker
from .base import require_appointment, require_status
from .notification_service import AppointmentNotifier

logger = logging.getLogger(__name__)


class ExtensionCoordinator:
    """Moves the end of a confirmed appointment later."""

    def __init__(
        self,
        appointment_repo: IAppointmentRepository,
        availability: AvailabilityChecker,
        event_sink: Optional[IEventSink] = None,
        clinic_repo: Optional[IClinicRepository] = None,
        pet_repo: Optional[IPetRepository] = None,
    ):
        self.appointment_repo = appointment_repo
        self.availability = availability
        self.notifier = AppointmentNotifier(event_sink, clinic_repo, pet_repo)

    def extend(self, appointment_id: str, new_end_time: Any) -> Appointment:
        """Persist a later end time after re-checking the longer interval.

        Legacy single-instant appointments are rewritten in the slot-based
        form, since the new end has to be stored explicitly.
        """
        new_end_time = parse_time_of_day(new_end_time, "end_time")
        appointment = require_appointment(self.appointment_repo, appointment_id)
        require_status(appointment, AppointmentStatus.CONFIRMED)

        interval = appointment.effective_interval()
        day = appointment.calendar_date
        start_time = interval.start.time()
        current_end = interval.end.time()
        new_end = combine(day, new_end_time)

        if new_end <= interval.start:
            raise ValidationError("New end time must be after the start time", "end_time")
        if new_end <= interval.end:
            raise ValidationError(
                f"New end time must be after the current end time {format_time(current_end)}",
                "end_time",
            )

        available = self.availability.is_interval_available(
            appointment.clinic_id,
            day,
            EffectiveInterval(interval.start, new_end),
            exclude_id=appointment.id,
            fail_open=False,
        )
        if not available:
            raise ConflictError(
                f"Extending to {format_time(new_end_time)} overlaps another appointment",
                "end_time",
            )

        previous_end = format_time(current_end)
        fields = {"end_time": new_end_time}
        if appointment.schedule.variant == "legacy":
            fields.update(date=day, start_time=start_time)
        self.appointment_repo.update_fields(appointment_id, **fields)

        appointment.date = day
        appointment.start_time = start_time
        appointment.end_time = new_end_time
        logger.info(
            "Appointment extended",
            extra={
                "context": {
                    "appointment_id": appointment_id,
                    "previous_end": previous_end,
                    "new_end": format_time(new_end_time),
                }
            },
        )

        self.notifier.notify_owner(
            NotificationKind.APPOINTMENT_EXTENDED,
            appointment,
            previous_end_time=previous_end,
        )
        return appointment
