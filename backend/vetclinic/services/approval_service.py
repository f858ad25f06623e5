"""
Clinic-side approval and rejection of pending appointments.

Approval re-checks the interval against the other confirmed appointments
of the clinic on that date, so when two overlapping requests are pending
the first successful approve wins and the second fails with a conflict.
"""

import logging
from typing import Optional

from vetclinic.core.exceptions import ConflictError
from vetclinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    NotificationKind,
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


class ApprovalCoordinator:
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

    def approve(self, appointment_id: str) -> Appointment:
        """Confirm a pending appointment if its interval is still free.

        Raises:
            NotFoundError: unknown id
            InvalidStateError: the appointment is not pending
            ConflictError: another confirmed appointment overlaps it
        """
        appointment = require_appointment(self.appointment_repo, appointment_id)
        require_status(appointment, AppointmentStatus.PENDING)

        interval = appointment.effective_interval()
        available = self.availability.is_interval_available(
            appointment.clinic_id,
            appointment.calendar_date,
            interval,
            exclude_id=appointment.id,
            blocking_statuses={AppointmentStatus.CONFIRMED},
            fail_open=False,
        )
        if not available:
            logger.warning(
                "Approval blocked by a confirmed appointment",
                extra={"context": {"appointment_id": appointment_id}},
            )
            raise ConflictError(
                "Another appointment has already been confirmed for "
                f"{format_time(interval.start.time())}-{format_time(interval.end.time())}"
            )

        self.appointment_repo.update_fields(
            appointment_id, status=AppointmentStatus.CONFIRMED
        )
        appointment.status = AppointmentStatus.CONFIRMED
        logger.info(
            "Appointment confirmed",
            extra={"context": {"appointment_id": appointment_id}},
        )

        self.notifier.notify_owner(NotificationKind.BOOKING_CONFIRMED, appointment)
        return appointment

    def reject(self, appointment_id: str) -> Appointment:
        appointment = require_appointment(self.appointment_repo, appointment_id)
        require_status(appointment, AppointmentStatus.PENDING)

        self.appointment_repo.update_fields(
            appointment_id, status=AppointmentStatus.REJECTED
        )
        appointment.status = AppointmentStatus.REJECTED
        logger.info(
            "Appointment rejected",
            extra={"context": {"appointment_id": appointment_id}},
        )

        self.notifier.notify_owner(NotificationKind.BOOKING_REJECTED, appointment)
        return appointment
