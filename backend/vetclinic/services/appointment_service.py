"""
Appointment service for lookups, listings and the status changes that
need no availability check (cancel, mark done, clinic notes).
"""

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from vetclinic.core.exceptions import ValidationError
from vetclinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    NotificationKind,
    as_aware,
    local_now,
)
from vetclinic.domain.interfaces import (
    IAppointmentRepository,
    IClinicRepository,
    IEventSink,
    IPetRepository,
)

from .base import require_appointment, require_status
from .notification_service import AppointmentNotifier

logger = logging.getLogger(__name__)

# Statuses shown on a clinic's day sheet
SCHEDULE_STATUSES = frozenset(
    {AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED}
)


class AppointmentService:
    """Application service for appointment use-cases outside the core coordinators."""

    def __init__(
        self,
        appointment_repo: IAppointmentRepository,
        event_sink: Optional[IEventSink] = None,
        clinic_repo: Optional[IClinicRepository] = None,
        pet_repo: Optional[IPetRepository] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.appointment_repo = appointment_repo
        self.notifier = AppointmentNotifier(event_sink, clinic_repo, pet_repo)
        self.clock = clock

    def get(self, appointment_id: str) -> Appointment:
        return require_appointment(self.appointment_repo, appointment_id)

    def list_for_owner(
        self, owner_id: str, status: Optional[str] = None
    ) -> List[Appointment]:
        """Owner's appointments, most recent first."""
        self._check_status_filter(status)
        appointments = self.appointment_repo.get_by_owner(owner_id, status)
        return sorted(appointments, key=self._start_key, reverse=True)

    def list_for_clinic(
        self,
        clinic_id: str,
        status: Optional[str] = None,
        day: Optional[date] = None,
    ) -> List[Appointment]:
        self._check_status_filter(status)
        if day is not None:
            appointments = self.appointment_repo.get_for_clinic_on_date(clinic_id, day)
            if status:
                appointments = [apt for apt in appointments if apt.status == status]
        else:
            appointments = self.appointment_repo.get_by_clinic(clinic_id, status)
        return sorted(appointments, key=self._start_key)

    def daily_schedule(self, clinic_id: str, day: date) -> List[Appointment]:
        """The clinic's non-cancelled, non-rejected appointments on ``day`` by start."""
        appointments = self.appointment_repo.get_for_clinic_on_date(clinic_id, day)
        return sorted(
            (apt for apt in appointments if apt.status in SCHEDULE_STATUSES),
            key=self._start_key,
        )

    def cancel(self, appointment_id: str, reason: str = "") -> Appointment:
        """Owner-initiated cancel of a pending or confirmed appointment."""
        appointment = require_appointment(self.appointment_repo, appointment_id)
        require_status(
            appointment, AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED
        )

        now = as_aware(self.clock())
        reason = (reason or "").strip()
        self.appointment_repo.update_fields(
            appointment_id,
            status=AppointmentStatus.CANCELLED,
            cancelled_at=now,
            cancellation_reason=reason,
        )
        appointment.status = AppointmentStatus.CANCELLED
        appointment.cancelled_at = now
        appointment.cancellation_reason = reason
        logger.info(
            "Appointment cancelled",
            extra={"context": {"appointment_id": appointment_id, "reason": reason}},
        )

        self.notifier.notify_clinic(
            NotificationKind.APPOINTMENT_CANCELLED, appointment, reason=reason
        )
        return appointment

    def complete(self, appointment_id: str) -> Appointment:
        """Clinic marks a confirmed appointment done, whatever the time."""
        appointment = require_appointment(self.appointment_repo, appointment_id)
        require_status(appointment, AppointmentStatus.CONFIRMED)

        now = as_aware(self.clock())
        self.appointment_repo.update_fields(
            appointment_id, status=AppointmentStatus.COMPLETED, completed_at=now
        )
        appointment.status = AppointmentStatus.COMPLETED
        appointment.completed_at = now
        logger.info(
            "Appointment marked as done",
            extra={"context": {"appointment_id": appointment_id}},
        )

        self.notifier.notify_owner(NotificationKind.APPOINTMENT_COMPLETED, appointment)
        return appointment

    def add_clinic_notes(self, appointment_id: str, notes: str) -> Appointment:
        notes = (notes or "").strip()
        if not notes:
            raise ValidationError("Notes cannot be empty", "notes")

        appointment = require_appointment(self.appointment_repo, appointment_id)
        self.appointment_repo.update_fields(
            appointment_id,
            clinic_notes=notes,
            notes_updated_at=as_aware(self.clock()),
        )
        appointment.clinic_notes = notes
        return appointment

    @staticmethod
    def _start_key(appointment: Appointment) -> datetime:
        return appointment.effective_interval().start

    @staticmethod
    def _check_status_filter(status: Optional[str]) -> None:
        if status and status not in AppointmentStatus.ALL:
            raise ValidationError(f"Unknown status '{status}'", "status")
