"""
Promotion of past-due confirmed appointments to completed.

``LifecycleSweeper.sweep`` is a pure function over a list of appointments;
``run`` persists the transitions it returns one at a time so a failed
write only affects its own appointment and is retried on the next sweep.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from vetclinic.core.exceptions import SchedulingError, StoreError
from vetclinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    NotificationKind,
    StatusTransition,
    as_aware,
    local_now,
)
from vetclinic.domain.interfaces import (
    IAppointmentRepository,
    IClinicRepository,
    IEventSink,
    IPetRepository,
)

from .notification_service import AppointmentNotifier

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.completed) + len(self.failed)


class LifecycleSweeper:
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

    @staticmethod
    def sweep(
        appointments: Iterable[Appointment], now: datetime
    ) -> List[StatusTransition]:
        """Transitions for confirmed appointments whose end is before ``now``."""
        now = as_aware(now)
        return [
            StatusTransition(apt.id, AppointmentStatus.COMPLETED)
            for apt in appointments
            if apt.status == AppointmentStatus.CONFIRMED
            and apt.effective_interval().end < now
        ]

    def run(
        self, appointments: Iterable[Appointment], now: Optional[datetime] = None
    ) -> SweepResult:
        """Sweep ``appointments`` and persist each transition independently."""
        now = as_aware(now or self.clock())
        appointments = list(appointments)
        by_id = {apt.id: apt for apt in appointments}
        result = SweepResult()

        for transition in self.sweep(appointments, now):
            try:
                self.appointment_repo.update_fields(
                    transition.appointment_id,
                    status=transition.new_status,
                    completed_at=now,
                )
            except (StoreError, SchedulingError) as e:
                logger.error(
                    f"Failed to auto-complete appointment: {e}",
                    extra={"context": {"appointment_id": transition.appointment_id}},
                    exc_info=True,
                )
                result.failed.append(transition.appointment_id)
                continue

            result.completed.append(transition.appointment_id)
            appointment = by_id[transition.appointment_id]
            appointment.status = transition.new_status
            appointment.completed_at = now
            self.notifier.notify_owner(
                NotificationKind.APPOINTMENT_COMPLETED, appointment, automatic=True
            )

        if result.total:
            logger.info(
                "Lifecycle sweep finished",
                extra={
                    "context": {
                        "completed": len(result.completed),
                        "failed": len(result.failed),
                    }
                },
            )
        return result

    def run_for_clinic(self, clinic_id: str, now: Optional[datetime] = None) -> SweepResult:
        return self.run(
            self.appointment_repo.get_by_clinic(clinic_id, AppointmentStatus.CONFIRMED), now
        )

    def run_for_owner(self, owner_id: str, now: Optional[datetime] = None) -> SweepResult:
        return self.run(
            self.appointment_repo.get_by_owner(owner_id, AppointmentStatus.CONFIRMED), now
        )

    def run_all(self, now: Optional[datetime] = None) -> SweepResult:
        return self.run(self.appointment_repo.get_by_status(AppointmentStatus.CONFIRMED), now)
