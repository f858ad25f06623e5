"""
Availability checking for a clinic's calendar.

An interval is available when it overlaps no appointment of the same
clinic and calendar date whose status still holds its slot. Both stored
schedule shapes are compared through ``Appointment.effective_interval``.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Iterable, List, Optional

from vetclinic.core.exceptions import StoreError
from vetclinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    EffectiveInterval,
    TimeSlot,
    as_aware,
    combine,
    local_now,
)
from vetclinic.domain.interfaces import IAppointmentReader

from .slot_generator import SlotGenerator
from .working_hours_service import WorkingHoursStore

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    def __init__(self, appointment_repo: IAppointmentReader):
        self.appointment_repo = appointment_repo

    def conflicts_with(
        self,
        clinic_id: str,
        day: date,
        candidate: EffectiveInterval,
        exclude_id: Optional[str] = None,
        blocking_statuses: Iterable[str] = AppointmentStatus.LIVE,
    ) -> List[Appointment]:
        """Appointments on ``day`` whose interval overlaps ``candidate``.

        Raises ``StoreError`` when the appointments cannot be read.
        """
        blocking = frozenset(blocking_statuses)
        return [
            apt
            for apt in self.appointment_repo.get_for_clinic_on_date(clinic_id, day)
            if apt.id != exclude_id
            and apt.status in blocking
            and apt.effective_interval().overlaps(candidate)
        ]

    def find_conflicts(
        self,
        clinic_id: str,
        day: date,
        start_time: time,
        end_time: time,
        exclude_id: Optional[str] = None,
        blocking_statuses: Iterable[str] = AppointmentStatus.LIVE,
    ) -> List[Appointment]:
        return self.conflicts_with(
            clinic_id,
            day,
            EffectiveInterval.on(day, start_time, end_time),
            exclude_id,
            blocking_statuses,
        )

    def is_interval_available(
        self,
        clinic_id: str,
        day: date,
        candidate: EffectiveInterval,
        exclude_id: Optional[str] = None,
        blocking_statuses: Iterable[str] = AppointmentStatus.LIVE,
        fail_open: bool = True,
    ) -> bool:
        """True when nothing blocking overlaps ``candidate``.

        With ``fail_open`` a store read failure counts as available; the
        approval-time re-check runs with ``fail_open=False`` and propagates.
        """
        try:
            conflicts = self.conflicts_with(
                clinic_id, day, candidate, exclude_id, blocking_statuses
            )
        except StoreError as e:
            if not fail_open:
                raise
            logger.warning(
                f"Availability read failed, treating slot as available: {e}",
                extra={"context": {"clinic_id": clinic_id, "date": day.isoformat()}},
                exc_info=True,
            )
            return True

        if conflicts:
            logger.info(
                "Slot unavailable",
                extra={
                    "context": {
                        "clinic_id": clinic_id,
                        "date": day.isoformat(),
                        "conflicting_ids": [apt.id for apt in conflicts],
                    }
                },
            )
        return not conflicts

    def is_available(
        self,
        clinic_id: str,
        day: date,
        start_time: time,
        end_time: time,
        exclude_id: Optional[str] = None,
        blocking_statuses: Iterable[str] = AppointmentStatus.LIVE,
        fail_open: bool = True,
    ) -> bool:
        return self.is_interval_available(
            clinic_id,
            day,
            EffectiveInterval.on(day, start_time, end_time),
            exclude_id,
            blocking_statuses,
            fail_open,
        )


@dataclass(frozen=True)
class SlotAvailability:
    slot: TimeSlot
    available: bool
    past: bool = False


class SlotAvailabilityService:
    """Lists a clinic's generated slots for a date with an availability flag."""

    def __init__(
        self,
        working_hours: WorkingHoursStore,
        slot_generator: SlotGenerator,
        appointment_repo: IAppointmentReader,
        clock: Callable[[], datetime] = local_now,
    ):
        self.working_hours = working_hours
        self.slot_generator = slot_generator
        self.appointment_repo = appointment_repo
        self.clock = clock

    def available_slots(self, clinic_id: str, day: date) -> List[SlotAvailability]:
        hours = self.working_hours.get(clinic_id)
        slots = self.slot_generator.generate(hours, day)

        # One read for the whole day instead of one per slot
        try:
            booked = [
                apt.effective_interval()
                for apt in self.appointment_repo.get_for_clinic_on_date(clinic_id, day)
                if apt.is_live
            ]
        except StoreError as e:
            logger.warning(
                f"Could not load appointments, showing all slots as available: {e}",
                extra={"context": {"clinic_id": clinic_id, "date": day.isoformat()}},
                exc_info=True,
            )
            booked = []

        now = as_aware(self.clock())
        result = []
        for slot in slots:
            interval = EffectiveInterval.on(day, slot.start_time, slot.end_time)
            past = combine(day, slot.start_time) <= now
            taken = any(interval.overlaps(other) for other in booked)
            result.append(SlotAvailability(slot=slot, available=not (taken or past), past=past))
        return result
