"""
Appointment reminders for pet owners and daily schedule summaries for
clinic owners.

Which reminders went out is tracked by an injected ``IReminderLedger`` so
a check can run on every dashboard load without sending duplicates.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from vetclinic.core import config
from vetclinic.core.exceptions import StoreError, ValidationError
from vetclinic.core.security import ROLE_CLINIC_OWNER, ROLE_PET_OWNER
from vetclinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    Clinic,
    NotificationKind,
    as_aware,
    format_time,
    local_now,
)
from vetclinic.domain.interfaces import (
    IAppointmentReader,
    IClinicRepository,
    IEventSink,
    IPetRepository,
    IReminderLedger,
)

from .notification_service import AppointmentNotifier, emit_safely

logger = logging.getLogger(__name__)

SUMMARY_LISTED = 3


def owner_reminder_key(appointment_id: str, day: date) -> str:
    return f"reminder:{appointment_id}:{day.isoformat()}"


def clinic_reminder_key(clinic_id: str, day: date) -> str:
    return f"clinic_reminder:{clinic_id}:{day.isoformat()}"


class ReminderService:
    def __init__(
        self,
        appointment_repo: IAppointmentReader,
        clinic_repo: IClinicRepository,
        pet_repo: IPetRepository,
        ledger: IReminderLedger,
        event_sink: Optional[IEventSink] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.appointment_repo = appointment_repo
        self.clinic_repo = clinic_repo
        self.pet_repo = pet_repo
        self.ledger = ledger
        self.event_sink = event_sink
        self.notifier = AppointmentNotifier(event_sink, clinic_repo, pet_repo)
        self.clock = clock

    def check_and_send(
        self, user_id: str, role: str, now: Optional[datetime] = None
    ) -> int:
        """Send whatever reminders are due for the user; returns how many."""
        now = as_aware(now or self.clock()).astimezone(config.APP_TZ)
        if role == ROLE_PET_OWNER:
            return self._remind_owner(user_id, now)
        if role == ROLE_CLINIC_OWNER:
            return self._remind_clinic_owner(user_id, now)
        raise ValidationError(f"Unknown role '{role}'", "role")

    def clear_old(self, now: Optional[datetime] = None) -> int:
        """Drop ledger entries older than yesterday.

        Yesterday's entries are kept so a reminder sent for "tomorrow" is
        not repeated as a "today" reminder.
        """
        today = as_aware(now or self.clock()).astimezone(config.APP_TZ).date()
        return self.ledger.clear_before(today - timedelta(days=1))

    def _remind_owner(self, owner_id: str, now: datetime) -> int:
        today = now.date()
        tomorrow = today + timedelta(days=1)
        sent = 0

        for apt in self.appointment_repo.get_by_owner(owner_id, AppointmentStatus.CONFIRMED):
            start = apt.effective_interval().start
            day = apt.calendar_date
            if day == today and start > now:
                when = "today"
            elif day == tomorrow:
                when = "tomorrow"
            else:
                continue

            key = owner_reminder_key(apt.id, day)
            if self.ledger.has_sent(key):
                continue

            delivered = self.notifier.notify_owner(
                NotificationKind.APPOINTMENT_REMINDER,
                apt,
                when=when,
                title=f"Appointment Reminder - {when.upper()}",
            )
            if delivered:
                self.ledger.mark_sent(key, today)
                sent += 1
                logger.info(
                    "Reminder sent",
                    extra={"context": {"appointment_id": apt.id, "when": when}},
                )
        return sent

    def _remind_clinic_owner(self, owner_id: str, now: datetime) -> int:
        today = now.date()
        sent = 0

        for clinic in self.clinic_repo.get_by_owner(owner_id):
            key = clinic_reminder_key(clinic.id, today)
            if self.ledger.has_sent(key):
                continue

            todays = sorted(
                (
                    apt
                    for apt in self.appointment_repo.get_for_clinic_on_date(clinic.id, today)
                    if apt.status == AppointmentStatus.CONFIRMED
                ),
                key=lambda apt: apt.effective_interval().start,
            )
            if not todays:
                continue

            payload = {
                "to_user_id": owner_id,
                "clinic_id": clinic.id,
                "clinic_name": clinic.display_name,
                "appointment_count": len(todays),
                "date": today.isoformat(),
                "title": f"Today's Schedule - {clinic.display_name}",
                "summary": self.summarize(clinic, todays),
            }
            if emit_safely(self.event_sink, NotificationKind.DAILY_SCHEDULE, payload):
                self.ledger.mark_sent(key, today)
                sent += 1
        return sent

    def summarize(self, clinic: Clinic, appointments: List[Appointment]) -> str:
        """One-line text listing the first few appointments of the day."""
        count = len(appointments)
        entries = []
        for apt in appointments[:SUMMARY_LISTED]:
            start = format_time(apt.effective_interval().start.time())
            entries.append(f"{start} - {self._pet_name(apt.pet_id)}")
        more = f" and {count - SUMMARY_LISTED} more" if count > SUMMARY_LISTED else ""
        plural = "" if count == 1 else "s"
        return (
            f"You have {count} appointment{plural} today at {clinic.display_name}: "
            f"{', '.join(entries)}{more}"
        )

    def _pet_name(self, pet_id: str) -> str:
        if not pet_id:
            return "Unknown Pet"
        try:
            pet = self.pet_repo.get_by_id(pet_id)
        except StoreError:
            logger.warning(
                "Pet lookup failed for schedule summary",
                extra={"context": {"pet_id": pet_id}},
            )
            return "Unknown Pet"
        return pet.name if pet and pet.name else "Unknown Pet"
