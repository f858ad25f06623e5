"""
Unit tests for ReminderService.

The ledger mock remembers sent keys, so repeated checks on the same day
exercise the dedup behaviour.
"""

from datetime import date, timedelta

import pytest

from tests.conftest import FIXED_NOW, FakeClock
from tests.factories.repository_factories import (
    SCENARIO_DATE,
    AppointmentRepositoryFactory,
    ClinicRepositoryFactory,
    PetRepositoryFactory,
    SinkFactory,
    make_appointment,
)
from vetclinic.core.exceptions import ValidationError
from vetclinic.core.security import ROLE_CLINIC_OWNER, ROLE_PET_OWNER
from vetclinic.domain.entities import AppointmentStatus, Clinic, NotificationKind
from vetclinic.services.reminder_service import (
    ReminderService,
    clinic_reminder_key,
    owner_reminder_key,
)

TOMORROW = SCENARIO_DATE + timedelta(days=1)


@pytest.fixture
def ledger():
    return SinkFactory.create_in_memory_ledger()


@pytest.fixture
def sink():
    return SinkFactory.create_mock_sink()


@pytest.fixture
def appointment_repo():
    return AppointmentRepositoryFactory.create_mock_full()


@pytest.fixture
def reminders(appointment_repo, ledger, sink) -> ReminderService:
    return ReminderService(
        appointment_repo,
        ClinicRepositoryFactory.create_mock(),
        PetRepositoryFactory.create_mock(),
        ledger,
        event_sink=sink,
        clock=FakeClock(),
    )


@pytest.mark.unit
@pytest.mark.reminders
class TestOwnerReminders:
    def test_today_and_tomorrow_are_reminded(self, reminders, appointment_repo, sink, ledger):
        appointment_repo.get_by_owner.return_value = [
            make_appointment("today", start="10:00", end="11:00", status="confirmed"),
            make_appointment("tomorrow", day=TOMORROW, status="confirmed"),
        ]

        assert reminders.check_and_send("owner-1", ROLE_PET_OWNER) == 2

        titles = [call.args[1]["title"] for call in sink.emit.call_args_list]
        assert titles == ["Appointment Reminder - TODAY", "Appointment Reminder - TOMORROW"]
        assert owner_reminder_key("today", SCENARIO_DATE) in ledger.sent
        assert owner_reminder_key("tomorrow", TOMORROW) in ledger.sent

    def test_reads_only_confirmed_appointments(self, reminders, appointment_repo):
        reminders.check_and_send("owner-1", ROLE_PET_OWNER)

        appointment_repo.get_by_owner.assert_called_once_with(
            "owner-1", AppointmentStatus.CONFIRMED
        )

    def test_same_day_check_does_not_resend(self, reminders, appointment_repo, sink):
        appointment_repo.get_by_owner.return_value = [
            make_appointment("today", start="10:00", end="11:00", status="confirmed"),
        ]

        reminders.check_and_send("owner-1", ROLE_PET_OWNER)
        assert reminders.check_and_send("owner-1", ROLE_PET_OWNER) == 0
        assert sink.emit.call_count == 1

    def test_started_or_distant_appointments_are_skipped(self, reminders, appointment_repo, sink):
        appointment_repo.get_by_owner.return_value = [
            make_appointment("started", start="08:30", end="09:30", status="confirmed"),
            make_appointment("later", day=SCENARIO_DATE + timedelta(days=3), status="confirmed"),
        ]

        assert reminders.check_and_send("owner-1", ROLE_PET_OWNER) == 0
        sink.emit.assert_not_called()

    def test_failed_delivery_is_not_recorded(self, appointment_repo, ledger):
        appointment_repo.get_by_owner.return_value = [
            make_appointment("today", status="confirmed"),
        ]
        reminders = ReminderService(
            appointment_repo,
            ClinicRepositoryFactory.create_mock(),
            PetRepositoryFactory.create_mock(),
            ledger,
            event_sink=SinkFactory.create_failing_sink(),
            clock=FakeClock(),
        )

        assert reminders.check_and_send("owner-1", ROLE_PET_OWNER) == 0
        assert ledger.sent == {}


@pytest.mark.unit
@pytest.mark.reminders
class TestClinicSummary:
    def test_summary_sent_once_per_day(self, reminders, appointment_repo, sink, ledger):
        appointment_repo.get_for_clinic_on_date.side_effect = None
        appointment_repo.get_for_clinic_on_date.return_value = [
            make_appointment("b", start="14:00", end="15:00", status="confirmed"),
            make_appointment("a", start="10:00", end="11:00", status="confirmed"),
            make_appointment("p", start="12:00", end="13:00"),
        ]

        assert reminders.check_and_send("vet-1", ROLE_CLINIC_OWNER) == 1
        assert reminders.check_and_send("vet-1", ROLE_CLINIC_OWNER) == 0

        kind, payload = sink.emit.call_args.args
        assert kind == NotificationKind.DAILY_SCHEDULE
        assert payload["appointment_count"] == 2
        assert payload["title"] == "Today's Schedule - Happy Paws"
        assert payload["summary"] == (
            "You have 2 appointments today at Happy Paws: 10:00 - Rex, 14:00 - Rex"
        )
        assert clinic_reminder_key("clinic-1", SCENARIO_DATE) in ledger.sent

    def test_no_summary_for_an_empty_day(self, reminders, sink):
        assert reminders.check_and_send("vet-1", ROLE_CLINIC_OWNER) == 0
        sink.emit.assert_not_called()

    def test_summary_lists_three_and_counts_the_rest(self, reminders):
        appointments = [
            make_appointment(f"apt-{hour}", start=f"{hour:02d}:00", end=f"{hour + 1:02d}:00")
            for hour in range(10, 15)
        ]

        text = reminders.summarize(Clinic(id="clinic-1", name="Happy Paws"), appointments)

        assert text == (
            "You have 5 appointments today at Happy Paws: "
            "10:00 - Rex, 11:00 - Rex, 12:00 - Rex and 2 more"
        )

    def test_single_appointment_is_singular(self, reminders):
        text = reminders.summarize(
            Clinic(id="clinic-1", name="Happy Paws"),
            [make_appointment(pet_id="unknown-pet")],
        )

        assert text == "You have 1 appointment today at Happy Paws: 10:00 - Unknown Pet"


@pytest.mark.unit
@pytest.mark.reminders
class TestLedgerMaintenance:
    def test_clear_old_keeps_yesterday(self, reminders, ledger):
        reminders.clear_old(FIXED_NOW)

        ledger.clear_before.assert_called_once_with(date(2025, 7, 9))

    def test_unknown_role_is_rejected(self, reminders):
        with pytest.raises(ValidationError):
            reminders.check_and_send("someone", "admin")
