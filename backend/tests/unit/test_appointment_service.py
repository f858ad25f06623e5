"""
Unit tests for AppointmentService: listings, cancel, mark done, clinic notes.
"""

from datetime import time

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
from vetclinic.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from vetclinic.domain.entities import AppointmentStatus, NotificationKind
from vetclinic.services.appointment_service import AppointmentService


def _service(repo, sink=None) -> AppointmentService:
    return AppointmentService(
        repo,
        event_sink=sink,
        clinic_repo=ClinicRepositoryFactory.create_mock(),
        pet_repo=PetRepositoryFactory.create_mock(),
        clock=FakeClock(),
    )


@pytest.mark.unit
@pytest.mark.services
class TestListings:
    def test_get_unknown_raises(self):
        with pytest.raises(NotFoundError):
            _service(AppointmentRepositoryFactory.create_mock_full()).get("missing")

    def test_owner_list_is_newest_first(self):
        repo = AppointmentRepositoryFactory.create_mock_full()
        repo.get_by_owner.return_value = [
            make_appointment("early", start="08:00", end="09:00"),
            make_appointment("late", start="15:00", end="16:00"),
        ]

        result = _service(repo).list_for_owner("owner-1")

        assert [apt.id for apt in result] == ["late", "early"]

    def test_clinic_day_list_filters_status_and_sorts_by_start(self):
        late = make_appointment("late", start="15:00", end="16:00", status="confirmed")
        early = make_appointment("early", start="08:00", end="09:00", status="confirmed")
        pending = make_appointment("pending", start="10:00", end="11:00")
        repo = AppointmentRepositoryFactory.create_mock_full([late, early, pending])

        result = _service(repo).list_for_clinic("clinic-1", "confirmed", SCENARIO_DATE)

        assert [apt.id for apt in result] == ["early", "late"]

    def test_unknown_status_filter_is_rejected(self):
        with pytest.raises(ValidationError):
            _service(AppointmentRepositoryFactory.create_mock_full()).list_for_clinic(
                "clinic-1", "archived"
            )

    def test_daily_schedule_hides_cancelled_and_rejected(self):
        repo = AppointmentRepositoryFactory.create_mock_full(
            [
                make_appointment("a", start="09:00", end="10:00", status="confirmed"),
                make_appointment("b", start="10:00", end="11:00", status="cancelled"),
                make_appointment("c", start="11:00", end="12:00", status="rejected"),
                make_appointment("d", start="08:00", end="09:00", status="completed"),
                make_appointment("e", start="13:00", end="14:00"),
            ]
        )

        result = _service(repo).daily_schedule("clinic-1", SCENARIO_DATE)

        assert [apt.id for apt in result] == ["d", "a", "e"]


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.appointment
class TestCancel:
    @pytest.mark.parametrize("status", [AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED])
    def test_live_appointment_can_be_cancelled(self, status):
        repo = AppointmentRepositoryFactory.create_mock_full(
            [make_appointment("apt-1", status=status)]
        )
        sink = SinkFactory.create_mock_sink()

        cancelled = _service(repo, sink).cancel("apt-1", " change of plans ")

        assert cancelled.status == AppointmentStatus.CANCELLED
        assert cancelled.cancellation_reason == "change of plans"
        repo.update_fields.assert_called_once_with(
            "apt-1",
            status=AppointmentStatus.CANCELLED,
            cancelled_at=FIXED_NOW,
            cancellation_reason="change of plans",
        )
        kind, payload = sink.emit.call_args.args
        assert kind == NotificationKind.APPOINTMENT_CANCELLED
        assert payload["to_user_id"] == "vet-1"
        assert payload["reason"] == "change of plans"

    @pytest.mark.parametrize(
        "status",
        [AppointmentStatus.COMPLETED, AppointmentStatus.REJECTED, AppointmentStatus.CANCELLED],
    )
    def test_terminal_appointment_cannot_be_cancelled(self, status):
        repo = AppointmentRepositoryFactory.create_mock_full(
            [make_appointment("apt-1", status=status)]
        )

        with pytest.raises(InvalidStateError):
            _service(repo).cancel("apt-1")
        repo.update_fields.assert_not_called()


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.appointment
class TestMarkDone:
    def test_confirmed_is_completed_before_its_end(self):
        apt = make_appointment("apt-1", start="14:00", end="15:00", status="confirmed")
        repo = AppointmentRepositoryFactory.create_mock_full([apt])
        sink = SinkFactory.create_mock_sink()

        done = _service(repo, sink).complete("apt-1")

        assert done.status == AppointmentStatus.COMPLETED
        assert done.completed_at == FIXED_NOW
        assert sink.emit.call_args.args[0] == NotificationKind.APPOINTMENT_COMPLETED

    def test_pending_cannot_be_marked_done(self):
        repo = AppointmentRepositoryFactory.create_mock_full([make_appointment("apt-1")])

        with pytest.raises(InvalidStateError):
            _service(repo).complete("apt-1")


@pytest.mark.unit
@pytest.mark.services
class TestClinicNotes:
    def test_notes_are_saved(self):
        repo = AppointmentRepositoryFactory.create_mock_full([make_appointment("apt-1")])

        updated = _service(repo).add_clinic_notes("apt-1", "Bring vaccination card")

        assert updated.clinic_notes == "Bring vaccination card"
        repo.update_fields.assert_called_once_with(
            "apt-1", clinic_notes="Bring vaccination card", notes_updated_at=FIXED_NOW
        )
        assert updated.start_time == time(10)

    def test_blank_notes_are_rejected(self):
        repo = AppointmentRepositoryFactory.create_mock_full([make_appointment("apt-1")])

        with pytest.raises(ValidationError):
            _service(repo).add_clinic_notes("apt-1", "   ")
