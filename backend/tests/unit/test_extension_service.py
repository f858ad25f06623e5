"""
Unit tests for ExtensionCoordinator.
"""

from datetime import datetime, time

import pytest

from tests.factories.repository_factories import (
    SCENARIO_DATE,
    AppointmentRepositoryFactory,
    SinkFactory,
    make_appointment,
    make_legacy_appointment,
)
from vetclinic.core import config
from vetclinic.core.exceptions import (
    ConflictError,
    InvalidStateError,
    ValidationError,
)
from vetclinic.domain.entities import AppointmentStatus, NotificationKind
from vetclinic.services.availability_service import AvailabilityChecker
from vetclinic.services.extension_service import ExtensionCoordinator


def _coordinator(repo, sink=None) -> ExtensionCoordinator:
    return ExtensionCoordinator(repo, AvailabilityChecker(repo), event_sink=sink)


def _confirmed(appointment_id="apt-1", start="10:00", end="11:00"):
    return make_appointment(
        appointment_id, start=start, end=end, status=AppointmentStatus.CONFIRMED
    )


@pytest.mark.unit
@pytest.mark.appointment
@pytest.mark.scheduling
class TestExtend:
    def test_end_moves_later(self):
        repo = AppointmentRepositoryFactory.create_mock_full([_confirmed()])
        sink = SinkFactory.create_mock_sink()

        extended = _coordinator(repo, sink).extend("apt-1", "11:30")

        assert extended.end_time == time(11, 30)
        repo.update_fields.assert_called_once_with("apt-1", end_time=time(11, 30))
        kind, payload = sink.emit.call_args.args
        assert kind == NotificationKind.APPOINTMENT_EXTENDED
        assert payload["previous_end_time"] == "11:00"
        assert payload["end_time"] == "11:30"

    @pytest.mark.parametrize("new_end", ["11:00", "10:30"])
    def test_new_end_must_be_after_current_end(self, new_end):
        repo = AppointmentRepositoryFactory.create_mock_full([_confirmed()])

        with pytest.raises(ValidationError, match="current end time"):
            _coordinator(repo).extend("apt-1", new_end)
        repo.update_fields.assert_not_called()

    def test_new_end_before_start_is_rejected(self):
        repo = AppointmentRepositoryFactory.create_mock_full([_confirmed()])

        with pytest.raises(ValidationError, match="after the start time"):
            _coordinator(repo).extend("apt-1", "09:00")

    def test_overlap_with_next_appointment_is_a_conflict(self):
        following = make_appointment("apt-2", start="11:00", end="12:00")
        repo = AppointmentRepositoryFactory.create_mock_full([_confirmed(), following])

        with pytest.raises(ConflictError):
            _coordinator(repo).extend("apt-1", "11:30")
        repo.update_fields.assert_not_called()

    def test_extending_up_to_next_appointment_is_allowed(self):
        following = make_appointment("apt-2", start="11:30", end="12:00")
        repo = AppointmentRepositoryFactory.create_mock_full([_confirmed(), following])

        extended = _coordinator(repo).extend("apt-1", "11:30")

        assert extended.end_time == time(11, 30)

    def test_cancelled_neighbour_does_not_block(self):
        following = make_appointment(
            "apt-2", start="11:00", end="12:00", status=AppointmentStatus.CANCELLED
        )
        repo = AppointmentRepositoryFactory.create_mock_full([_confirmed(), following])

        _coordinator(repo).extend("apt-1", "12:00")

        repo.update_fields.assert_called_once()

    @pytest.mark.parametrize("status", [AppointmentStatus.PENDING, AppointmentStatus.COMPLETED])
    def test_only_confirmed_can_be_extended(self, status):
        repo = AppointmentRepositoryFactory.create_mock_full(
            [make_appointment("apt-1", status=status)]
        )

        with pytest.raises(InvalidStateError):
            _coordinator(repo).extend("apt-1", "12:00")

    def test_legacy_appointment_is_rewritten_as_slot_based(self):
        legacy = make_legacy_appointment(
            at=datetime(2025, 7, 10, 14, 0, tzinfo=config.APP_TZ)
        )
        repo = AppointmentRepositoryFactory.create_mock_full([legacy])

        extended = _coordinator(repo).extend("legacy-1", "15:30")

        repo.update_fields.assert_called_once_with(
            "legacy-1",
            end_time=time(15, 30),
            date=SCENARIO_DATE,
            start_time=time(14, 0),
        )
        assert extended.schedule.variant == "slot_based"
        assert extended.effective_interval().end.time() == time(15, 30)

    def test_legacy_default_length_sets_the_current_end(self):
        legacy = make_legacy_appointment(
            at=datetime(2025, 7, 10, 14, 0, tzinfo=config.APP_TZ)
        )
        repo = AppointmentRepositoryFactory.create_mock_full([legacy])

        with pytest.raises(ValidationError, match="15:00"):
            _coordinator(repo).extend("legacy-1", "14:45")

    def test_legacy_appointment_ending_after_midnight_cannot_shrink(self):
        legacy = make_legacy_appointment(
            at=datetime(2025, 7, 10, 23, 30, tzinfo=config.APP_TZ)
        )
        repo = AppointmentRepositoryFactory.create_mock_full([legacy])

        with pytest.raises(ValidationError, match="current end time 00:30"):
            _coordinator(repo).extend("legacy-1", "23:50")
        repo.update_fields.assert_not_called()

    def test_legacy_extension_checks_from_its_real_start(self):
        legacy = make_legacy_appointment(
            at=datetime(2025, 7, 10, 14, 0, tzinfo=config.APP_TZ)
        )
        earlier_overlap = make_appointment(
            "apt-2", start="14:30", end="14:45", status=AppointmentStatus.CONFIRMED
        )
        repo = AppointmentRepositoryFactory.create_mock_full([legacy, earlier_overlap])

        with pytest.raises(ConflictError):
            _coordinator(repo).extend("legacy-1", "16:00")
