"""
Unit tests for LifecycleSweeper.

``sweep`` is tested as a pure function; ``run`` against a mock repository.
"""

from datetime import datetime

import pytest

from tests.conftest import FIXED_NOW
from tests.factories.repository_factories import (
    AppointmentRepositoryFactory,
    SinkFactory,
    make_appointment,
    make_legacy_appointment,
)
from vetclinic.core import config
from vetclinic.core.exceptions import StoreError
from vetclinic.domain.entities import (
    AppointmentStatus,
    NotificationKind,
    StatusTransition,
)
from vetclinic.services.lifecycle_service import LifecycleSweeper

NOON = FIXED_NOW.replace(hour=12)


@pytest.mark.unit
@pytest.mark.scheduling
class TestSweep:
    def test_confirmed_past_end_is_completed(self):
        apt = make_appointment(start="10:00", end="11:00", status=AppointmentStatus.CONFIRMED)

        assert LifecycleSweeper.sweep([apt], NOON) == [
            StatusTransition("apt-1", AppointmentStatus.COMPLETED)
        ]

    def test_in_progress_appointment_is_left_alone(self):
        apt = make_appointment(start="11:30", end="12:30", status=AppointmentStatus.CONFIRMED)

        assert LifecycleSweeper.sweep([apt], NOON) == []

    def test_end_equal_to_now_is_not_yet_past(self):
        apt = make_appointment(start="11:00", end="12:00", status=AppointmentStatus.CONFIRMED)

        assert LifecycleSweeper.sweep([apt], NOON) == []

    @pytest.mark.parametrize(
        "status",
        [
            AppointmentStatus.PENDING,
            AppointmentStatus.REJECTED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.COMPLETED,
        ],
    )
    def test_only_confirmed_are_swept(self, status):
        apt = make_appointment(start="08:00", end="09:00", status=status)

        assert LifecycleSweeper.sweep([apt], NOON) == []

    def test_legacy_appointment_uses_default_length(self):
        legacy = make_legacy_appointment(at=datetime(2025, 7, 10, 11, 0, tzinfo=config.APP_TZ))

        assert LifecycleSweeper.sweep([legacy], NOON) == []
        assert LifecycleSweeper.sweep([legacy], NOON.replace(minute=1)) == [
            StatusTransition("legacy-1", AppointmentStatus.COMPLETED)
        ]

    def test_naive_now_is_read_in_app_timezone(self):
        apt = make_appointment(start="10:00", end="11:00", status=AppointmentStatus.CONFIRMED)

        assert len(LifecycleSweeper.sweep([apt], datetime(2025, 7, 10, 12, 0))) == 1


@pytest.mark.unit
@pytest.mark.scheduling
class TestRun:
    def test_persists_and_notifies(self):
        apt = make_appointment(start="10:00", end="11:00", status=AppointmentStatus.CONFIRMED)
        repo = AppointmentRepositoryFactory.create_mock_full([apt])
        sink = SinkFactory.create_mock_sink()

        result = LifecycleSweeper(repo, sink).run([apt], NOON)

        assert result.completed == ["apt-1"]
        assert result.failed == []
        repo.update_fields.assert_called_once_with(
            "apt-1", status=AppointmentStatus.COMPLETED, completed_at=NOON
        )
        assert apt.status == AppointmentStatus.COMPLETED
        kind, payload = sink.emit.call_args.args
        assert kind == NotificationKind.APPOINTMENT_COMPLETED
        assert payload["automatic"] is True

    def test_second_run_is_a_no_op(self):
        apt = make_appointment(start="10:00", end="11:00", status=AppointmentStatus.CONFIRMED)
        repo = AppointmentRepositoryFactory.create_mock_full([apt])
        sweeper = LifecycleSweeper(repo)

        sweeper.run([apt], NOON)
        again = sweeper.run([apt], NOON)

        assert again.total == 0
        assert repo.update_fields.call_count == 1

    def test_one_failed_write_does_not_stop_the_rest(self):
        first = make_appointment("apt-1", start="08:00", end="09:00", status="confirmed")
        second = make_appointment("apt-2", start="10:00", end="11:00", status="confirmed")
        repo = AppointmentRepositoryFactory.create_mock_full([first, second])

        def update(appointment_id, **fields):
            if appointment_id == "apt-1":
                raise StoreError("write failed")

        repo.update_fields.side_effect = update

        result = LifecycleSweeper(repo).run([first, second], NOON)

        assert result.failed == ["apt-1"]
        assert result.completed == ["apt-2"]
        assert first.status == AppointmentStatus.CONFIRMED
        assert second.status == AppointmentStatus.COMPLETED

    def test_failing_sink_still_completes(self):
        apt = make_appointment(status=AppointmentStatus.CONFIRMED)
        repo = AppointmentRepositoryFactory.create_mock_full([apt])

        result = LifecycleSweeper(repo, SinkFactory.create_failing_sink()).run([apt], NOON)

        assert result.completed == ["apt-1"]

    def test_uses_injected_clock_when_now_is_omitted(self):
        apt = make_appointment(status=AppointmentStatus.CONFIRMED)
        repo = AppointmentRepositoryFactory.create_mock_full([apt])

        early = LifecycleSweeper(repo, clock=lambda: FIXED_NOW).run([apt])
        late = LifecycleSweeper(repo, clock=lambda: NOON).run([apt])

        assert early.total == 0
        assert late.completed == ["apt-1"]

    def test_run_for_clinic_reads_confirmed_appointments(self):
        apt = make_appointment(status=AppointmentStatus.CONFIRMED)
        repo = AppointmentRepositoryFactory.create_mock_full()
        repo.get_by_clinic.return_value = [apt]

        result = LifecycleSweeper(repo).run_for_clinic("clinic-1", NOON)

        repo.get_by_clinic.assert_called_once_with("clinic-1", AppointmentStatus.CONFIRMED)
        assert result.completed == ["apt-1"]

    def test_run_all_reads_by_status(self):
        repo = AppointmentRepositoryFactory.create_mock_full()

        LifecycleSweeper(repo).run_all(NOON)

        repo.get_by_status.assert_called_once_with(AppointmentStatus.CONFIRMED)
