"""
Unit tests for AvailabilityChecker and SlotAvailabilityService.
"""

from datetime import datetime, time, timedelta

import pytest

from tests.conftest import FIXED_NOW
from tests.factories.repository_factories import (
    SCENARIO_DATE,
    AppointmentRepositoryFactory,
    make_appointment,
    make_legacy_appointment,
)
from vetclinic.core import config
from vetclinic.core.exceptions import StoreError
from vetclinic.domain.entities import AppointmentStatus, EffectiveInterval
from vetclinic.services.availability_service import (
    AvailabilityChecker,
    SlotAvailabilityService,
)
from vetclinic.services.slot_generator import SlotGenerator
from vetclinic.services.working_hours_service import WorkingHoursStore
from tests.factories.repository_factories import WorkingHoursRepositoryFactory


def _checker(*appointments) -> AvailabilityChecker:
    return AvailabilityChecker(AppointmentRepositoryFactory.create_mock_reader(list(appointments)))


@pytest.mark.unit
@pytest.mark.scheduling
class TestIsAvailable:
    def test_empty_day_is_available(self):
        assert _checker().is_available("clinic-1", SCENARIO_DATE, time(9), time(10))

    def test_overlapping_confirmed_blocks(self):
        checker = _checker(make_appointment(start="09:00", end="10:00", status="confirmed"))

        assert not checker.is_available("clinic-1", SCENARIO_DATE, time(9, 30), time(10, 30))

    def test_pending_also_blocks(self):
        checker = _checker(make_appointment(start="09:00", end="10:00", status="pending"))

        assert not checker.is_available("clinic-1", SCENARIO_DATE, time(9), time(10))

    @pytest.mark.parametrize(
        "status",
        [AppointmentStatus.REJECTED, AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED],
    )
    def test_non_live_statuses_do_not_block(self, status):
        checker = _checker(make_appointment(start="09:00", end="10:00", status=status))

        assert checker.is_available("clinic-1", SCENARIO_DATE, time(9), time(10))

    def test_touching_intervals_do_not_overlap(self):
        checker = _checker(make_appointment(start="09:00", end="10:00", status="confirmed"))

        assert checker.is_available("clinic-1", SCENARIO_DATE, time(10), time(11))
        assert checker.is_available("clinic-1", SCENARIO_DATE, time(8), time(9))

    def test_enclosing_interval_overlaps(self):
        checker = _checker(make_appointment(start="09:15", end="09:45", status="confirmed"))

        assert not checker.is_available("clinic-1", SCENARIO_DATE, time(9), time(10))

    def test_excluded_appointment_is_ignored(self):
        checker = _checker(make_appointment("apt-1", start="09:00", end="10:00"))

        assert checker.is_available(
            "clinic-1", SCENARIO_DATE, time(9), time(10), exclude_id="apt-1"
        )

    def test_blocking_statuses_can_be_narrowed(self):
        checker = _checker(make_appointment(start="09:00", end="10:00", status="pending"))

        assert checker.is_available(
            "clinic-1",
            SCENARIO_DATE,
            time(9),
            time(10),
            blocking_statuses={AppointmentStatus.CONFIRMED},
        )

    def test_legacy_appointment_blocks_its_default_length(self):
        legacy = make_legacy_appointment(
            at=datetime(2025, 7, 10, 14, 0, tzinfo=config.APP_TZ)
        )
        checker = _checker(legacy)

        assert not checker.is_available("clinic-1", SCENARIO_DATE, time(14, 30), time(15, 30))
        assert checker.is_available("clinic-1", SCENARIO_DATE, time(15), time(16))

    def test_read_failure_fails_open(self):
        repo = AppointmentRepositoryFactory.create_mock_reader()
        repo.get_for_clinic_on_date.side_effect = StoreError("timeout")

        assert AvailabilityChecker(repo).is_available("clinic-1", SCENARIO_DATE, time(9), time(10))

    def test_read_failure_propagates_when_fail_closed(self):
        repo = AppointmentRepositoryFactory.create_mock_reader()
        repo.get_for_clinic_on_date.side_effect = StoreError("timeout")

        with pytest.raises(StoreError):
            AvailabilityChecker(repo).is_available(
                "clinic-1", SCENARIO_DATE, time(9), time(10), fail_open=False
            )

    def test_find_conflicts_returns_the_overlapping_appointments(self):
        first = make_appointment("a", start="09:00", end="10:00", status="confirmed")
        second = make_appointment("b", start="11:00", end="12:00", status="confirmed")
        checker = _checker(first, second)

        conflicts = checker.find_conflicts("clinic-1", SCENARIO_DATE, time(9, 30), time(11, 30))

        assert [apt.id for apt in conflicts] == ["a", "b"]

    def test_interval_crossing_midnight_is_compared_as_instants(self):
        late = make_appointment("a", start="23:40", end="23:59", status="confirmed")
        start = datetime(2025, 7, 10, 23, 30, tzinfo=config.APP_TZ)
        candidate = EffectiveInterval(start, start + timedelta(hours=1))

        assert not _checker(late).is_interval_available("clinic-1", SCENARIO_DATE, candidate)


@pytest.mark.unit
@pytest.mark.scheduling
class TestSlotAvailabilityService:
    def _service(self, repo, now=FIXED_NOW):
        return SlotAvailabilityService(
            WorkingHoursStore(WorkingHoursRepositoryFactory.create_mock()),
            SlotGenerator(60),
            repo,
            clock=lambda: now,
        )

    def test_marks_taken_and_past_slots(self):
        repo = AppointmentRepositoryFactory.create_mock_reader(
            [make_appointment(start="10:00", end="11:00", status="confirmed")]
        )

        slots = self._service(repo).available_slots("clinic-1", SCENARIO_DATE)
        by_key = {item.slot.key: item for item in slots}

        # FIXED_NOW is 09:00 on the same date
        assert by_key["08:00-09:00"].past is True
        assert by_key["08:00-09:00"].available is False
        assert by_key["09:00-10:00"].available is False
        assert by_key["10:00-11:00"].available is False
        assert by_key["10:00-11:00"].past is False
        assert by_key["11:00-12:00"].available is True

    def test_read_failure_shows_future_slots_as_available(self):
        repo = AppointmentRepositoryFactory.create_mock_reader()
        repo.get_for_clinic_on_date.side_effect = StoreError("timeout")
        earlier = datetime(2025, 7, 1, 9, 0, tzinfo=config.APP_TZ)

        slots = self._service(repo, now=earlier).available_slots("clinic-1", SCENARIO_DATE)

        assert len(slots) == 9
        assert all(item.available for item in slots)
