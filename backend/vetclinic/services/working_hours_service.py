import logging
from typing import Any

from vetclinic.core.exceptions import StoreError
from vetclinic.core.validation import parse_time_of_day
from vetclinic.domain.entities import WorkingHours, format_time
from vetclinic.domain.interfaces import IWorkingHoursRepository

logger = logging.getLogger(__name__)


class WorkingHoursStore:
    """Holds each clinic's daily open/close window."""

    def __init__(self, working_hours_repo: IWorkingHoursRepository):
        self.working_hours_repo = working_hours_repo

    def get(self, clinic_id: str) -> WorkingHours:
        """Stored hours, or the configured default when none are stored.

        A store failure also yields the default so slot listings keep working.
        """
        try:
            stored = self.working_hours_repo.get(clinic_id)
        except StoreError as e:
            logger.warning(
                f"Could not load working hours, using defaults: {e}",
                extra={"context": {"clinic_id": clinic_id}},
            )
            stored = None

        if stored is None:
            return WorkingHours(clinic_id=clinic_id, is_default=True)
        return stored

    def set(self, clinic_id: str, start: Any, end: Any) -> WorkingHours:
        hours = WorkingHours(
            clinic_id=clinic_id,
            start=parse_time_of_day(start, "start"),
            end=parse_time_of_day(end, "end"),
        )
        hours.validate()

        saved = self.working_hours_repo.upsert(hours)
        logger.info(
            "Working hours updated",
            extra={
                "context": {
                    "clinic_id": clinic_id,
                    "start": format_time(hours.start),
                    "end": format_time(hours.end),
                }
            },
        )
        return saved
