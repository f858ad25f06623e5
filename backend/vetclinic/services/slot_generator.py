from datetime import date
from typing import List, Optional

from vetclinic.core import config
from vetclinic.core.exceptions import ValidationError
from vetclinic.domain.entities import (
    TimeSlot,
    WorkingHours,
    format_time,
    minutes_of_day,
    time_from_minutes,
)


class SlotGenerator:
    """Tiles a working-hours window into fixed-length bookable slots.

    Pure: no I/O and no state beyond the default interval, so identical
    inputs always produce identical output.
    """

    def __init__(self, interval_minutes: Optional[int] = None):
        self.interval_minutes = interval_minutes or config.SLOT_INTERVAL_MINUTES

    def generate(
        self,
        hours: WorkingHours,
        day: date,
        interval_minutes: Optional[int] = None,
    ) -> List[TimeSlot]:
        """Ordered slots ``[cursor, cursor + interval)`` from start to end.

        A trailing period shorter than the interval is dropped. ``day`` is
        accepted for callers that vary hours per date; the tiling itself
        only depends on ``hours``.
        """
        interval = interval_minutes or self.interval_minutes
        if interval <= 0:
            raise ValidationError("Slot interval must be positive", "interval_minutes")

        cursor = minutes_of_day(hours.start)
        close = minutes_of_day(hours.end)

        slots = []
        while cursor + interval <= close:
            start_time = time_from_minutes(cursor)
            end_time = time_from_minutes(cursor + interval)
            slots.append(
                TimeSlot(
                    start_time=start_time,
                    end_time=end_time,
                    label=f"{format_time(start_time)} - {format_time(end_time)}",
                )
            )
            cursor += interval
        return slots
