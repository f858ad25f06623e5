from typing import Optional

from vetclinic.domain.entities import WorkingHours
from vetclinic.domain.interfaces import IDocumentStore, IWorkingHoursRepository

from .serialization import dump_value, load_time

WORKING_HOURS = "working_hours"


class WorkingHoursRepository(IWorkingHoursRepository):
    """One working-hours record per clinic, keyed by ``clinic_id``."""

    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def get(self, clinic_id: str) -> Optional[WorkingHours]:
        records = self.store.query(WORKING_HOURS, {"clinic_id": clinic_id})
        if not records:
            return None
        record = records[0]
        return WorkingHours(
            clinic_id=clinic_id,
            start=load_time(record["start"]),
            end=load_time(record["end"]),
        )

    def upsert(self, hours: WorkingHours) -> WorkingHours:
        data = {
            "clinic_id": hours.clinic_id,
            "start": dump_value(hours.start),
            "end": dump_value(hours.end),
        }
        existing = self.store.query(WORKING_HOURS, {"clinic_id": hours.clinic_id})
        if existing:
            self.store.update(WORKING_HOURS, existing[0]["id"], data)
        else:
            self.store.create(WORKING_HOURS, data)
        return WorkingHours(clinic_id=hours.clinic_id, start=hours.start, end=hours.end)
