"""
Persistent record of reminders already delivered.

Replaces per-browser flags with entries in the document store, so the
de-duplication survives restarts and is shared across processes.
"""

import logging
from datetime import date

from vetclinic.domain.interfaces import IDocumentStore, IReminderLedger

from .serialization import load_date

logger = logging.getLogger(__name__)

REMINDER_LEDGER = "reminder_ledger"


class StoreReminderLedger(IReminderLedger):
    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def has_sent(self, key: str) -> bool:
        return bool(self.store.query(REMINDER_LEDGER, {"key": key}))

    def mark_sent(self, key: str, sent_on: date) -> None:
        if self.has_sent(key):
            return
        self.store.create(REMINDER_LEDGER, {"key": key, "sent_on": sent_on.isoformat()})

    def clear_before(self, day: date) -> int:
        removed = 0
        for entry in self.store.query(REMINDER_LEDGER):
            sent_on = load_date(entry.get("sent_on"))
            if sent_on is None or sent_on < day:
                self.store.delete(REMINDER_LEDGER, entry["id"])
                removed += 1
        logger.info(
            "Reminder ledger cleaned",
            extra={"context": {"before": day.isoformat(), "removed": removed}},
        )
        return removed
