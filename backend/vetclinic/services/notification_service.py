"""
Notification sinks and the best-effort emit helper used by coordinators.

Coordinators call ``emit_safely`` after a state transition has been
persisted. A failing sink is logged and never unwinds the transition.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from vetclinic.domain.entities import (
    Appointment,
    Clinic,
    NotificationKind,
    Pet,
    format_time,
)
from vetclinic.domain.interfaces import (
    IClinicRepository,
    IDocumentStore,
    IEventSink,
    IPetRepository,
)

logger = logging.getLogger(__name__)

NOTIFICATIONS = "notifications"

_TEMPLATES = {
    NotificationKind.NEW_BOOKING: (
        "New Appointment Request",
        "{pet_name} requested an appointment on {date} at {start_time}.",
    ),
    NotificationKind.BOOKING_CONFIRMED: (
        "Appointment Confirmed",
        "{clinic_name} confirmed {pet_name}'s appointment on {date} at {start_time}.",
    ),
    NotificationKind.BOOKING_REJECTED: (
        "Appointment Rejected",
        "{clinic_name} could not accept {pet_name}'s appointment on {date}.",
    ),
    NotificationKind.APPOINTMENT_EXTENDED: (
        "Appointment Extended",
        "{pet_name}'s appointment on {date} now ends at {end_time}.",
    ),
    NotificationKind.APPOINTMENT_COMPLETED: (
        "Appointment Completed",
        "{pet_name}'s appointment at {clinic_name} is complete.",
    ),
    NotificationKind.APPOINTMENT_CANCELLED: (
        "Appointment Cancelled",
        "The appointment for {pet_name} on {date} at {start_time} was cancelled.",
    ),
    NotificationKind.APPOINTMENT_REMINDER: (
        "Appointment Reminder",
        "{pet_name} has an appointment at {clinic_name} on {date} at {start_time}.",
    ),
    NotificationKind.DAILY_SCHEDULE: (
        "Today's Schedule",
        "{summary}",
    ),
}


class _Defaults(dict):
    def __missing__(self, key):
        return ""


def render(kind: str, payload: Mapping[str, Any]) -> Dict[str, str]:
    """Plain-text title and body for an event."""
    title, body = _TEMPLATES.get(kind, (kind.replace("_", " ").title(), ""))
    return {
        "title": payload.get("title") or title,
        "body": payload.get("body") or body.format_map(_Defaults(payload)),
    }


def appointment_payload(
    appointment: Appointment,
    to_user_id: str,
    clinic_name: str = "",
    pet_name: str = "",
    **extra: Any,
) -> Dict[str, Any]:
    """The context every appointment event carries."""
    interval = appointment.effective_interval()
    payload = {
        "to_user_id": to_user_id,
        "appointment_id": appointment.id,
        "clinic_id": appointment.clinic_id,
        "pet_id": appointment.pet_id,
        "clinic_name": clinic_name or "Your Clinic",
        "pet_name": pet_name or "Your Pet",
        "date": appointment.calendar_date.isoformat(),
        "start_time": format_time(interval.start.timetz()),
        "end_time": format_time(interval.end.timetz()),
    }
    payload.update(extra)
    return payload


def emit_safely(
    sink: Optional[IEventSink], kind: str, payload: Mapping[str, Any]
) -> bool:
    """Deliver an event, logging instead of raising when delivery fails."""
    if sink is None:
        return False
    try:
        sink.emit(kind, payload)
        return True
    except Exception as e:
        logger.error(
            f"Failed to emit {kind} notification: {e}",
            extra={
                "context": {
                    "kind": kind,
                    "to_user_id": payload.get("to_user_id"),
                    "appointment_id": payload.get("appointment_id"),
                }
            },
            exc_info=True,
        )
        return False


class AppointmentNotifier:
    """Addresses appointment events to the pet owner or the clinic owner.

    Clinic and pet names are looked up for the message text; lookups and
    delivery are best-effort like the emit itself.
    """

    def __init__(
        self,
        event_sink: Optional[IEventSink],
        clinic_repo: Optional[IClinicRepository] = None,
        pet_repo: Optional[IPetRepository] = None,
    ):
        self.event_sink = event_sink
        self.clinic_repo = clinic_repo
        self.pet_repo = pet_repo

    def notify_owner(
        self,
        kind: str,
        appointment: Appointment,
        clinic: Optional[Clinic] = None,
        pet: Optional[Pet] = None,
        **extra: Any,
    ) -> bool:
        return self._notify(kind, appointment, "owner", clinic, pet, extra)

    def notify_clinic(
        self,
        kind: str,
        appointment: Appointment,
        clinic: Optional[Clinic] = None,
        pet: Optional[Pet] = None,
        **extra: Any,
    ) -> bool:
        return self._notify(kind, appointment, "clinic", clinic, pet, extra)

    def _notify(self, kind, appointment, audience, clinic, pet, extra) -> bool:
        if self.event_sink is None:
            return False
        try:
            if clinic is None and self.clinic_repo is not None:
                clinic = self.clinic_repo.get_by_id(appointment.clinic_id)
            if pet is None and self.pet_repo is not None and appointment.pet_id:
                pet = self.pet_repo.get_by_id(appointment.pet_id)
        except Exception as e:
            logger.warning(
                f"Notification context lookup failed: {e}",
                extra={"context": {"appointment_id": appointment.id, "kind": kind}},
                exc_info=True,
            )

        if audience == "clinic":
            to_user_id = clinic.owner_id if clinic else ""
        else:
            to_user_id = appointment.owner_id

        payload = appointment_payload(
            appointment,
            to_user_id=to_user_id,
            clinic_name=clinic.display_name if clinic else "",
            pet_name=pet.display_name if pet else "",
            **extra,
        )
        return emit_safely(self.event_sink, kind, payload)


class StoreEventSink(IEventSink):
    """Writes each event to the ``notifications`` collection as unread."""

    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def emit(self, kind: str, payload: Mapping[str, Any]) -> None:
        to_user_id = payload.get("to_user_id")
        if not to_user_id:
            logger.warning(
                "Notification without recipient dropped",
                extra={"context": {"kind": kind}},
            )
            return

        text = render(kind, payload)
        self.store.create(
            NOTIFICATIONS,
            {
                "to_user_id": to_user_id,
                "kind": kind,
                "title": text["title"],
                "body": text["body"],
                "appointment_id": payload.get("appointment_id"),
                "payload": dict(payload),
                "status": "unread",
            },
        )
        logger.info(
            "Notification stored",
            extra={"context": {"kind": kind, "to_user_id": to_user_id}},
        )


class LoggingEventSink(IEventSink):
    def emit(self, kind: str, payload: Mapping[str, Any]) -> None:
        logger.info(
            render(kind, payload)["title"],
            extra={"context": {"kind": kind, "payload": dict(payload)}},
        )
