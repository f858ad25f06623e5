"""
Booking of new appointment requests.

The availability check here is advisory: read and write are separate
store calls, so two concurrent requests can both pass it. Approval
re-validates and is the real guard against double-booking.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from vetclinic.core import config
from vetclinic.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from vetclinic.core.validation import parse_calendar_date, parse_time_of_day
from vetclinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    NotificationKind,
    as_aware,
    combine,
    local_now,
)
from vetclinic.domain.interfaces import (
    IAppointmentRepository,
    IClinicRepository,
    IEventSink,
    IPetRepository,
)

from .availability_service import AvailabilityChecker
from .notification_service import AppointmentNotifier

logger = logging.getLogger(__name__)


class BookingCoordinator:
    def __init__(
        self,
        appointment_repo: IAppointmentRepository,
        clinic_repo: IClinicRepository,
        pet_repo: IPetRepository,
        availability: AvailabilityChecker,
        event_sink: Optional[IEventSink] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.appointment_repo = appointment_repo
        self.clinic_repo = clinic_repo
        self.pet_repo = pet_repo
        self.availability = availability
        self.notifier = AppointmentNotifier(event_sink, clinic_repo, pet_repo)
        self.clock = clock

    def book(
        self,
        owner_id: str,
        clinic_id: str,
        pet_id: str,
        day: Any,
        start_time: Any,
        end_time: Any,
        reason: str = "",
        service: str = "",
        notes: str = "",
    ) -> Appointment:
        """Persist a new pending appointment.

        Business Rules:
        - Date is not in the past nor beyond the booking horizon
        - Start time is before end time and has not already passed today
        - Clinic and pet exist, and the pet belongs to the owner
        - No live appointment overlaps the requested interval
        """
        day = parse_calendar_date(day, "date")
        start_time = parse_time_of_day(start_time, "start_time")
        end_time = parse_time_of_day(end_time, "end_time")

        now = as_aware(self.clock()).astimezone(config.APP_TZ)
        today = now.date()
        if day < today:
            raise ValidationError("Appointment date cannot be in the past", "date")
        if day > today + timedelta(days=config.BOOKING_HORIZON_DAYS):
            raise ValidationError(
                f"Appointments can be booked at most {config.BOOKING_HORIZON_DAYS} days ahead",
                "date",
            )
        if start_time >= end_time:
            raise ValidationError("End time must be after start time", "end_time")
        if combine(day, start_time) <= now:
            raise ValidationError("This time slot has already started", "start_time")

        clinic = self.clinic_repo.get_by_id(clinic_id)
        if not clinic:
            raise NotFoundError.for_resource("Clinic", clinic_id)
        pet = self.pet_repo.get_by_id(pet_id)
        if not pet:
            raise NotFoundError.for_resource("Pet", pet_id)
        if pet.owner_id and pet.owner_id != owner_id:
            raise AuthorizationError("Pet does not belong to this owner", "pet_id")

        if not self.availability.is_available(clinic_id, day, start_time, end_time):
            raise ConflictError("Slot no longer available", "start_time")

        created = self.appointment_repo.create(
            Appointment(
                clinic_id=clinic_id,
                owner_id=owner_id,
                pet_id=pet_id,
                date=day,
                start_time=start_time,
                end_time=end_time,
                status=AppointmentStatus.PENDING,
                reason=(reason or "").strip(),
                service=(service or "").strip(),
                notes=(notes or "").strip(),
                has_review=False,
            )
        )
        logger.info(
            "Appointment booked",
            extra={
                "context": {
                    "appointment_id": created.id,
                    "clinic_id": clinic_id,
                    "owner_id": owner_id,
                    "date": day.isoformat(),
                }
            },
        )

        self.notifier.notify_clinic(
            NotificationKind.NEW_BOOKING, created, clinic=clinic, pet=pet
        )
        return created
