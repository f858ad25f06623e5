"""
Domain entities - pure business logic, no framework dependencies.

Wall-clock values (``time``) and calendar dates (``date``) are kept apart
from instants (``datetime``). An appointment is stored either in the
slot-based form (date + start/end time) or in the legacy single-instant
form; both are read through ``Appointment.schedule`` so callers never
branch on the shape themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

from vetclinic.core import config
from vetclinic.core.exceptions import ValidationError

MINUTES_PER_DAY = 24 * 60


def minutes_of_day(value: time) -> int:
    """Minutes elapsed since midnight."""
    return value.hour * 60 + value.minute


def time_from_minutes(total_minutes: int) -> time:
    """Inverse of ``minutes_of_day``; rejects values outside a single day."""
    if not 0 <= total_minutes < MINUTES_PER_DAY:
        raise ValidationError(f"{total_minutes} minutes is outside a single day")
    return time(total_minutes // 60, total_minutes % 60)


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def combine(day: date, wall_clock: time) -> datetime:
    """Interpret a calendar date and wall-clock time as an instant."""
    return datetime.combine(day, wall_clock, tzinfo=config.APP_TZ)


def local_now() -> datetime:
    return datetime.now(config.APP_TZ)


def as_aware(value: datetime) -> datetime:
    """Attach the application zone to naive instants; aware ones pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=config.APP_TZ)
    return value


class AppointmentStatus:
    """Appointment lifecycle states and the transitions allowed between them."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = (PENDING, CONFIRMED, REJECTED, COMPLETED, CANCELLED)

    # Statuses that occupy their interval for availability purposes
    LIVE = frozenset({PENDING, CONFIRMED})
    TERMINAL = frozenset({REJECTED, COMPLETED, CANCELLED})

    TRANSITIONS = {
        PENDING: frozenset({CONFIRMED, REJECTED, CANCELLED}),
        CONFIRMED: frozenset({COMPLETED, CANCELLED}),
        REJECTED: frozenset(),
        COMPLETED: frozenset(),
        CANCELLED: frozenset(),
    }

    @classmethod
    def can_transition(cls, current: str, target: str) -> bool:
        return target in cls.TRANSITIONS.get(current, frozenset())


class NotificationKind:
    """Event kinds handed to the notification sink."""

    NEW_BOOKING = "new_booking"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_REJECTED = "booking_rejected"
    APPOINTMENT_EXTENDED = "appointment_extended"
    APPOINTMENT_COMPLETED = "appointment_completed"
    APPOINTMENT_CANCELLED = "appointment_cancelled"
    APPOINTMENT_REMINDER = "appointment_reminder"
    DAILY_SCHEDULE = "daily_schedule"


@dataclass
class WorkingHours:
    """A clinic's daily open/close window."""

    clinic_id: str = ""
    start: time = field(default_factory=lambda: config.DEFAULT_WORKING_HOURS_START)
    end: time = field(default_factory=lambda: config.DEFAULT_WORKING_HOURS_END)
    is_default: bool = False

    @property
    def duration_minutes(self) -> int:
        return minutes_of_day(self.end) - minutes_of_day(self.start)

    def validate(self) -> None:
        """Enforce start < end and a duration between 1 and 16 hours."""
        if self.start >= self.end:
            raise ValidationError("End time must be after start time", "end")
        if self.duration_minutes < config.MIN_WORKING_MINUTES:
            raise ValidationError("Working hours must be at least 1 hour", "end")
        if self.duration_minutes > config.MAX_WORKING_MINUTES:
            raise ValidationError("Working hours cannot exceed 16 hours per day", "end")


@dataclass(frozen=True)
class TimeSlot:
    """A candidate bookable interval; generated, never persisted."""

    start_time: time
    end_time: time
    label: str

    @property
    def key(self) -> str:
        return f"{format_time(self.start_time)}-{format_time(self.end_time)}"


@dataclass(frozen=True)
class EffectiveInterval:
    """Half-open ``[start, end)`` span of instants an appointment occupies."""

    start: datetime
    end: datetime

    def overlaps(self, other: "EffectiveInterval") -> bool:
        return self.start < other.end and other.start < self.end

    @classmethod
    def on(cls, day: date, start_time: time, end_time: time) -> "EffectiveInterval":
        return cls(combine(day, start_time), combine(day, end_time))


@dataclass(frozen=True)
class SlotBasedSchedule:
    """Date plus start/end wall-clock times."""

    day: date
    start_time: time
    end_time: time

    variant = "slot_based"

    @property
    def calendar_date(self) -> date:
        return self.day

    def interval(self) -> EffectiveInterval:
        return EffectiveInterval.on(self.day, self.start_time, self.end_time)


@dataclass(frozen=True)
class LegacySchedule:
    """Single combined instant; the length comes from configuration."""

    date_time: datetime
    duration_minutes: int

    variant = "legacy"

    @property
    def local_start(self) -> datetime:
        return as_aware(self.date_time).astimezone(config.APP_TZ)

    @property
    def calendar_date(self) -> date:
        return self.local_start.date()

    def interval(self) -> EffectiveInterval:
        start = self.local_start
        return EffectiveInterval(start, start + timedelta(minutes=self.duration_minutes))


Schedule = Union[SlotBasedSchedule, LegacySchedule]


@dataclass
class Appointment:
    """Domain entity for a pet's visit to a clinic."""

    id: Optional[str] = None
    clinic_id: str = ""
    owner_id: str = ""
    pet_id: str = ""
    date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    date_time: Optional[datetime] = None  # legacy combined form
    status: str = AppointmentStatus.PENDING
    reason: str = ""
    service: str = ""
    notes: str = ""
    clinic_notes: Optional[str] = None
    has_review: bool = False
    has_medical_record: bool = False
    medical_record_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.clinic_id:
            raise ValidationError("clinic_id is required", "clinic_id")
        if self.status not in AppointmentStatus.ALL:
            raise ValidationError(f"Invalid status '{self.status}'", "status")

        slot_based = (
            self.date is not None
            and self.start_time is not None
            and self.end_time is not None
        )
        if slot_based:
            if self.start_time >= self.end_time:
                raise ValidationError("End time must be after start time", "end_time")
        elif self.date_time is None:
            raise ValidationError(
                "Appointment needs either date/start_time/end_time or date_time",
                "date",
            )

    @property
    def schedule(self) -> Schedule:
        """The appointment's timing, whichever representation is populated."""
        if (
            self.date is not None
            and self.start_time is not None
            and self.end_time is not None
        ):
            return SlotBasedSchedule(self.date, self.start_time, self.end_time)
        return LegacySchedule(self.date_time, config.LEGACY_APPOINTMENT_MINUTES)

    @property
    def calendar_date(self) -> date:
        return self.schedule.calendar_date

    def effective_interval(self) -> EffectiveInterval:
        return self.schedule.interval()

    @property
    def is_live(self) -> bool:
        return self.status in AppointmentStatus.LIVE


@dataclass
class Clinic:
    """The subset of a clinic profile the scheduling core reads."""

    id: Optional[str] = None
    owner_id: str = ""
    name: str = ""
    average_rating: float = 0.0
    review_count: int = 0

    @property
    def display_name(self) -> str:
        return self.name or "Your Clinic"


@dataclass
class Pet:
    id: Optional[str] = None
    owner_id: str = ""
    name: str = ""
    species: str = ""

    @property
    def display_name(self) -> str:
        return self.name or "Your Pet"


@dataclass
class MedicalRecord:
    """Clinical notes issued by a clinic for one appointment."""

    id: Optional[str] = None
    appointment_id: str = ""
    pet_id: str = ""
    owner_id: str = ""
    clinic_id: str = ""
    vet_in_charge: str = ""
    diagnosis: str = ""
    treatment: str = ""
    prescriptions: List[str] = field(default_factory=list)
    lab_results: str = ""
    notes: str = ""
    follow_up_date: Optional[date] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not (self.pet_id and self.owner_id and self.clinic_id):
            raise ValidationError("Pet ID, Owner ID, and Clinic ID are required")


@dataclass
class Review:
    id: Optional[str] = None
    clinic_id: str = ""
    user_id: str = ""
    appointment_id: Optional[str] = None
    rating: int = 0
    comment: str = ""
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not 1 <= self.rating <= 5:
            raise ValidationError("Rating must be between 1 and 5", "rating")


@dataclass(frozen=True)
class StatusTransition:
    """A status change computed by the lifecycle sweeper, not yet persisted."""

    appointment_id: str
    new_status: str
