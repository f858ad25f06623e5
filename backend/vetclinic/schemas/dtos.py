"""
Data Transfer Objects (DTOs) for the JSON API.

Request DTOs are built from the raw request body and validated before a
service is called; response DTOs are built from domain entities and
serialized with ``to_dict``.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, time
from typing import Any, Dict, List, Mapping, Optional

from vetclinic.core.exceptions import ValidationError
from vetclinic.core.validation import (
    optional_text,
    parse_calendar_date,
    parse_time_of_day,
    require_field,
)
from vetclinic.domain.entities import (
    Appointment,
    MedicalRecord,
    Review,
    WorkingHours,
    format_time,
)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class BookingRequest:
    """DTO for appointment booking requests."""

    clinic_id: str
    pet_id: str
    date: date
    start_time: time
    end_time: time
    reason: str = ""
    service: str = ""
    notes: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "BookingRequest":
        request = cls(
            clinic_id=str(require_field(data, "clinic_id")),
            pet_id=str(require_field(data, "pet_id")),
            date=parse_calendar_date(require_field(data, "date"), "date"),
            start_time=parse_time_of_day(require_field(data, "start_time"), "start_time"),
            end_time=parse_time_of_day(require_field(data, "end_time"), "end_time"),
            reason=optional_text(data, "reason"),
            service=optional_text(data, "service"),
            notes=optional_text(data, "notes"),
        )
        request.validate()
        return request

    def validate(self) -> None:
        if self.start_time >= self.end_time:
            raise ValidationError("End time must be after start time", "end_time")
        if len(self.reason) > 500:
            raise ValidationError("Reason must be at most 500 characters", "reason")


@dataclass
class WorkingHoursRequest:
    start: time
    end: time

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "WorkingHoursRequest":
        return cls(
            start=parse_time_of_day(require_field(data, "start"), "start"),
            end=parse_time_of_day(require_field(data, "end"), "end"),
        )


@dataclass
class ExtendRequest:
    new_end_time: time

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ExtendRequest":
        value = data.get("new_end_time") or data.get("end_time")
        if not value:
            raise ValidationError("new_end_time is required", "new_end_time")
        return cls(new_end_time=parse_time_of_day(value, "new_end_time"))


@dataclass
class ReviewRequest:
    rating: int
    comment: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ReviewRequest":
        raw = require_field(data, "rating")
        try:
            rating = int(raw)
        except (TypeError, ValueError):
            raise ValidationError("Rating must be a whole number", "rating")
        request = cls(rating=rating, comment=optional_text(data, "comment"))
        request.validate()
        return request

    def validate(self) -> None:
        if not 1 <= self.rating <= 5:
            raise ValidationError("Rating must be between 1 and 5", "rating")


@dataclass
class MedicalRecordRequest:
    vet_in_charge: str = ""
    diagnosis: str = ""
    treatment: str = ""
    prescriptions: List[str] = field(default_factory=list)
    lab_results: str = ""
    notes: str = ""
    follow_up_date: Optional[date] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "MedicalRecordRequest":
        prescriptions = data.get("prescriptions") or []
        if isinstance(prescriptions, str):
            prescriptions = prescriptions.splitlines()
        if not isinstance(prescriptions, list):
            raise ValidationError("prescriptions must be a list", "prescriptions")

        follow_up = data.get("follow_up_date")
        return cls(
            vet_in_charge=optional_text(data, "vet_in_charge"),
            diagnosis=optional_text(data, "diagnosis"),
            treatment=optional_text(data, "treatment"),
            prescriptions=[str(p).strip() for p in prescriptions if str(p).strip()],
            lab_results=optional_text(data, "lab_results"),
            notes=optional_text(data, "notes"),
            follow_up_date=(
                parse_calendar_date(follow_up, "follow_up_date") if follow_up else None
            ),
        )


@dataclass
class AppointmentResponse:
    """DTO for appointment API responses."""

    id: str
    clinic_id: str
    owner_id: str
    pet_id: str
    date: str
    start_time: str
    end_time: str
    status: str
    schedule_type: str
    reason: str
    service: str
    notes: str
    clinic_notes: Optional[str]
    has_review: bool
    has_medical_record: bool
    medical_record_id: Optional[str]
    cancellation_reason: Optional[str]
    created_at: Optional[str]
    completed_at: Optional[str]
    cancelled_at: Optional[str]

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentResponse":
        """Create response from domain entity.

        Legacy appointments report the times of their effective interval.
        """
        interval = appointment.effective_interval()
        return cls(
            id=appointment.id,
            clinic_id=appointment.clinic_id,
            owner_id=appointment.owner_id,
            pet_id=appointment.pet_id,
            date=appointment.calendar_date.isoformat(),
            start_time=format_time(interval.start.time()),
            end_time=format_time(interval.end.time()),
            status=appointment.status,
            schedule_type=appointment.schedule.variant,
            reason=appointment.reason,
            service=appointment.service,
            notes=appointment.notes,
            clinic_notes=appointment.clinic_notes,
            has_review=appointment.has_review,
            has_medical_record=appointment.has_medical_record,
            medical_record_id=appointment.medical_record_id,
            cancellation_reason=appointment.cancellation_reason,
            created_at=_iso(appointment.created_at),
            completed_at=_iso(appointment.completed_at),
            cancelled_at=_iso(appointment.cancelled_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class WorkingHoursResponse:
    clinic_id: str
    start: str
    end: str
    duration_minutes: int
    is_default: bool

    @classmethod
    def from_domain(cls, hours: WorkingHours) -> "WorkingHoursResponse":
        return cls(
            clinic_id=hours.clinic_id,
            start=format_time(hours.start),
            end=format_time(hours.end),
            duration_minutes=hours.duration_minutes,
            is_default=hours.is_default,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SlotResponse:
    key: str
    start_time: str
    end_time: str
    label: str
    available: bool
    past: bool

    @classmethod
    def from_availability(cls, item) -> "SlotResponse":
        return cls(
            key=item.slot.key,
            start_time=format_time(item.slot.start_time),
            end_time=format_time(item.slot.end_time),
            label=item.slot.label,
            available=item.available,
            past=item.past,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MedicalRecordResponse:
    id: str
    appointment_id: str
    pet_id: str
    owner_id: str
    clinic_id: str
    vet_in_charge: str
    diagnosis: str
    treatment: str
    prescriptions: List[str]
    lab_results: str
    notes: str
    follow_up_date: Optional[str]
    created_at: Optional[str]

    @classmethod
    def from_domain(cls, record: MedicalRecord) -> "MedicalRecordResponse":
        return cls(
            id=record.id,
            appointment_id=record.appointment_id,
            pet_id=record.pet_id,
            owner_id=record.owner_id,
            clinic_id=record.clinic_id,
            vet_in_charge=record.vet_in_charge,
            diagnosis=record.diagnosis,
            treatment=record.treatment,
            prescriptions=list(record.prescriptions),
            lab_results=record.lab_results,
            notes=record.notes,
            follow_up_date=_iso(record.follow_up_date),
            created_at=_iso(record.created_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReviewResponse:
    id: str
    clinic_id: str
    appointment_id: Optional[str]
    rating: int
    comment: str
    created_at: Optional[str]

    @classmethod
    def from_domain(cls, review: Review) -> "ReviewResponse":
        return cls(
            id=review.id,
            clinic_id=review.clinic_id,
            appointment_id=review.appointment_id,
            rating=review.rating,
            comment=review.comment,
            created_at=_iso(review.created_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
