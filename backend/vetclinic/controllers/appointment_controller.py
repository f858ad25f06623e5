"""
Appointment controller.

HTTP concerns only: parse the body into a DTO, check who the caller is
allowed to act as, delegate to the service, and shape the response.
Service exceptions are turned into JSON errors by the handlers registered
in ``vetclinic.core.api_utils``.
"""

from typing import Any, Dict

from flask import Blueprint, request

from vetclinic.container import ServiceContainer, get_container
from vetclinic.core.api_utils import api_response
from vetclinic.core.auth_decorators import get_current_user, jwt_required, role_required
from vetclinic.core.exceptions import ValidationError
from vetclinic.core.security import ROLE_CLINIC_OWNER, ROLE_PET_OWNER
from vetclinic.core.validation import require_field
from vetclinic.schemas.dtos import (
    AppointmentResponse,
    BookingRequest,
    ExtendRequest,
    MedicalRecordRequest,
    MedicalRecordResponse,
    ReviewRequest,
    ReviewResponse,
)

appointment_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _serialize(appointment) -> Dict[str, Any]:
    return AppointmentResponse.from_domain(appointment).to_dict()


class AppointmentController:
    """Controller for appointment-related HTTP endpoints."""

    def __init__(self, services: ServiceContainer):
        self.services = services

    def book(self):
        user = get_current_user()
        booking = BookingRequest.from_json(_json_body())
        appointment = self.services.booking.book(
            owner_id=user.id,
            clinic_id=booking.clinic_id,
            pet_id=booking.pet_id,
            day=booking.date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            reason=booking.reason,
            service=booking.service,
            notes=booking.notes,
        )
        return api_response(True, "Appointment requested", _serialize(appointment), 201)

    def list_mine(self):
        user = get_current_user()
        status = request.args.get("status") or None
        appointments = self.services.appointments.list_for_owner(user.id, status)
        return api_response(
            True,
            f"{len(appointments)} appointment(s)",
            [_serialize(apt) for apt in appointments],
        )

    def get(self, appointment_id: str):
        user = get_current_user()
        appointment = self.services.appointments.get(appointment_id)
        self.services.access.require_participant(appointment, user.id)
        return api_response(True, "Appointment found", _serialize(appointment))

    def approve(self, appointment_id: str):
        self._require_clinic_side(appointment_id)
        appointment = self.services.approval.approve(appointment_id)
        return api_response(True, "Appointment confirmed", _serialize(appointment))

    def reject(self, appointment_id: str):
        self._require_clinic_side(appointment_id)
        appointment = self.services.approval.reject(appointment_id)
        return api_response(True, "Appointment rejected", _serialize(appointment))

    def extend(self, appointment_id: str):
        extension = ExtendRequest.from_json(_json_body())
        self._require_clinic_side(appointment_id)
        appointment = self.services.extension.extend(
            appointment_id, extension.new_end_time
        )
        return api_response(True, "Appointment extended", _serialize(appointment))

    def complete(self, appointment_id: str):
        self._require_clinic_side(appointment_id)
        appointment = self.services.appointments.complete(appointment_id)
        return api_response(True, "Appointment marked as done", _serialize(appointment))

    def add_notes(self, appointment_id: str):
        notes = require_field(_json_body(), "notes")
        self._require_clinic_side(appointment_id)
        appointment = self.services.appointments.add_clinic_notes(appointment_id, str(notes))
        return api_response(True, "Notes saved", _serialize(appointment))

    def cancel(self, appointment_id: str):
        user = get_current_user()
        reason = str(_json_body().get("reason") or "")
        appointment = self.services.appointments.get(appointment_id)
        self.services.access.require_booking_owner(appointment, user.id)
        appointment = self.services.appointments.cancel(appointment_id, reason)
        return api_response(True, "Appointment cancelled", _serialize(appointment))

    def review(self, appointment_id: str):
        user = get_current_user()
        review_request = ReviewRequest.from_json(_json_body())
        review = self.services.reviews.submit(
            user.id, appointment_id, review_request.rating, review_request.comment
        )
        return api_response(
            True, "Thank you for your review", ReviewResponse.from_domain(review).to_dict(), 201
        )

    def create_medical_record(self, appointment_id: str):
        record_request = MedicalRecordRequest.from_json(_json_body())
        self._require_clinic_side(appointment_id)
        record = self.services.medical_records.create(
            appointment_id,
            vet_in_charge=record_request.vet_in_charge,
            diagnosis=record_request.diagnosis,
            treatment=record_request.treatment,
            prescriptions=record_request.prescriptions,
            lab_results=record_request.lab_results,
            notes=record_request.notes,
            follow_up_date=record_request.follow_up_date,
        )
        return api_response(
            True,
            "Medical record created",
            MedicalRecordResponse.from_domain(record).to_dict(),
            201,
        )

    def sweep(self):
        user = get_current_user()
        clinic_id = str(require_field(_json_body(), "clinic_id"))
        self.services.access.require_clinic_owner(clinic_id, user.id)
        result = self.services.sweeper.run_for_clinic(clinic_id)
        return api_response(
            True,
            f"{len(result.completed)} appointment(s) completed",
            {"completed": result.completed, "failed": result.failed},
        )

    def _require_clinic_side(self, appointment_id: str) -> None:
        user = get_current_user()
        appointment = self.services.appointments.get(appointment_id)
        self.services.access.require_clinic_owner(appointment.clinic_id, user.id)


def get_appointment_controller() -> AppointmentController:
    return AppointmentController(get_container())


@appointment_bp.route("", methods=["POST"])
@role_required(ROLE_PET_OWNER)
def book_appointment():
    return get_appointment_controller().book()


@appointment_bp.route("/mine", methods=["GET"])
@jwt_required
def list_my_appointments():
    return get_appointment_controller().list_mine()


@appointment_bp.route("/sweep", methods=["POST"])
@role_required(ROLE_CLINIC_OWNER)
def sweep_appointments():
    """Run the lifecycle sweep now for one clinic (dashboard load)."""
    return get_appointment_controller().sweep()


@appointment_bp.route("/<appointment_id>", methods=["GET"])
@jwt_required
def get_appointment(appointment_id: str):
    return get_appointment_controller().get(appointment_id)


@appointment_bp.route("/<appointment_id>/approve", methods=["POST"])
@role_required(ROLE_CLINIC_OWNER)
def approve_appointment(appointment_id: str):
    return get_appointment_controller().approve(appointment_id)


@appointment_bp.route("/<appointment_id>/reject", methods=["POST"])
@role_required(ROLE_CLINIC_OWNER)
def reject_appointment(appointment_id: str):
    return get_appointment_controller().reject(appointment_id)


@appointment_bp.route("/<appointment_id>/extend", methods=["POST"])
@role_required(ROLE_CLINIC_OWNER)
def extend_appointment(appointment_id: str):
    return get_appointment_controller().extend(appointment_id)


@appointment_bp.route("/<appointment_id>/complete", methods=["POST"])
@role_required(ROLE_CLINIC_OWNER)
def complete_appointment(appointment_id: str):
    return get_appointment_controller().complete(appointment_id)


@appointment_bp.route("/<appointment_id>/notes", methods=["POST"])
@role_required(ROLE_CLINIC_OWNER)
def add_appointment_notes(appointment_id: str):
    return get_appointment_controller().add_notes(appointment_id)


@appointment_bp.route("/<appointment_id>/medical-records", methods=["POST"])
@role_required(ROLE_CLINIC_OWNER)
def create_medical_record(appointment_id: str):
    return get_appointment_controller().create_medical_record(appointment_id)


@appointment_bp.route("/<appointment_id>/cancel", methods=["POST"])
@role_required(ROLE_PET_OWNER)
def cancel_appointment(appointment_id: str):
    return get_appointment_controller().cancel(appointment_id)


@appointment_bp.route("/<appointment_id>/review", methods=["POST"])
@role_required(ROLE_PET_OWNER)
def review_appointment(appointment_id: str):
    return get_appointment_controller().review(appointment_id)
