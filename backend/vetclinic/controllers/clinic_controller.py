"""
Clinic controller - working hours, bookable slots and the clinic's calendar.
"""

from flask import Blueprint, request

from vetclinic.container import get_container
from vetclinic.core.api_utils import api_response
from vetclinic.core.auth_decorators import get_current_user, jwt_required, role_required
from vetclinic.core.security import ROLE_CLINIC_OWNER
from vetclinic.core.validation import parse_calendar_date, parse_time_of_day, require_field
from vetclinic.schemas.dtos import (
    AppointmentResponse,
    SlotResponse,
    WorkingHoursRequest,
    WorkingHoursResponse,
)

clinic_bp = Blueprint("clinics", __name__, url_prefix="/api/clinics")


def _date_arg(required: bool = True):
    value = request.args.get("date")
    if not value and not required:
        return None
    return parse_calendar_date(require_field(request.args, "date"), "date")


@clinic_bp.route("/<clinic_id>/working-hours", methods=["GET"])
@jwt_required
def get_working_hours(clinic_id: str):
    hours = get_container().working_hours.get(clinic_id)
    return api_response(
        True, "Working hours", WorkingHoursResponse.from_domain(hours).to_dict()
    )


@clinic_bp.route("/<clinic_id>/working-hours", methods=["PUT"])
@role_required(ROLE_CLINIC_OWNER)
def set_working_hours(clinic_id: str):
    services = get_container()
    services.access.require_clinic_owner(clinic_id, get_current_user().id)
    hours_request = WorkingHoursRequest.from_json(request.get_json(silent=True) or {})
    hours = services.working_hours.set(clinic_id, hours_request.start, hours_request.end)
    return api_response(
        True, "Working hours updated", WorkingHoursResponse.from_domain(hours).to_dict()
    )


@clinic_bp.route("/<clinic_id>/slots", methods=["GET"])
@jwt_required
def list_slots(clinic_id: str):
    """Generated slots for a date, each flagged available or not."""
    day = _date_arg()
    slots = get_container().slots.available_slots(clinic_id, day)
    return api_response(
        True,
        f"{sum(1 for s in slots if s.available)} of {len(slots)} slot(s) available",
        [SlotResponse.from_availability(s).to_dict() for s in slots],
    )


@clinic_bp.route("/<clinic_id>/availability", methods=["GET"])
@jwt_required
def check_availability(clinic_id: str):
    day = _date_arg()
    start_time = parse_time_of_day(require_field(request.args, "start_time"), "start_time")
    end_time = parse_time_of_day(require_field(request.args, "end_time"), "end_time")
    available = get_container().availability.is_available(
        clinic_id, day, start_time, end_time
    )
    return api_response(
        True,
        "Slot available" if available else "Slot already taken",
        {"available": available},
    )


@clinic_bp.route("/<clinic_id>/appointments", methods=["GET"])
@role_required(ROLE_CLINIC_OWNER)
def list_clinic_appointments(clinic_id: str):
    services = get_container()
    services.access.require_clinic_owner(clinic_id, get_current_user().id)
    appointments = services.appointments.list_for_clinic(
        clinic_id,
        status=request.args.get("status") or None,
        day=_date_arg(required=False),
    )
    return api_response(
        True,
        f"{len(appointments)} appointment(s)",
        [AppointmentResponse.from_domain(apt).to_dict() for apt in appointments],
    )


@clinic_bp.route("/<clinic_id>/schedule", methods=["GET"])
@role_required(ROLE_CLINIC_OWNER)
def daily_schedule(clinic_id: str):
    services = get_container()
    services.access.require_clinic_owner(clinic_id, get_current_user().id)
    day = _date_arg(required=False) or services.clock().date()
    appointments = services.appointments.daily_schedule(clinic_id, day)
    return api_response(
        True,
        f"Schedule for {day.isoformat()}",
        {
            "date": day.isoformat(),
            "appointments": [
                AppointmentResponse.from_domain(apt).to_dict() for apt in appointments
            ],
        },
    )
