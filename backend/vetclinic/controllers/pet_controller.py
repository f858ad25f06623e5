from flask import Blueprint

from vetclinic.container import get_container
from vetclinic.core.api_utils import api_response
from vetclinic.core.auth_decorators import get_current_user, jwt_required
from vetclinic.core.exceptions import AuthorizationError, NotFoundError
from vetclinic.core.security import ROLE_PET_OWNER
from vetclinic.schemas.dtos import MedicalRecordResponse

pet_bp = Blueprint("pets", __name__, url_prefix="/api/pets")


@pet_bp.route("/<pet_id>/medical-records", methods=["GET"])
@jwt_required
def list_medical_records(pet_id: str):
    """Pet owners see all records of their pet; clinic owners see the ones
    their own clinics issued."""
    services = get_container()
    user = get_current_user()

    records = services.medical_records.list_for_pet(pet_id)
    if user.role == ROLE_PET_OWNER:
        pet = services.pet_repo.get_by_id(pet_id)
        if not pet:
            raise NotFoundError.for_resource("Pet", pet_id)
        if pet.owner_id != user.id:
            raise AuthorizationError("This pet belongs to another owner")
    else:
        own_clinics = {clinic.id for clinic in services.clinic_repo.get_by_owner(user.id)}
        records = [record for record in records if record.clinic_id in own_clinics]

    return api_response(
        True,
        f"{len(records)} medical record(s)",
        [MedicalRecordResponse.from_domain(record).to_dict() for record in records],
    )
