from flask import Blueprint

from vetclinic.container import get_container
from vetclinic.core.api_utils import api_response
from vetclinic.core.auth_decorators import get_current_user, jwt_required

reminder_bp = Blueprint("reminders", __name__, url_prefix="/api/reminders")


@reminder_bp.route("/check", methods=["POST"])
@jwt_required
def check_reminders():
    """Send the caller any reminders that are due (called on dashboard load)."""
    user = get_current_user()
    sent = get_container().reminders.check_and_send(user.id, user.role)
    return api_response(True, f"{sent} reminder(s) sent", {"sent": sent})
