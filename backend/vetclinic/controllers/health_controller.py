"""
Health controller - liveness endpoint for monitoring.
"""

from flask import Blueprint, jsonify

from vetclinic import __version__
from vetclinic.container import get_container
from vetclinic.core.exceptions import StoreError
from vetclinic.core.logging_config import get_logger

logger = get_logger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
def health_check():
    """
    Report whether the service and its store respond.

    Returns 200 with ``status: healthy`` when a store read succeeds and 503
    with ``status: degraded`` otherwise. No authentication required.
    """
    try:
        get_container().store.query("working_hours", {"clinic_id": "__health__"})
        return jsonify({"status": "healthy", "version": __version__}), 200
    except StoreError as e:
        logger.error(
            "Health check: store unavailable",
            extra={"context": {"endpoint": "/health", "error": str(e)}},
        )
        return jsonify({"status": "degraded", "version": __version__}), 503
