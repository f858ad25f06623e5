import logging
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()

from vetclinic.container import EXTENSION_KEY, ServiceContainer  # noqa: E402
from vetclinic.core import config  # noqa: E402
from vetclinic.core.api_utils import register_error_handlers  # noqa: E402
from vetclinic.core.logging_config import setup_logging  # noqa: E402
from vetclinic.db.session import create_tables  # noqa: E402
from vetclinic.services.scheduler import start_scheduler  # noqa: E402

logger = logging.getLogger(__name__)


def create_app(
    overrides: Optional[Mapping[str, Any]] = None,
    container: Optional[ServiceContainer] = None,
) -> Flask:
    """Application factory.

    Args:
        overrides: Flask config values applied after the defaults
        container: prebuilt services; by default one is built over the
            SQL document store named by DATABASE_URL
    """
    app = Flask(__name__)
    app.config.update(
        TESTING=os.getenv("TESTING", "").lower() in ("true", "1", "yes"),
    )
    if overrides:
        app.config.update(overrides)

    setup_logging(
        app=app,
        log_level=config.LOG_LEVEL,
        log_to_file=config.LOG_TO_FILE and not app.config["TESTING"],
        use_json_format=config.LOG_JSON,
    )
    config.log_scheduling_config()
    register_error_handlers(app)

    if container is None:
        create_tables()
        container = ServiceContainer()
    app.extensions[EXTENSION_KEY] = container

    from vetclinic.controllers.appointment_controller import appointment_bp
    from vetclinic.controllers.clinic_controller import clinic_bp
    from vetclinic.controllers.health_controller import health_bp
    from vetclinic.controllers.pet_controller import pet_bp
    from vetclinic.controllers.reminder_controller import reminder_bp

    app.register_blueprint(appointment_bp)
    app.register_blueprint(clinic_bp)
    app.register_blueprint(pet_bp)
    app.register_blueprint(reminder_bp)
    app.register_blueprint(health_bp)

    if not app.config["TESTING"]:
        try:
            start_scheduler(app, container)
        except Exception as e:
            logger.warning(
                "Failed to initialize background scheduler",
                extra={"context": {"error": str(e)}},
                exc_info=True,
            )

    logger.info("Application created", extra={"context": {"testing": app.config["TESTING"]}})
    return app
