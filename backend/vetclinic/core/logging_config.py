"""
Centralized logging configuration for the vet clinic scheduling service.

This module provides structured logging with:
- JSON formatting for files (and optionally the console)
- Colored console formatting for development
- SQLAlchemy query timing
- Request/response logging for the Flask API
- Log rotation with console fallback on disk failure

Usage:
    from vetclinic.core.logging_config import setup_logging, get_logger

    # In the app factory
    setup_logging(app, log_level="INFO")

    # In any module
    logger = get_logger(__name__)
    logger.info("Appointment approved", extra={"context": {"appointment_id": "a1"}})
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from flask import Flask, g, request
from sqlalchemy import event
from sqlalchemy.engine import Engine


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.
    Outputs logs as JSON with timestamp, level, message, and extra context.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "context"):
            log_data["context"] = getattr(record, "context", {})

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with colors for development.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname:8}{self.RESET}"
        return super().format(record)


_SQL_TIMING_REGISTERED = False


def _register_sql_timing() -> None:
    global _SQL_TIMING_REGISTERED
    if _SQL_TIMING_REGISTERED:
        return

    @event.listens_for(Engine, "before_cursor_execute")
    def before_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(Engine, "after_cursor_execute")
    def after_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ):
        total_time = time.time() - conn.info["query_start_time"].pop(-1)
        perf_logger = logging.getLogger("sqlalchemy.performance")
        perf_logger.info(
            f"Query executed in {total_time * 1000:.2f}ms",
            extra={
                "context": {
                    "sql_query": statement[:500],
                    "sql_duration_ms": round(total_time * 1000, 2),
                }
            },
        )

    _SQL_TIMING_REGISTERED = True


def _file_handler(path: Path, level: int, formatter: logging.Formatter, fallback):
    try:
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
    except Exception as e:
        fallback.handle(
            logging.LogRecord(
                name="vetclinic.logging",
                level=logging.WARNING,
                pathname=__file__,
                lineno=0,
                msg=f"Failed to create file handler for {path.name}: {e}. "
                "Falling back to console-only logging.",
                args=(),
                exc_info=None,
            )
        )
        return None
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = True,
    use_json_format: bool = False,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure logging for the service.

    Args:
        app: Flask application instance (enables request/response hooks)
        log_level: Logging level (int like logging.INFO or string "INFO")
        enable_sql_echo: Log SQLAlchemy statements with timing
        log_to_file: Write logs to rotating files
        use_json_format: Use JSON format on the console too
        log_dir: Directory for log files (defaults to backend/logs)
    """
    if isinstance(log_level, int):
        level = log_level
    else:
        level = getattr(logging, str(log_level).upper(), logging.INFO)

    log_dir = log_dir or Path(__file__).parent.parent.parent / "logs"
    early_warnings = []
    if log_to_file:
        try:
            log_dir.mkdir(exist_ok=True)
        except Exception as e:
            early_warnings.append(
                f"Failed to create logs directory: {e}. Logging will only go to console."
            )
            log_to_file = False

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if use_json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ConsoleFormatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(console_handler)

    for msg in early_warnings:
        root_logger.warning(msg, extra={"context": {"component": "logging_setup"}})

    if log_to_file:
        file_formatter = JSONFormatter()
        app_handler = _file_handler(
            log_dir / "app.log", level, file_formatter, console_handler
        )
        if app_handler is not None:
            root_logger.addHandler(app_handler)
        error_handler = _file_handler(
            log_dir / "vetclinic_errors.log",
            logging.ERROR,
            file_formatter,
            console_handler,
        )
        if error_handler is not None:
            root_logger.addHandler(error_handler)

    if enable_sql_echo:
        sql_logger = logging.getLogger("sqlalchemy.engine")
        sql_logger.setLevel(logging.INFO)
        sql_logger.propagate = True
        _register_sql_timing()

    if app is not None:

        @app.before_request
        def log_request():
            g.request_start_time = time.time()
            g.request_id = f"{time.time()}-{id(request)}"
            req_logger = logging.getLogger("flask.request")
            req_logger.info(
                f"{request.method} {request.path}",
                extra={
                    "context": {
                        "request_id": g.request_id,
                        "method": request.method,
                        "path": request.path,
                        "remote_addr": request.remote_addr,
                    }
                },
            )

        @app.after_request
        def log_response(response):
            if hasattr(g, "request_start_time"):
                duration_ms = (time.time() - g.request_start_time) * 1000
                current = g.get("current_user")
                resp_logger = logging.getLogger("flask.response")
                resp_logger.info(
                    f"{request.method} {request.path} {response.status_code} in {duration_ms:.2f}ms",
                    extra={
                        "context": {
                            "request_id": g.get("request_id"),
                            "user_id": getattr(current, "id", None),
                            "status_code": response.status_code,
                            "duration_ms": round(duration_ms, 2),
                        }
                    },
                )
            return response

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    app_logger = logging.getLogger("vetclinic")
    app_logger.setLevel(level)
    app_logger.info(
        f"Logging configured: level={level}, sql_echo={enable_sql_echo}, "
        f"log_to_file={log_to_file}, json_format={use_json_format}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Example:
        logger = get_logger(__name__)
        logger.info("Slot booked", extra={"context": {"clinic_id": "c1"}})
    """
    return logging.getLogger(name)
