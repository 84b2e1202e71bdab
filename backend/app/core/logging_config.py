"""
RANZ Wage Survey - Centralized Logging Configuration

Production writes one JSON object per line for log aggregation; every other
environment writes readable text. Both carry the request id and, once a bearer
token has been verified, the staff email.
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional
from contextvars import ContextVar

from app.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
staff_email_var: ContextVar[str] = ContextVar('staff_email', default='')


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_staff_email() -> str:
    return staff_email_var.get()


def set_staff_email(email: str) -> None:
    """Attach the authenticated staff member to log lines for this request"""
    staff_email_var.set(email)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


# LogRecord attributes that are not user-supplied ``extra`` fields
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord('', 0, '', 0, '', None, None).__dict__
) | {'message', 'asctime', 'request_id', 'staff_email'}


class JSONFormatter(logging.Formatter):
    """One JSON document per record, extras included"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if get_request_id():
            entry["request_id"] = get_request_id()
        if get_staff_email():
            entry["staff_email"] = get_staff_email()

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith('_'):
                entry[key] = value

        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain text formatter that can reference %(request_id)s and %(staff_email)s"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'
        record.staff_email = get_staff_email() or '-'
        return super().format(record)


class SurveyLogger(logging.Logger):
    """Logger with helpers for the events this service cares about"""

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        self.log(
            level,
            f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        """Login, password change and authorization outcomes. Never pass passwords or tokens."""
        outcome = "ok" if success else f"rejected ({reason})" if reason else "rejected"
        self.log(
            logging.INFO if success else logging.WARNING,
            f"[Auth] {event} {outcome}" + (f" for {user_email}" if user_email else ""),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_submission(self, submission_id: int, rate_lines: int,
                       region: Optional[str] = None, **kwargs) -> None:
        self.info(
            f"[Survey] Stored submission {submission_id} with {rate_lines} rate lines",
            extra={
                "event_type": "survey_submission",
                "submission_id": submission_id,
                "rate_lines": rate_lines,
                "region": region,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        """Full detail goes to the log; clients only ever see the generic message"""
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=(type(error), error, error.__traceback__),
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def _rotating_file_handler(path: str, formatter: logging.Formatter) -> RotatingFileHandler:
    log_file = Path(path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> SurveyLogger:
    """Configure the ``ranz_survey`` logger for the current environment"""
    logging.setLoggerClass(SurveyLogger)

    logger = logging.getLogger("ranz_survey")
    logger.__class__ = SurveyLogger  # in case it was created before setLoggerClass
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    json_logging = settings.ENVIRONMENT == "production"

    if json_logging:
        console_formatter = file_formatter = JSONFormatter()
    else:
        console_formatter = ContextualFormatter(
            "%(levelname)-8s | [%(request_id)s] %(message)s"
        )
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(staff_email)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if settings.LOG_FILE:
        logger.addHandler(_rotating_file_handler(settings.LOG_FILE, file_formatter))

    # SQL echo is controlled by DB_ECHO, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger.debug(
        "Logging initialized",
        extra={"environment": settings.ENVIRONMENT, "json_logging": json_logging}
    )
    return logger


logger: SurveyLogger = setup_logging()
