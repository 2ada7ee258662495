"""
Structured logging for the REST API and the WebSocket gateway.

Loggers accept keyword fields (`logger.info("Order created", order_id=12)`).
Two output formats:
- json: one object per line, for log shipping (default in production)
- text: colored single lines for a terminal

Every record carries the request correlation ID (see shared.infrastructure.correlation).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings

# Attribute holding the keyword fields on a LogRecord
FIELDS_ATTR = "fields"


def _request_id(record: logging.LogRecord) -> str | None:
    request_id = getattr(record, "request_id", None)
    return request_id if request_id and request_id != "-" else None


def _fields(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, FIELDS_ATTR, None) or {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, include_source: bool = False):
        super().__init__()
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        request_id = _request_id(record)
        if request_id:
            entry["request_id"] = request_id
        fields = _fields(record)
        if fields:
            entry["fields"] = fields
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        if self.include_source:
            entry["src"] = f"{record.pathname}:{record.lineno}"
        return json.dumps(entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Colored `HH:MM:SS LEVEL [req] logger: message key=value ...` lines."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        parts = [f"{self.DIM}{clock}{self.RESET}", f"{color}{record.levelname:<7}{self.RESET}"]

        request_id = _request_id(record)
        if request_id:
            parts.append(f"{self.DIM}[{request_id[:8]}]{self.RESET}")
        parts.append(f"{record.name}: {record.getMessage()}")

        fields = _fields(record)
        if fields:
            parts.append(" ".join(f"{self.DIM}{k}={self.RESET}{v}" for k, v in fields.items()))

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """
    Logger whose level methods take keyword fields instead of `extra`.

        logger.warning("Stale version", order_id=5, expected_version=2)
        logger.error("Commit failed", exc_info=True, table_id=3)
    """

    def log_fields(
        self,
        level: int,
        msg: str,
        *args: Any,
        exc_info: Any = None,
        stacklevel: int = 2,
        **fields: Any,
    ) -> None:
        if self.isEnabledFor(level):
            self._log(
                level,
                msg,
                args,
                exc_info=exc_info,
                extra={FIELDS_ATTR: fields},
                stacklevel=stacklevel,
            )

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.DEBUG, msg, *args, stacklevel=3, **fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.INFO, msg, *args, stacklevel=3, **fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.WARNING, msg, *args, stacklevel=3, **fields)

    def error(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.ERROR, msg, *args, stacklevel=3, **fields)

    def critical(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.CRITICAL, msg, *args, stacklevel=3, **fields)


logging.setLoggerClass(StructuredLogger)


def _resolve_level() -> int:
    if settings.log_level:
        return logging.getLevelName(settings.log_level.upper())
    return logging.DEBUG if settings.debug else logging.INFO


def _resolve_format() -> str:
    if settings.log_format:
        return settings.log_format.lower()
    return "json" if settings.environment == "production" else "text"


def setup_logging() -> None:
    """
    Install the stdout handler on the root logger. Safe to call again
    (handlers are replaced, not stacked).
    """
    # Local import: correlation imports FastAPI, settings must load without it
    from shared.infrastructure.correlation import CorrelationIdFilter

    level = _resolve_level()
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if _resolve_format() == "json":
        handler.setFormatter(JsonFormatter(include_source=settings.debug))
    else:
        handler.setFormatter(ConsoleFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy, noisy_level in (
        ("uvicorn.access", logging.WARNING),
        ("httpx", logging.WARNING),
        ("httpcore", logging.WARNING),
        ("sqlalchemy.engine", logging.WARNING),
    ):
        logging.getLogger(noisy).setLevel(noisy_level)


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("Session opened", table_id=4, session_id=17)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def mask_email(email: str | None) -> str:
    """Keep the first two characters of the local part: "us***@example.com"."""
    if not email:
        return "<no-email>"
    local, sep, domain = email.partition("@")
    if not sep:
        return "***@invalid"
    return f"{local[:2] if len(local) > 2 else local[:1]}***@{domain}"


# Named loggers
rest_api_logger = get_logger("rest_api")
ws_gateway_logger = get_logger("ws_gateway")
orders_logger = get_logger("rest_api.orders")
session_logger = get_logger("rest_api.session")
waiter_logger = get_logger("rest_api.waiter")
auth_logger = get_logger("rest_api.auth")
security_audit_logger = get_logger("security.audit")


# =============================================================================
# Security audit trail
# =============================================================================


def audit_ws_connection(
    event_type: str,
    endpoint: str,
    user_id: int | str | None = None,
    table_id: int | None = None,
    reason: str | None = None,
    **extra: Any,
) -> None:
    """
    Record a WebSocket security event.

    event_type is one of CONNECT, DISCONNECT, AUTH_FAILED, JOIN_DENIED.
    Staff connections carry user_id, table connections carry table_id.
    """
    level = logging.WARNING if event_type in ("AUTH_FAILED", "JOIN_DENIED") else logging.INFO
    security_audit_logger.log_fields(
        level,
        f"WS_AUDIT: {event_type}",
        event_type=event_type,
        endpoint=endpoint,
        user_id=user_id,
        table_id=table_id,
        reason=reason,
        **extra,
    )


def audit_auth_event(
    event_type: str,
    user_id: int | str | None = None,
    email: str | None = None,
    success: bool = True,
    reason: str | None = None,
    ip_address: str | None = None,
    **extra: Any,
) -> None:
    """Record a login, registration or password change. The email is masked."""
    security_audit_logger.log_fields(
        logging.INFO if success else logging.WARNING,
        f"AUTH_AUDIT: {event_type}",
        event_type=event_type,
        user_id=user_id,
        email=mask_email(email) if email else None,
        success=success,
        reason=reason,
        ip_address=ip_address,
        **extra,
    )
