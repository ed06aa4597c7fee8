"""
Logging configuration with request_id correlation.
Structured logging for Cloud Logging compatibility.

Never log raw document bytes or image payloads; use fingerprint() for
correlation where a value must appear in the logs.
"""
import hashlib
import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


def fingerprint(value: Optional[str], prefix: str = "") -> str:
    """
    Create a short, safe fingerprint of a value for logging.

    Example:
        fingerprint("data:image/png;base64,iVBOR...", "img_") -> "img_a1b2c3d4"
    """
    if not value:
        return f"{prefix}none" if prefix else "none"
    fp = hashlib.sha256(value.encode()).hexdigest()[:8]
    return f"{prefix}{fp}" if prefix else fp


# Context variables for request correlation
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
document_id_var: ContextVar[Optional[str]] = ContextVar("document_id", default=None)
field_type_var: ContextVar[Optional[str]] = ContextVar("field_type", default=None)

# Path segments after which the next segment is a document id
_DOCUMENT_PATH_MARKERS = {"pdf", "download", "audit"}
_NON_ID_SEGMENTS = {"upload", "sample", "download"}


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_context(
    document_id: Optional[str] = None,
    field_type: Optional[str] = None,
) -> None:
    """Set logging context variables."""
    if document_id:
        document_id_var.set(document_id)
    if field_type:
        field_type_var.set(field_type)


def clear_context() -> None:
    """Clear all context variables."""
    request_id_var.set(None)
    document_id_var.set(None)
    field_type_var.set(None)


class CloudLoggingFormatter(logging.Formatter):
    """
    Formatter for Google Cloud Logging structured logs.
    Outputs JSON format compatible with Cloud Logging.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "logger": record.name,
            "logging.googleapis.com/sourceLocation": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        request_id = request_id_var.get()
        if request_id:
            log_entry["logging.googleapis.com/trace"] = request_id
            log_entry["request_id"] = request_id

        document_id = document_id_var.get()
        if document_id:
            log_entry["document_id"] = document_id

        field_type = field_type_var.get()
        if field_type:
            log_entry["field_type"] = field_type

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for local development."""

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_var.get() or "-"
        document_id = document_id_var.get() or "-"
        field_type = field_type_var.get()

        prefix = f"[{record.levelname}] [{request_id[:8] if request_id != '-' else '-'}]"
        if document_id != "-":
            prefix += f" [doc:{document_id[:8]}]"
        if field_type:
            prefix += f" [field:{field_type}]"

        message = f"{prefix} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging(environment: str = "development", level: int = logging.INFO) -> None:
    """
    Configure logging based on environment.
    - production: JSON structured logs for Cloud Logging
    - development: Human-readable format
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if environment == "production":
        handler.setFormatter(CloudLoggingFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def extract_document_id(path: str) -> Optional[str]:
    """
    Pull the document id out of a request path.

    Handles /api/pdf/{id}, /api/pdf/download/{id} and /api/audit/{id}/...
    """
    parts = [p for p in path.split("/") if p]
    for i, part in enumerate(parts[:-1]):
        if part in _DOCUMENT_PATH_MARKERS:
            candidate = parts[i + 1]
            if candidate not in _NON_ID_SEGMENTS:
                return candidate
    return None


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique request_id to each request.
    Also extracts document_id from path if present.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)

        document_id = extract_document_id(request.url.path)
        if document_id:
            document_id_var.set(document_id)

        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()
