"""Unified error response utilities and exception hierarchy for HTTP layer.

This builds atop service_base exceptions but adds HTTP semantics.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from flask import g, has_request_context, request

HTTP_DEFAULT_STATUS = 500


@dataclass
class AppError(Exception):
    message: str
    http_status: int = 400
    code: Optional[str] = None  # machine readable stable code
    details: Optional[Dict[str, Any]] = None

    def __str__(self):  # pragma: no cover - trivial
        return self.message


# Service layer exceptions matched by class name to avoid import cycles
SERVICE_EXCEPTION_HTTP_MAP = {
    'NotFoundError': 404,
    'ValidationError': 400,
    'ConflictError': 409,
    'OperationError': 500,
    'StreamError': 502,
    'ExportError': 500,
}


def build_error_payload(message: str, *, status: int, error: str | None = None, **extra: Any) -> Dict[str, Any]:
    in_request = has_request_context()
    payload = {
        'status': 'error',
        'status_code': status,
        'message': message,
        'error': error or message,
        'error_id': getattr(g, 'request_id', None) if in_request else None,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'path': request.path if in_request else None,
    }
    payload.update({k: v for k, v in extra.items() if v is not None})
    return payload


def map_service_exception(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        status = SERVICE_EXCEPTION_HTTP_MAP.get(cls.__name__)
        if status is not None:
            return status
    return HTTP_DEFAULT_STATUS
