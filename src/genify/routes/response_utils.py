"""Route Response Utilities
===========================

Shared helpers and decorators to standardize API route behavior.

json_success(data=None, message=None, **meta) -> (Response, int)
json_error(message, status=400, **details) -> (Response, int)
handle_exceptions(default_status=500, reraise=False)
    Wraps a route function. Service errors become json_error with their
    mapped status; anything else is logged and returned as a 500.
sse_event(data, event=None) -> str
    One server-sent event frame.

Response Envelope Standard:
{
  "ok": true/false,
  "message": str | null,
  "data": {...} | list | null,
  "error": {"type": str, "details": any} | null,
  "meta": {...}
}
"""
from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar

from flask import jsonify

from genify.services.service_base import ServiceError
from genify.utils.errors import AppError, map_service_exception

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# JSON Builders
# ---------------------------------------------------------------------------

def json_success(data: Any = None, message: Optional[str] = None, status: int = 200, **meta):
    """Build a standardized success JSON response.

    Additional keyword args become part of meta.
    """
    payload: Dict[str, Any] = {
        "ok": True,
        "message": message,
        "data": data,
        "error": None,
        "meta": meta or None,
    }
    return jsonify(payload), status


def json_error(message: str, status: int = 400, *, error_type: Optional[str] = None, **details):
    """Build a standardized error JSON response."""
    payload: Dict[str, Any] = {
        "ok": False,
        "message": message,
        "data": None,
        "error": {
            "type": error_type or "ApplicationError",
            "details": details or None,
        },
        "meta": None,
    }
    return jsonify(payload), status


def sse_event(data: Dict[str, Any], event: Optional[str] = None) -> str:
    """Format one server-sent event frame."""
    frame = f"event: {event}\n" if event else ""
    return f"{frame}data: {json.dumps(data, ensure_ascii=False)}\n\n"

# ---------------------------------------------------------------------------
# Decorators
# ---------------------------------------------------------------------------

def handle_exceptions(_func: Optional[F] = None, *, default_status: int = 500, logger_override: Optional[logging.Logger] = None, reraise: bool = False):
    """Decorator to standardize exception handling for route functions.

    Parameters:
        default_status: HTTP status when an unhandled exception occurs
        logger_override: custom logger; falls back to module logger
        reraise: if True, re-raise after logging (useful for debug/testing)
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):  # type: ignore
            active_logger = logger_override or logger
            try:
                return func(*args, **kwargs)
            except AppError as exc:
                if reraise:
                    raise
                return json_error(exc.message, status=exc.http_status, error_type=exc.code or exc.__class__.__name__, **(exc.details or {}))
            except ServiceError as exc:
                status = map_service_exception(exc)
                active_logger.warning("%s in %s: %s", type(exc).__name__, func.__name__, exc)
                if reraise:
                    raise
                return json_error(str(exc), status=status, error_type=exc.__class__.__name__)
            except Exception as exc:  # pylint: disable=broad-except
                active_logger.exception("Unhandled exception in %s", func.__name__)
                if reraise:
                    raise
                return json_error("Internal server error", status=default_status, error_type=exc.__class__.__name__, detail=str(exc))
        return wrapper  # type: ignore
    # Support decorator w/ or w/out parentheses
    if _func is not None:
        return decorator(_func)
    return decorator


__all__ = [
    "json_success",
    "json_error",
    "sse_event",
    "handle_exceptions",
]
