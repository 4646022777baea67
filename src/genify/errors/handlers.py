"""Centralized error handlers with HTML + JSON negotiation.

Provides informative error pages using template 'pages/errors/errors_main.html'
while returning structured JSON for API/AJAX requests.
"""
from __future__ import annotations

import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from flask import (
    Blueprint,
    current_app,
    jsonify,
    make_response,
    render_template,
    request,
    g,
)
from werkzeug.exceptions import HTTPException

from genify.services.service_base import ServiceError
from genify.utils.errors import AppError, build_error_payload, map_service_exception

error_bp = Blueprint("errors", __name__)

# Mapping of HTTP codes to default metadata
ERROR_META = {
    400: {"title": "Bad Request", "subtitle": "The request could not be understood."},
    404: {"title": "Page Not Found", "subtitle": "The requested resource could not be found."},
    405: {"title": "Method Not Allowed", "subtitle": "The method is not allowed for this endpoint."},
    409: {"title": "Conflict", "subtitle": "The request conflicts with current state."},
    415: {"title": "Unsupported Media Type", "subtitle": "The media type is not supported."},
    500: {"title": "Internal Server Error", "subtitle": "Something went wrong on our end."},
    502: {"title": "Bad Gateway", "subtitle": "The model API returned an invalid response."},
}


def wants_json_response() -> bool:
    """Decide if JSON should be returned based on headers/path.
    Priority:
      - API prefix (/api/)
      - Explicit Accept header with application/json
      - XMLHttpRequest / fetch (X-Requested-With)
    """
    if request.path.startswith("/api/"):
        return True
    accept = request.headers.get("Accept", "")
    if "application/json" in accept:
        return True
    if request.headers.get("X-Requested-With") == "XMLHttpRequest":
        return True
    return False


def _base_payload(status_code: int, message: str, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
    payload = {
        "status": "error",
        "status_code": status_code,
        "message": message,
        "error_id": getattr(g, "request_id", None),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.path,
    }
    if extra:
        payload.update(extra)
    return payload


def render_error(status_code: int, error: Exception | None = None):
    # Service exceptions carry their own status
    if isinstance(error, ServiceError):
        status_code = map_service_exception(error)
    elif isinstance(error, AppError):
        status_code = error.http_status or status_code

    meta = ERROR_META.get(status_code, {"title": "Error"})
    default_message = meta.get("subtitle") or meta.get("title") or "Error"
    debug = current_app.debug or current_app.config.get("SHOW_ERROR_DETAILS", False)

    if isinstance(error, AppError):
        description = error.message or default_message
    elif isinstance(error, ServiceError):
        description = str(error) or default_message
    elif isinstance(error, HTTPException):
        description = getattr(error, "description", default_message)
    else:
        description = default_message

    debug_info: Dict[str, Any] = {}
    if debug and error:
        debug_info = {
            "exception_type": type(error).__name__,
            "stacktrace": traceback.format_exc() if not isinstance(error, HTTPException) else None,
        }

    if wants_json_response():
        if isinstance(error, AppError):
            payload = build_error_payload(description, status=status_code, error=meta.get("title"), code=error.code, details=error.details, **({"debug": debug_info} if debug_info else {}))
        else:
            payload = _base_payload(status_code, description, {"error": meta.get("title"), **({"debug": debug_info} if debug_info else {})})
        return make_response(jsonify(payload), status_code)

    return make_response(render_template(
        "pages/errors/errors_main.html",
        error_code=status_code,
        error_title=meta.get("title"),
        error_subtitle=meta.get("subtitle"),
        error_message=description,
        debug=debug,
        debug_info=debug_info,
        request_id=getattr(g, "request_id", None),
    ), status_code)


@error_bp.app_errorhandler(HTTPException)  # type: ignore[misc]
def handle_http_exception(exc: HTTPException):
    return render_error(getattr(exc, "code", 500) or 500, exc)


@error_bp.app_errorhandler(AppError)  # type: ignore[misc]
def handle_app_error(exc: AppError):
    return render_error(exc.http_status, exc)


@error_bp.app_errorhandler(ServiceError)  # type: ignore[misc]
def handle_service_error(exc: ServiceError):
    return render_error(map_service_exception(exc), exc)


@error_bp.app_errorhandler(Exception)  # type: ignore[misc]
def handle_uncaught_exception(exc: Exception):  # pragma: no cover - integration
    current_app.logger.exception("Unhandled exception: %s", exc)
    return render_error(500, exc)


def register_error_handlers(app):
    """Register handlers & attach request id generation."""
    @app.before_request  # type: ignore[misc]
    def _assign_request_id():
        g.request_id = uuid.uuid4().hex

    app.register_blueprint(error_bp)

    # Explicit handlers for selected status codes to ensure proper metadata
    for sc in [400, 404, 405, 409, 415, 500]:
        def _make(sc_code):
            def _handler(e):
                return render_error(sc_code, e)
            return _handler
        app.register_error_handler(sc, _make(sc))

    return app
