"""Error handling package."""

from .handlers import register_error_handlers, render_error, wants_json_response

__all__ = ['register_error_handlers', 'render_error', 'wants_json_response']
