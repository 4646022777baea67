"""
Routes Package
Handles all application routes organized by type.
"""

from .jinja.main import main_bp
from .api.generation import gen_bp

__all__ = [
    'main_bp',
    'gen_bp',
    'register_blueprints',
]


def register_blueprints(app):
    """
    Register all application blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(main_bp)
    # Prefix defined in the blueprint file
    app.register_blueprint(gen_bp)  # /api/gen
