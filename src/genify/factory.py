"""
Flask Application Factory
=========================

Factory pattern for creating Flask application instances with
proper initialization.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from genify.utils.logging_config import get_logger

logger = get_logger('factory')


def create_app(config_name: str = 'default') -> Flask:
    """
    Create and configure Flask application.

    Args:
        config_name: Configuration environment name

    Returns:
        Configured Flask application
    """
    # Load .env before the settings module reads the environment
    project_root = Path(__file__).resolve().parent.parent.parent
    env_path = project_root / '.env'
    if env_path.exists():
        load_dotenv(env_path, override=False)
        logger.info(f"Loaded .env from {env_path}")
    else:
        logger.debug(f".env not found at {env_path}")

    from genify.config.settings import config

    # Apply LOG_LEVEL early
    _lvl = os.getenv('LOG_LEVEL')
    if _lvl:
        logging.getLogger().setLevel(getattr(logging, _lvl.upper(), logging.INFO))

    package_dir = Path(__file__).resolve().parent
    app = Flask(__name__, template_folder=str(package_dir / 'templates'))

    config_class = config.get(config_name, config['default'])
    app.config.from_object(config_class)
    app.jinja_env.auto_reload = app.config.get('TEMPLATES_AUTO_RELOAD', True)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    # Initialize generation components
    from genify.extensions import init_extensions
    init_extensions(app)

    from genify.routes import register_blueprints
    register_blueprints(app)

    from genify.errors import register_error_handlers
    register_error_handlers(app)

    logger.info(f"Genify application created ({config_name} configuration)")
    return app
