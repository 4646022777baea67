"""
Flask Extensions Configuration

Application components are created here and attached to the app in the
factory, so routes can reach them through the current app.
"""

import logging
from typing import Optional

from flask import Flask, current_app

from genify.services.generation import AppState, AppStore, GenerationService, ModelClient

logger = logging.getLogger(__name__)


class AppComponents:
    """Centralized component manager for Flask app."""

    def __init__(self):
        self.model_client: Optional[ModelClient] = None
        self.generation_service: Optional[GenerationService] = None

    def init_app(self, app: Flask):
        """Initialize components with Flask app."""
        self.model_client = ModelClient.from_config(app.config)
        store = AppStore(AppState(selected_design=app.config['GENIFY_DEFAULT_DESIGN']))
        self.generation_service = GenerationService(self.model_client, store)
        app.extensions['app_components'] = self
        logger.info(f"Generation components initialized (API base: {self.model_client.base_url})")


def init_extensions(app: Flask) -> AppComponents:
    components = AppComponents()
    components.init_app(app)
    return components


def get_components() -> Optional[AppComponents]:
    """Get components from current Flask app."""
    return current_app.extensions.get('app_components')


def get_generation_service() -> GenerationService:
    """Get the generation service of the current app."""
    components = get_components()
    if components is None or components.generation_service is None:
        raise RuntimeError("Generation components are not initialized")
    return components.generation_service
