"""API blueprints."""

from .generation import gen_bp

__all__ = ['gen_bp']
