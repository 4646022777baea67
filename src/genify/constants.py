"""
Constants and Enums for Genify
==============================

Centralized enums and the fixed values of the chat completion protocol.
"""

from enum import Enum


class BaseEnum(str, Enum):
    """Base enum class with string values for consistent behavior."""

    def __str__(self):
        return self.value


class ChatRole(BaseEnum):
    """Roles accepted by the chat completion API."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class FileType(BaseEnum):
    """Kinds of generated project files, derived from the extension."""
    HTML = "html"
    CSS = "css"
    JS = "js"
    JSON = "json"
    MD = "md"
    OTHER = "other"


class ModalName(BaseEnum):
    """Modal dialogs of the single-page UI."""
    DESIGN = "design"
    PREVIEW = "preview"
    CODE = "code"


# ===========================
# EVENT STREAM PROTOCOL
# ===========================

EVENT_DATA_PREFIX = "data: "
STREAM_TERMINATOR = "[DONE]"

# Model ids containing any of these are image/video models, not chat models
NON_CHAT_MODEL_MARKERS = ("imagen", "veo", "image-to-video")

DEFAULT_API_BASE = "https://longcat-openai-api.onrender.com/v1"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_DESIGN_ID = "minimalistic"
DEFAULT_PROJECT_NAME = "genify-project"

MODIFICATIONS_SEPARATOR = "\n\n--- MODIFICATIONS ---\n\n"
GENERATION_ERROR_NOTICE = "Error generating code. Please try again."
FOLLOW_UP_ERROR_NOTICE = "Error applying modifications. Please try again."

NO_HTML_PLACEHOLDER = "<html><body><p>No HTML file found in the generated project.</p></body></html>"

# Opened in a new tab by the Deploy link
DEPLOY_URL = "https://vercel.com/new"
