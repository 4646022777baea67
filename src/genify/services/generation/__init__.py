"""Generation - Prompt to multi-file web app
==========================================

Components:
- project.py: ChatMessage, Model, ProjectFile, GeneratedProject
- api_client.py: model listing and streamed chat completions
- code_extractor.py: fenced code blocks to project files
- preview.py: single-document preview assembly
- exporter.py: zip archive export
- design_styles.py: design style catalog
- prompt_builder.py: system prompts for generation and follow-ups
- state.py: AppState, actions and the reducer
- service.py: GenerationService orchestration
"""

from .project import (
    ChatMessage,
    Model,
    ProjectFile,
    GeneratedProject,
    detect_file_type,
    get_language_from_file_type,
    merge_files,
)
from .api_client import ModelClient, iter_event_stream, is_chat_model
from .code_extractor import parse_generated_code
from .preview import create_preview_html
from .exporter import ExportedArchive, export_as_zip
from .design_styles import DesignStyle, DESIGN_STYLES, get_design_style_by_id
from .prompt_builder import build_generation_messages, build_follow_up_messages
from .state import AppState, AppStore, reduce
from .service import FragmentStream, GenerationService

__all__ = [
    # Data model
    'ChatMessage',
    'Model',
    'ProjectFile',
    'GeneratedProject',
    'detect_file_type',
    'get_language_from_file_type',
    'merge_files',
    # Client
    'ModelClient',
    'iter_event_stream',
    'is_chat_model',
    # Extraction, preview, export
    'parse_generated_code',
    'create_preview_html',
    'ExportedArchive',
    'export_as_zip',
    # Designs and prompts
    'DesignStyle',
    'DESIGN_STYLES',
    'get_design_style_by_id',
    'build_generation_messages',
    'build_follow_up_messages',
    # State
    'AppState',
    'AppStore',
    'reduce',
    # Service
    'FragmentStream',
    'GenerationService',
]
