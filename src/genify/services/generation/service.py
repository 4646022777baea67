"""Generation Service
==================

Orchestrates one generation or follow-up request:
1. Build the chat messages for the selected design
2. Stream the completion, appending each fragment to the request's own
   accumulator before the next read
3. Extract project files from the full response
4. Publish every step to the application store
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Callable, List, Optional

from genify.constants import DEFAULT_PROJECT_NAME, ModalName
from genify.services.service_base import (
    ConflictError,
    NotFoundError,
    ValidationError,
)

from .api_client import ModelClient
from .code_extractor import parse_generated_code
from .design_styles import get_design_style_by_id
from .exporter import ExportedArchive, export_as_zip
from .preview import create_preview_html
from .project import ChatMessage, GeneratedProject
from .prompt_builder import build_follow_up_messages, build_generation_messages
from .state import (
    AppState,
    AppStore,
    DesignSelected,
    FollowUpCompleted,
    FollowUpFailed,
    FollowUpStarted,
    FragmentReceived,
    GenerationCompleted,
    GenerationFailed,
    GenerationStarted,
    ModalToggled,
    ModelSelected,
    ModelsLoaded,
)

logger = logging.getLogger(__name__)

ABANDONED_MESSAGE = "Stream abandoned before completion"
NO_PROJECT_MESSAGE = "Generate a project before requesting modifications"


class FragmentStream:
    """Fragments of one accepted request.

    The service is already busy when this is handed out. Reading it to the
    end or closing it makes the service idle again, including a stream that
    is closed before its first read. ``close`` is synchronous so an HTTP
    response can call it on teardown.
    """

    def __init__(self, fragments: AsyncIterator[str], on_unread_close: Callable[[], object]):
        self._fragments = fragments
        self._on_unread_close = on_unread_close
        self._started = False
        self._closed = False

    @property
    def started(self) -> bool:
        return self._started

    def __aiter__(self) -> FragmentStream:
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration
        self._started = True
        return await self._fragments.__anext__()

    async def aclose(self) -> None:
        if self._started and not self._closed:
            await self._fragments.aclose()
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._started:
            logger.warning("Stream closed before it was read")
            self._on_unread_close()


class GenerationService:
    """Generation workflow on top of a :class:`ModelClient` and an :class:`AppStore`.

    Usage:
        service = GenerationService(client, AppStore())
        service.load_models()
        async for fragment in service.generate("a todo app"):
            ...
    """

    def __init__(self, client: ModelClient, store: Optional[AppStore] = None):
        self.client = client
        self.store = store or AppStore()

    @property
    def state(self) -> AppState:
        return self.store.state

    def load_models(self) -> AppState:
        """Fetch the model list; an empty list is a valid outcome."""
        models = self.client.list_models()
        if not models:
            logger.warning("No chat models available from the remote listing")
        return self.store.dispatch(ModelsLoaded(tuple(models)))

    def select_model(self, model_id: str) -> AppState:
        self._check_model(model_id)
        return self.store.dispatch(ModelSelected(model_id))

    def select_design(self, design_id: str) -> AppState:
        self._check_design(design_id)
        return self.store.dispatch(DesignSelected(design_id))

    def toggle_modal(self, modal: Optional[str]) -> AppState:
        """Open the named modal, or close any open modal when ``modal`` is empty."""
        if not modal:
            return self.store.dispatch(ModalToggled(None))
        try:
            name = ModalName(modal)
        except ValueError:
            raise ValidationError(f"Unknown modal: {modal}")
        return self.store.dispatch(ModalToggled(name))

    def _check_model(self, model_id: str) -> None:
        if not model_id:
            raise ValidationError("Model id is required")
        known = {m.id for m in self.state.models}
        if known and model_id not in known:
            raise ValidationError(f"Unknown model: {model_id}")

    def _check_design(self, design_id: str) -> None:
        if get_design_style_by_id(design_id) is None:
            raise ValidationError(f"Unknown design style: {design_id}")

    def _resolve_model(self, model: Optional[str]) -> str:
        if model:
            self._check_model(model)
            return model
        if self.state.selected_model:
            return self.state.selected_model
        raise ValidationError("No model selected")

    def _resolve_design(self, design: Optional[str]) -> str:
        if design:
            self._check_design(design)
            return design
        return self.state.selected_design

    def _apply_selection(self, model_id: str, design_id: Optional[str] = None) -> None:
        if model_id != self.state.selected_model:
            self.store.dispatch(ModelSelected(model_id))
        if design_id and design_id != self.state.selected_design:
            self.store.dispatch(DesignSelected(design_id))

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        design: Optional[str] = None,
    ) -> FragmentStream:
        """Validate the request and return the fragment stream for a new project.

        Raises ValidationError or ConflictError before anything is sent or
        selected. Once this returns the service is busy until the stream is
        read to the end or closed.
        """
        prompt = (prompt or '').strip()
        if not prompt:
            raise ValidationError("Prompt is required")
        model_id = self._resolve_model(model)
        design_id = self._resolve_design(design)

        if self.store.dispatch_if(lambda s: not s.is_busy, GenerationStarted()) is None:
            raise ConflictError("A generation is already in progress")
        self._apply_selection(model_id, design_id)

        messages = build_generation_messages(prompt, design_id)
        return FragmentStream(
            self._stream_generation(messages, prompt, model_id, design_id),
            lambda: self.store.dispatch(GenerationFailed('', ABANDONED_MESSAGE)),
        )

    async def _stream_generation(
        self,
        messages: List[ChatMessage],
        prompt: str,
        model_id: str,
        design_id: str,
    ) -> AsyncIterator[str]:
        logger.info(f"Generating project with {model_id} ({design_id} design)")

        accumulated = ''
        try:
            async for fragment in self.client.stream_completion(model_id, messages):
                accumulated += fragment
                self.store.dispatch(FragmentReceived(accumulated))
                yield fragment
        except Exception as e:
            logger.error(f"Error generating code: {e}")
            self.store.dispatch(GenerationFailed(accumulated, str(e)))
            raise
        except GeneratorExit:
            logger.warning("Generation stream abandoned by the consumer")
            self.store.dispatch(GenerationFailed(accumulated, ABANDONED_MESSAGE))
            raise

        files = parse_generated_code(accumulated)
        self.store.dispatch(GenerationCompleted(tuple(files), prompt, model_id, design_id))
        logger.info(f"Generation finished: {len(accumulated)} chars, {len(files)} files")

    def follow_up(self, request: str, model: Optional[str] = None) -> FragmentStream:
        """Validate the request and return the fragment stream modifying the current project."""
        request = (request or '').strip()
        if not request:
            raise ValidationError("Follow-up prompt is required")
        if self.state.current_project is None:
            raise ConflictError(NO_PROJECT_MESSAGE)
        model_id = self._resolve_model(model)

        state = self.store.dispatch_if(
            lambda s: s.current_project is not None and not s.is_busy,
            FollowUpStarted(),
        )
        if state is None:
            if self.state.current_project is None:
                raise ConflictError(NO_PROJECT_MESSAGE)
            raise ConflictError("A generation is already in progress")
        self._apply_selection(model_id)

        messages = build_follow_up_messages(request, state.selected_design, state.previous_code)
        return FragmentStream(
            self._stream_follow_up(messages, model_id),
            lambda: self.store.dispatch(FollowUpFailed('', ABANDONED_MESSAGE)),
        )

    async def _stream_follow_up(self, messages: List[ChatMessage], model_id: str) -> AsyncIterator[str]:
        logger.info(f"Applying follow-up with {model_id}")

        accumulated = ''
        try:
            async for fragment in self.client.stream_completion(model_id, messages):
                accumulated += fragment
                self.store.dispatch(FragmentReceived(accumulated))
                yield fragment
        except Exception as e:
            logger.error(f"Error in follow-up: {e}")
            self.store.dispatch(FollowUpFailed(accumulated, str(e)))
            raise
        except GeneratorExit:
            logger.warning("Follow-up stream abandoned by the consumer")
            self.store.dispatch(FollowUpFailed(accumulated, ABANDONED_MESSAGE))
            raise

        files = parse_generated_code(accumulated)
        self.store.dispatch(FollowUpCompleted(tuple(files)))
        logger.info(f"Follow-up finished: {len(files)} files updated")

    def current_project(self) -> GeneratedProject:
        project = self.state.current_project
        if project is None:
            raise NotFoundError("No generated project")
        return project

    def preview(self) -> str:
        return create_preview_html(self.current_project().files)

    def export(self, project_name: str = DEFAULT_PROJECT_NAME) -> ExportedArchive:
        return export_as_zip(self.current_project().files, project_name)
