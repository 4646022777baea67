"""Application State
=================

Unidirectional state updates for the generator UI. Every change is an
action dataclass applied by the pure :func:`reduce` function, which returns
a new frozen :class:`AppState`. :class:`AppStore` holds the current value.
"""

import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Tuple, Union

from genify.constants import (
    DEFAULT_DESIGN_ID,
    FOLLOW_UP_ERROR_NOTICE,
    GENERATION_ERROR_NOTICE,
    MODIFICATIONS_SEPARATOR,
    ModalName,
)

from .project import GeneratedProject, Model, ProjectFile


@dataclass(frozen=True)
class AppState:
    models: Tuple[Model, ...] = ()
    selected_model: str = ''
    selected_design: str = DEFAULT_DESIGN_ID
    generated_code: str = ''
    current_project: Optional[GeneratedProject] = None
    is_loading: bool = True
    is_generating: bool = False
    is_following_up: bool = False
    last_error: Optional[str] = None
    open_modal: Optional[ModalName] = None
    # Output shown before the current follow-up started
    previous_code: str = ''

    @property
    def is_busy(self) -> bool:
        return self.is_generating or self.is_following_up

    def to_dict(self) -> Dict[str, Any]:
        return {
            'models': [m.to_dict() for m in self.models],
            'selected_model': self.selected_model,
            'selected_design': self.selected_design,
            'generated_code': self.generated_code,
            'current_project': self.current_project.to_dict() if self.current_project else None,
            'is_loading': self.is_loading,
            'is_generating': self.is_generating,
            'is_following_up': self.is_following_up,
            'last_error': self.last_error,
            'open_modal': str(self.open_modal) if self.open_modal else None,
        }


# ===========================
# ACTIONS
# ===========================

@dataclass(frozen=True)
class ModelsLoaded:
    models: Tuple[Model, ...]


@dataclass(frozen=True)
class ModelSelected:
    model_id: str


@dataclass(frozen=True)
class DesignSelected:
    design_id: str


@dataclass(frozen=True)
class GenerationStarted:
    pass


@dataclass(frozen=True)
class FragmentReceived:
    accumulated: str


@dataclass(frozen=True)
class GenerationCompleted:
    files: Tuple[ProjectFile, ...]
    prompt: str
    model_id: str
    design_id: str


@dataclass(frozen=True)
class GenerationFailed:
    accumulated: str
    error: str


@dataclass(frozen=True)
class FollowUpStarted:
    pass


@dataclass(frozen=True)
class FollowUpCompleted:
    files: Tuple[ProjectFile, ...]


@dataclass(frozen=True)
class FollowUpFailed:
    accumulated: str
    error: str


@dataclass(frozen=True)
class ModalToggled:
    modal: Optional[ModalName]


Action = Union[
    ModelsLoaded, ModelSelected, DesignSelected,
    GenerationStarted, FragmentReceived, GenerationCompleted, GenerationFailed,
    FollowUpStarted, FollowUpCompleted, FollowUpFailed, ModalToggled,
]


def _with_notice(output: str, notice: str) -> str:
    return f"{output}\n\n{notice}" if output else notice


def reduce(state: AppState, action: Action) -> AppState:
    """Return the state that results from applying ``action``."""
    if isinstance(action, ModelsLoaded):
        selected = state.selected_model
        if not selected and action.models:
            selected = action.models[0].id
        return replace(state, models=tuple(action.models), selected_model=selected, is_loading=False)

    if isinstance(action, ModelSelected):
        return replace(state, selected_model=action.model_id)

    if isinstance(action, DesignSelected):
        return replace(state, selected_design=action.design_id)

    if isinstance(action, GenerationStarted):
        return replace(
            state,
            is_generating=True,
            generated_code='',
            current_project=None,
            last_error=None,
        )

    if isinstance(action, FragmentReceived):
        if state.is_following_up:
            return replace(state, generated_code=state.previous_code + MODIFICATIONS_SEPARATOR + action.accumulated)
        return replace(state, generated_code=action.accumulated)

    if isinstance(action, GenerationCompleted):
        project = state.current_project
        if action.files:
            project = GeneratedProject(
                files=tuple(action.files),
                original_prompt=action.prompt,
                selected_model=action.model_id,
                selected_design=action.design_id,
            )
        return replace(state, is_generating=False, current_project=project)

    if isinstance(action, GenerationFailed):
        return replace(
            state,
            is_generating=False,
            generated_code=_with_notice(action.accumulated, GENERATION_ERROR_NOTICE),
            last_error=action.error,
        )

    if isinstance(action, FollowUpStarted):
        return replace(state, is_following_up=True, previous_code=state.generated_code, last_error=None)

    if isinstance(action, FollowUpCompleted):
        project = state.current_project
        if action.files and project is not None:
            project = project.with_files(action.files)
        return replace(state, is_following_up=False, current_project=project, previous_code='')

    if isinstance(action, FollowUpFailed):
        output = state.previous_code
        if action.accumulated:
            output = output + MODIFICATIONS_SEPARATOR + action.accumulated
        return replace(
            state,
            is_following_up=False,
            generated_code=_with_notice(output, FOLLOW_UP_ERROR_NOTICE),
            previous_code='',
            last_error=action.error,
        )

    if isinstance(action, ModalToggled):
        return replace(state, open_modal=action.modal)

    raise TypeError(f"Unknown action: {type(action).__name__}")


class AppStore:
    """Holds the current :class:`AppState` and applies actions to it."""

    def __init__(self, initial: Optional[AppState] = None):
        self._state = initial or AppState()
        self._lock = threading.Lock()

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        with self._lock:
            self._state = reduce(self._state, action)
            return self._state

    def dispatch_if(self, predicate: Callable[[AppState], bool], action: Action) -> Optional[AppState]:
        """Apply ``action`` only when ``predicate`` holds for the current state.

        The check and the update happen under the same lock. Returns the new
        state, or None when the predicate rejected the current one.
        """
        with self._lock:
            if not predicate(self._state):
                return None
            self._state = reduce(self._state, action)
            return self._state
