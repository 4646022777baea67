"""Tests for the application state reducer and store."""
import threading

import pytest

from genify.constants import (
    FOLLOW_UP_ERROR_NOTICE,
    GENERATION_ERROR_NOTICE,
    MODIFICATIONS_SEPARATOR,
    ModalName,
)
from genify.services.generation.project import GeneratedProject, Model, ProjectFile
from genify.services.generation.state import (
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
    reduce,
)


def _project(*pairs):
    return GeneratedProject(
        files=tuple(ProjectFile.create(n, c) for n, c in pairs),
        original_prompt='todo',
        selected_model='gpt-test',
        selected_design='minimalistic',
    )


@pytest.mark.unit
class TestModelSelection:

    def test_initial_state(self):
        state = AppState()
        assert state.is_loading is True
        assert state.selected_design == 'minimalistic'
        assert state.current_project is None
        assert not state.is_busy

    def test_models_loaded_selects_first(self):
        state = reduce(AppState(), ModelsLoaded((Model('a'), Model('b'))))
        assert state.selected_model == 'a'
        assert state.is_loading is False

    def test_models_loaded_keeps_existing_selection(self):
        state = reduce(AppState(selected_model='b'), ModelsLoaded((Model('a'), Model('b'))))
        assert state.selected_model == 'b'

    def test_empty_model_list(self):
        state = reduce(AppState(), ModelsLoaded(()))
        assert state.selected_model == ''
        assert state.is_loading is False

    def test_explicit_selections(self):
        state = reduce(AppState(), ModelSelected('b'))
        state = reduce(state, DesignSelected('retro'))
        assert (state.selected_model, state.selected_design) == ('b', 'retro')


@pytest.mark.unit
class TestGenerationLifecycle:

    def test_started_clears_previous_output(self):
        state = AppState(generated_code='old', current_project=_project(('index.html', 'x')), last_error='boom')
        state = reduce(state, GenerationStarted())

        assert state.is_generating
        assert state.generated_code == ''
        assert state.current_project is None
        assert state.last_error is None

    def test_fragments_replace_output(self):
        state = reduce(AppState(), GenerationStarted())
        state = reduce(state, FragmentReceived('ab'))
        state = reduce(state, FragmentReceived('abc'))
        assert state.generated_code == 'abc'

    def test_completed_builds_project(self):
        files = (ProjectFile.create('index.html', '<p></p>'),)
        state = reduce(reduce(AppState(), GenerationStarted()), GenerationCompleted(files, 'todo', 'm', 'dark'))

        assert not state.is_generating
        assert state.current_project.files == files
        assert state.current_project.selected_design == 'dark'

    def test_completed_without_files_leaves_no_project(self):
        state = reduce(reduce(AppState(), GenerationStarted()), GenerationCompleted((), 'todo', 'm', 'dark'))
        assert state.current_project is None
        assert not state.is_generating

    def test_failure_keeps_partial_output(self):
        state = reduce(AppState(), GenerationStarted())
        state = reduce(state, GenerationFailed('partial', 'HTTP error! status: 500'))

        assert not state.is_generating
        assert state.generated_code == f"partial\n\n{GENERATION_ERROR_NOTICE}"
        assert state.last_error == 'HTTP error! status: 500'

    def test_failure_without_output(self):
        state = reduce(reduce(AppState(), GenerationStarted()), GenerationFailed('', 'boom'))
        assert state.generated_code == GENERATION_ERROR_NOTICE


@pytest.mark.unit
class TestFollowUpLifecycle:

    def test_fragments_append_after_separator(self):
        state = AppState(generated_code='v1', current_project=_project(('index.html', 'x')))
        state = reduce(state, FollowUpStarted())
        state = reduce(state, FragmentReceived('v2'))

        assert state.is_following_up
        assert state.generated_code == f"v1{MODIFICATIONS_SEPARATOR}v2"

    def test_completed_merges_files(self):
        state = AppState(
            generated_code='v1',
            current_project=_project(('index.html', 'old'), ('styles.css', 'css')),
        )
        state = reduce(state, FollowUpStarted())
        state = reduce(state, FollowUpCompleted((
            ProjectFile.create('index.html', 'new'),
            ProjectFile.create('script.js', 'js'),
        )))

        assert not state.is_following_up
        assert [(f.name, f.content) for f in state.current_project.files] == [
            ('index.html', 'new'), ('styles.css', 'css'), ('script.js', 'js'),
        ]
        assert state.current_project.original_prompt == 'todo'

    def test_completed_without_files_keeps_project(self):
        project = _project(('index.html', 'old'))
        state = reduce(reduce(AppState(current_project=project), FollowUpStarted()), FollowUpCompleted(()))
        assert state.current_project == project

    def test_failure_keeps_previous_and_partial_output(self):
        state = AppState(generated_code='v1', current_project=_project(('index.html', 'x')))
        state = reduce(state, FollowUpStarted())
        state = reduce(state, FollowUpFailed('half', 'Network error'))

        assert not state.is_following_up
        assert state.generated_code == f"v1{MODIFICATIONS_SEPARATOR}half\n\n{FOLLOW_UP_ERROR_NOTICE}"
        assert state.current_project.files[0].content == 'x'


@pytest.mark.unit
def test_modal_toggle():
    state = reduce(AppState(), ModalToggled(ModalName.PREVIEW))
    assert state.open_modal == ModalName.PREVIEW
    assert state.to_dict()['open_modal'] == 'preview'
    assert reduce(state, ModalToggled(None)).open_modal is None


@pytest.mark.unit
def test_unknown_action_rejected():
    with pytest.raises(TypeError):
        reduce(AppState(), object())


@pytest.mark.unit
def test_store_dispatch_is_serialized():
    store = AppStore()
    store.dispatch(GenerationStarted())

    def worker(n):
        for i in range(200):
            store.dispatch(FragmentReceived(f"{n}-{i}"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.state.is_generating
    assert store.state.generated_code.endswith('-199')


@pytest.mark.unit
class TestConditionalDispatch:

    def test_rejected_predicate_leaves_state(self):
        store = AppStore(AppState(generated_code='old'))
        store.dispatch(GenerationStarted())
        before = store.state

        assert store.dispatch_if(lambda s: not s.is_busy, GenerationStarted()) is None
        assert store.state is before

    def test_accepted_predicate_applies_action(self):
        store = AppStore()
        state = store.dispatch_if(lambda s: not s.is_busy, GenerationStarted())
        assert state is store.state
        assert state.is_generating

    def test_only_one_thread_claims_idle_store(self):
        store = AppStore()
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(store.dispatch_if(lambda s: not s.is_busy, GenerationStarted()))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(r is not None for r in results) == 1
