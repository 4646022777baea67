import sys
from pathlib import Path

# Ensure the application package under src/ is importable when running tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / 'src'
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

import pytest

from genify.factory import create_app
from genify.services.generation import AppStore, GenerationService, Model


class FakeModelClient:
    """Stands in for ModelClient; replays canned fragments."""

    def __init__(self, models=None, fragments=(), error=None):
        self.base_url = 'http://genify.test/v1'
        self.api_key = 'test-key'
        self.temperature = 0.7
        self.stream_timeout = 300
        self.models = [Model('gpt-test'), Model('gpt-other')] if models is None else models
        self.fragments = list(fragments)
        self.error = error
        self.calls = []

    def list_models(self):
        return list(self.models)

    async def stream_completion(self, model, messages):
        self.calls.append((model, list(messages)))
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error


SAMPLE_RESPONSE = (
    "Here is your app.\n\n"
    "```html\n// index.html\n<html><head><title>Todo</title></head><body><h1>Todo</h1></body></html>\n```\n\n"
    "```css\n// styles.css\nbody { margin: 0; }\n```\n\n"
    "```javascript\n// script.js\nconsole.log('ready');\n```\n"
)


@pytest.fixture
def sample_response():
    return SAMPLE_RESPONSE


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def service(fake_client):
    return GenerationService(fake_client, AppStore())


@pytest.fixture
def app(fake_client):
    """Create application for the tests with a fake model client."""
    app = create_app('testing')
    components = app.extensions['app_components']
    components.model_client = fake_client
    components.generation_service.client = fake_client
    yield app


@pytest.fixture
def client(app):
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def gen_service(app):
    return app.extensions['app_components'].generation_service
