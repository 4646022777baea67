"""
Test suite for the generation API and page routes.

Streams are replayed by the fake model client installed in conftest.
"""

import io
import json
import zipfile

import pytest

from genify.services.service_base import StreamError


def parse_events(body):
    """Split an event-stream body into (event, data) pairs."""
    events = []
    for frame in body.strip().split('\n\n'):
        event = 'message'
        data = None
        for line in frame.split('\n'):
            if line.startswith('event: '):
                event = line[len('event: '):]
            elif line.startswith('data: '):
                data = json.loads(line[len('data: '):])
        events.append((event, data))
    return events


def generate(client, prompt='todo app', **extra):
    response = client.post('/api/gen/generate', json={'prompt': prompt, **extra})
    return response, parse_events(response.get_data(as_text=True))


@pytest.mark.integration
class TestCatalogRoutes:

    def test_models(self, client):
        response = client.get('/api/gen/models')
        assert response.status_code == 200
        body = response.get_json()
        assert body['ok'] is True
        assert [m['id'] for m in body['data']['models']] == ['gpt-test', 'gpt-other']
        assert body['data']['selected_model'] == 'gpt-test'

    def test_models_refresh(self, client, fake_client):
        client.get('/api/gen/models')
        fake_client.models = []
        body = client.get('/api/gen/models?refresh=true').get_json()
        assert body['data']['models'] == []

    def test_designs(self, client):
        body = client.get('/api/gen/designs').get_json()
        assert len(body['data']['designs']) == 10
        assert body['data']['selected_design'] == 'minimalistic'

    def test_selection(self, client):
        response = client.post('/api/gen/selection', json={'model': 'gpt-other', 'design': 'dark'})
        assert response.status_code == 200
        assert response.get_json()['data'] == {'selected_model': 'gpt-other', 'selected_design': 'dark'}

    def test_selection_rejects_unknown_design(self, client):
        response = client.post('/api/gen/selection', json={'design': 'neon'})
        assert response.status_code == 400
        assert response.get_json()['error']['type'] == 'ValidationError'

    def test_modal(self, client):
        response = client.post('/api/gen/modal', json={'modal': 'preview'})
        assert response.get_json()['data'] == {'open_modal': 'preview'}
        response = client.post('/api/gen/modal', json={'modal': None})
        assert response.get_json()['data'] == {'open_modal': None}

    def test_non_json_body(self, client):
        response = client.post('/api/gen/modal', data='modal=preview')
        assert response.status_code == 400
        assert response.get_json()['error']['type'] == 'invalid_json'


@pytest.mark.integration
class TestGenerateRoute:

    def test_streams_fragments_then_done(self, client, fake_client, sample_response):
        fake_client.fragments = [sample_response[:30], sample_response[30:]]

        response, events = generate(client, design='retro')

        assert response.status_code == 200
        assert response.mimetype == 'text/event-stream'
        assert [e for e, _ in events] == ['message', 'message', 'done']
        assert ''.join(d['content'] for e, d in events if e == 'message') == sample_response
        done = events[-1][1]
        assert [f['name'] for f in done['project']['files']] == ['index.html', 'styles.css', 'script.js']
        assert done['project']['selected_design'] == 'retro'

    def test_stream_error_event(self, client, fake_client):
        fake_client.fragments = ['partial']
        fake_client.error = StreamError('HTTP error! status: 503')

        response, events = generate(client)

        assert response.status_code == 200
        assert events[-1][0] == 'error'
        assert events[-1][1]['error'] == 'HTTP error! status: 503'
        assert events[-1][1]['generated_code'].startswith('partial')

        state = client.get('/api/gen/state').get_json()['data']
        assert state['is_generating'] is False
        assert state['current_project'] is None

    def test_empty_prompt(self, client):
        response = client.post('/api/gen/generate', json={'prompt': ''})
        assert response.status_code == 400
        assert response.get_json()['ok'] is False

    def test_no_models_available(self, client, fake_client):
        fake_client.models = []
        response = client.post('/api/gen/generate', json={'prompt': 'todo'})
        assert response.status_code == 400
        assert response.get_json()['message'] == 'No model selected'

    def test_busy_service_returns_conflict(self, client, gen_service):
        gen_service.load_models()
        pending = gen_service.generate('first')

        response = client.post('/api/gen/generate', json={'prompt': 'todo'})
        assert response.status_code == 409
        assert response.get_json()['error']['type'] == 'ConflictError'

        pending.close()
        response, events = generate(client)
        assert response.status_code == 200
        assert events[-1][0] == 'done'

    def test_unsent_response_releases_service(self, app, gen_service):
        from genify.routes.api.generation import _event_stream

        gen_service.load_models()
        with app.test_request_context('/api/gen/generate', method='POST'):
            stream = gen_service.generate('todo')
            response = _event_stream(gen_service, stream, dict)
            assert gen_service.state.is_generating
            response.close()

        assert not gen_service.state.is_busy
        assert not stream.started


@pytest.mark.integration
class TestProjectRoutes:

    def test_no_project_yet(self, client):
        assert client.get('/api/gen/project').status_code == 404
        assert client.get('/api/gen/preview').status_code == 404
        assert client.get('/api/gen/export').status_code == 404
        response = client.post('/api/gen/follow-up', json={'prompt': 'make it blue'})
        assert response.status_code == 409

    def test_project_preview_and_export(self, client, fake_client, sample_response):
        fake_client.fragments = [sample_response]
        generate(client)

        project = client.get('/api/gen/project').get_json()['data']
        assert project['original_prompt'] == 'todo app'

        preview = client.get('/api/gen/preview')
        assert preview.status_code == 200
        assert preview.headers['Content-Security-Policy'] == 'sandbox allow-scripts'
        html = preview.get_data(as_text=True)
        assert '<style>body { margin: 0; }</style>' in html

        export = client.get('/api/gen/export?name=my todo')
        assert export.status_code == 200
        assert export.mimetype == 'application/zip'
        assert 'my_todo.zip' in export.headers['Content-Disposition']
        with zipfile.ZipFile(io.BytesIO(export.data)) as zf:
            assert sorted(zf.namelist()) == ['index.html', 'script.js', 'styles.css']

    def test_export_default_name(self, client, fake_client, sample_response):
        fake_client.fragments = [sample_response]
        generate(client)
        export = client.get('/api/gen/export')
        assert 'genify-project.zip' in export.headers['Content-Disposition']

    def test_follow_up_updates_project(self, client, fake_client, sample_response):
        fake_client.fragments = [sample_response]
        generate(client)
        fake_client.fragments = ["```javascript\n// script.js\nconsole.log('v2');\n```"]

        response = client.post('/api/gen/follow-up', json={'prompt': 'log v2'})
        events = parse_events(response.get_data(as_text=True))

        assert events[-1][0] == 'done'
        files = {f['name']: f['content'] for f in events[-1][1]['project']['files']}
        assert files['script.js'] == "console.log('v2');"
        assert '--- MODIFICATIONS ---' in events[-1][1]['generated_code']


@pytest.mark.integration
class TestPagesAndDiagnostics:

    def test_index_page(self, client):
        response = client.get('/')
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert 'Genify' in html
        assert 'value="minimalistic"' in html

    def test_index_page_has_deploy_link_and_modals(self, client):
        html = client.get('/').get_data(as_text=True)
        assert 'id="deploy-link" class="button" href="https://vercel.com/new" target="_blank"' in html
        for modal in ('design', 'preview', 'code'):
            assert f'id="{modal}-modal" class="modal" data-modal="{modal}" hidden' in html
        assert html.count('class="design-card"') == 10
        assert "fetch('/api/gen/modal'" in html
        assert "fetch('/api/gen/project')" in html

    def test_index_page_restores_open_modal(self, client):
        client.post('/api/gen/modal', json={'modal': 'code'})
        html = client.get('/').get_data(as_text=True)
        assert 'showModal("code");' in html

        state = client.get('/api/gen/state').get_json()['data']
        assert state['open_modal'] == 'code'

    def test_index_page_enables_project_actions_after_generation(self, client, fake_client, sample_response):
        assert 'window.hasProject = false;' in client.get('/').get_data(as_text=True)
        fake_client.fragments = [sample_response]
        generate(client)
        assert 'window.hasProject = true;' in client.get('/').get_data(as_text=True)

    def test_code_view_files_carry_language(self, client, fake_client, sample_response):
        fake_client.fragments = [sample_response]
        generate(client)

        files = client.get('/api/gen/project').get_json()['data']['files']
        assert [(f['name'], f['language']) for f in files] == [
            ('index.html', 'html'), ('styles.css', 'css'), ('script.js', 'javascript'),
        ]

    def test_state(self, client):
        body = client.get('/api/gen/state').get_json()
        assert body['data']['is_loading'] is True
        assert body['data']['selected_design'] == 'minimalistic'

    def test_debug(self, client):
        data = client.get('/api/gen/debug').get_json()['data']
        assert data['api_key_configured'] is True
        assert data['api_base'] == 'http://genify.test/v1'

    def test_unknown_api_route_returns_json(self, client):
        response = client.get('/api/gen/nope')
        assert response.status_code == 404
        assert response.get_json()['status_code'] == 404

    def test_unknown_page_renders_html(self, client):
        response = client.get('/missing-page')
        assert response.status_code == 404
        assert 'Page Not Found' in response.get_data(as_text=True)
