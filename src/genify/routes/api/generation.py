"""Generation API
==============

Endpoints (all under /api/gen):

GET  /models           chat models, loaded on first use (?refresh=true reloads)
GET  /designs          design style catalog
POST /selection        {"model": str?, "design": str?}
POST /modal            {"modal": "design" | "preview" | "code" | null}
POST /generate         {"prompt": str, "model": str?, "design": str?} -> event stream
POST /follow-up        {"prompt": str, "model": str?} -> event stream
GET  /project          current project files
GET  /preview          assembled preview document
GET  /export?name=...  project zip download
GET  /state            application state snapshot
GET  /debug            configuration and state diagnostics

Event stream frames:
    data: {"content": "<fragment>"}             one per completion fragment
    event: done / data: {"project": {...}}      after a successful stream
    event: error / data: {"error": "...", ...}  when the stream fails
"""

import logging
from io import BytesIO
from typing import Any, Callable, Dict

from flask import Blueprint, Response, current_app, request, send_file, stream_with_context
from werkzeug.utils import secure_filename

from genify.extensions import get_generation_service
from genify.routes.response_utils import handle_exceptions, json_success, sse_event
from genify.services.generation import DESIGN_STYLES, FragmentStream, GenerationService
from genify.services.service_base import StreamError
from genify.utils.async_utils import iter_async_generator
from genify.utils.errors import AppError

logger = logging.getLogger(__name__)

gen_bp = Blueprint('generation', __name__, url_prefix='/api/gen')

PREVIEW_CSP = "sandbox allow-scripts"


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise AppError("Request body must be a JSON object", http_status=400, code='invalid_json')
    return data


def _ensure_models_loaded(service: GenerationService) -> None:
    if service.state.is_loading:
        service.load_models()


def _event_stream(
    service: GenerationService,
    fragments: FragmentStream,
    on_done: Callable[[], Dict[str, Any]],
) -> Response:
    def generate():
        try:
            for fragment in iter_async_generator(fragments):
                yield sse_event({'content': fragment})
        except StreamError as e:
            yield sse_event({'error': str(e), 'generated_code': service.state.generated_code}, event='error')
            return
        except Exception:
            logger.exception("Unexpected failure while streaming")
            yield sse_event({'error': 'Internal server error', 'generated_code': service.state.generated_code}, event='error')
            return
        yield sse_event(on_done(), event='done')

    response = Response(
        stream_with_context(generate()),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )
    # A client that leaves before the first frame never starts the stream
    response.call_on_close(fragments.close)
    return response


def _project_payload(service: GenerationService) -> Dict[str, Any]:
    state = service.state
    return {
        'project': state.current_project.to_dict() if state.current_project else None,
        'generated_code': state.generated_code,
    }


@gen_bp.route('/models')
@handle_exceptions
def list_models():
    service = get_generation_service()
    if request.args.get('refresh', '').lower() == 'true':
        service.load_models()
    else:
        _ensure_models_loaded(service)
    state = service.state
    return json_success({
        'models': [m.to_dict() for m in state.models],
        'selected_model': state.selected_model,
    })


@gen_bp.route('/designs')
@handle_exceptions
def list_designs():
    service = get_generation_service()
    return json_success({
        'designs': [style.to_dict() for style in DESIGN_STYLES],
        'selected_design': service.state.selected_design,
    })


@gen_bp.route('/selection', methods=['POST'])
@handle_exceptions
def update_selection():
    data = _json_body()
    service = get_generation_service()
    if data.get('model'):
        _ensure_models_loaded(service)
        service.select_model(data['model'])
    if data.get('design'):
        service.select_design(data['design'])
    state = service.state
    return json_success({
        'selected_model': state.selected_model,
        'selected_design': state.selected_design,
    })


@gen_bp.route('/modal', methods=['POST'])
@handle_exceptions
def toggle_modal():
    data = _json_body()
    state = get_generation_service().toggle_modal(data.get('modal'))
    return json_success({'open_modal': str(state.open_modal) if state.open_modal else None})


@gen_bp.route('/generate', methods=['POST'])
@handle_exceptions
def generate():
    data = _json_body()
    service = get_generation_service()
    _ensure_models_loaded(service)
    fragments = service.generate(
        data.get('prompt', ''),
        model=data.get('model'),
        design=data.get('design'),
    )
    return _event_stream(service, fragments, lambda: _project_payload(service))


@gen_bp.route('/follow-up', methods=['POST'])
@handle_exceptions
def follow_up():
    data = _json_body()
    service = get_generation_service()
    fragments = service.follow_up(data.get('prompt', ''), model=data.get('model'))
    return _event_stream(service, fragments, lambda: _project_payload(service))


@gen_bp.route('/project')
@handle_exceptions
def get_project():
    project = get_generation_service().current_project()
    return json_success(project.to_dict())


@gen_bp.route('/preview')
@handle_exceptions
def preview():
    html = get_generation_service().preview()
    response = Response(html, mimetype='text/html')
    response.headers['Content-Security-Policy'] = PREVIEW_CSP
    return response


@gen_bp.route('/export')
@handle_exceptions
def export():
    default_name = current_app.config['GENIFY_PROJECT_NAME']
    name = secure_filename(request.args.get('name', '')) or default_name
    archive = get_generation_service().export(name)
    logger.info(f"Exporting {archive.filename} ({archive.size} bytes)")
    return send_file(
        BytesIO(archive.data),
        mimetype='application/zip',
        as_attachment=True,
        download_name=archive.filename,
    )


@gen_bp.route('/state')
@handle_exceptions
def get_state():
    return json_success(get_generation_service().state.to_dict())


@gen_bp.route('/debug')
@handle_exceptions
def debug_info():
    service = get_generation_service()
    state = service.state
    client = service.client
    return json_success({
        'api_base': client.base_url,
        'api_key_configured': bool(client.api_key),
        'temperature': client.temperature,
        'stream_timeout': client.stream_timeout,
        'models_loaded': not state.is_loading,
        'model_count': len(state.models),
        'selected_model': state.selected_model,
        'selected_design': state.selected_design,
        'is_generating': state.is_generating,
        'is_following_up': state.is_following_up,
        'file_count': len(state.current_project.files) if state.current_project else 0,
        'generated_code_length': len(state.generated_code),
        'last_error': state.last_error,
    })
