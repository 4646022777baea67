"""
Main routes for the Flask application
=====================================

Single-page generator UI.
"""

from flask import Blueprint, current_app, render_template

from genify.constants import DEPLOY_URL
from genify.extensions import get_generation_service
from genify.services.generation import DESIGN_STYLES

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Generator page."""
    state = get_generation_service().state
    return render_template(
        'pages/index.html',
        page_title='Genify',
        designs=DESIGN_STYLES,
        selected_design=state.selected_design,
        project_name=current_app.config['GENIFY_PROJECT_NAME'],
        has_project=state.current_project is not None,
        open_modal=str(state.open_modal) if state.open_modal else None,
        deploy_url=DEPLOY_URL,
    )
