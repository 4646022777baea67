"""Prompt Builder
==============

Renders the system prompts for first generation and follow-up
modifications. Templates are Jinja2 strings rendered without autoescaping,
since the output is plain chat text.
"""

import logging
from typing import List, Optional

from jinja2 import DictLoader, Environment, StrictUndefined

from genify.constants import ChatRole

from .design_styles import get_design_style_by_id
from .project import ChatMessage

logger = logging.getLogger(__name__)

_GENERATION_TEMPLATE = """\
You are an expert web developer. Generate complete, production-ready web applications based on user requirements.

{{ style_prompt }}

Requirements:
1. Generate complete HTML, CSS, and JavaScript files
2. Make the code mobile-responsive
3. Use modern web standards and best practices
4. Include proper file structure with clear file names
5. Format code blocks with proper language tags and file names like this:
   ```html
   // index.html
   [HTML code here]
   ```

   ```css
   // styles.css
   [CSS code here]
   ```

   ```javascript
   // script.js
   [JavaScript code here]
   ```

6. Make sure all files work together seamlessly
7. Add comments in the code for clarity
8. Ensure the application is fully functional

Generate a complete web application for: {{ prompt }}"""

_FOLLOW_UP_TEMPLATE = """\
You are an expert web developer. The user has requested modifications to an existing web application.

{{ style_prompt }}

IMPORTANT: You must modify the existing code based on the user's request. Here's the current project:

{{ previous_output }}

Requirements for modifications:
1. Make the requested changes while maintaining the existing functionality
2. Keep the same file structure unless specifically asked to change it
3. Ensure all files still work together after modifications
4. Format code blocks with proper language tags and file names
5. Only show the complete updated files that were changed
6. Maintain mobile responsiveness
7. Use modern web standards and best practices

User's modification request: {{ request }}"""

GENERATION_FALLBACK_STYLE = 'Create a clean, minimalistic design.'
FOLLOW_UP_FALLBACK_STYLE = 'Maintain a clean, minimalistic design.'

_env = Environment(
    loader=DictLoader({
        'generation.txt': _GENERATION_TEMPLATE,
        'follow_up.txt': _FOLLOW_UP_TEMPLATE,
    }),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def _style_prompt(design_id: Optional[str], fallback: str) -> str:
    style = get_design_style_by_id(design_id)
    if style is None:
        logger.debug(f"Unknown design '{design_id}', using fallback style prompt")
        return fallback
    return style.system_prompt


def build_generation_messages(prompt: str, design_id: Optional[str]) -> List[ChatMessage]:
    """System and user messages for a first generation."""
    system_prompt = _env.get_template('generation.txt').render(
        style_prompt=_style_prompt(design_id, GENERATION_FALLBACK_STYLE),
        prompt=prompt,
    )
    return [
        ChatMessage(ChatRole.SYSTEM, system_prompt),
        ChatMessage(ChatRole.USER, prompt),
    ]


def build_follow_up_messages(request: str, design_id: Optional[str], previous_output: str) -> List[ChatMessage]:
    """System and user messages asking to modify the previous output."""
    system_prompt = _env.get_template('follow_up.txt').render(
        style_prompt=_style_prompt(design_id, FOLLOW_UP_FALLBACK_STYLE),
        previous_output=previous_output,
        request=request,
    )
    return [
        ChatMessage(ChatRole.SYSTEM, system_prompt),
        ChatMessage(ChatRole.USER, request),
    ]
