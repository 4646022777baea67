"""Preview Assembler
=================

Builds one self-contained HTML document from a project file list by
inlining CSS and script files into the first HTML file.
"""

from typing import Iterable

from genify.constants import FileType, NO_HTML_PLACEHOLDER

from .project import ProjectFile


def create_preview_html(files: Iterable[ProjectFile]) -> str:
    """Return the preview document for ``files``.

    Style tags go before the first ``</head>`` and script tags before the
    first ``</body>``. A document missing either tag gets no injection for
    that kind of file.
    """
    files = list(files)
    html_file = next((f for f in files if f.type == FileType.HTML), None)
    if html_file is None:
        return NO_HTML_PLACEHOLDER

    html = html_file.content

    css_files = [f for f in files if f.type == FileType.CSS]
    if css_files:
        css_content = '\n'.join(f"<style>{f.content}</style>" for f in css_files)
        html = html.replace('</head>', f"{css_content}\n</head>", 1)

    js_files = [f for f in files if f.type == FileType.JS]
    if js_files:
        js_content = '\n'.join(f"<script>{f.content}</script>" for f in js_files)
        html = html.replace('</body>', f"{js_content}\n</body>", 1)

    return html
