"""Code Extractor
==============

Turns the accumulated model response into an ordered list of project files.

Parses fenced code blocks like:
```html
// index.html
<!DOCTYPE html>...
```
The ``// filename`` comment may sit on the fence line or the line after it.
Blocks without a filename get one inferred from the language tag.
"""

import logging
import re
from typing import List

from .project import ProjectFile

logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(
    r"```(?P<lang>\w+)?\s*(?://\s*(?P<filename>.+?)\s*)?\n(?P<code>[\s\S]*?)```"
)

LANGUAGE_FILENAMES = {
    'css': 'styles.css',
    'javascript': 'script.js',
    'js': 'script.js',
    'json': 'package.json',
}
DEFAULT_FILENAME = 'index.html'


def infer_filename(language: str) -> str:
    """Filename used for a block that names no file."""
    return LANGUAGE_FILENAMES.get(language or '', DEFAULT_FILENAME)


def parse_generated_code(content: str) -> List[ProjectFile]:
    """Extract project files from a model response.

    Duplicate names are kept; merging is the caller's concern. If no
    block yields a file, the whole trimmed response becomes ``index.html``.
    """
    files: List[ProjectFile] = []

    for match in CODE_BLOCK_PATTERN.finditer(content or ''):
        language = match.group('lang')
        filename = match.group('filename')
        code = match.group('code').strip()

        if not code:
            continue

        if filename:
            name = filename.strip()
        else:
            name = infer_filename(language)
        files.append(ProjectFile.create(name, code))

    if not files and content and content.strip():
        logger.info("No code blocks found, using raw response as index.html")
        files.append(ProjectFile.create(DEFAULT_FILENAME, content.strip()))

    logger.debug(f"Extracted {len(files)} files: {', '.join(f.name for f in files)}")
    return files
