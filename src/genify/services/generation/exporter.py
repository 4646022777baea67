"""Project Exporter
================

Serializes a project file list into a zip archive for download.
"""

import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Dict, Iterable

from genify.constants import DEFAULT_PROJECT_NAME
from genify.services.service_base import ExportError

from .project import ProjectFile

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = '.zip'


@dataclass(frozen=True)
class ExportedArchive:
    filename: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def export_as_zip(files: Iterable[ProjectFile], project_name: str = DEFAULT_PROJECT_NAME) -> ExportedArchive:
    """Build ``<project_name>.zip`` with one entry per file name.

    Names are used as given. When two files share a name the later one
    wins. Raises ExportError without returning partial output.
    """
    entries: Dict[str, str] = {}
    for project_file in files:
        entries[project_file.name] = project_file.content

    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            for name, content in entries.items():
                archive.writestr(name, content.encode('utf-8'))
    except (UnicodeEncodeError, ValueError, zipfile.BadZipFile, OSError) as e:
        logger.error(f"Error creating ZIP file: {e}")
        raise ExportError('Failed to create ZIP file') from e

    archive_name = f"{project_name}{ARCHIVE_EXTENSION}"
    data = buffer.getvalue()
    logger.info(f"Exported {len(entries)} files to {archive_name} ({len(data)} bytes)")
    return ExportedArchive(filename=archive_name, data=data)
