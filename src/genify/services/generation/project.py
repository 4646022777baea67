"""Project Data Model
====================

Immutable value types shared by the generation components: chat messages,
remote models, generated files and the project that groups them.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Tuple

from genify.constants import ChatRole, FileType


_EXTENSION_TYPES = {
    'html': FileType.HTML,
    'css': FileType.CSS,
    'js': FileType.JS,
    'jsx': FileType.JS,
    'ts': FileType.JS,
    'tsx': FileType.JS,
    'json': FileType.JSON,
    'md': FileType.MD,
}

_TYPE_LANGUAGES = {
    FileType.HTML: 'html',
    FileType.CSS: 'css',
    FileType.JS: 'javascript',
    FileType.JSON: 'json',
    FileType.MD: 'markdown',
}


def detect_file_type(filename: str) -> FileType:
    """Derive the file type from the last extension of ``filename``."""
    extension = filename.rsplit('.', 1)[-1].lower()
    return _EXTENSION_TYPES.get(extension, FileType.OTHER)


def get_language_from_file_type(file_type: FileType) -> str:
    """Syntax highlighting language for a file type."""
    return _TYPE_LANGUAGES.get(FileType(file_type), 'text')


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {'role': str(self.role), 'content': self.content}


@dataclass(frozen=True)
class Model:
    """A model entry from the remote listing."""
    id: str
    object: str = 'model'
    created: int = 0
    owned_by: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Model':
        return cls(
            id=str(data['id']),
            object=str(data.get('object') or 'model'),
            created=int(data.get('created') or 0),
            owned_by=str(data.get('owned_by') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'object': self.object,
            'created': self.created,
            'owned_by': self.owned_by,
        }


@dataclass(frozen=True)
class ProjectFile:
    """A generated file.

    ``type`` is always computed from ``name``; construct through
    :meth:`create` so the two can never disagree.
    """
    name: str
    content: str
    type: FileType = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, 'type', detect_file_type(self.name))

    @classmethod
    def create(cls, name: str, content: str) -> 'ProjectFile':
        return cls(name=name, content=content)

    @property
    def language(self) -> str:
        return get_language_from_file_type(self.type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'content': self.content,
            'type': str(self.type),
            'language': self.language,
        }


def merge_files(existing: Iterable[ProjectFile], new_files: Iterable[ProjectFile]) -> Tuple[ProjectFile, ...]:
    """Merge ``new_files`` into ``existing`` by exact name.

    A file whose name is already present replaces that entry in place;
    any other file is appended. Existing order is preserved.
    """
    merged = list(existing)
    for new_file in new_files:
        for index, current in enumerate(merged):
            if current.name == new_file.name:
                merged[index] = new_file
                break
        else:
            merged.append(new_file)
    return tuple(merged)


@dataclass(frozen=True)
class GeneratedProject:
    """Result of one successful generation, updated by follow-ups."""
    files: Tuple[ProjectFile, ...]
    original_prompt: str
    selected_model: str
    selected_design: str

    def with_files(self, new_files: Iterable[ProjectFile]) -> 'GeneratedProject':
        return replace(self, files=merge_files(self.files, new_files))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'files': [f.to_dict() for f in self.files],
            'original_prompt': self.original_prompt,
            'selected_model': self.selected_model,
            'selected_design': self.selected_design,
        }
