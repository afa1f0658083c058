"""
Sidecar metadata loading for Pagewright.

Every content directory may hold a ``meta.yml`` file whose keys apply to the
markdown files living next to it. A missing or broken sidecar is never an
error: it simply means "no metadata".
"""

import os
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

import yaml

META_FILENAME = 'meta.yml'

logger = logging.getLogger('FileProcessor')


@dataclass(frozen=True)
class PageMeta:
    """Per-directory metadata. Every field is optional."""

    title: Optional[str] = None
    extends: Optional[str] = None
    generate_digest: Optional[bool] = None
    omit_digest: Optional[bool] = None
    description: Optional[str] = None
    digest_description: Optional[str] = None
    keywords: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    merge_tags_keywords: Optional[bool] = None
    page_slug: Optional[str] = None
    digest_title: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> 'PageMeta':
        """
        Build a record from a parsed YAML mapping.

        Unknown keys are ignored. A recognised key holding a value of the wrong
        type raises ValueError so the caller can fall back to an empty record.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Metadata must be a mapping, got {type(data).__name__}")

        values = {}
        for field in fields(cls):
            if field.name not in data or data[field.name] is None:
                continue
            values[field.name] = _coerce(field.name, data[field.name])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


_BOOL_FIELDS = {'generate_digest', 'omit_digest', 'merge_tags_keywords'}
_LIST_FIELDS = {'keywords', 'tags'}


def _coerce(name, value):
    if name in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ValueError(f"'{name}' must be a boolean")
        return value
    if name in _LIST_FIELDS:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"'{name}' must be a list of strings")
        return list(value)
    # YAML turns bare numbers into ints/floats; a title of 2024 is still a title.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ValueError(f"'{name}' must be a string")
    return value


def meta_path_for(src_path):
    """Return the sidecar path for a content file."""
    return os.path.join(os.path.dirname(src_path), META_FILENAME)


def load_meta(meta_path) -> PageMeta:
    """Load a metadata sidecar, returning an empty record on any failure."""
    if not os.path.exists(meta_path):
        return PageMeta()
    try:
        with open(meta_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (IOError, OSError, PermissionError) as e:
        logger.warning(f"Failed to read metadata file {meta_path}: {e}")
        return PageMeta()
    except yaml.YAMLError as e:
        logger.warning(f"Invalid YAML in metadata file {meta_path}: {e}")
        return PageMeta()

    if data is None:
        return PageMeta()
    try:
        return PageMeta.from_mapping(data)
    except ValueError as e:
        logger.warning(f"Ignoring metadata file {meta_path}: {e}")
        return PageMeta()


def resolve_meta(src_path) -> PageMeta:
    """Metadata that applies to ``src_path``."""
    return load_meta(meta_path_for(src_path))
