"""Addressing of single scalar fields inside a structured resume document.

A path is a dot-separated list of segments; a segment may carry one
bracketed index, e.g. ``experience[1].bullets[0]`` or ``skills.languages``.
Paths are parsed once into a tuple of ``PathSegment`` tokens and the
tokens are what the engine walks.
"""

import copy
import re
from dataclasses import dataclass
from typing import Any

from services.exceptions import FieldPathError

_SEGMENT_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)(?:\[(\d+)\])?$")


@dataclass(frozen=True)
class PathSegment:
    name: str
    index: int | None = None

    def __str__(self) -> str:
        return self.name if self.index is None else f"{self.name}[{self.index}]"


def parse_field_path(path: str) -> tuple[PathSegment, ...]:
    """Parse ``path`` into segments. Raises FieldPathError on bad syntax."""
    if not path or not path.strip():
        raise FieldPathError(path, "empty path")

    segments = []
    for part in path.strip().split("."):
        match = _SEGMENT_RE.match(part)
        if not match:
            raise FieldPathError(path, f"malformed segment '{part}'")
        name, index = match.groups()
        segments.append(PathSegment(name, int(index) if index is not None else None))
    return tuple(segments)


def format_field_path(tokens: tuple[PathSegment, ...]) -> str:
    return ".".join(str(t) for t in tokens)


def _step(current: Any, segment: PathSegment, path: str) -> Any:
    if not isinstance(current, dict) or segment.name not in current:
        raise FieldPathError(path, f"no field '{segment.name}'")
    value = current[segment.name]
    if segment.index is None:
        return value
    if not isinstance(value, list):
        raise FieldPathError(path, f"'{segment.name}' is not a list")
    if segment.index >= len(value):
        raise FieldPathError(path, f"index {segment.index} out of range for '{segment.name}'")
    return value[segment.index]


def _walk_to_parent(document: dict, tokens: tuple[PathSegment, ...], path: str) -> Any:
    current: Any = document
    for segment in tokens[:-1]:
        current = _step(current, segment, path)
        if current is None:
            raise FieldPathError(path, f"'{segment}' is null")
    return current


def read_field(document: dict, tokens: tuple[PathSegment, ...]) -> str | None:
    """Return the scalar addressed by ``tokens``."""
    path = format_field_path(tokens)
    if not tokens:
        raise FieldPathError(path, "empty path")
    parent = _walk_to_parent(document, tokens, path)
    value = _step(parent, tokens[-1], path)
    if value is not None and not isinstance(value, str):
        raise FieldPathError(path, "target is not a text field")
    return value


def apply_change(document: dict, tokens: tuple[PathSegment, ...], value: str) -> dict:
    """Return a copy of ``document`` with ``value`` written at ``tokens``.

    The input document is never mutated.
    """
    # validates the whole path before anything is copied
    read_field(document, tokens)

    path = format_field_path(tokens)
    new_document = copy.deepcopy(document)
    parent = _walk_to_parent(new_document, tokens, path)
    last = tokens[-1]
    if last.index is None:
        parent[last.name] = value
    else:
        parent[last.name][last.index] = value
    return new_document
