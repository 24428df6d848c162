"""
core/paths.py
-------------
Materialized-path helpers for the location hierarchy.

A location path is a dot-separated chain of segments restricted to
[a-z0-9_], always starting at the ROOT marker:

    root.garage.shelf_a

Depth counts every segment, the root marker included, so the path above has
depth 3. None of these helpers touch the database.
"""

import re
from typing import Optional

SEPARATOR = "."
ROOT = "root"
EMPTY_SEGMENT = "location"
BREADCRUMB_SEPARATOR = " > "

_POLISH_MAP = {
    "ą": "a", "ć": "c", "ę": "e", "ł": "l", "ń": "n",
    "ó": "o", "ś": "s", "ź": "z", "ż": "z",
    "Ą": "A", "Ć": "C", "Ę": "E", "Ł": "L", "Ń": "N",
    "Ó": "O", "Ś": "S", "Ź": "Z", "Ż": "Z",
}
_POLISH_TABLE = str.maketrans(_POLISH_MAP)

_INVALID_RUN = re.compile(r"[^a-z0-9_]+")
_UNDERSCORES = re.compile(r"_+")


def transliterate_polish(text: str) -> str:
    """Map Polish diacritics to their ASCII base letter; everything else passes through."""
    return text.translate(_POLISH_TABLE)


def sanitize_segment(text: str) -> str:
    """
    Turn arbitrary text into a path segment.

    >>> sanitize_segment("Garaż Metalowy")
    'garaz_metalowy'
    >>> sanitize_segment("Półka #1")
    'polka_1'

    Total and idempotent, but not injective: callers that need unique
    siblings must check for collisions themselves.
    """
    segment = transliterate_polish(text).lower()
    segment = _INVALID_RUN.sub("_", segment)
    segment = _UNDERSCORES.sub("_", segment)
    return segment.strip("_")


def segment_for_name(name: str) -> str:
    """Like sanitize_segment, but never returns an empty segment."""
    return sanitize_segment(name) or EMPTY_SEGMENT


def split_path(path: str) -> list[str]:
    return path.split(SEPARATOR) if path else []


def path_depth(path: str) -> int:
    return len(split_path(path))


def parent_path(path: str) -> str:
    """'root.garage.shelf_a' -> 'root.garage'; a single segment has no parent ('')."""
    segments = split_path(path)
    if len(segments) <= 1:
        return ""
    return SEPARATOR.join(segments[:-1])


def build_location_path(parent: Optional[str], name: str) -> str:
    """Path of a new location under ``parent`` (None means a top-level location)."""
    base = parent or ROOT
    return f"{base}{SEPARATOR}{segment_for_name(name)}"


def regenerate_path(old_path: str, new_name: str) -> str:
    """Replace the last segment of ``old_path`` with the segment for ``new_name``."""
    parent = parent_path(old_path)
    segment = segment_for_name(new_name)
    return f"{parent}{SEPARATOR}{segment}" if parent else segment


def is_descendant(path: str, ancestor: str) -> bool:
    return path.startswith(ancestor + SEPARATOR)


def rebase_path(path: str, old_prefix: str, new_prefix: str) -> str:
    """
    Move ``path`` from under ``old_prefix`` to under ``new_prefix``.

    Only a whole-segment prefix is replaced, so 'root.shelf' does not match
    'root.shelf_b.box'.
    """
    if path == old_prefix:
        return new_prefix
    if not is_descendant(path, old_prefix):
        raise ValueError(f"{path!r} is not under {old_prefix!r}")
    return new_prefix + path[len(old_prefix):]


def humanize_segment(segment: str) -> str:
    return " ".join(word.capitalize() for word in segment.split("_") if word)


def format_breadcrumb(path: Optional[str], humanize: bool = False) -> str:
    """
    Render a path for display.

    None -> 'Unassigned'; 'root' -> 'Root';
    'root.garage.shelf_a' -> 'garage > shelf_a' ('Garage > Shelf A' when humanized).
    """
    if path is None:
        return "Unassigned"
    segments = split_path(path)
    if segments and segments[0] == ROOT:
        segments = segments[1:]
    if not segments:
        return "Root"
    if humanize:
        segments = [humanize_segment(s) for s in segments]
    return BREADCRUMB_SEPARATOR.join(segments)
