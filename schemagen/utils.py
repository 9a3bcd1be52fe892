# File: schemagen/utils.py
"""
schemagen - Utility Functions & Helpers
========================================
Name inflection, identifier casing, text layout and file I/O helpers used
throughout the pipeline.

Performance strategy:
- ALL string-conversion functions are decorated with ``@lru_cache(maxsize=None)``
  so the repeated calls made while resolving relationships across every
  table are amortised to O(1) after first invocation.
- File writes go to a temporary file first and are renamed into place.
"""

from __future__ import annotations

import functools
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.utils")

# ---------------------------------------------------------------------------
# Inflection tables
# ---------------------------------------------------------------------------

# Plural → singular. Lookups are exact and case-sensitive.
_IRREGULAR_SINGULARS: Dict[str, str] = {
    "people": "person",
    "children": "child",
    "oxen": "ox",
    "feet": "foot",
    "teeth": "tooth",
    "geese": "goose",
}

_IRREGULAR_PLURALS: Dict[str, str] = {
    singular: plural for plural, singular in _IRREGULAR_SINGULARS.items()
}


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def singularize(word: str) -> str:
    """
    Deterministic English singularisation for table names.

    Examples:
        >>> singularize("users")
        'user'
        >>> singularize("categories")
        'category'
        >>> singularize("boxes")
        'box'
        >>> singularize("people")
        'person'

    Rules are applied in order: irregular table, ``ies`` → ``y``, strip
    ``es``, strip ``s``. Anything else is returned unchanged.
    """
    if word in _IRREGULAR_SINGULARS:
        return _IRREGULAR_SINGULARS[word]
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("es"):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


@functools.lru_cache(maxsize=None)
def pluralize(word: str) -> str:
    """
    Deterministic English pluralisation (inverse of :func:`singularize`).

    Examples:
        >>> pluralize("post")
        'posts'
        >>> pluralize("category")
        'categories'
        >>> pluralize("church")
        'churches'
        >>> pluralize("child")
        'children'
    """
    if word in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[word]
    if word.endswith("y"):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "ch", "sh")):
        return word + "es"
    return word + "s"


def _upper_first(segment: str) -> str:
    return segment[:1].upper() + segment[1:]


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Join ``_``-separated segments in camelCase.

    The first segment is kept as-is; later segments get an upper-cased first
    letter, the rest of each segment is untouched.

        >>> to_camel_case("user_profile")
        'userProfile'
    """
    head, *tail = name.split("_")
    return head + "".join(_upper_first(part) for part in tail)


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Join ``_``-separated segments in PascalCase.

        >>> to_pascal_case("user_profile")
        'UserProfile'
    """
    return "".join(_upper_first(part) for part in name.split("_"))


@functools.lru_cache(maxsize=None)
def to_method_name(table_name: str) -> str:
    """Singular camelCase accessor name for a table (``user_profiles`` → ``userProfile``)."""
    return to_camel_case(singularize(table_name))


@functools.lru_cache(maxsize=None)
def to_model_name(table_name: str) -> str:
    """Singular PascalCase entity name for a table (``user_profiles`` → ``UserProfile``)."""
    return to_pascal_case(singularize(table_name))


# ---------------------------------------------------------------------------
# Text layout helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 4) -> List[str]:
    """Indent a list of lines, returning a new list. Blank lines stay blank."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


def wrap_in_quotes(value: str) -> str:
    """Wrap a string value in double quotes, escaping internals."""
    escaped: str = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_text_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """
    Render rows as a plain, column-aligned text table.

    Example::

        Name  | Type
        ------+--------
        id    | int(11)
    """
    widths: List[int] = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def _line(cells: Sequence[str]) -> str:
        return " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    lines: List[str] = [_line(headers), "-+-".join("-" * w for w in widths)]
    lines.extend(_line(row) for row in rows)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str) -> int:
    """
    Write *content* to *path* atomically.

    Writes to a temporary file in the target directory, then renames it
    into place, so a crash never leaves a half-written file.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        shutil.move(tmp_path, str(path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("scaffold users") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "singularize",
    "pluralize",
    "to_camel_case",
    "to_pascal_case",
    "to_method_name",
    "to_model_name",
    "indent_lines",
    "wrap_in_quotes",
    "format_text_table",
    "ensure_directory",
    "write_file",
    "Timer",
]

logger.debug("schemagen.utils loaded — %d public symbols.", len(__all__))
