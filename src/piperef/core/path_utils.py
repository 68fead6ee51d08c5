"""
Field path utilities for the piperef engine.

This module provides the FieldLocation type used to attribute every error to
the exact field and element that produced it, plus small helpers for quoting
field text and comparing mount paths.
"""

import json
import posixpath
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldLocation:
    """
    Structural path to a single field of a spec.

    Segments are rendered joined by dots, so the segments ``("steps[2]", "args[0]")``
    render as ``steps[2].args[0]``. Instances are immutable; every builder
    method returns a new location.

    Params:
        segments: Path segments from the root of the spec to the field
    """

    segments: tuple[str, ...] = ()

    def __str__(self) -> str:
        return ".".join(self.segments)

    def child(self, name: str) -> "FieldLocation":
        """Return the location of a named sub-field."""
        return FieldLocation(self.segments + (name,))

    def index(self, name: str, idx: int) -> "FieldLocation":
        """Return the location of element ``idx`` of list field ``name``."""
        return FieldLocation(self.segments + (f"{name}[{idx}]",))

    def key(self, name: str, key: str) -> "FieldLocation":
        """Return the location of entry ``key`` of keyed field ``name``."""
        return FieldLocation(self.segments + (f"{name}[{key}]",))


def quote(value: str) -> str:
    """
    Quote field text the way error messages display it.

    Produces a double-quoted string with newlines, tabs, backslashes and
    double quotes escaped, so multi-line scripts render on one line.

    Params:
        value: Raw field text

    Returns:
        Quoted and escaped text
    """
    return json.dumps(value, ensure_ascii=False)


def clean_path(path: str) -> str:
    """
    Normalize a filesystem path for uniqueness comparisons.

    Trailing slashes, duplicate separators and "." components are removed,
    so "/workspace/data/" and "/workspace//data" compare equal.
    """
    if not path:
        return path
    return posixpath.normpath(path)
