"""
Core piperef components.

This package provides the fundamental building blocks for the engine
including the spec model base class, value types and field locations.
"""

from piperef.core.path_utils import FieldLocation, clean_path, quote
from piperef.core.spec_model import SpecModel
from piperef.core.types import ParamType, ResultType, StringArray, StringMap

__all__ = [
    "SpecModel",
    "ParamType",
    "ResultType",
    "StringArray",
    "StringMap",
    "FieldLocation",
    "clean_path",
    "quote",
]
