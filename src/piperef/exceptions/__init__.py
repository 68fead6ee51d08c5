"""
piperef exception classes.

This package provides all exception and validation error types used
throughout piperef for consistent error handling and reporting.
"""

from piperef.exceptions.core import (
    ConfigurationError,
    PipeRefError,
    SpecLoadError,
    SpecValidationError,
    SubstitutionInvariantError,
)
from piperef.exceptions.field_errors import (
    MISSING_FIELD_MESSAGE,
    ErrorKind,
    FieldErrors,
    ValidationError,
    join_path,
)

__all__ = [
    "PipeRefError",
    "SpecValidationError",
    "SubstitutionInvariantError",
    "ConfigurationError",
    "SpecLoadError",
    "ErrorKind",
    "FieldErrors",
    "ValidationError",
    "MISSING_FIELD_MESSAGE",
    "join_path",
]
