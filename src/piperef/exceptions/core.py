"""
Exception classes for piperef.

This module defines the exception types raised at the edges of the engine.
User input problems found during validation are not raised one by one; they
are collected into a FieldErrors accumulator and surfaced together through
SpecValidationError. Defects found during substitution are raised as
SubstitutionInvariantError and never mixed with user errors.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from piperef.exceptions.field_errors import FieldErrors


class PipeRefError(Exception):
    """Base exception for all piperef errors."""

    pass


class SpecValidationError(PipeRefError):
    """Raised when a spec failed validation and the caller asked for an exception."""

    def __init__(self, errors: "FieldErrors"):
        """
        Initialize the exception.

        Params:
            errors: Every validation error collected for the spec
        """
        self.errors = errors
        super().__init__(errors.error())


class SubstitutionInvariantError(PipeRefError):
    """
    Raised when substitution meets a reference that validation should have rejected.

    This signals a programming defect (substituting an unvalidated spec, or a
    binding that misses declared values), not a problem with user input.
    """

    def __init__(self, reference: str, location: str, reason: str):
        """
        Initialize the exception.

        Params:
            reference: Original reference text, e.g. "$(params.foo)"
            location: Field path of the leaf being substituted
            reason: Why the reference could not be substituted
        """
        self.reference = reference
        self.location = location
        self.reason = reason
        super().__init__(
            f"Cannot substitute '{reference}' at {location or '<root>'}: {reason}"
        )


class ConfigurationError(PipeRefError):
    """Raised when feature flag configuration holds an invalid value."""

    def __init__(self, key: str, value: str, reason: str):
        """
        Initialize the exception.

        Params:
            key: Configuration key, e.g. "enable-api-fields"
            value: The rejected value
            reason: Why the value is invalid
        """
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for '{key}': {reason}")


class SpecLoadError(PipeRefError):
    """Raised when a manifest cannot be read or deserialized."""

    def __init__(self, source: str, reason: str):
        """
        Initialize the exception.

        Params:
            source: File path or description of the loaded document
            reason: The underlying reason for the failure
        """
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot load {source}: {reason}")
