"""
Variable reference scanning.
"""

from piperef.parsing.scanner import (
    REFERENCE_PATTERN,
    IndexForm,
    Namespace,
    VariableReference,
    contains_reference,
    iter_references,
    scan,
)

__all__ = [
    "REFERENCE_PATTERN",
    "IndexForm",
    "Namespace",
    "VariableReference",
    "contains_reference",
    "iter_references",
    "scan",
]
