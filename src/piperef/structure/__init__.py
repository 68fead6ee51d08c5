"""
Structural traversal of spec models.
"""

from piperef.structure.fields import (
    STEP_ACTION_SPEC_FIELDS,
    STEP_FIELDS,
    TASK_SPEC_FIELDS,
    FieldKind,
    FieldSpec,
)
from piperef.structure.walker import Leaf, Replacer, transform, walk

__all__ = [
    "STEP_ACTION_SPEC_FIELDS",
    "STEP_FIELDS",
    "TASK_SPEC_FIELDS",
    "FieldKind",
    "FieldSpec",
    "Leaf",
    "Replacer",
    "transform",
    "walk",
]
