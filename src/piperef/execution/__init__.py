"""
Substitution of variable references at execution time.
"""

from piperef.execution.bindings import (
    CREDENTIALS_PATH,
    SubstitutionBinding,
    TaskRunContext,
    WorkspaceBinding,
    build_binding,
    step_container_name,
)
from piperef.execution.substitution import (
    lookup,
    substitute_leaf,
    substitute_step_action_spec,
    substitute_task_spec,
    validate_array_index_bounds,
)

__all__ = [
    "CREDENTIALS_PATH",
    "SubstitutionBinding",
    "TaskRunContext",
    "WorkspaceBinding",
    "build_binding",
    "step_container_name",
    "lookup",
    "substitute_leaf",
    "substitute_step_action_spec",
    "substitute_task_spec",
    "validate_array_index_bounds",
]
