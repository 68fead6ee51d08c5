"""
piperef - variable reference resolution and validation for CI/CD Task templates

piperef scans Task and StepAction specs for $(...) references, validates them
against the declared parameters, results, workspaces and context, checks the
declarations themselves, and substitutes concrete values at run time.
"""

from importlib.metadata import version

from piperef.config import FeatureFlags
from piperef.exceptions import FieldErrors, SpecValidationError, SubstitutionInvariantError
from piperef.execution import build_binding, substitute_task_spec
from piperef.models import StepActionSpec, Task, TaskSpec
from piperef.validation import validate_step_action_spec, validate_task, validate_task_spec

__version__ = version("piperef")

__all__ = [
    "__version__",
    "FeatureFlags",
    "FieldErrors",
    "SpecValidationError",
    "SubstitutionInvariantError",
    "StepActionSpec",
    "Task",
    "TaskSpec",
    "build_binding",
    "substitute_task_spec",
    "validate_step_action_spec",
    "validate_task",
    "validate_task_spec",
]
