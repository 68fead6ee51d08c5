"""
Validation of Task and StepAction specs.

This package provides the type resolver, the usage and isolation checks for
variable references, the declaration consistency checks, and the entry points
combining them.
"""

from piperef.validation.declarations import (
    validate_object_param_properties,
    validate_param_declarations,
    validate_results,
    validate_steps,
    validate_volumes,
    validate_workspace_declarations,
)
from piperef.validation.resolver import Declarations, Resolution, resolve
from piperef.validation.task import (
    get_indexing_references_to_array_params,
    validate_parameter_variables,
    validate_step_action_spec,
    validate_task,
    validate_task_spec,
    validate_usage_of_declared_parameters,
)
from piperef.validation.usage import check_leaf, validate_task_spec_references

__all__ = [
    "Declarations",
    "Resolution",
    "resolve",
    "check_leaf",
    "validate_task_spec_references",
    "validate_object_param_properties",
    "validate_param_declarations",
    "validate_results",
    "validate_steps",
    "validate_volumes",
    "validate_workspace_declarations",
    "get_indexing_references_to_array_params",
    "validate_parameter_variables",
    "validate_step_action_spec",
    "validate_task",
    "validate_task_spec",
    "validate_usage_of_declared_parameters",
]
