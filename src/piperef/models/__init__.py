"""
Spec models.

This package provides the immutable pydantic models for Task and StepAction
specs and every declaration they contain.
"""

from piperef.models.containers import (
    ConfigMapProjection,
    ConfigMapVolumeSource,
    ContainerFields,
    CSIVolumeSource,
    EmptyDirVolumeSource,
    EnvFromSource,
    EnvVar,
    EnvVarSource,
    KeySelector,
    KeyToPath,
    LocalObjectReference,
    PersistentVolumeClaimVolumeSource,
    ProjectedVolumeSource,
    Ref,
    SecretProjection,
    SecretVolumeSource,
    ServiceAccountTokenProjection,
    Sidecar,
    StdioConfig,
    Step,
    StepTemplate,
    Volume,
    VolumeMount,
    VolumeProjection,
    WhenExpression,
)
from piperef.models.params import (
    Param,
    ParamSpec,
    ParamValue,
    PropertySpec,
    params_of_type,
)
from piperef.models.results import StepResult, TaskResult, step_result_path
from piperef.models.task import ObjectMeta, StepAction, StepActionSpec, Task, TaskSpec
from piperef.models.workspaces import WorkspaceDeclaration, WorkspaceUsage

__all__ = [
    "ConfigMapProjection",
    "ConfigMapVolumeSource",
    "ContainerFields",
    "CSIVolumeSource",
    "EmptyDirVolumeSource",
    "EnvFromSource",
    "EnvVar",
    "EnvVarSource",
    "KeySelector",
    "KeyToPath",
    "LocalObjectReference",
    "ObjectMeta",
    "Param",
    "ParamSpec",
    "ParamValue",
    "PersistentVolumeClaimVolumeSource",
    "ProjectedVolumeSource",
    "PropertySpec",
    "Ref",
    "SecretProjection",
    "SecretVolumeSource",
    "ServiceAccountTokenProjection",
    "Sidecar",
    "StdioConfig",
    "Step",
    "StepAction",
    "StepActionSpec",
    "StepResult",
    "StepTemplate",
    "Task",
    "TaskResult",
    "TaskSpec",
    "Volume",
    "VolumeMount",
    "VolumeProjection",
    "WhenExpression",
    "WorkspaceDeclaration",
    "WorkspaceUsage",
    "params_of_type",
    "step_result_path",
]
