"""
Task and StepAction spec models.
"""

from piperef.core.spec_model import SpecModel
from piperef.models.containers import (
    EnvVar,
    Sidecar,
    Step,
    StepTemplate,
    Volume,
    VolumeMount,
)
from piperef.models.params import ParamSpec
from piperef.models.results import StepResult, TaskResult
from piperef.models.workspaces import WorkspaceDeclaration


class ObjectMeta(SpecModel):
    name: str = ""
    namespace: str = ""


class TaskSpec(SpecModel):
    """Reusable template of steps together with its declared inputs and outputs."""

    description: str | None = None
    params: tuple[ParamSpec, ...] = ()
    results: tuple[TaskResult, ...] = ()
    steps: tuple[Step, ...] = ()
    sidecars: tuple[Sidecar, ...] = ()
    step_template: StepTemplate | None = None
    volumes: tuple[Volume, ...] = ()
    workspaces: tuple[WorkspaceDeclaration, ...] = ()


class Task(SpecModel):
    api_version: str = "tekton.dev/v1"
    kind: str = "Task"
    metadata: ObjectMeta = ObjectMeta()
    spec: TaskSpec = TaskSpec()


class StepActionSpec(SpecModel):
    """A single reusable step, referenced from task steps by name."""

    description: str | None = None
    params: tuple[ParamSpec, ...] = ()
    results: tuple[StepResult, ...] = ()
    image: str = ""
    command: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    script: str = ""
    working_dir: str = ""
    env: tuple[EnvVar, ...] = ()
    volume_mounts: tuple[VolumeMount, ...] = ()


class StepAction(SpecModel):
    api_version: str = "tekton.dev/v1beta1"
    kind: str = "StepAction"
    metadata: ObjectMeta = ObjectMeta()
    spec: StepActionSpec = StepActionSpec()
