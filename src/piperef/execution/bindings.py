"""
Values available to the substitution engine.

A SubstitutionBinding holds the parameter values and the plain string values
(context, results, credentials, workspaces) that references are replaced
with. ``build_binding`` assembles one from a task spec and the run-time
inputs supplied by the caller.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from attrs import evolve, field, frozen

from piperef.core.types import ParamType
from piperef.models import Param, ParamValue, StepResult, TaskSpec, step_result_path
from piperef.models.results import RESULTS_DIR

# Mount point of credentials prepared for the legacy credential helper
CREDENTIALS_PATH = "/tekton/creds"


@frozen
class TaskRunContext:
    """Identity of the task run a spec is substituted for."""

    task_name: str = ""
    task_run_name: str = ""
    task_run_namespace: str = ""
    task_run_uid: str = ""
    retry_count: int = 0

    def as_strings(self) -> dict[str, str]:
        return {
            "context.task.name": self.task_name,
            "context.task.retry-count": str(self.retry_count),
            "context.taskRun.name": self.task_run_name,
            "context.taskRun.namespace": self.task_run_namespace,
            "context.taskRun.uid": self.task_run_uid,
        }


@frozen
class WorkspaceBinding:
    """Volume a declared workspace is bound to for one run."""

    claim: str = ""
    volume: str = ""


@frozen
class SubstitutionBinding:
    """Immutable lookup table for substitution.

    Responsibilities:
      - Map parameter names to their ParamValue.
      - Map every other reference key (``context.task.name``,
        ``results.out.path``, ``workspaces.src.path``) to its string value.

    Notes:
      - Step results are added per step with ``with_step``.
    """

    params: Mapping[str, ParamValue] = field(factory=dict, converter=dict)
    strings: Mapping[str, str] = field(factory=dict, converter=dict)

    def param(self, name: str) -> ParamValue | None:
        return self.params.get(name)

    def string(self, key: str) -> str | None:
        return self.strings.get(key)

    def with_strings(self, extra: Mapping[str, str]) -> "SubstitutionBinding":
        return evolve(self, strings={**self.strings, **extra})

    def with_step(self, container_name: str, results: Iterable[StepResult]) -> "SubstitutionBinding":
        """Return a binding that also resolves ``step.results.<name>.path`` for one step."""
        return self.with_strings(
            {f"step.results.{r.name}.path": step_result_path(container_name, r.name) for r in results}
        )


def step_container_name(name: str, idx: int) -> str:
    """Container name of a step: ``step-<name>``, or ``step-unnamed-<idx>`` when unnamed."""
    return f"step-{name}" if name else f"step-unnamed-{idx}"


def _merge(default: ParamValue | None, supplied: ParamValue) -> ParamValue:
    # Object values keep default keys the caller did not supply
    if default is not None and default.type == supplied.type == ParamType.OBJECT:
        return ParamValue(
            type=ParamType.OBJECT,
            object_val={**default.object_val, **supplied.object_val},
        )
    return supplied


def _supplied_values(params: Mapping[str, Any] | Iterable[Param] | None) -> dict[str, ParamValue]:
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return {name: ParamValue.of(value) for name, value in params.items()}
    return {p.name: p.value for p in params if p.value is not None}


def build_binding(
    spec: TaskSpec,
    params: Mapping[str, Any] | Iterable[Param] | None = None,
    context: TaskRunContext | None = None,
    workspaces: Mapping[str, WorkspaceBinding] | None = None,
) -> SubstitutionBinding:
    """
    Build the substitution binding for one run of a task spec.

    Params:
        spec: Task spec being run
        params: Supplied parameter values, as a name to literal mapping or as
            Param entries; they override declared defaults
        context: Task run identity
        workspaces: Bound workspaces by name; declared workspaces missing here
            are unbound

    Returns:
        Binding with parameter, context, result, credentials and workspace values
    """
    supplied = _supplied_values(params)
    values: dict[str, ParamValue] = {}
    for declared in spec.params:
        if declared.name in supplied:
            values[declared.name] = _merge(declared.default, supplied[declared.name])
        elif declared.default is not None:
            values[declared.name] = declared.default
    for name, value in supplied.items():
        values.setdefault(name, value)

    strings = (context or TaskRunContext()).as_strings()
    strings["credentials.path"] = CREDENTIALS_PATH
    for result in spec.results:
        strings[f"results.{result.name}.path"] = f"{RESULTS_DIR}/{result.name}"

    bound = workspaces or {}
    for workspace in spec.workspaces:
        binding = bound.get(workspace.name)
        is_bound = binding is not None
        prefix = f"workspaces.{workspace.name}"
        strings[f"{prefix}.bound"] = "true" if is_bound else "false"
        strings[f"{prefix}.path"] = workspace.effective_mount_path if is_bound or not workspace.optional else ""
        strings[f"{prefix}.claim"] = binding.claim if is_bound else ""
        strings[f"{prefix}.volume"] = binding.volume if is_bound else ""

    return SubstitutionBinding(params=values, strings=strings)
