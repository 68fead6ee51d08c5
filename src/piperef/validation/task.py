"""
Validation entry points for Task and StepAction specs.

Every function is a pure function of its inputs and returns a FieldErrors
accumulator holding every problem found. Call ``raise_if_any`` on the result
to turn a failed validation into a SpecValidationError.
"""

import logging
from collections.abc import Sequence

from piperef.config import DEFAULT_FEATURE_FLAGS, FeatureFlags
from piperef.core.path_utils import FieldLocation
from piperef.core.types import ParamType
from piperef.exceptions import MISSING_FIELD_MESSAGE, ErrorKind, FieldErrors
from piperef.models import ParamSpec, Step, StepActionSpec, Task, TaskSpec, params_of_type
from piperef.parsing.scanner import Namespace, iter_references
from piperef.structure.fields import TASK_SPEC_FIELDS
from piperef.structure.walker import walk
from piperef.validation.declarations import (
    validate_object_param_properties,
    validate_param_declarations,
    validate_results,
    validate_steps,
    validate_volumes,
    validate_workspace_declarations,
)
from piperef.validation.resolver import Declarations
from piperef.validation.usage import (
    validate_step_action_references,
    validate_step_references,
    validate_task_spec_references,
)

logger = logging.getLogger(__name__)

_PARAMS_ONLY = frozenset({Namespace.PARAMS})


def validate_task_spec(
    spec: TaskSpec,
    flags: FeatureFlags | None = None,
    *,
    propagated_params: bool = False,
) -> FieldErrors:
    """
    Validate a task spec: its declarations and every variable reference.

    Params:
        spec: Task spec to validate
        flags: Feature flags in effect; defaults to DEFAULT_FEATURE_FLAGS
        propagated_params: Accept references to undeclared parameters, for
            specs embedded in a pipeline that propagates its parameters

    Returns:
        Every error found, with paths rooted at the spec
    """
    flags = flags or DEFAULT_FEATURE_FLAGS
    errs = FieldErrors()
    errs.also(validate_steps(spec.steps, spec.sidecars, spec.workspaces, flags))
    errs.also(validate_param_declarations(spec.params, flags))
    errs.also(validate_results(spec.results))
    errs.also(validate_workspace_declarations(spec.workspaces, spec.steps, spec.step_template))
    errs.also(validate_volumes(spec.volumes))

    declarations = Declarations.for_task_spec(spec, propagated_params=propagated_params)
    errs.also(validate_task_spec_references(spec, declarations, flags))
    logger.debug("Validated task spec with %d step(s): %d error(s)", len(spec.steps), len(errs))
    return errs


def validate_task(task: Task, flags: FeatureFlags | None = None) -> FieldErrors:
    """
    Validate a Task resource.

    Parameters are never propagated into a standalone Task, so every
    referenced parameter must be declared and object parameters must declare
    their properties. Paths are rooted at the resource, e.g. ``spec.steps[0]``.
    """
    errs = validate_task_spec(task.spec, flags)
    errs.also(validate_object_param_properties(task.spec.params))
    return errs.via_field("spec")


def validate_step_action_spec(spec: StepActionSpec, flags: FeatureFlags | None = None) -> FieldErrors:
    """
    Validate a StepAction spec.

    An action needs an image, may set a script or a command but not both,
    and may only reference its own parameters and step results. Task results
    and workspaces are supplied by the embedding task and are not checked.

    Params:
        spec: StepAction spec to validate
        flags: Feature flags in effect; defaults to DEFAULT_FEATURE_FLAGS

    Returns:
        Every error found, with paths rooted at the spec
    """
    flags = flags or DEFAULT_FEATURE_FLAGS
    errs = FieldErrors()
    if not spec.image:
        errs.add(ErrorKind.MISSING_FIELD, MISSING_FIELD_MESSAGE, "image")
    if spec.script and spec.command:
        errs.add(ErrorKind.INVALID_VALUE, "expected exactly one, got both", "script", "command")
    errs.also(validate_param_declarations(spec.params, flags))
    errs.also(validate_results(spec.results))
    errs.also(validate_step_action_references(spec, Declarations.for_step_action_spec(spec), flags))
    return errs


def validate_usage_of_declared_parameters(steps: Sequence[Step], params: Sequence[ParamSpec]) -> FieldErrors:
    """
    Check that every parameter referenced by the steps is declared.

    Object parameters must declare their properties, object keys used in the
    steps must be among them, and whole objects must not be referenced.

    Params:
        steps: Steps whose fields are scanned
        params: Declared parameters

    Returns:
        Missing-properties, non-existent variable and object usage errors
    """
    errs = validate_object_param_properties(params)
    errs.also(
        validate_step_references(
            steps,
            Declarations.for_params(params),
            namespaces=_PARAMS_ONLY,
            kinds=frozenset({ErrorKind.EXISTENCE, ErrorKind.TYPE_MISMATCH}),
            param_types=frozenset({ParamType.OBJECT}),
        )
    )
    return errs


def validate_parameter_variables(
    steps: Sequence[Step], params: Sequence[ParamSpec], flags: FeatureFlags | None = None
) -> FieldErrors:
    """
    Check parameter declarations and how the steps use them.

    Covers naming, uniqueness, types, defaults and enums of the declarations,
    plus type and isolation of every string and array parameter reference in
    the steps. Existence and object usage are left to
    ``validate_usage_of_declared_parameters``.
    """
    flags = flags or DEFAULT_FEATURE_FLAGS
    errs = validate_param_declarations(params, flags)
    errs.also(
        validate_step_references(
            steps,
            Declarations.for_params(params),
            flags,
            namespaces=_PARAMS_ONLY,
            kinds=frozenset({ErrorKind.TYPE_MISMATCH, ErrorKind.ISOLATION}),
            param_types=frozenset({ParamType.STRING, ParamType.ARRAY}),
        )
    )
    return errs


def get_indexing_references_to_array_params(spec: TaskSpec) -> set[str]:
    """
    Collect every literal-index reference to an array parameter.

    Steps, the step template, sidecars, volumes and workspace mount paths are
    scanned. The result is used to check indices against the array lengths
    known at run time.

    Params:
        spec: Task spec to scan

    Returns:
        Reference texts such as ``$(params.array-params[3])``
    """
    array_params = {p.name for p in params_of_type(spec.params, ParamType.ARRAY)}
    found: set[str] = set()
    for leaf in walk(spec, TASK_SPEC_FIELDS, FieldLocation()):
        for ref in iter_references(leaf.value):
            if ref.namespace is not Namespace.PARAMS or not ref.is_indexed:
                continue
            if any(name in array_params for name, rest in ref.name_splits() if not rest):
                found.add(ref.text)
    return found
