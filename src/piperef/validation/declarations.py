"""
Declaration consistency checks.

These checks look at what a spec declares (parameters, results, workspaces,
steps and volumes) independently of where variables are used. Paths are
rooted at the spec, e.g. ``params[foo]`` or ``workspaces[1].mountpath``.
"""

import re
from collections.abc import Iterable, Sequence

from piperef.config import ApiFields, FeatureFlags
from piperef.core.path_utils import clean_path
from piperef.core.types import ParamType
from piperef.exceptions import MISSING_FIELD_MESSAGE, ErrorKind, FieldErrors
from piperef.models import (
    ParamSpec,
    Sidecar,
    Step,
    StepResult,
    StepTemplate,
    Volume,
    WorkspaceDeclaration,
)
from piperef.parsing.scanner import contains_reference

STRING_ARRAY_NAME_PATTERN = re.compile(r"^[_a-zA-Z][_a-zA-Z0-9.-]*$")
OBJECT_NAME_PATTERN = re.compile(r"^[_a-zA-Z][_a-zA-Z0-9-]*$")
RESULT_NAME_REGEX = "^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$"
RESULT_NAME_PATTERN = re.compile(RESULT_NAME_REGEX)

STRING_ARRAY_NAME_DETAILS = (
    "String/Array Names: \n"
    "Must only contain alphanumeric characters, hyphens (-), underscores (_), and dots (.)\n"
    "Must begin with a letter or an underscore (_)"
)
OBJECT_NAME_DETAILS = (
    "Object Names: \n"
    "Must only contain alphanumeric characters, hyphens (-), underscores (_) \n"
    "Must begin with a letter or an underscore (_)"
)
RESULT_NAME_DETAILS = (
    "Name must consist of alphanumeric characters, '-', '_', and must start and end "
    "with an alphanumeric character (e.g. 'MyName',  or 'my-name',  or 'my_name', "
    f"regex used for validation is '{RESULT_NAME_REGEX}')"
)

ON_ERROR_VALUES = ("continue", "stopAndFail")


def _go_list(items: Iterable[str]) -> str:
    return "[" + " ".join(items) + "]"


def _go_map(entries: dict[str, list[str]]) -> str:
    return "map[" + " ".join(f"{k}:{_go_list(v)}" for k, v in sorted(entries.items())) + "]"


def feature_gate_message(feature: str, required: ApiFields, flags: FeatureFlags) -> str:
    return (
        f'{feature} requires "enable-api-fields" feature gate to be '
        f'"{required.value}" but it is "{flags.enable_api_fields.value}"'
    )


def validate_param_names(params: Sequence[ParamSpec]) -> FieldErrors:
    """
    Check parameter and object key naming.

    String and array names may contain dots; object names and their keys may
    not. All offenders are reported in one error per alphabet.
    """
    errs = FieldErrors()
    invalid_names: list[str] = []
    invalid_objects: dict[str, list[str]] = {}
    for param in params:
        if param.is_type(ParamType.OBJECT):
            bad_keys = sorted(k for k in param.properties or {} if not OBJECT_NAME_PATTERN.match(k))
            if bad_keys or not OBJECT_NAME_PATTERN.match(param.name):
                invalid_objects[param.name] = bad_keys
        elif not STRING_ARRAY_NAME_PATTERN.match(param.name):
            invalid_names.append(param.name)

    if invalid_names:
        errs.add(
            ErrorKind.NAMING_FORMAT,
            "The format of following array and string variable names is invalid: "
            + _go_list(sorted(invalid_names)),
            "params",
            details=STRING_ARRAY_NAME_DETAILS,
        )
    if invalid_objects:
        errs.add(
            ErrorKind.NAMING_FORMAT,
            f"Object param name and key name format is invalid: {_go_map(invalid_objects)}",
            "params",
            details=OBJECT_NAME_DETAILS,
        )
    return errs


def validate_param_uniqueness(params: Sequence[ParamSpec]) -> FieldErrors:
    errs = FieldErrors()
    seen: set[str] = set()
    reported: set[str] = set()
    for param in params:
        if param.name in seen and param.name not in reported:
            errs.add(
                ErrorKind.DUPLICATE_DECLARATION,
                "parameter appears more than once",
                f"params[{param.name}]",
            )
            reported.add(param.name)
        seen.add(param.name)
    return errs


def validate_param_types(params: Sequence[ParamSpec]) -> FieldErrors:
    """
    Check declared parameter types against their defaults and properties.

    Params:
        params: Declared parameters

    Returns:
        Invalid-value, default mismatch and property type errors
    """
    errs = FieldErrors()
    for param in params:
        if param.type and param.type not in ParamType.values():
            errs.add(
                ErrorKind.INVALID_VALUE,
                f"invalid value: {param.type}",
                f"params.{param.name}.type",
            )
            continue

        if param.type and param.default is not None and param.default.type.value != param.type:
            errs.add(
                ErrorKind.DEFAULT_TYPE_MISMATCH,
                f'"{param.type}" type does not match default value\'s type: "{param.default.type.value}"',
                f"params.{param.name}.type",
                f"params.{param.name}.default.type",
            )

        if param.is_type(ParamType.OBJECT) and param.properties:
            bad_keys = sorted(
                key
                for key, prop in param.properties.items()
                if prop.type and prop.type != ParamType.STRING.value
            )
            if bad_keys:
                errs.add(
                    ErrorKind.INVALID_VALUE,
                    f"The value type specified for these keys {_go_list(bad_keys)} is invalid",
                    f"params.{param.name}.properties",
                )
    return errs


def validate_param_enums(params: Sequence[ParamSpec], flags: FeatureFlags) -> FieldErrors:
    """
    Check enum declarations.

    Enums require the ``enable-param-enum`` flag, are only legal on string
    parameters, must not repeat values and must contain the default.
    """
    errs = FieldErrors()
    for param in params:
        if not param.enum:
            continue
        path = f"params[{param.name}]"
        if not flags.enable_param_enum:
            errs.add(
                ErrorKind.FEATURE_GATE,
                "feature flag `enable-param-enum` should be set to true to use Enum",
                path,
            )
            continue
        if not param.is_type(ParamType.STRING):
            errs.add(ErrorKind.ENUM, "enum can only be set with string type param", path)
            continue

        seen: set[str] = set()
        for value in param.enum:
            if value in seen:
                errs.add(ErrorKind.ENUM, f"parameter enum value {value} appears more than once", path)
            seen.add(value)

        default = param.default
        if default is not None and default.type == ParamType.STRING and default.string_val not in seen:
            errs.add(
                ErrorKind.ENUM,
                f"param default value {default.string_val} not in the enum list",
                path,
            )
    return errs


def validate_param_declarations(params: Sequence[ParamSpec], flags: FeatureFlags) -> FieldErrors:
    """Run every parameter declaration check."""
    return FieldErrors().also(
        validate_param_names(params),
        validate_param_uniqueness(params),
        validate_param_types(params),
        validate_param_enums(params, flags),
    )


def validate_object_param_properties(params: Sequence[ParamSpec]) -> FieldErrors:
    """Object parameters must declare their properties so keys can be resolved."""
    errs = FieldErrors()
    for param in params:
        if param.is_type(ParamType.OBJECT) and param.properties is None:
            errs.add(ErrorKind.MISSING_FIELD, MISSING_FIELD_MESSAGE, f"{param.name}.properties")
    return errs


def validate_result(result: StepResult) -> FieldErrors:
    """
    Check one task or step result declaration.

    Paths are relative to the result entry.
    """
    errs = FieldErrors()
    if not RESULT_NAME_PATTERN.match(result.name):
        errs.add(
            ErrorKind.NAMING_FORMAT,
            f'invalid key name "{result.name}"',
            "name",
            details=RESULT_NAME_DETAILS,
        )

    result_type = result.result_type
    if result_type not in ParamType.values():
        errs.add(
            ErrorKind.INVALID_VALUE,
            f"invalid value: {result_type}",
            "type",
            details="type must be string",
        )
        return errs

    if result_type == ParamType.OBJECT.value:
        if not result.properties:
            errs.add(ErrorKind.MISSING_FIELD, MISSING_FIELD_MESSAGE, f"{result.name}.properties")
        else:
            bad_keys = sorted(
                key
                for key, prop in result.properties.items()
                if (prop.type or ParamType.STRING.value) != ParamType.STRING.value
            )
            if bad_keys:
                errs.add(
                    ErrorKind.INVALID_VALUE,
                    f"The value type specified for these keys {_go_list(bad_keys)} is invalid, "
                    "the type must be string",
                    f"{result.name}.properties",
                )
    return errs


def validate_results(results: Sequence[StepResult]) -> FieldErrors:
    errs = FieldErrors()
    for idx, result in enumerate(results):
        errs.also(validate_result(result).via_field_index("results", idx))
    return errs


def _volume_mount_paths(steps: Sequence[Step], step_template: StepTemplate | None) -> set[str]:
    containers: list = list(steps)
    if step_template is not None:
        containers.append(step_template)
    return {clean_path(mount.mount_path) for container in containers for mount in container.volume_mounts}


def validate_workspace_declarations(
    workspaces: Sequence[WorkspaceDeclaration],
    steps: Sequence[Step] = (),
    step_template: StepTemplate | None = None,
) -> FieldErrors:
    """
    Check workspace names and mount paths for uniqueness.

    Mount paths are compared after cleaning, using the default
    ``/workspace/<name>`` when unset, against earlier workspaces and against
    every volume mount of the steps and the step template.
    """
    errs = FieldErrors()
    mount_paths = _volume_mount_paths(steps, step_template)
    names: set[str] = set()
    for idx, workspace in enumerate(workspaces):
        if workspace.name in names:
            errs.add(
                ErrorKind.DUPLICATE_DECLARATION,
                f'workspace name "{workspace.name}" must be unique',
                f"workspaces[{idx}].name",
            )
        names.add(workspace.name)

        mount_path = clean_path(workspace.effective_mount_path)
        if mount_path in mount_paths:
            errs.add(
                ErrorKind.DUPLICATE_DECLARATION,
                f'workspace mount path "{mount_path}" must be unique',
                f"workspaces[{idx}].mountpath",
            )
        mount_paths.add(mount_path)
    return errs


def validate_volumes(volumes: Sequence[Volume]) -> FieldErrors:
    errs = FieldErrors()
    names: set[str] = set()
    for idx, volume in enumerate(volumes):
        if volume.name in names:
            errs.add(
                ErrorKind.DUPLICATE_DECLARATION,
                f'multiple volumes with same name "{volume.name}"',
                f"volumes[{idx}].name",
            )
        names.add(volume.name)
    return errs


def _validate_workspace_usages(
    container: Step | Sidecar, feature: str, declared: set[str], flags: FeatureFlags
) -> FieldErrors:
    errs = FieldErrors()
    if not container.workspaces:
        return errs
    if not flags.allows(ApiFields.BETA):
        return errs.add(ErrorKind.FEATURE_GATE, feature_gate_message(feature, ApiFields.BETA, flags))
    for idx, usage in enumerate(container.workspaces):
        if usage.name not in declared:
            errs.add(
                ErrorKind.EXISTENCE,
                f'undefined workspace "{usage.name}"',
                f"workspaces[{idx}].name",
            )
    return errs


def validate_step(step: Step, declared_workspaces: set[str], flags: FeatureFlags) -> FieldErrors:
    """
    Check one step's own declarations.

    Covers onError values, CEL when-expressions, step workspaces and step
    results. Paths are relative to the step.
    """
    errs = FieldErrors()
    if step.on_error and not contains_reference(step.on_error) and step.on_error not in ON_ERROR_VALUES:
        errs.add(
            ErrorKind.INVALID_VALUE,
            f'invalid value: "{step.on_error}"',
            "onError",
            details='Task step onError must be either "continue" or "stopAndFail"',
        )

    for idx, when in enumerate(step.when):
        if when.cel and not flags.enable_cel_in_when_expression:
            errs.add(
                ErrorKind.FEATURE_GATE,
                "feature flag enable-cel-in-whenexpression should be set to true "
                f"to use CEL: {when.cel} in WhenExpression",
                f"when[{idx}]",
            )

    errs.also(_validate_workspace_usages(step, "step workspaces", declared_workspaces, flags))
    errs.also(validate_results(step.results))
    return errs


def validate_steps(
    steps: Sequence[Step],
    sidecars: Sequence[Sidecar],
    workspaces: Sequence[WorkspaceDeclaration],
    flags: FeatureFlags,
) -> FieldErrors:
    """
    Check the step list, step names and per-container declarations.

    Params:
        steps: Steps of the task
        sidecars: Sidecars of the task
        workspaces: Declared task workspaces
        flags: Feature flags in effect

    Returns:
        Errors rooted at the spec
    """
    errs = FieldErrors()
    if not steps:
        errs.add(ErrorKind.MISSING_FIELD, MISSING_FIELD_MESSAGE, "steps")

    declared = {w.name for w in workspaces}
    names: set[str] = set()
    for idx, step in enumerate(steps):
        if step.name:
            if step.name in names:
                errs.add(
                    ErrorKind.DUPLICATE_DECLARATION,
                    "expected exactly one, got both",
                    f"steps[{idx}].name",
                )
            names.add(step.name)
        errs.also(validate_step(step, declared, flags).via_field_index("steps", idx))

    for idx, sidecar in enumerate(sidecars):
        errs.also(
            _validate_workspace_usages(sidecar, "sidecar workspaces", declared, flags).via_field_index(
                "sidecars", idx
            )
        )
    return errs
