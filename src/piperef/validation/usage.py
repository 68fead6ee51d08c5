"""
Usage and isolation checks for variable references.

Every string leaf of a spec is scanned and each reference is resolved. The
resolved type is then checked against the position it is used in:

- String references may appear any number of times among literal text.
- A whole-array reference must be the entire value of a list element that
  accepts array expansion; anywhere else it is invalid or not isolated.
- A whole-object reference is never valid in a field.

Messages quote the complete leaf text, so every problem in one leaf shares
the leaf's path and a single message per error kind.
"""

import logging
from collections.abc import Iterable

from piperef.config import FeatureFlags
from piperef.core.path_utils import FieldLocation, quote
from piperef.core.types import ParamType
from piperef.exceptions import ErrorKind, FieldErrors
from piperef.exceptions.field_errors import (
    NON_EXISTENT_VARIABLE,
    NOT_ISOLATED_VARIABLE,
    TYPE_INVALID_VARIABLE,
)
from piperef.models import Step, StepActionSpec, TaskSpec
from piperef.parsing.scanner import Namespace, scan
from piperef.structure.fields import (
    STEP_ACTION_SPEC_FIELDS,
    STEP_FIELDS,
    TASK_SPEC_FIELDS,
    FieldSpec,
)
from piperef.structure.walker import Leaf, walk
from piperef.validation.resolver import Declarations, resolve

logger = logging.getLogger(__name__)

_MESSAGES = {
    ErrorKind.EXISTENCE: NON_EXISTENT_VARIABLE,
    ErrorKind.TYPE_MISMATCH: TYPE_INVALID_VARIABLE,
    ErrorKind.ISOLATION: NOT_ISOLATED_VARIABLE,
}


def check_leaf(
    leaf: Leaf,
    declarations: Declarations,
    namespaces: frozenset[Namespace] | None = None,
    kinds: frozenset[ErrorKind] | None = None,
    param_types: frozenset[ParamType] | None = None,
) -> FieldErrors:
    """
    Check every reference in one string leaf.

    Params:
        leaf: Field value and location
        declarations: Names visible at the field
        namespaces: Only check references in these namespaces; None checks all
        kinds: Only report these error kinds; None reports all
        param_types: Only check references to declared parameters of these
            types; undeclared parameters are always checked

    Returns:
        Errors found in the leaf, at most one per distinct message and details
    """
    errs = FieldErrors()
    references = scan(leaf.value)
    if not references:
        return errs

    found: list[tuple[ErrorKind, str]] = []
    for ref in references:
        if namespaces is not None and ref.namespace not in namespaces:
            continue
        resolution = resolve(ref, declarations)
        if resolution is None:
            continue
        param = resolution.param
        if param_types is not None and param is not None and not any(param.is_type(t) for t in param_types):
            continue
        if resolution.error is not None:
            found.append((resolution.error, resolution.details))
        elif resolution.value_type == ParamType.OBJECT:
            found.append((ErrorKind.TYPE_MISMATCH, ""))
        elif resolution.value_type == ParamType.ARRAY:
            if not leaf.accepts_array:
                found.append((ErrorKind.TYPE_MISMATCH, ""))
            elif leaf.value != ref.text:
                found.append((ErrorKind.ISOLATION, ""))

    text = quote(leaf.value)
    seen: set[tuple[ErrorKind, str]] = set()
    for kind, details in found:
        if (kind, details) in seen or (kinds is not None and kind not in kinds):
            continue
        seen.add((kind, details))
        errs.add(kind, _MESSAGES[kind].format(text=text), leaf.path, details=details)
    return errs


def check_leaves(
    leaves: Iterable[Leaf],
    declarations: Declarations,
    namespaces: frozenset[Namespace] | None = None,
    kinds: frozenset[ErrorKind] | None = None,
    param_types: frozenset[ParamType] | None = None,
) -> FieldErrors:
    errs = FieldErrors()
    for leaf in leaves:
        errs.also(check_leaf(leaf, declarations, namespaces, kinds, param_types))
    return errs


def _step_leaves(steps: Iterable[Step], flags: FeatureFlags | None) -> Iterable[tuple[Step, Iterable[Leaf]]]:
    for idx, step in enumerate(steps):
        yield step, walk(step, STEP_FIELDS, FieldLocation().index("steps", idx), flags)


def validate_step_references(
    steps: Iterable[Step],
    declarations: Declarations,
    flags: FeatureFlags | None = None,
    namespaces: frozenset[Namespace] | None = None,
    kinds: frozenset[ErrorKind] | None = None,
    param_types: frozenset[ParamType] | None = None,
) -> FieldErrors:
    """
    Check the references in a list of steps, each with its own step results.

    Paths are rooted at ``steps[i]``.
    """
    errs = FieldErrors()
    for step, leaves in _step_leaves(steps, flags):
        errs.also(check_leaves(leaves, declarations.for_step(step), namespaces, kinds, param_types))
    return errs


def validate_task_spec_references(
    spec: TaskSpec, declarations: Declarations, flags: FeatureFlags | None = None
) -> FieldErrors:
    """
    Check every reference in a task spec.

    Steps see their own step results. Step templates, sidecars, volumes and
    workspace mount paths see task-level declarations only.

    Params:
        spec: Task spec to check
        declarations: Task-level declarations
        flags: Feature flags gating tier-restricted fields

    Returns:
        Errors rooted at the spec
    """
    errs = validate_step_references(spec.steps, declarations, flags)
    outside_steps: tuple[FieldSpec, ...] = tuple(f for f in TASK_SPEC_FIELDS if f.attr != "steps")
    errs.also(check_leaves(walk(spec, outside_steps, flags=flags), declarations.for_step(None)))
    logger.debug("Checked references of task spec: %d error(s)", len(errs))
    return errs


def validate_step_action_references(
    spec: StepActionSpec, declarations: Declarations, flags: FeatureFlags | None = None
) -> FieldErrors:
    return check_leaves(walk(spec, STEP_ACTION_SPEC_FIELDS, flags=flags), declarations)
