"""
Substitution of variable references with concrete values.

The substitution engine runs after validation. It walks the same fields as
the validator and replaces every reference with the value found in a
SubstitutionBinding. A whole-array reference that is the entire value of a
list element expands into one element per array item. Any reference that
cannot be replaced means the spec was not validated against the binding, and
raises SubstitutionInvariantError.
"""

import logging

from piperef.core.path_utils import FieldLocation
from piperef.core.types import ParamType
from piperef.exceptions import ErrorKind, FieldErrors, SubstitutionInvariantError
from piperef.execution.bindings import SubstitutionBinding, step_container_name
from piperef.models import StepActionSpec, TaskSpec
from piperef.parsing.scanner import IndexForm, Namespace, VariableReference, iter_references, scan
from piperef.structure.fields import STEP_ACTION_SPEC_FIELDS, TASK_SPEC_FIELDS
from piperef.structure.walker import Leaf, transform, walk

logger = logging.getLogger(__name__)


def _lookup_param(ref: VariableReference, binding: SubstitutionBinding, path: str) -> str | tuple[str, ...]:
    for name, rest in ref.name_splits():
        value = binding.param(name)
        if value is not None:
            break
    else:
        raise SubstitutionInvariantError(ref.text, path, "no value bound for parameter")

    if rest:
        if value.type != ParamType.OBJECT or len(rest) != 1 or ref.index_form is not IndexForm.NONE:
            raise SubstitutionInvariantError(ref.text, path, "keys can only be read from object values")
        if rest[0] not in value.object_val:
            raise SubstitutionInvariantError(ref.text, path, f"object value has no key {rest[0]!r}")
        return value.object_val[rest[0]]

    if value.type == ParamType.OBJECT:
        raise SubstitutionInvariantError(ref.text, path, "object values can only be referenced by key")
    if ref.index_form is IndexForm.NONE:
        return value.array_val if value.type == ParamType.ARRAY else value.string_val
    if value.type != ParamType.ARRAY:
        raise SubstitutionInvariantError(ref.text, path, "only array values can be indexed")
    if ref.index_form is IndexForm.STAR:
        return value.array_val
    if ref.index >= len(value.array_val):
        raise SubstitutionInvariantError(
            ref.text, path, f"index {ref.index} out of bounds for {len(value.array_val)} element(s)"
        )
    return value.array_val[ref.index]


def lookup(ref: VariableReference, binding: SubstitutionBinding, path: str = "") -> str | tuple[str, ...]:
    """
    Return the value bound to a reference.

    Params:
        ref: Reference to look up
        binding: Values available for substitution
        path: Field path, used in error messages

    Returns:
        A string, or a tuple of strings for a whole-array reference

    Raises:
        SubstitutionInvariantError: If nothing usable is bound to the reference
    """
    if ref.namespace is Namespace.PARAMS:
        return _lookup_param(ref, binding, path)
    if ref.index_form is not IndexForm.NONE:
        raise SubstitutionInvariantError(ref.text, path, "only array parameters can be indexed")
    value = binding.string(ref.key)
    if value is None:
        raise SubstitutionInvariantError(ref.text, path, "no value bound")
    return value


def substitute_leaf(leaf: Leaf, binding: SubstitutionBinding) -> str | list[str]:
    """
    Replace every reference in one leaf.

    Params:
        leaf: Field value and location
        binding: Values available for substitution

    Returns:
        The new text, or a list of elements when a whole-array reference fills
        a list element that accepts expansion

    Raises:
        SubstitutionInvariantError: If a reference cannot be replaced in place
    """
    references = scan(leaf.value)
    if not references:
        return leaf.value

    if len(references) == 1 and references[0].text == leaf.value:
        value = lookup(references[0], binding, leaf.path)
        if isinstance(value, tuple):
            if not leaf.accepts_array:
                raise SubstitutionInvariantError(
                    leaf.value, leaf.path, "array value in a field that does not accept arrays"
                )
            return list(value)
        return value

    pieces: list[str] = []
    last = 0
    for ref in references:
        value = lookup(ref, binding, leaf.path)
        if isinstance(value, tuple):
            raise SubstitutionInvariantError(ref.text, leaf.path, "array reference is not isolated")
        pieces.append(leaf.value[last : ref.start])
        pieces.append(value)
        last = ref.end
    pieces.append(leaf.value[last:])
    return "".join(pieces)


def _with_workspace_paths(spec: TaskSpec, binding: SubstitutionBinding) -> SubstitutionBinding:
    # Mount paths may hold param references
    paths: dict[str, str] = {}
    for idx, workspace in enumerate(spec.workspaces):
        key = f"workspaces.{workspace.name}.path"
        if binding.string(key) != workspace.effective_mount_path:
            continue
        location = FieldLocation().index("workspaces", idx).child("mountPath")
        paths[key] = substitute_leaf(Leaf(workspace.effective_mount_path, location), binding)
    return binding.with_strings(paths) if paths else binding


def substitute_task_spec(spec: TaskSpec, binding: SubstitutionBinding) -> TaskSpec:
    """
    Return a copy of a validated task spec with every reference replaced.

    Each step additionally resolves its own ``step.results`` paths, and
    ``workspaces.<name>.path`` resolves to the substituted mount path.

    Params:
        spec: Task spec that passed validation
        binding: Values for the run, usually from ``build_binding``

    Returns:
        Task spec of the same shape holding concrete values

    Raises:
        SubstitutionInvariantError: If a reference cannot be replaced
    """
    binding = _with_workspace_paths(spec, binding)
    step_bindings = {
        f"steps[{idx}]": binding.with_step(step_container_name(step.name, idx), step.results)
        for idx, step in enumerate(spec.steps)
    }

    def replace(leaf: Leaf) -> str | list[str]:
        segments = leaf.location.segments
        scoped = step_bindings.get(segments[0], binding) if segments else binding
        return substitute_leaf(leaf, scoped)

    substituted = transform(spec, TASK_SPEC_FIELDS, replace)
    logger.debug("Substituted task spec with %d step(s)", len(spec.steps))
    return substituted


def substitute_step_action_spec(
    spec: StepActionSpec, binding: SubstitutionBinding, container_name: str = ""
) -> StepActionSpec:
    """Return a copy of a validated StepAction spec with every reference replaced."""
    scoped = binding.with_step(container_name, spec.results) if container_name else binding
    return transform(spec, STEP_ACTION_SPEC_FIELDS, lambda leaf: substitute_leaf(leaf, scoped))


def validate_array_index_bounds(spec: TaskSpec, binding: SubstitutionBinding) -> FieldErrors:
    """
    Check literal array indices against the values bound for a run.

    Array lengths are only known once values are supplied, so this runs
    before substitution rather than during validation.

    Params:
        spec: Task spec about to be substituted
        binding: Values for the run

    Returns:
        A single existence error listing every out-of-bounds reference, or no errors
    """
    out_of_bounds: set[str] = set()
    for leaf in walk(spec, TASK_SPEC_FIELDS):
        for ref in iter_references(leaf.value):
            if ref.namespace is not Namespace.PARAMS or not ref.is_indexed:
                continue
            for name, rest in ref.name_splits():
                value = binding.param(name)
                if value is None or rest:
                    continue
                if value.type == ParamType.ARRAY and ref.index >= len(value.array_val):
                    out_of_bounds.add(ref.text)
                break

    errs = FieldErrors()
    if out_of_bounds:
        errs.add(
            ErrorKind.EXISTENCE,
            "non-existent param references:[" + " ".join(sorted(out_of_bounds)) + "]",
        )
    return errs
