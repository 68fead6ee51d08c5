"""
Type resolution of variable references.

Each reference is resolved against the declarations visible at the field it
appears in: task parameters, task results, the results of the enclosing
step, declared workspaces and the fixed context and credentials keys. The
outcome is either the type the reference evaluates to, or the kind of error
that prevents it from resolving.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from piperef.core.types import ParamType
from piperef.exceptions import ErrorKind
from piperef.models import ParamSpec, Step, StepActionSpec, TaskSpec
from piperef.parsing.scanner import IndexForm, Namespace, VariableReference

# Context variables provided for every task run
CONTEXT_KEYS = frozenset(
    {
        ("task", "name"),
        ("task", "retry-count"),
        ("taskRun", "name"),
        ("taskRun", "uid"),
        ("taskRun", "namespace"),
    }
)

WORKSPACE_ATTRIBUTES = frozenset({"path", "bound", "claim", "volume"})


def _first_by_name(params: Iterable[ParamSpec]) -> dict[str, ParamSpec]:
    by_name: dict[str, ParamSpec] = {}
    for param in params:
        by_name.setdefault(param.name, param)
    return by_name


@dataclass(frozen=True)
class Declarations:
    """
    Names a reference may resolve against.

    Params:
        params: Declared parameters by name
        results: Declared task result names; None accepts any name
        step_results: Result names declared by the enclosing step
        workspaces: Declared workspace names; None accepts any name
        propagated_params: Skip references to undeclared parameters, for specs
            embedded in a parent that supplies further parameters
    """

    params: Mapping[str, ParamSpec] = field(default_factory=dict)
    results: frozenset[str] | None = frozenset()
    step_results: frozenset[str] = frozenset()
    workspaces: frozenset[str] | None = frozenset()
    propagated_params: bool = False

    @classmethod
    def for_task_spec(cls, spec: TaskSpec, *, propagated_params: bool = False) -> "Declarations":
        return cls(
            params=_first_by_name(spec.params),
            results=frozenset(r.name for r in spec.results),
            workspaces=frozenset(w.name for w in spec.workspaces),
            propagated_params=propagated_params,
        )

    @classmethod
    def for_step_action_spec(cls, spec: StepActionSpec) -> "Declarations":
        # Task results and workspaces come from the task embedding the action
        return cls(
            params=_first_by_name(spec.params),
            results=None,
            step_results=frozenset(r.name for r in spec.results),
            workspaces=None,
        )

    @classmethod
    def for_params(cls, params: Iterable[ParamSpec]) -> "Declarations":
        return cls(params=_first_by_name(params), results=None, workspaces=None)

    def for_step(self, step: Step | None) -> "Declarations":
        """Return declarations seen from inside ``step``, including its own results."""
        names = frozenset(r.name for r in step.results) if step is not None else frozenset()
        return replace(self, step_results=names)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving one reference.

    Params:
        reference: The resolved reference
        value_type: Type the reference evaluates to when it resolved
        error: Kind of error when it did not
        details: Extra explanation attached to the error
        param: Declared parameter for parameter references
    """

    reference: VariableReference
    value_type: ParamType | None = None
    error: ErrorKind | None = None
    details: str = ""
    param: ParamSpec | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _effective_type(param: ParamSpec) -> ParamType:
    # Unknown declared types are reported by declaration checks; treat as string here
    try:
        return ParamType(param.param_type)
    except ValueError:
        return ParamType.STRING


def _object_keys(param: ParamSpec) -> set[str]:
    if param.properties is not None:
        return set(param.properties)
    if param.default is not None and param.default.type == ParamType.OBJECT:
        return set(param.default.object_val)
    return set()


def _resolve_param(ref: VariableReference, declarations: Declarations) -> Resolution | None:
    for name, rest in ref.name_splits():
        param = declarations.params.get(name)
        if param is not None:
            break
    else:
        if declarations.propagated_params:
            return None
        return Resolution(ref, error=ErrorKind.EXISTENCE)

    param_type = _effective_type(param)

    if rest:
        if param_type != ParamType.OBJECT or ref.index_form is not IndexForm.NONE:
            return Resolution(ref, error=ErrorKind.TYPE_MISMATCH, param=param)
        if len(rest) > 1 or rest[0] not in _object_keys(param):
            return Resolution(ref, error=ErrorKind.EXISTENCE, param=param)
        return Resolution(ref, ParamType.STRING, param=param)

    if ref.index_form is IndexForm.NONE:
        return Resolution(ref, param_type, param=param)

    if ref.index_form is IndexForm.STAR:
        if param_type == ParamType.STRING:
            return Resolution(ref, error=ErrorKind.TYPE_MISMATCH, param=param)
        # Star on an object stays object typed and is rejected at the usage site
        return Resolution(ref, param_type, param=param)

    if param_type != ParamType.ARRAY:
        return Resolution(ref, error=ErrorKind.TYPE_MISMATCH, param=param)
    default = param.default
    if default is not None and default.type == ParamType.ARRAY and ref.index >= len(default.array_val):
        return Resolution(
            ref,
            error=ErrorKind.EXISTENCE,
            details=(
                f"index {ref.index} is out of bounds for array param {param.name!r} "
                f"with {len(default.array_val)} default element(s)"
            ),
            param=param,
        )
    return Resolution(ref, ParamType.STRING, param=param)


def _resolve_path_reference(
    ref: VariableReference, names: frozenset[str] | None, attributes: frozenset[str]
) -> Resolution:
    path = ref.key_path
    if ref.index_form is not IndexForm.NONE:
        return Resolution(ref, error=ErrorKind.TYPE_MISMATCH)
    if len(path) != 2 or path[1] not in attributes:
        return Resolution(ref, error=ErrorKind.EXISTENCE)
    if names is not None and path[0] not in names:
        return Resolution(ref, error=ErrorKind.EXISTENCE)
    return Resolution(ref, ParamType.STRING)


def _resolve_fixed(ref: VariableReference, known: bool) -> Resolution:
    if ref.index_form is not IndexForm.NONE:
        return Resolution(ref, error=ErrorKind.TYPE_MISMATCH)
    if not known:
        return Resolution(ref, error=ErrorKind.EXISTENCE)
    return Resolution(ref, ParamType.STRING)


def resolve(ref: VariableReference, declarations: Declarations) -> Resolution | None:
    """
    Resolve a reference against the visible declarations.

    Params:
        ref: Reference found in a field
        declarations: Names visible at that field

    Returns:
        The resolution, or None when the reference is not checked (an
        undeclared parameter while parameters are propagated)
    """
    if ref.namespace is Namespace.PARAMS:
        return _resolve_param(ref, declarations)
    if ref.namespace is Namespace.RESULTS:
        return _resolve_path_reference(ref, declarations.results, frozenset({"path"}))
    if ref.namespace is Namespace.STEP_RESULTS:
        return _resolve_path_reference(ref, declarations.step_results, frozenset({"path"}))
    if ref.namespace is Namespace.WORKSPACES:
        return _resolve_path_reference(ref, declarations.workspaces, WORKSPACE_ATTRIBUTES)
    if ref.namespace is Namespace.CONTEXT:
        return _resolve_fixed(ref, ref.key_path in CONTEXT_KEYS)
    if ref.namespace is Namespace.CREDENTIALS:
        return _resolve_fixed(ref, ref.key_path == ("path",))
    raise ValueError(f"Unsupported namespace {ref.namespace!r}")
