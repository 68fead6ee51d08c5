"""
Variable reference scanning.

A reference is ``$(`` followed by dot-separated segments, an optional
trailing ``[*]`` or ``[N]`` index and ``)``. Segments may also be written in
bracket form, ``params["dotted.name"]`` or ``params['dotted.name']``, to name
parameters that contain dots. Only references whose leading segments name a
known namespace are returned; ``$(date)`` and other shell command
substitutions are left alone.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class Namespace(Enum):
    """Namespace a reference resolves in."""

    PARAMS = "params"
    RESULTS = "results"
    STEP_RESULTS = "step.results"
    CONTEXT = "context"
    CREDENTIALS = "credentials"
    WORKSPACES = "workspaces"


class IndexForm(Enum):
    """Trailing index attached to a reference."""

    NONE = "none"
    STAR = "star"
    LITERAL = "literal"


_SEGMENT = r"[^.\[\]()$\s\"']+"
_BRACKET_NAME = r"\[(?:\"[^\"()$]*\"|'[^'()$]*')\]"

REFERENCE_PATTERN = re.compile(
    r"\$\("
    rf"(?P<body>{_SEGMENT}(?:\.{_SEGMENT}|{_BRACKET_NAME})*)"
    r"(?:\[(?P<index>\*|\d+)\])?"
    r"\)"
)

_PART_PATTERN = re.compile(rf"\.?({_SEGMENT})|\[[\"']([^\"']*)[\"']\]")

# Leading segments of each namespace; longer prefixes are tried first
_NAMESPACE_PREFIXES = (
    (("step", "results"), Namespace.STEP_RESULTS),
    (("params",), Namespace.PARAMS),
    (("results",), Namespace.RESULTS),
    (("context",), Namespace.CONTEXT),
    (("credentials",), Namespace.CREDENTIALS),
    (("workspaces",), Namespace.WORKSPACES),
)


@dataclass(frozen=True)
class VariableReference:
    """
    A single ``$(...)`` reference found in a string leaf.

    Params:
        text: Exact original text of the reference, including ``$(`` and ``)``
        namespace: Namespace the reference resolves in
        key_path: Segments after the namespace, e.g. ("gitrepo", "url")
        index_form: Trailing index kind
        index: Literal index value for IndexForm.LITERAL
        start: Offset of the reference in the scanned text
        end: Offset just past the reference in the scanned text
    """

    text: str
    namespace: Namespace
    key_path: tuple[str, ...]
    index_form: IndexForm = IndexForm.NONE
    index: int | None = None
    start: int = 0
    end: int = 0

    @property
    def key(self) -> str:
        """Dotted form without the index, e.g. ``params.gitrepo.url``."""
        return ".".join((self.namespace.value, *self.key_path))

    @property
    def is_star(self) -> bool:
        return self.index_form is IndexForm.STAR

    @property
    def is_indexed(self) -> bool:
        return self.index_form is IndexForm.LITERAL

    def name_splits(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        """
        Yield ``(name, rest)`` splits of the key path, longest name first.

        Declared names may contain dots, so ``params.a.b.c`` may name the
        parameter ``a.b`` with key ``c`` or the parameter ``a`` with the
        remaining path ``("b", "c")``.
        """
        for size in range(len(self.key_path), 0, -1):
            yield ".".join(self.key_path[:size]), self.key_path[size:]


def _split_body(body: str) -> tuple[str, ...]:
    parts = []
    for match in _PART_PATTERN.finditer(body):
        parts.append(match.group(1) if match.group(1) is not None else match.group(2))
    return tuple(parts)


def _classify(parts: tuple[str, ...]) -> tuple[Namespace, tuple[str, ...]] | None:
    for prefix, namespace in _NAMESPACE_PREFIXES:
        if parts[: len(prefix)] == prefix:
            return namespace, parts[len(prefix) :]
    return None


def iter_references(text: str) -> Iterator[VariableReference]:
    """
    Yield every reference of a known namespace in ``text``, in order.

    Params:
        text: Field text to scan

    Returns:
        Iterator of VariableReference
    """
    for match in REFERENCE_PATTERN.finditer(text):
        classified = _classify(_split_body(match.group("body")))
        if classified is None:
            continue
        namespace, key_path = classified
        raw_index = match.group("index")
        if raw_index is None:
            form, index = IndexForm.NONE, None
        elif raw_index == "*":
            form, index = IndexForm.STAR, None
        else:
            form, index = IndexForm.LITERAL, int(raw_index)
        yield VariableReference(
            text=match.group(0),
            namespace=namespace,
            key_path=key_path,
            index_form=form,
            index=index,
            start=match.start(),
            end=match.end(),
        )


def scan(text: str) -> list[VariableReference]:
    """Return every reference of a known namespace in ``text``."""
    return list(iter_references(text))


def contains_reference(text: str) -> bool:
    return any(True for _ in iter_references(text))
