"""
Field-level validation errors and their aggregation.

Validation never stops at the first problem. Every check returns a
FieldErrors accumulator that callers merge with ``also`` and re-root with the
``via_*`` helpers, so a nested error raised for ``name`` inside the second
step surfaces as ``steps[1].name``.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from enum import Enum

# Messages shared by several validators
MISSING_FIELD_MESSAGE = "missing field(s)"
NON_EXISTENT_VARIABLE = "non-existent variable in {text}"
TYPE_INVALID_VARIABLE = "variable type invalid in {text}"
NOT_ISOLATED_VARIABLE = "variable is not properly isolated in {text}"


class ErrorKind(Enum):
    """Category of a validation error."""

    EXISTENCE = "existence"
    TYPE_MISMATCH = "type_mismatch"
    ISOLATION = "isolation"
    NAMING_FORMAT = "naming_format"
    DUPLICATE_DECLARATION = "duplicate_declaration"
    DEFAULT_TYPE_MISMATCH = "default_type_mismatch"
    ENUM = "enum"
    FEATURE_GATE = "feature_gate"
    INVALID_VALUE = "invalid_value"
    MISSING_FIELD = "missing_field"


def join_path(prefix: str, path: str) -> str:
    """
    Attach a path below a prefix segment.

    Index and key segments (starting with "[") attach without a dot.

    Params:
        prefix: Leading segment such as "steps" or "[0]"
        path: Existing path below the prefix, possibly empty

    Returns:
        Combined path
    """
    if not path:
        return prefix
    if path.startswith("["):
        return f"{prefix}{path}"
    return f"{prefix}.{path}"


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation problem.

    Params:
        kind: Category of the problem
        message: Human-readable message, rendered verbatim
        paths: Field paths the problem is attributed to
        details: Optional format hints shown below the message
    """

    kind: ErrorKind
    message: str
    paths: tuple[str, ...] = ()
    details: str = ""

    def via(self, prefix: str) -> "ValidationError":
        """Return a copy with every path nested under ``prefix``."""
        paths = self.paths or ("",)
        return replace(self, paths=tuple(join_path(prefix, p) for p in paths))

    def render(self) -> str:
        """Render as ``message: path, path`` with details on the next line."""
        text = self.message
        if self.paths:
            text = f"{text}: {', '.join(self.paths)}"
        if self.details:
            text = f"{text}\n{self.details}"
        return text


class FieldErrors:
    """
    Accumulator of validation errors across a whole spec.

    Instances are cheap to create and combine. An empty accumulator is falsy,
    so callers can write ``if errs:`` to test for failure.
    """

    def __init__(self, errors: Iterable[ValidationError] = ()):
        self._errors: list[ValidationError] = list(errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self._errors)

    def __repr__(self) -> str:
        return f"FieldErrors({self._errors!r})"

    def __str__(self) -> str:
        return self.error()

    @property
    def errors(self) -> tuple[ValidationError, ...]:
        return tuple(self._errors)

    def add(
        self, kind: ErrorKind, message: str, *paths: str, details: str = ""
    ) -> "FieldErrors":
        """
        Record a new error in place.

        Params:
            kind: Category of the problem
            message: Message text
            paths: Field paths relative to the current accumulator root
            details: Optional format hints

        Returns:
            This accumulator, for chaining
        """
        self._errors.append(
            ValidationError(kind=kind, message=message, paths=paths, details=details)
        )
        return self

    def also(self, *others: "FieldErrors | ValidationError | None") -> "FieldErrors":
        """Merge other accumulators or single errors into this one in place."""
        for other in others:
            if other is None:
                continue
            if isinstance(other, ValidationError):
                self._errors.append(other)
            else:
                self._errors.extend(other._errors)
        return self

    def via_field(self, *prefix: str) -> "FieldErrors":
        """
        Return a copy with every path nested under the given fields.

        ``via_field("spec", "steps")`` turns ``name`` into ``spec.steps.name``.
        """
        errors = self._errors
        for segment in reversed(prefix):
            errors = [error.via(segment) for error in errors]
        return FieldErrors(errors)

    def via_index(self, idx: int) -> "FieldErrors":
        return self.via_field(f"[{idx}]")

    def via_key(self, key: str) -> "FieldErrors":
        return self.via_field(f"[{key}]")

    def via_field_index(self, field: str, idx: int) -> "FieldErrors":
        return self.via_index(idx).via_field(field)

    def via_field_key(self, field: str, key: str) -> "FieldErrors":
        return self.via_key(key).via_field(field)

    def kinds(self) -> set[ErrorKind]:
        return {error.kind for error in self._errors}

    def messages(self) -> list[str]:
        return [error.message for error in self.merged()]

    def merged(self) -> list[ValidationError]:
        """
        Collapse errors sharing a message and details into one entry.

        Paths of collapsed errors are combined and sorted, and the entries are
        ordered by message then details, so the result is independent of the
        order in which checks ran.

        Returns:
            Deduplicated, deterministically ordered errors
        """
        grouped: dict[tuple[str, str], ValidationError] = {}
        for error in self._errors:
            key = (error.message, error.details)
            existing = grouped.get(key)
            if existing is None:
                grouped[key] = error
            else:
                grouped[key] = replace(existing, paths=existing.paths + error.paths)

        result = [
            replace(error, paths=tuple(sorted(set(error.paths))))
            for error in grouped.values()
        ]
        result.sort(key=lambda error: (error.message, error.details))
        return result

    def error(self) -> str:
        """Render all errors, one merged entry per line group."""
        return "\n".join(error.render() for error in self.merged())

    def raise_if_any(self) -> None:
        """
        Raise when any error was collected.

        Raises:
            SpecValidationError: Carrying this accumulator
        """
        if self._errors:
            from piperef.exceptions.core import SpecValidationError

            raise SpecValidationError(self)
