"""
Structural traversal of spec models.

``walk`` yields every non-empty string leaf of a model together with its
FieldLocation. ``transform`` performs the same descent but rebuilds the
model, replacing each leaf with the value returned by a callback. Both are
driven by the field tables in ``piperef.structure.fields``.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from piperef.config import FeatureFlags
from piperef.core.path_utils import FieldLocation
from piperef.structure.fields import FieldKind, FieldSpec


@dataclass(frozen=True)
class Leaf:
    """
    A string field value that may contain variable references.

    Params:
        value: Raw field text
        location: Path of the field within the walked spec
        accepts_array: True when the leaf is an element of a list field that
            may expand a whole-array reference into several elements
    """

    value: str
    location: FieldLocation
    accepts_array: bool = False

    @property
    def path(self) -> str:
        return str(self.location)


# Returns a replacement string, or a list of strings for an expanded element
Replacer = Callable[[Leaf], str | list[str]]


def _allowed(spec: FieldSpec, flags: FeatureFlags | None) -> bool:
    if spec.min_api is None or flags is None:
        return True
    return flags.allows(spec.min_api)


def _field_location(location: FieldLocation, spec: FieldSpec) -> FieldLocation:
    return location.child(spec.label) if spec.label else location


def _entry_location(location: FieldLocation, spec: FieldSpec, idx: int, item: Any) -> FieldLocation:
    key = getattr(item, spec.key_by) if spec.key_by is not None else ""
    if key:
        return location.key(spec.label, str(key))
    return location.index(spec.label, idx)


def walk(
    obj: Any,
    table: tuple[FieldSpec, ...],
    location: FieldLocation = FieldLocation(),
    flags: FeatureFlags | None = None,
) -> Iterator[Leaf]:
    """
    Yield every non-empty string leaf of a model.

    Leaves are produced in table order, list elements in index order and map
    entries in sorted key order, so repeated walks of the same model yield the
    same sequence.

    Params:
        obj: Spec model to traverse; None yields nothing
        table: Field table describing ``obj``
        location: Location of ``obj`` itself
        flags: Feature flags gating tier-restricted fields; None walks all

    Returns:
        Iterator of Leaf
    """
    if obj is None:
        return
    for spec in table:
        if not _allowed(spec, flags):
            continue
        value = getattr(obj, spec.attr)
        if spec.kind is FieldKind.SCALAR:
            if value:
                yield Leaf(value, _field_location(location, spec))
        elif spec.kind is FieldKind.LIST:
            for idx, item in enumerate(value or ()):
                if item:
                    yield Leaf(item, location.index(spec.label, idx), spec.accepts_array)
        elif spec.kind is FieldKind.MAP:
            for key in sorted(value or {}):
                if value[key]:
                    yield Leaf(value[key], location.key(spec.label, key))
        elif spec.kind is FieldKind.STRUCT:
            yield from walk(value, spec.table, _field_location(location, spec), flags)
        elif spec.kind is FieldKind.STRUCT_LIST:
            for idx, item in enumerate(value or ()):
                yield from walk(item, spec.table, _entry_location(location, spec, idx, item), flags)


def _replace_scalar(replacer: Replacer, leaf: Leaf) -> str:
    result = replacer(leaf)
    if not isinstance(result, str):
        raise TypeError(f"Expected a string replacement for {leaf.path}, got {type(result).__name__}")
    return result


def transform(
    obj: Any,
    table: tuple[FieldSpec, ...],
    replacer: Replacer,
    location: FieldLocation = FieldLocation(),
    flags: FeatureFlags | None = None,
) -> Any:
    """
    Rebuild a model with every string leaf replaced.

    List elements for which ``replacer`` returns a list are spliced in place,
    which is how a whole-array reference expands into sibling elements.
    Fields not described by the table are carried over unchanged.

    Params:
        obj: Spec model to rebuild; None is returned as is
        table: Field table describing ``obj``
        replacer: Callback producing the new value of each leaf
        location: Location of ``obj`` itself
        flags: Feature flags gating tier-restricted fields; None rebuilds all

    Returns:
        A new model of the same type

    Raises:
        TypeError: If ``replacer`` returns a list for a scalar leaf
    """
    if obj is None:
        return None
    update: dict[str, Any] = {}
    for spec in table:
        if not _allowed(spec, flags):
            continue
        value = getattr(obj, spec.attr)
        if spec.kind is FieldKind.SCALAR:
            if value:
                update[spec.attr] = _replace_scalar(replacer, Leaf(value, _field_location(location, spec)))
        elif spec.kind is FieldKind.LIST:
            items: list[str] = []
            for idx, item in enumerate(value or ()):
                if not item:
                    items.append(item)
                    continue
                leaf = Leaf(item, location.index(spec.label, idx), spec.accepts_array)
                result = replacer(leaf)
                if isinstance(result, str):
                    items.append(result)
                elif spec.accepts_array:
                    items.extend(result)
                else:
                    raise TypeError(f"Field {leaf.path} cannot expand into several elements")
            update[spec.attr] = tuple(items)
        elif spec.kind is FieldKind.MAP:
            if value:
                update[spec.attr] = {
                    key: _replace_scalar(replacer, Leaf(text, location.key(spec.label, key))) if text else text
                    for key, text in value.items()
                }
        elif spec.kind is FieldKind.STRUCT:
            update[spec.attr] = transform(value, spec.table, replacer, _field_location(location, spec), flags)
        elif spec.kind is FieldKind.STRUCT_LIST:
            update[spec.attr] = tuple(
                transform(item, spec.table, replacer, _entry_location(location, spec, idx, item), flags)
                for idx, item in enumerate(value or ())
            )
    return obj.model_copy(update=update)
