"""
Parameter declarations and values.

ParamSpec declares a named, typed input of a Task or StepAction. ParamValue
is the tagged union holding a concrete string, array or object value, used
both for declared defaults and for values supplied at run time.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import model_serializer, model_validator

from piperef.core.spec_model import SpecModel
from piperef.core.types import ParamType


def _as_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ParamValue(SpecModel):
    """
    A concrete parameter value: exactly one of string, array or object.

    Built from the literal found in a manifest, so ``"main"``,
    ``["a", "b"]`` and ``{"url": "..."}`` all validate into a ParamValue of
    the matching type. Non-string YAML scalars are coerced to strings.
    """

    type: ParamType
    string_val: str = ""
    array_val: tuple[str, ...] = ()
    object_val: dict[str, str] = {}

    @model_validator(mode="before")
    @classmethod
    def _from_literal(cls, data: Any) -> Any:
        if isinstance(data, ParamValue):
            return data
        # Keyword construction, e.g. ParamValue(type=ParamType.ARRAY, array_val=...)
        if isinstance(data, Mapping) and isinstance(data.get("type"), ParamType):
            return data
        if isinstance(data, (str, int, float, bool)):
            return {"type": ParamType.STRING, "string_val": _as_string(data)}
        if isinstance(data, (list, tuple)):
            return {
                "type": ParamType.ARRAY,
                "array_val": tuple(_as_string(item) for item in data),
            }
        if isinstance(data, Mapping):
            return {
                "type": ParamType.OBJECT,
                "object_val": {str(k): _as_string(v) for k, v in data.items()},
            }
        return data

    @model_serializer(mode="plain")
    def _to_literal(self) -> str | list[str] | dict[str, str]:
        if self.type == ParamType.ARRAY:
            return list(self.array_val)
        if self.type == ParamType.OBJECT:
            return dict(self.object_val)
        return self.string_val

    @classmethod
    def of(cls, literal: "str | Iterable[str] | Mapping[str, str] | ParamValue") -> "ParamValue":
        """Build a value from a literal string, sequence or mapping."""
        if isinstance(literal, ParamValue):
            return literal
        if not isinstance(literal, (str, int, float, bool, Mapping, list, tuple)):
            literal = list(literal)
        return cls.model_validate(literal)

    @property
    def literal(self) -> str | tuple[str, ...] | dict[str, str]:
        """The held value in its natural Python shape."""
        if self.type == ParamType.ARRAY:
            return self.array_val
        if self.type == ParamType.OBJECT:
            return dict(self.object_val)
        return self.string_val


class PropertySpec(SpecModel):
    """Declared type of one key of an object parameter or result."""

    type: str | None = None


class ParamSpec(SpecModel):
    """
    Declaration of a parameter.

    ``type`` keeps the raw declared text so an unknown type can be reported.
    Use ``param_type`` for the effective type after defaulting.
    """

    name: str
    type: str | None = None
    description: str | None = None
    properties: dict[str, PropertySpec] | None = None
    default: ParamValue | None = None
    enum: tuple[str, ...] | None = None

    @property
    def param_type(self) -> str:
        """
        Effective type of the parameter.

        The declared type wins; otherwise the type is inferred from the
        default value, then from the presence of properties, then string.
        """
        if self.type:
            return self.type
        if self.default is not None:
            return self.default.type.value
        if self.properties is not None:
            return ParamType.OBJECT.value
        return ParamType.STRING.value

    def is_type(self, param_type: ParamType) -> bool:
        return self.param_type == param_type.value


class Param(SpecModel):
    """A named value passed to a referenced StepAction."""

    name: str
    value: ParamValue | None = None


def params_of_type(params: Iterable[ParamSpec], param_type: ParamType) -> list[ParamSpec]:
    """Return the declared parameters whose effective type is ``param_type``."""
    return [p for p in params if p.is_type(param_type)]
