"""
Core type definitions for the piperef engine.

This module contains the value-type enumerations shared by the spec models,
the resolver and the substitution engine.
"""

from enum import Enum


class ParamType(str, Enum):
    """Declared or intrinsic type of a parameter, result or reference."""

    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


# Results share the parameter type alphabet
ResultType = ParamType

StringArray = tuple[str, ...]

StringMap = dict[str, str]
