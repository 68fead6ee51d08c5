"""
Core SpecModel base class for the piperef spec models.

This module contains the pydantic base class shared by every declarative
spec type (parameters, results, workspaces, containers, tasks).
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SpecModel(BaseModel):
    """
    Base class for all spec model types.

    Spec models are immutable once deserialized. Fields are addressed by their
    snake_case attribute names in Python and accept the camelCase keys used in
    YAML manifests (``workingDir``, ``volumeMounts``).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
