"""
Loading of Task, StepAction and feature-flag documents from YAML.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from piperef.config import FeatureFlags
from piperef.core.spec_model import SpecModel
from piperef.exceptions import SpecLoadError
from piperef.models import StepAction, Task, TaskSpec

logger = logging.getLogger(__name__)

TASK_KINDS = ("Task", "ClusterTask")
STEP_ACTION_KIND = "StepAction"


def load_document(path: str | Path) -> dict[str, Any]:
    """
    Read one YAML mapping from a file.

    Params:
        path: Path of the YAML file

    Returns:
        The parsed mapping

    Raises:
        SpecLoadError: If the file cannot be read, is not valid YAML, or does
            not hold a mapping
    """
    source = str(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SpecLoadError(source, e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise SpecLoadError(source, f"invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise SpecLoadError(source, "expected a YAML mapping")
    logger.debug("Loaded %s (kind=%s)", source, data.get("kind", "<none>"))
    return data


def _build(model: type[SpecModel], data: dict[str, Any], source: str) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise SpecLoadError(source, str(e)) from e


def parse_task(data: dict[str, Any], source: str = "<document>") -> Task:
    """
    Build a Task from a parsed document.

    A document without ``kind`` that holds task spec fields directly (``steps``,
    ``params``) is accepted as a bare spec.

    Raises:
        SpecLoadError: If the document is not a Task or does not match the model
    """
    kind = data.get("kind")
    if kind is None and "spec" not in data:
        return Task(spec=_build(TaskSpec, data, source))
    if kind is not None and kind not in TASK_KINDS:
        raise SpecLoadError(source, f"expected kind Task, got {kind}")
    return _build(Task, data, source)


def parse_step_action(data: dict[str, Any], source: str = "<document>") -> StepAction:
    kind = data.get("kind")
    if kind != STEP_ACTION_KIND:
        raise SpecLoadError(source, f"expected kind {STEP_ACTION_KIND}, got {kind}")
    return _build(StepAction, data, source)


def load_task(path: str | Path) -> Task:
    return parse_task(load_document(path), str(path))


def load_step_action(path: str | Path) -> StepAction:
    return parse_step_action(load_document(path), str(path))


def load_manifest(path: str | Path) -> Task | StepAction:
    """Load a Task or a StepAction, chosen by the document's ``kind``."""
    data = load_document(path)
    if data.get("kind") == STEP_ACTION_KIND:
        return parse_step_action(data, str(path))
    return parse_task(data, str(path))


def load_feature_flags(path: str | Path) -> FeatureFlags:
    """
    Load feature flags from a ConfigMap manifest or a plain key/value mapping.

    Params:
        path: YAML file holding a ConfigMap with a ``data`` section, or the
            section itself

    Returns:
        Parsed FeatureFlags

    Raises:
        SpecLoadError: If the file cannot be loaded
        ConfigurationError: If a flag has an invalid value
    """
    data = load_document(path)
    if data.get("kind") == "ConfigMap" or "data" in data:
        data = data.get("data") or {}
    return FeatureFlags.from_config_map({str(k): str(v) for k, v in data.items()})


def dump_yaml(model: SpecModel) -> str:
    """Serialize a spec model back to manifest YAML, keeping ``apiVersion`` and ``kind``."""
    data = model.model_dump(by_alias=True, exclude_defaults=True, mode="json")
    header = {
        alias: getattr(model, attr)
        for attr, alias in (("api_version", "apiVersion"), ("kind", "kind"))
        if hasattr(model, attr)
    }
    return yaml.safe_dump({**header, **data}, sort_keys=False)
