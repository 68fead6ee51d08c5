"""
Field tables describing where variable references may appear.

Every spec model that carries string fields has a table of FieldSpec entries.
Each entry names the model attribute, the label used in error paths and the
kind of field it is. The walker dispatches on the kind, so adding a new field
to traversal means adding one row here.
"""

from dataclasses import dataclass
from enum import Enum

from piperef.config import ApiFields


class FieldKind(Enum):
    """Shape of a traversed field."""

    SCALAR = "scalar"  # str
    LIST = "list"  # tuple[str, ...]
    MAP = "map"  # dict[str, str]
    STRUCT = "struct"  # nested model or None
    STRUCT_LIST = "struct_list"  # tuple of nested models


@dataclass(frozen=True)
class FieldSpec:
    """
    One traversable field of a spec model.

    Params:
        attr: Attribute name on the model
        label: Path segment used in error locations; empty places leaves of a
            nested model at the model's own location
        kind: Shape of the field
        table: Field table of the nested model for STRUCT and STRUCT_LIST
        accepts_array: Whether list elements may expand into several elements
        key_by: Attribute naming STRUCT_LIST entries by key instead of index
        min_api: Least permissive API tier required to traverse the field
    """

    attr: str
    label: str
    kind: FieldKind
    table: tuple["FieldSpec", ...] = ()
    accepts_array: bool = False
    key_by: str | None = None
    min_api: ApiFields | None = None


def scalar(attr: str, label: str) -> FieldSpec:
    return FieldSpec(attr, label, FieldKind.SCALAR)


def string_list(attr: str, label: str, accepts_array: bool = False) -> FieldSpec:
    return FieldSpec(attr, label, FieldKind.LIST, accepts_array=accepts_array)


KEY_SELECTOR_FIELDS = (
    scalar("name", "name"),
    scalar("key", "key"),
)

ENV_VAR_SOURCE_FIELDS = (
    FieldSpec("secret_key_ref", "secretKeyRef", FieldKind.STRUCT, KEY_SELECTOR_FIELDS),
    FieldSpec("config_map_key_ref", "configMapKeyRef", FieldKind.STRUCT, KEY_SELECTOR_FIELDS),
)

# Env entries are addressed by variable name and the value sits at the entry itself
ENV_VAR_FIELDS = (
    scalar("value", ""),
    FieldSpec("value_from", "valueFrom", FieldKind.STRUCT, ENV_VAR_SOURCE_FIELDS),
)

LOCAL_OBJECT_REFERENCE_FIELDS = (scalar("name", "name"),)

ENV_FROM_FIELDS = (
    scalar("prefix", "prefix"),
    FieldSpec("config_map_ref", "configMapRef", FieldKind.STRUCT, LOCAL_OBJECT_REFERENCE_FIELDS),
    FieldSpec("secret_ref", "secretRef", FieldKind.STRUCT, LOCAL_OBJECT_REFERENCE_FIELDS),
)

VOLUME_MOUNT_FIELDS = (
    scalar("name", "name"),
    scalar("mount_path", "mountPath"),
    scalar("sub_path", "subPath"),
)

WORKSPACE_USAGE_FIELDS = (
    scalar("name", "name"),
    scalar("mount_path", "mountPath"),
)

STDIO_FIELDS = (scalar("path", "path"),)

WHEN_EXPRESSION_FIELDS = (
    scalar("input", "input"),
    string_list("values", "values", accepts_array=True),
    scalar("cel", "cel"),
)

CONTAINER_FIELDS = (
    scalar("image", "image"),
    string_list("command", "command", accepts_array=True),
    string_list("args", "args", accepts_array=True),
    scalar("working_dir", "workingDir"),
    FieldSpec("env", "env", FieldKind.STRUCT_LIST, ENV_VAR_FIELDS, key_by="name"),
    FieldSpec("env_from", "envFrom", FieldKind.STRUCT_LIST, ENV_FROM_FIELDS),
    FieldSpec("volume_mounts", "volumeMount", FieldKind.STRUCT_LIST, VOLUME_MOUNT_FIELDS),
)

STEP_TEMPLATE_FIELDS = CONTAINER_FIELDS

STEP_FIELDS = (
    scalar("name", "name"),
    *CONTAINER_FIELDS,
    scalar("script", "script"),
    scalar("on_error", "onError"),
    FieldSpec("stdout_config", "stdoutConfig", FieldKind.STRUCT, STDIO_FIELDS),
    FieldSpec("stderr_config", "stderrConfig", FieldKind.STRUCT, STDIO_FIELDS),
    FieldSpec(
        "workspaces",
        "workspaces",
        FieldKind.STRUCT_LIST,
        WORKSPACE_USAGE_FIELDS,
        min_api=ApiFields.BETA,
    ),
    FieldSpec("when", "when", FieldKind.STRUCT_LIST, WHEN_EXPRESSION_FIELDS),
)

SIDECAR_FIELDS = (
    scalar("name", "name"),
    *CONTAINER_FIELDS,
    scalar("script", "script"),
    FieldSpec(
        "workspaces",
        "workspaces",
        FieldKind.STRUCT_LIST,
        WORKSPACE_USAGE_FIELDS,
        min_api=ApiFields.BETA,
    ),
)

KEY_TO_PATH_FIELDS = (
    scalar("key", "key"),
    scalar("path", "path"),
)

CONFIG_MAP_SOURCE_FIELDS = (
    scalar("name", "name"),
    FieldSpec("items", "items", FieldKind.STRUCT_LIST, KEY_TO_PATH_FIELDS),
)

SECRET_SOURCE_FIELDS = (
    scalar("secret_name", "secretName"),
    FieldSpec("items", "items", FieldKind.STRUCT_LIST, KEY_TO_PATH_FIELDS),
)

PROJECTION_FIELDS = (
    FieldSpec("config_map", "configMap", FieldKind.STRUCT, CONFIG_MAP_SOURCE_FIELDS),
    FieldSpec(
        "secret",
        "secret",
        FieldKind.STRUCT,
        (
            scalar("name", "name"),
            FieldSpec("items", "items", FieldKind.STRUCT_LIST, KEY_TO_PATH_FIELDS),
        ),
    ),
    FieldSpec(
        "service_account_token",
        "serviceAccountToken",
        FieldKind.STRUCT,
        (scalar("audience", "audience"), scalar("path", "path")),
    ),
)

VOLUME_FIELDS = (
    scalar("name", "name"),
    FieldSpec("config_map", "configMap", FieldKind.STRUCT, CONFIG_MAP_SOURCE_FIELDS),
    FieldSpec("secret", "secret", FieldKind.STRUCT, SECRET_SOURCE_FIELDS),
    FieldSpec(
        "persistent_volume_claim",
        "persistentVolumeClaim",
        FieldKind.STRUCT,
        (scalar("claim_name", "claimName"),),
    ),
    FieldSpec(
        "projected",
        "projected",
        FieldKind.STRUCT,
        (FieldSpec("sources", "sources", FieldKind.STRUCT_LIST, PROJECTION_FIELDS),),
    ),
    FieldSpec(
        "csi",
        "csi",
        FieldKind.STRUCT,
        (
            scalar("driver", "driver"),
            FieldSpec(
                "node_publish_secret_ref",
                "nodePublishSecretRef",
                FieldKind.STRUCT,
                LOCAL_OBJECT_REFERENCE_FIELDS,
            ),
            FieldSpec("volume_attributes", "volumeAttributes", FieldKind.MAP),
        ),
    ),
)

WORKSPACE_DECLARATION_FIELDS = (scalar("mount_path", "mountPath"),)

TASK_SPEC_FIELDS = (
    FieldSpec("steps", "steps", FieldKind.STRUCT_LIST, STEP_FIELDS),
    FieldSpec("step_template", "stepTemplate", FieldKind.STRUCT, STEP_TEMPLATE_FIELDS),
    FieldSpec("sidecars", "sidecars", FieldKind.STRUCT_LIST, SIDECAR_FIELDS),
    FieldSpec("volumes", "volumes", FieldKind.STRUCT_LIST, VOLUME_FIELDS),
    FieldSpec("workspaces", "workspaces", FieldKind.STRUCT_LIST, WORKSPACE_DECLARATION_FIELDS),
)

STEP_ACTION_SPEC_FIELDS = (
    scalar("image", "image"),
    string_list("command", "command", accepts_array=True),
    string_list("args", "args", accepts_array=True),
    scalar("script", "script"),
    scalar("working_dir", "workingDir"),
    FieldSpec("env", "env", FieldKind.STRUCT_LIST, ENV_VAR_FIELDS, key_by="name"),
    FieldSpec("volume_mounts", "volumeMount", FieldKind.STRUCT_LIST, VOLUME_MOUNT_FIELDS),
)
