"""
Container-shaped spec models: steps, sidecars, step templates and volumes.

Only the fields that may carry variable references, or that validation
inspects, are modelled. Unknown manifest keys are ignored.
"""

from piperef.core.spec_model import SpecModel
from piperef.models.params import Param
from piperef.models.results import StepResult
from piperef.models.workspaces import WorkspaceUsage


class LocalObjectReference(SpecModel):
    name: str = ""


class KeySelector(SpecModel):
    """Reference to one key of a Secret or ConfigMap."""

    name: str = ""
    key: str = ""
    optional: bool | None = None


class EnvVarSource(SpecModel):
    secret_key_ref: KeySelector | None = None
    config_map_key_ref: KeySelector | None = None


class EnvVar(SpecModel):
    name: str = ""
    value: str = ""
    value_from: EnvVarSource | None = None


class EnvFromSource(SpecModel):
    prefix: str = ""
    config_map_ref: LocalObjectReference | None = None
    secret_ref: LocalObjectReference | None = None


class VolumeMount(SpecModel):
    name: str = ""
    mount_path: str = ""
    sub_path: str = ""
    read_only: bool = False


class StdioConfig(SpecModel):
    """Redirect target for a step's stdout or stderr."""

    path: str = ""


class WhenExpression(SpecModel):
    """Guard deciding whether a step runs."""

    input: str = ""
    operator: str = ""
    values: tuple[str, ...] = ()
    cel: str = ""


class Ref(SpecModel):
    """Reference to a StepAction by name."""

    name: str


class ContainerFields(SpecModel):
    """Fields shared by steps, sidecars and step templates."""

    image: str = ""
    command: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    working_dir: str = ""
    env: tuple[EnvVar, ...] = ()
    env_from: tuple[EnvFromSource, ...] = ()
    volume_mounts: tuple[VolumeMount, ...] = ()


class StepTemplate(ContainerFields):
    """Defaults applied to every step of a task."""

    pass


class Step(ContainerFields):
    name: str = ""
    script: str = ""
    on_error: str = ""
    stdout_config: StdioConfig | None = None
    stderr_config: StdioConfig | None = None
    workspaces: tuple[WorkspaceUsage, ...] = ()
    results: tuple[StepResult, ...] = ()
    when: tuple[WhenExpression, ...] = ()
    ref: Ref | None = None
    params: tuple[Param, ...] = ()


class Sidecar(ContainerFields):
    name: str = ""
    script: str = ""
    workspaces: tuple[WorkspaceUsage, ...] = ()


class KeyToPath(SpecModel):
    key: str = ""
    path: str = ""


class ConfigMapVolumeSource(SpecModel):
    name: str = ""
    items: tuple[KeyToPath, ...] = ()


class SecretVolumeSource(SpecModel):
    secret_name: str = ""
    items: tuple[KeyToPath, ...] = ()


class PersistentVolumeClaimVolumeSource(SpecModel):
    claim_name: str = ""
    read_only: bool = False


class ConfigMapProjection(SpecModel):
    name: str = ""
    items: tuple[KeyToPath, ...] = ()


class SecretProjection(SpecModel):
    name: str = ""
    items: tuple[KeyToPath, ...] = ()


class ServiceAccountTokenProjection(SpecModel):
    audience: str = ""
    path: str = ""


class VolumeProjection(SpecModel):
    config_map: ConfigMapProjection | None = None
    secret: SecretProjection | None = None
    service_account_token: ServiceAccountTokenProjection | None = None


class ProjectedVolumeSource(SpecModel):
    sources: tuple[VolumeProjection, ...] = ()


class CSIVolumeSource(SpecModel):
    driver: str = ""
    node_publish_secret_ref: LocalObjectReference | None = None
    volume_attributes: dict[str, str] | None = None


class EmptyDirVolumeSource(SpecModel):
    medium: str = ""


class Volume(SpecModel):
    name: str = ""
    config_map: ConfigMapVolumeSource | None = None
    secret: SecretVolumeSource | None = None
    persistent_volume_claim: PersistentVolumeClaimVolumeSource | None = None
    projected: ProjectedVolumeSource | None = None
    csi: CSIVolumeSource | None = None
    empty_dir: EmptyDirVolumeSource | None = None
