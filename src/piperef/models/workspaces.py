"""
Workspace declarations and usages.
"""

from piperef.core.spec_model import SpecModel

# Parent directory of default workspace mount paths
WORKSPACE_DIR = "/workspace"


class WorkspaceDeclaration(SpecModel):
    """A named shared filesystem mount declared by a task."""

    name: str = ""
    description: str | None = None
    mount_path: str = ""
    read_only: bool = False
    optional: bool = False

    @property
    def effective_mount_path(self) -> str:
        """The declared mount path, or ``/workspace/<name>`` when unset."""
        return self.mount_path or f"{WORKSPACE_DIR}/{self.name}"


class WorkspaceUsage(SpecModel):
    """A step or sidecar request to mount a declared workspace."""

    name: str
    mount_path: str = ""
