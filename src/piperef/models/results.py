"""
Result declarations for tasks and steps.
"""

from piperef.core.spec_model import SpecModel
from piperef.core.types import ResultType
from piperef.models.params import ParamValue, PropertySpec

# Directory where task result files are written inside a step container
RESULTS_DIR = "/tekton/results"

# Directory holding per-step result files
STEPS_DIR = "/tekton/steps"


class StepResult(SpecModel):
    """Output slot a single step may populate."""

    name: str
    type: str | None = None
    description: str | None = None
    properties: dict[str, PropertySpec] | None = None

    @property
    def result_type(self) -> str:
        """Effective type: the declared type, else object when properties are set, else string."""
        if self.type:
            return self.type
        if self.properties is not None:
            return ResultType.OBJECT.value
        return ResultType.STRING.value

    @property
    def path(self) -> str:
        return f"{RESULTS_DIR}/{self.name}"


class TaskResult(StepResult):
    """Output slot of a task, optionally backed by a step result value."""

    value: ParamValue | None = None


def step_result_path(step_name: str, result_name: str) -> str:
    """
    Path of a step result file.

    Params:
        step_name: Container name of the step, e.g. "step-build"
        result_name: Declared step result name

    Returns:
        Absolute path of the result file
    """
    return f"{STEPS_DIR}/{step_name}/results/{result_name}"
