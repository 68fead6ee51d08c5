"""
Tests for building substitution bindings.
"""

from piperef.core.types import ParamType
from piperef.execution import (
    CREDENTIALS_PATH,
    SubstitutionBinding,
    TaskRunContext,
    WorkspaceBinding,
    build_binding,
    step_container_name,
)
from piperef.models import Param, ParamValue, StepResult, TaskSpec

SPEC = TaskSpec.model_validate(
    {
        "params": [
            {"name": "revision", "default": "main"},
            {"name": "flags", "type": "array", "default": ["-v"]},
            {"name": "repo", "type": "object", "properties": {"url": {}, "commit": {}}, "default": {"url": "u", "commit": "c"}},
            {"name": "required"},
        ],
        "results": [{"name": "digest"}],
        "workspaces": [
            {"name": "source"},
            {"name": "cache", "mountPath": "/cache", "optional": True},
            {"name": "extra", "optional": True},
        ],
        "steps": [{"image": "alpine"}],
    }
)


class TestBuildBinding:
    """Tests for assembling values for one run."""

    def test_defaults_used(self):
        binding = build_binding(SPEC)
        assert binding.param("revision").string_val == "main"
        assert binding.param("flags").array_val == ("-v",)
        assert binding.param("required") is None

    def test_supplied_values_override_defaults(self):
        binding = build_binding(SPEC, {"revision": "dev", "flags": ["-a", "-b"], "required": "x"})
        assert binding.param("revision").string_val == "dev"
        assert binding.param("flags").array_val == ("-a", "-b")
        assert binding.param("required").string_val == "x"

    def test_object_values_merge_with_default(self):
        binding = build_binding(SPEC, {"repo": {"url": "https://example.com"}})
        assert binding.param("repo").object_val == {"url": "https://example.com", "commit": "c"}
        assert binding.param("repo").type == ParamType.OBJECT

    def test_param_entries(self):
        binding = build_binding(SPEC, [Param(name="revision", value=ParamValue.of("v1")), Param(name="unset")])
        assert binding.param("revision").string_val == "v1"
        assert binding.param("unset") is None

    def test_context(self):
        context = TaskRunContext(
            task_name="build",
            task_run_name="build-run-1",
            task_run_namespace="ci",
            task_run_uid="1234",
            retry_count=2,
        )
        binding = build_binding(SPEC, context=context)
        assert binding.string("context.task.name") == "build"
        assert binding.string("context.task.retry-count") == "2"
        assert binding.string("context.taskRun.name") == "build-run-1"
        assert binding.string("context.taskRun.namespace") == "ci"
        assert binding.string("context.taskRun.uid") == "1234"

    def test_results_and_credentials(self):
        binding = build_binding(SPEC)
        assert binding.string("results.digest.path") == "/tekton/results/digest"
        assert binding.string("credentials.path") == CREDENTIALS_PATH

    def test_workspaces(self):
        binding = build_binding(
            SPEC,
            workspaces={"source": WorkspaceBinding(claim="pvc-1", volume="ws-source"), "cache": WorkspaceBinding()},
        )
        assert binding.string("workspaces.source.path") == "/workspace/source"
        assert binding.string("workspaces.source.bound") == "true"
        assert binding.string("workspaces.source.claim") == "pvc-1"
        assert binding.string("workspaces.source.volume") == "ws-source"
        assert binding.string("workspaces.cache.path") == "/cache"
        assert binding.string("workspaces.extra.bound") == "false"
        assert binding.string("workspaces.extra.path") == ""


class TestSubstitutionBinding:
    """Tests for the binding lookup table."""

    def test_with_step(self):
        binding = SubstitutionBinding().with_step("step-build", [StepResult(name="out")])
        assert binding.string("step.results.out.path") == "/tekton/steps/step-build/results/out"

    def test_with_strings_is_a_copy(self):
        base = SubstitutionBinding(strings={"a": "1"})
        extended = base.with_strings({"b": "2"})
        assert base.string("b") is None
        assert extended.string("a") == "1"

    def test_container_names(self):
        assert step_container_name("build", 0) == "step-build"
        assert step_container_name("", 3) == "step-unnamed-3"
