"""
Tests for parameter declarations and values.
"""

import pytest

from piperef.core.types import ParamType
from piperef.models import ParamSpec, ParamValue, StepResult, TaskSpec, WorkspaceDeclaration, params_of_type


class TestParamValue:
    """Tests for building values from manifest literals."""

    def test_string_literal(self):
        value = ParamValue.of("main")
        assert value.type == ParamType.STRING
        assert value.literal == "main"

    def test_array_literal(self):
        value = ParamValue.of(["a", "b"])
        assert value.type == ParamType.ARRAY
        assert value.literal == ("a", "b")

    def test_object_literal(self):
        value = ParamValue.of({"url": "https://example.com"})
        assert value.type == ParamType.OBJECT
        assert value.literal == {"url": "https://example.com"}

    def test_generator_becomes_array(self):
        assert ParamValue.of(str(i) for i in range(2)).array_val == ("0", "1")

    @pytest.mark.parametrize(("raw", "expected"), [(3, "3"), (True, "true"), (1.5, "1.5")])
    def test_scalars_coerced_to_string(self, raw, expected):
        assert ParamValue.of(raw).string_val == expected

    def test_keyword_construction(self):
        """Test explicit construction is not mistaken for an object literal."""
        value = ParamValue(type=ParamType.ARRAY, array_val=("x",))
        assert value.type == ParamType.ARRAY
        assert value.array_val == ("x",)

    def test_of_returns_existing_value(self):
        value = ParamValue.of("x")
        assert ParamValue.of(value) is value

    def test_serializes_to_literal(self):
        spec = ParamSpec(name="flags", type="array", default=["-v"])
        assert spec.model_dump()["default"] == ["-v"]


class TestParamSpec:
    """Tests for effective parameter types."""

    def test_declared_type_wins(self):
        assert ParamSpec(name="p", type="array", default="x").param_type == "array"

    def test_type_inferred_from_default(self):
        assert ParamSpec(name="p", default=["a"]).param_type == "array"
        assert ParamSpec(name="p", default={"k": "v"}).param_type == "object"

    def test_type_inferred_from_properties(self):
        assert ParamSpec.model_validate({"name": "p", "properties": {"url": {}}}).param_type == "object"

    def test_defaults_to_string(self):
        assert ParamSpec(name="p").is_type(ParamType.STRING)

    def test_params_of_type(self):
        params = [ParamSpec(name="a", type="array"), ParamSpec(name="s")]
        assert [p.name for p in params_of_type(params, ParamType.ARRAY)] == ["a"]


class TestManifestAliases:
    """Tests for camelCase manifest keys."""

    def test_camel_case_keys(self):
        spec = TaskSpec.model_validate(
            {
                "steps": [{"name": "s", "workingDir": "/src", "volumeMounts": [{"name": "v", "mountPath": "/v"}]}],
                "stepTemplate": {"image": "alpine"},
            }
        )
        assert spec.steps[0].working_dir == "/src"
        assert spec.steps[0].volume_mounts[0].mount_path == "/v"
        assert spec.step_template.image == "alpine"

    def test_unknown_keys_ignored(self):
        spec = TaskSpec.model_validate({"steps": [{"name": "s", "resources": {"limits": {}}}]})
        assert spec.steps[0].name == "s"

    def test_models_are_frozen(self):
        spec = TaskSpec()
        with pytest.raises(Exception):
            spec.steps = ()


class TestDefaults:
    """Tests for derived defaults of results and workspaces."""

    def test_result_type(self):
        assert StepResult(name="r").result_type == "string"
        assert StepResult.model_validate({"name": "r", "properties": {"a": {}}}).result_type == "object"

    def test_workspace_default_mount_path(self):
        assert WorkspaceDeclaration(name="src").effective_mount_path == "/workspace/src"
        assert WorkspaceDeclaration(name="src", mount_path="/data").effective_mount_path == "/data"
