"""
Tests for the piperef command line interface.
"""

import yaml

from piperef import __version__
from piperef.cli import EXIT_INVALID, EXIT_USAGE, app

TASK = {
    "apiVersion": "tekton.dev/v1",
    "kind": "Task",
    "metadata": {"name": "build"},
    "spec": {
        "params": [
            {"name": "revision", "default": "main"},
            {"name": "flags", "type": "array", "default": []},
        ],
        "workspaces": [{"name": "source"}],
        "steps": [
            {
                "name": "checkout",
                "image": "alpine/git",
                "workingDir": "$(workspaces.source.path)",
                "args": ["checkout", "$(params.revision)", "$(params.flags[*])"],
            }
        ],
    },
}

INVALID_TASK = {
    "kind": "Task",
    "metadata": {"name": "broken"},
    "spec": {
        "params": [{"name": "revision"}],
        "steps": [{"name": "checkout", "image": "alpine/git", "args": ["--flag=$(params.inexistent)"]}],
    },
}


class TestVersion:
    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"piperef {__version__}" in result.output


class TestValidateCommand:
    """Tests for `piperef validate`."""

    def test_valid_task(self, runner, write_yaml):
        result = runner.invoke(app, ["validate", str(write_yaml("task.yaml", TASK))])
        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_invalid_task(self, runner, write_yaml):
        result = runner.invoke(app, ["validate", str(write_yaml("task.yaml", INVALID_TASK))])
        assert result.exit_code == EXIT_INVALID
        assert 'non-existent variable in "--flag=$(params.inexistent)": spec.steps[0].args[0]' in result.output

    def test_propagated_params(self, runner, write_yaml):
        result = runner.invoke(
            app, ["validate", "--propagated-params", str(write_yaml("task.yaml", INVALID_TASK))]
        )
        assert result.exit_code == 0

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.yaml")])
        assert result.exit_code == EXIT_USAGE
        assert "Cannot load" in result.output

    def test_invalid_api_fields(self, runner, write_yaml):
        result = runner.invoke(
            app, ["validate", "--api-fields", "gamma", str(write_yaml("task.yaml", TASK))]
        )
        assert result.exit_code == EXIT_USAGE

    def test_step_action(self, runner, write_yaml):
        document = {
            "kind": "StepAction",
            "metadata": {"name": "greet"},
            "spec": {"image": "alpine", "args": ["$(params.missing)"]},
        }
        result = runner.invoke(app, ["validate", str(write_yaml("action.yaml", document))])
        assert result.exit_code == EXIT_INVALID
        assert "non-existent variable" in result.output


class TestSubstituteCommand:
    """Tests for `piperef substitute`."""

    def test_prints_substituted_task(self, runner, write_yaml):
        path = write_yaml("task.yaml", TASK)
        result = runner.invoke(
            app,
            ["substitute", str(path), "-p", "flags=[--depth, '1']", "-w", "source=my-pvc"],
        )
        assert result.exit_code == 0
        dumped = yaml.safe_load(result.output)
        step = dumped["spec"]["steps"][0]
        assert step["args"] == ["checkout", "main", "--depth", "1"]
        assert step["workingDir"] == "/workspace/source"

    def test_param_override(self, runner, write_yaml):
        path = write_yaml("task.yaml", TASK)
        result = runner.invoke(app, ["substitute", str(path), "-p", "revision=v1.2.0"])
        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["spec"]["steps"][0]["args"] == ["checkout", "v1.2.0"]

    def test_missing_param_values(self, runner, write_yaml):
        document = {
            "kind": "Task",
            "spec": {"params": [{"name": "name"}], "steps": [{"image": "alpine", "args": ["$(params.name)"]}]},
        }
        result = runner.invoke(app, ["substitute", str(write_yaml("task.yaml", document))])
        assert result.exit_code == EXIT_INVALID
        assert "missing values for parameters: name" in result.output

    def test_malformed_param(self, runner, write_yaml):
        result = runner.invoke(app, ["substitute", str(write_yaml("task.yaml", TASK)), "-p", "novalue"])
        assert result.exit_code == EXIT_USAGE

    def test_invalid_task_not_substituted(self, runner, write_yaml):
        result = runner.invoke(app, ["substitute", str(write_yaml("task.yaml", INVALID_TASK)), "-p", "revision=x"])
        assert result.exit_code == EXIT_INVALID
