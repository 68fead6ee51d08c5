"""
Shared test fixtures for the piperef test suite.
"""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner


@pytest.fixture
def runner():
    """Typer CLI runner."""
    return CliRunner()


@pytest.fixture
def write_yaml(tmp_path):
    """Write a document to a YAML file under tmp_path.

    Usage:
        def test_something(write_yaml):
            path = write_yaml("task.yaml", {"kind": "Task", "spec": {...}})
    """

    def _write(name: str, document) -> Path:
        path = tmp_path / name
        if isinstance(document, str):
            path.write_text(document, encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return path

    return _write
