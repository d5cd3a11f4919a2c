"""Global pytest fixtures and configuration.

This module provides shared fixtures for all tests including:
- Isolation of nodeflow environment variables and the config singleton
- Workflow file generation in JSON or YAML
- Stub action programs written as executable Python scripts
"""
from __future__ import annotations

import json
import logging
import stat
import sys
import textwrap
from pathlib import Path
from typing import Any, Callable, Optional

import pytest
import yaml

from nodeflow.config import reset_config

NODEFLOW_ENV_VARS = (
    "NODEFLOW_FORMAT",
    "NODEFLOW_ACTIONS_DIR",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
    "VERBOSE",
    "JSON_OUTPUT",
    "CLAUDE_API_KEY",
    "ANTHROPIC_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_nodeflow_env(monkeypatch, tmp_path):
    """Run every test without inherited nodeflow settings or a stray .env file."""
    for name in NODEFLOW_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()
    # The CLI attaches console handlers to the package logger and stops propagation
    package_logger = logging.getLogger("nodeflow")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def write_workflow(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a workflow document to a temporary file.

    Returns:
        Callable taking the document, an optional format and file name
    """

    def _write(document: Any, fmt: str = "json", name: Optional[str] = None) -> Path:
        path = tmp_path / (name or f"workflow.{fmt}")
        if fmt == "yaml":
            path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        else:
            path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def actions_dir(tmp_path: Path) -> Path:
    """Directory holding stub action programs."""
    path = tmp_path / "actions"
    path.mkdir()
    return path


@pytest.fixture
def make_action(actions_dir: Path) -> Callable[[str, str], Path]:
    """Factory writing an executable stub action.

    The body is Python source run by the current interpreter; it sees
    ``json``, ``sys`` and ``os`` already imported.
    """

    def _make(name: str, body: str) -> Path:
        script = actions_dir / name
        script.write_text(
            f"#!{sys.executable}\nimport json\nimport os\nimport sys\n"
            + textwrap.dedent(body),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def echo_stub(make_action) -> Path:
    """Action returning its input under ``received``."""
    return make_action(
        "echo-stub",
        """
        data = json.loads(sys.stdin.buffer.read().decode("utf-8"))
        json.dump({"received": data}, sys.stdout)
        """,
    )


@pytest.fixture
def sample_workflow() -> dict:
    """Two-node workflow where the second node consumes the first node's output."""
    return {
        "name": "sample",
        "description": "Sample two node workflow",
        "nodes": [
            {
                "id": "first",
                "type": "echo-stub",
                "inputs_from_workflow": {"greeting": "hello {{ workflow_data.name }}"},
            },
            {
                "id": "second",
                "type": "echo-stub",
                "inputs_from_workflow": {"previous": "{{ nodes.first.output.received.greeting }}"},
            },
        ],
    }
