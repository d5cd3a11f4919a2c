"""Error taxonomy for workflow parsing, resolution and node execution.

Every failure that can abort a run derives from ``NodeflowError`` so command
handlers can catch a single type and turn it into an exit code.
"""
from __future__ import annotations

from typing import Any, Optional


class NodeflowError(Exception):
    """Base class for all orchestration errors."""


class FormatError(NodeflowError):
    """Raised by an interchange format when a document cannot be decoded."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            location = f"line {line}" if column is None else f"line {line}, column {column}"
            message = f"{message} ({location})"
        super().__init__(message)


class ParseError(NodeflowError):
    """Malformed workflow or initial-data document."""


class ResolutionError(NodeflowError):
    """Template syntax error, undefined reference or re-parse failure."""


class ActionExecutionError(NodeflowError):
    """Action could not be spawned or exited with a non-zero status."""

    def __init__(self, message: str, stderr: str = "", returncode: Optional[int] = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class OutputParseError(NodeflowError):
    """Action standard output is not a document in the active format."""

    def __init__(self, message: str, stdout: str = ""):
        super().__init__(message)
        self.stdout = stdout


class ActionReportedError(NodeflowError):
    """Action output carries a top-level ``error`` key."""

    def __init__(self, error: Any, output: Optional[dict] = None):
        super().__init__(f"action returned error: {error}")
        self.error = error
        self.output = output or {}


class WorkflowExecutionError(NodeflowError):
    """A node failed; wraps the triggering error with the node id."""

    def __init__(self, node_id: str, cause: Exception):
        super().__init__(f"error executing node {node_id}: {cause}")
        self.node_id = node_id
        self.cause = cause
