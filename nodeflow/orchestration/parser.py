"""Workflow and initial-data document parsing."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from .errors import FormatError, ParseError
from .formats import InterchangeFormat, get_format
from .workflow_engine.steps import WorkflowDefinition

logger = logging.getLogger(__name__)


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "<document>"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_workflow(
    raw: Union[str, bytes], fmt: Union[str, InterchangeFormat] = "json"
) -> WorkflowDefinition:
    """Parse a workflow document.

    Args:
        raw: Document contents in the active interchange format
        fmt: Interchange format or its name

    Returns:
        WorkflowDefinition

    Raises:
        ParseError: If the document is malformed or structurally invalid
    """
    document_format = get_format(fmt)
    try:
        data = document_format.loads(raw)
    except FormatError as e:
        raise ParseError(f"failed to parse workflow: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(
            f"failed to parse workflow: expected a mapping at the top level, got {type(data).__name__}"
        )

    try:
        return WorkflowDefinition.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"invalid workflow: {_describe_validation_error(e)}") from e


def load_workflow(
    path: Union[str, Path], fmt: Union[str, InterchangeFormat] = "json"
) -> WorkflowDefinition:
    """Read and parse a workflow file.

    Raises:
        ParseError: If the file cannot be read or parsed
    """
    workflow_path = Path(path)
    try:
        raw = workflow_path.read_bytes()
    except OSError as e:
        raise ParseError(f"failed to read workflow file {workflow_path}: {e}") from e

    logger.debug("Loaded workflow file %s (%d bytes)", workflow_path, len(raw))
    return parse_workflow(raw, fmt)


def parse_initial_data(
    raw: Optional[Union[str, bytes]], fmt: Union[str, InterchangeFormat] = "json"
) -> Any:
    """Parse the caller-supplied initial data document.

    An absent or blank document yields an empty mapping.

    Raises:
        ParseError: If the document is malformed
    """
    if raw is None or not raw.strip():
        return {}

    try:
        data = get_format(fmt).loads(raw)
    except FormatError as e:
        raise ParseError(f"failed to parse initial data: {e}") from e
    return {} if data is None else data
