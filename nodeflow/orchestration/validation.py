"""Structural validation of workflow documents.

Validation never runs an action. It inspects the raw document so that every
violation can be reported at once instead of stopping at the first one.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Union

from .errors import FormatError
from .formats import InterchangeFormat, get_format

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "description", "nodes")
REQUIRED_NODE_FIELDS = ("id", "type", "inputs_from_workflow")


def validate_workflow_structure(document: Any) -> List[str]:
    """Check a parsed workflow document for structural problems.

    Args:
        document: Parsed workflow document

    Returns:
        One message per violation; empty when the workflow is well-formed
    """
    if not isinstance(document, dict):
        return [f"Workflow must be a mapping, got {type(document).__name__}"]

    errors: List[str] = []

    for field_name in REQUIRED_FIELDS:
        if field_name not in document:
            errors.append(f"Missing required field: {field_name}")

    if "nodes" not in document:
        return errors

    nodes = document["nodes"]
    if not isinstance(nodes, list):
        errors.append("Nodes must be an array")
        return errors

    if not nodes:
        errors.append("Nodes array cannot be empty")

    node_ids = set()
    for index, node in enumerate(nodes):
        if not isinstance(node, dict):
            errors.append(f"Node {index} is not a valid object")
            continue

        for field_name in REQUIRED_NODE_FIELDS:
            if field_name not in node:
                errors.append(f"Node {index} missing required field: {field_name}")

        node_id = node.get("id")
        if isinstance(node_id, str):
            if not node_id.strip():
                errors.append(f"Node {index} has empty ID")
            elif node_id in node_ids:
                errors.append(f"Duplicate node ID: {node_id}")
            node_ids.add(node_id)
        elif "id" in node:
            errors.append(f"Node {index} ID must be a string")

        node_type = node.get("type")
        if isinstance(node_type, str):
            if not node_type.strip():
                errors.append(f"Node {index} has empty type")
        elif "type" in node:
            errors.append(f"Node {index} type must be a string")

    return errors


def validate_workflow_file(
    path: Union[str, Path], fmt: Union[str, InterchangeFormat] = "json"
) -> List[str]:
    """Read, parse and structurally validate a workflow file.

    A file that cannot be read or parsed is reported as a single violation.
    """
    document_format = get_format(fmt)
    workflow_path = Path(path)
    try:
        raw = workflow_path.read_bytes()
    except OSError as e:
        return [f"Error reading workflow file: {e}"]

    try:
        document = document_format.loads(raw)
    except FormatError as e:
        return [f"Invalid {document_format.name.upper()} syntax: {e}"]

    errors = validate_workflow_structure(document)
    logger.debug("Validated %s: %d violation(s)", workflow_path, len(errors))
    return errors
