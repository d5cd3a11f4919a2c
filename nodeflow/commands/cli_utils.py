"""Shared CLI utilities and argument parser."""
from __future__ import annotations

import argparse
import logging
from typing import Optional

from ..orchestration.formats import SUPPORTED_FORMATS

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    log_level: str = "INFO",
) -> int:
    """Setup logging configuration based on verbosity level.

    Args:
        verbose: If True, set to DEBUG level; otherwise ``log_level``
        log_file: Optional file receiving a copy of all package log records
        log_format: Format string for the log file
        log_level: Level name used when not verbose (LOG_LEVEL)

    Returns:
        The effective level
    """
    level = logging.DEBUG if verbose else getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)

    package_logger = logging.getLogger("nodeflow")
    package_logger.setLevel(level)

    if log_file and not any(isinstance(h, logging.FileHandler) for h in package_logger.handlers):
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(log_format or "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        package_logger.addHandler(file_handler)

    return level


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="nodeflow",
        description="Run declarative workflows whose nodes are independent action programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Validate a workflow file without running any action
  nodeflow validate workflow.json

  # Run a workflow
  nodeflow run workflow.json

  # Run with initial data available as workflow_data in templates
  nodeflow run workflow.json '{"name": "world"}'

  # Initial data from a file, YAML documents throughout
  nodeflow --format yaml run workflow.yaml --data-file data.yaml

  # Look up action programs in a specific directory
  nodeflow run workflow.json --actions-dir ./bin

Templates:
  Node inputs may reference earlier results while the workflow runs:
    {{ workflow_data.field }}          caller-supplied initial data
    {{ nodes.<id>.output.field }}      output of an earlier node
  Values are substituted as text into the serialized input document.

Environment:
  NODEFLOW_FORMAT       interchange format (json or yaml, default: json)
  NODEFLOW_ACTIONS_DIR  directory containing action programs
  LOG_FILE              also write log records to this file
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--json-output",
        action="store_true",
        help="Emit machine-readable JSON events to stderr",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=list(SUPPORTED_FORMATS),
        default=None,
        help="Interchange format for workflow, data and action documents (default: NODEFLOW_FORMAT or json)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    # Run subcommand
    run_parser = subparsers.add_parser(
        "run",
        help="Execute a workflow",
        description="Execute workflow nodes in order, stopping at the first failure",
    )
    run_parser.add_argument("workflow_file", help="Workflow file path")
    run_parser.add_argument(
        "initial_data",
        nargs="?",
        default=None,
        help="Initial data document exposed to templates as workflow_data",
    )
    run_parser.add_argument(
        "--data-file",
        "-d",
        default=None,
        help="Read the initial data document from a file",
    )
    run_parser.add_argument(
        "--actions-dir",
        "-a",
        default=None,
        help="Directory containing action programs (default: next to nodeflow)",
    )

    # Validate subcommand
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check a workflow file for structural problems",
        description="Report every structural problem in a workflow file without running it",
    )
    validate_parser.add_argument("workflow_file", help="Workflow file path")

    return parser
