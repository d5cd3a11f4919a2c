"""Workflow validate command implementation."""
from __future__ import annotations

import argparse
import logging
from typing import Optional

from ..config import Config, get_config
from ..orchestration.validation import validate_workflow_file
from ..ui.console import ConsoleManager

logger = logging.getLogger(__name__)


def validate_command(
    args: argparse.Namespace,
    console_manager: Optional[ConsoleManager] = None,
    config: Optional[Config] = None,
) -> int:
    """Handle the validate subcommand.

    Args:
        args: Command line arguments
        console_manager: Optional console manager for rich output
        config: Configuration (defaults to the environment-backed singleton)

    Returns:
        Exit code (0 when the workflow is well-formed, 1 otherwise)
    """
    config = config or get_config()
    fmt = args.format or config.interchange_format

    errors = validate_workflow_file(args.workflow_file, fmt)

    if console_manager:
        console_manager.print_validation(args.workflow_file, errors)
    else:
        for error in errors:
            logger.error(error)

    if errors:
        logger.debug("Workflow %s has %d violation(s)", args.workflow_file, len(errors))
        return 1
    return 0
