"""Workflow run command implementation."""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Optional

from ..config import Config, get_config
from ..orchestration.errors import NodeflowError, ParseError
from ..orchestration.parser import load_workflow, parse_initial_data
from ..orchestration.workflow_engine import EVENTS, SubprocessNodeExecutor, WorkflowRunner
from ..ui.console import ConsoleManager

logger = logging.getLogger(__name__)


def _read_initial_data(args: argparse.Namespace) -> Optional[str]:
    """Return the initial data document from the command line or a file."""
    if args.initial_data is not None and args.data_file:
        raise ParseError("pass initial data either inline or with --data-file, not both")
    if args.data_file:
        data_path = Path(args.data_file)
        try:
            return data_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ParseError(f"failed to read initial data file {data_path}: {e}") from e
    return args.initial_data


def run_command(
    args: argparse.Namespace,
    console_manager: Optional[ConsoleManager] = None,
    config: Optional[Config] = None,
) -> int:
    """Handle the run subcommand.

    Args:
        args: Command line arguments
        console_manager: Optional console manager for rich output
        config: Configuration (defaults to the environment-backed singleton)

    Returns:
        Exit code (0 when every node completed, non-zero otherwise)
    """
    config = config or get_config()
    fmt = args.format or config.interchange_format
    actions_dir = args.actions_dir or config.actions_dir

    try:
        definition = load_workflow(args.workflow_file, fmt)
        workflow_data = parse_initial_data(_read_initial_data(args), fmt)
    except NodeflowError as e:
        logger.error(f"Error parsing workflow input: {e}")
        return 1

    # Actions read NODEFLOW_FORMAT to agree with the runner on the interchange format
    action_env = {**os.environ, "NODEFLOW_FORMAT": fmt}
    executor = SubprocessNodeExecutor(fmt, actions_dir=actions_dir, env=action_env)
    runner = WorkflowRunner(executor=executor, fmt=fmt)

    if console_manager:
        for event in EVENTS:
            runner.add_callback(event, console_manager.on_runner_event)
        console_manager.print_stage(f"Workflow: {definition.name}", "starting")

    result = runner.run(definition, workflow_data)

    if console_manager:
        console_manager.print_summary(result)

    if result.succeeded:
        if console_manager:
            console_manager.print_stage(f"Workflow: {definition.name}", "complete")
        logger.info("Workflow completed successfully")
        return 0

    if console_manager:
        console_manager.print_stage(f"Workflow: {definition.name}", "failed")
    return 1
