"""Command line entry point for the nodeflow workflow orchestrator."""
from __future__ import annotations

import logging
import sys
from typing import List, Optional

from .commands import create_parser, run_command, setup_logging, validate_command
from .config import get_config
from .ui.console import ConsoleManager

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = get_config()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    verbose = args.verbose or config.verbose
    level = setup_logging(verbose, config.log_file, config.log_format, config.log_level)

    console_manager = ConsoleManager(
        verbose=verbose,
        json_output=args.json_output or config.json_output,
        level=level,
    )
    console_manager.setup_logging(logging.getLogger("nodeflow"))

    try:
        if args.command == "run":
            return run_command(args, console_manager, config)
        elif args.command == "validate":
            return validate_command(args, console_manager, config)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        logger.error("Operation cancelled by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
