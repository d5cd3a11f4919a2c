"""Command modules for the CLI."""

from .cli_utils import __version__, create_parser, setup_logging
from .run_command import run_command
from .validate_command import validate_command

__all__ = [
    "__version__",
    "create_parser",
    "run_command",
    "setup_logging",
    "validate_command",
]
