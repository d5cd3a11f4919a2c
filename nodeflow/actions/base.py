"""Shared plumbing for action programs.

An action reads exactly one document from stdin, does its work and writes
exactly one document to stdout. Log records go to stderr so stdout stays a
single parseable document.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TextIO

from ..config import get_config
from ..orchestration.errors import FormatError
from ..orchestration.formats import InterchangeFormat, get_format
from ..utils.logger import configure_logger, get_logger

logger = get_logger(__name__)


class ActionFailure(Exception):
    """Failure reported to the caller as an output document."""

    def __init__(self, document: Dict[str, Any], exit_code: int = 1):
        super().__init__(document.get("error") or document.get("message"))
        self.document = document
        self.exit_code = exit_code


class ActionProgram(ABC):
    """Base class for an action program.

    Subclasses implement :meth:`handle` (and optionally
    :meth:`invalid_input`); :meth:`main` takes care of the protocol.
    """

    name: str = "action"

    def __init__(
        self,
        fmt: Optional[InterchangeFormat | str] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        self.format = get_format(fmt if fmt is not None else get_config().interchange_format)
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    @abstractmethod
    def handle(self, request: Any) -> Dict[str, Any]:
        """Process a parsed request and return the success document.

        Raises:
            ActionFailure: For failures reported through the output document
        """

    def invalid_input(self, raw: str, error: FormatError) -> ActionFailure:
        """Build the failure for input that does not parse."""
        return ActionFailure({"success": False, "message": "Failed to parse input", "error": str(error)})

    def emit(self, document: Dict[str, Any]) -> None:
        text = self.format.dumps(document)
        self.stdout.write(text if text.endswith("\n") else text + "\n")
        self.stdout.flush()

    def run(self) -> int:
        """Run one request/response exchange and return the exit code."""
        raw = self.stdin.read()
        try:
            request = self.format.loads(raw)
            output = self.handle(request)
        except FormatError as e:
            failure = self.invalid_input(raw, e)
            logger.warning(f"{self.name}: {failure}")
            self.emit(failure.document)
            return failure.exit_code
        except ActionFailure as failure:
            logger.warning(f"{self.name}: {failure}")
            self.emit(failure.document)
            return failure.exit_code

        self.emit(output)
        return 0

    @classmethod
    def main(cls) -> int:
        """Console script entry point."""
        try:
            config = get_config()
        except ValueError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return 2
        configure_logger(config.log_level, config.log_format, config.log_file)
        return cls(config.interchange_format).run()
