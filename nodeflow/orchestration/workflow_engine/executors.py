"""
Node execution strategies.

A node executor turns a node's resolved input into the action's output or a
typed failure. The default strategy spawns the action as a separate process
next to the running program; the registry strategy calls in-process
handlers instead and gives up crash isolation in exchange for no per-node
process overhead.
"""

from __future__ import annotations

import copy
import logging
import os
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..errors import (
    ActionExecutionError,
    ActionReportedError,
    FormatError,
    OutputParseError,
)
from ..formats import InterchangeFormat, get_format
from .steps import NodeDefinition

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Any], Dict[str, Any]]


class NodeExecutor(ABC):
    """Abstract base class for node executors."""

    def __init__(self, fmt: Union[str, InterchangeFormat] = "json"):
        self.format = get_format(fmt)
        self._metrics = {
            "actions_invoked": 0,
            "actions_failed": 0,
        }

    @abstractmethod
    def execute(self, node: NodeDefinition, resolved_input: Any) -> Dict[str, Any]:
        """Run the action for one node.

        Args:
            node: Node being executed
            resolved_input: Node inputs after template resolution

        Returns:
            Parsed action output

        Raises:
            ActionExecutionError: Action could not run or exited non-zero
            OutputParseError: Action output is not a mapping in the active format
            ActionReportedError: Action output carries an ``error`` key
        """
        pass

    @staticmethod
    def _check_reported_error(output: Dict[str, Any]) -> Dict[str, Any]:
        """Raise if the action reported a logical failure in its payload."""
        if "error" in output:
            raise ActionReportedError(output["error"], output)
        return output

    def get_metrics(self) -> Dict[str, Any]:
        """Get executor metrics.

        Returns:
            Metrics dictionary
        """
        return self._metrics.copy()


class SubprocessNodeExecutor(NodeExecutor):
    """Run each node as a co-located action program speaking stdin/stdout documents."""

    def __init__(
        self,
        fmt: Union[str, InterchangeFormat] = "json",
        program_path: Optional[Union[str, Path]] = None,
        actions_dir: Optional[Union[str, Path]] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        """Initialize subprocess executor.

        Args:
            fmt: Interchange format for action input and output
            program_path: Path of the running program; actions are looked up
                as its siblings (defaults to ``sys.argv[0]``)
            actions_dir: Directory holding action programs, overrides
                ``program_path``
            env: Environment for action processes (defaults to inherited)
        """
        super().__init__(fmt)
        self.program_path = Path(os.path.abspath(program_path or sys.argv[0]))
        self.actions_dir = Path(actions_dir) if actions_dir else None
        self.env = dict(env) if env is not None else None

    def locate_action(self, node_type: str) -> Path:
        """Resolve the program implementing ``node_type``.

        Raises:
            ActionExecutionError: If the type is not a plain program name
        """
        separators = {os.sep} | ({os.altsep} if os.altsep else set())
        if (
            not node_type
            or not node_type.strip()
            or node_type in {".", ".."}
            or any(sep in node_type for sep in separators)
        ):
            raise ActionExecutionError(f"invalid action type: {node_type!r}")

        if self.actions_dir is not None:
            return self.actions_dir / node_type
        return self.program_path.with_name(node_type)

    def execute(self, node: NodeDefinition, resolved_input: Any) -> Dict[str, Any]:
        """Spawn the node's action, feed it the input and interpret its result."""
        action_path = self.locate_action(node.type)

        try:
            payload = self.format.dumps(resolved_input)
        except FormatError as e:
            raise ActionExecutionError(f"failed to encode input for {node.type}: {e}") from e

        logger.debug("Sending to action %s: %s", node.type, payload)
        self._metrics["actions_invoked"] += 1

        try:
            completed = subprocess.run(
                [str(action_path)],
                input=payload.encode("utf-8"),
                capture_output=True,
                env=self.env,
                check=False,
            )
        except OSError as e:
            self._metrics["actions_failed"] += 1
            raise ActionExecutionError(
                f"failed to start action {node.type} at {action_path}: {e}"
            ) from e

        # stdout is decoded strictly by the format; stderr is only a diagnostic
        raw_stdout = completed.stdout or b""
        stdout = raw_stdout.decode("utf-8", errors="replace")
        stderr = (completed.stderr or b"").decode("utf-8", errors="replace")

        if completed.returncode != 0:
            self._metrics["actions_failed"] += 1
            if stderr.strip():
                logger.warning("Action %s stderr output: %s", node.type, stderr.rstrip())

            # A mapping with an error key explains the failure better than the exit code
            reported = self._parse_mapping(raw_stdout)
            if reported is not None:
                self._check_reported_error(reported)

            if completed.returncode < 0:
                reason = f"terminated by signal {-completed.returncode}"
            else:
                reason = f"exited with status {completed.returncode}"
            raise ActionExecutionError(
                f"action {node.type} {reason}", stderr=stderr, returncode=completed.returncode
            )

        if stderr.strip():
            logger.info("Action %s stderr: %s", node.type, stderr.rstrip())

        try:
            output = self.format.loads(raw_stdout)
        except FormatError as e:
            self._metrics["actions_failed"] += 1
            raise OutputParseError(
                f"failed to parse action output as {self.format.name}: {e}", stdout=stdout
            ) from e

        if not isinstance(output, dict):
            self._metrics["actions_failed"] += 1
            raise OutputParseError(
                f"action output must be a {self.format.name} mapping, got {type(output).__name__}",
                stdout=stdout,
            )

        try:
            self._check_reported_error(output)
        except ActionReportedError:
            self._metrics["actions_failed"] += 1
            raise

        logger.debug("Action %s output: %s", node.type, stdout.rstrip())
        return output

    def _parse_mapping(self, stdout: bytes) -> Optional[Dict[str, Any]]:
        if not stdout.strip():
            return None
        try:
            parsed = self.format.loads(stdout)
        except FormatError:
            return None
        return parsed if isinstance(parsed, dict) else None


class RegistryNodeExecutor(NodeExecutor):
    """Dispatch node types to in-process handler callables.

    A handler that raises is reported as an ``ActionExecutionError`` for its
    node, but unlike a separate process it shares the runner's interpreter.
    """

    def __init__(
        self,
        handlers: Optional[Mapping[str, ActionHandler]] = None,
        fmt: Union[str, InterchangeFormat] = "json",
    ):
        super().__init__(fmt)
        self._handlers: Dict[str, ActionHandler] = dict(handlers or {})

    def register(self, node_type: str, handler: ActionHandler) -> None:
        """Register the handler implementing ``node_type``."""
        self._handlers[node_type] = handler

    def execute(self, node: NodeDefinition, resolved_input: Any) -> Dict[str, Any]:
        """Call the registered handler with a private copy of the input."""
        handler = self._handlers.get(node.type)
        if handler is None:
            raise ActionExecutionError(f"no handler registered for action type {node.type!r}")

        self._metrics["actions_invoked"] += 1
        try:
            output = handler(copy.deepcopy(resolved_input))
        except Exception as e:
            self._metrics["actions_failed"] += 1
            logger.warning("Handler for %s raised: %s", node.type, e)
            raise ActionExecutionError(f"action {node.type} failed: {e}") from e

        if not isinstance(output, dict):
            self._metrics["actions_failed"] += 1
            raise OutputParseError(
                f"action {node.type} returned {type(output).__name__}, expected a mapping"
            )

        try:
            self._check_reported_error(output)
        except ActionReportedError:
            self._metrics["actions_failed"] += 1
            raise

        return copy.deepcopy(output)
