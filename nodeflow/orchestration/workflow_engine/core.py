"""
Sequential workflow runner.

This module contains the runner that drives a workflow through
``IDLE -> RUNNING -> COMPLETED | FAILED``: nodes are resolved and executed
one at a time in definition order, each successful output is recorded in
the execution context, and the first failure ends the run.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from ..errors import NodeflowError, ParseError, WorkflowExecutionError
from ..formats import InterchangeFormat, get_format
from ..templates import TemplateResolver
from .executors import NodeExecutor, SubprocessNodeExecutor
from .steps import (
    ExecutionContext,
    NodeRecord,
    RunResult,
    RunStatus,
    WorkflowDefinition,
)

logger = logging.getLogger(__name__)

RunCallback = Callable[[str, RunResult, Optional[NodeRecord]], None]

EVENTS = (
    "workflow_started",
    "node_started",
    "node_completed",
    "node_failed",
    "workflow_completed",
    "workflow_failed",
)


class WorkflowRunner:
    """Execute workflow nodes strictly in order, stopping at the first failure."""

    def __init__(
        self,
        executor: Optional[NodeExecutor] = None,
        resolver: Optional[TemplateResolver] = None,
        fmt: Union[str, InterchangeFormat] = "json",
    ):
        """Initialize workflow runner.

        Args:
            executor: Node execution strategy (defaults to subprocess actions)
            resolver: Template resolver (defaults to one for ``fmt``)
            fmt: Interchange format shared by resolver and default executor
        """
        self.format = get_format(fmt)
        self.resolver = resolver or TemplateResolver(self.format)
        self.executor = executor or SubprocessNodeExecutor(self.format)
        self.status = RunStatus.IDLE
        self._callbacks: Dict[str, List[RunCallback]] = {}

    def add_callback(self, event: str, callback: RunCallback) -> None:
        """Add event callback.

        Args:
            event: One of ``EVENTS``
            callback: Called as ``callback(event, run_result, node_record)``
        """
        if event not in EVENTS:
            raise ValueError(f"Unknown runner event: {event}")
        self._callbacks.setdefault(event, []).append(callback)

    def run(self, definition: WorkflowDefinition, workflow_data: Any = None) -> RunResult:
        """Run a workflow to completion or first failure.

        Args:
            definition: Parsed workflow definition
            workflow_data: Caller-supplied initial data (defaults to ``{}``)

        Returns:
            RunResult holding the final status and execution context
        """
        context = ExecutionContext(workflow_data={} if workflow_data is None else workflow_data)
        result = RunResult(
            workflow_name=definition.name,
            status=RunStatus.RUNNING,
            context=context,
            start_time=datetime.now(),
        )
        self.status = RunStatus.RUNNING

        logger.info("Starting workflow execution: %s", definition.name)
        if definition.description:
            logger.info("Description: %s", definition.description)
        self._notify("workflow_started", result)

        try:
            self._check_definition(definition)

            for node in definition.nodes:
                record = NodeRecord(node_id=node.id, node_type=node.type)
                result.records.append(record)
                record.start()
                logger.info("Executing node: %s (%s)", node.id, node.type)
                self._notify("node_started", result, record)

                try:
                    resolved_input = self.resolver.resolve(node.inputs, context)
                    output = self.executor.execute(node, resolved_input)
                except Exception as e:
                    record.complete(error=e)
                    logger.error("Node %s execution failed: %s", node.id, e)
                    self._notify("node_failed", result, record)
                    raise WorkflowExecutionError(node.id, e) from e

                context.record(node.id, output)
                record.complete()
                logger.info("Node %s completed successfully", node.id)
                self._notify("node_completed", result, record)

            result.status = RunStatus.COMPLETED

        except WorkflowExecutionError as e:
            result.status = RunStatus.FAILED
            result.failed_node = e.node_id
            result.error = e
        except NodeflowError as e:
            result.status = RunStatus.FAILED
            result.error = e
        finally:
            result.end_time = datetime.now()
            self.status = result.status

        if result.status == RunStatus.COMPLETED:
            logger.info(
                "Workflow %s completed successfully in %.2fs",
                definition.name,
                result.get_duration() or 0.0,
            )
            self._notify("workflow_completed", result)
        else:
            logger.error("Workflow execution failed: %s", result.error)
            self._notify("workflow_failed", result)

        return result

    def _check_definition(self, definition: WorkflowDefinition) -> None:
        """Re-check invariants the parser normally guarantees."""
        if not definition.nodes:
            raise ParseError("workflow has no nodes")
        seen = set()
        for node in definition.nodes:
            if node.id in seen:
                raise ParseError(f"duplicate node ID: {node.id}")
            seen.add(node.id)

    def _notify(self, event: str, result: RunResult, record: Optional[NodeRecord] = None) -> None:
        for callback in self._callbacks.get(event, []):
            try:
                callback(event, result, record)
            except Exception as e:
                logger.error(f"Callback error: {e}")
