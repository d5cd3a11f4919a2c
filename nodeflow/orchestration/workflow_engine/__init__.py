"""
Workflow execution engine.

This package contains the engine components:
- steps: Workflow models, execution context and run records
- executors: Node execution strategies
- core: Sequential runner state machine
"""

from __future__ import annotations

from .steps import (
    ExecutionContext,
    NodeDefinition,
    NodeRecord,
    NodeResult,
    NodeStatus,
    RunResult,
    RunStatus,
    WorkflowDefinition,
)

from .core import EVENTS, WorkflowRunner

from .executors import NodeExecutor, RegistryNodeExecutor, SubprocessNodeExecutor

__all__ = [
    # Models
    "ExecutionContext",
    "NodeDefinition",
    "NodeRecord",
    "NodeResult",
    "NodeStatus",
    "RunResult",
    "RunStatus",
    "WorkflowDefinition",

    # Runner
    "EVENTS",
    "WorkflowRunner",

    # Executors
    "NodeExecutor",
    "RegistryNodeExecutor",
    "SubprocessNodeExecutor",
]
