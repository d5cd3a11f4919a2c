"""
Workflow node models and run state.

This module defines the workflow definition models, the execution context
accumulated during a run and the records produced for each node.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RunStatus(Enum):
    """Workflow run status."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class NodeStatus(Enum):
    """Individual node execution status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class NodeDefinition(BaseModel):
    """One workflow step delegated to an action by type name."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: str
    inputs: Any = Field(default_factory=dict, alias="inputs_from_workflow")


class WorkflowDefinition(BaseModel):
    """Workflow definition with validation."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    workflow_data_schema: Optional[Dict[str, str]] = None
    nodes: List[NodeDefinition]

    @field_validator("nodes")
    @classmethod
    def validate_nodes(cls, v):
        """Validate node definitions."""
        if not v:
            raise ValueError("Workflow must have at least one node")

        node_ids = set()
        for node in v:
            if node.id in node_ids:
                raise ValueError(f"Duplicate node ID: {node.id}")
            node_ids.add(node.id)

        return v

    def node_ids(self) -> List[str]:
        """Node ids in definition order."""
        return [node.id for node in self.nodes]


@dataclass(frozen=True)
class NodeResult:
    """Output of a node that completed successfully."""

    output: Dict[str, Any]


@dataclass
class ExecutionContext:
    """Data visible to template resolution during a run.

    ``workflow_data`` is copied on creation and never modified afterwards.
    ``nodes`` only grows: each node id is recorded at most once.
    """

    workflow_data: Any = field(default_factory=dict)
    nodes: Dict[str, NodeResult] = field(default_factory=dict)

    def __post_init__(self):
        self.workflow_data = copy.deepcopy(self.workflow_data)

    def record(self, node_id: str, output: Dict[str, Any]) -> NodeResult:
        """Store the output of a completed node.

        Args:
            node_id: Id of the node that completed
            output: Parsed action output

        Returns:
            The stored NodeResult

        Raises:
            ValueError: If a result is already recorded for the node
        """
        if node_id in self.nodes:
            raise ValueError(f"Result for node {node_id} already recorded")
        result = NodeResult(output=copy.deepcopy(output))
        self.nodes[node_id] = result
        return result

    def template_namespace(self) -> Dict[str, Any]:
        """Names exposed to template expressions."""
        return {
            "workflow_data": self.workflow_data,
            "nodes": {
                node_id: {"output": result.output, "error": ""}
                for node_id, result in self.nodes.items()
            },
        }


@dataclass
class NodeRecord:
    """Bookkeeping for one node within a run."""

    node_id: str
    node_type: str
    status: NodeStatus = NodeStatus.PENDING
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[float] = None
    error: Optional[Exception] = None

    def start(self):
        """Mark node as running."""
        self.status = NodeStatus.RUNNING
        self.start_time = datetime.now()

    def complete(self, error: Optional[Exception] = None):
        """Mark node as complete."""
        self.end_time = datetime.now()
        if self.start_time:
            self.duration = (self.end_time - self.start_time).total_seconds()
        if error:
            self.status = NodeStatus.FAILED
            self.error = error
        else:
            self.status = NodeStatus.COMPLETED


@dataclass
class RunResult:
    """Final result of a workflow run."""

    workflow_name: str
    status: RunStatus
    context: ExecutionContext
    records: List[NodeRecord] = field(default_factory=list)
    failed_node: Optional[str] = None
    error: Optional[Exception] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.COMPLETED

    def get_duration(self) -> Optional[float]:
        """Get run duration in seconds."""
        if not self.start_time:
            return None
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()
