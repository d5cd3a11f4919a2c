"""Workflow orchestration: parsing, template resolution and node execution."""

from .errors import (
    ActionExecutionError,
    ActionReportedError,
    FormatError,
    NodeflowError,
    OutputParseError,
    ParseError,
    ResolutionError,
    WorkflowExecutionError,
)
from .formats import SUPPORTED_FORMATS, InterchangeFormat, JsonFormat, YamlFormat, get_format
from .workflow_engine import (
    ExecutionContext,
    NodeDefinition,
    NodeExecutor,
    NodeRecord,
    NodeResult,
    NodeStatus,
    RegistryNodeExecutor,
    RunResult,
    RunStatus,
    SubprocessNodeExecutor,
    WorkflowDefinition,
    WorkflowRunner,
)
from .templates import TemplateResolver
from .parser import load_workflow, parse_initial_data, parse_workflow
from .validation import validate_workflow_file, validate_workflow_structure

__all__ = [
    # Errors
    "ActionExecutionError",
    "ActionReportedError",
    "FormatError",
    "NodeflowError",
    "OutputParseError",
    "ParseError",
    "ResolutionError",
    "WorkflowExecutionError",
    # Formats
    "InterchangeFormat",
    "JsonFormat",
    "SUPPORTED_FORMATS",
    "YamlFormat",
    "get_format",
    # Models
    "ExecutionContext",
    "NodeDefinition",
    "NodeRecord",
    "NodeResult",
    "NodeStatus",
    "RunResult",
    "RunStatus",
    "WorkflowDefinition",
    # Engine
    "NodeExecutor",
    "RegistryNodeExecutor",
    "SubprocessNodeExecutor",
    "TemplateResolver",
    "WorkflowRunner",
    # Parsing and validation
    "load_workflow",
    "parse_initial_data",
    "parse_workflow",
    "validate_workflow_file",
    "validate_workflow_structure",
]
