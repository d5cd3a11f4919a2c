"""nodeflow: run workflows whose nodes are independent action programs."""

from .commands.cli_utils import __version__
from .orchestration import (
    NodeflowError,
    RunResult,
    RunStatus,
    TemplateResolver,
    WorkflowDefinition,
    WorkflowRunner,
    load_workflow,
    parse_workflow,
)

__all__ = [
    "__version__",
    "NodeflowError",
    "RunResult",
    "RunStatus",
    "TemplateResolver",
    "WorkflowDefinition",
    "WorkflowRunner",
    "load_workflow",
    "parse_workflow",
]
