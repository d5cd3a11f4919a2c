"""Console management with Rich integration.

This module provides a ConsoleManager that adapts output to:
- Rich-rendered color output when attached to a terminal
- JSON-only output for machine-readable logs (CI/CD)
- Plain-text fallback for non-TTY environments

All output goes to stderr; stdout is left free for callers.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..orchestration.workflow_engine.steps import NodeRecord, RunResult


class ConsoleManager:
    """Manages console output with Rich integration."""

    def __init__(self, verbose: bool = False, json_output: bool = False, level: Optional[int] = None):
        self.verbose = verbose
        self.level = logging.DEBUG if verbose else (level if level is not None else logging.INFO)
        self.json_output = json_output
        self._json_max_field_length = 200
        self.is_tty = sys.stderr.isatty()

        if self.json_output:
            self.console = None
        else:
            self.console = Console(stderr=True)

    def setup_logging(self, logger: logging.Logger) -> None:
        """Configure logging with Rich handler or JSON/plain formatter.

        Adds a handler and sets logger level from `verbose` or the configured level.
        """

        # Prevent duplicate handlers if called multiple times
        def _has_handler_of_type(h_type):
            return any(type(h) is h_type for h in logger.handlers)

        if self.json_output:
            if not _has_handler_of_type(logging.StreamHandler):
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(_JsonLogFormatter())
                logger.addHandler(handler)
        else:
            if not _has_handler_of_type(RichHandler):
                handler = RichHandler(
                    console=self.console,
                    show_time=True,
                    show_path=self.verbose,
                    rich_tracebacks=True,
                )
                logger.addHandler(handler)
        logger.setLevel(self.level)
        logger.propagate = False

    def print_stage(self, stage: str, status: str = "starting") -> None:
        """Print stage information with appropriate renderer."""
        if self.json_output:
            self._emit_json(
                {
                    "timestamp": self._get_timestamp(),
                    "stage": self._sanitize_json_field(stage),
                    "status": self._sanitize_json_field(status),
                }
            )
        elif self.console and self.is_tty:
            status_color = {
                "starting": "blue",
                "complete": "green",
                "failed": "red",
                "warning": "yellow",
            }.get(status, "white")

            self.console.print(Panel(f"[bold]{stage}[/bold]", style=status_color, padding=(0, 1)))
        else:
            print(f"[{status.upper()}] {stage}", file=sys.stderr)

    def on_runner_event(self, event: str, result: RunResult, record: Optional[NodeRecord]) -> None:
        """Runner callback emitting one machine-readable event per transition.

        Only active in JSON mode; interactive output relies on log lines.
        """
        if not self.json_output:
            return
        payload: dict[str, Any] = {
            "timestamp": self._get_timestamp(),
            "type": "event",
            "event": event,
            "workflow": self._sanitize_json_field(result.workflow_name),
        }
        if record is not None:
            payload["node"] = self._sanitize_json_field(record.node_id)
            payload["node_type"] = self._sanitize_json_field(record.node_type)
            payload["status"] = record.status.value
            if record.duration is not None:
                payload["duration"] = round(record.duration, 3)
            if record.error is not None:
                payload["error"] = self._sanitize_json_field(str(record.error))
        self._emit_json(payload)

    def print_summary(self, result: RunResult) -> None:
        """Print run summary table or JSON/plain fallback."""
        if self.json_output:
            self._emit_json(
                {
                    "timestamp": self._get_timestamp(),
                    "type": "summary",
                    "workflow": self._sanitize_json_field(result.workflow_name),
                    "status": result.status.value,
                    "failed_node": result.failed_node,
                    "duration": round(result.get_duration() or 0.0, 3),
                    "nodes": [
                        {
                            "id": self._sanitize_json_field(record.node_id),
                            "type": self._sanitize_json_field(record.node_type),
                            "status": record.status.value,
                            "duration": round(record.duration or 0.0, 3),
                        }
                        for record in result.records
                    ],
                }
            )
        elif self.console and self.is_tty:
            table = Table(title=f"Workflow Summary: {result.workflow_name}")
            table.add_column("Node", style="cyan")
            table.add_column("Type")
            table.add_column("Duration", style="green")
            table.add_column("Status", style="bold")

            for record in result.records:
                status_style = "green" if record.status.value == "completed" else "red"
                table.add_row(
                    record.node_id,
                    record.node_type,
                    f"{record.duration or 0.0:.2f}s",
                    f"[{status_style}]{record.status.value}[/{status_style}]",
                )

            self.console.print(table)
        else:
            print(f"Workflow Summary: {result.workflow_name}", file=sys.stderr)
            for record in result.records:
                print(
                    f"  {record.node_id} ({record.node_type}): {record.status.value} "
                    f"({record.duration or 0.0:.2f}s)",
                    file=sys.stderr,
                )

    def print_validation(self, workflow_file: str, errors: List[str]) -> None:
        """Report validation outcome for a workflow file."""
        if self.json_output:
            self._emit_json(
                {
                    "timestamp": self._get_timestamp(),
                    "type": "validation",
                    "file": self._sanitize_json_field(workflow_file),
                    "valid": not errors,
                    "errors": [self._sanitize_json_field(e) for e in errors],
                }
            )
            return

        if errors:
            self._print("Workflow validation failed:", style="red")
            for error in errors:
                self._print(f"  - {error}")
        else:
            self._print(f"Workflow file '{workflow_file}' is valid", style="green")

    def _print(self, message: str, style: Optional[str] = None) -> None:
        if self.console and self.is_tty:
            self.console.print(message, style=style, markup=False, highlight=False)
        else:
            print(message, file=sys.stderr)

    def _emit_json(self, payload: dict[str, Any]) -> None:
        print(json.dumps(payload, default=str), file=sys.stderr)

    def _get_timestamp(self) -> str:
        """Get ISO timestamp for JSON output."""
        return datetime.now().isoformat()

    def _sanitize_json_field(self, value: Any) -> str:
        """Sanitize field values for JSON output."""
        if not isinstance(value, str):
            value = str(value)
        # Remove control characters and limit length
        sanitized = "".join(char for char in value if ord(char) >= 32)
        return sanitized[: self._json_max_field_length]


class _JsonLogFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(
            {
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "type": "log",
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            },
            default=str,
        )
