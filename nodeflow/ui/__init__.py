"""User interface helpers for console output."""

from .console import ConsoleManager

__all__ = ["ConsoleManager"]
