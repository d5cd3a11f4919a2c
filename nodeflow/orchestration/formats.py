"""Interchange format strategies shared by the parser, resolver and executor.

A run uses exactly one format for the workflow file, the initial data and
every document exchanged with an action. JSON and YAML differ only in how
they encode and decode text, so everything else is written once against
``InterchangeFormat``.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Type, Union

import yaml

from .errors import FormatError


class InterchangeFormat(ABC):
    """Encode, decode and render values for one document format."""

    name: str = ""
    extensions: tuple = ()

    @abstractmethod
    def dumps(self, value: Any) -> str:
        """Serialize a value to text.

        Raises:
            FormatError: If the value cannot be represented
        """

    @abstractmethod
    def loads(self, text: Union[str, bytes]) -> Any:
        """Parse text into a value.

        Raises:
            FormatError: If the text is not a valid document
        """

    def render(self, value: Any) -> str:
        """Render a referenced value as the literal text substituted into a document.

        Strings are inserted bare, numbers as numerals, booleans and null in
        their document spelling, containers as compact JSON (also valid YAML
        flow style).
        """
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, (dict, list, tuple)):
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
        return str(value)

    @staticmethod
    def _as_text(text: Union[str, bytes]) -> str:
        if isinstance(text, bytes):
            try:
                return text.decode("utf-8")
            except UnicodeDecodeError as e:
                raise FormatError(f"document is not valid UTF-8: {e}") from e
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class JsonFormat(InterchangeFormat):
    """JSON documents; key order is preserved as written."""

    name = "json"
    extensions = (".json",)

    def dumps(self, value: Any) -> str:
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise FormatError(f"cannot encode value as JSON: {e}") from e

    def loads(self, text: Union[str, bytes]) -> Any:
        source = self._as_text(text)
        try:
            return json.loads(source)
        except json.JSONDecodeError as e:
            raise FormatError(f"invalid JSON: {e.msg}", line=e.lineno, column=e.colno) from e


class YamlFormat(InterchangeFormat):
    """YAML documents restricted to the safe loader and dumper."""

    name = "yaml"
    extensions = (".yaml", ".yml")

    def dumps(self, value: Any) -> str:
        try:
            return yaml.safe_dump(
                value,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
                width=float("inf"),
            )
        except yaml.YAMLError as e:
            raise FormatError(f"cannot encode value as YAML: {e}") from e

    def loads(self, text: Union[str, bytes]) -> Any:
        source = self._as_text(text)
        try:
            return yaml.safe_load(source)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            problem = e.problem or e.context or "malformed document"
            if mark is not None:
                raise FormatError(
                    f"invalid YAML: {problem}", line=mark.line + 1, column=mark.column + 1
                ) from e
            raise FormatError(f"invalid YAML: {problem}") from e
        except yaml.YAMLError as e:
            raise FormatError(f"invalid YAML: {e}") from e


_FORMATS: Dict[str, Type[InterchangeFormat]] = {
    JsonFormat.name: JsonFormat,
    YamlFormat.name: YamlFormat,
}

SUPPORTED_FORMATS = tuple(_FORMATS)


def get_format(name: Union[str, InterchangeFormat]) -> InterchangeFormat:
    """Return the format strategy registered under ``name``.

    Args:
        name: Format name (``json`` or ``yaml``) or an existing strategy

    Returns:
        InterchangeFormat instance

    Raises:
        ValueError: If the name is not a known format
    """
    if isinstance(name, InterchangeFormat):
        return name
    key = str(name).strip().lower()
    if key == "yml":
        key = "yaml"
    if key not in _FORMATS:
        raise ValueError(
            f"Unknown interchange format: {name!r} (expected one of: {', '.join(SUPPORTED_FORMATS)})"
        )
    return _FORMATS[key]()
