"""Template resolution for node inputs.

A node's inputs are resolved as one document: the raw inputs are serialized
in the active interchange format, the whole text is evaluated as a single
template against the execution context, and the result is parsed back.
Substitution is therefore textual. A referenced number lands as a bare
numeral and a referenced string as bare text, which only yields a valid
document when the serialized input already supplies the quoting around it.
Existing workflow files rely on this behavior, so it is kept as is.

Both ``{{ workflow_data.x }}`` and the dotted-root spelling
``{{.workflow_data.x}}`` found in older workflow files are accepted.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Union

from jinja2 import StrictUndefined
from jinja2.exceptions import SecurityError, TemplateError, TemplateSyntaxError, UndefinedError
from jinja2.sandbox import ImmutableSandboxedEnvironment

from .errors import FormatError, ResolutionError
from .formats import InterchangeFormat, get_format

if TYPE_CHECKING:
    from .workflow_engine.steps import ExecutionContext

logger = logging.getLogger(__name__)

_DOTTED_ROOT = re.compile(r"(\{\{-?\s*)\.(?=[A-Za-z_])")

# Only {{ }} expressions are template syntax; block and comment tags use
# delimiters that serialized documents cannot contain (NUL is always escaped).
_INERT_DELIMITERS = {
    "block_start_string": "\x00{%",
    "block_end_string": "%}\x00",
    "comment_start_string": "\x00{#",
    "comment_end_string": "#}\x00",
}


def normalize_dotted_root(source: str) -> str:
    """Rewrite ``{{.name...}}`` references to ``{{ name...}}``."""
    return _DOTTED_ROOT.sub(r"\1", source)


class _DocumentEnvironment(ImmutableSandboxedEnvironment):
    """Sandbox where dotted access on a mapping always means a key lookup.

    ``{{ workflow_data.items }}`` refers to the ``items`` key, never the
    ``dict.items`` method; a missing key is undefined.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except (KeyError, TypeError):
                return self.undefined(obj=obj, name=attribute)
        return super().getattr(obj, attribute)


class TemplateResolver:
    """Resolve template expressions in node inputs against an execution context."""

    def __init__(self, fmt: Union[str, InterchangeFormat] = "json"):
        """Initialize resolver.

        Args:
            fmt: Interchange format used to serialize and re-parse inputs
        """
        self.format = get_format(fmt)
        self._env = _DocumentEnvironment(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            finalize=self.format.render,
            **_INERT_DELIMITERS,
        )

    def resolve(self, inputs: Any, context: ExecutionContext) -> Any:
        """Resolve every template expression in ``inputs``.

        Args:
            inputs: Raw node inputs
            context: Execution context accumulated so far (read only)

        Returns:
            Fully substituted inputs

        Raises:
            ResolutionError: On serialization failure, template syntax error,
                undefined reference or invalid resolved document
        """
        try:
            source = self.format.dumps(inputs)
        except FormatError as e:
            raise ResolutionError(f"failed to serialize inputs: {e}") from e

        rendered = self.render_text(source, context)

        try:
            return self.format.loads(rendered)
        except FormatError as e:
            logger.debug("Resolved input that failed to parse: %s", rendered)
            raise ResolutionError(f"failed to parse resolved {self.format.name} input: {e}") from e

    def render_text(self, source: str, context: ExecutionContext) -> str:
        """Evaluate ``source`` as one template against ``context``.

        Raises:
            ResolutionError: On template syntax or evaluation errors
        """
        try:
            template = self._env.from_string(normalize_dotted_root(source))
        except TemplateSyntaxError as e:
            raise ResolutionError(f"template syntax error at line {e.lineno}: {e.message}") from e

        try:
            return template.render(context.template_namespace())
        except UndefinedError as e:
            raise ResolutionError(f"undefined template reference: {e.message}") from e
        except SecurityError as e:
            raise ResolutionError(f"template attempted an unsafe operation: {e}") from e
        except TemplateError as e:
            raise ResolutionError(f"failed to execute template: {e}") from e
        except (TypeError, ValueError, ArithmeticError) as e:
            raise ResolutionError(f"failed to execute template: {e}") from e
