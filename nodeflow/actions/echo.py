"""Echo action: returns the message with an optional prefix."""

from __future__ import annotations

import sys
from typing import Any, Dict

from ..orchestration.errors import FormatError
from .base import ActionFailure, ActionProgram


class EchoAction(ActionProgram):
    """Echo ``prefix + message`` back to the caller.

    Failures are reported in the document with exit code 0.
    """

    name = "echo-json"

    def _failure(self, message: str, original_request: Any = None) -> ActionFailure:
        document: Dict[str, Any] = {"error": message}
        if original_request is not None:
            document["original_request"] = original_request
        return ActionFailure(document, exit_code=0)

    def invalid_input(self, raw: str, error: FormatError) -> ActionFailure:
        return self._failure(f"Invalid input {self.format.name.upper()} format", raw)

    def handle(self, request: Any) -> Dict[str, Any]:
        if not isinstance(request, dict):
            raise self._failure(f"Invalid input {self.format.name.upper()} format", request)

        message = request.get("message")
        prefix = request.get("prefix") or ""
        if (message is not None and not isinstance(message, str)) or not isinstance(prefix, str):
            raise self._failure(f"Invalid input {self.format.name.upper()} format", request)
        if not message:
            raise self._failure("Missing required field: message", request)

        return {"echoed_message": prefix + message, "original_input": request}


def main() -> int:
    return EchoAction.main()


if __name__ == "__main__":
    sys.exit(main())
