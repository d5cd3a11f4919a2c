"""HTTP request action: performs one request and reports the response."""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict

import requests
from requests.exceptions import RequestException

from ..orchestration.errors import FormatError
from .base import ActionFailure, ActionProgram

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
VALID_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")


def _failure(message: str, error: str) -> ActionFailure:
    return ActionFailure({"success": False, "message": message, "error": error}, exit_code=1)


def _content_type_for(body: str) -> str:
    """Guess a Content-Type for a body sent without one."""
    stripped = body.strip()
    if stripped.startswith("{") or stripped.startswith("["):
        return "application/json"
    return "text/plain"


class HttpRequestAction(ActionProgram):
    """Send ``method`` to ``url`` with optional headers, body and timeout.

    Any response status counts as success; the status code is reported so a
    later node can branch on it. Only transport failures exit non-zero.
    """

    name = "httprequest"

    def invalid_input(self, raw: str, error: FormatError) -> ActionFailure:
        return _failure(f"Failed to parse {self.format.name.upper()} input", str(error))

    def handle(self, request: Any) -> Dict[str, Any]:
        if not isinstance(request, dict):
            raise _failure(f"Failed to parse {self.format.name.upper()} input", "input must be a mapping")

        url = request.get("url")
        if not url:
            raise _failure("Missing required field", "url is required")

        method = str(request.get("method") or "GET").upper()
        if method not in VALID_METHODS:
            raise _failure(
                "Invalid HTTP method",
                f"method must be one of: {', '.join(VALID_METHODS)}, got: {method}",
            )

        headers = request.get("headers") or {}
        body = request.get("body") or ""
        timeout = request.get("timeout") or DEFAULT_TIMEOUT
        if (
            not isinstance(url, str)
            or not isinstance(headers, dict)
            or not isinstance(body, str)
            or not isinstance(timeout, (int, float))
        ):
            raise _failure(
                "Failed to create HTTP request",
                "url and body must be strings, headers a mapping and timeout a number",
            )

        headers = {str(key): str(value) for key, value in headers.items()}
        if body and not any(key.lower() == "content-type" for key in headers):
            headers["Content-Type"] = _content_type_for(body)

        logger.debug(f"{method} {url} (timeout {timeout}s)")
        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                data=body.encode("utf-8") if body else None,
                timeout=timeout,
            )
        except ValueError as e:
            # Malformed URLs are rejected before anything is sent
            raise _failure("Failed to create HTTP request", str(e)) from e
        except RequestException as e:
            raise _failure("Failed to execute HTTP request", str(e)) from e

        try:
            text = response.content.decode(response.encoding or "utf-8", errors="replace")
        except LookupError as e:
            raise _failure("Failed to read response body", str(e)) from e

        return {
            "success": True,
            "message": f"HTTP {method} request to {url} completed successfully",
            "status_code": response.status_code,
            "headers": dict(response.headers),
            "body": text,
        }


def main() -> int:
    return HttpRequestAction.main()


if __name__ == "__main__":
    sys.exit(main())
