"""Claude API action: sends one prompt to the Anthropic Messages API."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict

import anthropic

from .base import ActionFailure, ActionProgram

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 60
API_KEY_ENV_VARS = ("CLAUDE_API_KEY", "ANTHROPIC_API_KEY")

KNOWN_MODELS = (
    "claude-sonnet-4-20250514",
    "claude-opus-4-20250514",
    "claude-3-7-sonnet-20250219",
    "claude-3-5-sonnet-20241022",
    "claude-3-5-haiku-20241022",
    "claude-3-opus-20240229",
    "claude-3-haiku-20240307",
)


def _failure(message: str, error: str) -> ActionFailure:
    return ActionFailure({"success": False, "message": message, "error": error}, exit_code=1)


def _describe_status_error(error: anthropic.APIStatusError) -> str:
    """Summarize an error response from the API."""
    body = error.body
    detail = body.get("error") if isinstance(body, dict) else None
    if isinstance(detail, dict):
        return f"Status: {error.status_code}, Type: {detail.get('type')}, Message: {detail.get('message')}"
    return f"Status: {error.status_code}, Body: {body if body is not None else error.message}"


class ClaudeApiAction(ActionProgram):
    """Generate a response for ``prompt`` and report the text and token usage."""

    name = "claude-api"

    def handle(self, request: Any) -> Dict[str, Any]:
        if not isinstance(request, dict):
            raise _failure("Failed to parse input", "input must be a mapping")

        prompt = request.get("prompt")
        if not prompt:
            raise _failure("Missing required field", "prompt is required")

        api_key = request.get("api_key") or next(
            (os.environ[name] for name in API_KEY_ENV_VARS if os.environ.get(name)), None
        )
        if not api_key:
            raise _failure(
                "Missing API key",
                "api_key must be provided in input or CLAUDE_API_KEY environment variable must be set",
            )

        model = request.get("model") or DEFAULT_MODEL
        if model not in KNOWN_MODELS:
            logger.warning(f"Model '{model}' is not in the known models list, proceeding anyway")

        params: Dict[str, Any] = {
            "model": model,
            "max_tokens": request.get("max_tokens") or DEFAULT_MAX_TOKENS,
            "temperature": request.get("temperature", DEFAULT_TEMPERATURE),
            "messages": [{"role": "user", "content": prompt}],
        }
        if request.get("system_prompt"):
            params["system"] = request["system_prompt"]

        client = anthropic.Anthropic(api_key=api_key, timeout=request.get("timeout") or DEFAULT_TIMEOUT)
        logger.debug(f"Sending prompt to {model}")
        try:
            message = client.messages.create(**params)
        except anthropic.APIStatusError as e:
            raise _failure("Claude API error", _describe_status_error(e)) from e
        except anthropic.APIError as e:
            raise _failure("Failed to execute request to Claude API", str(e)) from e

        try:
            text = next(
                (block.text for block in message.content if getattr(block, "type", None) == "text"),
                "No text content in response",
            )
            usage = {
                "input_tokens": message.usage.input_tokens,
                "output_tokens": message.usage.output_tokens,
            }
        except (AttributeError, TypeError) as e:
            raise _failure("Failed to parse Claude response", str(e)) from e

        return {
            "success": True,
            "message": f"Successfully generated response using {model}",
            "response": text,
            "model": getattr(message, "model", None) or model,
            "usage": usage,
        }


def main() -> int:
    return ClaudeApiAction.main()


if __name__ == "__main__":
    sys.exit(main())
