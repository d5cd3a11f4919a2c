"""File write action: writes string content to a path."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict

from .base import ActionFailure, ActionProgram

logger = logging.getLogger(__name__)

WRITE_MODES = {
    "create": "x",
    "append": "a",
    "overwrite": "w",
}


def _failure(message: str, error: str) -> ActionFailure:
    return ActionFailure({"success": False, "message": message, "error": error}, exit_code=1)


class WriteFileAction(ActionProgram):
    """Write ``content`` to ``path`` in create, append or overwrite mode."""

    name = "writefile-json"

    def handle(self, request: Any) -> Dict[str, Any]:
        if not isinstance(request, dict):
            raise _failure("Failed to parse input", "input must be a mapping")

        raw_path = request.get("path")
        if not raw_path:
            raise _failure("Missing required field", "path is required")
        content = request.get("content")
        if content is None:
            content = ""
        if not isinstance(raw_path, str) or not isinstance(content, str):
            raise _failure("Failed to parse input", "path and content must be strings")

        mode = request.get("mode") or "create"
        if mode not in WRITE_MODES:
            raise _failure(
                "Invalid mode",
                f"mode must be one of: {', '.join(WRITE_MODES)}, got: {mode}",
            )
        if not content and mode != "create":
            logger.warning(f"Content is empty for path: {raw_path}")

        path = Path(raw_path)
        if request.get("mkdir_all"):
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise _failure("Failed to create parent directories", str(e)) from e

        data = content.encode("utf-8")
        try:
            with open(path, WRITE_MODES[mode] + "b") as handle:
                handle.write(data)
        except FileExistsError as e:
            raise _failure("File already exists", f"file {raw_path} already exists and mode is 'create'") from e
        except OSError as e:
            raise _failure("Failed to write file", str(e)) from e

        return {
            "success": True,
            "message": f"Successfully wrote {len(data)} bytes to {raw_path}",
            "path": raw_path,
            "size": path.stat().st_size,
        }


def main() -> int:
    return WriteFileAction.main()


if __name__ == "__main__":
    sys.exit(main())
