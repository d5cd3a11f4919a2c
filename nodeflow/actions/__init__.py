"""Reference action programs speaking the stdin/stdout document protocol."""

from .base import ActionFailure, ActionProgram
from .claude import ClaudeApiAction
from .echo import EchoAction
from .httprequest import HttpRequestAction
from .writefile import WriteFileAction

__all__ = [
    "ActionFailure",
    "ActionProgram",
    "ClaudeApiAction",
    "EchoAction",
    "HttpRequestAction",
    "WriteFileAction",
]
