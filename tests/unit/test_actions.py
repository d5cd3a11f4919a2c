"""Tests for the bundled echo and file-write actions."""

import io
import json

import pytest
import yaml

from nodeflow.actions import EchoAction, WriteFileAction
from nodeflow.actions import echo, writefile


def _run(action_cls, request, fmt="json"):
    raw = request if isinstance(request, str) else json.dumps(request)
    stdout = io.StringIO()
    code = action_cls(fmt, stdin=io.StringIO(raw), stdout=stdout).run()
    return code, stdout.getvalue()


class TestEchoAction:
    """Test the echo action."""

    def test_prefix_and_message(self):
        """Test the prefix is prepended to the message."""
        code, out = _run(EchoAction, {"message": "hi", "prefix": "["})

        assert code == 0
        assert json.loads(out) == {
            "echoed_message": "[hi",
            "original_input": {"message": "hi", "prefix": "["},
        }

    def test_without_prefix(self):
        """Test the message is echoed unchanged without a prefix."""
        code, out = _run(EchoAction, {"message": "hi"})
        assert json.loads(out)["echoed_message"] == "hi"

    def test_missing_message_reports_gracefully(self):
        """Test a missing message is reported in the output with exit code 0."""
        code, out = _run(EchoAction, {"prefix": ">"})

        assert code == 0
        assert json.loads(out) == {
            "error": "Missing required field: message",
            "original_request": {"prefix": ">"},
        }

    def test_invalid_input(self):
        """Test unparseable input is reported with the raw request."""
        code, out = _run(EchoAction, "{not json")

        assert code == 0
        data = json.loads(out)
        assert data["error"] == "Invalid input JSON format"
        assert data["original_request"] == "{not json"

    def test_non_string_message(self):
        """Test a non-string message is invalid input."""
        code, out = _run(EchoAction, {"message": 5})
        assert json.loads(out)["error"] == "Invalid input JSON format"

    def test_yaml_exchange(self):
        """Test the action speaks YAML when configured."""
        code, out = _run(EchoAction, "message: hi\nprefix: '> '\n", fmt="yaml")

        assert code == 0
        assert yaml.safe_load(out)["echoed_message"] == "> hi"

    def test_output_is_single_document(self):
        """Test stdout holds exactly one newline-terminated document."""
        code, out = _run(EchoAction, {"message": "hi"})
        assert out.endswith("\n")
        assert out.count("\n") == 1

    def test_main_uses_configured_format(self, monkeypatch, capsys):
        """Test the console entry point reads stdin and honors NODEFLOW_FORMAT."""
        monkeypatch.setenv("NODEFLOW_FORMAT", "yaml")
        monkeypatch.setattr("sys.stdin", io.StringIO("message: hi\n"))

        assert echo.main() == 0
        assert yaml.safe_load(capsys.readouterr().out)["echoed_message"] == "hi"


class TestWriteFileAction:
    """Test the file-write action."""

    def test_create(self, tmp_path):
        """Test a new file is created with the content."""
        target = tmp_path / "out.txt"

        code, out = _run(WriteFileAction, {"path": str(target), "content": "hello"})

        assert code == 0
        assert target.read_text() == "hello"
        assert json.loads(out) == {
            "success": True,
            "message": f"Successfully wrote 5 bytes to {target}",
            "path": str(target),
            "size": 5,
        }

    def test_create_refuses_existing_file(self, tmp_path):
        """Test create mode never overwrites."""
        target = tmp_path / "out.txt"
        target.write_text("keep")

        code, out = _run(WriteFileAction, {"path": str(target), "content": "new", "mode": "create"})

        assert code == 1
        data = json.loads(out)
        assert data["success"] is False
        assert data["message"] == "File already exists"
        assert "error" in data
        assert target.read_text() == "keep"

    def test_append(self, tmp_path):
        """Test append mode adds to the end and reports the total size."""
        target = tmp_path / "out.txt"
        target.write_text("ab")

        code, out = _run(WriteFileAction, {"path": str(target), "content": "cd", "mode": "append"})

        assert code == 0
        assert target.read_text() == "abcd"
        data = json.loads(out)
        assert data["message"] == f"Successfully wrote 2 bytes to {target}"
        assert data["size"] == 4

    def test_overwrite(self, tmp_path):
        """Test overwrite mode replaces the content."""
        target = tmp_path / "out.txt"
        target.write_text("old content")

        code, _ = _run(WriteFileAction, {"path": str(target), "content": "new", "mode": "overwrite"})

        assert code == 0
        assert target.read_text() == "new"

    def test_byte_count_is_utf8(self, tmp_path):
        """Test the reported count is in encoded bytes."""
        target = tmp_path / "out.txt"
        _, out = _run(WriteFileAction, {"path": str(target), "content": "é"})
        assert json.loads(out)["size"] == 2

    def test_mkdir_all(self, tmp_path):
        """Test parent directories are created on request."""
        target = tmp_path / "a" / "b" / "out.txt"

        code, _ = _run(WriteFileAction, {"path": str(target), "content": "x", "mkdir_all": True})

        assert code == 0
        assert target.read_text() == "x"

    def test_missing_parent_without_mkdir(self, tmp_path):
        """Test writing into a missing directory fails."""
        target = tmp_path / "missing" / "out.txt"

        code, out = _run(WriteFileAction, {"path": str(target), "content": "x"})

        assert code == 1
        assert json.loads(out)["message"] == "Failed to write file"

    @pytest.mark.parametrize(
        "request_doc,message",
        [
            ({"content": "x"}, "Missing required field"),
            ({"path": "out.txt", "content": "x", "mode": "truncate"}, "Invalid mode"),
            ({"path": "out.txt", "content": 5}, "Failed to parse input"),
            ([1, 2], "Failed to parse input"),
        ],
    )
    def test_invalid_requests(self, request_doc, message):
        """Test invalid requests fail with exit code 1 and an error."""
        code, out = _run(WriteFileAction, request_doc)

        assert code == 1
        data = json.loads(out)
        assert data["success"] is False
        assert data["message"] == message
        assert data["error"]

    def test_unparseable_input(self):
        """Test malformed input fails with exit code 1."""
        code, out = _run(WriteFileAction, "{oops")

        assert code == 1
        assert json.loads(out)["message"] == "Failed to parse input"

    def test_main(self, tmp_path, monkeypatch, capsys):
        """Test the console entry point."""
        target = tmp_path / "main.txt"
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps({"path": str(target), "content": "z"})))

        assert writefile.main() == 0
        assert json.loads(capsys.readouterr().out)["success"] is True
        assert target.read_text() == "z"
