"""Tests for structural workflow validation."""

import pytest

from nodeflow.orchestration.validation import validate_workflow_file, validate_workflow_structure


def _valid():
    return {
        "name": "demo",
        "description": "Demo",
        "nodes": [
            {"id": "a", "type": "echo-json", "inputs_from_workflow": {"message": "hi"}},
            {"id": "b", "type": "echo-json", "inputs_from_workflow": {}},
        ],
    }


class TestValidateWorkflowStructure:
    """Test validation of parsed workflow documents."""

    def test_valid_workflow(self):
        """Test a well-formed workflow has no violations."""
        assert validate_workflow_structure(_valid()) == []

    def test_not_a_mapping(self):
        """Test a non-mapping document is a single violation."""
        assert validate_workflow_structure(["a"]) == ["Workflow must be a mapping, got list"]

    @pytest.mark.parametrize("field_name", ["name", "description", "nodes"])
    def test_missing_top_level_field(self, field_name):
        """Test each required top-level field is reported."""
        document = _valid()
        del document[field_name]
        assert f"Missing required field: {field_name}" in validate_workflow_structure(document)

    def test_nodes_must_be_array(self):
        """Test a non-list nodes value is reported."""
        document = _valid()
        document["nodes"] = {"a": {}}
        assert validate_workflow_structure(document) == ["Nodes must be an array"]

    def test_empty_nodes(self):
        """Test an empty node list is reported."""
        document = _valid()
        document["nodes"] = []
        assert validate_workflow_structure(document) == ["Nodes array cannot be empty"]

    def test_all_violations_reported(self):
        """Test validation collects every problem instead of stopping early."""
        document = {
            "name": "demo",
            "nodes": [
                "not-an-object",
                {"id": "", "type": "x", "inputs_from_workflow": {}},
                {"id": "a", "type": "", "inputs_from_workflow": {}},
                {"id": "a", "type": "x"},
                {"id": 5, "type": 6, "inputs_from_workflow": {}},
            ],
        }

        assert validate_workflow_structure(document) == [
            "Missing required field: description",
            "Node 0 is not a valid object",
            "Node 1 has empty ID",
            "Node 2 has empty type",
            "Node 3 missing required field: inputs_from_workflow",
            "Duplicate node ID: a",
            "Node 4 ID must be a string",
            "Node 4 type must be a string",
        ]


class TestValidateWorkflowFile:
    """Test validation of workflow files."""

    def test_valid_file(self, write_workflow):
        """Test a valid file passes."""
        assert validate_workflow_file(write_workflow(_valid())) == []

    def test_valid_yaml_file(self, write_workflow):
        """Test YAML files are validated with the YAML format."""
        assert validate_workflow_file(write_workflow(_valid(), fmt="yaml"), "yaml") == []

    def test_missing_file(self, tmp_path):
        """Test an unreadable file is a single violation."""
        errors = validate_workflow_file(tmp_path / "missing.json")
        assert len(errors) == 1
        assert errors[0].startswith("Error reading workflow file:")

    def test_syntax_error(self, tmp_path):
        """Test malformed documents are reported as a syntax error."""
        path = tmp_path / "broken.json"
        path.write_text('{"name": ', encoding="utf-8")

        errors = validate_workflow_file(path)

        assert len(errors) == 1
        assert errors[0].startswith("Invalid JSON syntax:")
