"""Tests for the sequential workflow runner."""

from unittest.mock import Mock

import pytest

from nodeflow.orchestration.errors import (
    ActionExecutionError,
    ActionReportedError,
    ResolutionError,
    WorkflowExecutionError,
)
from nodeflow.orchestration.workflow_engine import (
    EVENTS,
    NodeDefinition,
    NodeStatus,
    RegistryNodeExecutor,
    RunStatus,
    WorkflowDefinition,
    WorkflowRunner,
)


def _definition(*nodes):
    return WorkflowDefinition(
        name="test-workflow",
        description="Runner test",
        nodes=[NodeDefinition(id=node_id, type=node_type, inputs=inputs) for node_id, node_type, inputs in nodes],
    )


@pytest.fixture
def calls():
    return []


@pytest.fixture
def executor(calls):
    def record(data):
        calls.append(data)
        return {"seen": data}

    def fail(data):
        raise RuntimeError("handler exploded")

    return RegistryNodeExecutor(
        {
            "record": record,
            "fail": fail,
            "soft-fail": lambda data: {"error": "reported failure"},
        }
    )


class TestWorkflowRunner:
    """Test the runner state machine."""

    def test_initial_state(self, executor):
        """Test a new runner is idle."""
        assert WorkflowRunner(executor=executor).status == RunStatus.IDLE

    def test_runs_all_nodes_in_order(self, executor, calls):
        """Test every node runs once in definition order and is recorded."""
        definition = _definition(
            ("a", "record", {"step": 1}),
            ("b", "record", {"step": 2}),
            ("c", "record", {"step": 3}),
        )
        runner = WorkflowRunner(executor=executor)

        result = runner.run(definition)

        assert result.status == RunStatus.COMPLETED
        assert result.succeeded
        assert runner.status == RunStatus.COMPLETED
        assert calls == [{"step": 1}, {"step": 2}, {"step": 3}]
        assert list(result.context.nodes) == ["a", "b", "c"]
        assert result.context.nodes["b"].output == {"seen": {"step": 2}}
        assert [r.status for r in result.records] == [NodeStatus.COMPLETED] * 3
        assert result.failed_node is None
        assert result.error is None
        assert result.get_duration() >= 0

    def test_outputs_flow_to_later_nodes(self, executor, calls):
        """Test a node can reference workflow data and an earlier node's output."""
        definition = _definition(
            ("a", "record", {"name": "{{ workflow_data.name }}"}),
            ("b", "record", {"from_a": "{{ nodes.a.output.seen.name }}!"}),
        )

        result = WorkflowRunner(executor=executor).run(definition, {"name": "ada"})

        assert result.succeeded
        assert calls[1] == {"from_a": "ada!"}

    def test_stops_at_first_failure(self, executor, calls):
        """Test nodes after a failing node never run."""
        definition = _definition(
            ("a", "record", {"step": 1}),
            ("b", "fail", {}),
            ("c", "record", {"step": 3}),
        )

        result = WorkflowRunner(executor=executor).run(definition)

        assert result.status == RunStatus.FAILED
        assert result.failed_node == "b"
        assert isinstance(result.error, WorkflowExecutionError)
        assert isinstance(result.error.cause, ActionExecutionError)
        assert "error executing node b" in str(result.error)
        assert calls == [{"step": 1}]
        assert list(result.context.nodes) == ["a"]
        assert [r.node_id for r in result.records] == ["a", "b"]
        assert result.records[1].status == NodeStatus.FAILED

    def test_reported_error_fails_run(self, executor):
        """Test an error key in the output fails the node."""
        result = WorkflowRunner(executor=executor).run(_definition(("a", "soft-fail", {})))

        assert result.status == RunStatus.FAILED
        assert isinstance(result.error.cause, ActionReportedError)
        assert result.context.nodes == {}

    def test_forward_reference_fails_resolution(self, executor, calls):
        """Test a node cannot see outputs of nodes that have not run yet."""
        definition = _definition(
            ("a", "record", {"later": "{{ nodes.b.output.seen }}"}),
            ("b", "record", {}),
        )

        result = WorkflowRunner(executor=executor).run(definition)

        assert result.failed_node == "a"
        assert isinstance(result.error.cause, ResolutionError)
        assert calls == []

    def test_workflow_data_is_not_modified(self, executor):
        """Test the caller's initial data is copied, not shared."""
        data = {"items": [1, 2]}
        result = WorkflowRunner(executor=executor).run(_definition(("a", "record", {})), data)

        result.context.workflow_data["items"].append(3)
        assert data == {"items": [1, 2]}

    def test_none_workflow_data_defaults_to_empty(self, executor):
        """Test omitted initial data becomes an empty mapping."""
        result = WorkflowRunner(executor=executor).run(_definition(("a", "record", {})))
        assert result.context.workflow_data == {}

    def test_callbacks_receive_events(self, executor):
        """Test callbacks fire for every state transition."""
        runner = WorkflowRunner(executor=executor)
        events = []
        for event in EVENTS:
            runner.add_callback(event, lambda e, result, record: events.append((e, record and record.node_id)))

        runner.run(_definition(("a", "record", {}), ("b", "fail", {})))

        assert events == [
            ("workflow_started", None),
            ("node_started", "a"),
            ("node_completed", "a"),
            ("node_started", "b"),
            ("node_failed", "b"),
            ("workflow_failed", None),
        ]

    def test_unknown_event_rejected(self, executor):
        """Test registering for an unknown event raises."""
        with pytest.raises(ValueError, match="Unknown runner event"):
            WorkflowRunner(executor=executor).add_callback("node_skipped", Mock())

    def test_callback_errors_do_not_abort_run(self, executor):
        """Test a failing callback is logged and ignored."""
        runner = WorkflowRunner(executor=executor)
        runner.add_callback("node_completed", Mock(side_effect=RuntimeError("callback bug")))

        result = runner.run(_definition(("a", "record", {})))

        assert result.succeeded

    def test_unvalidated_duplicate_ids_fail(self, executor, calls):
        """Test definitions built without validation are still checked."""
        node = NodeDefinition(id="a", type="record", inputs={})
        definition = WorkflowDefinition.model_construct(name="dup", description="", nodes=[node, node])

        result = WorkflowRunner(executor=executor).run(definition)

        assert result.status == RunStatus.FAILED
        assert result.failed_node is None
        assert calls == []

    def test_executor_receives_resolved_input(self):
        """Test the executor is called with the node and its resolved input."""
        executor = Mock()
        executor.execute.return_value = {"ok": True}
        definition = _definition(("a", "anything", {"v": "{{ workflow_data.v }}"}))

        WorkflowRunner(executor=executor).run(definition, {"v": "x"})

        node, resolved = executor.execute.call_args[0]
        assert node.id == "a"
        assert resolved == {"v": "x"}
