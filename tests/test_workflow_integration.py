"""
Integration tests for workflow_runtime.

Verifies end-to-end execution of builder-made workflows against a registry.
"""

import asyncio

import pytest

from node_registry import NodeRegistry, define_node
from workflow_core import IterationError, WorkflowBuilder
from workflow_runtime import (
    ExecutionStatus,
    NodeEventType,
    NodeOutputError,
    StepLimitExceededError,
    WorkflowExecutor,
)


def _add(inputs):
    return {"sum": inputs["a"] + inputs["b"]}


async def _double(inputs):
    await asyncio.sleep(0)
    return {"result": inputs["value"] * 2}


def _fail(inputs):
    raise RuntimeError("boom")


@pytest.fixture
def math_registry():
    registry = NodeRegistry()
    registry.register_node(define_node("math.add", execute=_add))
    registry.register_node(define_node("math.double", execute=_double))
    registry.register_node(define_node("math.fail", execute=_fail))
    registry.register_node(define_node("math.none", execute=lambda inputs: None))
    registry.register_node(define_node("math.bad", execute=lambda inputs: ["not", "a", "dict"]))
    return registry


def _math_workflow(registry, second_type="math.double"):
    builder = WorkflowBuilder.init(name="Math", version="1.0")
    add = builder.add_node(
        spec={"type": "math.add", "version": 1},
        config={"a": 2, "b": 3},
        ports={"inputs": ["a", "b"], "outputs": ["sum"]},
    )
    second = builder.add_node(
        spec={"type": second_type, "version": 1},
        ports={"inputs": ["value"], "outputs": ["result"]},
    )
    builder.connect(
        source={"node_id": add, "port_name": "sum"},
        target={"node_id": second, "port_name": "value"},
    )
    builder.set_entrypoints([add])
    return builder.build(registry), add, second


class TestWorkflowExecutorIntegration:
    """End-to-end runs through the executor."""

    def test_sync_run(self, math_registry):
        """Sync and async node callables mix in one run."""
        definition, add, double = _math_workflow(math_registry)

        result = WorkflowExecutor().run(definition)

        assert result.is_success
        assert result.status == ExecutionStatus.COMPLETED
        assert result.executed_node_ids == [add, double]
        assert result.node_outputs[add] == {"sum": 5}
        assert result.outputs == {"result": 10}
        assert result.error is None
        assert result.duration_ms >= 0

    def test_async_execute(self, math_registry):
        definition, _, _ = _math_workflow(math_registry)

        result = asyncio.run(WorkflowExecutor(math_registry).execute(definition))

        assert result.outputs == {"result": 10}
        assert result.workflow_name == "Math"

    def test_empty_workflow_completes(self, math_registry):
        definition = WorkflowBuilder.init(name="Empty", version="1.0").build(math_registry)

        result = WorkflowExecutor().run(definition)

        assert result.is_success
        assert result.outputs is None
        assert result.executed_node_ids == []

    def test_node_failure_fails_run(self, math_registry):
        definition, add, failing = _math_workflow(math_registry, "math.fail")

        result = WorkflowExecutor().run(definition)

        assert result.is_error
        assert result.status == ExecutionStatus.FAILED
        assert isinstance(result.error, RuntimeError)
        assert result.error_message == "boom"
        assert result.executed_node_ids == [add]

    def test_none_output_becomes_empty_mapping(self, math_registry):
        definition, _, last = _math_workflow(math_registry, "math.none")

        result = WorkflowExecutor().run(definition)

        assert result.is_success
        assert result.node_outputs[last] == {}

    def test_non_mapping_output_fails(self, math_registry):
        definition, _, _ = _math_workflow(math_registry, "math.bad")

        result = WorkflowExecutor().run(definition)

        assert isinstance(result.error, NodeOutputError)

    def test_missing_registry_fails_run(self, math_registry):
        definition, _, _ = _math_workflow(None)

        result = WorkflowExecutor().run(definition)

        assert isinstance(result.error, IterationError)

    def test_step_limit(self, math_registry):
        definition, add, _ = _math_workflow(math_registry)

        result = WorkflowExecutor(max_steps=1).run(definition)

        assert isinstance(result.error, StepLimitExceededError)
        assert result.executed_node_ids == [add]

    def test_step_limit_from_settings(self, monkeypatch, math_registry):
        monkeypatch.setenv("WORKFLOW_MAX_STEPS", "1")
        definition, _, _ = _math_workflow(math_registry)

        result = WorkflowExecutor().run(definition)

        assert isinstance(result.error, StepLimitExceededError)


class TestExecutionEvents:
    """Node lifecycle events."""

    def test_events_for_successful_run(self, math_registry):
        definition, add, double = _math_workflow(math_registry)
        events = []

        WorkflowExecutor(on_event=events.append).run(definition)

        assert [(e.type, e.node_id) for e in events] == [
            (NodeEventType.STARTED, add),
            (NodeEventType.COMPLETED, add),
            (NodeEventType.STARTED, double),
            (NodeEventType.COMPLETED, double),
        ]
        assert events[0].data == {"a": 2, "b": 3}
        assert events[1].data == {"sum": 5}

    def test_failed_event_carries_error(self, math_registry):
        definition, _, failing = _math_workflow(math_registry, "math.fail")
        events = []
        executor = WorkflowExecutor()
        executor.add_listener(events.append)

        executor.run(definition)

        assert events[-1].type == NodeEventType.FAILED
        assert events[-1].node_id == failing
        assert str(events[-1].error) == "boom"
