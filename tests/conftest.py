"""Pytest configuration and fixtures."""
import os

import pytest

# Set test environment variables
os.environ["WORKFLOW_ENV"] = "test"
os.environ["WORKFLOW_LOG_JSON"] = "false"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Start every test from freshly loaded settings."""
    from workflow_core.config import reset_settings

    reset_settings()
    yield
    reset_settings()


def _passthrough(inputs):
    return dict(inputs)


@pytest.fixture
def registry():
    """Registry with the node types used across the test suite."""
    from node_registry import NodeRegistry, define_node

    registry = NodeRegistry()
    registry.register_node(define_node("test.trigger", execute=lambda inputs: {"out": "fired"}))
    registry.register_node(define_node("test.http", execute=_passthrough))
    registry.register_node(define_node("test.email", execute=_passthrough))
    registry.register_node(define_node("test.node", execute=_passthrough))
    return registry


@pytest.fixture
def make_node():
    """Factory for nodes with named ports."""
    from workflow_core import Node, NodeSpec, generate_id

    def _make(
        node_type="test.node",
        version=1,
        config=None,
        inputs=("in",),
        outputs=("out",),
        node_id=None,
    ):
        return Node.create_with_port_names(
            node_id or generate_id(),
            NodeSpec.create(node_type, version),
            config or {},
            list(inputs),
            list(outputs),
            generate_id,
        )

    return _make


@pytest.fixture
def make_edge():
    """Factory connecting the first output of one node to the first input of another."""
    from workflow_core import Edge, EdgeEndpoint, generate_id

    def _make(source, target, source_port=None, target_port=None):
        source_port = source_port or source.ports.outputs[0]
        target_port = target_port or target.ports.inputs[0]
        return Edge.create(
            generate_id(),
            EdgeEndpoint.create(source.id, source_port.id),
            EdgeEndpoint.create(target.id, target_port.id),
        )

    return _make


@pytest.fixture
def metadata():
    """Workflow metadata for definitions built directly."""
    from workflow_core import WorkflowMetadata

    return WorkflowMetadata.create("Test Workflow", "1.0", "2024-01-01T00:00:00+00:00")
