"""Tests for workflow entities."""
import pytest
from pydantic import ValidationError

from workflow_core import (
    Edge,
    EdgeEndpoint,
    InvalidSpecError,
    InvalidValueError,
    Node,
    NodeSpec,
    Port,
    WorkflowMetadata,
    generate_id,
)


class TestPort:
    """Test Port creation."""

    def test_create_port(self):
        port = Port.create("p-1", "result")

        assert port.id == "p-1"
        assert port.name == "result"
        assert str(port) == "Port(result)"

    @pytest.mark.parametrize("port_id,name", [("", "x"), ("   ", "x"), ("p-1", ""), ("p-1", "  ")])
    def test_rejects_empty_values(self, port_id, name):
        with pytest.raises(InvalidValueError):
            Port.create(port_id, name)

    def test_port_is_immutable(self):
        port = Port.create("p-1", "result")

        with pytest.raises(ValidationError):
            port.name = "other"


class TestNodeSpec:
    """Test NodeSpec creation."""

    def test_create_spec(self):
        spec = NodeSpec.create("http.request", 2)

        assert spec.type == "http.request"
        assert spec.version == 2
        assert str(spec) == "http.request@2"

    def test_rejects_empty_type(self):
        with pytest.raises(InvalidSpecError, match="type cannot be empty"):
            NodeSpec.create("", 1)

    @pytest.mark.parametrize("version", [0, -1])
    def test_rejects_version_below_one(self, version):
        with pytest.raises(InvalidSpecError, match="at least 1"):
            NodeSpec.create("http.request", version)

    def test_invalid_spec_is_invalid_value(self):
        """InvalidSpecError is part of the InvalidValue family."""
        with pytest.raises(InvalidValueError):
            NodeSpec.create("http.request", 0)


class TestNode:
    """Test Node creation and port lookup."""

    def test_create_with_port_names_generates_port_ids(self):
        node = Node.create_with_port_names(
            "n-1",
            NodeSpec.create("llm.invoke", 1),
            {"model": "gpt-4"},
            ["prompt", "context"],
            ["result"],
            generate_id,
        )

        assert [p.name for p in node.ports.inputs] == ["prompt", "context"]
        assert [p.name for p in node.ports.outputs] == ["result"]
        port_ids = [p.id for p in node.ports.inputs + node.ports.outputs]
        assert len(set(port_ids)) == 3

    def test_rejects_empty_id(self):
        with pytest.raises(InvalidValueError, match="Node id cannot be empty"):
            Node.create("", NodeSpec.create("llm.invoke", 1))

    def test_config_is_copied(self):
        config = {"model": "gpt-4"}
        node = Node.create("n-1", NodeSpec.create("llm.invoke", 1), config)

        config["model"] = "changed"

        assert node.config == {"model": "gpt-4"}

    def test_port_lookup_respects_direction(self):
        node = Node.create_with_port_names(
            "n-1", NodeSpec.create("llm.invoke", 1), {}, ["value"], ["value"], generate_id
        )
        input_port = node.ports.inputs[0]
        output_port = node.ports.outputs[0]

        assert node.find_input_port(input_port.id) == input_port
        assert node.find_output_port(input_port.id) is None
        assert node.find_output_port_by_name("value") == output_port
        assert node.find_port(output_port.id) == output_port
        assert node.has_input_port(input_port.id)
        assert not node.has_input_port(output_port.id)

    def test_with_config_returns_new_node(self):
        node = Node.create("n-1", NodeSpec.create("llm.invoke", 1), {"a": 1})

        changed = node.with_config({"a": 2})

        assert changed.config == {"a": 2}
        assert node.config == {"a": 1}
        assert changed.id == node.id

    def test_config_is_read_only(self):
        node = Node.create("n-1", NodeSpec.create("llm.invoke", 1), {"a": 1})

        with pytest.raises(TypeError):
            node.config["a"] = 2

        assert node.with_config({**node.config, "a": 2}).config == {"a": 2}
        assert node.model_dump()["config"] == {"a": 1}


class TestEdge:
    """Test Edge creation."""

    def test_rejects_self_loop_on_same_endpoint(self):
        endpoint = EdgeEndpoint.create("n-1", "p-1")

        with pytest.raises(InvalidValueError, match="cannot connect a port to itself"):
            Edge.create("e-1", endpoint, EdgeEndpoint.create("n-1", "p-1"))

    def test_allows_different_ports_of_same_node(self):
        edge = Edge.create("e-1", EdgeEndpoint.create("n-1", "p-1"), EdgeEndpoint.create("n-1", "p-2"))

        assert edge.source.node_id == edge.target.node_id

    def test_rejects_empty_edge_id(self):
        with pytest.raises(InvalidValueError):
            Edge.create("", EdgeEndpoint.create("n-1", "p-1"), EdgeEndpoint.create("n-2", "p-2"))

    @pytest.mark.parametrize("node_id,port_id", [("", "p"), ("n", "")])
    def test_endpoint_rejects_empty_values(self, node_id, port_id):
        with pytest.raises(InvalidValueError):
            EdgeEndpoint.create(node_id, port_id)

    def test_endpoint_str(self):
        assert str(EdgeEndpoint.create("n-1", "p-1")) == "n-1:p-1"


class TestWorkflowMetadata:
    """Test WorkflowMetadata creation."""

    def test_create_metadata(self):
        metadata = WorkflowMetadata.create("Flow", "1.0", "2024-01-01T00:00:00Z", "desc")

        assert metadata.name == "Flow"
        assert metadata.description == "desc"

    @pytest.mark.parametrize(
        "name,version,created_at",
        [("", "1.0", "t"), ("Flow", "", "t"), ("Flow", "1.0", "")],
    )
    def test_rejects_empty_fields(self, name, version, created_at):
        with pytest.raises(InvalidValueError):
            WorkflowMetadata.create(name, version, created_at)
