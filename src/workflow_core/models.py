"""
Workflow Models - Immutable entities of a workflow graph.

Entities are frozen pydantic models. Build them through their ``create``
factories, which enforce the value invariants; "changing" an entity means
constructing a new one (see ``Node.with_config``).
"""

from __future__ import annotations

import copy
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .errors import InvalidSpecError, InvalidValueError
from .ids import Identifier, is_blank


class Port(BaseModel):
    """
    Named connection point on a node.

    Example: Port(id="3f2c...", name="result")
    """
    model_config = ConfigDict(frozen=True)

    id: Identifier = Field(..., description="Port ID")
    name: str = Field(..., description="Port name (unique per direction on its node)")

    @classmethod
    def create(cls, port_id: Identifier, name: str) -> "Port":
        if is_blank(port_id):
            raise InvalidValueError("Port id cannot be empty")
        if is_blank(name):
            raise InvalidValueError("Port name cannot be empty")
        return cls(id=port_id, name=name)

    def __str__(self) -> str:
        return f"Port({self.name})"


class NodeSpec(BaseModel):
    """Reference to an externally registered node contract."""
    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Node type (e.g. 'http.request')")
    version: int = Field(..., description="Node type version, 1 or higher")

    @classmethod
    def create(cls, node_type: str, version: int) -> "NodeSpec":
        if is_blank(node_type):
            raise InvalidSpecError("NodeSpec type cannot be empty")
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise InvalidSpecError(
                "NodeSpec version must be at least 1",
                {"version": version},
            )
        return cls(type=node_type, version=version)

    def __str__(self) -> str:
        return f"{self.type}@{self.version}"


class NodePorts(BaseModel):
    """Input and output ports owned by a single node."""
    model_config = ConfigDict(frozen=True)

    inputs: Tuple[Port, ...] = Field(default_factory=tuple)
    outputs: Tuple[Port, ...] = Field(default_factory=tuple)


class Node(BaseModel):
    """
    A vertex of the workflow graph.

    The node owns its ports. ``config`` is opaque data interpreted by the
    node contract the spec resolves to. It is deep-copied on the way in and
    held as a read-only mapping; use ``with_config`` to get a changed node.
    """
    model_config = ConfigDict(frozen=True)

    id: Identifier
    spec: NodeSpec
    config: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    ports: NodePorts = Field(default_factory=NodePorts)

    @field_validator("config")
    @classmethod
    def _freeze_config(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(copy.deepcopy(dict(v)))

    @field_serializer("config")
    def _dump_config(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        return copy.deepcopy(dict(config))

    @classmethod
    def create(
        cls,
        node_id: Identifier,
        spec: NodeSpec,
        config: Optional[Dict[str, Any]] = None,
        inputs: Iterable[Port] = (),
        outputs: Iterable[Port] = (),
    ) -> "Node":
        if is_blank(node_id):
            raise InvalidValueError("Node id cannot be empty")
        return cls(
            id=node_id,
            spec=spec,
            config=config or {},
            ports=NodePorts(inputs=tuple(inputs), outputs=tuple(outputs)),
        )

    @classmethod
    def create_with_port_names(
        cls,
        node_id: Identifier,
        spec: NodeSpec,
        config: Optional[Dict[str, Any]],
        input_names: Iterable[str],
        output_names: Iterable[str],
        generate_id: Callable[[], Identifier],
    ) -> "Node":
        """Create a node, generating a fresh port id for every port name."""
        inputs = [Port.create(generate_id(), name) for name in input_names]
        outputs = [Port.create(generate_id(), name) for name in output_names]
        return cls.create(node_id, spec, config, inputs, outputs)

    def with_config(self, config: Dict[str, Any]) -> "Node":
        """Return a copy of this node carrying a different config."""
        return Node.create(self.id, self.spec, config, self.ports.inputs, self.ports.outputs)

    def find_input_port(self, port_id: Identifier) -> Optional[Port]:
        return next((p for p in self.ports.inputs if p.id == port_id), None)

    def find_output_port(self, port_id: Identifier) -> Optional[Port]:
        return next((p for p in self.ports.outputs if p.id == port_id), None)

    def find_input_port_by_name(self, name: str) -> Optional[Port]:
        return next((p for p in self.ports.inputs if p.name == name), None)

    def find_output_port_by_name(self, name: str) -> Optional[Port]:
        return next((p for p in self.ports.outputs if p.name == name), None)

    def find_port(self, port_id: Identifier) -> Optional[Port]:
        """Find a port by id on either side."""
        return self.find_input_port(port_id) or self.find_output_port(port_id)

    def has_input_port(self, port_id: Identifier) -> bool:
        return self.find_input_port(port_id) is not None

    def has_output_port(self, port_id: Identifier) -> bool:
        return self.find_output_port(port_id) is not None

    def __str__(self) -> str:
        return f"Node({self.id}, {self.spec})"


class EdgeEndpoint(BaseModel):
    """(node, port) lookup key used as an edge terminus. Does not own either."""
    model_config = ConfigDict(frozen=True)

    node_id: Identifier
    port_id: Identifier

    @classmethod
    def create(cls, node_id: Identifier, port_id: Identifier) -> "EdgeEndpoint":
        if is_blank(node_id):
            raise InvalidValueError("EdgeEndpoint node_id cannot be empty")
        if is_blank(port_id):
            raise InvalidValueError("EdgeEndpoint port_id cannot be empty")
        return cls(node_id=node_id, port_id=port_id)

    def __str__(self) -> str:
        return f"{self.node_id}:{self.port_id}"


class Edge(BaseModel):
    """Directed connection from an output port to an input port."""
    model_config = ConfigDict(frozen=True)

    id: Identifier
    source: EdgeEndpoint
    target: EdgeEndpoint

    @classmethod
    def create(cls, edge_id: Identifier, source: EdgeEndpoint, target: EdgeEndpoint) -> "Edge":
        if is_blank(edge_id):
            raise InvalidValueError("Edge id cannot be empty")
        if source == target:
            raise InvalidValueError(
                "Edge cannot connect a port to itself",
                {"endpoint": str(source)},
            )
        return cls(id=edge_id, source=source, target=target)

    def __str__(self) -> str:
        return f"Edge({self.source} -> {self.target})"


class WorkflowMetadata(BaseModel):
    """Descriptive workflow data."""
    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    created_at: str = Field(..., description="ISO-8601 creation timestamp")
    description: Optional[str] = None

    @classmethod
    def create(
        cls,
        name: str,
        version: str,
        created_at: str,
        description: Optional[str] = None,
    ) -> "WorkflowMetadata":
        if is_blank(name):
            raise InvalidValueError("WorkflowMetadata name cannot be empty")
        if is_blank(version):
            raise InvalidValueError("WorkflowMetadata version cannot be empty")
        if is_blank(created_at):
            raise InvalidValueError("WorkflowMetadata created_at cannot be empty")
        return cls(name=name, version=version, created_at=created_at, description=description)

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


__all__ = [
    "Port",
    "NodeSpec",
    "NodePorts",
    "Node",
    "EdgeEndpoint",
    "Edge",
    "WorkflowMetadata",
]
