"""
Workflow Builder - Fluent, mutable construction of workflow definitions.

Nothing is validated until ``build``; ``connect`` only needs the referenced
nodes to have been added already.

Usage:
    builder = WorkflowBuilder.init(name="Notify", version="1.0")
    fetch = builder.add_node(
        spec={"type": "http.request", "version": 1},
        config={"url": "https://example.com"},
        ports={"inputs": [], "outputs": [{"name": "body"}]},
    )
    send = builder.add_node(
        spec={"type": "email.send", "version": 1},
        ports={"inputs": [{"name": "body"}], "outputs": []},
    )
    builder.connect(
        source={"node_id": fetch, "port_name": "body"},
        target={"node_id": send, "port_name": "body"},
    )
    definition = builder.set_entrypoints([fetch]).build(registry)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from .contracts import NodeRegistryLookup
from .definition import WorkflowDefinition
from .errors import DuplicateNodeError, InvalidValueError, NodeNotFoundError, PortNotFoundError
from .ids import Identifier, generate_id, is_blank
from .models import Edge, EdgeEndpoint, Node, NodeSpec, Port, WorkflowMetadata
from .observability import get_logger, with_workflow_context


logger = get_logger(__name__)


class EndpointRef(BaseModel):
    """
    Builder-side reference to a port, by name or by id.

    Example: {"node_id": "...", "port_name": "result"}
    """
    model_config = ConfigDict(frozen=True)

    node_id: Identifier
    port_name: Optional[str] = None
    port_id: Optional[Identifier] = None

    @model_validator(mode="after")
    def _one_port_reference(self) -> "EndpointRef":
        if (self.port_name is None) == (self.port_id is None):
            raise ValueError("Exactly one of port_name or port_id is required")
        return self

    @property
    def port_label(self) -> str:
        return self.port_name if self.port_name is not None else str(self.port_id)


EndpointInput = Union[EndpointRef, Mapping[str, Any]]
SpecInput = Union[NodeSpec, Mapping[str, Any]]
PortsInput = Mapping[str, Iterable[Union[str, Mapping[str, Any]]]]


class WorkflowDraft(BaseModel):
    """
    Unvalidated snapshot of a builder's state.

    A draft is not a definition: it cannot be iterated. Turn it into one
    with ``to_definition``, which runs the full validation.
    """
    model_config = ConfigDict(frozen=True)

    metadata: WorkflowMetadata
    nodes: List[Node]
    edges: List[Edge]
    entrypoints: List[Identifier]

    def to_definition(
        self,
        registry: Optional[NodeRegistryLookup] = None,
        validate_config: Optional[bool] = None,
    ) -> WorkflowDefinition:
        return WorkflowDefinition.create(
            self.metadata,
            self.nodes,
            self.edges,
            self.entrypoints,
            registry,
            validate_config,
        )


class WorkflowBuilder:
    """Accumulates nodes, edges and entrypoints for a WorkflowDefinition."""

    def __init__(self, metadata: WorkflowMetadata):
        self._metadata = metadata
        self._nodes: List[Node] = []
        self._edges: List[Edge] = []
        self._entrypoints: List[Identifier] = []

    @classmethod
    def init(
        cls,
        name: str,
        version: str,
        description: Optional[str] = None,
    ) -> "WorkflowBuilder":
        """Start a workflow stamped with the current UTC time."""
        metadata = WorkflowMetadata.create(
            name,
            version,
            datetime.now(timezone.utc).isoformat(),
            description,
        )
        return cls(metadata)

    @property
    def metadata(self) -> WorkflowMetadata:
        return self._metadata

    @property
    def node_ids(self) -> List[Identifier]:
        return [node.id for node in self._nodes]

    def add_node(
        self,
        spec: SpecInput,
        config: Optional[Dict[str, Any]] = None,
        ports: Optional[PortsInput] = None,
        node_id: Optional[Identifier] = None,
    ) -> Identifier:
        """
        Add a node, generating ids for it and for each of its ports.

        Args:
            spec: NodeSpec or {"type": ..., "version": ...}
            config: Static node config
            ports: {"inputs": [...], "outputs": [...]} of {"name": ...} or names
            node_id: Use this id instead of generating one

        Returns:
            The node's id

        Raises:
            InvalidSpecError: If the type is empty or version < 1
            DuplicateNodeError: If ``node_id`` is already in use
        """
        node_spec = self._to_spec(spec)

        if node_id is None:
            node_id = generate_id()
        elif any(node.id == node_id for node in self._nodes):
            raise DuplicateNodeError(node_id)

        ports = ports or {}
        node = Node.create_with_port_names(
            node_id,
            node_spec,
            config,
            [self._port_name(p) for p in ports.get("inputs", ())],
            [self._port_name(p) for p in ports.get("outputs", ())],
            generate_id,
        )
        self._nodes.append(node)

        logger.debug(
            "Node added",
            extra=with_workflow_context(
                workflow_name=self._metadata.name,
                node_id=node_id,
                node_type=node_spec.type,
                node_version=node_spec.version,
            ),
        )
        return node_id

    def connect(self, source: EndpointInput, target: EndpointInput) -> Identifier:
        """
        Connect an output port of one node to an input port of another.

        Port names are matched exactly (case-sensitive). The source must be an
        output port and the target an input port.

        Returns:
            The new edge's id

        Raises:
            NodeNotFoundError: If either node has not been added
            PortNotFoundError: If the port is missing on the expected side, or an
                endpoint mapping does not name exactly one port
        """
        source_ref = self._to_ref(source)
        target_ref = self._to_ref(target)

        source_node = self._find_node(source_ref.node_id)
        if source_node is None:
            raise NodeNotFoundError(f"Source node not found: {source_ref.node_id}", source_ref.node_id)

        target_node = self._find_node(target_ref.node_id)
        if target_node is None:
            raise NodeNotFoundError(f"Target node not found: {target_ref.node_id}", target_ref.node_id)

        if source_ref.port_name is not None:
            source_port = source_node.find_output_port_by_name(source_ref.port_name)
        else:
            source_port = source_node.find_output_port(source_ref.port_id)
        if source_port is None:
            raise PortNotFoundError(
                f"Output port '{source_ref.port_label}' not found on node {source_ref.node_id}",
                source_ref.node_id,
                source_ref.port_label,
            )

        if target_ref.port_name is not None:
            target_port = target_node.find_input_port_by_name(target_ref.port_name)
        else:
            target_port = target_node.find_input_port(target_ref.port_id)
        if target_port is None:
            raise PortNotFoundError(
                f"Input port '{target_ref.port_label}' not found on node {target_ref.node_id}",
                target_ref.node_id,
                target_ref.port_label,
            )

        edge_id = generate_id()
        edge = Edge.create(
            edge_id,
            EdgeEndpoint.create(source_node.id, source_port.id),
            EdgeEndpoint.create(target_node.id, target_port.id),
        )
        self._edges.append(edge)
        return edge_id

    def set_entrypoints(self, node_ids: Iterable[Identifier]) -> "WorkflowBuilder":
        """Replace the entrypoint list."""
        self._entrypoints = list(node_ids)
        return self

    def build(
        self,
        registry: Optional[NodeRegistryLookup] = None,
        validate_config: Optional[bool] = None,
    ) -> WorkflowDefinition:
        """
        Validate and produce the definition.

        Raises:
            StructuralError: Propagated from WorkflowDefinition.create
        """
        return WorkflowDefinition.create(
            self._metadata,
            self._nodes,
            self._edges,
            self._entrypoints,
            registry,
            validate_config,
        )

    def draft(self) -> WorkflowDraft:
        """Snapshot the current state without validating it."""
        return WorkflowDraft(
            metadata=self._metadata,
            nodes=list(self._nodes),
            edges=list(self._edges),
            entrypoints=list(self._entrypoints),
        )

    def _find_node(self, node_id: Identifier) -> Optional[Node]:
        return next((node for node in self._nodes if node.id == node_id), None)

    @staticmethod
    def _to_spec(spec: SpecInput) -> NodeSpec:
        if isinstance(spec, NodeSpec):
            return NodeSpec.create(spec.type, spec.version)
        return NodeSpec.create(spec.get("type", ""), spec.get("version", 0))

    @staticmethod
    def _to_ref(ref: EndpointInput) -> EndpointRef:
        if isinstance(ref, EndpointRef):
            return ref
        try:
            return EndpointRef.model_validate(dict(ref))
        except ValidationError as e:
            node_id = str(ref.get("node_id", ""))
            reason = "; ".join(err["msg"] for err in e.errors())
            raise PortNotFoundError(
                f"Invalid endpoint reference on node {node_id}: {reason}",
                node_id,
                str(ref.get("port_name") or ref.get("port_id") or ""),
            ) from e

    @staticmethod
    def _port_name(port: Union[str, Mapping[str, Any], Port]) -> str:
        if isinstance(port, str):
            name = port
        elif isinstance(port, Port):
            name = port.name
        else:
            name = port.get("name", "")
        if is_blank(name):
            raise InvalidValueError("Port name cannot be empty")
        return name


__all__ = [
    "WorkflowBuilder",
    "WorkflowDraft",
    "EndpointRef",
]
