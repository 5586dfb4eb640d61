"""
Workflow Definition - Validated, immutable aggregate root.

A WorkflowDefinition only exists if every structural invariant holds:
construction either succeeds completely or raises, never returning a
partially valid instance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import get_settings
from .contracts import NodeConfigValidator, NodeRegistryLookup
from .errors import InvalidNodeConfigError, IterationError, IterationErrorKind, UnknownNodeTypeError
from .graph import Entrypoints, WorkflowGraph
from .ids import Identifier
from .models import Edge, Node, WorkflowMetadata
from .observability import get_logger, with_workflow_context

if TYPE_CHECKING:
    from .iterator import WorkflowIterator


logger = get_logger(__name__)


class SimpleNode(BaseModel):
    """Node projection: id and type only."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: str


class SimpleEdge(BaseModel):
    """Edge projection between node ids."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: str


class GraphStructure(BaseModel):
    """
    Serialization-friendly snapshot of a definition's topology.

    Always regenerated from the definition; never the canonical state.
    """
    model_config = ConfigDict(frozen=True)

    nodes: List[SimpleNode] = Field(default_factory=list)
    edges: List[SimpleEdge] = Field(default_factory=list)
    entrypoints: List[str] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with ``from``/``to`` edge keys."""
        return self.model_dump(by_alias=True)


class WorkflowDefinition:
    """
    Metadata + graph + entrypoints.

    Use ``create`` (or WorkflowBuilder.build). All read accessors return
    copies; nothing mutates the definition after construction.
    """

    def __init__(
        self,
        metadata: WorkflowMetadata,
        graph: WorkflowGraph,
        entrypoints: Entrypoints,
        registry: Optional[NodeRegistryLookup] = None,
    ):
        self._metadata = metadata
        self._graph = graph
        self._entrypoints = entrypoints
        # Only used to resolve contracts for iterators
        self._registry = registry

    @classmethod
    def create(
        cls,
        metadata: WorkflowMetadata,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        entrypoint_ids: Iterable[Identifier],
        registry: Optional[NodeRegistryLookup] = None,
        validate_config: Optional[bool] = None,
    ) -> "WorkflowDefinition":
        """
        Build and validate a definition.

        Checks run in a fixed order and the first failure aborts:
        1. edge references
        2. entrypoint references
        3. acyclicity
        4. node types resolve in the registry (if one is given)
        5. node configs validate (if enabled and the registry can validate)

        Args:
            metadata: Workflow metadata
            nodes: Graph nodes
            edges: Graph edges
            entrypoint_ids: Starting node ids
            registry: Optional node registry lookup
            validate_config: Override the ``validate_node_config`` setting

        Returns:
            Validated WorkflowDefinition

        Raises:
            StructuralError: On the first violated invariant
        """
        graph = WorkflowGraph.create(nodes, edges)
        entrypoints = Entrypoints.create(entrypoint_ids)
        extra = with_workflow_context(workflow_name=metadata.name)

        graph.validate_edge_references()
        entrypoints.validate_against_graph(graph)
        graph.validate_acyclic()

        if registry is not None:
            cls._validate_node_types(graph, registry)

            if validate_config is None:
                validate_config = get_settings().validate_node_config
            if validate_config and isinstance(registry, NodeConfigValidator):
                cls._validate_node_configs(graph, registry)

        logger.debug(
            f"Workflow definition created: {graph.node_count} nodes, {graph.edge_count} edges",
            extra=extra,
        )
        return cls(metadata, graph, entrypoints, registry)

    @staticmethod
    def _validate_node_types(graph: WorkflowGraph, registry: NodeRegistryLookup) -> None:
        for node in graph.nodes:
            if registry.lookup(node.spec.type, node.spec.version) is None:
                raise UnknownNodeTypeError(node.spec.type, node.spec.version, node.id)

    @staticmethod
    def _validate_node_configs(graph: WorkflowGraph, validator: NodeConfigValidator) -> None:
        for node in graph.nodes:
            result = validator.validate(node.spec, dict(node.config))
            if not result.is_valid():
                raise InvalidNodeConfigError(node.id, result.get_errors())

    # --- Read accessors -------------------------------------------------

    @property
    def metadata(self) -> WorkflowMetadata:
        return self._metadata

    @property
    def nodes(self) -> List[Node]:
        return self._graph.nodes

    @property
    def edges(self) -> List[Edge]:
        return self._graph.edges

    @property
    def entrypoints(self) -> List[Identifier]:
        return self._entrypoints.entrypoints

    @property
    def node_count(self) -> int:
        return self._graph.node_count

    @property
    def edge_count(self) -> int:
        return self._graph.edge_count

    def find_node(self, node_id: Identifier) -> Optional[Node]:
        return self._graph.find_node(node_id)

    def has_node(self, node_id: Identifier) -> bool:
        return self._graph.has_node(node_id)

    def find_edge(self, edge_id: Identifier) -> Optional[Edge]:
        return self._graph.find_edge(edge_id)

    def get_incoming_edges(self, node_id: Identifier) -> List[Edge]:
        return self._graph.get_incoming_edges(node_id)

    def get_outgoing_edges(self, node_id: Identifier) -> List[Edge]:
        return self._graph.get_outgoing_edges(node_id)

    def is_entrypoint(self, node_id: Identifier) -> bool:
        return self._entrypoints.is_entrypoint(node_id)

    # --- Projections ----------------------------------------------------

    def get_graph_structure(self) -> GraphStructure:
        """Build a fresh topology snapshot."""
        return GraphStructure(
            nodes=[SimpleNode(id=node.id, type=node.spec.type) for node in self._graph.nodes],
            edges=[
                SimpleEdge(from_=edge.source.node_id, to=edge.target.node_id)
                for edge in self._graph.edges
            ],
            entrypoints=self._entrypoints.entrypoints,
        )

    def create_iterator(self, registry: Optional[NodeRegistryLookup] = None) -> "WorkflowIterator":
        """
        Start an independent execution session over this definition.

        Args:
            registry: Registry used to resolve node contracts; defaults to
                the registry the definition was created with

        Raises:
            IterationError: If no registry is available
        """
        from .iterator import WorkflowIterator

        resolved = registry if registry is not None else self._registry
        if resolved is None:
            raise IterationError(
                IterationErrorKind.MISSING_REGISTRY,
                "No node registry available to resolve node contracts",
            )
        return WorkflowIterator(self, resolved)

    def __str__(self) -> str:
        return (
            f"WorkflowDefinition({self._metadata}, "
            f"{self._graph.node_count} nodes, {self._graph.edge_count} edges)"
        )


__all__ = [
    "WorkflowDefinition",
    "GraphStructure",
    "SimpleNode",
    "SimpleEdge",
]
