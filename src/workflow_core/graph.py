"""
Workflow Graph - Node/edge aggregate and its integrity checks.

WorkflowGraph and Entrypoints never validate on construction; the checks are
explicit methods that WorkflowDefinition.create runs in a fixed order.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import CycleDetectedError, DanglingEdgeReferenceError, UnknownEntrypointError
from .ids import Identifier
from .models import Edge, Node


class _Color(int, Enum):
    """DFS visit state."""
    WHITE = 0  # unvisited
    GRAY = 1   # on the current path
    BLACK = 2  # fully explored


class WorkflowGraph:
    """
    Nodes and edges of a workflow.

    Both collections are copied on the way in and on the way out, so
    callers can never reach the internal storage.
    """

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge]):
        self._nodes: List[Node] = list(nodes)
        self._edges: List[Edge] = list(edges)
        self._node_index: Dict[Identifier, Node] = {}
        for node in self._nodes:
            self._node_index.setdefault(node.id, node)

    @classmethod
    def create(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> "WorkflowGraph":
        return cls(nodes, edges)

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def find_node(self, node_id: Identifier) -> Optional[Node]:
        return self._node_index.get(node_id)

    def has_node(self, node_id: Identifier) -> bool:
        return node_id in self._node_index

    def find_edge(self, edge_id: Identifier) -> Optional[Edge]:
        return next((e for e in self._edges if e.id == edge_id), None)

    def get_incoming_edges(self, node_id: Identifier) -> List[Edge]:
        """Edges targeting the node, in edge-list order."""
        return [e for e in self._edges if e.target.node_id == node_id]

    def get_outgoing_edges(self, node_id: Identifier) -> List[Edge]:
        """Edges leaving the node, in edge-list order."""
        return [e for e in self._edges if e.source.node_id == node_id]

    def validate_edge_references(self) -> None:
        """
        Check that every edge joins two known nodes.

        Raises:
            DanglingEdgeReferenceError: For the first offending edge in edge-list
                order (source checked before target)
        """
        for edge in self._edges:
            if not self.has_node(edge.source.node_id):
                raise DanglingEdgeReferenceError(
                    f"Edge references non-existent source node: {edge.source.node_id}",
                    {"edge_id": edge.id, "node_id": edge.source.node_id, "end": "source"},
                )
            if not self.has_node(edge.target.node_id):
                raise DanglingEdgeReferenceError(
                    f"Edge references non-existent target node: {edge.target.node_id}",
                    {"edge_id": edge.id, "node_id": edge.target.node_id, "end": "target"},
                )

    def adjacency(self) -> Dict[Identifier, List[Identifier]]:
        """Source node id -> target node ids, built from edges only."""
        adjacency: Dict[Identifier, List[Identifier]] = {node.id: [] for node in self._nodes}
        for edge in self._edges:
            targets = adjacency.get(edge.source.node_id)
            if targets is not None:
                targets.append(edge.target.node_id)
        return adjacency

    def validate_acyclic(self) -> None:
        """
        Check the node graph for directed cycles.

        Iterative three-color DFS over every component. Reaching a GRAY node
        is a back edge; a self-loop is the length-1 case.

        Raises:
            CycleDetectedError: With the offending path in ``details["cycle"]``
        """
        adjacency = self.adjacency()
        color: Dict[Identifier, _Color] = {node_id: _Color.WHITE for node_id in adjacency}

        for root in adjacency:
            if color[root] is not _Color.WHITE:
                continue

            color[root] = _Color.GRAY
            path: List[Identifier] = [root]
            stack: List[Tuple[Identifier, Iterator[Identifier]]] = [(root, iter(adjacency[root]))]

            while stack:
                node_id, neighbors = stack[-1]
                neighbor = next(neighbors, None)

                if neighbor is None:
                    color[node_id] = _Color.BLACK
                    stack.pop()
                    path.pop()
                    continue

                state = color.get(neighbor)
                if state is None:
                    # Target outside the node set; reference validation reports it
                    continue
                if state is _Color.GRAY:
                    cycle = path[path.index(neighbor):] + [neighbor]
                    raise CycleDetectedError(
                        "Cycle detected in workflow",
                        {"cycle": cycle},
                    )
                if state is _Color.WHITE:
                    color[neighbor] = _Color.GRAY
                    path.append(neighbor)
                    stack.append((neighbor, iter(adjacency[neighbor])))


class Entrypoints:
    """
    Designated starting node ids.

    Stored positionally, duplicates kept. Order only affects which entrypoint
    the iterator starts from and the order of diagnostics.
    """

    def __init__(self, entrypoints: Iterable[Identifier]):
        self._entrypoints: List[Identifier] = list(entrypoints)

    @classmethod
    def create(cls, entrypoints: Iterable[Identifier]) -> "Entrypoints":
        return cls(entrypoints)

    @property
    def entrypoints(self) -> List[Identifier]:
        return list(self._entrypoints)

    def is_entrypoint(self, node_id: Identifier) -> bool:
        return node_id in self._entrypoints

    def validate_against_graph(self, graph: WorkflowGraph) -> None:
        """
        Check every entrypoint against the graph's nodes.

        Raises:
            UnknownEntrypointError: Listing all unknown ids, in entrypoint order
        """
        unknown = [node_id for node_id in self._entrypoints if not graph.has_node(node_id)]
        if unknown:
            raise UnknownEntrypointError(
                f"Entrypoint references non-existent node: {', '.join(map(str, unknown))}",
                {"entrypoint_ids": unknown},
            )

    def __len__(self) -> int:
        return len(self._entrypoints)

    def __iter__(self) -> Iterator[Identifier]:
        return iter(list(self._entrypoints))


__all__ = [
    "WorkflowGraph",
    "Entrypoints",
]
