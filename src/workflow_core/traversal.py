"""
Workflow Traversal - Read-only graph analysis over a definition.

Walks the node graph (edges only, entrypoints ignored). A visitor returning
``False`` stops the walk; any other return value continues it.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional, Set, Tuple

from .definition import WorkflowDefinition
from .ids import Identifier
from .models import Node


NodeVisitor = Callable[[Node, int], Optional[bool]]


class TraversalOrder(str, Enum):
    """Traversal strategies."""
    DEPTH_FIRST = "depth_first"
    BREADTH_FIRST = "breadth_first"
    TOPOLOGICAL = "topological"


def _successors(definition: WorkflowDefinition) -> Dict[Identifier, List[Identifier]]:
    successors: Dict[Identifier, List[Identifier]] = {node.id: [] for node in definition.nodes}
    for edge in definition.edges:
        successors[edge.source.node_id].append(edge.target.node_id)
    return successors


class WorkflowTraversal:
    """Traversal and analysis helpers."""

    @staticmethod
    def traverse(
        definition: WorkflowDefinition,
        start_node_id: Identifier,
        visitor: NodeVisitor,
        order: TraversalOrder = TraversalOrder.DEPTH_FIRST,
    ) -> None:
        """
        Visit nodes reachable from ``start_node_id``.

        TOPOLOGICAL ignores the start node and visits the whole graph level
        by level, passing the level as depth.
        """
        if order == TraversalOrder.DEPTH_FIRST:
            WorkflowTraversal._dfs(definition, start_node_id, visitor)
        elif order == TraversalOrder.BREADTH_FIRST:
            WorkflowTraversal._bfs(definition, start_node_id, visitor)
        else:
            WorkflowTraversal._topological(definition, visitor)

    @staticmethod
    def _dfs(definition: WorkflowDefinition, start_node_id: Identifier, visitor: NodeVisitor) -> None:
        successors = _successors(definition)
        visited: Set[Identifier] = set()
        stack: List[Tuple[Identifier, int]] = [(start_node_id, 0)]

        while stack:
            node_id, depth = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)

            node = definition.find_node(node_id)
            if node is None:
                continue
            if visitor(node, depth) is False:
                return

            # Reversed so the first successor is visited first
            for successor in reversed(successors.get(node_id, [])):
                if successor not in visited:
                    stack.append((successor, depth + 1))

    @staticmethod
    def _bfs(definition: WorkflowDefinition, start_node_id: Identifier, visitor: NodeVisitor) -> None:
        successors = _successors(definition)
        visited: Set[Identifier] = set()
        queue: Deque[Tuple[Identifier, int]] = deque([(start_node_id, 0)])

        while queue:
            node_id, depth = queue.popleft()
            if node_id in visited:
                continue
            visited.add(node_id)

            node = definition.find_node(node_id)
            if node is None:
                continue
            if visitor(node, depth) is False:
                return

            for successor in successors.get(node_id, []):
                if successor not in visited:
                    queue.append((successor, depth + 1))

    @staticmethod
    def _topological(definition: WorkflowDefinition, visitor: NodeVisitor) -> None:
        for depth, level in enumerate(WorkflowTraversal.topological_levels(definition)):
            for node in level:
                if visitor(node, depth) is False:
                    return

    @staticmethod
    def topological_levels(definition: WorkflowDefinition) -> List[List[Node]]:
        """
        Group nodes into dependency levels (Kahn's algorithm).

        Level 0 holds nodes without incoming edges; within a level nodes keep
        node-list order.
        """
        successors = _successors(definition)
        in_degree: Dict[Identifier, int] = {node.id: 0 for node in definition.nodes}
        for edge in definition.edges:
            in_degree[edge.target.node_id] += 1

        levels: List[List[Node]] = []
        current = [node for node in definition.nodes if in_degree[node.id] == 0]
        while current:
            levels.append(current)
            ready: Set[Identifier] = set()
            for node in current:
                for successor in successors[node.id]:
                    in_degree[successor] -= 1
                    if in_degree[successor] == 0:
                        ready.add(successor)
            current = [node for node in definition.nodes if node.id in ready]
        return levels

    @staticmethod
    def topological_order(definition: WorkflowDefinition) -> List[Node]:
        """All nodes in dependency order, ties broken by node-list order."""
        return [node for level in WorkflowTraversal.topological_levels(definition) for node in level]

    @staticmethod
    def find_root_nodes(definition: WorkflowDefinition) -> List[Node]:
        """Nodes with no incoming edges."""
        targets = {edge.target.node_id for edge in definition.edges}
        return [node for node in definition.nodes if node.id not in targets]

    @staticmethod
    def find_leaf_nodes(definition: WorkflowDefinition) -> List[Node]:
        """Nodes with no outgoing edges."""
        sources = {edge.source.node_id for edge in definition.edges}
        return [node for node in definition.nodes if node.id not in sources]

    @staticmethod
    def get_descendants(definition: WorkflowDefinition, node_id: Identifier) -> List[Node]:
        """Nodes reachable from ``node_id``, excluding itself, in depth-first order."""
        descendants: List[Node] = []

        def collect(node: Node, depth: int) -> None:
            if node.id != node_id:
                descendants.append(node)

        WorkflowTraversal.traverse(definition, node_id, collect)
        return descendants


__all__ = [
    "NodeVisitor",
    "TraversalOrder",
    "WorkflowTraversal",
]
