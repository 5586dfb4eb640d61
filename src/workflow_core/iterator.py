"""
Workflow Iterator - Pull-based topological stepping over a definition.

The iterator never runs node logic. The caller drives it:

    iterator = definition.create_iterator(registry)
    step = iterator.get_next_step()
    while step is not None:
        outputs = await step.execute(step.inputs)
        iterator.record_output(step.node_id, outputs)
        step = iterator.get_next_step()

One iterator is one traversal: it is single-use and must be driven by a
single caller. Independent iterators over the same definition share nothing
mutable.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Iterator, List, Optional, Set

from .contracts import NodeRegistryLookup, NodeResult
from .errors import IterationError, IterationErrorKind
from .ids import Identifier
from .models import Edge, Node
from .observability import get_logger, with_workflow_context

if TYPE_CHECKING:
    from .definition import WorkflowDefinition


logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionStep:
    """
    A node that is ready to run.

    ``inputs`` is the node's static config overlaid with values propagated
    from upstream output ports.
    """
    node_id: Identifier
    node_type: str
    node_version: int
    config: Dict[str, Any]
    inputs: Dict[str, Any]
    execute: Callable[[Dict[str, Any]], NodeResult] = field(repr=False)


class WorkflowIterator:
    """
    Stateful, single-pass stepper.

    State:
    - executed node ids (a node is marked as soon as it is handed out)
    - recorded outputs per node
    """

    def __init__(self, definition: "WorkflowDefinition", registry: NodeRegistryLookup):
        self._workflow_name = definition.metadata.name
        self._nodes: List[Node] = definition.nodes
        self._entrypoints: List[Identifier] = definition.entrypoints
        self._incoming: Dict[Identifier, List[Edge]] = {
            node.id: definition.get_incoming_edges(node.id) for node in self._nodes
        }
        self._node_index: Dict[Identifier, Node] = {}
        for node in self._nodes:
            self._node_index.setdefault(node.id, node)
        self._registry = registry

        self._executed: Set[Identifier] = set()
        self._outputs: Dict[Identifier, Dict[str, Any]] = {}
        self._exhausted = False

    @property
    def executed_node_ids(self) -> FrozenSet[Identifier]:
        return frozenset(self._executed)

    @property
    def is_exhausted(self) -> bool:
        """True once get_next_step has returned None."""
        return self._exhausted

    def get_next_step(self) -> Optional[ExecutionStep]:
        """
        Hand out the next ready node, or None when traversal is over.

        Raises:
            IterationError: If the registry no longer resolves the node's spec
        """
        node = self._find_next_ready_node()
        if node is None:
            self._exhausted = True
            return None

        self._executed.add(node.id)

        contract = self._registry.lookup(node.spec.type, node.spec.version)
        if contract is None:
            raise IterationError(
                IterationErrorKind.UNKNOWN_NODE_TYPE,
                f"Node type not found: {node.spec.type}@{node.spec.version}",
                {"node_id": node.id, "node_type": node.spec.type, "version": node.spec.version},
            )

        inputs = self._collect_inputs(node)

        logger.debug(
            "Execution step ready",
            extra=with_workflow_context(
                workflow_name=self._workflow_name,
                node_id=node.id,
                node_type=node.spec.type,
                node_version=node.spec.version,
            ),
        )

        return ExecutionStep(
            node_id=node.id,
            node_type=node.spec.type,
            node_version=node.spec.version,
            config=copy.deepcopy(dict(node.config)),
            inputs=inputs,
            execute=contract.execute,
        )

    def record_output(self, node_id: Identifier, outputs: Dict[str, Any]) -> None:
        """Store (or overwrite) a node's outputs for downstream propagation."""
        self._outputs[node_id] = dict(outputs)

    def get_output(self, node_id: Identifier) -> Optional[Dict[str, Any]]:
        outputs = self._outputs.get(node_id)
        return dict(outputs) if outputs is not None else None

    def __iter__(self) -> Iterator[ExecutionStep]:
        """Yield steps until exhausted. Record outputs between steps."""
        while True:
            step = self.get_next_step()
            if step is None:
                return
            yield step

    def _find_next_ready_node(self) -> Optional[Node]:
        if not self._executed:
            # Only the first entrypoint in node-list order starts the run
            return next((n for n in self._nodes if n.id in self._entrypoints), None)

        for node in self._nodes:
            if node.id in self._executed:
                continue
            incoming = self._incoming[node.id]
            # Nodes without predecessors only ever start as entrypoints
            if not incoming:
                continue
            if all(edge.source.node_id in self._executed for edge in incoming):
                return node
        return None

    def _collect_inputs(self, node: Node) -> Dict[str, Any]:
        """Config overlaid with upstream outputs. Unresolvable edges are skipped."""
        inputs: Dict[str, Any] = copy.deepcopy(dict(node.config))

        for edge in self._incoming[node.id]:
            source_outputs = self._outputs.get(edge.source.node_id)
            if source_outputs is None:
                continue

            source_node = self._node_index.get(edge.source.node_id)
            if source_node is None:
                continue

            source_port = source_node.find_output_port(edge.source.port_id)
            if source_port is None:
                continue

            target_port = node.find_input_port(edge.target.port_id)
            if target_port is None:
                continue

            if source_port.name in source_outputs:
                inputs[target_port.name] = source_outputs[source_port.name]

        return inputs


__all__ = [
    "ExecutionStep",
    "WorkflowIterator",
]
