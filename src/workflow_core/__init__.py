"""
Workflow Core - Directed-acyclic workflow graphs.

This package provides:
- Entities: Port, NodeSpec, Node, EdgeEndpoint, Edge, WorkflowMetadata
- WorkflowDefinition: Validated, immutable workflow aggregate
- WorkflowBuilder: Fluent construction of definitions
- WorkflowIterator: Pull-based topological stepping for external executors
- WorkflowTraversal: Read-only graph analysis

Node logic is never executed here; contracts are resolved through a
NodeRegistryLookup supplied by the caller.
"""

from .contracts import NodeConfigValidator, NodeContract, NodeRegistryLookup, ValidationResult
from .errors import (
    BuilderError,
    BuilderErrorKind,
    CycleDetectedError,
    DanglingEdgeReferenceError,
    DuplicateNodeError,
    InvalidNodeConfigError,
    InvalidSpecError,
    InvalidValueError,
    IterationError,
    IterationErrorKind,
    NodeNotFoundError,
    PortNotFoundError,
    StructuralError,
    StructuralErrorKind,
    UnknownEntrypointError,
    UnknownNodeTypeError,
    WorkflowError,
)
from .ids import Identifier, generate_id
from .models import Edge, EdgeEndpoint, Node, NodePorts, NodeSpec, Port, WorkflowMetadata
from .graph import Entrypoints, WorkflowGraph
from .definition import GraphStructure, SimpleEdge, SimpleNode, WorkflowDefinition
from .builder import EndpointRef, WorkflowBuilder, WorkflowDraft
from .iterator import ExecutionStep, WorkflowIterator
from .traversal import TraversalOrder, WorkflowTraversal

__version__ = "1.0.0"

__all__ = [
    # Entities
    "Identifier",
    "generate_id",
    "Port",
    "NodeSpec",
    "NodePorts",
    "Node",
    "EdgeEndpoint",
    "Edge",
    "WorkflowMetadata",
    # Graph
    "WorkflowGraph",
    "Entrypoints",
    # Definition
    "WorkflowDefinition",
    "GraphStructure",
    "SimpleNode",
    "SimpleEdge",
    # Builder
    "WorkflowBuilder",
    "WorkflowDraft",
    "EndpointRef",
    # Iteration
    "ExecutionStep",
    "WorkflowIterator",
    # Traversal
    "TraversalOrder",
    "WorkflowTraversal",
    # Contracts
    "NodeContract",
    "NodeRegistryLookup",
    "NodeConfigValidator",
    "ValidationResult",
    # Errors
    "WorkflowError",
    "InvalidValueError",
    "InvalidSpecError",
    "StructuralError",
    "StructuralErrorKind",
    "DanglingEdgeReferenceError",
    "UnknownEntrypointError",
    "CycleDetectedError",
    "UnknownNodeTypeError",
    "InvalidNodeConfigError",
    "BuilderError",
    "BuilderErrorKind",
    "NodeNotFoundError",
    "PortNotFoundError",
    "DuplicateNodeError",
    "IterationError",
    "IterationErrorKind",
]
