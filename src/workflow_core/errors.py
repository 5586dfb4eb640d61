"""
Workflow Errors - Exception hierarchy for the workflow graph core.

Every failure is raised synchronously to the immediate caller:
- InvalidValueError: bad value at entity construction time
- StructuralError: graph integrity violation found by WorkflowDefinition.create
- BuilderError: unresolvable reference passed to WorkflowBuilder
- IterationError: failure while stepping a WorkflowIterator
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class WorkflowError(Exception):
    """Base exception for all workflow core errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidValueError(WorkflowError):
    """Empty or out-of-range value passed to an entity factory."""
    pass


class InvalidSpecError(InvalidValueError):
    """Node spec with an empty type or a version below 1."""
    pass


class StructuralErrorKind(str, Enum):
    """Kinds of graph integrity violations."""
    DANGLING_EDGE_REFERENCE = "dangling_edge_reference"
    UNKNOWN_ENTRYPOINT = "unknown_entrypoint"
    CYCLE_DETECTED = "cycle_detected"
    UNKNOWN_NODE_TYPE = "unknown_node_type"
    INVALID_NODE_CONFIG = "invalid_node_config"


class StructuralError(WorkflowError):
    """Workflow definition violates a structural invariant."""

    kind: StructuralErrorKind

    def __init__(
        self,
        kind: StructuralErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        super().__init__(message, details)


class DanglingEdgeReferenceError(StructuralError):
    """Edge references a node that is not part of the graph."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(StructuralErrorKind.DANGLING_EDGE_REFERENCE, message, details)


class UnknownEntrypointError(StructuralError):
    """Entrypoint references a node that is not part of the graph."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(StructuralErrorKind.UNKNOWN_ENTRYPOINT, message, details)


class CycleDetectedError(StructuralError):
    """Edges form a directed cycle."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(StructuralErrorKind.CYCLE_DETECTED, message, details)


class UnknownNodeTypeError(StructuralError):
    """Node spec does not resolve to a registered node contract."""

    def __init__(self, node_type: str, version: int, node_id: Optional[str] = None):
        self.node_type = node_type
        self.version = version
        super().__init__(
            StructuralErrorKind.UNKNOWN_NODE_TYPE,
            f"Node type not found: {node_type}@{version}",
            {"node_type": node_type, "version": version, "node_id": node_id},
        )


class InvalidNodeConfigError(StructuralError):
    """Node config rejected by the registry's validator."""

    def __init__(self, node_id: str, errors: List[str]):
        self.node_id = node_id
        self.errors = list(errors)
        super().__init__(
            StructuralErrorKind.INVALID_NODE_CONFIG,
            f"Invalid config for node {node_id}: {', '.join(errors)}",
            {"node_id": node_id, "errors": list(errors)},
        )


class BuilderErrorKind(str, Enum):
    """Kinds of builder failures."""
    NODE_NOT_FOUND = "node_not_found"
    PORT_NOT_FOUND = "port_not_found"
    DUPLICATE_NODE = "duplicate_node"


class BuilderError(WorkflowError):
    """Builder could not resolve a node or port reference."""

    kind: BuilderErrorKind

    def __init__(
        self,
        kind: BuilderErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        super().__init__(message, details)


class NodeNotFoundError(BuilderError):
    """Referenced node id has not been added to the builder."""

    def __init__(self, message: str, node_id: str):
        super().__init__(BuilderErrorKind.NODE_NOT_FOUND, message, {"node_id": node_id})


class PortNotFoundError(BuilderError):
    """Referenced port does not exist on the node in the expected direction."""

    def __init__(self, message: str, node_id: str, port: str):
        super().__init__(
            BuilderErrorKind.PORT_NOT_FOUND,
            message,
            {"node_id": node_id, "port": port},
        )


class DuplicateNodeError(BuilderError):
    """Externally supplied node id is already in use."""

    def __init__(self, node_id: str):
        super().__init__(
            BuilderErrorKind.DUPLICATE_NODE,
            f"Node already exists: {node_id}",
            {"node_id": node_id},
        )


class IterationErrorKind(str, Enum):
    """Kinds of iteration failures."""
    UNKNOWN_NODE_TYPE = "unknown_node_type"
    MISSING_REGISTRY = "missing_registry"


class IterationError(WorkflowError):
    """Iterator could not produce the next execution step."""

    kind: IterationErrorKind

    def __init__(
        self,
        kind: IterationErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        super().__init__(message, details)


__all__ = [
    "WorkflowError",
    "InvalidValueError",
    "InvalidSpecError",
    "StructuralErrorKind",
    "StructuralError",
    "DanglingEdgeReferenceError",
    "UnknownEntrypointError",
    "CycleDetectedError",
    "UnknownNodeTypeError",
    "InvalidNodeConfigError",
    "BuilderErrorKind",
    "BuilderError",
    "NodeNotFoundError",
    "PortNotFoundError",
    "DuplicateNodeError",
    "IterationErrorKind",
    "IterationError",
]
