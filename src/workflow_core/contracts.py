"""
Collaborator contracts consumed by the workflow core.

The core never executes node logic itself. It resolves a node's spec through
a NodeRegistryLookup and hands the resulting contract's ``execute`` to the
caller driving the iterator.
"""

from __future__ import annotations

from typing import Any, Awaitable, Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidValueError
from .models import NodeSpec


NodeOutputs = Dict[str, Any]
NodeResult = Union[NodeOutputs, Awaitable[NodeOutputs]]


class ValidationResult(BaseModel):
    """Outcome of validating a node's config against its contract."""
    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failure(cls, errors: List[str]) -> "ValidationResult":
        if not errors:
            raise InvalidValueError("Failure ValidationResult must have at least one error")
        return cls(valid=False, errors=list(errors))

    def is_valid(self) -> bool:
        return self.valid

    def has_errors(self) -> bool:
        return not self.valid and bool(self.errors)

    def get_errors(self) -> List[str]:
        return list(self.errors)

    def __str__(self) -> str:
        if self.valid:
            return "ValidationResult: SUCCESS"
        return f"ValidationResult: FAILURE - {', '.join(self.errors)}"


@runtime_checkable
class NodeContract(Protocol):
    """Executable unit of work registered for a node type/version."""

    inputs: Mapping[str, str]
    outputs: Mapping[str, str]

    def execute(self, inputs: Dict[str, Any]) -> NodeResult:
        """
        Run the node.

        Args:
            inputs: Node config merged with values propagated from upstream ports

        Returns:
            Output mapping keyed by output port name, or an awaitable of it
        """
        ...


@runtime_checkable
class NodeRegistryLookup(Protocol):
    """Resolves a node type/version to its contract."""

    def lookup(self, node_type: str, version: int) -> Optional[NodeContract]:
        ...


@runtime_checkable
class NodeConfigValidator(Protocol):
    """Optional registry capability: validate a node's config."""

    def validate(self, spec: NodeSpec, config: Dict[str, Any]) -> ValidationResult:
        ...


__all__ = [
    "NodeOutputs",
    "NodeResult",
    "ValidationResult",
    "NodeContract",
    "NodeRegistryLookup",
    "NodeConfigValidator",
]
