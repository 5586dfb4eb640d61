"""
Node Registry Models - Metadata and contracts for registered node types.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workflow_core.contracts import NodeResult


# namespace.action, e.g. "http.request" or "email.sendMail"
NODE_TYPE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9]*\.[a-zA-Z][a-zA-Z0-9]*$")


class NodeMetadata(BaseModel):
    """Human-facing description of a node type."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    description: str = Field("", description="Node description")


class NodeDefinition(BaseModel):
    """
    A registered node contract.

    ``inputs``/``outputs`` map port names to type labels (e.g. "string").
    ``execute`` receives the gathered inputs and returns an output mapping
    keyed by output port name, directly or as an awaitable.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Identity
    type: str = Field(..., description="Node type (namespace.action)")
    version: int = Field(1, description="Node version")

    # Display
    metadata: NodeMetadata

    # Runtime
    inputs: Dict[str, str] = Field(default_factory=dict)
    outputs: Dict[str, str] = Field(default_factory=dict)
    execute: Callable[[Dict[str, Any]], NodeResult]
    config_model: Optional[Type[BaseModel]] = Field(
        None,
        description="Pydantic model used to validate node config",
    )

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if not NODE_TYPE_NAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid node type name: {v}. Expected format: namespace.action "
                f'(e.g., "console.log")'
            )
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Node version must be at least 1")
        return v

    @property
    def key(self) -> str:
        """Registry key: type@version."""
        return f"{self.type}@{self.version}"


def define_node(
    type: str,
    execute: Callable[[Dict[str, Any]], NodeResult],
    version: int = 1,
    name: Optional[str] = None,
    description: str = "",
    inputs: Optional[Dict[str, str]] = None,
    outputs: Optional[Dict[str, str]] = None,
    config_model: Optional[Type[BaseModel]] = None,
) -> NodeDefinition:
    """Convenience factory for NodeDefinition."""
    return NodeDefinition(
        type=type,
        version=version,
        metadata=NodeMetadata(name=name or type, description=description),
        inputs=inputs or {},
        outputs=outputs or {},
        execute=execute,
        config_model=config_model,
    )


__all__ = [
    "NODE_TYPE_NAME_PATTERN",
    "NodeMetadata",
    "NodeDefinition",
    "define_node",
]
