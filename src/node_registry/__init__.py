"""
Node Registry - Registration and lookup of node contracts.

This package provides:
- NodeDefinition: A registered node type with its executable unit
- NodeRegistry: type@version registry implementing the workflow core's lookup

Supports entry-points based discovery for plugin node packs.
"""

from .models import NodeDefinition, NodeMetadata, define_node
from .registry import (
    NodeRegistrationError,
    NodeRegistry,
    get_global_registry,
    register_node,
    reset_global_registry,
)

__all__ = [
    "NodeDefinition",
    "NodeMetadata",
    "define_node",
    "NodeRegistry",
    "NodeRegistrationError",
    "get_global_registry",
    "register_node",
    "reset_global_registry",
]
