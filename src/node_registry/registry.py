"""
Node Registry - Central registry of node contracts.

Implements the workflow core's NodeRegistryLookup and NodeConfigValidator
protocols. Definitions are keyed by ``type@version``.

Supports two registration methods:
1. Manual registration
2. Entry-points (for plugin node packs)
"""

from __future__ import annotations

from importlib.metadata import entry_points
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic import ValidationError

from workflow_core.contracts import ValidationResult
from workflow_core.models import NodeSpec
from workflow_core.observability import get_logger

from .models import NodeDefinition


logger = get_logger(__name__)

# Entry point group for node packs
NODE_PACK_ENTRY_POINT = "workflow_core.nodepacks"


class NodeRegistrationError(ValueError):
    """Node definition could not be registered."""
    pass


class NodeRegistry:
    """
    Central registry for node contracts.

    Usage:
        registry = NodeRegistry()
        registry.register_node(define_node("math.add", execute=add))

        contract = registry.lookup("math.add", 1)
    """

    def __init__(self):
        """Initialize empty registry."""
        self._nodes: Dict[str, NodeDefinition] = {}
        self._discovered = False

    def register_node(self, definition: NodeDefinition) -> NodeDefinition:
        """
        Register a node definition.

        Raises:
            NodeRegistrationError: If type@version is already registered
        """
        key = definition.key
        if key in self._nodes:
            raise NodeRegistrationError(f"Node type {key} is already registered")

        self._nodes[key] = definition
        logger.debug(f"Registered node: {key}")
        return definition

    def register_nodes(self, definitions: Iterable[NodeDefinition]) -> int:
        """Register several definitions; returns how many were added."""
        count = 0
        for definition in definitions:
            self.register_node(definition)
            count += 1
        return count

    def discover_entry_points(self, force: bool = False) -> int:
        """
        Discover node packs via entry points.

        Entry points are declared in pyproject.toml:

            [project.entry-points."workflow_core.nodepacks"]
            mypack = "mypack:register_nodes"

        The entry point is a callable returning an iterable of NodeDefinition.

        Args:
            force: Re-discover even if already done

        Returns:
            Number of packs loaded
        """
        if self._discovered and not force:
            return 0

        count = 0
        for ep in entry_points(group=NODE_PACK_ENTRY_POINT):
            try:
                register_func = ep.load()
                added = self.register_nodes(register_func())
            except (ImportError, AttributeError, NodeRegistrationError, ValidationError) as e:
                logger.error(f"Failed to load node pack '{ep.name}': {e}")
                continue
            count += 1
            logger.info(f"Discovered node pack '{ep.name}' with {added} nodes")

        self._discovered = True
        return count

    def lookup(self, node_type: str, version: int) -> Optional[NodeDefinition]:
        """Resolve a node type/version to its definition."""
        return self._nodes.get(f"{node_type}@{version}")

    def get_node(self, node_type: str, version: int) -> Optional[NodeDefinition]:
        """Alias of lookup."""
        return self.lookup(node_type, version)

    def has_node(self, node_type: str, version: int) -> bool:
        """Check if node type/version is registered."""
        return self.lookup(node_type, version) is not None

    def validate(self, spec: NodeSpec, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate a node's config against its registered definition.

        Returns a failure for unknown types, or the config model's
        validation errors formatted as ``field: message``.
        """
        definition = self.lookup(spec.type, spec.version)
        if definition is None:
            return ValidationResult.failure([f"Node type not found: {spec}"])

        if definition.config_model is None:
            return ValidationResult.success()

        try:
            definition.config_model.model_validate(config)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            return ValidationResult.failure(errors)

        return ValidationResult.success()

    def list_node_types(self) -> List[str]:
        """List all registered keys (type@version)."""
        return list(self._nodes.keys())

    def list_nodes(self) -> List[NodeDefinition]:
        """List all registered definitions."""
        return list(self._nodes.values())

    def __len__(self) -> int:
        """Number of registered node types."""
        return len(self._nodes)

    def __iter__(self) -> Iterator[NodeDefinition]:
        """Iterate over node definitions."""
        return iter(list(self._nodes.values()))

    def __contains__(self, key: str) -> bool:
        """Check if a type@version key is registered."""
        return key in self._nodes


# Global registry instance
_global_registry: Optional[NodeRegistry] = None


def get_global_registry() -> NodeRegistry:
    """Get the global node registry (lazy initialized)."""
    global _global_registry
    if _global_registry is None:
        _global_registry = NodeRegistry()
    return _global_registry


def reset_global_registry() -> None:
    """Drop the global registry (useful for testing)."""
    global _global_registry
    _global_registry = None


def register_node(definition: NodeDefinition) -> NodeDefinition:
    """Register a node in the global registry."""
    return get_global_registry().register_node(definition)


__all__ = [
    "NodeRegistry",
    "NodeRegistrationError",
    "get_global_registry",
    "reset_global_registry",
    "register_node",
    "NODE_PACK_ENTRY_POINT",
]
