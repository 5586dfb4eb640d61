"""
Tests for the node registry.
"""

import pytest
from pydantic import BaseModel, ValidationError

from node_registry import (
    NodeDefinition,
    NodeRegistrationError,
    NodeRegistry,
    define_node,
    get_global_registry,
    register_node,
    reset_global_registry,
)
from node_registry import registry as registry_module
from workflow_core import NodeConfigValidator, NodeContract, NodeRegistryLookup, NodeSpec


def _noop(inputs):
    return {}


class TestNodeDefinition:
    """Test NodeDefinition validation."""

    def test_define_node_defaults(self):
        definition = define_node("math.add", execute=_noop)

        assert definition.version == 1
        assert definition.key == "math.add@1"
        assert definition.metadata.name == "math.add"
        assert definition.inputs == {}

    @pytest.mark.parametrize("node_type", ["Math.add", "mathadd", "math.", ".add", "math.add.x"])
    def test_rejects_malformed_type(self, node_type):
        with pytest.raises(ValidationError, match="Invalid node type name"):
            define_node(node_type, execute=_noop)

    def test_accepts_camel_case_action(self):
        assert define_node("email.sendMail", execute=_noop).type == "email.sendMail"

    def test_rejects_version_below_one(self):
        with pytest.raises(ValidationError):
            define_node("math.add", execute=_noop, version=0)

    def test_is_a_node_contract(self):
        definition = define_node(
            "math.add", execute=_noop, inputs={"a": "number"}, outputs={"sum": "number"}
        )

        assert isinstance(definition, NodeContract)
        assert isinstance(definition, NodeDefinition)


class TestNodeRegistry:
    """Test registration and lookup."""

    def test_register_and_lookup(self):
        registry = NodeRegistry()
        definition = registry.register_node(define_node("math.add", execute=_noop))

        assert registry.lookup("math.add", 1) is definition
        assert registry.get_node("math.add", 1) is definition
        assert registry.has_node("math.add", 1)
        assert not registry.has_node("math.add", 2)
        assert registry.lookup("math.sub", 1) is None
        assert "math.add@1" in registry
        assert len(registry) == 1

    def test_versions_are_distinct_keys(self):
        registry = NodeRegistry()
        registry.register_nodes(
            [define_node("math.add", execute=_noop), define_node("math.add", execute=_noop, version=2)]
        )

        assert registry.list_node_types() == ["math.add@1", "math.add@2"]
        assert [d.version for d in registry] == [1, 2]
        assert len(registry.list_nodes()) == 2

    def test_duplicate_registration_fails(self):
        registry = NodeRegistry()
        registry.register_node(define_node("math.add", execute=_noop))

        with pytest.raises(NodeRegistrationError, match="math.add@1 is already registered"):
            registry.register_node(define_node("math.add", execute=_noop))

    def test_implements_core_protocols(self):
        registry = NodeRegistry()

        assert isinstance(registry, NodeRegistryLookup)
        assert isinstance(registry, NodeConfigValidator)


class _Config(BaseModel):
    url: str


class TestValidate:
    """Test config validation."""

    @pytest.fixture
    def registry(self):
        registry = NodeRegistry()
        registry.register_node(define_node("http.request", execute=_noop, config_model=_Config))
        registry.register_node(define_node("math.add", execute=_noop))
        return registry

    def test_valid_config(self, registry):
        result = registry.validate(NodeSpec.create("http.request", 1), {"url": "https://x"})

        assert result.is_valid()
        assert result.get_errors() == []

    def test_invalid_config(self, registry):
        result = registry.validate(NodeSpec.create("http.request", 1), {})

        assert result.has_errors()
        assert result.get_errors()[0].startswith("url:")

    def test_no_config_model_accepts_anything(self, registry):
        assert registry.validate(NodeSpec.create("math.add", 1), {"anything": 1}).is_valid()

    def test_unknown_type(self, registry):
        result = registry.validate(NodeSpec.create("math.sub", 1), {})

        assert result.get_errors() == ["Node type not found: math.sub@1"]


class _FakeEntryPoint:
    def __init__(self, name, loader):
        self.name = name
        self._loader = loader

    def load(self):
        return self._loader()


class TestEntryPointDiscovery:
    """Test node pack discovery."""

    def test_discovers_packs(self, monkeypatch):
        def pack():
            return [define_node("pack.one", execute=_noop), define_node("pack.two", execute=_noop)]

        def broken():
            raise ImportError("missing dependency")

        monkeypatch.setattr(
            registry_module,
            "entry_points",
            lambda group: [_FakeEntryPoint("good", lambda: pack), _FakeEntryPoint("bad", broken)],
        )
        registry = NodeRegistry()

        assert registry.discover_entry_points() == 1
        assert registry.has_node("pack.two", 1)
        assert registry.discover_entry_points() == 0
        assert registry.discover_entry_points(force=True) == 0


class TestGlobalRegistry:
    """Test the module-level registry."""

    def test_register_node_uses_global(self):
        reset_global_registry()
        try:
            register_node(define_node("math.add", execute=_noop))

            assert get_global_registry().has_node("math.add", 1)
        finally:
            reset_global_registry()

    def test_reset_drops_registrations(self):
        register_node(define_node("math.mul", execute=_noop))
        reset_global_registry()

        assert not get_global_registry().has_node("math.mul", 1)
