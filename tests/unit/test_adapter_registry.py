"""Unit tests for the domain adapter registry."""

import pytest

from datacompliance.adapters import AdapterNotFoundError, AdapterRegistry, DomainAdapter


class TestAdapterRegistry:
    """Tests for AdapterRegistry."""

    def test_registration_order_is_kept(self, fake_adapter):
        """Test that iteration follows registration order."""
        registry = AdapterRegistry()
        registry.register(fake_adapter("forum"))
        registry.register(fake_adapter("subscriptions"))
        registry.register(fake_adapter("articles"))

        assert registry.domains == ["forum", "subscriptions", "articles"]
        assert [a.domain for a in registry] == ["forum", "subscriptions", "articles"]
        assert len(registry) == 3

    def test_constructor_registers_adapters(self, fake_adapter):
        registry = AdapterRegistry([fake_adapter("a"), fake_adapter("b")])

        assert registry.domains == ["a", "b"]
        assert "a" in registry
        assert "c" not in registry

    def test_fake_satisfies_protocol(self, fake_adapter):
        assert isinstance(fake_adapter("a"), DomainAdapter)

    def test_duplicate_domain_rejected(self, fake_adapter):
        """Test that a domain can only be registered once."""
        registry = AdapterRegistry([fake_adapter("a")])

        with pytest.raises(ValueError, match="already registered"):
            registry.register(fake_adapter("a"))

    def test_non_adapter_rejected(self):
        with pytest.raises(TypeError):
            AdapterRegistry().register(object())

    def test_get(self, fake_adapter):
        adapter = fake_adapter("a")
        registry = AdapterRegistry([adapter])

        assert registry.get("a") is adapter

    def test_get_unknown(self):
        with pytest.raises(AdapterNotFoundError) as exc_info:
            AdapterRegistry().get("missing")

        assert exc_info.value.domain == "missing"

    def test_unregister(self, fake_adapter):
        """Test that unregistering removes the adapter from the order."""
        registry = AdapterRegistry([fake_adapter("a"), fake_adapter("b")])

        assert registry.unregister("a") is True
        assert registry.unregister("a") is False
        assert registry.domains == ["b"]
