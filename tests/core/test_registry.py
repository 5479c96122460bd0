"""
Tests for the store registry.

Tests cover:
- StoreRegistry.register: one instance per kind, unknown kinds, factory errors
- StoreRegistry.enumerate_all: registration order
- StoreRegistry.fetch / store_for / close
- create_registry: wiring of the real stores and lazy Vault credentials
"""

import pytest

from core.exceptions import ConfigurationError, DiscoveryError, FetchError
from core.filesystem_store import FilesystemStore
from core.models import Candidate, PathSpec, StoreKind, SwitchConfig
from core.registry import StoreRegistry, create_registry
from core.vault_store import VaultStore


@pytest.fixture
def counting_factories(fake_store_factory):
    """Factories that record every store they construct."""
    built: dict[StoreKind, list] = {StoreKind.FILESYSTEM: [], StoreKind.VAULT: []}

    def make(kind):
        def factory():
            store = fake_store_factory(kind)
            built[kind].append(store)
            return store

        return factory

    factories = {kind: make(kind) for kind in StoreKind}
    return factories, built


# ============================================================================
# Tests for StoreRegistry.register
# ============================================================================


@pytest.mark.unit
def test_register_constructs_one_store_per_kind(counting_factories):
    """Repeated roots of the same kind share a single store instance."""
    factories, built = counting_factories
    registry = StoreRegistry(factories)

    registry.register_all(
        [
            PathSpec("/a", StoreKind.FILESYSTEM),
            PathSpec("kv/a", StoreKind.VAULT),
            PathSpec("/b", StoreKind.FILESYSTEM),
            PathSpec("kv/b", StoreKind.VAULT),
            PathSpec("/c", StoreKind.FILESYSTEM),
        ]
    )

    assert len(built[StoreKind.FILESYSTEM]) == 1
    assert len(built[StoreKind.VAULT]) == 1
    assert [p.location for p in built[StoreKind.FILESYSTEM][0].added] == ["/a", "/b", "/c"]
    assert [p.location for p in built[StoreKind.VAULT][0].added] == ["kv/a", "kv/b"]


@pytest.mark.unit
def test_register_is_lazy(counting_factories):
    """No store is constructed for a kind without roots."""
    factories, built = counting_factories
    registry = StoreRegistry(factories)

    registry.register(PathSpec("/a", StoreKind.FILESYSTEM))

    assert built[StoreKind.VAULT] == []
    assert [s.kind for s in registry.stores] == [StoreKind.FILESYSTEM]


@pytest.mark.unit
def test_register_unknown_kind_raises_configuration_error(fake_store_factory):
    """A kind without factory is rejected."""
    registry = StoreRegistry({StoreKind.FILESYSTEM: lambda: fake_store_factory(StoreKind.FILESYSTEM)})

    with pytest.raises(ConfigurationError, match="Unknown store 'vault'"):
        registry.register(PathSpec("kv", StoreKind.VAULT))


@pytest.mark.unit
def test_register_propagates_factory_configuration_error():
    """Factory failures abort registration with ConfigurationError."""

    def failing_factory():
        raise ConfigurationError("no token")

    registry = StoreRegistry({StoreKind.VAULT: failing_factory})

    with pytest.raises(ConfigurationError, match="no token"):
        registry.register(PathSpec("kv", StoreKind.VAULT))


# ============================================================================
# Tests for StoreRegistry.enumerate_all
# ============================================================================


@pytest.mark.unit
def test_enumerate_all_preserves_registration_order(fake_store_factory):
    """Stores enumerate in the order their kind was first registered."""
    vault_items = [
        Candidate("kv/1", StoreKind.VAULT, "kv/1"),
        DiscoveryError("boom"),
        Candidate("kv/2", StoreKind.VAULT, "kv/2"),
    ]
    fs_items = [Candidate("/x/config", StoreKind.FILESYSTEM, "x/config")]
    registry = StoreRegistry(
        {
            StoreKind.VAULT: lambda: fake_store_factory(StoreKind.VAULT, vault_items),
            StoreKind.FILESYSTEM: lambda: fake_store_factory(StoreKind.FILESYSTEM, fs_items),
        }
    )
    registry.register(PathSpec("kv", StoreKind.VAULT))
    registry.register(PathSpec("/x", StoreKind.FILESYSTEM))

    assert list(registry.enumerate_all()) == vault_items + fs_items


# ============================================================================
# Tests for StoreRegistry.fetch / store_for / close
# ============================================================================


@pytest.mark.unit
def test_fetch_routes_to_owning_store(fake_store_factory):
    """fetch() resolves the candidate's kind back to the registered instance."""
    store = fake_store_factory(StoreKind.FILESYSTEM, contents={"/x/config": b"data"})
    registry = StoreRegistry({StoreKind.FILESYSTEM: lambda: store})
    registry.register(PathSpec("/x", StoreKind.FILESYSTEM))

    content, _ = registry.fetch(Candidate("/x/config", StoreKind.FILESYSTEM, "config"))

    assert content == b"data"
    assert store.fetch_calls == ["/x/config"]


@pytest.mark.unit
def test_store_for_unregistered_kind_raises_fetch_error():
    """Fetching from a kind without store fails with FetchError."""
    registry = StoreRegistry({})

    with pytest.raises(FetchError):
        registry.fetch(Candidate("kv/a", StoreKind.VAULT, "kv/a"))


@pytest.mark.unit
def test_context_manager_closes_stores(fake_store_factory):
    """Leaving the context closes stores that hold clients."""
    store = fake_store_factory(StoreKind.VAULT)

    with StoreRegistry({StoreKind.VAULT: lambda: store}) as registry:
        registry.register(PathSpec("kv", StoreKind.VAULT))

    assert store.closed is True


# ============================================================================
# Tests for create_registry
# ============================================================================


@pytest.mark.unit
def test_create_registry_filesystem_only_needs_no_vault_credentials(tmp_path, monkeypatch):
    """Vault credentials are not resolved without a Vault root."""
    monkeypatch.delenv("VAULT_ADDR", raising=False)
    monkeypatch.delenv("VAULT_TOKEN", raising=False)
    config = SwitchConfig(path_specs=(PathSpec(str(tmp_path), StoreKind.FILESYSTEM),))

    registry = create_registry(config)

    assert len(registry.stores) == 1
    assert isinstance(registry.stores[0], FilesystemStore)


@pytest.mark.unit
def test_create_registry_builds_vault_store_from_flags(tmp_path, monkeypatch):
    """The Vault store is built once from the resolved credentials."""
    monkeypatch.delenv("VAULT_ADDR", raising=False)
    config = SwitchConfig(
        path_specs=(
            PathSpec("kv/a", StoreKind.VAULT),
            PathSpec("kv/b", StoreKind.VAULT),
        ),
        vault_api_address="http://from-config:8200",
    )

    with create_registry(config, vault_api_address="http://from-flag:8200", vault_token="t") as registry:
        assert len(registry.stores) == 1
        store = registry.stores[0]
        assert isinstance(store, VaultStore)
        assert store.client.address == "http://from-flag:8200"
        assert len(store.path_specs) == 2


@pytest.mark.unit
def test_create_registry_without_vault_token_fails(tmp_path, monkeypatch):
    """A Vault root without any token is a ConfigurationError."""
    monkeypatch.delenv("VAULT_TOKEN", raising=False)
    monkeypatch.setattr("core.config.Path.home", lambda: tmp_path)
    config = SwitchConfig(
        path_specs=(PathSpec("kv/a", StoreKind.VAULT),),
        vault_api_address="http://vault:8200",
    )

    with pytest.raises(ConfigurationError, match="Vault token"):
        create_registry(config)
