"""
Registry holding at most one store instance per backend kind.

Stores own authenticated clients, so constructing a second store of the same
kind would repeat the connection setup and duplicate every outbound request.
The registry constructs each store lazily on the first search root of its
kind and attaches every later root of that kind to the same instance.
"""

from types import TracebackType
from typing import Callable, Iterable, Iterator, Mapping

from adapters.vault import VaultClient
from core.config import resolve_vault_credentials
from core.exceptions import ConfigurationError, DiscoveryError, FetchError
from core.filesystem_store import FilesystemStore
from core.models import Candidate, PathSpec, StoreKind, SwitchConfig
from core.stores import KubeconfigStore
from core.vault_store import VaultStore

StoreFactory = Callable[[], KubeconfigStore]


class StoreRegistry:
    """
    Keyed construct-or-reuse registry of kubeconfig stores.

    Can be used as a context manager, in which case stores holding network
    clients are closed on exit.

    Attributes:
        factories: Mapping of store kind to a zero-argument callable building
            the store for that kind. Kinds without a factory are rejected.
    """

    def __init__(self, factories: Mapping[StoreKind, StoreFactory]):
        self.factories = dict(factories)
        self._stores: dict[StoreKind, KubeconfigStore] = {}

    def __enter__(self) -> "StoreRegistry":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def stores(self) -> list[KubeconfigStore]:
        """The constructed stores in first registration order."""
        return list(self._stores.values())

    def register(self, path_spec: PathSpec) -> None:
        """
        Route a search root to the store of its kind, constructing it if needed.

        Raises:
            ConfigurationError: If no factory exists for the root's kind or the
                factory fails (e.g. missing Vault credentials).
        """
        store = self._stores.get(path_spec.store)
        if store is None:
            factory = self.factories.get(path_spec.store)
            if factory is None:
                raise ConfigurationError(f"Unknown store {str(path_spec.store)!r}")
            store = factory()
            self._stores[path_spec.store] = store
        store.add_path_spec(path_spec)

    def register_all(self, path_specs: Iterable[PathSpec]) -> None:
        for path_spec in path_specs:
            self.register(path_spec)

    def enumerate_all(self) -> Iterator[Candidate | DiscoveryError]:
        """
        Concatenate the enumeration of every store in registration order,
        preserving each store's own order.
        """
        for store in self._stores.values():
            yield from store.enumerate()

    def store_for(self, kind: StoreKind) -> KubeconfigStore:
        """
        Return the store instance owning candidates of `kind`.

        Raises:
            FetchError: If no store of that kind was registered.
        """
        try:
            return self._stores[kind]
        except KeyError as e:
            raise FetchError(
                message=f"No {kind} store is registered", original_exception=e
            ) from e

    def fetch(self, candidate: Candidate) -> tuple[bytes, str]:
        """
        Fetch a candidate's content from the store that enumerated it.

        Raises:
            FetchError: If the store is missing or the fetch fails.
        """
        return self.store_for(candidate.store).fetch(candidate.id)

    def close(self) -> None:
        for store in self._stores.values():
            close = getattr(store, "close", None)
            if close is not None:
                close()


def create_registry(
    config: SwitchConfig,
    vault_api_address: str | None = None,
    vault_token: str | None = None,
) -> StoreRegistry:
    """
    Build the registry for an invocation and register every search root.

    Vault credentials are only resolved when a Vault search root exists, so a
    filesystem-only setup never needs a token.

    Raises:
        ConfigurationError: If a search root cannot be registered.
    """

    def vault_factory() -> KubeconfigStore:
        credentials = resolve_vault_credentials(
            config.vault_api_address,
            address_flag=vault_api_address,
            token_flag=vault_token,
        )
        return VaultStore(VaultClient(credentials.address, credentials.token))

    registry = StoreRegistry(
        {
            StoreKind.FILESYSTEM: FilesystemStore,
            StoreKind.VAULT: vault_factory,
        }
    )
    registry.register_all(config.path_specs)
    return registry
