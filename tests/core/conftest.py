"""
Shared fixtures for core module tests.

This module provides reusable pytest fixtures for testing core functionality,
including kubeconfig directory trees, a mocked Vault transport, fake stores
and a fixed clock.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator

import httpx
import pytest

from adapters.vault import VaultClient
from core.exceptions import DiscoveryError, FetchError
from core.models import Candidate, PathSpec, StoreKind
from ui.progress_display import NoOpProgressDisplay

VAULT_ADDRESS = "http://vault.test:8200"


@pytest.fixture
def kubeconfig_tree(tmp_path):
    """
    Create a directory holding `a/config`, `a/b/config` and `a/other.yaml`.

    Returns the root directory.
    """
    root = tmp_path / "kube"
    (root / "a" / "b").mkdir(parents=True)
    (root / "a" / "config").write_bytes(b"apiVersion: v1\nkind: Config\n# a\n")
    (root / "a" / "b" / "config").write_bytes(b"apiVersion: v1\nkind: Config\n# a/b\n")
    (root / "a" / "other.yaml").write_bytes(b"apiVersion: v1\nkind: Config\n# other\n")
    return root


@pytest.fixture
def fs_path_spec():
    """Factory for filesystem search roots."""

    def _factory(location: Path | str, name_filter: str = "config") -> PathSpec:
        return PathSpec(str(location), StoreKind.FILESYSTEM, name_filter)

    return _factory


@pytest.fixture
def vault_path_spec():
    """Factory for Vault search roots."""

    def _factory(location: str, name_filter: str = "*") -> PathSpec:
        return PathSpec(location, StoreKind.VAULT, name_filter)

    return _factory


@pytest.fixture
def vault_client_factory():
    """
    Factory for VaultClient instances backed by an httpx.MockTransport.

    The handler receives every request. The returned client exposes the list
    of seen requests as `requests` for call counting.
    """

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> VaultClient:
        seen: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        session = httpx.Client(transport=httpx.MockTransport(recording_handler))
        client = VaultClient(VAULT_ADDRESS, "s.test-token", session=session)
        client.requests = seen  # type: ignore[attr-defined]
        return client

    return _factory


@pytest.fixture
def progress_display():
    """Progress display for testing."""
    return NoOpProgressDisplay()


@pytest.fixture
def fixed_clock():
    """Factory for clocks returning a fixed UTC time."""

    def _factory(moment: datetime | None = None) -> Callable[[], datetime]:
        moment = moment or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        return lambda: moment

    return _factory


class FakeStore:
    """
    In-memory store yielding preconfigured items and serving fetches from a dict.

    Attributes (for test inspection):
        added: Search roots attached via add_path_spec().
        fetch_calls: Candidate ids passed to fetch().
        closed: Whether close() was called.
    """

    def __init__(
        self,
        kind: StoreKind,
        items: list[Candidate | DiscoveryError] | None = None,
        contents: dict[str, bytes] | None = None,
    ):
        self.kind = kind
        self.items = items or []
        self.contents = contents or {}
        self.added: list[PathSpec] = []
        self.fetch_calls: list[str] = []
        self.closed = False

    @property
    def path_specs(self) -> list[PathSpec]:
        return list(self.added)

    def add_path_spec(self, path_spec: PathSpec) -> None:
        self.added.append(path_spec)

    def enumerate(self) -> Iterator[Candidate | DiscoveryError]:
        yield from self.items

    def fetch(self, candidate_id: str) -> tuple[bytes, str]:
        self.fetch_calls.append(candidate_id)
        if candidate_id not in self.contents:
            raise FetchError(candidate_id=candidate_id, original_exception=KeyError(candidate_id))
        return self.contents[candidate_id], candidate_id

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_store_factory():
    """Factory for FakeStore instances."""
    return FakeStore
