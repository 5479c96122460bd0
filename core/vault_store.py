"""
Kubeconfig store backed by a HashiCorp Vault KV secrets engine.

Every secret read and list is a billable, rate limited network call, so the
store keeps outbound traffic minimal: enumeration issues exactly one `LIST`
per search root and never reads secret content, and `fetch` issues exactly
one read per call.
"""

import logging
from typing import Iterator

from adapters.vault import VaultClient, VaultRequestError
from constants import VAULT_KUBECONFIG_FIELD
from core.exceptions import ConfigurationError, DiscoveryError, FetchError
from core.models import Candidate, PathSpec, StoreKind
from core.stores import matches_name

logger = logging.getLogger(__name__)


class VaultStore:
    """
    Store enumerating kubeconfig secrets below Vault key prefixes.

    Candidate ids are full secret paths (`<prefix>/<key>`). The kubeconfig is
    the secret's `config` field; a secret with a single field is used as is.

    Attributes:
        kind: Always `StoreKind.VAULT`.
        client: The authenticated Vault client shared by all search roots.
    """

    kind = StoreKind.VAULT

    def __init__(self, client: VaultClient, kubeconfig_field: str = VAULT_KUBECONFIG_FIELD):
        self.client = client
        self.kubeconfig_field = kubeconfig_field
        self._path_specs: list[PathSpec] = []

    @property
    def path_specs(self) -> list[PathSpec]:
        return list(self._path_specs)

    def add_path_spec(self, path_spec: PathSpec) -> None:
        if path_spec.store != self.kind:
            raise ConfigurationError(
                f"Cannot attach {path_spec.store} path '{path_spec.location}' "
                f"to the {self.kind} store"
            )
        self._path_specs.append(path_spec)

    def close(self) -> None:
        self.client.close()

    def enumerate(self) -> Iterator[Candidate | DiscoveryError]:
        """
        Lazily yield the secrets whose leaf name matches each root's name filter.

        Sub-folders returned by the listing are not descended into.

        Yields:
            Candidate per matching secret, DiscoveryError per search root whose
            listing failed (including permission errors).
        """
        seen: set[str] = set()

        for path_spec in self._path_specs:
            prefix = path_spec.location.strip("/")
            logger.debug("Listing vault path %s at %s", prefix, self.client.address)
            try:
                keys = self.client.list_keys(prefix)
            except VaultRequestError as e:
                yield DiscoveryError(path_spec=path_spec, original_exception=e)
                continue

            for key in keys:
                if key.endswith("/"):
                    continue
                if not matches_name(key, path_spec.name_filter):
                    continue

                candidate_id = f"{prefix}/{key}" if prefix else key
                if candidate_id in seen:
                    continue
                seen.add(candidate_id)
                yield Candidate(candidate_id, self.kind, candidate_id)

    def fetch(self, candidate_id: str) -> tuple[bytes, str]:
        """
        Read one kubeconfig secret.

        Raises:
            FetchError: If the secret cannot be read or holds no kubeconfig field.
        """
        try:
            data = self.client.read(candidate_id)
        except VaultRequestError as e:
            raise FetchError(candidate_id=candidate_id, original_exception=e) from e

        if self.kubeconfig_field in data:
            value = data[self.kubeconfig_field]
        elif len(data) == 1:
            value = next(iter(data.values()))
        else:
            raise FetchError(
                message=f"Secret '{candidate_id}' has no '{self.kubeconfig_field}' field",
                candidate_id=candidate_id,
            )

        if not isinstance(value, str):
            raise FetchError(
                message=f"Secret '{candidate_id}' does not contain a kubeconfig string",
                candidate_id=candidate_id,
            )
        return value.encode("utf-8"), candidate_id
