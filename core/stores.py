"""
The store protocol every kubeconfig backend implements.

A store owns all search roots of one backend kind. It enumerates candidates
lazily and can fetch the content of any candidate it enumerated, addressed by
the candidate id alone.
"""

from fnmatch import fnmatchcase
from typing import Iterator, Protocol

from core.exceptions import DiscoveryError
from core.models import Candidate, PathSpec, StoreKind


class KubeconfigStore(Protocol):
    """
    Protocol for kubeconfig backends.

    Implementations must never yield the same candidate id twice from one
    `enumerate()` call, and must report the failure of one search root as a
    yielded `DiscoveryError` instead of aborting the remaining roots.
    """

    kind: StoreKind

    @property
    def path_specs(self) -> list[PathSpec]:
        """The search roots attached to this store, in registration order."""

    def add_path_spec(self, path_spec: PathSpec) -> None:
        """
        Attach another search root of this store's kind.

        Raises:
            ConfigurationError: If the search root belongs to another kind.
        """

    def enumerate(self) -> Iterator[Candidate | DiscoveryError]:
        """
        Lazily yield one candidate per matching leaf of every search root.

        Yields:
            Candidate for each match, DiscoveryError for each search root that
            failed to enumerate.
        """

    def fetch(self, candidate_id: str) -> tuple[bytes, str]:
        """
        Fetch the content and display name of a candidate.

        Raises:
            FetchError: If the id is unknown or the backend is unreachable.
        """


def matches_name(name: str, name_filter: str) -> bool:
    """
    Match a leaf name against a kubeconfig name filter.

    Glob semantics with `*` and `?`, always case-sensitive regardless of the
    platform.
    """
    return fnmatchcase(name, name_filter)
