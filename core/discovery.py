"""
Kubeconfig discovery and preview.

Discovery drains every registered store once into a static snapshot of
candidates: the operator picks from that snapshot, nothing is re-enumerated
while the picker is open. Content is only fetched lazily, for the candidate
being previewed and for the one finally selected.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Protocol

from constants import PREVIEW_MAX_LINES
from core.exceptions import DiscoveryError, EmptyDiscoveryError, FetchError
from core.models import Candidate
from core.registry import StoreRegistry
from ui.progress_display import ProgressDisplay, RichProgressDisplay

PreviewFn = Callable[[Candidate], str]


class Picker(Protocol):
    """
    Protocol for the interactive candidate picker.

    The picker is the only place the switch flow waits on the operator. It has
    no timeout; aborting must be reported by returning None, not by raising.
    """

    def select(
        self, candidates: list[Candidate], preview: PreviewFn | None = None
    ) -> Candidate | None:
        """
        Let the operator choose one candidate.

        Args:
            candidates: The discovery snapshot, in display order.
            preview: Optional callable rendering a preview of a candidate.
                Never raises.

        Returns:
            The selected candidate, or None if the operator aborted.
        """


@dataclass
class DiscoveryResult:
    """
    Snapshot produced by `discover`.

    Attributes:
        candidates: Unique candidates in store registration order, with
            display names that are unique across the snapshot.
        errors: Search roots that failed to enumerate. Recovered errors that
            should be shown to the operator as warnings.
    """

    candidates: list[Candidate] = field(default_factory=list)
    errors: list[DiscoveryError] = field(default_factory=list)


def discover(
    registry: StoreRegistry, progress_display: ProgressDisplay | None = None
) -> DiscoveryResult:
    """
    Enumerate all registered stores into a deduplicated, named snapshot.

    Args:
        registry: Registry with every search root registered.
        progress_display: Optional progress reporter. Defaults to a Rich
            spinner on stderr.

    Returns:
        DiscoveryResult holding the candidates and the recovered errors.

    Raises:
        DiscoveryError: If no candidate was found and at least one search root
            failed. `errors` holds every recorded failure.
        EmptyDiscoveryError: If every search root was searched but nothing
            matched the name filter.
    """
    display = progress_display if progress_display is not None else RichProgressDisplay()

    result = DiscoveryResult()
    seen: set[tuple[str, str]] = set()

    with display as pd:
        pd.on_start("Searching kubeconfig stores...", None)

        for item in registry.enumerate_all():
            if isinstance(item, DiscoveryError):
                result.errors.append(item)
                continue

            key = (str(item.store), item.id)
            if key in seen:
                continue
            seen.add(key)
            result.candidates.append(item)
            pd.on_update(advance=1)

        found = len(result.candidates)
        pd.on_complete(f"✅ Found {found} kubeconfig(s).", found, found)

    if not result.candidates:
        if result.errors:
            raise DiscoveryError(
                message="No kubeconfigs found: every configured store failed",
                errors=result.errors,
            )
        raise EmptyDiscoveryError()

    result.candidates = disambiguate(result.candidates)
    return result


def disambiguate(candidates: list[Candidate]) -> list[Candidate]:
    """
    Make display names unique by qualifying clashing names with their origin.

    Candidates whose name is already unique are returned unchanged.
    """
    counts = Counter(c.display_name for c in candidates)
    unique: list[Candidate] = []

    for candidate in candidates:
        if counts[candidate.display_name] == 1:
            unique.append(candidate)
            continue

        if candidate.id == candidate.display_name:
            qualifier = str(candidate.store)
        else:
            qualifier = f"{candidate.store}: {candidate.id}"
        unique.append(
            Candidate(
                candidate.id,
                candidate.store,
                f"{candidate.display_name} ({qualifier})",
            )
        )
    return unique


def render_preview(
    registry: StoreRegistry, candidate: Candidate, max_lines: int = PREVIEW_MAX_LINES
) -> str:
    """
    Fetch a candidate and render its content for display.

    The content is decoded as UTF-8 (undecodable bytes are replaced) and cut
    after `max_lines` lines. Fetch failures never propagate: the error is
    rendered inline so the operator can keep selecting.
    """
    try:
        content, _ = registry.fetch(candidate)
    except FetchError as e:
        return f"[preview unavailable] {e.message}"

    lines = content.decode("utf-8", errors="replace").splitlines()
    if len(lines) > max_lines:
        hidden = len(lines) - max_lines
        lines = lines[:max_lines] + [f"... [{hidden} more line(s) not shown]"]
    return "\n".join(lines)
