"""
The switch flow: discover, let the operator pick, materialize.
"""

from dataclasses import dataclass, field
from functools import partial
from typing import Callable

from core.discovery import Picker, discover, render_preview
from core.exceptions import DiscoveryError
from core.materializer import SwitchMaterializer
from core.models import ActiveSwitchState, Candidate
from core.registry import StoreRegistry
from ui.progress_display import ProgressDisplay


@dataclass(frozen=True)
class SwitchResult:
    """
    Outcome of a switch.

    Attributes:
        state: The materialized kubeconfig, or None if the operator aborted.
        errors: Recovered discovery errors of this invocation.
    """

    state: ActiveSwitchState | None
    errors: list[DiscoveryError] = field(default_factory=list)


def run_switch(
    registry: StoreRegistry,
    picker: Picker,
    materializer: SwitchMaterializer,
    show_preview: bool = True,
    progress_display: ProgressDisplay | None = None,
    on_discovery_error: Callable[[DiscoveryError], None] | None = None,
) -> SwitchResult:
    """
    Run one switch.

    Recovered discovery errors are passed to `on_discovery_error` before the
    picker opens. An aborted selection is not an error: the result simply has
    no state and nothing is written.

    Raises:
        DiscoveryError: If every store failed and nothing was found.
        EmptyDiscoveryError: If nothing matched the name filter.
        FetchError: If the selected kubeconfig cannot be fetched.
        TempFileError: If the kubeconfig cannot be materialized.
    """
    result = discover(registry, progress_display)

    if on_discovery_error is not None:
        for error in result.errors:
            on_discovery_error(error)

    preview: Callable[[Candidate], str] | None = None
    if show_preview:
        preview = partial(render_preview, registry)

    selected = picker.select(result.candidates, preview)
    if selected is None:
        return SwitchResult(state=None, errors=result.errors)

    content, _ = registry.fetch(selected)
    state = materializer.materialize_candidate(selected, content)
    return SwitchResult(state=state, errors=result.errors)
