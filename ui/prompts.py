"""
Interactive kubeconfig picker for the kswitch CLI.

The picker lists the discovery snapshot with `inquirer`. When previews are
enabled, the highlighted choice is fetched lazily, rendered in a `rich` panel
and the operator confirms the switch or goes back to the list. Previews of
Vault kubeconfigs are network reads, which is why they can be disabled.

inquirer draws its prompts with `print`, so they are redirected to stderr; stdout
only ever carries the materialized kubeconfig path.

Aborting (Ctrl-C in a prompt, or choosing "Cancel") returns None; it is a
normal outcome of the switch command, not an error.

Dependencies:
    - inquirer: Interactive terminal prompts
    - rich: Preview rendering
"""

from contextlib import redirect_stdout
import sys
from typing import Any, Callable

import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
from rich.panel import Panel
from rich.text import Text

from core.models import Candidate
from utils import pr

_CANCEL = -1

PromptFn = Callable[..., dict[str, Any] | None]


class InquirerPicker:
    """
    Picker backed by `inquirer` list and confirm prompts.

    Attributes:
        prompt: The prompt function, `inquirer.prompt` unless injected.
    """

    def __init__(self, prompt: PromptFn | None = None):
        self.prompt = prompt if prompt is not None else inquirer.prompt

    def select(
        self,
        candidates: list[Candidate],
        preview: Callable[[Candidate], str] | None = None,
    ) -> Candidate | None:
        """
        Prompts the operator to select one kubeconfig.

        Args:
            candidates: The kubeconfigs to choose from, in display order.
            preview: Optional callable returning the preview text of a candidate.

        Returns:
            Candidate | None: The selected kubeconfig, or None on abort.
        """
        if not candidates:
            return None

        choices: list[tuple[str, int]] = [
            (candidate.display_name, index) for index, candidate in enumerate(candidates)
        ]
        choices.append(("Cancel", _CANCEL))

        pr("\n[bold green]Select the kubeconfig to switch to.[/bold green]")

        default = 0
        while True:
            answers = self._ask(
                [
                    inquirer.List(
                        "kubeconfig",
                        message="Hit [ENTER] to make your selection",
                        choices=choices,
                        default=default,
                        carousel=True,
                    ),
                ],
                theme=GreenPassion(),
            )
            if not answers or answers["kubeconfig"] == _CANCEL:
                return None

            default = answers["kubeconfig"]
            candidate = candidates[default]
            if preview is None:
                return candidate

            show_preview(candidate, preview(candidate))

            confirmation = self._ask(
                [
                    inquirer.Confirm(
                        "confirm",
                        message=f"Switch to {candidate.display_name}?",
                        default=True,
                    ),
                ],
                theme=GreenPassion(),
            )
            if not confirmation:
                return None
            if confirmation["confirm"]:
                return candidate

    def _ask(self, questions: list, **kwargs: Any) -> dict[str, Any] | None:
        with redirect_stdout(sys.stderr):
            return self.prompt(questions, **kwargs)


def show_preview(candidate: Candidate, content: str) -> None:
    """Render preview text in a panel titled with the candidate's name."""
    pr(
        Panel(
            Text(content),
            title=candidate.display_name,
            subtitle=str(candidate.store),
            border_style="magenta",
        )
    )
