"""
Progress reporting protocol for decoupling the UI from store enumeration.

Discovery reports how many kubeconfigs it has found so far without depending
on Rich directly, which keeps the core testable with `NoOpProgressDisplay`.
"""

from types import TracebackType
from typing import Protocol

from rich.progress import Progress, TaskID
from ui.progress import (
    ProgressState,
    create_progress,
    create_task,
    update_progress,
)


class ProgressDisplay(Protocol):
    """
    Protocol for progress reporting.

    The lifecycle is:
    1. Context manager entry (__enter__)
    2. on_start() - Called once at the beginning
    3. on_update() - Called once per discovered item
    4. on_complete() - Called once at the end
    5. Context manager exit (__exit__)
    """

    def __enter__(self) -> "ProgressDisplay":
        """Enter the progress context."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the progress context."""

    def on_start(self, description: str, total: int | None) -> None:
        """
        Start reporting a new task.

        Args:
            description: Initial description text to display.
            total: Total number of items, None while it is unknown (store
                enumeration is lazy, so discovery never knows it upfront).
        """

    def on_update(
        self, *, advance: int | None = None, description: str | None = None
    ) -> None:
        """Advance the counter, replace the description, or both."""

    def on_complete(
        self, description: str, completed: int, total: int | None = None
    ) -> None:
        """Mark the task as complete with its final description and count."""


class RichProgressDisplay:
    """
    Rich spinner implementation of ProgressDisplay, rendered on stderr.
    """

    def __init__(self) -> None:
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def __enter__(self) -> "RichProgressDisplay":
        self._progress = create_progress()
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def _require_progress(self) -> Progress:
        if not self._progress:
            raise RuntimeError(
                "RichProgressDisplay must be used as a context manager. "
                "Use: with RichProgressDisplay() as rpd:"
            )
        return self._progress

    def _require_task(self, method: str) -> TaskID:
        if self._task is None:
            raise RuntimeError(f"on_start() must be called before {method}()")
        return self._task

    def on_start(self, description: str, total: int | None) -> None:
        """
        Raises:
            RuntimeError: If not used as a context manager.
        """
        self._task = create_task(self._require_progress(), description, total=total)

    def on_update(
        self, *, advance: int | None = None, description: str | None = None
    ) -> None:
        """
        Raises:
            RuntimeError: If not used as a context manager or on_start() was
                not called first.
            ValueError: If neither advance nor description is provided.
        """
        progress = self._require_progress()
        task = self._require_task("on_update")

        if not (advance or description):
            raise ValueError(
                "At least one of 'advance' or 'description' must be provided to on_update()"
            )

        if description:
            update_progress(
                progress,
                task,
                ProgressState.IN_PROGRESS,
                advance=advance,
                description=description,
            )
        else:
            update_progress(progress, task, advance=advance)

    def on_complete(
        self, description: str, completed: int, total: int | None = None
    ) -> None:
        """
        Raises:
            RuntimeError: If not used as a context manager or on_start() was
                not called first.
        """
        update_progress(
            self._require_progress(),
            self._require_task("on_complete"),
            ProgressState.COMPLETE,
            completed=completed,
            total=total,
            description=description,
        )


class NoOpProgressDisplay:
    """No-op implementation of ProgressDisplay for tests and non-interactive use."""

    def __enter__(self) -> "NoOpProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        pass

    def on_start(self, description: str, total: int | None) -> None:
        pass

    def on_update(
        self, *, advance: int | None = None, description: str | None = None
    ) -> None:
        pass

    def on_complete(
        self, description: str, completed: int, total: int | None = None
    ) -> None:
        pass
