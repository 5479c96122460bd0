"""
Progress indicator creation and management module using Rich.

This module provides utilities for creating and managing the spinner shown
while kubeconfig stores are searched. Progress is rendered on stderr and
removed once complete, leaving stdout free for the materialized path. The
module supports different progress states (in progress, complete, warning,
error) with color coding.
"""

from enum import StrEnum
from typing import Optional

from rich.progress import (
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
)

from utils import console


class ProgressState(StrEnum):
    """
    Enumeration of progress states with associated color codes.

    Attributes:
        IN_PROGRESS: Magenta color for tasks currently being processed.
        COMPLETE: Green color for successfully completed tasks.
        WARNING: Yellow color for tasks with warnings or non-critical issues.
        ERROR: Red color for tasks that have encountered errors.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    WARNING = "yellow"
    ERROR = "red"


def create_progress() -> Progress:
    """
    Creates a Rich Progress instance with a spinner, description and a counter
    of items found so far.

    Returns:
        Progress: A configured Rich Progress instance ready for task management.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed} found"),
        console=console,
        transient=True,
    )


def create_task(progress: Progress, description: str, total: Optional[int]) -> TaskID:
    """
    Creates a new task in a progress instance with initial state.

    Args:
        progress (Progress): The Rich Progress instance to add the task to.
        description (str): The description text to display for this task.
        total (Optional[int]): The total number of items, None if unknown.

    Returns:
        TaskID: The unique identifier for the created task, used for updates.
    """
    return progress.add_task(f"[{ProgressState.IN_PROGRESS}]{description}", total=total)


def update_progress(
    progress: Progress,
    task: TaskID,
    progress_state: Optional[ProgressState] = None,
    total: Optional[float] = None,
    completed: Optional[float] = None,
    advance: Optional[float] = None,
    description: Optional[str] = None,
) -> None:
    """
    Updates a progress task with new state, progress, or description.

    Note: If `progress_state` is provided, `description` must also be provided,
    and vice versa. This ensures the description is properly styled with the
    state color.

    Raises:
        ValueError: If progress_state and description are not both provided
            or both omitted.
    """
    if bool(progress_state) != bool(description):
        raise ValueError("progress_state and description must be provided together.")

    if description:
        description = f"[{progress_state}]{description}"

    # Rich's progress.update() treats None as "clear", so we omit it entirely
    if description is not None:
        progress.update(
            task,
            total=total,
            completed=completed,
            advance=advance,
            description=description,
        )
    else:
        progress.update(task, total=total, completed=completed, advance=advance)
