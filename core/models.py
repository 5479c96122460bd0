"""
Core data models for kubeconfig discovery, switching and hook scheduling.

This module defines the immutable value objects passed between the
configuration resolver, the stores, the discovery step, the materializer and
the hook scheduler.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path


class StoreKind(StrEnum):
    """The closed set of backends kubeconfigs can be discovered in."""

    FILESYSTEM = "filesystem"
    VAULT = "vault"


@dataclass(frozen=True)
class PathSpec:
    """
    One configured search root.

    Attributes:
        location: A filesystem path (file or directory) or a Vault key prefix.
        store: The backend kind that owns this search root.
        name_filter: Glob pattern (`*` and `?`) matched case-sensitively
            against the leaf name of every discovered entry.
    """

    location: str
    store: StoreKind
    name_filter: str = "config"


@dataclass(frozen=True)
class Candidate:
    """
    A discovered kubeconfig that has not been materialized yet.

    Attributes:
        id: Identifier scoped to the owning store. For the filesystem store
            this is the absolute file path, for Vault the full secret path.
        store: Kind of the store that produced the candidate. Fetches are
            routed back to the registry's instance for this kind.
        display_name: Label shown to the operator.
    """

    id: str
    store: StoreKind
    display_name: str


@dataclass(frozen=True)
class ActiveSwitchState:
    temp_file_path: Path
    source_candidate_id: str
    created_at: datetime


class HookType(StrEnum):
    EXECUTABLE = "Executable"
    INLINE_COMMAND = "InlineCommand"


@dataclass(frozen=True)
class HookDefinition:
    """
    A configured maintenance hook.

    Attributes:
        name: Unique hook name, also the key of its persisted run record.
        type: Whether `path` + `arguments` or `command` is executed.
        interval_seconds: Minimum number of seconds between two runs.
        path: Executable to run for `HookType.EXECUTABLE`.
        arguments: Arguments passed to the executable.
        command: Shell command string for `HookType.INLINE_COMMAND`.
    """

    name: str
    type: HookType
    interval_seconds: int = 0
    path: str | None = None
    arguments: tuple[str, ...] = ()
    command: str | None = None


@dataclass
class HookRecord:
    name: str
    interval_seconds: int = 0
    last_run_at: datetime | None = None


class HookState(StrEnum):
    IDLE = "idle"
    DUE = "due"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class HookOutcome:
    """
    Result of evaluating (and possibly running) one hook.

    `state` is `IDLE` when the hook was not due and nothing ran, otherwise
    the terminal state of the run. `started_at` is the run start time that was
    persisted as the hook's `last_run_at`.
    """

    name: str
    state: HookState
    started_at: datetime | None = None
    output: str = ""
    error: str | None = None


@dataclass(frozen=True)
class SwitchConfig:
    """
    Fully resolved configuration of a single invocation.

    Attributes:
        path_specs: Search roots from the configuration file followed by the
            command-line override, if any.
        vault_api_address: Vault address from the configuration file. The
            effective address is resolved later, only if a Vault search root
            is registered.
        hooks: Hook definitions from the configuration file.
    """

    path_specs: tuple[PathSpec, ...] = ()
    vault_api_address: str | None = None
    hooks: tuple[HookDefinition, ...] = field(default_factory=tuple)
