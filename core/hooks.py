"""
Hook scheduling state machine.

Each configured hook moves through the states

    idle -> due -> running -> succeeded | failed -> idle

A hook becomes due when its interval has elapsed since `last_run_at` (or it
never ran), or when a run is forced. `last_run_at` is set to the run start
time and persisted after every run, successful or not, so a failing hook is
never retried faster than its interval.

Run records live in a single JSON document in the state directory, keyed by
hook name:

    {"refresh": {"intervalSeconds": 86400, "lastRunAt": "2024-01-01T10:00:00+00:00"}}
"""

from datetime import datetime, timedelta, timezone
import json
import logging
from pathlib import Path
from typing import Callable, Iterable

from adapters.hook_runner import HookRunner
from constants import HOOK_STATE_FILE_NAME
from core.exceptions import ConfigurationError, FileReadError, HookExecutionError
from core.file_io import FileReader, FilesystemFileReader, FilesystemFileWriter
from core.models import HookDefinition, HookOutcome, HookRecord, HookState

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def state_file_path(state_dir: Path) -> Path:
    return state_dir / HOOK_STATE_FILE_NAME


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_state(state_dir: Path, reader: FileReader | None = None) -> dict[str, HookRecord]:
    """
    Load the persisted hook run records.

    Returns:
        Mapping of hook name to its record. Empty if no state file exists yet.

    Raises:
        ConfigurationError: If the state file cannot be read or is corrupt.
    """
    path = state_file_path(state_dir)
    if not path.exists():
        return {}

    reader = reader if reader is not None else FilesystemFileReader()
    try:
        data = json.loads(reader.read_text(path))
    except FileReadError as e:
        raise ConfigurationError(
            message=f"Failed to read hook state file '{path}'", original_exception=e
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            message=f"Hook state file '{path}' is not valid JSON", original_exception=e
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Hook state file '{path}' must contain a mapping")

    records: dict[str, HookRecord] = {}
    for name, entry in data.items():
        try:
            last_run_at = entry.get("lastRunAt")
            records[name] = HookRecord(
                name=name,
                interval_seconds=int(entry.get("intervalSeconds", 0)),
                last_run_at=_parse_timestamp(last_run_at) if last_run_at else None,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigurationError(
                message=f"Invalid record for hook '{name}' in '{path}'",
                original_exception=e,
            ) from e
    return records


def save_state(state_dir: Path, records: dict[str, HookRecord]) -> None:
    """
    Persist hook run records, atomically replacing the previous state file.

    Raises:
        InvalidFilePathError: If the state directory cannot be created.
        FileWriteError: If the state file cannot be written.
    """
    payload = {
        name: {
            "intervalSeconds": record.interval_seconds,
            "lastRunAt": record.last_run_at.isoformat() if record.last_run_at else None,
        }
        for name, record in sorted(records.items())
    }
    writer = FilesystemFileWriter.from_path(state_file_path(state_dir))
    writer.write_atomic(json.dumps(payload, indent=2) + "\n")


def evaluate(record: HookRecord, now: datetime, force: bool = False) -> HookState:
    """
    Decide whether a hook is due.

    Args:
        record: The hook's run record.
        now: The current time.
        force: Run regardless of the elapsed time.

    Returns:
        `HookState.DUE` if forced, never run, or the interval has elapsed,
        `HookState.IDLE` otherwise.
    """
    if force or record.last_run_at is None:
        return HookState.DUE
    if now - record.last_run_at >= timedelta(seconds=record.interval_seconds):
        return HookState.DUE
    return HookState.IDLE


def run_hook(
    hook: HookDefinition,
    records: dict[str, HookRecord],
    runner: HookRunner,
    state_dir: Path,
    force: bool = False,
    clock: Clock = utc_now,
) -> HookOutcome:
    """
    Run a hook if it is due and persist its new run record.

    `records` is updated in place; only the record of `hook` changes. The run
    start time is persisted as `last_run_at` whether the hook succeeds, fails
    or the runner raises an unexpected error, which is then propagated.

    Returns:
        The outcome: `IDLE` if the hook was not due, otherwise `SUCCEEDED` or
        `FAILED` with the captured output or error message.

    Raises:
        InvalidFilePathError: If the state directory cannot be created.
        FileWriteError: If the state file cannot be written.
    """
    record = records.get(hook.name)
    if record is None:
        record = HookRecord(name=hook.name, interval_seconds=hook.interval_seconds)
    record.interval_seconds = hook.interval_seconds

    now = clock()
    if evaluate(record, now, force) == HookState.IDLE:
        logger.debug("Hook %s is not due yet (last run %s)", hook.name, record.last_run_at)
        return HookOutcome(name=hook.name, state=HookState.IDLE)

    logger.debug("Running hook %s", hook.name)
    output = ""
    error: str | None = None
    try:
        output = runner.run(hook)
        state = HookState.SUCCEEDED
    except HookExecutionError as e:
        error = e.message
        state = HookState.FAILED
    finally:
        record.last_run_at = now
        records[hook.name] = record
        save_state(state_dir, records)

    return HookOutcome(
        name=hook.name, state=state, started_at=now, output=output, error=error
    )


def run_hooks(
    hooks: Iterable[HookDefinition],
    state_dir: Path,
    runner: HookRunner,
    hook_name: str | None = None,
    force: bool = False,
    clock: Clock = utc_now,
) -> list[HookOutcome]:
    """
    Run every due hook, or only the hook named `hook_name`.

    A failing hook does not stop the batch; its failure is part of its
    outcome. Forcing applies to the selected hooks only.

    Raises:
        ConfigurationError: If `hook_name` is not configured or the state file
            is corrupt.
    """
    hooks = list(hooks)
    if hook_name:
        hooks = [h for h in hooks if h.name == hook_name]
        if not hooks:
            raise ConfigurationError(f"No hook named '{hook_name}' is configured")

    records = load_state(state_dir)
    return [
        run_hook(hook, records, runner, state_dir, force=force, clock=clock)
        for hook in hooks
    ]
