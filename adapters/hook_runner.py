"""
Subprocess adapter executing configured hooks.

Hooks are opaque to the scheduler: an executable with arguments, or an inline
shell command. This module runs them with a bounded timeout and turns every
kind of failure into a `HookExecutionError`.
"""

import os
import subprocess
from typing import Protocol

from constants import HOOK_TIMEOUT_SECONDS
from core.exceptions import HookExecutionError
from core.models import HookDefinition, HookType


class HookRunner(Protocol):
    """Protocol for executing a single hook."""

    def run(self, hook: HookDefinition) -> str:
        """
        Execute a hook and return its captured output.

        Raises:
            HookExecutionError: If the hook cannot be started, exits non-zero
                or times out.
        """


class SubprocessHookRunner:
    """
    Runs hooks as child processes.

    Attributes:
        timeout: Seconds after which a hook is killed and reported as failed.
    """

    def __init__(self, timeout: float = HOOK_TIMEOUT_SECONDS):
        self.timeout = timeout

    def run(self, hook: HookDefinition) -> str:
        if hook.type == HookType.INLINE_COMMAND:
            cmd: str | list[str] = hook.command or ""
            shell = True
        else:
            executable = os.path.expandvars(os.path.expanduser(hook.path or ""))
            cmd = [executable, *hook.arguments]
            shell = False

        try:
            completed = subprocess.run(
                cmd,
                shell=shell,
                text=True,
                errors="replace",
                check=True,  # This triggers except block
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip()
            raise HookExecutionError(
                message=f"Hook '{hook.name}' exited with status {e.returncode}"
                + (f": {detail}" if detail else ""),
                hook_name=hook.name,
                original_exception=e,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise HookExecutionError(
                message=f"Hook '{hook.name}' timed out after {self.timeout:g}s",
                hook_name=hook.name,
                original_exception=e,
            ) from e
        except OSError as e:
            raise HookExecutionError(
                hook_name=hook.name,
                original_exception=e,
            ) from e

        return completed.stdout
