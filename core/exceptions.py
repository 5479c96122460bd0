"""
Custom exception classes for the kswitch CLI.

This module defines application-specific exceptions that are raised while
resolving configuration, discovering kubeconfigs across stores, materializing
the selected kubeconfig and running hooks. These exceptions provide structured
error information and diagnostic data to help with debugging and error
reporting.
"""

import os
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from core.models import PathSpec


def _diagnostics(original_exception: Optional[BaseException]) -> dict[str, str]:
    return {
        "type": (type(original_exception).__name__ if original_exception else "Unknown"),
        "details": str(original_exception) if original_exception else "No details",
        "os_name": os.name,
    }


class KSwitchError(Exception):
    """
    Base exception for every error raised by the kswitch core.

    Attributes:
        message: A human-readable error message describing what went wrong.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    default_message = "An unexpected kswitch error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.original_exception = original_exception
        self.diagnostic_info = _diagnostics(original_exception)


class ConfigurationError(KSwitchError):
    """
    Raised when the configuration cannot be used.

    Covers an unreadable or malformed configuration file, an unknown store
    kind and a Vault credential chain that yields no address or token. This
    error is fatal and is always raised before any discovery starts.
    """

    default_message = "Invalid kswitch configuration"


class DiscoveryError(KSwitchError):
    """
    Raised (or yielded) when a single search root fails to enumerate.

    Stores yield this error as a value so that the remaining search roots are
    still enumerated. Discovery only raises it when no store produced a
    single candidate, in which case `errors` holds every recorded failure.

    Attributes:
        path_spec: The search root that failed, if the error concerns one.
        errors: The per-root errors collected before giving up.
    """

    default_message = "Failed to discover kubeconfigs"

    def __init__(
        self,
        message: Optional[str] = None,
        path_spec: Optional["PathSpec"] = None,
        original_exception: Optional[BaseException] = None,
        errors: Sequence["DiscoveryError"] = (),
    ):
        if message is None and path_spec is not None:
            message = (
                f"Failed to search {path_spec.store} path '{path_spec.location}'"
                + (f": {original_exception}" if original_exception else "")
            )
        super().__init__(message=message, original_exception=original_exception)
        self.path_spec = path_spec
        self.errors = list(errors)


class EmptyDiscoveryError(KSwitchError):
    """
    Raised when every store enumerated successfully but nothing matched.

    This typically indicates that the configured search roots do not contain
    files matching the kubeconfig name filter.
    """

    default_message = "No kubeconfig files found matching the configured paths and name"


class FetchError(KSwitchError):
    """
    Raised when the content of a candidate cannot be fetched.

    Attributes:
        candidate_id: The identifier of the candidate that failed.
    """

    default_message = "Failed to fetch kubeconfig"

    def __init__(
        self,
        message: Optional[str] = None,
        candidate_id: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        if message is None and candidate_id is not None:
            message = f"Failed to fetch kubeconfig '{candidate_id}'" + (
                f": {original_exception}" if original_exception else ""
            )
        super().__init__(message=message, original_exception=original_exception)
        self.candidate_id = candidate_id


class HookExecutionError(KSwitchError):
    """
    Raised when a hook exits non-zero, times out or cannot be started.

    The scheduler records this error in the hook outcome and continues with
    the remaining hooks of a batch.

    Attributes:
        hook_name: The name of the hook that failed.
    """

    default_message = "Hook execution failed"

    def __init__(
        self,
        message: Optional[str] = None,
        hook_name: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        if message is None and hook_name is not None:
            message = f"Hook '{hook_name}' failed" + (
                f": {original_exception}" if original_exception else ""
            )
        super().__init__(message=message, original_exception=original_exception)
        self.hook_name = hook_name


class TempFileError(KSwitchError):
    """
    Base exception for temporary kubeconfig file errors.

    This exception is raised when an error occurs while creating, writing to,
    or cleaning the temporary kubeconfig files handed to the shell.
    """

    default_message = "An error occurred with a temporary file"


class TempFileCreationError(TempFileError):
    """
    Raised when a temporary kubeconfig file cannot be created.

    This typically happens due to filesystem permissions, disk space, or other
    system-level issues.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        super().__init__(
            message=message or "Failed to create temporary file",
            original_exception=original_exception,
        )


class TempFileWriteError(TempFileError):
    """
    Raised when kubeconfig content cannot be written to a temporary file.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        super().__init__(
            message=message or "Failed to write to temporary file",
            original_exception=original_exception,
        )


class FileIOError(KSwitchError):
    """
    Base exception for file read/write errors.

    Attributes:
        file_path: The path of the file involved, if known.
    """

    default_message = "A file I/O error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        super().__init__(message=message, original_exception=original_exception)
        self.file_path = file_path


class InvalidFilePathError(FileIOError):
    """Raised when a file path is unset or its parent directory is unusable."""


class FileReadError(FileIOError):
    """Raised when reading a file fails."""


class FileWriteError(FileIOError):
    """Raised when writing a file fails."""
