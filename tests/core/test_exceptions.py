"""
Tests for the exceptions module.

Tests cover:
- KSwitchError: default messages and diagnostic info shared by all errors
- DiscoveryError: generated messages, collected errors
- FetchError / HookExecutionError: generated messages and identifiers
- TempFileError hierarchy and FileIOError hierarchy
"""

import os

import pytest

from core.exceptions import (
    ConfigurationError,
    DiscoveryError,
    EmptyDiscoveryError,
    FetchError,
    FileIOError,
    FileReadError,
    HookExecutionError,
    InvalidFilePathError,
    KSwitchError,
    TempFileCreationError,
    TempFileError,
    TempFileWriteError,
)
from core.models import PathSpec, StoreKind


# ============================================================================
# Tests for KSwitchError
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "error_cls, message",
    [
        (KSwitchError, "An unexpected kswitch error occurred"),
        (ConfigurationError, "Invalid kswitch configuration"),
        (EmptyDiscoveryError, "No kubeconfig files found matching the configured paths and name"),
        (TempFileError, "An error occurred with a temporary file"),
        (TempFileCreationError, "Failed to create temporary file"),
        (TempFileWriteError, "Failed to write to temporary file"),
    ],
)
def test_default_messages(error_cls, message):
    """Every error has a readable message without arguments."""
    error = error_cls()

    assert str(error) == message
    assert error.message == message
    assert error.original_exception is None


@pytest.mark.unit
def test_diagnostic_info_with_original_exception():
    """The original exception is kept and summarized in diagnostic info."""
    original = PermissionError("denied")
    error = ConfigurationError("Cannot read", original_exception=original)

    assert error.original_exception is original
    assert error.diagnostic_info == {
        "type": "PermissionError",
        "details": "denied",
        "os_name": os.name,
    }


@pytest.mark.unit
def test_diagnostic_info_without_original_exception():
    error = KSwitchError()

    assert error.diagnostic_info["type"] == "Unknown"
    assert error.diagnostic_info["details"] == "No details"


@pytest.mark.unit
@pytest.mark.parametrize(
    "error_cls",
    [ConfigurationError, DiscoveryError, EmptyDiscoveryError, FetchError, HookExecutionError, TempFileError, FileIOError],
)
def test_all_errors_share_base_class(error_cls):
    assert issubclass(error_cls, KSwitchError)


# ============================================================================
# Tests for DiscoveryError
# ============================================================================


@pytest.mark.unit
def test_discovery_error_message_names_search_root():
    path_spec = PathSpec("secret/kube", StoreKind.VAULT, "*")
    error = DiscoveryError(path_spec=path_spec, original_exception=RuntimeError("forbidden"))

    assert error.message == "Failed to search vault path 'secret/kube': forbidden"
    assert error.path_spec == path_spec
    assert error.errors == []


@pytest.mark.unit
def test_discovery_error_collects_errors():
    nested = [DiscoveryError("a"), DiscoveryError("b")]
    error = DiscoveryError("all failed", errors=nested)

    assert error.errors == nested
    assert error.path_spec is None


# ============================================================================
# Tests for FetchError / HookExecutionError
# ============================================================================


@pytest.mark.unit
def test_fetch_error_message_names_candidate():
    error = FetchError(candidate_id="/k/config", original_exception=OSError("gone"))

    assert error.message == "Failed to fetch kubeconfig '/k/config': gone"
    assert error.candidate_id == "/k/config"


@pytest.mark.unit
def test_fetch_error_explicit_message_wins():
    error = FetchError("custom", candidate_id="/k/config")

    assert error.message == "custom"


@pytest.mark.unit
def test_hook_execution_error_message_names_hook():
    error = HookExecutionError(hook_name="refresh", original_exception=FileNotFoundError("no such file"))

    assert error.message == "Hook 'refresh' failed: no such file"
    assert error.hook_name == "refresh"


# ============================================================================
# Tests for the temp file and file I/O hierarchies
# ============================================================================


@pytest.mark.unit
def test_temp_file_errors_inherit_from_temp_file_error():
    assert isinstance(TempFileCreationError(), TempFileError)
    assert isinstance(TempFileWriteError(), TempFileError)


@pytest.mark.unit
def test_file_io_error_stores_file_path():
    original = OSError("Permission denied")
    error = FileReadError("Failed to read", file_path="/tmp/x", original_exception=original)

    assert isinstance(error, FileIOError)
    assert error.file_path == "/tmp/x"
    assert error.original_exception is original
    assert error.diagnostic_info["type"] == "OSError"


@pytest.mark.unit
def test_invalid_file_path_error_default_message():
    error = InvalidFilePathError()

    assert error.message == "A file I/O error occurred"
    assert error.file_path is None
