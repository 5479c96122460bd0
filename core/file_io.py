"""
File reading and writing primitives shared by the stores, the materializer
and the hook state persistence.

Kubeconfigs are handled as opaque bytes; only the configuration and state
files are read as text.
"""

from datetime import datetime, timezone
import os
from pathlib import Path
import secrets
import tempfile
from typing import Callable, Protocol

from core.exceptions import (
    FileReadError,
    FileWriteError,
    InvalidFilePathError,
    TempFileCreationError,
)


class FileReader(Protocol):
    """
    Protocol defining the interface for file reading operations.

    This protocol specifies methods for reading files, allowing different
    implementations for production (filesystem) and testing (mocks).
    """

    def read_bytes(self, file_path: Path) -> bytes:
        """
        Read the raw content of a file.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content.

        Raises:
            FileReadError: If the file does not exist or cannot be read.
        """

    def read_text(self, file_path: Path) -> str:
        """
        Read the content of a file as UTF-8 text.

        Args:
            file_path: The path to the file to read.

        Returns:
            The decoded file content.

        Raises:
            FileReadError: If the file does not exist or cannot be read.
        """


class FilesystemFileReader:

    def read_bytes(self, file_path: Path) -> bytes:
        """
        Read the raw content of a file.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content.

        Raises:
            FileReadError: If the path is not a regular file or an I/O error
                occurs while reading it.
        """
        if not file_path.is_file():
            raise FileReadError(
                message=f"Not a file: {file_path}",
                file_path=str(file_path),
            )

        try:
            with file_path.open("rb") as f:
                return f.read()
        except OSError as e:
            raise FileReadError(
                message=f"Failed to read file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e

    def read_text(self, file_path: Path) -> str:
        """
        Read the content of a file as UTF-8, replacing undecodable bytes.

        Raises:
            FileReadError: If the path is not a regular file or an I/O error
                occurs while reading it.
        """
        return self.read_bytes(file_path).decode("utf-8", errors="replace")


class FilesystemFileWriter:
    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path

    @classmethod
    def from_path(cls, file_path: Path) -> "FilesystemFileWriter":
        """
        Create a writer instance with an explicit file path.

        The parent directory is created if it does not exist yet.

        Args:
            file_path: The path to the file to manage.

        Returns:
            FilesystemFileWriter instance configured for the given path.

        Raises:
            InvalidFilePathError: If the parent directory cannot be created or
                is not writable.
        """
        parent = file_path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InvalidFilePathError(
                message=f"Cannot create parent directory: {parent}",
                file_path=str(file_path),
                original_exception=e,
            ) from e
        if not os.access(parent, os.W_OK):
            raise InvalidFilePathError(
                message=f"Parent directory is not writable: {parent}",
                file_path=str(file_path),
            )

        return cls(file_path)

    @classmethod
    def from_tempfile(cls, directory: Path, prefix: str) -> "FilesystemFileWriter":
        """
        Create a writer instance for a new, uniquely named file in `directory`.

        The file name is `<prefix><UTC timestamp>.<random>`. The file is created
        exclusively with owner-only permissions (0600), so concurrent processes
        never share a file and other users cannot read its content. The
        directory is created with mode 0700 if absent.

        Args:
            directory: Directory to create the file in.
            prefix: File name prefix.

        Returns:
            FilesystemFileWriter instance for the created (empty) file.

        Raises:
            TempFileCreationError: If the directory or the file cannot be created.
        """
        try:
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
            # mkstemp uses O_EXCL and mode 0600, the extra token keeps names readable
            fd, file_path = tempfile.mkstemp(
                prefix=f"{prefix}{timestamp}.{secrets.token_hex(4)}.",
                dir=directory,
            )
            os.close(fd)
            return cls(Path(file_path).absolute())
        except OSError as e:
            raise TempFileCreationError(
                message=f"Failed to create temporary file in {directory}",
                original_exception=e,
            ) from e

    def write_bytes(self, data: bytes) -> None:
        """
        Write data to the file, truncating it first.

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        try:
            with open(self.file_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e

    def write_atomic(self, data: str) -> None:
        """
        Replace the file content atomically.

        The data is written to a temporary file in the same directory, flushed
        to disk and renamed over the target. Readers observe either the old or
        the new content, never a partial write.

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing or renaming fails.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        tmp_path: str | None = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.file_path.name}.", dir=self.file_path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.file_path)
            tmp_path = None
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)


class MockFileReader:
    """
    Mock implementation of FileReader for testing.

    Returns configurable file contents, allowing tests to control file reading
    behavior without requiring filesystem operations or actual file I/O.
    """

    def __init__(
        self,
        return_value: bytes | None = None,
        read_bytes_fn: Callable[[Path], bytes] | None = None,
    ):
        """
        Initialize MockFileReader with configurable reading behavior.

        Args:
            return_value: If provided, always returns this value regardless of input.
                Takes precedence over read_bytes_fn if both are provided.
            read_bytes_fn: Optional callable that takes a file path and returns
                file content. It may raise to simulate read failures.

        Attributes (for test inspection):
            read_calls: List of file paths passed to read_bytes() or read_text()
        """
        self.return_value = return_value
        self.read_bytes_fn = read_bytes_fn

        self.read_calls: list[Path] = []

    def read_bytes(self, file_path: Path) -> bytes:
        self.read_calls.append(file_path)
        if self.return_value is not None:
            return self.return_value
        if self.read_bytes_fn is not None:
            return self.read_bytes_fn(file_path)
        return b""

    def read_text(self, file_path: Path) -> str:
        return self.read_bytes(file_path).decode("utf-8", errors="replace")
