"""
Materialization of the selected kubeconfig into a session-scoped file.

A process cannot change the environment of the shell that started it. The
switch command therefore writes the selected kubeconfig to a fresh file in a
dedicated temporary directory and prints its path; the shell points
`KUBECONFIG` at it. Files are never modified after creation, only removed
wholesale by `clean`.
"""

from datetime import datetime, timezone
import logging
from pathlib import Path

from constants import TEMP_KUBECONFIG_DIR, TEMP_KUBECONFIG_PREFIX
from core.exceptions import FileWriteError, TempFileError, TempFileWriteError
from core.file_io import FilesystemFileWriter
from core.models import ActiveSwitchState, Candidate

logger = logging.getLogger(__name__)


class SwitchMaterializer:
    """
    Writes kubeconfigs to, and cleans, the temporary kubeconfig directory.

    Attributes:
        temp_dir: Directory holding only files produced by this class.
    """

    def __init__(self, temp_dir: Path = TEMP_KUBECONFIG_DIR):
        self.temp_dir = temp_dir

    def materialize(self, content: bytes) -> Path:
        """
        Write kubeconfig content to a new file readable only by its owner.

        The file name embeds a timestamp and random tokens, and the file is
        created exclusively, so concurrent invocations never collide.

        Returns:
            The absolute path of the written file.

        Raises:
            TempFileCreationError: If the directory or file cannot be created.
            TempFileWriteError: If the content cannot be written.
        """
        writer = FilesystemFileWriter.from_tempfile(self.temp_dir, TEMP_KUBECONFIG_PREFIX)
        if writer.file_path is None:
            raise TempFileError("No temporary kubeconfig path was created")

        try:
            writer.write_bytes(content)
        except FileWriteError as e:
            writer.file_path.unlink(missing_ok=True)
            raise TempFileWriteError(
                message=f"Failed to write kubeconfig to {writer.file_path}",
                original_exception=e,
            ) from e

        logger.debug("Materialized kubeconfig at %s", writer.file_path)
        return writer.file_path

    def materialize_candidate(self, candidate: Candidate, content: bytes) -> ActiveSwitchState:
        created_at = datetime.now(timezone.utc)
        path = self.materialize(content)
        return ActiveSwitchState(
            temp_file_path=path,
            source_candidate_id=candidate.id,
            created_at=created_at,
        )

    def clean(self) -> int:
        """
        Remove every file in the temporary kubeconfig directory.

        Sub-directories are left alone. Idempotent.

        Returns:
            The number of files removed, 0 if the directory does not exist.

        Raises:
            TempFileError: If the directory cannot be listed or a file cannot
                be removed.
        """
        if not self.temp_dir.is_dir():
            return 0

        removed = 0
        try:
            for entry in self.temp_dir.iterdir():
                if entry.is_dir() and not entry.is_symlink():
                    continue
                entry.unlink(missing_ok=True)
                removed += 1
        except OSError as e:
            raise TempFileError(
                message=f"Failed to clean temporary kubeconfigs in {self.temp_dir}",
                original_exception=e,
            ) from e

        logger.debug("Removed %d file(s) from %s", removed, self.temp_dir)
        return removed
