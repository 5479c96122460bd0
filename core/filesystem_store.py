"""
Kubeconfig store backed by the local filesystem.

Search roots are either a single kubeconfig file or a directory that is walked
recursively. Candidate ids are absolute file paths, so fetching never requires
walking again.
"""

import logging
import os
from pathlib import Path
from typing import Iterator

from constants import MAX_WALK_DEPTH
from core.exceptions import ConfigurationError, DiscoveryError, FetchError, FileReadError
from core.file_io import FileReader, FilesystemFileReader
from core.models import Candidate, PathSpec, StoreKind
from core.stores import matches_name

logger = logging.getLogger(__name__)


class FilesystemStore:
    """
    Store enumerating kubeconfig files below local search roots.

    Directory walks are bounded by `max_depth` and never enter a directory
    whose resolved path was already visited, which breaks symlink cycles.

    Attributes:
        kind: Always `StoreKind.FILESYSTEM`.
        max_depth: Maximum number of directory levels below a search root.
    """

    kind = StoreKind.FILESYSTEM

    def __init__(self, reader: FileReader | None = None, max_depth: int = MAX_WALK_DEPTH):
        self.max_depth = max_depth
        self._reader = reader if reader is not None else FilesystemFileReader()
        self._path_specs: list[PathSpec] = []
        self._display_names: dict[str, str] = {}

    @property
    def path_specs(self) -> list[PathSpec]:
        return list(self._path_specs)

    def add_path_spec(self, path_spec: PathSpec) -> None:
        if path_spec.store != self.kind:
            raise ConfigurationError(
                f"Cannot attach {path_spec.store} path '{path_spec.location}' "
                f"to the {self.kind} store"
            )
        self._path_specs.append(path_spec)

    def enumerate(self) -> Iterator[Candidate | DiscoveryError]:
        """
        Lazily yield the kubeconfig files matching each search root's name filter.

        Files reachable from several search roots are yielded once, for the
        first root that reached them.

        Yields:
            Candidate per matching regular file, DiscoveryError per search root
            that does not exist or cannot be read.
        """
        seen: set[str] = set()

        for path_spec in self._path_specs:
            root = Path(path_spec.location)
            logger.debug("Searching filesystem path %s", root)
            try:
                for file_path in self._iter_matches(root, path_spec.name_filter):
                    candidate_id = str(file_path)
                    if candidate_id in seen:
                        continue
                    seen.add(candidate_id)

                    display_name = self._display_name(root, file_path)
                    self._display_names[candidate_id] = display_name
                    yield Candidate(candidate_id, self.kind, display_name)
            except OSError as e:
                yield DiscoveryError(path_spec=path_spec, original_exception=e)

    def fetch(self, candidate_id: str) -> tuple[bytes, str]:
        """
        Read a kubeconfig file.

        Raises:
            FetchError: If the file does not exist or cannot be read.
        """
        try:
            content = self._reader.read_bytes(Path(candidate_id))
        except FileReadError as e:
            raise FetchError(candidate_id=candidate_id, original_exception=e) from e

        display_name = self._display_names.get(candidate_id, candidate_id)
        return content, display_name

    def _iter_matches(self, root: Path, name_filter: str) -> Iterator[Path]:
        if root.is_file():
            if matches_name(root.name, name_filter):
                yield root.absolute()
            return
        if not root.is_dir():
            raise FileNotFoundError(f"No such file or directory: '{root}'")

        for file_path in self._walk(root, 0, set()):
            if matches_name(file_path.name, name_filter):
                yield file_path

    def _walk(self, directory: Path, depth: int, visited: set[Path]) -> Iterator[Path]:
        real_path = directory.resolve()
        if real_path in visited:
            logger.debug("Skipping already visited directory %s", directory)
            return
        visited.add(real_path)

        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)

        for entry in entries:
            entry_path = Path(entry.path).absolute()
            if entry.is_dir(follow_symlinks=True):
                if depth >= self.max_depth:
                    logger.debug("Maximum depth reached, not entering %s", entry_path)
                    continue
                try:
                    yield from self._walk(entry_path, depth + 1, visited)
                except OSError as e:
                    logger.warning("Skipping unreadable directory %s: %s", entry_path, e)
            elif entry.is_file(follow_symlinks=True):
                yield entry_path

    def _display_name(self, root: Path, file_path: Path) -> str:
        if root.is_file():
            home = str(Path.home())
            location = str(root)
            if location.startswith(home + os.sep):
                return "~" + location[len(home) :]
            return location
        return file_path.relative_to(root.absolute()).as_posix()
