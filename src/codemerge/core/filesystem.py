"""Filesystem abstraction used by the merge engine.

``FileSystem`` is the structural interface the engine depends on; tests
substitute in-memory fakes.  ``SystemFileSystem`` is the real implementation
and turns every ``OSError`` into a fatal ``FileSystemError``.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Protocol

from codemerge.errors import FileSystemError

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def is_executable(self, path: Path) -> bool: ...

    def make_dirs_for_file(self, path: Path) -> None: ...

    def copy_file(self, src: Path, dest: Path) -> None: ...

    def get_temporary_directory(self, prefix: str) -> Path: ...

    def find_files(self, root: Path) -> set[Path]: ...


class SystemFileSystem:
    """``FileSystem`` backed by the local disk.

    Args:
        temp_dir: Base directory for temporary directories.  ``None`` uses
            the platform default from ``tempfile``.
    """

    def __init__(self, temp_dir: Path | None = None) -> None:
        self.temp_dir = temp_dir

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_executable(self, path: Path) -> bool:
        try:
            mode = path.stat().st_mode
        except OSError:
            return False
        return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))

    def make_dirs_for_file(self, path: Path) -> None:
        """Create every missing parent directory of *path*."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileSystemError(
                f"Could not create directories for {path}: {exc}",
                path=path,
                cause=exc,
            ) from exc

    def copy_file(self, src: Path, dest: Path) -> None:
        """Copy content and permission bits of *src* to *dest*."""
        try:
            shutil.copyfile(src, dest)
            shutil.copymode(src, dest)
        except OSError as exc:
            raise FileSystemError(
                f"Could not copy {src} to {dest}: {exc}",
                path=src,
                cause=exc,
            ) from exc

    def get_temporary_directory(self, prefix: str) -> Path:
        """Create a fresh, uniquely named directory starting with *prefix*."""
        base = str(self.temp_dir) if self.temp_dir is not None else None
        try:
            if base is not None:
                os.makedirs(base, exist_ok=True)
            created = Path(tempfile.mkdtemp(prefix=prefix, dir=base))
        except OSError as exc:
            raise FileSystemError(
                f"Could not create temporary directory '{prefix}*': {exc}",
                path=base,
                cause=exc,
            ) from exc
        logger.debug("Allocated temporary directory %s", created)
        return created

    def find_files(self, root: Path) -> set[Path]:
        """Return every regular file below *root*, recursively.

        A missing root yields an empty set.
        """
        if not root.is_dir():
            return set()
        found: set[Path] = set()
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in filenames:
                candidate = Path(dirpath) / filename
                if candidate.is_file():
                    found.add(candidate)
        return found
