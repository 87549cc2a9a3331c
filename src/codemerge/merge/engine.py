"""Three-way merge of whole source trees.

The ``CodebaseMerger`` takes three snapshots of a tree:

* ``orig`` -- the common ancestor, translated into the destination's
  project space.
* ``dest`` -- the current head of the destination.
* ``mod``  -- the incoming revision, translated the same way.

and builds a fresh *merged tree* in a temporary directory.  Each file name
found in ``dest`` or ``mod`` is classified by which of the three trees
contain it and resolved independently:

======  ======  =====  ==============================================
orig    dest    mod    resolution
======  ======  =====  ==============================================
yes     no      yes    skip if unchanged, otherwise unreconciled delete
yes     yes     no     skip (deletion on the incoming side wins)
no      no      yes    copy mod
no      yes     no     copy dest
yes     yes     yes    stage dest, run merge tool against orig and mod
no      yes     yes    stage dest, run merge tool against an empty file
======  ======  =====  ==============================================

Only files that went through the external merge tool are recorded in
``merged_files`` or ``failed_to_merge_files``.  A nonzero exit from the
merge tool is a conflict; every other failure aborts the merge.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from pathlib import Path, PurePosixPath
from typing import Sequence

from codemerge.core.async_utils import map_limited
from codemerge.core.codebase import Codebase
from codemerge.core.differ import FileDiffer
from codemerge.core.filesystem import FileSystem
from codemerge.core.runner import CommandRunner
from codemerge.errors import CommandError, InvariantViolation
from codemerge.merge.models import FileOutcome, FileResolution, MergeResult
from codemerge.merge.reporter import Ui

logger = logging.getLogger(__name__)

MERGED_CODEBASE_PREFIX = "merged_codebase_"


class CodebaseMerger:
    """Merge ``mod`` into ``dest`` using ``orig`` as the common ancestor.

    One instance performs exactly one merge.

    Args:
        ui: Reporter for the post-merge summary.
        filesystem: Filesystem used for every read, copy and mkdir.
        cmd: Runner used to invoke the external merge tool.
        differ: Used to decide whether a file deleted on ``dest`` changed
            on ``mod``.
        orig: Common-ancestor codebase.
        mod: Incoming codebase.
        dest: Destination codebase.
        merge_command: Executable (plus leading arguments) of an
            RCS-``merge`` compatible tool.
        temp_prefix: Name prefix of the merged-tree directory.
        max_parallel: Number of files resolved concurrently.
    """

    def __init__(
        self,
        ui: Ui,
        filesystem: FileSystem,
        cmd: CommandRunner,
        differ: FileDiffer,
        orig: Codebase,
        mod: Codebase,
        dest: Codebase,
        *,
        merge_command: Sequence[str] = ("merge",),
        temp_prefix: str = MERGED_CODEBASE_PREFIX,
        max_parallel: int = 1,
    ) -> None:
        if not merge_command:
            raise ValueError("merge_command cannot be empty")
        if max_parallel < 1:
            raise ValueError(
                f"max_parallel must be at least 1, got {max_parallel}"
            )
        self.ui = ui
        self.filesystem = filesystem
        self.cmd = cmd
        self.differ = differ
        self.orig = orig
        self.mod = mod
        self.dest = dest
        self.merge_command = list(merge_command)
        self.temp_prefix = temp_prefix
        self.max_parallel = max_parallel

        self._merged_codebase: Path | None = None
        self._allocation_lock = threading.Lock()
        self._bookkeeping_lock = threading.Lock()
        self._merged_files: set[str] = set()
        self._failed_files: set[str] = set()
        self._unreconciled_deletions: set[str] = set()

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    @property
    def merged_codebase(self) -> Path:
        """Root of the merged tree, allocated on first access."""
        with self._allocation_lock:
            if self._merged_codebase is None:
                self._merged_codebase = (
                    self.filesystem.get_temporary_directory(
                        self.temp_prefix
                    )
                )
            return self._merged_codebase

    @property
    def merged_files(self) -> frozenset[str]:
        with self._bookkeeping_lock:
            return frozenset(self._merged_files)

    @property
    def failed_to_merge_files(self) -> frozenset[str]:
        with self._bookkeeping_lock:
            return frozenset(self._failed_files)

    @property
    def unreconciled_deletions(self) -> frozenset[str]:
        with self._bookkeeping_lock:
            return frozenset(self._unreconciled_deletions)

    # ------------------------------------------------------------------
    # Main entry points
    # ------------------------------------------------------------------

    def merge(self) -> MergeResult:
        """Merge the three codebases and report the outcome.

        Returns:
            A ``MergeResult``; ``has_conflicts`` means files in the merged
            tree need manual resolution.
        """
        names = self._prepare()
        if self.max_parallel == 1:
            resolutions = [self.generate_merged_file(n) for n in names]
        else:
            resolutions = asyncio.run(
                map_limited(
                    self.generate_merged_file, names, self.max_parallel
                )
            )
        return self._finish(resolutions)

    async def merge_async(self) -> MergeResult:
        """Coroutine form of ``merge()`` for callers with a running loop."""
        names = self._prepare()
        resolutions = await map_limited(
            self.generate_merged_file, names, self.max_parallel
        )
        return self._finish(resolutions)

    def report(self) -> None:
        """Emit the merged-tree location and the merge summary via ``ui``."""
        merged = self.merged_files
        failed = self.failed_to_merge_files
        self.ui.message(
            "Merged codebase generated at: %s",
            str(self.merged_codebase.absolute()),
        )
        if not failed:
            self.ui.message(
                "%d files merged successfully. No merge conflicts.",
                len(merged),
            )
        else:
            self.ui.message(
                "%d files merged successfully.\n"
                "%d files have merge conflicts. "
                "Edit the following files to resolve conflicts:\n%s",
                len(merged),
                len(failed),
                "\n".join(sorted(failed)),
            )

    # ------------------------------------------------------------------
    # Per-file resolution
    # ------------------------------------------------------------------

    def generate_merged_file(self, filename: str) -> FileResolution:
        """Resolve one relative file name into the merged tree.

        Args:
            filename: Forward-slash separated name relative to all three
                codebases.

        Raises:
            InvariantViolation: The name exists in none of the codebases.
            FileSystemError: A copy or mkdir failed.
        """
        orig_file = self.orig.resolve(filename)
        orig_exists = self.filesystem.exists(orig_file)
        dest_file = self.dest.resolve(filename)
        dest_exists = self.filesystem.exists(dest_file)
        mod_file = self.mod.resolve(filename)
        mod_exists = self.filesystem.exists(mod_file)

        if not dest_exists and not mod_exists:
            if orig_exists:
                # Deleted on both sides already
                logger.debug("%s: only in orig, nothing to do", filename)
                return FileResolution(
                    relative_name=filename, outcome=FileOutcome.ORIG_ONLY
                )
            raise InvariantViolation(
                f"{filename} does not exist in orig, dest or mod"
            )

        if orig_exists and not dest_exists and mod_exists:
            difference = self.differ.diff_files(
                filename, orig_file, mod_file
            )
            if not difference.is_different:
                logger.debug(
                    "%s: deleted in dest, unchanged in mod", filename
                )
                return FileResolution(
                    relative_name=filename,
                    outcome=FileOutcome.SKIPPED_DEST_DELETE,
                )
            logger.warning(
                "%s: deleted in dest but changed in mod; left out of the "
                "merged codebase",
                filename,
            )
            with self._bookkeeping_lock:
                self._unreconciled_deletions.add(filename)
            return FileResolution(
                relative_name=filename,
                outcome=FileOutcome.DELETE_CONFLICT,
            )

        if orig_exists and dest_exists and not mod_exists:
            logger.debug("%s: deleted in mod", filename)
            return FileResolution(
                relative_name=filename,
                outcome=FileOutcome.SKIPPED_MOD_DELETE,
            )

        merged_file = self._merged_path(filename)
        self.filesystem.make_dirs_for_file(merged_file)

        if not orig_exists and not dest_exists:
            logger.debug("%s: added in mod", filename)
            self.filesystem.copy_file(mod_file, merged_file)
            return FileResolution(
                relative_name=filename,
                outcome=FileOutcome.ADDED,
                merged_path=str(merged_file),
            )

        if not mod_exists:
            logger.debug("%s: only in dest", filename)
            self.filesystem.copy_file(dest_file, merged_file)
            return FileResolution(
                relative_name=filename,
                outcome=FileOutcome.DEST_ONLY,
                merged_path=str(merged_file),
            )

        # The merge tool edits the staged copy of dest in place
        self.filesystem.copy_file(dest_file, merged_file)
        ancestor = str(orig_file) if orig_exists else os.devnull
        args = [
            *self.merge_command[1:],
            str(merged_file),
            ancestor,
            str(mod_file),
        ]
        try:
            self.cmd.run(
                self.merge_command[0],
                args,
                str(self.merged_codebase.absolute()),
            )
        except CommandError as exc:
            logger.warning("%s: merge conflict (%s)", filename, exc)
            with self._bookkeeping_lock:
                self._failed_files.add(str(merged_file))
            return FileResolution(
                relative_name=filename,
                outcome=FileOutcome.CONFLICT,
                merged_path=str(merged_file),
            )

        logger.debug("%s: merged cleanly", filename)
        with self._bookkeeping_lock:
            self._merged_files.add(str(merged_file))
        return FileResolution(
            relative_name=filename,
            outcome=FileOutcome.MERGED,
            merged_path=str(merged_file),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _merged_path(self, filename: str) -> Path:
        parts = PurePosixPath(filename).parts
        return self.merged_codebase.absolute().joinpath(*parts)

    def _prepare(self) -> list[str]:
        """Allocate the merged tree and collect candidate file names."""
        root = self.merged_codebase
        logger.info(
            "Merging %s into %s (ancestor %s) at %s",
            self.mod,
            self.dest,
            self.orig,
            root,
        )
        names = self._relative_names(self.dest) | self._relative_names(
            self.mod
        )
        logger.debug("%d candidate files", len(names))
        return sorted(names)

    def _relative_names(self, codebase: Codebase) -> set[str]:
        root = codebase.path
        return {
            path.relative_to(root).as_posix()
            for path in self.filesystem.find_files(root)
        }

    def _finish(self, resolutions: list[FileResolution]) -> MergeResult:
        self.report()
        return MergeResult(
            merged_codebase=str(self.merged_codebase.absolute()),
            merged_files=sorted(self.merged_files),
            failed_files=sorted(self.failed_to_merge_files),
            unreconciled_deletions=sorted(self.unreconciled_deletions),
            resolutions=sorted(
                resolutions, key=lambda r: r.relative_name
            ),
        )
