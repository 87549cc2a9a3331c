"""Pydantic models for merge results.

- ``FileOutcome``: Enum of per-file resolutions.
- ``FileResolution``: How one relative file name was resolved.
- ``MergeResult``: Aggregate outcome of a whole-tree merge.

All models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class FileOutcome(str, Enum):
    """Possible resolutions for a single file name."""

    ADDED = "added"
    DEST_ONLY = "dest_only"
    MERGED = "merged"
    CONFLICT = "conflict"
    SKIPPED_DEST_DELETE = "skipped_dest_delete"
    SKIPPED_MOD_DELETE = "skipped_mod_delete"
    DELETE_CONFLICT = "delete_conflict"
    ORIG_ONLY = "orig_only"


class FileResolution(BaseModel):
    """Resolution of one relative file name.

    Attributes:
        relative_name: File name relative to all three codebases.
        outcome: What the engine did with the file.
        merged_path: Absolute path in the merged tree, or ``None`` when
            nothing was written.
    """

    relative_name: str
    outcome: FileOutcome
    merged_path: str | None = None

    model_config = {"frozen": True}


class MergeResult(BaseModel):
    """Aggregate result of merging three codebases.

    Attributes:
        merged_codebase: Absolute path of the merged tree.
        merged_files: Merged-tree paths the merge tool resolved cleanly.
        failed_files: Merged-tree paths left with conflict markers.
        unreconciled_deletions: Relative names deleted on the destination
            side but changed on the incoming side.
        resolutions: Per-file resolutions, sorted by relative name.
    """

    merged_codebase: str
    merged_files: list[str] = []
    failed_files: list[str] = []
    unreconciled_deletions: list[str] = []
    resolutions: list[FileResolution] = []

    model_config = {"frozen": True}

    @property
    def merged_count(self) -> int:
        return len(self.merged_files)

    @property
    def conflict_count(self) -> int:
        return len(self.failed_files)

    @property
    def has_conflicts(self) -> bool:
        """True when manual resolution is needed before committing."""
        return bool(self.failed_files)

    def by_outcome(self, outcome: FileOutcome) -> list[FileResolution]:
        return [r for r in self.resolutions if r.outcome == outcome]

    def summary(self) -> str:
        """Format a short multi-line count summary."""
        deleted = len(self.by_outcome(FileOutcome.SKIPPED_DEST_DELETE)) + len(
            self.by_outcome(FileOutcome.SKIPPED_MOD_DELETE)
        )
        lines = [
            f"Merge result at {self.merged_codebase}",
            f"  Added:                {len(self.by_outcome(FileOutcome.ADDED))}",
            f"  Kept (dest only):     {len(self.by_outcome(FileOutcome.DEST_ONLY))}",
            f"  Merged:               {self.merged_count}",
            f"  Conflicts:            {self.conflict_count}",
            f"  Deleted:              {deleted}",
            f"  Unreconciled deletes: {len(self.unreconciled_deletions)}",
            f"  Total:                {len(self.resolutions)}",
        ]
        return "\n".join(lines)
