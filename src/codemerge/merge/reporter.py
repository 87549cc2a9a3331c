"""Merge report output.

Provides the user-facing side of a merge:

- ``Ui`` -- printf-style message sink the engine reports through.
- ``format_merge_report`` -- full post-merge summary.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from .models import MergeResult

from .models import FileOutcome

logger = logging.getLogger(__name__)


class Ui:
    """Write user-facing messages to a text stream.

    Every message is also forwarded to the module logger at INFO so it
    lands in log files alongside the engine's own records.

    Args:
        stream: Destination for messages (default: ``sys.stdout``).
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def message(self, fmt: str, *args: Any) -> None:
        text = fmt % args if args else fmt
        logger.info(text)
        print(text, file=self.stream)

    def error(self, exc: BaseException, fmt: str, *args: Any) -> None:
        text = fmt % args if args else fmt
        logger.debug("%s", text, exc_info=exc)
        print(f"ERROR: {text}: {exc}", file=sys.stderr)


# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_merge_report(result: MergeResult) -> str:
    """Format a complete merge report as human-readable text.

    Sections are only included when they contain at least one file.

    Args:
        result: The completed merge result.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    lines.append(f"Merged codebase: {result.merged_codebase}")
    lines.append("")

    added = result.by_outcome(FileOutcome.ADDED)
    kept = result.by_outcome(FileOutcome.DEST_ONLY)
    lines.append(
        f"Resolved {len(result.resolutions)} files: "
        f"{len(added)} added, {len(kept)} kept, "
        f"{result.merged_count} merged, {result.conflict_count} conflicts"
    )
    lines.append("")

    if result.merged_files:
        lines.append("Merged cleanly:")
        for path in result.merged_files:
            lines.append(f"  {path}")
        lines.append("")

    if result.failed_files:
        lines.append("Conflicts (edit to resolve):")
        for path in result.failed_files:
            lines.append(f"  {path}")
        lines.append("")

    if result.unreconciled_deletions:
        lines.append("Deleted on destination but changed on source:")
        for name in result.unreconciled_deletions:
            lines.append(f"  {name}")
        lines.append("")

    if not result.has_conflicts:
        lines.append("No merge conflicts.")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(result: MergeResult) -> dict:
    """Convert a merge result to a structured dict for JSON serialisation.

    Args:
        result: The merge result.

    Returns:
        Dict with the merged tree location, counts, and per-file details.
    """
    files = []
    for r in result.resolutions:
        entry: dict = {
            "name": r.relative_name,
            "outcome": r.outcome.value,
        }
        if r.merged_path:
            entry["merged_path"] = r.merged_path
        files.append(entry)

    return {
        "merged_codebase": result.merged_codebase,
        "has_conflicts": result.has_conflicts,
        "counts": {
            "total": len(result.resolutions),
            "merged": result.merged_count,
            "conflicts": result.conflict_count,
            "added": len(result.by_outcome(FileOutcome.ADDED)),
            "dest_only": len(result.by_outcome(FileOutcome.DEST_ONLY)),
            "unreconciled_deletions": len(result.unreconciled_deletions),
        },
        "merged_files": list(result.merged_files),
        "failed_files": list(result.failed_files),
        "unreconciled_deletions": list(result.unreconciled_deletions),
        "files": files,
    }
