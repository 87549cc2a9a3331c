"""File comparison backed by the system ``diff`` utility.

The merge engine only needs to know *whether* two files differ, but the
unified diff text is kept on the result for logging and reports.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel

from codemerge.core.filesystem import FileSystem
from codemerge.core.runner import CommandRunner
from codemerge.errors import CommandError, CommandNotFoundError

logger = logging.getLogger(__name__)


class Comparison(str, Enum):
    """How a boolean attribute compares across two files."""

    SAME = "same"
    ONLY1 = "only1"
    ONLY2 = "only2"

    @classmethod
    def of(cls, first: bool, second: bool) -> Comparison:
        if first == second:
            return cls.SAME
        return cls.ONLY1 if first else cls.ONLY2


class FileDifference(BaseModel):
    """Outcome of comparing two versions of one file.

    Attributes:
        relative_filename: Name of the file relative to both trees.
        file1: Absolute path of the first file.
        file2: Absolute path of the second file.
        existence: Which side(s) the file exists on.
        executability: Which side(s) carry the executable bit.
        content_diff: Unified diff text, ``None`` when content is equal.
        diff_failed: ``True`` if no usable diff could be produced.
    """

    relative_filename: str
    file1: Path
    file2: Path
    existence: Comparison = Comparison.SAME
    executability: Comparison = Comparison.SAME
    content_diff: str | None = None
    diff_failed: bool = False

    model_config = {"frozen": True}

    @property
    def is_different(self) -> bool:
        return (
            self.diff_failed
            or self.content_diff is not None
            or self.existence != Comparison.SAME
            or self.executability != Comparison.SAME
        )


class FileDiffer(Protocol):
    def diff_files(
        self, relative_filename: str, file1: Path, file2: Path
    ) -> FileDifference: ...


class ConcreteFileDiffer:
    """Compare files with ``diff -N -u`` run through a ``CommandRunner``.

    ``-N`` treats a missing input as empty, so a file present on only one
    side yields a full add/remove diff instead of an error.

    Args:
        cmd: Runner used to invoke the diff tool.
        filesystem: Used to query existence and executable bits.
        diff_command: Name or path of the diff executable.
    """

    def __init__(
        self,
        cmd: CommandRunner,
        filesystem: FileSystem,
        diff_command: str = "diff",
    ) -> None:
        self.cmd = cmd
        self.filesystem = filesystem
        self.diff_command = diff_command

    def diff_files(
        self, relative_filename: str, file1: Path, file2: Path
    ) -> FileDifference:
        exists1 = self.filesystem.exists(file1)
        exists2 = self.filesystem.exists(file2)
        executable1 = exists1 and self.filesystem.is_executable(file1)
        executable2 = exists2 and self.filesystem.is_executable(file2)

        content_diff: str | None = None
        diff_failed = False
        args = ["-N", "-u", str(file1), str(file2)]
        try:
            self.cmd.run(self.diff_command, args, "")
        except CommandError as exc:
            # diff exits 1 when the inputs differ, >1 on trouble
            if exc.returncode == 1:
                content_diff = exc.stdout
            else:
                logger.warning(
                    "Could not diff %s: %s", relative_filename, exc
                )
                diff_failed = True
        except CommandNotFoundError as exc:
            logger.warning("Could not diff %s: %s", relative_filename, exc)
            diff_failed = True

        return FileDifference(
            relative_filename=relative_filename,
            file1=file1,
            file2=file2,
            existence=Comparison.of(exists1, exists2),
            executability=Comparison.of(executable1, executable2),
            content_diff=content_diff,
            diff_failed=diff_failed,
        )
