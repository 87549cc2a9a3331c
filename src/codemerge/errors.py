"""Exception types shared across codemerge.

Only ``CommandError`` raised by the external merge tool is an expected,
per-file condition (a merge conflict).  Everything else derived from
``MergeError`` aborts the whole merge.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class MergeError(Exception):
    """Base class for all codemerge failures."""


class FileSystemError(MergeError):
    """A filesystem operation failed (mkdir, copy, temp-dir allocation).

    Attributes:
        path: The path the failing operation was acting on.
        cause: The underlying ``OSError``, when there is one.
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        cause: OSError | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class CommandError(MergeError):
    """An external command exited with a nonzero status.

    Attributes:
        command: The executable that was run.
        arguments: Arguments passed to the executable.
        stdout: Captured standard output.
        stderr: Captured standard error.
        returncode: Exit status of the process.
    """

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        stdout: str,
        stderr: str,
        returncode: int,
    ) -> None:
        self.command = command
        self.arguments = list(args)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(self._format())

    def _format(self) -> str:
        cmdline = " ".join([self.command, *self.arguments])
        message = f"Running '{cmdline}' failed with exit code {self.returncode}"
        if self.stderr.strip():
            message += f": {self.stderr.strip()}"
        return message


class CommandTimeoutError(CommandError):
    """An external command did not finish within the configured timeout."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        timeout: float,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.timeout = timeout
        super().__init__(command, args, stdout, stderr, -1)

    def _format(self) -> str:
        cmdline = " ".join([self.command, *self.arguments])
        return f"Running '{cmdline}' timed out after {self.timeout}s"


class CommandNotFoundError(MergeError):
    """The executable for an external command could not be started."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command not found: {command}")
        self.command = command


class InvariantViolation(MergeError):
    """Internal bookkeeping reached a state the merge algorithm rules out."""
