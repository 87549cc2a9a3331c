"""Process runner for external tools (``diff``, ``merge``)."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from codemerge.errors import (
    CommandError,
    CommandNotFoundError,
    CommandTimeoutError,
)

logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    def run(
        self,
        command: str,
        args: Sequence[str],
        working_directory: Path | str | None,
    ) -> str: ...


class SubprocessRunner:
    """Run commands with ``subprocess.run`` and capture their output.

    Args:
        timeout: Seconds to wait for each command.  ``None`` waits forever.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(
        self,
        command: str,
        args: Sequence[str],
        working_directory: Path | str | None,
    ) -> str:
        """Run *command* with *args* and return its standard output.

        An empty *working_directory* inherits the current one.

        Raises:
            CommandError: The command exited with a nonzero status.
            CommandTimeoutError: The command exceeded ``timeout``.
            CommandNotFoundError: The executable could not be started.
        """
        argv = [command, *args]
        cwd = str(working_directory) if working_directory else None
        logger.debug("Running %s (cwd=%s)", argv, cwd or ".")

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(command) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                command,
                args,
                self.timeout or 0.0,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
            ) from exc

        if result.returncode != 0:
            raise CommandError(
                command,
                args,
                result.stdout,
                result.stderr,
                result.returncode,
            )
        return result.stdout


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
