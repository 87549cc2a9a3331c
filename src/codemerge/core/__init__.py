"""Collaborators the merge engine is built on.

- ``codebase``    -- ``Codebase``: rooted, read-only view of a source tree.
- ``filesystem``  -- ``FileSystem`` protocol and ``SystemFileSystem``.
- ``runner``      -- ``CommandRunner`` protocol and ``SubprocessRunner``.
- ``differ``      -- ``FileDiffer`` protocol and ``ConcreteFileDiffer``.
- ``async_utils`` -- bounded thread fan-out for per-file work.
"""

from .codebase import Codebase
from .differ import Comparison, ConcreteFileDiffer, FileDiffer, FileDifference
from .filesystem import FileSystem, SystemFileSystem
from .runner import CommandRunner, SubprocessRunner

__all__ = [
    "Codebase",
    "CommandRunner",
    "Comparison",
    "ConcreteFileDiffer",
    "FileDiffer",
    "FileDifference",
    "FileSystem",
    "SubprocessRunner",
    "SystemFileSystem",
]
