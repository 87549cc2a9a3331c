"""Shared pytest fixtures and in-memory fakes for codemerge tests."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path, PurePosixPath
from typing import Callable, Sequence

import pytest
from dotenv import load_dotenv

from codemerge.core.codebase import Codebase
from codemerge.core.differ import ConcreteFileDiffer
from codemerge.errors import CommandError, FileSystemError
from codemerge.merge.engine import CodebaseMerger
from codemerge.merge.reporter import Ui

load_dotenv()

MERGE3_COMMAND = [sys.executable, "-m", "codemerge.tools.merge3_tool"]

requires_diff = pytest.mark.skipif(
    shutil.which("diff") is None, reason="diff utility not installed"
)


class FakeFileSystem:
    """In-memory ``FileSystem``.

    Files are stored as bytes keyed by absolute path.  Every mutating call
    is appended to ``calls`` so tests can assert on the exact sequence.
    """

    def __init__(self) -> None:
        self.files: dict[Path, bytes] = {}
        self.executables: set[Path] = set()
        self.calls: list[tuple] = []
        self.temp_dirs: list[Path] = []
        self.fail_on: set[str] = set()

    def add(
        self, path: Path, content: str | bytes, executable: bool = False
    ) -> None:
        data = content.encode() if isinstance(content, str) else content
        self.files[path] = data
        if executable:
            self.executables.add(path)

    def read(self, path: Path) -> bytes:
        return self.files[path]

    def exists(self, path: Path) -> bool:
        return path in self.files

    def is_executable(self, path: Path) -> bool:
        return path in self.executables

    def make_dirs_for_file(self, path: Path) -> None:
        if "mkdir" in self.fail_on:
            raise FileSystemError(f"mkdir failed for {path}", path=path)
        self.calls.append(("make_dirs_for_file", path))

    def copy_file(self, src: Path, dest: Path) -> None:
        if "copy" in self.fail_on or src not in self.files:
            raise FileSystemError(f"copy failed for {src}", path=src)
        self.calls.append(("copy_file", src, dest))
        self.files[dest] = self.files[src]
        if src in self.executables:
            self.executables.add(dest)

    def get_temporary_directory(self, prefix: str) -> Path:
        if "tempdir" in self.fail_on:
            raise FileSystemError(f"cannot allocate {prefix}")
        path = Path("/tmp/fake") / f"{prefix}{len(self.temp_dirs) + 7}"
        self.temp_dirs.append(path)
        return path

    def find_files(self, root: Path) -> set[Path]:
        return {p for p in self.files if p.is_relative_to(root)}


class FakeCommandRunner:
    """In-memory ``CommandRunner``.

    ``diff`` compares file bytes in the fake filesystem.  ``merge``
    outcomes are controlled per relative name through ``conflicts``;
    ``merge_output`` is written to the staged file to mimic the tool
    editing it in place.
    """

    def __init__(self, filesystem: FakeFileSystem) -> None:
        self.filesystem = filesystem
        self.calls: list[tuple[str, list[str], str | None]] = []
        self.conflicts: set[str] = set()
        self.merge_output: dict[str, bytes] = {}
        self.diff_returncode: int | None = None
        self.handler: Callable[[str, list[str], str | None], str] | None = (
            None
        )

    def run(
        self,
        command: str,
        args: Sequence[str],
        working_directory: Path | str | None,
    ) -> str:
        args = list(args)
        self.calls.append((command, args, working_directory))
        if self.handler is not None:
            return self.handler(command, args, working_directory)
        if command == "diff":
            return self._diff(args)
        if command == "merge":
            return self._merge(args)
        raise AssertionError(f"unexpected command {command}")

    def _diff(self, args: list[str]) -> str:
        if self.diff_returncode is not None:
            raise CommandError(
                "diff", args, "", "diff: trouble", self.diff_returncode
            )
        first = self.filesystem.files.get(Path(args[-2]), b"")
        second = self.filesystem.files.get(Path(args[-1]), b"")
        if first == second:
            return ""
        raise CommandError("diff", args, "@@ -1 +1 @@\n", "", 1)

    def _merge(self, args: list[str]) -> str:
        staged = Path(args[-3])
        name = staged.name
        if name in self.merge_output:
            self.filesystem.files[staged] = self.merge_output[name]
        if name in self.conflicts:
            raise CommandError("merge", args, "", "conflicts", 1)
        return ""

    def commands(self, name: str) -> list[tuple[str, list[str], str | None]]:
        return [c for c in self.calls if c[0] == name]


class RecordingUi(Ui):
    """``Ui`` that keeps ``(fmt, args)`` pairs instead of printing."""

    def __init__(self) -> None:
        super().__init__()
        self.messages: list[tuple[str, tuple]] = []

    def message(self, fmt: str, *args) -> None:
        self.messages.append((fmt, args))


ORIG_ROOT = Path("/work/orig")
DEST_ROOT = Path("/work/dest")
MOD_ROOT = Path("/work/mod")


class Trees:
    """The three fake codebases plus their collaborators."""

    def __init__(self) -> None:
        self.fs = FakeFileSystem()
        self.cmd = FakeCommandRunner(self.fs)
        self.ui = RecordingUi()
        self.orig = Codebase(path=ORIG_ROOT, project_space="internal")
        self.dest = Codebase(path=DEST_ROOT, project_space="internal")
        self.mod = Codebase(path=MOD_ROOT, project_space="internal")

    def put(
        self,
        tree: str,
        name: str,
        content: str,
        executable: bool = False,
    ) -> Path:
        root = {"orig": ORIG_ROOT, "dest": DEST_ROOT, "mod": MOD_ROOT}[tree]
        path = root.joinpath(*PurePosixPath(name).parts)
        self.fs.add(path, content, executable)
        return path

    def merger(self, **kwargs) -> CodebaseMerger:
        return CodebaseMerger(
            ui=self.ui,
            filesystem=self.fs,
            cmd=self.cmd,
            differ=ConcreteFileDiffer(self.cmd, self.fs),
            orig=self.orig,
            mod=self.mod,
            dest=self.dest,
            **kwargs,
        )


@pytest.fixture
def trees() -> Trees:
    return Trees()


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create *files* (relative name -> content) below *root*."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root
