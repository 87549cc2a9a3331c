"""Three-way merge of source trees.

Public API for merging an incoming revision (``mod``) into a destination
tree (``dest``) given their common ancestor (``orig``).

Architecture
------------
Content comparison and content merging are delegated to external tools
(``diff`` and an RCS-``merge`` compatible command).  The engine only
classifies files by presence across the three trees, stages files in a
temporary merged tree, and keeps track of which files merged cleanly.

Modules:

- ``engine``   -- ``CodebaseMerger``: per-file resolution and whole-tree
  orchestration.
- ``models``   -- ``FileOutcome``, ``FileResolution``, ``MergeResult``.
- ``reporter`` -- ``Ui`` message sink, human-readable and JSON reports.

Usage example
-------------
::

    from pathlib import Path
    from codemerge.core import (
        Codebase, ConcreteFileDiffer, SubprocessRunner, SystemFileSystem,
    )
    from codemerge.merge import CodebaseMerger, Ui, format_merge_report

    fs = SystemFileSystem()
    cmd = SubprocessRunner()
    merger = CodebaseMerger(
        ui=Ui(),
        filesystem=fs,
        cmd=cmd,
        differ=ConcreteFileDiffer(cmd, fs),
        orig=Codebase(path=Path("export/public-6"), project_space="internal"),
        mod=Codebase(path=Path("export/public-7"), project_space="internal"),
        dest=Codebase(path=Path("export/internal-1006"), project_space="internal"),
    )
    result = merger.merge()
    print(format_merge_report(result))
"""

from .engine import CodebaseMerger
from .models import FileOutcome, FileResolution, MergeResult
from .reporter import Ui, format_merge_report, report_to_json

__all__ = [
    "CodebaseMerger",
    "FileOutcome",
    "FileResolution",
    "MergeResult",
    "Ui",
    "format_merge_report",
    "report_to_json",
]
