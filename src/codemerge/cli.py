"""Command-line entry point: merge three exported source trees.

Exit status: 0 when the merge is clean, 1 when files were left with
conflict markers, 2 when the merge could not be performed.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import load_config
from .config_loader import load_hierarchical_config
from .config_schema import build_config
from .core import (
    Codebase,
    ConcreteFileDiffer,
    SubprocessRunner,
    SystemFileSystem,
)
from .errors import MergeError
from .logger import setup_logging
from .merge import CodebaseMerger, Ui, format_merge_report, report_to_json

EXIT_CLEAN = 0
EXIT_CONFLICTS = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codemerge",
        description="Three-way merge of source trees (orig, dest, mod)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Merge public revision 7 into internal head, with public revision 6 as base
  codemerge --orig export/public-6 --dest export/internal --mod export/public-7

  # Use the bundled merge3-based tool when RCS merge is not installed
  codemerge --orig a --dest b --mod c --merge-command codemerge-merge3

  # Machine-readable output
  codemerge --orig a --dest b --mod c --json

Configuration is read from .codemerge/config.yml (or $CODEMERGE_CONFIG)
and CODEMERGE_* environment variables; CLI flags take precedence.
        """,
    )
    parser.add_argument(
        "--orig", required=True, type=Path, help="Common-ancestor tree"
    )
    parser.add_argument(
        "--dest", required=True, type=Path, help="Destination head tree"
    )
    parser.add_argument(
        "--mod", required=True, type=Path, help="Incoming revision tree"
    )
    parser.add_argument(
        "--project-space",
        default="public",
        help="Project space all three trees are expressed in (default: public)",
    )
    parser.add_argument(
        "--merge-command",
        help="RCS-merge compatible command line (default: merge)",
    )
    parser.add_argument(
        "--max-parallel",
        type=int,
        help="Number of files resolved concurrently (default: 1)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the merge result as JSON on stdout",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print a per-file report after the summary",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also append logs to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"codemerge version {__version__}",
    )
    return parser


def _codebase(path: Path, project_space: str, label: str) -> Codebase:
    return Codebase(path=path, project_space=project_space, description=label)


def main(argv: list[str] | None = None) -> int:
    """Run one merge and return the process exit status."""
    args = build_parser().parse_args(argv)

    load_dotenv()
    try:
        unified = build_config(load_hierarchical_config())
        config = load_config(
            merge_command=args.merge_command,
            max_parallel=args.max_parallel,
            debug=args.debug,
            yaml_fallbacks=unified.merge.model_dump(),
        )
    except (ValueError, ValidationError, OSError) as exc:
        print(f"ERROR: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR

    setup_logging(
        debug=config.debug,
        log_file=args.log_file or unified.logging.file,
        level=unified.logging.level,
    )

    trees = (("orig", args.orig), ("dest", args.dest), ("mod", args.mod))
    for label, path in trees:
        if not path.is_dir():
            print(
                f"ERROR: {label} tree not found: {path}", file=sys.stderr
            )
            return EXIT_ERROR

    ui = Ui(sys.stderr if args.json else sys.stdout)
    filesystem = SystemFileSystem(
        Path(config.temp_dir) if config.temp_dir else None
    )
    cmd = SubprocessRunner(timeout=config.command_timeout)
    merger = CodebaseMerger(
        ui=ui,
        filesystem=filesystem,
        cmd=cmd,
        differ=ConcreteFileDiffer(cmd, filesystem, config.diff_command),
        orig=_codebase(args.orig, args.project_space, "orig"),
        mod=_codebase(args.mod, args.project_space, "mod"),
        dest=_codebase(args.dest, args.project_space, "dest"),
        merge_command=config.merge_command,
        temp_prefix=config.temp_prefix,
        max_parallel=config.max_parallel,
    )

    try:
        result = merger.merge()
    except MergeError as exc:
        ui.error(exc, "Merge failed")
        return EXIT_ERROR

    if args.json:
        print(json.dumps(report_to_json(result), indent=2))
    elif args.report:
        print()
        print(format_merge_report(result))

    return EXIT_CONFLICTS if result.has_conflicts else EXIT_CLEAN


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
