"""RCS ``merge`` compatible command backed by the ``merge3`` library.

``codemerge-merge3 [-p] [-q] [-L label]... MYFILE OLDFILE YOURFILE``
incorporates the changes that lead from OLDFILE to YOURFILE into MYFILE,
overwriting MYFILE unless ``-p`` is given.  Exit status follows RCS
``merge``: 0 for a clean merge, 1 when conflicts were written, 2 on
trouble.  This makes it a drop-in ``merge_command`` for hosts without RCS.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from merge3 import Merge3

EXIT_CLEAN = 0
EXIT_CONFLICTS = 1
EXIT_TROUBLE = 2

# Lossless round-trip for files that are not valid UTF-8
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _read_lines(path: Path) -> list[str]:
    return path.read_text(encoding=_ENCODING, errors=_ERRORS).splitlines(
        True
    )


def merge_files(
    mine: Path,
    base: Path,
    yours: Path,
    labels: list[str] | None = None,
) -> tuple[str, bool]:
    """Three-way merge *yours* into *mine* against *base*.

    Args:
        mine: The file receiving the changes.
        base: The common ancestor.
        yours: The file whose changes (relative to *base*) are applied.
        labels: Up to three marker labels for mine, base and yours.
            Missing labels default to the file paths.

    Returns:
        A tuple of ``(merged_text, has_conflicts)``.
    """
    names = list(labels or [])
    defaults = [str(mine), str(base), str(yours)]
    names += defaults[len(names):]

    m3 = Merge3(_read_lines(base), _read_lines(mine), _read_lines(yours))
    has_conflicts = any(
        region[0] == "conflict" for region in m3.merge_regions()
    )
    merged_text = "".join(
        m3.merge_lines(name_a=names[0], name_b=names[2])
    )
    return merged_text, has_conflicts


def main(argv: list[str] | None = None) -> int:
    """Run the command and return its exit status."""
    parser = argparse.ArgumentParser(
        prog="codemerge-merge3",
        description="Three-way file merge (RCS merge compatible)",
    )
    parser.add_argument(
        "-p",
        dest="stdout",
        action="store_true",
        help="Write the result to standard output instead of MYFILE",
    )
    parser.add_argument(
        "-q",
        dest="quiet",
        action="store_true",
        help="Do not warn about conflicts",
    )
    parser.add_argument(
        "-L",
        dest="labels",
        action="append",
        default=[],
        help="Marker label (may be given up to three times)",
    )
    parser.add_argument("mine", type=Path, metavar="MYFILE")
    parser.add_argument("base", type=Path, metavar="OLDFILE")
    parser.add_argument("yours", type=Path, metavar="YOURFILE")

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_CLEAN if exc.code == 0 else EXIT_TROUBLE

    if len(args.labels) > 3:
        print("merge: too many -L options", file=sys.stderr)
        return EXIT_TROUBLE

    try:
        merged_text, has_conflicts = merge_files(
            args.mine, args.base, args.yours, args.labels
        )
        if args.stdout:
            sys.stdout.write(merged_text)
        else:
            args.mine.write_text(
                merged_text, encoding=_ENCODING, errors=_ERRORS
            )
    except OSError as exc:
        print(f"merge: {exc}", file=sys.stderr)
        return EXIT_TROUBLE

    if has_conflicts:
        if not args.quiet:
            print(
                f"merge: warning: conflicts during merge of {args.mine}",
                file=sys.stderr,
            )
        return EXIT_CONFLICTS
    return EXIT_CLEAN


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
