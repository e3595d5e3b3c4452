"""Split a McPAT text report stream into one file per report.

Each line containing the McPAT header marker starts a new report. The report
is written to a file named by a template in which ``%d`` is the 1-based report
number and ``%%`` a literal percent sign. Text before the first header is
passed through to stdout. Input is handled as bytes, so encodings and line
endings are copied unchanged.
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional

from .cli_common import UsageParser
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


HEADER_MARKER = b"McPAT (version"
DEFAULT_TEMPLATE = "mcpat-report-%d"

_TEMPLATE_RE = re.compile(r"%([%d])")


def render_name(template: str, number: int) -> str:
    return _TEMPLATE_RE.sub(lambda m: "%" if m.group(1) == "%" else str(number), template)


def split_report(
    lines: Iterable[bytes],
    template: str = DEFAULT_TEMPLATE,
    *,
    out_dir: Optional[Path] = None,
    passthrough: Optional[BinaryIO] = None,
    marker: bytes = HEADER_MARKER,
) -> List[Path]:
    """Route lines into numbered report files; returns the files written, in order."""

    out_dir = Path(out_dir) if out_dir is not None else Path.cwd()
    written: List[Path] = []
    current: Optional[BinaryIO] = None

    try:
        for line in lines:
            if marker in line:
                if current is not None:
                    current.close()
                path = out_dir / render_name(template, len(written) + 1)
                current = path.open("wb")
                written.append(path)
                logger.info("Report %d -> %s", len(written), path)

            if current is not None:
                current.write(line)
            elif passthrough is not None:
                passthrough.write(line)
    finally:
        if current is not None:
            current.close()

    return written


def build_parser() -> argparse.ArgumentParser:
    p = UsageParser(
        prog="mcpat-split",
        description="Split McPAT output read from INPUT (default: stdin) into one file per report.",
    )
    p.add_argument(
        "template",
        nargs="?",
        default=DEFAULT_TEMPLATE,
        metavar="TEMPLATE",
        help="Output file name; %%d is the report number, %%%% a literal %% (default: mcpat-report-%%d)",
    )
    p.add_argument("input", nargs="?", default="-", metavar="INPUT", help="Report text file, '-' for stdin")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    out = sys.stdout.buffer
    if args.input == "-":
        written = split_report(sys.stdin.buffer, args.template, passthrough=out)
    else:
        try:
            f = open(args.input, "rb")
        except OSError as e:
            raise SystemExit(f"mcpat-split: {e}")
        with f:
            written = split_report(f, args.template, passthrough=out)
    out.flush()

    logger.info("Wrote %d report file(s)", len(written))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
