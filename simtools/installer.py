from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .builders import PROCEDURES
from .catalog import Catalog, load_catalog, resolve_project_set
from .cli_common import UsageParser, positive_int
from .install_config import InstallConfig
from .logging_utils import configure_logging
from .pipeline import InstallResult, install_all, path_suggestion

logger = logging.getLogger(__name__)


PROG = "simtools-install"


def _split(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return value.split()


def print_projects(catalog: Catalog, out: TextIO) -> None:
    for p in catalog.projects:
        kind = p.builder.procedure if p.builder.kind == "procedure" else p.builder.kind
        out.write(f"{p.name:<12} {kind:<10} {p.remote}\n")


def print_summary(cfg: InstallConfig, catalog: Catalog, result: InstallResult, out: TextIO) -> None:
    out.write(f"Installed: {' '.join(result.installed) or '(none)'}\n")
    if result.failed:
        out.write("Failed:\n")
        for name in result.failed:
            out.write(f"  {name} (see {result.logs[name]})\n")

    suggestion = path_suggestion(cfg, [catalog.get(n) for n in result.installed])
    if suggestion:
        out.write("\nAdd this to your shell profile:\n\n")
        out.write(f"{suggestion}\n")


def run(cfg: InstallConfig, catalog: Catalog, *, out: Optional[TextIO] = None) -> InstallResult:
    """Install the selected projects and print the summary and PATH suggestion."""

    out = out or sys.stdout
    logger.info(
        "Installing %s into %s (server=%s, jobs=%d)",
        " ".join(cfg.projects) or "(nothing)",
        cfg.prefix,
        cfg.server,
        cfg.jobs,
    )
    result = install_all(cfg, catalog)
    print_summary(cfg, catalog, result, out)
    return result


def build_parser() -> argparse.ArgumentParser:
    p = UsageParser(
        prog=PROG,
        description="Clone, update and build the simulation toolchain projects under PREFIX.",
    )
    p.add_argument("-j", dest="jobs", type=positive_int, default=1, metavar="N", help="Build parallelism (default: 1)")
    p.add_argument(
        "-g",
        dest="server",
        default=None,
        metavar="LOC",
        help="Git location: trailing '/' for a path, trailing ':' for a host",
    )
    sel = p.add_mutually_exclusive_group()
    sel.add_argument("-p", dest="include", default=None, metavar="PROJS", help="Space-separated projects to install")
    sel.add_argument("-P", dest="exclude", default=None, metavar="PROJS", help="Space-separated projects to skip")
    p.add_argument("-l", "--list", action="store_true", help="List known projects and exit")
    p.add_argument("--config", default=None, help="Project catalog (YAML); defaults to the bundled catalog")
    p.add_argument("--log", default=None, help="Also write installer log records to this file")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("prefix", nargs="?", default=".", metavar="PREFIX", help="Install root (default: current directory)")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if args.server is not None and not args.server.endswith(("/", ":")):
        p.error(f"-g {args.server!r}: location must end with '/' (path) or ':' (host)")

    try:
        configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)
    except OSError as e:
        raise SystemExit(f"{PROG}: cannot open log file {args.log}: {e}")

    try:
        catalog = load_catalog(args.config, procedures=PROCEDURES.keys())
    except (OSError, ValueError, RuntimeError) as e:
        raise SystemExit(f"{PROG}: cannot load project catalog: {e}")

    if args.list:
        print_projects(catalog, sys.stdout)
        return 0

    prefix = Path(args.prefix).expanduser()
    if not prefix.is_dir():
        raise SystemExit(f"{PROG}: destination directory does not exist: {prefix}")

    projects = resolve_project_set(catalog.names, include=_split(args.include), exclude=_split(args.exclude))

    cfg = InstallConfig(
        prefix=prefix.resolve(),
        server=args.server if args.server is not None else catalog.server,
        jobs=args.jobs,
        projects=tuple(projects),
        dry_run=bool(args.dry_run),
    )
    run(cfg, catalog)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
