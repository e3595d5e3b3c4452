from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from .catalog import BuilderSpec
from .install_config import ProjectCtx
from .lib.command import run_cmd

logger = logging.getLogger(__name__)


Procedure = Callable[[ProjectCtx, Mapping[str, Any]], None]


def expand_args(ctx: ProjectCtx, args: Iterable[Any]) -> List[str]:
    """Substitute {jobs}, {source} and {prefix} in each argument."""

    values = {
        "jobs": ctx.cfg.jobs,
        "source": str(ctx.source_dir),
        "prefix": str(ctx.cfg.prefix),
    }
    out: List[str] = []
    for a in args:
        try:
            out.append(str(a).format(**values))
        except (KeyError, IndexError, ValueError) as e:
            raise RuntimeError(f"[{ctx.name}] bad placeholder in build argument {a!r}: {e}") from e
    return out


def _run(ctx: ProjectCtx, argv: Sequence[str]) -> None:
    run_cmd(argv, cwd=ctx.source_dir, output=ctx.output, dry_run=ctx.dry_run)


def extras_path(ctx: ProjectCtx, names: Iterable[str]) -> str:
    """Colon-joined sibling project directories (for scons EXTRAS=)."""

    joined = ""
    for name in names:
        joined += f"{ctx.cfg.prefix / name}{os.pathsep}"
    return joined.rstrip(os.pathsep)


def proc_autotools(ctx: ProjectCtx, options: Mapping[str, Any]) -> None:
    _run(ctx, ["autoreconf", "--install"])
    _run(ctx, ["./configure", *expand_args(ctx, options.get("configure_args") or [])])
    _run(ctx, ["make", f"-j{ctx.cfg.jobs}", *expand_args(ctx, options.get("make_args") or [])])


def proc_scons(ctx: ProjectCtx, options: Mapping[str, Any]) -> None:
    target = options.get("target")
    if not target:
        raise RuntimeError(f"[{ctx.name}] scons procedure needs a 'target' option")

    argv = ["scons", f"-j{ctx.cfg.jobs}", *expand_args(ctx, [target])]
    extras = extras_path(ctx, options.get("extras") or [])
    if extras:
        argv.append(f"EXTRAS={extras}")
    argv += expand_args(ctx, options.get("scons_args") or [])
    _run(ctx, argv)


PROCEDURES: Dict[str, Procedure] = {
    "autotools": proc_autotools,
    "scons": proc_scons,
}


def run_builder(ctx: ProjectCtx, spec: BuilderSpec) -> None:
    if spec.kind == "none":
        logger.info("[%s] nothing to build", ctx.name)
        return

    if spec.kind == "command":
        _run(ctx, expand_args(ctx, spec.argv))
        return

    if spec.kind == "procedure":
        proc = PROCEDURES.get(spec.procedure or "")
        if proc is None:
            raise RuntimeError(f"[{ctx.name}] unknown build procedure {spec.procedure!r}")
        proc(ctx, spec.options)
        return

    raise RuntimeError(f"[{ctx.name}] unsupported builder kind {spec.kind!r}")


def build(ctx: ProjectCtx) -> None:
    run_builder(ctx, ctx.project.builder)
    logger.info("[%s] build finished", ctx.name)
