from __future__ import annotations

import logging
from typing import List, Optional

from ..install_config import ProjectCtx
from .command import run_cmd

logger = logging.getLogger(__name__)


STASH_MESSAGE = "simtools: local changes before update"


def _has_git_dir(ctx: ProjectCtx) -> bool:
    return (ctx.source_dir / ".git").exists()


def is_cloned(ctx: ProjectCtx) -> bool:
    """True once the checkout has a commit; an init left by a failed run does not count."""

    if not _has_git_dir(ctx):
        return False
    r = run_cmd(["git", "rev-parse", "-q", "--verify", "HEAD"], check=False, cwd=ctx.source_dir, dry_run=ctx.dry_run)
    return r.returncode == 0


def _has_remote(ctx: ProjectCtx) -> bool:
    r = run_cmd(["git", "remote", "get-url", ctx.cfg.remote_name], check=False, cwd=ctx.source_dir, dry_run=ctx.dry_run)
    return r.returncode == 0


def ensure_clone(ctx: ProjectCtx) -> None:
    """Initialize the project checkout unless one already exists.

    A checkout left half-initialized by an earlier failure is resumed.
    """

    if is_cloned(ctx):
        logger.info("[%s] already cloned", ctx.name)
        return

    remote = ctx.cfg.remote_name
    steps: List[List[str]] = []
    if not _has_git_dir(ctx):
        steps.append(["git", "init"])
        steps.append(["git", "remote", "add", remote, ctx.remote_url])
    else:
        logger.info("[%s] resuming incomplete clone", ctx.name)
        verb = "set-url" if _has_remote(ctx) else "add"
        steps.append(["git", "remote", verb, remote, ctx.remote_url])
    steps += [
        ["git", "fetch", remote],
        ["git", "checkout", "-t", f"{remote}/{ctx.project.branch}"],
    ]

    for argv in steps:
        run_cmd(argv, cwd=ctx.source_dir, output=ctx.output, dry_run=ctx.dry_run)

    logger.info("[%s] cloned %s", ctx.name, ctx.remote_url)


def _stash_ref(ctx: ProjectCtx) -> Optional[str]:
    r = run_cmd(
        ["git", "rev-parse", "-q", "--verify", "refs/stash"],
        check=False,
        cwd=ctx.source_dir,
        dry_run=ctx.dry_run,
    )
    if r.returncode != 0:
        return None
    return r.stdout.strip() or None


def update(ctx: ProjectCtx) -> None:
    """Pull the tracked branch, carrying local changes across via the stash."""

    cwd = ctx.source_dir
    before = _stash_ref(ctx)
    run_cmd(["git", "stash", "push", "-m", STASH_MESSAGE], cwd=cwd, output=ctx.output, dry_run=ctx.dry_run)
    stashed = _stash_ref(ctx) != before

    run_cmd(
        ["git", "pull", ctx.cfg.remote_name, ctx.project.branch],
        cwd=cwd,
        output=ctx.output,
        dry_run=ctx.dry_run,
    )

    if not stashed:
        return

    r = run_cmd(["git", "stash", "pop"], check=False, cwd=cwd, output=ctx.output, dry_run=ctx.dry_run)
    if r.returncode != 0:
        logger.warning("[%s] could not restore local changes; they remain in `git stash list`", ctx.name)
