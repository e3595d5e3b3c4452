from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

from . import builders
from .catalog import Catalog, Project
from .install_config import InstallConfig, ProjectCtx
from .lib import git

logger = logging.getLogger(__name__)


ProjectStep = Callable[[ProjectCtx], None]

# Short-circuiting: the first step that raises ends the project's run.
DEFAULT_STEPS: Sequence[ProjectStep] = (git.ensure_clone, git.update, builders.build)


@dataclass(frozen=True)
class InstallResult:
    installed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    logs: Dict[str, Path] = field(default_factory=dict)


def install_project(
    cfg: InstallConfig,
    project: Project,
    *,
    steps: Sequence[ProjectStep] = DEFAULT_STEPS,
) -> Path:
    """Run clone, update and build for one project; returns its log path."""

    ctx = ProjectCtx(cfg=cfg, project=project)
    if cfg.dry_run:
        for step in steps:
            step(ctx)
        return ctx.log_path

    ctx.source_dir.mkdir(parents=True, exist_ok=True)
    with ctx.log_path.open("w", encoding="utf-8") as log:
        ctx = ProjectCtx(cfg=cfg, project=project, output=log)
        try:
            for step in steps:
                step(ctx)
        except (RuntimeError, OSError) as e:
            log.write(f"ERROR: {type(e).__name__}: {e}\n")
            raise
    return ctx.log_path


def install_all(
    cfg: InstallConfig,
    catalog: Catalog,
    *,
    steps: Sequence[ProjectStep] = DEFAULT_STEPS,
) -> InstallResult:
    """Install every selected project in order; failures are recorded, not raised."""

    result = InstallResult()

    for name in cfg.projects:
        project = catalog.get(name)
        log_path = ProjectCtx(cfg=cfg, project=project).log_path
        result.logs[name] = log_path

        logger.info("=== Project: %s ===", name)
        try:
            install_project(cfg, project, steps=steps)
        except (RuntimeError, OSError) as e:
            reason = str(e).splitlines()[0] if str(e) else type(e).__name__
            logger.warning("[%s] install failed (%s); see %s", name, reason, log_path)
            result.failed.append(name)
            continue

        result.installed.append(name)

    return result


def path_entries(cfg: InstallConfig, projects: Iterable[Project]) -> List[str]:
    return [str((cfg.prefix / p.name / p.path).resolve()) for p in projects if p.path]


def path_suggestion(cfg: InstallConfig, projects: Iterable[Project]) -> str | None:
    """Shell assignment adding project binaries to PATH, or None if nothing to add."""

    entries = path_entries(cfg, projects)
    if not entries:
        return None
    return f"export PATH={os.pathsep.join(entries)}{os.pathsep}$PATH"
