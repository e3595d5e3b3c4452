from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO, Tuple

from .catalog import Project

DEFAULT_REMOTE_NAME = "simtools"
INSTALL_LOG_NAME = "install.log"


@dataclass(frozen=True)
class InstallConfig:
    prefix: Path
    server: str
    jobs: int = 1
    projects: Tuple[str, ...] = ()
    remote_name: str = DEFAULT_REMOTE_NAME
    dry_run: bool = False


@dataclass(frozen=True)
class ProjectCtx:
    cfg: InstallConfig
    project: Project
    # Receives combined command output; None captures instead (dry runs, tests).
    output: Optional[TextIO] = None

    @property
    def name(self) -> str:
        return self.project.name

    @property
    def source_dir(self) -> Path:
        return self.cfg.prefix / self.project.name

    @property
    def log_path(self) -> Path:
        return self.source_dir / INSTALL_LOG_NAME

    @property
    def remote_url(self) -> str:
        return f"{self.cfg.server}{self.project.remote}"

    @property
    def dry_run(self) -> bool:
        return self.cfg.dry_run
