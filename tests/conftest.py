from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Set, Tuple

import pytest

from simtools import installer, report_split
from simtools.catalog import BuilderSpec, Catalog, Project
from simtools.install_config import InstallConfig, ProjectCtx
from simtools.lib.command import CmdResult


class FakeRunner:
    """Stand-in for run_cmd that records argv and fakes git's queries.

    HEAD resolves when ``has_head`` is set, the remote exists when
    ``has_remote`` is set, and refs/stash yields ``stash_refs`` in turn.
    """

    QUERIES = (("git", "rev-parse"), ("git", "remote", "get-url"))

    def __init__(self, stash_refs: Tuple[Optional[str], ...] = (), *, has_head: bool = True, has_remote: bool = False):
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []
        self.fail: Set[Tuple[str, ...]] = set()
        self.has_head = has_head
        self.has_remote = has_remote
        self._stash = list(stash_refs)

    def _result(self, argv: List[str], ok: bool, stdout: str = "") -> CmdResult:
        return CmdResult(argv=argv, returncode=0 if ok else 1, stdout=stdout, stderr="")

    def __call__(self, argv, *, check=True, env=None, cwd=None, output=None, dry_run=False):
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.cwds.append(str(cwd) if cwd is not None else None)

        if argv[:2] == ["git", "rev-parse"] and argv[-1] == "HEAD":
            return self._result(argv, self.has_head, "0123abcd\n" if self.has_head else "")
        if argv[:2] == ["git", "rev-parse"]:
            ref = self._stash.pop(0) if self._stash else None
            return self._result(argv, bool(ref), f"{ref or ''}\n")
        if argv[:3] == ["git", "remote", "get-url"]:
            return self._result(argv, self.has_remote)

        failed = any(tuple(argv[: len(f)]) == f for f in self.fail)
        if failed and check:
            raise RuntimeError(f"Command failed (1): {' '.join(argv)}")
        return CmdResult(argv=argv, returncode=1 if failed else 0, stdout="", stderr="")

    def commands(self) -> List[List[str]]:
        return [c for c in self.calls if not any(tuple(c[: len(q)]) == q for q in self.QUERIES)]


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    # Root handlers would outlive capsys' per-test streams.
    monkeypatch.setattr(installer, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(report_split, "configure_logging", lambda **kwargs: None)


@pytest.fixture
def fake_runner(monkeypatch) -> FakeRunner:
    from simtools import builders
    from simtools.lib import git

    runner = FakeRunner()
    monkeypatch.setattr(git, "run_cmd", runner)
    monkeypatch.setattr(builders, "run_cmd", runner)
    return runner


def make_cfg(prefix: Path, *, projects=(), jobs: int = 1, dry_run: bool = False) -> InstallConfig:
    return InstallConfig(
        prefix=prefix,
        server="git@example.org:",
        jobs=jobs,
        projects=tuple(projects),
        dry_run=dry_run,
    )


def make_ctx(prefix: Path, project: Optional[Project] = None, **kwargs) -> ProjectCtx:
    project = project or Project(name="demo", remote="group/demo")
    return ProjectCtx(cfg=make_cfg(prefix, **kwargs), project=project)


def shell_project(name: str, script: str, path: str = "") -> Project:
    return Project(
        name=name,
        remote=name,
        builder=BuilderSpec(kind="command", argv=("sh", "-c", script)),
        path=path,
    )


def make_catalog(*projects: Project) -> Catalog:
    return Catalog(server="git@example.org:", projects=tuple(projects))
