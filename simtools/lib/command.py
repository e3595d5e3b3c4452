from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence, TextIO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | os.PathLike[str] | None = None,
    output: TextIO | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - With ``output`` set, the command is echoed into it as ``$ cmd`` and its
      combined stdout/stderr is streamed there (nothing is captured).
    - Without ``output``, stdout/stderr are captured on the result.
    - dry_run logs but does not execute.
    """

    argv_list = [str(a) for a in argv]
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    full_env = dict(os.environ, **(env or {}))

    if output is not None:
        output.write(f"$ {fmt_argv(argv_list)}\n")
        output.flush()
        p = subprocess.run(
            argv_list,
            stdout=output,
            stderr=subprocess.STDOUT,
            cwd=cwd,
            env=full_env,
        )
        stdout, stderr = "", ""
    else:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=full_env,
        )
        stdout, stderr = p.stdout, p.stderr
        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise RuntimeError(f"Command failed ({p.returncode}): {fmt_argv(argv_list)}\n{stderr}".rstrip())

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
