from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from substrate_manager.errors import CommandError


@dataclass(frozen=True)
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path | None = None,
    capture: bool = True,
    check: bool = True,
) -> CommandResult:
    """
    Run an external tool to completion.

    With `capture=False` the child inherits stdout/stderr, which is what long running
    cargo invocations want. Nonzero exits raise `CommandError` when `check` is set.
    """
    argv = [str(a) for a in argv]
    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=capture,
            text=True,
            check=False,
        )
    except OSError as e:
        raise CommandError(argv, returncode=None, stderr=str(e)) from e

    result = CommandResult(
        argv=argv,
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
    if check and result.returncode != 0:
        raise CommandError(argv, returncode=result.returncode, stderr=result.stderr or result.stdout)
    return result


def run_git(args: Sequence[str], *, cwd: Path) -> str:
    return run_command(["git", "-C", str(cwd), *args]).stdout.strip()
