from __future__ import annotations

from pathlib import Path

from substrate_manager.process import CommandResult, run_command

DEV_CHAIN = "dev"


def run_chain_argv(chain: str) -> list[str]:
    argv = ["cargo", "+nightly", "run", "--release", "--"]
    if chain == DEV_CHAIN:
        argv.append("--dev")
    else:
        argv.extend(["--chain", chain])
    return argv


def run_chain(chain: str, *, cwd: Path) -> CommandResult:
    return run_command(run_chain_argv(chain), cwd=cwd, capture=False)


def build(*, cwd: Path, release: bool = True) -> CommandResult:
    argv = ["cargo", "+nightly", "build"]
    if release:
        argv.append("--release")
    return run_command(argv, cwd=cwd, capture=False)


def run_tests(*, cwd: Path, package: str | None = None) -> CommandResult:
    argv = ["cargo", "+nightly", "test"]
    if package:
        argv.extend(["-p", package])
    return run_command(argv, cwd=cwd, capture=False)
