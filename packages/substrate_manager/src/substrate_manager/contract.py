from __future__ import annotations

import webbrowser
from pathlib import Path

from substrate_manager.process import CommandResult, run_command

CONTRACTS_UI_URL = "https://contracts-ui.substrate.io/"


def build_contract_argv(*, release: bool = True) -> list[str]:
    argv = ["cargo-contract", "contract", "build"]
    if release:
        argv.append("--release")
    return argv


def build_contract(*, cwd: Path, release: bool = True) -> CommandResult:
    return run_command(build_contract_argv(release=release), cwd=cwd, capture=False)


def open_contracts_ui() -> bool:
    # False when no browser could be launched; the caller has printed the URL already.
    return webbrowser.open(CONTRACTS_UI_URL)
