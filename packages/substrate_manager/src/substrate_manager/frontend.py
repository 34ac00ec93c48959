from __future__ import annotations

from pathlib import Path

from substrate_manager.errors import DestinationExistsError
from substrate_manager.process import CommandResult, run_command

FRONTEND_TEMPLATE_REMOTE = "https://github.com/substrate-developer-hub/substrate-front-end-template.git"


def clone_frontend_argv(destination: Path) -> list[str]:
    return ["git", "clone", FRONTEND_TEMPLATE_REMOTE, str(destination)]


def generate_frontend(destination: Path) -> None:
    """Clone the front-end template into `destination` and install its node packages."""
    if destination.exists():
        raise DestinationExistsError(destination)
    run_command(clone_frontend_argv(destination), capture=False)
    run_command(["yarn", "install"], cwd=destination, capture=False)


def start_frontend(frontend_dir: Path) -> CommandResult:
    return run_command(["yarn", "start"], cwd=frontend_dir, capture=False)
