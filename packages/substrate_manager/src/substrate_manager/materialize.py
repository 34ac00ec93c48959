from __future__ import annotations

import os
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from substrate_manager.errors import DestinationExistsError, TemplateConfigError
from substrate_manager.process import run_command, run_git
from substrate_manager.templates import TemplateDescriptor

# Top-level files of the fetched repo that survive; everything else at the root is
# residue of the sparse checkout.
KEEP_ROOT_FILES: frozenset[str] = frozenset(
    {"Cargo.toml", "Cargo.lock", "rustfmt.toml", ".rustfmt.toml"}
)


@dataclass(frozen=True)
class CommitSnapshot:
    remote: str
    commit_id: str


def _sparse_clone(descriptor: TemplateDescriptor, destination: Path) -> None:
    run_command(
        [
            "git",
            "clone",
            "--filter=blob:none",
            "--depth",
            "1",
            "--sparse",
            "--branch",
            descriptor.branch,
            descriptor.remote,
            str(destination),
        ]
    )


def _prune_root_files(destination: Path) -> None:
    for entry in sorted(destination.iterdir()):
        if entry.is_file() and entry.name not in KEEP_ROOT_FILES:
            entry.unlink()


def _hoist_subpath(destination: Path, subpath: str) -> None:
    template_dir = destination / subpath
    if not template_dir.is_dir():
        raise TemplateConfigError(
            f"template_path {subpath!r} was not found in the fetched repository"
        )

    # Stage the template under a unique name first so that its entries can never
    # collide with the (soon removed) ancestor directories of the subpath.
    staging = destination / f".template-{uuid.uuid4().hex}"
    os.replace(template_dir, staging)
    top = destination / PurePosixPath(subpath).parts[0]
    if top.exists():
        shutil.rmtree(top)

    for entry in sorted(staging.iterdir()):
        os.replace(entry, destination / entry.name)
    staging.rmdir()


def materialize(descriptor: TemplateDescriptor, destination: Path) -> CommitSnapshot:
    """
    Fetch `descriptor.subpath` of the template repository into `destination` as a
    fresh repository with its own history.

    The returned snapshot is the origin commit at fetch time; it is read before
    anything in the checkout is touched.
    """
    if destination.exists():
        raise DestinationExistsError(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    _sparse_clone(descriptor, destination)
    commit_id = run_git(["rev-parse", "HEAD"], cwd=destination)

    run_git(["sparse-checkout", "set", descriptor.subpath], cwd=destination)

    shutil.rmtree(destination / ".git")
    run_git(["init", "--quiet"], cwd=destination)

    _prune_root_files(destination)
    _hoist_subpath(destination, descriptor.subpath)

    return CommitSnapshot(remote=descriptor.remote, commit_id=commit_id)
