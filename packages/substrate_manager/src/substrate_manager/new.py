from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from substrate_manager.config import write_project_descriptor
from substrate_manager.errors import DestinationExistsError, InvalidNameError, SubstrateError
from substrate_manager.materialize import CommitSnapshot, materialize
from substrate_manager.process import run_command
from substrate_manager.rename import PackageRename, rename_package
from substrate_manager.restricted_names import validate_name, validate_path
from substrate_manager.rewrite import rewrite_dependencies
from substrate_manager.templates import load_template


@dataclass(frozen=True)
class NewOptions:
    template: str
    path: Path
    name: str | None = None


@dataclass(frozen=True)
class NewChainResult:
    path: Path
    name: str
    snapshot: CommitSnapshot
    members: list[str]
    renames: list[PackageRename]
    warnings: list[str] = field(default_factory=list)


def resolve_name(opts: NewOptions) -> str:
    if opts.name:
        return opts.name
    name = opts.path.name
    if not name:
        raise InvalidNameError(
            f"cannot auto-detect package name from path {str(opts.path)!r} ; use --name to override"
        )
    return name


def _check_destination(opts: NewOptions) -> tuple[str, list[str]]:
    if opts.path.exists():
        raise DestinationExistsError(opts.path)
    validate_path(opts.path)
    name = resolve_name(opts)
    warnings = validate_name(name, show_name_help=opts.name is None)
    return name, warnings


def make_chain(
    project_dir: Path,
    name: str,
    *,
    node_dir: Path | None = None,
    runtime_dir: Path | None = None,
) -> list[PackageRename]:
    """Give the node and runtime crates their project names and mark the project a chain."""
    node_dir = node_dir or project_dir / "node"
    runtime_dir = runtime_dir or project_dir / "runtime"

    renames = [
        rename_package(project_dir, runtime_dir, f"{name}-runtime"),
        rename_package(project_dir, node_dir, f"{name}-node"),
    ]
    write_project_descriptor(project_dir, "chain")
    return renames


def make_contract(project_dir: Path) -> None:
    write_project_descriptor(project_dir, "contract")


def new_chain(opts: NewOptions) -> NewChainResult:
    """
    Scaffold a chain from a template: fetch it, make its dependency graph resolve
    outside the template repository, then rename the node and runtime crates.
    """
    name, warnings = _check_destination(opts)
    descriptor = load_template(opts.template)

    snapshot = materialize(descriptor, opts.path)
    members = rewrite_dependencies(opts.path, snapshot.remote, snapshot.commit_id)
    renames = make_chain(opts.path, name)

    return NewChainResult(
        path=opts.path,
        name=name,
        snapshot=snapshot,
        members=members,
        renames=renames,
        warnings=warnings,
    )


def ensure_cargo_contract() -> None:
    if shutil.which("cargo-contract") is None:
        run_command(["cargo", "install", "--force", "--locked", "cargo-contract"], capture=False)


def new_contract(opts: NewOptions) -> list[str]:
    name, warnings = _check_destination(opts)
    ensure_cargo_contract()

    parent = opts.path.parent
    parent.mkdir(parents=True, exist_ok=True)
    run_command(["cargo-contract", "contract", "new", name, "-t", str(parent)], capture=False)
    if not opts.path.is_dir():
        raise SubstrateError(f"failed to create smart contract at {opts.path}")

    make_contract(opts.path)
    return warnings
