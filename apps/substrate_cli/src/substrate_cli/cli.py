#!/usr/bin/env python
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from substrate_manager import cargo, contract, frontend
from substrate_manager.add import SOURCE_KINDS, AddOptions, CrateSource, add_pallet, parse_features
from substrate_manager.chain_spec import load_chain_ids
from substrate_manager.config import ProjectConfig, adopt_project, detect_project_kind
from substrate_manager.errors import ProjectConfigError, SubstrateError
from substrate_manager.new import NewOptions, new_chain, new_contract
from substrate_manager.templates import builtin_templates


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        _eprint(f"warning: {warning}")


def _print_start_hacking(cwd: Path, path: Path) -> None:
    print("\nStart hacking by typing:\n")
    try:
        shown = path.resolve().relative_to(cwd.resolve())
    except ValueError:
        shown = path
    print(f"cd {shown}")
    print("substrate-manager")


def _confirm(question: str) -> bool:
    try:
        answer = input(f"{question} (y/n) ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _load_project(cwd: Path) -> ProjectConfig:
    project = ProjectConfig.load(cwd)
    if project.kind is not None:
        return project
    kind = detect_project_kind(cwd)
    if kind is None:
        raise ProjectConfigError(f"No chain or contract project found in {cwd}")
    if not _confirm(f"Found a potential {kind} project in the current directory. Do you want to continue?"):
        raise ProjectConfigError("Aborted.")
    return adopt_project(cwd, kind)


def _cmd_new_chain(args: argparse.Namespace) -> int:
    cwd: Path = args.cwd
    path = (cwd / args.path).resolve()
    opts = NewOptions(template=args.template, path=path, name=args.name)
    print("Creating new chain...\n")
    result = new_chain(opts)
    _print_warnings(result.warnings)
    print(f"Commit id: {result.snapshot.commit_id}")
    print(f"Workspace members: {', '.join(result.members) or '(none)'}")
    print(f"\nCreated chain `{result.name}`!")
    _print_start_hacking(cwd, path)
    return 0


def _cmd_new_contract(args: argparse.Namespace) -> int:
    cwd: Path = args.cwd
    path = (cwd / args.path).resolve()
    print("Creating new contract...")
    warnings = new_contract(NewOptions(template="cargo-contract", path=path, name=args.name))
    _print_warnings(warnings)
    _print_start_hacking(cwd, path)
    return 0


def _crate_source(args: argparse.Namespace) -> CrateSource:
    if args.source == "git":
        if not args.git:
            raise SystemExit("--git URL is required with --source git")
        return CrateSource(kind="git", locator=args.git, branch=args.branch or "")
    if args.source == "path":
        if not args.crate_path:
            raise SystemExit("--crate-path is required with --source path")
        return CrateSource(kind="path", locator=args.crate_path)
    if args.source == "custom-registry":
        if not args.registry:
            raise SystemExit("--registry is required with --source custom-registry")
        return CrateSource(kind="custom-registry", locator=args.registry)
    return CrateSource()


def _cmd_add_pallet(args: argparse.Namespace) -> int:
    cwd: Path = args.cwd
    chain = _load_project(cwd).require_chain()
    if chain.runtime_name is None:
        raise ProjectConfigError(f"No runtime package found at {cwd / chain.runtime_path}")

    opts = AddOptions(
        package_name=chain.runtime_name,
        package_path=chain.runtime_path,
        crate_spec=args.name,
        features=parse_features(args.features),
        source=_crate_source(args),
    )
    result = add_pallet(opts, cwd=cwd, install=not args.no_install)
    print(f"\nPallet `{args.name}` has been successfully added to the runtime!")
    if result.config_line is not None:
        lib_rs = (chain.runtime_path / "src" / "lib.rs").as_posix()
        print(f"Don't forget to implement the `Config` trait in `{lib_rs}`, line: {result.config_line}")
    return 0


def _select_chain(ids: list[str]) -> str | None:
    if not ids:
        return None
    for idx, chain_id in enumerate(ids, start=1):
        print(f"  {idx}. {chain_id}")
    try:
        raw = input("What is the chain-specification command you want to run your chain with? ")
    except EOFError:
        return None
    raw = raw.strip()
    if raw.isdigit() and 1 <= int(raw) <= len(ids):
        return ids[int(raw) - 1]
    return raw or None


def _cmd_chains(args: argparse.Namespace) -> int:
    cwd: Path = args.cwd
    chain = _load_project(cwd).require_chain()
    for chain_id in load_chain_ids(cwd / chain.node_path):
        print(chain_id)
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    cwd: Path = args.cwd
    chain = _load_project(cwd).require_chain()
    chain_id = args.chain
    if chain_id is None:
        chain_id = _select_chain(load_chain_ids(cwd / chain.node_path))
        if chain_id is None:
            _eprint("No chain specification selected.")
            return 1
    cargo.run_chain(chain_id, cwd=cwd)
    return 0


def _cmd_build(args: argparse.Namespace) -> int:
    project = _load_project(args.cwd)
    if project.contract is not None:
        contract.build_contract(cwd=args.cwd / project.contract.path, release=not args.debug)
    else:
        cargo.build(cwd=args.cwd, release=not args.debug)
    return 0


def _cmd_test(args: argparse.Namespace) -> int:
    _load_project(args.cwd)
    cargo.run_tests(cwd=args.cwd, package=args.package)
    return 0


def _cmd_frontend(args: argparse.Namespace) -> int:
    cwd: Path = args.cwd
    chain = _load_project(cwd).require_chain()
    frontend_dir = cwd / chain.frontend_path
    if not frontend_dir.exists():
        if not _confirm("Could not locate your frontend directory. Would you like to generate it?"):
            _eprint(f"No frontend found at {frontend_dir}.")
            return 1
        print("Generating frontend...")
        frontend.generate_frontend(frontend_dir)
    frontend.start_frontend(frontend_dir)
    return 0


def _cmd_deploy(args: argparse.Namespace) -> int:
    _load_project(args.cwd).require_contract()
    print("If your browser doesn't automatically open, please open the following URL in your browser:")
    print(f"{contract.CONTRACTS_UI_URL}\n")
    contract.open_contracts_ui()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="substrate-manager",
        description="Scaffold and evolve Substrate chains and ink! contracts.",
    )
    parser.add_argument(
        "--cwd",
        type=Path,
        default=None,
        help="Project directory (default: current working directory).",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    new_p = sub.add_parser("new", help="Create a new project.")
    new_sub = new_p.add_subparsers(dest="new_cmd", required=True)

    chain_p = new_sub.add_parser("chain", help="Create a chain from a template.")
    chain_p.add_argument("path", type=Path, help="Destination directory (must not exist).")
    chain_p.add_argument(
        "--template",
        default="substrate",
        help=(
            "Built-in template name "
            f"({', '.join(sorted(builtin_templates()))}) or path to a custom template TOML."
        ),
    )
    chain_p.add_argument("--name", help="Project name (default: destination directory name).")
    chain_p.set_defaults(func=_cmd_new_chain)

    contract_p = new_sub.add_parser("contract", help="Create an ink! smart contract.")
    contract_p.add_argument("path", type=Path, help="Destination directory (must not exist).")
    contract_p.add_argument("--name", help="Contract name (default: destination directory name).")
    contract_p.set_defaults(func=_cmd_new_contract)

    add_p = sub.add_parser("add-pallet", help="Add a pallet to the runtime.")
    add_p.add_argument("name", help="Pallet crate name, e.g. pallet-assets.")
    add_p.add_argument(
        "--features",
        default="",
        help="Space or comma separated list of features to activate.",
    )
    add_p.add_argument("--source", choices=SOURCE_KINDS, default=SOURCE_KINDS[0])
    add_p.add_argument("--git", help="Git repository URL (with --source git).")
    add_p.add_argument("--branch", help="Git branch (with --source git).")
    add_p.add_argument("--crate-path", help="Local crate path (with --source path).")
    add_p.add_argument("--registry", help="Registry name (with --source custom-registry).")
    add_p.add_argument(
        "--no-install",
        action="store_true",
        help="Skip `cargo add`; only edit the runtime manifest and sources.",
    )
    add_p.set_defaults(func=_cmd_add_pallet)

    chains_p = sub.add_parser("chains", help="List chain specifications the node accepts.")
    chains_p.set_defaults(func=_cmd_chains)

    run_p = sub.add_parser("run", help="Run the node with a chain specification.")
    run_p.add_argument("--chain", help="Chain id (prompted for when omitted).")
    run_p.set_defaults(func=_cmd_run)

    build_p = sub.add_parser("build", help="Build the project.")
    build_p.add_argument("--debug", action="store_true", help="Build without --release.")
    build_p.set_defaults(func=_cmd_build)

    test_p = sub.add_parser("test", help="Run the project's tests.")
    test_p.add_argument("-p", "--package", help="Only test this package.")
    test_p.set_defaults(func=_cmd_test)

    frontend_p = sub.add_parser("frontend", help="Start the chain's front-end (generating it on request).")
    frontend_p.set_defaults(func=_cmd_frontend)

    deploy_p = sub.add_parser("deploy", help="Open the Contracts UI to deploy the contract.")
    deploy_p.set_defaults(func=_cmd_deploy)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.cwd = (args.cwd or Path(os.getcwd())).resolve()
    try:
        return int(args.func(args))
    except SubstrateError as e:
        _eprint(f"error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
