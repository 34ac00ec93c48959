from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit

from substrate_manager.errors import ProjectConfigError
from substrate_manager.manifest import MANIFEST_NAME, Manifest, get_package_name, get_path

DESCRIPTOR_NAME = "Substrate.toml"
PROJECT_KINDS: frozenset[str] = frozenset({"chain", "contract"})

_DEFAULT_PATHS: dict[str, str] = {
    "node": "node",
    "runtime": "runtime",
    "frontend": "frontend",
    "contract": "",
}


@dataclass(frozen=True)
class ChainInfo:
    node_path: Path
    node_name: str | None
    runtime_path: Path
    runtime_name: str | None
    frontend_path: Path


@dataclass(frozen=True)
class ContractInfo:
    name: str
    path: Path


@dataclass(frozen=True)
class ProjectConfig:
    cwd: Path
    kind: str | None
    chain: ChainInfo | None = None
    contract: ContractInfo | None = None

    def describe(self) -> str:
        if self.chain is not None:
            node = self.chain.node_name or "unknown"
            runtime = self.chain.runtime_name or "unknown"
            return f"Chain: node - {node}, runtime - {runtime}"
        if self.contract is not None:
            return f"Contract: {self.contract.name}"
        return "No project detected"

    def require_chain(self) -> ChainInfo:
        if self.chain is None:
            raise ProjectConfigError(
                f"Incorrect project type in {self.cwd}: this command needs a chain project."
            )
        return self.chain

    def require_contract(self) -> ContractInfo:
        if self.contract is None:
            raise ProjectConfigError(
                f"Incorrect project type in {self.cwd}: this command needs a contract project."
            )
        return self.contract

    @classmethod
    def load(cls, cwd: Path) -> ProjectConfig:
        descriptor = Manifest(cwd / DESCRIPTOR_NAME)
        if not descriptor.exists():
            return cls(cwd=cwd, kind=None)
        doc = descriptor.read_document()
        kind = doc.get("type")
        if not isinstance(kind, str) or kind not in PROJECT_KINDS:
            raise ProjectConfigError(
                f"Incorrect project type in {descriptor.path}.\n"
                'Supported types: "chain" and "contract".'
            )
        return _build_config(cwd, str(kind), doc)


def _path_option(doc: dict[str, Any] | None, key: str) -> Path:
    default = _DEFAULT_PATHS[key]
    if doc is None:
        return Path(default)
    value = get_path(doc, f"paths.{key}", default=default)
    if not isinstance(value, str):
        raise ProjectConfigError(f"Could not parse configuration option: paths.{key}")
    return Path(value)


def _build_config(cwd: Path, kind: str, doc: dict[str, Any] | None) -> ProjectConfig:
    if kind == "chain":
        node_path = _path_option(doc, "node")
        runtime_path = _path_option(doc, "runtime")
        return ProjectConfig(
            cwd=cwd,
            kind=kind,
            chain=ChainInfo(
                node_path=node_path,
                node_name=get_package_name(cwd / node_path),
                runtime_path=runtime_path,
                runtime_name=get_package_name(cwd / runtime_path),
                frontend_path=_path_option(doc, "frontend"),
            ),
        )

    contract_path = _path_option(doc, "contract")
    name = get_package_name(cwd / contract_path)
    if name is None:
        raise ProjectConfigError(f"No {MANIFEST_NAME} found for contract at {cwd / contract_path}")
    return ProjectConfig(cwd=cwd, kind=kind, contract=ContractInfo(name=name, path=contract_path))


def detect_project_kind(cwd: Path) -> str | None:
    """Guess the project kind of a directory that has no descriptor yet."""
    if (cwd / _DEFAULT_PATHS["node"]).exists() or (cwd / _DEFAULT_PATHS["runtime"]).exists():
        return "chain"
    if (cwd / "lib.rs").exists():
        return "contract"
    return None


def adopt_project(cwd: Path, kind: str) -> ProjectConfig:
    """Persist a descriptor for a detected project and load it."""
    write_project_descriptor(cwd, kind)
    return ProjectConfig.load(cwd)


def write_project_descriptor(project_dir: Path, kind: str) -> None:
    if kind not in PROJECT_KINDS:
        raise ProjectConfigError(f"Unsupported project type: {kind!r}")
    doc = tomlkit.document()
    doc.add("type", kind)
    Manifest(project_dir / DESCRIPTOR_NAME).write_document(doc)
