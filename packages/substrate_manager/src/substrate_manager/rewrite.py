from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit import TOMLDocument

from substrate_manager.errors import NoManifestsError
from substrate_manager.manifest import MANIFEST_NAME, Manifest

DEPENDENCY_TABLES: tuple[str, ...] = ("dependencies", "dev-dependencies", "build-dependencies")

_SKIP_DIRS: frozenset[str] = frozenset({".git", "target"})


def find_manifests(root: Path) -> list[Path]:
    found = [
        p
        for p in root.glob(f"**/{MANIFEST_NAME}")
        if p.is_file() and not _SKIP_DIRS.intersection(p.relative_to(root).parts[:-1])
    ]
    if not found:
        raise NoManifestsError(f"Did not find any `{MANIFEST_NAME}` files under {root}.")
    return sorted(found)


def iter_dependency_tables(doc: dict[str, Any]) -> list[dict[str, Any]]:
    """Every package-level dependency table, including `[target.<cfg>.*]` ones."""
    out: list[dict[str, Any]] = []
    for name in DEPENDENCY_TABLES:
        table = doc.get(name)
        if isinstance(table, dict):
            out.append(table)

    targets = doc.get("target")
    if isinstance(targets, dict):
        for cfg_table in targets.values():
            if not isinstance(cfg_table, dict):
                continue
            for name in DEPENDENCY_TABLES:
                table = cfg_table.get(name)
                if isinstance(table, dict):
                    out.append(table)
    return out


def _rewrite_table(table: dict[str, Any], *, base_dir: Path, remote: str, pin: str) -> list[str]:
    rewritten: list[str] = []
    for name, dep in list(table.items()):
        if not isinstance(dep, dict):
            continue
        path_value = dep.get("path")
        if not isinstance(path_value, str):
            continue
        if (base_dir / path_value).exists():
            continue
        del dep["path"]
        dep["git"] = remote
        dep["rev"] = pin
        rewritten.append(str(name))
    return rewritten


def rewrite_path_dependencies(
    doc: dict[str, Any], *, manifest_dir: Path, remote: str, pin: str
) -> list[str]:
    """
    Turn `path` dependencies that no longer resolve from `manifest_dir` into
    `git` + `rev` references to the template origin.

    Paths that still exist are left alone, which keeps repeated runs stable.
    """
    rewritten: list[str] = []
    for table in iter_dependency_tables(doc):
        rewritten.extend(_rewrite_table(table, base_dir=manifest_dir, remote=remote, pin=pin))

    workspace = doc.get("workspace")
    if isinstance(workspace, dict):
        ws_deps = workspace.get("dependencies")
        if isinstance(ws_deps, dict):
            rewritten.extend(_rewrite_table(ws_deps, base_dir=manifest_dir, remote=remote, pin=pin))
    return rewritten


def workspace_members(root: Path, manifests: list[Path]) -> list[str]:
    root_manifest = root / MANIFEST_NAME
    members: list[str] = []
    for manifest_path in manifests:
        if manifest_path == root_manifest:
            continue
        rel = manifest_path.parent.relative_to(root).as_posix()
        if rel not in members:
            members.append(rel)
    return members


def update_root_manifest(doc: TOMLDocument, members: list[str]) -> None:
    """Force `panic = "abort"` for release builds and list the workspace members."""
    if "profile" not in doc:
        doc.add("profile", tomlkit.table(is_super_table=True))
    profile = doc["profile"]
    if "release" not in profile:
        profile.add("release", tomlkit.table())
    profile["release"]["panic"] = "abort"

    if "workspace" not in doc:
        doc.add("workspace", tomlkit.table())
    array = tomlkit.array()
    array.extend(members)
    if members:
        array.multiline(True)
    doc["workspace"]["members"] = array


def rewrite_dependencies(root: Path, remote: str, pin: str) -> list[str]:
    """
    Make a relocated template buildable: pin broken path dependencies to the origin
    commit and declare every discovered package as a workspace member.

    Returns the workspace member list written to the root manifest.
    """
    root_manifest_path = root / MANIFEST_NAME
    manifests = find_manifests(root)
    if root_manifest_path not in manifests:
        Manifest(root_manifest_path).write_text("")
        manifests.append(root_manifest_path)

    members = workspace_members(root, manifests)

    for manifest_path in manifests:
        manifest = Manifest(manifest_path)
        doc = manifest.read_document()
        rewrite_path_dependencies(doc, manifest_dir=manifest_path.parent, remote=remote, pin=pin)
        if manifest_path == root_manifest_path:
            update_root_manifest(doc, members)
        manifest.write_document(doc)

    return members
