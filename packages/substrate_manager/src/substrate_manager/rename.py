from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit

from substrate_manager.errors import ManifestParseError
from substrate_manager.manifest import MANIFEST_NAME, Manifest, get_path
from substrate_manager.naming import to_snake_case
from substrate_manager.rewrite import find_manifests, iter_dependency_tables

_PIN_KEYS: tuple[str, ...] = ("git", "rev", "branch", "tag")
_SKIP_DIRS: frozenset[str] = frozenset({".git", "target"})


@dataclass(frozen=True)
class PackageRename:
    old_name: str
    new_name: str

    @property
    def old_ident(self) -> str:
        return to_snake_case(self.old_name)

    @property
    def new_ident(self) -> str:
        return to_snake_case(self.new_name)


def _feature_ref_re(name: str) -> re.Pattern[str]:
    # `name`, `name/feat`, `name?/feat`, `dep:name`; not `other-name/feat`.
    return re.compile(rf"(?<![A-Za-z0-9_-]){re.escape(name)}(?=[/?]|$)")


def _rename_dependency_keys(doc: dict[str, Any], rename: PackageRename) -> bool:
    changed = False
    for table in iter_dependency_tables(doc):
        for key, dep in list(table.items()):
            if isinstance(dep, dict) and dep.get("package") == rename.old_name:
                dep["package"] = rename.new_name
                changed = True
                continue
            if key != rename.old_name:
                continue
            del table[key]
            table[rename.new_name] = dep
            changed = True
    return changed


def _rename_feature_refs(doc: dict[str, Any], rename: PackageRename) -> bool:
    features = doc.get("features")
    if not isinstance(features, dict):
        return False
    pattern = _feature_ref_re(rename.old_name)
    changed = False
    for values in features.values():
        if not isinstance(values, list):
            continue
        for idx, entry in enumerate(values):
            if not isinstance(entry, str):
                continue
            updated = pattern.sub(rename.new_name, str(entry))
            if updated != entry:
                values[idx] = updated
                changed = True
    return changed


def _relink_workspace_dependency(
    doc: dict[str, Any], rename: PackageRename, *, rel_path: str
) -> bool:
    """The renamed crate now lives in this workspace: point the shared entry at it."""
    workspace = doc.get("workspace")
    if not isinstance(workspace, dict):
        return False
    ws_deps = workspace.get("dependencies")
    if not isinstance(ws_deps, dict) or rename.old_name not in ws_deps:
        return False

    dep = ws_deps[rename.old_name]
    del ws_deps[rename.old_name]
    if not isinstance(dep, dict):
        dep = tomlkit.inline_table()
    for key in _PIN_KEYS:
        if key in dep:
            del dep[key]
    dep["path"] = rel_path
    ws_deps[rename.new_name] = dep
    return True


def _iter_rust_files(package_dir: Path) -> list[Path]:
    return sorted(
        p
        for p in package_dir.glob("**/*.rs")
        if p.is_file() and not _SKIP_DIRS.intersection(p.relative_to(package_dir).parts[:-1])
    )


def replace_in_sources(package_dir: Path, old: str, new: str) -> list[Path]:
    touched: list[Path] = []
    for path in _iter_rust_files(package_dir):
        text = path.read_text(encoding="utf-8")
        if old not in text:
            continue
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text.replace(old, new))
        touched.append(path)
    return touched


def rename_package(workspace_root: Path, package_dir: Path, new_name: str) -> PackageRename:
    """
    Rename the crate at `package_dir` and cascade the new name through the workspace:
    dependency keys and feature strings of every other member, the shared
    `[workspace.dependencies]` entry, and `old_ident::` paths in dependents' sources.
    """
    own_path = package_dir / MANIFEST_NAME
    own = Manifest(own_path)
    doc = own.read_document()
    old_name = get_path(doc, "package.name", default=None)
    if not isinstance(old_name, str) or not old_name.strip():
        raise ManifestParseError(own_path, "missing/invalid [package].name")
    rename = PackageRename(old_name=str(old_name), new_name=new_name)

    doc["package"]["name"] = new_name
    bins = doc.get("bin")
    if isinstance(bins, list) and bins:
        bins[0]["name"] = new_name
    own.write_document(doc)

    if rename.old_name == rename.new_name:
        return rename

    root_manifest_path = workspace_root / MANIFEST_NAME
    rel_path = package_dir.resolve().relative_to(workspace_root.resolve()).as_posix()
    dependents: list[Path] = []
    for manifest_path in find_manifests(workspace_root):
        if manifest_path == own_path:
            continue
        manifest = Manifest(manifest_path)
        member_doc = manifest.read_document()
        changed = False
        if _rename_dependency_keys(member_doc, rename):
            changed = True
            if manifest_path.parent != workspace_root:
                dependents.append(manifest_path.parent)
        if _rename_feature_refs(member_doc, rename):
            changed = True
        if manifest_path == root_manifest_path and _relink_workspace_dependency(
            member_doc, rename, rel_path=rel_path
        ):
            changed = True
        if changed:
            manifest.write_document(member_doc)

    if rename.old_ident != rename.new_ident:
        for dependent_dir in dependents:
            replace_in_sources(dependent_dir, rename.old_ident, rename.new_ident)

    return rename
