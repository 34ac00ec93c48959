from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit import TOMLDocument
from tomlkit.exceptions import TOMLKitError

from substrate_manager.errors import ManifestNotFoundError, ManifestParseError, ManifestWriteError

MANIFEST_NAME = "Cargo.toml"

_MISSING: Any = object()


class Manifest:
    """A TOML file read and written as a format-preserving document."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"Manifest({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def read_document(self) -> TOMLDocument:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ManifestNotFoundError(self.path) from e
        try:
            return tomlkit.parse(text)
        except TOMLKitError as e:
            raise ManifestParseError(self.path, str(e)) from e

    def write_document(self, document: TOMLDocument) -> None:
        self.write_text(tomlkit.dumps(document))

    def write_text(self, text: str) -> None:
        # Whole-file replace: create if missing, truncate, write everything.
        try:
            with self.path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(text)
        except OSError as e:
            raise ManifestWriteError(f"Failed to write {self.path}: {e}") from e


def get_path(doc: dict[str, Any], dotted: str, default: Any = _MISSING) -> Any:
    current: Any = doc
    parts = dotted.split(".")
    for idx, part in enumerate(parts):
        if not isinstance(current, dict):
            prefix = ".".join(parts[:idx])
            raise TypeError(f"`{prefix}` is not a table (while reading `{dotted}`)")
        if part not in current:
            if default is _MISSING:
                raise KeyError(dotted)
            return default
        current = current[part]
    return current


def set_path(doc: dict[str, Any], dotted: str, value: Any) -> None:
    parts = dotted.split(".")
    current: Any = doc
    for idx, part in enumerate(parts[:-1]):
        if part not in current:
            current[part] = tomlkit.table()
        current = current[part]
        if not isinstance(current, dict):
            prefix = ".".join(parts[: idx + 1])
            raise TypeError(f"`{prefix}` is not a table (while writing `{dotted}`)")
    current[parts[-1]] = value


def get_package_name(package_dir: Path) -> str | None:
    manifest = Manifest(package_dir / MANIFEST_NAME)
    if not manifest.exists():
        return None
    doc = manifest.read_document()
    name = get_path(doc, "package.name", default=None)
    if not isinstance(name, str) or not name.strip():
        raise ManifestParseError(manifest.path, "missing/invalid [package].name")
    return str(name)
