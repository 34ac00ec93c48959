from __future__ import annotations

import tomllib
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

from substrate_manager.errors import TemplateConfigError, TemplateNotFoundError

_REQUIRED_KEYS = ("remote", "branch", "template_path")


@dataclass(frozen=True)
class TemplateDescriptor:
    remote: str
    branch: str
    subpath: str


def _load_toml_text(text: str, *, origin: str) -> dict[str, Any]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise TemplateConfigError(f"Failed to parse template config {origin}: {e}") from e
    return data


def _descriptor_from_table(table: Any, *, origin: str) -> TemplateDescriptor:
    if not isinstance(table, dict):
        raise TemplateConfigError(f"Invalid template config {origin}: expected a table")
    missing = [k for k in _REQUIRED_KEYS if not isinstance(table.get(k), str) or not table[k].strip()]
    if missing:
        raise TemplateConfigError(
            f"Invalid template config {origin}: missing/invalid {', '.join(missing)}"
        )
    subpath = table["template_path"].strip().strip("/")
    if not subpath or Path(subpath).is_absolute() or ".." in Path(subpath).parts:
        raise TemplateConfigError(
            f"Invalid template config {origin}: template_path must be a relative path inside the repo"
        )
    return TemplateDescriptor(
        remote=table["remote"].strip(),
        branch=table["branch"].strip(),
        subpath=subpath,
    )


def builtin_templates() -> dict[str, TemplateDescriptor]:
    text = resources.files(__name__).joinpath("registry.toml").read_text(encoding="utf-8")
    data = _load_toml_text(text, origin="registry.toml")
    templates = data.get("templates", {})
    return {
        name: _descriptor_from_table(table, origin=f"registry.toml [templates.{name}]")
        for name, table in templates.items()
    }


def load_template(name_or_path: str) -> TemplateDescriptor:
    """
    Resolve a template by built-in name (case-insensitive) or by a path to a custom
    TOML file providing `remote`, `branch` and `template_path`.
    """
    known = builtin_templates()
    key = name_or_path.strip().lower()
    if key in known:
        return known[key]

    path = Path(name_or_path).expanduser()
    if path.suffix == ".toml" or path.is_file():
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateNotFoundError(f"Failed to read custom template config {path}: {e}") from e
        return _descriptor_from_table(_load_toml_text(text, origin=str(path)), origin=str(path))

    available = ", ".join(sorted(known))
    raise TemplateNotFoundError(f"Invalid template name {name_or_path!r} (available: {available})")
