from __future__ import annotations

import tomllib
from pathlib import Path

import pytest
import tomlkit

from substrate_manager.errors import ManifestNotFoundError, ManifestParseError
from substrate_manager.manifest import Manifest, get_package_name, get_path, set_path

SAMPLE = """\
# Node manifest, edited by hand.
[package]
name = "node-template"   # keep me
version = "4.0.0-dev"
authors = ["Substrate DevHub <https://github.com/substrate-developer-hub>"]

[dependencies]
clap = { version = "4.4.2", features = ["derive"] }
futures = { version = "0.3.21",    features = ["thread-pool"] }

[features]
default = []
"""


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_unmodified_document_round_trips_byte_identical(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    _write(path, SAMPLE)

    manifest = Manifest(path)
    manifest.write_document(manifest.read_document())

    assert path.read_text(encoding="utf-8") == SAMPLE


def test_single_field_mutation_only_touches_that_field(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    _write(path, SAMPLE)

    manifest = Manifest(path)
    doc = manifest.read_document()
    doc["package"]["version"] = "5.0.0"
    manifest.write_document(doc)

    expected = SAMPLE.replace('version = "4.0.0-dev"', 'version = "5.0.0"')
    assert path.read_text(encoding="utf-8") == expected


def test_write_replaces_whole_file(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    _write(path, SAMPLE)

    manifest = Manifest(path)
    doc = tomlkit.document()
    doc.add("type", "chain")
    manifest.write_document(doc)

    assert path.read_text(encoding="utf-8") == 'type = "chain"\n'


def test_write_creates_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "Substrate.toml"
    Manifest(path).write_text("")
    assert path.is_file()
    assert path.read_text(encoding="utf-8") == ""


def test_read_missing_manifest_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(ManifestNotFoundError):
        Manifest(tmp_path / "Cargo.toml").read_document()


def test_read_invalid_toml_names_the_file(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    _write(path, "[package\nname = 1\n")
    with pytest.raises(ManifestParseError) as exc:
        Manifest(path).read_document()
    assert str(path) in str(exc.value)


def test_get_path_reads_nested_values_and_defaults(tmp_path: Path) -> None:
    doc = tomlkit.parse(SAMPLE)

    assert get_path(doc, "package.name") == "node-template"
    assert get_path(doc, "dependencies.clap.version") == "4.4.2"
    assert get_path(doc, "paths.node", default="node") == "node"
    with pytest.raises(KeyError):
        get_path(doc, "paths.node")
    with pytest.raises(TypeError):
        get_path(doc, "package.name.first")


def test_set_path_creates_intermediate_tables() -> None:
    doc = tomlkit.parse(SAMPLE)
    set_path(doc, "paths.node", "chain/node")
    set_path(doc, "package.edition", "2021")

    data = tomllib.loads(tomlkit.dumps(doc))
    assert data["paths"] == {"node": "chain/node"}
    assert data["package"]["edition"] == "2021"
    assert data["dependencies"]["clap"] == {"version": "4.4.2", "features": ["derive"]}


def test_get_package_name(tmp_path: Path) -> None:
    _write(tmp_path / "node" / "Cargo.toml", SAMPLE)
    _write(tmp_path / "broken" / "Cargo.toml", "[package]\nversion = \"1.0.0\"\n")

    assert get_package_name(tmp_path / "node") == "node-template"
    assert get_package_name(tmp_path / "missing") is None
    with pytest.raises(ManifestParseError):
        get_package_name(tmp_path / "broken")
