from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from substrate_manager.errors import RuntimeSourceNotFoundError
from substrate_manager.inject import RUNTIME_SOURCE, add_pallet_std_feature, add_pallet_to_runtime
from substrate_manager.process import run_command

DEFAULT_REGISTRY = "default-registry"
SOURCE_KINDS: tuple[str, ...] = (DEFAULT_REGISTRY, "git", "path", "custom-registry")

_FEATURE_SPLIT_RE = re.compile(r"[\s,]+")


@dataclass(frozen=True)
class CrateSource:
    kind: str = DEFAULT_REGISTRY
    locator: str = ""
    branch: str = ""

    def cargo_args(self) -> list[str]:
        if self.kind == DEFAULT_REGISTRY:
            return []
        if self.kind == "git":
            args = ["--git", self.locator]
            if self.branch:
                args.extend(["--branch", self.branch])
            return args
        if self.kind == "path":
            return ["--path", self.locator]
        if self.kind == "custom-registry":
            return ["--registry", self.locator]
        raise ValueError(f"Unknown crate source {self.kind!r} (expected one of {', '.join(SOURCE_KINDS)})")


@dataclass(frozen=True)
class AddOptions:
    package_name: str
    package_path: Path
    crate_spec: str
    features: list[str] = field(default_factory=list)
    source: CrateSource = field(default_factory=CrateSource)


@dataclass(frozen=True)
class AddResult:
    std_feature_added: bool
    config_line: int | None


def parse_features(text: str) -> list[str]:
    """Split a whitespace/comma separated feature list, keeping the user's order."""
    return [f for f in _FEATURE_SPLIT_RE.split(text) if f]


def cargo_add_argv(opts: AddOptions) -> list[str]:
    return [
        "cargo",
        "add",
        "-p",
        opts.package_name,
        opts.crate_spec,
        "--features",
        ",".join(opts.features),
        "--no-default-features",
        *opts.source.cargo_args(),
    ]


def add_pallet(opts: AddOptions, *, cwd: Path, install: bool = True) -> AddResult:
    """
    Install a pallet crate into the runtime and wire it up: `std` feature, `Config`
    impl skeleton and the `construct_runtime!` entry.
    """
    runtime_dir = cwd / opts.package_path
    if not (runtime_dir / RUNTIME_SOURCE).is_file():
        raise RuntimeSourceNotFoundError(runtime_dir / RUNTIME_SOURCE)

    if install:
        run_command(cargo_add_argv(opts), cwd=cwd, capture=False)

    added = add_pallet_std_feature(runtime_dir, opts.crate_spec)
    line = add_pallet_to_runtime(runtime_dir, opts.crate_spec)
    return AddResult(std_feature_added=added, config_line=line)
