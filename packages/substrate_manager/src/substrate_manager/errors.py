from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class SubstrateError(RuntimeError):
    pass


class DestinationExistsError(SubstrateError):
    def __init__(self, path: Path) -> None:
        super().__init__(
            f"destination `{path}` already exists\n\n"
            "Choose another path or remove the existing directory"
        )
        self.path = path


class CommandError(SubstrateError):
    def __init__(self, argv: Sequence[str], *, returncode: int | None, stderr: str = "") -> None:
        cmd = " ".join(argv)
        msg = stderr.strip()
        if returncode is None:
            text = f"{cmd}: {msg or 'could not be started'}"
        else:
            text = f"{cmd} failed (exit {returncode})"
            if msg:
                text = f"{text}: {msg}"
        super().__init__(text)
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr


class ManifestNotFoundError(SubstrateError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Missing manifest: {path}")
        self.path = path


class ManifestParseError(SubstrateError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"could not parse {path} as TOML: {reason}")
        self.path = path


class ManifestWriteError(SubstrateError):
    pass


class NoManifestsError(SubstrateError):
    pass


class TemplateNotFoundError(SubstrateError):
    pass


class TemplateConfigError(SubstrateError):
    pass


class ConstructNotFoundError(SubstrateError):
    """The runtime source has no `construct_runtime!` invocation."""


class UnsupportedShapeError(SubstrateError):
    """Source structure the text surgery or the extractor cannot safely handle."""


class RuntimeSourceNotFoundError(SubstrateError):
    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Couldn't access the runtime source at {path}.\n"
            "Make sure your runtime path is set correctly in Substrate.toml"
        )
        self.path = path


class SourceParseError(SubstrateError):
    pass


class ProjectConfigError(SubstrateError):
    pass


class InvalidNameError(SubstrateError):
    pass
