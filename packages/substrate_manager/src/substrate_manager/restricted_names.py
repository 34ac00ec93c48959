from __future__ import annotations

import os
import unicodedata
from pathlib import Path

from substrate_manager.errors import InvalidNameError

RUST_KEYWORDS: frozenset[str] = frozenset(
    {
        "Self", "abstract", "as", "async", "await", "become", "box", "break", "const",
        "continue", "crate", "do", "dyn", "else", "enum", "extern", "false", "final", "fn",
        "for", "if", "impl", "in", "let", "loop", "macro", "match", "mod", "move", "mut",
        "override", "priv", "pub", "ref", "return", "self", "static", "struct", "super",
        "trait", "true", "try", "type", "typeof", "unsafe", "unsized", "use", "virtual",
        "where", "while", "yield",
    }
)  # fmt: skip

ARTIFACT_DIR_NAMES: frozenset[str] = frozenset({"deps", "examples", "build", "incremental"})
STD_LIBRARY_NAMES: frozenset[str] = frozenset({"core", "std", "alloc", "proc_macro", "proc-macro"})
WINDOWS_RESERVED: frozenset[str] = frozenset(
    {"con", "prn", "aux", "nul"}
    | {f"com{i}" for i in range(1, 10)}
    | {f"lpt{i}" for i in range(1, 10)}
)

_INVALID_PATH_CHARS = (";", '"') if os.name == "nt" else (":",)
_NAME_HELP = (
    "\nIf you need a package name to not match the directory name, consider using --name flag."
)


def is_keyword(name: str) -> bool:
    return name in RUST_KEYWORDS


def is_conflicting_artifact_name(name: str) -> bool:
    return name in ARTIFACT_DIR_NAMES


def is_windows_reserved(name: str) -> bool:
    return name.lower() in WINDOWS_RESERVED


def is_non_ascii_name(name: str) -> bool:
    return any(ord(ch) > 127 for ch in name)


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or unicodedata.category(ch) in {"Lu", "Ll", "Lt", "Lm", "Lo", "Nl"}


def _is_ident_continue(ch: str) -> bool:
    return _is_ident_start(ch) or unicodedata.category(ch) in {"Mn", "Mc", "Nd", "Pc"}


def validate_package_name(name: str, *, what: str = "package name", help_text: str = "") -> None:
    if not name:
        raise InvalidNameError(f"{what} cannot be empty")
    first = name[0]
    if first.isdigit():
        raise InvalidNameError(
            f"the name `{name}` cannot be used as a {what}, "
            f"the name cannot start with a digit{help_text}"
        )
    if not _is_ident_start(first):
        raise InvalidNameError(
            f"invalid character `{first}` in {what}: `{name}`, "
            f"the first character must be a Unicode XID start character (most letters or `_`){help_text}"
        )
    for ch in name[1:]:
        if ch != "-" and not _is_ident_continue(ch):
            raise InvalidNameError(
                f"invalid character `{ch}` in {what}: `{name}`, "
                "characters must be Unicode XID characters (numbers, `-`, `_`, or most letters)"
                f"{help_text}"
            )


def validate_name(name: str, *, show_name_help: bool) -> list[str]:
    """
    Reject names cargo cannot build and return warnings for names that merely
    invite trouble (standard library clashes, Windows reserved names, non-ASCII).
    """
    name_help = _NAME_HELP if show_name_help else ""
    validate_package_name(name, what="package name", help_text=name_help)

    if is_keyword(name):
        raise InvalidNameError(
            f"the name `{name}` cannot be used as a package name, it is a Rust keyword{name_help}"
        )
    if is_conflicting_artifact_name(name):
        raise InvalidNameError(
            f"the name `{name}` cannot be used as a package name, "
            f"it conflicts with cargo's build directory names{name_help}"
        )
    if name == "test":
        raise InvalidNameError(
            "the name `test` cannot be used as a package name, "
            f"it conflicts with Rust's built-in test library{name_help}"
        )

    warnings: list[str] = []
    if name in STD_LIBRARY_NAMES:
        warnings.append(
            f"the name `{name}` is part of Rust's standard library\n"
            f"It is recommended to use a different name to avoid problems.{name_help}"
        )
    if is_windows_reserved(name):
        if os.name == "nt":
            raise InvalidNameError(
                f"cannot use name `{name}`, it is a reserved Windows filename{name_help}"
            )
        warnings.append(
            f"the name `{name}` is a reserved Windows filename\n"
            "This package will not work on Windows platforms."
        )
    if is_non_ascii_name(name):
        warnings.append(
            f"the name `{name}` contains non-ASCII characters\n"
            "Non-ASCII crate names are not supported by Rust."
        )
    return warnings


def validate_path(path: Path) -> None:
    text = str(path)
    if any(ch in text for ch in _INVALID_PATH_CHARS):
        raise InvalidNameError(
            f"the path `{text}` contains invalid PATH characters (usually `:`, `;`, or `\"`)\n"
            "It is recommended to use a different name to avoid problems."
        )
