from __future__ import annotations

_DELIMITERS = frozenset({" ", "-", "_"})


def to_snake_case(value: str) -> str:
    """
    Crate names use hyphens, Rust paths use underscores.

    `node-template-runtime` -> `node_template_runtime`, `HelloWorld` -> `hello_world`.
    Characters that are neither ASCII alphanumerics nor delimiters are dropped.
    """
    out: list[str] = []
    prev_was_delimiter = True
    for ch in value:
        if ch.isascii() and ch.isalnum():
            if ch.isupper():
                if not prev_was_delimiter and out:
                    out.append("_")
                out.append(ch.lower())
            else:
                out.append(ch)
            prev_was_delimiter = False
        elif ch in _DELIMITERS:
            if not prev_was_delimiter and out:
                out.append("_")
            prev_was_delimiter = True
    return "".join(out).rstrip("_")


def to_pascal_case(value: str) -> str:
    out: list[str] = []
    upper_next = False
    for idx, ch in enumerate(value):
        if idx == 0:
            out.append(ch.upper())
        elif ch in {"_", "-"}:
            upper_next = True
        elif upper_next:
            out.append(ch.upper())
            upper_next = False
        else:
            out.append(ch)
    return "".join(out)
