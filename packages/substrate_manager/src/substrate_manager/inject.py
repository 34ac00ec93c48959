from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from pathlib import Path

import tomlkit

from substrate_manager.errors import ConstructNotFoundError, RuntimeSourceNotFoundError, UnsupportedShapeError
from substrate_manager.manifest import MANIFEST_NAME, Manifest
from substrate_manager.naming import to_pascal_case, to_snake_case

RUNTIME_SOURCE = Path("src") / "lib.rs"

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_CONSTRUCT_RUNTIME_RE = re.compile(r"\bconstruct_runtime!\s*[\(\[\{]")
_RUNTIME_DECL_RE = re.compile(r"\s*(?:pub\s+)?(?:enum|struct)\s+Runtime\b[^{};]*$", re.DOTALL)
_IDENT_CHAR = "A-Za-z0-9_"


@dataclass(frozen=True)
class InjectionResult:
    text: str
    line: int | None


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _skip_literal_or_comment(text: str, i: int) -> int | None:
    """
    If a comment, string or char literal starts at `i`, return the offset just past
    it. Returns None for ordinary code (including lifetimes such as `'a`).
    """
    ch = text[i]
    nxt = text[i + 1] if i + 1 < len(text) else ""

    if ch == "/" and nxt == "/":
        end = text.find("\n", i)
        return len(text) if end == -1 else end
    if ch == "/" and nxt == "*":
        depth = 0
        j = i
        while j < len(text):
            if text.startswith("/*", j):
                depth += 1
                j += 2
            elif text.startswith("*/", j):
                depth -= 1
                j += 2
                if depth == 0:
                    return j
            else:
                j += 1
        return len(text)

    if ch in {"r", "b"} and (i == 0 or not _is_ident_char(text[i - 1])):
        j = i + 1
        if ch == "b" and nxt == "r":
            j += 1
        elif ch == "b":
            return None
        hashes = 0
        while j < len(text) and text[j] == "#":
            hashes += 1
            j += 1
        if j < len(text) and text[j] == '"':
            terminator = '"' + "#" * hashes
            end = text.find(terminator, j + 1)
            return len(text) if end == -1 else end + len(terminator)
        return None

    if ch == '"':
        j = i + 1
        while j < len(text):
            if text[j] == "\\":
                j += 2
                continue
            if text[j] == '"':
                return j + 1
            j += 1
        return len(text)

    if ch == "'":
        if nxt == "\\":
            end = text.find("'", i + 3)
            return len(text) if end == -1 else end + 1
        if i + 2 < len(text) and text[i + 2] == "'":
            return i + 3
    return None


def _non_code_spans(text: str) -> list[tuple[int, int]]:
    spans: list[tuple[int, int]] = []
    i = 0
    while i < len(text):
        end = _skip_literal_or_comment(text, i)
        if end is None:
            i += 1
            continue
        spans.append((i, end))
        i = end
    return spans


class _SourceIndex:
    """Offsets of comments and literals, so pattern hits inside them can be ignored."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.spans = _non_code_spans(text)
        self._starts = [s for s, _ in self.spans]

    def is_code(self, offset: int) -> bool:
        idx = bisect.bisect_right(self._starts, offset) - 1
        return idx < 0 or offset >= self.spans[idx][1]

    def finditer(self, pattern: re.Pattern[str]) -> list[re.Match[str]]:
        return [m for m in pattern.finditer(self.text) if self.is_code(m.start())]

    def matching_close(self, open_idx: int) -> int:
        text = self.text
        stack = [_OPENERS[text[open_idx]]]
        i = open_idx + 1
        while i < len(text):
            end = _skip_literal_or_comment(text, i)
            if end is not None:
                i = end
                continue
            ch = text[i]
            if ch in _OPENERS:
                stack.append(_OPENERS[ch])
            elif ch in _CLOSERS:
                if ch != stack.pop():
                    raise UnsupportedShapeError(
                        f"mismatched `{ch}` at line {text.count(chr(10), 0, i) + 1}"
                    )
                if not stack:
                    return i
            i += 1
        raise UnsupportedShapeError(
            f"unbalanced `{text[open_idx]}` opened at line {text.count(chr(10), 0, open_idx) + 1}"
        )

    def last_code_char(self, start: int, end: int) -> int | None:
        i = end - 1
        while i >= start:
            if not self.is_code(i) or self.text[i].isspace():
                i -= 1
                continue
            return i
        return None


def impl_skeleton(ident: str, eol: str = "\n") -> str:
    return f"impl {ident}::Config for Runtime {{{eol}\t/* {ident} Trait config goes here */{eol}}}"


def _line_ending(text: str) -> str:
    """The file's own line ending, judged by its first line break."""
    idx = text.find("\n")
    return "\r\n" if idx > 0 and text[idx - 1] == "\r" else "\n"


def registration_entry(ident: str) -> str:
    return f"{to_pascal_case(ident)}: {ident},"


def _impl_header_re(ident: str) -> re.Pattern[str]:
    return re.compile(rf"^[ \t]*(impl\s+{re.escape(ident)}::Config\s+for\s+Runtime\s*)\{{", re.MULTILINE)


def _line_number(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def _find_construct_runtime(index: _SourceIndex) -> tuple[int, int, int]:
    """Returns (macro_start, body_open, body_close) for the `Runtime` declaration."""
    matches = index.finditer(_CONSTRUCT_RUNTIME_RE)
    if not matches:
        raise ConstructNotFoundError("couldn't find construct_runtime call")
    mat = matches[0]
    outer_open = mat.end() - 1
    outer_close = index.matching_close(outer_open)

    body_open = -1
    for i in range(outer_open + 1, outer_close):
        if index.text[i] == "{" and index.is_code(i):
            body_open = i
            break
    if body_open == -1 or not _RUNTIME_DECL_RE.match(index.text, outer_open + 1, body_open):
        raise UnsupportedShapeError(
            "couldn't find runtime pallets config inside construct_runtime "
            f"(line {_line_number(index.text, mat.start())})"
        )
    body_close = index.matching_close(body_open)
    return mat.start(), body_open, body_close


def _replace_or_insert_impl(text: str, ident: str) -> tuple[str, int | None]:
    index = _SourceIndex(text)
    eol = _line_ending(text)
    skeleton = impl_skeleton(ident, eol)
    for mat in index.finditer(_impl_header_re(ident)):
        start = mat.start(1)
        if not index.is_code(start):
            continue
        close = index.matching_close(mat.end() - 1)
        return text[:start] + skeleton + text[close + 1 :], _line_number(text, start)

    macro_start, _, _ = _find_construct_runtime(index)
    line_start = text.rfind("\n", 0, macro_start) + 1
    return text[:line_start] + skeleton + eol + eol + text[line_start:], None


def _replace_inline_entry(content: str, hit_start: int, hit_end: int, entry: str) -> str:
    """Swap the comma separated entry around a hit, keeping its neighbours on the line."""
    start = content.rfind(",", 0, hit_start) + 1
    stop = content.find(",", hit_end)
    stop = len(content.rstrip()) if stop == -1 else stop + 1
    gap = content[start:hit_start]
    lead = gap[: len(gap) - len(gap.lstrip())]
    return content[:start] + lead + entry + content[stop:]


def _register_in_construct_runtime(text: str, ident: str) -> str:
    index = _SourceIndex(text)
    _, body_open, body_close = _find_construct_runtime(index)
    body_start = body_open + 1
    entry = registration_entry(ident)
    ident_re = re.compile(rf"(?<![{_IDENT_CHAR}]){re.escape(ident)}(?![{_IDENT_CHAR}])")
    eol = _line_ending(text)

    offset = body_start
    fallback_indent: str | None = None
    for line in text[body_start:body_close].splitlines(keepends=True):
        content = line.rstrip("\r\n")
        line_eol = line[len(content) :]
        stripped = content.strip()
        # The first chunk shares its line with the opening brace.
        on_brace_line = offset == body_start
        if stripped and not stripped.startswith("//"):
            indent = content[: len(content) - len(content.lstrip())]
            if not on_brace_line:
                fallback_indent = indent
            hit = ident_re.search(content)
            if hit is not None and index.is_code(offset + hit.start()):
                if on_brace_line:
                    replacement = _replace_inline_entry(content, hit.start(), hit.end(), entry) + line_eol
                else:
                    replacement = f"{indent}{entry}{line_eol}"
                return text[:offset] + replacement + text[offset + len(line) :]
        offset += len(line)

    last = index.last_code_char(body_start, body_close)
    comma = "," if last is not None and text[last] != "," else ""
    indent = fallback_indent if fallback_indent is not None else "\t\t"
    last_newline = text.rfind("\n", body_start, body_close)

    if last_newline == -1:
        # Single line body: break it so the new entry gets a line of its own.
        pos = body_start if last is None else last + 1
        end = body_close if not text[pos:body_close].strip() else pos
        return text[:pos] + f"{comma}{eol}{indent}{entry}{eol}" + text[end:]

    edits: list[tuple[int, str]] = [(last_newline + 1, f"{indent}{entry}{eol}")]
    if comma:
        edits.append((last + 1, comma))
    for pos, snippet in sorted(edits, key=lambda e: e[0], reverse=True):
        text = text[:pos] + snippet + text[pos:]
    return text


def inject_pallet(source_text: str, crate_spec: str) -> InjectionResult:
    """
    Add (or reset) the `Config` impl of a pallet and register it in `construct_runtime!`.

    The returned line is where an already existing impl started, so the caller can point
    the user at it; a fresh impl reports None.
    """
    ident = to_snake_case(crate_spec)
    if not ident:
        raise UnsupportedShapeError(f"cannot derive a module identifier from {crate_spec!r}")
    text, line = _replace_or_insert_impl(source_text, ident)
    return InjectionResult(text=_register_in_construct_runtime(text, ident), line=line)


def add_pallet_to_runtime(runtime_dir: Path, crate_spec: str) -> int | None:
    source_path = runtime_dir / RUNTIME_SOURCE
    try:
        with source_path.open(encoding="utf-8", newline="") as fh:
            original = fh.read()
    except FileNotFoundError as e:
        raise RuntimeSourceNotFoundError(source_path) from e
    result = inject_pallet(original, crate_spec)
    with source_path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(result.text)
    return result.line


def add_pallet_std_feature(runtime_dir: Path, crate_spec: str) -> bool:
    """Append `<crate>/std` to the runtime's `std` feature; False when already present."""
    feature = f"{crate_spec}/std"
    manifest = Manifest(runtime_dir / MANIFEST_NAME)
    doc = manifest.read_document()

    if "features" not in doc:
        doc.add("features", tomlkit.table())
    features = doc["features"]
    if "std" not in features:
        features["std"] = tomlkit.array()
    std = features["std"]
    if not isinstance(std, list):
        raise UnsupportedShapeError(f"[features].std in {manifest.path} is not an array")
    if any(str(f) == feature for f in std):
        return False
    std.append(feature)
    manifest.write_document(doc)
    return True
