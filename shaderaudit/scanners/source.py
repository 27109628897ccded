"""Line-oriented search over implementation sources.

Scopes are located textually: brace-delimited files track a nesting-depth
counter line by line from the definition header until the depth returns to
where it started; Python files use the header's indentation instead. Neither is
a parser, they only need to keep sibling definitions apart.

Header and brace tracking run over a masked copy of each file in which comments
and string literals are blanked, so a ``}`` inside ``/* ... */`` or ``"..."``
never closes a scope. Token lookups still see the raw text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from .utils import read_text

_NOISE = re.compile(
    r'"(?:\\.|[^"\\\r\n])*"|\'(?:\\.|[^\'\\\r\n])*\'|//[^\r\n]*|/\*.*?\*/',
    re.DOTALL,
)
_INDENTED_SUFFIXES = {".py", ".pyi"}


def scopes_by_indentation(path: Path) -> bool:
    """Return True when definitions in ``path`` are delimited by indentation."""
    return path.suffix.lower() in _INDENTED_SUFFIXES


def mask_noise(text: str, *, keep_strings: bool = False) -> str:
    """Blank comments (and string literals unless ``keep_strings``), keeping line breaks."""

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token[0] in "\"'":
            if keep_strings:
                return token
            return token[0] * 2
        return re.sub(r"[^\r\n]", " ", token)

    return _NOISE.sub(_replace, text)


@dataclass(frozen=True)
class ScopeSpan:
    """Zero-based, inclusive line range of a definition within a file."""

    start: int
    end: int


class SourceTextScanner:
    """Token lookups over whole files or over one definition inside a file.

    File contents are cached for the lifetime of the scanner; create one per run.
    """

    def __init__(self) -> None:
        self._files: Dict[Path, Optional[Tuple[List[str], List[str]]]] = {}

    def contains_token(self, path: Path, token: str) -> bool:
        lines = self._read_lines(path)
        if lines is None or not token:
            return False
        return any(token in line for line in lines)

    def contains_token_in_scope(self, path: Path, scope_name: str, token: str) -> bool:
        lines = self._read_lines(path)
        if lines is None or not token:
            return False
        span = self._find_scope(path, scope_name)
        if span is None:
            return False
        return any(token in line for line in lines[span.start : span.end + 1])

    def find_definition_line(self, path: Path, scope_name: str) -> Optional[int]:
        """Return the 1-based line of the definition header for ``scope_name``."""
        masked = self._masked_lines(path)
        if masked is None:
            return None
        index = _find_header(masked, _header_pattern(path, scope_name))
        return None if index is None else index + 1

    def scope_text(self, path: Path, scope_name: str) -> Optional[str]:
        """Return the text of the ``scope_name`` definition, if it can be located."""
        lines = self._read_lines(path)
        if lines is None:
            return None
        span = self._find_scope(path, scope_name)
        if span is None:
            return None
        return "\n".join(lines[span.start : span.end + 1])

    def read(self, path: Path) -> Optional[str]:
        lines = self._read_lines(path)
        return None if lines is None else "\n".join(lines)

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> Optional[Tuple[List[str], List[str]]]:
        if path not in self._files:
            text = read_text(path)
            if text is None:
                self._files[path] = None
            else:
                lines = text.splitlines()
                masked = mask_noise(text).splitlines()
                masked.extend([""] * (len(lines) - len(masked)))
                self._files[path] = (lines, masked)
        return self._files[path]

    def _read_lines(self, path: Path) -> Optional[List[str]]:
        loaded = self._load(path)
        return None if loaded is None else loaded[0]

    def _masked_lines(self, path: Path) -> Optional[List[str]]:
        loaded = self._load(path)
        return None if loaded is None else loaded[1]

    def _find_scope(self, path: Path, scope_name: str) -> Optional[ScopeSpan]:
        masked = self._masked_lines(path)
        if masked is None:
            return None
        header = _find_header(masked, _header_pattern(path, scope_name))
        if header is None:
            return None
        if scopes_by_indentation(path):
            return _indented_span(masked, header)
        return _braced_span(masked, header)


def _header_pattern(path: Path, scope_name: str) -> Pattern[str]:
    name = re.escape(scope_name)
    if scopes_by_indentation(path):
        return re.compile(rf"^\s*class\s+{name}\b")
    return re.compile(rf"\b(?:class|interface|enum|record)\s+{name}\b")


def _find_header(lines: Sequence[str], pattern: Pattern[str]) -> Optional[int]:
    for index, line in enumerate(lines):
        if pattern.search(line):
            return index
    return None


def _braced_span(lines: Sequence[str], header: int) -> ScopeSpan:
    depth = 0
    opened = False
    for index in range(header, len(lines)):
        for char in lines[index]:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
        if opened and depth <= 0:
            return ScopeSpan(header, index)
    return ScopeSpan(header, len(lines) - 1)


def _indented_span(lines: Sequence[str], header: int) -> ScopeSpan:
    indent = _indent_of(lines[header])
    end = header
    for index in range(header + 1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        if _indent_of(line) <= indent:
            break
        end = index
    return ScopeSpan(header, end)


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


__all__ = ["ScopeSpan", "SourceTextScanner", "mask_noise", "scopes_by_indentation"]
