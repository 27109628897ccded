"""Tokenizer for the ``#pragma`` directives embedded in shader sources.

Grammar (one directive per line, keyword case-insensitive, leading whitespace
allowed, anything after the directive ignored):

====================================  ==========  ===============================
Directive                             Kind        Effect
====================================  ==========  ===============================
``#pragma auto``                      AUTO        marks the file as an auto shader
``#pragma name("<display name>")``    NAME        overrides the display name
``#pragma LXCategory("<category>")``  CATEGORY    sets the category
``#pragma TEControl.<TAG>.Disable``   DISABLE     adds <TAG> to the unused set
====================================  ==========  ===============================

Lines that look like a directive but do not match a rule (missing quotes,
unknown tag, unknown keyword) are ignored; every fact falls back to its default
independently.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Pattern, Set, Tuple

from ..catalog import ControlTag
from .utils import read_text

DEFAULT_SHADER_CATEGORY = "Auto Shader"


class DirectiveKind(str, Enum):
    AUTO = "auto"
    NAME = "name"
    CATEGORY = "category"
    DISABLE = "disable"


@dataclass(frozen=True)
class DirectiveRule:
    """One row of the directive grammar table."""

    kind: DirectiveKind
    pattern: Pattern[str]
    syntax: str


GRAMMAR: Tuple[DirectiveRule, ...] = (
    DirectiveRule(
        DirectiveKind.AUTO,
        re.compile(r"^\s*#pragma\s+auto\b", re.IGNORECASE),
        "#pragma auto",
    ),
    DirectiveRule(
        DirectiveKind.NAME,
        re.compile(r'^\s*#pragma\s+name\s*\(\s*"([^"]+)"\s*\)', re.IGNORECASE),
        '#pragma name("<display name>")',
    ),
    DirectiveRule(
        DirectiveKind.CATEGORY,
        re.compile(r'^\s*#pragma\s+lxcategory\s*\(\s*"([^"]+)"\s*\)', re.IGNORECASE),
        '#pragma LXCategory("<category>")',
    ),
    DirectiveRule(
        DirectiveKind.DISABLE,
        re.compile(r"^\s*#pragma\s+tecontrol\.(\w+)\.disable\b", re.IGNORECASE),
        "#pragma TEControl.<TAG>.Disable",
    ),
)

# Presence of any of these keywords marks a shader as auto-generated, even when
# the directive itself is malformed.
_AUTO_MARKER = re.compile(r"^\s*#pragma\s+(?:auto|name|lxcategory)\b", re.IGNORECASE | re.MULTILINE)


@dataclass(frozen=True)
class Directive:
    """A single recognised directive occurrence."""

    kind: DirectiveKind
    argument: Optional[str]
    line: int


@dataclass
class ShaderDirectives:
    """Facts extracted from one shader source."""

    display_name: str
    category: str = DEFAULT_SHADER_CATEGORY
    disabled: Set[ControlTag] = field(default_factory=set)
    is_auto: bool = False
    name_declared: bool = False
    category_declared: bool = False


def tokenize(text: str) -> Iterator[Directive]:
    """Yield every directive in ``text`` matching a grammar rule, in line order."""
    for number, line in enumerate(text.splitlines(), start=1):
        if "#pragma" not in line.lower():
            continue
        for rule in GRAMMAR:
            match = rule.pattern.match(line)
            if match is None:
                continue
            argument = match.group(1) if match.groups() else None
            yield Directive(kind=rule.kind, argument=argument, line=number)
            break


def has_auto_marker(text: str) -> bool:
    """Return True when ``text`` carries the auto-shader marker."""
    return _AUTO_MARKER.search(text) is not None


class DirectiveScanner:
    """Extracts name, category and disabled controls from shader text."""

    def scan(self, text: str, filename: str) -> ShaderDirectives:
        facts = ShaderDirectives(
            display_name=_strip_extension(filename),
            is_auto=has_auto_marker(text),
        )
        for directive in tokenize(text):
            if directive.kind is DirectiveKind.NAME and not facts.name_declared:
                name = (directive.argument or "").strip()
                if name:
                    facts.display_name = name
                    facts.name_declared = True
            elif directive.kind is DirectiveKind.CATEGORY and not facts.category_declared:
                category = (directive.argument or "").strip()
                if category:
                    facts.category = category
                    facts.category_declared = True
            elif directive.kind is DirectiveKind.DISABLE:
                tag = ControlTag.parse(directive.argument or "")
                if tag is not None:
                    facts.disabled.add(tag)
        return facts

    def scan_file(self, path: Path) -> ShaderDirectives:
        """Scan a shader file; unreadable files yield the filename defaults."""
        text = read_text(path)
        return self.scan(text or "", path.name)


def _strip_extension(filename: str) -> str:
    name = Path(filename).name
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name


__all__ = [
    "DEFAULT_SHADER_CATEGORY",
    "Directive",
    "DirectiveKind",
    "DirectiveRule",
    "DirectiveScanner",
    "GRAMMAR",
    "ShaderDirectives",
    "has_auto_marker",
    "tokenize",
]
