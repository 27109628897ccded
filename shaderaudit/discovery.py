"""Builds a pattern registry from the source trees alone, without a live host.

Auto shaders come from shader files carrying the auto-shader marker. Constructed
and manual patterns come from class declarations extending the configured base
classes. Their bound shaders and disabled controls are read back from the class
body, which stands in for constructing an instance.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from functools import partial
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple

from .catalog import DEFAULT_TAG_PREFIX, ControlTag
from .logging import get_logger
from .models import NESTED_SEPARATOR, AuditError
from .registry import Capability, ComponentType, PatternRegistry, StaticMetadata
from .scanners.directives import has_auto_marker
from .scanners.source import SourceTextScanner, mask_noise
from .scanners.utils import read_text

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".gradle",
    ".idea",
    ".venv",
    "__pycache__",
    "build",
    "node_modules",
    "target",
}

_PACKAGE_DECL = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)
_CLASS_DECL = re.compile(
    r'(?:@LXCategory\(\s*"(?P<category>[^"]*)"\s*\)\s*)?'
    r"(?P<modifiers>(?:(?:public|protected|private|static|final|abstract)\s+)*)"
    r"class\s+(?P<name>\w+)(?:\s*<[^>{]*>)?\s+extends\s+(?P<base>\w+)",
)


@dataclass(frozen=True)
class DiscoveryRules:
    """Base class names that identify each pattern variant in source text."""

    auto_bases: Tuple[str, ...] = ("TEAutoShaderPattern", "TEAutoDriftPattern")
    constructed_bases: Tuple[str, ...] = ("ConstructedShaderPattern",)
    manual_bases: Tuple[str, ...] = ("GLShaderPattern",)


class SourceDiscovery:
    """Discovers auto, constructed and manual shader patterns from disk."""

    def __init__(
        self,
        *,
        shader_dir: Path,
        source_root: Path,
        shader_suffix: str = ".fs",
        source_suffixes: Sequence[str] = (".java",),
        exclude_paths: Sequence[str] = (),
        rules: DiscoveryRules | None = None,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
        scanner: SourceTextScanner | None = None,
    ) -> None:
        self.shader_dir = shader_dir
        self.source_root = source_root
        self.shader_suffix = shader_suffix
        self.source_suffixes = tuple(source_suffixes)
        self.exclude_paths = tuple(exclude_paths)
        self.rules = rules or DiscoveryRules()
        self.scanner = scanner or SourceTextScanner()
        self.logger = get_logger("discovery")
        self._shader_literal = re.compile(rf'"([\w./-]+{re.escape(shader_suffix)})"')
        self._unused_call = re.compile(
            rf"markUnused\s*\([^;]*?{re.escape(tag_prefix)}(\w+)", re.DOTALL
        )

    def discover(self) -> PatternRegistry:
        if not self.shader_dir.is_dir():
            raise AuditError(f"Shader directory not found: {self.shader_dir}")
        registry = PatternRegistry()
        registry.extend(self.discover_generated())
        if self.source_root.is_dir():
            registry.extend(self.discover_implemented())
        else:
            self.logger.warning("Source root not found: %s", self.source_root)
        self.logger.info("Discovered %d shader patterns", len(registry))
        return registry

    def discover_generated(self) -> List[ComponentType]:
        components: List[ComponentType] = []
        for path in sorted(self.shader_dir.glob(f"*{self.shader_suffix}")):
            text = read_text(path)
            if text is None or not has_auto_marker(text):
                continue
            components.append(
                ComponentType(
                    name=path.stem,
                    qualified_name=f"auto:{path.name}",
                    capabilities=frozenset({Capability.AUTO_SHADER, Capability.SHADER_PATTERN}),
                    shader_source=path.name,
                )
            )
        return components

    def discover_implemented(self) -> List[ComponentType]:
        components: List[ComponentType] = []
        for path in self._iter_source_files():
            text = read_text(path)
            if text is None or "extends" not in text:
                continue
            components.extend(self._components_in(path, text))
        return components

    def static_metadata(self, path: Path, scope_name: str) -> StaticMetadata:
        """Read bound shaders and disabled controls from a class body."""
        body = self.scanner.scope_text(path, scope_name)
        if body is None:
            body = self.scanner.read(path) or ""
        shader_files = frozenset(self._shader_literal.findall(body))
        unused: FrozenSet[ControlTag] = frozenset(
            tag
            for tag in (ControlTag.parse(name) for name in self._unused_call.findall(body))
            if tag is not None
        )
        return StaticMetadata(shader_files=shader_files, unused_controls=unused)

    # ------------------------------------------------------------------
    # Internal helpers

    def _components_in(self, path: Path, text: str) -> Iterator[ComponentType]:
        package_match = _PACKAGE_DECL.search(text)
        package = package_match.group(1) if package_match else _package_from_path(
            path, self.source_root
        )
        outer = f"{package}.{path.stem}" if package else path.stem
        masked = mask_noise(text, keep_strings=True)
        matches = list(_CLASS_DECL.finditer(masked))
        # Manual patterns never share a file with constructed or auto ones.
        special_bases = set(self.rules.constructed_bases) | set(self.rules.auto_bases)
        has_special = any(match.group("base") in special_bases for match in matches)
        for match in matches:
            base = match.group("base")
            capabilities = self._capabilities_for(base)
            if capabilities is None:
                continue
            if has_special and base in self.rules.manual_bases:
                continue
            name = match.group("name")
            nested = _brace_depth(masked, match.start()) > 0
            qualified = f"{outer}{NESTED_SEPARATOR}{name}" if nested else f"{package}.{name}".lstrip(".")
            category = _category_at(text, match)
            yield ComponentType(
                name=name,
                qualified_name=qualified,
                capabilities=capabilities,
                category=category,
                metadata=partial(self.static_metadata, path, name),
                source_path=path,
            )

    def _capabilities_for(self, base: str) -> Optional[FrozenSet[Capability]]:
        if base in self.rules.constructed_bases:
            return frozenset({Capability.CONSTRUCTED_SHADER, Capability.SHADER_PATTERN})
        if base in self.rules.manual_bases:
            return frozenset({Capability.SHADER_PATTERN})
        # Auto subclasses are registered from their shader files.
        return None

    def _iter_source_files(self) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(self.source_root):
            current = Path(dirpath)
            rel_dir = current.relative_to(self.source_root).as_posix() if current != self.source_root else ""
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in _EXCLUDED_DIRS and not self._excluded(_join(rel_dir, name))
            )
            for filename in sorted(filenames):
                if not filename.endswith(self.source_suffixes):
                    continue
                if self._excluded(_join(rel_dir, filename)):
                    continue
                yield current / filename

    def _excluded(self, rel_path: str) -> bool:
        for pattern in self.exclude_paths:
            cleaned = pattern.strip().strip("/")
            if not cleaned:
                continue
            if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
                return True
            if "/" not in cleaned and any(fnmatchcase(part, cleaned) for part in rel_path.split("/")):
                return True
        return False


def _join(rel_dir: str, name: str) -> str:
    return f"{rel_dir}/{name}" if rel_dir else name


def _package_from_path(path: Path, root: Path) -> str:
    try:
        relative = path.parent.relative_to(root)
    except ValueError:
        return ""
    return ".".join(part for part in relative.parts if part not in {".", ""})


def _brace_depth(text: str, offset: int) -> int:
    depth = 0
    quote = ""
    previous = ""
    for char in text[:offset]:
        if quote:
            if char == quote and previous != "\\":
                quote = ""
        elif char in "\"'":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        previous = char
    return depth


def _category_at(text: str, match: re.Match[str]) -> Optional[str]:
    category = match.group("category")
    if category:
        return category.strip() or None
    # Annotation separated from the declaration by other annotations or modifiers.
    window = text[max(0, match.start() - 200) : match.start()]
    found = re.findall(r'@LXCategory\(\s*"([^"]*)"\s*\)[^;{}]*$', window)
    return found[-1].strip() if found and found[-1].strip() else None


__all__ = ["DiscoveryRules", "SourceDiscovery"]
