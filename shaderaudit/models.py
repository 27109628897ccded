"""Core data models shared across shaderaudit components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set

from .catalog import ControlTag

UNCATEGORIZED = "Uncategorized"
NESTED_SEPARATOR = "$"


class Variant(str, Enum):
    """Construction style of a shader pattern."""

    GENERATED = "Auto"
    CONSTRUCTED = "Constructed"
    MANUAL = "Manual"
    UNRECOGNIZED = "Unknown"


class Verdict(str, Enum):
    """Usage status of one control within one pattern."""

    DISABLED = "disabled"
    FOUND_IN_SHADER = "shader"
    FOUND_IN_SOURCE = "source"
    UNUSED = "UNUSED"


@dataclass(frozen=True)
class SourceLocator:
    """Points at the implementation file (and optional nested definition) of a pattern."""

    path: Path
    nested_name: Optional[str] = None

    @property
    def is_nested(self) -> bool:
        return bool(self.nested_name)


@dataclass
class ComponentDescriptor:
    """Per-run view of one audited pattern, filled in by classifier then introspector."""

    display_name: str
    qualified_name: str
    variant: Variant
    category: str = UNCATEGORIZED
    source_locator: Optional[SourceLocator] = None
    shader_files: Set[str] = field(default_factory=set)
    declared_unused: Set[ControlTag] = field(default_factory=set)
    inspect_error: Optional[str] = None

    @property
    def file_path(self) -> str:
        if self.source_locator is None:
            return ""
        return self.source_locator.path.as_posix()


@dataclass(frozen=True)
class UsageFinding:
    """Verdict for a single (pattern, control) pair."""

    component: ComponentDescriptor
    tag: ControlTag
    verdict: Verdict


@dataclass
class AuditEntry:
    """A pattern together with its findings, in catalog order."""

    descriptor: ComponentDescriptor
    findings: List[UsageFinding] = field(default_factory=list)

    @property
    def unused_tags(self) -> List[ControlTag]:
        return [finding.tag for finding in self.findings if finding.verdict is Verdict.UNUSED]


class AuditError(RuntimeError):
    """Raised when an audit cannot run at all (missing shader directory or registry)."""
