"""Self-describing registration contract for shader pattern types.

Each pattern type declares its capabilities when it is defined, either by
building a :class:`ComponentType` directly or by decorating a class with
:func:`shader_pattern`. Classification only ever reads these declarations.
"""

from __future__ import annotations

import importlib
import inspect
from dataclasses import dataclass, field
from enum import Enum
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Union,
)

from .catalog import ControlTag
from .models import NESTED_SEPARATOR, AuditError

_ENTRY_POINT_GROUP = "shaderaudit.registries"

_CAPABILITIES_ATTR = "__shader_capabilities__"
_CATEGORY_ATTR = "__shader_category__"
_SHADER_SOURCE_ATTR = "__shader_source__"
_SOURCE_PATH_ATTR = "__shader_source_path__"


class Capability(str, Enum):
    """Structural capabilities a pattern type can declare."""

    AUTO_SHADER = "auto_shader"
    CONSTRUCTED_SHADER = "constructed_shader"
    SHADER_PATTERN = "shader_pattern"


@dataclass(frozen=True)
class StaticMetadata:
    """Audit metadata a pattern type can expose without being constructed."""

    shader_files: FrozenSet[str] = frozenset()
    unused_controls: FrozenSet[ControlTag] = frozenset()


@dataclass(frozen=True)
class ComponentType:
    """Registry entry describing one pattern type."""

    name: str
    qualified_name: str
    capabilities: FrozenSet[Capability] = frozenset()
    category: Optional[str] = None
    factory: Optional[Callable[[Any], Any]] = field(default=None, compare=False, repr=False)
    metadata: Optional[Callable[[], StaticMetadata]] = field(
        default=None, compare=False, repr=False
    )
    source_path: Optional[Path] = None
    shader_source: Optional[str] = None

    @property
    def nested_name(self) -> Optional[str]:
        """Name of the nested definition, when the type is declared inside another."""
        if NESTED_SEPARATOR not in self.qualified_name:
            return None
        return self.qualified_name.rsplit(NESTED_SEPARATOR, 1)[1]

    @property
    def outer_name(self) -> str:
        return self.qualified_name.split(NESTED_SEPARATOR, 1)[0]

    @classmethod
    def from_class(cls, klass: type, *, source_path: Path | None = None) -> "ComponentType":
        """Build an entry from the declarations attached by :func:`shader_pattern`."""
        capabilities = frozenset(getattr(klass, _CAPABILITIES_ATTR, frozenset()))
        declared_path = source_path or klass.__dict__.get(_SOURCE_PATH_ATTR) or _defining_file(klass)
        accessor = getattr(klass, "audit_metadata", None)
        return cls(
            name=klass.__name__,
            qualified_name=_qualified_name(klass),
            capabilities=capabilities,
            category=klass.__dict__.get(_CATEGORY_ATTR),
            factory=klass,
            metadata=accessor if callable(accessor) else None,
            source_path=Path(declared_path) if declared_path else None,
            shader_source=klass.__dict__.get(_SHADER_SOURCE_ATTR),
        )


def shader_pattern(
    *capabilities: Capability,
    category: str | None = None,
    shader_source: str | None = None,
    source_path: str | Path | None = None,
) -> Callable[[type], type]:
    """Class decorator declaring a pattern's capabilities at definition time.

    Capabilities accumulate: a class decorated with ``CONSTRUCTED_SHADER`` whose
    base declared ``SHADER_PATTERN`` carries both. Category and shader source
    are not inherited.
    """

    def decorator(klass: type) -> type:
        inherited = frozenset(getattr(klass, _CAPABILITIES_ATTR, frozenset()))
        setattr(klass, _CAPABILITIES_ATTR, inherited | frozenset(capabilities))
        setattr(klass, _CATEGORY_ATTR, category)
        setattr(klass, _SHADER_SOURCE_ATTR, shader_source)
        setattr(klass, _SOURCE_PATH_ATTR, str(source_path) if source_path else None)
        return klass

    return decorator


RegistryItem = Union[ComponentType, type]


class PatternRegistry:
    """Ordered collection of pattern types, unique by qualified name."""

    def __init__(self, items: Iterable[RegistryItem] = ()) -> None:
        self._types: Dict[str, ComponentType] = {}
        self.extend(items)

    def add(self, item: RegistryItem) -> ComponentType:
        component = item if isinstance(item, ComponentType) else ComponentType.from_class(item)
        self._types.setdefault(component.qualified_name, component)
        return self._types[component.qualified_name]

    def extend(self, items: Iterable[RegistryItem]) -> None:
        for item in items:
            self.add(item)

    def get(self, qualified_name: str) -> Optional[ComponentType]:
        return self._types.get(qualified_name)

    def __iter__(self) -> Iterator[ComponentType]:
        return iter(list(self._types.values()))

    def __len__(self) -> int:
        return len(self._types)


def load_registry(spec: str) -> PatternRegistry:
    """Resolve ``module:attribute`` or a ``shaderaudit.registries`` entry point name."""
    if ":" in spec:
        module_name, _, attribute = spec.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise AuditError(f"Cannot import registry module '{module_name}': {exc}") from exc
        try:
            loaded = getattr(module, attribute)
        except AttributeError as exc:
            raise AuditError(f"Registry '{spec}' not found") from exc
        return _coerce_registry(loaded, spec)

    for entry in _iter_entry_points():
        if entry.name != spec:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            raise AuditError(f"Failed to load registry entry point '{spec}': {exc}") from exc
        return _coerce_registry(loaded, spec)

    raise AuditError(f"Unknown registry '{spec}'")


def locate_source(
    qualified_name: str,
    root: Path,
    *,
    prefixes: Sequence[str] = ("src/main/java", "."),
    suffixes: Sequence[str] = (".java", ".py"),
) -> Path:
    """Map a qualified name onto the file defining its outermost type.

    Returns the first existing candidate, or the first candidate when none exist
    so that callers always get a locator to (fail to) read.
    """
    outer = qualified_name.split(NESTED_SEPARATOR, 1)[0]
    relative = outer.replace(".", "/")
    candidates: List[Path] = []
    for prefix in prefixes:
        base = root if prefix in {"", "."} else root / prefix
        for suffix in suffixes:
            for stem in _candidate_stems(outer, suffix):
                candidate = base / f"{stem}{suffix}"
                if candidate.is_file():
                    return candidate
                candidates.append(candidate)
    return candidates[0] if candidates else root / relative


def _candidate_stems(outer: str, suffix: str) -> List[str]:
    """One file per type for Java; Python types also live in their defining module."""
    stems = [outer.replace(".", "/")]
    if suffix in {".py", ".pyi"} and "." in outer:
        stems.append(outer.rsplit(".", 1)[0].replace(".", "/"))
    return stems


def _defining_file(klass: type) -> Optional[str]:
    try:
        return inspect.getsourcefile(klass)
    except (OSError, TypeError):
        return None


def _qualified_name(klass: type) -> str:
    qualname = klass.__qualname__
    if "<locals>." in qualname:
        qualname = qualname.rsplit("<locals>.", 1)[1]
    return f"{klass.__module__}.{qualname.replace('.', NESTED_SEPARATOR)}"


def _coerce_registry(obj: object, spec: str) -> PatternRegistry:
    if isinstance(obj, PatternRegistry):
        return obj
    if isinstance(obj, (list, tuple)):
        return PatternRegistry(obj)
    if callable(obj) and not isinstance(obj, type):
        return _coerce_registry(obj(), spec)
    raise AuditError(
        f"Registry '{spec}' must be a PatternRegistry, a sequence of pattern types, or a factory"
    )


def _iter_entry_points() -> Iterable[importlib_metadata.EntryPoint]:
    entry_points = importlib_metadata.entry_points()
    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]
    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "Capability",
    "ComponentType",
    "PatternRegistry",
    "StaticMetadata",
    "load_registry",
    "locate_source",
    "shader_pattern",
]
