"""Reads bound shader files and declared-unused controls from pattern types.

Static metadata accessors are preferred. Otherwise a transient instance is
constructed against the host context, read, and disposed before returning,
including when reading fails. Failures never escape :meth:`inspect`.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional, Set

from .catalog import ControlTag
from .logging import get_logger
from .registry import ComponentType


@dataclass
class IntrospectionResult:
    """What could be learned about one pattern type."""

    shader_files: Set[str] = field(default_factory=set)
    declared_unused: Set[ControlTag] = field(default_factory=set)
    origin: str = "none"
    error: Optional[str] = None


class InstanceIntrospector:
    """Inspects pattern types one at a time against a shared host context."""

    def __init__(self, context: Any = None) -> None:
        self.context = context
        self.logger = get_logger("introspector")

    def inspect(self, component: ComponentType, display_name: str | None = None) -> IntrospectionResult:
        label = display_name or component.name
        try:
            if component.metadata is not None:
                metadata = component.metadata()
                return IntrospectionResult(
                    shader_files=_shader_names(metadata.shader_files),
                    declared_unused=_control_tags(metadata.unused_controls),
                    origin="static",
                )
            if component.factory is None:
                return IntrospectionResult()
            with self.acquire(component) as instance:
                return IntrospectionResult(
                    shader_files=_instance_shader_files(instance),
                    declared_unused=_control_tags(getattr(instance, "unused_controls", ())),
                    origin="instance",
                )
        except Exception as exc:
            self.logger.warning("Could not inspect pattern %s: %s", label, exc)
            return IntrospectionResult(error=f"{type(exc).__name__}: {exc}")

    @contextmanager
    def acquire(self, component: ComponentType) -> Iterator[Any]:
        """Construct a transient instance and dispose of it on every exit path."""
        if component.factory is None:
            raise TypeError(f"{component.qualified_name} has no constructor")
        instance = component.factory(self.context)
        try:
            yield instance
        finally:
            self._dispose(instance, component.name)

    def _dispose(self, instance: Any, label: str) -> None:
        dispose = getattr(instance, "dispose", None)
        if not callable(dispose):
            return
        try:
            dispose()
        except Exception as exc:
            self.logger.warning("Disposing pattern %s failed: %s", label, exc)


def _instance_shader_files(instance: Any) -> Set[str]:
    names = _shader_names(getattr(instance, "shader_files", ()))
    for shader in getattr(instance, "shaders", ()) or ():
        name = getattr(shader, "shader_name", None)
        if callable(name):
            name = name()
        if isinstance(name, str):
            names.update(_shader_names([name]))
    return names


def _shader_names(values: Iterable[Any]) -> Set[str]:
    return {value for value in values or () if isinstance(value, str) and value}


def _control_tags(values: Iterable[Any]) -> Set[ControlTag]:
    tags: Set[ControlTag] = set()
    for value in values or ():
        tag = value if isinstance(value, ControlTag) else ControlTag.parse(str(value))
        if tag is not None:
            tags.add(tag)
    return tags


__all__ = ["InstanceIntrospector", "IntrospectionResult"]
