"""Assigns each registered pattern type a variant, category and source locator."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from .logging import get_logger
from .models import UNCATEGORIZED, ComponentDescriptor, SourceLocator, Variant
from .registry import Capability, ComponentType, locate_source
from .scanners.directives import DirectiveScanner

# Most specific first: auto and constructed types also carry SHADER_PATTERN.
_PRECEDENCE = (
    (Capability.AUTO_SHADER, Variant.GENERATED),
    (Capability.CONSTRUCTED_SHADER, Variant.CONSTRUCTED),
    (Capability.SHADER_PATTERN, Variant.MANUAL),
)


def classify_variant(capabilities: frozenset) -> Variant:
    for capability, variant in _PRECEDENCE:
        if capability in capabilities:
            return variant
    return Variant.UNRECOGNIZED


class ComponentClassifier:
    """Turns registry entries into component descriptors."""

    def __init__(
        self,
        *,
        shader_dir: Path,
        source_root: Path,
        source_prefixes: Sequence[str] = ("src/main/java", "."),
        source_suffixes: Sequence[str] = (".java", ".py"),
        directive_scanner: DirectiveScanner | None = None,
    ) -> None:
        self.shader_dir = shader_dir
        self.source_root = source_root
        self.source_prefixes = tuple(source_prefixes)
        self.source_suffixes = tuple(source_suffixes)
        self.directive_scanner = directive_scanner or DirectiveScanner()
        self.logger = get_logger("classifier")

    def classify(self, component: ComponentType) -> ComponentDescriptor:
        variant = classify_variant(component.capabilities)
        descriptor = ComponentDescriptor(
            display_name=component.name,
            qualified_name=component.qualified_name,
            variant=variant,
            category=component.category or UNCATEGORIZED,
        )
        if variant is Variant.GENERATED:
            self._apply_shader_directives(component, descriptor)
        elif variant in (Variant.CONSTRUCTED, Variant.MANUAL):
            descriptor.source_locator = self._locate(component)
        self.logger.debug(
            "Classified %s as %s (%s)",
            component.qualified_name,
            variant.value,
            descriptor.category,
        )
        return descriptor

    def _apply_shader_directives(
        self, component: ComponentType, descriptor: ComponentDescriptor
    ) -> None:
        if not component.shader_source:
            return
        facts = self.directive_scanner.scan_file(self.shader_dir / component.shader_source)
        descriptor.shader_files.add(component.shader_source)
        descriptor.declared_unused.update(facts.disabled)
        if facts.name_declared:
            descriptor.display_name = facts.display_name
        if not component.category:
            descriptor.category = facts.category

    def _locate(self, component: ComponentType) -> SourceLocator:
        path: Optional[Path] = component.source_path
        if path is None:
            path = locate_source(
                component.qualified_name,
                self.source_root,
                prefixes=self.source_prefixes,
                suffixes=self.source_suffixes,
            )
        elif not path.is_absolute():
            path = self.source_root / path
        return SourceLocator(path=path, nested_name=component.nested_name)


__all__ = ["ComponentClassifier", "classify_variant"]
