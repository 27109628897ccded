"""Pipeline orchestration for a single, stateless audit run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from .catalog import ControlCatalog
from .classifier import ComponentClassifier, classify_variant
from .config import AuditConfig
from .discovery import SourceDiscovery
from .introspector import InstanceIntrospector
from .logging import get_logger
from .models import UNCATEGORIZED, AuditEntry, AuditError, ComponentDescriptor, Variant
from .registry import ComponentType, PatternRegistry, load_registry
from .resolver import UsageResolver
from .scanners.directives import DirectiveScanner
from .scanners.source import SourceTextScanner


@dataclass
class AuditRun:
    """Ordered findings plus the shader inventory they were computed against."""

    entries: List[AuditEntry]
    catalog: ControlCatalog
    shader_dir: Path
    shader_inventory: List[str] = field(default_factory=list)


def order_entries(entries: List[AuditEntry]) -> List[AuditEntry]:
    """Sort by category, then display name, then qualified name."""
    return sorted(
        entries,
        key=lambda entry: (
            entry.descriptor.category,
            entry.descriptor.display_name,
            entry.descriptor.qualified_name,
        ),
    )


class Auditor:
    """Classifies, inspects and resolves every registered pattern, one at a time."""

    def __init__(
        self,
        config: AuditConfig,
        *,
        context: Any = None,
        catalog: ControlCatalog | None = None,
    ) -> None:
        self.config = config
        self.context = context
        self.catalog = catalog or config.build_catalog()
        self.logger = get_logger("auditor")

    def run(self, registry: PatternRegistry | None = None, *, resolve: bool = True) -> AuditRun:
        """Audit ``registry``, falling back to the configured or discovered registry.

        With ``resolve=False`` only classification and introspection run, which is
        what the lister needs.
        """
        shader_dir = self.config.shader_dir
        if not shader_dir.is_dir():
            raise AuditError(f"Shader directory not found: {shader_dir}")

        # Fresh scanners per run: file caches must not outlive the run.
        source_scanner = SourceTextScanner()
        registry = self._resolve_registry(registry, source_scanner)
        self.logger.info("Auditing %d pattern types against %s", len(registry), shader_dir)

        classifier = ComponentClassifier(
            shader_dir=shader_dir,
            source_root=self.config.source_root,
            source_prefixes=self.config.source_prefixes,
            source_suffixes=self.config.source_suffixes,
            directive_scanner=DirectiveScanner(),
        )
        introspector = InstanceIntrospector(self.context)
        resolver = UsageResolver(self.catalog, shader_dir=shader_dir, scanner=source_scanner)

        entries: List[AuditEntry] = []
        for component in registry:
            entry = self._audit_component(component, classifier, introspector, resolver, resolve)
            if entry is not None:
                entries.append(entry)

        ordered = order_entries(entries)
        self.logger.info("Audit finished: %d patterns reported", len(ordered))
        return AuditRun(
            entries=ordered,
            catalog=self.catalog,
            shader_dir=shader_dir,
            shader_inventory=self._shader_inventory(shader_dir),
        )

    def _audit_component(
        self,
        component: ComponentType,
        classifier: ComponentClassifier,
        introspector: InstanceIntrospector,
        resolver: UsageResolver,
        resolve: bool,
    ) -> Optional[AuditEntry]:
        try:
            descriptor = classifier.classify(component)
        except Exception as exc:
            self.logger.warning("Could not classify %s: %s", component.qualified_name, exc)
            self.logger.debug("Classification failure detail", exc_info=True)
            # No source locator: only shader evidence can count for this pattern.
            descriptor = ComponentDescriptor(
                display_name=component.name,
                qualified_name=component.qualified_name,
                variant=classify_variant(component.capabilities),
                category=component.category or UNCATEGORIZED,
                inspect_error=f"{type(exc).__name__}: {exc}",
            )
        if descriptor.variant is Variant.UNRECOGNIZED:
            self.logger.debug("Skipping %s: not a shader pattern", component.qualified_name)
            return None

        entry = AuditEntry(descriptor=descriptor)
        try:
            result = introspector.inspect(component, descriptor.display_name)
            descriptor.shader_files.update(result.shader_files)
            descriptor.declared_unused.update(result.declared_unused)
            descriptor.inspect_error = descriptor.inspect_error or result.error
            if resolve:
                entry.findings = resolver.resolve(descriptor)
        except Exception as exc:
            self.logger.warning("Could not audit pattern %s: %s", descriptor.display_name, exc)
            self.logger.debug("Audit failure detail", exc_info=True)
            descriptor.inspect_error = descriptor.inspect_error or f"{type(exc).__name__}: {exc}"
        return entry

    def _resolve_registry(
        self, registry: PatternRegistry | None, scanner: SourceTextScanner
    ) -> PatternRegistry:
        if registry is not None:
            return registry
        if self.config.registry:
            return load_registry(self.config.registry)
        discovery = SourceDiscovery(
            shader_dir=self.config.shader_dir,
            source_root=self.config.source_root,
            shader_suffix=self.config.shader_suffix,
            source_suffixes=[suffix for suffix in self.config.source_suffixes if suffix != ".py"],
            exclude_paths=self.config.exclude_paths,
            rules=self.config.discovery,
            tag_prefix=self.catalog.tag_prefix,
            scanner=scanner,
        )
        return discovery.discover()

    def _shader_inventory(self, shader_dir: Path) -> List[str]:
        suffix = self.config.shader_suffix
        return sorted(path.name for path in shader_dir.iterdir() if path.name.endswith(suffix))


__all__ = ["AuditRun", "Auditor", "order_entries"]
