"""Decides, per pattern and per control, whether the control is actually used."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from .catalog import ControlCatalog, ControlCatalogEntry
from .logging import get_logger
from .models import ComponentDescriptor, SourceLocator, UsageFinding, Variant, Verdict
from .scanners.source import SourceTextScanner, scopes_by_indentation

_AUDITED_VARIANTS = (Variant.GENERATED, Variant.CONSTRUCTED, Variant.MANUAL)


class UsageResolver:
    """Combines declared exclusions, shader text and implementation text into verdicts.

    Evidence is consulted in a fixed order and the first hit wins:

    1. the control is in the pattern's declared-unused set -> ``DISABLED``
    2. the control's uniform appears in any bound shader file -> ``FOUND_IN_SHADER``
    3. the direct tag reference appears in the pattern's source scope -> ``FOUND_IN_SOURCE``
    4. any alternate term appears in that scope -> ``FOUND_IN_SOURCE``
    5. otherwise -> ``UNUSED``
    """

    def __init__(
        self,
        catalog: ControlCatalog,
        *,
        shader_dir: Path,
        scanner: SourceTextScanner | None = None,
    ) -> None:
        self.catalog = catalog
        self.shader_dir = shader_dir
        self.scanner = scanner or SourceTextScanner()
        self.logger = get_logger("resolver")

    def resolve(self, descriptor: ComponentDescriptor) -> List[UsageFinding]:
        """Return one finding per catalog entry, or none for unaudited variants."""
        if descriptor.variant not in _AUDITED_VARIANTS:
            return []
        shader_paths = [self.shader_dir / name for name in sorted(descriptor.shader_files)]
        return [
            UsageFinding(
                component=descriptor,
                tag=entry.tag,
                verdict=self.verdict_for(descriptor, entry, shader_paths),
            )
            for entry in self.catalog.entries()
        ]

    def verdict_for(
        self,
        descriptor: ComponentDescriptor,
        entry: ControlCatalogEntry,
        shader_paths: Sequence[Path],
    ) -> Verdict:
        if entry.tag in descriptor.declared_unused:
            return Verdict.DISABLED
        if entry.uniform_name and any(
            self.scanner.contains_token(path, entry.uniform_name) for path in shader_paths
        ):
            return Verdict.FOUND_IN_SHADER
        if self._found_in_source(descriptor, self.catalog.reference_token(entry.tag)):
            return Verdict.FOUND_IN_SOURCE
        if any(self._found_in_source(descriptor, term) for term in entry.alternate_terms):
            return Verdict.FOUND_IN_SOURCE
        return Verdict.UNUSED

    def _found_in_source(self, descriptor: ComponentDescriptor, token: str) -> bool:
        locator = descriptor.source_locator
        if locator is None:
            return False
        scope = self._scope_name(descriptor, locator)
        if scope:
            return self.scanner.contains_token_in_scope(locator.path, scope, token)
        return self.scanner.contains_token(locator.path, token)

    def _scope_name(self, descriptor: ComponentDescriptor, locator: SourceLocator) -> Optional[str]:
        if locator.nested_name:
            return locator.nested_name
        # Top-level classes in a Python module are searched within their own body.
        if scopes_by_indentation(locator.path):
            name = descriptor.qualified_name.rsplit(".", 1)[-1]
            if self.scanner.find_definition_line(locator.path, name) is not None:
                return name
        return None


__all__ = ["UsageResolver"]
