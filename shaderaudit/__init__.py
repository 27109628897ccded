"""Audit shader patterns for controls that are exposed but never used."""

from .auditor import AuditRun, Auditor
from .catalog import DEFAULT_CATALOG, ControlCatalog, ControlCatalogEntry, ControlTag
from .models import AuditEntry, AuditError, ComponentDescriptor, UsageFinding, Variant, Verdict
from .registry import Capability, ComponentType, PatternRegistry, StaticMetadata, shader_pattern

__version__ = "0.1.0"

__all__ = [
    "AuditEntry",
    "AuditError",
    "AuditRun",
    "Auditor",
    "Capability",
    "ComponentDescriptor",
    "ComponentType",
    "ControlCatalog",
    "ControlCatalogEntry",
    "ControlTag",
    "DEFAULT_CATALOG",
    "PatternRegistry",
    "StaticMetadata",
    "UsageFinding",
    "Variant",
    "Verdict",
    "shader_pattern",
]
