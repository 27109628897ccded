"""Configuration loading for shaderaudit (.shaderaudit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .catalog import DEFAULT_CATALOG, DEFAULT_TAG_PREFIX, ControlCatalog, ControlCatalogEntry, ControlTag
from .discovery import DiscoveryRules

CONFIG_FILENAME = ".shaderaudit.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CatalogConfig:
    """Catalog overrides declared in .shaderaudit.yml."""

    entries: List[ControlCatalogEntry] = field(default_factory=list)
    replace: bool = False
    tag_prefix: str = DEFAULT_TAG_PREFIX


@dataclass
class ReportConfig:
    """Presentation defaults."""

    format: str = "tsv"
    only_unused: bool = False


@dataclass
class AuditConfig:
    """Represents the settings defined in .shaderaudit.yml."""

    root: Path
    shader_dir: Path
    source_root: Path
    shader_suffix: str = ".fs"
    source_suffixes: List[str] = field(default_factory=lambda: [".java", ".py"])
    source_prefixes: List[str] = field(default_factory=lambda: ["src/main/java", "."])
    exclude_paths: List[str] = field(default_factory=list)
    registry: Optional[str] = None
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    discovery: DiscoveryRules = field(default_factory=DiscoveryRules)
    report: ReportConfig = field(default_factory=ReportConfig)

    def build_catalog(self) -> ControlCatalog:
        return DEFAULT_CATALOG.with_overrides(
            self.catalog.entries,
            replace=self.catalog.replace,
            tag_prefix=self.catalog.tag_prefix,
        )


def load_config(config_path: Path) -> AuditConfig:
    """Load configuration from disk; a missing file yields defaults rooted at its directory."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return _defaults(root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = _defaults(root)
    shader_dir = _as_str(data.get("shader_dir"))
    if shader_dir:
        config.shader_dir = root / shader_dir
    source_root = _as_str(data.get("source_root"))
    if source_root:
        config.source_root = root / source_root
    config.shader_suffix = _as_str(data.get("shader_suffix")) or config.shader_suffix
    config.source_suffixes = _as_str_list(data.get("source_suffixes")) or config.source_suffixes
    config.source_prefixes = _as_str_list(data.get("source_prefixes")) or config.source_prefixes
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.registry = _as_str(data.get("registry"))

    config.catalog = _parse_catalog(data)

    discovery_data = _as_dict(data.get("discovery"))
    if discovery_data:
        defaults = DiscoveryRules()
        config.discovery = DiscoveryRules(
            auto_bases=tuple(_as_str_list(discovery_data.get("auto_bases")) or defaults.auto_bases),
            constructed_bases=tuple(
                _as_str_list(discovery_data.get("constructed_bases")) or defaults.constructed_bases
            ),
            manual_bases=tuple(
                _as_str_list(discovery_data.get("manual_bases")) or defaults.manual_bases
            ),
        )

    report_data = _as_dict(data.get("report"))
    if report_data:
        config.report = ReportConfig(
            format=_as_str(report_data.get("format")) or "tsv",
            only_unused=bool(report_data.get("only_unused", False)),
        )

    return config


def _defaults(root: Path) -> AuditConfig:
    return AuditConfig(root=root, shader_dir=root / "resources" / "shaders", source_root=root)


def _parse_catalog(data: Dict[str, Any]) -> CatalogConfig:
    catalog = CatalogConfig(
        replace=data.get("catalog_replace") is True,
        tag_prefix=_as_str(data.get("tag_reference_prefix")) or DEFAULT_TAG_PREFIX,
    )
    raw_entries = data.get("catalog")
    if raw_entries is None:
        return catalog
    if not isinstance(raw_entries, list):
        raise ConfigError("catalog must be a list of {tag, uniform, alternates} entries")
    for raw in raw_entries:
        if not isinstance(raw, dict):
            raise ConfigError("catalog entries must be mappings")
        tag_name = _as_str(raw.get("tag"))
        tag = ControlTag.parse(tag_name) if tag_name else None
        if tag is None:
            raise ConfigError(f"Unknown control tag in catalog: {tag_name!r}")
        catalog.entries.append(
            ControlCatalogEntry(
                tag=tag,
                uniform_name=_as_str(raw.get("uniform")),
                alternate_terms=tuple(_as_str_list(raw.get("alternates"))),
            )
        )
    return catalog


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["AuditConfig", "CatalogConfig", "ConfigError", "ReportConfig", "load_config"]
