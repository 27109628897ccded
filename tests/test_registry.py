"""Tests for the pattern registration contract."""

from __future__ import annotations

import sys
import types
from pathlib import Path
from types import SimpleNamespace

import pytest

from shaderaudit.models import AuditError
from shaderaudit.registry import (
    Capability,
    ComponentType,
    PatternRegistry,
    StaticMetadata,
    load_registry,
    locate_source,
    shader_pattern,
)


@shader_pattern(Capability.SHADER_PATTERN)
class BaseShaderPattern:
    def __init__(self, context):
        self.context = context


@shader_pattern(Capability.CONSTRUCTED_SHADER, category="Panels")
class PanelPattern(BaseShaderPattern):
    @classmethod
    def audit_metadata(cls) -> StaticMetadata:
        return StaticMetadata(shader_files=frozenset({"panel.fs"}))


class Holder:
    @shader_pattern(Capability.SHADER_PATTERN, category="Inner")
    class InnerPattern(BaseShaderPattern):
        pass


def test_capabilities_accumulate_through_decorated_bases() -> None:
    component = ComponentType.from_class(PanelPattern)

    assert component.capabilities == frozenset(
        {Capability.SHADER_PATTERN, Capability.CONSTRUCTED_SHADER}
    )
    assert component.category == "Panels"
    assert component.factory is PanelPattern
    assert component.metadata is not None
    assert component.metadata().shader_files == frozenset({"panel.fs"})


def test_category_is_not_inherited() -> None:
    @shader_pattern()
    class Plain(PanelPattern):
        pass

    assert ComponentType.from_class(Plain).category is None


def test_nested_classes_use_dollar_qualified_names() -> None:
    component = ComponentType.from_class(Holder.InnerPattern)

    assert component.qualified_name == f"{__name__}.Holder$InnerPattern"
    assert component.nested_name == "InnerPattern"
    assert component.outer_name == f"{__name__}.Holder"


def test_undecorated_class_has_no_capabilities() -> None:
    class Stranger:
        pass

    assert ComponentType.from_class(Stranger).capabilities == frozenset()


def test_registry_preserves_order_and_drops_duplicates() -> None:
    registry = PatternRegistry([PanelPattern, BaseShaderPattern, PanelPattern])

    assert [component.name for component in registry] == ["PanelPattern", "BaseShaderPattern"]
    assert len(registry) == 2
    assert registry.get(f"{__name__}.PanelPattern") is not None


def test_load_registry_from_module_attribute(monkeypatch) -> None:
    module = types.ModuleType("fake_patterns")
    module.PATTERNS = [PanelPattern]  # type: ignore[attr-defined]
    module.build = lambda: PatternRegistry([BaseShaderPattern])  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "fake_patterns", module)

    assert [c.name for c in load_registry("fake_patterns:PATTERNS")] == ["PanelPattern"]
    assert [c.name for c in load_registry("fake_patterns:build")] == ["BaseShaderPattern"]


def test_load_registry_from_entry_point(monkeypatch) -> None:
    entry = SimpleNamespace(name="te", load=lambda: [PanelPattern])

    class EntryPoints(list):
        def select(self, **kwargs):
            return self if kwargs.get("group") == "shaderaudit.registries" else []

    monkeypatch.setattr(
        "shaderaudit.registry.importlib_metadata.entry_points",
        lambda: EntryPoints([entry]),
    )

    assert [c.name for c in load_registry("te")] == ["PanelPattern"]


def test_load_registry_failures_are_fatal() -> None:
    with pytest.raises(AuditError):
        load_registry("definitely_not_a_module_xyz:PATTERNS")
    with pytest.raises(AuditError):
        load_registry("shaderaudit.registry:NOPE")
    with pytest.raises(AuditError):
        load_registry("no-such-entry-point")


def test_locate_source_prefers_existing_candidates(tmp_path: Path) -> None:
    java = tmp_path / "src" / "main" / "java" / "demo" / "config" / "PanelConfig.java"
    java.parent.mkdir(parents=True)
    java.write_text("class PanelConfig {}", encoding="utf-8")

    found = locate_source("demo.config.PanelConfig$Alpha", tmp_path)
    missing = locate_source("demo.Other", tmp_path)

    assert found == java
    assert missing == tmp_path / "src" / "main" / "java" / "demo" / "Other.java"


def test_from_class_defaults_to_defining_module() -> None:
    component = ComponentType.from_class(BaseShaderPattern)

    assert component.source_path is not None
    assert component.source_path.name == Path(__file__).name


def test_locate_source_maps_python_types_to_their_module(tmp_path: Path) -> None:
    module = tmp_path / "patterns" / "panels.py"
    module.parent.mkdir(parents=True)
    module.write_text("class Alpha:\n    pass\n", encoding="utf-8")

    found = locate_source("patterns.panels.Alpha", tmp_path, suffixes=(".java", ".py"))

    assert found == module
