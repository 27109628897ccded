"""Tests for variant classification and descriptor seeding."""

from __future__ import annotations

from pathlib import Path

import pytest

from shaderaudit.catalog import ControlTag
from shaderaudit.classifier import ComponentClassifier, classify_variant
from shaderaudit.models import UNCATEGORIZED, Variant
from shaderaudit.registry import Capability, ComponentType


@pytest.mark.parametrize(
    ("capabilities", "expected"),
    [
        ({Capability.AUTO_SHADER, Capability.SHADER_PATTERN}, Variant.GENERATED),
        ({Capability.CONSTRUCTED_SHADER, Capability.SHADER_PATTERN}, Variant.CONSTRUCTED),
        ({Capability.SHADER_PATTERN}, Variant.MANUAL),
        (set(), Variant.UNRECOGNIZED),
    ],
)
def test_classify_variant_precedence(capabilities, expected) -> None:
    assert classify_variant(frozenset(capabilities)) is expected


def test_constructed_wins_over_manual(tmp_path: Path) -> None:
    classifier = ComponentClassifier(shader_dir=tmp_path, source_root=tmp_path)
    component = ComponentType(
        name="Alpha",
        qualified_name="demo.PanelConfig$Alpha",
        capabilities=frozenset({Capability.SHADER_PATTERN, Capability.CONSTRUCTED_SHADER}),
        category="Panels",
    )

    descriptor = classifier.classify(component)

    assert descriptor.variant is Variant.CONSTRUCTED
    assert descriptor.category == "Panels"
    assert descriptor.source_locator is not None
    assert descriptor.source_locator.nested_name == "Alpha"
    assert descriptor.source_locator.path == tmp_path / "src" / "main" / "java" / "demo" / "PanelConfig.java"


def test_manual_without_marker_is_uncategorized(tmp_path: Path) -> None:
    classifier = ComponentClassifier(shader_dir=tmp_path, source_root=tmp_path)
    component = ComponentType(
        name="Gamma",
        qualified_name="demo.Gamma",
        capabilities=frozenset({Capability.SHADER_PATTERN}),
        source_path=Path("patterns/Gamma.java"),
    )

    descriptor = classifier.classify(component)

    assert descriptor.variant is Variant.MANUAL
    assert descriptor.category == UNCATEGORIZED
    assert descriptor.source_locator.path == tmp_path / "patterns" / "Gamma.java"
    assert descriptor.source_locator.is_nested is False


def test_generated_reads_directives_and_has_no_locator(tmp_path: Path) -> None:
    (tmp_path / "ribbons.fs").write_text(
        '#pragma name("Ribbons")\n#pragma LXCategory("Native")\n#pragma TEControl.SPIN.Disable\n',
        encoding="utf-8",
    )
    classifier = ComponentClassifier(shader_dir=tmp_path, source_root=tmp_path)
    component = ComponentType(
        name="ribbons",
        qualified_name="auto:ribbons.fs",
        capabilities=frozenset({Capability.AUTO_SHADER, Capability.SHADER_PATTERN}),
        shader_source="ribbons.fs",
    )

    descriptor = classifier.classify(component)

    assert descriptor.variant is Variant.GENERATED
    assert descriptor.display_name == "Ribbons"
    assert descriptor.category == "Native"
    assert descriptor.source_locator is None
    assert descriptor.shader_files == {"ribbons.fs"}
    assert descriptor.declared_unused == {ControlTag.SPIN}


def test_generated_without_category_directive_uses_auto_shader(tmp_path: Path) -> None:
    (tmp_path / "plain.fs").write_text("#pragma auto\n", encoding="utf-8")
    classifier = ComponentClassifier(shader_dir=tmp_path, source_root=tmp_path)
    component = ComponentType(
        name="plain",
        qualified_name="auto:plain.fs",
        capabilities=frozenset({Capability.AUTO_SHADER}),
        shader_source="plain.fs",
    )

    descriptor = classifier.classify(component)

    assert descriptor.display_name == "plain"
    assert descriptor.category == "Auto Shader"


def test_unrecognized_has_no_locator(tmp_path: Path) -> None:
    classifier = ComponentClassifier(shader_dir=tmp_path, source_root=tmp_path)
    descriptor = classifier.classify(ComponentType(name="Solid", qualified_name="demo.Solid"))

    assert descriptor.variant is Variant.UNRECOGNIZED
    assert descriptor.source_locator is None
