"""Tests for the shader directive tokenizer."""

from __future__ import annotations

from pathlib import Path

from shaderaudit.catalog import ControlTag
from shaderaudit.scanners.directives import (
    DEFAULT_SHADER_CATEGORY,
    DirectiveKind,
    DirectiveScanner,
    has_auto_marker,
    tokenize,
)


def test_scan_extracts_name_category_and_disables() -> None:
    text = """
#pragma name("Neon Ribbons")
#pragma LXCategory("Native Shaders")
#pragma TEControl.WOW1.Disable
#pragma TEControl.wowtrigger.disable
uniform float iWow2;
"""
    facts = DirectiveScanner().scan(text, "neon_ribbons.fs")

    assert facts.display_name == "Neon Ribbons"
    assert facts.category == "Native Shaders"
    assert facts.disabled == {ControlTag.WOW1, ControlTag.WOWTRIGGER}
    assert facts.is_auto is True


def test_keywords_are_case_insensitive() -> None:
    facts = DirectiveScanner().scan('#PRAGMA Name("Loud")\n#pragma lxcategory("Odd")\n', "x.fs")

    assert facts.display_name == "Loud"
    assert facts.category == "Odd"


def test_missing_directives_fall_back_independently() -> None:
    facts = DirectiveScanner().scan('#pragma LXCategory("Combo")\n', "plasma.wave.fs")

    assert facts.display_name == "plasma.wave"
    assert facts.category == "Combo"
    assert facts.name_declared is False


def test_malformed_directives_are_ignored() -> None:
    text = """
#pragma name(Unquoted)
#pragma LXCategory("")
#pragma TEControl.NOT_A_TAG.Disable
#pragma TEControl.SPIN.Range(0.0, 1.0)
"""
    facts = DirectiveScanner().scan(text, "broken.fs")

    assert facts.display_name == "broken"
    assert facts.category == DEFAULT_SHADER_CATEGORY
    assert facts.disabled == set()
    # The malformed name directive still carries the auto-shader marker.
    assert facts.is_auto is True


def test_commented_directives_do_not_count() -> None:
    text = '// #pragma TEControl.WOW1.Disable\n// #pragma name("Nope")\n'
    facts = DirectiveScanner().scan(text, "quiet.fs")

    assert facts.disabled == set()
    assert facts.display_name == "quiet"
    assert has_auto_marker(text) is False


def test_first_name_directive_wins() -> None:
    facts = DirectiveScanner().scan('#pragma name("First")\n#pragma name("Second")\n', "a.fs")

    assert facts.display_name == "First"


def test_tokenize_reports_line_numbers() -> None:
    directives = list(tokenize('void main() {}\n#pragma auto\n#pragma TEControl.SIZE.Disable\n'))

    assert [(d.kind, d.line) for d in directives] == [
        (DirectiveKind.AUTO, 2),
        (DirectiveKind.DISABLE, 3),
    ]
    assert directives[1].argument == "SIZE"


def test_scan_file_tolerates_missing_file(tmp_path: Path) -> None:
    facts = DirectiveScanner().scan_file(tmp_path / "missing.fs")

    assert facts.display_name == "missing"
    assert facts.category == DEFAULT_SHADER_CATEGORY
    assert facts.is_auto is False


def test_uppercase_disable_directive_is_honoured() -> None:
    text = "#PRAGMA AUTO\n#PRAGMA TECONTROL.WOW1.DISABLE\nuniform float iWow1;\n"

    facts = DirectiveScanner().scan(text, "loud.fs")

    assert facts.is_auto is True
    assert facts.disabled == {ControlTag.WOW1}
