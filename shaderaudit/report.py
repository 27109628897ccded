"""Text renderings of audit runs: TSV, pipe tables and JSON."""

from __future__ import annotations

import json
from collections import Counter
from typing import Dict, List, Sequence

from .auditor import AuditRun
from .models import AuditEntry, Variant

FORMATS = ("tsv", "table", "json")

_BASE_COLUMNS = ("Category", "Pattern Name", "Type", "Shader Files", "File Path")


def select_entries(run: AuditRun, *, only_unused: bool = False) -> List[AuditEntry]:
    if not only_unused:
        return list(run.entries)
    return [entry for entry in run.entries if entry.unused_tags]


def shader_usage(run: AuditRun) -> Dict[str, List[str]]:
    """Map every shader in the inventory (and every bound shader) to the patterns using it."""
    usage: Dict[str, List[str]] = {name: [] for name in run.shader_inventory}
    for entry in run.entries:
        for shader in sorted(entry.descriptor.shader_files):
            usage.setdefault(shader, []).append(entry.descriptor.display_name)
    return dict(sorted(usage.items()))


def summarize(run: AuditRun) -> Dict[str, object]:
    variants = Counter(entry.descriptor.variant for entry in run.entries)
    dangling = sum(len(entry.unused_tags) for entry in run.entries)
    return {
        "total": len(run.entries),
        "auto": variants.get(Variant.GENERATED, 0),
        "constructed": variants.get(Variant.CONSTRUCTED, 0),
        "manual": variants.get(Variant.MANUAL, 0),
        "dangling_controls": dangling,
        "patterns_with_dangling_controls": sum(1 for entry in run.entries if entry.unused_tags),
        "inspect_failures": sum(1 for entry in run.entries if entry.descriptor.inspect_error),
    }


def render(run: AuditRun, fmt: str = "tsv", *, only_unused: bool = False, verdicts: bool = True) -> str:
    """Render ``run`` in one of :data:`FORMATS`; ``verdicts=False`` gives the plain listing."""
    if fmt not in FORMATS:
        raise ValueError(f"Unknown report format '{fmt}'. Expected one of: {', '.join(FORMATS)}")
    entries = select_entries(run, only_unused=only_unused)
    if fmt == "json":
        return _render_json(run, entries, verdicts=verdicts)

    header, rows = _rows(run, entries, verdicts=verdicts)
    lines = _render_tsv(header, rows) if fmt == "tsv" else _render_table(header, rows)
    lines.append("")
    lines.extend(_render_usage(run))
    lines.append("")
    lines.extend(_render_summary(run, verdicts=verdicts))
    return "\n".join(lines) + "\n"


def _rows(run: AuditRun, entries: Sequence[AuditEntry], *, verdicts: bool) -> tuple[List[str], List[List[str]]]:
    header = list(_BASE_COLUMNS)
    if verdicts:
        header.extend(tag.value for tag in run.catalog.tags())
    rows: List[List[str]] = []
    for entry in entries:
        descriptor = entry.descriptor
        row = [
            descriptor.category,
            descriptor.display_name,
            descriptor.variant.value,
            ", ".join(sorted(descriptor.shader_files)),
            descriptor.file_path,
        ]
        if verdicts:
            by_tag = {finding.tag: finding.verdict.value for finding in entry.findings}
            row.extend(by_tag.get(tag, "") for tag in run.catalog.tags())
        rows.append(row)
    return header, rows


def _render_tsv(header: Sequence[str], rows: Sequence[Sequence[str]]) -> List[str]:
    return ["\t".join(header), *("\t".join(row) for row in rows)]


def _render_table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> List[str]:
    widths = [len(column) for column in header]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    def _line(cells: Sequence[str]) -> str:
        padded = (cell.ljust(width) for cell, width in zip(cells, widths))
        return "| " + " | ".join(padded) + " |"

    separator = "|" + "|".join("-" * (width + 2) for width in widths) + "|"
    return [_line(header), separator, *(_line(row) for row in rows)]


def _render_usage(run: AuditRun) -> List[str]:
    lines = ["Shader File Usage:", "=================="]
    for shader, patterns in shader_usage(run).items():
        used_by = ", ".join(patterns) if patterns else "[Unused]"
        lines.append(f"  {shader:<30} {used_by}")
    return lines


def _render_summary(run: AuditRun, *, verdicts: bool) -> List[str]:
    summary = summarize(run)
    lines = [
        "Summary:",
        "--------",
        f"Total shader patterns found: {summary['total']}",
        f"  Auto-generated patterns: {summary['auto']}",
        f"  Constructed patterns: {summary['constructed']}",
        f"  Manual shader patterns: {summary['manual']}",
    ]
    if verdicts:
        lines.append(
            f"Dangling controls: {summary['dangling_controls']} "
            f"in {summary['patterns_with_dangling_controls']} patterns"
        )
    failures = [entry for entry in run.entries if entry.descriptor.inspect_error]
    if failures:
        lines.append(f"Patterns that could not be inspected: {len(failures)}")
        for entry in failures:
            lines.append(f"  {entry.descriptor.display_name}: {entry.descriptor.inspect_error}")
    return lines


def _render_json(run: AuditRun, entries: Sequence[AuditEntry], *, verdicts: bool) -> str:
    payload = {
        "patterns": [_entry_to_dict(entry, verdicts=verdicts) for entry in entries],
        "shader_usage": shader_usage(run),
        "summary": summarize(run),
    }
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


def _entry_to_dict(entry: AuditEntry, *, verdicts: bool) -> Dict[str, object]:
    descriptor = entry.descriptor
    data: Dict[str, object] = {
        "name": descriptor.display_name,
        "qualified_name": descriptor.qualified_name,
        "type": descriptor.variant.value,
        "category": descriptor.category,
        "shader_files": sorted(descriptor.shader_files),
        "file_path": descriptor.file_path,
        "declared_unused": sorted(tag.value for tag in descriptor.declared_unused),
        "inspect_error": descriptor.inspect_error,
    }
    if verdicts:
        data["controls"] = [
            {"tag": finding.tag.value, "verdict": finding.verdict.value}
            for finding in entry.findings
        ]
        data["unused"] = [tag.value for tag in entry.unused_tags]
    return data


__all__ = ["FORMATS", "render", "select_entries", "shader_usage", "summarize"]
