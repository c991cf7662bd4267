"""Report generation: JSON and Markdown output."""

from __future__ import annotations

import json
from pathlib import Path

from contrastmate.models import IssueType, ScanResult
from contrastmate.utils.contrast import color_description
from contrastmate.utils.wcag import format_ratio, suggested_contrast

_ISSUE_LABELS = {
    IssueType.CONTRAST_FAIL: "ERROR",
    IssueType.MISSING_FONT: "WARN",
    IssueType.NO_BACKGROUND: "WARN",
}


def write_json_report(result: ScanResult, output: Path) -> None:
    """Write a scan result as a JSON report."""
    output.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")


def render_markdown_report(result: ScanResult, title: str = "Contrast Report") -> str:
    lines: list[str] = [
        f"# {title}",
        "",
        f"- **Text layers:** {result.total_scanned}",
        f"- **Errors:** {result.error_count}",
        f"- **Warnings:** {result.warning_count}",
        f"- **Passed:** {result.pass_count}",
        f"- **Duration:** {result.scan_duration_ms:.0f} ms",
    ]
    if result.timed_out:
        lines.append("- **Timed out:** yes, results are partial")
    lines += ["", "## Issues", ""]

    issues = [t for t in result.text_layers if t.has_issue]
    if not issues:
        lines.append("No issues found.")
    for layer in issues:
        bg = color_description(layer.background_color) if layer.background_color else "none"
        line = (
            f"- **[{_ISSUE_LABELS[layer.issue_type]}]** `{layer.issue_type.value}` "
            f"{layer.name} ({layer.parent_name}): \"{layer.characters}\" "
            f"{color_description(layer.text_color)} on {bg}, "
            f"{format_ratio(layer.contrast_ratio)} {layer.wcag_level.value}"
        )
        if layer.issue_type == IssueType.CONTRAST_FAIL:
            line += f" (needs {suggested_contrast(layer.is_large_text)})"
        lines.append(line)

    lines.append("")
    return "\n".join(lines)


def write_markdown_report(result: ScanResult, output: Path, title: str = "Contrast Report") -> None:
    """Write a scan result as a Markdown report."""
    output.write_text(render_markdown_report(result, title), encoding="utf-8")
