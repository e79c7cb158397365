"""Markdown, JSON and console renderings of a review result."""

from __future__ import annotations

import json
from typing import List

from . import size as size_report
from .pipeline import ReviewResult
from .result import Finding, Summary, top_findings

FORMATS = ("md", "json")


def render_markdown(result: ReviewResult) -> str:
    lines: List[str] = ["# Code Review Report", ""]
    if result.ai_summary is not None:
        lines.extend([f"## AI Summary: {result.ai_summary.title}", "", result.ai_summary.body, "", "---"])

    lines.append(f"## Findings ({len(result.findings)})")
    for finding in result.findings:
        lines.append(
            f"- **[{finding.severity.value.upper()}] {finding.rule}** - {finding.message}  "
            f"`{finding.file}:{finding.line}`"
        )

    if result.perf is not None:
        lines.extend(["", "## Performance Comparison"])
        lines.append(f"- Passes: {'yes' if result.perf.passes else 'no'}")
        if result.perf.passes:
            lines.append("- No perf regressions against baseline")
        else:
            lines.extend(f"- {message}" for message in result.perf.regressions)

    if result.size is not None:
        lines.extend(["", "## App Size Report", size_report.render_markdown(result.size).rstrip("\n")])

    lines.extend(["", f"**Gate:** {'PASS' if result.passed else 'FAIL'}"])
    lines.extend(f"- {reason}" for reason in result.decision.reasons)
    return "\n".join(lines) + "\n"


def render_json(result: ReviewResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def render(result: ReviewResult, report_format: str) -> str:
    if report_format == "json":
        return render_json(result)
    return render_markdown(result)


def parse_findings(payload: str) -> List[Finding]:
    """Recover findings from :func:`render_json` output."""

    data = json.loads(payload)
    return [Finding.from_dict(item) for item in data.get("findings", [])]


def format_summary_table(result: ReviewResult, max_findings: int = 5) -> str:
    """Create a human-readable summary table for console output."""

    summary = Summary.from_findings(result.findings)
    lines: List[str] = []
    lines.append("Review Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    lines.append(f"Status    : {'PASS' if result.passed else 'FAIL'}")
    lines.append(f"Findings  : {summary.total}")
    if result.perf is not None:
        lines.append(f"Perf gate : {'PASS' if result.perf.passes else 'FAIL'}")
    if result.size is not None:
        lines.append(f"Size gate : {'PASS' if result.size.passes else 'FAIL'}")

    findings = top_findings(result.findings, max_findings)
    if findings:
        lines.append("")
        lines.append("Top Findings")
        lines.append("-" * 40)
        for finding in findings:
            lines.append(f"[{finding.severity.value.upper()}] {finding.rule}: {finding.message}")
            lines.append(f"  Location: {finding.file}:{finding.line}")
    return "\n".join(lines)
