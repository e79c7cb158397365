"""Artifact size budget gate."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .logging_config import get_logger

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class SizeBudget:
    """Size limits in MB / percent; ``None`` disables that gate."""

    max_absolute_mb: Optional[float] = None
    max_diff_mb: Optional[float] = None
    max_increase_percent: Optional[float] = None


@dataclass(frozen=True)
class SizeReport:
    artifact_path: str
    current_mb: float
    baseline_mb: Optional[float] = None
    diff_mb: Optional[float] = None
    diff_percent: Optional[float] = None
    passes: bool = True
    messages: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["messages"] = list(self.messages)
        return data


def bytes_to_mb(size_bytes: int) -> float:
    return size_bytes / BYTES_PER_MB


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def _signed(value: float, digits: int = 2) -> str:
    return f"{'+' if value >= 0 else ''}{value:.{digits}f}"


def evaluate_size_mb(
    current_mb: float,
    baseline_mb: Optional[float],
    budget: SizeBudget,
    artifact_path: str = "",
) -> SizeReport:
    """Evaluate a size in MB against ``budget`` and an optional baseline.

    Each gate contributes one message whether it passes, fails or is not set.
    Without a positive baseline the diff and percent gates cannot be
    evaluated and are reported as skipped.
    """

    messages: List[str] = []
    passes = True

    if budget.max_absolute_mb is not None:
        if current_mb > budget.max_absolute_mb:
            passes = False
            messages.append(
                f"Artifact exceeds absolute budget: {_fmt(current_mb)} MB > {_fmt(budget.max_absolute_mb)} MB"
            )
        else:
            messages.append(
                f"Artifact within absolute budget: {_fmt(current_mb)} MB <= {_fmt(budget.max_absolute_mb)} MB"
            )
    else:
        messages.append(f"No absolute budget set. Current size: {_fmt(current_mb)} MB")

    diff_mb: Optional[float] = None
    diff_percent: Optional[float] = None
    if baseline_mb is not None and baseline_mb > 0:
        diff_mb = current_mb - baseline_mb
        diff_percent = diff_mb * 100.0 / baseline_mb
        trend = f"(baseline {_fmt(baseline_mb)} MB -> current {_fmt(current_mb)} MB)"

        if budget.max_diff_mb is not None:
            if diff_mb > budget.max_diff_mb:
                passes = False
                messages.append(
                    f"Size diff exceeds budget: {_signed(diff_mb)} MB > +{_fmt(budget.max_diff_mb)} MB {trend}"
                )
            else:
                messages.append(
                    f"Size diff within budget: {_signed(diff_mb)} MB <= +{_fmt(budget.max_diff_mb)} MB {trend}"
                )
        else:
            messages.append(f"No diff budget set. Diff: {_signed(diff_mb)} MB")

        if budget.max_increase_percent is not None:
            if diff_percent > budget.max_increase_percent:
                passes = False
                messages.append(
                    f"Size increase percent exceeds gate: {_signed(diff_percent, 1)}% "
                    f"> +{budget.max_increase_percent:.1f}%"
                )
            else:
                messages.append(
                    f"Percent increase within gate: {_signed(diff_percent, 1)}% "
                    f"<= +{budget.max_increase_percent:.1f}%"
                )
        else:
            messages.append(f"No percent budget set. Increase: {_signed(diff_percent, 1)}%")
    else:
        messages.append("No baseline provided. Diff and percent gates skipped.")

    return SizeReport(
        artifact_path=artifact_path,
        current_mb=current_mb,
        baseline_mb=baseline_mb,
        diff_mb=diff_mb,
        diff_percent=diff_percent,
        passes=passes,
        messages=tuple(messages),
    )


def evaluate_size(
    artifact_path: Path,
    baseline_mb: Optional[float],
    budget: SizeBudget,
    logger: Optional[Any] = None,
) -> Optional[SizeReport]:
    """Evaluate the artifact on disk; ``None`` (gate skipped) if it cannot be read."""

    log = logger if logger is not None else get_logger(__name__)
    try:
        size_bytes = artifact_path.stat().st_size
    except OSError as exc:
        log.warning("size_gate_skipped", artifact=str(artifact_path), error=str(exc))
        return None
    report = evaluate_size_mb(bytes_to_mb(size_bytes), baseline_mb, budget, artifact_path=str(artifact_path))
    log.info("size_gate_evaluated", artifact=str(artifact_path), current_mb=round(report.current_mb, 2), passes=report.passes)
    return report


def render_markdown(report: SizeReport) -> str:
    """Markdown block for PR comments and CI artifacts."""

    lines = [
        "### App Size Report",
        f"**Artifact:** `{report.artifact_path}`",
        f"**Current:** {_fmt(report.current_mb)} MB",
    ]
    if report.baseline_mb is not None:
        lines.append(f"**Baseline:** {_fmt(report.baseline_mb)} MB")
    if report.diff_mb is not None:
        lines.append(f"**Diff:** {_signed(report.diff_mb)} MB")
    if report.diff_percent is not None:
        lines.append(f"**Diff %:** {_signed(report.diff_percent, 1)}%")
    lines.append("")
    lines.append(f"**Status:** {'PASS' if report.passes else 'FAIL'}")
    lines.append("")
    lines.append("**Details:**")
    lines.extend(f"- {message}" for message in report.messages)
    return "\n".join(lines) + "\n"


def render_json(report: SizeReport) -> str:
    return json.dumps(report.to_dict(), indent=2, sort_keys=True)
