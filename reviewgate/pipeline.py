"""Run the full review: rules, optional diff scoping, perf and size gates."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from . import diff as diff_utils
from .ai import AISummary, SuggestionProvider, build_provider
from .config import BotConfig
from .errors import ReviewError
from .gate import GateDecision, evaluate_gate
from .logging_config import get_logger
from .perf import PerfComparison, compare, read_summary, read_xcresult
from .result import Finding
from .rules.registry import build_file_rules, build_project_rules
from .runner import run_files, run_project_rules
from .size import SizeBudget, SizeReport, evaluate_size
from .utils import iter_code_files
from .utils.code import DEFAULT_EXTENSIONS


@dataclass(frozen=True)
class PerfRequest:
    xcresult_path: Optional[str] = None
    test_name_filter: Optional[str] = None
    current_path: Optional[str] = None
    baseline_path: Optional[str] = None
    tolerances: Mapping[str, float] = field(default_factory=dict)

    @property
    def requested(self) -> bool:
        return bool(self.xcresult_path or self.current_path)


@dataclass(frozen=True)
class SizeRequest:
    artifact_path: str
    baseline_mb: Optional[float] = None
    budget: SizeBudget = field(default_factory=SizeBudget)


@dataclass(frozen=True)
class ReviewRequest:
    source_root: Path
    diff_path: Optional[str] = None
    changed_only: bool = False
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    max_workers: int = 1
    perf: Optional[PerfRequest] = None
    size: Optional[SizeRequest] = None


@dataclass
class ReviewResult:
    findings: List[Finding]
    decision: GateDecision
    perf: Optional[PerfComparison] = None
    size: Optional[SizeReport] = None
    ai_summary: Optional[AISummary] = None

    @property
    def passed(self) -> bool:
        return self.decision.passed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.ai_summary.to_dict() if self.ai_summary else None,
            "findings": [finding.to_dict() for finding in self.findings],
            "performance": self.perf.to_dict() if self.perf else None,
            "size": self.size.to_dict() if self.size else None,
            "passed": self.passed,
            "reasons": list(self.decision.reasons),
        }


def evaluate_perf(request: PerfRequest, logger: Any) -> Optional[PerfComparison]:
    """Compare current metrics with the baseline; ``None`` when either side is missing."""

    if request.xcresult_path:
        current = read_xcresult(request.xcresult_path, request.test_name_filter, logger=logger)
    elif request.current_path:
        current = read_summary(request.current_path, logger=logger)
    else:
        return None
    baseline = read_summary(request.baseline_path, logger=logger)

    if current is None or baseline is None:
        logger.warning(
            "perf_gate_skipped",
            current_available=current is not None,
            baseline_available=baseline is not None,
        )
        return None
    comparison = compare(current, baseline, request.tolerances)
    logger.info("perf_gate_evaluated", passes=comparison.passes, regressions=len(comparison.regressions))
    return comparison


def run_review(
    request: ReviewRequest,
    config: BotConfig,
    provider: Optional[SuggestionProvider] = None,
    logger: Optional[Any] = None,
) -> ReviewResult:
    """Run rules and gates, then compute the decision from everything gathered.

    Rule errors and unreadable source files propagate; perf and size inputs
    degrade to a skipped gate.
    """

    log = (logger if logger is not None else get_logger(__name__)).bind(source_root=str(request.source_root))
    source_root = request.source_root
    if not source_root.is_dir():
        raise ReviewError(f"Source root is not a directory: {source_root}")

    files = list(iter_code_files([source_root], extensions=request.extensions))
    log.info("source_files_found", count=len(files))

    file_rules = build_file_rules(config, logger=log)
    findings = run_files(file_rules, files, source_root=source_root, max_workers=request.max_workers, logger=log)

    project_rules = build_project_rules(config, logger=log)
    project_findings = run_project_rules(project_rules, source_root)
    findings.extend(project_findings)

    if request.diff_path and request.changed_only:
        diff_files = diff_utils.load_diff(Path(request.diff_path))
        before = len(findings)
        findings = diff_utils.filter_findings(
            findings, diff_files, keep_paths={finding.file for finding in project_findings}
        )
        log.info("findings_scoped_to_diff", before=before, after=len(findings), diff_files=len(diff_files))

    perf = evaluate_perf(request.perf, log) if request.perf and request.perf.requested else None

    size = None
    if request.size is not None:
        size = evaluate_size(Path(request.size.artifact_path), request.size.baseline_mb, request.size.budget, logger=log)

    summarizer = provider if provider is not None else build_provider(config.ai, logger=log)
    ai_summary = summarizer.summarize(findings, request.diff_path)

    decision = evaluate_gate(findings, perf, size)
    log.info("review_finished", findings=len(findings), passed=decision.passed, reasons=list(decision.reasons))
    return ReviewResult(findings=findings, decision=decision, perf=perf, size=size, ai_summary=ai_summary)
