"""Overall pass/fail decision for a review run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .perf import PerfComparison
from .result import Finding
from .size import SizeReport

EXIT_OK = 0
EXIT_GATE_FAILED = 1
EXIT_FATAL = 2


@dataclass(frozen=True)
class GateDecision:
    passed: bool
    reasons: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.passed else EXIT_GATE_FAILED


def evaluate_gate(
    findings: Iterable[Finding],
    perf: Optional[PerfComparison] = None,
    size: Optional[SizeReport] = None,
) -> GateDecision:
    """Fail on any error finding, a failing perf comparison or a failing size report.

    All three checks are evaluated so every reason is reported.
    """

    reasons: List[str] = []
    errors = sum(1 for finding in findings if finding.severity.blocks_merge)
    if errors:
        reasons.append(f"{errors} error-severity finding(s)")
    if perf is not None and not perf.passes:
        reasons.append(f"performance regressions: {len(perf.regressions)}")
    if size is not None and not size.passes:
        reasons.append("size budget exceeded")
    return GateDecision(passed=not reasons, reasons=tuple(reasons))
