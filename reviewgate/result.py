"""Core result data structures for the review gate."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.ERROR,
    Severity.WARNING,
    Severity.INFO,
)


@dataclass(frozen=True)
class Finding:
    """A single issue reported by a rule."""

    rule: str
    severity: Severity
    file: str
    line: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Finding":
        return cls(
            rule=str(data["rule"]),
            severity=Severity(str(data["severity"]).lower()),
            file=str(data["file"]),
            line=int(data["line"]),
            message=str(data["message"]),
        )

    def as_tuple(self) -> Tuple[str, str, str, int, str]:
        return (self.rule, self.severity.value, self.file, self.line, self.message)


@dataclass
class Summary:
    """Aggregate finding counts by severity."""

    error: int = 0
    warning: int = 0
    info: int = 0

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> "Summary":
        summary = cls()
        for finding in findings:
            summary.increment(finding.severity)
        return summary

    def increment(self, severity: Severity) -> None:
        attr = severity.value
        setattr(self, attr, getattr(self, attr) + 1)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value.upper(), getattr(self, severity.value)) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(getattr(self, severity.value) for severity in SEVERITY_ORDER)


def top_findings(findings: Sequence[Finding], limit: int = 5) -> List[Finding]:
    """Return findings ordered by severity ranking, stable within a severity."""

    ordered = sorted(findings, key=lambda finding: -finding.severity.rank)
    return ordered[:limit]
