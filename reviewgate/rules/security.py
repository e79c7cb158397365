"""Flag insecure transport settings in Swift sources and plists."""

from __future__ import annotations

from typing import List

from reviewgate.result import Finding
from reviewgate.severity import Severity

from . import split_lines


class SecurityRule:
    """Report plain HTTP URLs and App Transport Security opt-outs."""

    name = "security"

    def evaluate(self, path: str, source: str) -> List[Finding]:
        findings: List[Finding] = []
        for index, line in enumerate(split_lines(source)):
            text = line.strip()
            if "http://" in text:
                findings.append(
                    Finding(
                        rule=self.name,
                        severity=Severity.WARNING,
                        file=path,
                        line=index + 1,
                        message="Plain HTTP detected. Use HTTPS or allowlist the domain with an ATS justification.",
                    )
                )
            if "NSAllowsArbitraryLoads" in text:
                findings.append(
                    Finding(
                        rule=self.name,
                        severity=Severity.INFO,
                        file=path,
                        line=index + 1,
                        message="ATS disabled (NSAllowsArbitraryLoads). Ensure this is intentional and documented.",
                    )
                )
        return findings
