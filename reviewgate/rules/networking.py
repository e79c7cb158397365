"""Networking best-practice hints for Swift sources."""

from __future__ import annotations

from typing import List, Optional

from reviewgate.config import RuleConfig
from reviewgate.result import Finding
from reviewgate.severity import Severity

from . import split_lines

REQUEST_CALLS = ("dataTask", "URLSession.shared.data(")
RETRY_MARKERS = ("retry", "Backoff", "Task.sleep")


class NetworkingRule:
    """Suggest retry with backoff around requests and Brotli ``Accept-Encoding``."""

    name = "networking"

    def __init__(self, options: Optional[RuleConfig] = None) -> None:
        options = options or RuleConfig()
        self._require_brotli = options.extra("requireBrotliAcceptEncoding", True)
        self._require_retry = options.extra("requireRetryWithBackoff", True)

    def evaluate(self, path: str, source: str) -> List[Finding]:
        findings: List[Finding] = []
        has_brotli_header = False

        for index, line in enumerate(split_lines(source)):
            text = line.strip()
            if "Accept-Encoding" in text and "br" in text:
                has_brotli_header = True

            if (
                self._require_retry
                and any(call in text for call in REQUEST_CALLS)
                and not any(marker in text for marker in RETRY_MARKERS)
            ):
                findings.append(
                    Finding(
                        self.name,
                        Severity.INFO,
                        path,
                        index + 1,
                        "Consider retry with exponential backoff for transient errors (429/5xx/timeout).",
                    )
                )

        if self._require_brotli and not has_brotli_header:
            findings.append(
                Finding(
                    self.name,
                    Severity.INFO,
                    path,
                    1,
                    "Add `Accept-Encoding: br` (Brotli) where the server supports it to cut payload size.",
                )
            )
        return findings
