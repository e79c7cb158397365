"""Detect SwiftUI controls that lack accessibility labels."""

from __future__ import annotations

from typing import List, Optional

from reviewgate.config import RuleConfig
from reviewgate.result import Finding
from reviewgate.severity import Severity

from . import split_lines

LABEL_MARKERS = (".accessibilityLabel(", "accessibilityHidden(true)")


class AccessibilityRule:
    """Warn on ``Image(`` and hint on ``Button(`` without a label on the same line."""

    name = "accessibility"

    def __init__(self, options: Optional[RuleConfig] = None) -> None:
        options = options or RuleConfig()
        self._require_image_labels = options.extra("requireLabelsForImages", True)
        self._require_button_labels = options.extra("requireLabelsForButtons", True)

    def evaluate(self, path: str, source: str) -> List[Finding]:
        findings: List[Finding] = []
        for index, line in enumerate(split_lines(source)):
            text = line.strip()
            labelled = any(marker in text for marker in LABEL_MARKERS)
            if labelled:
                continue
            if self._require_image_labels and "Image(" in text:
                findings.append(
                    Finding(self.name, Severity.WARNING, path, index + 1, "SwiftUI Image missing accessibilityLabel")
                )
            if self._require_button_labels and "Button(" in text:
                findings.append(
                    Finding(self.name, Severity.INFO, path, index + 1, "SwiftUI Button missing accessibilityLabel (hint)")
                )
        return findings
