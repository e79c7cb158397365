"""Concurrency hygiene hints for Swift sources."""

from __future__ import annotations

from typing import List, Optional

from reviewgate.config import RuleConfig
from reviewgate.result import Finding
from reviewgate.severity import Severity

from . import split_lines

DECODE_CALLS = ("JSONDecoder().decode(",)
BACKGROUND_MARKERS = ("Task.detached", "DispatchQueue.global().async")
TYPE_PREFIXES = ("struct ", "class ", "final class ", "actor ")


class ConcurrencyRule:
    """Flag synchronous decoding on the main actor and types without isolation."""

    name = "concurrency"

    def __init__(self, options: Optional[RuleConfig] = None) -> None:
        options = options or RuleConfig()
        self._warn_main_actor_blocking = options.extra("warnMainActorBlocking", True)
        self._enforce_sendable = options.extra("enforceSendable", True)

    def evaluate(self, path: str, source: str) -> List[Finding]:
        findings: List[Finding] = []
        for index, line in enumerate(split_lines(source)):
            text = line.strip()

            if (
                self._warn_main_actor_blocking
                and any(call in text for call in DECODE_CALLS)
                and not any(marker in text for marker in BACKGROUND_MARKERS)
            ):
                findings.append(
                    Finding(
                        self.name,
                        Severity.WARNING,
                        path,
                        index + 1,
                        "Potential synchronous JSON decode on main. Move to Task.detached or a background queue.",
                    )
                )

            if self._enforce_sendable and self._declares_type(text):
                isolated = "@MainActor" in text or text.startswith("actor ")
                if "Sendable" not in text and not isolated:
                    findings.append(
                        Finding(
                            self.name,
                            Severity.INFO,
                            path,
                            index + 1,
                            "Consider `Sendable` or actor/@MainActor isolation for concurrency-critical types.",
                        )
                    )
        return findings

    @staticmethod
    def _declares_type(text: str) -> bool:
        # allow a leading attribute such as "@MainActor final class Foo"
        stripped = text
        while stripped.startswith("@"):
            _, _, stripped = stripped.partition(" ")
        for modifier in ("public ", "internal ", "private ", "fileprivate "):
            if stripped.startswith(modifier):
                stripped = stripped[len(modifier):]
        if stripped.startswith(("class func ", "class var ", "class let ")):
            return False
        return stripped.startswith(TYPE_PREFIXES)
