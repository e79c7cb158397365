"""Performance hints: long functions, image decoding and heavy SwiftUI bodies."""

from __future__ import annotations

import re
from typing import List, Optional

from reviewgate.config import RuleConfig
from reviewgate.result import Finding
from reviewgate.severity import Severity

from . import split_lines

DEFAULT_MAX_FUNCTION_LENGTH = 80
BODY_LOOKAHEAD_LINES = 20
IMAGE_DECODE_CALLS = ("UIImage(data:", "CGImageSourceCreateImageAtIndex")
HEAVY_BODY_CALLS = ("JSONDecoder().decode(", "Data(contentsOf:")
VIEW_BODY_DECLARATIONS = ("var body: some View", "var body: View")
FUNCTION_START = re.compile(
    r"^(?:@\w+\s+)*(?:(?:public|private|internal|fileprivate|open|static|class|override|final|mutating|nonisolated)\s+)*func\s"
)


class PerformanceRule:
    name = "performance"

    def __init__(self, options: Optional[RuleConfig] = None) -> None:
        options = options or RuleConfig()
        self._max_function_length = options.threshold("maxFunctionLength", DEFAULT_MAX_FUNCTION_LENGTH)
        self._flag_image_decoding = options.extra("flagImageDecodingOnMain", True)
        self._flag_heavy_body = options.extra("flagHeavyWorkInViewBody", True)

    def evaluate(self, path: str, source: str) -> List[Finding]:
        findings: List[Finding] = []
        lines = split_lines(source)

        # Line-based function tracking: a function ends at the first bare "}".
        function_start = 0
        in_function = False

        for index, line in enumerate(lines):
            text = line.strip()
            line_no = index + 1

            if FUNCTION_START.match(text):
                in_function = True
                function_start = line_no
            elif in_function and text == "}":
                length = line_no - function_start
                if length > self._max_function_length:
                    findings.append(
                        Finding(
                            self.name,
                            Severity.INFO,
                            path,
                            function_start,
                            f"Function spans {length} lines (> {self._max_function_length}). "
                            "Consider a refactor for readability and compile time.",
                        )
                    )
                in_function = False

            if self._flag_image_decoding and any(call in text for call in IMAGE_DECODE_CALLS):
                findings.append(
                    Finding(
                        self.name,
                        Severity.WARNING,
                        path,
                        line_no,
                        "Image decoding may occur on the main thread. Decode off-main to avoid UI jank.",
                    )
                )

            if self._flag_heavy_body and any(decl in text for decl in VIEW_BODY_DECLARATIONS):
                window = "\n".join(lines[index:index + BODY_LOOKAHEAD_LINES])
                if any(call in window for call in HEAVY_BODY_CALLS):
                    findings.append(
                        Finding(
                            self.name,
                            Severity.WARNING,
                            path,
                            line_no,
                            "Avoid heavy work inside SwiftUI `body`. Move networking/decoding to a view model or .task.",
                        )
                    )
        return findings
