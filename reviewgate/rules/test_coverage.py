"""Project-level rule that counts unit and UI test files."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from reviewgate.config import RuleConfig
from reviewgate.result import Finding
from reviewgate.severity import Severity
from reviewgate.utils import iter_code_files

DEFAULT_MIN_UNIT_TEST_FILES = 5
DEFAULT_MIN_UI_TEST_FILES = 1


class TestCoverageRule:
    """Require a minimum number of unit and UI test source files in the tree."""

    __test__ = False  # not a pytest test class

    name = "test_coverage"

    def __init__(self, options: Optional[RuleConfig] = None, extensions: tuple[str, ...] = (".swift",)) -> None:
        options = options or RuleConfig()
        self._min_unit = options.threshold("minUnitTestFiles", DEFAULT_MIN_UNIT_TEST_FILES)
        self._min_ui = options.threshold("minUITestFiles", DEFAULT_MIN_UI_TEST_FILES)
        self._extensions = extensions

    def evaluate_project(self, source_root: Path) -> List[Finding]:
        unit_count = 0
        ui_count = 0
        for path in iter_code_files([source_root], extensions=self._extensions):
            lowered = path.relative_to(source_root).as_posix().lower()
            if "tests" not in lowered:
                continue
            if "uitests" in lowered:
                ui_count += 1
            else:
                unit_count += 1

        findings: List[Finding] = []
        location = str(source_root)
        if unit_count < self._min_unit:
            findings.append(
                Finding(
                    self.name,
                    Severity.WARNING,
                    location,
                    1,
                    f"Unit test files: {unit_count} (< {self._min_unit}). Add coverage for core modules.",
                )
            )
        if ui_count < self._min_ui:
            findings.append(
                Finding(
                    self.name,
                    Severity.INFO,
                    location,
                    1,
                    f"UI test files: {ui_count} (< {self._min_ui}). Add at least one UI test for smoke flows.",
                )
            )
        return findings
