"""Execute rules and aggregate their findings in a deterministic order."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from .logging_config import get_logger
from .result import Finding
from .rules import FileRule, ProjectRule
from .utils import read_text_file, relativize

SourceReader = Callable[[Path], str]


def run_file_rules(rules: Sequence[FileRule], path: str, source: str) -> List[Finding]:
    """Run every rule on one file; findings are concatenated in rule order."""

    findings: List[Finding] = []
    for rule in rules:
        findings.extend(rule.evaluate(path, source))
    return findings


def run_project_rules(rules: Sequence[ProjectRule], source_root: Path) -> List[Finding]:
    """Run every project rule once against ``source_root``."""

    findings: List[Finding] = []
    for rule in rules:
        findings.extend(rule.evaluate_project(source_root))
    return findings


def run_files(
    rules: Sequence[FileRule],
    files: Iterable[Path],
    source_root: Optional[Path] = None,
    max_workers: int = 1,
    reader: SourceReader = read_text_file,
    logger: Optional[Any] = None,
) -> List[Finding]:
    """Run file rules over ``files``.

    Findings are ordered by file, then by rule, regardless of ``max_workers``.
    A read error or a rule error is raised unchanged and aborts the run.
    Paths in findings are reported relative to ``source_root`` when given.
    """

    log = logger if logger is not None else get_logger(__name__)
    paths = list(files)

    def evaluate(path: Path) -> List[Finding]:
        display = relativize(path, source_root) if source_root is not None else path.as_posix()
        return run_file_rules(rules, display, reader(path))

    if max_workers <= 1 or len(paths) <= 1:
        per_file = [evaluate(path) for path in paths]
    else:
        # Executor.map yields in submission order and re-raises the first failure.
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            per_file = list(executor.map(evaluate, paths))

    findings: List[Finding] = [finding for batch in per_file for finding in batch]
    log.info("file_rules_finished", files=len(paths), rules=len(rules), findings=len(findings))
    return findings


def count_by_rule(findings: Iterable[Finding]) -> List[Tuple[str, int]]:
    """Return ``(rule, count)`` pairs, most frequent first, ties in first-seen order."""

    counts: dict = {}
    for finding in findings:
        counts[finding.rule] = counts.get(finding.rule, 0) + 1
    return sorted(counts.items(), key=lambda item: -item[1])
