"""Performance regression gate.

Readers normalize ``.xcresult`` bundles, trace exports (CSV or JSON) and plain
text logs into a :class:`PerfMetricSummary`. Every reader is best-effort: a
metric that cannot be extracted stays ``None`` ("not measured"), which is
never the same as a measured zero. :func:`compare` then flags increases
beyond a percentage tolerance; every tracked metric is lower-is-better.
"""

from __future__ import annotations

import csv
import io
import json
import re
import subprocess
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .logging_config import get_logger


DEFAULT_TOLERANCES: Mapping[str, float] = {
    "launch.mean": 5.0,
    "cpu.mean": 5.0,
    "memory.mean": 5.0,
}

# (tolerance key, summary attribute, unit)
TRACKED_METRICS: Tuple[Tuple[str, str, str], ...] = (
    ("launch.mean", "launch_mean_ms", "ms"),
    ("cpu.mean", "cpu_time_mean_s", "s"),
    ("memory.mean", "memory_mean_mb", "MB"),
)

XCRESULT_TIMEOUT_SECONDS = 120.0
XCRESULT_KEYS: Mapping[str, Tuple[str, ...]] = {
    "launch_mean_ms": ("XCTApplicationLaunchMetric.meanMs", "launch.meanMs"),
    "launch_std_ms": ("XCTApplicationLaunchMetric.stdMs", "launch.stdMs"),
    "cpu_time_mean_s": ("XCTCPUMetric.meanSec", "cpu.meanSec"),
    "memory_mean_mb": ("XCTMemoryMetric.meanMB", "memory.meanMB"),
}
TEST_NAME_KEYS = ("name", "identifier", "testName")

_NUMBER = r"([0-9]+(?:\.[0-9]+)?)"
_LOG_FLAGS = re.IGNORECASE | re.DOTALL
LOG_PATTERNS: Mapping[str, "re.Pattern[str]"] = {
    "launch_mean_ms": re.compile(rf"launch.*?mean[:=]\s*{_NUMBER}\s*ms", _LOG_FLAGS),
    "launch_std_ms": re.compile(rf"launch.*?std(?:dev)?[:=]\s*{_NUMBER}\s*ms", _LOG_FLAGS),
    "cpu_time_mean_s": re.compile(rf"cpu.*?mean[:=]\s*{_NUMBER}\s*s", _LOG_FLAGS),
    "memory_mean_mb": re.compile(rf"mem.*?mean[:=]\s*{_NUMBER}\s*mb", _LOG_FLAGS),
    "dropped_frames": re.compile(r"dropped\s*frames?[:=]\s*([0-9]+)", re.IGNORECASE),
    "jank_events": re.compile(r"jank(?:\s*events?)?[:=]\s*([0-9]+)", re.IGNORECASE),
}

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


@dataclass(frozen=True)
class PerfMetricSummary:
    """Normalized metrics; ``None`` means the metric was not measured."""

    launch_mean_ms: Optional[float] = None
    launch_std_ms: Optional[float] = None
    cpu_time_mean_s: Optional[float] = None
    memory_mean_mb: Optional[float] = None
    dropped_frames: Optional[int] = None
    jank_events: Optional[int] = None
    source: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, item.name) is None for item in fields(self) if item.name != "source")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PerfRegression:
    key: str
    baseline: float
    current: float
    percent: float
    limit: float
    unit: str

    @property
    def message(self) -> str:
        return (
            f"{self.key} regressed by +{self.percent:.1f}% "
            f"(baseline {self.baseline:.1f}{self.unit} -> current {self.current:.1f}{self.unit}; "
            f"limit +{self.limit:.1f}%)"
        )


@dataclass(frozen=True)
class PerfComparison:
    baseline: PerfMetricSummary
    current: PerfMetricSummary
    details: Tuple[PerfRegression, ...] = field(default_factory=tuple)

    @property
    def regressions(self) -> List[str]:
        return [regression.message for regression in self.details]

    @property
    def passes(self) -> bool:
        return not self.details

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseline": self.baseline.to_dict(),
            "current": self.current.to_dict(),
            "regressions": self.regressions,
            "passes": self.passes,
        }


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------
def compare(
    current: PerfMetricSummary,
    baseline: PerfMetricSummary,
    tolerances_percent: Optional[Mapping[str, float]] = None,
) -> PerfComparison:
    """Compare ``current`` against ``baseline``.

    Supplied tolerances override :data:`DEFAULT_TOLERANCES` per key. Metrics
    missing on either side, or with a non-positive baseline, are skipped.
    """

    limits = dict(DEFAULT_TOLERANCES)
    if tolerances_percent:
        limits.update(tolerances_percent)

    details: List[PerfRegression] = []
    for key, attr, unit in TRACKED_METRICS:
        current_value = getattr(current, attr)
        baseline_value = getattr(baseline, attr)
        if current_value is None or baseline_value is None or baseline_value <= 0:
            continue
        percent = (current_value - baseline_value) * 100.0 / baseline_value
        limit = limits.get(key, 0.0)
        if percent > limit:
            details.append(
                PerfRegression(
                    key=key,
                    baseline=float(baseline_value),
                    current=float(current_value),
                    percent=percent,
                    limit=limit,
                    unit=unit,
                )
            )
    return PerfComparison(baseline=baseline, current=current, details=tuple(details))


def parse_tolerances(pairs: Iterable[str], logger: Optional[Any] = None) -> Dict[str, float]:
    """Parse ``key=percent`` pairs such as ``launch.mean=7.5``; bad pairs are skipped."""

    log = logger if logger is not None else get_logger(__name__)
    tolerances: Dict[str, float] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        try:
            if not sep or not key.strip():
                raise ValueError("expected key=percent")
            tolerances[key.strip()] = float(raw)
        except ValueError:
            log.warning("perf_tolerance_ignored", pair=pair)
    return tolerances


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------
def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def _matches_test_name(node: Mapping[str, Any], name_filter: str) -> bool:
    for key in TEST_NAME_KEYS:
        value = node.get(key)
        if isinstance(value, Mapping):
            # xcresulttool wraps scalars as {"_type": ..., "_value": ...}
            value = value.get("_value")
        if isinstance(value, str) and name_filter in value:
            return True
    return False


def _collect_numbers(node: Any, out: Dict[str, float]) -> None:
    if isinstance(node, Mapping):
        for key, value in node.items():
            if isinstance(value, str):
                if "mean" in key.lower():
                    number = _to_float(value)
                    if number is not None:
                        out[key] = number
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                out[key] = float(value)
            else:
                _collect_numbers(value, out)
    elif isinstance(node, list):
        for item in node:
            _collect_numbers(item, out)


def _filtered_roots(node: Any, name_filter: str) -> List[Any]:
    if isinstance(node, Mapping):
        if _matches_test_name(node, name_filter):
            return [node]
        roots: List[Any] = []
        for value in node.values():
            roots.extend(_filtered_roots(value, name_filter))
        return roots
    if isinstance(node, list):
        roots = []
        for item in node:
            roots.extend(_filtered_roots(item, name_filter))
        return roots
    return []


def extract_xcresult_metrics(document: Any, name_filter: Optional[str] = None) -> PerfMetricSummary:
    """Walk an ``xcresulttool`` JSON document for known metric keys."""

    roots = _filtered_roots(document, name_filter) if name_filter else [document]
    numbers: Dict[str, float] = {}
    for root in roots:
        _collect_numbers(root, numbers)

    values: Dict[str, Any] = {}
    for attr, keys in XCRESULT_KEYS.items():
        for key in keys:
            if key in numbers:
                values[attr] = numbers[key]
                break
    return PerfMetricSummary(source="xcresulttool", **values)


def read_xcresult(
    xcresult_path: str,
    test_name_filter: Optional[str] = None,
    timeout: float = XCRESULT_TIMEOUT_SECONDS,
    runner: CommandRunner = subprocess.run,
    logger: Optional[Any] = None,
) -> Optional[PerfMetricSummary]:
    """Query an ``.xcresult`` bundle through ``xcrun xcresulttool``.

    Returns ``None`` when the tool is missing, exits non-zero, times out or
    prints something that is not JSON.
    """

    log = logger if logger is not None else get_logger(__name__)
    command = ["xcrun", "xcresulttool", "get", "--format", "json", "--path", xcresult_path]
    try:
        completed = runner(command, capture_output=True, text=True, timeout=timeout, check=False)
    except (OSError, subprocess.SubprocessError) as exc:
        log.warning("xcresult_query_failed", path=xcresult_path, error=str(exc))
        return None
    if completed.returncode != 0:
        log.warning("xcresult_query_failed", path=xcresult_path, returncode=completed.returncode)
        return None
    try:
        document = json.loads(completed.stdout)
    except ValueError as exc:
        log.warning("xcresult_output_unparsable", path=xcresult_path, error=str(exc))
        return None
    return extract_xcresult_metrics(document, test_name_filter)


def _read_text(path: str, log: Any) -> Optional[str]:
    if not path:
        return None
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("perf_input_unreadable", path=path, error=str(exc))
        return None


def parse_trace_csv(text: str) -> PerfMetricSummary:
    """Parse ``Metric,Mean[,Std]`` rows, e.g. ``Launch,512.3,32.1``."""

    values: Dict[str, Any] = {}
    for row in csv.reader(io.StringIO(text)):
        if len(row) < 2:
            continue
        key = row[0].strip().lower()
        if "launch" in key:
            values["launch_mean_ms"] = _to_float(row[1])
            if len(row) >= 3:
                values["launch_std_ms"] = _to_float(row[2])
        elif "cpu" in key:
            values["cpu_time_mean_s"] = _to_float(row[1])
        elif "memory" in key:
            values["memory_mean_mb"] = _to_float(row[1])
        elif "dropped" in key or "frames" in key:
            values["dropped_frames"] = _to_int(row[1])
        elif "jank" in key:
            values["jank_events"] = _to_int(row[1])
    return PerfMetricSummary(source="trace-csv", **values)


def parse_trace_json(document: Any) -> PerfMetricSummary:
    values: Dict[str, Any] = {}

    def scan(node: Any) -> None:
        if isinstance(node, Mapping):
            for key, value in node.items():
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    lowered = str(key).lower()
                    if "launch" in lowered and "mean" in lowered:
                        values["launch_mean_ms"] = float(value)
                    elif "launch" in lowered and "std" in lowered:
                        values["launch_std_ms"] = float(value)
                    elif "cpu" in lowered and "mean" in lowered:
                        values["cpu_time_mean_s"] = float(value)
                    elif "memory" in lowered and "mean" in lowered:
                        values["memory_mean_mb"] = float(value)
                    elif "dropped" in lowered or "frames" in lowered:
                        values["dropped_frames"] = int(value)
                    elif "jank" in lowered:
                        values["jank_events"] = int(value)
                else:
                    scan(value)
        elif isinstance(node, list):
            for item in node:
                scan(item)

    scan(document)
    return PerfMetricSummary(source="trace-json", **values)


def parse_trace_text(text: str) -> Optional[PerfMetricSummary]:
    """Parse a trace export as JSON, or as CSV when it is not JSON."""

    try:
        document = json.loads(text)
    except ValueError:
        summary = parse_trace_csv(text)
    else:
        summary = parse_trace_json(document)
    return None if summary.is_empty else summary


def read_trace_summary(path: str, logger: Optional[Any] = None) -> Optional[PerfMetricSummary]:
    """Read a trace export (CSV or JSON); ``None`` if nothing could be extracted."""

    text = _read_text(path, logger if logger is not None else get_logger(__name__))
    if text is None:
        return None
    return parse_trace_text(text)


def parse_plain_log(text: str) -> PerfMetricSummary:
    values: Dict[str, Any] = {}
    for attr, pattern in LOG_PATTERNS.items():
        match = pattern.search(text)
        if match is None:
            continue
        if attr in ("dropped_frames", "jank_events"):
            values[attr] = _to_int(match.group(1))
        else:
            values[attr] = _to_float(match.group(1))
    return PerfMetricSummary(source="text", **values)


def read_plain_log(path: str, logger: Optional[Any] = None) -> Optional[PerfMetricSummary]:
    """Extract metrics from a text log such as ``launch mean: 512.3 ms``."""

    text = _read_text(path, logger if logger is not None else get_logger(__name__))
    if text is None:
        return None
    return parse_plain_log(text)


def read_summary(path: Optional[str], logger: Optional[Any] = None) -> Optional[PerfMetricSummary]:
    """Read ``path`` as a trace export, falling back to a plain text log."""

    if not path:
        return None
    text = _read_text(path, logger if logger is not None else get_logger(__name__))
    if text is None:
        return None
    return parse_trace_text(text) or parse_plain_log(text)
