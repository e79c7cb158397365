from reviewgate.gate import EXIT_GATE_FAILED, EXIT_OK, evaluate_gate
from reviewgate.perf import PerfMetricSummary, compare
from reviewgate.result import Finding
from reviewgate.severity import Severity
from reviewgate.size import SizeBudget, evaluate_size_mb


def _finding(severity):
    return Finding("security", severity, "Sources/App.swift", 3, "message")


def test_info_and_warning_findings_pass():
    perf = compare(PerfMetricSummary(launch_mean_ms=100.0), PerfMetricSummary(launch_mean_ms=100.0))
    size = evaluate_size_mb(10.0, None, SizeBudget(max_absolute_mb=20.0))

    decision = evaluate_gate([_finding(Severity.INFO), _finding(Severity.WARNING)], perf, size)

    assert decision.passed
    assert decision.exit_code == EXIT_OK


def test_single_error_finding_fails():
    decision = evaluate_gate([_finding(Severity.INFO), _finding(Severity.ERROR)])

    assert not decision.passed
    assert decision.exit_code == EXIT_GATE_FAILED
    assert decision.reasons == ("1 error-severity finding(s)",)


def test_failing_gates_each_contribute_a_reason():
    perf = compare(PerfMetricSummary(cpu_time_mean_s=2.0), PerfMetricSummary(cpu_time_mean_s=1.0))
    size = evaluate_size_mb(210.0, None, SizeBudget(max_absolute_mb=200.0))

    decision = evaluate_gate([], perf, size)

    assert not decision.passed
    assert decision.reasons == ("performance regressions: 1", "size budget exceeded")


def test_missing_gates_do_not_fail():
    assert evaluate_gate([], None, None).passed


def test_only_error_severity_blocks_merge():
    assert [severity.value for severity in Severity if severity.blocks_merge] == ["error"]
