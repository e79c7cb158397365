from reviewgate.size import (
    BYTES_PER_MB,
    SizeBudget,
    evaluate_size,
    evaluate_size_mb,
    render_markdown,
)


def test_absolute_budget_exceeded_cites_both_values():
    report = evaluate_size_mb(210.0, None, SizeBudget(max_absolute_mb=200.0))

    assert not report.passes
    assert "210.00 MB > 200.00 MB" in report.messages[0]


def test_within_absolute_budget_without_baseline_reports_skipped_gates():
    report = evaluate_size_mb(190.0, None, SizeBudget(max_absolute_mb=200.0))

    assert report.passes
    assert report.diff_mb is None
    assert report.diff_percent is None
    assert report.messages[-1] == "No baseline provided. Diff and percent gates skipped."


def test_unset_gates_are_noted():
    report = evaluate_size_mb(105.0, 100.0, SizeBudget())

    assert report.passes
    assert report.messages == (
        "No absolute budget set. Current size: 105.00 MB",
        "No diff budget set. Diff: +5.00 MB",
        "No percent budget set. Increase: +5.0%",
    )


def test_diff_and_percent_gates_fail_independently():
    budget = SizeBudget(max_diff_mb=10.0, max_increase_percent=2.0)

    report = evaluate_size_mb(105.0, 100.0, budget)

    assert not report.passes
    assert report.diff_mb == 5.0
    assert report.diff_percent == 5.0
    assert report.messages[1].startswith("Size diff within budget: +5.00 MB")
    assert report.messages[2].startswith("Size increase percent exceeds gate: +5.0%")


def test_size_decrease_passes_every_gate():
    budget = SizeBudget(max_absolute_mb=200.0, max_diff_mb=0.0, max_increase_percent=0.0)

    report = evaluate_size_mb(95.0, 100.0, budget)

    assert report.passes
    assert report.diff_mb == -5.0


def test_evaluate_size_reads_artifact(tmp_path):
    artifact = tmp_path / "App.ipa"
    artifact.write_bytes(b"\0" * (2 * BYTES_PER_MB))

    report = evaluate_size(artifact, 1.0, SizeBudget(max_increase_percent=50.0))

    assert report.current_mb == 2.0
    assert report.diff_percent == 100.0
    assert not report.passes
    assert report.artifact_path == str(artifact)


def test_missing_artifact_skips_gate(tmp_path):
    assert evaluate_size(tmp_path / "missing.ipa", None, SizeBudget(max_absolute_mb=1.0)) is None


def test_render_markdown_includes_status_and_details():
    report = evaluate_size_mb(210.0, 200.0, SizeBudget(max_absolute_mb=200.0), artifact_path="App.ipa")

    text = render_markdown(report)

    assert "**Artifact:** `App.ipa`" in text
    assert "**Diff:** +10.00 MB" in text
    assert "**Status:** FAIL" in text
    assert "- Artifact exceeds absolute budget: 210.00 MB > 200.00 MB" in text
