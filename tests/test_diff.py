from reviewgate.diff import (
    changed_lines,
    filter_findings,
    is_line_changed,
    load_diff,
    parse_unified_diff,
)
from reviewgate.result import Finding
from reviewgate.severity import Severity

SINGLE_HUNK = """diff --git a/Sources/App/Feed.swift b/Sources/App/Feed.swift
index 1111111..2222222 100644
--- a/Sources/App/Feed.swift
+++ b/Sources/App/Feed.swift
@@ -10,2 +10,5 @@ struct Feed {
+let a = 1
+let b = 2
+let c = 3
 let d = 4
 let e = 5
"""

MULTI_FILE = """--- a/Sources/A.swift
+++ b/Sources/A.swift
@@ -1,3 +1,3 @@
 import Foundation
-let old = 1
+let new = 1
 print(new)
@@ -40,2 +40,3 @@
 context
+added
 context
--- a/Sources/Gone.swift
+++ /dev/null
@@ -1,2 +0,0 @@
-line one
-line two
--- /dev/null
+++ b/Sources/New.swift
@@ -0,0 +1,2 @@
+first
+second
"""


def test_single_hunk_added_lines():
    files = parse_unified_diff(SINGLE_HUNK)

    assert len(files) == 1
    assert files[0].path == "Sources/App/Feed.swift"
    assert files[0].added_lines == {10, 11, 12}
    assert files[0].removed_lines == set()
    assert is_line_changed("Sources/App/Feed.swift", 12, files)
    assert not is_line_changed("Sources/App/Feed.swift", 13, files)
    assert not is_line_changed("Sources/App/Feed.swift", 14, files)


def test_multiple_files_and_hunks_reset_cursor():
    files = {entry.path: entry for entry in parse_unified_diff(MULTI_FILE)}

    assert list(files) == ["Sources/A.swift", "Sources/Gone.swift", "Sources/New.swift"]
    assert files["Sources/A.swift"].added_lines == {2, 41}
    # removed lines carry the new-file cursor at the point of deletion
    assert files["Sources/A.swift"].removed_lines == {2}
    assert files["Sources/Gone.swift"].added_lines == set()
    assert files["Sources/Gone.swift"].removed_lines == {0}
    assert files["Sources/New.swift"].added_lines == {1, 2}


def test_lines_before_header_are_ignored():
    text = "+not a file line\n-also ignored\n" + SINGLE_HUNK

    files = parse_unified_diff(text)

    assert [entry.path for entry in files] == ["Sources/App/Feed.swift"]
    assert files[0].added_lines == {10, 11, 12}


def test_unparsable_hunk_header_defaults_to_zero():
    text = "--- a/x.swift\n+++ b/x.swift\n@@ garbage @@\n+one\n+two\n"

    files = parse_unified_diff(text)

    assert files[0].added_lines == {0, 1}


def test_changed_lines_without_diff_or_unknown_path():
    files = parse_unified_diff(SINGLE_HUNK)

    assert changed_lines("Sources/App/Feed.swift", None) == set()
    assert changed_lines("Sources/Other.swift", files) == set()
    assert changed_lines("./Sources//App/Feed.swift", files) == {10, 11, 12}


def test_load_diff_reads_file(tmp_path):
    diff_path = tmp_path / "change.diff"
    diff_path.write_text(SINGLE_HUNK, encoding="utf-8")

    files = load_diff(diff_path)

    assert files[0].added_lines == {10, 11, 12}


def test_filter_findings_keeps_added_lines_and_project_paths():
    files = parse_unified_diff(SINGLE_HUNK)
    findings = [
        Finding("security", Severity.WARNING, "Sources/App/Feed.swift", 11, "on added line"),
        Finding("security", Severity.WARNING, "Sources/App/Feed.swift", 13, "on context line"),
        Finding("security", Severity.WARNING, "Sources/Untouched.swift", 1, "untouched file"),
        Finding("test_coverage", Severity.INFO, "/repo", 1, "project level"),
    ]

    scoped = filter_findings(findings, files, keep_paths={"/repo"})

    assert [finding.message for finding in scoped] == ["on added line", "project level"]


def test_paths_match_on_component_suffix():
    files = parse_unified_diff(SINGLE_HUNK)

    # finding paths relative to Sources/ against a repository-root diff
    assert changed_lines("App/Feed.swift", files) == {10, 11, 12}
    assert changed_lines("Feed.swift", files) == {10, 11, 12}
    assert changed_lines("eed.swift", files) == set()
    assert changed_lines("Other/Feed.swift", files) == set()
