"""Command-line entry point for the review gate."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, List

from .config import load_config
from .errors import ConfigError, ReviewError
from .gate import EXIT_FATAL
from .logging_config import configure_logging, get_logger
from .perf import DEFAULT_TOLERANCES, parse_tolerances
from .pipeline import PerfRequest, ReviewRequest, ReviewResult, SizeRequest, run_review
from .report import FORMATS, format_summary_table, render
from .size import SizeBudget
from .utils.code import DEFAULT_EXTENSIONS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reviewgate",
        description="Static review rules plus performance and size regression gates for CI",
    )
    parser.add_argument("source_root", help="Root directory of the sources to review.")
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="md",
        type=str.lower,
        help="Report format (defaults to md).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        default=None,
        help="Write the report to this file instead of stdout.",
    )
    parser.add_argument("--diff", dest="diff_path", default=None, help="Unified diff of the change under review.")
    parser.add_argument(
        "--changed-only",
        action="store_true",
        help="Only report file findings on lines added by --diff.",
    )
    parser.add_argument("--config", dest="config_path", default=None, help="YAML/JSON config path.")
    parser.add_argument(
        "--extension",
        dest="extensions",
        action="append",
        default=[],
        help=f"Source file extension to scan (repeatable, defaults to {', '.join(DEFAULT_EXTENSIONS)}).",
    )
    parser.add_argument("--workers", type=int, default=1, help="Threads used to evaluate files.")

    perf = parser.add_argument_group("performance gate")
    perf.add_argument("--xcresult", dest="xcresult_path", default=None, help="XCTest .xcresult bundle.")
    perf.add_argument("--perf-current", dest="perf_current", default=None, help="Trace export or text log for current.")
    perf.add_argument("--perf-baseline", dest="perf_baseline", default=None, help="Trace export or text log for baseline.")
    perf.add_argument("--perf-test-filter", dest="perf_test_filter", default=None, help="Substring to select a perf test.")
    perf.add_argument(
        "--perf-tol",
        dest="perf_tolerances",
        nargs="+",
        action="extend",
        default=[],
        metavar="KEY=PERCENT",
        help=f"Tolerance overrides, keys: {', '.join(DEFAULT_TOLERANCES)}.",
    )

    size = parser.add_argument_group("size gate")
    size.add_argument("--artifact", "--ipa", dest="artifact_path", default=None, help="Built artifact to measure.")
    size.add_argument("--size-baseline", type=float, default=None, help="Baseline size in MB.")
    size.add_argument("--size-abs", type=float, default=None, help="Absolute budget in MB.")
    size.add_argument("--size-diff", type=float, default=None, help="Max allowed increase in MB.")
    size.add_argument("--size-pct", type=float, default=None, help="Max allowed increase in percent.")

    parser.add_argument("--log-level", default="WARNING", help="Log level for stderr output.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Shortcut for --log-level INFO.")
    return parser


def build_request(args: argparse.Namespace, logger: Any = None) -> ReviewRequest:
    extensions = tuple(ext if ext.startswith(".") else f".{ext}" for ext in args.extensions) or DEFAULT_EXTENSIONS
    perf = PerfRequest(
        xcresult_path=args.xcresult_path,
        test_name_filter=args.perf_test_filter,
        current_path=args.perf_current,
        baseline_path=args.perf_baseline,
        tolerances=parse_tolerances(args.perf_tolerances, logger=logger),
    )
    size = None
    if args.artifact_path:
        size = SizeRequest(
            artifact_path=args.artifact_path,
            baseline_mb=args.size_baseline,
            budget=SizeBudget(
                max_absolute_mb=args.size_abs,
                max_diff_mb=args.size_diff,
                max_increase_percent=args.size_pct,
            ),
        )
    return ReviewRequest(
        source_root=Path(args.source_root),
        diff_path=args.diff_path,
        changed_only=args.changed_only,
        extensions=extensions,
        max_workers=max(1, args.workers),
        perf=perf if perf.requested else None,
        size=size,
    )


def write_output(result: ReviewResult, output_path: str | None, report_format: str) -> None:
    payload = render(result, report_format)
    if output_path:
        print(format_summary_table(result))
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
        print(f"\nReport written to {output_path}")
    else:
        print(payload)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("INFO" if args.verbose else args.log_level)
    logger = get_logger("reviewgate")

    try:
        config = load_config(args.config_path, logger=logger)
        result = run_review(build_request(args, logger), config, logger=logger)
        write_output(result, args.output_path, args.format)
    except (ConfigError, ReviewError, OSError) as exc:
        sys.stderr.write(f"Fatal: {exc}\n")
        return EXIT_FATAL
    except Exception as exc:
        logger.debug("review_crashed", exc_info=True)
        sys.stderr.write(f"Fatal: {type(exc).__name__}: {exc}\n")
        return EXIT_FATAL
    return result.decision.exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
