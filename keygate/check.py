from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from .config import SolverConfig, load_config, resolve_solver_config
from .deadlock import DEADLOCK_MODES
from .level import InvalidLevelError, LevelDescriptor
from .level_loader import load_level_set
from .progress import build_level_progress_reporter
from .search import LevelReport, check_level


def add_solver_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", help="Path to JSON config (solver defaults, env vars expanded)."
    )
    parser.add_argument(
        "--max-states",
        type=int,
        default=None,
        help="Maximum configurations to explore per level (default 50000).",
    )
    parser.add_argument(
        "--deadlock-mode",
        choices=list(DEADLOCK_MODES),
        default=None,
        help=(
            "Deadlock pruning: 'corner' (wall corners only, default) or "
            "'freeze' (also boxes frozen against other boxes)."
        ),
    )
    parser.add_argument(
        "--deadline-s",
        type=float,
        default=None,
        help="Wall-clock budget per level in seconds; the search stops as undecided.",
    )
    parser.add_argument(
        "--progress",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show per-level progress. Defaults to enabled on TTY stderr.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print solver diagnostics to stderr.",
    )


def resolve_config_from_args(args: argparse.Namespace) -> SolverConfig:
    config: dict[str, Any] = load_config(args.config) if args.config else {}
    return resolve_solver_config(
        config,
        {
            "max_states": args.max_states,
            "deadlock_mode": args.deadlock_mode,
            "deadline_s": args.deadline_s,
            "progress": args.progress,
        },
    )


def load_levels(paths: list[str]) -> list[LevelDescriptor]:
    levels: list[LevelDescriptor] = []
    for path in paths:
        levels.extend(load_level_set(path).levels)
    return levels


def format_report(report: LevelReport) -> str:
    if report.result is None:
        return f"{report.level_id}: invalid ({'; '.join(report.errors)})"
    result = report.result
    return (
        f"{report.level_id}: {report.status} "
        f"({result.termination_reason}, explored={result.explored_states})"
    )


def run_checks(
    levels: list[LevelDescriptor],
    solver_config: SolverConfig,
    *,
    debug: bool = False,
) -> list[LevelReport]:
    progress_enabled = (
        solver_config.progress
        if solver_config.progress is not None
        else sys.stderr.isatty()
    )
    reporter = build_level_progress_reporter(
        enabled=progress_enabled,
        total_levels=len(levels),
        refresh_s=solver_config.progress_refresh_s,
        explicit_request=bool(solver_config.progress),
    )
    reports: list[LevelReport] = []
    try:
        for level in levels:
            report = check_level(
                level,
                max_states=solver_config.max_states,
                deadlock_mode=solver_config.deadlock_mode,
                deadline_s=solver_config.deadline_s,
                debug=debug,
            )
            reports.append(report)
            reporter.on_level_complete(report)
    finally:
        reporter.close()
    return reports


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="keygate check",
        description="Check whether levels can be solved: every key covered, goal reachable.",
    )
    parser.add_argument("paths", nargs="+", help="Level files (.json or text grids).")
    parser.add_argument(
        "--json", action="store_true", help="Print reports as a JSON array."
    )
    add_solver_arguments(parser)
    args = parser.parse_args(argv)

    try:
        solver_config = resolve_config_from_args(args)
        levels = load_levels(args.paths)
    except (InvalidLevelError, ValueError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    reports = run_checks(levels, solver_config, debug=args.debug)

    if args.json:
        print(json.dumps([report.to_dict() for report in reports], indent=2))
    else:
        for report in reports:
            print(format_report(report))

    if any(not report.valid for report in reports):
        return 2
    if all(report.solvable for report in reports):
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
