from __future__ import annotations

import importlib
import sys
from typing import Any

from .search import LevelReport


class LevelProgressReporter:
    def on_level_complete(self, report: LevelReport) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class NoopLevelProgressReporter(LevelProgressReporter):
    def on_level_complete(self, report: LevelReport) -> None:  # noqa: ARG002
        return

    def close(self) -> None:
        return


class TqdmLevelProgressReporter(LevelProgressReporter):
    def __init__(
        self,
        *,
        total_levels: int,
        refresh_s: float,
        tqdm_cls: Any,
    ) -> None:
        self._completed = 0
        self._solvable = 0
        self._explored = 0
        self._bar = tqdm_cls(
            total=max(0, int(total_levels)),
            desc="Levels",
            unit="lvl",
            dynamic_ncols=True,
            mininterval=float(refresh_s),
            file=sys.stderr,
            leave=True,
        )

    def on_level_complete(self, report: LevelReport) -> None:
        self._completed += 1
        if report.solvable:
            self._solvable += 1
        if report.result is not None:
            self._explored += report.result.explored_states

        self._bar.set_postfix(
            {
                "level": report.level_id,
                "status": report.status,
                "explored": str(self._explored),
                "solvable": f"{self._solvable}/{self._completed}",
            },
            refresh=False,
        )
        self._bar.update(1)

    def close(self) -> None:
        self._bar.close()


def build_level_progress_reporter(
    *,
    enabled: bool,
    total_levels: int,
    refresh_s: float,
    explicit_request: bool,
) -> LevelProgressReporter:
    if not enabled or total_levels <= 0:
        return NoopLevelProgressReporter()

    try:
        tqdm_module = importlib.import_module("tqdm")
    except ImportError:
        if explicit_request:
            print(
                "Progress requested but missing dependency: tqdm. Install with "
                "pip install 'keygate[progress]'.",
                file=sys.stderr,
                flush=True,
            )
        return NoopLevelProgressReporter()

    tqdm_cls = getattr(tqdm_module, "tqdm", None)
    if tqdm_cls is None:
        if explicit_request:
            print(
                "Progress requested but tqdm could not be loaded. Install with "
                "pip install 'keygate[progress]'.",
                file=sys.stderr,
                flush=True,
            )
        return NoopLevelProgressReporter()
    return TqdmLevelProgressReporter(
        total_levels=total_levels,
        refresh_s=refresh_s,
        tqdm_cls=tqdm_cls,
    )
