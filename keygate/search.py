from __future__ import annotations

import sys
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Literal, TypeAlias

from .deadlock import DEADLOCK_MODES, DeadlockMode, is_deadlocked
from .level import LevelDescriptor, validate_level
from .pushes import generate_pushes
from .reachability import can_reach
from .snapshot import BoardSnapshot, Fingerprint, fingerprint, initial_snapshot

TerminationReason: TypeAlias = Literal[
    "won",
    "queue_exhausted",
    "state_cap_reached",
    "insufficient_boxes",
    "cancelled",
]

MAX_STATES = 50_000

_PROVEN_REASONS: frozenset[str] = frozenset(
    {"won", "queue_exhausted", "insufficient_boxes"}
)


@dataclass(frozen=True, slots=True)
class SolveResult:
    solvable: bool
    explored_states: int
    visited_states: int
    termination_reason: TerminationReason

    @property
    def proven(self) -> bool:
        """False when the search gave up before reaching a verdict."""
        return self.termination_reason in _PROVEN_REASONS

    def to_dict(self) -> dict[str, Any]:
        return {
            "solvable": self.solvable,
            "proven": self.proven,
            "explored_states": self.explored_states,
            "visited_states": self.visited_states,
            "termination_reason": self.termination_reason,
        }


@dataclass(frozen=True, slots=True)
class LevelReport:
    level_id: str
    valid: bool
    errors: tuple[str, ...]
    result: SolveResult | None

    @property
    def solvable(self) -> bool:
        return self.result is not None and self.result.solvable

    @property
    def status(self) -> str:
        if not self.valid or self.result is None:
            return "invalid"
        if self.result.solvable:
            return "solvable"
        if self.result.proven:
            return "unsolvable"
        return "undecided"

    def to_dict(self) -> dict[str, Any]:
        return {
            "level_id": self.level_id,
            "status": self.status,
            "valid": self.valid,
            "errors": list(self.errors),
            "result": None if self.result is None else self.result.to_dict(),
        }


def is_goal_state(snapshot: BoardSnapshot) -> bool:
    if not snapshot.keys_covered():
        return False
    return can_reach(
        snapshot.player,
        snapshot.goal,
        snapshot.blocked(),
        width=snapshot.width,
        height=snapshot.height,
    )


class PushSearch:
    """Bounded breadth-first search over box configurations.

    One instance runs one search. ``visited`` and the counters stay available
    after ``run()`` for inspection.
    """

    def __init__(
        self,
        level: LevelDescriptor,
        *,
        max_states: int = MAX_STATES,
        deadlock_mode: DeadlockMode = "corner",
        deadline_s: float | None = None,
        should_cancel: Callable[[], bool] | None = None,
        debug: bool = False,
    ) -> None:
        if max_states < 1:
            raise ValueError("max_states must be >= 1")
        if deadlock_mode not in DEADLOCK_MODES:
            raise ValueError(
                f"deadlock_mode must be one of: {', '.join(DEADLOCK_MODES)}"
            )
        if deadline_s is not None and deadline_s <= 0:
            raise ValueError("deadline_s must be > 0 when provided")

        self.level = level
        self.max_states = int(max_states)
        self.deadlock_mode = deadlock_mode
        self.deadline_s = deadline_s
        self.should_cancel = should_cancel
        self.debug = bool(debug)

        self.visited: set[Fingerprint] = set()
        self.explored_states = 0
        self.deadlocked_states = 0
        self.result: SolveResult | None = None

    def _debug_log(self, message: str) -> None:
        if not self.debug:
            return
        print(
            f"[keygate solver] {self.level.level_id}: {message}",
            file=sys.stderr,
            flush=True,
        )

    def _finish(self, solvable: bool, reason: TerminationReason) -> SolveResult:
        self.result = SolveResult(
            solvable=solvable,
            explored_states=self.explored_states,
            visited_states=len(self.visited),
            termination_reason=reason,
        )
        self._debug_log(
            f"{reason} after exploring {self.explored_states} states "
            f"({len(self.visited)} visited, {self.deadlocked_states} deadlocked)"
        )
        return self.result

    def _cancelled(self, deadline: float | None) -> bool:
        if deadline is not None and time.monotonic() >= deadline:
            return True
        return self.should_cancel is not None and bool(self.should_cancel())

    def run(self) -> SolveResult:
        if self.result is not None:
            return self.result

        level = self.level
        if level.n_boxes < level.n_keys:
            self._debug_log(
                f"insufficient boxes: {level.n_boxes} boxes for {level.n_keys} keys"
            )
            return self._finish(False, "insufficient_boxes")

        deadline = (
            time.monotonic() + self.deadline_s if self.deadline_s is not None else None
        )
        start = initial_snapshot(level)
        self.visited.add(fingerprint(start))
        queue: deque[BoardSnapshot] = deque([start])

        while queue and self.explored_states < self.max_states:
            if self._cancelled(deadline):
                return self._finish(False, "cancelled")

            current = queue.popleft()
            self.explored_states += 1

            if is_goal_state(current):
                return self._finish(True, "won")

            for child in generate_pushes(current):
                key = fingerprint(child)
                if key in self.visited:
                    continue
                # Deadlocked children stay in visited but are never enqueued.
                self.visited.add(key)
                if is_deadlocked(child, self.deadlock_mode):
                    self.deadlocked_states += 1
                    continue
                queue.append(child)

        if queue:
            return self._finish(False, "state_cap_reached")
        return self._finish(False, "queue_exhausted")


def solve(
    level: LevelDescriptor,
    *,
    max_states: int = MAX_STATES,
    deadlock_mode: DeadlockMode = "corner",
    deadline_s: float | None = None,
    should_cancel: Callable[[], bool] | None = None,
    debug: bool = False,
) -> SolveResult:
    return PushSearch(
        level,
        max_states=max_states,
        deadlock_mode=deadlock_mode,
        deadline_s=deadline_s,
        should_cancel=should_cancel,
        debug=debug,
    ).run()


def is_solvable(level: LevelDescriptor) -> bool:
    return solve(level).solvable


def check_level(
    level: LevelDescriptor,
    *,
    max_states: int = MAX_STATES,
    deadlock_mode: DeadlockMode = "corner",
    deadline_s: float | None = None,
    should_cancel: Callable[[], bool] | None = None,
    debug: bool = False,
) -> LevelReport:
    """Structural validation followed by the solvability search."""
    errors = validate_level(level)
    if errors:
        return LevelReport(
            level_id=level.level_id, valid=False, errors=tuple(errors), result=None
        )
    result = solve(
        level,
        max_states=max_states,
        deadlock_mode=deadlock_mode,
        deadline_s=deadline_s,
        should_cancel=should_cancel,
        debug=debug,
    )
    return LevelReport(level_id=level.level_id, valid=True, errors=(), result=result)
