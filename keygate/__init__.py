"""Solvability checking for box-and-key puzzle levels."""

from __future__ import annotations

from .deadlock import (
    DEADLOCK_MODES,
    has_corner_deadlock,
    has_freeze_deadlock,
    is_deadlocked,
)
from .level import (
    DIRECTION_DELTAS,
    DIRECTIONS,
    InvalidLevelError,
    KeygateError,
    LevelDescriptor,
    assert_level_valid,
    make_level,
    validate_level,
)
from .level_loader import (
    LevelSet,
    level_from_dict,
    level_to_dict,
    load_level_set,
    parse_json_levels,
    parse_text_levels,
)
from .pushes import generate_pushes
from .reachability import can_reach, reachable
from .search import (
    MAX_STATES,
    LevelReport,
    PushSearch,
    SolveResult,
    check_level,
    is_goal_state,
    is_solvable,
    solve,
)
from .snapshot import BoardSnapshot, fingerprint, initial_snapshot

__all__ = [
    "BoardSnapshot",
    "DEADLOCK_MODES",
    "DIRECTION_DELTAS",
    "DIRECTIONS",
    "InvalidLevelError",
    "KeygateError",
    "LevelDescriptor",
    "LevelReport",
    "LevelSet",
    "MAX_STATES",
    "PushSearch",
    "SolveResult",
    "assert_level_valid",
    "can_reach",
    "check_level",
    "fingerprint",
    "generate_pushes",
    "has_corner_deadlock",
    "has_freeze_deadlock",
    "initial_snapshot",
    "is_deadlocked",
    "is_goal_state",
    "is_solvable",
    "level_from_dict",
    "level_to_dict",
    "load_level_set",
    "make_level",
    "parse_json_levels",
    "parse_text_levels",
    "reachable",
    "solve",
    "validate_level",
]
