from __future__ import annotations

from typing import Literal, TypeAlias

from .level import Position, is_in_bounds
from .snapshot import BoardSnapshot

Axis: TypeAlias = Literal["horizontal", "vertical"]
DeadlockMode: TypeAlias = Literal["corner", "freeze"]

DEADLOCK_MODES: tuple[DeadlockMode, ...] = ("corner", "freeze")


def has_corner_deadlock(
    *,
    boxes: tuple[Position, ...],
    keys: frozenset[Position],
    walls: frozenset[Position],
) -> bool:
    # Only walls count as corner sides; the grid edge does not.
    for x, y in boxes:
        if (x, y) in keys:
            continue
        wall_x = (x - 1, y) in walls or (x + 1, y) in walls
        wall_y = (x, y + 1) in walls or (x, y - 1) in walls
        if wall_x and wall_y:
            return True
    return False


def _axis_steps(axis: Axis) -> tuple[Position, Position]:
    if axis == "horizontal":
        return ((-1, 0), (1, 0))
    return ((0, -1), (0, 1))


def _is_axis_blocked(
    *,
    box: Position,
    axis: Axis,
    boxes: frozenset[Position],
    walls: frozenset[Position],
    width: int,
    height: int,
    fixed: frozenset[Position],
) -> bool:
    # One immovable side blocks the whole axis.
    for dx, dy in _axis_steps(axis):
        neighbor = (box[0] + dx, box[1] + dy)
        if not is_in_bounds(width, height, neighbor) or neighbor in walls:
            return True
        if neighbor in fixed:
            return True
        if neighbor in boxes and _is_frozen(
            box=neighbor,
            boxes=boxes,
            walls=walls,
            width=width,
            height=height,
            fixed=fixed,
        ):
            return True
    return False


def _is_frozen(
    *,
    box: Position,
    boxes: frozenset[Position],
    walls: frozenset[Position],
    width: int,
    height: int,
    fixed: frozenset[Position],
) -> bool:
    # ``fixed`` holds boxes already assumed immovable further up the chain.
    fixed = fixed | {box}
    for axis in ("horizontal", "vertical"):
        if not _is_axis_blocked(
            box=box,
            axis=axis,
            boxes=boxes,
            walls=walls,
            width=width,
            height=height,
            fixed=fixed,
        ):
            return False
    return True


def has_freeze_deadlock(
    *,
    width: int,
    height: int,
    walls: frozenset[Position],
    boxes: frozenset[Position],
    keys: frozenset[Position],
) -> bool:
    """True when more off-key boxes are frozen than there are spare boxes.

    A box is frozen when both of its axes are blocked by walls, the grid edge
    or other frozen boxes. Frozen boxes never move again, so once fewer
    movable boxes remain than uncovered keys the state cannot be won.
    """
    spare = len(boxes) - len(keys)
    frozen_off_key = 0
    for box in sorted(boxes):
        if box in keys:
            continue
        if _is_frozen(
            box=box,
            boxes=boxes,
            walls=walls,
            width=width,
            height=height,
            fixed=frozenset(),
        ):
            frozen_off_key += 1
            if frozen_off_key > spare:
                return True
    return False


def is_deadlocked(snapshot: BoardSnapshot, mode: DeadlockMode = "corner") -> bool:
    if mode not in DEADLOCK_MODES:
        raise ValueError(f"deadlock mode must be one of: {', '.join(DEADLOCK_MODES)}")
    keys = frozenset(snapshot.keys)
    if has_corner_deadlock(boxes=snapshot.boxes, keys=keys, walls=snapshot.walls):
        return True
    if mode == "corner":
        return False
    return has_freeze_deadlock(
        width=snapshot.width,
        height=snapshot.height,
        walls=snapshot.walls,
        boxes=frozenset(snapshot.boxes),
        keys=keys,
    )
