from __future__ import annotations

from collections import deque
from typing import AbstractSet

from .level import DIRECTION_DELTAS, Position, is_in_bounds


def reachable(
    origin: Position,
    blocked: AbstractSet[Position],
    *,
    width: int,
    height: int,
) -> frozenset[Position]:
    """Cells connected to ``origin`` by 4-neighbour steps through open cells.

    ``origin`` itself is always included; callers guarantee it is in bounds
    and not blocked.
    """
    seen: set[Position] = {origin}
    queue: deque[Position] = deque([origin])
    while queue:
        x, y = queue.popleft()
        for dx, dy in DIRECTION_DELTAS.values():
            nxt = (x + dx, y + dy)
            if not is_in_bounds(width, height, nxt):
                continue
            if nxt in blocked or nxt in seen:
                continue
            seen.add(nxt)
            queue.append(nxt)
    return frozenset(seen)


def can_reach(
    origin: Position,
    target: Position,
    blocked: AbstractSet[Position],
    *,
    width: int,
    height: int,
) -> bool:
    if origin == target:
        return True
    seen: set[Position] = {origin}
    queue: deque[Position] = deque([origin])
    while queue:
        current = queue.popleft()
        if current == target:
            return True
        x, y = current
        for dx, dy in DIRECTION_DELTAS.values():
            nxt = (x + dx, y + dy)
            if not is_in_bounds(width, height, nxt):
                continue
            if nxt in blocked or nxt in seen:
                continue
            seen.add(nxt)
            queue.append(nxt)
    return False
