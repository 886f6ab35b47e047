from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from .level import LevelDescriptor, Position, is_in_bounds

Fingerprint: TypeAlias = tuple[Position, tuple[Position, ...]]


@dataclass(frozen=True, slots=True)
class BoardSnapshot:
    """One node of the push search graph.

    Only ``player`` and ``boxes`` change between nodes; everything else is
    carried over from the level for the lifetime of a search.
    """

    player: Position
    boxes: tuple[Position, ...]
    keys: tuple[Position, ...]
    walls: frozenset[Position]
    width: int
    height: int
    goal: Position

    def in_bounds(self, pos: Position) -> bool:
        return is_in_bounds(self.width, self.height, pos)

    def is_wall(self, pos: Position) -> bool:
        return pos in self.walls

    def blocked(self) -> frozenset[Position]:
        return self.walls.union(self.boxes)

    def keys_covered(self) -> bool:
        box_set = set(self.boxes)
        return all(key in box_set for key in self.keys)

    def with_push(self, box_index: int, new_box_pos: Position) -> BoardSnapshot:
        old_box_pos = self.boxes[box_index]
        boxes = list(self.boxes)
        boxes[box_index] = new_box_pos
        return BoardSnapshot(
            player=old_box_pos,
            boxes=tuple(boxes),
            keys=self.keys,
            walls=self.walls,
            width=self.width,
            height=self.height,
            goal=self.goal,
        )


def initial_snapshot(level: LevelDescriptor) -> BoardSnapshot:
    return BoardSnapshot(
        player=level.player_spawn,
        boxes=tuple(level.boxes),
        keys=tuple(level.keys),
        walls=frozenset(level.walls),
        width=level.width,
        height=level.height,
        goal=level.goal,
    )


def fingerprint(snapshot: BoardSnapshot) -> Fingerprint:
    """Order-independent visited-set key: player plus boxes sorted by (x, y)."""
    return (snapshot.player, tuple(sorted(snapshot.boxes)))
