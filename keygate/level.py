from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, TypeAlias

Position: TypeAlias = tuple[int, int]
Direction: TypeAlias = Literal["up", "down", "left", "right"]

DIRECTIONS: tuple[Direction, ...] = ("up", "down", "left", "right")

DIRECTION_DELTAS: dict[Direction, Position] = {
    "up": (0, 1),
    "down": (0, -1),
    "left": (-1, 0),
    "right": (1, 0),
}


class KeygateError(Exception):
    """Base exception for keygate errors."""


class InvalidLevelError(KeygateError, ValueError):
    """Raised when a level definition is malformed or structurally invalid."""


@dataclass(frozen=True, slots=True)
class LevelDescriptor:
    """Immutable description of one puzzle level.

    ``boxes`` is ordered: index ``i`` names the same box for the whole search.
    ``keys`` may contain the goal cell but no wall, box or spawn cell.
    """

    width: int
    height: int
    player_spawn: Position
    goal: Position
    walls: frozenset[Position]
    boxes: tuple[Position, ...]
    keys: tuple[Position, ...]
    level_id: str = "untitled"
    title: str | None = None
    description: str = ""
    difficulty: int = 1

    @property
    def n_boxes(self) -> int:
        return len(self.boxes)

    @property
    def n_keys(self) -> int:
        return len(self.keys)

    def in_bounds(self, pos: Position) -> bool:
        return is_in_bounds(self.width, self.height, pos)

    def to_text(self) -> str:
        board = [[" " for _ in range(self.width)] for _ in range(self.height)]

        def _put(pos: Position, char: str) -> None:
            x, y = pos
            if is_in_bounds(self.width, self.height, pos):
                board[self.height - 1 - y][x] = char

        key_set = set(self.keys)
        for pos in self.walls:
            _put(pos, "#")
        for pos in key_set:
            _put(pos, "g" if pos == self.goal else "k")
        if self.goal not in key_set:
            _put(self.goal, "G")
        for pos in self.boxes:
            _put(pos, "*" if pos in key_set else "$")
        _put(self.player_spawn, "@")
        return "\n".join("".join(row) for row in board)


def is_in_bounds(width: int, height: int, pos: Position) -> bool:
    x, y = pos
    return 0 <= x < width and 0 <= y < height


def make_level(
    *,
    width: int,
    height: int,
    player_spawn: Position,
    goal: Position,
    walls: Iterable[Position] = (),
    boxes: Iterable[Position] = (),
    keys: Iterable[Position] = (),
    level_id: str = "untitled",
    title: str | None = None,
    description: str = "",
    difficulty: int = 1,
) -> LevelDescriptor:
    return LevelDescriptor(
        width=int(width),
        height=int(height),
        player_spawn=_as_position(player_spawn),
        goal=_as_position(goal),
        walls=frozenset(_as_position(pos) for pos in walls),
        boxes=tuple(_as_position(pos) for pos in boxes),
        keys=tuple(_as_position(pos) for pos in keys),
        level_id=level_id,
        title=title,
        description=description,
        difficulty=int(difficulty),
    )


def _as_position(value: Iterable[int]) -> Position:
    x, y = value
    return (int(x), int(y))


def validate_level(level: LevelDescriptor) -> list[str]:
    """Return structural problems with ``level``; an empty list means valid."""
    name = level.level_id
    if level.width <= 0 or level.height <= 0:
        return [f"level {name} has invalid grid dimensions ({level.width}x{level.height})"]

    errors: list[str] = []
    if not level.in_bounds(level.player_spawn):
        errors.append(f"level {name} player spawn {level.player_spawn} is out of bounds")
    if not level.in_bounds(level.goal):
        errors.append(f"level {name} goal {level.goal} is out of bounds")
    if level.player_spawn == level.goal:
        errors.append(f"level {name} player spawn and goal share cell {level.goal}")

    for label, positions in (
        ("wall", sorted(level.walls)),
        ("box", level.boxes),
        ("key", level.keys),
    ):
        for pos in positions:
            if not level.in_bounds(pos):
                errors.append(f"level {name} {label} at {pos} is out of bounds")

    if level.n_boxes < level.n_keys:
        errors.append(
            f"level {name} has {level.n_boxes} boxes but {level.n_keys} keys; "
            "boxes can't be fewer than keys"
        )

    occupied: dict[Position, str] = {level.player_spawn: "player spawn"}
    for label, positions in (("wall", sorted(level.walls)), ("box", level.boxes)):
        for pos in positions:
            if pos in occupied:
                errors.append(
                    f"level {name} {label} at {pos} overlaps {occupied[pos]}"
                )
                continue
            occupied[pos] = label
    for pos in level.keys:
        if pos in occupied:
            errors.append(f"level {name} key at {pos} overlaps {occupied[pos]}")
            continue
        occupied[pos] = "key"

    return errors


def assert_level_valid(level: LevelDescriptor) -> None:
    errors = validate_level(level)
    if errors:
        bullet_list = "\n".join(f"- {error}" for error in errors)
        raise InvalidLevelError(f"level validation failed:\n{bullet_list}")
