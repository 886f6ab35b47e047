from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .level import (
    InvalidLevelError,
    LevelDescriptor,
    Position,
    make_level,
    validate_level,
)

# `#` wall, ` `/`-` floor, `@` player, `$` box, `k` key, `*` box on key,
# `G` goal, `g` goal on key.
_VALID_TEXT_CHARS = {"#", " ", "-", "@", "$", "k", "*", "G", "g"}


@dataclass(frozen=True, slots=True)
class LevelSet:
    name: str
    description: str
    levels: tuple[LevelDescriptor, ...]


def _split_level_blocks(text: str) -> list[tuple[list[str], list[str]]]:
    blocks: list[tuple[list[str], list[str]]] = []
    current_lines: list[str] = []
    current_comments: list[str] = []

    def _flush_block() -> None:
        nonlocal current_lines, current_comments
        if current_lines:
            blocks.append((current_lines, current_comments))
            current_lines = []
            current_comments = []

    for raw_line in text.splitlines():
        if raw_line.startswith(";"):
            if current_lines:
                _flush_block()
            current_comments.append(raw_line[1:].strip())
            continue

        if raw_line.strip() == "":
            _flush_block()
            continue

        current_lines.append(raw_line)

    _flush_block()
    return blocks


def _normalize_title(level_id: str, comments: list[str]) -> str | None:
    for comment in comments:
        text = comment.strip()
        if not text or text == level_id:
            continue
        return text
    return None


def _parse_single_level(
    *, level_id: str, lines: list[str], title: str | None
) -> LevelDescriptor:
    width = max(len(line) for line in lines)
    height = len(lines)

    walls: list[Position] = []
    boxes: list[Position] = []
    keys: list[Position] = []
    player: Position | None = None
    goal: Position | None = None

    for row_idx, line in enumerate(lines):
        y = height - 1 - row_idx
        for x in range(width):
            char = line[x] if x < len(line) else " "
            if char not in _VALID_TEXT_CHARS:
                raise InvalidLevelError(
                    f"level {level_id} has invalid character {char!r} at row {row_idx}, column {x}"
                )
            pos = (x, y)
            if char == "#":
                walls.append(pos)
            if char in {"$", "*"}:
                boxes.append(pos)
            if char in {"k", "*", "g"}:
                keys.append(pos)
            if char == "@":
                if player is not None:
                    raise InvalidLevelError(
                        f"level {level_id} has multiple player positions"
                    )
                player = pos
            if char in {"G", "g"}:
                if goal is not None:
                    raise InvalidLevelError(f"level {level_id} has multiple goals")
                goal = pos

    if player is None:
        raise InvalidLevelError(f"level {level_id} has no player position")
    if goal is None:
        raise InvalidLevelError(f"level {level_id} has no goal")

    return make_level(
        width=width,
        height=height,
        player_spawn=player,
        goal=goal,
        walls=walls,
        boxes=boxes,
        keys=keys,
        level_id=level_id,
        title=title,
    )


def parse_text_levels(text: str, *, set_name: str) -> list[LevelDescriptor]:
    """Parse grid-text levels.

    Boxes are numbered in reading order (top row first, left to right).
    """
    blocks = _split_level_blocks(text)
    if not blocks:
        raise InvalidLevelError("no levels found in text content")

    levels: list[LevelDescriptor] = []
    for index, (lines, comments) in enumerate(blocks, start=1):
        level_id = f"{set_name}:{index}"
        title = _normalize_title(level_id, comments)
        levels.append(_parse_single_level(level_id=level_id, lines=lines, title=title))
    return levels


def _coordinate(value: Any, *, field: str, level_id: str) -> Position:
    if isinstance(value, dict) and "x" in value and "y" in value:
        value = (value["x"], value["y"])
    if (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and all(isinstance(item, int) and not isinstance(item, bool) for item in value)
    ):
        return (value[0], value[1])
    raise InvalidLevelError(
        f"level {level_id} field '{field}' must hold [x, y] integer pairs, got {value!r}"
    )


def _coordinates(payload: dict[str, Any], field: str, level_id: str) -> list[Position]:
    raw = payload.get(field, [])
    if not isinstance(raw, list):
        raise InvalidLevelError(f"level {level_id} field '{field}' must be a list")
    return [_coordinate(item, field=field, level_id=level_id) for item in raw]


def level_from_dict(payload: dict[str, Any], *, default_id: str = "untitled") -> LevelDescriptor:
    if not isinstance(payload, dict):
        raise InvalidLevelError("level entry must be a JSON object")
    level_id = str(payload.get("levelId") or payload.get("levelName") or default_id)

    for field in ("width", "height", "playerSpawn", "playerGoal"):
        if field not in payload:
            raise InvalidLevelError(f"level {level_id} missing field '{field}'")
    width = payload["width"]
    height = payload["height"]
    if not isinstance(width, int) or not isinstance(height, int):
        raise InvalidLevelError(f"level {level_id} width and height must be integers")

    difficulty = payload.get("estimatedDifficulty", 1)
    if not isinstance(difficulty, int) or not 1 <= difficulty <= 10:
        raise InvalidLevelError(
            f"level {level_id} estimatedDifficulty must be an integer in [1, 10]"
        )

    return make_level(
        width=width,
        height=height,
        player_spawn=_coordinate(
            payload["playerSpawn"], field="playerSpawn", level_id=level_id
        ),
        goal=_coordinate(payload["playerGoal"], field="playerGoal", level_id=level_id),
        walls=_coordinates(payload, "wallCoordinates", level_id),
        boxes=_coordinates(payload, "boxCoordinates", level_id),
        keys=_coordinates(payload, "keyCoordinates", level_id),
        level_id=level_id,
        title=payload.get("levelName"),
        description=str(payload.get("levelDescription", "")),
        difficulty=difficulty,
    )


def level_to_dict(level: LevelDescriptor) -> dict[str, Any]:
    return {
        "levelId": level.level_id,
        "levelName": level.title or level.level_id,
        "levelDescription": level.description,
        "estimatedDifficulty": level.difficulty,
        "width": level.width,
        "height": level.height,
        "playerSpawn": list(level.player_spawn),
        "playerGoal": list(level.goal),
        "wallCoordinates": [list(pos) for pos in sorted(level.walls)],
        "boxCoordinates": [list(pos) for pos in level.boxes],
        "keyCoordinates": [list(pos) for pos in level.keys],
    }


def parse_json_levels(text: str, *, set_name: str) -> list[LevelDescriptor]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidLevelError(f"invalid JSON level content: {exc}") from exc

    entries = raw.get("levels") if isinstance(raw, dict) and "levels" in raw else [raw]
    if not isinstance(entries, list) or not entries:
        raise InvalidLevelError("'levels' must be a non-empty list")
    return [
        level_from_dict(entry, default_id=f"{set_name}:{index}")
        for index, entry in enumerate(entries, start=1)
    ]


def load_level_set(path: str | Path) -> LevelSet:
    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(path_obj)
    text = path_obj.read_text()
    if path_obj.suffix.lower() == ".json":
        levels = parse_json_levels(text, set_name=path_obj.stem)
    else:
        levels = parse_text_levels(text, set_name=path_obj.stem)
    return LevelSet(
        name=path_obj.stem,
        description=f"Loaded from {path_obj.name}",
        levels=tuple(levels),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="keygate validate",
        description="Run the structural validity check on level files.",
    )
    parser.add_argument("paths", nargs="+", help="Level files (.json or text grids).")
    args = parser.parse_args(argv)

    errors: list[str] = []
    level_count = 0
    for path in args.paths:
        try:
            level_set = load_level_set(path)
        except (InvalidLevelError, FileNotFoundError) as exc:
            errors.append(f"{path}: {exc}")
            continue
        for level in level_set.levels:
            level_count += 1
            errors.extend(validate_level(level))

    if errors:
        print("Level validation failed:")
        for error in errors:
            print(f"- {error}")
        return 2

    print(f"Level validation passed ({level_count} levels).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
