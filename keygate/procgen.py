from __future__ import annotations

import argparse
import json
import random
import sys
from collections import deque

from .deadlock import has_corner_deadlock
from .level import (
    DIRECTION_DELTAS,
    LevelDescriptor,
    Position,
    is_in_bounds,
    make_level,
)
from .level_loader import level_to_dict
from .reachability import reachable


def parse_grid_size(value: str) -> tuple[int, int]:
    text = value.strip().lower()
    parts = text.split("x")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise ValueError(f"invalid grid size {value!r}; expected '<width>x<height>'")
    return (int(parts[0]), int(parts[1]))


def _interior_cells(width: int, height: int) -> list[Position]:
    return [(x, y) for y in range(1, height - 1) for x in range(1, width - 1)]


def _perimeter_walls(width: int, height: int) -> set[Position]:
    walls: set[Position] = set()
    for y in range(height):
        walls.add((0, y))
        walls.add((width - 1, y))
    for x in range(width):
        walls.add((x, 0))
        walls.add((x, height - 1))
    return walls


def _connected_component(walkable: set[Position]) -> set[Position]:
    if not walkable:
        return set()
    start = min(walkable)
    seen: set[Position] = {start}
    queue: deque[Position] = deque([start])
    while queue:
        x, y = queue.popleft()
        for dx, dy in DIRECTION_DELTAS.values():
            nxt = (x + dx, y + dy)
            if nxt in walkable and nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return seen


def _sample_walls(
    *,
    width: int,
    height: int,
    n_boxes: int,
    wall_density: float,
    rng: random.Random,
    max_tries: int,
) -> set[Position]:
    perimeter = _perimeter_walls(width, height)
    interior = _interior_cells(width, height)

    # Room for boxes, keys, the player, the goal, and some walking space.
    min_open_cells = (2 * n_boxes) + 4
    max_walls = max(0, len(interior) - min_open_cells)
    target_walls = min(max_walls, max(0, int(round(wall_density * len(interior)))))

    for _ in range(max_tries):
        sampled = set(rng.sample(interior, target_walls)) if target_walls else set()
        walkable = set(interior) - sampled
        if _connected_component(walkable) != walkable:
            continue
        return perimeter | sampled

    # Perimeter-only walls when no connected layout was sampled.
    return perimeter


def _legal_reverse_walks(
    *,
    width: int,
    height: int,
    walls: set[Position],
    boxes: list[Position],
    player: Position,
) -> list[Position]:
    legal: list[Position] = []
    for dx, dy in DIRECTION_DELTAS.values():
        nxt = (player[0] + dx, player[1] + dy)
        if not is_in_bounds(width, height, nxt):
            continue
        if nxt in walls or nxt in boxes:
            continue
        legal.append((dx, dy))
    return legal


def _legal_reverse_pulls(
    *,
    width: int,
    height: int,
    walls: set[Position],
    boxes: list[Position],
    player: Position,
) -> list[Position]:
    legal: list[Position] = []
    for dx, dy in DIRECTION_DELTAS.values():
        box_pos = (player[0] + dx, player[1] + dy)
        player_next = (player[0] - dx, player[1] - dy)
        if box_pos not in boxes:
            continue
        if not is_in_bounds(width, height, player_next):
            continue
        if player_next in walls or player_next in boxes:
            continue
        legal.append((dx, dy))
    return legal


def _validate_level_shape(width: int, height: int, n_boxes: int, extra_boxes: int) -> None:
    if width < 5 or height < 5:
        raise ValueError("width and height must both be >= 5")
    if n_boxes < 0 or extra_boxes < 0:
        raise ValueError("n_boxes and extra_boxes must be >= 0")
    if n_boxes + extra_boxes < 1:
        raise ValueError("level needs at least one box")
    interior_count = (width - 2) * (height - 2)
    if (2 * n_boxes) + extra_boxes + 2 > interior_count:
        raise ValueError(
            f"n_boxes={n_boxes}, extra_boxes={extra_boxes} is too many for grid "
            f"{width}x{height}"
        )


def generate_level(
    *,
    width: int,
    height: int,
    n_boxes: int,
    extra_boxes: int = 0,
    seed: int | None = None,
    level_id: str | None = None,
    title: str | None = None,
    wall_density: float = 0.08,
    scramble_steps: int | None = None,
    max_generation_attempts: int = 64,
) -> LevelDescriptor:
    """Generate a level that is solvable by construction.

    Boxes start on the keys and are scrambled with reverse pulls, so
    replaying the scramble backwards covers every key. The goal is picked
    among the cells the player can walk to in that covered configuration.
    """
    _validate_level_shape(width, height, n_boxes, extra_boxes)
    if wall_density < 0.0 or wall_density > 0.35:
        raise ValueError("wall_density must be within [0.0, 0.35]")
    if max_generation_attempts < 1:
        raise ValueError("max_generation_attempts must be >= 1")

    rng = random.Random(seed)
    resolved_level_id = (
        level_id
        if level_id is not None
        else f"procgen:{width}x{height}:k{n_boxes}:s{seed if seed is not None else 'random'}"
    )
    target_steps = (
        int(scramble_steps)
        if scramble_steps is not None
        else max(20, (n_boxes + extra_boxes) * (width + height))
    )
    if target_steps < 1:
        raise ValueError("scramble_steps must be >= 1 when provided")

    for _ in range(max_generation_attempts):
        walls = _sample_walls(
            width=width,
            height=height,
            n_boxes=n_boxes + extra_boxes,
            wall_density=wall_density,
            rng=rng,
            max_tries=32,
        )
        open_cells = [cell for cell in _interior_cells(width, height) if cell not in walls]
        if len(open_cells) < n_boxes + extra_boxes + 2:
            continue

        placed = rng.sample(open_cells, n_boxes + extra_boxes)
        keys = sorted(placed[:n_boxes])
        if has_corner_deadlock(
            boxes=tuple(placed), keys=frozenset(keys), walls=frozenset(walls)
        ):
            continue
        boxes = list(placed)
        player_candidates = [cell for cell in open_cells if cell not in boxes]
        if not player_candidates:
            continue
        finish = rng.choice(player_candidates)
        goal_candidates = reachable(
            finish, walls | set(boxes), width=width, height=height
        )

        player = finish
        pull_count = 0
        for _ in range(target_steps):
            pulls = _legal_reverse_pulls(
                width=width, height=height, walls=walls, boxes=boxes, player=player
            )
            walks = _legal_reverse_walks(
                width=width, height=height, walls=walls, boxes=boxes, player=player
            )
            if not pulls and not walks:
                break

            if pulls and (not walks or rng.random() < 0.72):
                dx, dy = rng.choice(pulls)
                box_pos = (player[0] + dx, player[1] + dy)
                boxes[boxes.index(box_pos)] = player
                player = (player[0] - dx, player[1] - dy)
                pull_count += 1
                continue

            dx, dy = rng.choice(walks)
            player = (player[0] + dx, player[1] + dy)

        if pull_count < max(1, n_boxes // 2):
            continue
        if any(box in keys for box in boxes):
            continue
        if player in keys:
            continue
        goals = sorted(
            cell
            for cell in goal_candidates
            if cell != player and cell not in boxes and cell not in keys
        )
        if not goals:
            continue

        return make_level(
            width=width,
            height=height,
            player_spawn=player,
            goal=rng.choice(goals),
            walls=walls,
            boxes=sorted(boxes),
            keys=keys,
            level_id=resolved_level_id,
            title=title or f"Procedural {width}x{height} ({n_boxes} keys)",
        )

    raise RuntimeError("Failed to generate a procedural level that satisfies constraints.")


def generate_levels(
    *,
    width: int,
    height: int,
    n_boxes: int,
    count: int,
    extra_boxes: int = 0,
    seed: int | None = 0,
    wall_density: float = 0.08,
    scramble_steps: int | None = None,
    level_id_prefix: str | None = None,
) -> list[LevelDescriptor]:
    if count < 1:
        raise ValueError("count must be >= 1")
    prefix = (
        level_id_prefix
        if level_id_prefix is not None
        else f"procgen:{width}x{height}:k{n_boxes}:s{seed if seed is not None else 'random'}"
    )
    levels: list[LevelDescriptor] = []
    for idx in range(count):
        level_seed = None if seed is None else int(seed) + idx
        levels.append(
            generate_level(
                width=width,
                height=height,
                n_boxes=n_boxes,
                extra_boxes=extra_boxes,
                seed=level_seed,
                level_id=f"{prefix}:i{idx + 1}",
                title=f"Procedural {width}x{height} ({n_boxes} keys) #{idx + 1}",
                wall_density=wall_density,
                scramble_steps=scramble_steps,
            )
        )
    return levels


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="keygate generate",
        description="Generate levels that are solvable by construction.",
    )
    parser.add_argument("--size", default="8x8", help="Grid size as '<width>x<height>'.")
    parser.add_argument("--keys", type=int, default=2, help="Number of keys (and boxes).")
    parser.add_argument(
        "--extra-boxes", type=int, default=0, help="Boxes beyond the key count."
    )
    parser.add_argument("--count", type=int, default=1)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--wall-density", type=float, default=0.08)
    parser.add_argument("--scramble-steps", type=int, default=None)
    parser.add_argument(
        "--format", choices=["text", "json"], default="text", help="Output format."
    )
    args = parser.parse_args(argv)

    try:
        width, height = parse_grid_size(args.size)
        levels = generate_levels(
            width=width,
            height=height,
            n_boxes=args.keys,
            count=args.count,
            extra_boxes=args.extra_boxes,
            seed=args.seed,
            wall_density=args.wall_density,
            scramble_steps=args.scramble_steps,
        )
    except (ValueError, RuntimeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.format == "json":
        print(json.dumps({"levels": [level_to_dict(level) for level in levels]}, indent=2))
        return 0

    blocks = [f"; {level.title}\n{level.to_text()}" for level in levels]
    print("\n\n".join(blocks))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
