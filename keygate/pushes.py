from __future__ import annotations

from .level import DIRECTION_DELTAS, DIRECTIONS
from .reachability import reachable
from .snapshot import BoardSnapshot


def generate_pushes(snapshot: BoardSnapshot) -> list[BoardSnapshot]:
    """Every snapshot one legal box push away from ``snapshot``.

    The player may walk any distance through open cells before pushing, so a
    push is legal when the cell behind the box is in the player's reachable
    set, not merely adjacent to the player.
    """
    walkable = reachable(
        snapshot.player,
        snapshot.blocked(),
        width=snapshot.width,
        height=snapshot.height,
    )
    children: list[BoardSnapshot] = []
    for box_index, (bx, by) in enumerate(snapshot.boxes):
        for direction in DIRECTIONS:
            dx, dy = DIRECTION_DELTAS[direction]
            new_box_pos = (bx + dx, by + dy)
            player_needed = (bx - dx, by - dy)
            if not snapshot.in_bounds(new_box_pos) or snapshot.is_wall(new_box_pos):
                continue
            if any(
                other == new_box_pos
                for other_index, other in enumerate(snapshot.boxes)
                if other_index != box_index
            ):
                continue
            if player_needed not in walkable:
                continue
            children.append(snapshot.with_push(box_index, new_box_pos))
    return children
