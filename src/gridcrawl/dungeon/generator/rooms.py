from __future__ import annotations

import logging
from typing import List

from gridcrawl.config import GenerationConfig
from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.map.grid import GridMap, Rect
from gridcrawl.rng import Prng

from .base import carve_l_corridor, fallback_spawn

logger = logging.getLogger(__name__)

SECRET_ROOM_MIN = 3
SECRET_ROOM_MAX = 5
# Margin between secret rooms; a later one never reaches an earlier secret door
SECRET_ROOM_GAP = 2


def generate_rooms(config: GenerationConfig, rng: Prng) -> GridMap:
    """Rooms + corridors generator.

    Algorithm:
    - Sample up to ``max_rooms`` rectangles, rejecting any that overlap an
      already placed room; each accepted room is joined to the previous one
      with an L-shaped corridor.
    - Mark closed doors where a corridor meets a room wall.
    - Carve a few small secret rooms, each with at most one secret door.
    """
    grid = GridMap(config.width, config.height)
    rooms: List[Rect] = []

    for _ in range(config.max_rooms):
        w = rng.randint(config.room_min_size, config.room_max_size)
        h = rng.randint(config.room_min_size, config.room_max_size)
        x = rng.randrange(1, config.width - w - 1)
        y = rng.randrange(1, config.height - h - 1)
        room = Rect(x, y, w, h)
        if any(other.intersects(room) for other in rooms):
            continue
        _carve_room(grid, room, config.room_borders)
        if rooms:
            carve_l_corridor(grid, rooms[-1].center, room.center, rng)
        rooms.append(room)

    doors = _place_doors(grid, rooms)
    secrets = _place_secret_rooms(grid, config, rng, rooms)

    if rooms:
        grid.spawn = rooms[0].center
    else:
        grid.spawn = fallback_spawn(grid, "generate_rooms")
    grid.regions = rooms + secrets
    grid.secret_regions = secrets
    grid.frame_walls()

    logger.debug(
        "generate_rooms: %d rooms, %d doors, %d secret rooms", len(rooms), doors, len(secrets)
    )
    return grid


def _carve_room(grid: GridMap, room: Rect, borders: bool) -> None:
    # With borders only the interior is opened, leaving a wall ring inside the rect
    grid.fill_rect(room.inner() if borders else room, TileKind.FLOOR)


def _floor_at(grid: GridMap, x: int, y: int) -> bool:
    kind = grid.kind_at(x, y)
    return kind is not None and kind.is_floor_like


def _wall_or_out(grid: GridMap, x: int, y: int) -> bool:
    kind = grid.kind_at(x, y)
    return kind is None or kind is TileKind.WALL


def is_potential_door(grid: GridMap, x: int, y: int) -> bool:
    """A wall with floor on both sides along one axis and walls across it.

    Corners and T-junctions between several rooms can legitimately fail this
    test and stay without a door.
    """
    if grid.kind_at(x, y) is not TileKind.WALL:
        return False
    floor_lr = _floor_at(grid, x - 1, y) and _floor_at(grid, x + 1, y)
    walls_ud = _wall_or_out(grid, x, y - 1) and _wall_or_out(grid, x, y + 1)
    floor_ud = _floor_at(grid, x, y - 1) and _floor_at(grid, x, y + 1)
    walls_lr = _wall_or_out(grid, x - 1, y) and _wall_or_out(grid, x + 1, y)
    return (floor_lr and walls_ud) or (floor_ud and walls_lr)


def _place_doors(grid: GridMap, rooms: List[Rect]) -> int:
    placed = 0
    for room in rooms:
        for x, y in room.perimeter():
            if not grid.in_bounds(x, y):
                continue
            if is_potential_door(grid, x, y):
                grid.set_kind(x, y, TileKind.DOOR_CLOSED)
                placed += 1
    return placed


def _adjacent_floors(grid: GridMap, x: int, y: int) -> int:
    return sum(1 for nx, ny in grid.neighbors4(x, y) if grid.cells[grid.index(nx, ny)].kind.is_floor_like)


def _place_secret_rooms(
    grid: GridMap, config: GenerationConfig, rng: Prng, rooms: List[Rect]
) -> List[Rect]:
    secrets: List[Rect] = []
    for _ in range(config.secret_room_count):
        w = rng.randint(SECRET_ROOM_MIN, SECRET_ROOM_MAX)
        h = rng.randint(SECRET_ROOM_MIN, SECRET_ROOM_MAX)
        x = rng.randrange(1, config.width - w - 1)
        y = rng.randrange(1, config.height - h - 1)
        secret = Rect(x, y, w, h)
        if any(other.intersects(secret) for other in rooms):
            continue
        gap = SECRET_ROOM_GAP
        padded = Rect(x - gap, y - gap, w + 2 * gap, h + 2 * gap)
        if any(other.intersects(padded) for other in secrets):
            continue
        _carve_room(grid, secret, config.room_borders)

        carved = secret.inner() if config.room_borders else secret
        candidates = [
            (tx, ty)
            for tx, ty in carved.perimeter()
            if 0 < tx < grid.width - 1
            and 0 < ty < grid.height - 1
            and grid.kind_at(tx, ty) is TileKind.WALL
            and _adjacent_floors(grid, tx, ty) == 1
        ]
        if candidates:
            dx, dy = rng.choice(candidates)
            grid.set_kind(dx, dy, TileKind.DOOR_SECRET)
        secrets.append(secret)
    return secrets
