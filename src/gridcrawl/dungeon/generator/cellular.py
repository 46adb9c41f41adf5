from __future__ import annotations

import logging
from collections import deque
from typing import List

from gridcrawl.config import GenerationConfig
from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.map.grid import Coord, GridMap
from gridcrawl.rng import Prng

from .base import fallback_spawn

logger = logging.getLogger(__name__)

# Moore-neighbourhood wall count at which a cell keeps its state
BALANCE = 4


def generate_cellular(config: GenerationConfig, rng: Prng) -> GridMap:
    """Cellular automata caverns generator.

    Algorithm:
    - Seed every interior cell as wall with probability ``cellular_fill_prob``;
      the border is always wall.
    - Apply ``cellular_steps`` smoothing passes: more than 4 wall neighbours
      makes a wall, fewer than 4 makes floor, exactly 4 keeps the cell.
    - Keep only the largest 4-connected open region as floor so the cave is a
      single component, then spawn on a random cell of it.
    """
    width, height = config.width, config.height
    # walls[y][x]; True means wall
    walls = [[True] * width for _ in range(height)]
    for y in range(1, height - 1):
        row = walls[y]
        for x in range(1, width - 1):
            row[x] = rng.chance(config.cellular_fill_prob)

    for _ in range(config.cellular_steps):
        walls = _smooth(walls, width, height)

    region = _largest_open_region(walls, width, height)

    grid = GridMap(width, height)
    for x, y in region:
        grid.set_kind(x, y, TileKind.FLOOR)

    if region:
        grid.spawn = rng.choice(region)
    else:
        grid.spawn = fallback_spawn(grid, "generate_cellular")

    logger.debug(
        "generate_cellular: %dx%d, %d steps, kept region of %d cells",
        width,
        height,
        config.cellular_steps,
        len(region),
    )
    return grid


def _smooth(walls: List[List[bool]], width: int, height: int) -> List[List[bool]]:
    # Reads the current generation only; writes go to a fresh copy
    out = [row[:] for row in walls]
    for y in range(1, height - 1):
        above, here, below = walls[y - 1], walls[y], walls[y + 1]
        for x in range(1, width - 1):
            count = (
                above[x - 1] + above[x] + above[x + 1]
                + here[x - 1] + here[x + 1]
                + below[x - 1] + below[x] + below[x + 1]
            )
            if count > BALANCE:
                out[y][x] = True
            elif count < BALANCE:
                out[y][x] = False
    return out


def _largest_open_region(walls: List[List[bool]], width: int, height: int) -> List[Coord]:
    """Largest 4-connected open interior region, cells in discovery order.

    Scans column-major; the first region found wins ties.
    """
    visited = [[False] * width for _ in range(height)]
    best: List[Coord] = []
    for x in range(1, width - 1):
        for y in range(1, height - 1):
            if walls[y][x] or visited[y][x]:
                continue
            region: List[Coord] = []
            visited[y][x] = True
            q = deque([(x, y)])
            while q:
                cx, cy = q.popleft()
                region.append((cx, cy))
                for nx, ny in ((cx - 1, cy), (cx + 1, cy), (cx, cy - 1), (cx, cy + 1)):
                    if 0 < nx < width - 1 and 0 < ny < height - 1 and not walls[ny][nx] and not visited[ny][nx]:
                        visited[ny][nx] = True
                        q.append((nx, ny))
            if len(region) > len(best):
                best = region
    return best
