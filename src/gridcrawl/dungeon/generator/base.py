from __future__ import annotations

import logging
from typing import Callable

from gridcrawl.config import GenerationConfig
from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.map.grid import Coord, GridMap
from gridcrawl.rng import Prng

logger = logging.getLogger(__name__)

# Every algorithm is a plain function with this signature. The returned map is
# fully populated and carries its spawn point and region list.
GenerateFn = Callable[[GenerationConfig, Prng], GridMap]


def carve_l_corridor(grid: GridMap, a: Coord, b: Coord, rng: Prng) -> None:
    """Join two points with an L-shaped floor corridor; leg order is random."""
    ax, ay = a
    bx, by = b
    if rng.coin():
        # horizontal then vertical
        grid.carve_h(ax, bx, ay)
        grid.carve_v(ay, by, bx)
    else:
        # vertical then horizontal
        grid.carve_v(ay, by, ax)
        grid.carve_h(ax, bx, by)


def fallback_spawn(grid: GridMap, name: str) -> Coord:
    """Carve the map centre so a degenerate map still has a standing cell."""
    centre = (grid.width // 2, grid.height // 2)
    grid.set_kind(centre[0], centre[1], TileKind.FLOOR)
    logger.warning("%s produced no playable area; spawning at map centre %s", name, centre)
    return centre


__all__ = ["GenerateFn", "carve_l_corridor", "fallback_spawn"]
