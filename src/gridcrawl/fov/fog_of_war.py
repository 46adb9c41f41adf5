from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set

from gridcrawl.fov.fov import compute_visibility
from gridcrawl.map.grid import Coord, GridMap

logger = logging.getLogger(__name__)


class FogTileState(str, Enum):
    UNSEEN = "unseen"         # never seen; fully dark
    SEEN = "seen"             # explored but not currently visible; dim
    VISIBLE = "visible"       # currently visible; full brightness


@dataclass
class FogSettings:
    vision_radius: int = 8
    dim_factor: float = 0.35  # brightness for seen-not-visible tiles

    def __post_init__(self) -> None:
        if self.vision_radius < 0:
            raise ValueError("vision_radius must be >= 0")
        if not (0.0 <= self.dim_factor <= 1.0):
            raise ValueError("dim_factor must be between 0.0 and 1.0")


class FogOfWar:
    """
    Tracks what an observer currently sees and what it remembers on a GridMap.

    Memory is the grid's own ``explored`` flag, which :func:`compute_visibility`
    maintains, so anything else reading the map agrees with the fog.

    Renderers shade with :meth:`light_map`:
      - UNSEEN: brightness 0.0
      - SEEN: brightness = dim_factor
      - VISIBLE: brightness 1.0 (plus the cell's light bias when requested)
    """

    def __init__(self, grid: GridMap, settings: Optional[FogSettings] = None) -> None:
        self.grid = grid
        self.settings = settings or FogSettings()
        self._visible: Set[Coord] = set()
        logger.debug(
            "FogOfWar initialized: %dx%d radius=%d dim=%.2f",
            grid.width,
            grid.height,
            self.settings.vision_radius,
            self.settings.dim_factor,
        )

    def update(self, observer: Coord, *, radius: Optional[int] = None) -> Set[Coord]:
        """Recompute visibility around ``observer``; returns the visible set."""
        if not self.grid.in_bounds(*observer):
            raise ValueError("observer position out of bounds")
        use_radius = self.settings.vision_radius if radius is None else radius
        self._visible = compute_visibility(self.grid, observer[0], observer[1], use_radius)
        return set(self._visible)

    def state(self, x: int, y: int) -> FogTileState:
        c = self.grid.cell(x, y)
        if c is None:
            raise IndexError("Tile out of bounds")
        if c.visible:
            return FogTileState.VISIBLE
        if c.explored:
            return FogTileState.SEEN
        return FogTileState.UNSEEN

    def light_map(self, *, include_lighting: bool = False) -> List[List[float]]:
        """Brightness matrix indexed ``[y][x]``."""
        dim = self.settings.dim_factor
        result: List[List[float]] = []
        for y in range(self.grid.height):
            row: List[float] = []
            for x in range(self.grid.width):
                c = self.grid.cells[self.grid.index(x, y)]
                if c.visible:
                    value = 1.0 + (c.light_bias if include_lighting else 0.0)
                elif c.explored:
                    value = dim
                else:
                    value = 0.0
                row.append(value)
            result.append(row)
        return result

    def visible_tiles(self) -> Set[Coord]:
        return set(self._visible)

    def reset_memory(self) -> None:
        """Forget everything seen (e.g. on a new floor)."""
        self.grid.reset_exploration()
        self._visible.clear()
        logger.debug("FogOfWar memory reset")

    def on_map_changed(self, new_grid: GridMap) -> None:
        """Swap in a freshly generated grid and start with no memory of it."""
        self.grid = new_grid
        self.reset_memory()
        logger.debug("FogOfWar map changed to %dx%d", new_grid.width, new_grid.height)


__all__ = ["FogOfWar", "FogSettings", "FogTileState"]
