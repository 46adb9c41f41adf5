from __future__ import annotations

import logging
from typing import List, Set

from gridcrawl.map.grid import Coord, GridMap

logger = logging.getLogger(__name__)

# Octant transforms: columns are (xx, xy, yx, yy) for each of the 8 octants
_MULT = (
    (1, 0, 0, -1, -1, 0, 0, 1),
    (0, 1, -1, 0, 0, -1, 1, 0),
    (0, 1, 1, 0, 0, -1, -1, 0),
    (1, 0, 0, 1, -1, 0, 0, -1),
)


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> List[Coord]:
    """
    Bresenham's line algorithm. Returns the list of points from (x0, y0) to (x1, y1) inclusive.
    """
    points: List[Coord] = []

    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    x, y = x0, y0
    while True:
        points.append((x, y))
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy

    return points


def has_line_of_sight(grid: GridMap, fx: int, fy: int, tx: int, ty: int) -> bool:
    """
    Point-to-point sight check along a Bresenham line.

    A target standing in concealment is never seen, whatever the distance.
    Only intermediate cells can block; both endpoints may be opaque.
    """
    if not grid.in_bounds(fx, fy) or not grid.in_bounds(tx, ty):
        return False
    if grid.cells[grid.index(tx, ty)].kind.provides_concealment:
        return False
    line = bresenham_line(fx, fy, tx, ty)
    for x, y in line[1:-1]:
        if grid.blocks_sight(x, y):
            logger.debug("LoS blocked at (%d,%d) between (%d,%d)->(%d,%d)", x, y, fx, fy, tx, ty)
            return False
    return True


def compute_visibility(grid: GridMap, ox: int, oy: int, radius: int) -> Set[Coord]:
    """
    Recursive shadow-casting field of view.

    Clears every ``visible`` flag, then marks the origin and every cell seen
    from it within Euclidean ``radius`` as visible and explored. Opaque cells
    that bound the view (walls, doors) are themselves visible. Returns the set
    of visible coordinates.

    Visibility is symmetric in open areas, but not always near wall corners:
    A may see B while B does not see A.
    """
    if radius < 0:
        raise ValueError("radius must be >= 0")

    grid.clear_visibility()
    visible: Set[Coord] = set()
    if not grid.in_bounds(ox, oy):
        logger.debug("FOV origin (%d,%d) is outside the map", ox, oy)
        return visible

    _mark(grid, ox, oy, visible)
    for octant in range(8):
        _cast_light(
            grid,
            ox,
            oy,
            1,
            1.0,
            0.0,
            radius,
            _MULT[0][octant],
            _MULT[1][octant],
            _MULT[2][octant],
            _MULT[3][octant],
            visible,
        )

    logger.debug("FOV from (%d,%d) radius %d -> %d visible tiles", ox, oy, radius, len(visible))
    return visible


def _mark(grid: GridMap, x: int, y: int, visible: Set[Coord]) -> None:
    c = grid.cell(x, y)
    if c is None:
        return
    c.visible = True
    c.explored = True
    visible.add((x, y))


def _cast_light(
    grid: GridMap,
    cx: int,
    cy: int,
    row: int,
    start: float,
    end: float,
    radius: int,
    xx: int,
    xy: int,
    yx: int,
    yy: int,
    visible: Set[Coord],
) -> None:
    if start < end:
        return
    radius_sq = radius * radius
    new_start = start
    for j in range(row, radius + 1):
        dx, dy = -j - 1, -j
        blocked = False
        while dx <= 0:
            dx += 1
            # Map octant-local (dx, dy) onto the grid
            x = cx + dx * xx + dy * xy
            y = cy + dx * yx + dy * yy
            l_slope = (dx - 0.5) / (dy + 0.5)
            r_slope = (dx + 0.5) / (dy - 0.5)
            if start < r_slope:
                continue
            if end > l_slope:
                break
            if dx * dx + dy * dy <= radius_sq:
                _mark(grid, x, y, visible)
            if blocked:
                if grid.blocks_sight(x, y):
                    new_start = r_slope
                    continue
                blocked = False
                start = new_start
            elif grid.blocks_sight(x, y) and j < radius:
                # Scan the still-open part of the next row before the blocker
                blocked = True
                _cast_light(grid, cx, cy, j + 1, start, l_slope, radius, xx, xy, yx, yy, visible)
                new_start = r_slope
        if blocked:
            break


__all__ = ["compute_visibility", "has_line_of_sight", "bresenham_line"]
