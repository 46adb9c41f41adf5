from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from typing import Dict, List, Set, Tuple

from gridcrawl.dungeon.tiles import Passable, walkable
from gridcrawl.map.grid import Coord, GridMap

logger = logging.getLogger(__name__)


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def a_star(grid: GridMap, start: Coord, goal: Coord, passable: Passable = walkable) -> List[Coord]:
    """Shortest 4-directional path from ``start`` to ``goal`` inclusive.

    ``passable`` decides which tile kinds may be entered, so callers vary
    traversal rules (e.g. opening doors) without touching the search. Each step
    costs 1 and the Manhattan heuristic is admissible for that movement model.
    Ties on f are broken by discovery order.

    Returns ``[start]`` when start == goal and ``[]`` when the goal cannot be
    reached.
    """
    if start == goal:
        return [start]
    if not grid.in_bounds(*start) or not grid.in_bounds(*goal):
        return []

    order = itertools.count()
    open_heap: List[Tuple[int, int, Coord]] = [(manhattan(start, goal), next(order), start)]
    came_from: Dict[Coord, Coord] = {}
    g_score: Dict[Coord, int] = {start: 0}
    closed: Set[Coord] = set()

    while open_heap:
        _f, _order, current = heapq.heappop(open_heap)
        if current == goal:
            return _reconstruct(came_from, current)
        if current in closed:
            # Stale heap entry superseded by a cheaper one
            continue
        closed.add(current)

        base = g_score[current] + 1
        for nb in grid.neighbors4(*current):
            if nb in closed:
                continue
            kind = grid.kind_at(*nb)
            if kind is None or not passable(kind):
                continue
            if base < g_score.get(nb, base + 1):
                came_from[nb] = current
                g_score[nb] = base
                heapq.heappush(open_heap, (base + manhattan(nb, goal), next(order), nb))

    logger.debug("No path from %s to %s (%d nodes expanded)", start, goal, len(closed))
    return []


def _reconstruct(came_from: Dict[Coord, Coord], current: Coord) -> List[Coord]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def flood_fill(grid: GridMap, start: Coord, passable: Passable = walkable) -> Set[Coord]:
    """Return every cell 4-connected to ``start`` through passable tiles.

    The start cell itself is included only if it is passable.
    """
    kind = grid.kind_at(*start)
    if kind is None or not passable(kind):
        return set()
    seen: Set[Coord] = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for nb in grid.neighbors4(cx, cy):
            if nb in seen:
                continue
            if passable(grid.cells[grid.index(*nb)].kind):
                seen.add(nb)
                q.append(nb)
    return seen


def connected_regions(grid: GridMap, passable: Passable = walkable) -> List[Set[Coord]]:
    """All 4-connected passable components, in row-major order of discovery."""
    visited: Set[Coord] = set()
    regions: List[Set[Coord]] = []
    for y in range(grid.height):
        for x in range(grid.width):
            if (x, y) in visited:
                continue
            if not passable(grid.cells[grid.index(x, y)].kind):
                continue
            comp = flood_fill(grid, (x, y), passable)
            visited |= comp
            regions.append(comp)
    return regions


def largest_region(grid: GridMap, passable: Passable = walkable) -> Set[Coord]:
    """Largest connected component; the first discovered wins ties."""
    best: Set[Coord] = set()
    for comp in connected_regions(grid, passable):
        if len(comp) > len(best):
            best = comp
    return best
