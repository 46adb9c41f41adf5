from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from gridcrawl.config import GenerationConfig
from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.map.grid import Coord, GridMap, Rect
from gridcrawl.rng import Prng

from .base import carve_l_corridor, fallback_spawn

logger = logging.getLogger(__name__)

# Extra cells each child must keep beyond room_min_size when a node is cut
SPLIT_MARGIN = 2


@dataclass
class BspNode:
    rect: Rect
    depth: int
    left: Optional[int] = None
    right: Optional[int] = None
    room: Optional[Rect] = None

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


@dataclass
class BspTree:
    """Partition tree stored as an index-based arena; children are list indices."""

    nodes: List[BspNode] = field(default_factory=list)

    def add(self, rect: Rect, depth: int) -> int:
        self.nodes.append(BspNode(rect, depth))
        return len(self.nodes) - 1

    def leaves(self) -> List[BspNode]:
        return [n for n in self.nodes if n.is_leaf()]

    def max_depth(self) -> int:
        return max((n.depth for n in self.nodes), default=0)

    def rooms(self) -> List[Rect]:
        return [n.room for n in self.nodes if n.room is not None]

    def find_room(self, index: int) -> Optional[Rect]:
        """First room found depth-first (left before right) under ``index``."""
        node = self.nodes[index]
        if node.room is not None:
            return node.room
        for child in (node.left, node.right):
            if child is not None:
                room = self.find_room(child)
                if room is not None:
                    return room
        return None


def partition(config: GenerationConfig, rng: Prng) -> BspTree:
    """Split the map interior recursively and assign a room to each large leaf."""
    tree = BspTree()
    root = tree.add(Rect(1, 1, config.width - 2, config.height - 2), 0)
    _split(tree, root, config, rng)

    lo = config.room_min_size
    for node in tree.nodes:
        if not node.is_leaf():
            continue
        r = node.rect
        if r.w < lo or r.h < lo:
            continue
        w = rng.randint(lo, min(config.room_max_size, r.w))
        h = rng.randint(lo, min(config.room_max_size, r.h))
        x = rng.randint(r.x, r.right - w)
        y = rng.randint(r.y, r.bottom - h)
        node.room = Rect(x, y, w, h)
    return tree


def _split(tree: BspTree, index: int, config: GenerationConfig, rng: Prng) -> None:
    node = tree.nodes[index]
    if node.depth >= config.bsp_max_depth:
        return
    horizontal = rng.coin()
    r = node.rect
    guard = config.room_min_size * 2 + SPLIT_MARGIN * 2
    edge = config.room_min_size + SPLIT_MARGIN
    if horizontal:
        if r.h <= guard:
            return
        cut = rng.randrange(r.y + edge, r.bottom - edge)
        first = Rect(r.x, r.y, r.w, cut - r.y)
        second = Rect(r.x, cut, r.w, r.bottom - cut)
    else:
        if r.w <= guard:
            return
        cut = rng.randrange(r.x + edge, r.right - edge)
        first = Rect(r.x, r.y, cut - r.x, r.h)
        second = Rect(cut, r.y, r.right - cut, r.h)

    node.left = tree.add(first, node.depth + 1)
    node.right = tree.add(second, node.depth + 1)
    _split(tree, node.left, config, rng)
    _split(tree, node.right, config, rng)


def _connect(tree: BspTree, index: int, grid: GridMap, rng: Prng) -> int:
    node = tree.nodes[index]
    if node.left is None or node.right is None:
        return 0
    carved = 0
    a = tree.find_room(node.left)
    b = tree.find_room(node.right)
    if a is not None and b is not None:
        carve_l_corridor(grid, a.center, b.center, rng)
        carved += 1
    carved += _connect(tree, node.left, grid, rng)
    carved += _connect(tree, node.right, grid, rng)
    return carved


def generate_bsp(config: GenerationConfig, rng: Prng) -> GridMap:
    """
    BSP (Binary Space Partition) room + corridor generator.

    Guarantees:
    - Partition depth never exceeds ``bsp_max_depth``
    - Every room is reachable: sibling subtrees are joined top-down, so
      indirect connections transit the partition hierarchy
    - One-tile wall border around the map
    """
    grid = GridMap(config.width, config.height)
    tree = partition(config, rng)
    rooms = tree.rooms()
    for room in rooms:
        grid.fill_rect(room, TileKind.FLOOR)

    corridors = _connect(tree, 0, grid, rng)

    patches: List[Coord] = []
    if config.bsp_concealment and rooms:
        patches = place_concealment(grid, rooms, config, rng)

    grid.regions = rooms
    grid.spawn = rooms[0].center if rooms else fallback_spawn(grid, "generate_bsp")

    logger.debug(
        "generate_bsp: %d nodes, depth %d, %d rooms, %d corridors, %d concealment patches",
        len(tree.nodes),
        tree.max_depth(),
        len(rooms),
        corridors,
        len(patches),
    )
    return grid


def place_concealment(
    grid: GridMap, rooms: List[Rect], config: GenerationConfig, rng: Prng
) -> List[Coord]:
    """Scatter square hiding patches over room interiors.

    Patch count is capped relative to the room count and patch origins keep a
    minimum Chebyshev spacing from each other. Returns the patch origins.
    """
    size = config.concealment_patch_size
    cap = max(1, int(len(rooms) * config.concealment_per_room))
    placed: List[Coord] = []
    for _ in range(cap * 3):
        if len(placed) >= cap:
            break
        room = rng.choice(rooms)
        if room.w < size or room.h < size:
            continue
        px = rng.randint(room.x, room.right - size)
        py = rng.randint(room.y, room.bottom - size)
        if any(max(abs(px - ox), abs(py - oy)) < config.concealment_spacing for ox, oy in placed):
            continue
        patch = Rect(px, py, size, size)
        if not _is_interior_floor(grid, patch):
            continue
        grid.fill_rect(patch, TileKind.HIDING_AREA)
        placed.append((px, py))
    return placed


def _is_interior_floor(grid: GridMap, patch: Rect) -> bool:
    for x, y in patch.cells():
        if grid.kind_at(x, y) is not TileKind.FLOOR:
            return False
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if grid.blocks_movement(x + dx, y + dy):
                    return False
    return True


__all__ = ["BspNode", "BspTree", "partition", "generate_bsp", "place_concealment"]
