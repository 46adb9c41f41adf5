from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from gridcrawl.config import GenerationConfig
from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.map.grid import Coord, GridMap, Rect
from gridcrawl.rng import Prng

logger = logging.getLogger(__name__)

TREE_CHANCE = 0.10
HYDRANT_CHANCE = 0.15  # cumulative with TREE_CHANCE
SHADOW_BIAS = -0.3
RED_LIGHT_GLOW = 0.4

# Chance that an interior cell of a block of this district hides an entity
CONCEALMENT_CHANCE: Dict[TileKind, float] = {
    TileKind.PARK: 0.15,
}

_RESIDENTIAL = (
    TileKind.RESIDENTIAL_1,
    TileKind.RESIDENTIAL_2,
    TileKind.RESIDENTIAL_3,
    TileKind.RESIDENTIAL_4,
)
_URBAN = (TileKind.URBAN_1, TileKind.URBAN_2, TileKind.URBAN_3)


def district_weights(config: GenerationConfig) -> List[Tuple[TileKind, float]]:
    """Weighted district table; residential and urban split evenly over sub-kinds."""
    weights: List[Tuple[TileKind, float]] = [(TileKind.PARK, config.park_frequency)]
    weights += [(k, config.residential_frequency / len(_RESIDENTIAL)) for k in _RESIDENTIAL]
    weights += [(k, config.urban_frequency / len(_URBAN)) for k in _URBAN]
    weights.append((TileKind.RED_LIGHT, config.red_light_frequency))
    weights.append((TileKind.RETAIL, config.retail_frequency))
    return weights


def _lattice(config: GenerationConfig) -> Tuple[int, int, int, int]:
    """Band width, band spacing and the number of block columns and rows."""
    band = config.city_street_width + 1
    spacing = config.city_block_size + band
    blocks_x = max(0, (config.width - band) // spacing)
    blocks_y = max(0, (config.height - band) // spacing)
    return band, spacing, blocks_x, blocks_y


def block_layout(config: GenerationConfig) -> List[Rect]:
    """Block rectangles in row-major order (gy outer, gx inner)."""
    band, spacing, blocks_x, blocks_y = _lattice(config)
    size = config.city_block_size
    blocks: List[Rect] = []
    for gy in range(blocks_y):
        for gx in range(blocks_x):
            x = gx * spacing + band
            y = gy * spacing + band
            if x + size < config.width and y + size < config.height:
                blocks.append(Rect(x, y, size, size))
    return blocks


def generate_city(config: GenerationConfig, rng: Prng) -> GridMap:
    """City-block generator: a street lattice around district blocks.

    Each lattice band is ``city_street_width + 1`` tiles wide. Horizontal
    bands lead with a sidewalk row (with the odd tree or hydrant); where a
    vertical band crosses a street it becomes a crosswalk. Blocks take one
    district kind, parks scatter hiding spots, and the lighting pass darkens
    the streets hugging each block and lets red-light blocks glow.

    The map has no wall frame; uncovered leftovers at the right and bottom
    edges stay WALL.
    """
    grid = GridMap(config.width, config.height)
    band, spacing, blocks_x, blocks_y = _lattice(config)

    weights = district_weights(config)
    blocks = block_layout(config)
    for block in blocks:
        district = rng.weighted_choice(weights)
        grid.fill_rect(block, district)
        chance = CONCEALMENT_CHANCE.get(district, 0.0)
        if chance > 0:
            for x, y in block.inner().cells():
                if rng.chance(chance):
                    grid.set_kind(x, y, TileKind.HIDING_AREA)

    for g in range(blocks_y + 1):
        top = g * spacing
        for y in range(top, min(top + band, config.height)):
            for x in range(config.width):
                kind = _sidewalk(rng) if y == top else TileKind.STREET
                grid.set_kind(x, y, kind)

    for g in range(blocks_x + 1):
        left = g * spacing
        for x in range(left, min(left + band, config.width)):
            for y in range(config.height):
                kind = grid.kind_at(x, y)
                if kind is TileKind.STREET:
                    grid.set_kind(x, y, TileKind.CROSSWALK)
                elif kind is not None and not kind.is_sidewalk:
                    grid.set_kind(x, y, TileKind.STREET)

    shaded = _shade_block_edges(grid, blocks)
    glowing = _light_red_districts(grid)

    grid.regions = blocks
    grid.spawn = _pick_spawn(grid)
    logger.debug(
        "generate_city: %d blocks (%dx%d lattice), %d shaded cells, %d red-light cells",
        len(blocks),
        blocks_x,
        blocks_y,
        shaded,
        glowing,
    )
    return grid


def _sidewalk(rng: Prng) -> TileKind:
    r = rng.random()
    if r < TREE_CHANCE:
        return TileKind.SIDEWALK_TREE
    if r < HYDRANT_CHANCE:
        return TileKind.SIDEWALK_HYDRANT
    return TileKind.SIDEWALK


def _ring(block: Rect) -> List[Coord]:
    """Cells one step outside the block, corners included."""
    pts = block.perimeter()
    pts += [
        (block.x - 1, block.y - 1),
        (block.right, block.y - 1),
        (block.x - 1, block.bottom),
        (block.right, block.bottom),
    ]
    return pts


def _shade_block_edges(grid: GridMap, blocks: List[Rect]) -> int:
    shaded = 0
    for block in blocks:
        for x, y in _ring(block):
            c = grid.cell(x, y)
            if c is not None and c.kind.is_street_like:
                c.light_bias = SHADOW_BIAS
                shaded += 1
    return shaded


def _light_red_districts(grid: GridMap) -> int:
    sources = grid.cells_of(TileKind.RED_LIGHT)
    for x, y in sources:
        for nx, ny in grid.neighbors8(x, y):
            c = grid.cells[grid.index(nx, ny)]
            if c.kind is not TileKind.RED_LIGHT:
                c.light_bias += RED_LIGHT_GLOW
    return len(sources)


def _pick_spawn(grid: GridMap) -> Coord:
    for x, y in grid.coords():
        if grid.cells[grid.index(x, y)].kind.is_street_like:
            return (x, y)
    for x, y in grid.coords():
        if not grid.blocks_movement(x, y):
            return (x, y)
    logger.warning("generate_city produced no open cell; spawning at (1, 1)")
    return (1, 1)


__all__ = ["generate_city", "block_layout", "district_weights", "CONCEALMENT_CHANCE"]
