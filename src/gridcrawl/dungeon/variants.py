from __future__ import annotations

import logging

from opensimplex import OpenSimplex

from gridcrawl.map.grid import GridMap
from gridcrawl.rng import mix_seed

logger = logging.getLogger(__name__)

NOISE_FREQUENCY = 0.08
NOISE_OCTAVES = 3
NOISE_PERSISTENCE = 0.5
NOISE_LACUNARITY = 2.0


def fractal_noise(
    gen: OpenSimplex,
    x: float,
    y: float,
    *,
    octaves: int = NOISE_OCTAVES,
    persistence: float = NOISE_PERSISTENCE,
    lacunarity: float = NOISE_LACUNARITY,
) -> float:
    """Summed octaves of 2D OpenSimplex noise, normalized to [-1, 1]."""
    total = 0.0
    frequency = 1.0
    amplitude = 1.0
    max_value = 0.0
    for _ in range(octaves):
        total += gen.noise2(x * frequency, y * frequency) * amplitude
        max_value += amplitude
        amplitude *= persistence
        frequency *= lacunarity
    return total / max_value if max_value > 0 else 0.0


def noise_seed(seed: int) -> int:
    # OpenSimplex only needs a 32-bit seed; mixing keeps it off the main stream
    return mix_seed(seed) & 0xFFFFFFFF


def apply_variants(grid: GridMap, seed: int, count: int = 3) -> int:
    """Give every open cell a coherent visual variant index in ``[0, count)``.

    Walls and closed doors keep variant 0. Only ``Cell.variant`` is touched, so
    tile kinds, spawn and regions are unaffected, and applying the pass twice
    with the same seed is a no-op. Returns the number of cells assigned.
    """
    if count < 1:
        raise ValueError(f"variant count must be >= 1, got {count}")
    gen = OpenSimplex(seed=noise_seed(seed))
    assigned = 0
    for y in range(grid.height):
        for x in range(grid.width):
            cell = grid.cells[grid.index(x, y)]
            if cell.kind.blocks_movement:
                continue
            v = fractal_noise(gen, x * NOISE_FREQUENCY, y * NOISE_FREQUENCY)
            cell.variant = min(count - 1, max(0, int((v + 1.0) / 2.0 * count)))
            assigned += 1
    logger.debug("apply_variants: %d cells across %d variants", assigned, count)
    return assigned


__all__ = ["apply_variants", "fractal_noise", "noise_seed"]
