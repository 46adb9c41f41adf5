from __future__ import annotations

import logging

from gridcrawl.config import GenerationConfig
from gridcrawl.map.grid import GridMap
from gridcrawl.rng import Prng

from .generator import GENERATORS
from .variants import apply_variants

logger = logging.getLogger(__name__)


class DungeonFactory:
    """Produce a finished map for a generation request.

    Usage:
      config = GenerationConfig(algorithm="bsp", seed=42)
      grid = DungeonFactory.generate(config)
    """

    @staticmethod
    def make_rng(config: GenerationConfig) -> Prng:
        if config.seed is None:
            return Prng.from_entropy()
        return Prng(config.seed)

    @staticmethod
    def generate(config: GenerationConfig) -> GridMap:
        """Validate, run the selected algorithm, then assign terrain variants.

        Raises ConfigError before any work when the request is impossible. The
        grid is only returned once every pass has completed.
        """
        config.ensure_valid()
        rng = DungeonFactory.make_rng(config)
        generate = GENERATORS[config.algorithm]
        logger.info(
            "DungeonFactory: %s %dx%d seed=%d",
            config.algorithm.value,
            config.width,
            config.height,
            rng.initial_seed,
        )
        grid = generate(config, rng)
        # Variants use the run seed, never the generation stream
        apply_variants(grid, rng.initial_seed, config.variant_count)
        return grid


def generate_map(config: GenerationConfig) -> GridMap:
    return DungeonFactory.generate(config)


__all__ = ["DungeonFactory", "generate_map"]
