"""Map generation algorithms.

Each algorithm is a plain function ``(config, rng) -> GridMap``; the factory
picks one through :data:`GENERATORS`.
"""

from __future__ import annotations

from typing import Dict

from gridcrawl.config import Algorithm

from .base import GenerateFn
from .bsp import generate_bsp
from .cellular import generate_cellular
from .city import generate_city
from .rooms import generate_rooms

GENERATORS: Dict[Algorithm, GenerateFn] = {
    Algorithm.ROOMS: generate_rooms,
    Algorithm.BSP: generate_bsp,
    Algorithm.CELLULAR: generate_cellular,
    Algorithm.CITY: generate_city,
}

__all__ = [
    "GENERATORS",
    "GenerateFn",
    "generate_rooms",
    "generate_bsp",
    "generate_cellular",
    "generate_city",
]
