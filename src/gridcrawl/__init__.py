"""
gridcrawl: deterministic tile-map generation, field of view and pathfinding.

The core is rendering-agnostic: generators fill a GridMap, the FOV module
flags what an observer sees, and the pathfinder walks it.
"""

from importlib.metadata import version, PackageNotFoundError

__all__ = ["__version__"]

try:
    __version__ = version("gridcrawl")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
