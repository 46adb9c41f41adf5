from .fov import bresenham_line, compute_visibility, has_line_of_sight
from .fog_of_war import FogOfWar, FogSettings, FogTileState

__all__ = [
    "bresenham_line",
    "compute_visibility",
    "has_line_of_sight",
    "FogOfWar",
    "FogSettings",
    "FogTileState",
]
