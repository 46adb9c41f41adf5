from .grid import Cell, Coord, GridMap, Rect

__all__ = ["Cell", "Coord", "GridMap", "Rect"]
