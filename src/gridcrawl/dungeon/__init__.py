"""Tile kinds, map generators, the generation factory and pathfinding."""
