from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict


@dataclass(frozen=True)
class TileTraits:
    blocks_movement: bool
    blocks_sight: bool
    concealment: bool
    glyph: str


class TileKind(Enum):
    """Terrain categories of a grid cell.

    Movement/sight blocking and concealment come from a static table so that
    every component agrees on them.
    """

    WALL = "wall"
    FLOOR = "floor"
    DOOR_CLOSED = "door_closed"
    DOOR_SECRET = "door_secret"
    STREET = "street"
    CROSSWALK = "crosswalk"
    SIDEWALK = "sidewalk"
    SIDEWALK_TREE = "sidewalk_tree"
    SIDEWALK_HYDRANT = "sidewalk_hydrant"
    DRIVEWAY = "driveway"  # never generated; reserved for callers, opened by open_door
    PARK = "park"
    RESIDENTIAL_1 = "residential_1"
    RESIDENTIAL_2 = "residential_2"
    RESIDENTIAL_3 = "residential_3"
    RESIDENTIAL_4 = "residential_4"
    URBAN_1 = "urban_1"
    URBAN_2 = "urban_2"
    URBAN_3 = "urban_3"
    RED_LIGHT = "red_light"
    RETAIL = "retail"
    HIDING_AREA = "hiding_area"

    @property
    def traits(self) -> TileTraits:
        return _TRAITS[self]

    @property
    def blocks_movement(self) -> bool:
        return _TRAITS[self].blocks_movement

    @property
    def blocks_sight(self) -> bool:
        return _TRAITS[self].blocks_sight

    @property
    def provides_concealment(self) -> bool:
        return _TRAITS[self].concealment

    @property
    def glyph(self) -> str:
        """A single-character visualization useful for logs/debug."""
        return _TRAITS[self].glyph

    @property
    def is_door(self) -> bool:
        return self in (TileKind.DOOR_CLOSED, TileKind.DOOR_SECRET)

    @property
    def is_sidewalk(self) -> bool:
        return self in _SIDEWALKS

    @property
    def is_floor_like(self) -> bool:
        # Door heuristics treat sidewalks as floor
        return self is TileKind.FLOOR or self in _SIDEWALKS

    @property
    def is_street_like(self) -> bool:
        return self in (TileKind.STREET, TileKind.CROSSWALK) or self in _SIDEWALKS

    @property
    def is_district(self) -> bool:
        return self in _DISTRICTS

    @property
    def is_spawn_surface(self) -> bool:
        """Whether monsters may be placed on this tile."""
        return self in (TileKind.FLOOR, TileKind.URBAN_3)


_SIDEWALKS = frozenset({TileKind.SIDEWALK, TileKind.SIDEWALK_TREE, TileKind.SIDEWALK_HYDRANT})
_DISTRICTS = frozenset(
    {
        TileKind.PARK,
        TileKind.RESIDENTIAL_1,
        TileKind.RESIDENTIAL_2,
        TileKind.RESIDENTIAL_3,
        TileKind.RESIDENTIAL_4,
        TileKind.URBAN_1,
        TileKind.URBAN_2,
        TileKind.URBAN_3,
        TileKind.RED_LIGHT,
        TileKind.RETAIL,
    }
)

_OPEN = dict(blocks_movement=False, blocks_sight=False, concealment=False)
_SOLID = dict(blocks_movement=True, blocks_sight=True, concealment=False)

_TRAITS: Dict[TileKind, TileTraits] = {
    TileKind.WALL: TileTraits(glyph="#", **_SOLID),
    TileKind.FLOOR: TileTraits(glyph=".", **_OPEN),
    TileKind.DOOR_CLOSED: TileTraits(glyph="+", **_SOLID),
    TileKind.DOOR_SECRET: TileTraits(glyph="S", **_SOLID),
    TileKind.STREET: TileTraits(glyph="=", **_OPEN),
    TileKind.CROSSWALK: TileTraits(glyph="%", **_OPEN),
    TileKind.SIDEWALK: TileTraits(glyph="-", **_OPEN),
    TileKind.SIDEWALK_TREE: TileTraits(glyph="t", **_OPEN),
    TileKind.SIDEWALK_HYDRANT: TileTraits(glyph="h", **_OPEN),
    TileKind.DRIVEWAY: TileTraits(glyph="_", **_OPEN),
    TileKind.PARK: TileTraits(glyph='"', **_OPEN),
    TileKind.RESIDENTIAL_1: TileTraits(glyph="r", **_OPEN),
    TileKind.RESIDENTIAL_2: TileTraits(glyph="r", **_OPEN),
    TileKind.RESIDENTIAL_3: TileTraits(glyph="r", **_OPEN),
    TileKind.RESIDENTIAL_4: TileTraits(glyph="r", **_OPEN),
    TileKind.URBAN_1: TileTraits(glyph="u", **_OPEN),
    TileKind.URBAN_2: TileTraits(glyph="u", **_OPEN),
    TileKind.URBAN_3: TileTraits(glyph="u", **_OPEN),
    TileKind.RED_LIGHT: TileTraits(glyph="x", **_OPEN),
    TileKind.RETAIL: TileTraits(glyph="$", **_OPEN),
    TileKind.HIDING_AREA: TileTraits(
        blocks_movement=False, blocks_sight=False, concealment=True, glyph="*"
    ),
}


Passable = Callable[[TileKind], bool]


def walkable(kind: TileKind) -> bool:
    """Passability for entities that never open doors."""
    return not kind.blocks_movement


def walkable_through_doors(kind: TileKind) -> bool:
    """Passability for entities that open doors (closed or secret) on contact."""
    return not kind.blocks_movement or kind.is_door


__all__ = ["TileKind", "TileTraits", "Passable", "walkable", "walkable_through_doors"]
