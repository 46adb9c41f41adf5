from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.exceptions import ConfigError

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

_DOOR_LIKE = (TileKind.DOOR_CLOSED, TileKind.DOOR_SECRET, TileKind.DRIVEWAY)


@dataclass(frozen=True)
class Rect:
    """Integer rectangle used for rooms and city blocks."""

    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    @property
    def center(self) -> Coord:
        return (self.x + self.w // 2, self.y + self.h // 2)

    def intersects(self, other: "Rect") -> bool:
        # Touching edges do not count as overlap
        return not (
            self.right <= other.x
            or other.right <= self.x
            or self.bottom <= other.y
            or other.bottom <= self.y
        )

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def inner(self) -> "Rect":
        return Rect(self.x + 1, self.y + 1, max(0, self.w - 2), max(0, self.h - 2))

    def cells(self) -> Iterator[Coord]:
        for yy in range(self.y, self.bottom):
            for xx in range(self.x, self.right):
                yield (xx, yy)

    def perimeter(self) -> List[Coord]:
        """Cells one step outside each edge; corners are not included."""
        pts: List[Coord] = []
        for xx in range(self.x, self.right):
            pts.append((xx, self.y - 1))
            pts.append((xx, self.bottom))
        for yy in range(self.y, self.bottom):
            pts.append((self.x - 1, yy))
            pts.append((self.right, yy))
        return pts


@dataclass
class Cell:
    kind: TileKind = TileKind.WALL
    visible: bool = False
    explored: bool = False
    variant: int = 0
    light_bias: float = 0.0

    @property
    def blocks_movement(self) -> bool:
        return self.kind.blocks_movement

    @property
    def blocks_sight(self) -> bool:
        return self.kind.blocks_sight

    @property
    def provides_concealment(self) -> bool:
        return self.kind.provides_concealment


class GridMap:
    """
    The shared tile grid every component reads and writes.

    Cells live in a flat row-major list; ``index(x, y) == x + y * width``.
    Every accessor is bounds-checked: out-of-bounds reads return None (or
    "blocking" for the movement/sight queries) and out-of-bounds writes are
    ignored, because carving and shadow-casting routinely compute transient
    coordinates outside the map.
    """

    def __init__(self, width: int, height: int, fill: TileKind = TileKind.WALL) -> None:
        if width <= 0 or height <= 0:
            raise ConfigError([f"map size must be positive, got {width}x{height}"])
        self.width = width
        self.height = height
        self.cells: List[Cell] = [Cell(kind=fill) for _ in range(width * height)]
        self.spawn: Coord = (width // 2, height // 2)
        self.regions: List[Rect] = []
        self.secret_regions: List[Rect] = []

    # ---- Safety / Bounds -------------------------------------------------
    def index(self, x: int, y: int) -> int:
        return x + y * self.width

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Optional[Cell]:
        if not self.in_bounds(x, y):
            return None
        return self.cells[x + y * self.width]

    def kind_at(self, x: int, y: int) -> Optional[TileKind]:
        if not self.in_bounds(x, y):
            return None
        return self.cells[x + y * self.width].kind

    def set_kind(self, x: int, y: int, kind: TileKind) -> bool:
        if not self.in_bounds(x, y):
            logger.debug("Ignoring out-of-bounds write at (%d,%d)", x, y)
            return False
        self.cells[x + y * self.width].kind = kind
        return True

    # ---- Query -----------------------------------------------------------
    def blocks_movement(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return True
        return self.cells[x + y * self.width].kind.blocks_movement

    def blocks_sight(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return True
        return self.cells[x + y * self.width].kind.blocks_sight

    def neighbors4(self, x: int, y: int) -> Iterator[Coord]:
        # Ordered for deterministic traversal
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield nx, ny

    def neighbors8(self, x: int, y: int) -> Iterator[Coord]:
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = x + dx, y + dy
                if self.in_bounds(nx, ny):
                    yield nx, ny

    def count(self, kind: TileKind) -> int:
        return sum(1 for c in self.cells if c.kind is kind)

    def cells_of(self, *kinds: TileKind) -> List[Coord]:
        wanted = set(kinds)
        return [
            (i % self.width, i // self.width)
            for i, c in enumerate(self.cells)
            if c.kind in wanted
        ]

    def coords(self) -> Iterator[Coord]:
        for y in range(self.height):
            for x in range(self.width):
                yield (x, y)

    # ---- Carving helpers -------------------------------------------------
    def fill_rect(self, rect: Rect, kind: TileKind) -> None:
        for yy in range(max(0, rect.y), min(self.height, rect.bottom)):
            row = yy * self.width
            for xx in range(max(0, rect.x), min(self.width, rect.right)):
                self.cells[row + xx].kind = kind

    def carve_h(self, x1: int, x2: int, y: int, kind: TileKind = TileKind.FLOOR) -> None:
        if x2 < x1:
            x1, x2 = x2, x1
        for xx in range(x1, x2 + 1):
            self.set_kind(xx, y, kind)

    def carve_v(self, y1: int, y2: int, x: int, kind: TileKind = TileKind.FLOOR) -> None:
        if y2 < y1:
            y1, y2 = y2, y1
        for yy in range(y1, y2 + 1):
            self.set_kind(x, yy, kind)

    def frame_walls(self) -> None:
        for x in range(self.width):
            self.set_kind(x, 0, TileKind.WALL)
            self.set_kind(x, self.height - 1, TileKind.WALL)
        for y in range(self.height):
            self.set_kind(0, y, TileKind.WALL)
            self.set_kind(self.width - 1, y, TileKind.WALL)

    # ---- Play-time mutation ----------------------------------------------
    def open_door(self, x: int, y: int) -> bool:
        """Turn a closed/secret door (or driveway) into floor.

        Returns False and leaves the grid untouched for any other tile.
        """
        c = self.cell(x, y)
        if c is None or c.kind not in _DOOR_LIKE:
            return False
        c.kind = TileKind.FLOOR
        logger.debug("Door opened at (%d,%d)", x, y)
        return True

    def clear_visibility(self) -> None:
        for c in self.cells:
            c.visible = False

    def reset_exploration(self) -> None:
        for c in self.cells:
            c.visible = False
            c.explored = False

    # ---- Snapshots / debug -----------------------------------------------
    def kinds(self) -> Tuple[TileKind, ...]:
        return tuple(c.kind for c in self.cells)

    def snapshot(self) -> Tuple[Tuple[TileKind, int], ...]:
        return tuple((c.kind, c.variant) for c in self.cells)

    def copy(self) -> "GridMap":
        clone = GridMap(self.width, self.height)
        clone.cells = [
            Cell(c.kind, c.visible, c.explored, c.variant, c.light_bias) for c in self.cells
        ]
        clone.spawn = self.spawn
        clone.regions = list(self.regions)
        clone.secret_regions = list(self.secret_regions)
        return clone

    def to_ascii(self, show_spawn: bool = True, only_visible: bool = False) -> List[str]:
        rows: List[str] = []
        for y in range(self.height):
            chars = []
            for x in range(self.width):
                c = self.cells[x + y * self.width]
                if show_spawn and (x, y) == self.spawn:
                    chars.append("@")
                elif only_visible and not c.visible:
                    chars.append(" ")
                else:
                    chars.append(c.kind.glyph)
            rows.append("".join(chars))
        return rows

    @classmethod
    def from_ascii(
        cls, rows: Sequence[str], legend: Optional[Mapping[str, TileKind]] = None
    ) -> "GridMap":
        """
        Build a GridMap from ASCII rows for tests/tools.
        Unknown characters raise ValueError; '@' is floor and marks the spawn.
        """
        if not rows:
            raise ValueError("rows must not be empty")
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise ValueError("All rows must be same width")
        table: Dict[str, TileKind] = dict(legend) if legend is not None else _default_legend()
        grid = cls(width, len(rows))
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                if ch == "@":
                    grid.spawn = (x, y)
                    grid.set_kind(x, y, TileKind.FLOOR)
                    continue
                if ch not in table:
                    raise ValueError(f"Unknown map character {ch!r} at ({x},{y})")
                grid.set_kind(x, y, table[ch])
        return grid

    def __repr__(self) -> str:
        return f"GridMap({self.width}x{self.height}, regions={len(self.regions)})"


def _default_legend() -> Dict[str, TileKind]:
    legend: Dict[str, TileKind] = {}
    for kind in TileKind:
        legend.setdefault(kind.glyph, kind)
    return legend



__all__ = ["Coord", "Rect", "Cell", "GridMap"]
