import pytest

from gridcrawl.config import GenerationConfig
from gridcrawl.dungeon.generator.cellular import generate_cellular
from gridcrawl.dungeon.pathfinding import connected_regions, flood_fill
from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.rng import Prng


def _cfg(**overrides):
    base = dict(algorithm="cellular", width=60, height=40)
    base.update(overrides)
    return GenerationConfig(**base).ensure_valid()


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5, 6])
def test_exactly_one_floor_component(seed):
    grid = generate_cellular(_cfg(), Prng(seed))
    floor = grid.cells_of(TileKind.FLOOR)
    assert floor
    assert len(connected_regions(grid)) == 1
    assert flood_fill(grid, floor[0]) == set(floor)


@pytest.mark.parametrize("seed", [7, 8, 9])
def test_spawn_is_floor_and_border_is_wall(seed):
    grid = generate_cellular(_cfg(), Prng(seed))
    assert grid.kind_at(*grid.spawn) is TileKind.FLOOR
    for x in range(grid.width):
        assert grid.kind_at(x, 0) is TileKind.WALL
        assert grid.kind_at(x, grid.height - 1) is TileKind.WALL
    for y in range(grid.height):
        assert grid.kind_at(0, y) is TileKind.WALL
        assert grid.kind_at(grid.width - 1, y) is TileKind.WALL


def test_no_regions_are_reported():
    assert generate_cellular(_cfg(), Prng(10)).regions == []


def test_solid_fill_degenerates_to_single_centre_cell(caplog):
    grid = generate_cellular(_cfg(width=20, height=12, cellular_fill_prob=1.0), Prng(1))
    assert grid.cells_of(TileKind.FLOOR) == [(10, 6)]
    assert grid.spawn == (10, 6)
    assert "no playable area" in caplog.text


def test_zero_steps_keeps_raw_noise_connected():
    grid = generate_cellular(_cfg(cellular_steps=0, cellular_fill_prob=0.3), Prng(3))
    assert len(connected_regions(grid)) == 1


def test_same_seed_same_cave():
    a = generate_cellular(_cfg(), Prng(99))
    b = generate_cellular(_cfg(), Prng(99))
    assert a.kinds() == b.kinds()
    assert a.spawn == b.spawn
