import pytest

from gridcrawl.config import GenerationConfig
from gridcrawl.dungeon.generator.city import block_layout, district_weights, generate_city
from gridcrawl.dungeon.pathfinding import connected_regions, flood_fill
from gridcrawl.dungeon.tiles import TileKind
from gridcrawl.map.grid import Rect
from gridcrawl.rng import Prng

NO_DISTRICTS = dict(
    park_frequency=0.0,
    residential_frequency=0.0,
    urban_frequency=0.0,
    red_light_frequency=0.0,
    retail_frequency=0.0,
)


def _cfg(**overrides):
    base = dict(algorithm="city", width=80, height=50)
    base.update(overrides)
    return GenerationConfig(**base).ensure_valid()


def _only(**freq):
    values = dict(NO_DISTRICTS)
    values.update(freq)
    return _cfg(**values)


def test_block_layout_default_lattice():
    blocks = block_layout(_cfg())
    # band 3, spacing 13 -> 5 x 3 blocks
    assert len(blocks) == 15
    assert blocks[0] == Rect(3, 3, 10, 10)
    assert blocks[1] == Rect(16, 3, 10, 10)
    assert blocks[5] == Rect(3, 16, 10, 10)


def test_tiny_map_has_no_blocks():
    cfg = _cfg(width=12, height=12)
    assert block_layout(cfg) == []
    grid = generate_city(cfg, Prng(1))
    assert grid.regions == []
    assert grid.kind_at(*grid.spawn).is_street_like


def test_district_weights_split_residential_and_urban():
    weights = dict(district_weights(_cfg(residential_frequency=0.4, urban_frequency=0.3)))
    assert weights[TileKind.RESIDENTIAL_1] == pytest.approx(0.1)
    assert weights[TileKind.RESIDENTIAL_4] == pytest.approx(0.1)
    assert weights[TileKind.URBAN_2] == pytest.approx(0.1)
    assert weights[TileKind.PARK] == pytest.approx(0.15)


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_park_only_city(seed):
    grid = generate_city(_only(park_frequency=1.0), Prng(seed))
    districts = {c.kind for c in grid.cells if c.kind.is_district}
    assert districts == {TileKind.PARK}
    assert grid.count(TileKind.PARK) > 0


def test_park_hiding_spots_stay_inside_blocks():
    grid = generate_city(_only(park_frequency=1.0), Prng(4))
    hiding = grid.cells_of(TileKind.HIDING_AREA)
    assert hiding
    for x, y in hiding:
        assert any(block.inner().contains(x, y) for block in grid.regions)


def test_non_park_districts_have_no_hiding_spots():
    grid = generate_city(_only(retail_frequency=1.0), Prng(4))
    assert grid.count(TileKind.HIDING_AREA) == 0
    assert grid.count(TileKind.RETAIL) == 15 * 100


def test_street_lattice():
    grid = generate_city(_cfg(), Prng(5))
    # Leading row of each horizontal band is sidewalk, the crossing with a
    # vertical band turns street into crosswalk.
    assert all(grid.kind_at(x, 0).is_sidewalk for x in range(grid.width))
    assert all(grid.kind_at(x, 13).is_sidewalk for x in range(grid.width))
    assert grid.kind_at(0, 1) is TileKind.CROSSWALK
    assert grid.kind_at(14, 2) is TileKind.CROSSWALK
    assert grid.kind_at(5, 1) is TileKind.STREET
    assert grid.kind_at(1, 5) is TileKind.STREET
    # Right-hand leftover strip between bands is untouched
    assert grid.kind_at(70, 5) is TileKind.WALL


def test_street_next_to_blocks_is_shaded():
    grid = generate_city(_only(park_frequency=1.0), Prng(6))
    assert grid.cell(5, 2).light_bias == pytest.approx(-0.3)
    assert grid.cell(2, 5).light_bias == pytest.approx(-0.3)
    assert grid.cell(2, 2).light_bias == pytest.approx(-0.3)
    # Away from every block
    assert grid.cell(5, 0).light_bias == pytest.approx(0.0)
    assert grid.cell(5, 5).light_bias == pytest.approx(0.0)


def test_red_light_glow_adds_to_shadow():
    grid = generate_city(_only(red_light_frequency=1.0), Prng(7))
    # Edge cell touching three red-light cells: -0.3 + 3 * 0.4
    assert grid.cell(5, 2).light_bias == pytest.approx(0.9)
    # Corner touching one red-light cell: -0.3 + 0.4
    assert grid.cell(2, 2).light_bias == pytest.approx(0.1)
    # Red-light cells never light themselves
    assert grid.cell(5, 5).light_bias == pytest.approx(0.0)


@pytest.mark.parametrize("seed", [8, 9, 10])
def test_city_is_one_walkable_component(seed):
    grid = generate_city(_cfg(), Prng(seed))
    assert len(connected_regions(grid)) == 1
    reach = flood_fill(grid, grid.spawn)
    for block in grid.regions:
        assert block.center in reach


def test_spawn_is_first_street_cell():
    grid = generate_city(_cfg(), Prng(11))
    assert grid.spawn == (0, 0)
    assert grid.kind_at(0, 0).is_street_like


def test_same_seed_same_city():
    a = generate_city(_cfg(), Prng(12))
    b = generate_city(_cfg(), Prng(12))
    assert a.kinds() == b.kinds()
    assert [c.light_bias for c in a.cells] == [c.light_bias for c in b.cells]
