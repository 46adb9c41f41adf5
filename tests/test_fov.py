import itertools

import pytest

from gridcrawl.fov.fov import bresenham_line, compute_visibility, has_line_of_sight
from gridcrawl.map.grid import GridMap


def test_origin_always_visible(open_room):
    visible = compute_visibility(open_room, 4, 4, 0)
    assert visible == {(4, 4)}
    c = open_room.cell(4, 4)
    assert c.visible and c.explored


def test_negative_radius_rejected(open_room):
    with pytest.raises(ValueError):
        compute_visibility(open_room, 4, 4, -1)


def test_open_room_sees_euclidean_disc(open_room):
    visible = compute_visibility(open_room, 4, 4, 3)
    expected = {
        (x, y)
        for x in range(9)
        for y in range(9)
        if (x - 4) ** 2 + (y - 4) ** 2 <= 9
    }
    assert visible == expected


def test_flags_follow_the_visible_set(open_room):
    visible = compute_visibility(open_room, 2, 2, 4)
    for x, y in open_room.coords():
        c = open_room.cell(x, y)
        assert c.visible == ((x, y) in visible)
        if c.visible:
            assert c.explored


def test_walls_bounding_the_room_are_visible(open_room):
    visible = compute_visibility(open_room, 4, 4, 10)
    assert len(visible) == 81


def test_symmetry_in_open_room(open_room):
    floor = [(x, y) for x, y in open_room.coords() if not open_room.blocks_sight(x, y)]
    views = {p: compute_visibility(open_room, p[0], p[1], 4) for p in floor}
    for a, b in itertools.combinations(floor, 2):
        assert (b in views[a]) == (a in views[b])


def test_cell_behind_wall_not_visible():
    grid = GridMap.from_ascii(
        [
            "#########",
            "#..#....#",
            "#..#....#",
            "#..#....#",
            "#..#....#",
            "#..#....#",
            "#########",
        ]
    )
    visible = compute_visibility(grid, 1, 3, 10)
    assert (3, 3) in visible
    for x in range(4, 8):
        for y in range(1, 6):
            assert (x, y) not in visible


def test_recompute_clears_previous_visibility():
    grid = GridMap.from_ascii(
        [
            "#########",
            "#...#...#",
            "#...#...#",
            "#########",
        ]
    )
    compute_visibility(grid, 1, 1, 5)
    compute_visibility(grid, 7, 1, 5)
    left = grid.cell(2, 1)
    assert not left.visible
    assert left.explored
    assert grid.cell(6, 2).visible


def test_out_of_bounds_origin_sees_nothing(open_room):
    compute_visibility(open_room, 4, 4, 3)
    assert compute_visibility(open_room, -3, 4, 3) == set()
    assert not any(c.visible for c in open_room.cells)


def test_bresenham_endpoints_and_steps():
    line = bresenham_line(0, 0, 5, 2)
    assert line[0] == (0, 0) and line[-1] == (5, 2)
    assert len(line) == 6
    assert bresenham_line(3, 3, 3, 3) == [(3, 3)]


def test_line_of_sight_blocked_by_wall():
    grid = GridMap.from_ascii([".....", "..#..", "....."])
    assert not has_line_of_sight(grid, 0, 1, 4, 1)
    assert has_line_of_sight(grid, 0, 0, 4, 0)


def test_line_of_sight_allows_opaque_endpoints():
    grid = GridMap.from_ascii(["..#"])
    assert has_line_of_sight(grid, 0, 0, 2, 0)


def test_concealed_target_never_in_sight():
    grid = GridMap.from_ascii(["..*", "..."])
    assert not has_line_of_sight(grid, 1, 0, 2, 0)
    assert not has_line_of_sight(grid, 0, 1, 2, 0)
    # Still visible to the area scan
    assert (2, 0) in compute_visibility(grid, 1, 0, 3)


def test_line_of_sight_out_of_bounds():
    grid = GridMap(3, 3)
    assert not has_line_of_sight(grid, 0, 0, 5, 5)
    assert not has_line_of_sight(grid, -1, 0, 1, 1)


def test_adjacent_open_cells_agree(open_room):
    for dx, dy in ((1, 0), (0, 1), (1, 1), (-1, 0)):
        target = (4 + dx, 4 + dy)
        assert has_line_of_sight(open_room, 4, 4, *target)
        assert target in compute_visibility(open_room, 4, 4, 2)
