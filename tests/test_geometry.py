import math

import pytest

from cubemaze.geometry import (
    BLACK,
    BLEU,
    DOOR,
    EYE_ANGLE,
    FLOOR,
    Face,
    GameMap,
    OPEN_DOOR,
    PI,
    RAD,
    RED,
    RayHit,
    SCALE,
    SCREEN_WIDTH,
    WALL,
    WALL_BLUE,
    WHITE,
    d2rad,
    distance,
    in_angle_range,
    minimap_color,
    normalize_angle,
    ray_increment,
    rgb2int,
    scale_between,
)


@pytest.fixture
def grid():
    return GameMap(["111", "10D", "1"])


def test_rgb2int_matches_colour_constants():
    assert rgb2int(0xFF, 0x00, 0x00) == RED
    assert rgb2int(0xFF, 0xFF, 0xFF) == WHITE
    assert rgb2int(0, 0, 0) == BLACK


def test_rgb2int_channels_recoverable():
    packed = rgb2int(12, 34, 56)
    assert (packed >> 16, (packed >> 8) & 0xFF, packed & 0xFF) == (12, 34, 56)


def test_scale_between_endpoints():
    assert scale_between(0, 200, 0, 100) == 0
    assert scale_between(100, 200, 0, 100) == 200


def test_scale_between_is_monotonic():
    values = [scale_between(v, 200, 0, 1000) for v in range(0, 1001, 50)]
    assert values == sorted(values)


def test_scale_between_truncates_float_input():
    assert scale_between(100.9, 200, 0, 100) == scale_between(100, 200, 0, 100)


def test_scale_between_empty_range():
    with pytest.raises(ZeroDivisionError):
        scale_between(5, 10, 3, 3)


def test_d2rad_half_turn():
    assert d2rad(180) == pytest.approx(PI)
    assert d2rad(0) == 0


def test_ray_increment_covers_field_of_view():
    assert ray_increment() * SCREEN_WIDTH == pytest.approx(d2rad(EYE_ANGLE))


def test_in_angle_range_plain():
    assert in_angle_range(1.0, 0.5, 1.5)
    assert not in_angle_range(2.0, 0.5, 1.5)


def test_in_angle_range_wraps_through_zero():
    assert in_angle_range(0.1, RAD - 0.5, 0.5)
    assert in_angle_range(RAD - 0.1, RAD - 0.5, 0.5)
    assert not in_angle_range(PI, RAD - 0.5, 0.5)


@pytest.mark.parametrize("angle", [-10.0, -0.3, 0.0, 1.0, RAD + 1.0, 25.0])
def test_normalize_angle_range_and_equivalence(angle):
    result = normalize_angle(angle)
    assert 0 <= result < RAD
    assert math.cos(result) == pytest.approx(math.cos(angle), abs=1e-6)
    assert math.sin(result) == pytest.approx(math.sin(angle), abs=1e-6)


def test_normalize_angle_keeps_in_range_value():
    assert normalize_angle(1.25) == 1.25


def test_minimap_color():
    assert minimap_color(WALL) == WALL_BLUE
    assert minimap_color(FLOOR) == WHITE
    assert minimap_color(DOOR) == RED
    assert minimap_color(OPEN_DOOR) == BLEU
    assert minimap_color(" ") == BLACK


def test_distance_symmetric_and_pythagorean():
    assert distance(0, 0, 3, 4) == pytest.approx(5.0)
    assert distance(3, 4, 0, 0) == distance(0, 0, 3, 4)
    assert distance(7, 7, 7, 7) == 0


def test_face_door_and_axis_flags():
    door_h = RayHit(0.0, 0.0, Face.DOOR_HORIZONTAL)
    door_v = RayHit(0.0, 0.0, Face.DOOR_VERTICAL)
    north = RayHit(0.0, 0.0, Face.NORTH)
    west = RayHit(0.0, 0.0, Face.WEST)
    south = RayHit(0.0, 0.0, Face.SOUTH)
    assert door_h.face.is_door and door_v.face.is_door
    assert not north.face.is_door
    assert west.face.runs_along_y and door_v.face.runs_along_y
    assert not south.face.runs_along_y


def test_rayhit_defaults_to_no_face():
    hit = RayHit(1.5, 2.5)
    assert (hit.x, hit.y, hit.face) == (1.5, 2.5, Face.NONE)


def test_gamemap_pads_rows(grid):
    assert grid.width == 3
    assert grid.height == 3
    assert grid[2] == "1  "
    assert grid.rows == ["111", "10D", "1  "]


def test_gamemap_cell_access_and_update(grid):
    assert grid[1, 2] == DOOR
    grid[1, 2] = OPEN_DOOR
    assert grid[1, 2] == OPEN_DOOR


def test_gamemap_rejects_out_of_range(grid):
    with pytest.raises(IndexError):
        grid[-1, 0]
    with pytest.raises(IndexError):
        grid[0, 3]
    with pytest.raises(IndexError):
        grid[5]
    with pytest.raises(IndexError):
        grid[3, 0] = WALL
    assert grid.rows == ["111", "10D", "1  "]


def test_gamemap_rejects_multi_char(grid):
    with pytest.raises(ValueError):
        grid[1, 1] = "00"
    assert grid[1, 1] == FLOOR
    assert grid.rows == ["111", "10D", "1  "]


def test_cell_at_uses_world_coordinates(grid):
    assert grid.cell_at(SCALE * 1.5, SCALE * 1.5) == FLOOR
    assert grid.cell_at(SCALE * 2.1, SCALE * 1.9) == DOOR
    assert grid.cell_at(SCALE * 10, 0) == ""


def test_outside_bounds(grid):
    assert not grid.outside(0, 0)
    assert grid.outside(-1, 0)
    assert grid.outside(0, 3 * SCALE)
    assert grid.outside(3 * SCALE, 0)
    assert not grid.outside(3 * SCALE - 1, 3 * SCALE - 1)


def test_blocks_walls_doors_and_outside(grid):
    assert grid.blocks(SCALE * 0.5, SCALE * 0.5)
    assert grid.blocks(SCALE * 2.5, SCALE * 1.5)
    assert not grid.blocks(SCALE * 1.5, SCALE * 1.5)
    assert grid.blocks(-5, 50)
    grid[1, 2] = OPEN_DOOR
    assert not grid.blocks(SCALE * 2.5, SCALE * 1.5)


def test_gamemap_equality_and_iteration():
    first = GameMap(["10", "01"])
    second = GameMap(list(first))
    assert first == second
    second[0, 0] = FLOOR
    assert first != second