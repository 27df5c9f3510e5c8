import numpy as np
import pytest
from PIL import Image

from cubemaze.geometry import (
    BLACK,
    GRAY,
    RED,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    WALL_BLUE,
    WHITE,
    Face,
    RayHit,
    rgb2int,
)
from cubemaze.parser import parse_scene
from cubemaze.raycaster import Ray, cast_all
from cubemaze.render import (
    TRANSPARENT,
    Frame,
    Texture,
    TextureSet,
    draw_column,
    draw_enemy,
    draw_minimap,
    draw_scene,
    wall_pixel,
)
from cubemaze.state import Game

SCENE = """NO ./n.xpm
SO ./s.xpm
WE ./w.xpm
EA ./e.xpm
F 10,20,30
EN ./x.xpm
C 40,50,60

111111
100001
10N001
100001
111111
"""

FLOOR = rgb2int(10, 20, 30)
CEILING = rgb2int(40, 50, 60)
COLORS = {
    "north": 0x111111,
    "south": 0x222222,
    "west": 0x333333,
    "east": 0x444444,
    "door": 0x555555,
    "enemy": 0x666666,
}


def uniform(color, size=64):
    return Texture(np.full((size, size), color))


@pytest.fixture
def game():
    return Game(parse_scene(SCENE))


@pytest.fixture
def textures():
    return TextureSet(**{name: uniform(color) for name, color in COLORS.items()})


def test_texture_load_round_trip(tmp_path):
    image = Image.new("RGBA", (2, 2))
    image.putpixel((0, 0), (1, 2, 3, 255))
    image.putpixel((1, 0), (200, 100, 50, 255))
    image.putpixel((0, 1), (9, 9, 9, 0))
    image.putpixel((1, 1), (0, 0, 0, 255))
    path = tmp_path / "t.png"
    image.save(path)
    texture = Texture.load(path)
    assert (texture.width, texture.height) == (2, 2)
    assert texture.pixel(0, 0) == rgb2int(1, 2, 3)
    assert texture.pixel(1, 0) == rgb2int(200, 100, 50)
    assert texture.pixel(0, 1) == TRANSPARENT
    assert texture.pixel(1, 1) == 0


def test_texture_pixel_out_of_range():
    texture = uniform(0x123456, size=4)
    with pytest.raises(IndexError):
        texture.pixel(4, 0)
    with pytest.raises(IndexError):
        texture.pixel(0, -1)


def test_for_face(textures):
    assert textures.for_face(Face.NORTH) is textures.north
    assert textures.for_face(Face.SOUTH) is textures.south
    assert textures.for_face(Face.WEST) is textures.west
    assert textures.for_face(Face.EAST) is textures.east
    assert textures.for_face(Face.DOOR_HORIZONTAL) is textures.door
    assert textures.for_face(Face.DOOR_VERTICAL) is textures.door
    with pytest.raises(ValueError):
        textures.for_face(Face.NONE)


def test_frame_put_clips_and_truncates():
    frame = Frame()
    assert frame.pixels.shape == (SCREEN_HEIGHT, SCREEN_WIDTH)
    assert not frame.pixels.any()
    frame.put(10.7, 20.2, RED)
    assert frame.pixels[20, 10] == RED
    frame.put(SCREEN_WIDTH, 0, RED)
    frame.put(0, SCREEN_HEIGHT, RED)
    frame.put(-2, 5, RED)
    assert int((frame.pixels == RED).sum()) == 1


def test_wall_pixel_above_and_inside_wall(game, textures):
    ray = Ray(RayHit(150.0, 99.99999, Face.NORTH), 1000.0)
    assert wall_pixel(game, textures, ray, 0) == FLOOR
    assert wall_pixel(game, textures, ray, SCREEN_HEIGHT // 2) == COLORS["north"]


def test_wall_pixel_without_face_is_floor(game, textures):
    ray = Ray(RayHit(0.0, 0.0, Face.NONE), 100.0)
    assert wall_pixel(game, textures, ray, SCREEN_HEIGHT // 2) == FLOOR


def test_draw_column_matches_wall_pixel(game):
    gradient = Texture(np.arange(64 * 64).reshape(64, 64))
    textures = TextureSet(gradient, gradient, gradient, gradient, gradient, gradient)
    ray = Ray(RayHit(137.0, 99.99999, Face.NORTH), 1000.0)
    frame = Frame()
    draw_column(frame, game, textures, ray, 7)
    for y in range(300, 421):
        assert frame.pixels[y, 7] == wall_pixel(game, textures, ray, y)
    assert frame.pixels[0, 7] == CEILING
    assert frame.pixels[SCREEN_HEIGHT - 1, 7] == FLOOR
    assert not frame.pixels[:, 6].any()


def test_draw_column_offset_follows_pitch(game, textures):
    game.pitch = 20
    draw_column(Frame(), game, textures, Ray(RayHit(150.0, 99.99999, Face.NORTH), 500.0), 0)
    assert game.jump.offset == 20


def test_draw_enemy_hidden_when_not_seen(game, textures):
    frame = Frame()
    game.enemy.dst = 0
    draw_enemy(frame, game, textures.enemy)
    assert not frame.pixels.any()


def test_draw_enemy_draws_sprite(game):
    frame = Frame()
    game.enemy.screen_x = SCREEN_WIDTH // 2
    game.enemy.dst = 1000
    draw_enemy(frame, game, uniform(COLORS["enemy"], size=100))
    assert frame.pixels[SCREEN_HEIGHT // 2, SCREEN_WIDTH // 2] == COLORS["enemy"]
    assert frame.pixels[SCREEN_HEIGHT // 2, SCREEN_WIDTH // 2 + 300] == 0
    assert frame.pixels[0, 0] == 0


def test_draw_enemy_skips_transparent(game):
    frame = Frame()
    game.enemy.screen_x = SCREEN_WIDTH // 2
    game.enemy.dst = 1000
    draw_enemy(frame, game, uniform(TRANSPARENT, size=100))
    assert not frame.pixels.any()


def test_draw_minimap_colours(game):
    frame = Frame()
    frame.pixels[:] = 0x010101
    draw_minimap(frame, game)
    assert frame.pixels[0, 0] == 0x010101
    region = frame.pixels[5:180, 5:320]
    assert set(np.unique(region).tolist()) <= {BLACK, GRAY, WALL_BLUE, WHITE, RED}
    assert (region == RED).any()
    assert (region == WALL_BLUE).any()
    assert frame.pixels[200, 400] == 0x010101


def test_draw_scene_faces_north(game, textures):
    rays = cast_all(game)
    frame = Frame()
    draw_scene(frame, game, textures, rays)
    assert frame.pixels[SCREEN_HEIGHT // 2, SCREEN_WIDTH // 2] == COLORS["north"]
    allowed = set(COLORS.values()) | {FLOOR, CEILING}
    assert set(np.unique(frame.pixels).tolist()) <= allowed