"""Drawing a frame: textured wall columns, the enemy sprite and the minimap."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Iterator, Sequence, Union

import numpy as np
from PIL import Image

from cubemaze.geometry import (
    BLACK,
    GRAY,
    MINIMAP_HEIGHT,
    MINIMAP_WIDTH,
    RED,
    SCALE,
    SCALE_P,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    Face,
    GameMap,
    RayHit,
    distance,
    minimap_color,
    rgb2int,
    scale_between,
)
from cubemaze.raycaster import Ray
from cubemaze.state import Game

TRANSPARENT = -1

JUMP_SHIFT = 200
MINIMAP_MARGIN = 5
ANGLE_LINE_LENGTH = 20
SPRITE_EDGE_TRIM = 15

# Keeps a ray that ends on the player from dividing by zero.
_MIN_LENGTH = 1e-6


@dataclass
class Texture:
    """An image as rows of 0xRRGGBB integers; transparent pixels hold ``TRANSPARENT``."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        self.pixels = np.asarray(self.pixels, dtype=np.int64)
        if self.pixels.ndim != 2:
            raise ValueError("a texture is a two-dimensional grid of colours")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def load(cls, path: Union[str, os.PathLike]) -> "Texture":
        """Read an image file; fully transparent pixels become ``TRANSPARENT``."""
        with Image.open(path) as image:
            rgba = np.asarray(image.convert("RGBA"), dtype=np.int64)
        colors = (rgba[..., 0] << 16) | (rgba[..., 1] << 8) | rgba[..., 2]
        colors[rgba[..., 3] == 0] = TRANSPARENT
        return cls(colors)

    def pixel(self, x: int, y: int) -> int:
        """Colour at column ``x`` of row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside the texture")
        return int(self.pixels[y, x])


@dataclass
class TextureSet:
    """The wall, door and enemy images of one scene."""

    north: Texture
    south: Texture
    west: Texture
    east: Texture
    door: Texture
    enemy: Texture

    def for_face(self, face: Face) -> Texture:
        """The texture drawn on a surface of kind ``face``."""
        if face is Face.NORTH:
            return self.north
        if face is Face.SOUTH:
            return self.south
        if face is Face.WEST:
            return self.west
        if face is Face.EAST:
            return self.east
        if face.is_door:
            return self.door
        raise ValueError(f"no texture for face {face.name}")


class Frame:
    """The screen image being drawn, one 0xRRGGBB value per pixel."""

    def __init__(self) -> None:
        self.width = SCREEN_WIDTH
        self.height = SCREEN_HEIGHT
        self.pixels = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=np.uint32)

    def put(self, x: float, y: float, color: int) -> None:
        """Set one pixel; coordinates are truncated and off-screen ones ignored."""
        col, row = int(x), int(y)
        if 0 <= col < self.width and 0 <= row < self.height:
            self.pixels[row, col] = color & 0xFFFFFFFF


def _fill_column(frame: Frame, column: int, start: int, stop: int, color: int) -> None:
    start, stop = max(0, start), min(frame.height, stop)
    if 0 <= column < frame.width and start < stop:
        frame.pixels[start:stop, column] = color & 0xFFFFFFFF


def _jump_offset(game: Game, size: float) -> int:
    """Vertical shift of an object of on-screen ``size`` caused by jump and pitch."""
    return (
        scale_between(game.jump.stats * size, JUMP_SHIFT, 0, SCREEN_WIDTH * SCREEN_HEIGHT)
        + game.pitch
    )


def _projection(game: Game, length: float) -> tuple[float, int, float]:
    """Projected wall height, vertical offset and top edge for a ray length."""
    wall_height = SCALE * SCREEN_WIDTH / max(length, _MIN_LENGTH)
    offset = _jump_offset(game, wall_height)
    top = SCREEN_HEIGHT // 2 + offset - wall_height / 2
    return wall_height, offset, top


def _trunc_div(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


def _texture_column(hit: RayHit, width: int) -> int:
    """Which texture column the hit point falls on."""
    coord = hit.y if hit.face.runs_along_y else hit.x
    base = _trunc_div(math.trunc(coord), SCALE) * SCALE
    return math.trunc((coord - base) * width / SCALE)


def wall_pixel(game: Game, textures: TextureSet, hit: Ray, y: int) -> int:
    """Colour of screen row ``y`` in the wall column drawn for ray ``hit``.

    Rows that fall outside the texture get the floor colour.
    """
    floor = rgb2int(*game.scene.floor)
    face = hit.hit.face
    if face is Face.NONE:
        return floor
    texture = textures.for_face(face)
    wall_height, _, top_edge = _projection(game, hit.length)
    top = math.trunc(top_edge)
    if y < top:
        return floor
    img_x = _texture_column(hit.hit, texture.width)
    img_y = math.trunc((y - top) * (texture.height / wall_height))
    if not (0 <= img_y < texture.height and 0 <= img_x < texture.width):
        return floor
    return texture.pixel(img_x, img_y)


def _wall_colors(
    game: Game,
    textures: TextureSet,
    ray: Ray,
    ys: np.ndarray,
    wall_height: float,
    top_edge: float,
) -> np.ndarray:
    floor = rgb2int(*game.scene.floor)
    face = ray.hit.face
    if face is Face.NONE:
        return np.full(len(ys), floor, dtype=np.int64)
    texture = textures.for_face(face)
    img_x = _texture_column(ray.hit, texture.width)
    if not 0 <= img_x < texture.width:
        return np.full(len(ys), floor, dtype=np.int64)
    top = math.trunc(top_edge)
    rel = ys - top
    img_y = np.trunc(rel * (texture.height / wall_height)).astype(np.int64)
    valid = (rel >= 0) & (img_y >= 0) & (img_y < texture.height)
    picked = texture.pixels[np.clip(img_y, 0, texture.height - 1), img_x]
    return np.where(valid, picked, floor)


def draw_column(
    frame: Frame, game: Game, textures: TextureSet, ray: Ray, column: int
) -> None:
    """Draw ceiling, wall slice and floor for one screen column."""
    wall_height, offset, top_edge = _projection(game, ray.length)
    game.jump.offset = offset
    ceiling = rgb2int(*game.scene.ceiling)
    floor = rgb2int(*game.scene.floor)

    y = max(0, math.ceil(top_edge))
    _fill_column(frame, column, 0, y, ceiling)

    wall_end = min(
        SCREEN_HEIGHT, math.ceil(SCREEN_HEIGHT // 2 + offset + wall_height / 2)
    )
    if wall_end > y:
        ys = np.arange(y, wall_end, dtype=np.int64)
        colors = _wall_colors(game, textures, ray, ys, wall_height, top_edge)
        shown = colors != TRANSPARENT
        if 0 <= column < frame.width:
            frame.pixels[ys[shown], column] = colors[shown]
        y = wall_end

    _fill_column(frame, column, y, SCREEN_HEIGHT, floor)


def draw_enemy(frame: Frame, game: Game, sprite: Texture) -> None:
    """Draw the enemy sprite where the rays last saw it, if they did."""
    enemy = game.enemy
    if enemy.dst == 0:
        return
    half_width = SCALE * SCREEN_HEIGHT // enemy.dst
    height = SCALE * SCREEN_WIDTH // enemy.dst
    offset = _jump_offset(game, height)
    game.jump.offset = offset
    half_height = height // 2

    left = enemy.screen_x - half_width
    right = enemy.screen_x + half_width
    top = SCREEN_HEIGHT // 2 + offset - half_height
    bottom = SCREEN_HEIGHT // 2 + offset + half_height
    ys = np.arange(max(top, 1), min(bottom, SCREEN_HEIGHT), dtype=np.int64)
    xs = np.arange(max(left, 1), min(right, SCREEN_WIDTH), dtype=np.int64)
    if ys.size == 0 or xs.size == 0:
        return

    first_y = SCREEN_HEIGHT // 2 - half_height
    img_y = sprite.width * (ys - offset - first_y) // (2 * half_height)
    img_x = (sprite.height - SPRITE_EDGE_TRIM) * (xs - left) // (2 * half_width)

    # Drawing stops at the first column that runs past the sprite's edge.
    past = np.nonzero(img_x > sprite.height)[0]
    if past.size:
        xs, img_x = xs[: past[0]], img_x[: past[0]]
        if xs.size == 0:
            return

    inside = (img_y < sprite.height)[:, None] & (img_x < sprite.width)[None, :]
    colors = sprite.pixels[
        np.clip(img_y, 0, sprite.height - 1)[:, None],
        np.clip(img_x, 0, sprite.width - 1)[None, :],
    ]
    shown = inside & (colors >= 0)
    region = frame.pixels[ys[0] : ys[-1] + 1, xs[0] : xs[-1] + 1]
    region[shown] = colors[shown]


def _minimap_scale(width: int, height: int) -> int:
    return 25 if width + height < 60 else 10


def _cell_colors(grid: GameMap) -> np.ndarray:
    return np.array(
        [[minimap_color(cell) for cell in row] for row in grid.rows], dtype=np.int64
    )


def _float_steps(start: float, stop: float) -> Iterator[float]:
    value = start
    while value < stop:
        yield value
        value += 1


def draw_minimap(frame: Frame, game: Game) -> None:
    """Draw the top-left minimap centred on the player, with the view direction."""
    grid = game.grid
    scale = _minimap_scale(grid.width, grid.height)
    px = game.player.x / SCALE * scale
    py = game.player.y / SCALE * scale
    x_map = math.trunc(px - MINIMAP_WIDTH // 2)
    y_map = math.trunc(py - MINIMAP_HEIGHT // 2)

    xs = np.arange(MINIMAP_MARGIN, MINIMAP_WIDTH, dtype=np.int64) + x_map
    ys = np.arange(MINIMAP_MARGIN, MINIMAP_HEIGHT, dtype=np.int64) + y_map
    if grid.width == 0 or grid.height == 0:
        colors = np.full((ys.size, xs.size), BLACK, dtype=np.int64)
    else:
        inside = ((ys >= 0) & (ys < grid.height * scale))[:, None] & (
            (xs >= 0) & (xs < grid.width * scale)
        )[None, :]
        cells = _cell_colors(grid)
        rows = np.clip(ys // scale, 0, grid.height - 1)
        cols = np.clip(xs // scale, 0, grid.width - 1)
        colors = cells[rows[:, None], cols[None, :]]
        on_line = (ys % scale == 0)[:, None] | (xs % scale == 0)[None, :]
        colors = np.where(on_line, GRAY, colors)
        colors = np.where(inside, colors, BLACK)
    frame.pixels[MINIMAP_MARGIN:MINIMAP_HEIGHT, MINIMAP_MARGIN:MINIMAP_WIDTH] = colors

    cx, cy = px - x_map, py - y_map
    for row in _float_steps(cy - SCALE_P, cy + SCALE_P):
        for col in _float_steps(cx - SCALE_P, cx + SCALE_P):
            frame.put(col, row, RED)
    angle = game.player.angle
    for n in range(1, ANGLE_LINE_LENGTH):
        frame.put(cx + math.cos(angle) * n, cy + math.sin(angle) * n, RED)


def draw_scene(
    frame: Frame, game: Game, textures: TextureSet, rays: Sequence[Ray]
) -> None:
    """Draw every wall column and the enemy, farther walls first."""
    reach = game.enemy_distance()
    px, py = game.player.x, game.player.y

    def beyond_enemy(ray: Ray) -> bool:
        return distance(px, py, ray.hit.x, ray.hit.y) > reach

    for column, ray in enumerate(rays):
        if beyond_enemy(ray):
            draw_column(frame, game, textures, ray, column)
    draw_enemy(frame, game, textures.enemy)
    for column, ray in enumerate(rays):
        if not beyond_enemy(ray):
            draw_column(frame, game, textures, ray, column)