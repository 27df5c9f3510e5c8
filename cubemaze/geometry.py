"""Shared constants, angle helpers, colours and the grid map."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

# Screen size in pixels.
SCREEN_WIDTH = 1280
SCREEN_HEIGHT = 720

# Colours (0xRRGGBB).
RED = 0xFF0000
WHITE = 0xFFFFFF
BLACK = 0x000000
DOOR_H = 0xFFF000
DOOR_W = 0x0F00FF
GREEN = 0x36FF00
GRAY = 0x808080
BLEU = 0x0021FF
WALL_BLUE = 0x002177

# Minimap geometry.
SCALE_P = 2
MINIMAP_WIDTH = 320
MINIMAP_HEIGHT = 180

# World and movement tuning.
ENEMY_SPACE = 15
PLAYER_SPACE = 3
RAD = 6.2831853072
NINETY_DEGREE = 1.5707963268
PI = 3.141592653589793
SCALE = 100
ENEMY_SPEED = 4
PLAYER_SPEED = 10
ROTATION_SPEED = 0.05
EYE_ANGLE = 60
MAGIC_NUMBER = 0.00001

WALL = "1"
FLOOR = "0"
DOOR = "D"
OPEN_DOOR = "O"
EMPTY = " "


class Face(IntEnum):
    """Which kind of surface a ray struck; values are the debug colours."""

    NONE = 0
    NORTH = WHITE
    SOUTH = BLEU
    WEST = GREEN
    EAST = GRAY
    DOOR_HORIZONTAL = DOOR_H
    DOOR_VERTICAL = DOOR_W

    @property
    def is_door(self) -> bool:
        return self in (Face.DOOR_HORIZONTAL, Face.DOOR_VERTICAL)

    @property
    def runs_along_y(self) -> bool:
        """True for surfaces whose texture column follows the y coordinate."""
        return self in (Face.WEST, Face.EAST, Face.DOOR_VERTICAL)


@dataclass
class RayHit:
    """A point in world coordinates reached by a ray, with the face it hit."""

    x: float
    y: float
    face: Face = Face.NONE


def rgb2int(r: int, g: int, b: int) -> int:
    """Pack three channels into one 0xRRGGBB integer."""
    return (r << 16) | (g << 8) | b


def scale_between(value: float, max_allowed: float, low: float, high: float) -> int:
    """Map ``value`` from ``[low, high]`` onto ``[0, max_allowed]`` in integers.

    Every argument is truncated to an integer first and the quotient is
    truncated towards zero.
    """
    v, m, lo, hi = int(value), int(max_allowed), int(low), int(high)
    numerator = m * (v - lo)
    denominator = hi - lo
    if denominator == 0:
        raise ZeroDivisionError("scale_between: empty source range")
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def d2rad(degrees: float) -> float:
    """Convert degrees to radians."""
    return degrees * PI / 180


def ray_increment() -> float:
    """Angle between two neighbouring screen columns."""
    return d2rad(1.0 / (SCREEN_WIDTH / EYE_ANGLE))


def in_angle_range(a: float, low: float, high: float) -> bool:
    """Whether angle ``a`` lies in ``[low, high]``, wrapping through zero."""
    if high > low:
        return low <= a <= high
    return low <= a <= RAD or 0 <= a <= high


def normalize_angle(a: float) -> float:
    """Bring an angle into ``[0, RAD)``."""
    a = a - int(a / RAD) * RAD
    if a < 0:
        a = RAD + a
    return a


def minimap_color(cell: str) -> int:
    """Colour of one map cell on the minimap."""
    return {
        WALL: WALL_BLUE,
        FLOOR: WHITE,
        DOOR: RED,
        OPEN_DOOR: BLEU,
    }.get(cell, BLACK)


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(x1 - x2, y1 - y2)


class GameMap:
    """A rectangular grid of single-character cells, indexed ``[row, col]``."""

    def __init__(self, rows: Iterable[str]) -> None:
        lines = list(rows)
        width = max((len(line) for line in lines), default=0)
        self._cells = [list(line.ljust(width, EMPTY)) for line in lines]
        self.width = width
        self.height = len(self._cells)

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"cell ({row}, {col}) is outside the map")

    def __getitem__(self, key: int | tuple[int, int]) -> str:
        if isinstance(key, tuple):
            row, col = key
            self._check(row, col)
            return self._cells[row][col]
        if not 0 <= key < self.height:
            raise IndexError(f"row {key} is outside the map")
        return "".join(self._cells[key])

    def __setitem__(self, key: tuple[int, int], value: str) -> None:
        if len(value) != 1:
            raise ValueError("a map cell holds exactly one character")
        row, col = key
        self._check(row, col)
        self._cells[row][col] = value

    def __len__(self) -> int:
        return self.height

    def __iter__(self):
        return ("".join(row) for row in self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameMap):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"GameMap({list(self)!r})"

    @property
    def rows(self) -> list[str]:
        return list(self)

    def cell_at(self, x: float, y: float) -> str:
        """Cell under world point ``(x, y)``, or ``''`` outside the grid."""
        row, col = int(y / SCALE), int(x / SCALE)
        if 0 <= row < self.height and 0 <= col < self.width:
            return self._cells[row][col]
        return ""

    def outside(self, x: float, y: float) -> bool:
        """Whether a world point lies beyond the map's bounds."""
        return x >= self.width * SCALE or y >= self.height * SCALE or x < 0 or y < 0

    def blocks(self, x: float, y: float) -> bool:
        """Whether a world point is off the map, in a wall or in a closed door."""
        return self.outside(x, y) or self.cell_at(x, y) in (WALL, DOOR)