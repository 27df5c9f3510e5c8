"""Reading and validating ``.cub`` scene descriptions."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

from cubemaze.geometry import DOOR, EMPTY, FLOOR, PI, SCALE, WALL, GameMap

# The whitespace set recognised by the scene format: tab to carriage return and space.
_SPACES = "\t\n\v\f\r "
_WS = r"[\t\n\v\f\r ]"
_TOKEN = r"[^\t\n\v\f\r ]+"
_PATH_RE = re.compile(rf"{_WS}*({_TOKEN}){_WS}*")
_NUMBER = r"([0-9]+)"
_COLOR_RE = re.compile(
    rf"{_WS}*{_NUMBER}{_WS}*,{_WS}*{_NUMBER}{_WS}*,{_WS}*{_NUMBER}{_WS}*"
)

HEADER_ENTRIES = 7
EXTENSION = ".cub"
ENEMY = "X"
PLAYER_ANGLES = {
    "N": PI + PI / 2,
    "S": PI / 2,
    "E": 0.0,
    "W": PI,
}

Color = tuple[int, int, int]


class SceneError(ValueError):
    """A scene file is malformed or describes an unplayable map."""


@dataclass
class Scene:
    """Everything a ``.cub`` file describes.

    When the map holds no enemy start (``X``) the enemy stays at the origin.
    """

    north: str
    south: str
    west: str
    east: str
    floor: Color
    ceiling: Color
    enemy_texture: str
    grid: GameMap
    player_x: int
    player_y: int
    player_angle: float
    enemy_x: float = 0.0
    enemy_y: float = 0.0


def check_extension(path: Union[str, os.PathLike]) -> None:
    """Raise :class:`SceneError` unless ``path`` ends in ``.cub`` after a name."""
    name = os.fspath(path)
    dot = name.rfind(".")
    if dot <= 0 or name[dot:] != EXTENSION:
        raise SceneError("file name is not .cub extension!")


def is_blank(text: str) -> bool:
    """Whether ``text`` holds nothing but whitespace."""
    return all(ch in _SPACES for ch in text)


def parse_texture_path(line: str) -> str:
    """Return the single path that follows a two-letter texture key."""
    rest = line.lstrip(_SPACES)[2:]
    match = _PATH_RE.fullmatch(rest)
    if match is None:
        raise SceneError("invalid texture path")
    return match.group(1)


def parse_color(line: str) -> Color:
    """Return the ``(r, g, b)`` triple that follows a one-letter colour key."""
    rest = line.lstrip(_SPACES)[1:]
    match = _COLOR_RE.fullmatch(rest)
    if match is None:
        raise SceneError("invalid color")
    red, green, blue = (int(part) for part in match.groups())
    if red > 255 or green > 255 or blue > 255:
        raise SceneError("invalid color")
    return red, green, blue


# (key, key whose absence allows the entry, parser); checked in this order.
# An enemy texture is only recognised while the ceiling is still unset.
_HEADER_RULES: tuple[tuple[str, str, Callable[[str], object]], ...] = (
    ("NO", "NO", parse_texture_path),
    ("SO", "SO", parse_texture_path),
    ("WE", "WE", parse_texture_path),
    ("EA", "EA", parse_texture_path),
    ("F", "F", parse_color),
    ("C", "C", parse_color),
    ("EN", "C", parse_texture_path),
)


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _read_header_line(line: str, entries: dict[str, object]) -> bool:
    """Store one header entry; return whether the line counted as one."""
    head = line.lstrip(_SPACES)
    for key, guard, parse in _HEADER_RULES:
        if guard not in entries and head.startswith(key):
            entries[key] = parse(line)
            return True
    if is_blank(head):
        return False
    raise SceneError("contains an invalid character")


def _unclosed(grid: GameMap, y: int, x: int) -> bool:
    return (
        y + 1 >= grid.height
        or grid[y + 1, x] == EMPTY
        or y - 1 < 0
        or grid[y - 1, x] == EMPTY
        or x + 1 >= grid.width
        or grid[y, x + 1] == EMPTY
        or x - 1 < 0
        or grid[y, x - 1] == EMPTY
    )


def _door_framed(grid: GameMap, y: int, x: int) -> bool:
    return (grid[y, x - 1] == WALL and grid[y, x + 1] == WALL) or (
        grid[y - 1, x] == WALL and grid[y + 1, x] == WALL
    )


def validate_map(scene: Scene) -> None:
    """Check that the map is closed and well formed, and place the enemy.

    Enemy starts are replaced by floor in ``scene.grid``.
    """
    grid = scene.grid
    enemies = 0
    for y, row in enumerate(grid.rows):
        for x, cell in enumerate(row):
            if cell in (FLOOR, ENEMY, DOOR) and _unclosed(grid, y, x):
                raise SceneError("invalid map: map is not closed by walls")
            if cell == ENEMY:
                scene.enemy_x = float(x * SCALE + SCALE // 2)
                scene.enemy_y = float(y * SCALE + SCALE // 2)
                grid[y, x] = FLOOR
                enemies += 1
            elif cell == DOOR:
                if not _door_framed(grid, y, x):
                    raise SceneError("invalid map: door must sit between two walls")
            elif cell not in (FLOOR, WALL, EMPTY):
                raise SceneError("invalid map: contains an invalid character")
    if enemies > 1:
        raise SceneError("invalid map: more than one enemy starting point (X)")


def parse_scene(text: str) -> Scene:
    """Parse and validate the full text of a scene file."""
    entries: dict[str, object] = {}
    lines = iter(_split_lines(text))
    recognised = 0
    for line in lines:
        if _read_header_line(line, entries):
            recognised += 1
        if recognised == HEADER_ENTRIES:
            break
    rows = [line for line in lines if not is_blank(line)]

    players = [
        (y, x, cell)
        for y, row in enumerate(rows)
        for x, cell in enumerate(row)
        if cell in PLAYER_ANGLES
    ]
    if len(players) != 1:
        raise SceneError(
            "invalid map: less or more than one player starting point "
            "(N or E or S or W)"
        )
    player_row, player_col, facing = players[0]
    rows[player_row] = (
        rows[player_row][:player_col] + FLOOR + rows[player_row][player_col + 1:]
    )

    missing = [key for key, _, _ in _HEADER_RULES if key not in entries]
    if missing:
        raise SceneError(f"missing scene element(s): {', '.join(missing)}")

    scene = Scene(
        north=entries["NO"],
        south=entries["SO"],
        west=entries["WE"],
        east=entries["EA"],
        floor=entries["F"],
        ceiling=entries["C"],
        enemy_texture=entries["EN"],
        grid=GameMap(rows),
        player_x=player_col * SCALE + SCALE // 2,
        player_y=player_row * SCALE + SCALE // 2,
        player_angle=PLAYER_ANGLES[facing],
    )
    validate_map(scene)
    return scene


def load_scene(path: Union[str, os.PathLike]) -> Scene:
    """Read, parse and validate the scene file at ``path``."""
    check_extension(path)
    name = os.fspath(path)
    try:
        text = Path(name).read_text(encoding="latin-1")
    except OSError as exc:
        raise SceneError(f"{name}: {exc.strerror or exc}") from exc
    return parse_scene(text)