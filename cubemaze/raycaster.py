"""Grid ray casting: where each screen column's ray meets a wall or door."""

from __future__ import annotations

import math
from dataclasses import dataclass

from cubemaze.geometry import (
    DOOR,
    EYE_ANGLE,
    MAGIC_NUMBER,
    OPEN_DOOR,
    PI,
    RAD,
    SCALE,
    SCREEN_WIDTH,
    Face,
    RayHit,
    d2rad,
    distance,
    in_angle_range,
    normalize_angle,
    ray_increment,
)
from cubemaze.state import Action, Game

CENTER_COLUMN = SCREEN_WIDTH // 2
DOOR_REACH = SCALE * 3

Point = tuple[float, float]


@dataclass
class Ray:
    """The point a ray stopped at and its fish-eye corrected length."""

    hit: RayHit
    length: float


@dataclass
class _Stepper:
    """Walks along successive crossings of one family of grid lines."""

    point: Point
    step: Point

    def advance(self) -> None:
        x, y = self.point
        dx, dy = self.step
        self.point = (x + dx, y + dy)


def _sentinel(game: Game) -> tuple[Point, Point]:
    far = (float(game.grid.width * SCALE), float(game.grid.height * SCALE))
    return far, far


def horizontal_start(game: Game, angle: float) -> tuple[Point, Point]:
    """First crossing of a horizontal grid line and the step to the next one.

    Returns ``((x, y), (step_x, step_y))``. A ray running parallel to the
    horizontal lines gets a far-away point beyond the map instead.
    """
    px, py = game.player.x, game.player.y
    base = int(py) // SCALE * SCALE
    if PI < angle < RAD:
        y = base - MAGIC_NUMBER
        step_y = -SCALE
        if angle > PI + PI / 2:
            x = px + (py - y) / math.tan(RAD - angle)
            step_x = SCALE / math.tan(RAD - angle)
        elif angle < PI + PI / 2:
            x = px + (py - y) / math.tan(RAD - angle)
            step_x = step_y / math.tan(angle - PI)
        else:
            x = px
            step_x = 0
        return (float(x), float(y)), (float(step_x), float(step_y))
    if 0 < angle < PI:
        y = base + SCALE
        step_y = SCALE
        if angle < PI / 2:
            x = px + (y - py) / math.tan(angle)
            step_x = step_y / math.tan(angle)
        elif angle > PI / 2:
            x = px + (y - py) / math.tan(angle)
            step_x = -step_y / math.tan(PI - angle)
        else:
            x = px
            step_x = 0
        return (float(x), float(y)), (float(step_x), float(step_y))
    return _sentinel(game)


def vertical_start(game: Game, angle: float) -> tuple[Point, Point]:
    """First crossing of a vertical grid line and the step to the next one.

    Returns ``((x, y), (step_x, step_y))``. A ray running parallel to the
    vertical lines gets a far-away point beyond the map instead.
    """
    px, py = game.player.x, game.player.y
    base = int(px) // SCALE * SCALE
    if angle > PI + PI / 2 or angle < PI / 2:
        x = base + SCALE
        if angle > PI + PI / 2:
            y = py - (x - px) * math.tan(RAD - angle)
            step_y = -SCALE * math.tan(RAD - angle)
        else:
            y = py + (x - px) * math.tan(angle)
            step_y = SCALE * math.tan(angle)
        return (float(x), float(y)), (float(SCALE), float(step_y))
    if PI / 2 < angle < PI + PI / 2:
        x = base - MAGIC_NUMBER
        if angle <= PI:
            y = py + math.tan(PI - angle) * (px - x)
            step_y = SCALE * math.tan(PI - angle)
        else:
            y = py - (px - x) * math.tan(angle - PI)
            step_y = -SCALE * math.tan(angle - PI)
        return (float(x), float(y)), (float(-SCALE), float(step_y))
    return _sentinel(game)


def _from_player(game: Game, x: float, y: float) -> float:
    return distance(game.player.x, game.player.y, x, y)


def _vertical_hit(game: Game, stepper: _Stepper, angle: float) -> RayHit:
    x, y = stepper.point
    grid = game.grid
    if grid.cell_at(x, y) == DOOR:
        face = Face.DOOR_VERTICAL
    elif grid.blocks(x, y) and (0 <= angle < PI / 2 or PI + PI / 2 < angle <= RAD):
        face = Face.EAST
    elif grid.blocks(x, y):
        face = Face.WEST
    else:
        face = Face.NONE
    stepper.advance()
    return RayHit(x, y, face)


def _horizontal_hit(game: Game, stepper: _Stepper, angle: float) -> RayHit:
    x, y = stepper.point
    grid = game.grid
    if grid.cell_at(x, y) == DOOR:
        face = Face.DOOR_HORIZONTAL
    elif grid.blocks(x, y) and PI < angle < RAD:
        face = Face.NORTH
    elif grid.blocks(x, y):
        face = Face.SOUTH
    else:
        face = Face.NONE
    stepper.advance()
    return RayHit(x, y, face)


def _nearest(
    game: Game, horizontal: _Stepper, vertical: _Stepper, angle: float
) -> RayHit | None:
    """Take the nearer of the two pending crossings, or ``None`` on a tie."""
    h_dist = _from_player(game, *horizontal.point)
    v_dist = _from_player(game, *vertical.point)
    if h_dist > v_dist:
        return _vertical_hit(game, vertical, angle)
    if h_dist < v_dist:
        return _horizontal_hit(game, horizontal, angle)
    return None


def _cell_of(x: float, y: float) -> tuple[int, int]:
    return int(y / SCALE), int(x / SCALE)


def _close_passed_door(game: Game, hit: RayHit) -> None:
    """Close an open door the centre ray passes through, if asked to."""
    if game.grid.cell_at(hit.x, hit.y) != OPEN_DOOR:
        return
    if Action.OPEN not in game.held:
        return
    if _from_player(game, hit.x, hit.y) >= DOOR_REACH:
        return
    game.held.discard(Action.OPEN)
    enemy_cell = _cell_of(game.enemy.x, game.enemy.y)
    door_cell = _cell_of(hit.x, hit.y)
    if enemy_cell != door_cell:
        game.grid[door_cell] = DOOR


def _open_hit_door(game: Game, hit: RayHit) -> None:
    """Open the door the centre ray stopped at, if asked to."""
    if (
        hit.face.is_door
        and Action.OPEN in game.held
        and _from_player(game, hit.x, hit.y) < DOOR_REACH
    ):
        game.held.discard(Action.OPEN)
        game.grid[_cell_of(hit.x, hit.y)] = OPEN_DOOR


def _track_enemy(game: Game, hit: RayHit, angle: float, column: int) -> None:
    """Record where the enemy appears on screen and how far away it is."""
    game.update_enemy_angle()
    enemy = game.enemy
    player_angle = game.player.angle
    half_fov = d2rad(EYE_ANGLE // 2)
    if not in_angle_range(
        enemy.angle,
        normalize_angle(player_angle - half_fov),
        normalize_angle(player_angle + half_fov),
    ):
        enemy.dst = 0
    half_step = ray_increment() / 2
    if in_angle_range(
        enemy.angle,
        normalize_angle(angle - half_step),
        normalize_angle(angle + half_step),
    ):
        reach = game.enemy_distance()
        if reach < _from_player(game, hit.x, hit.y):
            enemy.screen_x = column
            enemy.dst = int(reach)
        else:
            enemy.dst = 0


def cast_ray(game: Game, angle: float, column: int) -> RayHit:
    """Follow one ray until it leaves the map or meets a wall or door.

    The centre column also opens or closes doors within reach while the
    open action is held, and every column updates the enemy's screen
    position. A ray that meets both line families at exactly the same
    distance stops at the world origin.
    """
    horizontal = _Stepper(*horizontal_start(game, angle))
    vertical = _Stepper(*vertical_start(game, angle))
    centre = column == CENTER_COLUMN
    while True:
        hit = _nearest(game, horizontal, vertical, angle)
        if hit is None:
            hit = RayHit(0.0, 0.0)
            break
        if game.grid.blocks(hit.x, hit.y):
            break
        if centre:
            _close_passed_door(game, hit)
    if centre:
        _open_hit_door(game, hit)
    _track_enemy(game, hit, angle, column)
    return hit


def cast_all(game: Game) -> list[Ray]:
    """Cast one ray per screen column across the field of view."""
    angle = normalize_angle(game.player.angle - d2rad(EYE_ANGLE // 2))
    rays = []
    for column in range(SCREEN_WIDTH):
        hit = cast_ray(game, angle, column)
        offset = game.player.angle - angle
        if offset < 0:
            offset += RAD
        if offset > RAD:
            offset -= RAD
        length = _from_player(game, hit.x, hit.y) * math.cos(offset)
        rays.append(Ray(hit, length))
        angle = normalize_angle(angle + ray_increment())
    return rays