"""Game state: player, enemy, held actions, movement and jumping."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto

from cubemaze.geometry import (
    ENEMY_SPACE,
    ENEMY_SPEED,
    FLOOR,
    NINETY_DEGREE,
    OPEN_DOOR,
    PI,
    PLAYER_SPACE,
    PLAYER_SPEED,
    RAD,
    ROTATION_SPEED,
    SCALE,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    WALL,
    GameMap,
    distance,
    normalize_angle,
)
from cubemaze.parser import Scene

PITCH_LIMIT = 300
PITCH_STEP = 10
MOUSE_EDGE_TURN = 0.05
ENEMY_SIDE_ANGLE = 0.2

JUMP_HEIGHT = 2000
JUMP_SPEED_UP = 200
JUMP_SPEED_DOWN = 100
JUMP_DECELERATION = 10

_WALKABLE = (FLOOR, OPEN_DOOR)


class Action(Enum):
    """Something the player can hold down."""

    FORWARD = auto()
    STRAFE_RIGHT = auto()
    BACKWARD = auto()
    STRAFE_LEFT = auto()
    TURN_LEFT = auto()
    TURN_RIGHT = auto()
    QUIT = auto()
    OPEN = auto()
    JUMP = auto()
    LOOK_UP = auto()
    LOOK_DOWN = auto()


class QuitGame(Exception):
    """The player asked to leave the game."""


class PlayerDied(Exception):
    """The enemy reached the player."""


@dataclass
class Player:
    """The player's position in world units and viewing angle in radians."""

    x: int
    y: int
    angle: float


@dataclass
class Enemy:
    """The enemy's position, heading and where it was last seen on screen."""

    x: float
    y: float
    angle: float = 0.0
    screen_x: int = 0
    dst: int = 0


@dataclass
class JumpState:
    """Vertical jump progress; ``offset`` is the rendering shift it causes."""

    stats: int = 0
    height: int = JUMP_HEIGHT
    speed_up: int = JUMP_SPEED_UP
    speed_down: int = JUMP_SPEED_DOWN
    offset: int = 0

    def reset(self) -> None:
        """Put the jump back at rest on the ground."""
        self.height = JUMP_HEIGHT
        self.speed_down = JUMP_SPEED_DOWN
        self.speed_up = JUMP_SPEED_UP
        self.stats = 0

    def step(self, active: bool) -> bool:
        """Advance one frame; return whether the jump is still rising."""
        if active:
            if self.stats < self.height:
                self.stats += self.speed_up
                self.speed_up -= JUMP_DECELERATION
                return True
            self.speed_up = JUMP_SPEED_UP
            return False
        if self.stats > 0:
            self.stats -= self.speed_down
        else:
            self.reset()
        return False


def _walkable(grid: GameMap, row_total: int, col_total: int) -> bool:
    """Whether the cell holding world point ``(col_total, row_total)`` can be entered."""
    if row_total < 0 or col_total < 0:
        return False
    row, col = row_total // SCALE, col_total // SCALE
    if row >= grid.height or col >= grid.width:
        return False
    return grid[row, col] in _WALKABLE


def _quadrant_atan(num: float, den: float) -> float:
    """Arc tangent of ``num / den`` for non-negative operands; ``den`` may be zero."""
    return math.atan2(num, den)


class Game:
    """Everything that changes while the game runs."""

    def __init__(self, scene: Scene) -> None:
        self.scene = scene
        self.grid = scene.grid
        self.player = Player(scene.player_x, scene.player_y, scene.player_angle)
        self.enemy = Enemy(scene.enemy_x, scene.enemy_y)
        self.jump = JumpState()
        self.pitch = 0
        self.held: set[Action] = set()
        self._last_mouse = (SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2)

    # Input -------------------------------------------------------------

    def press(self, action: Action) -> None:
        """Start holding ``action``; quitting raises :class:`QuitGame`."""
        if action is Action.QUIT:
            raise QuitGame()
        if action is Action.JUMP and self.jump.stats != 0:
            return
        self.held.add(action)

    def release(self, action: Action) -> None:
        """Stop holding ``action``. A jump runs its course regardless."""
        if action in (Action.JUMP, Action.QUIT):
            return
        self.held.discard(action)

    # Player movement ---------------------------------------------------

    def try_move(self, dy: int, dx: int) -> None:
        """Move the player by ``(dx, dy)``, each axis only if the way is clear."""
        p = self.player
        if _walkable(self.grid, p.y, p.x + dx * PLAYER_SPACE):
            p.x += dx
        if _walkable(self.grid, p.y + dy * PLAYER_SPACE, p.x):
            p.y += dy

    def _step(self, angle: float, sign: int) -> None:
        dy = int(sign * math.sin(angle) * PLAYER_SPEED)
        dx = int(sign * math.cos(angle) * PLAYER_SPEED)
        self.try_move(dy, dx)

    def move_forward(self) -> None:
        self._step(self.player.angle, 1)

    def move_backward(self) -> None:
        self._step(self.player.angle, -1)

    def strafe_right(self) -> None:
        self._step(self.player.angle + NINETY_DEGREE, 1)

    def strafe_left(self) -> None:
        self._step(self.player.angle + NINETY_DEGREE, -1)

    def turn_right(self) -> None:
        self.player.angle += ROTATION_SPEED
        if self.player.angle > RAD:
            self.player.angle = 0.0

    def turn_left(self) -> None:
        self.player.angle -= ROTATION_SPEED
        if self.player.angle < 0:
            self.player.angle = RAD

    def update_jump(self) -> None:
        """Advance the jump by one frame."""
        if self.jump.step(Action.JUMP in self.held):
            return
        self.held.discard(Action.JUMP)

    def handle_input(self) -> None:
        """Apply every held action for one frame."""
        held = self.held
        if Action.FORWARD in held:
            self.move_forward()
        if Action.STRAFE_LEFT in held:
            self.strafe_left()
        if Action.BACKWARD in held:
            self.move_backward()
        if Action.STRAFE_RIGHT in held:
            self.strafe_right()
        if Action.TURN_RIGHT in held:
            self.turn_right()
        if Action.TURN_LEFT in held:
            self.turn_left()
        if Action.QUIT in held:
            raise QuitGame()
        self.update_jump()
        if Action.LOOK_UP in held and self.pitch < PITCH_LIMIT:
            self.pitch += PITCH_STEP
        if Action.LOOK_DOWN in held and self.pitch >= -PITCH_LIMIT:
            self.pitch -= PITCH_STEP

    def look(self, mouse_x: int, mouse_y: int) -> None:
        """Turn and tilt the view from a new mouse position."""
        last_x, last_y = self._last_mouse
        p = self.player
        if mouse_x < 0:
            p.angle = normalize_angle(p.angle - MOUSE_EDGE_TURN)
        if mouse_x > SCREEN_WIDTH:
            p.angle = normalize_angle(p.angle + MOUSE_EDGE_TURN)
        on_screen = 0 <= mouse_x <= SCREEN_WIDTH
        turn = PI * abs(mouse_x - last_x) / SCREEN_WIDTH
        if mouse_x > last_x and on_screen:
            p.angle += turn
        elif on_screen:
            p.angle -= turn
        dy = abs(mouse_y - last_y)
        if mouse_y > last_y and self.pitch + dy > -PITCH_LIMIT:
            self.pitch -= dy
        elif self.pitch - dy <= PITCH_LIMIT:
            self.pitch += dy
        self._last_mouse = (mouse_x, mouse_y)

    # Enemy -------------------------------------------------------------

    def enemy_distance(self) -> float:
        """Distance between the player and the enemy."""
        return distance(self.player.x, self.player.y, self.enemy.x, self.enemy.y)

    def update_enemy_angle(self) -> None:
        """Point the enemy's angle along the line from the player to it."""
        px, py = self.player.x, self.player.y
        ex, ey = self.enemy.x, self.enemy.y
        if ex >= px and ey >= py:
            angle = _quadrant_atan(ey - py, ex - px)
        elif ex <= px and ey >= py:
            angle = PI - _quadrant_atan(ey - py, px - ex)
        elif ex <= px and ey <= py:
            angle = PI + _quadrant_atan(py - ey, px - ex)
        else:
            angle = RAD - _quadrant_atan(py - ey, ex - px)
        self.enemy.angle = angle

    def enemy_blocked(self, n: float) -> bool:
        """Whether a wall lies ``n`` units from the enemy towards the player."""
        e = self.enemy
        for offset in (0.0, ENEMY_SIDE_ANGLE, -ENEMY_SIDE_ANGLE):
            x = e.x - math.cos(e.angle + offset) * n
            y = e.y - math.sin(e.angle + offset) * n
            if self.grid.cell_at(x, y) == WALL:
                return True
        return False

    def move_enemy(self) -> None:
        """Step the enemy towards the player, each axis only if the way is clear."""
        e = self.enemy
        dy = int(-math.sin(e.angle) * ENEMY_SPEED)
        dx = int(-math.cos(e.angle) * ENEMY_SPEED)
        if _walkable(self.grid, int(e.y) + dy * ENEMY_SPACE, int(e.x)):
            e.y += dy
        if _walkable(self.grid, int(e.y), int(e.x) + dx * ENEMY_SPACE):
            e.x += dx

    def check_death(self) -> None:
        """Raise :class:`PlayerDied` if the enemy is close with no wall between."""
        reach = self.enemy_distance()
        if reach >= SCALE:
            return
        n = 0
        while n < reach:
            if self.enemy_blocked(n):
                return
            n += 1
        raise PlayerDied()