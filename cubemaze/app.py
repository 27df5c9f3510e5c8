"""Command-line entry point: load a scene, open a window and run the game."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence, Union

import numpy as np

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

from cubemaze.geometry import SCREEN_HEIGHT, SCREEN_WIDTH  # noqa: E402
from cubemaze.parser import Scene, SceneError, load_scene  # noqa: E402
from cubemaze.raycaster import cast_all  # noqa: E402
from cubemaze.render import (  # noqa: E402
    Frame,
    Texture,
    TextureSet,
    draw_minimap,
    draw_scene,
)
from cubemaze.state import Action, Game, PlayerDied, QuitGame  # noqa: E402

PROGRAM = "cubemaze"
WINDOW_TITLE = "Cub3D map3D"
DOOR_TEXTURE = "./resources/doors/c.xpm"
MIN_SPRITE_SIZE = 100
FRAMES_PER_SECOND = 60

_KEY_ACTIONS = {
    pygame.K_w: Action.FORWARD,
    pygame.K_d: Action.STRAFE_RIGHT,
    pygame.K_s: Action.BACKWARD,
    pygame.K_a: Action.STRAFE_LEFT,
    pygame.K_LEFT: Action.TURN_LEFT,
    pygame.K_RIGHT: Action.TURN_RIGHT,
    pygame.K_f: Action.OPEN,
    pygame.K_SPACE: Action.JUMP,
    pygame.K_UP: Action.LOOK_UP,
    pygame.K_DOWN: Action.LOOK_DOWN,
    pygame.K_ESCAPE: Action.QUIT,
}


def map_scale_for(width: int, height: int) -> int:
    """Pixels per map cell on the minimap for a map of the given size."""
    return 25 if width + height < 60 else 10


def _load(path: Union[str, os.PathLike]) -> Texture:
    try:
        return Texture.load(path)
    except (OSError, ValueError) as exc:
        raise SceneError(f"images: cannot load {os.fspath(path)}") from exc


def load_textures(scene: Scene, door_path: Union[str, os.PathLike]) -> TextureSet:
    """Load every image a scene needs; the enemy sprite must be a large square."""
    textures = TextureSet(
        north=_load(scene.north),
        south=_load(scene.south),
        west=_load(scene.west),
        east=_load(scene.east),
        door=_load(door_path),
        enemy=_load(scene.enemy_texture),
    )
    sprite = textures.enemy
    if sprite.width != sprite.height:
        raise SceneError("image is not square!")
    if sprite.width < MIN_SPRITE_SIZE:
        raise SceneError("image size less than 100x100!")
    return textures


def action_for_key(key: int) -> Optional[Action]:
    """The action bound to a pygame key code, or ``None`` if it has none."""
    return _KEY_ACTIONS.get(key)


def _report(message: str) -> None:
    sys.stderr.write(f"Error\n[{PROGRAM}]: {message}\n")


def _show(screen: "pygame.Surface", frame: Frame) -> None:
    pixels = frame.pixels
    rgb = np.stack(
        ((pixels >> 16) & 0xFF, (pixels >> 8) & 0xFF, pixels & 0xFF), axis=-1
    ).astype(np.uint8)
    pygame.surfarray.blit_array(screen, rgb.transpose(1, 0, 2))
    pygame.display.flip()


def _handle_events(game: Game) -> None:
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            raise QuitGame()
        if event.type == pygame.KEYDOWN:
            action = action_for_key(event.key)
            if action is not None:
                game.press(action)
        elif event.type == pygame.KEYUP:
            action = action_for_key(event.key)
            if action is not None:
                game.release(action)


def _frame(game: Game, textures: TextureSet, frame: Frame) -> None:
    game.handle_input()
    rays = cast_all(game)
    game.check_death()
    game.move_enemy()
    draw_scene(frame, game, textures, rays)
    game.look(*pygame.mouse.get_pos())
    draw_minimap(frame, game)


def _run(scene: Scene, textures: TextureSet) -> int:
    pygame.init()
    try:
        try:
            screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        except pygame.error as exc:
            _report(f"display error: {exc}")
            return 1
        pygame.display.set_caption(WINDOW_TITLE)
        game = Game(scene)
        frame = Frame()
        clock = pygame.time.Clock()
        try:
            while True:
                _handle_events(game)
                _frame(game, textures, frame)
                _show(screen, frame)
                clock.tick(FRAMES_PER_SECOND)
        except QuitGame:
            return 0
        except PlayerDied:
            sys.stdout.write(f"\n[{PROGRAM}] DEATH\n\n")
            return 0
    finally:
        pygame.quit()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the game on the scene file named by the single argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        _report("need one parameter have path of map")
        return 1
    try:
        scene = load_scene(args[0])
        textures = load_textures(scene, DOOR_TEXTURE)
    except SceneError as exc:
        _report(str(exc))
        return 1
    return _run(scene, textures)


if __name__ == "__main__":
    sys.exit(main())