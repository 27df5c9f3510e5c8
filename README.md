# cubemaze

cubemaze is a first-person maze game drawn by raycasting. It reads the world
as a grid from a `.cub` scene file. Walls have a texture for each compass
side. Doors open and close, the player can jump and look up or down, and an
enemy moves towards the player through the maze.

## Installing

```
pip install .
```

To install the test tools and run the tests:

```
pip install ".[test]"
pytest
```

## Playing

```
cubemaze path/to/level.cub
```

You can also start the game with `python -m cubemaze.app path/to/level.cub`.

The game takes exactly one argument, and that argument must end in `.cub`. If
the argument is missing, the scene is invalid or an image cannot be loaded,
the game writes `Error` and a message of the form `[cubemaze]: ...` to
standard error and exits with status 1.

The game loads the door texture from the fixed path
`./resources/doors/c.xpm`, relative to the current working directory. The
package does not include this image, so you must provide it yourself. Pillow
reads all images.

### Controls

| Key              | Action                                      |
|------------------|---------------------------------------------|
| W / S            | move forward / backward                     |
| A / D            | strafe left / right                         |
| Left / Right     | turn                                        |
| Up / Down        | look up / down                              |
| Mouse            | turn and look                               |
| Space            | jump                                        |
| F                | open or close a door in front of you        |
| Escape           | quit                                        |

If the enemy comes within one map cell of you and no wall lies between you,
the game prints `[cubemaze] DEATH` and ends.

## Scene files

A scene file begins with seven settings, one per line. Blank lines between
them are ignored:

```
NO ./textures/north.xpm
SO ./textures/south.xpm
WE ./textures/west.xpm
EA ./textures/east.xpm
EN ./textures/enemy.xpm
F 220,100,0
C 225,30,0
```

- `NO`, `SO`, `WE` and `EA` name the wall textures. `EN` names the enemy
  sprite. Each path must be a single word. The enemy sprite must be square and
  at least 100×100 pixels.
- `EN` is recognised only before the `C` line. Any other order of the
  settings is accepted.
- `F` sets the floor colour and `C` the ceiling colour. Each is three numbers
  from 0 to 255, separated by commas.

The map follows the settings. Blank lines inside the map are skipped:

```
1111111111
1N00000001
1111D11111
1000000X01
1111111111
```

| Character         | Meaning                                               |
|-------------------|-------------------------------------------------------|
| `1`               | wall                                                  |
| `0`               | floor                                                 |
| `N` `S` `E` `W`   | player start and the direction it faces (exactly one) |
| `X`               | enemy start (at most one)                             |
| `D`               | door; it must sit between two walls, side by side or above and below |
| space             | outside the map                                       |

Every floor, door and enemy cell must be closed off by walls. A space or the
edge of the map may not be next to one of these cells.

## Using it as a library

You can use the pieces of the game without opening a window:

```python
from cubemaze.parser import load_scene
from cubemaze.state import Game
from cubemaze.raycaster import cast_all

scene = load_scene("level.cub")
game = Game(scene)
rays = cast_all(game)
print(len(rays), rays[0].hit.face)
```

- `cubemaze.parser`: `parse_scene` reads the text of a scene, and
  `load_scene` reads a file. Both raise `SceneError` when the scene is
  invalid.
- `cubemaze.state`: `Game` holds the player, the enemy, the jump state and
  the actions being held (`Action`). It raises `QuitGame` and `PlayerDied`.
- `cubemaze.raycaster`: `cast_ray` casts one ray and `cast_all` casts one
  ray for each screen column.
- `cubemaze.render`: `draw_scene` and `draw_minimap` draw into a `Frame`
  using the images in a `TextureSet`.
- `cubemaze.geometry`: the angle and colour helpers, and the `GameMap` grid.

## What it does not do

The game is a single level that you walk through. It has no menus, no
sound, no weapons or shooting, and no saving or loading of progress.