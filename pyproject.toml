[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cubemaze"
version = "0.1.0"
description = "A textured raycasting maze game with doors, jumping and a chasing enemy, driven by .cub scene files"
requires-python = ">=3.10"
keywords = ["raycasting", "game", "maze", "cub", "pygame", "first-person"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: First Person Shooters",
]
dependencies = [
    "numpy",
    "pillow",
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
cubemaze = "cubemaze.app:main"

[tool.hatch.build.targets.wheel]
packages = ["cubemaze"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
