"""Raycasting maze game played from .cub scene files."""

__version__ = "0.1.0"

__all__ = ["geometry", "parser", "state", "raycaster", "render", "app"]