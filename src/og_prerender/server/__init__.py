"""aiohttp application serving previews, the canvas-fit endpoint and health checks."""

from .app import create_app, run

__all__ = ["create_app", "run"]
