"""Terminal surface for the call core."""

from .app import app
from .console import CallConsole
from .render import Renderer

__all__ = [
    "CallConsole",
    "Renderer",
    "app",
]
