"""HTTP surface for the reader state."""

from .server import create_app

__all__ = ["create_app"]
