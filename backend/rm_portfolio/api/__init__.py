"""HTTP layer for the RM portfolio service."""

from .main import create_app

__all__ = ["create_app"]
