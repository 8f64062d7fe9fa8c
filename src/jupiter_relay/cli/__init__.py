"""Command-line entry points for the Jupiter relay."""

from .main import app

__all__ = ["app"]
