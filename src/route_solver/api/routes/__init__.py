"""Route group exports."""

from . import health, solve

__all__ = ["health", "solve"]
