"""Route group exports."""

from . import health, stores

__all__ = ["health", "stores"]
