"""Top-down arena simulation: waves, projectiles, walls and saves."""

__version__ = "0.1.0"
