"""
Exceptions raised by the carving engine.

Reaching a carving limit (minimum width, empty history) is not an error:
those calls return False / 0.
"""


class CarvingError(Exception):
    """Base class for carving failures."""


class InvalidDimensionError(CarvingError, ValueError):
    """The pixel grid is too small, ragged, or has the wrong rank."""


class EnergyOverrideOutOfBounds(CarvingError, IndexError):
    """An energy override targeted a cell outside the current image."""

    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(
            f"Energy override at (x={x}, y={y}) outside image of size {width}x{height}"
        )
        self.x = x
        self.y = y
        self.width = width
        self.height = height
