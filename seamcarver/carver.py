"""
High-level carving engine that orchestrates energy, cost maps, seam
extraction and the undo history.

A SeamCarver owns one image for its lifetime. Seams are removed one at a
time, greedily, and every removal can be undone exactly by adding the seam
back. Callers must serialize access to a single instance.
"""

import logging
from dataclasses import replace
from threading import Event
from typing import Optional

import torch

from .buffer import ImageBuffer
from .config import CarverConfig
from .energy import (EnergyType, compute_cost_maps, gradient_magnitude_energy,
                     grayscale, initial_energy)
from .errors import EnergyOverrideOutOfBounds
from .history import HistoryEntry, SeamHistory
from .pixels import as_pixel_grid
from .seam import extract_seam

logger = logging.getLogger(__name__)

MIN_WIDTH = 2
INT64_MIN, INT64_MAX = -2 ** 63, 2 ** 63 - 1


def _as_energy_value(value) -> int:
    """Energy grids are int64; reject values that would not survive the cast."""
    try:
        as_int = int(value)
    except (TypeError, ValueError, OverflowError) as ex:
        raise ValueError(f"Energy override must be an integer, got {value!r}") from ex
    if as_int != value or not INT64_MIN <= as_int <= INT64_MAX:
        raise ValueError(f"Energy override must be an int64 integer, got {value!r}")
    return as_int


class SeamCarver:
    """
    Content-aware resizing of one image by removing and re-adding vertical
    seams. Horizontal carving is done by handing in a reoriented image
    (see ``pixels.to_horizontal``).

    State after construction and after every completed call:
      - every row has ``width`` pixels, with ``2 <= width <= original_width``
      - the cost map matches the current energy state, unless ``set_energy``
        was called since the last seam operation or ``recompute``
      - ``history_depth == original_width - width``
    """

    def __init__(self, pixels, config: Optional[CarverConfig] = None,
                 energy_type: Optional[EnergyType] = None):
        """
        Args:
            pixels: Decoded image, see ``pixels.as_pixel_grid``
            config: Engine configuration (defaults to CarverConfig())
            energy_type: Shortcut overriding ``config.energy_type``

        Raises:
            InvalidDimensionError: height < 1, width < 2 or malformed grid
        """
        if config is None:
            config = CarverConfig()
        if energy_type is not None:
            config = replace(config, energy_type=energy_type)
        self.config = config
        self.energy_type = config.energy_type

        grid = as_pixel_grid(pixels)
        self._buffer = ImageBuffer(grid, initial_energy(self.energy_type, grid, config.kernel))
        self._history = SeamHistory()
        self._original_width = self._buffer.width
        self._last_seam: Optional[torch.Tensor] = None
        self._lazy = config.lazy_update
        self._defer_render = False

        self.recompute()
        self._data = self._buffer.flatten()

        logger.info("Seam carver ready: %dx%d, %s energy",
                    self.width, self.height, self.energy_type.value)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._buffer.width

    @property
    def height(self) -> int:
        return self._buffer.height

    @property
    def original_width(self) -> int:
        return self._original_width

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def has_history(self) -> bool:
        return bool(self._history)

    @property
    def last_seam(self) -> Optional[torch.Tensor]:
        """Path of the most recently removed or added seam, None before the first."""
        return None if self._last_seam is None else self._last_seam.clone()

    @property
    def pixels(self) -> torch.Tensor:
        """Copy of the current (H, W) pixel grid."""
        return self._buffer.pixels.clone()

    @property
    def energy(self) -> torch.Tensor:
        """Copy of the energy state: gradient (BACKWARD) or grayscale (FORWARD)."""
        return self._buffer.energy.clone()

    @property
    def cost_map(self) -> torch.Tensor:
        """Copy of the map seams are extracted from."""
        return self._cost_map.clone()

    @property
    def aux_map(self) -> Optional[torch.Tensor]:
        """Accumulated minimal insertion costs (FORWARD only)."""
        return None if self._aux_map is None else self._aux_map.clone()

    @property
    def data(self) -> torch.Tensor:
        """
        Display buffer as of the last render. Inside a lazy batch it is only
        brought up to date once the batch ends.
        """
        return self._data.clone()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, path: Optional[torch.Tensor], color: Optional[int]) -> torch.Tensor:
        data = self._buffer.flatten()
        if path is None:
            return data
        if color is None:
            color = self.config.highlight_color

        H, W = self.height, self.width
        rows = torch.arange(H)
        for offset in (-1, 0, 1):
            cols = path + offset
            valid = (cols >= 0) & (cols < W)
            data[rows[valid] * W + cols[valid]] = color
        return data

    def snapshot(self, highlight: bool = False, color: Optional[int] = None) -> torch.Tensor:
        """
        Flattened row-major copy of the current image, (H * W,).

        With ``highlight``, the most recently removed or added seam is drawn
        over the copy in ``color``: columns path[r] - 1 .. path[r] + 1 of
        every row, clipped to the image. The grid itself is never touched.
        """
        return self._render(self._last_seam if highlight else None, color)

    def refresh(self, highlight: bool = False, color: Optional[int] = None):
        """
        Regenerate the display buffer now.

        With ``highlight``, the seam on top of the history (the next one
        ``add_seam`` would restore) is drawn; with an empty history the
        buffer is plain.
        """
        path = self._history.peek().path if highlight and self._history else None
        self._data = self._render(path, color)

    def set_lazy_update(self, enabled: bool):
        """When enabled, batch calls render the display buffer once at the end."""
        self._lazy = bool(enabled)

    # ------------------------------------------------------------------
    # Energy
    # ------------------------------------------------------------------

    def recompute(self):
        """Rebuild the cost map (and forward aux map) from the energy state."""
        self._cost_map, self._aux_map = compute_cost_maps(self.energy_type, self._buffer.energy)

    def _after_structural_change(self):
        if self.config.refresh_gradient and self.energy_type == EnergyType.BACKWARD:
            self._buffer.energy = gradient_magnitude_energy(
                grayscale(self._buffer.pixels), self.config.kernel)
        self.recompute()

    def _check_bounds(self, x: int, y: int):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise EnergyOverrideOutOfBounds(x, y, self.width, self.height)

    def set_energy(self, x: int, y: int, value: int):
        """
        Override the energy state of one cell, e.g. to protect (high value) or
        target (low value) a region.

        Under FORWARD energy the state is the grayscale value, so the override
        changes the neighbour differences around (x, y) rather than the cost
        of (x, y) itself.

        The cost map is not rebuilt: the next seam operation still uses the
        current map, call ``recompute`` to apply the override immediately.

        Raises:
            EnergyOverrideOutOfBounds: x or y outside the current image
            ValueError: value is not an integer in the int64 range
        """
        value = _as_energy_value(value)
        self._check_bounds(x, y)
        self._buffer.set_energy(x, y, value)

    def paint_energy(self, x: int, y: int, radius: int, value: int) -> int:
        """
        Set every cell of the square brush [x - radius, x + radius] x
        [y - radius, y + radius] that lies inside the image.

        Returns:
            Number of cells written
        """
        if radius < 0:
            raise ValueError(f"Brush radius must be non-negative, got {radius}")
        value = _as_energy_value(value)
        x0, x1 = max(0, x - radius), min(self.width - 1, x + radius)
        y0, y1 = max(0, y - radius), min(self.height - 1, y + radius)
        if x0 > x1 or y0 > y1:
            return 0
        self._buffer.energy[y0:y1 + 1, x0:x1 + 1] = value
        return (x1 - x0 + 1) * (y1 - y0 + 1)

    # ------------------------------------------------------------------
    # Carving
    # ------------------------------------------------------------------

    def find_seam(self) -> torch.Tensor:
        """The seam the next ``remove_seam`` would take, without removing it."""
        return extract_seam(self._cost_map)

    def remove_seam(self, highlight: bool = False, color: Optional[int] = None) -> bool:
        """
        Remove the lowest-cost seam.

        Returns:
            False, with nothing changed, when the image is at minimum width
        """
        if self.width <= MIN_WIDTH:
            logger.debug("Seam removal rejected at minimum width %d", self.width)
            return False

        path = extract_seam(self._cost_map)
        pixel_values, energy_values = self._buffer.remove_along(path)
        self._history.push(HistoryEntry(path, pixel_values, energy_values))
        self._last_seam = path
        self._after_structural_change()

        if not self._defer_render:
            self._data = self._render(path if highlight else None, color)
        logger.debug("Removed seam starting at column %d, width now %d",
                     path[0].item(), self.width)
        return True

    def add_seam(self, highlight: bool = False, color: Optional[int] = None) -> bool:
        """
        Re-insert the most recently removed seam.

        Returns:
            False, with nothing changed, when there is no history
        """
        if not self._history:
            logger.debug("Seam insertion rejected: history is empty")
            return False

        entry = self._history.pop()
        self._buffer.insert_along(entry.path, entry.pixel_values, entry.energy_values)
        self._last_seam = entry.path
        self._after_structural_change()

        if not self._defer_render:
            self._data = self._render(entry.path if highlight else None, color)
        logger.debug("Added seam starting at column %d, width now %d",
                     entry.path[0].item(), self.width)
        return True

    def _repeat(self, step, count: int, highlight: bool, color: Optional[int],
                cancel: Optional[Event]) -> int:
        done = 0
        self._defer_render = self._lazy
        try:
            while done < count:
                if cancel is not None and cancel.is_set():
                    logger.debug("Batch cancelled after %d of %d seams", done, count)
                    break
                if not step(highlight, color):
                    break
                done += 1
        finally:
            self._defer_render = False

        if done and self._lazy:
            self._data = self._render(self._last_seam if highlight else None, color)
        return done

    def remove_seams(self, count: int, highlight: bool = False, color: Optional[int] = None,
                     cancel: Optional[Event] = None) -> int:
        """
        Remove up to ``count`` seams, stopping early at minimum width or when
        ``cancel`` is set. Cancellation is only observed between seams.

        Returns:
            Number of seams actually removed
        """
        done = self._repeat(self.remove_seam, count, highlight, color, cancel)
        logger.debug("Removed %d of %d requested seams", done, count)
        return done

    def add_seams(self, count: int, highlight: bool = False, color: Optional[int] = None,
                  cancel: Optional[Event] = None) -> int:
        """
        Re-add up to ``count`` seams, stopping early when the history runs out
        or when ``cancel`` is set.

        Returns:
            Number of seams actually added
        """
        done = self._repeat(self.add_seam, count, highlight, color, cancel)
        logger.debug("Added %d of %d requested seams", done, count)
        return done

    def reset(self) -> int:
        """Add back every recorded seam, restoring the original image."""
        return self.add_seams(len(self._history))


def carve(pixels, n_seams: int,
          energy_type: EnergyType = EnergyType.BACKWARD) -> torch.Tensor:
    """
    One-shot vertical seam carving.

    Args:
        pixels: Decoded image, see ``pixels.as_pixel_grid``
        n_seams: Number of seams to remove; stops early at width 2
        energy_type: BACKWARD or FORWARD

    Returns:
        Carved (H, W - n) packed pixel grid
    """
    carver = SeamCarver(pixels, energy_type=energy_type)
    carver.remove_seams(n_seams)
    return carver.pixels
