"""
Mutable pixel grid plus the parallel per-pixel energy state.

Both grids always have the same shape; every structural change touches
them together so the energy value of a pixel travels with the pixel.
"""

import torch

from .seam import remove_seam, insert_seam


class ImageBuffer:
    """
    Current image as an (H, W) packed-pixel tensor and its energy grid.

    Rows are rebuilt as a whole on every seam operation; the cost is O(H * W)
    per seam, the same as shifting each row by hand.
    """

    def __init__(self, pixels: torch.Tensor, energy: torch.Tensor):
        if pixels.shape != energy.shape:
            raise ValueError(
                f"Pixel grid {tuple(pixels.shape)} and energy grid "
                f"{tuple(energy.shape)} must have the same shape"
            )
        self.pixels = pixels
        self.energy = energy

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    def remove_along(self, path: torch.Tensor):
        """
        Delete the pixel and energy value at path[r] from every row r.

        Returns:
            (pixel_values, energy_values) that were removed, (H,) each
        """
        pixels, pixel_values = remove_seam(self.pixels, path)
        energy, energy_values = remove_seam(self.energy, path)
        self.pixels, self.energy = pixels, energy
        return pixel_values, energy_values

    def insert_along(self, path: torch.Tensor, pixel_values: torch.Tensor,
                     energy_values: torch.Tensor):
        """Put recorded values back at path[r] in every row r, widening by one."""
        pixels = insert_seam(self.pixels, path, pixel_values)
        energy = insert_seam(self.energy, path, energy_values)
        self.pixels, self.energy = pixels, energy

    def set_energy(self, x: int, y: int, value):
        self.energy[y, x] = value

    def flatten(self) -> torch.Tensor:
        """Row-major copy of the pixels, (H * W,)."""
        return self.pixels.reshape(-1).clone()
