"""
Pixel grid conversions at the engine boundary.

The engine works on packed 24-bit RGB integers, one per pixel, stored in an
(H, W) int64 tensor. Callers hand in whatever their decoder produced and get
flat row-major buffers back from ``SeamCarver.snapshot``.
"""

import numpy as np
import torch

from .errors import InvalidDimensionError


def pack_rgb(r, g, b):
    """Pack three 8-bit channels into 0xRRGGBB. Works on ints, arrays and tensors."""
    return ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def unpack_rgb(pixels):
    """
    Split packed pixels into (r, g, b) channels.

    Bits above the low 24 (e.g. an alpha byte) are ignored.
    """
    return (pixels >> 16) & 0xFF, (pixels >> 8) & 0xFF, pixels & 0xFF


def as_pixel_grid(pixels) -> torch.Tensor:
    """
    Normalize a decoded image into an (H, W) int64 tensor of packed pixels.

    Args:
        pixels: torch tensor, numpy array or nested lists. Either (H, W)
            packed RGB integers or (H, W, 3) channel values.

    Returns:
        A fresh (H, W) int64 tensor; the caller's data is never aliased.

    Raises:
        InvalidDimensionError: ragged rows, wrong rank, non-integer data,
            height < 1 or width < 2.
    """
    if isinstance(pixels, torch.Tensor):
        array = pixels.detach().cpu().numpy()
    else:
        try:
            array = np.asarray(pixels)
        except ValueError as ex:
            raise InvalidDimensionError(f"Pixel rows must have equal length: {ex}") from ex

    if array.dtype == object:
        raise InvalidDimensionError("Pixel rows must have equal length")

    if array.ndim == 3:
        if array.shape[2] != 3:
            raise InvalidDimensionError(
                f"Expected 3 color channels, got shape {tuple(array.shape)}"
            )
        rgb = array.astype(np.int64)
        array = pack_rgb(rgb[..., 0], rgb[..., 1], rgb[..., 2])

    if array.ndim != 2:
        raise InvalidDimensionError(f"Expected a 2D pixel grid, got shape {tuple(array.shape)}")
    if not np.issubdtype(array.dtype, np.integer):
        raise InvalidDimensionError(f"Pixels must be integers, got dtype {array.dtype}")

    H, W = array.shape
    if H < 1 or W < 2:
        raise InvalidDimensionError(f"Image must be at least 2 pixels wide and 1 tall, got {W}x{H}")

    return torch.from_numpy(np.array(array, dtype=np.int64, copy=True))


def to_rgb_array(flat, width: int, height: int) -> np.ndarray:
    """Decode a flat snapshot buffer into an (H, W, 3) uint8 array for encoders."""
    if isinstance(flat, torch.Tensor):
        flat = flat.detach().cpu().numpy()
    grid = np.asarray(flat, dtype=np.int64).reshape(height, width)
    r, g, b = unpack_rgb(grid)
    return np.stack([r, g, b], axis=-1).astype(np.uint8)


def to_horizontal(pixels) -> np.ndarray:
    """
    Reorient an image so that vertical seams of the result are horizontal
    seams of the input: mirror every row, then transpose.

    Accepts (H, W) or (H, W, 3) data and returns (W, H) or (W, H, 3).
    """
    if isinstance(pixels, torch.Tensor):
        pixels = pixels.detach().cpu().numpy()
    array = np.asarray(pixels)
    return np.ascontiguousarray(np.swapaxes(np.flip(array, axis=1), 0, 1))


def from_horizontal(flat, width: int, height: int) -> np.ndarray:
    """
    Undo ``to_horizontal`` on a snapshot buffer.

    Args:
        flat: Flat buffer from a carver built on ``to_horizontal`` output
        width: That carver's current width (the input's carved height)
        height: That carver's height (the input's width)

    Returns:
        (width, height) packed pixel array in the input's orientation
    """
    if isinstance(flat, torch.Tensor):
        flat = flat.detach().cpu().numpy()
    grid = np.asarray(flat).reshape(height, width)
    return np.ascontiguousarray(np.fliplr(grid.T))
