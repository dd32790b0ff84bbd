"""
Content-aware image resizing by seam carving.

Seams are removed greedily one at a time under backward (gradient) or
forward energy, and every removal can be undone exactly.
"""

__version__ = "0.1.0"

from .errors import CarvingError, InvalidDimensionError, EnergyOverrideOutOfBounds
from .pixels import (pack_rgb, unpack_rgb, as_pixel_grid, to_rgb_array,
                     to_horizontal, from_horizontal)
from .energy import (EnergyType, GradientKernel, grayscale, gradient_magnitude_energy,
                     forward_cost_maps, compute_cost_maps)
from .seam import cumulative_cost_map, extract_seam, is_connected, remove_seam, insert_seam
from .history import HistoryEntry, SeamHistory
from .buffer import ImageBuffer
from .config import CarverConfig
from .carver import SeamCarver, carve

__all__ = [
    'CarvingError',
    'InvalidDimensionError',
    'EnergyOverrideOutOfBounds',
    'pack_rgb',
    'unpack_rgb',
    'as_pixel_grid',
    'to_rgb_array',
    'to_horizontal',
    'from_horizontal',
    'EnergyType',
    'GradientKernel',
    'grayscale',
    'gradient_magnitude_energy',
    'forward_cost_maps',
    'compute_cost_maps',
    'cumulative_cost_map',
    'extract_seam',
    'is_connected',
    'remove_seam',
    'insert_seam',
    'HistoryEntry',
    'SeamHistory',
    'ImageBuffer',
    'CarverConfig',
    'SeamCarver',
    'carve',
]
