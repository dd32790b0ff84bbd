"""
Energy functions for seam carving.

The energy function determines which pixels are "important".
Low-energy seams are preferred for removal.

Two models are supported, selected once per carver:
  - BACKWARD: gradient magnitude of the current image (Avidan & Shamir 2007).
    The per-pixel state kept by the carver is the gradient itself, so it can
    be painted over directly.
  - FORWARD: cost of the new edges a removal would introduce
    (Rubinstein et al. 2008). The per-pixel state is the grayscale image and
    costs are derived from neighbour differences on every recompute.
"""

from enum import Enum
from typing import Optional, Tuple

import torch
import torch.nn.functional as F

from .pixels import unpack_rgb
from .seam import cumulative_cost_map


class EnergyType(Enum):
    BACKWARD = "backward"
    FORWARD = "forward"


class GradientKernel(Enum):
    """Horizontal kernel used for the backward gradient.

    TRUNCATED has a zero bottom row: its bottom-left and bottom-right taps
    cancel each other. SOBEL is the textbook operator. Seam selection is
    sensitive to the choice, so it is pinned per carver.
    """
    TRUNCATED = "truncated"
    SOBEL = "sobel"


# Cross-correlation weights, row-major over the 3x3 neighbourhood.
SOBEL_X = ((1, 0, -1),
           (2, 0, -2),
           (1, 0, -1))

TRUNCATED_SOBEL_X = ((1, 0, -1),
                     (2, 0, -2),
                     (0, 0, 0))

SOBEL_Y = ((1, 2, 1),
           (0, 0, 0),
           (-1, -2, -1))


def kernel_pair(kernel: GradientKernel) -> Tuple[tuple, tuple]:
    """Return the (x, y) weights for a kernel choice."""
    if kernel == GradientKernel.TRUNCATED:
        return TRUNCATED_SOBEL_X, SOBEL_Y
    elif kernel == GradientKernel.SOBEL:
        return SOBEL_X, SOBEL_Y
    raise ValueError(f"Invalid gradient kernel: {kernel}")


def grayscale(pixels: torch.Tensor) -> torch.Tensor:
    """
    Integer luminance of packed RGB pixels: (3R + 4G + B) // 8.

    Args:
        pixels: Packed pixel grid (H, W), int64

    Returns:
        Grayscale grid (H, W), int64 in [0, 255]
    """
    r, g, b = unpack_rgb(pixels)
    return torch.div(3 * r + 4 * g + b, 8, rounding_mode='floor')


def gradient_magnitude_energy(gray: torch.Tensor,
                              kernel: GradientKernel = GradientKernel.TRUNCATED) -> torch.Tensor:
    """
    Compute gradient magnitude energy of a grayscale grid.

    Uses the L1 norm of the two directional responses:
    E(i,j) = |Gx(i,j)| + |Gy(i,j)|

    The grid is edge-replicate padded by one pixel on every side, so border
    pixels see copies of their nearest neighbours.

    Args:
        gray: Grayscale grid (H, W)
        kernel: Which horizontal kernel to use

    Returns:
        Energy map (H, W), int64
    """
    H, W = gray.shape
    weights_x, weights_y = kernel_pair(kernel)

    # conv2d needs floating point; integer inputs stay exact in float64
    image = gray.to(torch.float64).reshape(1, 1, H, W)
    padded = F.pad(image, (1, 1, 1, 1), mode='replicate')

    kx = torch.tensor(weights_x, dtype=torch.float64).view(1, 1, 3, 3)
    ky = torch.tensor(weights_y, dtype=torch.float64).view(1, 1, 3, 3)

    grad_x = F.conv2d(padded, kx)
    grad_y = F.conv2d(padded, ky)

    energy = torch.abs(grad_x) + torch.abs(grad_y)
    return energy.reshape(H, W).round().to(torch.int64)


def initial_energy(energy_type: EnergyType, pixels: torch.Tensor,
                   kernel: GradientKernel = GradientKernel.TRUNCATED) -> torch.Tensor:
    """Per-pixel state a carver keeps for its energy model."""
    gray = grayscale(pixels)
    if energy_type == EnergyType.FORWARD:
        return gray
    elif energy_type == EnergyType.BACKWARD:
        return gradient_magnitude_energy(gray, kernel)
    raise ValueError(f"Invalid energy type: {energy_type}")


def forward_cost_maps(gray: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """Forward energy (Rubinstein et al. 2008).

    For each pixel, three transition costs describe the edge created when
    it is removed and the seam arrives from above, above-left or above-right:
      C_U = |I(i, j+1) - I(i, j-1)|
      C_L = C_U + |I(i-1, j) - I(i, j-1)|
      C_R = C_U + |I(i-1, j) - I(i, j+1)|
    Horizontal neighbours wrap around the row ends.

    The running minimum M is accumulated top to bottom. At every pixel the
    candidate with the smallest *total* M(prev) + C wins (ties: U, then L,
    then R) and the seam map stores that candidate's local cost C, which
    need not be the smallest of the three local costs.

    Args:
        gray: Grayscale grid (H, W)

    Returns:
        (seam_map, minimums): both (H, W); seam_map drives seam extraction,
        minimums is the accumulated insertion cost.
    """
    H, W = gray.shape

    left = torch.roll(gray, 1, dims=1)
    right = torch.roll(gray, -1, dims=1)
    # Row 0 of `above` wraps to the last row but is never read
    above = torch.roll(gray, 1, dims=0)

    C_U = torch.abs(right - left)
    C_L = C_U + torch.abs(above - left)
    C_R = C_U + torch.abs(above - right)

    seam_map = torch.empty_like(gray)
    minimums = torch.empty_like(gray)
    seam_map[0] = C_U[0]
    minimums[0] = C_U[0]

    cols = torch.arange(W, device=gray.device)
    for i in range(1, H):
        M_prev = minimums[i - 1]
        local = torch.stack([C_U[i], C_L[i], C_R[i]])
        totals = torch.stack([
            M_prev + C_U[i],
            torch.roll(M_prev, 1) + C_L[i],
            torch.roll(M_prev, -1) + C_R[i],
        ])
        # argmin returns the first minimum, giving the U, L, R tie order
        choice = torch.argmin(totals, dim=0)
        minimums[i] = totals[choice, cols]
        seam_map[i] = local[choice, cols]

    return seam_map, minimums


def compute_cost_maps(energy_type: EnergyType,
                      energy: torch.Tensor) -> Tuple[torch.Tensor, Optional[torch.Tensor]]:
    """
    Rebuild the map used for seam extraction from the carver's energy state.

    Always a full recompute; removing a seam changes neighbour relationships
    across the whole grid under forward energy.

    Returns:
        (cost_map, aux_map). aux_map is the forward minimums, None for BACKWARD.
    """
    if energy_type == EnergyType.BACKWARD:
        return cumulative_cost_map(energy), None
    elif energy_type == EnergyType.FORWARD:
        return forward_cost_maps(energy)
    raise ValueError(f"Invalid energy type: {energy_type}")
