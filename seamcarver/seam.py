"""
Seam computation: cumulative cost map, seam extraction, and the grid
surgery that removes or reinserts a seam.

The cumulative map is built bottom-up, so each entry of row 0 is the cost
of the cheapest connected path from that pixel to the last row. Seams are
then read top to bottom.
"""

import torch


def cumulative_cost_map(cost: torch.Tensor) -> torch.Tensor:
    """
    Dynamic-programming table of minimal path costs to the bottom row.

    map[H-1] = cost[H-1]
    map[r, c] = cost[r, c] + min(map[r+1, c-1], map[r+1, c], map[r+1, c+1])

    Out-of-range neighbours at the left/right borders are omitted. Each row
    is one vectorized op; rows are strictly sequential.

    Args:
        cost: Energy map (H, W)

    Returns:
        Cumulative map (H, W), same dtype as cost
    """
    H, W = cost.shape
    M = torch.empty_like(cost)
    M[H - 1] = cost[H - 1]

    for i in range(H - 2, -1, -1):
        below = M[i + 1]
        # Replicating the border entry leaves the min over valid neighbours unchanged
        below_left = torch.cat([below[:1], below[:-1]])
        below_right = torch.cat([below[1:], below[-1:]])
        M[i] = cost[i] + torch.minimum(torch.minimum(below_left, below), below_right)

    return M


def extract_seam(cost_map: torch.Tensor) -> torch.Tensor:
    """
    Backtrack a vertical seam through a cost map.

    Starts at the minimum of row 0 and, for every following row, moves to the
    smallest of the (up to) three entries below the previous position.
    Ties always go to the smallest column index, in row 0 and in every window
    (left, then centre, then right). Pinned seams in the tests depend on this
    order; preferring right over centre would change them.

    Args:
        cost_map: Map (H, W) with W >= 2

    Returns:
        Seam indices (H,) with one column index per row
    """
    H, W = cost_map.shape

    seam = torch.zeros(H, dtype=torch.long, device=cost_map.device)
    seam[0] = torch.argmin(cost_map[0])

    for i in range(1, H):
        prev_col = seam[i - 1].item()
        left = max(0, prev_col - 1)
        right = min(W - 1, prev_col + 1)
        neighbors = cost_map[i, left:right + 1]
        seam[i] = left + torch.argmin(neighbors)

    return seam


def is_connected(seam: torch.Tensor) -> bool:
    """Adjacent seam indices differ by at most 1."""
    if seam.numel() < 2:
        return True
    return bool((seam[1:] - seam[:-1]).abs().max() <= 1)


def _check_seam(seam: torch.Tensor, H: int, n_cols: int):
    if seam.shape != (H,):
        raise ValueError(f"Seam has shape {tuple(seam.shape)}, expected ({H},)")
    if H and (seam.min() < 0 or seam.max() >= n_cols):
        raise ValueError(f"Seam indices must lie in [0, {n_cols}), got {seam.tolist()}")


def remove_seam(grid: torch.Tensor, seam: torch.Tensor):
    """
    Remove a vertical seam from a grid.

    Args:
        grid: Pixel or energy grid (H, W)
        seam: Column index per row (H,)

    Returns:
        (carved, removed): the (H, W - 1) grid with every later column shifted
        left by one, and the (H,) values that were taken out.
    """
    H, W = grid.shape
    seam = seam.to(device=grid.device, dtype=torch.long)
    _check_seam(seam, H, W)

    rows = torch.arange(H, device=grid.device)
    removed = grid[rows, seam].clone()

    keep = torch.ones(H, W, dtype=torch.bool, device=grid.device)
    keep[rows, seam] = False
    carved = grid[keep].view(H, W - 1)

    return carved, removed


def insert_seam(grid: torch.Tensor, seam: torch.Tensor,
                values: torch.Tensor) -> torch.Tensor:
    """
    Insert a vertical seam into a grid; the inverse of remove_seam.

    Args:
        grid: Grid (H, W)
        seam: Column index per row in the widened grid, in [0, W]
        values: Value to place at each seam position (H,)

    Returns:
        Widened grid (H, W + 1)
    """
    H, W = grid.shape
    seam = seam.to(device=grid.device, dtype=torch.long)
    _check_seam(seam, H, W + 1)
    if values.shape != (H,):
        raise ValueError(f"Seam values have shape {tuple(values.shape)}, expected ({H},)")

    cols = torch.arange(W + 1, device=grid.device)
    is_seam = cols.unsqueeze(0) == seam.unsqueeze(1)

    widened = torch.empty(H, W + 1, dtype=grid.dtype, device=grid.device)
    # Boolean assignment fills in row-major order, so each row gets its
    # original values around the seam position
    widened[~is_seam] = grid.reshape(-1)
    widened[is_seam] = values.to(dtype=grid.dtype, device=grid.device)

    return widened
