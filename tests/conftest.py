"""Shared test fixtures for the seam carving test suite."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest


# 4x4 luminance grid with a bright column that shifts left halfway down
WORKED_EXAMPLE = [[10, 10, 50, 10],
                  [10, 10, 50, 10],
                  [10, 50, 10, 10],
                  [10, 50, 10, 10]]


def gray_pixel(v):
    """Packed pixel whose grayscale value is exactly v."""
    return (v << 16) | (v << 8) | v


def make_gray_image(values):
    """Packed (H, W) pixel tensor from a grid of luminance values."""
    grid = torch.tensor(values, dtype=torch.int64)
    return (grid << 16) | (grid << 8) | grid


def make_random_image(H, W, seed=0):
    """Random packed RGB image."""
    gen = torch.Generator().manual_seed(seed)
    return torch.randint(0, 1 << 24, (H, W), generator=gen, dtype=torch.int64)


@pytest.fixture
def worked_example():
    return make_gray_image(WORKED_EXAMPLE)


@pytest.fixture
def random_image():
    return make_random_image(12, 16, seed=42)
