"""Tests for carver configuration."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import dataclasses

import pytest
from seamcarver.config import CarverConfig
from seamcarver.energy import EnergyType, GradientKernel


class TestCarverConfig:
    def test_defaults(self):
        config = CarverConfig()
        assert config.energy_type == EnergyType.BACKWARD
        assert config.kernel == GradientKernel.TRUNCATED
        assert config.refresh_gradient is False
        assert config.lazy_update is True
        assert config.highlight_color == 0xFF0000

    def test_string_enums(self):
        config = CarverConfig(energy_type="Forward", kernel="sobel")
        assert config.energy_type == EnergyType.FORWARD
        assert config.kernel == GradientKernel.SOBEL

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            CarverConfig().lazy_update = False

    def test_from_mapping(self):
        config = CarverConfig.from_mapping({"energy_type": "forward", "highlight_color": 0x00FF00})
        assert config.energy_type == EnergyType.FORWARD
        assert config.highlight_color == 0x00FF00

    def test_from_mapping_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="horizontal"):
            CarverConfig.from_mapping({"horizontal": True})

    def test_rejects_unknown_energy(self):
        with pytest.raises(ValueError):
            CarverConfig(energy_type="sideways")
