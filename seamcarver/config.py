"""
Configuration for a SeamCarver instance.

Everything that used to be a process-wide UI toggle (energy model, update
suppression, highlight color) lives here, per carver.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .energy import EnergyType, GradientKernel


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        value = value.lower()
    return enum_cls(value)


@dataclass(frozen=True)
class CarverConfig:
    """Immutable configuration container for the carving engine."""
    energy_type: EnergyType = EnergyType.BACKWARD
    kernel: GradientKernel = GradientKernel.TRUNCATED
    # BACKWARD only: rebuild the gradient from the pixels after each seam
    # instead of carrying energy values along (painted overrides are lost)
    refresh_gradient: bool = False
    lazy_update: bool = True
    highlight_color: int = 0xFF0000

    def __post_init__(self):
        object.__setattr__(self, 'energy_type', _coerce(EnergyType, self.energy_type))
        object.__setattr__(self, 'kernel', _coerce(GradientKernel, self.kernel))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "CarverConfig":
        """
        Build a config from plain values, e.g. parsed from a settings file.

        Enum fields accept their string names ("forward", "sobel").

        Raises:
            ValueError: unknown keys or enum values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown carver settings: {sorted(unknown)}")
        return cls(**values)
