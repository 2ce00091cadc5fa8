from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def hex_to_rgb(value: int) -> tuple[float, float, float]:
    """Convert a 0xRRGGBB integer to RGB floats in [0, 1]."""
    return ((value >> 16) & 0xFF) / 255, ((value >> 8) & 0xFF) / 255, (value & 0xFF) / 255


@dataclass(frozen=True)
class Palette:
    name: str
    colors: tuple[int, ...]
    rgb: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        rgb = np.array([hex_to_rgb(color) for color in self.colors], dtype=np.float32)
        rgb.flags.writeable = False
        object.__setattr__(self, "rgb", rgb)

    def pick(self, count: int, rng: np.random.Generator) -> np.ndarray:
        """Pick one random color of the palette for each of `count` particles, as a (count, 3) array."""
        return self.rgb[rng.integers(0, len(self.colors), size=count)]


PALETTES: tuple[Palette, ...] = (
    Palette("赤 (Red)", (0xFF0000, 0xFF4D4D, 0xFF9999, 0xFFFFFF, 0xDC143C)),
    Palette("橙 (Orange)", (0xFF7F00, 0xFFA500, 0xFFD700, 0xFFFFFF, 0xFF4500)),
    Palette("黄 (Yellow)", (0xFFFF00, 0xFFFFE0, 0xFFD700, 0xFFFFFF, 0xDAA520)),
    Palette("绿 (Green)", (0x00FF00, 0x32CD32, 0x90EE90, 0xFFFFFF, 0x006400)),
    Palette("青 (Cyan)", (0x00FFFF, 0x40E0D0, 0xE0FFFF, 0xFFFFFF, 0x008B8B)),
    Palette("蓝 (Blue)", (0x0000FF, 0x1E90FF, 0x87CEFA, 0xFFFFFF, 0x000080)),
    Palette("紫 (Purple)", (0x8B00FF, 0x9370DB, 0xE6E6FA, 0xFFFFFF, 0x4B0082)),
)
