"""
Color model for facet rendering.

Colors are four 8-bit channels. Three packed integer forms are used:

- ``rgba``: 0xRRGGBBAA
- ``argb``: 0xAARRGGBB, the pixel format of the shared buffer
- ``rgb``:  0x00RRGGBB, the alpha-free form layers blend with
"""

from typing import NamedTuple

import numpy as np


class Color(NamedTuple):
    """RGBA color with 8-bit channels."""

    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def from_rgba(cls, value: int) -> "Color":
        """Unpack a 0xRRGGBBAA integer."""
        return cls((value >> 24) & 0xFF, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    @classmethod
    def from_argb(cls, value: int) -> "Color":
        """Unpack a 0xAARRGGBB integer (buffer pixel format)."""
        return cls((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF, (value >> 24) & 0xFF)

    @classmethod
    def from_rgb(cls, value: int) -> "Color":
        return cls((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    def rgba(self) -> int:
        return (self.r << 24) | (self.g << 16) | (self.b << 8) | self.a

    def argb(self) -> int:
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b

    def rgb(self) -> int:
        """Packed color without alpha."""
        return (self.r << 16) | (self.g << 8) | self.b

    def with_alpha(self, a: int) -> "Color":
        return self._replace(a=a)


WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)
RED = Color(255, 0, 0)
PINK = Color(255, 175, 175)
MAGENTA = Color(255, 0, 255)

# Sentinel for absent or invalid samples
MISSING = MAGENTA

# Grayscale ramp, index 0 (black) to 255 (white)
GRAYS = tuple(Color(i, i, i) for i in range(256))

GRAYS_RGB = np.array([c.rgb() for c in GRAYS], dtype=np.uint32)
GRAYS_RGB.setflags(write=False)


def gray(level: int) -> Color:
    """Look up a ramp entry."""
    return GRAYS[level]
