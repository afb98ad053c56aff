"""
Colour palette for phantom representations.

Colours are 0xRRGGBB integers. Assignment goes through a PaletteColors
instance so a seed reproduces the same colours run after run.
"""

import random
from typing import Optional, Sequence, Tuple

COLORS = (
    0xFF1E00, 0xFFB300, 0x1533AD, 0x00BF32, 0xBF4030,
    0xBF9430, 0x2C3D82, 0x248F40, 0xA61300, 0xA67400,
    0x071C71, 0x007C21, 0xFF5640, 0xFFC640, 0x4965D6,
    0x38DF64, 0xFF8373, 0xFFD573, 0x6F83D6, 0x64DF85,
    0xFF5600, 0xFF7C00, 0x04859D, 0x00AA72, 0x60D4AE,
    0xBF6030, 0xBF7630, 0x206876, 0x207F60, 0x5FBDCE,
    0xA63800, 0xA65100, 0x015666, 0x006E4A, 0xFFB773,
    0xFF8040, 0xFF9D40, 0x37B6CE, 0x35D4A0, 0xFFA273,
)

MARKER_COLOR = 0xFFFF00


def hex_to_rgba(color: int, alpha: float = 1.0) -> Tuple[int, int, int, int]:
    """Convert 0xRRGGBB to an (r, g, b, a) tuple of 0-255 ints."""
    r = (color >> 16) & 0xFF
    g = (color >> 8) & 0xFF
    b = color & 0xFF
    return (r, g, b, int(round(alpha * 255)))


class PaletteColors:
    """
    Colour-assignment strategy over a fixed palette.

    `next()` draws uniformly at random from a private, seedable generator.
    """

    def __init__(self, seed: Optional[int] = None, palette: Sequence[int] = COLORS):
        if not palette:
            raise ValueError("palette must contain at least one colour")
        self.palette = tuple(palette)
        self.seed = seed
        self._rng = random.Random(seed)

    def next(self) -> int:
        return self.palette[self._rng.randrange(len(self.palette))]
