"""
Colors for bodies and fireballs.

Colors are RGBA tuples of floats in [0, 1]. Merging bodies blends their colors
through a ColorBlender strategy; initial body colors come from a ColorChooser
drawing from a weighted palette; fireball colors come from a FireballPalette
looked up by intensity.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import hsluv
import numpy as np

from config import SOLAR_PALETTE
from errors import ConfigurationError

Color = Tuple[float, float, float, float]

WHITE: Color = (1.0, 1.0, 1.0, 1.0)
GRAY: Color = (128 / 255, 128 / 255, 128 / 255, 1.0)


def from_rgba8(rgba: Sequence[int]) -> Color:
    r, g, b, a = rgba
    return (r / 255, g / 255, b / 255, a / 255)


def to_rgb8(color: Sequence[float]) -> Tuple[int, int, int]:
    return tuple(int(round(min(max(c, 0.0), 1.0) * 255)) for c in color[:3])


def faded(color: Color, intensity: float) -> Color:
    """Scale every channel, alpha included, by intensity (premultiplied alpha)."""
    return tuple(c * intensity for c in color)


class ColorBlender:
    """Strategy for the color of a body formed by merging two others."""

    def merge(self, color_a: Color, mass_a: float, color_b: Color, mass_b: float) -> Color:
        raise NotImplementedError


class EnergyWeightedBlend(ColorBlender):
    """Mass-weighted average of squared channels, so apparent brightness is kept."""

    def merge(self, color_a, mass_a, color_b, mass_b):
        a = np.asarray(color_a, dtype=np.float64)
        b = np.asarray(color_b, dtype=np.float64)
        mixed = np.sqrt((mass_a * a * a + mass_b * b * b) / (mass_a + mass_b))
        return tuple(float(c) for c in mixed)


class LinearBlend(ColorBlender):
    def merge(self, color_a, mass_a, color_b, mass_b):
        a = np.asarray(color_a, dtype=np.float64)
        b = np.asarray(color_b, dtype=np.float64)
        mixed = (mass_a * a + mass_b * b) / (mass_a + mass_b)
        return tuple(float(c) for c in mixed)


@dataclass(frozen=True)
class Palette:
    colors: Tuple[Color, ...]

    def __post_init__(self):
        if not self.colors:
            raise ConfigurationError("palette must contain at least one color")

    @classmethod
    def solar(cls) -> "Palette":
        return cls(tuple(from_rgba8(c) for c in SOLAR_PALETTE))

    def __len__(self) -> int:
        return len(self.colors)


class ColorChooser:
    """Weighted random pick from a palette.

    Weights are exponential (2**k, k uniform in [0, 20)) so that a few colors
    dominate instead of everything blending to gray after many merges.
    """

    def __init__(self, palette: Palette, rng: Optional[np.random.Generator] = None, max_exponent: int = 20):
        self.palette = palette
        self.rng = rng if rng is not None else np.random.default_rng()
        self.weights = 2.0 ** self.rng.integers(0, max_exponent, size=len(palette))
        self._p = self.weights / self.weights.sum()

    def choose(self) -> Color:
        return self.palette.colors[int(self.rng.choice(len(self.palette), p=self._p))]

    def choose_many(self, n: int) -> list:
        idx = self.rng.choice(len(self.palette), size=n, p=self._p)
        return [self.palette.colors[int(i)] for i in idx]


class FireballPalette:
    """Maps a fireball intensity in [0, 1] to an opaque base color."""

    def lookup(self, intensity: float) -> Color:
        raise NotImplementedError


class FlatPalette(FireballPalette):
    def __init__(self, color: Color = WHITE):
        self.color = color

    def lookup(self, intensity):
        return self.color


class HeatPalette(FireballPalette):
    """White-hot at full intensity cooling through yellow to deep red."""

    def __init__(self, start_hue: float = 12.0, end_hue: float = 70.0):
        self.start_hue = start_hue
        self.end_hue = end_hue

    def lookup(self, intensity):
        t = min(max(float(intensity), 0.0), 1.0)
        h = self.start_hue + (self.end_hue - self.start_hue) * t
        s = 100.0 * (1.0 - t * t)
        l = 35.0 + 65.0 * t
        rgb = hsluv.hsluv_to_rgb([h, s, l])
        return tuple(min(max(float(x), 0.0), 1.0) for x in rgb) + (1.0,)


def fireball_palette(name: str) -> FireballPalette:
    if name == "white":
        return FlatPalette()
    if name == "heat":
        return HeatPalette()
    raise ConfigurationError(f"unknown fireball palette {name!r}")
