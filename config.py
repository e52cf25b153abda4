"""
Simulation and window configuration.

SimulationConfig holds the physical constants and the strategy names used by
the core on every tick. WindowConfig holds driver-side settings (window size,
population, seed) that only the frame driver reads. Both are plain dataclasses
validated eagerly so that a bad value fails before the first tick.
"""

from dataclasses import dataclass, replace
from typing import Optional

from errors import ConfigurationError

# Original program's constants
GRAVITATIONAL_CONSTANT = 100.0
FIREBALL_LIFETIME = 100
FIREBALL_SCALE = 0.25

# Colors of solar system planets, 8-bit RGBA
SOLAR_PALETTE = (
    (26, 26, 26, 255),
    (230, 230, 230, 255),
    (47, 106, 105, 255),
    (153, 61, 0, 255),
    (176, 127, 23, 255),
    (176, 143, 54, 255),
    (85, 128, 170, 255),
    (54, 104, 150, 255),
)

INTEGRATORS = {"pairwise", "barnes_hut"}
FIREBALL_PALETTES = {"white", "heat"}


@dataclass
class SimulationConfig:
    gravitational_constant: float = GRAVITATIONAL_CONSTANT
    fireball_lifetime: int = FIREBALL_LIFETIME
    fireball_scale: float = FIREBALL_SCALE
    integrator: str = "pairwise"
    theta: float = 0.5      # Barnes-Hut opening angle
    epsilon: float = 1e-3   # Barnes-Hut softening length
    fireball_palette: str = "white"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.gravitational_constant < 0:
            raise ConfigurationError(
                f"gravitational_constant must be >= 0, got {self.gravitational_constant}")
        if int(self.fireball_lifetime) != self.fireball_lifetime or self.fireball_lifetime <= 0:
            raise ConfigurationError(
                f"fireball_lifetime must be a positive integer, got {self.fireball_lifetime}")
        if self.fireball_scale < 0:
            raise ConfigurationError(f"fireball_scale must be >= 0, got {self.fireball_scale}")
        if self.integrator not in INTEGRATORS:
            raise ConfigurationError(
                f"unknown integrator {self.integrator!r}; expected one of {sorted(INTEGRATORS)}")
        if self.theta < 0:
            raise ConfigurationError(f"theta must be >= 0, got {self.theta}")
        if self.epsilon < 0:
            raise ConfigurationError(f"epsilon must be >= 0, got {self.epsilon}")
        if self.fireball_palette not in FIREBALL_PALETTES:
            raise ConfigurationError(
                f"unknown fireball palette {self.fireball_palette!r}; "
                f"expected one of {sorted(FIREBALL_PALETTES)}")

    def copy(self, **changes) -> "SimulationConfig":
        return replace(self, **changes)


@dataclass
class WindowConfig:
    title: str = "Gravity"
    width: int = 500
    height: int = 500
    vsync: bool = True
    fps: int = 60
    n_bodies: int = 100
    body_radius: float = 5.0
    seed: Optional[int] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"window size must be positive, got {self.width}x{self.height}")
        if self.fps <= 0:
            raise ConfigurationError(f"fps must be positive, got {self.fps}")
