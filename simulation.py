import logging
from typing import List, Optional, Tuple

import numpy as np

from body import BodyCollection
from color import (ColorBlender, ColorChooser, EnergyWeightedBlend, FireballPalette, Palette,
                   fireball_palette)
from config import SimulationConfig
from errors import ConfigurationError
from fireball import Fireball, update_fireballs
from integrator import Integrator, make_integrator
from merge import resolve_merges

logger = logging.getLogger("gravity")


def initialize_bodies(count: int, x_bound: float, y_bound: float, radius: float,
                      rng: Optional[np.random.Generator] = None,
                      palette: Optional[Palette] = None) -> BodyCollection:
    """Place count unit-mass bodies uniformly at random in [0, x_bound) x [0, y_bound)."""
    if int(count) != count or count <= 0:
        raise ConfigurationError(f"body count must be a positive integer, got {count}")
    if x_bound <= 0 or y_bound <= 0:
        raise ConfigurationError(f"bounds must be positive, got {x_bound} x {y_bound}")
    if radius <= 0:
        raise ConfigurationError(f"body radius must be positive, got {radius}")

    rng = rng if rng is not None else np.random.default_rng()
    palette = palette or Palette.solar()
    chooser = ColorChooser(palette, rng)

    count = int(count)
    positions = rng.random((count, 2)) * np.array([x_bound, y_bound], dtype=np.float64)
    velocities = np.zeros((count, 2), dtype=np.float64)
    masses = np.ones(count, dtype=np.float64)
    radii = np.full(count, float(radius), dtype=np.float64)
    colors = np.array(chooser.choose_many(count), dtype=np.float64)

    logger.info(f"Initialized {count} bodies in {x_bound}x{y_bound} "
                f"(radius {radius}, palette weights {chooser.weights.astype(int).tolist()})")
    return BodyCollection(positions, velocities, masses, radii, colors)


def advance(bodies: BodyCollection, fireballs: List[Fireball], dt: float,
            config: Optional[SimulationConfig] = None,
            integrator: Optional[Integrator] = None,
            blender: Optional[ColorBlender] = None,
            palette: Optional[FireballPalette] = None) -> Tuple[BodyCollection, List[Fireball]]:
    """Run one tick: merge, then gravity, then fireball aging."""
    if dt < 0:
        raise ConfigurationError(f"time step must be >= 0, got {dt}")
    config = config or SimulationConfig()
    integrator = integrator or make_integrator(config)
    palette = palette or fireball_palette(config.fireball_palette)

    bodies, fireballs = resolve_merges(bodies, fireballs, blender, palette,
                                       config.fireball_lifetime, config.fireball_scale)
    integrator.step(bodies, dt)
    fireballs = update_fireballs(fireballs, palette, config.fireball_lifetime)
    return bodies, fireballs


class Simulation:
    """Owns the world state (bodies and fireballs) between ticks."""

    def __init__(self, n_bodies: int = 100, width: float = 500.0, height: float = 500.0,
                 radius: float = 5.0, config: Optional[SimulationConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 blender: Optional[ColorBlender] = None,
                 bodies: Optional[BodyCollection] = None):
        self.config = config or SimulationConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.integrator = make_integrator(self.config)
        self.blender = blender or EnergyWeightedBlend()
        self.palette = fireball_palette(self.config.fireball_palette)
        self.tick = 0

        if bodies is None:
            bodies = initialize_bodies(n_bodies, width, height, radius, self.rng)
        self.bodies = bodies
        self.fireballs: List[Fireball] = []
        logger.info(f"Simulation created with {len(self.bodies)} bodies "
                    f"(G={self.config.gravitational_constant}, integrator={self.config.integrator})")

    def step(self, dt: float) -> None:
        """Advance the simulation by one tick of length dt."""
        self.bodies, self.fireballs = advance(self.bodies, self.fireballs, dt, self.config,
                                              self.integrator, self.blender, self.palette)
        self.tick += 1

    def total_mass(self) -> float:
        return self.bodies.total_mass()

    def total_momentum(self) -> np.ndarray:
        return self.bodies.total_momentum()

    def kinetic_energy(self) -> float:
        return self.bodies.kinetic_energy()

    def get_body_positions(self) -> np.ndarray:
        """Return positions of all bodies for rendering."""
        return self.bodies.positions.copy()

    def get_body_radii(self) -> np.ndarray:
        """Return radii of all bodies for rendering."""
        return self.bodies.radii.copy()
