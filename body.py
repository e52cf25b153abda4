from typing import Iterable, Iterator

import numpy as np

from color import GRAY, Color
from errors import ConfigurationError
from vector import as_vec2


class Body:
    def __init__(self, pos, vel, mass, radius, color: Color = GRAY):
        """Initialize a body with position, velocity, mass, radius and color."""
        self.pos = as_vec2(pos)  # 2D position vector
        self.vel = as_vec2(vel)  # 2D velocity vector
        self.mass = float(mass)
        self.radius = float(radius)
        self.color = tuple(float(c) for c in color)
        if not self.mass > 0:
            raise ConfigurationError(f"body mass must be positive, got {mass}")
        if not self.radius > 0:
            raise ConfigurationError(f"body radius must be positive, got {radius}")

    def __repr__(self) -> str:
        return (f"Body(pos=({self.pos[0]:g}, {self.pos[1]:g}), vel=({self.vel[0]:g}, {self.vel[1]:g}), "
                f"mass={self.mass:g}, radius={self.radius:g})")


class BodyCollection:
    """Ordered bodies stored as parallel arrays; a body's identity is its index."""

    def __init__(self, positions, velocities, masses, radii, colors):
        self.positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
        self.velocities = np.array(velocities, dtype=np.float64).reshape(-1, 2)
        self.masses = np.array(masses, dtype=np.float64).reshape(-1)
        self.radii = np.array(radii, dtype=np.float64).reshape(-1)
        self.colors = np.array(colors, dtype=np.float64).reshape(-1, 4)

        n = len(self.masses)
        if not (len(self.positions) == len(self.velocities) == len(self.radii) == len(self.colors) == n):
            raise ValueError("body arrays must all have the same length")
        if n and (np.any(self.masses <= 0) or np.any(self.radii <= 0)):
            raise ConfigurationError("body masses and radii must be positive")

    @classmethod
    def empty(cls) -> "BodyCollection":
        return cls(np.zeros((0, 2)), np.zeros((0, 2)), np.zeros(0), np.zeros(0), np.zeros((0, 4)))

    @classmethod
    def from_bodies(cls, bodies: Iterable[Body]) -> "BodyCollection":
        bodies = list(bodies)
        if not bodies:
            return cls.empty()
        return cls(
            [b.pos for b in bodies],
            [b.vel for b in bodies],
            [b.mass for b in bodies],
            [b.radius for b in bodies],
            [b.color for b in bodies],
        )

    def __len__(self) -> int:
        return len(self.masses)

    def __getitem__(self, i: int) -> Body:
        """Snapshot of body i; mutating it does not write back."""
        return Body(self.positions[i], self.velocities[i], self.masses[i], self.radii[i],
                    tuple(self.colors[i]))

    def __iter__(self) -> Iterator[Body]:
        for i in range(len(self)):
            yield self[i]

    def total_mass(self) -> float:
        return float(np.sum(self.masses))

    def total_momentum(self) -> np.ndarray:
        return np.sum(self.masses[:, None] * self.velocities, axis=0)

    def kinetic_energy(self) -> float:
        return float(0.5 * np.sum(self.masses * np.sum(self.velocities ** 2, axis=1)))

    def __repr__(self) -> str:
        return f"BodyCollection(n={len(self)}, mass={self.total_mass():g})"


# Pairwise conservation rules used when two bodies fuse.

def velocity_after_collision(mass_a, mass_b, vel_a, vel_b) -> np.ndarray:
    """Conservation of momentum."""
    return (vel_a * mass_a + vel_b * mass_b) / (mass_a + mass_b)


def position_after_collision(mass_a, mass_b, pos_a, pos_b) -> np.ndarray:
    """Center of mass."""
    return (pos_a * mass_a + pos_b * mass_b) / (mass_a + mass_b)


def radius_after_collision(radius_a, radius_b) -> float:
    """Conservation of area (as we operate in 2D)."""
    return float(np.sqrt(radius_a ** 2 + radius_b ** 2))


def kinetic_energy(mass, vel) -> float:
    return 0.5 * mass * float(np.dot(vel, vel))
