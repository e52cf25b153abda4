"""
Gravity integrators.

Both integrators advance a BodyCollection in place: first every velocity from
the gravitational pull of every other body, then every position from the
updated velocity. Velocity changes are computed from the unchanged positions
and written in a single pass afterwards, so the pairwise update is
simultaneous and a failing tick leaves the collection untouched.

PairwiseIntegrator is the O(n^2) reference. BarnesHutIntegrator approximates
distant groups of bodies by their center of mass using a quadtree.
"""

import logging
from typing import Tuple

import numpy as np

from body import BodyCollection
from config import SimulationConfig
from errors import ConfigurationError, DegenerateGeometryError
from quadtree import QuadTree
from vector import difference, length, scaled, unit

logger = logging.getLogger("gravity")


def pairwise_impulse(pos_a: np.ndarray, pos_b: np.ndarray, mass_a: float, mass_b: float,
                     G: float, dt: float) -> Tuple[np.ndarray, np.ndarray]:
    """Velocity changes of A and B from their mutual attraction over dt.

    mass_a * dv_a + mass_b * dv_b == 0.
    """
    diff = difference(pos_b, pos_a)
    dist = length(diff)
    if dist == 0.0:
        raise DegenerateGeometryError("bodies at zero separation have no direction of attraction")
    # Force magnitude with unit masses
    unit_mass_force = G / dist ** 2
    direction = unit(diff)
    dv_a = scaled(direction, unit_mass_force * mass_b * dt)
    dv_b = scaled(direction, -unit_mass_force * mass_a * dt)
    return dv_a, dv_b


def geometry_buffers(pos: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Pairwise differences pos[j] - pos[i] and squared distances."""
    diff = pos[None, :, :] - pos[:, None, :]
    r2 = np.einsum("ijk,ijk->ij", diff, diff, optimize=True)
    return diff, r2


class Integrator:
    def velocity_deltas(self, bodies: BodyCollection, dt: float) -> np.ndarray:
        raise NotImplementedError

    def update_velocities(self, bodies: BodyCollection, dt: float) -> None:
        if len(bodies) < 2 or dt == 0:
            return
        deltas = self.velocity_deltas(bodies, dt)
        bodies.velocities += deltas

    def update_positions(self, bodies: BodyCollection, dt: float) -> None:
        bodies.positions += bodies.velocities * dt

    def step(self, bodies: BodyCollection, dt: float) -> None:
        """Advance velocities, then positions, by dt."""
        if dt < 0:
            raise ConfigurationError(f"time step must be >= 0, got {dt}")
        self.update_velocities(bodies, dt)
        self.update_positions(bodies, dt)


class PairwiseIntegrator(Integrator):
    def __init__(self, G: float = 1.0):
        self.G = G

    def velocity_deltas(self, bodies, dt):
        diff, r2 = geometry_buffers(bodies.positions)
        np.fill_diagonal(r2, np.inf)

        coincident = np.argwhere(r2 == 0.0)
        if len(coincident):
            i, j = coincident[0]
            raise DegenerateGeometryError(
                f"bodies {i} and {j} are at zero separation; gravity is undefined")

        inv_r3 = r2 ** -1.5
        # dv_i = G * dt * sum_j m_j * (pos_j - pos_i) / |pos_j - pos_i|^3
        weights = (self.G * dt) * inv_r3 * bodies.masses[None, :]
        return np.einsum("ij,ijk->ik", weights, diff, optimize=True)


class BarnesHutIntegrator(Integrator):
    def __init__(self, G: float = 1.0, theta: float = 0.5, epsilon: float = 1e-3):
        self.G = G
        self.quadtree = QuadTree(theta=theta, epsilon=epsilon)

    def velocity_deltas(self, bodies, dt):
        self.quadtree.build(bodies.positions, bodies.masses)
        accelerations = np.array([self.quadtree.compute_acceleration(i, self.G)
                                  for i in range(len(bodies))])
        return accelerations * dt


def make_integrator(config: SimulationConfig) -> Integrator:
    if config.integrator == "pairwise":
        return PairwiseIntegrator(G=config.gravitational_constant)
    if config.integrator == "barnes_hut":
        logger.debug(f"Using Barnes-Hut integrator (theta={config.theta}, epsilon={config.epsilon})")
        return BarnesHutIntegrator(G=config.gravitational_constant, theta=config.theta,
                                   epsilon=config.epsilon)
    raise ConfigurationError(f"unknown integrator {config.integrator!r}")
