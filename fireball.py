import numpy as np
from typing import List, Optional, Sequence

from body import BodyCollection, kinetic_energy, velocity_after_collision
from color import Color, FireballPalette, FlatPalette, faded
from config import FIREBALL_LIFETIME, FIREBALL_SCALE
from vector import as_vec2


class Fireball:
    __slots__ = ['pos', 'radius', 'color', 'ticks_remaining']

    def __init__(self, pos, radius: float, color: Color, ticks_remaining: int = FIREBALL_LIFETIME):
        self.pos = as_vec2(pos)
        self.radius = float(radius)
        self.color = color
        self.ticks_remaining = int(ticks_remaining)

    def __repr__(self) -> str:
        return (f"Fireball(pos=({self.pos[0]:g}, {self.pos[1]:g}), radius={self.radius:g}, "
                f"ticks_remaining={self.ticks_remaining})")


def fireball_position(pos_a, pos_b, radius_a: float, radius_b: float) -> np.ndarray:
    """Point on the segment between two centers, split in proportion to the radii."""
    return (pos_a * radius_b + pos_b * radius_a) / (radius_a + radius_b)


def dissipated_energy(mass_a, mass_b, vel_a, vel_b) -> float:
    """Kinetic energy lost when two bodies fuse."""
    vel_c = velocity_after_collision(mass_a, mass_b, vel_a, vel_b)
    energy_before = kinetic_energy(mass_a, vel_a) + kinetic_energy(mass_b, vel_b)
    energy_after = kinetic_energy(mass_a + mass_b, vel_c)
    return energy_before - energy_after


def fireball_radius(energy: float, scale: float = FIREBALL_SCALE) -> float:
    # Area proportional to the square root of the energy, radius to the
    # square root of the area.
    area = np.sqrt(energy)
    return scale * float(np.sqrt(area))


def create_fireballs(bodies: BodyCollection, group: Sequence[int],
                     palette: Optional[FireballPalette] = None,
                     lifetime: int = FIREBALL_LIFETIME,
                     scale: float = FIREBALL_SCALE) -> List[Fireball]:
    """One fireball for every member of a merge group except the heaviest.

    Members that lose no kinetic energy against the heaviest body produce none.
    """
    palette = palette or FlatPalette()
    group = list(group)
    masses = bodies.masses[group]
    heaviest = group[int(np.argmax(masses))]  # argmax keeps the first on ties

    fireballs = []
    for idx in group:
        if idx == heaviest:
            continue
        energy = dissipated_energy(bodies.masses[idx], bodies.masses[heaviest],
                                   bodies.velocities[idx], bodies.velocities[heaviest])
        if not energy > 0:
            continue
        pos = fireball_position(bodies.positions[idx], bodies.positions[heaviest],
                                bodies.radii[idx], bodies.radii[heaviest])
        fireballs.append(Fireball(pos, fireball_radius(energy, scale), palette.lookup(1.0), lifetime))
    return fireballs


def update_fireballs(fireballs: List[Fireball], palette: Optional[FireballPalette] = None,
                     lifetime: int = FIREBALL_LIFETIME) -> List[Fireball]:
    """Age every fireball by one tick and drop the ones that have run out."""
    palette = palette or FlatPalette()
    survivors = []
    for fireball in fireballs:
        if fireball.ticks_remaining <= 0:
            continue
        fireball.radius *= 1 + 1 / lifetime
        # Intensity decreases with inverse square.
        intensity = (fireball.ticks_remaining / lifetime) ** 2
        fireball.color = faded(palette.lookup(intensity), intensity)
        fireball.ticks_remaining -= 1
        survivors.append(fireball)

    if len(survivors) < len(fireballs):
        return survivors
    return fireballs
