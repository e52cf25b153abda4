"""
Merge resolution.

Bodies merge when one lies inside the other's radius (dist < r_a or
dist < r_b, not the sum of the radii). Grouping is a single pass in index
order: each body not yet merged anchors a group, and later bodies join it only
if they overlap the anchor. A body that overlaps another group member but not
the anchor waits for a later tick. Each group then folds left into one body
conserving mass, momentum and area, and spawns fireballs for the kinetic
energy the merge dissipates.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from body import (BodyCollection, position_after_collision, radius_after_collision,
                  velocity_after_collision)
from color import ColorBlender, EnergyWeightedBlend, FireballPalette
from config import FIREBALL_LIFETIME, FIREBALL_SCALE
from fireball import Fireball, create_fireballs

logger = logging.getLogger("gravity")


def overlaps(dist: float, radius_a: float, radius_b: float) -> bool:
    return dist < radius_a or dist < radius_b


def find_merge_groups(bodies: BodyCollection) -> List[List[int]]:
    """Partition body indices into merge groups, anchors first."""
    n = len(bodies)
    if n == 0:
        return []
    diff = bodies.positions[:, None, :] - bodies.positions[None, :, :]
    dist = np.sqrt(np.einsum("ijk,ijk->ij", diff, diff, optimize=True))

    merged = np.zeros(n, dtype=bool)
    groups = []
    for a in range(n):
        if merged[a]:
            continue
        group = [a]
        merged[a] = True
        for b in range(a + 1, n):
            if merged[b]:
                continue
            if overlaps(dist[a, b], bodies.radii[a], bodies.radii[b]):
                group.append(b)
                merged[b] = True
        groups.append(group)
    return groups


def fuse_group(bodies: BodyCollection, group: Sequence[int], blender: ColorBlender):
    """Fold a group into (pos, vel, radius, mass, color), anchor first."""
    first = group[0]
    pos = bodies.positions[first].copy()
    vel = bodies.velocities[first].copy()
    radius = float(bodies.radii[first])
    mass = float(bodies.masses[first])
    color = tuple(bodies.colors[first])
    for idx in group[1:]:
        next_mass = float(bodies.masses[idx])
        pos = position_after_collision(mass, next_mass, pos, bodies.positions[idx])
        vel = velocity_after_collision(mass, next_mass, vel, bodies.velocities[idx])
        radius = radius_after_collision(radius, bodies.radii[idx])
        color = blender.merge(color, mass, tuple(bodies.colors[idx]), next_mass)
        mass += next_mass
    return pos, vel, radius, mass, color


def resolve_merges(bodies: BodyCollection, fireballs: List[Fireball],
                   blender: Optional[ColorBlender] = None,
                   palette: Optional[FireballPalette] = None,
                   lifetime: int = FIREBALL_LIFETIME,
                   scale: float = FIREBALL_SCALE) -> Tuple[BodyCollection, List[Fireball]]:
    """Merge overlapping bodies.

    Returns the inputs themselves when nothing overlaps. Otherwise returns a
    new collection with one body per group, in anchor order, and the incoming
    fireballs followed by the newly spawned ones.
    """
    groups = find_merge_groups(bodies)
    if len(groups) == len(bodies):
        return bodies, fireballs

    blender = blender or EnergyWeightedBlend()
    n = len(groups)
    positions = np.empty((n, 2))
    velocities = np.empty((n, 2))
    masses = np.empty(n)
    radii = np.empty(n)
    colors = np.empty((n, 4))
    new_fireballs = []

    for k, group in enumerate(groups):
        if len(group) == 1:
            i = group[0]
            positions[k] = bodies.positions[i]
            velocities[k] = bodies.velocities[i]
            masses[k] = bodies.masses[i]
            radii[k] = bodies.radii[i]
            colors[k] = bodies.colors[i]
            continue
        positions[k], velocities[k], radii[k], masses[k], colors[k] = fuse_group(bodies, group, blender)
        new_fireballs.extend(create_fireballs(bodies, group, palette, lifetime, scale))

    logger.debug(f"Merged {len(bodies)} bodies into {n}; spawned {len(new_fireballs)} fireballs")
    return BodyCollection(positions, velocities, masses, radii, colors), fireballs + new_fireballs
