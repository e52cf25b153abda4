import logging

import numpy as np
import pytest

from body import Body, BodyCollection
from config import SimulationConfig, WindowConfig
from errors import ConfigurationError
from simulation import Simulation, advance, initialize_bodies


def test_initialize_bodies_within_bounds():
    bodies = initialize_bodies(200, 300.0, 100.0, 5.0, np.random.default_rng(0))
    assert len(bodies) == 200
    assert np.all(bodies.positions >= 0)
    assert np.all(bodies.positions[:, 0] < 300.0)
    assert np.all(bodies.positions[:, 1] < 100.0)
    assert np.all(bodies.masses == 1.0)
    assert np.all(bodies.radii == 5.0)
    assert np.all(bodies.velocities == 0.0)


def test_initialize_bodies_is_reproducible():
    a = initialize_bodies(50, 500, 500, 5, np.random.default_rng(123))
    b = initialize_bodies(50, 500, 500, 5, np.random.default_rng(123))
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.colors, b.colors)


@pytest.mark.parametrize("count, x_bound, y_bound, radius", [
    (0, 500, 500, 5),
    (-3, 500, 500, 5),
    (10, 0, 500, 5),
    (10, 500, -1, 5),
    (10, 500, 500, 0),
])
def test_initialize_bodies_rejects_bad_configuration(count, x_bound, y_bound, radius):
    with pytest.raises(ConfigurationError):
        initialize_bodies(count, x_bound, y_bound, radius)


def test_advance_merges_before_integrating():
    bodies = BodyCollection.from_bodies([
        Body((0, 0), (0, 0), mass=1, radius=2),
        Body((1, 0), (0, 0), mass=1, radius=2),
    ])
    bodies, fireballs = advance(bodies, [], 0.1)
    assert len(bodies) == 1
    assert bodies.masses[0] == 2.0
    assert np.allclose(bodies.positions[0], [0.5, 0.0])
    assert bodies.radii[0] == pytest.approx(np.sqrt(8))
    assert fireballs == []


def test_advance_handles_coincident_bodies_by_merging():
    bodies = BodyCollection.from_bodies([
        Body((3, 3), (1, 0), mass=1, radius=1),
        Body((3, 3), (-1, 0), mass=1, radius=1),
    ])
    bodies, fireballs = advance(bodies, [], 0.1)
    assert len(bodies) == 1
    assert len(fireballs) == 1
    # Spawned this tick and aged once
    assert fireballs[0].ticks_remaining == 99


def test_advance_rejects_negative_dt():
    bodies = initialize_bodies(3, 10, 10, 0.1, np.random.default_rng(0))
    with pytest.raises(ConfigurationError):
        advance(bodies, [], -1.0)


def test_simulation_conserves_mass_and_momentum():
    sim = Simulation(n_bodies=60, width=200, height=200, radius=5,
                     rng=np.random.default_rng(5))
    mass = sim.total_mass()
    momentum = sim.total_momentum()
    for _ in range(30):
        sim.step(0.01)
    assert sim.tick == 30
    assert sim.total_mass() == pytest.approx(mass)
    assert np.allclose(sim.total_momentum(), momentum, atol=1e-6)
    assert len(sim.bodies) <= 60
    for fireball in sim.fireballs:
        assert 0 <= fireball.ticks_remaining < sim.config.fireball_lifetime


def test_simulation_with_barnes_hut_and_heat_palette():
    config = SimulationConfig(integrator="barnes_hut", fireball_palette="heat")
    sim = Simulation(n_bodies=40, config=config, rng=np.random.default_rng(9))
    for _ in range(5):
        sim.step(0.01)
    assert sim.total_mass() == pytest.approx(40.0)


def test_simulation_accepts_prebuilt_bodies():
    bodies = BodyCollection.from_bodies([Body((0, 0), (1, 0), mass=1, radius=1)])
    sim = Simulation(bodies=bodies)
    sim.step(2.0)
    assert np.allclose(sim.get_body_positions(), [[2.0, 0.0]])
    assert np.allclose(sim.get_body_radii(), [1.0])


@pytest.mark.parametrize("changes", [
    {"integrator": "octree"},
    {"gravitational_constant": -1.0},
    {"fireball_lifetime": 0},
    {"fireball_palette": "plasma"},
    {"theta": -0.5},
])
def test_simulation_config_validation(changes):
    with pytest.raises(ConfigurationError):
        SimulationConfig(**changes)


def test_config_copy_and_window_defaults():
    config = SimulationConfig().copy(gravitational_constant=1.0)
    assert config.gravitational_constant == 1.0
    window = WindowConfig()
    assert (window.title, window.width, window.height) == ("Gravity", 500, 500)
    with pytest.raises(ConfigurationError):
        WindowConfig(width=0)


def test_advance_without_integrator_does_not_log_every_tick(caplog):
    config = SimulationConfig(integrator="barnes_hut")
    bodies = initialize_bodies(10, 100, 100, 0.5, np.random.default_rng(4))
    fireballs = []
    with caplog.at_level(logging.INFO, logger="gravity"):
        caplog.clear()
        for _ in range(3):
            bodies, fireballs = advance(bodies, fireballs, 0.01, config)
    assert not [r for r in caplog.records if r.levelno >= logging.INFO]
