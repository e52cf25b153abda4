import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import numpy as np
import pygame
import pytest

import main
from body import Body, BodyCollection
from fireball import Fireball
from simulation import Simulation


@pytest.fixture
def screen():
    pygame.display.init()
    surface = pygame.display.set_mode((500, 500))
    yield surface
    pygame.display.quit()


def single_body_sim(pos, radius=5.0, color=(1, 1, 1, 1)):
    bodies = BodyCollection.from_bodies([Body(pos, (0, 0), mass=1, radius=radius, color=color)])
    return Simulation(bodies=bodies)


def test_parse_args_defaults():
    args = main.parse_args([])
    assert (args.bodies, args.radius, args.width, args.height) == (100, 5.0, 500, 500)
    assert args.gravity == 100.0
    assert args.integrator == "pairwise"
    assert args.fireball_palette == "white"
    assert args.seed is None


def test_parse_args_flags():
    args = main.parse_args(["--bodies", "12", "--seed", "3", "--integrator", "barnes_hut",
                            "--theta", "0.8", "--fireball-palette", "heat", "--log-level", "DEBUG"])
    assert args.bodies == 12
    assert args.seed == 3
    assert args.integrator == "barnes_hut"
    assert args.theta == 0.8
    assert args.fireball_palette == "heat"


def test_parse_args_rejects_unknown_integrator():
    with pytest.raises(SystemExit):
        main.parse_args(["--integrator", "octree"])


@pytest.mark.parametrize("argv", [
    ["--bodies", "0"],
    ["--radius", "-1"],
    ["--width", "0"],
    ["--gravity", "-5"],
])
def test_bad_configuration_exits_before_opening_a_window(monkeypatch, argv):
    def fail():
        raise AssertionError("pygame should not start")

    monkeypatch.setattr(main.pygame, "init", fail)
    assert main.main(argv) == 2


def test_draw_renders_visible_body(screen):
    main.Renderer((500, 500)).draw(screen, single_body_sim((250.0, 250.0)))
    assert tuple(screen.get_at((250, 250)))[:3] == (255, 255, 255)


def test_draw_skips_bodies_far_outside_the_window(screen):
    sim = single_body_sim((40000.0, 10.0))
    sim.bodies = BodyCollection.from_bodies([
        Body((40000.0, 10.0), (0, 0), mass=1, radius=5),
        Body((-50000.0, -70000.0), (0, 0), mass=1, radius=5),
        Body((250.0, 250.0), (0, 0), mass=1, radius=5, color=(1, 0, 0, 1)),
    ])
    main.Renderer((500, 500)).draw(screen, sim)
    assert tuple(screen.get_at((250, 250)))[:3] == (255, 0, 0)


def test_draw_keeps_bodies_overlapping_the_edge(screen):
    main.Renderer((500, 500)).draw(screen, single_body_sim((-3.0, 100.0), radius=6.0))
    assert tuple(screen.get_at((1, 100)))[:3] == (255, 255, 255)


def test_draw_clips_fireballs(screen):
    sim = single_body_sim((10.0, 10.0), radius=1.0)
    sim.fireballs = [
        Fireball((40000.0, -40000.0), 4.0, (1, 1, 1, 1), 10),
        Fireball((300.0, 300.0), 4.0, (0.5, 0.5, 0.5, 0.5), 10),
    ]
    main.Renderer((500, 500)).draw(screen, sim)
    r, g, b = tuple(screen.get_at((300, 300)))[:3]
    assert r == g == b and 120 <= r <= 135


def test_draw_quadtree_overlay(screen):
    from config import SimulationConfig

    sim = Simulation(n_bodies=30, config=SimulationConfig(integrator="barnes_hut"),
                     rng=np.random.default_rng(2))
    sim.step(0.01)
    renderer = main.Renderer((500, 500))
    renderer.handle_input(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_q))
    assert renderer.show_quadtree
    renderer.draw(screen, sim)
