import argparse
import logging
import sys
import time

import hsluv
import numpy as np
import pygame
import pygame.gfxdraw

from color import to_rgb8
from config import FIREBALL_PALETTES, INTEGRATORS, SimulationConfig, WindowConfig
from errors import SimulationError
from integrator import BarnesHutIntegrator
from simulation import Simulation

logger = logging.getLogger("gravity")

BACKGROUND_COLOR = (0, 0, 0)


class Renderer:
    def __init__(self, window_size):
        self.window_size = window_size
        self.show_quadtree = False
        self.overlay = pygame.Surface(window_size, pygame.SRCALPHA)

    def handle_input(self, event):
        if event.type == pygame.KEYDOWN and event.key == pygame.K_q:
            self.show_quadtree = not self.show_quadtree

    def _on_screen(self, x: float, y: float, radius: float) -> bool:
        """Whether a circle touches the window, allowing a radius margin."""
        margin = radius + 1
        return (-margin <= x <= self.window_size[0] + margin and
                -margin <= y <= self.window_size[1] + margin)

    def draw(self, screen, sim: Simulation):
        screen.fill(BACKGROUND_COLOR)

        if self.show_quadtree and isinstance(sim.integrator, BarnesHutIntegrator):
            self._draw_quadtree(screen, sim.integrator.quadtree)

        # gfxdraw only takes 16-bit coordinates, so bodies that drift away are skipped
        for pos, radius, color in zip(sim.bodies.positions, sim.bodies.radii, sim.bodies.colors):
            if not self._on_screen(pos[0], pos[1], radius):
                continue
            x, y = int(pos[0]), int(pos[1])
            r = max(int(radius), 1)
            rgb = to_rgb8(color)
            pygame.gfxdraw.filled_circle(screen, x, y, r, rgb)
            pygame.gfxdraw.aacircle(screen, x, y, r, rgb)

        # Fireball colors are premultiplied, so additive blending on black is exact
        self.overlay.fill((0, 0, 0, 0))
        for fireball in sim.fireballs:
            if not self._on_screen(fireball.pos[0], fireball.pos[1], fireball.radius):
                continue
            r = max(int(fireball.radius), 1)
            pygame.draw.circle(self.overlay, to_rgb8(fireball.color),
                               (int(fireball.pos[0]), int(fireball.pos[1])), r)
        screen.blit(self.overlay, (0, 0), special_flags=pygame.BLEND_RGB_ADD)

    def _draw_quadtree(self, screen, quadtree):
        boundaries = quadtree.get_boundaries()
        if not boundaries:
            return
        min_depth = min(depth for _, _, depth in boundaries)
        max_depth = max(depth for _, _, depth in boundaries)
        for (min_corner, size, depth) in boundaries:
            # Map depth to HSLuv color space
            t = (depth - min_depth) / max((max_depth - min_depth), 1)
            h = -100.0 + 180.0 * t
            rgb = hsluv.hsluv_to_rgb([h % 360, 100.0, 20.0 + t * 60.0])
            color = tuple(int(min(max(x, 0.0), 1.0) * 255) for x in rgb)
            pygame.draw.rect(screen, color,
                             (int(min_corner[0]), int(min_corner[1]), int(size), int(size)), 1)


def parse_args(argv=None):
    defaults = WindowConfig()
    sim_defaults = SimulationConfig()
    parser = argparse.ArgumentParser(description="2D gravitational N-body simulation with merging bodies")
    parser.add_argument("--bodies", type=int, default=defaults.n_bodies, help="number of bodies")
    parser.add_argument("--radius", type=float, default=defaults.body_radius, help="initial body radius")
    parser.add_argument("--width", type=int, default=defaults.width)
    parser.add_argument("--height", type=int, default=defaults.height)
    parser.add_argument("--seed", type=int, default=None, help="random seed for placement and colors")
    parser.add_argument("--gravity", type=float, default=sim_defaults.gravitational_constant,
                        help="gravitational constant")
    parser.add_argument("--integrator", choices=sorted(INTEGRATORS), default=sim_defaults.integrator)
    parser.add_argument("--theta", type=float, default=sim_defaults.theta,
                        help="Barnes-Hut opening angle")
    parser.add_argument("--fireball-palette", choices=sorted(FIREBALL_PALETTES),
                        default=sim_defaults.fireball_palette)
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    try:
        window = WindowConfig(width=args.width, height=args.height, n_bodies=args.bodies,
                              body_radius=args.radius, seed=args.seed)
        config = SimulationConfig(gravitational_constant=args.gravity, integrator=args.integrator,
                                  theta=args.theta, fireball_palette=args.fireball_palette)
        sim = Simulation(n_bodies=window.n_bodies, width=window.width, height=window.height,
                         radius=window.body_radius, config=config,
                         rng=np.random.default_rng(window.seed))
    except SimulationError as exc:
        logger.error(f"Invalid configuration: {exc}")
        return 2

    pygame.init()
    window_size = (window.width, window.height)
    screen = pygame.display.set_mode(window_size, vsync=1 if window.vsync else 0)
    pygame.display.set_caption(window.title)

    renderer = Renderer(window_size)
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 24)
    paused = False
    running = True
    last_time = time.perf_counter()

    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_SPACE:
                        paused = not paused
                    elif event.key == pygame.K_ESCAPE:
                        running = False
                renderer.handle_input(event)

            # Calculate delta time
            current_time = time.perf_counter()
            dt = current_time - last_time
            last_time = current_time

            if not paused:
                sim.step(dt)

            renderer.draw(screen, sim)
            status = (f"FPS: {clock.get_fps():.1f} | Bodies: {len(sim.bodies)} | "
                      f"Fireballs: {len(sim.fireballs)}")
            screen.blit(font.render(status, True, (255, 255, 0)), (10, 10))
            pygame.display.flip()

            # Cap the frame rate
            clock.tick(window.fps)
    except SimulationError:
        logger.exception(f"Simulation halted at tick {sim.tick}")
        return 1
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
