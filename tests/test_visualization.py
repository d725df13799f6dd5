import numpy as np
import pygame
import pytest

from constants import NOMINAL_DELTA_TIME
from effects import build_screen
from frame_clock import fixed_ticks
from visualization import PygameSurface, SpriteCache, Visualizer, normalize_stops, sample_stops

RED = (255, 0, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def target():
    surface = pygame.Surface((64, 64))
    surface.fill((0, 0, 0))
    return surface


def rgb(surface, x, y):
    return tuple(surface.get_at((x, y)))[:3]


def test_circle_fills_its_center(target):
    PygameSurface(target).circle((20.0, 20.0), 5.0, RED)
    assert rgb(target, 20, 20) == RED
    assert rgb(target, 40, 40) == (0, 0, 0)


def test_transparent_and_offscreen_primitives_draw_nothing(target):
    canvas = PygameSurface(target)
    canvas.circle((20.0, 20.0), 5.0, RED, alpha=0.0)
    canvas.circle((500.0, 500.0), 5.0, RED)
    canvas.radial_gradient((-100.0, -100.0), 10.0, [(RED, 1.0), (RED, 0.0)])
    canvas.line((-50.0, -50.0), (-10.0, -10.0), RED)
    assert pygame.surfarray.array3d(target).max() == 0


def test_additive_blending_adds(target):
    target.fill((10, 10, 10))
    PygameSurface(target).circle((20.0, 20.0), 5.0, (100, 0, 0), additive=True)
    assert rgb(target, 20, 20) == (110, 10, 10)


def test_half_alpha_blends(target):
    PygameSurface(target).circle((20.0, 20.0), 5.0, (200, 200, 200), alpha=0.5)
    r, g, b = rgb(target, 20, 20)
    assert 95 <= r <= 105


def test_radial_gradient_fades_outwards(target):
    PygameSurface(target).radial_gradient((20.0, 20.0), 10.0, [(RED, 1.0), (RED, 0.0)])
    assert rgb(target, 20, 20)[0] > 200
    assert 0 < rgb(target, 26, 20)[0] < rgb(target, 20, 20)[0]
    assert rgb(target, 35, 35) == (0, 0, 0)


def test_linear_gradient_runs_from_start_to_end(target):
    square = [(0.0, 0.0), (40.0, 0.0), (40.0, 40.0), (0.0, 40.0)]
    PygameSurface(target).linear_gradient(square, (20.0, 0.0), (20.0, 40.0), [(RED, 1.0), (BLUE, 1.0)])
    top, bottom = rgb(target, 20, 1), rgb(target, 20, 38)
    assert top[0] > top[2]
    assert bottom[2] > bottom[0]
    assert rgb(target, 55, 55) == (0, 0, 0)


def test_path_and_line(target):
    canvas = PygameSurface(target)
    canvas.path([(5.0, 5.0), (25.0, 5.0), (15.0, 25.0)], BLUE)
    canvas.line((0.0, 50.0), (60.0, 50.0), RED, width=3.0)
    assert rgb(target, 15, 10) == BLUE
    assert rgb(target, 30, 50) == RED


def test_sample_stops():
    stops = [((0, 0, 0), 0.0), ((100, 200, 50), 1.0)]
    colors, alphas = sample_stops(stops, np.array([0.0, 0.5, 1.0, 2.0]))
    np.testing.assert_allclose(colors[1], (50.0, 100.0, 25.0))
    np.testing.assert_allclose(alphas, [0.0, 0.5, 1.0, 1.0])
    single, alpha = sample_stops([(RED, 0.4)], np.zeros((2, 3)))
    assert single.shape == (2, 3, 3)
    np.testing.assert_allclose(alpha, 0.4)


def test_radial_sprites_are_reused_across_opacity(target):
    canvas = PygameSurface(target)
    for pulse in (1.0, 0.8, 0.5):
        canvas.radial_gradient((20.0, 20.0), 10.2, [(RED, 0.6 * pulse), (RED, 0.0)])
        canvas.radial_gradient((40.0, 30.0), 9.8, [(RED, 0.6 * pulse), (RED, 0.0)])
    assert len(canvas.radial_sprites) == 1
    assert canvas.radial_sprites.misses == 1
    assert canvas.radial_sprites.hits == 5


def test_dim_radial_gradient_is_scaled():
    bright, dim = pygame.Surface((64, 64)), pygame.Surface((64, 64))
    for surface in (bright, dim):
        surface.fill((0, 0, 0))
    PygameSurface(bright).radial_gradient((20.0, 20.0), 10.0, [(RED, 1.0), (RED, 0.0)], additive=True)
    PygameSurface(dim).radial_gradient((20.0, 20.0), 10.0, [(RED, 0.5), (RED, 0.0)], additive=True)
    assert rgb(dim, 20, 20)[0] == pytest.approx(rgb(bright, 20, 20)[0] / 2.0, abs=3)


def test_linear_strips_are_reused(target):
    canvas = PygameSurface(target)
    shaft = [(10.0, 0.0), (20.0, 0.0), (24.0, 60.0), (6.0, 60.0)]
    for alpha in (0.9, 0.7, 0.5):
        canvas.linear_gradient(shaft, (15.0, 0.0), (15.0, 60.0), [(BLUE, alpha), (BLUE, 0.0)])
    assert len(canvas.linear_strips) == 1
    assert canvas.linear_strips.hits == 2


def test_diagonal_linear_gradient(target):
    square = [(8.0, 8.0), (56.0, 8.0), (56.0, 56.0), (8.0, 56.0)]
    PygameSurface(target).linear_gradient(square, (8.0, 8.0), (56.0, 56.0), [(RED, 1.0), (BLUE, 1.0)],
                                          additive=True)
    near, far = rgb(target, 12, 12), rgb(target, 52, 52)
    assert near[0] > near[2]
    assert far[2] > far[0]
    assert rgb(target, 2, 2) == (0, 0, 0)


def test_sprite_cache_evicts_least_recently_used():
    cache = SpriteCache(2)
    built = []

    def build(key):
        built.append(key)
        return pygame.Surface((1, 1))

    first = cache.get(a, lambda: build(a))
    cache.get(b, lambda: build(b))
    assert cache.get(a, lambda: build(a)) is first
    cache.get(c, lambda: build(c))
    assert len(cache) == 2
    cache.get(b, lambda: build(b))
    assert built == [a, b, c, b]


def test_normalize_stops():
    shape, opacity = normalize_stops([(RED, 0.5), (BLUE, 0.25)])
    assert opacity == 128
    assert shape == (((255, 0, 0), 32), ((0, 0, 255), 16))
    assert normalize_stops([(RED, 0.0)]) == ((), 0)


@pytest.mark.parametrize('screen', ['heavenly', 'universe', 'growing_plant', 'fireworks_2026', 'underwater',
                                    'summer', 'day_night'])
def test_screens_render_offscreen(screen):
    target = pygame.Surface((200, 400))
    simulation = build_screen(screen, seed=4)
    simulation.start()
    simulation.run(fixed_ticks(NOMINAL_DELTA_TIME, 30), 200, 400, PygameSurface(target))
    assert pygame.surfarray.array3d(target).max() > 0


def test_visualizer_switches_and_quits():
    visualizer = Visualizer({'width': 200, 'height': 300, 'show_hud': True, 'fps': 240})
    try:
        assert visualizer.bounds == (200, 300)
        simulation = build_screen('premium', seed=1)
        simulation.start()
        assert visualizer.draw(simulation, 0.0)
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_RIGHT))
        assert visualizer.draw(simulation, NOMINAL_DELTA_TIME)
        assert visualizer.pending_switch == 1
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        assert not visualizer.draw(simulation, 2 * NOMINAL_DELTA_TIME)
    finally:
        visualizer.close()
