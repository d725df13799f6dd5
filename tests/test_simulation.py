import logging

import numpy as np
import pytest

from constants import NOMINAL_DELTA_TIME
from effects import build_screen, build_systems, screen_names
from frame_clock import fixed_ticks
from simulation import ParticleSystem, Simulation
from surface import RecordingSurface

WIDTH, HEIGHT = 400.0, 800.0


class BrokenSystem(ParticleSystem):
    name = "broken"

    def _step(self, dt, width, height, t):
        raise ZeroDivisionError("boom")

    def _draw(self, surface, t):
        surface.circle((0.0, 0.0), 1.0, (255, 255, 255))


def test_frames_update_then_draw_in_order():
    simulation = build_screen('new_year', seed=1)
    simulation.start()
    surface = RecordingSurface(WIDTH, HEIGHT)
    frames = simulation.run(fixed_ticks(NOMINAL_DELTA_TIME, 120), WIDTH, HEIGHT, surface)
    assert frames == 120
    assert simulation.clock.frame_count == 120
    assert all(system.initialized for system in simulation.systems)
    assert simulation.clock.total_time == pytest.approx(120 * NOMINAL_DELTA_TIME)
    assert surface.calls


def test_frames_before_start_are_ignored():
    simulation = build_screen('sakura', seed=1)
    simulation.frame(0.0, WIDTH, HEIGHT, RecordingSurface())
    assert not simulation.systems[0].initialized


def test_stop_discards_systems():
    simulation = build_screen('christmas', seed=1)
    simulation.start()
    simulation.run(fixed_ticks(NOMINAL_DELTA_TIME, 10), WIDTH, HEIGHT)
    simulation.stop()
    assert not simulation.running
    assert simulation.systems == []
    assert simulation.run(fixed_ticks(NOMINAL_DELTA_TIME, 10), WIDTH, HEIGHT) == 0


def test_zero_bounds_defer_initialization():
    simulation = build_screen('fireflies', seed=1)
    simulation.start()
    simulation.frame(0.0, 0.0, 0.0, RecordingSurface())
    assert not simulation.systems[0].initialized
    simulation.frame(NOMINAL_DELTA_TIME, WIDTH, HEIGHT, RecordingSurface())
    assert simulation.systems[0].initialized


def test_failing_system_is_skipped_and_warned_once(caplog):
    healthy = build_systems('sakura', seed=2)[0]
    simulation = Simulation('test', [BrokenSystem(), healthy])
    simulation.start()
    with caplog.at_level(logging.WARNING):
        simulation.run(fixed_ticks(NOMINAL_DELTA_TIME, 30), WIDTH, HEIGHT, RecordingSurface())
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING and 'broken' in r.getMessage()]
    assert len(warnings) == 1
    assert healthy.total_time > 0.0


def test_same_seed_same_animation():
    def positions(seed):
        simulation = build_screen('sakura', seed=seed)
        simulation.start()
        simulation.run(fixed_ticks(NOMINAL_DELTA_TIME, 90), WIDTH, HEIGHT)
        return simulation.systems[0].pool.live('x').copy()

    np.testing.assert_array_equal(positions(42), positions(42))
    assert not np.array_equal(positions(42), positions(43))


def test_systems_get_independent_streams():
    first, second = build_systems('new_year', seed=9)[:2]
    assert first.rng.random() != second.rng.random()


def test_unknown_screen():
    with pytest.raises(ValueError):
        build_screen('halloween')


def test_override_for_unknown_system():
    with pytest.raises(ValueError):
        build_screen('christmas', overrides={'rain': {'capacity': 3}})


def test_overrides_reach_the_system():
    systems = build_systems('christmas', overrides={'snowfall': {'capacity': 7}, 'sakura': {'capacity': 2}})
    assert systems[0].policy.capacity == 7


def test_screen_names():
    names = screen_names()
    assert names[0] == 'christmas'
    assert {'universe', 'atomic', 'heavenly', 'fireworks_2026'} <= set(names)
