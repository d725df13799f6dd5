import numpy as np
import pytest

from effects.fireworks import Firework, FireworkState, Fireworks2026System, FireworkSystem
from particle import ParticlePool
from spawn import Range
from surface import RecordingSurface

DT = 1.0 / 60.0
WIDTH, HEIGHT = 400.0, 800.0


def make_firework(**overrides):
    kwargs = dict(x=200.0, y=820.0, vy=-500.0, target_y=300.0, color=0, child_capacity=99)
    kwargs.update(overrides)
    return Firework(**kwargs)


def test_explodes_at_target_altitude():
    firework = make_firework()
    while not firework.should_explode():
        firework.rise(DT, 0.0)
    assert firework.y <= firework.target_y
    assert firework.vy < 0.0


def test_explodes_at_apex_before_target():
    firework = make_firework(vy=-100.0, target_y=0.0)
    steps = 0
    while not firework.should_explode():
        firework.rise(DT, 200.0)
        steps += 1
    assert firework.vy >= 0.0
    assert firework.y > firework.target_y
    assert steps == pytest.approx(30, abs=1)


def test_explodes_only_once(rng):
    firework = make_firework()
    args = (Range(100.0, 300.0), Range(1.0, 2.5), Range(2.0, 6.0))
    assert firework.explode(75, rng, *args) == 75
    assert firework.state is FireworkState.EXPLODED
    assert firework.explode(75, rng, *args) == 0
    assert firework.explosions == 1
    assert firework.children.count == 75


def test_settles_once_sparks_are_gone(rng):
    firework = make_firework()
    assert not firework.settle()
    firework.explode(10, rng, Range(100.0, 300.0), Range(1.0, 1.0), Range(2.0, 6.0))
    assert not firework.settle()
    firework.children.clear()
    assert firework.settle()
    assert firework.state is FireworkState.EXTINGUISHED


def test_explosion_counts_within_range(rng):
    system = FireworkSystem(rng=rng)
    system.initialize(WIDTH, HEIGHT)
    t = 0.0
    counts = []
    for _ in range(60 * 20):
        t += DT
        rising = {id(fw) for fw in system.fireworks if fw.state is FireworkState.RISING}
        system.update(DT, WIDTH, HEIGHT, t)
        for fw in system.fireworks:
            if id(fw) in rising and fw.exploded:
                counts.append(fw.children.count)
        assert len(system.fireworks) <= 8
        assert all(fw.explosions <= 1 for fw in system.fireworks)
    assert counts
    assert all(60 <= count <= 99 for count in counts)
    assert system.extinguished_total > 0


def test_launch_interval(rng):
    system = FireworkSystem(rng=rng)
    system.initialize(WIDTH, HEIGHT)
    # The first rocket launches once 0.8 s have accumulated, around the 48th tick.
    for step in range(1, 48):
        system.update(DT, WIDTH, HEIGHT, step * DT)
    assert len(system.fireworks) == 0
    system.update(DT, WIDTH, HEIGHT, 48 * DT)
    system.update(DT, WIDTH, HEIGHT, 49 * DT)
    assert len(system.fireworks) == 1
    rocket = system.fireworks[0]
    assert 0.2 * WIDTH <= rocket.x <= 0.8 * WIDTH


def test_spark_trails_are_bounded(rng):
    system = FireworkSystem(rng=rng)
    firework = system.launch(WIDTH, HEIGHT)
    firework.y = HEIGHT / 2.0
    firework.explode(60, rng, Range(100.0, 300.0), Range(2.0, 2.5), Range(2.0, 6.0))
    for _ in range(20):
        system._advance_sparks(firework.children, DT, 150.0, 1.0, WIDTH, HEIGHT)
    assert firework.children.count == 60
    assert np.all(firework.children.trail_len[:60] == 5)


def test_2026_rockets_shed_embers(rng):
    system = Fireworks2026System(rng=rng)
    system.initialize(WIDTH, HEIGHT)
    firework = system.launch(WIDTH, HEIGHT)
    assert firework.y == HEIGHT
    for step in range(1, 20):
        system.update(DT, WIDTH, HEIGHT, step * DT)
    assert firework.trails.count > 0
    assert firework.trails.count <= 60

    surface = RecordingSurface(WIDTH, HEIGHT)
    system.draw(surface)
    circles = [call for call in surface.calls if call.op == 'circle']
    assert circles and all(call.args['additive'] for call in circles)


def test_2026_explosion_size(rng):
    system = Fireworks2026System(rng=rng)
    system.initialize(WIDTH, HEIGHT)
    firework = system.launch(WIDTH, HEIGHT)
    t = 0.0
    while not firework.exploded:
        t += DT
        system.update(DT, WIDTH, HEIGHT, t)
    assert 120 <= firework.children.count <= 199


@pytest.mark.parametrize('substeps', [1, 2, 4])
def test_spark_drag_is_frame_rate_independent(rng, substeps):
    system = Fireworks2026System(rng=rng)
    pool = ParticlePool(3, name='sparks')
    pool.spawn_many(3, x=WIDTH / 2.0, y=HEIGHT / 2.0, vx=100.0, life=10.0)
    dt = DT / substeps
    for _ in range(60 * substeps):
        system._advance_sparks(pool, dt, 0.0, 0.99, WIDTH, HEIGHT)
    np.testing.assert_allclose(pool.live('vx'), 100.0 * 0.99 ** 60)
