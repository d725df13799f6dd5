import numpy as np
import pytest

from particle import ParticleKind, ParticlePool


def test_spawn_respects_capacity():
    pool = ParticlePool(2)
    assert pool.spawn(x=1.0) == 0
    assert pool.spawn(x=2.0) == 1
    assert pool.spawn(x=3.0) == -1
    assert len(pool) == 2 and pool.is_full


def test_spawn_many_truncates_arrays():
    pool = ParticlePool(3)
    created = pool.spawn_many(5, x=np.arange(5.0), kind=ParticleKind.PETAL)
    assert created == 3
    assert list(pool.live('x')) == [0.0, 1.0, 2.0]
    assert all(p.kind is ParticleKind.PETAL for p in pool.snapshot())


def test_life_defaults_max_life():
    pool = ParticlePool(1)
    pool.spawn(life=2.5)
    assert pool.max_life[0] == 2.5


def test_integrate_and_decay():
    pool = ParticlePool(2)
    pool.spawn(x=0.0, y=0.0, vx=10.0, vy=-20.0, spin=90.0, life=1.0)
    pool.integrate(0.5)
    pool.decay(0.5, 3.0)
    p = pool.get(0)
    assert (p.x, p.y, p.rotation) == pytest.approx((5.0, -10.0, 45.0))
    # Clamped at zero rather than going negative.
    assert p.life == 0.0
    assert not p.alive


def test_stable_eviction_keeps_order():
    pool = ParticlePool(5)
    pool.spawn_many(5, x=np.arange(5.0))
    removed = pool.evict(np.array([True, False, True, False, False]))
    assert removed == 2
    assert list(pool.live('x')) == [1.0, 3.0, 4.0]


def test_eviction_moves_trails_with_particles():
    pool = ParticlePool(2, trail_length=3)
    pool.spawn(x=1.0, y=1.0)
    pool.spawn(x=2.0, y=2.0)
    pool.push_trails()
    pool.evict(np.array([True, False]))
    assert pool.trail_points(0) == [(2.0, 2.0)]


def test_trail_drops_oldest_first():
    pool = ParticlePool(1, trail_length=3)
    pool.spawn(x=0.0, y=0.0, vx=1.0)
    for _ in range(5):
        pool.push_trails()
        pool.integrate(1.0)
    assert pool.trail_points(0) == [(2.0, 0.0), (3.0, 0.0), (4.0, 0.0)]


def test_outside_uses_top_margin():
    pool = ParticlePool(3)
    pool.spawn(x=50.0, y=-150.0)
    pool.spawn(x=-30.0, y=10.0)
    pool.spawn(x=50.0, y=50.0)
    assert list(pool.outside(100.0, 100.0, 20.0)) == [True, True, False]
    assert list(pool.outside(100.0, 100.0, 20.0, top_margin=200.0)) == [False, True, False]


def test_life_fraction_clipped():
    pool = ParticlePool(2)
    pool.spawn(life=0.5, max_life=1.0)
    pool.spawn(life=1.0, max_life=0.0)
    assert list(pool.life_fraction()) == [0.5, 1.0]


def test_get_out_of_range():
    pool = ParticlePool(1)
    with pytest.raises(IndexError):
        pool.get(0)


def test_unknown_attribute_rejected():
    pool = ParticlePool(1)
    with pytest.raises(KeyError):
        pool.spawn(colour=1)
