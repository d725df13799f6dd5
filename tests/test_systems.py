import numpy as np
import pytest

from constants import MOON_CRATER_COLOR, SKY_DAY, SKY_NIGHT
from effects import SCREENS, SYSTEMS, build_systems
from effects.atomic import HexAtomicSystem
from effects.daynight import DayNightSystem, phase_of, sky_colors, star_visibility
from effects.leaves import LeafSystem, TreeStage, TreeSystem, crown, stage_at
from effects.petals import SakuraSystem
from effects.snowfall import SnowfallSystem
from effects.summer import SummerSystem
from effects.universe import UniverseSystem
from particle import ParticlePool
from surface import RecordingSurface

DT = 1.0 / 60.0
WIDTH, HEIGHT = 400.0, 800.0


def pools_of(system):
    """Every ParticlePool a system owns, including firework sub-pools."""
    pools = [value for value in vars(system).values() if isinstance(value, ParticlePool)]
    for firework in getattr(system, 'fireworks', []):
        pools += [firework.children, firework.trails]
    return pools


def assert_within_capacity(system):
    for label, count, capacity in system.populations():
        assert 0 <= count <= capacity, f"{system.name}.{label}: {count} > {capacity}"
    for pool in pools_of(system):
        assert 0 <= pool.count <= pool.capacity


@pytest.mark.parametrize('screen', sorted(SCREENS))
def test_every_screen_stays_within_capacity(screen, runner):
    for system in build_systems(screen, seed=11):
        runner(system, 600, check=assert_within_capacity)


@pytest.mark.parametrize('name', sorted(SYSTEMS))
def test_draw_does_not_mutate_state(name, runner):
    system = runner(SYSTEMS[name](rng=np.random.default_rng(5)), 240)
    before = [{attr: pool.live(attr).copy() for attr in ('x', 'y', 'life', 'alpha', 'rotation')}
              for pool in pools_of(system)]
    stats = system.stats()

    surface = RecordingSurface(WIDTH, HEIGHT)
    system.draw(surface)

    after = [{attr: pool.live(attr) for attr in ('x', 'y', 'life', 'alpha', 'rotation')}
             for pool in pools_of(system)]
    assert system.stats() == stats
    for old, new in zip(before, after):
        for attr in old:
            np.testing.assert_array_equal(old[attr], new[attr])


@pytest.mark.parametrize('name', sorted(SYSTEMS))
def test_initialize_is_idempotent(name):
    system = SYSTEMS[name](rng=np.random.default_rng(3))
    system.initialize(WIDTH, HEIGHT)
    live, spawned = system.live_count, system.spawned_total
    system.initialize(WIDTH, HEIGHT)
    assert system.live_count == live
    assert system.spawned_total == spawned


@pytest.mark.parametrize('name', sorted(SYSTEMS))
@pytest.mark.parametrize('bounds', [(0.0, HEIGHT), (WIDTH, 0.0), (-5.0, -5.0)])
def test_degenerate_bounds_are_a_no_op(name, bounds):
    system = SYSTEMS[name](rng=np.random.default_rng(3))
    system.initialize(*bounds)
    assert not system.initialized
    system.update(DT, *bounds, 1.0)
    assert system.live_count == 0
    assert system.total_time == 0.0

    surface = RecordingSurface()
    system.draw(surface)
    assert surface.calls == []

    # A later valid size still seeds.
    system.initialize(WIDTH, HEIGHT)
    assert system.initialized


def test_unknown_parameter_is_rejected():
    with pytest.raises(ValueError):
        SnowfallSystem({'capacity': 10, 'gravity': 3.0})


def test_snowfall_end_to_end(rng):
    system = SnowfallSystem({'capacity': 100, 'probability': 0.3}, rng=rng)
    system.initialize(WIDTH, HEIGHT)
    t = 0.0
    for _ in range(1000):
        t += DT
        system.update(DT, WIDTH, HEIGHT, t)
        assert 0 <= system.pool.count <= 100
    assert system.evicted_total >= 1
    assert system.spawned_total == system.pool.count + system.evicted_total
    vy = system.pool.live('vy')
    assert np.all((vy >= 40.0) & (vy < 120.0))


def test_life_decrements_exactly(rng):
    system = SnowfallSystem({'capacity': 10, 'probability': 0.0}, rng=rng)
    system.initialize(WIDTH, HEIGHT)
    for _ in range(5):
        system._emit(WIDTH, HEIGHT, 0.0)
    system.pool.x[:5] = WIDTH / 2.0
    system.pool.y[:5] = HEIGHT / 2.0
    previous = system.pool.live('life').copy()
    assert np.all(previous <= system.pool.live('max_life'))
    for step in range(1, 60):
        system.update(DT, WIDTH, HEIGHT, step * DT)
        life = system.pool.live('life')
        assert life.shape == previous.shape
        np.testing.assert_allclose(life, previous - DT * system.decay_rate)
        previous = life.copy()


def test_last_tick_of_life_evicts(rng):
    system = SnowfallSystem({'capacity': 10, 'probability': 0.0}, rng=rng)
    system.initialize(WIDTH, HEIGHT)
    system._emit(WIDTH, HEIGHT, 0.0)
    system._emit(WIDTH, HEIGHT, 0.0)
    system.pool.x[:2] = WIDTH / 2.0
    system.pool.y[:2] = HEIGHT / 2.0
    system.pool.life[0] = DT * system.decay_rate
    system.update(DT, WIDTH, HEIGHT, DT)
    assert system.pool.count == 1
    assert system.evicted_total == 1


def test_snow_sway_applies_on_the_first_tick(rng):
    system = SnowfallSystem({'capacity': 10, 'probability': 0.0}, rng=rng)
    system.initialize(WIDTH, HEIGHT)
    system._emit(WIDTH, HEIGHT, 0.0)
    system.pool.x[0], system.pool.y[0] = 200.0, 300.0
    assert system.pool.vx[0] == 0.0
    system.update(DT, WIDTH, HEIGHT, DT)
    sway = np.sin(300.0 * 0.01 + 200.0 * 0.005) * system.sway
    assert system.pool.vx[0] == pytest.approx(sway)
    assert system.pool.x[0] == pytest.approx(200.0 + sway * DT)


def test_sakura_kinematics(rng):
    system = SakuraSystem({'probability': 0.0}, rng=rng)
    system.initialize(WIDTH, HEIGHT)
    n = system.pool.count
    assert n == 40
    vx, vy = system.pool.live('vx').copy(), system.pool.live('vy').copy()
    assert np.all((vy >= 80.0) & (vy < 160.0))
    assert np.all((vx >= -10.0) & (vx < 10.0))

    # Far enough from every edge that no petal leaves the margin in half a second.
    system.pool.x[:n] = WIDTH / 2.0
    system.pool.y[:n] = np.linspace(0.0, 200.0, n)
    x, y = system.pool.live('x').copy(), system.pool.live('y').copy()
    rotation, spin = system.pool.live('rotation').copy(), system.pool.live('spin').copy()
    steps = 30
    for step in range(1, steps + 1):
        system.update(DT, WIDTH, HEIGHT, step * DT)

    assert system.pool.count == n
    np.testing.assert_allclose(system.pool.live('x'), x + vx * steps * DT)
    np.testing.assert_allclose(system.pool.live('y'), y + vy * steps * DT)
    np.testing.assert_allclose(system.pool.live('rotation'), rotation + spin * steps * DT)


def test_leaf_bursts_respect_capacity(rng):
    system = LeafSystem(rng=rng)
    system.initialize(WIDTH, HEIGHT)
    assert system.pool.count == 0
    for _ in range(20):
        system.spawn_burst(WIDTH / 2.0, 200.0)
    assert system.pool.count == system.pool.capacity == 60
    assert system.spawned_total == 60
    assert system.spawn_burst(WIDTH / 2.0, 200.0) == 0


def test_no_leaves_before_full_tree():
    tree, leaves = build_systems('growing_plant', seed=1)
    for system in (tree, leaves):
        system.initialize(WIDTH, HEIGHT)
    for step in range(1, 60 * 13):
        for system in (tree, leaves):
            system.update(DT, WIDTH, HEIGHT, step * DT)
        if step == 60:
            assert tree.stage == TreeStage.SEED
        if tree.stage < TreeStage.FULL_TREE:
            assert leaves.pool.count == 0
    assert tree.stage == TreeStage.FULL_TREE
    assert leaves.shed
    assert leaves.pool.count >= 12
    # The first leaves fall from the full-grown crown.
    _, crown_top = crown(WIDTH, HEIGHT)
    assert leaves.pool.live('y').min() >= crown_top


def test_stage_at():
    assert stage_at(0.0, 3.0) == TreeStage.SEED
    assert stage_at(7.0, 3.0) == TreeStage.SAPLING
    assert stage_at(100.0, 3.0) == TreeStage.FULL_TREE


def test_leaves_fade_out_on_the_ground(rng, runner):
    system = runner(LeafSystem({'interval': 100.0}, rng=rng), 60 * 30)
    assert system.pool.count == 0
    assert system.evicted_total == 12


def test_tree_grows_through_stages(runner):
    tree = TreeSystem(rng=np.random.default_rng(0))
    runner(tree, 60)
    assert tree.stage == TreeStage.SEED
    runner(tree, 60 * 14)
    assert tree.stage == TreeStage.FULL_TREE
    assert tree.growth == pytest.approx(1.0)


def test_universe_draws_back_to_front(rng, runner):
    system = runner(UniverseSystem(rng=rng), 10)
    for t in (0.0, 3.0, 7.5, 12.0):
        placed = system.place_planets(t)
        assert [p.depth for p in placed] == sorted(p.depth for p in placed)
        surface = RecordingSurface(WIDTH, HEIGHT)
        system.draw(surface, t)
        depths = surface.depths()
        assert depths, "planets and sun are drawn with a depth"
        assert depths == sorted(depths)
        assert 0.0 in depths


def test_universe_shooting_stars_are_bounded(rng, runner):
    system = runner(UniverseSystem({'shooting_probability': 1.0, 'shooting_cooldown': 0.0}, rng=rng), 300)
    assert system.shooting.count <= 3
    # 100 of the spawned are the seeded background stars.
    assert system.spawned_total - system.stars.capacity > 10


def test_atomic_draws_back_to_front(rng, runner):
    system = runner(HexAtomicSystem(rng=rng), 240)
    assert system.particles.count > 0
    surface = RecordingSurface(WIDTH, HEIGHT)
    system.draw(surface)
    depths = surface.depths()
    assert depths == sorted(depths)
    zs = [z for z, _, _ in system.draw_order()]
    assert zs == sorted(zs)


def test_summer_motes_rise_and_leave_through_the_top(rng):
    system = SummerSystem({'probability': 1.0}, rng=rng)
    system.initialize(WIDTH, HEIGHT)
    assert system.rays.count == 12
    assert system.pool.count == 0
    t = 0.0
    for _ in range(60 * 40):
        t += DT
        system.update(DT, WIDTH, HEIGHT, t)
        assert system.pool.count <= 30
        assert np.all(system.pool.live('y') >= -20.0)
        assert np.all(system.pool.live('y') <= HEIGHT + 10.0)
    # The fastest motes clear the 830 px climb in under 17 s.
    assert system.evicted_total > 0
    assert system.spawned_total == 12 + system.pool.count + system.evicted_total
    vy = system.pool.live('vy')
    assert np.all((vy > -50.0) & (vy <= -20.0))


def test_summer_wobble_moves_sideways_only(rng):
    system = SummerSystem({'probability': 0.0}, rng=rng)
    system.initialize(WIDTH, HEIGHT)
    system._emit(WIDTH, HEIGHT, 0.0)
    x, y, vy = system.pool.x[0], system.pool.y[0], system.pool.vy[0]
    phase = system.pool.phase[0]
    system.update(DT, WIDTH, HEIGHT, DT)
    assert system.pool.y[0] == pytest.approx(y + vy * DT)
    assert system.pool.x[0] == pytest.approx(x + np.sin(DT * 2.0 + phase) * 20.0 * DT)


def test_day_night_is_seeded_once(rng, runner):
    system = runner(DayNightSystem(rng=rng), 120)
    assert system.stars.count == 60
    assert system.clouds.count == 5
    assert system.spawned_total == 65
    assert system.evicted_total == 0
    stars = system.stars.live('y')
    assert np.all((stars >= 0.0) & (stars <= 0.6 * HEIGHT))
    clouds = system.clouds.live('x')
    assert np.all((clouds >= -0.2 * WIDTH) & (clouds <= 1.2 * WIDTH))


def test_day_night_cycle():
    assert sky_colors(0.25) == list(SKY_DAY)
    assert sky_colors(0.75) == list(SKY_NIGHT)
    # Sunrise at the very start, blending into day.
    assert sky_colors(0.0)[0] == (255, 140, 66)
    assert star_visibility(0.25) == 0.0
    assert star_visibility(0.75) == 1.0
    assert star_visibility(0.0) == 1.0
    assert 0.0 < star_visibility(0.52) < 1.0


def test_day_night_draws_moon_at_night(rng, runner):
    system = runner(DayNightSystem({'cycle_time': 10.0}, rng=rng), 60 * 7)
    assert not phase_of(system.progress)[0]
    surface = RecordingSurface(WIDTH, HEIGHT)
    system.draw(surface)
    crater = [call for call in surface.calls
              if call.op == 'circle' and call.args['color'] == MOON_CRATER_COLOR]
    assert len(crater) == 3
