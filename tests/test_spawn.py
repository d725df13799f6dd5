import numpy as np
import pytest

from spawn import IntRange, Range, SpawnPolicy


def test_allowance_truncates_to_remaining_capacity():
    policy = SpawnPolicy(capacity=10, probability=0.5)
    assert policy.allowance(7, 5) == 3
    assert policy.allowance(10, 5) == 0
    assert policy.allowance(0, 4) == 4
    assert policy.allowance(3, -2) == 0


def test_bernoulli_never_exceeds_capacity(rng):
    policy = SpawnPolicy(capacity=5, probability=1.0, batch=3)
    live = 0
    for _ in range(10):
        live += policy.request(live, 1 / 60, rng)
        assert live <= 5
    assert live == 5


def test_probability_zero_never_fires(rng):
    policy = SpawnPolicy(capacity=5, probability=0.0)
    assert sum(policy.request(0, 1 / 60, rng) for _ in range(200)) == 0


def test_interval_trigger(rng):
    policy = SpawnPolicy(capacity=8, interval=0.5)
    fired = [policy.request(0, 0.25, rng) for _ in range(8)]
    assert fired == [0, 1, 0, 1, 0, 1, 0, 1]


def test_interval_waits_for_a_free_slot(rng):
    policy = SpawnPolicy(capacity=1, interval=0.5)
    assert policy.request(1, 1.0, rng) == 0
    # Timer kept running; launches as soon as the slot frees up.
    assert policy.request(0, 0.01, rng) == 1


def test_manual_policy_never_fires(rng):
    policy = SpawnPolicy(capacity=3)
    assert policy.trigger == 'manual'
    assert policy.request(0, 1.0, rng) == 0


@pytest.mark.parametrize('kwargs', [
    {'capacity': -1},
    {'capacity': 3, 'probability': 1.5},
    {'capacity': 3, 'interval': 0.0},
    {'capacity': 3, 'probability': 0.1, 'interval': 1.0},
    {'capacity': 3, 'batch': 0},
])
def test_invalid_policies(kwargs):
    with pytest.raises(ValueError):
        SpawnPolicy(**kwargs)


def test_from_params_ignores_unrelated_keys():
    policy = SpawnPolicy.from_params({'capacity': 4, 'probability': 0.2, 'fall_speed': [1, 2]})
    assert policy.capacity == 4
    assert policy.trigger == 'bernoulli'


def test_ranges_sample_within_bounds(rng):
    values = Range(40.0, 120.0).sample(rng, 500)
    assert np.all((values >= 40.0) & (values < 120.0))
    counts = IntRange(60, 99).sample(rng, 500)
    assert counts.min() >= 60 and counts.max() <= 99
    assert Range(2.0, 2.0).sample(rng) == 2.0
    with pytest.raises(ValueError):
        Range(3.0, 1.0)
