import pytest

from constants import MAX_DELTA_TIME, NOMINAL_DELTA_TIME
from frame_clock import FrameClock, fixed_ticks


def test_first_tick_is_nominal():
    clock = FrameClock()
    delta, total = clock.tick(1000.0)
    assert delta == pytest.approx(NOMINAL_DELTA_TIME)
    assert total == pytest.approx(NOMINAL_DELTA_TIME)


def test_deltas_are_clamped():
    clock = FrameClock()
    clock.tick(10.0)
    delta, _ = clock.tick(15.0)
    assert delta == pytest.approx(MAX_DELTA_TIME)
    # Timestamps going backwards collapse to zero.
    delta, _ = clock.tick(14.0)
    assert delta == 0.0


def test_total_is_sum_of_deltas():
    clock = FrameClock()
    deltas = [clock.tick(ts)[0] for ts in (0.0, 0.01, 0.03, 0.5, 0.52)]
    assert clock.total_time == pytest.approx(sum(deltas))
    assert clock.frame_count == 5


def test_reset_makes_next_tick_nominal():
    clock = FrameClock()
    clock.tick(0.0)
    clock.tick(0.05)
    clock.reset()
    delta, total = clock.tick(100.0)
    assert delta == pytest.approx(NOMINAL_DELTA_TIME)
    assert total == pytest.approx(NOMINAL_DELTA_TIME)


def test_tick_ns():
    clock = FrameClock()
    clock.tick_ns(0)
    delta, _ = clock.tick_ns(20_000_000)
    assert delta == pytest.approx(0.02)


def test_fixed_ticks():
    ticks = list(fixed_ticks(0.5, 4, start=1.0))
    assert ticks == [1.0, 1.5, 2.0, 2.5]
