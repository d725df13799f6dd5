# tests/conftest.py
"""Shared fixtures for the particle gallery tests."""
import os

import numpy as np
import pytest

# pygame must never try to open a real display or audio device under test.
os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')
os.environ.setdefault('SDL_AUDIODRIVER', 'dummy')

from constants import NOMINAL_DELTA_TIME  # noqa: E402
from surface import RecordingSurface  # noqa: E402

WIDTH = 400.0
HEIGHT = 800.0


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def surface():
    return RecordingSurface(WIDTH, HEIGHT)


def run_steps(system, steps, dt=NOMINAL_DELTA_TIME, width=WIDTH, height=HEIGHT, check=None):
    """
    Initializes `system` and advances it `steps` times with a fixed dt.

    `check`, when given, is called with the system after every update.
    """
    system.initialize(width, height)
    t = 0.0
    for _ in range(steps):
        t += dt
        system.update(dt, width, height, t)
        if check is not None:
            check(system)
    return system


@pytest.fixture
def runner():
    return run_steps
