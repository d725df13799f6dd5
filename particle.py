# particle.py
"""
Stores the state of a population of particles.

This module defines the ParticlePool class, an arena that keeps every
particle attribute in its own preallocated NumPy array. Live particles
always occupy indices [0, count) in insertion order, so a system can walk
them front to back without any per-particle objects. The Particle dataclass
is the plain-record view of a single index, used for inspection and tests.
"""
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Tuple

import numpy as np
from numba import jit

# --- Data Contracts ---
#
# class ParticlePool:
#   - __init__(self, capacity: int, trail_length: int = 0, name: str = "particles"):
#     - Inputs:
#       - capacity: int, maximum number of live particles.
#       - trail_length: int, number of past positions remembered per
#         particle (0 disables trails).
#       - name: str, label used in log messages.
#     - Side Effects: Allocates one NumPy array per attribute.
#     - Invariants:
#       - 0 <= self.count <= self.capacity at all times.
#       - Float attributes are arrays of shape (capacity,) of dtype float64.
#       - Int attributes are arrays of shape (capacity,) of dtype int64.
#       - self.trail has shape (capacity, max(trail_length, 1), 2).
#
#   - spawn(self, **attrs) -> int: index of the new particle, -1 when full.
#   - spawn_many(self, n: int, **attrs) -> int: number actually created.
#   - integrate(self, dt: float) -> None: position += velocity * dt,
#     rotation += spin * dt for every live particle.
#   - decay(self, dt: float, rate: float) -> None: life -= dt * rate,
#     clamped at 0.
#   - evict(self, mask: np.ndarray) -> int: stable removal, returns the
#     number of removed particles.


class ParticleKind(IntEnum):
    """Shape a particle is drawn with."""
    DISC = 0
    CRYSTAL = 1
    SPARKLE = 2
    RECT = 3
    PETAL = 4
    LEAF = 5
    HEXAGON = 6
    BUBBLE = 7
    STREAK = 8
    ORB = 9
    FISH = 10
    GLOW = 11


FLOAT_FIELDS = (
    'x', 'y', 'z',
    'ax', 'ay',
    'vx', 'vy',
    'size', 'size2',
    'rotation', 'spin',
    'life', 'max_life',
    'alpha',
    'phase', 'freq', 'amp',
)
INT_FIELDS = ('color', 'kind', 'variant')

# Values a freshly spawned slot starts from before the caller's attributes
# are applied.
FIELD_DEFAULTS: Dict[str, Any] = {
    'life': 1.0,
    'max_life': 1.0,
    'alpha': 1.0,
}


@dataclass
class Particle:
    """A snapshot of one particle's kinematic and visual state."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    ax: float = 0.0
    ay: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    size: float = 0.0
    size2: float = 0.0
    rotation: float = 0.0
    spin: float = 0.0
    life: float = 1.0
    max_life: float = 1.0
    alpha: float = 1.0
    phase: float = 0.0
    freq: float = 0.0
    amp: float = 0.0
    color: int = 0
    kind: ParticleKind = ParticleKind.DISC
    variant: int = 0
    trail: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def life_fraction(self) -> float:
        if self.max_life <= 0:
            return 1.0
        return min(max(self.life / self.max_life, 0.0), 1.0)

    @property
    def alive(self) -> bool:
        return self.life > 0


@jit(nopython=True)
def _integrate_numba(x, y, vx, vy, rotation, spin, count, dt):
    """Constant-velocity step for the first `count` particles."""
    for i in range(count):
        x[i] += vx[i] * dt
        y[i] += vy[i] * dt
        rotation[i] += spin[i] * dt


@jit(nopython=True)
def _decay_numba(life, count, amount):
    """Removes `amount` of life from every live particle, never below zero."""
    for i in range(count):
        remaining = life[i] - amount
        if remaining > 0.0:
            life[i] = remaining
        else:
            life[i] = 0.0


@jit(nopython=True)
def _push_trails_numba(trail, trail_len, x, y, count):
    """
    Appends each particle's current position to its trail ring.

    When the trail is full the oldest point is dropped and the rest shift
    down one slot, so index 0 is always the oldest remembered position.
    """
    max_len = trail.shape[1]
    for i in range(count):
        n = trail_len[i]
        if n < max_len:
            trail[i, n, 0] = x[i]
            trail[i, n, 1] = y[i]
            trail_len[i] = n + 1
        else:
            for j in range(max_len - 1):
                trail[i, j, 0] = trail[i, j + 1, 0]
                trail[i, j, 1] = trail[i, j + 1, 1]
            trail[i, max_len - 1, 0] = x[i]
            trail[i, max_len - 1, 1] = y[i]


class ParticlePool:
    """
    A bounded, arena-style container for particles, backed by NumPy arrays.
    """
    def __init__(self, capacity: int, trail_length: int = 0, name: str = "particles"):
        """
        Allocates the pool.

        Args:
            capacity (int): Maximum number of concurrently live particles.
            trail_length (int): Past positions kept per particle for motion
                blur. 0 disables trails.
            name (str): Label used in log messages.
        """
        if capacity < 0:
            raise ValueError(f"Pool '{name}' capacity must be >= 0, got {capacity}.")
        if trail_length < 0:
            raise ValueError(f"Pool '{name}' trail_length must be >= 0, got {trail_length}.")

        self.name = name
        self.capacity = int(capacity)
        self.trail_length = int(trail_length)
        self.count = 0

        for attr in FLOAT_FIELDS:
            setattr(self, attr, np.zeros(self.capacity, dtype=np.float64))
        for attr in INT_FIELDS:
            setattr(self, attr, np.zeros(self.capacity, dtype=np.int64))

        # The trail array always has at least one slot so kernels never see
        # a zero-sized axis.
        self.trail = np.zeros((self.capacity, max(self.trail_length, 1), 2), dtype=np.float64)
        self.trail_len = np.zeros(self.capacity, dtype=np.int64)

        logging.debug(
            f"ParticlePool '{self.name}' allocated: capacity {self.capacity}, "
            f"trail length {self.trail_length}."
        )

    def __len__(self) -> int:
        return self.count

    @property
    def free(self) -> int:
        return self.capacity - self.count

    @property
    def is_full(self) -> bool:
        return self.count >= self.capacity

    def _arrays(self):
        for attr in FLOAT_FIELDS + INT_FIELDS:
            yield getattr(self, attr)
        yield self.trail
        yield self.trail_len

    def _reset_slots(self, start: int, stop: int) -> None:
        for attr in FLOAT_FIELDS + INT_FIELDS:
            getattr(self, attr)[start:stop] = FIELD_DEFAULTS.get(attr, 0)
        self.trail_len[start:stop] = 0

    def _assign(self, start: int, stop: int, attrs: Dict[str, Any]) -> None:
        for attr, value in attrs.items():
            if attr not in FLOAT_FIELDS and attr not in INT_FIELDS:
                raise KeyError(f"Unknown particle attribute '{attr}'.")
            getattr(self, attr)[start:stop] = value
        # A particle's life at birth defaults to its initial life.
        if 'life' in attrs and 'max_life' not in attrs:
            self.max_life[start:stop] = self.life[start:stop]

    def spawn(self, **attrs) -> int:
        """
        Appends one particle.

        Returns:
            int: Index of the new particle, or -1 if the pool is full.
        """
        if self.count >= self.capacity:
            return -1
        index = self.count
        self._reset_slots(index, index + 1)
        self._assign(index, index + 1, attrs)
        self.count += 1
        return index

    def spawn_many(self, n: int, **attrs) -> int:
        """
        Appends up to `n` particles in one batch.

        Attribute values may be scalars or arrays of length `n`; arrays are
        truncated if the pool cannot hold all of them.

        Returns:
            int: Number of particles actually created.
        """
        n = max(0, min(int(n), self.free))
        if n == 0:
            return 0
        start, stop = self.count, self.count + n
        self._reset_slots(start, stop)
        truncated = {
            attr: (value[:n] if isinstance(value, np.ndarray) and value.ndim > 0 else value)
            for attr, value in attrs.items()
        }
        self._assign(start, stop, truncated)
        self.count = stop
        return n

    def integrate(self, dt: float) -> None:
        """Moves every live particle along its velocity for `dt` seconds."""
        if self.count == 0:
            return
        _integrate_numba(self.x, self.y, self.vx, self.vy, self.rotation, self.spin, self.count, dt)

    def decay(self, dt: float, rate: float) -> None:
        """Decrements life by dt * rate, clamping at zero."""
        if self.count == 0 or rate == 0.0:
            return
        _decay_numba(self.life, self.count, dt * rate)

    def push_trails(self) -> None:
        """Records the current positions into each particle's trail."""
        if self.count == 0 or self.trail_length == 0:
            return
        _push_trails_numba(self.trail, self.trail_len, self.x, self.y, self.count)

    def outside(self, width: float, height: float, margin: float, top_margin: float = None) -> np.ndarray:
        """
        Flags live particles that left the visible bounds plus a margin.

        Returns:
            np.ndarray: Boolean mask of shape (count,).
        """
        top = margin if top_margin is None else top_margin
        x = self.x[:self.count]
        y = self.y[:self.count]
        return (x < -margin) | (x > width + margin) | (y < -top) | (y > height + margin)

    def dead(self) -> np.ndarray:
        """Boolean mask of live slots whose life has run out."""
        return self.life[:self.count] <= 0.0

    def evict(self, mask: np.ndarray) -> int:
        """
        Removes the flagged particles, keeping survivors in insertion order.

        Args:
            mask (np.ndarray): Boolean array of shape (count,); True removes.

        Returns:
            int: Number of particles removed.
        """
        n = self.count
        if n == 0:
            return 0
        keep = ~np.asarray(mask, dtype=bool)[:n]
        kept = int(np.count_nonzero(keep))
        removed = n - kept
        if removed == 0:
            return 0
        for array in self._arrays():
            # Fancy indexing copies, so the overlapping write is safe.
            array[:kept] = array[:n][keep]
        self.count = kept
        return removed

    def clear(self) -> None:
        """Drops every particle."""
        self.count = 0

    def live(self, attr: str) -> np.ndarray:
        """Returns a view of one attribute over the live particles."""
        return getattr(self, attr)[:self.count]

    def life_fraction(self) -> np.ndarray:
        """Remaining life over life at birth, clipped to [0, 1]."""
        life = self.life[:self.count]
        max_life = self.max_life[:self.count]
        with np.errstate(divide='ignore', invalid='ignore'):
            fraction = np.where(max_life > 0.0, life / max_life, 1.0)
        return np.clip(fraction, 0.0, 1.0)

    def trail_points(self, index: int) -> List[Tuple[float, float]]:
        """Trail of one particle, oldest point first."""
        n = int(self.trail_len[index])
        return [(float(px), float(py)) for px, py in self.trail[index, :n]]

    def get(self, index: int) -> Particle:
        """Builds a Particle snapshot of the given live index."""
        if not 0 <= index < self.count:
            raise IndexError(f"Particle index {index} out of range for pool '{self.name}' ({self.count} live).")
        values = {attr: float(getattr(self, attr)[index]) for attr in FLOAT_FIELDS}
        values.update({attr: int(getattr(self, attr)[index]) for attr in INT_FIELDS})
        values['kind'] = ParticleKind(values['kind'])
        return Particle(trail=self.trail_points(index), **values)

    def snapshot(self) -> List[Particle]:
        return [self.get(i) for i in range(self.count)]
