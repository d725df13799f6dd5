# spawn.py
"""
Rules that decide when new particles are born and what they look like.

A SpawnPolicy pairs a capacity with a trigger: either a per-tick Bernoulli
probability or a minimum interval between spawns. Range and IntRange
describe the intervals initial attributes are sampled from. All sampling
goes through a numpy Generator handed in by the owning system, so a seeded
run is fully reproducible.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import numpy as np

# --- Data Contracts ---
#
# class SpawnPolicy:
#   - request(self, live_count: int, delta_time: float, rng: np.random.Generator) -> int:
#     - Outputs: number of particles the caller may create this tick.
#     - Invariants: 0 <= result <= capacity - live_count.
#
#   - allowance(self, live_count: int, wanted: int) -> int:
#     - Outputs: `wanted` truncated to the remaining capacity.
#
# class Range / IntRange:
#   - sample(self, rng, size=None): values within [low, high) for Range and
#     [low, high] for IntRange.


@dataclass(frozen=True)
class Range:
    """A continuous sampling interval [low, high)."""
    low: float
    high: float

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"Range low ({self.low}) must not exceed high ({self.high}).")

    def sample(self, rng: np.random.Generator, size: Optional[int] = None) -> Union[float, np.ndarray]:
        if self.low == self.high:
            return self.low if size is None else np.full(size, self.low, dtype=np.float64)
        if size is None:
            return float(rng.uniform(self.low, self.high))
        return rng.uniform(self.low, self.high, size)


@dataclass(frozen=True)
class IntRange:
    """An inclusive integer interval [low, high], used for counts."""
    low: int
    high: int

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"IntRange low ({self.low}) must not exceed high ({self.high}).")
        if self.low < 0:
            raise ValueError(f"IntRange low must be >= 0, got {self.low}.")

    def sample(self, rng: np.random.Generator, size: Optional[int] = None) -> Union[int, np.ndarray]:
        if size is None:
            return int(rng.integers(self.low, self.high + 1))
        return rng.integers(self.low, self.high + 1, size)


@dataclass
class SpawnPolicy:
    """
    Capacity plus trigger for one population.

    With neither `probability` nor `interval` set the policy never fires on
    its own; the population is then only grown by seeding or by explicit
    bursts that go through `allowance`.
    """
    capacity: int
    probability: Optional[float] = None
    interval: Optional[float] = None
    batch: int = 1
    elapsed: float = field(default=0.0, init=False)

    def __post_init__(self):
        if self.capacity < 0:
            raise ValueError(f"SpawnPolicy capacity must be >= 0, got {self.capacity}.")
        if self.probability is not None and not 0.0 <= self.probability <= 1.0:
            raise ValueError(f"SpawnPolicy probability must be within [0, 1], got {self.probability}.")
        if self.interval is not None and self.interval <= 0.0:
            raise ValueError(f"SpawnPolicy interval must be > 0, got {self.interval}.")
        if self.probability is not None and self.interval is not None:
            raise ValueError("SpawnPolicy takes either a probability or an interval, not both.")
        if self.batch < 1:
            raise ValueError(f"SpawnPolicy batch must be >= 1, got {self.batch}.")

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "SpawnPolicy":
        """Builds a policy from a system's merged parameter dictionary."""
        return cls(
            capacity=int(params['capacity']),
            probability=params.get('probability'),
            interval=params.get('interval'),
            batch=int(params.get('batch', 1)),
        )

    @property
    def trigger(self) -> str:
        if self.interval is not None:
            return 'interval'
        if self.probability is not None:
            return 'bernoulli'
        return 'manual'

    def allowance(self, live_count: int, wanted: int) -> int:
        """Truncates a requested spawn count to the remaining capacity."""
        return max(0, min(int(wanted), self.capacity - live_count))

    def request(self, live_count: int, delta_time: float, rng: np.random.Generator) -> int:
        """
        Decides how many particles may be created on this tick.

        Args:
            live_count (int): Current population size.
            delta_time (float): Seconds since the previous tick.
            rng (np.random.Generator): Source of the Bernoulli draw.

        Returns:
            int: Number of particles to create, 0 if the trigger did not fire
            or the population is already at capacity.
        """
        if self.interval is not None:
            # The timer keeps running while full, so the next launch happens
            # as soon as a slot frees up.
            self.elapsed += delta_time
            if self.elapsed < self.interval or live_count >= self.capacity:
                return 0
            self.elapsed = 0.0
            return self.allowance(live_count, self.batch)

        if self.probability is not None:
            if live_count >= self.capacity:
                return 0
            if rng.random() >= self.probability:
                return 0
            return self.allowance(live_count, self.batch)

        return 0

    def reset(self) -> None:
        self.elapsed = 0.0

    def describe(self) -> str:
        if self.interval is not None:
            return f"capacity {self.capacity}, every {self.interval:.2f}s x{self.batch}"
        if self.probability is not None:
            return f"capacity {self.capacity}, p={self.probability:.3f}/tick x{self.batch}"
        return f"capacity {self.capacity}, manual"


def log_policy(system_name: str, population: str, policy: SpawnPolicy) -> None:
    logging.debug(f"{system_name}.{population} spawn policy: {policy.describe()}.")
