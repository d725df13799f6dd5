# simulation.py
"""
Handles the particle system lifecycle and the per-frame loop of a screen.

This module defines the ParticleSystem base class, the contract every
animated background implements (initialize, update, draw), the
EmitterSystem specialisation for the common single-pool case, and the
Simulation class that drives an ordered set of systems from a FrameClock
on behalf of the screen that displays them.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from frame_clock import FrameClock
from particle import ParticleKind, ParticlePool
from spawn import SpawnPolicy, log_policy
from surface import DrawSurface

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, params: Optional[Dict[str, Any]] = None,
#              rng: Optional[np.random.Generator] = None):
#     - Inputs:
#       - params: Per-system overrides from config.json, merged over the
#         class DEFAULTS. Unknown keys are a configuration error.
#       - rng: Random source for every sampled attribute. A fresh unseeded
#         generator is used when omitted.
#
#   - initialize(self, width: float, height: float) -> None:
#     - Side Effects: Seeds the ambient population exactly once per instance.
#     - Invariants: A second call is a no-op. Degenerate bounds are ignored
#       and do not consume the one-time guard.
#
#   - update(self, delta_time: float, width: float, height: float,
#            total_time: Optional[float] = None) -> None:
#     - Side Effects: steer -> integrate -> physics -> decay -> evict -> spawn.
#     - Invariants: No-op when width <= 0 or height <= 0. Every population
#       stays within its capacity.
#
#   - draw(self, surface: DrawSurface, total_time: Optional[float] = None) -> None:
#     - Side Effects: Primitive calls on `surface` only; particle state is
#       never modified.
#
# class Simulation:
#   - frame(self, timestamp: float, width: float, height: float,
#           surface: Optional[DrawSurface]) -> None:
#     - Side Effects: One clock sample, then one update and one draw per
#       system, in list order.

# Errors that degrade a single system's frame instead of the whole screen.
RECOVERABLE_ERRORS = (ArithmeticError, ValueError, IndexError)


class ParticleSystem:
    """
    Base class of every animated background.

    Subclasses declare their tunables in DEFAULTS, create pools and spawn
    policies in _build, seed ambient populations in _seed, advance them in
    _step and emit primitives in _draw.
    """
    name = "particles"
    DEFAULTS: Dict[str, Any] = {}
    # Structures are drawn back to front when True.
    depth_sorted = False

    def __init__(self, params: Optional[Dict[str, Any]] = None, rng: Optional[np.random.Generator] = None):
        self.params = self._merge_params(params)
        # All randomness flows from this one generator.
        self.rng = rng if rng is not None else np.random.default_rng()
        self.initialized = False
        self.width = 0.0
        self.height = 0.0
        self.total_time = 0.0
        self.spawned_total = 0
        self.evicted_total = 0
        self.draw_dispatch: Dict[ParticleKind, Callable] = {}
        self._build()

        populations = ", ".join(f"{label} ({cap})" for label, _, cap in self.populations())
        logging.info(f"{type(self).__name__} '{self.name}' created with populations: {populations or 'none'}.")

    @classmethod
    def _merge_params(cls, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        merged = dict(cls.DEFAULTS)
        if not params:
            return merged
        unknown = sorted(set(params) - set(cls.DEFAULTS))
        if unknown:
            msg = (
                f"Configuration error: unknown parameter(s) {unknown} for system "
                f"'{cls.name}'. Valid keys: {sorted(cls.DEFAULTS)}."
            )
            logging.critical(msg)
            raise ValueError(msg)
        merged.update(params)
        return merged

    # --- Lifecycle contract ---

    def initialize(self, width: float, height: float) -> None:
        """Creates the one-time seed population for the given bounds."""
        if self.initialized or width <= 0 or height <= 0:
            return
        self.initialized = True
        self.width, self.height = float(width), float(height)
        before = self.live_count
        self._seed(float(width), float(height))
        self.spawned_total += self.live_count - before
        logging.debug(f"{self.name}: seeded {self.live_count - before} ambient particles at {width:.0f}x{height:.0f}.")

    def update(self, delta_time: float, width: float, height: float, total_time: Optional[float] = None) -> None:
        """
        Advances every population by one frame.

        Args:
            delta_time (float): Clamped seconds since the previous frame.
            width (float): Current surface width.
            height (float): Current surface height.
            total_time (Optional[float]): Phase input for periodic motion.
                Defaults to this system's own running sum of deltas.
        """
        if width <= 0 or height <= 0:
            return
        self.width, self.height = float(width), float(height)
        if total_time is None:
            self.total_time += delta_time
        else:
            self.total_time = total_time
        with np.errstate(all='ignore'):
            self._step(delta_time, float(width), float(height), self.total_time)

    def draw(self, surface: DrawSurface, total_time: Optional[float] = None) -> None:
        """Emits draw primitives for every live particle."""
        if self.width <= 0 or self.height <= 0:
            return
        t = self.total_time if total_time is None else total_time
        with np.errstate(all='ignore'):
            self._draw(surface, t)

    # --- Hooks ---

    def _build(self) -> None:
        """Creates pools and spawn policies from self.params."""

    def _seed(self, width: float, height: float) -> None:
        """Creates the ambient population. Most emitters have none."""

    def _step(self, dt: float, width: float, height: float, t: float) -> None:
        raise NotImplementedError

    def _draw(self, surface: DrawSurface, t: float) -> None:
        raise NotImplementedError

    def populations(self) -> List[Tuple[str, int, int]]:
        """(label, live count, capacity) for every bounded population."""
        return []

    # --- Shared helpers ---

    @property
    def live_count(self) -> int:
        return sum(count for _, count, _ in self.populations())

    @property
    def capacity(self) -> int:
        return sum(cap for _, _, cap in self.populations())

    def _policy(self, label: str, **overrides) -> SpawnPolicy:
        """Builds a spawn policy from self.params plus per-population overrides."""
        params = {key: self.params[key] for key in ('capacity', 'probability', 'interval', 'batch')
                  if key in self.params}
        params.update(overrides)
        policy = SpawnPolicy.from_params(params)
        log_policy(self.name, label, policy)
        return policy

    def _retire(self, pool: ParticlePool, width: float, height: float,
                margin: Optional[float] = None, top_margin: Optional[float] = None) -> int:
        """Evicts dead particles and, when a margin is given, out-of-bounds ones."""
        mask = pool.dead()
        if margin is not None:
            mask = mask | pool.outside(width, height, margin, top_margin)
        removed = pool.evict(mask)
        self.evicted_total += removed
        return removed

    def _spawn_from(self, pool: ParticlePool, policy: SpawnPolicy, dt: float,
                    factory: Callable[[], Any]) -> int:
        """Asks the policy how many particles to create and calls `factory` for each."""
        wanted = policy.request(len(pool), dt, self.rng)
        before = len(pool)
        for _ in range(wanted):
            factory()
        created = len(pool) - before
        self.spawned_total += created
        return created

    def _dispatch(self, surface: DrawSurface, pool: ParticlePool, t: float) -> None:
        """Draws a pool in insertion order through the kind dispatch table."""
        for i in range(pool.count):
            handler = self.draw_dispatch.get(ParticleKind(int(pool.kind[i])))
            if handler is not None:
                handler(surface, pool, i, t)

    def stats(self) -> Dict[str, int]:
        return {
            'live': self.live_count,
            'capacity': self.capacity,
            'spawned': self.spawned_total,
            'evicted': self.evicted_total,
        }


class EmitterSystem(ParticleSystem):
    """
    A system with a single spawned population.

    The step is the canonical one: velocity steering, constant-velocity
    integration, the subclass physics rule, life decay, eviction of dead and out-of-bounds
    particles, then at most one spawn request.
    """
    DEFAULTS: Dict[str, Any] = {'capacity': 100, 'probability': 0.1}
    # Distance past the visible bounds a particle may travel before eviction.
    margin = 20.0
    top_margin: Optional[float] = None
    decay_rate = 1.0
    trail_length = 0

    def _build(self) -> None:
        self.policy = self._policy(self.name)
        self.pool = ParticlePool(self.policy.capacity, trail_length=self.trail_length, name=self.name)

    def populations(self):
        return [(self.name, self.pool.count, self.pool.capacity)]

    def _step(self, dt, width, height, t):
        pool = self.pool
        self._steer(pool, dt, t, width, height)
        pool.integrate(dt)
        self._apply_physics(pool, dt, t, width, height)
        pool.decay(dt, self.decay_rate)
        self._retire(pool, width, height, self.margin, self.top_margin)
        self._spawn_from(pool, self.policy, dt, lambda: self._emit(width, height, t))

    def _steer(self, pool: ParticlePool, dt: float, t: float, width: float, height: float) -> None:
        """Velocity changes that take effect on this step's integration."""

    def _apply_physics(self, pool: ParticlePool, dt: float, t: float, width: float, height: float) -> None:
        """Velocity or position adjustments applied after the constant-velocity step."""

    def _emit(self, width: float, height: float, t: float) -> int:
        raise NotImplementedError

    def _draw(self, surface, t):
        self._dispatch(surface, self.pool, t)


class Simulation:
    """
    Runs one screen: an ordered list of systems driven by a single clock.
    """
    def __init__(self, name: str, systems: List[ParticleSystem], clock: Optional[FrameClock] = None,
                 log_throttle: int = 300):
        """
        Initializes the screen runtime.

        Args:
            name (str): Screen name, used in logs.
            systems (List[ParticleSystem]): Systems in draw order (back first).
            clock (Optional[FrameClock]): Injectable clock; a fresh one by default.
            log_throttle (int): Frames between DEBUG population reports.
        """
        self.name = name
        self.systems = list(systems)
        self.clock = clock if clock is not None else FrameClock()
        self.log_throttle = max(1, int(log_throttle))
        self.running = False
        self.width = 0.0
        self.height = 0.0
        self._faulted = set()

    def start(self) -> None:
        """Begins receiving frames. The clock restarts from a nominal sample."""
        self.clock.reset()
        self.running = True
        logging.info(f"Screen '{self.name}' started with {len(self.systems)} system(s).")

    def stop(self) -> None:
        """Stops receiving frames and discards every system's state."""
        if not self.running and not self.systems:
            return
        self.running = False
        totals = {system.name: system.stats() for system in self.systems}
        self.systems.clear()
        logging.info(f"Screen '{self.name}' stopped after {self.clock.frame_count} frames.")
        logging.debug(f"Screen '{self.name}' final statistics: {totals}")

    def _guarded(self, system: ParticleSystem, action: str, fn: Callable, *args) -> None:
        try:
            fn(*args)
        except RECOVERABLE_ERRORS as exc:
            # A broken animation is cosmetic: skip this system for the frame.
            if system.name not in self._faulted:
                self._faulted.add(system.name)
                logging.warning(
                    f"Screen '{self.name}': {system.name}.{action} failed ({exc!r}); "
                    f"skipping the frame."
                )
            else:
                logging.debug(f"Screen '{self.name}': {system.name}.{action} failed again ({exc!r}).")

    def step(self, timestamp: float, width: float, height: float) -> Tuple[float, float]:
        """Samples the clock and updates every system once."""
        delta_time, total_time = self.clock.tick(timestamp)
        if not self.running:
            return delta_time, total_time
        self.width, self.height = width, height
        if width > 0 and height > 0:
            for system in self.systems:
                self._guarded(system, 'initialize', system.initialize, width, height)
        for system in self.systems:
            self._guarded(system, 'update', system.update, delta_time, width, height, total_time)

        if self.clock.frame_count % self.log_throttle == 0:
            counts = ", ".join(f"{s.name}={s.live_count}/{s.capacity}" for s in self.systems)
            logging.debug(f"Screen '{self.name}' frame {self.clock.frame_count} | {counts}")
        return delta_time, total_time

    def render(self, surface: DrawSurface) -> None:
        """Draws every system once, in list order."""
        if not self.running:
            return
        for system in self.systems:
            self._guarded(system, 'draw', system.draw, surface, self.clock.total_time)

    def frame(self, timestamp: float, width: float, height: float, surface: Optional[DrawSurface] = None) -> None:
        """One display refresh: update then draw."""
        self.step(timestamp, width, height)
        if surface is not None:
            self.render(surface)

    def run(self, timestamps: Iterable[float], width: float, height: float,
            surface: Optional[DrawSurface] = None) -> int:
        """Drives the screen from a tick source. Returns the number of frames run."""
        frames = 0
        for timestamp in timestamps:
            if not self.running:
                break
            self.frame(timestamp, width, height, surface)
            frames += 1
        return frames

    def stats(self) -> Dict[str, Dict[str, int]]:
        return {system.name: system.stats() for system in self.systems}
