# effects/fireworks.py
"""
Rising rockets that burst into sparks.

A Firework is a composite: one rising head plus two pools, the explosion
children and the trail embers shed while rising. It moves through
Rising -> Exploded -> Extinguished and is dropped by its system once
extinguished. FireworkSystem (New Year) and Fireworks2026System share the
lifecycle and differ in launch rule, physics constants and look.
"""
import logging
import math
from enum import Enum
from typing import List

import numpy as np

from constants import FIREWORK_2026_COLORS, FIREWORK_COLORS, NOMINAL_DELTA_TIME
from particle import ParticleKind, ParticlePool
from simulation import ParticleSystem
from spawn import IntRange, Range

# --- Data Contracts ---
#
# class Firework:
#   - explode(self, count, rng, speed, life, size) -> int:
#     - Side Effects: Converts the head into `count` children with uniform
#       random directions. Only the first call has an effect.
#     - Invariants: state goes RISING -> EXPLODED exactly once;
#       explosions <= 1.
#   - settle(self) -> bool: EXPLODED -> EXTINGUISHED once both pools are empty.


class FireworkState(Enum):
    RISING = "rising"
    EXPLODED = "exploded"
    EXTINGUISHED = "extinguished"


class Firework:
    """One rocket: a head while rising, a cloud of sparks afterwards."""

    def __init__(self, x: float, y: float, vy: float, target_y: float, color: int,
                 child_capacity: int, trail_capacity: int = 0, child_trail_length: int = 0):
        self.x = x
        self.y = y
        self.vy = vy
        self.target_y = target_y
        self.color = color
        self.state = FireworkState.RISING
        self.explosions = 0
        self.children = ParticlePool(child_capacity, trail_length=child_trail_length, name="firework.children")
        self.trails = ParticlePool(trail_capacity, name="firework.trails")

    @property
    def exploded(self) -> bool:
        return self.state is not FireworkState.RISING

    @property
    def particle_count(self) -> int:
        return self.children.count + self.trails.count

    def rise(self, dt: float, gravity: float) -> None:
        self.y += self.vy * dt
        self.vy += gravity * dt

    def should_explode(self) -> bool:
        # Either condition ends the climb; under constant gravity the apex
        # usually comes after the target altitude.
        return self.y <= self.target_y or self.vy >= 0.0

    def explode(self, count: int, rng: np.random.Generator, speed: Range, life: Range, size: Range) -> int:
        if self.state is not FireworkState.RISING:
            return 0
        angles = rng.uniform(0.0, 2.0 * math.pi, count)
        speeds = speed.sample(rng, count)
        created = self.children.spawn_many(
            count,
            x=self.x,
            y=self.y,
            vx=np.cos(angles) * speeds,
            vy=np.sin(angles) * speeds,
            life=life.sample(rng, count),
            size=size.sample(rng, count),
            color=self.color,
            kind=ParticleKind.DISC,
        )
        self.state = FireworkState.EXPLODED
        self.explosions += 1
        return created

    def settle(self) -> bool:
        """Marks the firework extinguished once every spark has died."""
        if self.state is FireworkState.EXPLODED and self.particle_count == 0:
            self.state = FireworkState.EXTINGUISHED
        return self.state is FireworkState.EXTINGUISHED


class FireworkSystem(ParticleSystem):
    """
    New Year fireworks: a launch every 0.8 s, up to 8 rockets at once, and
    sparks that leave short motion-blur trails.
    """
    name = "fireworks"
    palette = FIREWORK_COLORS
    DEFAULTS = {
        'capacity': 8,
        'interval': 0.8,
        'launch_span': [0.2, 0.8],
        'launch_offset': 20.0,
        'target_span': [0.1, 0.5],
        'head_speed': [400.0, 600.0],
        'head_gravity': 0.0,
        'explosion_count': [60, 99],
        'explosion_speed': [100.0, 300.0],
        'spark_life': [1.0, 2.5],
        'spark_size': [2.0, 6.0],
        'spark_gravity': 150.0,
        'spark_drag': 1.0,
        'spark_trail': 5,
        'ember_probability': 0.0,
        'ember_capacity': 0,
        'ember_gravity': 80.0,
        'ember_life': 0.5,
    }
    # Sparks may fly far above the top edge and fall back into view.
    spark_margin = 100.0

    def _build(self):
        p = self.params
        self.policy = self._policy('fireworks')
        self.launch_span = Range(*p['launch_span'])
        self.target_span = Range(*p['target_span'])
        self.head_speed = Range(*p['head_speed'])
        self.explosion_count = IntRange(*p['explosion_count'])
        self.explosion_speed = Range(*p['explosion_speed'])
        self.spark_life = Range(*p['spark_life'])
        self.spark_size = Range(*p['spark_size'])
        self.fireworks: List[Firework] = []
        self.exploded_total = 0
        self.extinguished_total = 0

    def populations(self):
        return [('fireworks', len(self.fireworks), self.policy.capacity)]

    @property
    def particle_count(self) -> int:
        return sum(fw.particle_count for fw in self.fireworks)

    def launch(self, width: float, height: float) -> Firework:
        rng = self.rng
        p = self.params
        firework = Firework(
            x=self.launch_span.sample(rng) * width,
            y=height + float(p['launch_offset']),
            vy=-self.head_speed.sample(rng),
            target_y=self.target_span.sample(rng) * height,
            color=int(rng.integers(0, len(self.palette))),
            child_capacity=self.explosion_count.high,
            trail_capacity=int(p['ember_capacity']),
            child_trail_length=int(p['spark_trail']),
        )
        self.fireworks.append(firework)
        self.spawned_total += 1
        return firework

    def _emit_ember(self, firework: Firework) -> None:
        rng = self.rng
        index = firework.trails.spawn(
            x=firework.x + rng.uniform(-2.0, 2.0),
            y=firework.y,
            vx=rng.uniform(-10.0, 10.0),
            vy=rng.uniform(20.0, 70.0),
            life=float(self.params['ember_life']),
            size=rng.uniform(1.0, 4.0),
            alpha=0.8,
            color=firework.color,
            kind=ParticleKind.GLOW,
        )
        if index >= 0:
            self.spawned_total += 1

    def _advance_sparks(self, pool: ParticlePool, dt: float, gravity: float, drag: float,
                        width: float, height: float) -> None:
        pool.push_trails()
        pool.integrate(dt)
        n = pool.count
        pool.vy[:n] += gravity * dt
        if drag != 1.0:
            # Drag is the horizontal retention per 60 Hz frame.
            pool.vx[:n] *= drag ** (dt / NOMINAL_DELTA_TIME)
        pool.decay(dt, 1.0)
        self._retire(pool, width, height, self.spark_margin, top_margin=height)

    def _step(self, dt, width, height, t):
        p = self.params
        rng = self.rng
        ember_probability = float(p['ember_probability'])

        for firework in self.fireworks:
            if firework.state is FireworkState.RISING:
                firework.rise(dt, float(p['head_gravity']))
                if ember_probability > 0.0 and rng.random() < ember_probability:
                    self._emit_ember(firework)
                if firework.should_explode():
                    count = self.explosion_count.sample(rng)
                    self.spawned_total += firework.explode(
                        count, rng, self.explosion_speed, self.spark_life, self.spark_size)
                    self.exploded_total += 1

            self._advance_sparks(firework.trails, dt, float(p['ember_gravity']), 1.0, width, height)
            self._advance_sparks(firework.children, dt, float(p['spark_gravity']), float(p['spark_drag']),
                                 width, height)
            firework.settle()

        before = len(self.fireworks)
        self.fireworks = [fw for fw in self.fireworks if fw.state is not FireworkState.EXTINGUISHED]
        self.extinguished_total += before - len(self.fireworks)

        launches = self.policy.request(len(self.fireworks), dt, rng)
        for _ in range(launches):
            self.launch(width, height)
        if launches:
            logging.debug(f"{self.name}: launched {launches}, {len(self.fireworks)} in flight.")

    def stats(self):
        stats = super().stats()
        stats['sparks'] = self.particle_count
        stats['exploded'] = self.exploded_total
        return stats

    def _draw(self, surface, t):
        for firework in self.fireworks:
            self._draw_firework(surface, firework)

    def _draw_firework(self, surface, firework: Firework) -> None:
        color = self.palette[firework.color]
        if not firework.exploded:
            head = (firework.x, firework.y)
            surface.circle(head, 4.0, color)
            surface.circle(head, 12.0, color, alpha=0.3, additive=True)
            return

        sparks = firework.children
        fractions = sparks.life_fraction()
        for i in range(sparks.count):
            alpha = float(fractions[i])
            size = float(sparks.size[i])
            trail = sparks.trail_points(i)
            for index, point in enumerate(trail):
                surface.circle(point, size * 0.5, color, alpha=alpha * (index / len(trail)) * 0.5)
            center = (float(sparks.x[i]), float(sparks.y[i]))
            surface.circle(center, size * 2.0, color, alpha=alpha * 0.4, additive=True)
            surface.circle(center, size, color, alpha=alpha)


class Fireworks2026System(FireworkSystem):
    """
    New Year's Eve 2026 fireworks: random launches, rockets that slow down
    while climbing and shed embers, and bigger, dragging bursts.
    """
    name = "fireworks_2026"
    palette = FIREWORK_2026_COLORS
    DEFAULTS = dict(
        FireworkSystem.DEFAULTS,
        capacity=10,
        interval=None,
        probability=0.04,
        launch_span=[0.1, 0.9],
        launch_offset=0.0,
        head_gravity=50.0,
        explosion_count=[120, 199],
        explosion_speed=[50.0, 250.0],
        spark_gravity=60.0,
        spark_drag=0.99,
        spark_trail=0,
        ember_probability=0.8,
        ember_capacity=60,
    )

    def _draw_firework(self, surface, firework: Firework) -> None:
        color = self.palette[firework.color]

        embers = firework.trails
        ember_fractions = embers.life_fraction()
        for i in range(embers.count):
            alpha = float(ember_fractions[i]) * float(embers.alpha[i])
            surface.circle((float(embers.x[i]), float(embers.y[i])), float(embers.size[i]), color,
                           alpha=alpha * 0.7, additive=True)

        if not firework.exploded:
            surface.circle((firework.x, firework.y), 4.0, color, additive=True)

        sparks = firework.children
        fractions = sparks.life_fraction()
        for i in range(sparks.count):
            alpha = float(fractions[i])
            size = float(sparks.size[i]) * (0.3 + alpha * 0.7)
            center = (float(sparks.x[i]), float(sparks.y[i]))
            surface.circle(center, size * 2.0, color, alpha=alpha * 0.3, additive=True)
            surface.circle(center, size, color, alpha=alpha, additive=True)
