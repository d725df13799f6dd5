# effects/summer.py
"""
A summer afternoon: sky, a slowly turning sun, rolling ocean waves and
warm motes rising from the water.
"""
import math

import numpy as np

from constants import (
    OCEAN_COLORS, SUMMER_MOTE_COLOR, SUMMER_ORANGE, SUMMER_SKY_COLORS, SUMMER_SUN_CORE,
)
from particle import ParticleKind, ParticlePool
from shapes import TAU, rect_points, transform
from simulation import EmitterSystem
from spawn import Range

WAVE_LAYERS = 3
WAVE_STEP = 5.0


def wave_outline(width: float, height: float, layer: int, offset: float):
    """Closed outline of one ocean layer, from the bottom-left corner around the crest."""
    crest = height * 0.88 + layer * 15.0
    phase = layer * 0.5
    xs = np.arange(0.0, width + WAVE_STEP * 0.5, WAVE_STEP)
    ys = (crest
          + np.sin(xs * 0.02 + offset + phase) * 15.0
          + np.sin(xs * 0.01 + offset * 0.7 + phase) * 10.0)
    return [(0.0, height), (0.0, crest)] + list(zip(xs.tolist(), ys.tolist())) + [(width, height)]


class SummerSystem(EmitterSystem):
    """
    Motes are born just below the bottom edge, rise at a constant speed
    while wobbling sideways and are dropped once 20 px above the top. The
    twelve sun rays are seeded once and turn with the sun.
    """
    name = "summer"
    DEFAULTS = {
        'capacity': 30,
        'probability': 0.1,
        'rays': 12,
        'rise_speed': [20.0, 50.0],
        'wobble': 20.0,
        'sun_period': 60.0,
        'wave_period': 3.0,
    }
    # Motes leave through the top edge, 20 px past it.
    margin = 20.0
    top_margin = 20.0
    decay_rate = 0.0

    def _build(self):
        super()._build()
        p = self.params
        self.rise_speed = Range(*p['rise_speed'])
        self.wobble = float(p['wobble'])
        self.sun_period = float(p['sun_period'])
        self.wave_period = float(p['wave_period'])
        self.rays = ParticlePool(int(p['rays']), name="summer.rays")
        self.draw_dispatch = {ParticleKind.DISC: self._draw_mote}

    def populations(self):
        return super().populations() + [('rays', self.rays.count, self.rays.capacity)]

    def _seed(self, width, height):
        rng = self.rng
        n = self.rays.capacity
        self.rays.spawn_many(
            n,
            rotation=np.arange(n) * (360.0 / n),
            size=rng.uniform(10.0, 30.0, n),
            size2=rng.uniform(150.0, 250.0, n),
            alpha=rng.uniform(0.1, 0.4, n),
            kind=ParticleKind.STREAK,
        )

    def _emit(self, width, height, t):
        rng = self.rng
        return self.pool.spawn(
            x=rng.uniform(0.0, width),
            y=height + 10.0,
            vy=-self.rise_speed.sample(rng),
            size=rng.uniform(2.0, 6.0),
            alpha=rng.uniform(0.2, 0.6),
            phase=rng.uniform(0.0, TAU),
            kind=ParticleKind.DISC,
        )

    def _apply_physics(self, pool, dt, t, width, height):
        n = pool.count
        pool.x[:n] += np.sin(t * 2.0 + pool.phase[:n]) * self.wobble * dt

    def sun_center(self):
        return self.width * 0.8, self.height * 0.15

    def _draw(self, surface, t):
        width, height = self.width, self.height
        sky = transform(rect_points(width, height), width / 2.0, height / 2.0)
        surface.linear_gradient(sky, (0.0, 0.0), (0.0, height),
                                [(color, 1.0) for color in SUMMER_SKY_COLORS])

        sx, sy = self.sun_center()
        surface.radial_gradient((sx, sy), 200.0, [(SUMMER_SUN_CORE[1], 0.4), (SUMMER_ORANGE, 0.2),
                                                  (SUMMER_ORANGE, 0.0)])
        turn = (t / self.sun_period) * 360.0
        rays = self.rays
        for i in range(rays.count):
            angle = math.radians(float(rays.rotation[i]) + turn)
            length = float(rays.size2[i])
            surface.line((sx + math.cos(angle) * 50.0, sy + math.sin(angle) * 50.0),
                         (sx + math.cos(angle) * length, sy + math.sin(angle) * length),
                         SUMMER_SUN_CORE[1], alpha=float(rays.alpha[i]), width=float(rays.size[i]))
        surface.radial_gradient((sx, sy), 50.0, [(color, 1.0) for color in SUMMER_SUN_CORE])

        offset = (t / self.wave_period) * TAU
        for layer in range(WAVE_LAYERS):
            alpha = 0.3 - layer * 0.08
            surface.linear_gradient(wave_outline(width, height, layer, offset),
                                    (0.0, height * 0.88), (0.0, height),
                                    [(OCEAN_COLORS[0], alpha + 0.2), (OCEAN_COLORS[1], alpha)])

        self._dispatch(surface, self.pool, t)

    def _draw_mote(self, surface, pool, i, t):
        surface.circle((float(pool.x[i]), float(pool.y[i])), float(pool.size[i]), SUMMER_MOTE_COLOR,
                       alpha=float(pool.alpha[i]))
