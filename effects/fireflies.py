# effects/fireflies.py
"""
A summer night: twinkling stars, a moon, swaying grass and wandering
fireflies that pulse with a soft radial glow.
"""
import math

import numpy as np

from constants import FIREFLY_COLORS, GRASS_COLOR, MOON_COLORS, WHITE
from particle import ParticleKind, ParticlePool
from shapes import quad_curve
from simulation import ParticleSystem


class FirefliesSystem(ParticleSystem):
    """
    Three ambient populations seeded once. Only the fireflies move; stars
    and grass are animated purely from total time.
    """
    name = "fireflies"
    DEFAULTS = {
        'fireflies': 20,
        'stars': 50,
        'grass': 60,
        'move_speed': [10.0, 30.0],
        'padding': 50.0,
        'turn_probability': 0.01,
    }
    moon_radius = 35.0

    def _build(self):
        p = self.params
        self.padding = float(p['padding'])
        self.turn_probability = float(p['turn_probability'])
        self.fireflies = ParticlePool(int(p['fireflies']), name="fireflies")
        self.stars = ParticlePool(int(p['stars']), name="fireflies.stars")
        self.grass = ParticlePool(int(p['grass']), name="fireflies.grass")

    def populations(self):
        return [
            ('fireflies', self.fireflies.count, self.fireflies.capacity),
            ('stars', self.stars.count, self.stars.capacity),
            ('grass', self.grass.count, self.grass.capacity),
        ]

    def _seed(self, width, height):
        rng = self.rng
        low, high = self.params['move_speed']

        n = self.fireflies.capacity
        angles = rng.uniform(0.0, 2.0 * math.pi, n)
        speeds = rng.uniform(low, high, n)
        self.fireflies.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=rng.uniform(height * 0.1, height * 0.8, n),
            vx=np.cos(angles) * speeds,
            vy=np.sin(angles) * speeds,
            amp=speeds,
            size=rng.uniform(3.0, 7.0, n),
            phase=rng.uniform(0.0, 2.0 * math.pi, n),
            freq=rng.uniform(1.0, 3.0, n),
            color=rng.integers(0, len(FIREFLY_COLORS), n),
            kind=ParticleKind.GLOW,
        )

        n = self.stars.capacity
        self.stars.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=rng.uniform(0.0, height * 0.6, n),
            kind=ParticleKind.DISC,
        )

        n = self.grass.capacity
        self.grass.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            size=rng.uniform(40.0, 120.0, n),
            size2=rng.uniform(1.0, 4.0, n),
            phase=rng.uniform(0.0, 2.0 * math.pi, n),
            kind=ParticleKind.LEAF,
        )

    def _step(self, dt, width, height, t):
        pool = self.fireflies
        n = pool.count
        if n == 0:
            return
        pool.integrate(dt)

        x, y = pool.x[:n], pool.y[:n]
        vx, vy = pool.vx[:n], pool.vy[:n]
        pad = self.padding
        floor = height * 0.75

        # Bounce off the padded box and keep the firefly inside it.
        hit_x = (x < pad) | (x > width - pad)
        vx[hit_x] *= -1.0
        x[hit_x] = np.clip(x[hit_x], pad, max(pad, width - pad))
        hit_y = (y < pad) | (y > floor)
        vy[hit_y] *= -1.0
        y[hit_y] = np.clip(y[hit_y], pad, max(pad, floor))

        turning = self.rng.random(n) < self.turn_probability
        turns = int(np.count_nonzero(turning))
        if turns:
            angles = self.rng.uniform(0.0, 2.0 * math.pi, turns)
            speeds = pool.amp[:n][turning]
            vx[turning] = np.cos(angles) * speeds
            vy[turning] = np.sin(angles) * speeds

    def _draw(self, surface, t):
        width, height = self.width, self.height
        stars = self.stars
        for i in range(stars.count):
            x = float(stars.x[i])
            twinkle = (math.sin(t * 2.0 + x * 0.1) + 1.0) / 2.0
            surface.circle((x, float(stars.y[i])), 1.0 + twinkle * 0.5, WHITE, alpha=0.3 + twinkle * 0.4)

        moon = (width * 0.8, height * 0.12)
        r = self.moon_radius
        surface.radial_gradient(moon, r * 3.0, [(MOON_COLORS[0], 0.15), (MOON_COLORS[0], 0.0)])
        surface.radial_gradient(moon, r, [(MOON_COLORS[0], 1.0), (MOON_COLORS[1], 1.0)])

        grass = self.grass
        for i in range(grass.count):
            x = float(grass.x[i])
            blade_height = float(grass.size[i])
            blade_width = float(grass.size2[i])
            sway = math.sin(t * 1.5 + float(grass.phase[i])) * 8.0
            up = quad_curve((x, height), (x + sway * 0.5, height - blade_height * 0.5),
                            (x + sway, height - blade_height))
            down = quad_curve((x + sway, height - blade_height),
                              (x + sway * 0.5 + blade_width, height - blade_height * 0.5),
                              (x + blade_width, height))
            surface.path(up + down[1:], GRASS_COLOR)

        flies = self.fireflies
        for i in range(flies.count):
            center = (float(flies.x[i]), float(flies.y[i]))
            size = float(flies.size[i])
            color = FIREFLY_COLORS[int(flies.color[i])]
            glow = (math.sin(t * float(flies.freq[i]) + float(flies.phase[i])) + 1.0) / 2.0
            alpha = 0.3 + glow * 0.7
            surface.radial_gradient(center, size * 6.0,
                                    [(color, alpha * 0.4), (color, alpha * 0.1), (color, 0.0)])
            surface.radial_gradient(center, size * 2.0,
                                    [(WHITE, alpha), (color, alpha), (color, 0.0)])
            surface.circle(center, size * 0.5, WHITE, alpha=alpha)
