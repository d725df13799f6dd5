# effects/celebration.py
"""
Confetti, champagne bubbles and twinkling sparkles for the New Year screen.
"""
import math

import numpy as np

from constants import BUBBLE_GLOW_COLOR, CONFETTI_COLORS, GOLDEN_LIGHT, WHITE
from particle import ParticleKind, ParticlePool
from shapes import radial_arms, rect_points, transform
from simulation import EmitterSystem, ParticleSystem
from spawn import Range


class ConfettiSystem(EmitterSystem):
    """Paper rectangles that tumble down while wobbling sideways."""
    name = "confetti"
    DEFAULTS = {
        'capacity': 80,
        'probability': 0.4,
        'fall_speed': [80.0, 180.0],
        'wobble': 50.0,
    }
    margin = 20.0
    decay_rate = 0.0

    def _build(self):
        super()._build()
        self.fall_speed = Range(*self.params['fall_speed'])
        self.wobble = float(self.params['wobble'])
        self.draw_dispatch = {ParticleKind.RECT: self._draw_piece}

    def _emit(self, width, height, t):
        rng = self.rng
        return self.pool.spawn(
            x=rng.uniform(0.0, width),
            y=-self.margin,
            vy=self.fall_speed.sample(rng),
            rotation=rng.uniform(0.0, 360.0),
            spin=rng.uniform(-200.0, 200.0),
            size=rng.uniform(4.0, 12.0),
            size2=rng.uniform(6.0, 18.0),
            phase=rng.uniform(0.0, 2.0 * math.pi),
            freq=rng.uniform(2.0, 5.0),
            color=int(rng.integers(0, len(CONFETTI_COLORS))),
            kind=ParticleKind.RECT,
        )

    def _apply_physics(self, pool, dt, t, width, height):
        n = pool.count
        pool.vx[:n] = np.sin(t * pool.freq[:n] + pool.phase[:n]) * self.wobble

    def _draw_piece(self, surface, pool, i, t):
        outline = transform(
            rect_points(float(pool.size[i]), float(pool.size2[i])),
            float(pool.x[i]), float(pool.y[i]), float(pool.rotation[i]),
        )
        surface.path(outline, CONFETTI_COLORS[int(pool.color[i])])


class BubbleSystem(EmitterSystem):
    """Champagne bubbles rising from the bottom edge with a golden glow."""
    name = "bubbles"
    DEFAULTS = {
        'capacity': 40,
        'probability': 0.2,
        'rise_speed': [40.0, 100.0],
        'wobble': [10.0, 30.0],
    }
    margin = 20.0
    decay_rate = 0.0

    def _build(self):
        super()._build()
        self.rise_speed = Range(*self.params['rise_speed'])
        self.wobble = Range(*self.params['wobble'])
        self.draw_dispatch = {ParticleKind.BUBBLE: self._draw_bubble}

    def _emit(self, width, height, t):
        rng = self.rng
        return self.pool.spawn(
            x=rng.uniform(0.0, width),
            y=height + 10.0,
            vy=-self.rise_speed.sample(rng),
            size=rng.uniform(3.0, 9.0),
            alpha=rng.uniform(0.3, 0.7),
            phase=rng.uniform(0.0, 2.0 * math.pi),
            amp=self.wobble.sample(rng),
            kind=ParticleKind.BUBBLE,
        )

    def _apply_physics(self, pool, dt, t, width, height):
        n = pool.count
        pool.x[:n] += np.sin(t * 2.0 + pool.phase[:n]) * pool.amp[:n] * dt

    def _draw_bubble(self, surface, pool, i, t):
        x, y = float(pool.x[i]), float(pool.y[i])
        size = float(pool.size[i])
        alpha = float(pool.alpha[i])
        surface.circle((x, y), size * 2.0, BUBBLE_GLOW_COLOR, alpha=alpha * 0.3, additive=True)
        surface.circle((x, y), size, WHITE, alpha=alpha, width=1.5)
        surface.circle((x - size * 0.3, y - size * 0.3), size * 0.3, WHITE, alpha=alpha * 0.8)


class SparkleSystem(ParticleSystem):
    """A fixed field of four-pointed stars that pulse in place."""
    name = "sparkles"
    DEFAULTS = {
        'count': 50,
    }

    def _build(self):
        self.pool = ParticlePool(int(self.params['count']), name=self.name)

    def populations(self):
        return [(self.name, self.pool.count, self.pool.capacity)]

    def _seed(self, width, height):
        rng = self.rng
        n = self.pool.capacity
        self.pool.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=rng.uniform(0.0, height, n),
            size=rng.uniform(1.0, 4.0, n),
            alpha=rng.uniform(0.2, 0.8, n),
            freq=rng.uniform(2.0, 5.0, n),
            phase=rng.uniform(0.0, 2.0 * math.pi, n),
            kind=ParticleKind.SPARKLE,
        )

    def _step(self, dt, width, height, t):
        # Sparkles are stationary; their pulse is a pure function of time.
        pass

    def pulse(self, t: float):
        """Animated (alpha, size) arrays for time t."""
        pool = self.pool
        n = pool.count
        wave = np.sin(t * pool.freq[:n] + pool.phase[:n])
        return pool.alpha[:n] * (0.5 + 0.5 * wave), pool.size[:n] * (0.8 + 0.4 * wave)

    def _draw(self, surface, t):
        pool = self.pool
        alphas, sizes = self.pulse(t)
        for i in range(pool.count):
            x, y = float(pool.x[i]), float(pool.y[i])
            alpha, size = float(alphas[i]), float(sizes[i])
            for end in radial_arms(x, y, size * 2.0, 4):
                surface.line((x, y), end, WHITE, alpha=alpha, width=1.5)
            surface.circle((x, y), size, GOLDEN_LIGHT, alpha=alpha * 0.6, additive=True)
