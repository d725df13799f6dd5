# effects/snowfall.py
"""
Falling snow and floating ornaments for the Christmas screen.
"""
import math
from enum import IntEnum

import numpy as np

from constants import ORNAMENT_COLORS, WHITE
from particle import ParticleKind, ParticlePool
from simulation import EmitterSystem, ParticleSystem
from spawn import Range
from shapes import radial_arms


class SnowflakeType(IntEnum):
    SMALL = 0
    MEDIUM = 1
    LARGE = 2
    SPARKLE = 3


SNOWFLAKE_SIZES = {
    SnowflakeType.SMALL: Range(2.0, 5.0),
    SnowflakeType.MEDIUM: Range(4.0, 9.0),
    SnowflakeType.LARGE: Range(6.0, 14.0),
    SnowflakeType.SPARKLE: Range(4.0, 10.0),
}


class SnowfallSystem(EmitterSystem):
    """
    Snowflakes born on the top edge, falling with a position-dependent sway.
    """
    name = "snowfall"
    DEFAULTS = {
        'capacity': 100,
        'probability': 0.3,
        'fall_speed': [40.0, 120.0],
        'life': [20.0, 30.0],
        'sway': 30.0,
    }
    margin = 20.0

    def _build(self):
        super()._build()
        self.fall_speed = Range(*self.params['fall_speed'])
        self.life_span = Range(*self.params['life'])
        self.sway = float(self.params['sway'])
        self.draw_dispatch = {
            ParticleKind.CRYSTAL: self._draw_crystal,
            ParticleKind.SPARKLE: self._draw_sparkle,
        }

    def _pick_type(self) -> SnowflakeType:
        rng = self.rng
        if rng.random() < 0.1:
            return SnowflakeType.SPARKLE
        if rng.random() < 0.3:
            return SnowflakeType.LARGE
        if rng.random() < 0.6:
            return SnowflakeType.MEDIUM
        return SnowflakeType.SMALL

    def _emit(self, width, height, t):
        rng = self.rng
        flake = self._pick_type()
        kind = ParticleKind.SPARKLE if flake == SnowflakeType.SPARKLE else ParticleKind.CRYSTAL
        return self.pool.spawn(
            x=rng.uniform(0.0, width),
            y=-self.margin,
            vx=0.0,
            vy=self.fall_speed.sample(rng),
            size=SNOWFLAKE_SIZES[flake].sample(rng),
            alpha=rng.uniform(0.5, 1.0),
            rotation=rng.uniform(0.0, 360.0),
            spin=rng.uniform(-50.0, 50.0),
            life=self.life_span.sample(rng),
            kind=kind,
            variant=int(flake),
        )

    def _steer(self, pool, dt, t, width, height):
        n = pool.count
        # Wind sway is a function of where the flake is.
        pool.vx[:n] = np.sin(pool.y[:n] * 0.01 + pool.x[:n] * 0.005) * self.sway

    def _draw_crystal(self, surface, pool, i, t):
        x, y = float(pool.x[i]), float(pool.y[i])
        arm = float(pool.size[i])
        alpha = float(pool.alpha[i])
        rotation = float(pool.rotation[i])
        branched = pool.variant[i] != SnowflakeType.SMALL

        for end in radial_arms(x, y, arm, 6, rotation):
            surface.line((x, y), end, WHITE, alpha=alpha, width=1.5)
        if not branched:
            return
        branch_length = arm * 0.4
        for k in range(6):
            angle = math.radians(k * 60.0 + rotation)
            start = (x + math.cos(angle) * arm * 0.5, y + math.sin(angle) * arm * 0.5)
            for side in (-1, 1):
                branch = angle + side * math.radians(45.0)
                end = (start[0] + math.cos(branch) * branch_length,
                       start[1] + math.sin(branch) * branch_length)
                surface.line(start, end, WHITE, alpha=alpha * 0.8, width=1.0)

    def _draw_sparkle(self, surface, pool, i, t):
        center = (float(pool.x[i]), float(pool.y[i]))
        size = float(pool.size[i])
        alpha = float(pool.alpha[i])
        surface.circle(center, size * 2.0, WHITE, alpha=alpha * 0.3, additive=True)
        surface.circle(center, size, WHITE, alpha=alpha)


class OrnamentSystem(ParticleSystem):
    """
    A fixed set of glowing baubles bobbing around their seed position.
    """
    name = "ornaments"
    DEFAULTS = {
        'count': 15,
        'bob': 20.0,
    }

    def _build(self):
        self.bob = float(self.params['bob'])
        self.pool = ParticlePool(int(self.params['count']), name=self.name)

    def populations(self):
        return [(self.name, self.pool.count, self.pool.capacity)]

    def _seed(self, width, height):
        rng = self.rng
        n = self.pool.capacity
        y = rng.uniform(0.0, height, n)
        self.pool.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=y,
            ay=y,
            size=rng.uniform(10.0, 25.0, n),
            color=rng.integers(0, len(ORNAMENT_COLORS), n),
            phase=rng.uniform(0.0, 2.0 * math.pi, n),
            freq=rng.uniform(1.0, 3.0, n),
            kind=ParticleKind.ORB,
        )

    def _step(self, dt, width, height, t):
        pool = self.pool
        n = pool.count
        pool.y[:n] = pool.ay[:n] + np.sin(t * pool.freq[:n] + pool.phase[:n]) * self.bob

    def _draw(self, surface, t):
        pool = self.pool
        for i in range(pool.count):
            x, y, size = float(pool.x[i]), float(pool.y[i]), float(pool.size[i])
            color, glow = ORNAMENT_COLORS[int(pool.color[i])]
            surface.circle((x, y), size * 2.0, glow, alpha=0.2, additive=True)
            surface.circle((x, y), size * 1.3, glow, alpha=0.4, additive=True)
            surface.circle((x, y), size, color)
            surface.circle((x - size * 0.3, y - size * 0.3), size * 0.3, WHITE, alpha=0.6)
