# effects/daynight.py
"""
A sky cycling from sunrise through day, sunset and night and back, with a
sun or moon on an arc, twinkling stars and drifting clouds.
"""
import math
from typing import List, Tuple

import numpy as np

from constants import (
    DAY_GROUND_COLORS, DAY_SUN_COLORS, DAY_SUN_GLOW, GOLDEN_LIGHT, MOON_CRATER_COLOR, MOON_FACE_COLORS,
    NIGHT_CLOUD_COLOR, NIGHT_GROUND_COLORS, SKY_DAY, SKY_DUSK, SKY_NIGHT, SKY_SUNRISE, SKY_SUNSET, WHITE,
)
from particle import ParticleKind, ParticlePool
from shapes import TAU, rect_points, transform
from simulation import ParticleSystem
from surface import Color

# Circles of one cloud: (x offset, y offset, radius, alpha share), offsets and radius times scale.
CLOUD_PUFFS = ((0.0, 0.0, 25.0, 0.8), (30.0, -5.0, 35.0, 1.0), (55.0, 0.0, 28.0, 0.9), (75.0, 5.0, 20.0, 0.7))
# Moon craters: (x offset, y offset, radius, alpha).
MOON_CRATERS = ((-10.0, -5.0, 6.0, 0.3), (8.0, 8.0, 4.0, 0.2), (5.0, -12.0, 3.0, 0.25))
# Share of each half-cycle spent blending into or out of the steady sky.
TWILIGHT = 0.2


def _mix(a: Color, b: Color, t: float) -> Color:
    return tuple(int(round(x + (y - x) * t)) for x, y in zip(a, b))


def _blend(a: List[Color], b: List[Color], t: float) -> List[Color]:
    return [_mix(x, y, t) for x, y in zip(a, b)]


def phase_of(progress: float) -> Tuple[bool, float]:
    """(is_day, progress through the current half) for a cycle position in [0, 1)."""
    progress = progress % 1.0
    if progress < 0.5:
        return True, progress * 2.0
    return False, (progress - 0.5) * 2.0


def sky_colors(progress: float) -> List[Color]:
    """Top, middle and bottom sky colors at a cycle position."""
    is_day, half = phase_of(progress)
    if is_day:
        if half < TWILIGHT:
            return _blend(SKY_SUNRISE, SKY_DAY, half / TWILIGHT)
        if half < 1.0 - TWILIGHT:
            return list(SKY_DAY)
        return _blend(SKY_DAY, SKY_SUNSET, (half - 1.0 + TWILIGHT) / TWILIGHT)
    if half < TWILIGHT:
        return _blend(SKY_SUNSET, SKY_DUSK, half / TWILIGHT)
    if half < 1.0 - TWILIGHT:
        return list(SKY_NIGHT)
    return _blend(SKY_NIGHT, SKY_SUNRISE, (half - 1.0 + TWILIGHT) / TWILIGHT)


def star_visibility(progress: float) -> float:
    """0 in full day, 1 in full night, ramping over the edges of each half."""
    is_day, half = phase_of(progress)
    if is_day:
        if half < 0.15:
            visibility = 1.0 - half * 6.0
        elif half > 0.85:
            visibility = (half - 0.85) * 6.0
        else:
            visibility = 0.0
    elif half < 0.15:
        visibility = half * 6.0
    elif half > 0.85:
        visibility = 1.0 - (half - 0.85) * 6.0
    else:
        visibility = 1.0
    return min(max(visibility, 0.0), 1.0)


class DayNightSystem(ParticleSystem):
    """
    Stars and clouds are seeded once, in fractions of the surface so a
    resize keeps the composition; nothing is spawned afterwards.
    """
    name = "day_night"
    DEFAULTS = {
        'stars': 60,
        'clouds': 5,
        'cycle_time': 16.0,
    }

    def _build(self):
        p = self.params
        self.cycle_time = float(p['cycle_time'])
        self.stars = ParticlePool(int(p['stars']), name="day_night.stars")
        self.clouds = ParticlePool(int(p['clouds']), name="day_night.clouds")
        self.progress = 0.0

    def populations(self):
        return [
            ('stars', self.stars.count, self.stars.capacity),
            ('clouds', self.clouds.count, self.clouds.capacity),
        ]

    def _seed(self, width, height):
        rng = self.rng
        n = self.stars.capacity
        self.stars.spawn_many(
            n,
            ax=rng.uniform(0.0, 1.0, n),
            ay=rng.uniform(0.0, 0.6, n),
            size=rng.uniform(1.0, 3.0, n),
            phase=rng.uniform(0.0, TAU, n),
            freq=rng.uniform(1.0, 3.0, n),
            kind=ParticleKind.SPARKLE,
        )
        n = self.clouds.capacity
        self.clouds.spawn_many(
            n,
            ax=rng.uniform(0.0, 1.0, n),
            ay=rng.uniform(0.1, 0.4, n),
            size=rng.uniform(0.8, 1.3, n),
            freq=rng.uniform(0.01, 0.03, n),
            kind=ParticleKind.DISC,
        )
        self._place(width, height, 0.0)

    def _place(self, width, height, t):
        stars, clouds = self.stars, self.clouds
        n = stars.count
        stars.x[:n] = stars.ax[:n] * width
        stars.y[:n] = stars.ay[:n] * height
        stars.alpha[:n] = (np.sin(t * stars.freq[:n] + stars.phase[:n]) + 1.0) / 2.0
        n = clouds.count
        clouds.x[:n] = (np.mod(clouds.ax[:n] + t * clouds.freq[:n], 1.4) - 0.2) * width
        clouds.y[:n] = clouds.ay[:n] * height

    def _step(self, dt, width, height, t):
        self.progress = (t / self.cycle_time) % 1.0
        self._place(width, height, t)

    def body_position(self) -> Tuple[float, float]:
        """Where the sun (by day) or the moon (by night) sits on its arc."""
        _, half = phase_of(self.progress)
        angle = math.pi * (1.0 - half)
        x = self.width / 2.0 + math.cos(angle) * self.width * 0.6
        y = self.height * 0.35 - math.sin(angle) * self.width * 0.3 + self.height * 0.1
        return x, y

    def _draw(self, surface, t):
        width, height = self.width, self.height
        is_day, _ = phase_of(self.progress)
        sky = transform(rect_points(width, height), width / 2.0, height / 2.0)
        surface.linear_gradient(sky, (0.0, 0.0), (0.0, height), [(c, 1.0) for c in sky_colors(self.progress)])

        visibility = star_visibility(self.progress)
        if visibility > 0.0:
            stars = self.stars
            for i in range(stars.count):
                surface.circle((float(stars.x[i]), float(stars.y[i])), float(stars.size[i]), WHITE,
                               alpha=visibility * (0.4 + float(stars.alpha[i]) * 0.6))

        x, y = self.body_position()
        if y < height * 0.7:
            if is_day:
                self._draw_sun(surface, x, y, t)
            else:
                self._draw_moon(surface, x, y)

        cloud_alpha, cloud_color = (0.9, WHITE) if is_day else (0.15, NIGHT_CLOUD_COLOR)
        clouds = self.clouds
        for i in range(clouds.count):
            cx, cy, scale = float(clouds.x[i]), float(clouds.y[i]), float(clouds.size[i])
            for dx, dy, radius, share in CLOUD_PUFFS:
                surface.circle((cx + dx * scale, cy + dy), radius * scale, cloud_color, alpha=cloud_alpha * share)

        ground = DAY_GROUND_COLORS if is_day else NIGHT_GROUND_COLORS
        strip = transform(rect_points(width, height * 0.15), width / 2.0, height * 0.925)
        surface.linear_gradient(strip, (0.0, height * 0.85), (0.0, height),
                                [(ground[0], 0.0), (ground[0], 0.3), (ground[1], 1.0)])

    def _draw_sun(self, surface, x, y, t):
        surface.radial_gradient((x, y), 80.0, [(DAY_SUN_GLOW, 0.4), (GOLDEN_LIGHT, 0.2), (GOLDEN_LIGHT, 0.0)])
        surface.radial_gradient((x, y), 35.0, [(color, 1.0) for color in DAY_SUN_COLORS])
        for i in range(12):
            angle = math.radians(i * 30.0 + t * 20.0)
            outer = 55.0 + math.sin(t * 3.0 + i) * 5.0
            surface.line((x + math.cos(angle) * 40.0, y + math.sin(angle) * 40.0),
                         (x + math.cos(angle) * outer, y + math.sin(angle) * outer),
                         GOLDEN_LIGHT, alpha=0.6, width=3.0)

    def _draw_moon(self, surface, x, y):
        surface.radial_gradient((x, y), 60.0, [(MOON_FACE_COLORS[1], 0.3), (MOON_FACE_COLORS[2], 0.1),
                                               (MOON_FACE_COLORS[2], 0.0)])
        surface.radial_gradient((x, y), 28.0, [(color, 1.0) for color in MOON_FACE_COLORS])
        for dx, dy, radius, alpha in MOON_CRATERS:
            surface.circle((x + dx, y + dy), radius, MOON_CRATER_COLOR, alpha=alpha)
