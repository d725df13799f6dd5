# effects/heavenly.py
"""
A golden sky: glow from above, drifting clouds, light rays, twinkling
stars, rising golden motes, a shining cross and doves flying across.
"""
import math

import numpy as np

from constants import CORNSILK, DIVINE_WHITE, GOLDEN_LIGHT, WARM_GOLD, WHITE
from particle import ParticleKind, ParticlePool
from shapes import TAU, ellipse_points, quad_curve, rounded_rect_points
from simulation import EmitterSystem
from spawn import Range


class HeavenlySystem(EmitterSystem):
    """
    Golden motes are the only spawned population; rays, doves, stars and
    clouds are seeded once and animated from total time.
    """
    name = "heavenly"
    DEFAULTS = {
        'capacity': 40,
        'probability': 0.15,
        'rays': 12,
        'doves': 4,
        'stars': 25,
        'clouds': 6,
        'rise_speed': [30.0, 70.0],
        'sway': 30.0,
    }
    margin = 20.0
    decay_rate = 0.0

    def _build(self):
        super()._build()
        p = self.params
        self.rise_speed = Range(*p['rise_speed'])
        self.sway = float(p['sway'])
        self.rays = ParticlePool(int(p['rays']), name="heavenly.rays")
        self.doves = ParticlePool(int(p['doves']), name="heavenly.doves")
        self.stars = ParticlePool(int(p['stars']), name="heavenly.stars")
        self.clouds = ParticlePool(int(p['clouds']), name="heavenly.clouds")
        self.draw_dispatch = {ParticleKind.GLOW: self._draw_mote}

    def populations(self):
        return super().populations() + [
            ('rays', self.rays.count, self.rays.capacity),
            ('doves', self.doves.count, self.doves.capacity),
            ('stars', self.stars.count, self.stars.capacity),
            ('clouds', self.clouds.count, self.clouds.capacity),
        ]

    def _seed(self, width, height):
        rng = self.rng

        n = self.rays.capacity
        self.rays.spawn_many(
            n,
            rotation=-math.pi / 2.0 + (np.arange(n) - (n - 1) / 2.0) * 0.12,
            size=rng.uniform(20.0, 50.0, n),
            size2=height * 0.9,
            freq=rng.uniform(0.2, 0.5, n),
            phase=rng.uniform(0.0, TAU, n),
            alpha=rng.uniform(0.08, 0.23, n),
            kind=ParticleKind.STREAK,
        )

        n = self.doves.capacity
        x = rng.uniform(0.0, width, n)
        y = height * 0.1 + rng.uniform(0.0, height * 0.25, n)
        self.doves.spawn_many(
            n,
            x=x, ax=x, y=y, ay=y,
            size=rng.uniform(20.0, 35.0, n),
            phase=rng.uniform(0.0, TAU, n),
            freq=rng.uniform(15.0, 35.0, n),
            amp=rng.uniform(10.0, 30.0, n),
            # Phase offset of the vertical bob.
            rotation=rng.uniform(0.0, TAU, n),
            kind=ParticleKind.DISC,
        )

        n = self.stars.capacity
        self.stars.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=rng.uniform(0.0, height * 0.5, n),
            size=rng.uniform(1.0, 4.0, n),
            freq=rng.uniform(1.0, 3.0, n),
            phase=rng.uniform(0.0, TAU, n),
            kind=ParticleKind.SPARKLE,
        )

        n = self.clouds.capacity
        self.clouds.spawn_many(
            n,
            ax=rng.uniform(-width * 0.25, width * 1.25, n),
            y=rng.uniform(0.0, height * 0.15, n),
            size=rng.uniform(100.0, 250.0, n),
            size2=rng.uniform(30.0, 70.0, n),
            alpha=rng.uniform(0.05, 0.2, n),
            freq=rng.uniform(5.0, 15.0, n),
            kind=ParticleKind.GLOW,
        )

    def _emit(self, width, height, t):
        rng = self.rng
        return self.pool.spawn(
            x=rng.uniform(0.0, width),
            y=height + self.margin,
            vy=-self.rise_speed.sample(rng),
            size=rng.uniform(2.0, 6.0),
            alpha=rng.uniform(0.3, 0.9),
            phase=rng.uniform(0.0, TAU),
            freq=rng.uniform(1.0, 3.0),
            kind=ParticleKind.GLOW,
        )

    def _apply_physics(self, pool, dt, t, width, height):
        n = pool.count
        pool.x[:n] += np.sin(pool.phase[:n]) * self.sway * dt
        pool.phase[:n] += pool.freq[:n] * dt

    def _step(self, dt, width, height, t):
        super()._step(dt, width, height, t)
        doves = self.doves
        n = doves.count
        size = doves.size[:n]
        doves.x[:n] = np.mod(doves.ax[:n] + t * doves.freq[:n], width + size * 4.0) - size * 2.0
        doves.y[:n] = doves.ay[:n] + np.sin(t * 1.5 + doves.rotation[:n]) * doves.amp[:n]
        clouds = self.clouds
        n = clouds.count
        cloud_width = clouds.size[:n]
        clouds.x[:n] = np.mod(clouds.ax[:n] + t * clouds.freq[:n], width + cloud_width * 2.0) - cloud_width

    def _draw(self, surface, t):
        width, height = self.width, self.height
        pulse = math.sin(t * 0.5) * 0.1 + 0.9
        surface.radial_gradient((width / 2.0, 0.0), height * 0.8,
                                [(GOLDEN_LIGHT, 0.25 * pulse), (WARM_GOLD, 0.15 * pulse), (WARM_GOLD, 0.0)])
        self._draw_clouds(surface, t)
        self._draw_rays(surface, t)
        self._draw_stars(surface, t)
        self._dispatch(surface, self.pool, t)
        self._draw_cross(surface, width * 0.5, height * 0.12, t)
        self._draw_doves(surface, t)

    def _draw_clouds(self, surface, t):
        clouds = self.clouds
        for i in range(clouds.count):
            x, y = float(clouds.x[i]), float(clouds.y[i])
            cloud_width, cloud_height = float(clouds.size[i]), float(clouds.size2[i])
            alpha = float(clouds.alpha[i]) * (math.sin(t * 0.3 + float(clouds.ax[i]) * 0.01) * 0.3 + 0.7)
            for k in range(5):
                center = (x + (k - 2) * cloud_width * 0.2, y + math.sin(k * 1.2) * cloud_height * 0.2)
                radius = cloud_height * (0.8 + math.sin(k * 0.8) * 0.3)
                surface.radial_gradient(center, radius,
                                        [(DIVINE_WHITE, alpha), (DIVINE_WHITE, alpha * 0.5), (DIVINE_WHITE, 0.0)])

    def _draw_rays(self, surface, t):
        rays = self.rays
        origin = (self.width / 2.0, -20.0)
        for i in range(rays.count):
            angle = float(rays.rotation[i])
            length = float(rays.size2[i])
            pulse = math.sin(t * float(rays.freq[i]) + float(rays.phase[i])) * 0.4 + 0.6
            end = (origin[0] + math.cos(angle) * length, origin[1] + math.sin(angle) * length)
            px = -math.sin(angle) * float(rays.size[i]) * pulse
            py = math.cos(angle) * float(rays.size[i]) * pulse
            outline = [
                (origin[0] - px * 0.1, origin[1] - py * 0.1),
                (origin[0] + px * 0.1, origin[1] + py * 0.1),
                (end[0] + px, end[1] + py),
                (end[0] - px, end[1] - py),
            ]
            alpha = float(rays.alpha[i]) * pulse
            surface.linear_gradient(outline, origin, end,
                                    [(GOLDEN_LIGHT, alpha), (WARM_GOLD, alpha * 0.5), (WARM_GOLD, 0.0)],
                                    additive=True)

    def _draw_stars(self, surface, t):
        stars = self.stars
        for i in range(stars.count):
            x, y = float(stars.x[i]), float(stars.y[i])
            twinkle = math.sin(t * float(stars.freq[i]) + float(stars.phase[i])) * 0.5 + 0.5
            size = float(stars.size[i]) * (0.5 + twinkle * 0.5)
            surface.radial_gradient((x, y), size * 3.0,
                                    [(WHITE, twinkle * 0.9), (GOLDEN_LIGHT, twinkle * 0.5), (GOLDEN_LIGHT, 0.0)])
            reach = size * 2.0
            surface.line((x - reach, y), (x + reach, y), WHITE, alpha=twinkle * 0.8)
            surface.line((x, y - reach), (x, y + reach), WHITE, alpha=twinkle * 0.8)

    def _draw_mote(self, surface, pool, i, t):
        twinkle = math.sin(t * 3.0 + float(pool.phase[i])) * 0.3 + 0.7
        alpha = float(pool.alpha[i]) * twinkle
        surface.radial_gradient((float(pool.x[i]), float(pool.y[i])), float(pool.size[i]) * 3.0,
                                [(WHITE, alpha), (GOLDEN_LIGHT, alpha * 0.6), (GOLDEN_LIGHT, 0.0)],
                                additive=True)

    def _draw_cross(self, surface, cx, cy, t):
        pulse = math.sin(t * 1.5) * 0.1 + 1.0
        glow = math.sin(t * 2.0) * 0.3 + 0.7
        shimmer = math.sin(t * 4.0) * 0.5 + 0.5

        surface.radial_gradient((cx, cy), 180.0 * pulse,
                                [(WHITE, 0.15 * glow), (GOLDEN_LIGHT, 0.1 * glow), (GOLDEN_LIGHT, 0.0)])
        surface.radial_gradient((cx, cy), 120.0 * pulse,
                                [(GOLDEN_LIGHT, 0.35 * glow), (WARM_GOLD, 0.2 * glow), (WARM_GOLD, 0.0)])
        surface.radial_gradient((cx, cy), 70.0 * pulse,
                                [(WHITE, 0.6 * glow), (GOLDEN_LIGHT, 0.4 * glow), (GOLDEN_LIGHT, 0.0)])

        for i in range(12):
            angle = (i / 12.0) * TAU + t * 0.3
            length = (60.0 + math.sin(t * 3.0 + i * 0.5) * 20.0) * pulse
            alpha = (0.4 + math.sin(t * 2.0 + i * 0.8) * 0.2) * glow
            start = (cx + math.cos(angle) * 20.0 * pulse, cy + math.sin(angle) * 20.0 * pulse)
            end = (cx + math.cos(angle) * length, cy + math.sin(angle) * length)
            surface.line(start, end, GOLDEN_LIGHT, alpha=alpha, width=2.0, additive=True)

        half_w, half_h = 6.0 * pulse, 45.0 * pulse
        arm_half_w, arm_half_h = 32.5 * pulse, 6.0 * pulse
        arm_y = cy - 18.0 * pulse
        stops = [(CORNSILK, 1.0), (GOLDEN_LIGHT, 1.0), (WARM_GOLD, 1.0)]
        upright = rounded_rect_points(cx - half_w, cy - half_h, cx + half_w, cy + half_h, 3.0)
        beam = rounded_rect_points(cx - arm_half_w, arm_y - arm_half_h, cx + arm_half_w, arm_y + arm_half_h, 3.0)
        surface.linear_gradient(upright, (cx - half_w, cy), (cx + half_w, cy), stops)
        surface.linear_gradient(beam, (cx, arm_y - arm_half_h), (cx, arm_y + arm_half_h), stops)
        surface.line((cx - half_w * 0.3, cy - half_h * 0.9), (cx - half_w * 0.3, cy + half_h * 0.9),
                     WHITE, alpha=0.4 + shimmer * 0.4, width=1.5)
        surface.circle((cx, arm_y), 4.0 * pulse, WHITE, alpha=0.5 + shimmer * 0.5, additive=True)

    def _draw_doves(self, surface, t):
        doves = self.doves
        for i in range(doves.count):
            x, y, size = float(doves.x[i]), float(doves.y[i]), float(doves.size[i])
            flap = math.sin(t * 8.0 + float(doves.phase[i])) * 0.4
            surface.path(ellipse_points(x, y, size * 0.4, size * 0.15, 16), DIVINE_WHITE, alpha=0.9)
            surface.circle((x + size * 0.35, y - size * 0.05), size * 0.15, DIVINE_WHITE, alpha=0.9)
            left = quad_curve((x - size * 0.1, y), (x - size * 0.5, y - size * (0.5 + flap)),
                              (x - size * 0.3, y - size * 0.1))
            right = quad_curve((x + size * 0.1, y), (x + size * 0.2, y - size * (0.4 + flap * 0.8)),
                               (x + size * 0.05, y - size * 0.08))
            surface.path(left, DIVINE_WHITE, alpha=0.9, width=size * 0.08, closed=False)
            surface.path(right, DIVINE_WHITE, alpha=0.9, width=size * 0.06, closed=False)
            surface.line((x - size * 0.4, y), (x - size * 0.6, y + size * 0.1), DIVINE_WHITE,
                         alpha=0.9, width=size * 0.06)
            surface.radial_gradient((x, y), size, [(WHITE, 0.3), (WHITE, 0.0)])
