# effects/underwater.py
"""
An ocean scene: swaying light shafts, drifting plankton, rising bubbles and
fish that cross the screen and fade out near the far edge.
"""
import math

import numpy as np

from constants import BLACK, FISH_COLORS, WHITE
from particle import ParticleKind, ParticlePool
from shapes import TAU, quad_curve, transform
from simulation import ParticleSystem
from spawn import Range


class UnderwaterSystem(ParticleSystem):
    name = "underwater"
    DEFAULTS = {
        'bubble_capacity': 20,
        'bubble_probability': 0.1,
        'fish_capacity': 6,
        'fish_probability': 0.02,
        'rays': 5,
        'plankton': 30,
        'rise_speed': [20.0, 60.0],
        'swim_speed': [20.0, 50.0],
        'fade_distance': 80.0,
    }
    # Fish are born this far outside the side edges.
    fish_margin = 50.0

    def _build(self):
        p = self.params
        self.bubble_policy = self._policy('bubbles', capacity=p['bubble_capacity'],
                                          probability=p['bubble_probability'])
        self.fish_policy = self._policy('fish', capacity=p['fish_capacity'], probability=p['fish_probability'])
        self.rise_speed = Range(*p['rise_speed'])
        self.swim_speed = Range(*p['swim_speed'])
        self.fade_distance = float(p['fade_distance'])
        self.bubbles = ParticlePool(self.bubble_policy.capacity, name="underwater.bubbles")
        self.fish = ParticlePool(self.fish_policy.capacity, name="underwater.fish")
        self.rays = ParticlePool(int(p['rays']), name="underwater.rays")
        self.plankton = ParticlePool(int(p['plankton']), name="underwater.plankton")

    def populations(self):
        return [
            ('bubbles', self.bubbles.count, self.bubbles.capacity),
            ('fish', self.fish.count, self.fish.capacity),
            ('rays', self.rays.count, self.rays.capacity),
            ('plankton', self.plankton.count, self.plankton.capacity),
        ]

    def _seed(self, width, height):
        rng = self.rng
        for _ in range(self.bubbles.capacity):
            self._spawn_bubble(width, rng.uniform(0.0, height))
        for _ in range(self.fish.capacity):
            self._spawn_fish(width, height)

        n = self.rays.capacity
        self.rays.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            size=rng.uniform(40.0, 100.0, n),
            alpha=rng.uniform(0.05, 0.2, n),
            phase=rng.uniform(0.0, TAU, n),
            kind=ParticleKind.STREAK,
        )
        n = self.plankton.capacity
        self.plankton.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=rng.uniform(0.0, height, n),
            kind=ParticleKind.DISC,
        )

    def _spawn_bubble(self, width: float, y: float) -> int:
        rng = self.rng
        return self.bubbles.spawn(
            x=rng.uniform(0.0, width),
            y=y,
            vy=-self.rise_speed.sample(rng),
            size=rng.uniform(3.0, 11.0),
            phase=rng.uniform(0.0, TAU),
            freq=rng.uniform(1.0, 3.0),
            kind=ParticleKind.BUBBLE,
        )

    def _spawn_fish(self, width: float, height: float) -> int:
        rng = self.rng
        direction = 1 if rng.random() < 0.5 else -1
        return self.fish.spawn(
            x=-self.fish_margin if direction == 1 else width + self.fish_margin,
            y=rng.uniform(height * 0.2, height * 0.8),
            vx=self.swim_speed.sample(rng) * direction,
            size=rng.uniform(10.0, 25.0),
            color=int(rng.integers(0, len(FISH_COLORS))),
            variant=direction,
            kind=ParticleKind.FISH,
        )

    def _step(self, dt, width, height, t):
        bubbles = self.bubbles
        bubbles.integrate(dt)
        n = bubbles.count
        bubbles.x[:n] += np.sin(t * bubbles.freq[:n] + bubbles.phase[:n]) * 20.0 * dt
        popped = bubbles.y[:n] < -bubbles.size[:n] * 2.0
        bubbles.life[:n][popped] = 0.0
        self._retire(bubbles, width, height)

        fish = self.fish
        fish.integrate(dt)
        n = fish.count
        x = fish.x[:n]
        fish.y[:n] += np.sin(t * 2.0 + x * 0.01) * 10.0 * dt
        # Fade over the last fade_distance px before the exit edge.
        span = self.fade_distance + self.fish_margin
        rightward = fish.variant[:n] > 0
        fade_right = rightward & (x > width - self.fade_distance)
        fade_left = ~rightward & (x < self.fade_distance)
        alpha = fish.alpha[:n]
        alpha[fade_right] = np.clip((width + self.fish_margin - x[fade_right]) / span, 0.0, 1.0)
        alpha[fade_left] = np.clip((x[fade_left] + self.fish_margin) / span, 0.0, 1.0)
        self._retire(fish, width, height, margin=self.fish_margin, top_margin=height)

        self._spawn_from(bubbles, self.bubble_policy, dt, lambda: self._spawn_bubble(width, height + 20.0))
        self._spawn_from(fish, self.fish_policy, dt, lambda: self._spawn_fish(width, height))

    def _draw(self, surface, t):
        width, height = self.width, self.height

        rays = self.rays
        for i in range(rays.count):
            x, ray_width = float(rays.x[i]), float(rays.size[i])
            sway = math.sin(t * 0.5 + float(rays.phase[i])) * 30.0
            alpha = float(rays.alpha[i])
            shaft = [
                (x + sway, 0.0),
                (x + ray_width + sway, 0.0),
                (x + ray_width * 2.0 + sway * 0.5, height),
                (x - ray_width * 0.5 + sway * 0.5, height),
            ]
            surface.linear_gradient(shaft, (x, 0.0), (x, height),
                                    [(WHITE, alpha), (WHITE, alpha * 0.5), (WHITE, 0.0)])

        plankton = self.plankton
        for i in range(plankton.count):
            x = float(plankton.x[i])
            y = (float(plankton.y[i]) + t * 5.0) % height
            twinkle = (math.sin(t * 3.0 + x) + 1.0) / 2.0
            surface.circle((x, y), 1.5, WHITE, alpha=0.3 + twinkle * 0.3)

        bubbles = self.bubbles
        for i in range(bubbles.count):
            x, y, r = float(bubbles.x[i]), float(bubbles.y[i]), float(bubbles.size[i])
            surface.radial_gradient((x - r * 0.3, y - r * 0.3), r, [(WHITE, 0.4), (WHITE, 0.2), (WHITE, 0.0)])
            surface.circle((x, y), r, WHITE, alpha=0.3, width=1.0)
            surface.circle((x - r * 0.3, y - r * 0.3), r * 0.2, WHITE, alpha=0.6)

        fish = self.fish
        for i in range(fish.count):
            self._draw_fish(surface, i)

    def _draw_fish(self, surface, i):
        fish = self.fish
        x, y, size = float(fish.x[i]), float(fish.y[i]), float(fish.size[i])
        alpha = float(fish.alpha[i])
        color = FISH_COLORS[int(fish.color[i])]
        facing = 1.0 if fish.variant[i] > 0 else -1.0

        top = quad_curve((size, 0.0), (size * 0.3, -size * 0.4), (-size * 0.5, 0.0))
        bottom = quad_curve((-size * 0.5, 0.0), (size * 0.3, size * 0.4), (size, 0.0))
        surface.path(transform(top + bottom[1:-1], x, y, scale_x=facing), color, alpha=alpha)
        tail = [(-size * 0.4, 0.0), (-size * 0.9, -size * 0.3), (-size * 0.9, size * 0.3)]
        surface.path(transform(tail, x, y, scale_x=facing), color, alpha=0.8 * alpha)
        eye, pupil = transform([(size * 0.5, -size * 0.1), (size * 0.55, -size * 0.1)], x, y, scale_x=facing)
        surface.circle(eye, size * 0.12, WHITE, alpha=alpha)
        surface.circle(pupil, size * 0.06, BLACK, alpha=alpha)
