# effects/universe.py
"""
A solar system seen at a shallow angle: twinkling stars, occasional
shooting stars and planets on flattened orbits around a glowing sun.

Planets are drawn back to front. A planet's depth is the sine of its orbit
angle, so bodies on the far half of their orbit pass behind the sun and
appear slightly smaller.
"""
import math
from dataclasses import dataclass, field
from typing import List, Tuple

from constants import BLACK, PLANET_RING_COLOR, SUN_COLORS, WHITE
from particle import ParticleKind, ParticlePool
from shapes import ellipse_points
from simulation import ParticleSystem
from spawn import Range, SpawnPolicy, log_policy

# Full orbit of the reference clock every 20 seconds.
ORBIT_DEGREES_PER_SECOND = 18.0
ORBIT_TILT = 0.2
MOON_TILT = 0.25
# Planet sizes are authored for a 400 px wide screen.
REFERENCE_WIDTH = 400.0


@dataclass(frozen=True)
class Moon:
    orbit_radius: float
    size: float
    color: Tuple[int, int, int]
    orbit_speed: float
    initial_angle: float


@dataclass(frozen=True)
class Planet:
    orbit_radius: float  # fraction of the screen width
    size: float
    color: Tuple[int, int, int]
    orbit_speed: float
    initial_angle: float
    ring: bool = False
    moons: Tuple[Moon, ...] = field(default_factory=tuple)


PLANETS = (
    Planet(0.18, 10.0, (176, 176, 176), 2.5, 0.0),
    Planet(0.28, 14.0, (224, 112, 32), 1.8, 120.0),
    Planet(0.38, 16.0, (64, 128, 255), 1.2, 240.0, moons=(Moon(24.0, 4.0, (192, 192, 192), 3.0, 0.0),)),
    Planet(0.48, 20.0, (224, 192, 112), 0.8, 60.0, ring=True),
)


@dataclass
class PlacedPlanet:
    """Where a planet is on screen for one frame."""
    index: int
    planet: Planet
    x: float
    y: float
    depth: float
    size: float


class UniverseSystem(ParticleSystem):
    name = "universe"
    depth_sorted = True
    DEFAULTS = {
        'stars': 100,
        'shooting_capacity': 3,
        'shooting_probability': 0.02,
        'shooting_cooldown': 3.0,
        'shooting_speed': [300.0, 700.0],
        'shooting_length': [40.0, 100.0],
        'shooting_decay': 1.5,
        'depth_scale': 0.15,
    }

    def _build(self):
        p = self.params
        self.stars = ParticlePool(int(p['stars']), name="universe.stars")
        self.shooting = ParticlePool(int(p['shooting_capacity']), name="universe.shooting_stars")
        self.shooting_policy = SpawnPolicy(int(p['shooting_capacity']), probability=float(p['shooting_probability']))
        log_policy(self.name, 'shooting_stars', self.shooting_policy)
        self.shooting_speed = Range(*p['shooting_speed'])
        self.shooting_length = Range(*p['shooting_length'])
        self.cooldown = float(p['shooting_cooldown'])
        self.shooting_decay = float(p['shooting_decay'])
        self.depth_scale = float(p['depth_scale'])
        self.planets = PLANETS
        self.last_shooting_star = 0.0

    def populations(self):
        return [
            ('stars', self.stars.count, self.stars.capacity),
            ('shooting_stars', self.shooting.count, self.shooting.capacity),
        ]

    def _seed(self, width, height):
        rng = self.rng
        n = self.stars.capacity
        self.stars.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=rng.uniform(0.0, height, n),
            size=rng.uniform(0.5, 2.5, n),
            freq=rng.uniform(1.0, 3.0, n),
            phase=rng.uniform(0.0, 2.0 * math.pi, n),
            kind=ParticleKind.DISC,
        )

    def _step(self, dt, width, height, t):
        pool = self.shooting
        pool.integrate(dt)
        pool.decay(dt, self.shooting_decay)
        n = pool.count
        pool.alpha[:n] = pool.life[:n].clip(0.0, 1.0)
        self._retire(pool, width, height, margin=0.0)

        if t - self.last_shooting_star > self.cooldown:
            if self.shooting_policy.request(pool.count, dt, self.rng):
                self.last_shooting_star = t
                self._launch_shooting_star(width, height)

    def _launch_shooting_star(self, width: float, height: float) -> None:
        rng = self.rng
        angle = math.radians(rng.uniform(20.0, 50.0))
        speed = self.shooting_speed.sample(rng)
        index = self.shooting.spawn(
            x=rng.uniform(0.0, width * 0.8),
            y=rng.uniform(0.0, height * 0.3),
            vx=math.cos(angle) * speed,
            vy=math.sin(angle) * speed,
            rotation=math.degrees(angle),
            size=self.shooting_length.sample(rng),
            life=1.0,
            kind=ParticleKind.STREAK,
        )
        if index >= 0:
            self.spawned_total += 1

    def center(self) -> Tuple[float, float]:
        return self.width / 2.0, self.height * 0.28

    def place_planets(self, t: float) -> List[PlacedPlanet]:
        """Positions of every planet at time t, sorted back to front."""
        cx, cy = self.center()
        orbit_angle = (t * ORBIT_DEGREES_PER_SECOND) % 360.0
        scale = self.width / REFERENCE_WIDTH
        placed = []
        for index, planet in enumerate(self.planets):
            radius = planet.orbit_radius * self.width
            angle = math.radians(planet.initial_angle + orbit_angle * planet.orbit_speed)
            depth = math.sin(angle)
            placed.append(PlacedPlanet(
                index=index,
                planet=planet,
                x=cx + math.cos(angle) * radius,
                y=cy + depth * radius * ORBIT_TILT,
                depth=depth,
                size=planet.size * scale * (1.0 + depth * self.depth_scale),
            ))
        placed.sort(key=lambda p: p.depth)
        return placed

    def _draw(self, surface, t):
        stars = self.stars
        for i in range(stars.count):
            twinkle = (math.sin(t * float(stars.freq[i]) + float(stars.phase[i])) + 1.0) / 2.0
            surface.circle((float(stars.x[i]), float(stars.y[i])), float(stars.size[i]), WHITE,
                           alpha=0.3 + twinkle * 0.7)

        shooting = self.shooting
        for i in range(shooting.count):
            angle = math.radians(float(shooting.rotation[i]))
            head = (float(shooting.x[i]), float(shooting.y[i]))
            length = float(shooting.size[i])
            tail = (head[0] - math.cos(angle) * length, head[1] - math.sin(angle) * length)
            alpha = float(shooting.alpha[i])
            surface.linear_gradient([head, tail], head, tail,
                                    [(WHITE, alpha), (WHITE, alpha * 0.5), (WHITE, 0.0)])

        cx, cy = self.center()
        for planet in self.planets:
            radius = planet.orbit_radius * self.width
            surface.path(ellipse_points(cx, cy, radius, radius * ORBIT_TILT), WHITE, alpha=0.15, width=1.5)

        placed = self.place_planets(t)
        behind = [p for p in placed if p.depth < 0.0]
        in_front = [p for p in placed if p.depth >= 0.0]
        for body in behind:
            self._draw_planet(surface, body, t)
        with surface.at_depth(0.0):
            self._draw_sun(surface, cx, cy)
        for body in in_front:
            self._draw_planet(surface, body, t)

    def _draw_sun(self, surface, cx: float, cy: float) -> None:
        sun = self.width * 0.06
        surface.radial_gradient((cx, cy), sun, [(color, 1.0) for color in SUN_COLORS])
        surface.radial_gradient((cx, cy), sun * 1.6, [((255, 255, 0), 0.3), ((255, 255, 0), 0.0)],
                                additive=True)

    def _draw_planet(self, surface, body: PlacedPlanet, t: float) -> None:
        planet = body.planet
        x, y, size = body.x, body.y, body.size
        orbit_angle = (t * ORBIT_DEGREES_PER_SECOND) % 360.0
        with surface.at_depth(body.depth):
            if planet.ring:
                surface.path(ellipse_points(x, y, size * 1.8, size * 0.3), PLANET_RING_COLOR, alpha=0.6, width=3.0)

            surface.radial_gradient((x, y), size, [(planet.color, 1.0), (planet.color, 0.8), (planet.color, 0.6)])

            # Rotating cloud bands.
            rotation_phase = orbit_angle * (5.0 - body.index * 0.8)
            for band in range(3):
                phase = math.radians(rotation_phase + band * 40.0)
                facing = math.cos(phase)
                if facing <= -0.3:
                    continue
                band_x = x + math.sin(phase) * size * 0.7
                band_y = y + (band - 1) * size * 0.35
                surface.line((band_x, band_y - size * 0.5), (band_x, band_y + size * 0.5), planet.color,
                             alpha=min(max(facing + 0.3, 0.0), 1.0) * 0.25,
                             width=abs(facing) * size * 0.15 + 1.0)

            # Night side and specular highlight.
            surface.linear_gradient(ellipse_points(x, y, size, size), (x - size, y), (x + size, y),
                                    [(BLACK, 0.0), (BLACK, 0.5)])
            surface.circle((x - size * 0.4, y - size * 0.4), size * 0.2, WHITE, alpha=0.35)

            scale = self.width / REFERENCE_WIDTH
            for moon in planet.moons:
                angle = math.radians(moon.initial_angle + orbit_angle * moon.orbit_speed)
                orbit = moon.orbit_radius * scale
                center = (x + math.cos(angle) * orbit, y + math.sin(angle) * orbit * MOON_TILT)
                surface.radial_gradient(center, moon.size * scale, [(moon.color, 1.0), (moon.color, 0.7)])
