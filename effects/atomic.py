# effects/atomic.py
"""
Hexagonal "atoms" with electron orbits, joined by pulsing energy beams,
shedding small hexagonal particles over a faint hex grid.

Atoms and particles both carry a depth (z <= 0, further away is more
negative). They are drawn together in ascending depth order and shrink
with distance, which is all the 3-D there is.
"""
import math
from typing import List, Tuple

from constants import ATOM_COLORS, HEX_GRID_COLOR, WHITE
from particle import ParticleKind, ParticlePool
from shapes import TAU, hexagon_points, lerp_point
from simulation import ParticleSystem
from spawn import Range

# (x fraction, y fraction, z, size, rotation speed, rotation phase,
#  pulse phase, color index, electron count)
ATOM_LAYOUT = (
    (0.50, 0.26, 0.0, 55.0, 0.30, 0.0, 0.0, 0, 6),
    (0.15, 0.15, -30.0, 28.0, -0.40, 0.5, 1.0, 1, 3),
    (0.85, 0.12, -20.0, 32.0, 0.35, 1.0, 2.0, 2, 4),
    (0.12, 0.45, -25.0, 24.0, -0.50, 2.0, 0.5, 3, 2),
    (0.90, 0.38, -15.0, 26.0, 0.45, 1.5, 1.5, 4, 3),
    (0.30, 0.08, -40.0, 20.0, 0.60, 0.3, 2.5, 0, 0),
    (0.70, 0.48, -35.0, 22.0, -0.55, 2.5, 0.8, 1, 0),
)

# (from atom, to atom, pulse phase, color index)
BEAMS = (
    (0, 1, 0.0, 0),
    (0, 2, 0.5, 2),
    (0, 3, 1.0, 3),
    (0, 4, 1.5, 4),
    (1, 5, 2.0, 1),
    (2, 6, 2.5, 2),
)

GRID_SPACING = 60.0
GRID_HEX_SIZE = 15.0
DEPTH_RANGE = 100.0


def depth_scale(z: float, strength: float) -> float:
    """Size multiplier for depth z; z = -100 shrinks by `strength`."""
    return 1.0 - (z / -DEPTH_RANGE) * strength


def dashes(start: Tuple[float, float], end: Tuple[float, float], dash: float, gap: float,
           offset: float = 0.0) -> List[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """Splits a segment into dash segments, the pattern shifted by `offset`."""
    length = math.hypot(end[0] - start[0], end[1] - start[1])
    if length <= 0.0:
        return []
    period = dash + gap
    position = -(offset % period)
    segments = []
    while position < length:
        a = max(position, 0.0)
        b = min(position + dash, length)
        if b > a:
            segments.append((lerp_point(start, end, a / length), lerp_point(start, end, b / length)))
        position += period
    return segments


def draw_hex_prism(surface, cx: float, cy: float, size: float, rotation: float, depth: float,
                   color, alpha: float, t: float) -> None:
    """A hexagon extruded downwards by `depth` px with shaded sides and a lit top."""
    top = hexagon_points(cx, cy, size, rotation)
    bottom = hexagon_points(cx, cy, size, rotation, dy=depth)
    for i in range(6):
        j = (i + 1) % 6
        side = [top[i], top[j], bottom[j], bottom[i]]
        shade = min(max(math.cos(rotation + i * TAU / 6) * 0.3 + 0.7, 0.4), 1.0)
        surface.path(side, color, alpha=alpha * 0.5 * shade)
        surface.path(side, color, alpha=alpha * 0.3, width=1.0)

    surface.radial_gradient((cx - size * 0.2, cy - size * 0.2), size * 1.2,
                            [(WHITE, alpha * 0.4), (color, alpha * 0.8), (color, alpha * 0.6)])
    surface.path(top, color, alpha=alpha, width=2.0)
    glow = math.sin(t * 3.0) * 0.2 + 0.8
    surface.path(hexagon_points(cx, cy, size * 0.6, rotation), WHITE, alpha=alpha * 0.2 * glow, width=1.0)


class HexAtomicSystem(ParticleSystem):
    name = "atomic"
    depth_sorted = True
    DEFAULTS = {
        'capacity': 25,
        'probability': 0.12,
        'particle_speed': [20.0, 60.0],
        'particle_size': [4.0, 12.0],
        'particle_decay': 0.35,
    }

    def _build(self):
        p = self.params
        self.policy = self._policy('particles')
        self.particle_speed = Range(*p['particle_speed'])
        self.particle_size = Range(*p['particle_size'])
        self.particle_decay = float(p['particle_decay'])
        self.atoms = ParticlePool(len(ATOM_LAYOUT), name="atomic.atoms")
        self.particles = ParticlePool(self.policy.capacity, name="atomic.particles")

    def populations(self):
        return [
            ('atoms', self.atoms.count, self.atoms.capacity),
            ('particles', self.particles.count, self.particles.capacity),
        ]

    def _seed(self, width, height):
        for fx, fy, z, size, spin, rotation, pulse, color, electrons in ATOM_LAYOUT:
            self.atoms.spawn(
                x=width * fx, y=height * fy, z=z, size=size,
                spin=spin, rotation=rotation, phase=pulse,
                color=color, variant=electrons, kind=ParticleKind.HEXAGON,
            )

    def _step(self, dt, width, height, t):
        pool = self.particles
        pool.integrate(dt)
        pool.decay(dt, self.particle_decay)
        self._retire(pool, width, height)
        self._spawn_from(pool, self.policy, dt, self._emit)

    def _emit(self) -> int:
        if self.atoms.count == 0:
            return -1
        rng = self.rng
        atom = int(rng.integers(0, self.atoms.count))
        angle = rng.uniform(0.0, TAU)
        speed = self.particle_speed.sample(rng)
        return self.particles.spawn(
            x=float(self.atoms.x[atom]),
            y=float(self.atoms.y[atom]),
            z=float(self.atoms.z[atom]) + rng.uniform(-10.0, 10.0),
            rotation=rng.uniform(0.0, TAU),
            spin=rng.uniform(-2.0, 2.0),
            size=self.particle_size.sample(rng),
            vx=math.cos(angle) * speed,
            vy=math.sin(angle) * speed,
            life=1.0,
            color=int(rng.integers(0, len(ATOM_COLORS))),
            kind=ParticleKind.HEXAGON,
        )

    def draw_order(self) -> List[Tuple[float, str, int]]:
        """(z, population, index) for every atom and particle, back to front."""
        items = [(float(self.atoms.z[i]), 'atoms', i) for i in range(self.atoms.count)]
        items += [(float(self.particles.z[i]), 'particles', i) for i in range(self.particles.count)]
        items.sort(key=lambda item: item[0])
        return items

    def _draw(self, surface, t):
        self._draw_grid(surface, t)
        self._draw_beams(surface, t)
        for z, population, i in self.draw_order():
            with surface.at_depth(z):
                if population == 'atoms':
                    self._draw_atom(surface, i, t)
                else:
                    self._draw_particle(surface, i, t)

    def _draw_grid(self, surface, t):
        width, height = self.width, self.height
        row_step = GRID_SPACING * 0.866
        rows = int(height / row_step) + 2
        cols = int(width / GRID_SPACING) + 2
        center = (width / 2.0, height * 0.25)
        for row in range(rows):
            offset = 0.0 if row % 2 == 0 else GRID_SPACING * 0.5
            for col in range(cols):
                x = col * GRID_SPACING + offset
                y = row * row_step
                distance = math.hypot(x - center[0], y - center[1])
                pulse = math.sin(t * 1.5 - distance * 0.01) * 0.5 + 0.5
                surface.path(hexagon_points(x, y, GRID_HEX_SIZE, t * 0.1), HEX_GRID_COLOR,
                             alpha=0.03 * pulse, width=0.5)

    def _draw_beams(self, surface, t):
        atoms = self.atoms
        for start, end, phase, color_index in BEAMS:
            if start >= atoms.count or end >= atoms.count:
                continue
            a = (float(atoms.x[start]), float(atoms.y[start]))
            b = (float(atoms.x[end]), float(atoms.y[end]))
            color = ATOM_COLORS[color_index]
            alpha = 0.15 + math.sin(t * 3.0 + phase) * 0.1
            for dash_start, dash_end in dashes(a, b, 8.0, 8.0, t * 30.0):
                surface.line(dash_start, dash_end, color, alpha=alpha, width=1.5)
            pulse = lerp_point(a, b, (t * 0.5 + phase) % 1.0)
            surface.radial_gradient(pulse, 8.0, [(color, 0.8), (color, 0.3), (color, 0.0)])

    def _draw_particle(self, surface, i, t):
        pool = self.particles
        life = float(pool.life[i])
        scale = depth_scale(float(pool.z[i]), 0.3)
        draw_hex_prism(surface, float(pool.x[i]), float(pool.y[i]), float(pool.size[i]) * scale * life,
                       float(pool.rotation[i]), 3.0 * life, ATOM_COLORS[int(pool.color[i])], life * 0.7, t)

    def _draw_atom(self, surface, i, t):
        atoms = self.atoms
        x, y = float(atoms.x[i]), float(atoms.y[i])
        color = ATOM_COLORS[int(atoms.color[i])]
        scale = depth_scale(float(atoms.z[i]), 0.2)
        rotation = t * float(atoms.spin[i]) + float(atoms.rotation[i])
        pulse = 1.0 + math.sin(t * 2.0 + float(atoms.phase[i])) * 0.08
        size = float(atoms.size[i]) * pulse * scale
        electrons = int(atoms.variant[i])

        surface.radial_gradient((x, y), size * 1.8, [(color, 0.3 * scale), (color, 0.1 * scale), (color, 0.0)])

        for orbit in range(min(electrons, 3)):
            orbit_size = size * (1.3 + orbit * 0.35)
            orbit_rotation = rotation * (1.0 - orbit * 0.2) + orbit * 0.5
            surface.path(hexagon_points(x, y, orbit_size, orbit_rotation), color,
                         alpha=0.2 * scale, width=1.5 * scale)
            on_orbit = min(2, electrons) if orbit == 0 else min(3, electrons - 2)
            for e in range(on_orbit):
                angle = orbit_rotation + (e / on_orbit) * TAU
                for step in range(1, 5):
                    trail_angle = angle - step * 0.12
                    surface.circle((x + math.cos(trail_angle) * orbit_size * 0.9,
                                    y + math.sin(trail_angle) * orbit_size * 0.9),
                                   (3.0 - step * 0.4) * scale, color,
                                   alpha=(1.0 - step * 0.22) * 0.5 * scale)
                surface.radial_gradient((x + math.cos(angle) * orbit_size * 0.9,
                                         y + math.sin(angle) * orbit_size * 0.9),
                                        4.0 * scale, [(WHITE, 1.0), (color, 1.0)])

        draw_hex_prism(surface, x, y, size, rotation, 8.0 * scale, color, 1.0, t)
        draw_hex_prism(surface, x, y, size * 0.5, -rotation * 1.5, 4.0 * scale, WHITE, 0.8, t)
        surface.radial_gradient((x, y), size * 0.2, [(WHITE, 1.0), (color, 1.0), (color, 0.5)])
