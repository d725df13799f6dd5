# effects/petals.py
"""
Cherry blossom petals drifting down the Sakura screen.
"""
from constants import PETAL_COLORS, PETAL_VEIN_COLOR
from particle import ParticleKind
from shapes import teardrop_points, transform
from simulation import EmitterSystem
from spawn import Range


class SakuraSystem(EmitterSystem):
    """
    Petals fall at a constant speed with a slight constant drift and a slow
    spin. The screen starts already populated so it never opens empty.
    """
    name = "sakura"
    DEFAULTS = {
        'capacity': 50,
        'probability': 0.08,
        'initial_count': 40,
        'fall_speed': [80.0, 160.0],
        'drift': [-10.0, 10.0],
        'spin': [-30.0, 30.0],
    }
    margin = 50.0
    decay_rate = 0.0

    def _build(self):
        super()._build()
        p = self.params
        self.fall_speed = Range(*p['fall_speed'])
        self.drift = Range(*p['drift'])
        self.spin = Range(*p['spin'])
        self.draw_dispatch = {ParticleKind.PETAL: self._draw_petal}

    def _seed(self, width, height):
        count = self.policy.allowance(self.pool.count, int(self.params['initial_count']))
        for _ in range(count):
            self._spawn_petal(width, self.rng.uniform(0.0, height))

    def _emit(self, width, height, t):
        return self._spawn_petal(width, -self.margin)

    def _spawn_petal(self, width: float, y: float) -> int:
        rng = self.rng
        return self.pool.spawn(
            x=rng.uniform(0.0, width),
            y=y,
            vx=self.drift.sample(rng),
            vy=self.fall_speed.sample(rng),
            rotation=rng.uniform(-20.0, 20.0),
            spin=self.spin.sample(rng),
            size=rng.uniform(6.0, 16.0),
            alpha=rng.uniform(0.5, 0.8),
            color=int(rng.integers(0, len(PETAL_COLORS))),
            kind=ParticleKind.PETAL,
        )

    def _draw_petal(self, surface, pool, i, t):
        x, y = float(pool.x[i]), float(pool.y[i])
        size = float(pool.size[i])
        alpha = float(pool.alpha[i])
        rotation = float(pool.rotation[i])
        outline = transform(teardrop_points(size, 0.8, 0.5), x, y, rotation)
        surface.path(outline, PETAL_COLORS[int(pool.color[i])], alpha=alpha)
        vein = transform([(0.0, -size * 0.8), (0.0, size * 0.3)], x, y, rotation)
        surface.line(vein[0], vein[1], PETAL_VEIN_COLOR, alpha=alpha * 0.5, width=1.0)
