# effects/premium.py
"""
Large, soft, additively blended orbs drifting behind the premium screen.
"""
from constants import ORB_COLORS
from particle import ParticleKind, ParticlePool
from simulation import ParticleSystem


class PremiumOrbSystem(ParticleSystem):
    """Orbs wrap around to the opposite edge once fully off screen."""
    name = "premium_orbs"
    DEFAULTS = {
        'count': 6,
        'radius': [100.0, 250.0],
        'drift': 15.0,
    }

    def _build(self):
        self.pool = ParticlePool(int(self.params['count']), name=self.name)

    def populations(self):
        return [(self.name, self.pool.count, self.pool.capacity)]

    def _seed(self, width, height):
        rng = self.rng
        n = self.pool.capacity
        low, high = self.params['radius']
        drift = float(self.params['drift'])
        self.pool.spawn_many(
            n,
            x=rng.uniform(0.0, width, n),
            y=rng.uniform(0.0, height, n),
            size=rng.uniform(low, high, n),
            vx=rng.uniform(-drift, drift, n),
            vy=rng.uniform(-drift, drift, n),
            alpha=rng.uniform(0.1, 0.4, n),
            color=rng.integers(0, len(ORB_COLORS), n),
            kind=ParticleKind.ORB,
        )

    def _step(self, dt, width, height, t):
        pool = self.pool
        pool.integrate(dt)
        n = pool.count
        x, y, r = pool.x[:n], pool.y[:n], pool.size[:n]
        left, right = x < -r, x > width + r
        x[left] = width + r[left]
        x[right] = -r[right]
        above, below = y < -r, y > height + r
        y[above] = height + r[above]
        y[below] = -r[below]

    def _draw(self, surface, t):
        pool = self.pool
        for i in range(pool.count):
            color = ORB_COLORS[int(pool.color[i])]
            alpha = float(pool.alpha[i])
            surface.radial_gradient((float(pool.x[i]), float(pool.y[i])), float(pool.size[i]),
                                    [(color, alpha), (color, alpha * 0.5), (color, 0.0)], additive=True)
