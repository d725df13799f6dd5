# effects/leaves.py
"""
The growing plant screen: a tree that grows through five stages and sheds
leaves from its crown.
"""
import math
from enum import IntEnum
from typing import Tuple

import numpy as np

from constants import (
    BRANCH_COLOR, FOLIAGE_COLORS, GROUND_COLORS, LEAF_COLORS, SEED_COLOR, TRUNK_COLORS,
)
from particle import ParticleKind
from shapes import ellipse_points, teardrop_points, transform
from simulation import EmitterSystem, ParticleSystem
from spawn import Range


class TreeStage(IntEnum):
    SEED = 0
    SPROUT = 1
    SAPLING = 2
    YOUNG_TREE = 3
    FULL_TREE = 4

    @property
    def progress(self) -> float:
        return self.value / 4.0


GROUND_OFFSET = 20.0
TRUNK_SHARE = 0.6


def crown(width: float, height: float, growth: float = 1.0) -> Tuple[float, float]:
    """Center x and top y of the tree crown for a surface and growth level."""
    trunk_height = height * TRUNK_SHARE * growth
    return width / 2.0, height - GROUND_OFFSET - trunk_height - GROUND_OFFSET


def stage_at(t: float, stage_time: float) -> TreeStage:
    """The stage reached after `t` seconds of growth."""
    return TreeStage(min(int(t / stage_time), TreeStage.FULL_TREE))


class TreeSystem(ParticleSystem):
    """
    Draws the tree itself. It owns no particles: the stage advances every
    `stage_time` seconds and the drawn growth eases towards it.
    """
    name = "tree"
    DEFAULTS = {
        'stage_time': 3.0,
        'ease_time': 0.8,
    }

    def _build(self):
        self.stage_time = float(self.params['stage_time'])
        self.ease_time = float(self.params['ease_time'])
        self.stage = TreeStage.SEED
        self.growth = 0.0

    def _step(self, dt, width, height, t):
        self.stage = stage_at(t, self.stage_time)
        target = self.stage.progress
        step = dt / self.ease_time
        if self.growth < target:
            self.growth = min(target, self.growth + step)
        else:
            self.growth = max(target, self.growth - step)

    def _draw(self, surface, t):
        width, height = self.width, self.height
        cx = width / 2.0
        ground = height - GROUND_OFFSET
        growth = self.growth
        # Three second ease-in-out sway between -2 and 2.
        sway = -2.0 * math.cos(t * math.pi / 3.0)

        surface.path(ellipse_points(cx, ground, 60.0, 10.0), GROUND_COLORS[1], alpha=0.5)
        surface.path(ellipse_points(cx, ground, 40.0, 6.0), GROUND_COLORS[0], alpha=0.8)

        if self.stage == TreeStage.SEED:
            surface.path(ellipse_points(cx, ground - 7.0, 8.0, 5.0), SEED_COLOR)
            return

        trunk_height = height * TRUNK_SHARE * growth
        trunk_width = 8.0 + growth * 12.0
        top = ground - trunk_height
        trunk = [
            (cx - trunk_width / 2.0, ground),
            (cx - trunk_width / 3.0 + sway * 0.3, top),
            (cx + trunk_width / 3.0 + sway * 0.3, top),
            (cx + trunk_width / 2.0, ground),
        ]
        surface.linear_gradient(trunk, (cx, top), (cx, ground),
                                [(TRUNK_COLORS[0], 1.0), (TRUNK_COLORS[1], 1.0)])

        if self.stage < TreeStage.SAPLING:
            return

        levels = {TreeStage.SAPLING: 2, TreeStage.YOUNG_TREE: 3}.get(self.stage, 4)
        clusters = []
        for level in range(levels):
            branch_y = ground - trunk_height * (0.4 + level * 0.18)
            length = (40.0 + level * 15.0) * growth
            angle = 35.0 + level * 5.0
            for side in (-1, 1):
                rad = math.radians(angle * side + sway * 2.0)
                end = (cx + sway * 0.5 + math.cos(rad) * length * side,
                       branch_y - math.sin(math.radians(angle)) * length * 0.5)
                surface.line((cx + sway * 0.3, branch_y), end, BRANCH_COLOR, width=4.0 - level * 0.5)
                clusters.append((end, 25.0 - level * 3.0))
        clusters.append(((cx + sway, top - 20.0), 35.0))

        for center, radius in clusters:
            surface.radial_gradient(center, radius * 1.5, [(FOLIAGE_COLORS[1], 0.3), (FOLIAGE_COLORS[1], 0.0)])
            surface.radial_gradient(center, radius, [(color, 1.0) for color in FOLIAGE_COLORS])


class LeafSystem(EmitterSystem):
    """
    Leaves drop from the crown once the tree is full grown: one initial
    burst, then small batches. They sway while falling and fade out over the
    last 50 px above the ground.
    """
    name = "leaves"
    DEFAULTS = {
        'capacity': 60,
        'interval': 1.5,
        'batch': 3,
        'initial_burst': 12,
        'stage_time': 3.0,
        'fall_speed': [30.0, 70.0],
        'sway': 40.0,
        'fade_band': 50.0,
        'fade_rate': 2.0,
    }
    # Leaves are only removed by fading out or reaching the ground.
    margin = None
    decay_rate = 0.0

    def _build(self):
        super()._build()
        p = self.params
        self.fall_speed = Range(*p['fall_speed'])
        self.sway = float(p['sway'])
        self.fade_band = float(p['fade_band'])
        self.fade_rate = float(p['fade_rate'])
        self.stage_time = float(p['stage_time'])
        self.shed = False
        self.draw_dispatch = {ParticleKind.LEAF: self._draw_leaf}

    def _step(self, dt, width, height, t):
        if not self.shed and stage_at(t, self.stage_time) == TreeStage.FULL_TREE:
            self.shed = True
            self.policy.reset()
            self.spawn_burst(*crown(width, height, TreeStage.FULL_TREE.progress),
                             int(self.params['initial_burst']))
        super()._step(dt, width, height, t)

    def spawn_burst(self, center_x: float, top_y: float, count: int = 8) -> int:
        """Drops up to `count` leaves around the crown at once; bounded by capacity."""
        created = self._burst(center_x, top_y, count)
        self.spawned_total += created
        return created

    def _burst(self, center_x: float, top_y: float, count: int) -> int:
        count = self.policy.allowance(self.pool.count, count)
        rng = self.rng
        created = self.pool.spawn_many(
            count,
            x=center_x + rng.uniform(-60.0, 60.0, count),
            y=top_y + rng.uniform(0.0, 60.0, count),
            vy=self.fall_speed.sample(rng, count),
            rotation=rng.uniform(0.0, 360.0, count),
            spin=rng.uniform(-90.0, 90.0, count),
            size=rng.uniform(6.0, 14.0, count),
            phase=rng.uniform(0.0, 2.0 * math.pi, count),
            color=rng.integers(0, len(LEAF_COLORS), count),
            kind=ParticleKind.LEAF,
        )
        return created

    def _emit(self, width, height, t):
        if not self.shed:
            return -1
        return self._burst(*crown(width, height, TreeStage.FULL_TREE.progress), 1)

    def _apply_physics(self, pool, dt, t, width, height):
        n = pool.count
        x, y = pool.x[:n], pool.y[:n]
        alpha, life = pool.alpha[:n], pool.life[:n]
        x += np.sin(t * 2.0 + pool.phase[:n]) * self.sway * dt
        fading = y > height - self.fade_band
        alpha[fading] -= dt * self.fade_rate
        np.clip(alpha, 0.0, 1.0, out=alpha)
        life[(alpha <= 0.0) | (y > height)] = 0.0

    def _draw_leaf(self, surface, pool, i, t):
        outline = transform(
            teardrop_points(float(pool.size[i]), 0.6),
            float(pool.x[i]), float(pool.y[i]), float(pool.rotation[i]),
        )
        surface.path(outline, LEAF_COLORS[int(pool.color[i])], alpha=float(pool.alpha[i]))
