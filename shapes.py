# shapes.py
"""
Geometry helpers that flatten the decorative shapes into point lists.

The DrawSurface only knows circles, paths and lines, so curved outlines
(petals, leaves, dove wings, orbit ellipses) are sampled here into
polylines before they are emitted.
"""
import math
from typing import List, Sequence, Tuple

from constants import CURVE_SEGMENTS, ELLIPSE_SEGMENTS

Point = Tuple[float, float]

TAU = 2.0 * math.pi


def quad_curve(p0: Point, control: Point, p1: Point, segments: int = CURVE_SEGMENTS) -> List[Point]:
    """Samples a quadratic Bezier curve, endpoints included."""
    points = []
    for i in range(segments + 1):
        t = i / segments
        u = 1.0 - t
        x = u * u * p0[0] + 2 * u * t * control[0] + t * t * p1[0]
        y = u * u * p0[1] + 2 * u * t * control[1] + t * t * p1[1]
        points.append((x, y))
    return points


def transform(points: Sequence[Point], cx: float, cy: float, degrees: float = 0.0,
              scale_x: float = 1.0) -> List[Point]:
    """Rotates local points by `degrees`, mirrors by scale_x, then moves them to (cx, cy)."""
    rad = math.radians(degrees)
    cos_a, sin_a = math.cos(rad), math.sin(rad)
    out = []
    for x, y in points:
        x *= scale_x
        out.append((cx + x * cos_a - y * sin_a, cy + x * sin_a + y * cos_a))
    return out


def hexagon_points(cx: float, cy: float, size: float, rotation: float, dy: float = 0.0) -> List[Point]:
    """Six corners of a hexagon, rotation in radians, flat side up at rotation 0."""
    return [
        (cx + math.cos(rotation + i * TAU / 6 - TAU / 12) * size,
         cy + math.sin(rotation + i * TAU / 6 - TAU / 12) * size + dy)
        for i in range(6)
    ]


def ellipse_points(cx: float, cy: float, rx: float, ry: float,
                   segments: int = ELLIPSE_SEGMENTS) -> List[Point]:
    return [
        (cx + math.cos(i * TAU / segments) * rx, cy + math.sin(i * TAU / segments) * ry)
        for i in range(segments)
    ]


def teardrop_points(size: float, bulge: float, tail: float = 1.0) -> List[Point]:
    """
    Petal/leaf outline in local coordinates, tip at (0, -size).

    `bulge` is the sideways reach of the control points and `tail` the
    distance of the stem end below the center, both as fractions of size.
    """
    tip = (0.0, -size)
    tail = (0.0, size * tail)
    right = quad_curve(tip, (size * bulge, -size * 0.3), tail)
    left = quad_curve(tail, (-size * bulge, -size * 0.3), tip)
    return right + left[1:-1]


def rect_points(width: float, height: float) -> List[Point]:
    """Axis-aligned rectangle centered on the origin."""
    hw, hh = width / 2.0, height / 2.0
    return [(-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)]


def rounded_rect_points(left: float, top: float, right: float, bottom: float,
                        radius: float, segments: int = 4) -> List[Point]:
    """Outline of a rectangle whose corners are quarter circles."""
    radius = max(0.0, min(radius, (right - left) / 2.0, (bottom - top) / 2.0))
    corners = [
        (right - radius, top + radius, -math.pi / 2),
        (right - radius, bottom - radius, 0.0),
        (left + radius, bottom - radius, math.pi / 2),
        (left + radius, top + radius, math.pi),
    ]
    points = []
    for cx, cy, start in corners:
        for i in range(segments + 1):
            angle = start + (math.pi / 2) * i / segments
            points.append((cx + math.cos(angle) * radius, cy + math.sin(angle) * radius))
    return points


def radial_arms(cx: float, cy: float, length: float, arms: int, rotation_deg: float = 0.0) -> List[Point]:
    """End points of `arms` evenly spaced rays around a center."""
    step = 360.0 / arms
    ends = []
    for i in range(arms):
        angle = math.radians(i * step + rotation_deg)
        ends.append((cx + math.cos(angle) * length, cy + math.sin(angle) * length))
    return ends


def lerp_point(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)
