# surface.py
"""
The primitive drawing interface the particle systems render through.

Systems never talk to a rendering library directly. They emit circles,
paths, lines and gradients to a DrawSurface, which the pygame visualizer
implements for the window and RecordingSurface implements for tests and
headless runs.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

Color = Tuple[int, int, int]
Point = Tuple[float, float]
# Gradient stops are (color, alpha) pairs spread evenly from the center (or
# the start point) to the edge.
GradientStops = Sequence[Tuple[Color, float]]

# --- Data Contracts ---
#
# class DrawSurface:
#   - circle(center, radius, color, alpha=1.0, width=0.0, additive=False)
#   - path(points, color, alpha=1.0, width=0.0, closed=True, additive=False)
#   - line(start, end, color, alpha=1.0, width=1.0, additive=False)
#   - radial_gradient(center, radius, stops, additive=False)
#   - linear_gradient(points, start, end, stops, additive=False)
#   - fill(color)
#     - width == 0 means filled, width > 0 means stroked.
#     - alpha is within [0, 1]; colors are RGB tuples of ints in [0, 255].
#   - at_depth(depth): context manager tagging every primitive emitted
#     inside it with a depth value.


class DrawSurface(ABC):
    """Receives primitive draw calls from the particle systems."""

    def __init__(self):
        self.depth: Optional[float] = None

    @contextmanager
    def at_depth(self, depth: float) -> Iterator["DrawSurface"]:
        previous = self.depth
        self.depth = float(depth)
        try:
            yield self
        finally:
            self.depth = previous

    @abstractmethod
    def fill(self, color: Color) -> None:
        """Clears the whole surface."""

    @abstractmethod
    def circle(self, center: Point, radius: float, color: Color, alpha: float = 1.0,
               width: float = 0.0, additive: bool = False) -> None:
        """Filled (width == 0) or stroked circle."""

    @abstractmethod
    def path(self, points: Sequence[Point], color: Color, alpha: float = 1.0,
             width: float = 0.0, closed: bool = True, additive: bool = False) -> None:
        """Filled polygon, or stroked polyline when width > 0."""

    @abstractmethod
    def line(self, start: Point, end: Point, color: Color, alpha: float = 1.0,
             width: float = 1.0, additive: bool = False) -> None:
        """Straight line segment."""

    @abstractmethod
    def radial_gradient(self, center: Point, radius: float, stops: GradientStops,
                        additive: bool = False) -> None:
        """Disc filled with a gradient from the center outwards."""

    @abstractmethod
    def linear_gradient(self, points: Sequence[Point], start: Point, end: Point,
                        stops: GradientStops, additive: bool = False) -> None:
        """Polygon filled with a gradient running from `start` to `end`."""


@dataclass(frozen=True)
class DrawCall:
    """One recorded primitive."""
    op: str
    args: Dict[str, Any] = field(default_factory=dict)
    depth: Optional[float] = None


class RecordingSurface(DrawSurface):
    """
    A DrawSurface that only remembers what was asked of it.
    """
    def __init__(self, width: float = 0.0, height: float = 0.0):
        super().__init__()
        self.width = width
        self.height = height
        self.calls: List[DrawCall] = []

    def _record(self, op: str, **args) -> None:
        self.calls.append(DrawCall(op=op, args=args, depth=self.depth))

    def fill(self, color):
        self._record('fill', color=color)

    def circle(self, center, radius, color, alpha=1.0, width=0.0, additive=False):
        self._record('circle', center=tuple(center), radius=radius, color=color,
                     alpha=alpha, width=width, additive=additive)

    def path(self, points, color, alpha=1.0, width=0.0, closed=True, additive=False):
        self._record('path', points=[tuple(p) for p in points], color=color,
                     alpha=alpha, width=width, closed=closed, additive=additive)

    def line(self, start, end, color, alpha=1.0, width=1.0, additive=False):
        self._record('line', start=tuple(start), end=tuple(end), color=color,
                     alpha=alpha, width=width, additive=additive)

    def radial_gradient(self, center, radius, stops, additive=False):
        self._record('radial_gradient', center=tuple(center), radius=radius,
                     stops=list(stops), additive=additive)

    def linear_gradient(self, points, start, end, stops, additive=False):
        self._record('linear_gradient', points=[tuple(p) for p in points],
                     start=tuple(start), end=tuple(end), stops=list(stops), additive=additive)

    def clear(self) -> None:
        self.calls.clear()

    def ops(self) -> Dict[str, int]:
        """Counts recorded calls per primitive."""
        counts: Dict[str, int] = {}
        for call in self.calls:
            counts[call.op] = counts.get(call.op, 0) + 1
        return counts

    def depths(self) -> List[float]:
        """Depth tags of the calls made inside `at_depth`, in call order."""
        return [call.depth for call in self.calls if call.depth is not None]
