# frame_clock.py
"""
Frame timing for the animation loop.

This module defines the FrameClock class, which turns raw frame timestamps
into a clamped delta time and an accumulated total time, plus a couple of
tick sources that yield timestamps. The systems never read a clock
themselves; they only see the (delta_time, total_time) samples produced
here, which keeps them testable without a display.
"""
import logging
import time
from typing import Iterator, Optional, Tuple

from constants import MAX_DELTA_TIME, NOMINAL_DELTA_TIME

# --- Data Contracts ---
#
# class FrameClock:
#   - tick(self, timestamp: float) -> Tuple[float, float]:
#     - Inputs:
#       - timestamp: float, seconds from any monotonic origin.
#     - Outputs: (delta_time, total_time).
#     - Invariants:
#       - The first sample returns NOMINAL_DELTA_TIME.
#       - 0 <= delta_time <= MAX_DELTA_TIME.
#       - total_time is the running sum of all returned delta_time values.
#
# fixed_ticks(dt: float, count: int, start: float = 0.0) -> Iterator[float]:
#   - Yields `count` timestamps spaced `dt` seconds apart.


class FrameClock:
    """
    Produces one clamped (delta_time, total_time) sample per display refresh.
    """
    def __init__(self, nominal_delta: float = NOMINAL_DELTA_TIME, max_delta: float = MAX_DELTA_TIME):
        self.nominal_delta = nominal_delta
        self.max_delta = max_delta
        self.last_timestamp: Optional[float] = None
        self.delta_time = 0.0
        self.total_time = 0.0
        self.frame_count = 0

    def tick(self, timestamp: float) -> Tuple[float, float]:
        """
        Samples the clock for a new frame.

        Args:
            timestamp (float): Current frame timestamp in seconds.

        Returns:
            Tuple[float, float]: The clamped delta time and the total time.
        """
        if self.last_timestamp is None:
            delta = self.nominal_delta
        else:
            delta = timestamp - self.last_timestamp
            # Clocks running backwards and stalls both collapse into the range.
            delta = min(max(delta, 0.0), self.max_delta)

        self.last_timestamp = timestamp
        self.delta_time = delta
        self.total_time += delta
        self.frame_count += 1
        return delta, self.total_time

    def tick_ns(self, timestamp_ns: int) -> Tuple[float, float]:
        """Samples the clock from a nanosecond timestamp."""
        return self.tick(timestamp_ns / 1_000_000_000)

    def reset(self) -> None:
        """Forgets the previous frame so the next sample is nominal again."""
        logging.debug(
            f"FrameClock reset after {self.frame_count} frames "
            f"({self.total_time:.2f}s of animation)."
        )
        self.last_timestamp = None
        self.delta_time = 0.0
        self.total_time = 0.0
        self.frame_count = 0


def fixed_ticks(dt: float, count: int, start: float = 0.0) -> Iterator[float]:
    """Yields `count` evenly spaced timestamps, for tests and headless runs."""
    for i in range(count):
        yield start + i * dt


def wall_clock_ticks() -> Iterator[float]:
    """Yields the monotonic wall clock every time the caller asks for a frame."""
    while True:
        yield time.perf_counter()
