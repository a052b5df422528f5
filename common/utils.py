from __future__ import annotations

from typing import Deque
from dataclasses import dataclass, field
from collections import deque
import math
import time


@dataclass(slots=True)
class RateTimer:
    """
    Frame rate estimator over a sliding window of tick timestamps.

    Usage:
        rt = RateTimer(window=30)
        while True:
            # render...
            fps = rt.tick()

    `clock` is injectable so tests can drive it deterministically.
    """
    window: int = 30
    clock: object = time.perf_counter
    _times: Deque[float] = field(default_factory=deque)

    def __post_init__(self) -> None:
        self._times = deque(maxlen=max(2, self.window))

    def tick(self) -> float:
        """Record a tick; return the mean rate in Hz (0.0 until two ticks exist)."""
        t = self.clock()  # type: ignore[operator]
        self._times.append(t)
        if len(self._times) < 2:
            return 0.0
        dt = (self._times[-1] - self._times[0]) / (len(self._times) - 1)
        return 0.0 if dt <= 0 else 1.0 / dt


def clamp(v: float, lo: float, hi: float) -> float:
    return float(min(hi, max(lo, v)))


def normalize_degrees(angle: float) -> float:
    """Map a finite angle into [0, 360). Raises ValueError for inf/nan."""
    if not math.isfinite(angle):
        raise ValueError(f"angle must be finite, got {angle}")
    angle = math.fmod(angle, 360.0)
    if angle < 0.0:
        angle += 360.0
    # -1e-20 + 360.0 rounds to 360.0
    return 0.0 if angle >= 360.0 else angle
