from __future__ import annotations

from typing import Optional

from common.config import OrientationConfig
from common.types import SessionState
from common.utils import normalize_degrees


class OrientationSmoother:
    """
    Exponential low-pass filter on the compass heading.

        smoothed += (target - smoothed) / k

    When the two headings are more than 180 deg apart, 360 is added to the
    smaller one first so the filter takes the shorter way around 0/360.

    k is `divisor`, or max(1, fps * fps_fraction) when fps_fraction is set.
    While the camera initializes, initial_heading follows the smoothed value;
    lock_in() freezes it for the rest of the session.
    """

    def __init__(self, divisor: float = 20.0, fps_fraction: Optional[float] = None):
        if divisor < 1.0:
            raise ValueError("divisor must be >= 1")
        self.divisor = float(divisor)
        self.fps_fraction = fps_fraction

    @classmethod
    def from_config(cls, cfg: OrientationConfig) -> "OrientationSmoother":
        return cls(divisor=cfg.smoothing_divisor, fps_fraction=cfg.smoothing_fps_fraction)

    def k(self, fps: float = 0.0) -> float:
        if self.fps_fraction and fps > 0:
            return max(1.0, fps * self.fps_fraction)
        return self.divisor

    @staticmethod
    def seed(state: SessionState, heading: float) -> None:
        h = normalize_degrees(heading)
        state.raw_heading = h
        state.smoothed_heading = h
        state.initial_heading = h
        state.initial_camera_angle = normalize_degrees(360.0 - h)

    def step(self, smoothed: float, target: float, fps: float = 0.0) -> float:
        """One filter step; returns the new smoothed heading in [0, 360)."""
        if abs(target - smoothed) > 180.0:
            if target < smoothed:
                target += 360.0
            else:
                smoothed += 360.0
        smoothed += (target - smoothed) / self.k(fps)
        return normalize_degrees(smoothed)

    def update(self, state: SessionState, fps: float = 0.0) -> float:
        state.smoothed_heading = self.step(state.smoothed_heading, state.raw_heading, fps)
        if state.camera_initializing:
            state.initial_heading = state.smoothed_heading
            state.initial_camera_angle = normalize_degrees(360.0 - state.initial_heading)
        return state.smoothed_heading

    @staticmethod
    def lock_in(state: SessionState) -> None:
        state.camera_initializing = False
        state.initial_heading = state.smoothed_heading
        state.initial_camera_angle = normalize_degrees(360.0 - state.initial_heading)

    @staticmethod
    def anchor_yaw(state: SessionState) -> float:
        """Scene anchor yaw in degrees: follows the filter until lock-in, then frozen."""
        heading = state.smoothed_heading if state.camera_initializing else state.initial_heading
        return 360.0 - heading
