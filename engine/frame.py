from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

import numpy as np

from common.config import FrameConfig
from common.geo import signed_offsets_m
from common.types import PlacedObject, SessionState, vec3
from common.utils import RateTimer, clamp
from engine.acquisition import AcquisitionStateMachine
from engine.orientation import OrientationSmoother
from scene.base import StatusSink


log = logging.getLogger(__name__)

# object name -> euler axis it spins about, 1 degree per frame
SPIN_AXES = {"SpinX": 0, "SpinY": 1, "SpinZ": 2}


def format_info(state: SessionState, count: int, last: Optional[PlacedObject]) -> str:
    """Diagnostic status line shown when the descriptor asks for ShowInfo."""
    walked = 0.0
    cur = state.current_coordinate
    org = state.original_coordinate
    if cur is not None and org is not None:
        east, north = signed_offsets_m(cur.latitude, cur.longitude, org.latitude, org.longitude)
        walked = math.hypot(east, north)
    parts = [f"D {walked:.2f}", f"N {count}"]
    if cur is not None:
        parts += [f"Lat {cur.latitude:.6f}", f"Lon {cur.longitude:.6f}"]
    parts += [f"H {state.smoothed_heading:.2f}", f"A {state.initial_camera_angle:.2f}"]
    if last is not None:
        x, y, z = (float(v) for v in last.target_position)
        parts.append(f"T {x:.2f} {y:.2f} {z:.2f}")
    return " ".join(parts)


class FrameDriver:
    """
    Per-frame work: heading smoothing, position interpolation, orientation and
    status text. Reads the session owned by the state machine; never drives
    acquisition itself.

    Interpolation factor per frame is lerp_rate / fps so convergence speed is
    roughly independent of frame rate.
    """

    def __init__(
        self,
        machine: AcquisitionStateMachine,
        status: StatusSink,
        *,
        smoother: Optional[OrientationSmoother] = None,
        config: Optional[FrameConfig] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        cfg = config or machine.config.frame
        self.machine = machine
        self.status = status
        self.smoother = smoother or machine.smoother
        self.lerp_rate = float(cfg.lerp_rate)
        self.default_fps = float(cfg.default_fps)
        self._rate = RateTimer(window=cfg.fps_window, clock=clock)
        self.fps = self.default_fps
        self.frames = 0

    def tick(self) -> str:
        """Advance one frame; returns the status text that was reported."""
        self.frames += 1
        measured = self._rate.tick()
        self.fps = measured if measured > 0 else self.default_fps

        st = self.machine.state
        if st.fatal_error is not None:
            self.status.set_status_text(st.fatal_error)
            return st.fatal_error
        if not self.machine.steady:
            self.status.set_status_text("")
            return ""

        scene = self.machine.scene
        registry = self.machine.registry
        assert registry is not None

        self.smoother.update(st, self.fps)
        euler = vec3(0.0, self.smoother.anchor_yaw(st), 0.0)
        scene.set_euler_angles(self.machine.anchor, euler)

        t = clamp(self.lerp_rate / self.fps, 0.0, 1.0)
        for obj in registry:
            if obj.is_absolute:
                pos = scene.get_position(obj.scene_handle)
                scene.set_position(obj.scene_handle, pos + (obj.target_position - pos) * t)
            scene.set_euler_angles(obj.scene_handle, euler)
            self._spin(obj)

        text = format_info(st, len(registry), registry.last) if st.show_info else ""
        self.status.set_status_text(text)
        if log.isEnabledFor(logging.DEBUG):
            log.debug("frame", extra={"fps": round(self.fps, 1), "heading": round(st.smoothed_heading, 2)})
        return text

    def _spin(self, obj: PlacedObject) -> None:
        axis = SPIN_AXES.get(obj.name)
        if axis is None:
            return
        obj.spin_angle = (obj.spin_angle + 1.0) % 360.0
        angles = np.zeros(3, dtype=float)
        angles[axis] = obj.spin_angle
        self.machine.scene.set_euler_angles(obj.content_handle, angles)
