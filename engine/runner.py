from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor
from typing import Callable, Optional, Tuple

from common.config import EngineConfig
from common.types import SessionState
from descriptor.client import DescriptorClient
from engine.acquisition import AcquisitionStateMachine, Fetcher, Phase
from engine.frame import FrameDriver
from engine.orientation import OrientationSmoother
from scene.base import SceneGraph, StatusSink
from sensors.base import LocationProvider


log = logging.getLogger(__name__)


def build_session(
    cfg: EngineConfig,
    sensor: LocationProvider,
    scene: SceneGraph,
    status: StatusSink,
    *,
    fetcher: Optional[Fetcher] = None,
    clock: Callable[[], float] = time.monotonic,
    executor: Optional[Executor] = None,
) -> Tuple[AcquisitionStateMachine, FrameDriver]:
    """Wire a state machine and frame driver that share one smoother and clock."""
    smoother = OrientationSmoother.from_config(cfg.orientation)
    machine = AcquisitionStateMachine(
        sensor,
        scene,
        fetcher or DescriptorClient.from_config(cfg.descriptor),
        cfg,
        smoother=smoother,
        clock=clock,
        executor=executor,
    )
    driver = FrameDriver(machine, status, smoother=smoother, config=cfg.frame, clock=clock)
    return machine, driver


def run_session(
    machine: AcquisitionStateMachine,
    driver: FrameDriver,
    *,
    frame_hz: float = 30.0,
    duration_s: Optional[float] = None,
    stop_event: Optional[threading.Event] = None,
    stop_on_failure: bool = True,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> SessionState:
    """
    Cooperative scheduler: one acquisition step and one frame per period.

    Returns when `duration_s` elapses, `stop_event` is set, or (with
    stop_on_failure) after the frame that first displays a fatal error.
    The sensor is released on every exit path.
    """
    period = 1.0 / max(1.0, frame_hz)
    t0 = clock()
    with machine:
        if machine.phase is Phase.IDLE:
            machine.start()
        while True:
            t_frame = clock()
            machine.step()
            driver.tick()

            if stop_on_failure and machine.phase is Phase.FAILED:
                break
            if stop_event is not None and stop_event.is_set():
                break
            if duration_s is not None and clock() - t0 >= duration_s:
                break

            sleep_s = max(0.0, period - (clock() - t_frame))
            if sleep_s > 0:
                sleep(sleep_s)
    log.info("Session finished", extra={"phase": machine.phase.value, "frames": driver.frames})
    return machine.state
