from __future__ import annotations

"""
Acquisition state machine.

    Idle -> AwaitingSensorPermission -> SensorInitializing -> FetchingDescriptor
         -> Placing -> SteadyState

Failed is reachable from every state and is terminal; Cancelled ends the
session from the outside. The machine never blocks: step() does whatever work
is due and returns, waits are deadlines on the injected clock and the
descriptor fetch runs on an executor that step() polls. All SessionState and
registry mutation therefore happens on the caller's thread.
"""

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from enum import Enum
from typing import Callable, Optional

from common.config import EngineConfig
from common.errors import (
    EmptyPlacementError,
    SceneSetupError,
    SensorFailureError,
    SensorPermissionError,
    SensorTimeoutError,
    SessionError,
)
from common.types import GeoCoordinate, Handle, SessionState
from descriptor.parser import parse_descriptor
from engine.orientation import OrientationSmoother
from placement.registry import ObjectRegistry
from placement.updater import update_targets
from scene.base import SceneGraph
from sensors.base import LocationProvider, LocationStatus


log = logging.getLogger(__name__)

Fetcher = Callable[[GeoCoordinate], str]


class Phase(Enum):
    IDLE = "Idle"
    AWAITING_SENSOR_PERMISSION = "AwaitingSensorPermission"
    SENSOR_INITIALIZING = "SensorInitializing"
    FETCHING_DESCRIPTOR = "FetchingDescriptor"
    PLACING = "Placing"
    STEADY_STATE = "SteadyState"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


TERMINAL = (Phase.FAILED, Phase.CANCELLED)


class AcquisitionStateMachine:
    def __init__(
        self,
        sensor: LocationProvider,
        scene: SceneGraph,
        fetcher: Fetcher,
        config: Optional[EngineConfig] = None,
        *,
        smoother: Optional[OrientationSmoother] = None,
        clock: Callable[[], float] = time.monotonic,
        executor: Optional[Executor] = None,
    ):
        self.sensor = sensor
        self.scene = scene
        self.fetcher = fetcher
        self.config = config or EngineConfig()
        self.smoother = smoother or OrientationSmoother.from_config(self.config.orientation)
        self.clock = clock

        self._own_executor = executor is None
        self._executor: Optional[Executor] = executor

        self.state = SessionState()
        self.phase = Phase.IDLE
        self.registry: Optional[ObjectRegistry] = None
        self.anchor: Optional[Handle] = None

        self._polls = 0
        self._wake_at = 0.0
        self._future: Optional[Future] = None
        self._descriptor_text: Optional[str] = None
        self._updates_started = False
        self._released = False

    # ----------------------------
    # Lifecycle
    # ----------------------------
    @property
    def terminal(self) -> bool:
        return self.phase in TERMINAL

    @property
    def steady(self) -> bool:
        return self.phase is Phase.STEADY_STATE

    def start(self) -> None:
        if self.phase is not Phase.IDLE:
            raise RuntimeError(f"cannot start from {self.phase.value}")
        self._transition(Phase.AWAITING_SENSOR_PERMISSION)
        self.step()

    def step(self) -> Phase:
        """Run all work that is due now; returns the phase afterwards."""
        if self.terminal or self.phase is Phase.IDLE:
            return self.phase
        try:
            while not self.terminal and self._handlers[self.phase](self):
                pass
        except SessionError as e:
            self._fail(e)
        return self.phase

    def cancel(self) -> None:
        """Stop the session from outside; releases the sensor."""
        if self.terminal:
            self._release()
            return
        if self._future is not None:
            self._future.cancel()
        self._transition(Phase.CANCELLED)
        self._release()

    def close(self) -> None:
        self.cancel()
        if self._own_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def __enter__(self) -> "AcquisitionStateMachine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----------------------------
    # Internals
    # ----------------------------
    def _transition(self, phase: Phase) -> None:
        log.info("%s -> %s", self.phase.value, phase.value, extra={"phase": phase.value})
        self.phase = phase

    def _fail(self, e: SessionError) -> None:
        if self.state.fatal_error is None:
            self.state.fatal_error = str(e)
            self.state.error = e
            log.error("Session failed: %s", e, extra={"error": type(e).__name__, "phase": self.phase.value})
        if self._future is not None:
            self._future.cancel()
        self.phase = Phase.FAILED
        self._release()

    def _release(self) -> None:
        if self._updates_started and not self._released:
            self._released = True
            self.sensor.stop_location_updates()
            log.info("Location updates stopped")

    def _submit(self, coord: GeoCoordinate) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="descriptor")
        return self._executor.submit(self.fetcher, coord)

    def _bootstrap_scene(self) -> None:
        pc = self.config.placement
        anchor = self.scene.find_template_by_tag(pc.anchor_tag)
        if anchor is None:
            raise SceneSetupError(f"Cannot find object with tag {pc.anchor_tag}")
        wrapper = self.scene.find_template_by_tag(pc.wrapper_tag)
        if wrapper is None:
            raise SceneSetupError(f"Cannot find object with tag {pc.wrapper_tag}")
        self.anchor = anchor
        self.registry = ObjectRegistry(
            self.scene,
            self.state,
            anchor=anchor,
            wrapper_template=wrapper,
            inclusion_radius_m=pc.inclusion_radius_m,
            remove_delay_s=pc.remove_delay_s,
        )

    # Each handler returns True when the next phase should run in the same step.

    def _on_awaiting_permission(self) -> bool:
        self._bootstrap_scene()
        if not self.sensor.is_location_enabled():
            raise SensorPermissionError("Location service disabled. Please enable the location service.")
        sc = self.config.sensor
        self.sensor.enable_compass()
        self.sensor.start_location_updates(sc.desired_accuracy_m, sc.update_distance_m)
        self._updates_started = True
        self._polls = 0
        self._wake_at = self.clock()
        self._transition(Phase.SENSOR_INITIALIZING)
        return True

    def _on_sensor_initializing(self) -> bool:
        now = self.clock()
        if now < self._wake_at:
            return False
        # _polls counts completed waits; the check after the last wait times out
        if self._polls >= self.config.sensor.max_poll_attempts:
            raise SensorTimeoutError("Location service timed out.")
        status = self.sensor.location_status()
        if status is LocationStatus.FAILED:
            raise SensorFailureError("Unable to determine device location.")
        if status is not LocationStatus.RUNNING:
            self._polls += 1
            self._wake_at = now + self.config.sensor.poll_interval_s
            return False

        origin = self.sensor.last_coordinate()
        self.state.original_coordinate = origin
        self.state.current_coordinate = origin
        log.info("Location acquired", extra=origin.to_dict())
        self._future = self._submit(origin)
        self._transition(Phase.FETCHING_DESCRIPTOR)
        return True

    def _on_fetching(self) -> bool:
        if self._future is None or not self._future.done():
            return False
        fut, self._future = self._future, None
        self._descriptor_text = fut.result()
        self._transition(Phase.PLACING)
        return True

    def _on_placing(self) -> bool:
        assert self.registry is not None
        descriptor = parse_descriptor(self._descriptor_text or "")
        self._descriptor_text = None
        self.state.show_info = descriptor.show_info
        n = self.registry.apply(descriptor.commands)
        if n == 0:
            raise EmptyPlacementError("No augments at your location.")
        log.info("Placed %d object(s)", n, extra={"show_info": descriptor.show_info})

        self.state.session_start_time = self.clock()
        self.state.camera_initializing = True
        self.smoother.seed(self.state, self.sensor.true_heading())
        self._transition(Phase.STEADY_STATE)
        return True

    def _on_steady(self) -> bool:
        assert self.registry is not None
        st = self.state
        st.current_coordinate = self.sensor.last_coordinate()
        st.raw_heading = self.sensor.true_heading()
        update_targets(self.registry, st.current_coordinate)

        if st.camera_initializing and st.session_start_time is not None:
            if self.clock() - st.session_start_time >= self.config.orientation.camera_init_s:
                self.smoother.lock_in(st)
                log.info("Heading locked", extra={"heading": round(st.initial_heading, 2)})
        return False

    _handlers = {
        Phase.AWAITING_SENSOR_PERMISSION: _on_awaiting_permission,
        Phase.SENSOR_INITIALIZING: _on_sensor_initializing,
        Phase.FETCHING_DESCRIPTOR: _on_fetching,
        Phase.PLACING: _on_placing,
        Phase.STEADY_STATE: _on_steady,
    }
