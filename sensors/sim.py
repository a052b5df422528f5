from __future__ import annotations

import csv
import logging
import math
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import numpy as np

from common.geo import EARTH_RADIUS_M
from common.types import GeoCoordinate
from sensors.base import LocationProvider, LocationStatus


log = logging.getLogger(__name__)

CSV_HEADER = ["lat", "lon", "heading"]


def offset_coordinate(origin: GeoCoordinate, east_m: float, north_m: float) -> GeoCoordinate:
    """Move `origin` by small metric offsets (flat-earth step on the sphere)."""
    dlat = math.degrees(north_m / EARTH_RADIUS_M)
    coslat = max(1e-9, math.cos(math.radians(origin.latitude)))
    dlon = math.degrees(east_m / (EARTH_RADIUS_M * coslat))
    return GeoCoordinate(origin.latitude + dlat, origin.longitude + dlon)


@dataclass
class SimulatedLocationProvider(LocationProvider):
    """
    Synthetic device: walks from `origin` at a constant velocity while the
    compass drifts at `heading_rate_dps`, with optional Gaussian jitter.

    Args:
        origin: fix reported when updates start
        enabled: what is_location_enabled() reports (user permission)
        init_polls: number of status polls answering Initializing before settling
        fail: settle on Failed instead of Running
        velocity_mps: (east, north) walking speed in m/s
        heading_deg: compass heading at start
        heading_rate_dps: heading drift in deg/s
        position_noise_m: std of the horizontal jitter added to each fix
        heading_noise_deg: std of the jitter added to each heading read
        clock: time source (seconds), injectable for tests
    """
    origin: GeoCoordinate
    enabled: bool = True
    init_polls: int = 0
    fail: bool = False
    velocity_mps: Tuple[float, float] = (0.0, 0.0)
    heading_deg: float = 0.0
    heading_rate_dps: float = 0.0
    position_noise_m: float = 0.0
    heading_noise_deg: float = 0.0
    seed: int = 1234
    clock: Callable[[], float] = time.monotonic

    started: int = field(default=0, init=False)
    stopped: int = field(default=0, init=False)
    compass_enabled: bool = field(default=False, init=False)
    start_args: Optional[Tuple[float, float]] = field(default=None, init=False)
    _polls: int = field(default=0, init=False)
    _t0: Optional[float] = field(default=None, init=False)
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._rng = np.random.default_rng(self.seed)

    def is_location_enabled(self) -> bool:
        return self.enabled

    def start_location_updates(self, desired_accuracy_m: float, update_distance_m: float) -> None:
        self.started += 1
        self.start_args = (desired_accuracy_m, update_distance_m)
        self._t0 = self.clock()
        self._polls = 0

    def location_status(self) -> LocationStatus:
        if self._t0 is None or self.stopped:
            return LocationStatus.STOPPED
        self._polls += 1
        if self._polls <= self.init_polls:
            return LocationStatus.INITIALIZING
        return LocationStatus.FAILED if self.fail else LocationStatus.RUNNING

    def _elapsed(self) -> float:
        return 0.0 if self._t0 is None else max(0.0, self.clock() - self._t0)

    def last_coordinate(self) -> GeoCoordinate:
        t = self._elapsed()
        east = self.velocity_mps[0] * t
        north = self.velocity_mps[1] * t
        if self.position_noise_m > 0:
            east += float(self._rng.normal(0.0, self.position_noise_m))
            north += float(self._rng.normal(0.0, self.position_noise_m))
        return offset_coordinate(self.origin, east, north)

    def enable_compass(self) -> None:
        self.compass_enabled = True

    def true_heading(self) -> float:
        h = self.heading_deg + self.heading_rate_dps * self._elapsed()
        if self.heading_noise_deg > 0:
            h += float(self._rng.normal(0.0, self.heading_noise_deg))
        return h % 360.0

    def stop_location_updates(self) -> None:
        self.stopped += 1


@dataclass
class CSVLocationReplay(LocationProvider):
    """
    Replay fixes from a CSV file with columns: lat, lon, heading.
    Rows advance at `rate_hz` from the moment updates start; the last row is
    held once the file is exhausted unless `loop` is set.
    A missing or empty file reports Failed status.
    """
    path: str
    rate_hz: float = 1.0
    loop: bool = False
    clock: Callable[[], float] = time.monotonic

    _rows: List[Tuple[float, float, float]] = field(default_factory=list, init=False)
    _t0: Optional[float] = field(default=None, init=False)
    _stopped: bool = field(default=False, init=False)

    def is_location_enabled(self) -> bool:
        return True

    def start_location_updates(self, desired_accuracy_m: float, update_distance_m: float) -> None:
        self._t0 = self.clock()
        p = Path(self.path)
        if not p.exists():
            log.warning("Location CSV not found: %s", self.path)
            return
        with p.open(newline="") as f:
            for row in csv.DictReader(f):
                self._rows.append(
                    (float(row["lat"]), float(row["lon"]), float(row.get("heading") or 0.0))
                )
        log.info("Loaded %d location rows from %s", len(self._rows), self.path)

    def location_status(self) -> LocationStatus:
        if self._t0 is None or self._stopped:
            return LocationStatus.STOPPED
        return LocationStatus.RUNNING if self._rows else LocationStatus.FAILED

    def _row(self) -> Tuple[float, float, float]:
        i = int((self.clock() - (self._t0 or 0.0)) * self.rate_hz)
        if self.loop:
            i %= len(self._rows)
        return self._rows[min(i, len(self._rows) - 1)]

    def last_coordinate(self) -> GeoCoordinate:
        lat, lon, _ = self._row()
        return GeoCoordinate(lat, lon)

    def enable_compass(self) -> None:
        pass

    def true_heading(self) -> float:
        return self._row()[2] % 360.0

    def stop_location_updates(self) -> None:
        self._stopped = True
