from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from common.types import GeoCoordinate


class LocationStatus(Enum):
    STOPPED = "Stopped"
    INITIALIZING = "Initializing"
    RUNNING = "Running"
    FAILED = "Failed"


class LocationProvider(ABC):
    """
    Device location + compass as seen by the engine.

    Implementations wrap a platform sensor API; the engine never talks to the
    hardware directly. stop_location_updates() must be safe to call once after
    start_location_updates(), whatever the current status.
    """

    @abstractmethod
    def is_location_enabled(self) -> bool:
        ...

    @abstractmethod
    def start_location_updates(self, desired_accuracy_m: float, update_distance_m: float) -> None:
        ...

    @abstractmethod
    def location_status(self) -> LocationStatus:
        ...

    @abstractmethod
    def last_coordinate(self) -> GeoCoordinate:
        ...

    @abstractmethod
    def enable_compass(self) -> None:
        ...

    @abstractmethod
    def true_heading(self) -> float:
        """Compass heading relative to true north, degrees in [0, 360)."""

    @abstractmethod
    def stop_location_updates(self) -> None:
        ...
