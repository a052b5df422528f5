from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union
import numpy as np


Handle = Any  # opaque scene node reference owned by the rendering collaborator


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    """Scene-space vector as a float64 array of shape (3,)."""
    return np.array([x, y, z], dtype=float)


@dataclass(frozen=True, slots=True)
class GeoCoordinate:
    """WGS84 latitude/longitude in degrees. One value per sensor read."""
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.latitude, "lon": self.longitude}


class PlacementKind(Enum):
    ABSOLUTE = "ABS"
    RELATIVE = "REL"


@dataclass(frozen=True, slots=True)
class AbsolutePlacement:
    """
    Object anchored to a real-world coordinate.

    `geo` is already resolved: zero lat/lon fields in the descriptor are
    replaced by the session's original coordinate before this is built.
    """
    geo: GeoCoordinate
    altitude: float

    @property
    def kind(self) -> PlacementKind:
        return PlacementKind.ABSOLUTE


@dataclass(frozen=True, slots=True)
class RelativePlacement:
    """Object at a fixed (x, z) offset in meters from the scene origin."""
    x: float
    z: float
    altitude: float

    @property
    def kind(self) -> PlacementKind:
        return PlacementKind.RELATIVE


Placement = Union[AbsolutePlacement, RelativePlacement]


@dataclass(slots=True, eq=False)
class PlacedObject:
    """
    A live object owned by the ObjectRegistry.

    Attributes:
        tag: template tag it was instantiated from.
        name: name assigned to the object node.
        scene_handle: wrapper node parented under the scene anchor; this is the
            node that is positioned and oriented.
        content_handle: the instantiated template inside the wrapper.
        placement: AbsolutePlacement | RelativePlacement.
        target_position: scene-space target (recomputed per tick for absolute).
        raw_text: descriptor line, kept for diagnostics.
        spin_angle: accumulated spin (deg) for SpinX/SpinY/SpinZ objects.
    """
    tag: str
    name: str
    scene_handle: Handle
    content_handle: Handle
    placement: Placement
    target_position: np.ndarray = field(default_factory=vec3)
    raw_text: str = ""
    spin_angle: float = 0.0

    @property
    def kind(self) -> PlacementKind:
        return self.placement.kind

    @property
    def is_absolute(self) -> bool:
        return isinstance(self.placement, AbsolutePlacement)


@dataclass(slots=True)
class SessionState:
    """
    Mutable per-session state. Written by the acquisition state machine and the
    placement updater; read by the frame driver.
    """
    original_coordinate: Optional[GeoCoordinate] = None
    current_coordinate: Optional[GeoCoordinate] = None
    raw_heading: float = 0.0
    smoothed_heading: float = 0.0
    initial_heading: float = 0.0
    initial_camera_angle: float = 0.0
    session_start_time: Optional[float] = None
    camera_initializing: bool = True
    show_info: bool = False
    fatal_error: Optional[str] = None
    error: Optional[Exception] = field(default=None, repr=False)

    @property
    def failed(self) -> bool:
        return self.fatal_error is not None
