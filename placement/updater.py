from __future__ import annotations

from typing import Iterable

import numpy as np

from common.geo import signed_offsets_m
from common.types import AbsolutePlacement, GeoCoordinate, PlacedObject, vec3


def absolute_target(placement: AbsolutePlacement, current: GeoCoordinate) -> np.ndarray:
    """
    Scene-space target for an absolute object seen from `current`:
    (east offset, altitude, north offset) in meters.
    """
    east, north = signed_offsets_m(
        placement.geo.latitude,
        placement.geo.longitude,
        current.latitude,
        current.longitude,
    )
    return vec3(east, placement.altitude, north)


def update_targets(objects: Iterable[PlacedObject], current: GeoCoordinate) -> int:
    """
    Recompute target_position for every absolute object from the device's
    current coordinate. Relative objects keep the target fixed at creation.
    Returns the number of targets updated.
    """
    n = 0
    for obj in objects:
        if isinstance(obj.placement, AbsolutePlacement):
            obj.target_position = absolute_target(obj.placement, current)
            n += 1
    return n
