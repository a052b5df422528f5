from __future__ import annotations

from typing import Tuple
import math


# Sphere approximation using the WGS84 semi-major axis (m)
EARTH_RADIUS_M = 6378137.0


# -------------------------
# Great-circle distance
# -------------------------
def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Haversine great-circle distance in meters between two lat/lon pairs (deg).

    Spherical model with R = 6378137 m. No validation: any float is accepted.
    """
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dphi = p2 - p1
    dl = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2.0) ** 2
    # atan2 form stays finite when rounding pushes a slightly past 1
    a = min(1.0, max(0.0, a))
    return 2.0 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


# -------------------------
# Local tangent offsets
# -------------------------
def signed_offsets_m(
    lat: float,
    lon: float,
    ref_lat: float,
    ref_lon: float,
) -> Tuple[float, float]:
    """
    Signed (east, north) offsets in meters of (lat, lon) relative to (ref_lat, ref_lon).

    Each axis is measured separately with distance_m() holding the other axis
    fixed at the reference; the sign comes from comparing coordinates since the
    haversine distance is never negative.
    """
    north = distance_m(lat, ref_lon, ref_lat, ref_lon)
    east = distance_m(ref_lat, lon, ref_lat, ref_lon)
    if lat < ref_lat:
        north = -north
    if lon < ref_lon:
        east = -east
    return east, north
