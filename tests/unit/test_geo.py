"""
Unit tests for great-circle distance and signed offsets
"""

import pytest
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.geo import EARTH_RADIUS_M, distance_m, signed_offsets_m

class TestDistance:
    """Test cases for distance_m"""

    @pytest.mark.parametrize("a,b", [
        ((10.0, 20.0), (10.001, 20.002)),
        ((-33.86, 151.21), (51.5, -0.12)),
        ((0.0, 179.9), (0.0, -179.9)),
    ])
    def test_symmetric(self, a, b):
        assert distance_m(*a, *b) == pytest.approx(distance_m(*b, *a))

    def test_identical_points(self):
        assert distance_m(48.137, 11.575, 48.137, 11.575) == 0.0

    def test_one_degree_latitude(self):
        d = distance_m(10.0, 20.0, 11.0, 20.0)
        assert d == pytest.approx(111320.0, rel=0.01)

    def test_uses_wgs84_semi_major_axis(self):
        assert EARTH_RADIUS_M == 6378137.0
        d = distance_m(0.0, 0.0, 0.0, 1.0)
        assert d == pytest.approx(EARTH_RADIUS_M * 3.141592653589793 / 180.0, rel=1e-9)

    def test_monotonic_in_separation(self):
        ds = [distance_m(45.0, 7.0, 45.0 + k * 0.01, 7.0) for k in range(1, 6)]
        assert ds == sorted(ds)
        assert len(set(ds)) == len(ds)

    def test_antipodal_is_finite(self):
        d = distance_m(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(EARTH_RADIUS_M * 3.141592653589793)

class TestSignedOffsets:
    """Test cases for signed_offsets_m"""

    def test_north_east_positive(self):
        east, north = signed_offsets_m(10.001, 20.001, 10.0, 20.0)
        assert north > 0
        assert east > 0

    def test_south_west_negative(self):
        east, north = signed_offsets_m(9.999, 19.999, 10.0, 20.0)
        assert north < 0
        assert east < 0

    def test_axes_are_isolated(self):
        east, north = signed_offsets_m(10.001, 20.0, 10.0, 20.0)
        assert east == 0.0
        assert north == pytest.approx(distance_m(10.001, 20.0, 10.0, 20.0))

    def test_same_point(self):
        assert signed_offsets_m(10.0, 20.0, 10.0, 20.0) == (0.0, 0.0)
