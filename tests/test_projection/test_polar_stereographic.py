"""
Tests for the Polar Stereographic projection.
"""

import math

import pytest

from gridref.core.ellipsoid import UPS_K0, WGS84
from gridref.core.errors import ConfigurationError, ValidationError
from gridref.core.projection import PolarStereographic, ups_projection


class TestPolarStereographic:
    """Tests for forward and reverse projection."""

    def test_pole_maps_to_origin(self) -> None:
        """Test that the pole projects to the origin with scale k0."""
        x, y, gamma, k = ups_projection().forward(True, 90.0, 30.0)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(0.0, abs=1e-9)
        assert gamma == pytest.approx(30.0)
        assert k == UPS_K0

    def test_reverse_origin(self) -> None:
        """Test that the origin inverts to the pole."""
        lat, _, _, k = ups_projection().reverse(True, 0.0, 0.0)
        assert lat == pytest.approx(90.0)
        assert k == UPS_K0

    def test_reverse_origin_south(self) -> None:
        """Test the southern aspect at the origin."""
        lat, _, _, _ = ups_projection().reverse(False, 0.0, 0.0)
        assert lat == pytest.approx(-90.0)

    def test_meridian_directions(self) -> None:
        """Test that lon 0 points down in the north and up in the south."""
        ps = ups_projection()
        north = ps.forward(True, 85.0, 0.0)
        south = ps.forward(False, -85.0, 0.0)
        assert north.x == pytest.approx(0.0, abs=1e-9)
        assert north.y < 0
        assert south.y == pytest.approx(-north.y)

    def test_convergence(self) -> None:
        """Test that convergence equals lon in the north and -lon in the south."""
        ps = ups_projection()
        assert ps.forward(True, 87.0, 45.0).gamma == pytest.approx(45.0)
        assert ps.forward(False, -87.0, 45.0).gamma == pytest.approx(-45.0)

    @pytest.mark.parametrize(
        "northp, lat, lon",
        [(True, 84.5, 10.0), (True, 89.99, -170.0), (False, -80.0, 135.0), (False, -88.0, -45.5)],
    )
    def test_round_trip(self, northp: bool, lat: float, lon: float) -> None:
        """Test that reverse undoes forward."""
        ps = ups_projection()
        x, y, gamma, k = ps.forward(northp, lat, lon)
        lat2, lon2, gamma2, k2 = ps.reverse(northp, x, y)
        assert lat2 == pytest.approx(lat, abs=1e-9)
        assert lon2 == pytest.approx(lon, abs=1e-9)
        assert gamma2 == pytest.approx(gamma, abs=1e-9)
        assert k2 == pytest.approx(k, rel=1e-12)

    def test_scale_grows_away_from_pole(self) -> None:
        """Test that scale increases toward the equator."""
        ps = ups_projection()
        assert UPS_K0 < ps.forward(True, 85.0, 0.0).k < ps.forward(True, 80.0, 0.0).k

    def test_out_of_range_latitude(self) -> None:
        """Test that latitudes beyond 90 give NaN."""
        x, y, _, _ = ups_projection().forward(True, 91.0, 0.0)
        assert math.isnan(x) and math.isnan(y)


class TestSetScale:
    """Tests for rescaling the projection."""

    def test_unit_scale_at_latitude(self) -> None:
        """Test that set_scale fixes the scale at the given latitude."""
        ps = PolarStereographic(WGS84, 1.0)
        ps.set_scale(81.1, 1.0)
        assert ps.forward(True, 81.1, 0.0).k == pytest.approx(1.0, rel=1e-14)
        assert ps.k0 < 1.0

    def test_set_scale_at_pole(self) -> None:
        """Test that rescaling at the pole sets k0 directly."""
        ps = PolarStereographic(WGS84, 1.0)
        ps.set_scale(90.0, 0.994)
        assert ps.k0 == pytest.approx(0.994)

    def test_bad_scale(self) -> None:
        """Test that a non-positive scale is rejected."""
        with pytest.raises(ValidationError, match="not positive"):
            PolarStereographic().set_scale(80.0, 0.0)

    def test_bad_latitude(self) -> None:
        """Test that the south pole is rejected."""
        with pytest.raises(ValidationError):
            PolarStereographic().set_scale(-90.0, 1.0)

    def test_bad_k0(self) -> None:
        """Test that a non-positive k0 is rejected at construction."""
        with pytest.raises(ConfigurationError):
            PolarStereographic(WGS84, -0.5)

    def test_cached_instance(self) -> None:
        """Test that ups_projection reuses a single instance."""
        assert ups_projection() is ups_projection()
        assert "0.994" in repr(ups_projection())
