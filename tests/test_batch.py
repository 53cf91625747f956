"""
Tests for batch conversion.
"""

import logging
import math

import numpy as np
import pytest

from gridref.core import batch
from gridref.core.crs import utmups
from gridref.models.coordinates import ZoneSpec


@pytest.fixture
def positions() -> dict:
    """A few positions across UTM and UPS."""
    return {
        "lat": np.array([83.6277742673141, 0.0, -85.0, 61.0]),
        "lon": np.array([-32.664336398663515, 3.0, 45.0, 5.0]),
    }


class TestGeodeticToProjected:
    """Tests for geodetic_to_projected_batch."""

    def test_matches_scalar(self, positions: dict) -> None:
        """Test that every row matches the scalar conversion."""
        result = batch.geodetic_to_projected_batch(positions["lat"], positions["lon"])
        for i, (lat, lon) in enumerate(zip(positions["lat"], positions["lon"])):
            expected = utmups.forward(lat, lon)
            assert result.zone[i] == expected.zone
            assert result.northp[i] == expected.northp
            assert result.x[i] == pytest.approx(expected.x)
            assert result.y[i] == pytest.approx(expected.y)
        assert list(result.zone) == [25, 31, 0, 32]

    def test_failed_rows(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that bad rows become sentinels and are counted."""
        with caplog.at_level(logging.WARNING):
            result = batch.geodetic_to_projected_batch([10.0, 95.0, math.nan], [20.0, 0.0, 0.0])
        assert result.zone[1] == ZoneSpec.INVALID
        assert result.zone[2] == ZoneSpec.INVALID
        assert np.isnan(result.x[1:]).all()
        assert batch.count_invalid(result.x) == 2
        assert "1 of 3 rows could not be converted" in caplog.text

    def test_zone_per_row(self) -> None:
        """Test a zone override per row."""
        result = batch.geodetic_to_projected_batch([61.0, 61.0], [5.0, 5.0], zone=[31, 32])
        assert list(result.zone) == [31, 32]

    def test_scalar_zone_broadcast(self) -> None:
        """Test that a scalar zone applies to every row."""
        result = batch.geodetic_to_projected_batch([61.0, 60.0], [5.0, 4.0], zone=31)
        assert list(result.zone) == [31, 31]


class TestProjectedToGeodetic:
    """Tests for projected_to_geodetic_batch."""

    def test_round_trip(self, positions: dict) -> None:
        """Test that the inverse recovers the positions."""
        projected = batch.geodetic_to_projected_batch(positions["lat"], positions["lon"])
        result = batch.projected_to_geodetic_batch(
            projected.zone, projected.northp, projected.x, projected.y
        )
        np.testing.assert_allclose(result.lat, positions["lat"], atol=1e-9)
        np.testing.assert_allclose(result.lon, positions["lon"], atol=1e-9)

    def test_failed_rows(self) -> None:
        """Test that out of range rows give NaN."""
        result = batch.projected_to_geodetic_batch(33, True, [500000.0, -500000.0], [0.0, 0.0])
        assert not math.isnan(result.lat[0])
        assert math.isnan(result.lat[1])


class TestMgrs:
    """Tests for the MGRS batch conversions."""

    def test_geodetic_to_mgrs(self) -> None:
        """Test references for several rows."""
        refs = batch.geodetic_to_mgrs_batch(
            [-32.664336398663515, 3.0, 0.0], [83.6277742673141, 0.0, 95.0], precision=2
        )
        assert list(refs) == ["25XEN0486", "31NEA0000", "INVALID"]
        assert batch.count_invalid(refs) == 1

    def test_mgrs_to_geodetic(self) -> None:
        """Test positions for several references."""
        result = batch.mgrs_to_geodetic_batch(["24XWT783908", "INVALID", "38SMB448"], centerp=False)
        assert result.shape == (3, 2)
        assert result[0, 0] == pytest.approx(-32.66878916521686, abs=1e-9)
        assert result[0, 1] == pytest.approx(83.6273817604951, abs=1e-9)
        assert np.isnan(result[1]).all()
        assert np.isnan(result[2]).all()

    def test_performance_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that batch timings are logged."""
        with caplog.at_level(logging.INFO):
            batch.mgrs_to_geodetic_batch(["33VVE7220287839"])
        assert "mgrs_to_geodetic_batch executed in" in caplog.text
