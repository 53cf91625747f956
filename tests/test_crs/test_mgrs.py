"""
Tests for MGRS encoding, decoding and table checks.
"""

import math

import numpy as np
import pytest

from gridref.core.crs import mgrs, utmups
from gridref.core.errors import ConsistencyError, ParseError, ValidationError
from gridref.models.coordinates import ZoneSpec


class TestForward:
    """Tests for UTM/UPS to MGRS conversion."""

    def test_full_precision(self) -> None:
        """Test a 1m reference in zone 33."""
        assert mgrs.forward(33, True, 472202.5, 6487839.5) == "33VVE7220287839"

    @pytest.mark.parametrize(
        "prec, expected",
        [
            (-1, "33V"),
            (0, "33VVE"),
            (1, "33VVE78"),
            (3, "33VVE722878"),
            (11, "33VVE7220250000087839500000"),
        ],
    )
    def test_precision(self, prec: int, expected: str) -> None:
        """Test every precision level truncates rather than rounds."""
        assert mgrs.forward(33, True, 472202.5, 6487839.5, prec=prec) == expected

    def test_explicit_latitude(self) -> None:
        """Test that a consistent latitude gives the same reference."""
        lat = utmups.reverse(33, True, 472202.5, 6487839.5).lat
        assert mgrs.forward(33, True, 472202.5, 6487839.5, lat=lat) == "33VVE7220287839"

    def test_inconsistent_latitude(self) -> None:
        """Test that a latitude far from the UTM row is rejected."""
        with pytest.raises(ConsistencyError, match="inconsistent"):
            mgrs.forward(33, True, 472202.5, 6487839.5, lat=45.0)

    def test_equator_north(self) -> None:
        """Test that y = 0 in the north is band N row A."""
        assert mgrs.forward(31, True, 500000.0, 0.0, prec=2) == "31NEA0000"

    def test_equator_south(self) -> None:
        """Test that y = 10000km in the south stays in band M."""
        assert mgrs.forward(31, False, 500000.0, 10000000.0, prec=2) == "31MEV0099"

    def test_signed_zero_latitude(self) -> None:
        """Test that -0 latitude selects the southern band."""
        north = utmups.forward(0.0, 3.0)
        south = utmups.forward(-0.0, 3.0)
        assert mgrs.forward(north.zone, north.northp, north.x, north.y, 0.0, 2) == "31NEA0000"
        assert mgrs.forward(south.zone, south.northp, south.x, south.y, -0.0, 2) == "31MEV0099"

    def test_ups(self) -> None:
        """Test a UPS reference."""
        assert mgrs.forward(0, True, 2052065.5, 1946829.5) == "ZAG5206546829"

    def test_upper_easting_edge(self) -> None:
        """Test that an easting exactly at 900km is moved inside."""
        text = mgrs.forward(33, True, 900000.0, 6487839.5)
        assert text[5:10] == "99999"

    def test_invalid_zone(self) -> None:
        """Test the INVALID sentinel."""
        assert mgrs.forward(ZoneSpec.INVALID, True, 0.0, 0.0) == "INVALID"
        assert mgrs.forward(33, True, math.nan, 0.0) == "INVALID"

    def test_easting_out_of_range(self) -> None:
        """Test that eastings outside the MGRS limits are rejected."""
        with pytest.raises(ValidationError, match="Easting 50km not in MGRS/UTM range"):
            mgrs.forward(33, True, 50000.0, 6487839.5)

    def test_precision_out_of_range(self) -> None:
        """Test that precision 12 is rejected."""
        with pytest.raises(ValidationError, match="MGRS precision 12"):
            mgrs.forward(33, True, 472202.5, 6487839.5, prec=12)


class TestReverse:
    """Tests for MGRS to UTM/UPS conversion."""

    def test_center_of_square(self) -> None:
        """Test that the center of a 1m square is returned by default."""
        assert tuple(mgrs.reverse("33VVE7220287839")) == (33, True, 472202.5, 6487839.5, 5)

    def test_corner_of_square(self) -> None:
        """Test the south-west corner."""
        assert tuple(mgrs.reverse("33VVE7220287839", centerp=False)) == (
            33,
            True,
            472202.0,
            6487839.0,
            5,
        )

    def test_lower_case(self) -> None:
        """Test that letters are case-insensitive."""
        assert mgrs.reverse("33vve7220287839") == mgrs.reverse("33VVE7220287839")

    def test_precision_three(self) -> None:
        """Test a 100m reference."""
        assert tuple(mgrs.reverse("24XWT783908")) == (24, True, 578350.0, 9290850.0, 3)

    def test_ups(self) -> None:
        """Test a UPS reference."""
        assert tuple(mgrs.reverse("ZAG5206546829")) == (0, True, 2052065.5, 1946829.5, 5)

    def test_grid_zone_only(self) -> None:
        """Test that a bare grid zone gives a representative point."""
        zone, northp, x, y, prec = mgrs.reverse("38S")
        assert (zone, northp, prec) == (38, True, -1)
        assert x == 500000.0
        assert y == 4000000.0

    def test_block_only(self) -> None:
        """Test a 100km square."""
        zone, northp, x, y, prec = mgrs.reverse("38SMB", centerp=False)
        assert (zone, northp, prec) == (38, True, 0)
        assert x == 400000.0
        assert y % 100000.0 == 0.0

    def test_invalid_sentinel(self) -> None:
        """Test that INV references give NaN and precision -2."""
        zone, _, x, y, prec = mgrs.reverse("INVALID")
        assert zone == ZoneSpec.INVALID
        assert math.isnan(x) and math.isnan(y)
        assert prec == -2

    @pytest.mark.parametrize(
        "text",
        ["33VVE7220287839", "24XWT783908", "ZAG5206546829", "31NEA0000", "31MEV0099", "38SMB4488"],
    )
    def test_round_trip(self, text: str) -> None:
        """Test that forward of the south-west corner reproduces the reference."""
        zone, northp, x, y, prec = mgrs.reverse(text, centerp=False)
        assert mgrs.forward(zone, northp, x, y, prec=prec) == text


def _assert_meter_round_trip(lat: float, lon: float) -> None:
    zone, northp, x, y, _, _ = utmups.forward(lat, lon)
    text = mgrs.forward(zone, northp, x, y, lat, 5)
    zone2, northp2, x2, y2, prec = mgrs.reverse(text)
    assert (zone2, northp2, prec) == (zone, northp, 5), text
    assert abs(x2 - x) <= 1.0, text
    assert abs(y2 - y) <= 1.0, text


class TestRoundTripSweep:
    """Tests that 1m references recover the position they encode."""

    def test_random_positions(self) -> None:
        """Test positions over the whole globe, UTM and UPS."""
        rng = np.random.default_rng(8675309)
        lats = rng.uniform(-90.0, 90.0, 3000)
        lons = rng.uniform(-180.0, 180.0, 3000)
        for lat, lon in zip(lats, lons):
            _assert_meter_round_trip(float(lat), float(lon))

    @pytest.mark.parametrize("edge", [-80.0, -72.0, -8.0, 0.0, 8.0, 56.0, 64.0, 72.0, 84.0])
    def test_band_edges(self, edge: float) -> None:
        """Test positions just either side of a latitude band boundary."""
        for lat in (edge - 1e-7, edge, edge + 1e-7):
            if abs(lat) <= 90:
                for lon in (-177.0, -3.0, 0.5, 3.0, 9.0, 21.0, 33.0, 179.5):
                    _assert_meter_round_trip(lat, lon)

    @pytest.mark.parametrize("lat", [-90.0, -85.0, -80.0000001, 84.0000001, 87.5, 90.0])
    def test_polar_caps(self, lat: float) -> None:
        """Test positions in the UPS caps."""
        for lon in np.linspace(-180.0, 180.0, 13):
            _assert_meter_round_trip(lat, float(lon))

    @pytest.mark.parametrize(
        "text, message",
        [
            ("61SMB", "Zone 61 not in"),
            ("012SMB", "More than 2 digits"),
            ("38", "too short"),
            ("38I", "Band letter I"),
            ("38SM", "Missing row letter"),
            ("38SIB", "Column letter I"),
            ("38SMI", "Row letter I"),
            ("38SMV", "Block MV not in zone/band 38S"),
            ("38SMB448", "Not an even number of digits"),
            ("38SMB44A8", "non-digit"),
            ("38SMB" + "123456789012" * 2, "More than 22 digits"),
        ],
    )
    def test_parse_errors(self, text: str, message: str) -> None:
        """Test malformed references."""
        with pytest.raises(ParseError, match=message):
            mgrs.reverse(text)


class TestDecode:
    """Tests for splitting references into parts."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("38SMB4488", ("38S", "MB", "44", "88")),
            ("38SMB", ("38S", "MB", "", "")),
            ("38S", ("38S", "", "", "")),
            ("ZAG5206546829", ("Z", "AG", "52065", "46829")),
            ("INVALID", ("INV", "", "", "")),
        ],
    )
    def test_decode(self, text: str, expected: tuple) -> None:
        """Test structural decoding."""
        assert tuple(mgrs.decode(text)) == expected

    @pytest.mark.parametrize(
        "text, message",
        [
            ("38", "does not contain alpha chars"),
            ("123SMB", "does not start with 0-2 digits"),
            ("38-", "non alphanumeric"),
            ("38SM", "1 or 3 alpha chars"),
            ("38S44", "junk after 1 alpha char"),
            ("38SMB44A", "junk at end"),
            ("38SMB448", "even no of digits"),
        ],
    )
    def test_decode_errors(self, text: str, message: str) -> None:
        """Test structurally malformed references."""
        with pytest.raises(ParseError, match=message):
            mgrs.decode(text)


class TestTables:
    """Tests for the row resolution and self checks."""

    def test_utm_row_in_band(self) -> None:
        """Test resolving a periodic row within band T."""
        assert mgrs.utm_row(5, 3, 4) == 44

    def test_utm_row_incompatible(self) -> None:
        """Test that an incompatible row returns 100."""
        assert mgrs.utm_row(5, 3, 15) == 100

    def test_check_passes(self) -> None:
        """Test that the tables are consistent."""
        mgrs.check()

    def test_check_coords_hemisphere_flip(self) -> None:
        """Test that northern UTM northings below the equator move south."""
        northp, x, y = mgrs.check_coords(True, True, 500000.0, -50000.0)
        assert northp is False
        assert y == pytest.approx(9950000.0)
