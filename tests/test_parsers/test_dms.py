"""
Tests for DMS encoding and decoding.
"""

import math

import numpy as np
import pytest

from gridref.core import geomath
from gridref.core.errors import ParseError, ValidationError
from gridref.core.parsers import dms
from gridref.models.coordinates import DMSComponent, HemisphereIndicator

PITTSBURGH_LAT = 145607 / 3600  # 40d26'47"
PITTSBURGH_LON = -287916 / 3600  # 79d58'36"W


class TestDecode:
    """Tests for decoding a single DMS string."""

    @pytest.mark.parametrize(
        "text, angle, indicator",
        [
            ("40d26'47\"N", PITTSBURGH_LAT, HemisphereIndicator.LATITUDE),
            ("N40d26'47\"", PITTSBURGH_LAT, HemisphereIndicator.LATITUDE),
            ("40:26:47", PITTSBURGH_LAT, HemisphereIndicator.NONE),
            ("-74:00:21.5", -(74 + 21.5 / 3600), HemisphereIndicator.NONE),
            ("W74d0.36'", -74.006, HemisphereIndicator.LONGITUDE),
            ("79d58'36\"w", PITTSBURGH_LON, HemisphereIndicator.LONGITUDE),
            ("  12.5  ", 12.5, HemisphereIndicator.NONE),
            ("5d30", 5.5, HemisphereIndicator.NONE),
            ("1.5e2", 150.0, HemisphereIndicator.NONE),
        ],
    )
    def test_decode(self, text: str, angle: float, indicator: HemisphereIndicator) -> None:
        """Test decoding angle and hemisphere indicator."""
        result = dms.decode(text)
        assert result.angle == pytest.approx(angle, abs=1e-12)
        assert result.indicator == indicator

    def test_typographic_symbols(self) -> None:
        """Test that degree, prime and double prime variants are accepted."""
        assert dms.decode("40°26′47″N") == dms.decode("40d26'47\"N")
        assert dms.decode("40º26’47”N") == dms.decode("40d26'47\"N")
        assert dms.decode("5d0'30''").angle == pytest.approx(5 + 30 / 3600)

    def test_unicode_minus(self) -> None:
        """Test that a Unicode minus sign is a sign."""
        assert dms.decode("−5").angle == -5.0

    def test_signed_zero(self) -> None:
        """Test that the sign of zero is preserved."""
        assert geomath.signbit(dms.decode("-0").angle)
        assert not geomath.signbit(dms.decode("0").angle)
        assert not geomath.signbit(dms.decode("+0").angle)

    def test_sum_of_terms(self) -> None:
        """Test adding and subtracting terms with a shared hemisphere."""
        result = dms.decode("70:01:15W-0:0:30W")
        assert result.angle == pytest.approx(-70.0125)
        assert result.indicator == HemisphereIndicator.LONGITUDE

    def test_sum_with_unmarked_term(self) -> None:
        """Test that unmarked terms combine with a marked one."""
        result = dms.decode("10N+0:30")
        assert result.angle == pytest.approx(10.5)
        assert result.indicator == HemisphereIndicator.LATITUDE

    @pytest.mark.parametrize("text", ["70:01:15W+0:0:15N", "70:01:15W+0:0:30E", "10N-0:30S"])
    def test_incompatible_hemispheres(self, text: str) -> None:
        """Test that terms with different hemisphere letters cannot be combined."""
        with pytest.raises(ParseError, match="Incompatible hemisphere"):
            dms.decode(text)

    def test_non_finite_fallback(self) -> None:
        """Test that nan and inf decode as plain numbers."""
        assert math.isnan(dms.decode("nan").angle)
        assert dms.decode("inf").angle == math.inf
        assert dms.decode("-inf").angle == -math.inf

    @pytest.mark.parametrize(
        "text, message",
        [
            ("", "Empty or incomplete"),
            ("N", "Empty or incomplete"),
            ("N5N", "Repeated hemisphere indicators"),
            ("N5S", "Contradictory hemisphere indicators"),
            ("1d2d", "Repeated degrees component"),
            ("1'2d", "degrees component follows minutes component"),
            ("1:2:3:4", "Extra text following seconds"),
            ("12:", "Illegal for : to appear at the end"),
            ("1.5d30'", "Decimal point in non-terminal component"),
            ("1.2.3", "Multiple decimal points"),
            ("d5", "Missing numbers in degrees component"),
            ("60'", "Minutes 60 not in range"),
            ("10d60\"", "Seconds 60 not in range"),
            ("5x", "Illegal character x"),
            ("0e0", "Illegal character e"),
        ],
    )
    def test_errors(self, text: str, message: str) -> None:
        """Test malformed DMS strings."""
        with pytest.raises(ParseError, match=message):
            dms.decode(text)

    def test_error_details(self) -> None:
        """Test that parse errors record the input and format."""
        with pytest.raises(ParseError) as exc_info:
            dms.decode("1d2d")
        assert exc_info.value.details["format"] == "DMS"
        assert exc_info.value.details["text"] == "1d2d"


class TestDecodeHelpers:
    """Tests for the pair, angle and azimuth decoders."""

    def test_lat_lon_by_hemisphere(self) -> None:
        """Test that hemisphere letters decide the order."""
        expected = (pytest.approx(PITTSBURGH_LAT), pytest.approx(PITTSBURGH_LON))
        assert tuple(dms.decode_lat_lon("40d26'47\"N", "79d58'36\"W")) == expected
        assert tuple(dms.decode_lat_lon("79d58'36\"W", "40d26'47\"N")) == expected

    def test_lat_lon_unmarked(self) -> None:
        """Test the default order and longfirst."""
        assert tuple(dms.decode_lat_lon("40.5", "-79.5")) == (40.5, -79.5)
        assert tuple(dms.decode_lat_lon("40.5", "-79.5", longfirst=True)) == (-79.5, 40.5)

    def test_lat_lon_one_marked(self) -> None:
        """Test that an unmarked value takes the other role."""
        assert tuple(dms.decode_lat_lon("10E", "20")) == (20.0, 10.0)
        assert tuple(dms.decode_lat_lon("20", "10E", longfirst=True)) == (20.0, 10.0)

    def test_lat_lon_longitude_reduced(self) -> None:
        """Test that the longitude is reduced to (-180, 180]."""
        assert dms.decode_lat_lon("10", "190").lon == -170.0

    def test_lat_lon_both_latitudes(self) -> None:
        """Test that two latitudes are rejected."""
        with pytest.raises(ParseError, match="Both 40N and 50S interpreted as latitudes"):
            dms.decode_lat_lon("40N", "50S")

    def test_lat_lon_latitude_range(self) -> None:
        """Test that a latitude beyond 90 is rejected."""
        with pytest.raises(ValidationError, match="Latitude 100d"):
            dms.decode_lat_lon("100", "10")

    def test_decode_angle(self) -> None:
        """Test arc lengths."""
        assert dms.decode_angle("45d30'") == 45.5
        with pytest.raises(ParseError, match="includes a hemisphere"):
            dms.decode_angle("45N")

    def test_decode_azimuth(self) -> None:
        """Test azimuths."""
        assert dms.decode_azimuth("270") == -90.0
        assert dms.decode_azimuth("10W") == -10.0
        with pytest.raises(ParseError, match="latitude hemisphere"):
            dms.decode_azimuth("10N")

    def test_decode_components(self) -> None:
        """Test combining components."""
        assert dms.decode_components(1, 30, 45) == pytest.approx(1.5125)
        assert dms.decode_components(-1, -30) == -1.5
        assert dms.decode_components(7) == 7.0


class TestEncode:
    """Tests for encoding angles."""

    @pytest.mark.parametrize(
        "angle, trailing, prec, ind, expected",
        [
            (PITTSBURGH_LAT, DMSComponent.SECOND, 0, HemisphereIndicator.LATITUDE, "40d26'47\"N"),
            (PITTSBURGH_LON, DMSComponent.SECOND, 0, HemisphereIndicator.LONGITUDE, "079d58'36\"W"),
            (PITTSBURGH_LAT, DMSComponent.SECOND, 0, HemisphereIndicator.NONE, "40d26'47\""),
            (-0.0, DMSComponent.SECOND, 0, HemisphereIndicator.NONE, "-0d00'00\""),
            (1.5, DMSComponent.MINUTE, 0, HemisphereIndicator.NONE, "1d30'"),
            (-1.0 - 2 / 60, DMSComponent.MINUTE, 0, HemisphereIndicator.NONE, "-1d02'"),
            (1.5, DMSComponent.DEGREE, 2, HemisphereIndicator.NONE, "1.50"),
            (1.5, DMSComponent.DEGREE, 2, HemisphereIndicator.LATITUDE, "01.50N"),
            (-90.0, DMSComponent.DEGREE, 0, HemisphereIndicator.AZIMUTH, "270"),
            (-0.0, DMSComponent.DEGREE, 1, HemisphereIndicator.AZIMUTH, "000.0"),
            (10.0, DMSComponent.SECOND, 0, HemisphereIndicator.AZIMUTH, "010d00'00\""),
            (59.99999, DMSComponent.SECOND, 0, HemisphereIndicator.NONE, "60d00'00\""),
            (30.5 / 3600, DMSComponent.SECOND, 1, HemisphereIndicator.NONE, "0d00'30.5\""),
        ],
    )
    def test_encode(
        self,
        angle: float,
        trailing: DMSComponent,
        prec: int,
        ind: HemisphereIndicator,
        expected: str,
    ) -> None:
        """Test encoding to DMS text."""
        assert dms.encode(angle, trailing, prec, ind) == expected

    def test_separator(self) -> None:
        """Test that a separator replaces the unit letters."""
        assert dms.encode(-1.0 - 2 / 60, DMSComponent.MINUTE, 0, dmssep=":") == "-1:02"
        assert dms.encode(PITTSBURGH_LAT, dmssep=":") == "40:26:47"

    @pytest.mark.parametrize("angle, expected", [(0.5, "0"), (1.5, "2"), (2.5, "2")])
    def test_round_half_even(self, angle: float, expected: str) -> None:
        """Test that ties round to even."""
        assert dms.encode(angle, DMSComponent.DEGREE, 0) == expected

    def test_non_finite(self) -> None:
        """Test non-finite input."""
        assert dms.encode(math.nan) == "nan"
        assert dms.encode(math.inf) == "inf"
        assert dms.encode(-math.inf) == "-inf"

    def test_precision_clamped(self) -> None:
        """Test that precision is capped for the trailing component."""
        text = dms.encode(1.0, DMSComponent.SECOND, 20)
        assert text == "1d00'00.00000000000\""
        assert dms.encode(1.0, DMSComponent.DEGREE, -3) == "1"

    def test_encode_decode_agree(self) -> None:
        """Test that decoding the encoded text recovers the angle."""
        for angle in (0.1, -33.75, 123.456789, 89.999999):
            text = dms.encode(angle, DMSComponent.SECOND, 6)
            assert dms.decode(text).angle == pytest.approx(angle, abs=1e-9)

    def test_latitude_sweep(self) -> None:
        """Test that latitudes at microarcsecond precision decode to themselves."""
        rng = np.random.default_rng(20240917)
        angles = [90.0, -90.0, 0.0, -0.0] + list(rng.uniform(-90.0, 90.0, 2000))
        for angle in angles:
            text = dms.encode(angle, DMSComponent.SECOND, 6, HemisphereIndicator.LATITUDE)
            result = dms.decode(text)
            assert result.indicator == HemisphereIndicator.LATITUDE
            assert result.angle == pytest.approx(angle, abs=1e-6 / 3600)

    def test_latitude_signed_zero(self) -> None:
        """Test that -0 encodes as south and decodes back to -0."""
        text = dms.encode(-0.0, DMSComponent.SECOND, 6, HemisphereIndicator.LATITUDE)
        assert text == "00d00'00.000000\"S"
        assert geomath.signbit(dms.decode(text).angle)
        assert dms.encode(90.0, DMSComponent.SECOND, 6, HemisphereIndicator.LATITUDE) == (
            "90d00'00.000000\"N"
        )

    @pytest.mark.parametrize(
        "prec, ind, expected",
        [
            (0, HemisphereIndicator.LATITUDE, "40N"),
            (2, HemisphereIndicator.LATITUDE, "40d27'N"),
            (4, HemisphereIndicator.LATITUDE, "40d26'47\"N"),
            (5, HemisphereIndicator.NONE, "40d26'47.0\""),
        ],
    )
    def test_encode_with_precision(self, prec: int, ind: HemisphereIndicator, expected: str) -> None:
        """Test the combined precision levels."""
        assert dms.encode_with_precision(PITTSBURGH_LAT, prec, ind) == expected

    def test_encode_as_number(self) -> None:
        """Test NUMBER formatting."""
        assert dms.encode_with_precision(1.23456, 3, HemisphereIndicator.NUMBER) == "1.235"

    def test_split_components(self) -> None:
        """Test splitting into degrees, minutes and seconds."""
        assert dms.encode_deg_min(-1.5) == (-1.0, -30.0)
        d, m, s = dms.encode_deg_min_sec(1.5125)
        assert (d, m) == (1.0, 30.0)
        assert s == pytest.approx(45.0)
