"""
Free-form coordinate strings.

GeoCoords holds a single position in geodetic, UTM/UPS and MGRS form and
can be built from text such as:

- "33VVE7220287839" (MGRS)
- "40d26'47\"N 74d0'21\"W" or "40.446 -74.006" (latitude, longitude)
- "38n 444140.54 3684706.36" or "444140.54 3684706.36 38n" (UTM/UPS)

Tokens are separated by whitespace or commas.
"""

import logging
import math
import re
from typing import List, Optional

from gridref.core.config import settings
from gridref.core.crs import mgrs, utmups
from gridref.core.errors import ConsistencyError, ParseError
from gridref.core.parsers import dms
from gridref.models.coordinates import HemisphereIndicator, ZoneSpec

logger = logging.getLogger(__name__)

_TOKEN_SEPARATORS = re.compile(r"[\s,]+")


def _tokenize(s: str) -> List[str]:
    return [token for token in _TOKEN_SEPARATORS.split(s) if token]


def _parse_number(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise ParseError(
            f"Cannot decode {token} as a number", text=token, text_format="coordinate"
        ) from None


def _format_coordinate(value: float, prec: int) -> str:
    if not math.isfinite(value):
        return "nan"
    scale = 10.0 ** -prec if prec < 0 else 1.0
    text = f"{value / scale:.{max(0, prec)}f}"
    if prec < 0 and abs(value / scale) > 0.5:
        text += "0" * -prec
    return text


def utmups_string(
    zone: int, northp: bool, easting: float, northing: float, prec: int, abbrev: bool = True
) -> str:
    """
    Format a zone designator with easting and northing.

    prec is the number of decimals, down to -5 which rounds to 100km.
    """
    prec = max(-5, min(9 + settings.extra_digits, prec))
    return " ".join(
        (
            utmups.encode_zone(zone, northp, abbrev),
            _format_coordinate(easting, prec),
            _format_coordinate(northing, prec),
        )
    )


class GeoCoords:
    """
    A position with its geodetic, UTM/UPS and MGRS representations.

    Besides the standard zone, an alternate zone can be selected with
    set_alt_zone(); the alt_* properties and representations use it.

    Attributes:
        zone: UTM zone, or 0 for UPS
        northp: Hemisphere of the UTM/UPS coordinates
        easting: Easting in meters
        northing: Northing in meters
        lat: Latitude in degrees
        lon: Longitude in degrees
        convergence: Meridian convergence in degrees
        scale: Scale factor
    """

    def __init__(self, s: Optional[str] = None, centerp: bool = True, longfirst: bool = False):
        """
        Initialize GeoCoords, optionally from a coordinate string.

        Args:
            s: Coordinate string, see reset()
            centerp: Place MGRS references at the center of their square
            longfirst: Read unmarked lat/lon pairs as longitude first
        """
        self.zone = int(ZoneSpec.INVALID)
        self.northp = False
        self.easting = math.nan
        self.northing = math.nan
        self.lat = math.nan
        self.lon = math.nan
        self.convergence = math.nan
        self.scale = math.nan
        self.alt_zone = int(ZoneSpec.INVALID)
        self.alt_easting = math.nan
        self.alt_northing = math.nan
        self.alt_convergence = math.nan
        self.alt_scale = math.nan
        if s is not None:
            self.reset(s, centerp, longfirst)

    @classmethod
    def from_geodetic(cls, lat: float, lon: float, zone: int = ZoneSpec.STANDARD) -> "GeoCoords":
        """Build from latitude and longitude, projecting into zone."""
        coords = cls()
        coords.set_geodetic(lat, lon, zone)
        return coords

    @classmethod
    def from_projected(cls, zone: int, northp: bool, easting: float, northing: float) -> "GeoCoords":
        """Build from UTM/UPS coordinates."""
        coords = cls()
        coords.set_projected(zone, northp, easting, northing)
        return coords

    def reset(self, s: str, centerp: bool = True, longfirst: bool = False) -> None:
        """
        Replace the position with one parsed from s.

        One token is read as MGRS, two as latitude and longitude in DMS or
        decimal degrees, and three as a zone designator (first or last)
        with easting and northing. A three-token position whose northing
        lies in the other hemisphere is moved to that hemisphere.

        Raises:
            ParseError: If s does not have 1, 2 or 3 tokens or a token is
                malformed
            ValidationError: If the position is out of range
            ConsistencyError: If UPS coordinates lie in the wrong hemisphere
        """
        sa = _tokenize(s)
        if len(sa) == 1:
            zone, northp, x, y, _ = mgrs.reverse(sa[0], centerp)
            self.set_projected(zone, northp, x, y)
            return
        if len(sa) == 2:
            lat, lon = dms.decode_lat_lon(sa[0], sa[1], longfirst)
            self.set_geodetic(lat, lon)
            return
        if len(sa) == 3:
            if sa[0][-1].isalpha():
                zoneind, coordind = 0, 1
            elif sa[2][-1].isalpha():
                zoneind, coordind = 2, 0
            else:
                raise ParseError(
                    f"Neither {sa[0]} nor {sa[2]} of the form UTM/UPS Zone + "
                    "Hemisphere (ex: 38n, 09s, n)",
                    text=s,
                    text_format="coordinate",
                )
            zone, northp = utmups.decode_zone(sa[zoneind])
            easting = _parse_number(sa[coordind])
            northing = _parse_number(sa[coordind + 1])
            self.set_projected(zone, northp, easting, northing)
            self._fix_hemisphere()
            self._copy_to_alt()
            return
        raise ParseError(
            "Coordinate requires 1, 2, or 3 elements", text=s, text_format="coordinate"
        )

    def set_geodetic(self, lat: float, lon: float, zone: int = ZoneSpec.STANDARD) -> None:
        """Replace the position with a latitude and longitude."""
        self.lat = lat
        self.lon = lon
        (
            self.zone,
            self.northp,
            self.easting,
            self.northing,
            self.convergence,
            self.scale,
        ) = utmups.forward(lat, lon, zone)
        self._copy_to_alt()

    def set_projected(self, zone: int, northp: bool, easting: float, northing: float) -> None:
        """Replace the position with UTM/UPS coordinates."""
        self.zone = zone
        self.northp = northp
        self.easting = easting
        self.northing = northing
        self.lat, self.lon, self.convergence, self.scale = utmups.reverse(
            zone, northp, easting, northing
        )
        self._copy_to_alt()

    def set_alt_zone(self, zone: int = ZoneSpec.STANDARD) -> None:
        """
        Select the alternate zone used by the alt_* representations.

        Args:
            zone: Zone number, or a ZoneSpec; MATCH leaves it unchanged

        Raises:
            ValidationError: If the position cannot be projected into zone
        """
        if zone == ZoneSpec.MATCH:
            return
        zone = utmups.standard_zone(self.lat, self.lon, zone)
        if zone == self.zone:
            self._copy_to_alt()
            return
        (
            self.alt_zone,
            _,
            self.alt_easting,
            self.alt_northing,
            self.alt_convergence,
            self.alt_scale,
        ) = utmups.forward(self.lat, self.lon, zone)
        logger.debug(f"Alternate zone set to {self.alt_zone}")

    def geo_representation(self, prec: int = 0, longfirst: bool = False) -> str:
        """
        Latitude and longitude in decimal degrees.

        prec 0 gives 1m accuracy (5 decimals); each increment adds a
        decimal, down to -5 and up to 9.
        """
        prec = max(0, min(9 + settings.extra_digits, prec) + 5)
        first, second = (self.lon, self.lat) if longfirst else (self.lat, self.lon)
        return f"{first:.{prec}f} {second:.{prec}f}"

    def dms_representation(
        self, prec: int = 0, longfirst: bool = False, dmssep: Optional[str] = None
    ) -> str:
        """
        Latitude and longitude in degrees, minutes and seconds.

        prec 0 gives seconds to one decimal (about 3m) and -1 whole
        seconds; -5 gives whole degrees and 10 the finest resolution.
        """
        prec = max(0, min(10 + settings.extra_digits, prec) + 5)
        first = dms.encode_with_precision(
            self.lon if longfirst else self.lat,
            prec,
            HemisphereIndicator.LONGITUDE if longfirst else HemisphereIndicator.LATITUDE,
            dmssep,
        )
        second = dms.encode_with_precision(
            self.lat if longfirst else self.lon,
            prec,
            HemisphereIndicator.LATITUDE if longfirst else HemisphereIndicator.LONGITUDE,
            dmssep,
        )
        return f"{first} {second}"

    def mgrs_representation(self, prec: int = 0) -> str:
        """MGRS reference; prec 0 gives 1m resolution, -6 the grid zone only."""
        prec = max(-1, min(6, prec) + 5)
        return mgrs.forward(self.zone, self.northp, self.easting, self.northing, self.lat, prec)

    def utmups_representation(
        self, prec: int = 0, abbrev: bool = True, northp: Optional[bool] = None
    ) -> str:
        """
        Zone designator with easting and northing in meters.

        Args:
            prec: Decimals in the coordinates, [-5, 9]
            abbrev: Use "n"/"s" rather than "north"/"south"
            northp: Express the northing in this hemisphere's convention
        """
        return self._utmups(self.zone, self.easting, self.northing, prec, abbrev, northp)

    def alt_mgrs_representation(self, prec: int = 0) -> str:
        """MGRS reference in the alternate zone."""
        prec = max(-1, min(6, prec) + 5)
        return mgrs.forward(
            self.alt_zone, self.northp, self.alt_easting, self.alt_northing, self.lat, prec
        )

    def alt_utmups_representation(
        self, prec: int = 0, abbrev: bool = True, northp: Optional[bool] = None
    ) -> str:
        """UTM/UPS representation in the alternate zone."""
        return self._utmups(self.alt_zone, self.alt_easting, self.alt_northing, prec, abbrev, northp)

    def _utmups(
        self,
        zone: int,
        easting: float,
        northing: float,
        prec: int,
        abbrev: bool,
        northp: Optional[bool],
    ) -> str:
        if northp is None or northp == self.northp:
            return utmups_string(zone, self.northp, easting, northing, prec, abbrev)
        _, e, n = utmups.transfer(zone, self.northp, easting, northing, zone, northp)
        return utmups_string(zone, northp, e, n, prec, abbrev)

    def _fix_hemisphere(self) -> None:
        if (
            self.lat == 0
            or (self.northp and self.lat >= 0)
            or (not self.northp and self.lat < 0)
            or math.isnan(self.lat)
        ):
            return
        if self.zone == ZoneSpec.UPS:
            raise ConsistencyError(
                "Hemisphere mixup",
                details={"zone": self.zone, "northp": self.northp, "lat": self.lat},
            )
        self.northing += (1 if self.northp else -1) * utmups.utm_shift()
        self.northp = not self.northp
        logger.debug(f"Moved northing to the {'N' if self.northp else 'S'} hemisphere")

    def _copy_to_alt(self) -> None:
        self.alt_zone = self.zone
        self.alt_easting = self.easting
        self.alt_northing = self.northing
        self.alt_convergence = self.convergence
        self.alt_scale = self.scale

    def __repr__(self) -> str:
        return (
            f"GeoCoords(lat={self.lat!r}, lon={self.lon!r}, zone={self.zone!r}, "
            f"northp={self.northp!r}, easting={self.easting!r}, northing={self.northing!r})"
        )
