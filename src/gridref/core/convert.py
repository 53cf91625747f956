"""
Public conversion entry points.

Thin wrappers that tie the UTM/UPS selector, the MGRS codec and the DMS
codec together. Positions given as sequences use [lon, lat] order.
"""

import logging
import math
from typing import List, Optional, Sequence

from gridref.core import geomath
from gridref.core.config import settings
from gridref.core.crs import grid, mgrs, utmups
from gridref.core.errors import ValidationError
from gridref.core.parsers import dms
from gridref.core.parsers.geocoords import GeoCoords
from gridref.models.coordinates import (
    DecodedAngle,
    DMSComponent,
    GeodeticCoordinates,
    GridReference,
    HemisphereIndicator,
    ProjectedPoint,
    ZoneSpec,
)
from gridref.models.crs import WGS84_GEOGRAPHIC, BoundingBox
from gridref.utils.logging import log_function_call

logger = logging.getLogger(__name__)


def geodetic_to_projected(
    lat: float,
    lon: float,
    zone: int = ZoneSpec.STANDARD,
    mgrslimits: bool = False,
) -> ProjectedPoint:
    """
    Convert latitude and longitude to UTM/UPS.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        zone: Zone override; STANDARD picks the standard zone
        mgrslimits: Enforce the stricter MGRS coordinate limits

    Returns:
        ProjectedPoint (zone, northp, x, y, gamma, k)

    Raises:
        ValidationError: If lat is beyond the poles or the point cannot be
            projected into the zone
    """
    return utmups.forward(lat, lon, zone, mgrslimits)


def projected_to_geodetic(
    zone: int,
    northp: bool,
    x: float,
    y: float,
    mgrslimits: bool = False,
) -> GeodeticCoordinates:
    """
    Convert UTM/UPS coordinates to latitude and longitude.

    Returns all NaN, without raising, for the INVALID zone.

    Raises:
        ValidationError: If zone, x or y is out of range
    """
    return utmups.reverse(zone, northp, x, y, mgrslimits)


def projected_to_mgrs(
    zone: int,
    northp: bool,
    x: float,
    y: float,
    lat: Optional[float] = None,
    precision: int = 5,
) -> str:
    """
    Convert UTM/UPS coordinates to an MGRS reference.

    Returns "INVALID" for the INVALID zone or NaN coordinates.

    Raises:
        ValidationError: If precision is not in [-1, 11] or the
            coordinates are out of range
        ConsistencyError: If lat does not agree with the northing
    """
    return mgrs.forward(zone, northp, x, y, lat, precision)


def mgrs_to_projected(reference: str, centerp: bool = True) -> GridReference:
    """
    Convert an MGRS reference to UTM/UPS coordinates.

    References starting with "INV" give zone INVALID, NaN coordinates and
    precision -2.

    Raises:
        ParseError: If the reference is malformed
    """
    return mgrs.reverse(reference, centerp)


def decode_dms(text: str) -> DecodedAngle:
    """Decode a DMS string into (angle, hemisphere indicator)."""
    return dms.decode(text)


def encode_dms(
    angle: float,
    trailing: DMSComponent = DMSComponent.SECOND,
    precision: int = 0,
    indicator: HemisphereIndicator = HemisphereIndicator.NONE,
    separator: Optional[str] = None,
) -> str:
    """Encode an angle in degrees as a DMS string."""
    return dms.encode(angle, trailing, precision, indicator, separator)


@log_function_call()
def geodetic_to_mgrs(lonlat: Sequence[float], precision: Optional[int] = None) -> str:
    """
    MGRS reference of a [lon, lat] position.

    Args:
        lonlat: Longitude and latitude in degrees
        precision: Digits per coordinate; defaults to settings.mgrs_precision

    Returns:
        MGRS reference, "INVALID" for NaN input

    Raises:
        ValidationError: If the position or precision is out of range
    """
    if precision is None:
        precision = settings.mgrs_precision
    lon, lat = lonlat[0], lonlat[1]
    zone, northp, x, y, _, _ = utmups.forward(lat, lon)
    return mgrs.forward(zone, northp, x, y, lat, precision)


@log_function_call()
def mgrs_to_geodetic(reference: str, centerp: bool = True) -> List[float]:
    """
    [lon, lat] of an MGRS reference.

    Args:
        reference: MGRS reference
        centerp: Use the center of the square instead of its south-west corner

    Returns:
        [lon, lat] in degrees; [nan, nan] for "INV" references

    Raises:
        ParseError: If the reference is malformed
    """
    zone, northp, x, y, _ = mgrs.reverse(reference, centerp)
    lat, lon, _, _ = utmups.reverse(zone, northp, x, y)
    return [lon, lat]


def mgrs_square(reference: str) -> BoundingBox:
    """
    Geographic bounds of the square an MGRS reference designates.

    The south-west and north-east grid corners of the square are
    converted to geodetic coordinates; west and east come from their
    longitudes and south and north from their latitudes.

    Raises:
        ParseError: If the reference is malformed
        ValidationError: If the reference is a grid zone designator only
            or starts with "INV"
    """
    zone, northp, x, y, prec = mgrs.reverse(reference, centerp=False)
    if zone == ZoneSpec.INVALID:
        raise ValidationError(
            f"MGRS reference {reference} is invalid", field="reference", value=reference
        )
    if prec < 0:
        raise ValidationError(
            f"MGRS reference {reference} has no 100km square",
            field="reference",
            value=reference,
            suggestions=["Add the column and row letters, e.g. 33VVE"],
        )
    size = grid.TILE / 10**prec
    sw_lat, sw_lon, _, _ = utmups.reverse(zone, northp, x, y)
    ne_lat, ne_lon, _, _ = utmups.reverse(zone, northp, x + size, y + size)
    west, east = (sw_lon, ne_lon) if geomath.ang_diff(sw_lon, ne_lon) >= 0 else (ne_lon, sw_lon)
    logger.debug(f"Square {reference} spans {size:g} m in zone {zone}")
    return BoundingBox(
        min_x=west,
        min_y=min(sw_lat, ne_lat),
        max_x=east,
        max_y=max(sw_lat, ne_lat),
        crs=WGS84_GEOGRAPHIC,
    )


@log_function_call()
def mgrs_to_bounding_box(reference: str) -> List[float]:
    """
    [west, south, east, north] of the square an MGRS reference designates.

    Returns four NaNs for "INV" references.

    Raises:
        ParseError: If the reference is malformed
        ValidationError: If the reference is a grid zone designator only
    """
    if mgrs.reverse(reference).zone == ZoneSpec.INVALID:
        return [math.nan] * 4
    return mgrs_square(reference).to_list()


def parse_coordinates(text: str, centerp: bool = True, longfirst: bool = False) -> GeoCoords:
    """
    Parse a position given as MGRS, lat/lon or UTM/UPS text.

    See GeoCoords.reset() for the accepted forms.
    """
    return GeoCoords(text, centerp, longfirst)
