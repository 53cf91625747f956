"""
UTM/UPS zone selection and conversions.

This module picks the UTM zone or UPS cap for a geodetic position, applies
false origins, and validates projected coordinates. UTM positions are
projected with Transverse Mercator (series or exact, per settings) and UPS
positions with Polar Stereographic.

Zones are integers: 1-60 for UTM, 0 (ZoneSpec.UPS) for UPS, and the
negative ZoneSpec values as requests for automatic selection.
"""

import logging
import math
import re
from typing import Optional, Tuple

from gridref.core import geomath
from gridref.core.config import settings
from gridref.core.crs import grid
from gridref.core.errors import ConsistencyError, ParseError, ValidationError
from gridref.core.projection.polar_stereographic import ups_projection
from gridref.core.projection.transverse_mercator import TransverseMercator, utm_projection
from gridref.models.coordinates import (
    GeodeticCoordinates,
    ProjectedPoint,
    TransverseMercatorKind,
    Zone,
    ZoneSpec,
)

logger = logging.getLogger(__name__)

MIN_PSEUDO_ZONE = ZoneSpec.INVALID
MIN_ZONE = 0
MIN_UTM_ZONE = 1
MAX_UTM_ZONE = 60
MAX_ZONE = 60

# EPSG codes for WGS 84 / UTM and UPS
EPSG_01N = 32601
EPSG_60N = 32660
EPSG_UPS_N = 32661
EPSG_01S = 32701
EPSG_60S = 32760
EPSG_UPS_S = 32761

_ZONE_NUMBER_PATTERN = re.compile(r"\s*[+-]?\d+")


def _transverse_mercator() -> TransverseMercator:
    kind = (
        TransverseMercatorKind.EXACT
        if settings.exact_transverse_mercator
        else TransverseMercatorKind.SERIES
    )
    return utm_projection(kind)


def central_meridian(zone: int) -> float:
    """Central meridian in degrees of a UTM zone."""
    return 6.0 * zone - 183


def utm_shift() -> float:
    """Shift in northing between the southern and northern UTM conventions."""
    return grid.UTM_N_SHIFT


def standard_zone(lat: float, lon: float, setzone: int = ZoneSpec.STANDARD) -> int:
    """
    Determine the zone for a geodetic position.

    Latitude bands and longitudes are closed on the lower end and open on
    the upper, so UTM zone 38 covers latitudes [-80, 84) and longitudes
    [42, 48). The Norway (band V) and Svalbard (band X) exceptions apply.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        setzone: Explicit zone in [0, 60] (returned as is) or a ZoneSpec
            pseudo-zone: UTM forces a UTM zone even near the poles,
            STANDARD and MATCH apply the standard rules

    Returns:
        Zone number in [0, 60], or ZoneSpec.INVALID for NaN input

    Raises:
        ValidationError: If setzone is outside [-4, 60]
    """
    if not (MIN_PSEUDO_ZONE <= setzone <= MAX_ZONE):
        raise ValidationError(
            f"Illegal zone requested {setzone}", field="setzone", value=setzone
        )
    if setzone >= MIN_ZONE or setzone == ZoneSpec.INVALID:
        return int(setzone)
    if math.isnan(lat) or math.isnan(lon):
        return int(ZoneSpec.INVALID)
    if setzone == ZoneSpec.UTM or -80 <= lat < 84:
        ilon = math.floor(geomath.ang_normalize(lon))
        if ilon == geomath.HD:
            # ilon now in [-180, 180)
            ilon = -int(geomath.HD)
        zone = (ilon + 186) // 6
        band = grid.latitude_band(lat)
        if band == 7 and zone == 31 and ilon >= 3:
            # Norway exception
            zone = 32
        elif band == 9 and 0 <= ilon < 42:
            # Svalbard exception
            zone = 2 * ((ilon + 183) // 12) + 1
        return zone
    return int(ZoneSpec.UPS)


def check_coords(
    utmp: bool,
    northp: bool,
    x: float,
    y: float,
    mgrslimits: bool = False,
    throwp: bool = True,
) -> bool:
    """
    Check that projected coordinates lie within the zone limits.

    The limits are the MGRS limits padded by 100km on every side unless
    mgrslimits is set. Northern UTM northings may continue below the
    equator and southern ones above it.

    Args:
        utmp: True for UTM, False for UPS
        northp: True for the northern hemisphere
        x: Easting in meters
        y: Northing in meters
        mgrslimits: Use the stricter MGRS limits
        throwp: Raise instead of returning False

    Returns:
        True if the coordinates are in range

    Raises:
        ValidationError: If out of range and throwp is set
    """
    slop = 0.0 if mgrslimits else grid.TILE
    ind = grid.hemisphere_index(utmp, northp)
    system = ("MGRS/" if mgrslimits else "") + ("UTM" if utmp else "UPS")
    hemisphere = "N" if northp else "S"
    min_x = grid.MIN_EASTING[ind] * grid.TILE - slop
    max_x = grid.MAX_EASTING[ind] * grid.TILE + slop
    if x < min_x or x > max_x:
        if not throwp:
            return False
        raise ValidationError(
            f"Easting {x / 1000:g}km not in {system} range for {hemisphere} "
            f"hemisphere [{min_x / 1000:g}km, {max_x / 1000:g}km]",
            field="x",
            value=x,
        )
    min_y = grid.MIN_NORTHING[ind] * grid.TILE - slop
    max_y = grid.MAX_NORTHING[ind] * grid.TILE + slop
    if y < min_y or y > max_y:
        if not throwp:
            return False
        raise ValidationError(
            f"Northing {y / 1000:g}km not in {system} range for {hemisphere} "
            f"hemisphere [{min_y / 1000:g}km, {max_y / 1000:g}km]",
            field="y",
            value=y,
        )
    return True


def forward(
    lat: float,
    lon: float,
    setzone: int = ZoneSpec.STANDARD,
    mgrslimits: bool = False,
) -> ProjectedPoint:
    """
    Convert a geodetic position to UTM/UPS.

    The northing jumps by utm_shift() when crossing the equator southward;
    use transfer() to remove the discontinuity.

    Args:
        lat: Latitude in degrees, [-90, 90]
        lon: Longitude in degrees
        setzone: Zone override, see standard_zone()
        mgrslimits: Enforce the stricter MGRS coordinate limits

    Returns:
        ProjectedPoint (zone, northp, x, y, gamma, k); NaN coordinates
        with zone INVALID for NaN input

    Raises:
        ValidationError: If lat is out of range, lon is more than 60
            degrees from the zone's central meridian, a UPS latitude is
            more than 20 degrees from the pole, or the result is outside
            the zone limits
    """
    if abs(lat) > geomath.QD:
        raise ValidationError(
            f"Latitude {lat:g}d not in [-{geomath.QD:g}d, {geomath.QD:g}d]",
            field="lat",
            value=lat,
        )
    northp = not geomath.signbit(lat)
    zone = standard_zone(lat, lon, setzone)
    if zone == ZoneSpec.INVALID:
        return ProjectedPoint(int(ZoneSpec.INVALID), northp, math.nan, math.nan, math.nan, math.nan)

    utmp = zone != ZoneSpec.UPS
    if utmp:
        lon0 = central_meridian(zone)
        dlon = geomath.ang_diff(lon0, lon)
        if not abs(dlon) <= 60:
            raise ValidationError(
                f"Longitude {lon:g}d more than 60d from center of UTM zone {zone}",
                field="lon",
                value=lon,
            )
        x, y, gamma, k = _transverse_mercator().forward(lon0, lat, lon)
    else:
        if abs(lat) < 70:
            raise ValidationError(
                f"Latitude {lat:g}d more than 20d from {'N' if northp else 'S'} pole",
                field="lat",
                value=lat,
            )
        x, y, gamma, k = ups_projection().forward(northp, lat, lon)

    ind = grid.hemisphere_index(utmp, northp)
    x += grid.FALSE_EASTING[ind]
    y += grid.FALSE_NORTHING[ind]
    if not check_coords(utmp, northp, x, y, mgrslimits, throwp=False):
        raise ValidationError(
            f"Latitude {lat:g}, longitude {lon:g} out of legal range for "
            + (f"UTM zone {zone}" if utmp else "UPS"),
            details={"lat": lat, "lon": lon, "zone": zone},
        )
    logger.debug(f"Projected ({lat}, {lon}) into zone {zone}{'N' if northp else 'S'}")
    return ProjectedPoint(zone, northp, x, y, gamma, k)


def reverse(
    zone: int,
    northp: bool,
    x: float,
    y: float,
    mgrslimits: bool = False,
) -> GeodeticCoordinates:
    """
    Convert UTM/UPS coordinates to a geodetic position.

    UTM eastings may be in [0km, 1000km]; northings in [-9100km, 9600km]
    for the northern hemisphere and [900km, 19600km] for the southern.
    UPS eastings and northings may be in [1200km, 2800km] in the north and
    [700km, 3300km] in the south. These ranges shrink by 100km on every
    side with mgrslimits.

    Args:
        zone: UTM zone, or 0 for UPS
        northp: True for the northern hemisphere
        x: Easting in meters
        y: Northing in meters
        mgrslimits: Enforce the stricter MGRS coordinate limits

    Returns:
        GeodeticCoordinates (lat, lon, gamma, k); all NaN for the INVALID
        zone or NaN coordinates

    Raises:
        ValidationError: If zone, x or y is out of range
    """
    if zone == ZoneSpec.INVALID or math.isnan(x) or math.isnan(y):
        return GeodeticCoordinates(math.nan, math.nan, math.nan, math.nan)
    if not (MIN_ZONE <= zone <= MAX_ZONE):
        raise ValidationError(f"Zone {zone} not in range [0, 60]", field="zone", value=zone)
    utmp = zone != ZoneSpec.UPS
    check_coords(utmp, northp, x, y, mgrslimits)
    ind = grid.hemisphere_index(utmp, northp)
    x -= grid.FALSE_EASTING[ind]
    y -= grid.FALSE_NORTHING[ind]
    if utmp:
        return _transverse_mercator().reverse(central_meridian(zone), x, y)
    return ups_projection().reverse(northp, x, y)


def transfer(
    zonein: int,
    northpin: bool,
    xin: float,
    yin: float,
    zoneout: int,
    northpout: bool,
) -> Tuple[int, float, float]:
    """
    Re-express UTM/UPS coordinates in another zone and hemisphere convention.

    For example, transfer(zone, northp, x, y, zone, True) extends the
    northern UTM convention across the equator.

    Args:
        zonein: Input zone
        northpin: Input hemisphere
        xin: Input easting in meters
        yin: Input northing in meters
        zoneout: Requested zone, or a ZoneSpec (MATCH keeps zonein)
        northpout: Requested hemisphere convention

    Returns:
        Tuple (zone, x, y) in the requested convention

    Raises:
        ConsistencyError: If UPS coordinates would change hemisphere
        ValidationError: If the coordinates are out of range
    """
    northp = northpin
    if zonein != zoneout:
        lat, lon, _, _ = reverse(zonein, northpin, xin, yin)
        zone, northp, xout, yout, _, _ = forward(
            lat, lon, zonein if zoneout == ZoneSpec.MATCH else zoneout
        )
        if zone == ZoneSpec.UPS and northp != northpout:
            raise ConsistencyError("Attempt to transfer UPS coordinates between hemispheres")
    else:
        if zoneout == ZoneSpec.UPS and northp != northpout:
            raise ConsistencyError("Attempt to transfer UPS coordinates between hemispheres")
        zone, xout, yout = zoneout, xin, yin
    if northp != northpout:
        yout += (-1 if northpout else 1) * grid.UTM_N_SHIFT
        logger.debug(f"Shifted northing to the {'N' if northpout else 'S'} hemisphere convention")
    return zone, xout, yout


def encode_zone(zone: int, northp: bool, abbrev: bool = True) -> str:
    """
    Zone designator such as "38n", "38north", "s" or "south".

    Args:
        zone: Zone in [0, 60] or ZoneSpec.INVALID
        northp: True for the northern hemisphere
        abbrev: Use a single hemisphere letter

    Returns:
        Lower case designator; "inv" or "invalid" for the INVALID zone

    Raises:
        ValidationError: If zone is out of range
    """
    if zone == ZoneSpec.INVALID:
        return "inv" if abbrev else "invalid"
    if not (MIN_ZONE <= zone <= MAX_ZONE):
        raise ValidationError(f"Zone {zone} not in range [0, 60]", field="zone", value=zone)
    prefix = f"{zone:02d}" if zone != ZoneSpec.UPS else ""
    if abbrev:
        return prefix + ("n" if northp else "s")
    return prefix + ("north" if northp else "south")


def decode_zone(zonestr: str) -> Zone:
    """
    Parse a zone designator.

    Accepts a 1 or 2 digit UTM zone followed by n, north, s or south (case
    insensitive), the hemisphere alone for UPS, or inv/invalid.

    Args:
        zonestr: Zone designator, e.g. "38n" or "south"

    Returns:
        Zone (zone, northp)

    Raises:
        ParseError: If the designator is malformed
    """
    if not zonestr:
        raise ParseError("Empty zone specification", text=zonestr, text_format="zone")
    # Longest designators are 32north, 42south and invalid
    if len(zonestr) > 7:
        raise ParseError(
            f"More than 7 characters in zone specification {zonestr}",
            text=zonestr,
            text_format="zone",
        )
    match = _ZONE_NUMBER_PATTERN.match(zonestr)
    zone = int(match.group()) if match else 0
    q = match.end() if match else 0

    if zone == ZoneSpec.UPS:
        if q != 0:
            # 0n is not an alternative to n for UPS
            raise ParseError(
                f"Illegal zone 0 in {zonestr}, use just the hemisphere for UPS",
                text=zonestr,
                text_format="zone",
            )
    elif not (MIN_UTM_ZONE <= zone <= MAX_UTM_ZONE):
        raise ParseError(
            f"Zone {zone} not in range [1, 60]", text=zonestr, text_format="zone"
        )
    elif not zonestr[0].isdigit():
        raise ParseError(
            f"Must use unsigned number for zone {zone}", text=zonestr, text_format="zone"
        )
    elif q > 2:
        raise ParseError(
            f"More than 2 digits use to specify zone {zone}",
            text=zonestr,
            text_format="zone",
        )

    hemi = zonestr[q:].lower()
    if q == 0 and hemi in ("inv", "invalid"):
        return Zone(int(ZoneSpec.INVALID), False)
    northp = hemi in ("north", "n")
    if not (northp or hemi in ("south", "s")):
        raise ParseError(
            f"Illegal hemisphere {hemi} in {zonestr}, specify north or south",
            text=zonestr,
            text_format="zone",
        )
    return Zone(zone, northp)


def encode_epsg(zone: int, northp: bool) -> int:
    """
    EPSG code of a WGS 84 UTM or UPS coordinate system.

    Returns:
        EPSG code, or -1 if zone is not a real zone
    """
    epsg = -1
    if zone == ZoneSpec.UPS:
        epsg = EPSG_UPS_S
    elif MIN_UTM_ZONE <= zone <= MAX_UTM_ZONE:
        epsg = zone - MIN_UTM_ZONE + EPSG_01S
    if epsg >= 0 and northp:
        epsg += EPSG_UPS_N - EPSG_UPS_S
    return epsg


def decode_epsg(epsg: int) -> Zone:
    """
    Zone and hemisphere for a WGS 84 UTM or UPS EPSG code.

    Returns:
        Zone (zone, northp); zone is ZoneSpec.INVALID for other codes
    """
    if EPSG_01N <= epsg <= EPSG_60N:
        return Zone(epsg - EPSG_01N + MIN_UTM_ZONE, True)
    if epsg == EPSG_UPS_N:
        return Zone(int(ZoneSpec.UPS), True)
    if EPSG_01S <= epsg <= EPSG_60S:
        return Zone(epsg - EPSG_01S + MIN_UTM_ZONE, False)
    if epsg == EPSG_UPS_S:
        return Zone(int(ZoneSpec.UPS), False)
    return Zone(int(ZoneSpec.INVALID), False)


def zone_label(zone: int, northp: Optional[bool] = None) -> str:
    """Human readable zone name, e.g. "UTM zone 33N" or "UPS North"."""
    if zone == ZoneSpec.UPS:
        if northp is None:
            return "UPS"
        return "UPS North" if northp else "UPS South"
    if northp is None:
        return f"UTM zone {zone}"
    return f"UTM zone {zone}{'N' if northp else 'S'}"
