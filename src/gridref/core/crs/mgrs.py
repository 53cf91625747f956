"""
MGRS (Military Grid Reference System) encoding and decoding.

An MGRS reference is a UTM zone number (absent for UPS), a band letter,
two 100km block letters and 2 * prec digits giving the position within
the block. Precision runs from -1 (grid zone designator only) to 11
(1 micrometer); precision 5 is 1m.

Encoding truncates toward the south-west corner of the square. Decoding
returns either that corner or, with centerp, the center of the square, so
that a round trip at precision 5 is good to 0.5m in each coordinate.
"""

import logging
import math
from typing import Optional

from gridref.core.crs import grid, utmups
from gridref.core.crs.grid import approx_latitude_band, latitude_band
from gridref.core.errors import ConsistencyError, ParseError, ValidationError
from gridref.models.coordinates import GridReference, GridReferenceParts, ZoneSpec

logger = logging.getLogger(__name__)

HEMISPHERES = "SN"
UTM_COLS = ("ABCDEFGH", "JKLMNPQR", "STUVWXYZ")
UTM_ROW = "ABCDEFGHJKLMNPQRSTUV"
UPS_COLS = ("JKLPQRSTUXYZ", "ABCFGHJKLPQR", "RSTUXYZ", "ABCFGHJ")
UPS_ROWS = ("ABCDEFGHJKLMNPQRSTUVWXYZ", "ABCDEFGHJKLMNP")
LAT_BAND = "CDEFGHJKLMNPQRSTUVWX"
UPS_BAND = "ABYZ"
DIGITS = "0123456789"
ALPHA = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjklmnpqrstuvwxyz"

BASE = 10
TILE_LEVEL = 5
UTM_ROW_PERIOD = 20
UTM_EVEN_ROW_SHIFT = 5
MAX_PREC = 5 + 6
# Micrometers per meter; coordinates are truncated on this grid
MULT = 1000000

# Latitudes within this of the equator are put in band N or M by hemisphere
_ANGEPS = 2.0**-46
# Nudge for coordinates exactly on an excluded upper limit
_EDGE_EPS = 2.0**-28

# Band checks for check(): (band, easting in tiles, northing in tiles) for
# points on the south and north edges of each northern band in zone 38
_BAND_CHECKS = (
    (0, 5, 0), (0, 9, 0), (0, 5, 8), (0, 9, 8),
    (1, 5, 9), (1, 9, 9), (1, 5, 17), (1, 9, 17),
    (2, 5, 18), (2, 9, 18), (2, 5, 26), (2, 9, 26),
    (3, 5, 27), (3, 9, 27), (3, 5, 35), (3, 9, 35),
    (4, 5, 36), (4, 9, 36), (4, 5, 44), (4, 9, 44),
    (5, 5, 45), (5, 9, 45), (5, 5, 53), (5, 9, 53),
    (6, 5, 54), (6, 9, 54), (6, 5, 62), (6, 9, 62),
    (7, 5, 63), (7, 9, 63), (7, 5, 70), (7, 7, 70), (7, 7, 71), (7, 9, 71),
    (8, 5, 71), (8, 6, 71), (8, 6, 72), (8, 9, 72),
    (8, 5, 79), (8, 8, 79), (8, 8, 80), (8, 9, 80),
    (9, 5, 80), (9, 7, 80), (9, 7, 81), (9, 9, 81),
    (9, 5, 95), (9, 9, 95),
)

__all__ = [
    "approx_latitude_band",
    "check",
    "check_coords",
    "decode",
    "forward",
    "latitude_band",
    "reverse",
    "utm_row",
]


def _lookup(alphabet: str, c: str) -> int:
    # Case-insensitive index of a single character, -1 if absent
    u = c.upper()
    return alphabet.find(u) if len(u) == 1 else -1


def check_coords(utmp: bool, northp: bool, x: float, y: float):
    """
    Check projected coordinates against the MGRS limits.

    Values exactly on an excluded upper limit are moved inside by a tiny
    amount. UTM northings beyond the nominal hemisphere are re-expressed
    in the other hemisphere, except for y exactly at 10000km in the south,
    which is kept in the south.

    Args:
        utmp: True for UTM, False for UPS
        northp: True for the northern hemisphere
        x: Easting in meters
        y: Northing in meters

    Returns:
        Tuple (northp, x, y) after adjustment

    Raises:
        ValidationError: If the coordinates are outside the MGRS limits
    """
    ix = math.floor(x / grid.TILE)
    iy = math.floor(y / grid.TILE)
    ind = grid.hemisphere_index(utmp, northp)
    system = "UTM" if utmp else "UPS"
    hemisphere = "N" if northp else "S"
    if not (grid.MIN_EASTING[ind] <= ix < grid.MAX_EASTING[ind]):
        if ix == grid.MAX_EASTING[ind] and x == grid.MAX_EASTING[ind] * grid.TILE:
            x -= _EDGE_EPS
        else:
            raise ValidationError(
                f"Easting {math.floor(x / 1000)}km not in MGRS/{system} range for "
                f"{hemisphere} hemisphere [{grid.MIN_EASTING[ind] * grid.TILE / 1000:g}km, "
                f"{grid.MAX_EASTING[ind] * grid.TILE / 1000:g}km]",
                field="x",
                value=x,
            )
    if not (grid.MIN_NORTHING[ind] <= iy < grid.MAX_NORTHING[ind]):
        if iy == grid.MAX_NORTHING[ind] and y == grid.MAX_NORTHING[ind] * grid.TILE:
            y -= _EDGE_EPS
        else:
            raise ValidationError(
                f"Northing {math.floor(y / 1000)}km not in MGRS/{system} range for "
                f"{hemisphere} hemisphere [{grid.MIN_NORTHING[ind] * grid.TILE / 1000:g}km, "
                f"{grid.MAX_NORTHING[ind] * grid.TILE / 1000:g}km]",
                field="y",
                value=y,
            )
    if utmp:
        if northp and iy < grid.MIN_UTM_N_ROW:
            northp = False
            y += grid.UTM_N_SHIFT
        elif not northp and iy >= grid.MAX_UTM_S_ROW:
            if y == grid.MAX_UTM_S_ROW * grid.TILE:
                y -= _EDGE_EPS
            else:
                northp = True
                y -= grid.UTM_N_SHIFT
    return northp, x, y


def utm_row(iband: int, icol: int, irow: int) -> int:
    """
    Resolve the periodic UTM row letter index to a true row.

    Args:
        iband: Latitude band in [-10, 10)
        icol: Column index in [0, 8) with origin at easting 100km
        irow: Periodic row index in [0, 20) with origin at the equator

    Returns:
        True row index in [-90, 95), or 100 if the row is not compatible
        with the band
    """
    # Center row of the band; 90 degrees = 100 tiles, 1 band = 8 degrees
    c = 100 * (8 * iband + 4) / 90.0
    northp = 1 if iband >= 0 else 0
    # Safe bounds on the rows:
    #  iband minrow maxrow
    #   -10    -90    -81
    #    -9    -80    -72
    #    -8    -71    -63
    #    -7    -63    -54
    #    -6    -54    -45
    #    -5    -45    -36
    #    -4    -36    -27
    #    -3    -27    -18
    #    -2    -18     -9
    #    -1     -9     -1
    #     0      0      8
    #     1      8     17
    #     2     17     26
    #     3     26     35
    #     4     35     44
    #     5     44     53
    #     6     53     62
    #     7     62     70
    #     8     71     79
    #     9     80     94
    minrow = math.floor(c - 4.3 - 0.1 * northp) if iband > -10 else -90
    maxrow = math.floor(c + 4.4 - 0.1 * northp) if iband < 9 else 94
    # Integer division truncating toward zero
    baserow = int((minrow + maxrow) / 2) - UTM_ROW_PERIOD // 2
    # Offset by 100 rows to keep the dividend positive
    irow = (irow - baserow + grid.MAX_UTM_S_ROW) % UTM_ROW_PERIOD + baserow
    if not (minrow <= irow <= maxrow):
        # Northern blocks of bands 7 and 8 extend into the next band, and
        # likewise in the south
        sband = iband if iband >= 0 else -iband - 1
        srow = irow if irow >= 0 else -irow - 1
        scol = icol if icol < 4 else -icol + 7
        if not (
            (srow == 70 and sband == 8 and scol >= 2)
            or (srow == 71 and sband == 7 and scol <= 2)
            or (srow == 79 and sband == 9 and scol >= 1)
            or (srow == 80 and sband == 8 and scol <= 1)
        ):
            irow = grid.MAX_UTM_S_ROW
    return irow


def _estimate_latitude(zone: int, northp: bool, x: float, y: float) -> float:
    # Latitude good enough to pick the band of a UTM point
    if zone <= 0:
        # Not needed for UPS and 0 is safe
        return 0.0
    ys = (y if northp else y - grid.UTM_N_SHIFT) / grid.TILE
    if abs(ys) < 1:
        # Accurate enough near the equator
        return 0.9 * ys
    # Poleward bound: a fit from above of lat(x, y) for x = 500km and
    # y in [0km, 950km]
    latp = 0.901 * ys + (1 if ys > 0 else -1) * 0.135
    # Equatorward bound: a fit from below for x = 900km
    late = 0.902 * ys * (1 - 1.85e-6 * ys * ys)
    if latitude_band(latp) == latitude_band(late):
        return latp
    logger.debug(f"Band ambiguous for y={y}, computing latitude exactly")
    return utmups.reverse(zone, northp, x, y).lat


def forward(
    zone: int,
    northp: bool,
    x: float,
    y: float,
    lat: Optional[float] = None,
    prec: int = 5,
) -> str:
    """
    Convert UTM/UPS coordinates to an MGRS reference.

    The latitude selects the band letter. When it is omitted, a cheap
    estimate from the northing is used, falling back to a full inverse
    projection if the estimate straddles a band boundary. A supplied
    latitude is always used as given.

    Args:
        zone: UTM zone, 0 for UPS, or ZoneSpec.INVALID
        northp: True for the northern hemisphere
        x: Easting in meters
        y: Northing in meters
        lat: Latitude in degrees, optional
        prec: Precision in [-1, 11]

    Returns:
        MGRS reference, or "INVALID" for the INVALID zone or NaN input

    Raises:
        ValidationError: If zone, prec or the coordinates are out of range
        ConsistencyError: If lat does not agree with the UTM row
    """
    if zone == ZoneSpec.INVALID or math.isnan(x) or math.isnan(y):
        return "INVALID"
    if lat is None:
        lat = _estimate_latitude(zone, northp, x, y)
    if math.isnan(lat):
        return "INVALID"

    utmp = zone != ZoneSpec.UPS
    northp, x, y = check_coords(utmp, northp, x, y)
    if not (utmups.MIN_ZONE <= zone <= utmups.MAX_ZONE):
        raise ValidationError(f"Zone {zone} not in [0,60]", field="zone", value=zone)
    if not (-1 <= prec <= MAX_PREC):
        raise ValidationError(
            f"MGRS precision {prec} not in [-1, {MAX_PREC}]", field="prec", value=prec
        )

    zone1 = zone - 1
    mgrs = []
    if utmp:
        mgrs.append(f"{zone:02d}")
    ix = math.floor(x * MULT)
    iy = math.floor(y * MULT)
    m = MULT * int(grid.TILE)
    xh = ix // m
    yh = iy // m
    if utmp:
        # Correct fuzziness in latitude near the equator
        iband = (0 if northp else -1) if abs(lat) < _ANGEPS else latitude_band(lat)
        icol = xh - grid.MIN_UTM_COL
        irow = utm_row(iband, icol, yh % UTM_ROW_PERIOD)
        if irow != yh - (grid.MIN_UTM_N_ROW if northp else grid.MAX_UTM_S_ROW):
            raise ConsistencyError(
                f"Latitude {lat:g} is inconsistent with UTM coordinates",
                details={"zone": zone, "northp": northp, "x": x, "y": y, "lat": lat},
            )
        mgrs.append(LAT_BAND[10 + iband])
        mgrs.append(UTM_COLS[zone1 % 3][icol])
        mgrs.append(UTM_ROW[(yh + (UTM_EVEN_ROW_SHIFT if zone1 & 1 else 0)) % UTM_ROW_PERIOD])
    else:
        eastp = xh >= grid.UPS_EASTING
        iband = (2 if northp else 0) + (1 if eastp else 0)
        mgrs.append(UPS_BAND[iband])
        if eastp:
            col_origin = grid.UPS_EASTING
        else:
            col_origin = grid.MIN_UPS_N_IND if northp else grid.MIN_UPS_S_IND
        mgrs.append(UPS_COLS[iband][xh - col_origin])
        row_origin = grid.MIN_UPS_N_IND if northp else grid.MIN_UPS_S_IND
        mgrs.append(UPS_ROWS[northp][yh - row_origin])

    if prec > 0:
        d = BASE ** (MAX_PREC - prec)
        ix = (ix - m * xh) // d
        iy = (iy - m * yh) // d
        mgrs.append(f"{ix:0{prec}d}")
        mgrs.append(f"{iy:0{prec}d}")
    text = "".join(mgrs)
    # prec = -1 drops the block letters
    return text[: (2 if utmp else 0) + 3 + 2 * prec] if prec < 0 else text


def reverse(mgrs: str, centerp: bool = True) -> GridReference:
    """
    Convert an MGRS reference to UTM/UPS coordinates.

    Letters are case-insensitive. A grid zone designator alone (e.g. "38S")
    returns a representative point in that zone and band with prec -1;
    centerp is ignored in that case.

    Args:
        mgrs: MGRS reference
        centerp: Return the center of the square instead of its south-west
            corner

    Returns:
        GridReference (zone, northp, x, y, precision); references starting
        with "INV" give zone INVALID, NaN coordinates and precision -2

    Raises:
        ParseError: If the reference is malformed
    """
    length = len(mgrs)
    if length >= 3 and mgrs[:3].upper() == "INV":
        return GridReference(int(ZoneSpec.INVALID), False, math.nan, math.nan, -2)

    p = 0
    zone = 0
    while p < length:
        i = _lookup(DIGITS, mgrs[p])
        if i < 0:
            break
        zone = 10 * zone + i
        p += 1
    if p > 0 and not (utmups.MIN_UTM_ZONE <= zone <= utmups.MAX_UTM_ZONE):
        raise ParseError(f"Zone {zone} not in [1,60]", text=mgrs, text_format="MGRS")
    if p > 2:
        raise ParseError(
            f"More than 2 digits at start of MGRS {mgrs[:p]}", text=mgrs, text_format="MGRS"
        )
    if length - p < 1:
        raise ParseError(f"MGRS string too short {mgrs}", text=mgrs, text_format="MGRS")

    utmp = zone != ZoneSpec.UPS
    zonem1 = zone - 1
    band = LAT_BAND if utmp else UPS_BAND
    iband = _lookup(band, mgrs[p])
    p += 1
    if iband < 0:
        raise ParseError(
            f"Band letter {mgrs[p - 1]} not in {'UTM' if utmp else 'UPS'} set {band}",
            text=mgrs,
            text_format="MGRS",
        )
    northp = iband >= (10 if utmp else 2)

    if p == length:
        # Grid zone only; deg is the approximate length of a degree of
        # meridian arc in tiles
        deg = grid.UTM_N_SHIFT / (90 * grid.TILE)
        if utmp:
            # Central meridian except for 31V, center of the 8 degree band
            x = (4 if zone == 31 and iband == 17 else 5) * grid.TILE
            y = math.floor(8 * (iband - 9.5) * deg + 0.5) * grid.TILE + (
                0 if northp else grid.UTM_N_SHIFT
            )
        else:
            # Latitude 86N or 86S at longitude 90E or 90W
            x = ((1 if iband & 1 else -1) * math.floor(4 * deg + 0.5) + grid.UPS_EASTING) * grid.TILE
            y = grid.UPS_EASTING * grid.TILE
        return GridReference(zone, northp, x, y, -1)
    if length - p < 2:
        raise ParseError(f"Missing row letter in {mgrs}", text=mgrs, text_format="MGRS")

    col = UTM_COLS[zonem1 % 3] if utmp else UPS_COLS[iband]
    row = UTM_ROW if utmp else UPS_ROWS[northp]
    icol = _lookup(col, mgrs[p])
    p += 1
    if icol < 0:
        where = f"zone {mgrs[:p - 2]}" if utmp else f"UPS band {mgrs[p - 2]}"
        raise ParseError(
            f"Column letter {mgrs[p - 1]} not in {where} set {col}",
            text=mgrs,
            text_format="MGRS",
        )
    irow = _lookup(row, mgrs[p])
    p += 1
    if irow < 0:
        where = "UTM" if utmp else f"UPS {HEMISPHERES[northp]}"
        raise ParseError(
            f"Row letter {mgrs[p - 1]} not in {where} set {row}",
            text=mgrs,
            text_format="MGRS",
        )

    if utmp:
        if zonem1 & 1:
            irow = (irow + UTM_ROW_PERIOD - UTM_EVEN_ROW_SHIFT) % UTM_ROW_PERIOD
        iband -= 10
        irow = utm_row(iband, icol, irow)
        if irow == grid.MAX_UTM_S_ROW:
            raise ParseError(
                f"Block {mgrs[p - 2:p]} not in zone/band {mgrs[:p - 2]}",
                text=mgrs,
                text_format="MGRS",
            )
        irow = irow if northp else irow + 100
        icol = icol + grid.MIN_UTM_COL
    else:
        eastp = iband & 1
        if eastp:
            icol += grid.UPS_EASTING
        else:
            icol += grid.MIN_UPS_N_IND if northp else grid.MIN_UPS_S_IND
        irow += grid.MIN_UPS_N_IND if northp else grid.MIN_UPS_S_IND

    prec = (length - p) // 2
    unit = 1
    x1 = icol
    y1 = irow
    for i in range(prec):
        unit *= BASE
        ix = _lookup(DIGITS, mgrs[p + i])
        iy = _lookup(DIGITS, mgrs[p + i + prec])
        if ix < 0 or iy < 0:
            raise ParseError(
                f"Encountered a non-digit in {mgrs[p:]}", text=mgrs, text_format="MGRS"
            )
        x1 = BASE * x1 + ix
        y1 = BASE * y1 + iy
    if (length - p) % 2:
        if _lookup(DIGITS, mgrs[length - 1]) < 0:
            raise ParseError(
                f"Encountered a non-digit in {mgrs[p:]}", text=mgrs, text_format="MGRS"
            )
        raise ParseError(
            f"Not an even number of digits in {mgrs[p:]}", text=mgrs, text_format="MGRS"
        )
    if prec > MAX_PREC:
        raise ParseError(
            f"More than {2 * MAX_PREC} digits in {mgrs[p:]}", text=mgrs, text_format="MGRS"
        )
    if centerp:
        unit *= 2
        x1 = 2 * x1 + 1
        y1 = 2 * y1 + 1
    x = grid.TILE * x1 / unit
    y = grid.TILE * y1 / unit
    return GridReference(zone, northp, x, y, prec)


def decode(mgrs: str) -> GridReferenceParts:
    """
    Split an MGRS reference into grid zone, block and digit strings.

    Only the structure is checked; letters and zone numbers are not
    validated against the alphabets.

    Args:
        mgrs: MGRS reference, e.g. "38SMB4488"

    Returns:
        GridReferenceParts (gridzone, block, easting, northing), e.g.
        ("38S", "MB", "44", "88")

    Raises:
        ParseError: If the reference is malformed
    """
    length = len(mgrs)
    if length >= 3 and mgrs[:3].upper() == "INV":
        return GridReferenceParts(mgrs[:3], "", "", "")

    p0 = 0
    while p0 < length and mgrs[p0] in DIGITS:
        p0 += 1
    if p0 == length:
        raise ParseError("ref does not contain alpha chars", text=mgrs, text_format="MGRS")
    if p0 > 2:
        raise ParseError("ref does not start with 0-2 digits", text=mgrs, text_format="MGRS")
    p1 = p0
    while p1 < length and mgrs[p1] in ALPHA:
        p1 += 1
    if p1 == p0:
        raise ParseError("ref contains non alphanumeric chars", text=mgrs, text_format="MGRS")
    if not (p1 == p0 + 1 or p1 == p0 + 3):
        raise ParseError("ref must contain 1 or 3 alpha chars", text=mgrs, text_format="MGRS")
    if p1 == p0 + 1 and p1 < length:
        raise ParseError("ref contains junk after 1 alpha char", text=mgrs, text_format="MGRS")
    if any(c not in DIGITS for c in mgrs[p1:]):
        raise ParseError("ref contains junk at end", text=mgrs, text_format="MGRS")
    if (length - p1) % 2:
        raise ParseError("ref must end with even no of digits", text=mgrs, text_format="MGRS")
    half = p1 + (length - p1) // 2
    return GridReferenceParts(mgrs[: p0 + 1], mgrs[p0 + 1 : p1], mgrs[p1:half], mgrs[half:])


def check() -> None:
    """
    Verify that the zone limits and band tables are mutually consistent.

    Checks UTM coverage of the equator and of latitudes 84N and 80S, that
    the Norway and Svalbard exceptions leave no gaps, that UPS reaches the
    UTM limits, and that the tabulated points on band edges in zone 38
    fall in the expected bands.

    Raises:
        ConsistencyError: On the first failed check
    """
    t = grid.TILE
    if not utmups.reverse(31, True, 1 * t, 0 * t).lon < 0:
        raise ConsistencyError("MGRS::Check: equator coverage failure")
    if not utmups.reverse(31, True, 1 * t, 95 * t).lat > 84:
        raise ConsistencyError("MGRS::Check: UTM doesn't reach latitude = 84")
    if not utmups.reverse(31, False, 1 * t, 10 * t).lat < -80:
        raise ConsistencyError("MGRS::Check: UTM doesn't reach latitude = -80")
    if not utmups.forward(56, 3, 32).x > 1 * t:
        raise ConsistencyError("MGRS::Check: Norway exception creates a gap")
    if not utmups.forward(72, 21, 35).x > 1 * t:
        raise ConsistencyError("MGRS::Check: Svalbard exception creates a gap")
    if not utmups.reverse(0, True, 20 * t, 13 * t).lat < 84:
        raise ConsistencyError("MGRS::Check: North UPS doesn't reach latitude = 84")
    if not utmups.reverse(0, False, 20 * t, 8 * t).lat > -80:
        raise ConsistencyError("MGRS::Check: South UPS doesn't reach latitude = -80")
    for band, x, y in _BAND_CHECKS:
        lat = utmups.reverse(38, True, x * t, y * t).lat
        if latitude_band(lat) != band:
            raise ConsistencyError(
                f"MGRS::Check: Band error, b = {band}, x = {x}00km, y = {y}00km"
            )
    logger.debug("MGRS table checks passed")
