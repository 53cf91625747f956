"""
Grid constants shared by the UTM/UPS selector and the MGRS codec.

Distances are counted in 100km tiles. The UTM/UPS coordinate limits are
the MGRS limits padded by one tile on each side.
"""

import math

TILE = 100000.0

# Column and row index ranges, in tiles
MIN_UTM_COL = 1
MAX_UTM_COL = 9
MIN_UTM_S_ROW = 10
MAX_UTM_S_ROW = 100
MIN_UTM_N_ROW = 0
MAX_UTM_N_ROW = 95
MIN_UPS_S_IND = 8
MAX_UPS_S_IND = 32
MIN_UPS_N_IND = 13
MAX_UPS_N_IND = 27
UPS_EASTING = 20
UTM_EASTING = 5

# Difference between southern and northern hemisphere UTM northings
UTM_N_SHIFT = (MAX_UTM_S_ROW - MIN_UTM_N_ROW) * TILE

# Limits in tiles indexed by 2 * utmp + northp
MIN_EASTING = (MIN_UPS_S_IND, MIN_UPS_N_IND, MIN_UTM_COL, MIN_UTM_COL)
MAX_EASTING = (MAX_UPS_S_IND, MAX_UPS_N_IND, MAX_UTM_COL, MAX_UTM_COL)
MIN_NORTHING = (
    MIN_UPS_S_IND,
    MIN_UPS_N_IND,
    MIN_UTM_S_ROW,
    MIN_UTM_S_ROW - (MAX_UTM_S_ROW - MIN_UTM_N_ROW),
)
MAX_NORTHING = (
    MAX_UPS_S_IND,
    MAX_UPS_N_IND,
    MAX_UTM_N_ROW + (MAX_UTM_S_ROW - MIN_UTM_N_ROW),
    MAX_UTM_N_ROW,
)

# False origins in meters, indexed by 2 * utmp + northp
FALSE_EASTING = (
    UPS_EASTING * TILE,
    UPS_EASTING * TILE,
    UTM_EASTING * TILE,
    UTM_EASTING * TILE,
)
FALSE_NORTHING = (
    UPS_EASTING * TILE,
    UPS_EASTING * TILE,
    MAX_UTM_S_ROW * TILE,
    MIN_UTM_N_ROW * TILE,
)


def hemisphere_index(utmp: bool, northp: bool) -> int:
    """Index into the limit and false origin tables."""
    return (2 if utmp else 0) + (1 if northp else 0)


def latitude_band(lat: float) -> int:
    """
    Latitude band number in [-10, 10) for a latitude in degrees.

    Bands are 8 degrees wide and include their southern edges; band 9 (X)
    extends to the pole and band -10 (C) to the south pole.
    """
    # Clamping keeps floor() finite; the band clamp below absorbs it
    ilat = math.floor(max(-90.0, min(90.0, lat)))
    return max(-10, min(9, (ilat + 80) // 8 - 10))


def approx_latitude_band(y: float) -> int:
    """
    Approximate latitude band for a northing relative to the equator.

    Each 100km tile gets the band of the latitude at its center.

    Args:
        y: Northing in meters, negative in the southern hemisphere

    Returns:
        Band number in [-10, 10)
    """
    # northing at tile center in units of tile
    ya = math.floor(min(88.0, abs(y / TILE))) + 0.5
    # convert to lat (mult by 90/100) and then to band (divide by 8); the
    # +1 fine tunes the boundary between bands 3 and 4
    b = math.floor((ya * 9 + 1) / 10 / 8)
    return b if y >= 0 else -(b + 1)
