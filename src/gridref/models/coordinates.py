"""
Value types returned by the conversion routines.

Results are immutable named tuples so callers can either unpack them
(``x, y, gamma, k = tm.forward(...)``) or access fields by name.
"""

from enum import Enum, IntEnum
from typing import NamedTuple

import numpy as np


class ZoneSpec(IntEnum):
    """Pseudo-zone numbers accepted in place of an explicit UTM/UPS zone."""

    INVALID = -4  # Marker for an undefined or invalid zone
    MATCH = -3  # In transfer, keep the input zone
    UTM = -2  # Force UTM, even in the polar regions
    STANDARD = -1  # Standard UTM/UPS zone selection
    UPS = 0  # Universal Polar Stereographic


class HemisphereIndicator(IntEnum):
    """What a DMS string designates, from its hemisphere letter."""

    NONE = 0  # No indicator present
    LATITUDE = 1  # N or S present
    LONGITUDE = 2  # E or W present
    AZIMUTH = 3  # Encode as an azimuth in [0, 360)
    NUMBER = 4  # Encode as a plain number


class DMSComponent(IntEnum):
    """Trailing component of an encoded DMS string."""

    DEGREE = 0
    MINUTE = 1
    SECOND = 2


class TransverseMercatorKind(str, Enum):
    """Formulation used by a Transverse Mercator projection."""

    SERIES = "series"  # 6th order Krueger series, ~5nm accuracy
    EXACT = "exact"  # Lee/Thompson elliptic function form


class PlanarCoordinates(NamedTuple):
    """Projection forward result: easting, northing, convergence, scale."""

    x: float
    y: float
    gamma: float
    k: float


class GeodeticCoordinates(NamedTuple):
    """Geodetic position with the convergence and scale at that point."""

    lat: float
    lon: float
    gamma: float
    k: float


class ProjectedPoint(NamedTuple):
    """
    UTM/UPS coordinates.

    Attributes:
        zone: 1-60 for UTM, 0 for UPS, ZoneSpec.INVALID for a NaN point
        northp: True for the northern hemisphere
        x: Easting in meters (false easting included)
        y: Northing in meters (false northing included)
        gamma: Meridian convergence in degrees
        k: Scale factor
    """

    zone: int
    northp: bool
    x: float
    y: float
    gamma: float
    k: float


class GridReference(NamedTuple):
    """
    Decoded MGRS reference.

    Attributes:
        zone: UTM zone, 0 for UPS, ZoneSpec.INVALID for "INV..." strings
        northp: True for the northern hemisphere
        x: Easting in meters
        y: Northing in meters
        precision: Digits per coordinate, -1 for a grid zone designator,
            -2 for an invalid reference
    """

    zone: int
    northp: bool
    x: float
    y: float
    precision: int


class GridReferenceParts(NamedTuple):
    """An MGRS string split into its textual pieces."""

    gridzone: str
    block: str
    easting: str
    northing: str


class DecodedAngle(NamedTuple):
    """A decoded DMS angle and the kind of hemisphere letter it carried."""

    angle: float
    indicator: HemisphereIndicator


class LatLon(NamedTuple):
    """Latitude and longitude in degrees."""

    lat: float
    lon: float


class Zone(NamedTuple):
    """A UTM/UPS zone together with its hemisphere."""

    zone: int
    northp: bool


class ProjectedBatch(NamedTuple):
    """Column arrays of UTM/UPS results; failed rows hold INVALID and NaN."""

    zone: np.ndarray
    northp: np.ndarray
    x: np.ndarray
    y: np.ndarray
    gamma: np.ndarray
    k: np.ndarray


class GeodeticBatch(NamedTuple):
    """Column arrays of geodetic results; failed rows hold NaN."""

    lat: np.ndarray
    lon: np.ndarray
    gamma: np.ndarray
    k: np.ndarray
