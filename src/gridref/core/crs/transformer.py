"""
Bridge between UTM/UPS zones and PROJ coordinate reference systems.

This module maps zones to their WGS 84 EPSG systems and wraps pyproj
transformers, so results computed here can be handed to PROJ-based tools
or compared against PROJ's own Transverse Mercator and Polar
Stereographic implementations.
"""

import logging
import math
from typing import List, Tuple, Union

import numpy as np
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from gridref.core.crs import utmups
from gridref.core.errors import TransformationError, ValidationError
from gridref.models.coordinates import ZoneSpec
from gridref.models.crs import WGS84_GEOGRAPHIC, CoordinateOrder, CRSInfo, DistanceUnit

logger = logging.getLogger(__name__)


def crs_for_zone(zone: int, northp: bool) -> CRSInfo:
    """
    CRS description of a WGS 84 UTM or UPS zone.

    Args:
        zone: UTM zone, or 0 for UPS
        northp: True for the northern hemisphere

    Returns:
        CRSInfo with the EPSG code, e.g. 32633 for "33n"

    Raises:
        ValidationError: If zone is not in [0, 60]
    """
    epsg = utmups.encode_epsg(zone, northp)
    if epsg < 0:
        raise ValidationError(f"Zone {zone} has no EPSG code", field="zone", value=zone)
    name = "WGS 84 / " + (
        f"UPS {'North' if northp else 'South'} (E,N)"
        if zone == ZoneSpec.UPS
        else f"UTM zone {zone}{'N' if northp else 'S'}"
    )
    return CRSInfo(
        epsg=epsg,
        name=name,
        units=DistanceUnit.METERS,
        is_geographic=False,
        coordinate_order=CoordinateOrder.XY,
        zone=zone,
        northp=northp,
    )


def crs_for_epsg(epsg: int) -> CRSInfo:
    """CRS description for a WGS 84 UTM/UPS EPSG code, or EPSG:4326."""
    if epsg == WGS84_GEOGRAPHIC.epsg:
        return WGS84_GEOGRAPHIC
    zone, northp = utmups.decode_epsg(epsg)
    if zone == ZoneSpec.INVALID:
        raise ValidationError(
            f"EPSG:{epsg} is not a WGS 84 UTM/UPS system", field="epsg", value=epsg
        )
    return crs_for_zone(zone, northp)


def to_pyproj(crs_info: CRSInfo) -> CRS:
    """
    pyproj CRS object for a CRSInfo.

    Raises:
        TransformationError: If PROJ does not know the code
    """
    if crs_info.epsg is None:
        raise TransformationError(f"CRS {crs_info} has no EPSG code")
    try:
        return CRS.from_epsg(crs_info.epsg)
    except CRSError as e:
        raise TransformationError(f"Failed to create CRS {crs_info}: {e}") from e


class CRSTransformer:
    """
    PROJ transformation between two CRS.

    Coordinates are always in x, y order: longitude before latitude, and
    easting before northing.
    """

    def __init__(self, source_crs: CRSInfo, target_crs: CRSInfo):
        """
        Initialize transformer.

        Args:
            source_crs: Source coordinate reference system
            target_crs: Target coordinate reference system

        Raises:
            TransformationError: If transformer cannot be created
        """
        self.source_crs = source_crs
        self.target_crs = target_crs
        try:
            self.transformer = Transformer.from_crs(
                to_pyproj(source_crs),
                to_pyproj(target_crs),
                always_xy=True,
            )
        except ProjError as e:
            raise TransformationError(f"Failed to create transformer: {e}") from e
        logger.debug(f"Created transformer {source_crs} -> {target_crs}")

    def transform(self, x: float, y: float) -> Tuple[float, float]:
        """
        Transform a single coordinate.

        Raises:
            TransformationError: If transformation fails
        """
        try:
            xx, yy = self.transformer.transform(x, y, errcheck=True)
        except ProjError as e:
            raise TransformationError(f"Transformation failed: {e}") from e
        return float(xx), float(yy)

    def transform_batch(
        self,
        x_coords: Union[List[float], np.ndarray],
        y_coords: Union[List[float], np.ndarray],
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Transform arrays of coordinates.

        Points PROJ cannot transform come back as inf.

        Raises:
            TransformationError: If the arrays differ in length
        """
        x_arr = np.asarray(x_coords, dtype=float)
        y_arr = np.asarray(y_coords, dtype=float)
        if x_arr.shape != y_arr.shape:
            raise TransformationError("x_coords and y_coords must have same length")
        xx, yy = self.transformer.transform(x_arr, y_arr)
        return np.asarray(xx), np.asarray(yy)

    def __str__(self) -> str:
        return f"{self.source_crs} -> {self.target_crs}"


def reference_forward(lat: float, lon: float, zone: int, northp: bool) -> Tuple[float, float]:
    """
    Easting and northing of a position in a zone, computed by PROJ.

    Raises:
        TransformationError: If PROJ rejects the position
    """
    transformer = CRSTransformer(WGS84_GEOGRAPHIC, crs_for_zone(zone, northp))
    return transformer.transform(lon, lat)


def reference_reverse(zone: int, northp: bool, x: float, y: float) -> Tuple[float, float]:
    """
    Latitude and longitude of UTM/UPS coordinates, computed by PROJ.

    Raises:
        TransformationError: If PROJ rejects the coordinates
    """
    transformer = CRSTransformer(crs_for_zone(zone, northp), WGS84_GEOGRAPHIC)
    lon, lat = transformer.transform(x, y)
    return lat, lon


def forward_deviation(lat: float, lon: float) -> float:
    """
    Distance in meters between this package's UTM/UPS projection of a
    position and PROJ's projection of it into the same zone.

    NaN for positions without a zone.
    """
    zone, northp, x, y, _, _ = utmups.forward(lat, lon)
    if zone == ZoneSpec.INVALID:
        return math.nan
    px, py = reference_forward(lat, lon, zone, northp)
    deviation = math.hypot(x - px, y - py)
    logger.debug(f"Deviation from PROJ at ({lat}, {lon}): {deviation:.3e} m")
    return deviation


def validate_against_proj(lat: float, lon: float, max_error_meters: float = 1e-3) -> bool:
    """
    Check that the UTM/UPS projection agrees with PROJ within a tolerance.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        max_error_meters: Maximum acceptable distance in meters

    Returns:
        True if the two projections agree
    """
    return forward_deviation(lat, lon) <= max_error_meters
