"""
Batch conversion over arrays of positions.

Each function converts row by row and returns numpy arrays. A row that
cannot be converted does not abort the batch: it comes back as NaN,
ZoneSpec.INVALID or "INVALID", and the number of such rows is logged.
"""

import logging
from typing import Iterable, Optional, Union

import numpy as np

from gridref.core.config import settings
from gridref.core.crs import mgrs, utmups
from gridref.core.errors import GridRefException
from gridref.models.coordinates import GeodeticBatch, ProjectedBatch, ZoneSpec
from gridref.utils.logging import log_performance

logger = logging.getLogger(__name__)

ArrayLike = Union[Iterable[float], np.ndarray]


def _report_failures(operation: str, failed: int, total: int) -> None:
    if failed:
        logger.warning(f"{operation}: {failed} of {total} rows could not be converted")


@log_performance(threshold_ms=settings.batch_log_threshold_ms)
def geodetic_to_projected_batch(
    lat: ArrayLike,
    lon: ArrayLike,
    zone: Union[int, ArrayLike] = ZoneSpec.STANDARD,
    mgrslimits: bool = False,
) -> ProjectedBatch:
    """
    Convert arrays of latitudes and longitudes to UTM/UPS.

    Args:
        lat: Latitudes in degrees
        lon: Longitudes in degrees
        zone: Zone override, a scalar or one per row
        mgrslimits: Enforce the stricter MGRS coordinate limits

    Returns:
        ProjectedBatch of column arrays
    """
    lat_arr, lon_arr, zone_arr = np.broadcast_arrays(
        np.asarray(lat, dtype=float),
        np.asarray(lon, dtype=float),
        np.asarray(zone, dtype=int),
    )
    n = lat_arr.size
    zones = np.full(n, int(ZoneSpec.INVALID), dtype=int)
    northp = np.zeros(n, dtype=bool)
    out = np.full((4, n), np.nan)
    failed = 0
    for i, (la, lo, z) in enumerate(zip(lat_arr.ravel(), lon_arr.ravel(), zone_arr.ravel())):
        try:
            point = utmups.forward(float(la), float(lo), int(z), mgrslimits)
        except GridRefException as e:
            logger.debug(f"Row {i} ({la}, {lo}) failed: {e}")
            failed += 1
            continue
        zones[i] = point.zone
        northp[i] = point.northp
        out[:, i] = (point.x, point.y, point.gamma, point.k)
    _report_failures("geodetic_to_projected_batch", failed, n)
    return ProjectedBatch(zones, northp, out[0], out[1], out[2], out[3])


@log_performance(threshold_ms=settings.batch_log_threshold_ms)
def projected_to_geodetic_batch(
    zone: Union[int, ArrayLike],
    northp: Union[bool, ArrayLike],
    x: ArrayLike,
    y: ArrayLike,
    mgrslimits: bool = False,
) -> GeodeticBatch:
    """
    Convert arrays of UTM/UPS coordinates to latitude and longitude.

    Args:
        zone: Zones, a scalar or one per row
        northp: Hemispheres, a scalar or one per row
        x: Eastings in meters
        y: Northings in meters
        mgrslimits: Enforce the stricter MGRS coordinate limits

    Returns:
        GeodeticBatch of column arrays
    """
    zone_arr, northp_arr, x_arr, y_arr = np.broadcast_arrays(
        np.asarray(zone, dtype=int),
        np.asarray(northp, dtype=bool),
        np.asarray(x, dtype=float),
        np.asarray(y, dtype=float),
    )
    n = x_arr.size
    out = np.full((4, n), np.nan)
    failed = 0
    rows = zip(zone_arr.ravel(), northp_arr.ravel(), x_arr.ravel(), y_arr.ravel())
    for i, (z, hemi, xi, yi) in enumerate(rows):
        try:
            out[:, i] = utmups.reverse(int(z), bool(hemi), float(xi), float(yi), mgrslimits)
        except GridRefException as e:
            logger.debug(f"Row {i} ({z}, {xi}, {yi}) failed: {e}")
            failed += 1
    _report_failures("projected_to_geodetic_batch", failed, n)
    return GeodeticBatch(out[0], out[1], out[2], out[3])


@log_performance(threshold_ms=settings.batch_log_threshold_ms)
def geodetic_to_mgrs_batch(
    lon: ArrayLike,
    lat: ArrayLike,
    precision: Optional[int] = None,
) -> np.ndarray:
    """
    MGRS references for arrays of longitudes and latitudes.

    Args:
        lon: Longitudes in degrees
        lat: Latitudes in degrees
        precision: Digits per coordinate; defaults to settings.mgrs_precision

    Returns:
        Object array of references, "INVALID" for failed rows
    """
    if precision is None:
        precision = settings.mgrs_precision
    lon_arr, lat_arr = np.broadcast_arrays(
        np.asarray(lon, dtype=float), np.asarray(lat, dtype=float)
    )
    n = lat_arr.size
    refs = np.full(n, "INVALID", dtype=object)
    failed = 0
    for i, (lo, la) in enumerate(zip(lon_arr.ravel(), lat_arr.ravel())):
        la, lo = float(la), float(lo)
        try:
            zone, northp, x, y, _, _ = utmups.forward(la, lo)
            refs[i] = mgrs.forward(zone, northp, x, y, la, precision)
        except GridRefException as e:
            logger.debug(f"Row {i} ({lo}, {la}) failed: {e}")
            failed += 1
    _report_failures("geodetic_to_mgrs_batch", failed, n)
    return refs


@log_performance(threshold_ms=settings.batch_log_threshold_ms)
def mgrs_to_geodetic_batch(references: Iterable[str], centerp: bool = True) -> np.ndarray:
    """
    Positions of an iterable of MGRS references.

    Args:
        references: MGRS references
        centerp: Use the centers of the squares instead of their south-west
            corners

    Returns:
        Array of shape (n, 2) holding [lon, lat] rows; NaN for failed rows
    """
    refs = list(references)
    out = np.full((len(refs), 2), np.nan)
    failed = 0
    for i, ref in enumerate(refs):
        try:
            zone, northp, x, y, _ = mgrs.reverse(ref, centerp)
            lat, lon, _, _ = utmups.reverse(zone, northp, x, y)
        except GridRefException as e:
            logger.debug(f"Row {i} ({ref!r}) failed: {e}")
            failed += 1
            continue
        out[i] = (lon, lat)
    _report_failures("mgrs_to_geodetic_batch", failed, len(refs))
    return out


def count_invalid(values: np.ndarray) -> int:
    """Number of sentinel rows in a batch result column."""
    if values.dtype == object:
        return int(sum(1 for v in values if v == "INVALID"))
    return int(np.count_nonzero(np.isnan(values)))
