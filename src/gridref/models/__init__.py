"""
Data models and value types.
"""

from .coordinates import (
    DecodedAngle,
    DMSComponent,
    GeodeticBatch,
    GeodeticCoordinates,
    GridReference,
    GridReferenceParts,
    HemisphereIndicator,
    LatLon,
    PlanarCoordinates,
    ProjectedBatch,
    ProjectedPoint,
    TransverseMercatorKind,
    Zone,
    ZoneSpec,
)
from .crs import (
    WGS84_GEOGRAPHIC,
    BoundingBox,
    CoordinateOrder,
    CRSInfo,
    DistanceUnit,
)

__all__ = [
    # Coordinates
    "DecodedAngle",
    "DMSComponent",
    "GeodeticBatch",
    "GeodeticCoordinates",
    "GridReference",
    "GridReferenceParts",
    "HemisphereIndicator",
    "LatLon",
    "PlanarCoordinates",
    "ProjectedBatch",
    "ProjectedPoint",
    "TransverseMercatorKind",
    "Zone",
    "ZoneSpec",
    # CRS
    "WGS84_GEOGRAPHIC",
    "BoundingBox",
    "CoordinateOrder",
    "CRSInfo",
    "DistanceUnit",
]
