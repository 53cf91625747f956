"""
Data models for Coordinate Reference System (CRS) metadata.

This module defines the CRS descriptions attached to UTM/UPS zones and the
bounding boxes returned for MGRS squares.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from gridref.core.errors import ValidationError


class CoordinateOrder(str, Enum):
    """Coordinate order convention for different CRS."""

    LON_LAT = "lon_lat"  # Longitude, Latitude (e.g., GeoJSON)
    LAT_LON = "lat_lon"  # Latitude, Longitude
    XY = "xy"  # Easting, Northing (projected coordinates)


class DistanceUnit(str, Enum):
    """Units of the CRS axes."""

    METERS = "meters"
    DEGREES = "degrees"


@dataclass
class CRSInfo:
    """
    Information about a Coordinate Reference System.

    Attributes:
        epsg: EPSG code (e.g., 32633 for UTM zone 33N)
        name: Human-readable name
        units: Units of the axes
        is_geographic: True for lat/lon systems, False for projected
        coordinate_order: Order of coordinates in this system
        zone: UTM zone, 0 for UPS, None for geographic systems
        northp: Hemisphere of a UTM/UPS system
        authority: Authority name (e.g., 'EPSG')
        code: Authority-specific code
    """

    epsg: Optional[int] = None
    name: Optional[str] = None
    units: DistanceUnit = DistanceUnit.METERS
    is_geographic: bool = False
    coordinate_order: CoordinateOrder = CoordinateOrder.XY
    zone: Optional[int] = None
    northp: Optional[bool] = None
    authority: Optional[str] = None
    code: Optional[str] = None

    def __post_init__(self) -> None:
        if self.epsg is not None and self.authority is None:
            self.authority = "EPSG"
            self.code = str(self.epsg)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "epsg": self.epsg,
            "name": self.name,
            "units": self.units.value if self.units else None,
            "is_geographic": self.is_geographic,
            "coordinate_order": self.coordinate_order.value if self.coordinate_order else None,
            "zone": self.zone,
            "northp": self.northp,
            "authority": self.authority,
            "code": self.code,
        }

    def __str__(self) -> str:
        if self.epsg:
            return f"EPSG:{self.epsg}"
        elif self.name:
            return self.name
        return "Unknown CRS"


WGS84_GEOGRAPHIC = CRSInfo(
    epsg=4326,
    name="WGS 84",
    units=DistanceUnit.DEGREES,
    is_geographic=True,
    coordinate_order=CoordinateOrder.LON_LAT,
)


@dataclass
class BoundingBox:
    """
    Spatial bounding box with CRS awareness.

    Attributes:
        min_x: Minimum X coordinate (or longitude)
        min_y: Minimum Y coordinate (or latitude)
        max_x: Maximum X coordinate (or longitude)
        max_y: Maximum Y coordinate (or latitude)
        crs: Coordinate reference system
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    crs: CRSInfo = field(default_factory=lambda: WGS84_GEOGRAPHIC)

    def __post_init__(self) -> None:
        if self.min_y > self.max_y:
            raise ValidationError(
                f"min_y ({self.min_y}) must be <= max_y ({self.max_y})", field="min_y"
            )
        # A geographic box may cross the antimeridian, with min_x > max_x
        if self.min_x > self.max_x and not self.crs.is_geographic:
            raise ValidationError(
                f"min_x ({self.min_x}) must be <= max_x ({self.max_x})", field="min_x"
            )

    @property
    def width(self) -> float:
        """Width of the box; wraps through 360 across the antimeridian."""
        width = self.max_x - self.min_x
        if width < 0 and self.crs.is_geographic:
            width += 360
        return width

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Tuple[float, float]:
        return (self.min_x + self.width / 2, (self.min_y + self.max_y) / 2)

    def contains(self, x: float, y: float) -> bool:
        """
        Check if point is within bounding box.

        Args:
            x: X coordinate (or longitude)
            y: Y coordinate (or latitude)

        Returns:
            True if point is within bounds
        """
        if not self.min_y <= y <= self.max_y:
            return False
        if self.min_x <= self.max_x:
            return self.min_x <= x <= self.max_x
        return x >= self.min_x or x <= self.max_x

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
            "crs": self.crs.to_dict(),
        }

    def to_list(self) -> list:
        """Convert to [west, south, east, north]."""
        return [self.min_x, self.min_y, self.max_x, self.max_y]

    def __str__(self) -> str:
        return (
            f"BBox({self.min_x:.6f}, {self.min_y:.6f}, "
            f"{self.max_x:.6f}, {self.max_y:.6f}) [{self.crs}]"
        )
