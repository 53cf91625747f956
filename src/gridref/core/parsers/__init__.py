"""
Coordinate text parsing module.

This module provides parsing and formatting of coordinate text:
- Degrees, minutes, seconds (DMS) angles
- Free-form position strings in MGRS, lat/lon or UTM/UPS form
"""

from .dms import (
    decode,
    decode_angle,
    decode_azimuth,
    decode_components,
    decode_lat_lon,
    encode,
    encode_deg_min,
    encode_deg_min_sec,
    encode_with_precision,
)
from .geocoords import GeoCoords, utmups_string

__all__ = [
    # DMS
    "decode",
    "decode_angle",
    "decode_azimuth",
    "decode_components",
    "decode_lat_lon",
    "encode",
    "encode_deg_min",
    "encode_deg_min_sec",
    "encode_with_precision",
    # GeoCoords
    "GeoCoords",
    "utmups_string",
]
