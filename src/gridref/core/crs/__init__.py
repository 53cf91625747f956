"""
UTM/UPS and MGRS grid module.

This module provides:
- UTM/UPS zone selection, forward and reverse conversion
- Zone designator and EPSG code encoding
- MGRS reference encoding and decoding
- A pyproj bridge to the corresponding EPSG systems
"""

from gridref.core.crs import grid, mgrs, utmups
from gridref.core.crs.grid import approx_latitude_band, latitude_band
from gridref.core.crs.transformer import (
    CRSTransformer,
    crs_for_epsg,
    crs_for_zone,
    forward_deviation,
    reference_forward,
    reference_reverse,
    to_pyproj,
    validate_against_proj,
)
from gridref.core.crs.utmups import (
    central_meridian,
    decode_epsg,
    decode_zone,
    encode_epsg,
    encode_zone,
    standard_zone,
    transfer,
    utm_shift,
    zone_label,
)

__all__ = [
    # Modules
    "grid",
    "mgrs",
    "utmups",
    # Bands
    "approx_latitude_band",
    "latitude_band",
    # Transformer
    "CRSTransformer",
    "crs_for_epsg",
    "crs_for_zone",
    "forward_deviation",
    "reference_forward",
    "reference_reverse",
    "to_pyproj",
    "validate_against_proj",
    # UTM/UPS utilities
    "central_meridian",
    "decode_epsg",
    "decode_zone",
    "encode_epsg",
    "encode_zone",
    "standard_zone",
    "transfer",
    "utm_shift",
    "zone_label",
]
