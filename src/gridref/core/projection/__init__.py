"""
Map projection module.

This module provides the ellipsoidal projections behind UTM and UPS:
- Transverse Mercator, as a 6th order series or the exact elliptic form
- Polar Stereographic
- Jacobi elliptic function helpers for the exact form
"""

from gridref.core.projection.elliptic import EllipticFunction, JacobiElliptic
from gridref.core.projection.polar_stereographic import (
    PolarStereographic,
    ups_projection,
)
from gridref.core.projection.transverse_mercator import (
    TransverseMercator,
    utm_projection,
)
from gridref.core.projection.transverse_mercator_exact import TransverseMercatorExact

__all__ = [
    # Elliptic functions
    "EllipticFunction",
    "JacobiElliptic",
    # Polar Stereographic
    "PolarStereographic",
    "ups_projection",
    # Transverse Mercator
    "TransverseMercator",
    "TransverseMercatorExact",
    "utm_projection",
]
