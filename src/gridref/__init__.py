"""
GridRef - conversions among geodetic, UTM/UPS, MGRS and DMS coordinates.

This package provides the projection math (Transverse Mercator and Polar
Stereographic), the UTM/UPS zone selector, and text codecs for MGRS grid
references and degree-minute-second angles.
"""

__version__ = "0.1.0"
