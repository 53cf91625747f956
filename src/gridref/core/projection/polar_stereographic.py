"""
Polar Stereographic projection, used for UPS.
"""

import logging
import math
from functools import lru_cache

from gridref.core import geomath
from gridref.core.ellipsoid import UPS_K0, WGS84, Ellipsoid
from gridref.core.errors import ConfigurationError, ValidationError
from gridref.models.coordinates import GeodeticCoordinates, PlanarCoordinates

logger = logging.getLogger(__name__)


class PolarStereographic:
    """
    Polar Stereographic projection on an ellipsoid.

    The projection is centered on the north pole when northp is True and
    on the south pole otherwise. No false easting or northing is applied.

    Attributes:
        ellipsoid: Ellipsoid being projected
        k0: Scale factor at the pole
    """

    def __init__(self, ellipsoid: Ellipsoid = WGS84, k0: float = UPS_K0):
        if not (math.isfinite(k0) and k0 > 0):
            raise ConfigurationError(f"Scale factor {k0} is not positive", config_key="k0")
        self.ellipsoid = ellipsoid
        self.k0 = k0

        self._a = ellipsoid.a
        self._f = ellipsoid.f
        self._e2 = ellipsoid.e2
        self._es = ellipsoid.es
        self._e2m = ellipsoid.e2m
        self._c = (1 - self._f) * math.exp(geomath.eatanhe(1.0, self._es))

    def __repr__(self) -> str:
        return f"PolarStereographic(a={self._a}, f={self._f}, k0={self.k0})"

    def set_scale(self, lat: float, k: float = 1.0) -> None:
        """
        Rescale k0 so that the scale at latitude lat equals k.

        Args:
            lat: Latitude in degrees, (-90, 90]
            k: Desired scale at lat

        Raises:
            ValidationError: If k is not positive or lat is out of range
        """
        if not (math.isfinite(k) and k > 0):
            raise ValidationError(f"Scale {k} is not positive", field="k", value=k)
        if not (-geomath.QD < lat <= geomath.QD):
            raise ValidationError(
                f"Latitude {lat}d not in (-{geomath.QD:g}d, {geomath.QD:g}d]",
                field="lat",
                value=lat,
            )
        self.k0 = 1.0
        kold = self.forward(True, lat, 0.0).k
        self.k0 = k / kold

    def forward(self, northp: bool, lat: float, lon: float) -> PlanarCoordinates:
        """
        Project a geodetic position.

        Args:
            northp: True for the north polar aspect
            lat: Latitude in degrees
            lon: Longitude in degrees

        Returns:
            PlanarCoordinates (x, y, gamma, k); NaN if lat is out of range
        """
        lat = geomath.lat_fix(lat) * (1 if northp else -1)
        tau = geomath.tand(lat)
        secphi = math.hypot(1.0, tau)
        taup = geomath.taupf(tau, self._es)
        rho = math.hypot(1.0, taup) + abs(taup)
        if taup >= 0:
            rho = 1 / rho if lat != geomath.QD else 0.0
        rho *= 2 * self.k0 * self._a / self._c
        if lat != geomath.QD:
            k = (rho / self._a) * secphi * math.sqrt(
                self._e2m + self._e2 / geomath.sq(secphi)
            )
        else:
            k = self.k0
        x, y = geomath.sincosd(lon)
        x *= rho
        y *= -rho if northp else rho
        gamma = geomath.ang_normalize(lon if northp else -lon)
        return PlanarCoordinates(x, y, gamma, k)

    def reverse(self, northp: bool, x: float, y: float) -> GeodeticCoordinates:
        """
        Invert the projection.

        Args:
            northp: True for the north polar aspect
            x: Easting in meters
            y: Northing in meters

        Returns:
            GeodeticCoordinates (lat, lon, gamma, k)
        """
        rho = math.hypot(x, y)
        t = rho / (2 * self.k0 * self._a / self._c) if rho != 0 else geomath.sq(geomath.EPSILON)
        taup = (1 / t - t) / 2
        tau = geomath.tauf(taup, self._es)
        secphi = math.hypot(1.0, tau)
        if rho != 0:
            k = (rho / self._a) * secphi * math.sqrt(
                self._e2m + self._e2 / geomath.sq(secphi)
            )
        else:
            k = self.k0
        lat = (1 if northp else -1) * geomath.atand(tau)
        lon = geomath.atan2d(x, -y if northp else y)
        gamma = geomath.ang_normalize(lon if northp else -lon)
        return GeodeticCoordinates(lat, lon, gamma, k)


@lru_cache(maxsize=None)
def ups_projection() -> PolarStereographic:
    """Shared Polar Stereographic instance for UPS (WGS84, k0 = 0.994)."""
    logger.debug("Creating UPS Polar Stereographic")
    return PolarStereographic(WGS84, UPS_K0)
