"""
Transverse Mercator projection.

The default formulation evaluates Krueger's series to 6th order in the
third flattening n, which is accurate to about 5nm within 3900km of the
central meridian. The exact elliptic-function formulation can be selected
when constructing the projection; the choice is fixed for the lifetime of
the instance.

The series is summed with Clenshaw's method on complex arguments
zeta = xi + i*eta.
"""

import logging
import math
from functools import lru_cache
from typing import Optional, Union

from gridref.core import geomath
from gridref.core.ellipsoid import UTM_K0, WGS84, Ellipsoid
from gridref.core.errors import ConfigurationError
from gridref.core.projection.transverse_mercator_exact import TransverseMercatorExact
from gridref.models.coordinates import (
    GeodeticCoordinates,
    PlanarCoordinates,
    TransverseMercatorKind,
)

logger = logging.getLogger(__name__)

MAX_POW = 6

# Meridian arc scale b1 as a polynomial in n^2, followed by the divisor
B1_COEFF = (1, 4, 64, 256, 256)

# Gauss-Schreiber to Gauss-Krueger series coefficients. For each order l the
# entries are the polynomial in n (degree 6 - l) followed by its divisor.
ALP_COEFF = (
    # alp[1]/n^1, polynomial in n of order 5
    31564, -66675, 34440, 47250, -100800, 75600, 151200,
    # alp[2]/n^2, polynomial in n of order 4
    -1983433, 863232, 748608, -1161216, 524160, 1935360,
    # alp[3]/n^3, polynomial in n of order 3
    670412, 406647, -533952, 184464, 725760,
    # alp[4]/n^4, polynomial in n of order 2
    6601661, -7732800, 2230245, 7257600,
    # alp[5]/n^5, polynomial in n of order 1
    -13675556, 3438171, 7983360,
    # alp[6]/n^6, polynomial in n of order 0
    212378941, 319334400,
)

# Coefficients of the reverted series
BET_COEFF = (
    # bet[1]/n^1, polynomial in n of order 5
    384796, -382725, -6720, 932400, -1612800, 1209600, 2419200,
    # bet[2]/n^2, polynomial in n of order 4
    -1118711, 1695744, -1174656, 258048, 80640, 3870720,
    # bet[3]/n^3, polynomial in n of order 3
    22276, -16929, -15984, 12852, 362880,
    # bet[4]/n^4, polynomial in n of order 2
    -830251, -158400, 197865, 7257600,
    # bet[5]/n^5, polynomial in n of order 1
    -435388, 453717, 15966720,
    # bet[6]/n^6, polynomial in n of order 0
    20648693, 638668800,
)


def _series_coefficients(n: float) -> tuple:
    """Evaluate alp[1..6] and bet[1..6] for third flattening n."""
    alp = [0.0] * (MAX_POW + 1)
    bet = [0.0] * (MAX_POW + 1)
    o = 0
    d = n
    for l in range(1, MAX_POW + 1):
        m = MAX_POW - l
        alp[l] = d * geomath.polyval(m, ALP_COEFF, n, o) / ALP_COEFF[o + m + 1]
        bet[l] = d * geomath.polyval(m, BET_COEFF, n, o) / BET_COEFF[o + m + 1]
        o += m + 2
        d *= n
    return tuple(alp), tuple(bet)


def _clenshaw(coeffs: tuple, sign: float, xi: float, eta: float) -> tuple:
    """
    Sum the trigonometric series and its derivative at zeta = xi + i*eta.

    Returns:
        Tuple (zeta + sum, derivative) as complex numbers
    """
    c0 = math.cos(2 * xi)
    ch0 = math.cosh(2 * eta)
    s0 = math.sin(2 * xi)
    sh0 = math.sinh(2 * eta)
    # 2 * cos(2*zeta)
    a = complex(2 * c0 * ch0, -2 * s0 * sh0)
    n = MAX_POW
    y0 = y1 = z0 = z1 = 0j
    while n:
        y1 = a * y0 - y1 + sign * coeffs[n]
        z1 = a * z0 - z1 + sign * 2 * n * coeffs[n]
        n -= 1
        y0 = a * y1 - y0 + sign * coeffs[n]
        z0 = a * z1 - z0 + sign * 2 * n * coeffs[n]
        n -= 1
    # cos(2*zeta)
    a /= 2
    z1 = 1 - z1 + a * z0
    # sin(2*zeta)
    a = complex(s0 * ch0, c0 * sh0)
    y1 = complex(xi, eta) + a * y0
    return y1, z1


class TransverseMercator:
    """
    Transverse Mercator projection on an ellipsoid.

    Coordinates are relative to a central meridian lon0 passed to every
    call; no false easting or northing is applied.

    Attributes:
        ellipsoid: Ellipsoid being projected
        k0: Central scale factor
        kind: SERIES or EXACT formulation
    """

    def __init__(
        self,
        ellipsoid: Ellipsoid = WGS84,
        k0: float = UTM_K0,
        kind: Union[TransverseMercatorKind, str] = TransverseMercatorKind.SERIES,
    ):
        """
        Initialize the projection and precompute the series coefficients.

        Args:
            ellipsoid: Ellipsoid parameters
            k0: Central scale factor
            kind: SERIES (Krueger series) or EXACT (elliptic functions)

        Raises:
            ConfigurationError: If k0 is not positive
        """
        if not (math.isfinite(k0) and k0 > 0):
            raise ConfigurationError(f"Scale factor {k0} is not positive", config_key="k0")
        self.ellipsoid = ellipsoid
        self.k0 = k0
        self.kind = TransverseMercatorKind(kind)

        self._a = ellipsoid.a
        self._e2 = ellipsoid.e2
        self._es = ellipsoid.es
        self._e2m = ellipsoid.e2m
        self._c = math.sqrt(self._e2m) * math.exp(geomath.eatanhe(1.0, self._es))
        n = ellipsoid.n
        m = MAX_POW // 2
        self._b1 = geomath.polyval(m, B1_COEFF, geomath.sq(n)) / (
            B1_COEFF[m + 1] * (1 + n)
        )
        # a1 is the rectifying radius, i.e. the meridian quadrant over pi/2
        self._a1 = self._b1 * self._a
        self._alp, self._bet = _series_coefficients(n)

        self._exact: Optional[TransverseMercatorExact] = None
        if self.kind is TransverseMercatorKind.EXACT:
            self._exact = TransverseMercatorExact(ellipsoid, k0)

    def __repr__(self) -> str:
        return (
            f"TransverseMercator(a={self._a}, f={self.ellipsoid.f}, "
            f"k0={self.k0}, kind={self.kind.value})"
        )

    @property
    def rectifying_radius(self) -> float:
        """Meridian quadrant divided by pi/2."""
        return self._a1

    def forward(self, lon0: float, lat: float, lon: float) -> PlanarCoordinates:
        """
        Project a geodetic position.

        Args:
            lon0: Central meridian in degrees
            lat: Latitude in degrees, [-90, 90]
            lon: Longitude in degrees

        Returns:
            PlanarCoordinates (x, y, gamma, k); NaN if lat is out of range
        """
        if self._exact is not None:
            return self._exact.forward(lon0, lat, lon)

        lat = geomath.lat_fix(lat)
        lon = geomath.ang_diff(lon0, lon)
        # Explicitly enforce the parity
        latsign = -1 if geomath.signbit(lat) else 1
        lonsign = -1 if geomath.signbit(lon) else 1
        lon *= lonsign
        lat *= latsign
        backside = lon > geomath.QD
        if backside:
            if lat == 0:
                latsign = -1
            lon = geomath.HD - lon
        sphi, cphi = geomath.sincosd(lat)
        slam, clam = geomath.sincosd(lon)

        # (xip, etap) are the Gauss-Schreiber TM coordinates
        if lat != geomath.QD:
            tau = sphi / cphi
            taup = geomath.taupf(tau, self._es)
            xip = math.atan2(taup, clam)
            etap = math.asinh(slam / math.hypot(taup, clam))
            gamma = geomath.atan2d(slam * taup, clam * math.hypot(1.0, taup))
            # This form has cancelling errors
            k = (
                math.sqrt(self._e2m + self._e2 * geomath.sq(cphi))
                * math.hypot(1.0, tau)
                / math.hypot(taup, clam)
            )
        else:
            xip = math.pi / 2
            etap = 0.0
            gamma = lon
            k = self._c

        zeta, dzeta = _clenshaw(self._alp, 1.0, xip, etap)
        # Convergence and scale for Gauss-Schreiber TM to Gauss-Krueger TM
        gamma -= geomath.atan2d(dzeta.imag, dzeta.real)
        k *= self._b1 * abs(dzeta)
        xi = zeta.real
        eta = zeta.imag
        y = self._a1 * self.k0 * (math.pi - xi if backside else xi) * latsign
        x = self._a1 * self.k0 * eta * lonsign
        if backside:
            gamma = geomath.HD - gamma
        gamma *= latsign * lonsign
        gamma = geomath.ang_normalize(gamma)
        k *= self.k0
        return PlanarCoordinates(x, y, gamma, k)

    def reverse(self, lon0: float, x: float, y: float) -> GeodeticCoordinates:
        """
        Invert the projection.

        Args:
            lon0: Central meridian in degrees
            x: Easting in meters relative to the central meridian
            y: Northing in meters relative to the equator

        Returns:
            GeodeticCoordinates (lat, lon, gamma, k)
        """
        if self._exact is not None:
            return self._exact.reverse(lon0, x, y)

        xi = y / (self._a1 * self.k0)
        eta = x / (self._a1 * self.k0)
        # Explicitly enforce the parity
        xisign = -1 if geomath.signbit(xi) else 1
        etasign = -1 if geomath.signbit(eta) else 1
        xi *= xisign
        eta *= etasign
        backside = xi > math.pi / 2
        if backside:
            xi = math.pi - xi

        zetap, dzeta = _clenshaw(self._bet, -1.0, xi, eta)
        gamma = geomath.atan2d(dzeta.imag, dzeta.real)
        k = self._b1 / abs(dzeta)
        xip = zetap.real
        etap = zetap.imag
        s = math.sinh(etap)
        # cos(pi/2) might be negative
        c = max(0.0, math.cos(xip))
        r = math.hypot(s, c)
        if r != 0:
            lon = geomath.atan2d(s, c)
            sxip = math.sin(xip)
            tau = geomath.tauf(sxip / r, self._es)
            gamma += geomath.atan2d(sxip * math.tanh(etap), c)
            lat = geomath.atand(tau)
            # cos(phi') * cosh(eta') = r
            k *= (
                math.sqrt(self._e2m + self._e2 / (1 + geomath.sq(tau)))
                * math.hypot(1.0, tau)
                * r
            )
        else:
            lat = geomath.QD
            lon = 0.0
            k *= self._c
        lat *= xisign
        if backside:
            lon = geomath.HD - lon
        lon *= etasign
        lon = geomath.ang_normalize(lon + lon0)
        if backside:
            gamma = geomath.HD - gamma
        gamma *= xisign * etasign
        gamma = geomath.ang_normalize(gamma)
        k *= self.k0
        return GeodeticCoordinates(lat, lon, gamma, k)


@lru_cache(maxsize=None)
def utm_projection(
    kind: TransverseMercatorKind = TransverseMercatorKind.SERIES,
) -> TransverseMercator:
    """
    Shared Transverse Mercator instance for UTM (WGS84, k0 = 0.9996).

    Args:
        kind: SERIES or EXACT formulation

    Returns:
        Cached TransverseMercator instance
    """
    logger.debug(f"Creating UTM Transverse Mercator ({TransverseMercatorKind(kind).value})")
    return TransverseMercator(WGS84, UTM_K0, kind)
