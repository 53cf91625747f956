"""
Exact Transverse Mercator projection.

Implements the Thompson/Lee formulation in terms of Jacobi elliptic
functions of parameters e^2 and 1 - e^2. The mapping goes through the
complex variable w = u + i*v; zeta(w) = psi + i*lam gives the isometric
latitude and longitude, sigma(w) = xi + i*eta the scaled projected
coordinates. Both inverses are solved with Newton's method starting from
closed-form approximations.

Results agree with the series form to about 5nm near the central meridian
and remain accurate to round-off everywhere in the first octant and its
reflections.
"""

import math
from typing import Tuple

from gridref.core import geomath
from gridref.core.ellipsoid import UTM_K0, WGS84, Ellipsoid
from gridref.core.errors import ConfigurationError
from gridref.core.projection.elliptic import EllipticFunction, JacobiElliptic
from gridref.models.coordinates import GeodeticCoordinates, PlanarCoordinates

# Newton iteration caps for zetainv and sigmainv
ZETAINV_MAX_ITERATIONS = 6
SIGMAINV_MAX_ITERATIONS = 7

# atan(_OVERFLOW) == pi/2 in double precision
_OVERFLOW = 1 / geomath.EPSILON**2


class TransverseMercatorExact:
    """
    Transverse Mercator via elliptic functions.

    Only prolate-free ellipsoids (0 < f < 1) are supported.

    Attributes:
        ellipsoid: Ellipsoid being projected
        k0: Central scale factor
    """

    def __init__(self, ellipsoid: Ellipsoid = WGS84, k0: float = UTM_K0):
        """
        Initialize the projection.

        Args:
            ellipsoid: Ellipsoid parameters (flattening must be positive)
            k0: Central scale factor

        Raises:
            ConfigurationError: If f <= 0 or k0 is not positive
        """
        if not ellipsoid.f > 0:
            raise ConfigurationError(
                "Flattening must be positive for the exact Transverse Mercator",
                config_key="f",
            )
        if not (math.isfinite(k0) and k0 > 0):
            raise ConfigurationError(f"Scale factor {k0} is not positive", config_key="k0")
        self.ellipsoid = ellipsoid
        self.k0 = k0

        self._tol = geomath.EPSILON
        self._tol2 = 0.1 * self._tol
        self._taytol = self._tol**0.6
        self._a = ellipsoid.a
        # e^2 and 1 - e^2
        self._mu = ellipsoid.e2
        self._mv = 1 - self._mu
        self._e = math.sqrt(self._mu)
        self._eu = EllipticFunction(self._mu)
        self._ev = EllipticFunction(self._mv)

    def __repr__(self) -> str:
        return f"TransverseMercatorExact(a={self._a}, f={self.ellipsoid.f}, k0={self.k0})"

    def _zeta(self, ju: JacobiElliptic, jv: JacobiElliptic) -> Tuple[float, float]:
        """Lee 54.17: (taup, lam) at w = u + i*v."""
        snu, cnu, dnu = ju.sn, ju.cn, ju.dn
        snv, cnv, dnv = jv.sn, jv.cn, jv.dn
        d1 = math.sqrt(geomath.sq(cnu) + self._mv * geomath.sq(snu * snv))
        d2 = math.sqrt(self._mu * geomath.sq(cnu) + self._mv * geomath.sq(cnv))
        overflow = -_OVERFLOW if geomath.signbit(snu) else _OVERFLOW
        t1 = snu * dnv / d1 if d1 != 0 else overflow
        t2 = math.sinh(self._e * math.asinh(self._e * snu / d2)) if d2 != 0 else overflow
        # psi = asinh(t1) - asinh(t2), taup = sinh(psi)
        taup = t1 * math.hypot(1.0, t2) - t2 * math.hypot(1.0, t1)
        if d1 != 0 and d2 != 0:
            lam = math.atan2(dnu * snv, cnu * cnv) - self._e * math.atan2(
                self._e * cnu * snv, dnu * cnv
            )
        else:
            lam = 0.0
        return taup, lam

    def _dwdzeta(self, ju: JacobiElliptic, jv: JacobiElliptic) -> Tuple[float, float]:
        """Lee 54.21: derivative dw/dzeta."""
        snu, cnu, dnu = ju.sn, ju.cn, ju.dn
        snv, cnv, dnv = jv.sn, jv.cn, jv.dn
        d = self._mv * geomath.sq(geomath.sq(cnv) + self._mu * geomath.sq(snu * snv))
        du = cnu * dnu * dnv * (geomath.sq(cnv) - self._mu * geomath.sq(snu * snv)) / d
        dv = -snu * snv * cnv * (geomath.sq(dnu * dnv) + self._mu * geomath.sq(cnu)) / d
        return du, dv

    def _zetainv0(self, psi: float, lam: float) -> Tuple[float, float, bool]:
        """
        Starting point for zetainv.

        Returns:
            Tuple (u, v, done) where done means the guess is already accurate
        """
        e = self._e
        pi = math.pi
        done = False
        if psi < -e * pi / 4 and lam > (1 - 2 * e) * pi / 2 and psi < lam - (1 - e) * pi / 2:
            # Log singularity at w0 = Eu.K() + i*Ev.K(), the south pole
            psix = 1 - psi / e
            lamx = (pi / 2 - lam) / e
            u = math.asinh(math.sin(lamx) / math.hypot(math.cos(lamx), math.sinh(psix))) * (
                1 + self._mu / 2
            )
            v = math.atan2(math.cos(lamx), math.sinh(psix)) * (1 + self._mu / 2)
            u = self._eu.K() - u
            v = self._ev.K() - v
        elif psi < e * pi / 2 and lam > (1 - 2 * e) * pi / 2:
            # Near w0 = i*Ev.K(), zeta = zeta0 - (mv * e)/3 * (w - w0)^3
            dlam = lam - (1 - e) * pi / 2
            rad = math.hypot(psi, dlam)
            # Maps arg(zeta - zeta0) in [-90, 180] to arg(w - w0) in [-90, 0]
            ang = math.atan2(dlam - psi, psi + dlam) - 0.75 * pi
            # Error using this guess is about 0.21 * (rad/e)^(5/3)
            done = rad < e * self._taytol
            rad = (3 / (self._mv * e) * rad) ** (1 / 3)
            ang /= 3
            u = rad * math.cos(ang)
            v = rad * math.sin(ang) + self._ev.K()
        else:
            # Spherical TM, Lee 12.6, scaled to put (90, 0) in the right place
            v = math.asinh(math.sin(lam) / math.hypot(math.cos(lam), math.sinh(psi)))
            u = math.atan2(math.sinh(psi), math.cos(lam))
            u *= self._eu.K() / (pi / 2)
            v *= self._eu.K() / (pi / 2)
        return u, v, done

    def _zetainv(self, taup: float, lam: float) -> Tuple[float, float]:
        """Invert zeta with Newton's method."""
        psi = math.asinh(taup)
        scal = 1 / math.hypot(1.0, taup)
        u, v, done = self._zetainv0(psi, lam)
        if done:
            return u, v
        stol2 = self._tol2 / geomath.sq(max(psi, 1.0))
        trip = 0
        for _ in range(ZETAINV_MAX_ITERATIONS):
            ju = self._eu.am(u)
            jv = self._ev.am(v)
            tau1, lam1 = self._zeta(ju, jv)
            du1, dv1 = self._dwdzeta(ju, jv)
            tau1 = (tau1 - taup) * scal
            lam1 -= lam
            delu = tau1 * du1 - lam1 * dv1
            delv = tau1 * dv1 + lam1 * du1
            u -= delu
            v -= delv
            if trip:
                break
            delw2 = geomath.sq(delu) + geomath.sq(delv)
            if not delw2 >= stol2:
                trip += 1
        return u, v

    def _sigma(self, v: float, ju: JacobiElliptic, jv: JacobiElliptic) -> Tuple[float, float]:
        """Lee 55.4: (xi, eta) at w = u + i*v."""
        snu, cnu, dnu = ju.sn, ju.cn, ju.dn
        snv, cnv, dnv = jv.sn, jv.cn, jv.dn
        d = self._mu * geomath.sq(cnu) + self._mv * geomath.sq(cnv)
        xi = self._eu.incomplete_e(ju) - self._mu * snu * cnu * dnu / d
        eta = v - self._ev.incomplete_e(jv) + self._mv * snv * cnv * dnv / d
        return xi, eta

    def _dwdsigma(self, ju: JacobiElliptic, jv: JacobiElliptic) -> Tuple[float, float]:
        """Reciprocal of Lee 55.9: dw/dsigma = dn(w)^2/mv."""
        snu, cnu, dnu = ju.sn, ju.cn, ju.dn
        snv, cnv, dnv = jv.sn, jv.cn, jv.dn
        d = self._mv * geomath.sq(geomath.sq(cnv) + self._mu * geomath.sq(snu * snv))
        dnr = dnu * cnv * dnv
        dni = -self._mu * snu * cnu * snv
        du = (geomath.sq(dnr) - geomath.sq(dni)) / d
        dv = 2 * dnr * dni / d
        return du, dv

    def _sigmainv0(self, xi: float, eta: float) -> Tuple[float, float, bool]:
        """
        Starting point for sigmainv.

        Returns:
            Tuple (u, v, done) where done means the guess is already accurate
        """
        eu, ev = self._eu, self._ev
        done = False
        if eta > 1.25 * ev.KE() or (xi < -0.25 * eu.E() and xi < eta - ev.KE()):
            # Simple pole at w0 = Eu.K() + i*Ev.K():
            # sigma = (Eu.E() + i*Ev.KE()) + 1/(w - w0)
            x = xi - eu.E()
            y = eta - ev.KE()
            r2 = geomath.sq(x) + geomath.sq(y)
            u = eu.K() + x / r2
            v = ev.K() - y / r2
        elif (eta > 0.75 * ev.KE() and xi < 0.25 * eu.E()) or eta > ev.KE():
            # Near w0 = i*Ev.K(), sigma = sigma0 - mv/3 * (w - w0)^3
            deta = eta - ev.KE()
            rad = math.hypot(xi, deta)
            ang = math.atan2(deta - xi, xi + deta) - 0.75 * math.pi
            # Error using this guess is about 0.068 * rad^(5/3)
            done = rad < 2 * self._taytol
            rad = (3 / self._mv * rad) ** (1 / 3)
            ang /= 3
            u = rad * math.cos(ang)
            v = rad * math.sin(ang) + ev.K()
        else:
            # w = sigma * Eu.K/Eu.E, correct in the limit e -> 0
            u = xi * eu.K() / eu.E()
            v = eta * eu.K() / eu.E()
        return u, v, done

    def _sigmainv(self, xi: float, eta: float) -> Tuple[float, float]:
        """Invert sigma with Newton's method."""
        u, v, done = self._sigmainv0(xi, eta)
        if done:
            return u, v
        trip = 0
        for _ in range(SIGMAINV_MAX_ITERATIONS):
            ju = self._eu.am(u)
            jv = self._ev.am(v)
            xi1, eta1 = self._sigma(v, ju, jv)
            du1, dv1 = self._dwdsigma(ju, jv)
            xi1 -= xi
            eta1 -= eta
            delu = xi1 * du1 - eta1 * dv1
            delv = xi1 * dv1 + eta1 * du1
            u -= delu
            v -= delv
            if trip:
                break
            delw2 = geomath.sq(delu) + geomath.sq(delv)
            if not delw2 >= self._tol2:
                trip += 1
        return u, v

    def _scale(self, tau: float, ju: JacobiElliptic, jv: JacobiElliptic) -> Tuple[float, float]:
        """
        Meridian convergence (radians) and scale, Lee 55.12 and 55.13.

        The numerator and denominator under the square root are rewritten
        to stay accurate near the pole and near (0, 90(1 - e)).
        """
        snu, cnu, dnu = ju.sn, ju.cn, ju.dn
        snv, cnv, dnv = jv.sn, jv.cn, jv.dn
        sec2 = 1 + geomath.sq(tau)
        gamma = math.atan2(self._mv * snu * snv * cnv, cnu * dnu * dnv)
        k = (
            math.sqrt(self._mv + self._mu / sec2)
            * math.sqrt(sec2)
            * math.sqrt(
                (self._mv * geomath.sq(snv) + geomath.sq(cnu * dnv))
                / (self._mu * geomath.sq(cnu) + self._mv * geomath.sq(cnv))
            )
        )
        return gamma, k

    def forward(self, lon0: float, lat: float, lon: float) -> PlanarCoordinates:
        """
        Project a geodetic position.

        Args:
            lon0: Central meridian in degrees
            lat: Latitude in degrees, [-90, 90]
            lon: Longitude in degrees

        Returns:
            PlanarCoordinates (x, y, gamma, k)
        """
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
        lam = lon * geomath.DEGREE
        tau = geomath.tand(lat)

        # (u, v) are the coordinates of the Thompson TM, Lee 54
        if lat == geomath.QD:
            u = self._eu.K()
            v = 0.0
        elif lat == 0 and lon == geomath.QD * (1 - self._e):
            u = 0.0
            v = self._ev.K()
        else:
            u, v = self._zetainv(geomath.taupf(tau, self._e), lam)

        ju = self._eu.am(u)
        jv = self._ev.am(v)
        xi, eta = self._sigma(v, ju, jv)
        if backside:
            xi = 2 * self._eu.E() - xi
        y = xi * self._a * self.k0 * latsign
        x = eta * self._a * self.k0 * lonsign

        if lat == geomath.QD:
            gamma = lon
            k = 1.0
        else:
            # Recompute (tau, lam) from (u, v) to improve the accuracy of the scale
            tau, lam = self._zeta(ju, jv)
            tau = geomath.tauf(tau, self._e)
            gamma, k = self._scale(tau, ju, jv)
            gamma /= geomath.DEGREE
        if backside:
            gamma = geomath.HD - gamma
        gamma *= latsign * lonsign
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
        xi = y / (self._a * self.k0)
        eta = x / (self._a * self.k0)
        # Explicitly enforce the parity
        xisign = -1 if geomath.signbit(xi) else 1
        etasign = -1 if geomath.signbit(eta) else 1
        xi *= xisign
        eta *= etasign
        backside = xi > self._eu.E()
        if backside:
            xi = 2 * self._eu.E() - xi

        if xi == 0 and eta == self._ev.KE():
            u = 0.0
            v = self._ev.K()
        else:
            u, v = self._sigmainv(xi, eta)

        ju = self._eu.am(u)
        jv = self._ev.am(v)
        if v != 0 or u != self._eu.K():
            taup, lam = self._zeta(ju, jv)
            tau = geomath.tauf(taup, self._e)
            lat = math.degrees(math.atan(tau))
            lon = lam / geomath.DEGREE
            gamma, k = self._scale(tau, ju, jv)
            gamma /= geomath.DEGREE
        else:
            lat = geomath.QD
            lon = gamma = 0.0
            k = 1.0

        if backside:
            lon = geomath.HD - lon
        lon *= etasign
        lon = geomath.ang_normalize(lon + lon0)
        lat *= xisign
        if backside:
            gamma = geomath.HD - gamma
        gamma *= xisign * etasign
        k *= self.k0
        return GeodeticCoordinates(lat, lon, gamma, k)
