"""
Scalar math helpers for the projection code.

All functions operate on Python floats (IEEE-754 doubles) and never raise
for NaN input; NaN simply propagates. Angles are in degrees unless the
name says otherwise.
"""

import math
import sys
from typing import Sequence, Tuple

from gridref.core.ellipsoid import DEGREE

DIGITS = sys.float_info.mant_dig
EPSILON = sys.float_info.epsilon

# Degrees per quarter turn, half turn and full turn
QD = 90.0
HD = 180.0
TD = 360.0

# tand() returns this instead of infinity at +/-90
_TAN_OVERFLOW = 1 / EPSILON**2


def sq(x: float) -> float:
    """Square a number."""
    return x * x


def signbit(x: float) -> bool:
    """True if the sign bit of x is set (including -0.0)."""
    return math.copysign(1.0, x) < 0


def two_sum(u: float, v: float) -> Tuple[float, float]:
    """
    Error-free sum of two numbers.

    Returns:
        Tuple (s, t) where s = round(u + v) and u + v = s + t exactly
    """
    s = u + v
    up = s - v
    vpp = s - up
    up -= u
    vpp -= v
    t = -(up + vpp)
    return s, t


def polyval(n: int, coeffs: Sequence[float], x: float, start: int = 0) -> float:
    """
    Evaluate a polynomial of degree n with Horner's method.

    Args:
        n: Degree of the polynomial (n < 0 evaluates to 0)
        coeffs: Coefficients, highest power first
        x: Argument
        start: Offset of the leading coefficient within coeffs

    Returns:
        Value of the polynomial at x
    """
    if n < 0:
        return 0.0
    y = float(coeffs[start])
    for i in range(start + 1, start + n + 1):
        y = y * x + coeffs[i]
    return y


def ang_normalize(x: float) -> float:
    """
    Reduce an angle to the range (-180, 180].

    Args:
        x: Angle in degrees

    Returns:
        Equivalent angle in (-180, 180]; -0.0 is preserved
    """
    x = math.fmod(x, TD)
    if x <= -HD:
        return x + TD
    if x > HD:
        return x - TD
    return x


def ang_diff(x: float, y: float) -> float:
    """
    Difference y - x of two angles reduced to (-180, 180].

    The two-sum keeps the result accurate even when x and y are large
    multiples of 360 apart.
    """
    d, t = two_sum(math.remainder(-x, TD), math.remainder(y, TD))
    d = ang_normalize(d)
    return two_sum(-HD if d == HD and t > 0 else d, t)[0]


def ang_round(x: float) -> float:
    """Coarsen a value close to zero so that tiny angles are exact."""
    z = 1 / 16
    y = abs(x)
    w = z - y
    # z - (z - y) rounds y to a multiple of 2^-57 when y is small
    if w > 0:
        y = z - w
    return math.copysign(y, x)


def lat_fix(x: float) -> float:
    """Replace latitudes outside [-90, 90] with NaN."""
    return math.nan if abs(x) > QD else x


def _lround(x: float) -> int:
    # Round half away from zero, like C's lround
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def sincosd(x: float) -> Tuple[float, float]:
    """
    Sine and cosine of an angle in degrees.

    The argument is reduced exactly to [-45, 45] before conversion to
    radians, so multiples of 90 give exact zeros and ones.
    """
    r = math.fmod(x, TD)
    q = 0 if math.isnan(r) else _lround(r / QD)
    r -= QD * q
    r *= DEGREE
    s = math.sin(r)
    c = math.cos(r)
    q %= 4
    if q == 0:
        sinx, cosx = s, c
    elif q == 1:
        sinx, cosx = c, -s
    elif q == 2:
        sinx, cosx = -s, -c
    else:
        sinx, cosx = -c, s
    if x != 0:
        # Turn -0 into +0 for nonzero arguments
        sinx += 0.0
        cosx += 0.0
    return sinx, cosx


def sind(x: float) -> float:
    """Sine of an angle in degrees."""
    return sincosd(x)[0]


def cosd(x: float) -> float:
    """Cosine of an angle in degrees."""
    return sincosd(x)[1]


def tand(x: float) -> float:
    """Tangent of an angle in degrees; +/-90 gives a large finite value."""
    s, c = sincosd(x)
    if c != 0:
        return s / c
    return -_TAN_OVERFLOW if s < 0 else _TAN_OVERFLOW


def atan2d(y: float, x: float) -> float:
    """
    atan2 with the result in degrees.

    The arguments are rearranged so that the underlying atan2 returns a
    value in [-45, 45] degrees, which is then mapped to the right quadrant.
    """
    q = 0
    if abs(y) > abs(x):
        x, y = y, x
        q = 2
    if signbit(x):
        x = -x
        q += 1
    # x >= 0 and x >= |y| here
    ang = math.degrees(math.atan2(y, x))
    if q == 1:
        ang = math.copysign(HD, y) - ang
    elif q == 2:
        ang = QD - ang
    elif q == 3:
        ang = -QD + ang
    return ang


def atand(x: float) -> float:
    """atan with the result in degrees."""
    return atan2d(x, 1.0)


def eatanhe(x: float, es: float) -> float:
    """
    Evaluate e * atanh(e * x).

    Args:
        x: Argument, |x| <= 1
        es: Signed eccentricity (negative for prolate ellipsoids)
    """
    if es > 0:
        return es * math.atanh(es * x)
    return -es * math.atan(es * x)


def taupf(tau: float, es: float) -> float:
    """
    tan(chi) in terms of tan(phi), chi being the conformal latitude.

    Args:
        tau: tan(phi)
        es: Signed eccentricity

    Returns:
        tau' = tan(chi)
    """
    if not math.isfinite(tau):
        return tau
    tau1 = math.hypot(1.0, tau)
    sig = math.sinh(eatanhe(tau / tau1, es))
    return math.hypot(1.0, sig) * tau - sig * tau1


def tauf(taup: float, es: float) -> float:
    """
    tan(phi) in terms of tan(chi); inverse of taupf.

    Newton's method, converging in 2 iterations for almost all inputs and
    capped at 5.

    Args:
        taup: tau' = tan(chi)
        es: Signed eccentricity

    Returns:
        tau = tan(phi)
    """
    numit = 5
    tol = math.sqrt(EPSILON) / 10
    taumax = 2 / math.sqrt(EPSILON)
    e2m = 1 - sq(es)
    # To lowest order in e^2, taup = e2m * tau. For large tau,
    # taup = exp(-es * atanh(es)) * tau.
    if abs(taup) > 70:
        tau = taup * math.exp(eatanhe(1.0, es))
    else:
        tau = taup / e2m
    stol = tol * max(1.0, abs(taup))
    # Handles +/-inf and NaN, and large tau where hypot(1, tau) == |tau|
    if not abs(tau) < taumax:
        return tau
    for _ in range(numit):
        taupa = taupf(tau, es)
        dtau = (
            (taup - taupa)
            * (1 + e2m * sq(tau))
            / (e2m * math.hypot(1.0, tau) * math.hypot(1.0, taupa))
        )
        tau += dtau
        if not abs(dtau) >= stol:
            break
    return tau
