"""
Jacobi elliptic functions and complete/incomplete elliptic integrals.

Thin wrapper over scipy.special exposing the operations the exact
Transverse Mercator needs for a fixed parameter m = k^2.
"""

from typing import NamedTuple

from scipy import special

from gridref.core.errors import ConfigurationError


class JacobiElliptic(NamedTuple):
    """Values of sn, cn, dn and the amplitude am at some argument u."""

    sn: float
    cn: float
    dn: float
    am: float


class EllipticFunction:
    """
    Elliptic functions for a fixed parameter.

    The complete integrals are evaluated once at construction.

    Attributes:
        m: Parameter k^2, in [0, 1)
    """

    def __init__(self, m: float):
        if not 0 <= m < 1:
            raise ConfigurationError(f"Elliptic parameter {m} not in [0, 1)", config_key="m")
        self.m = m
        self._k = float(special.ellipk(m))
        self._e = float(special.ellipe(m))

    def __repr__(self) -> str:
        return f"EllipticFunction(m={self.m})"

    def K(self) -> float:
        """Complete integral of the first kind."""
        return self._k

    def E(self) -> float:
        """Complete integral of the second kind."""
        return self._e

    def KE(self) -> float:
        """Difference K - E."""
        return self._k - self._e

    def am(self, u: float) -> JacobiElliptic:
        """
        Jacobi amplitude and the functions sn, cn, dn at u.

        Args:
            u: Argument

        Returns:
            JacobiElliptic(sn, cn, dn, am)
        """
        sn, cn, dn, ph = special.ellipj(u, self.m)
        return JacobiElliptic(float(sn), float(cn), float(dn), float(ph))

    def incomplete_e(self, jac: JacobiElliptic) -> float:
        """
        Incomplete integral of the second kind E(am(u)).

        Args:
            jac: Jacobi functions at u, as returned by am()

        Returns:
            E(phi, m) with phi = am(u)
        """
        return float(special.ellipeinc(jac.am, self.m))
