"""
Ellipsoid parameters and unit constants.
"""

import math
from dataclasses import dataclass

from gridref.core.errors import ConfigurationError

# Central scale factors for UTM and UPS
UTM_K0 = 0.9996
UPS_K0 = 0.994

# Length units in meters
FT = 0.0254 * 12
SURVEY_FT = 1200.0 / 3937.0
NAUTICAL_MILE = 1852.0

# Angle units; DEGREE in radians, the others in degrees
DEGREE = math.pi / 180
ARCMINUTE = 1.0 / 60
ARCSECOND = 1.0 / 3600


@dataclass(frozen=True)
class Ellipsoid:
    """
    Ellipsoid of revolution.

    Attributes:
        a: Equatorial radius in meters
        f: Flattening (negative for a prolate ellipsoid)
    """

    a: float
    f: float

    def __post_init__(self) -> None:
        """Validate the ellipsoid parameters."""
        if not (math.isfinite(self.a) and self.a > 0):
            raise ConfigurationError(
                f"Equatorial radius {self.a} is not positive", config_key="a"
            )
        if not (math.isfinite(self.f) and self.f < 1):
            raise ConfigurationError(
                f"Flattening {self.f} is not less than 1", config_key="f"
            )

    @property
    def b(self) -> float:
        """Polar semi-axis."""
        return self.a * (1 - self.f)

    @property
    def e2(self) -> float:
        """Eccentricity squared."""
        return self.f * (2 - self.f)

    @property
    def es(self) -> float:
        """Signed eccentricity, negative for a prolate ellipsoid."""
        return math.copysign(math.sqrt(abs(self.e2)), self.f)

    @property
    def e2m(self) -> float:
        """One minus eccentricity squared."""
        return 1 - self.e2

    @property
    def n(self) -> float:
        """Third flattening."""
        return self.f / (2 - self.f)


# Flattening as a ratio of integers has slightly less round-off than
# 1/298.257223563
WGS84 = Ellipsoid(a=6378137.0, f=1000000000 / 298257223563)
GRS80 = Ellipsoid(a=6378137.0, f=1 / 298.257222101)
