"""
Cartographic Constants for Projection Rendering.

This module provides the numeric constants used by the projection engine
and the geodesic primitives, each with its unit and source.

References
----------
- Šavrič, B., Patterson, T., Jenny, B. (2018). The Equal Earth map projection.
  International Journal of Geographical Information Science, 33(3), 454-465.
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A constant with provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    unit : str
        The unit of the constant ("1" for dimensionless).
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    unit: str
    source: str
    description: str


class CartographicConstants:
    """Registry of constants used throughout the rendering core.

    Sphere
    ------
    All projections operate on the unit sphere; the mean Earth radius is
    only used to report arc lengths in meters.

    Equal Earth
    -----------
    Polynomial coefficients of the Equal Earth projection, as published.
    """

    EARTH_MEAN_RADIUS: Final[Constant] = Constant(
        value=6_371_008.8,
        unit="m",
        source="IUGG mean radius R1",
        description="Mean radius of the Earth, used for arc lengths"
    )

    # Latitude at which the Mercator y coordinate equals pi, i.e. the
    # edge of the square world extent.
    MERCATOR_MAX_LATITUDE: Final[Constant] = Constant(
        value=float(np.degrees(2.0 * np.arctan(np.exp(np.pi)) - np.pi / 2.0)),
        unit="degree",
        source="Snyder (1987), eq. 7-2 solved for y = pi",
        description="Largest |latitude| projected by Mercator"
    )

    EQUAL_EARTH_A1: Final[Constant] = Constant(
        value=1.340264, unit="1", source="Šavrič et al. (2018)",
        description="Equal Earth polynomial coefficient A1"
    )
    EQUAL_EARTH_A2: Final[Constant] = Constant(
        value=-0.081106, unit="1", source="Šavrič et al. (2018)",
        description="Equal Earth polynomial coefficient A2"
    )
    EQUAL_EARTH_A3: Final[Constant] = Constant(
        value=0.000893, unit="1", source="Šavrič et al. (2018)",
        description="Equal Earth polynomial coefficient A3"
    )
    EQUAL_EARTH_A4: Final[Constant] = Constant(
        value=0.003796, unit="1", source="Šavrič et al. (2018)",
        description="Equal Earth polynomial coefficient A4"
    )
    EQUAL_EARTH_M: Final[Constant] = Constant(
        value=float(np.sqrt(3.0) / 2.0), unit="1", source="Šavrič et al. (2018)",
        description="Equal Earth parametric latitude factor sqrt(3)/2"
    )

    # Below this angular separation two points are treated as coincident.
    COINCIDENT_EPSILON: Final[Constant] = Constant(
        value=1e-12, unit="radian", source="numerical tolerance",
        description="Angular separation treated as zero"
    )

    @classmethod
    def get_all_constants(cls) -> dict:
        """Return all constants as a dictionary.

        Returns
        -------
        dict
            Mapping from constant name to Constant object.
        """
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), Constant)
        }
