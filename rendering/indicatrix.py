"""
Tissot Indicatrix Grid Generator.

Places one small geodesic disc on every node of a fixed latitude/longitude
grid. On the sphere all discs are identical; once drawn through a
projection their size and shape expose the projection's local distortion
(circles under a conformal projection, equal areas under an equal-area one).
No distortion metric is computed here.

Grid
----
- Latitude: closed range [-80, 80]
- Longitude: half-open range [-180, 180)
- Same spacing on both axes

Known Limitation
----------------
Discs centred on lon = -180 straddle the antimeridian. Their ring jumps
between -180 and +180, and the path generator does not split rings, so
under every family that column draws as a thin band across the whole map
width instead of a small disc.
"""

from typing import Tuple
import numpy as np

from common.types import GeoFeature, GeoPoint, IndicatrixSpec
from geospatial.distance_calculations import geodesic_circle

DEFAULT_GRID_SPACING_DEG = 20.0
DEFAULT_INDICATRIX_RADIUS_DEG = 2.0
DEFAULT_CIRCLE_SAMPLES = 72

LAT_RANGE = (-80.0, 80.0)
LON_RANGE = (-180.0, 180.0)

# Absorbs float error when the last step lands exactly on the upper bound.
_GRID_EPS = 1e-9


def indicatrix_grid(
    spacing_deg: float = DEFAULT_GRID_SPACING_DEG,
    radius_deg: float = DEFAULT_INDICATRIX_RADIUS_DEG
) -> Tuple[IndicatrixSpec, ...]:
    """Enumerate indicatrix centers row by row, south to north, west to east.

    Parameters
    ----------
    spacing_deg : float
        Grid spacing in degrees.
    radius_deg : float
        Angular radius of every disc in degrees.

    Returns
    -------
    Tuple[IndicatrixSpec, ...]
        One spec per (lat, lon) node; 162 with the defaults.

    Raises
    ------
    ValueError
        If spacing or radius is not positive.
    """
    if not spacing_deg > 0:
        raise ValueError(f"Grid spacing must be positive, got {spacing_deg}")
    if not radius_deg > 0:
        raise ValueError(f"Indicatrix radius must be positive, got {radius_deg}")

    lat0, lat1 = LAT_RANGE
    lon0, lon1 = LON_RANGE
    n_lat = int(np.floor((lat1 - lat0) / spacing_deg + _GRID_EPS)) + 1
    n_lon = int(np.ceil((lon1 - lon0) / spacing_deg - _GRID_EPS))

    specs = []
    for i in range(n_lat):
        lat = lat0 + i * spacing_deg
        for j in range(n_lon):
            lon = lon0 + j * spacing_deg
            specs.append(IndicatrixSpec(GeoPoint(lon, lat), radius_deg))
    return tuple(specs)


def indicatrix_feature(spec: IndicatrixSpec, samples: int = DEFAULT_CIRCLE_SAMPLES) -> GeoFeature:
    """Polygon feature for one disc."""
    ring = geodesic_circle(spec.center, float(np.radians(spec.radius_deg)), samples)
    return GeoFeature.polygon(
        [ring],
        {"center_lon": spec.center.lon, "center_lat": spec.center.lat}
    )
