"""
Great-Circle Calculations on the Sphere.

This module provides the spherical primitives used by the renderer:
angular distance, spherical linear interpolation along the shorter
great-circle arc, and geodesic circles (points at a fixed angular distance
from a center).

Scientific Context
------------------
Domain: Spherical trigonometry
Model: Unit sphere

Numerical Notes
---------------
1. Angular distance uses the haversine form evaluated with ``atan2`` and a
   clipped haversine term, which stays accurate near 0 and finite near pi.
2. Interpolation uses the angle between unit vectors from
   ``atan2(|a x b|, a . b)``, which is well conditioned over the whole range.
3. Antipodal endpoints do not define a unique great circle. The arc is then
   chosen to leave the start point heading due north (through the North
   Pole); a polar start leaves along its own meridian.

Implementation
--------------
Geodesic circles solve the direct geodesic problem with `pyproj.Geod` on a
spherical figure, at evenly spaced azimuths.

References
----------
- Sinnott, R.W. (1984). Virtues of the Haversine. Sky and Telescope, 68(2), 159.
- Shoemake, K. (1985). Animating rotation with quaternion curves. SIGGRAPH '85.
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy, 87(1), 43-55.
"""

from typing import Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from pyproj import Geod

from common.constants import CartographicConstants
from common.types import GeoPoint
from geospatial.coordinate_models import (
    cartesian_to_lonlat,
    from_cartesian,
    lonlat_to_cartesian,
    to_cartesian,
)


# Spherical figure for the direct geodesic problem
_sphere_geod = Geod(ellps='sphere')

_EPS = CartographicConstants.COINCIDENT_EPSILON.value
# Endpoints closer than this to antipodal use the tie-break arc
_ANTIPODAL_EPS = 1e-9


def angular_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle angular separation of two points.

    Parameters
    ----------
    a, b : GeoPoint
        Points in degrees.

    Returns
    -------
    float
        Angular distance in radians, in [0, pi]. Exactly 0 for identical
        points; symmetric in its arguments.

    Examples
    --------
    >>> import numpy as np
    >>> round(float(np.degrees(angular_distance(GeoPoint(0, 0), GeoPoint(90, 0)))), 6)
    90.0
    """
    lat1 = np.radians(a.lat)
    lat2 = np.radians(b.lat)
    dlat = lat2 - lat1
    dlon = np.radians(b.lon) - np.radians(a.lon)

    h = np.sin(dlat / 2)**2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2)**2
    h = np.clip(h, 0.0, 1.0)

    return float(2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h)))


def great_circle_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters on the mean-radius sphere."""
    return angular_distance(a, b) * CartographicConstants.EARTH_MEAN_RADIUS.value


def _vector_angle(va: NDArray[np.float64], vb: NDArray[np.float64]) -> float:
    return float(np.arctan2(np.linalg.norm(np.cross(va, vb)), np.dot(va, vb)))


def _antipodal_direction(start: GeoPoint, va: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unit tangent at ``va`` pointing north (or along the meridian at a pole)."""
    north = np.array([0.0, 0.0, 1.0])
    u = north - np.dot(north, va) * va
    norm = np.linalg.norm(u)
    if norm < _EPS:
        lon = np.radians(start.lon)
        return np.array([np.cos(lon), np.sin(lon), 0.0])
    return u / norm


def _slerp_vectors(
    start: GeoPoint,
    end: GeoPoint,
    fractions: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Interpolated unit vectors, shape (n, 3), for each fraction."""
    va = to_cartesian(start)
    vb = to_cartesian(end)
    omega = _vector_angle(va, vb)
    t = fractions[:, np.newaxis]

    if omega < _EPS:
        return np.repeat(va[np.newaxis, :], len(fractions), axis=0)

    if np.pi - omega < _ANTIPODAL_EPS:
        u = _antipodal_direction(start, va)
        angle = t * np.pi
        return np.cos(angle) * va + np.sin(angle) * u

    sin_omega = np.sin(omega)
    return (np.sin((1 - t) * omega) * va + np.sin(t * omega) * vb) / sin_omega


def slerp_geo(a: GeoPoint, b: GeoPoint, t: float) -> GeoPoint:
    """Spherical linear interpolation along the shorter great-circle arc.

    Parameters
    ----------
    a, b : GeoPoint
        Start and end points.
    t : float
        Fraction in [0, 1]; 0 returns ``a`` and 1 returns ``b``.

    Returns
    -------
    GeoPoint
        The interpolated point.

    Raises
    ------
    ValueError
        If ``t`` is outside [0, 1].

    Notes
    -----
    For antipodal endpoints the arc heads due north from ``a`` (see module
    notes); the result is deterministic and never NaN.
    """
    if not 0.0 <= t <= 1.0:
        raise ValueError(f"Interpolation fraction {t} outside [0, 1]")
    if t == 0.0:
        return a
    if t == 1.0:
        return b
    v = _slerp_vectors(a, b, np.array([t], dtype=np.float64))[0]
    return from_cartesian(v)


def interpolate_great_circle(
    start: GeoPoint,
    end: GeoPoint,
    segments: int
) -> Tuple[GeoPoint, ...]:
    """Sample a great-circle arc at ``segments + 1`` evenly spaced fractions.

    The first and last samples are exactly ``start`` and ``end``.

    Raises
    ------
    ValueError
        If ``segments`` is smaller than 1.
    """
    if segments < 1:
        raise ValueError(f"segments must be >= 1, got {segments}")

    fractions = np.arange(segments + 1, dtype=np.float64) / segments
    vectors = _slerp_vectors(start, end, fractions)
    lon_rad, lat_rad = cartesian_to_lonlat(vectors)
    lons = np.clip(np.degrees(lon_rad), -180.0, 180.0)
    lats = np.clip(np.degrees(lat_rad), -90.0, 90.0)

    inner = tuple(GeoPoint(float(lon), float(lat)) for lon, lat in zip(lons[1:-1], lats[1:-1]))
    return (start,) + inner + (end,)


def geodesic_circle(
    center: GeoPoint,
    angular_radius: float,
    samples: int = 72
) -> Tuple[GeoPoint, ...]:
    """Closed ring of points at a fixed angular distance from ``center``.

    Parameters
    ----------
    center : GeoPoint
        Circle center.
    angular_radius : float
        Radius in radians, in [0, pi].
    samples : int
        Number of distinct vertices (at least 4; 64 or more recommended).

    Returns
    -------
    Tuple[GeoPoint, ...]
        ``samples + 1`` points; the last repeats the first to close the ring.
        Vertices are ordered by increasing azimuth (clockwise seen from
        outside the sphere).
    """
    if samples < 4:
        raise ValueError(f"samples must be >= 4, got {samples}")
    if not 0.0 <= angular_radius <= np.pi:
        raise ValueError(f"angular_radius {angular_radius} outside [0, pi]")

    azimuths = np.linspace(0.0, 360.0, samples, endpoint=False)
    lons, lats, _ = _sphere_geod.fwd(
        np.full(samples, center.lon),
        np.full(samples, center.lat),
        azimuths,
        np.full(samples, angular_radius * _sphere_geod.a)
    )
    lons = np.clip(np.asarray(lons, dtype=np.float64), -180.0, 180.0)
    lats = np.clip(np.asarray(lats, dtype=np.float64), -90.0, 90.0)

    ring = [GeoPoint(float(lon), float(lat)) for lon, lat in zip(lons, lats)]
    ring.append(ring[0])
    return tuple(ring)


def angular_distances_from(
    center: GeoPoint,
    points: Sequence[GeoPoint]
) -> NDArray[np.float64]:
    """Vectorized angular distance from ``center`` to each point (radians)."""
    if len(points) == 0:
        return np.zeros(0, dtype=np.float64)
    coords = np.radians(np.array([p.as_tuple() for p in points], dtype=np.float64))
    vc = lonlat_to_cartesian(np.radians(center.lon), np.radians(center.lat))
    vp = lonlat_to_cartesian(coords[:, 0], coords[:, 1])
    cross = np.linalg.norm(np.cross(vp, vc), axis=-1)
    dot = vp @ vc
    return np.arctan2(cross, dot)
