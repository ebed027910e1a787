"""
Coordinate Models for the Unit Sphere.

This module converts between geographic (longitude, latitude) coordinates
and Cartesian unit vectors. All geodesic primitives of the renderer work on
the unit sphere: the projections are defined on a sphere, and interpolating
along a great circle is a rotation of unit vectors.

Scientific Context
------------------
Domain: Spherical geometry
Model: Unit sphere, geocentric frame

Frame
-----
- X-axis through (lon=0, lat=0)
- Y-axis through (lon=90E, lat=0)
- Z-axis through the North Pole
"""

from typing import Tuple, Union
import numpy as np
from numpy.typing import NDArray

from common.types import GeoPoint

ArrayLike = Union[float, NDArray[np.float64]]


def lonlat_to_cartesian(
    lon_rad: ArrayLike,
    lat_rad: ArrayLike
) -> NDArray[np.float64]:
    """Convert spherical coordinates to unit vectors.

    Parameters
    ----------
    lon_rad, lat_rad : float or ndarray
        Longitude and latitude in radians.

    Returns
    -------
    ndarray
        Array of shape (..., 3) holding (X, Y, Z) on the unit sphere.
    """
    cos_lat = np.cos(lat_rad)
    return np.stack(
        [cos_lat * np.cos(lon_rad), cos_lat * np.sin(lon_rad), np.sin(lat_rad)],
        axis=-1
    )


def cartesian_to_lonlat(
    xyz: NDArray[np.float64]
) -> Tuple[ArrayLike, ArrayLike]:
    """Convert vectors to spherical coordinates.

    The input need not be normalized. At the poles longitude is
    ``atan2(0, 0) = 0``.

    Parameters
    ----------
    xyz : ndarray
        Array of shape (..., 3).

    Returns
    -------
    Tuple
        (lon_rad, lat_rad)
    """
    x = xyz[..., 0]
    y = xyz[..., 1]
    z = xyz[..., 2]
    lon_rad = np.arctan2(y, x)
    lat_rad = np.arctan2(z, np.hypot(x, y))
    return lon_rad, lat_rad


def to_cartesian(point: GeoPoint) -> NDArray[np.float64]:
    """Convert a GeoPoint (degrees) to a unit vector."""
    return lonlat_to_cartesian(np.radians(point.lon), np.radians(point.lat))


def from_cartesian(xyz: NDArray[np.float64]) -> GeoPoint:
    """Convert a vector to a GeoPoint (degrees).

    Values are clipped onto the valid ranges to absorb rounding at the
    antimeridian and the poles.
    """
    lon_rad, lat_rad = cartesian_to_lonlat(np.asarray(xyz, dtype=np.float64))
    lon = float(np.clip(np.degrees(lon_rad), -180.0, 180.0))
    lat = float(np.clip(np.degrees(lat_rad), -90.0, 90.0))
    return GeoPoint(lon, lat)


def points_to_arrays(
    points
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Split a sequence of GeoPoint into (lon_deg, lat_deg) arrays."""
    if len(points) == 0:
        empty = np.zeros(0, dtype=np.float64)
        return empty, empty.copy()
    coords = np.array([p.as_tuple() for p in points], dtype=np.float64)
    return coords[:, 0], coords[:, 1]
