"""
Geospatial Module for the Projection Map Renderer.

All spherical geometry of the renderer originates from this module. No
downstream module implements geometry calculations independently.

This module provides:
- Unit-sphere coordinate conversions
- Angular distance, great-circle interpolation and geodesic circles
- Projection families and viewport fitting
"""

from geospatial.coordinate_models import (
    lonlat_to_cartesian,
    cartesian_to_lonlat,
    to_cartesian,
    from_cartesian,
)

from geospatial.distance_calculations import (
    angular_distance,
    great_circle_distance_m,
    slerp_geo,
    interpolate_great_circle,
    geodesic_circle,
)

from geospatial.projections import (
    ProjectionAdapter,
    Mercator,
    EqualEarth,
    Equirectangular,
    FittedProjection,
    PROJECTIONS,
    create_projection,
    fit_projection,
)

__all__ = [
    # Coordinate models
    "lonlat_to_cartesian",
    "cartesian_to_lonlat",
    "to_cartesian",
    "from_cartesian",
    # Great-circle calculations
    "angular_distance",
    "great_circle_distance_m",
    "slerp_geo",
    "interpolate_great_circle",
    "geodesic_circle",
    # Projections
    "ProjectionAdapter",
    "Mercator",
    "EqualEarth",
    "Equirectangular",
    "FittedProjection",
    "PROJECTIONS",
    "create_projection",
    "fit_projection",
]
