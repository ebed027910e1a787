"""
Geometry Metrics for Rendered Output.

This module provides measurements used to verify the rendering core:
how far a sampled great-circle polyline strays from the true arc, and the
plane-space extent of drawn geometry.

Standard Metrics
----------------
- Arc deviation: maximum chord sagitta of a sampled arc on the unit sphere
- Plane bounds: bounding box of path points in viewport units
"""

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple
import numpy as np

from common.logging_config import get_logger
from common.types import GeoPoint, PathData
from geospatial.coordinate_models import lonlat_to_cartesian

logger = get_logger(__name__)


@dataclass
class PlaneBounds:
    """Bounding box in plane units.

    Attributes
    ----------
    x0, y0 : float
        Minimum corner.
    x1, y1 : float
        Maximum corner.
    """
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x0 + self.x1) / 2, (self.y0 + self.y1) / 2


def polyline_arc_deviation(samples: Sequence[GeoPoint]) -> float:
    """Maximum deviation of a sampled polyline from the great circle it samples.

    Each straight segment between consecutive samples is a chord of the
    unit sphere; its largest distance from the arc it replaces is the
    sagitta ``1 - |m|`` where ``m`` is the chord midpoint.

    Parameters
    ----------
    samples : sequence of GeoPoint
        Consecutive samples along one great circle.

    Returns
    -------
    float
        Maximum sagitta in unit-sphere radii (0 for fewer than 2 samples).
    """
    if len(samples) < 2:
        return 0.0
    coords = np.radians(np.array([p.as_tuple() for p in samples], dtype=np.float64))
    vectors = lonlat_to_cartesian(coords[:, 0], coords[:, 1])
    midpoints = (vectors[:-1] + vectors[1:]) / 2
    sagitta = 1.0 - np.linalg.norm(midpoints, axis=-1)
    return float(np.max(sagitta))


def plane_bounds(paths: Iterable[PathData]) -> PlaneBounds:
    """Bounding box of all move/line points of the given paths.

    Raises
    ------
    ValueError
        If the paths contain no points.
    """
    points = [pt for path in paths for pt in path.points()]
    if not points:
        raise ValueError("No points to bound")
    arr = np.array(points, dtype=np.float64)
    return PlaneBounds(
        float(arr[:, 0].min()), float(arr[:, 1].min()),
        float(arr[:, 0].max()), float(arr[:, 1].max())
    )
