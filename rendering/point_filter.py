"""
Point Dataset Filter.

Projects a point dataset and keeps the points that can be drawn. A point is
discarded when its projection is undefined, when either coordinate is not
finite, or when it falls outside a loose margin of one viewport in every
direction: x in [-width, 2*width] and y in [-height, 2*height].
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np

from common.logging_config import get_logger
from common.types import FeatureCollection, GeoFeature, Viewport
from geospatial.projections import FittedProjection

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProjectedPoint:
    feature: GeoFeature
    x: float
    y: float


@dataclass(frozen=True)
class FilterResult:
    """Surviving points in input order, with counts of what was dropped."""
    points: Tuple[ProjectedPoint, ...]
    skipped_non_point: int = 0
    undefined: int = 0
    out_of_bounds: int = 0


def within_margin(x: float, y: float, viewport: Viewport) -> bool:
    """Whether (x, y) is finite and inside the one-viewport margin."""
    w, h = viewport.width, viewport.height
    return bool(
        np.isfinite(x) and np.isfinite(y)
        and -w <= x <= 2 * w
        and -h <= y <= 2 * h
    )


def filter_points(
    collection: FeatureCollection,
    projection: FittedProjection,
    viewport: Viewport
) -> FilterResult:
    """Project and validate the Point features of a collection.

    Parameters
    ----------
    collection : FeatureCollection
        Dataset features; non-Point geometries are skipped.
    projection : FittedProjection
        Fitted projection.
    viewport : Viewport
        Viewport the margin is derived from.

    Returns
    -------
    FilterResult
        Surviving (feature, x, y) triples, preserving input order.
    """
    points = [f for f in collection if f.geometry_type == "Point"]
    skipped = len(collection) - len(points)
    if not points:
        return FilterResult((), skipped_non_point=skipped)

    lons = np.array([f.coordinates.lon for f in points], dtype=np.float64)
    lats = np.array([f.coordinates.lat for f in points], dtype=np.float64)
    x, y = projection.project_array(lons, lats)

    defined = ~np.isnan(x)
    w, h = viewport.width, viewport.height
    with np.errstate(invalid='ignore'):
        in_bounds = defined & (x >= -w) & (x <= 2 * w) & (y >= -h) & (y <= 2 * h)

    kept = tuple(
        ProjectedPoint(feature, float(px), float(py))
        for feature, px, py, keep in zip(points, x, y, in_bounds)
        if keep
    )
    undefined = int(np.count_nonzero(~defined))
    out_of_bounds = int(np.count_nonzero(defined & ~in_bounds))
    if undefined or out_of_bounds:
        logger.debug(
            f"Point filter kept {len(kept)}/{len(points)} "
            f"(undefined={undefined}, out_of_bounds={out_of_bounds})"
        )
    return FilterResult(kept, skipped, undefined, out_of_bounds)
