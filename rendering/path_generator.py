"""
Path Generator.

Turns a geographic feature into a move/line/close command sequence under a
fitted projection.

Omission Policy
---------------
Vertices that project to undefined are dropped and the remaining vertices of
the ring or line are joined directly. This is best-effort and lossy: a ring
crossing the Mercator pole limit is drawn with a chord across the gap, and a
polygon crossing the antimeridian is not split. True spherical clipping is
not attempted.

Point features produce no path; markers are drawn by the point dataset
filter and the airport layer instead.
"""

from typing import List, Optional, Sequence
import numpy as np

from common.logging_config import get_logger
from common.types import DrawCommand, GeoFeature, GeoPoint, PathData
from geospatial.coordinate_models import points_to_arrays
from geospatial.projections import FittedProjection

logger = get_logger(__name__)


class PathGenerator:
    """Callable converting features to ``PathData`` under one projection.

    Parameters
    ----------
    projection : FittedProjection
        The fitted projection every feature is drawn with.

    Attributes
    ----------
    omitted_vertices : int
        Running count of vertices dropped because they were undefined.
    """

    def __init__(self, projection: FittedProjection):
        self.projection = projection
        self.omitted_vertices = 0

    def __call__(self, feature: GeoFeature) -> Optional[PathData]:
        """Generate the drawing commands for one feature.

        Returns
        -------
        Optional[PathData]
            None for Point features and for features with no projectable
            vertex.
        """
        if feature.geometry_type == "Point":
            return None

        closed = feature.geometry_type in ("Polygon", "MultiPolygon")
        commands: List[DrawCommand] = []
        for ring in feature.rings():
            commands.extend(self._sub_path(ring, closed))

        if not commands:
            return None
        return PathData(tuple(commands))

    def _sub_path(self, ring: Sequence[GeoPoint], closed: bool) -> List[DrawCommand]:
        if closed and len(ring) > 1 and ring[0] == ring[-1]:
            ring = ring[:-1]
        lons, lats = points_to_arrays(ring)
        if len(lons) == 0:
            return []

        x, y = self.projection.project_array(lons, lats)
        valid = ~np.isnan(x)
        dropped = int(np.count_nonzero(~valid))
        if dropped:
            self.omitted_vertices += dropped
            logger.debug(f"Dropped {dropped}/{len(lons)} undefined vertices")

        xs = x[valid]
        ys = y[valid]
        if len(xs) == 0:
            return []

        commands = [DrawCommand("M", float(xs[0]), float(ys[0]))]
        commands.extend(DrawCommand("L", float(px), float(py)) for px, py in zip(xs[1:], ys[1:]))
        if closed:
            commands.append(DrawCommand("Z"))
        return commands


def generate_path(feature: GeoFeature, projection: FittedProjection) -> Optional[PathData]:
    """Convenience wrapper around ``PathGenerator`` for a single feature."""
    return PathGenerator(projection)(feature)
