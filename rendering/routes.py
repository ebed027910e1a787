"""
Great-Circle Route Synthesizer and the static airport/route table.

A route is drawn as the LineString through ``segments + 1`` points sampled
by spherical linear interpolation between its endpoints, then passed
through the path generator like any other line. On the sphere the sampled
polyline converges to the true arc as the sample count grows: the largest
chord deviation is ``1 - cos(omega / 2N)`` for an arc of angle omega.
"""

from typing import Dict, Tuple

from common.types import Airport, GeoFeature, GeoPoint, Route
from geospatial.distance_calculations import great_circle_distance_m, interpolate_great_circle

DEFAULT_ROUTE_SEGMENTS = 100

AIRPORTS: Dict[str, Airport] = {
    "ICN": Airport("ICN", GeoPoint(126.4505, 37.4691)),  # Seoul
    "DXB": Airport("DXB", GeoPoint(55.3644, 25.2532)),  # Dubai
    "TUN": Airport("TUN", GeoPoint(10.2270, 36.8510)),  # Tunis
}

FLIGHT_ROUTES: Tuple[Route, ...] = (
    Route("ICN → DXB", AIRPORTS["ICN"].coords, AIRPORTS["DXB"].coords, "#d94d4c"),
    Route("DXB → TUN", AIRPORTS["DXB"].coords, AIRPORTS["TUN"].coords, "#ff8c42"),
)


def great_circle_route(
    start: GeoPoint,
    end: GeoPoint,
    segments: int = DEFAULT_ROUTE_SEGMENTS
) -> GeoFeature:
    """Sampled great-circle LineString from ``start`` to ``end``.

    Parameters
    ----------
    start, end : GeoPoint
        Endpoints; antipodal pairs follow the documented tie-break arc.
    segments : int
        Number of segments N (>= 2); the line has N + 1 vertices.

    Returns
    -------
    GeoFeature
        LineString whose i-th vertex is ``slerp_geo(start, end, i / N)``.
    """
    if segments < 2:
        raise ValueError(f"Route needs at least 2 segments, got {segments}")
    return GeoFeature.line_string(interpolate_great_circle(start, end, segments))


def route_feature(route: Route, segments: int = DEFAULT_ROUTE_SEGMENTS) -> GeoFeature:
    """Great-circle LineString for a table route, labelled with its length."""
    line = great_circle_route(route.start, route.end, segments)
    return GeoFeature(
        "LineString",
        line.coordinates,
        {
            "name": route.label,
            "color": route.color,
            "distance_km": round(great_circle_distance_m(route.start, route.end) / 1000.0, 1),
        }
    )
