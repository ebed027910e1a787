"""
Rendering Module for the Projection Map Renderer.

Turns fitted projections into drawable layers: feature paths, great-circle
routes, the indicatrix grid, filtered dataset points and airport markers,
assembled by the layer compositor.
"""

from rendering.path_generator import PathGenerator, generate_path
from rendering.routes import AIRPORTS, FLIGHT_ROUTES, great_circle_route, route_feature
from rendering.indicatrix import indicatrix_grid, indicatrix_feature
from rendering.point_filter import ProjectedPoint, FilterResult, filter_points
from rendering.primitives import (
    PathPrimitive,
    CirclePrimitive,
    TextPrimitive,
    Layer,
    RenderedMap,
    LAYER_ORDER,
)
from rendering.compositor import MapState, MapSession, render_map
from rendering.svg import to_svg, write_svg

__all__ = [
    "PathGenerator",
    "generate_path",
    "AIRPORTS",
    "FLIGHT_ROUTES",
    "great_circle_route",
    "route_feature",
    "indicatrix_grid",
    "indicatrix_feature",
    "ProjectedPoint",
    "FilterResult",
    "filter_points",
    "PathPrimitive",
    "CirclePrimitive",
    "TextPrimitive",
    "Layer",
    "RenderedMap",
    "LAYER_ORDER",
    "MapState",
    "MapSession",
    "render_map",
    "to_svg",
    "write_svg",
]
