"""Tests for great-circle routes and the Tissot indicatrix grid."""

from __future__ import annotations

import math

import pytest

from common.types import FeatureCollection, GeoPoint, Viewport
from geospatial.distance_calculations import angular_distance, angular_distances_from
from geospatial.projections import Equirectangular, Mercator, fit_projection
from rendering.indicatrix import indicatrix_feature, indicatrix_grid
from rendering.path_generator import generate_path
from rendering.routes import AIRPORTS, FLIGHT_ROUTES, great_circle_route, route_feature
from validation.metrics import plane_bounds, polyline_arc_deviation


class TestRouteTable:
    def test_airports(self) -> None:
        assert set(AIRPORTS) == {"ICN", "DXB", "TUN"}
        assert AIRPORTS["ICN"].coords == GeoPoint(126.4505, 37.4691)

    def test_routes(self) -> None:
        assert [r.label for r in FLIGHT_ROUTES] == ["ICN → DXB", "DXB → TUN"]
        assert [r.color for r in FLIGHT_ROUTES] == ["#d94d4c", "#ff8c42"]
        assert FLIGHT_ROUTES[0].end == FLIGHT_ROUTES[1].start


class TestGreatCircleRoute:
    def test_vertex_count(self) -> None:
        line = great_circle_route(AIRPORTS["ICN"].coords, AIRPORTS["DXB"].coords, 100)
        assert line.geometry_type == "LineString"
        assert len(line.coordinates) == 101

    def test_endpoints_are_exact(self) -> None:
        start, end = AIRPORTS["DXB"].coords, AIRPORTS["TUN"].coords
        line = great_circle_route(start, end, 10)
        assert line.coordinates[0] == start
        assert line.coordinates[-1] == end

    def test_vertices_lie_on_the_arc(self) -> None:
        start, end = AIRPORTS["ICN"].coords, AIRPORTS["DXB"].coords
        total = angular_distance(start, end)
        line = great_circle_route(start, end, 20)
        for p in line.coordinates:
            assert angular_distance(start, p) + angular_distance(p, end) == pytest.approx(total, abs=1e-9)

    @pytest.mark.parametrize("segments", [1, 0, -100])
    def test_rejects_too_few_segments(self, segments: int) -> None:
        with pytest.raises(ValueError):
            great_circle_route(GeoPoint(0, 0), GeoPoint(10, 10), segments)

    def test_antipodal_route_is_finite(self) -> None:
        line = great_circle_route(GeoPoint(0, 0), GeoPoint(180, 0), 4)
        assert [p.lat for p in line.coordinates[1:-1]] == pytest.approx([45.0, 90.0, 45.0])

    def test_convergence_with_density(self) -> None:
        start, end = AIRPORTS["ICN"].coords, AIRPORTS["TUN"].coords
        deviations = [
            polyline_arc_deviation(great_circle_route(start, end, n).coordinates)
            for n in (2, 4, 8, 16, 32, 64, 128)
        ]
        assert all(b < a for a, b in zip(deviations, deviations[1:]))
        omega = angular_distance(start, end)
        assert deviations[-1] == pytest.approx(1 - math.cos(omega / 256), rel=1e-3)

    def test_route_feature_properties(self) -> None:
        feature = route_feature(FLIGHT_ROUTES[0])
        assert feature.properties["name"] == "ICN → DXB"
        assert feature.properties["color"] == "#d94d4c"
        # Seoul to Dubai is roughly 6,760 km along the great circle
        assert 6_500 < feature.properties["distance_km"] < 7_000

    def test_endpoints_match_projected_airports(
        self, globe_boundary: FeatureCollection, viewport: Viewport
    ) -> None:
        fitted = fit_projection(Mercator(), viewport, globe_boundary)
        route = FLIGHT_ROUTES[0]
        points = generate_path(route_feature(route), fitted).points()
        assert len(points) == 101
        assert points[0] == pytest.approx(fitted.project(route.start))
        assert points[-1] == pytest.approx(fitted.project(route.end))


class TestIndicatrixGrid:
    def test_default_grid_size(self) -> None:
        specs = indicatrix_grid()
        assert len(specs) == 162
        assert all(s.radius_deg == 2.0 for s in specs)

    def test_grid_nodes(self) -> None:
        specs = indicatrix_grid(20.0)
        lats = sorted({s.center.lat for s in specs})
        lons = sorted({s.center.lon for s in specs})
        assert lats == [-80.0 + 20.0 * i for i in range(9)]
        assert lons == [-180.0 + 20.0 * j for j in range(18)]
        assert 180.0 not in lons

    def test_order_south_to_north_then_west_to_east(self) -> None:
        specs = indicatrix_grid()
        assert specs[0].center == GeoPoint(-180.0, -80.0)
        assert specs[1].center == GeoPoint(-160.0, -80.0)
        assert specs[18].center == GeoPoint(-180.0, -60.0)
        assert specs[-1].center == GeoPoint(160.0, 80.0)

    @pytest.mark.parametrize("spacing,expected", [(30.0, 6 * 12), (40.0, 5 * 9), (80.0, 3 * 5), (200.0, 1 * 2)])
    def test_other_spacings(self, spacing: float, expected: int) -> None:
        assert len(indicatrix_grid(spacing)) == expected

    @pytest.mark.parametrize("spacing,radius", [(0.0, 2.0), (-20.0, 2.0), (20.0, 0.0), (20.0, -1.0)])
    def test_rejects_non_positive(self, spacing: float, radius: float) -> None:
        with pytest.raises(ValueError):
            indicatrix_grid(spacing, radius)

    def test_disc_feature(self) -> None:
        spec = indicatrix_grid()[40]
        feature = indicatrix_feature(spec, samples=72)
        assert feature.geometry_type == "Polygon"
        ring = feature.coordinates[0]
        assert len(ring) == 73
        assert ring[0] == ring[-1]
        distances = angular_distances_from(spec.center, ring)
        assert max(abs(d - math.radians(2.0)) for d in distances) < 1e-9

    def test_only_antimeridian_column_spans_the_map(
        self, globe_boundary: FeatureCollection, viewport: Viewport
    ) -> None:
        fitted = fit_projection(Equirectangular(), viewport, globe_boundary)
        widths = {}
        for spec in indicatrix_grid():
            bounds = plane_bounds([generate_path(indicatrix_feature(spec, 36), fitted)])
            widths[spec.center.as_tuple()] = bounds.width
        seam = [w for (lon, _), w in widths.items() if lon == -180.0]
        others = [w for (lon, _), w in widths.items() if lon != -180.0]
        assert len(seam) == 9
        # Unsplit rings at the seam draw across the whole width
        assert min(seam) > viewport.width / 2
        assert max(others) < 100.0

    def test_all_discs_project_under_mercator(
        self, globe_boundary: FeatureCollection, viewport: Viewport
    ) -> None:
        fitted = fit_projection(Mercator(), viewport, globe_boundary)
        paths = [generate_path(indicatrix_feature(s, 16), fitted) for s in indicatrix_grid()]
        assert all(p is not None for p in paths)
