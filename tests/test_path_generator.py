"""Tests for feature-to-path conversion."""

from __future__ import annotations

import re

import pytest

from common.types import FeatureCollection, GeoFeature, GeoPoint, PathData, Viewport
from geospatial.projections import Equirectangular, Mercator, fit_projection
from rendering.path_generator import PathGenerator, generate_path

SQUARE = [GeoPoint(0, 0), GeoPoint(10, 0), GeoPoint(10, 10), GeoPoint(0, 10), GeoPoint(0, 0)]


@pytest.fixture()
def equirect(globe_boundary: FeatureCollection, viewport: Viewport):
    return fit_projection(Equirectangular(), viewport, globe_boundary)


@pytest.fixture()
def mercator(globe_boundary: FeatureCollection, viewport: Viewport):
    return fit_projection(Mercator(), viewport, globe_boundary)


def _ops(path: PathData) -> str:
    return "".join(c.op for c in path.commands)


class TestPolygons:
    def test_closed_ring(self, equirect) -> None:
        path = generate_path(GeoFeature.polygon([SQUARE]), equirect)
        # Duplicate closing vertex is dropped; Z closes the ring.
        assert _ops(path) == "MLLLZ"

    def test_svg_format(self, equirect) -> None:
        d = generate_path(GeoFeature.polygon([SQUARE]), equirect).to_svg()
        assert re.fullmatch(r"M-?\d+\.\d{3},-?\d+\.\d{3}(L-?\d+\.\d{3},-?\d+\.\d{3}){3}Z", d)
        assert d.startswith("M450.000,300.000")

    def test_ring_with_hole(self, equirect) -> None:
        hole = [GeoPoint(2, 2), GeoPoint(4, 2), GeoPoint(4, 4), GeoPoint(2, 2)]
        path = generate_path(GeoFeature.polygon([SQUARE, hole]), equirect)
        assert _ops(path) == "MLLLZMLLZ"

    def test_multipolygon_has_one_subpath_per_ring(self, world_boundary: FeatureCollection, equirect) -> None:
        islands = [f for f in world_boundary if f.geometry_type == "MultiPolygon"][0]
        path = generate_path(islands, equirect)
        assert _ops(path).count("M") == 2
        assert _ops(path).count("Z") == 2

    def test_open_ring_is_kept_whole(self, equirect) -> None:
        path = generate_path(GeoFeature.polygon([SQUARE[:-1]]), equirect)
        assert _ops(path) == "MLLLZ"


class TestLines:
    def test_line_is_not_closed(self, equirect) -> None:
        path = generate_path(GeoFeature.line_string(SQUARE), equirect)
        assert _ops(path) == "MLLLL"

    def test_points_follow_vertex_order(self, equirect) -> None:
        line = GeoFeature.line_string([GeoPoint(-90, 0), GeoPoint(90, 0)])
        points = generate_path(line, equirect).points()
        assert len(points) == 2
        assert points[0] == pytest.approx((225.0, 300.0))
        assert points[1] == pytest.approx((675.0, 300.0))


class TestOmission:
    def test_point_feature_has_no_path(self, equirect) -> None:
        assert generate_path(GeoFeature.point(GeoPoint(1, 1)), equirect) is None

    def test_undefined_vertices_are_dropped(self, mercator) -> None:
        ring = [GeoPoint(0, 0), GeoPoint(10, 0), GeoPoint(10, 89), GeoPoint(0, 89), GeoPoint(0, 0)]
        generate = PathGenerator(mercator)
        path = generate(GeoFeature.polygon([ring]))
        assert _ops(path) == "MLZ"
        assert generate.omitted_vertices == 2

    def test_fully_undefined_feature(self, mercator) -> None:
        line = GeoFeature.line_string([GeoPoint(0, 88), GeoPoint(50, 89)])
        assert generate_path(line, mercator) is None

    def test_partially_undefined_multipolygon(self, mercator) -> None:
        polar = [GeoPoint(0, 88), GeoPoint(10, 88), GeoPoint(5, 89), GeoPoint(0, 88)]
        feature = GeoFeature.multi_polygon([[polar], [SQUARE]])
        path = generate_path(feature, mercator)
        assert _ops(path) == "MLLLZ"

    def test_omission_count_accumulates(self, mercator) -> None:
        generate = PathGenerator(mercator)
        for _ in range(3):
            generate(GeoFeature.line_string([GeoPoint(0, 0), GeoPoint(0, 90)]))
        assert generate.omitted_vertices == 3
