"""Tests for the projection families and viewport fitting."""

from __future__ import annotations

import math

import numpy as np
import pytest

from common.types import FeatureCollection, GeoFeature, GeoPoint, Viewport
from geospatial.projections import (
    PROJECTIONS,
    EqualEarth,
    Equirectangular,
    FittedProjection,
    Mercator,
    create_projection,
    fit_projection,
    raw_bounds,
)
from rendering.path_generator import generate_path
from validation.metrics import plane_bounds


@pytest.fixture(params=sorted(PROJECTIONS))
def adapter(request):
    return create_projection(request.param)


class TestRegistry:
    def test_three_families(self) -> None:
        assert set(PROJECTIONS) == {"mercator", "equalEarth", "equirectangular"}

    def test_unknown_projection(self) -> None:
        with pytest.raises(ValueError, match="Unknown projection"):
            create_projection("orthographic")

    def test_properties(self) -> None:
        assert Mercator().preserves_angles and not Mercator().preserves_area
        assert EqualEarth().preserves_area and not EqualEarth().preserves_angles
        assert not Equirectangular().preserves_angles


class TestRawForward:
    def test_finite_or_nan_everywhere(self, adapter) -> None:
        lons, lats = np.meshgrid(np.arange(-180, 181, 5.0), np.arange(-90, 91, 5.0))
        x, y = adapter.raw_forward(np.radians(lons.ravel()), np.radians(lats.ravel()))
        assert not np.any(np.isinf(x))
        assert not np.any(np.isinf(y))
        assert np.array_equal(np.isnan(x), np.isnan(y))

    def test_origin_maps_to_origin(self, adapter) -> None:
        x, y = adapter.raw_forward(np.array([0.0]), np.array([0.0]))
        assert x[0] == pytest.approx(0.0, abs=1e-15)
        assert y[0] == pytest.approx(0.0, abs=1e-15)

    def test_mercator_poles_undefined(self) -> None:
        x, y = Mercator().raw_forward(np.radians([0.0, 0.0, 0.0]), np.radians([90.0, -90.0, 86.0]))
        assert np.all(np.isnan(x))
        assert np.all(np.isnan(y))

    def test_mercator_limit_is_square(self) -> None:
        x, y = Mercator().raw_forward(np.radians([180.0]), np.radians([85.0511287798]))
        assert x[0] == pytest.approx(math.pi)
        assert y[0] == pytest.approx(math.pi, rel=1e-9)

    def test_equirectangular_is_linear(self) -> None:
        x, y = Equirectangular().raw_forward(np.radians([45.0]), np.radians([-30.0]))
        assert x[0] == pytest.approx(math.pi / 4)
        assert y[0] == pytest.approx(-math.pi / 6)

    def test_equal_earth_extent(self) -> None:
        x, y = EqualEarth().raw_forward(np.radians([180.0, 0.0]), np.radians([0.0, 90.0]))
        # Published unit-sphere extents of Equal Earth
        assert x[0] == pytest.approx(2.7066, abs=1e-4)
        assert y[1] == pytest.approx(1.3173, abs=1e-4)

    def test_equal_earth_matches_proj(self) -> None:
        lons, lats = np.meshgrid(np.arange(-175, 176, 25.0), np.arange(-85, 86, 17.0))
        x, y = EqualEarth().raw_forward(np.radians(lons.ravel()), np.radians(lats.ravel()))
        ref_x, ref_y = EqualEarth().reference_proj()(lons.ravel(), lats.ravel())
        np.testing.assert_allclose(x, ref_x, atol=1e-7)
        np.testing.assert_allclose(y, ref_y, atol=1e-7)


class TestFitting:
    def test_equirectangular_fills_width(self, globe_boundary: FeatureCollection, viewport: Viewport) -> None:
        fitted = fit_projection(Equirectangular(), viewport, globe_boundary)
        assert fitted.scale == pytest.approx(900.0 / (2 * math.pi))
        assert fitted.translate_x == pytest.approx(450.0)
        assert fitted.translate_y == pytest.approx(300.0)

        path = generate_path(next(iter(globe_boundary)), fitted)
        bounds = plane_bounds([path])
        assert bounds.x0 == pytest.approx(0.0, abs=1e-9)
        assert bounds.x1 == pytest.approx(900.0, abs=1e-9)
        assert bounds.y0 == pytest.approx(75.0, abs=1e-9)
        assert bounds.y1 == pytest.approx(525.0, abs=1e-9)

    def test_binding_dimension_is_filled(self, adapter, globe_boundary: FeatureCollection) -> None:
        vp = Viewport(640.0, 640.0)
        fitted = fit_projection(adapter, vp, globe_boundary)
        x0, y0, x1, y1 = raw_bounds(adapter, globe_boundary)
        width = fitted.scale * (x1 - x0)
        height = fitted.scale * (y1 - y0)
        assert max(width / vp.width, height / vp.height) == pytest.approx(1.0)
        assert width <= vp.width + 1e-9
        assert height <= vp.height + 1e-9

    def test_fit_is_idempotent(self, adapter, world_boundary: FeatureCollection, viewport: Viewport) -> None:
        assert fit_projection(adapter, viewport, world_boundary) == fit_projection(adapter, viewport, world_boundary)

    def test_screen_y_points_down(self, globe_boundary: FeatureCollection, viewport: Viewport) -> None:
        fitted = fit_projection(Equirectangular(), viewport, globe_boundary)
        _, north_y = fitted.project(GeoPoint(0, 45))
        _, south_y = fitted.project(GeoPoint(0, -45))
        assert north_y < south_y

    def test_resize_preserves_shape(self, adapter, world_boundary: FeatureCollection) -> None:
        a = fit_projection(adapter, Viewport(900, 600), world_boundary)
        b = fit_projection(adapter, Viewport(400, 900), world_boundary)
        p, q = GeoPoint(10, 10), GeoPoint(-60, 30)
        pa, qa = a.project(p), a.project(q)
        pb, qb = b.project(p), b.project(q)
        ratio_x = (pb[0] - qb[0]) / (pa[0] - qa[0])
        ratio_y = (pb[1] - qb[1]) / (pa[1] - qa[1])
        assert ratio_x == pytest.approx(b.scale / a.scale)
        assert ratio_y == pytest.approx(b.scale / a.scale)

    def test_no_projectable_vertex(self, viewport: Viewport) -> None:
        polar = FeatureCollection((GeoFeature.line_string([GeoPoint(0, 89), GeoPoint(90, 89)]),))
        fitted = fit_projection(Mercator(), viewport, polar)
        assert fitted == FittedProjection(fitted.adapter, 1.0, 450.0, 300.0)

    def test_empty_reference(self, viewport: Viewport) -> None:
        fitted = fit_projection(Equirectangular(), viewport, FeatureCollection())
        assert fitted.scale == 1.0

    def test_zero_height_reference(self, viewport: Viewport) -> None:
        line = FeatureCollection((GeoFeature.line_string([GeoPoint(-90, 0), GeoPoint(90, 0)]),))
        fitted = fit_projection(Equirectangular(), viewport, line)
        assert fitted.scale == pytest.approx(900.0 / math.pi)
        assert fitted.project(GeoPoint(0, 0)) == pytest.approx((450.0, 300.0))

    def test_single_point_reference(self, viewport: Viewport) -> None:
        single = FeatureCollection((GeoFeature.point(GeoPoint(30, 30)),))
        fitted = fit_projection(Equirectangular(), viewport, single)
        assert fitted.scale == 1.0
        assert fitted.project(GeoPoint(30, 30)) == pytest.approx((450.0, 300.0))


class TestProject:
    def test_undefined_returns_none(self, globe_boundary: FeatureCollection, viewport: Viewport) -> None:
        fitted = fit_projection(Mercator(), viewport, globe_boundary)
        assert fitted.project(GeoPoint(0, 90)) is None
        assert fitted.project(GeoPoint(0, 85.0)) is not None

    def test_array_matches_scalar(self, adapter, globe_boundary: FeatureCollection, viewport: Viewport) -> None:
        fitted = fit_projection(adapter, viewport, globe_boundary)
        lons = np.array([-120.0, 0.0, 45.5])
        lats = np.array([-30.0, 0.0, 60.25])
        xs, ys = fitted.project_array(lons, lats)
        for lon, lat, x, y in zip(lons, lats, xs, ys):
            assert fitted.project(GeoPoint(lon, lat)) == pytest.approx((x, y))
