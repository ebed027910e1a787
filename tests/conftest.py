"""Shared pytest fixtures for the projection map renderer test suite."""

from __future__ import annotations

import numpy as np
import pytest

from common.logging_config import AuditLogger
from common.types import FeatureCollection, GeoFeature, GeoPoint, Viewport

# ---------------------------------------------------------------------------
# Geometry fixtures
# ---------------------------------------------------------------------------


def _globe_ring(step: float = 10.0) -> list[GeoPoint]:
    """Closed ring tracing the whole lon/lat rectangle, densified on every edge."""
    lons = np.arange(-180.0, 180.0 + 1e-9, step)
    lats = np.arange(-90.0 + step, 90.0 - step + 1e-9, step)
    ring = [GeoPoint(float(lon), -90.0) for lon in lons]
    ring += [GeoPoint(180.0, float(lat)) for lat in lats]
    ring += [GeoPoint(float(lon), 90.0) for lon in lons[::-1]]
    ring += [GeoPoint(-180.0, float(lat)) for lat in lats[::-1]]
    ring.append(ring[0])
    return ring


@pytest.fixture()
def globe_feature() -> GeoFeature:
    """A single polygon spanning the full globe."""
    return GeoFeature.polygon([_globe_ring()], {"name": "globe"})


@pytest.fixture()
def globe_boundary(globe_feature: GeoFeature) -> FeatureCollection:
    return FeatureCollection((globe_feature,))


@pytest.fixture()
def world_boundary(globe_feature: GeoFeature) -> FeatureCollection:
    """Globe frame plus two simple 'countries' (one MultiPolygon)."""
    square = GeoFeature.polygon([[
        GeoPoint(0.0, 0.0), GeoPoint(10.0, 0.0), GeoPoint(10.0, 10.0),
        GeoPoint(0.0, 10.0), GeoPoint(0.0, 0.0),
    ]], {"name": "square"})
    islands = GeoFeature.multi_polygon([
        [[GeoPoint(100.0, -10.0), GeoPoint(110.0, -10.0), GeoPoint(105.0, -5.0), GeoPoint(100.0, -10.0)]],
        [[GeoPoint(120.0, -10.0), GeoPoint(130.0, -10.0), GeoPoint(125.0, -5.0), GeoPoint(120.0, -10.0)]],
    ], {"name": "islands"})
    return FeatureCollection((globe_feature, square, islands))


@pytest.fixture()
def viewport() -> Viewport:
    return Viewport(900.0, 600.0)


@pytest.fixture()
def city_points() -> FeatureCollection:
    """A handful of Point features in a fixed order."""
    cities = [
        ("Seoul", 126.978, 37.5665),
        ("Dubai", 55.2708, 25.2048),
        ("Tunis", 10.1815, 36.8065),
        ("Reykjavik", -21.9426, 64.1466),
        ("Lima", -77.0428, -12.0464),
    ]
    return FeatureCollection(tuple(
        GeoFeature.point(GeoPoint(lon, lat), {"name": name}) for name, lon, lat in cities
    ))


# ---------------------------------------------------------------------------
# Audit fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def audit() -> AuditLogger:
    """The audit singleton, emptied before and after each test."""
    logger = AuditLogger()
    logger.clear()
    yield logger
    logger.clear()
