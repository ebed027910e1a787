"""
Common utilities and infrastructure for the projection map renderer.

This package provides foundational components used across all modules:
- Cartographic constants with sources
- Angle unit normalization
- Shared value types (points, features, viewport, drawing commands)
- Render configuration
- Logging and render audit trail
"""

from common.constants import CartographicConstants
from common.units import angle_in_degrees, angle_in_radians
from common.types import (
    GeoPoint,
    GeoFeature,
    FeatureCollection,
    Viewport,
    Airport,
    Route,
    IndicatrixSpec,
    DrawCommand,
    PathData,
)
from common.config import RenderConfig, ConfigurationError
from common.logging_config import get_logger, AuditLogger

__all__ = [
    "CartographicConstants",
    "angle_in_degrees",
    "angle_in_radians",
    "GeoPoint",
    "GeoFeature",
    "FeatureCollection",
    "Viewport",
    "Airport",
    "Route",
    "IndicatrixSpec",
    "DrawCommand",
    "PathData",
    "RenderConfig",
    "ConfigurationError",
    "get_logger",
    "AuditLogger",
]
