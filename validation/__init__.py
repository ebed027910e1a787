"""
Validation Framework for the Projection Map Renderer.

This module provides runtime consistency checks and geometry metrics.
"""

from validation.projection_checks import (
    ProjectionConsistencyChecker,
    ValidationResult,
)

from validation.metrics import (
    PlaneBounds,
    plane_bounds,
    polyline_arc_deviation,
)

__all__ = [
    "ProjectionConsistencyChecker",
    "ValidationResult",
    "PlaneBounds",
    "plane_bounds",
    "polyline_arc_deviation",
]
