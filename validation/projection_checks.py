"""
Consistency Checks for the Projection Rendering Core.

This module verifies at runtime that the projection engine and the geometry
generators keep their guarantees. Each check returns a ``ValidationResult``
so the results can be logged, aggregated or asserted on in tests.

Check Categories
----------------
1. Domain safety (projected values are finite or explicitly undefined)
2. Determinism (fitting twice gives identical parameters)
3. Shape preservation (re-fitting to a new viewport keeps relative shape)
4. Reference agreement (raw mappings match the PROJ definitions)
5. Convergence (denser route sampling deviates less from the true arc)
6. Output bounds (filtered points stay inside the viewport margin)
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence
import numpy as np

from common.logging_config import get_logger
from common.types import FeatureCollection, GeoPoint, Viewport
from geospatial.distance_calculations import interpolate_great_circle
from geospatial.projections import FittedProjection, ProjectionAdapter, fit_projection
from rendering.point_filter import FilterResult, within_margin
from validation.metrics import polyline_arc_deviation

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the check.
    passed : bool
        Whether the check passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


def _global_grid(step_deg: float):
    lons = np.arange(-180.0, 180.0 + 1e-9, step_deg)
    lats = np.arange(-90.0, 90.0 + 1e-9, step_deg)
    lon_grid, lat_grid = np.meshgrid(lons, lats)
    return lon_grid.ravel(), lat_grid.ravel()


class ProjectionConsistencyChecker:
    """Checker for the guarantees of projections and generated geometry.

    Parameters
    ----------
    strict_mode : bool
        If True, raise ``ValueError`` on the first failed check.
    log_violations : bool
        Whether to log failed checks.
    """

    def __init__(
        self,
        strict_mode: bool = False,
        log_violations: bool = True
    ):
        self.strict_mode = strict_mode
        self.log_violations = log_violations
        self._logger = get_logger("ProjectionConsistencyChecker")

    def _finish(self, result: ValidationResult) -> ValidationResult:
        if not result.passed:
            if self.log_violations:
                self._logger.warning(f"{result.test_name} FAILED: {result.message}")
            if self.strict_mode:
                raise ValueError(f"{result.test_name}: {result.message}")
        return result

    def check_all(
        self,
        adapter: ProjectionAdapter,
        viewport: Viewport,
        reference: FeatureCollection
    ) -> List[ValidationResult]:
        """Run the projection checks for one family."""
        fitted = fit_projection(adapter, viewport, reference)
        resized = Viewport(viewport.width * 1.7, viewport.height * 0.6)
        return [
            self.check_finite_projection(fitted),
            self.check_fit_idempotence(adapter, viewport, reference),
            self.check_aspect_preserved(adapter, reference, viewport, resized),
            self.check_reference_agreement(adapter),
        ]

    def check_finite_projection(
        self,
        projection: FittedProjection,
        step_deg: float = 5.0
    ) -> ValidationResult:
        """Every projected grid point is finite or undefined, never inf."""
        lons, lats = _global_grid(step_deg)
        x, y = projection.project_array(lons, lats)
        undefined = np.isnan(x) & np.isnan(y)
        finite = np.isfinite(x) & np.isfinite(y)
        leaks = int(np.count_nonzero(~(undefined | finite)))

        return self._finish(ValidationResult(
            test_name="finite_projection",
            passed=leaks == 0,
            message=f"Finite projection check: {leaks} non-finite leaks",
            details={
                'points': int(len(lons)),
                'undefined': int(np.count_nonzero(undefined)),
                'leaks': leaks,
            }
        ))

    def check_fit_idempotence(
        self,
        adapter: ProjectionAdapter,
        viewport: Viewport,
        reference: FeatureCollection
    ) -> ValidationResult:
        """Fitting twice with the same inputs yields identical parameters."""
        first = fit_projection(adapter, viewport, reference)
        second = fit_projection(adapter, viewport, reference)
        same = (
            first.scale == second.scale
            and first.translate_x == second.translate_x
            and first.translate_y == second.translate_y
        )
        return self._finish(ValidationResult(
            test_name="fit_idempotence",
            passed=same,
            message="Fit idempotence check: " + ("identical" if same else "parameters differ"),
            details={
                'first': (first.scale, first.translate_x, first.translate_y),
                'second': (second.scale, second.translate_x, second.translate_y),
            }
        ))

    def check_aspect_preserved(
        self,
        adapter: ProjectionAdapter,
        reference: FeatureCollection,
        viewport_a: Viewport,
        viewport_b: Viewport,
        tolerance: float = 1e-9
    ) -> ValidationResult:
        """Re-fitting to another viewport keeps the relative shape."""
        coords = np.array(
            [p.as_tuple() for f in reference for p in f.vertices()], dtype=np.float64
        )
        fitted_a = fit_projection(adapter, viewport_a, reference)
        fitted_b = fit_projection(adapter, viewport_b, reference)
        xa, ya = fitted_a.project_array(coords[:, 0], coords[:, 1])
        xb, yb = fitted_b.project_array(coords[:, 0], coords[:, 1])
        valid = np.isfinite(xa) & np.isfinite(xb)

        def normalized(x, y):
            x = x[valid]
            y = y[valid]
            span = max(x.max() - x.min(), y.max() - y.min())
            return (x - x.min()) / span, (y - y.min()) / span

        if not np.any(valid):
            max_diff = 0.0
        else:
            nxa, nya = normalized(xa, ya)
            nxb, nyb = normalized(xb, yb)
            max_diff = float(max(np.max(np.abs(nxa - nxb)), np.max(np.abs(nya - nyb))))

        return self._finish(ValidationResult(
            test_name="aspect_preserved",
            passed=max_diff <= tolerance,
            message=f"Aspect preservation check: max normalized difference {max_diff:.3e}",
            details={'max_difference': max_diff, 'tolerance': tolerance}
        ))

    def check_reference_agreement(
        self,
        adapter: ProjectionAdapter,
        step_deg: float = 5.0,
        tolerance: float = 1e-7
    ) -> ValidationResult:
        """Raw forward mapping agrees with the pyproj definition."""
        lons, lats = _global_grid(step_deg)
        x, y = adapter.raw_forward(np.radians(lons), np.radians(lats))
        valid = np.isfinite(x) & np.isfinite(y)
        # PROJ may wrap the antimeridian itself, so compare strictly inside it
        valid &= np.abs(lons) < 180.0
        ref_x, ref_y = adapter.reference_proj()(lons[valid], lats[valid])
        ref_x = np.asarray(ref_x, dtype=np.float64)
        ref_y = np.asarray(ref_y, dtype=np.float64)
        max_error = float(max(
            np.max(np.abs(x[valid] - ref_x), initial=0.0),
            np.max(np.abs(y[valid] - ref_y), initial=0.0)
        ))
        return self._finish(ValidationResult(
            test_name="reference_agreement",
            passed=max_error <= tolerance,
            message=f"{adapter.name} vs PROJ: max error {max_error:.3e}",
            details={
                'proj4': adapter.proj4_string,
                'max_error': max_error,
                'points': int(np.count_nonzero(valid)),
            }
        ))

    def check_route_convergence(
        self,
        start: GeoPoint,
        end: GeoPoint,
        segment_counts: Sequence[int] = (2, 4, 8, 16, 32, 64, 128)
    ) -> ValidationResult:
        """Doubling the sample count never increases arc deviation."""
        deviations = [
            polyline_arc_deviation(interpolate_great_circle(start, end, n))
            for n in segment_counts
        ]
        diffs = np.diff(deviations)
        # Strict decrease, except in the straight-line limit of zero deviation
        ok = all(d < 0 or (d == 0 and prev == 0.0) for d, prev in zip(diffs, deviations))
        return self._finish(ValidationResult(
            test_name="route_convergence",
            passed=bool(ok),
            message=f"Route convergence check: deviations {['%.2e' % d for d in deviations]}",
            details={'segments': list(segment_counts), 'deviations': deviations}
        ))

    def check_point_bounds(
        self,
        result: FilterResult,
        viewport: Viewport
    ) -> ValidationResult:
        """Every surviving point is finite and inside the viewport margin."""
        violations = sum(1 for p in result.points if not within_margin(p.x, p.y, viewport))
        return self._finish(ValidationResult(
            test_name="point_bounds",
            passed=violations == 0,
            message=f"Point bounds check: {violations} violations",
            details={'points': len(result.points), 'violations': violations}
        ))
