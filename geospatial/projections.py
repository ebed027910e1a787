"""
Map Projections and Viewport Fitting.

This module provides the three projection families the map can display and
the fitting step that scales and centers a projection onto a viewport.

Scientific Context
------------------
Domain: Cartography
Model: Cylindrical and pseudocylindrical projections of the unit sphere

Projection Families
-------------------
1. Mercator: conformal cylindrical. Preserves angles; area grows without
   bound towards the poles, so latitudes beyond the square-world limit
   (about 85.05 degrees) are rejected.
2. Equal Earth: equal-area pseudocylindrical, defined by a closed-form
   polynomial in the parametric latitude.
3. Equirectangular: plate carree. Linear in longitude and latitude; the
   baseline every other projection is compared against.

Implementation
--------------
Each family implements the raw forward mapping on the unit sphere in numpy,
vectorized over coordinate arrays. Undefined results are NaN inside the
engine and ``None`` at the public ``project`` boundary. Every family also
publishes a PROJ definition on the unit sphere so the raw mapping can be
checked against `pyproj`.

Screen Convention
-----------------
Fitted coordinates follow the drawing-surface convention: x grows to the
right and y grows downward, ``x = tx + k * raw_x`` and ``y = ty - k * raw_y``.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- Šavrič, B., Patterson, T., Jenny, B. (2018). The Equal Earth map projection.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple, Type
import numpy as np
from numpy.typing import NDArray

from pyproj import Proj

from common.constants import CartographicConstants
from common.logging_config import get_logger
from common.types import GeoFeature, GeoPoint, Viewport

logger = get_logger(__name__)


class ProjectionAdapter(ABC):
    """Abstract base class for projection families.

    Adapters are stateless: they only know the raw mapping of the unit
    sphere. Scale and translation live in ``FittedProjection``.
    """

    @property
    @abstractmethod
    def projection_id(self) -> str:
        """Identifier used by the configuration surface."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the projection."""
        pass

    @property
    @abstractmethod
    def proj4_string(self) -> str:
        """PROJ.4 definition on the unit sphere."""
        pass

    @property
    @abstractmethod
    def preserves_angles(self) -> bool:
        """Whether this is a conformal projection."""
        pass

    @property
    @abstractmethod
    def preserves_area(self) -> bool:
        """Whether this is an equal-area projection."""
        pass

    @abstractmethod
    def raw_forward(
        self,
        lon_rad: NDArray[np.float64],
        lat_rad: NDArray[np.float64]
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Project coordinates onto the unscaled plane.

        Parameters
        ----------
        lon_rad, lat_rad : ndarray
            Coordinates in radians.

        Returns
        -------
        Tuple[ndarray, ndarray]
            (x, y) with y growing north; NaN where undefined.
        """
        pass

    def reference_proj(self) -> Proj:
        """pyproj projection implementing the same raw mapping (degrees in)."""
        return Proj(self.proj4_string)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Mercator(ProjectionAdapter):
    """Spherical Mercator.

    ``x = lambda``, ``y = ln(tan(pi/4 + phi/2))`` (the inverse Gudermannian).
    Latitudes beyond ``MERCATOR_MAX_LATITUDE`` are undefined.
    """

    def __init__(self):
        self._max_lat_rad = np.radians(CartographicConstants.MERCATOR_MAX_LATITUDE.value)

    @property
    def projection_id(self) -> str:
        return "mercator"

    @property
    def name(self) -> str:
        return "Mercator"

    @property
    def proj4_string(self) -> str:
        return "+proj=merc +R=1 +no_defs"

    @property
    def preserves_angles(self) -> bool:
        return True

    @property
    def preserves_area(self) -> bool:
        return False

    def raw_forward(self, lon_rad, lat_rad):
        lon_rad = np.asarray(lon_rad, dtype=np.float64)
        lat_rad = np.asarray(lat_rad, dtype=np.float64)
        # Small overshoot from float rounding at the limit is still accepted
        valid = np.abs(lat_rad) <= self._max_lat_rad + 1e-12
        safe_lat = np.where(valid, lat_rad, 0.0)
        with np.errstate(divide='ignore', invalid='ignore'):
            y = np.log(np.tan(np.pi / 4 + safe_lat / 2))
        x = np.where(valid, lon_rad, np.nan)
        y = np.where(valid, y, np.nan)
        return x, y


class EqualEarth(ProjectionAdapter):
    """Equal Earth projection (Šavrič, Patterson & Jenny, 2018).

    With the parametric latitude ``theta = asin(M sin(phi))``::

        x = lambda cos(theta) / (M (A1 + 3 A2 theta^2 + theta^6 (7 A3 + 9 A4 theta^2)))
        y = theta (A1 + A2 theta^2 + theta^6 (A3 + A4 theta^2))
    """

    A1 = CartographicConstants.EQUAL_EARTH_A1.value
    A2 = CartographicConstants.EQUAL_EARTH_A2.value
    A3 = CartographicConstants.EQUAL_EARTH_A3.value
    A4 = CartographicConstants.EQUAL_EARTH_A4.value
    M = CartographicConstants.EQUAL_EARTH_M.value

    @property
    def projection_id(self) -> str:
        return "equalEarth"

    @property
    def name(self) -> str:
        return "Equal Earth"

    @property
    def proj4_string(self) -> str:
        return "+proj=eqearth +R=1 +no_defs"

    @property
    def preserves_angles(self) -> bool:
        return False

    @property
    def preserves_area(self) -> bool:
        return True

    def raw_forward(self, lon_rad, lat_rad):
        lon_rad = np.asarray(lon_rad, dtype=np.float64)
        lat_rad = np.asarray(lat_rad, dtype=np.float64)
        theta = np.arcsin(np.clip(self.M * np.sin(lat_rad), -1.0, 1.0))
        t2 = theta * theta
        t6 = t2 * t2 * t2
        x = lon_rad * np.cos(theta) / (
            self.M * (self.A1 + 3 * self.A2 * t2 + t6 * (7 * self.A3 + 9 * self.A4 * t2))
        )
        y = theta * (self.A1 + self.A2 * t2 + t6 * (self.A3 + self.A4 * t2))
        return x, y


class Equirectangular(ProjectionAdapter):
    """Plate carree: ``x = lambda``, ``y = phi``."""

    @property
    def projection_id(self) -> str:
        return "equirectangular"

    @property
    def name(self) -> str:
        return "Equirectangular"

    @property
    def proj4_string(self) -> str:
        return "+proj=eqc +R=1 +no_defs"

    @property
    def preserves_angles(self) -> bool:
        return False

    @property
    def preserves_area(self) -> bool:
        return False

    def raw_forward(self, lon_rad, lat_rad):
        lon_rad = np.asarray(lon_rad, dtype=np.float64)
        lat_rad = np.asarray(lat_rad, dtype=np.float64)
        return lon_rad.copy(), lat_rad.copy()


PROJECTIONS: Dict[str, Type[ProjectionAdapter]] = {
    "mercator": Mercator,
    "equalEarth": EqualEarth,
    "equirectangular": Equirectangular,
}


def create_projection(projection_id: str) -> ProjectionAdapter:
    """Instantiate the projection family registered under ``projection_id``.

    Raises
    ------
    ValueError
        If the identifier is unknown.
    """
    try:
        return PROJECTIONS[projection_id]()
    except KeyError:
        raise ValueError(
            f"Unknown projection {projection_id!r}; expected one of {sorted(PROJECTIONS)}"
        ) from None


@dataclass(frozen=True)
class FittedProjection:
    """A projection family with scale and translation fitted to a viewport.

    Attributes
    ----------
    adapter : ProjectionAdapter
        The projection family.
    scale : float
        Uniform scale factor k (plane units per unit-sphere radian).
    translate_x, translate_y : float
        Plane position of the raw origin.
    """
    adapter: ProjectionAdapter
    scale: float
    translate_x: float
    translate_y: float

    @property
    def projection_id(self) -> str:
        return self.adapter.projection_id

    def project_array(
        self,
        lon_deg: NDArray[np.float64],
        lat_deg: NDArray[np.float64]
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Vectorized projection of degree arrays.

        Returns
        -------
        Tuple[ndarray, ndarray]
            (x, y) plane coordinates; both NaN wherever the point is
            undefined or any intermediate is non-finite.
        """
        raw_x, raw_y = self.adapter.raw_forward(
            np.radians(np.asarray(lon_deg, dtype=np.float64)),
            np.radians(np.asarray(lat_deg, dtype=np.float64))
        )
        x = self.translate_x + self.scale * raw_x
        y = self.translate_y - self.scale * raw_y
        bad = ~(np.isfinite(x) & np.isfinite(y))
        x = np.where(bad, np.nan, x)
        y = np.where(bad, np.nan, y)
        return x, y

    def project(self, point: GeoPoint) -> Optional[Tuple[float, float]]:
        """Project one point; ``None`` if it cannot be projected."""
        x, y = self.project_array(np.array([point.lon]), np.array([point.lat]))
        if np.isnan(x[0]):
            return None
        return float(x[0]), float(y[0])


def raw_bounds(
    adapter: ProjectionAdapter,
    features: Iterable[GeoFeature]
) -> Optional[Tuple[float, float, float, float]]:
    """Bounding box of all projectable vertices under the unscaled mapping.

    Returns
    -------
    Optional[Tuple[float, float, float, float]]
        (x0, y0, x1, y1) with y growing north, or None if no vertex projects.
    """
    coords = [p.as_tuple() for feature in features for p in feature.vertices()]
    if not coords:
        return None
    arr = np.radians(np.array(coords, dtype=np.float64))
    x, y = adapter.raw_forward(arr[:, 0], arr[:, 1])
    valid = np.isfinite(x) & np.isfinite(y)
    if not np.any(valid):
        return None
    x = x[valid]
    y = y[valid]
    return float(x.min()), float(y.min()), float(x.max()), float(y.max())


def fit_projection(
    adapter: ProjectionAdapter,
    viewport: Viewport,
    reference: Iterable[GeoFeature]
) -> FittedProjection:
    """Fit a projection so ``reference`` is centered inside ``viewport``.

    The scale is uniform (aspect ratio preserved) and chosen so that the
    projected bounding box fills the binding dimension exactly.

    Parameters
    ----------
    adapter : ProjectionAdapter
        Projection family.
    viewport : Viewport
        Target drawing area.
    reference : iterable of GeoFeature
        Features whose extent drives the fit (usually the world boundary).

    Returns
    -------
    FittedProjection
        Deterministic for identical inputs.

    Notes
    -----
    Degenerate references do not raise: with no projectable vertex the
    result is unit scale centered on the viewport; a zero extent along one
    axis is fitted on the other axis only; a zero extent along both axes
    keeps unit scale and centers the single position.
    """
    bounds = raw_bounds(adapter, reference)
    w, h = viewport.width, viewport.height

    if bounds is None:
        logger.warning(f"No projectable reference vertex for {adapter.name}; using unit scale")
        return FittedProjection(adapter, 1.0, w / 2, h / 2)

    x0, y0, x1, y1 = bounds
    dx = x1 - x0
    dy = y1 - y0

    if dx > 0 and dy > 0:
        k = min(w / dx, h / dy)
    elif dx > 0:
        k = w / dx
    elif dy > 0:
        k = h / dy
    else:
        k = 1.0

    tx = (w - k * (x0 + x1)) / 2
    ty = (h + k * (y0 + y1)) / 2

    logger.debug(f"Fitted {adapter.name}: scale={k:.6f}, translate=({tx:.3f}, {ty:.3f})")
    return FittedProjection(adapter, float(k), float(tx), float(ty))
