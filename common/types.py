"""
Type Definitions for the Projection Rendering Core.

This module defines the value types shared between modules: geographic
points and features, the viewport, the static airport/route table entries
and the renderer-agnostic drawing commands.

Design Rationale
----------------
Using frozen dataclasses instead of raw tuples/dicts provides:
1. Self-documenting code - field names describe the data
2. Immutability - features are read-only once parsed
3. Runtime validation of ranges at construction
4. Clear unit expectations in docstrings
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple, Union
import math


@dataclass(frozen=True)
class GeoPoint:
    """A geographic coordinate on the sphere.

    Attributes
    ----------
    lon : float
        Longitude in DEGREES. Range: [-180, 180].
    lat : float
        Latitude in DEGREES. Range: [-90, 90].

    Notes
    -----
    Unlike the projection internals, which work in radians, the public
    point type stays in degrees to match GeoJSON documents.

    Examples
    --------
    >>> icn = GeoPoint(126.4505, 37.4691)
    >>> icn.as_tuple()
    (126.4505, 37.4691)
    """
    lon: float
    lat: float

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not (math.isfinite(self.lon) and math.isfinite(self.lat)):
            raise ValueError(f"Non-finite coordinate ({self.lon}, {self.lat})")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude {self.lon} out of range [-180, 180]")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(
                f"Latitude {self.lat} out of range [-90, 90]. "
                f"Did you swap longitude and latitude?"
            )

    def as_tuple(self) -> Tuple[float, float]:
        """Return (lon, lat) in GeoJSON order."""
        return self.lon, self.lat


GEOMETRY_TYPES = ("Point", "LineString", "Polygon", "MultiPolygon")

# Point: GeoPoint; LineString: ring; Polygon: rings; MultiPolygon: polygons.
Ring = Tuple[GeoPoint, ...]
Coordinates = Union[GeoPoint, Ring, Tuple[Ring, ...], Tuple[Tuple[Ring, ...], ...]]


@dataclass(frozen=True)
class GeoFeature:
    """A geographic feature with one of the supported geometry variants.

    Attributes
    ----------
    geometry_type : str
        One of ``Point``, ``LineString``, ``Polygon``, ``MultiPolygon``.
    coordinates : Coordinates
        Nested tuples of GeoPoint matching the geometry type.
    properties : dict
        Free-form properties carried over from the source document.
    """
    geometry_type: str
    coordinates: Coordinates
    properties: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.geometry_type not in GEOMETRY_TYPES:
            raise ValueError(
                f"Unsupported geometry type {self.geometry_type!r}; "
                f"expected one of {GEOMETRY_TYPES}"
            )

    @classmethod
    def point(cls, point: GeoPoint, properties: Optional[Dict[str, Any]] = None) -> 'GeoFeature':
        return cls("Point", point, properties or {})

    @classmethod
    def line_string(cls, points, properties: Optional[Dict[str, Any]] = None) -> 'GeoFeature':
        return cls("LineString", tuple(points), properties or {})

    @classmethod
    def polygon(cls, rings, properties: Optional[Dict[str, Any]] = None) -> 'GeoFeature':
        return cls("Polygon", tuple(tuple(ring) for ring in rings), properties or {})

    @classmethod
    def multi_polygon(cls, polygons, properties: Optional[Dict[str, Any]] = None) -> 'GeoFeature':
        return cls(
            "MultiPolygon",
            tuple(tuple(tuple(ring) for ring in rings) for rings in polygons),
            properties or {}
        )

    def rings(self) -> Tuple[Ring, ...]:
        """Flatten the geometry into its vertex sequences.

        Returns
        -------
        Tuple[Ring, ...]
            Polygon rings, the single line of a LineString, or a one-vertex
            sequence for a Point.
        """
        if self.geometry_type == "Point":
            return ((self.coordinates,),)
        if self.geometry_type == "LineString":
            return (self.coordinates,)
        if self.geometry_type == "Polygon":
            return tuple(self.coordinates)
        return tuple(ring for polygon in self.coordinates for ring in polygon)

    def vertices(self) -> Iterator[GeoPoint]:
        """Iterate over every vertex of the geometry."""
        for ring in self.rings():
            yield from ring


@dataclass(frozen=True)
class FeatureCollection:
    """An ordered, read-only sequence of features."""
    features: Tuple[GeoFeature, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "features", tuple(self.features))

    def __iter__(self) -> Iterator[GeoFeature]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)


@dataclass(frozen=True)
class Viewport:
    """Target drawing area in abstract plane units."""
    width: float
    height: float

    def __post_init__(self):
        for name, value in (("width", self.width), ("height", self.height)):
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Viewport {name} must be positive, got {value}")


@dataclass(frozen=True)
class Airport:
    """A named airport marker."""
    code: str
    coords: GeoPoint


@dataclass(frozen=True)
class Route:
    """A flight route drawn as a great-circle arc.

    Attributes
    ----------
    label : str
        Display label, e.g. ``"ICN → DXB"``.
    start, end : GeoPoint
        Route endpoints. Rendering is symmetric in direction.
    color : str
        CSS stroke color.
    """
    label: str
    start: GeoPoint
    end: GeoPoint
    color: str


@dataclass(frozen=True)
class IndicatrixSpec:
    """A small geodesic disc used to visualize local distortion."""
    center: GeoPoint
    radius_deg: float


@dataclass(frozen=True)
class DrawCommand:
    """A single move/line/close drawing instruction in plane coordinates.

    ``x`` and ``y`` are ignored for ``Z``.
    """
    op: str  # "M", "L" or "Z"
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class PathData:
    """An ordered drawing-command sequence, renderable as an SVG path string."""
    commands: Tuple[DrawCommand, ...]

    def to_svg(self) -> str:
        parts = []
        for cmd in self.commands:
            if cmd.op == "Z":
                parts.append("Z")
            else:
                parts.append(f"{cmd.op}{cmd.x:.3f},{cmd.y:.3f}")
        return "".join(parts)

    def points(self) -> Tuple[Tuple[float, float], ...]:
        """Return the plane coordinates of all move/line commands."""
        return tuple((c.x, c.y) for c in self.commands if c.op != "Z")

    def __len__(self) -> int:
        return len(self.commands)
