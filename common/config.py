"""
Render configuration.

All tunables of the rendering core live in one immutable dataclass. Values
are validated at construction so that a bad setting fails at startup, never
halfway through a render pass.
"""

import hashlib
import json
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from common.units import AngleLike, angle_in_degrees

PROJECTION_IDS = ("mercator", "equalEarth", "equirectangular")
DATASET_IDS = ("airports", "cities", "earthquakes")


class ConfigurationError(ValueError):
    """Raised when a configuration value is out of its valid range.

    Attributes
    ----------
    key : str
        The configuration key that failed validation.
    value : object
        The invalid value.
    """

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True)
class RenderConfig:
    """Configuration surface of the map renderer.

    Attributes
    ----------
    projection_id : str
        One of ``mercator``, ``equalEarth``, ``equirectangular``.
    dataset_id : str
        One of ``airports``, ``cities``, ``earthquakes``.
    viewport_width, viewport_height : float
        Viewport size in plane units.
    grid_spacing_deg : float
        Spacing of the indicatrix grid, in degrees. Accepts any angle on
        construction (see ``common.units.angle_in_degrees``).
    indicatrix_radius_deg : float
        Angular radius of each indicatrix disc, in degrees.
    route_segments : int
        Number of segments per great-circle route (samples = segments + 1).
    circle_samples : int
        Number of vertices per geodesic circle.
    """
    projection_id: str = "mercator"
    dataset_id: str = "airports"
    viewport_width: float = 900.0
    viewport_height: float = 600.0
    grid_spacing_deg: AngleLike = 20.0
    indicatrix_radius_deg: AngleLike = 2.0
    route_segments: int = 100
    circle_samples: int = 72

    def __post_init__(self):
        if self.projection_id not in PROJECTION_IDS:
            raise ConfigurationError(
                "projection_id", self.projection_id, f"must be one of {PROJECTION_IDS}"
            )
        if self.dataset_id not in DATASET_IDS:
            raise ConfigurationError(
                "dataset_id", self.dataset_id, f"must be one of {DATASET_IDS}"
            )
        for key in ("viewport_width", "viewport_height"):
            value = getattr(self, key)
            if not isinstance(value, (int, float)) or not value > 0 or value == float("inf"):
                raise ConfigurationError(key, value, "must be a positive finite number")
            object.__setattr__(self, key, float(value))

        for key in ("grid_spacing_deg", "indicatrix_radius_deg"):
            raw = getattr(self, key)
            try:
                degrees = angle_in_degrees(raw)
            except ValueError as e:
                raise ConfigurationError(key, raw, str(e)) from e
            if not degrees > 0:
                raise ConfigurationError(key, raw, "must be a positive angle")
            object.__setattr__(self, key, degrees)

        if self.grid_spacing_deg > 180.0:
            raise ConfigurationError(
                "grid_spacing_deg", self.grid_spacing_deg, "must not exceed 180 degrees"
            )
        if self.indicatrix_radius_deg >= 90.0:
            raise ConfigurationError(
                "indicatrix_radius_deg", self.indicatrix_radius_deg,
                "must be smaller than 90 degrees"
            )
        if isinstance(self.route_segments, bool) or not isinstance(self.route_segments, int) \
                or self.route_segments < 2:
            raise ConfigurationError("route_segments", self.route_segments, "must be an integer >= 2")
        if isinstance(self.circle_samples, bool) or not isinstance(self.circle_samples, int) \
                or self.circle_samples < 4:
            raise ConfigurationError("circle_samples", self.circle_samples, "must be an integer >= 4")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'RenderConfig':
        """Build a validated config from a mapping; unknown keys are rejected."""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(unknown[0], data[unknown[0]], "unknown configuration key")
        return cls(**dict(data))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'RenderConfig':
        """Load and validate configuration from environment variables.

        Unset variables keep their defaults.

        Raises
        ------
        ConfigurationError
            If a value is out of range or cannot be parsed.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        mapping = {
            "MAP_PROJECTION": ("projection_id", str),
            "MAP_DATASET": ("dataset_id", str),
            "MAP_WIDTH": ("viewport_width", float),
            "MAP_HEIGHT": ("viewport_height", float),
            "MAP_GRID_SPACING": ("grid_spacing_deg", str),
            "MAP_INDICATRIX_RADIUS": ("indicatrix_radius_deg", str),
            "MAP_ROUTE_SEGMENTS": ("route_segments", int),
            "MAP_CIRCLE_SAMPLES": ("circle_samples", int),
        }
        for env_key, (field_name, convert) in mapping.items():
            if env_key not in env:
                continue
            try:
                values[field_name] = convert(env[env_key])
            except ValueError as e:
                raise ConfigurationError(field_name, env[env_key], str(e)) from e
        return cls(**values)

    def config_hash(self) -> str:
        """Deterministic short hash of the configuration."""
        config_str = json.dumps(asdict(self), sort_keys=True, default=str)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]
