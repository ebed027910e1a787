"""
Layer Compositor.

Assembles the five map layers in fixed z-order from the current external
state. ``render_map`` is a pure function of its inputs: the same state,
boundary and configuration always produce an equal ``RenderedMap``. There
is no incremental update; every change re-fits the projection and rebuilds
every layer.

Layer Order (bottom to top)
---------------------------
1. map-layer: world boundary
2. dataset-layer: selected point dataset
3. tissot-layer: indicatrix grid
4. route-layer: great-circle flight routes
5. airport-layer: airport markers and labels

``MapSession`` is the reactive shell around it: it holds the current
selection, sequences dataset loads, and replaces its last output wholesale
on every change.
"""

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import List, Optional, Tuple
import itertools

from common.config import DATASET_IDS, RenderConfig
from common.logging_config import AuditLogger, get_logger
from common.types import FeatureCollection, GeoFeature, Viewport
from data_ingestion.loaders import DatasetLoadCoordinator
from geospatial.projections import FittedProjection, create_projection, fit_projection
from rendering.indicatrix import indicatrix_feature, indicatrix_grid
from rendering.path_generator import PathGenerator
from rendering.point_filter import filter_points
from rendering.primitives import (
    CirclePrimitive,
    Layer,
    PathPrimitive,
    RenderedMap,
    TextPrimitive,
)
from rendering.routes import AIRPORTS, FLIGHT_ROUTES, route_feature
from rendering import styles

logger = get_logger(__name__)


@dataclass(frozen=True)
class MapState:
    """Snapshot of everything a render pass depends on besides configuration.

    Attributes
    ----------
    projection_id : str
        Selected projection family.
    dataset_id : str
        Selected point dataset.
    dataset : Optional[FeatureCollection]
        Loaded dataset, or None when not loaded or when loading failed.
    viewport : Viewport
        Drawing area.
    """
    projection_id: str
    dataset_id: str
    dataset: Optional[FeatureCollection]
    viewport: Viewport

    @classmethod
    def from_config(cls, config: RenderConfig) -> 'MapState':
        return cls(
            projection_id=config.projection_id,
            dataset_id=config.dataset_id,
            dataset=None,
            viewport=Viewport(config.viewport_width, config.viewport_height)
        )


@lru_cache(maxsize=8)
def _indicatrix_features(
    spacing_deg: float,
    radius_deg: float,
    samples: int
) -> Tuple[GeoFeature, ...]:
    # Spherical geometry only; projection happens per render.
    return tuple(indicatrix_feature(spec, samples) for spec in indicatrix_grid(spacing_deg, radius_deg))


def _boundary_layer(boundary: FeatureCollection, generate: PathGenerator) -> Layer:
    primitives = []
    for feature in boundary:
        path = generate(feature)
        if path is not None:
            primitives.append(PathPrimitive("country", path, styles.BOUNDARY_STYLE))
    return Layer("map-layer", tuple(primitives))


def _dataset_layer(
    dataset: Optional[FeatureCollection],
    projection: FittedProjection,
    viewport: Viewport,
    audit: Optional[AuditLogger]
) -> Layer:
    if dataset is None:
        return Layer("dataset-layer")
    result = filter_points(dataset, projection, viewport)
    if audit is not None:
        audit.log_omission("dataset-layer", result.skipped_non_point, "non_point")
        audit.log_omission("dataset-layer", result.undefined, "undefined")
        audit.log_omission("dataset-layer", result.out_of_bounds, "out_of_bounds")
    return Layer("dataset-layer", tuple(
        CirclePrimitive(
            "dataset-point", p.x, p.y, styles.DATASET_POINT_RADIUS, styles.DATASET_POINT_STYLE
        )
        for p in result.points
    ))


def _tissot_layer(
    config: RenderConfig,
    generate: PathGenerator,
    audit: Optional[AuditLogger]
) -> Layer:
    features = _indicatrix_features(
        config.grid_spacing_deg, config.indicatrix_radius_deg, config.circle_samples
    )
    primitives = []
    for feature in features:
        path = generate(feature)
        if path is not None:
            primitives.append(PathPrimitive("tissot-indicatrix", path, styles.INDICATRIX_STYLE))
    if audit is not None:
        audit.log_omission("tissot-layer", len(features) - len(primitives), "undefined")
    return Layer("tissot-layer", tuple(primitives))


def _route_layer(config: RenderConfig, generate: PathGenerator) -> Layer:
    primitives = []
    for route in FLIGHT_ROUTES:
        feature = route_feature(route, config.route_segments)
        path = generate(feature)
        if path is None:
            continue
        primitives.append(PathPrimitive(
            "flight-route",
            path,
            styles.route_style(route.color),
            {"route": route.label, "distance-km": f"{feature.properties['distance_km']:.1f}"}
        ))
    return Layer("route-layer", tuple(primitives))


def _airport_layer(projection: FittedProjection, audit: Optional[AuditLogger]) -> Layer:
    primitives: List = []
    omitted = 0
    for airport in AIRPORTS.values():
        projected = projection.project(airport.coords)
        if projected is None:
            omitted += 1
            continue
        x, y = projected
        primitives.append(CirclePrimitive(
            "airport-marker", x, y, styles.AIRPORT_MARKER_RADIUS, styles.AIRPORT_MARKER_STYLE
        ))
        primitives.append(TextPrimitive(
            "airport-label", x + styles.AIRPORT_LABEL_OFFSET_X, y, airport.code,
            styles.AIRPORT_LABEL_STYLE
        ))
    if audit is not None:
        audit.log_omission("airport-layer", omitted, "undefined")
    return Layer("airport-layer", tuple(primitives))


def render_map(
    state: MapState,
    boundary: FeatureCollection,
    config: RenderConfig,
    audit: Optional[AuditLogger] = None
) -> RenderedMap:
    """Render every layer from scratch.

    Parameters
    ----------
    state : MapState
        Current selection, dataset and viewport.
    boundary : FeatureCollection
        World boundary; also the reference extent for fitting.
    config : RenderConfig
        Grid, disc and route tunables.
    audit : AuditLogger, optional
        When given, layer counts and omissions are recorded into the
        active render context.

    Returns
    -------
    RenderedMap
        Layers in fixed z-order.
    """
    projection = fit_projection(create_projection(state.projection_id), state.viewport, boundary)

    generate = PathGenerator(projection)
    layers = [_boundary_layer(boundary, generate)]
    if audit is not None:
        audit.log_omission("map-layer", generate.omitted_vertices, "undefined_vertex")

    layers.append(_dataset_layer(state.dataset, projection, state.viewport, audit))
    layers.append(_tissot_layer(config, PathGenerator(projection), audit))
    layers.append(_route_layer(config, PathGenerator(projection)))
    layers.append(_airport_layer(projection, audit))

    if audit is not None:
        for layer in layers:
            audit.log_layer(layer.name, len(layer))

    return RenderedMap(
        width=state.viewport.width,
        height=state.viewport.height,
        projection_id=state.projection_id,
        layers=tuple(layers)
    )


class MapSession:
    """Reactive shell driving full re-renders on state changes.

    Parameters
    ----------
    boundary : FeatureCollection
        World boundary, supplied once.
    config : RenderConfig, optional
        Initial selection and tunables (defaults when omitted).
    coordinator : DatasetLoadCoordinator, optional
        Sequenced dataset loader. Without one, datasets are never loaded
        and the point layer stays empty.
    audit : AuditLogger, optional
        Receives one record per render pass.

    Notes
    -----
    Selecting a dataset clears the previous dataset immediately; the new
    one appears once its load completes, unless a later selection has been
    made in the meantime.
    """

    def __init__(
        self,
        boundary: FeatureCollection,
        config: Optional[RenderConfig] = None,
        coordinator: Optional[DatasetLoadCoordinator] = None,
        audit: Optional[AuditLogger] = None
    ):
        self.boundary = boundary
        self.config = config or RenderConfig()
        self.coordinator = coordinator
        self.audit = audit
        self._state = MapState.from_config(self.config)
        self._counter = itertools.count(1)
        self._rendered: Optional[RenderedMap] = None
        self._render()

    @property
    def state(self) -> MapState:
        return self._state

    @property
    def rendered(self) -> RenderedMap:
        """Output of the most recent render pass."""
        return self._rendered

    def _render(self) -> RenderedMap:
        run_id = f"render_{next(self._counter):04d}"
        if self.audit is None:
            rendered = render_map(self._state, self.boundary, self.config)
        else:
            with self.audit.render_context(
                run_id,
                config_hash=self.config.config_hash(),
                projection_id=self._state.projection_id,
                dataset_id=self._state.dataset_id
            ):
                rendered = render_map(self._state, self.boundary, self.config, self.audit)
        # Full replace: nothing from the previous pass is kept.
        self._rendered = rendered
        logger.debug(f"{run_id}: {self._state.projection_id} / {self._state.dataset_id}")
        return rendered

    def select_projection(self, projection_id: str) -> RenderedMap:
        """Switch projection family and re-render.

        Raises
        ------
        ValueError
            If the projection identifier is unknown.
        """
        create_projection(projection_id)
        self._state = replace(self._state, projection_id=projection_id)
        return self._render()

    def resize(self, width: float, height: float) -> RenderedMap:
        self._state = replace(self._state, viewport=Viewport(width, height))
        return self._render()

    def set_dataset(self, collection: Optional[FeatureCollection]) -> RenderedMap:
        """Replace the loaded dataset directly (``None`` empties the layer)."""
        self._state = replace(self._state, dataset=collection)
        return self._render()

    async def select_dataset(self, dataset_id: str) -> RenderedMap:
        """Select a dataset, load it, and re-render.

        The selection renders immediately with an empty point layer; the
        loaded data is applied only if no newer selection was made while
        it was loading.

        Raises
        ------
        ValueError
            If the dataset identifier is unknown; the current selection is
            kept.
        """
        if dataset_id not in DATASET_IDS:
            raise ValueError(f"Unknown dataset {dataset_id!r}; expected one of {DATASET_IDS}")
        self._state = replace(self._state, dataset_id=dataset_id, dataset=None)
        self._render()
        await self.refresh_dataset()
        return self._rendered

    async def refresh_dataset(self) -> RenderedMap:
        """(Re)load the currently selected dataset."""
        if self.coordinator is None:
            return self._rendered
        outcome = await self.coordinator.load(self._state.dataset_id)
        if outcome is not None and outcome.ticket.dataset_id == self._state.dataset_id:
            self._state = replace(self._state, dataset=outcome.collection)
            self._render()
        return self._rendered
