"""
Data Loaders for the Projection Map Renderer.

This module loads GeoJSON documents (the world boundary and the selectable
point datasets) into the read-only feature types of ``common.types``, and
sequences asynchronous dataset loads so that a slow, stale load can never
overwrite a newer selection.

Supported Data Sources
----------------------
1. World boundary (Polygon / MultiPolygon FeatureCollection)
2. Point datasets: airports, cities, earthquakes

Design Principles
-----------------
- The rendering core only ever sees parsed collections or ``None``
- Read and parse failures are logged and degrade to ``None``
- Every load request is tagged; only the latest tag may complete
"""

import asyncio
import itertools
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from common.logging_config import get_logger
from common.types import FeatureCollection, GeoFeature, GeoPoint

logger = get_logger(__name__)

DATASET_PATHS: Dict[str, str] = {
    "airports": "assets/datasets/points/point_world_A.geo.json",
    "cities": "assets/datasets/points/point_world_B.geo.json",
    "earthquakes": "assets/datasets/points/point_world_C.geo.json",
}

BOUNDARY_PATH = "assets/world.geo.json"


@dataclass
class DataIngestionConfig:
    """Configuration for data ingestion.

    Attributes
    ----------
    data_root : Path
        Root directory all document paths are relative to.
    dataset_paths : dict
        Dataset identifier to relative document path.
    boundary_path : str
        Relative path of the world boundary document.
    """
    data_root: Path
    dataset_paths: Dict[str, str] = field(default_factory=lambda: dict(DATASET_PATHS))
    boundary_path: str = BOUNDARY_PATH


def _parse_position(position: Any) -> GeoPoint:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        raise ValueError(f"Invalid position {position!r}")
    return GeoPoint(float(position[0]), float(position[1]))


def _parse_ring(positions: Any) -> List[GeoPoint]:
    if not isinstance(positions, (list, tuple)):
        raise ValueError(f"Invalid coordinate sequence {positions!r}")
    return [_parse_position(p) for p in positions]


def _parse_rings(rings: Any) -> List[List[GeoPoint]]:
    if not isinstance(rings, (list, tuple)):
        raise ValueError(f"Invalid ring sequence {rings!r}")
    return [_parse_ring(r) for r in rings]


def parse_feature(document: Mapping[str, Any]) -> Optional[GeoFeature]:
    """Parse one GeoJSON Feature.

    Returns
    -------
    Optional[GeoFeature]
        None for features without a geometry object or with an
        unsupported geometry type.

    Raises
    ------
    ValueError
        If the coordinates are malformed or out of range.
    """
    geometry = document.get("geometry")
    if not isinstance(geometry, Mapping):
        return None
    properties = document.get("properties") or {}
    if not isinstance(properties, Mapping):
        raise ValueError(f"Invalid properties {properties!r}")
    properties = dict(properties)
    geometry_type = geometry.get("type")
    coords = geometry.get("coordinates")

    if geometry_type == "Point":
        return GeoFeature.point(_parse_position(coords), properties)
    if geometry_type == "LineString":
        return GeoFeature.line_string(_parse_ring(coords), properties)
    if geometry_type == "Polygon":
        return GeoFeature.polygon(_parse_rings(coords), properties)
    if geometry_type == "MultiPolygon":
        if not isinstance(coords, (list, tuple)):
            raise ValueError(f"Invalid polygon sequence {coords!r}")
        return GeoFeature.multi_polygon([_parse_rings(p) for p in coords], properties)
    return None


def parse_feature_collection(document: Any) -> FeatureCollection:
    """Convert a GeoJSON FeatureCollection mapping into a ``FeatureCollection``.

    Features that cannot be used (no geometry, unsupported type, malformed
    or out-of-range coordinates) are skipped with a warning.

    Raises
    ------
    ValueError
        If the document is not a FeatureCollection.
    """
    if not isinstance(document, Mapping) or document.get("type") != "FeatureCollection":
        raise ValueError("Document is not a GeoJSON FeatureCollection")
    raw_features = document.get("features")
    if not isinstance(raw_features, list):
        raise ValueError("FeatureCollection has no 'features' list")

    features = []
    skipped = 0
    for raw in raw_features:
        try:
            feature = parse_feature(raw) if isinstance(raw, Mapping) else None
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed feature: {e}")
            feature = None
        if feature is None:
            skipped += 1
            continue
        features.append(feature)

    if skipped:
        logger.warning(f"Skipped {skipped} of {len(raw_features)} features")
    return FeatureCollection(tuple(features))


class GeoJSONLoader:
    """Loads GeoJSON documents from the data root.

    Parameters
    ----------
    config : DataIngestionConfig
        Data root and path table.
    """

    def __init__(self, config: DataIngestionConfig):
        self.config = config
        self._logger = get_logger(self.__class__.__name__)

    def resolve(self, dataset_id: str) -> Path:
        """Document path for a dataset identifier.

        Raises
        ------
        ValueError
            If the identifier is not in the path table.
        """
        try:
            relative = self.config.dataset_paths[dataset_id]
        except KeyError:
            raise ValueError(f"Unknown dataset {dataset_id!r}") from None
        return Path(self.config.data_root) / relative

    def load_path(self, path: Path) -> Optional[FeatureCollection]:
        """Read and parse one document; ``None`` on any read or parse failure."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
            collection = parse_feature_collection(document)
        except (OSError, ValueError) as e:
            self._logger.error(f"Failed to load {path}: {e}")
            return None
        self._logger.info(f"Loaded {len(collection)} features from {path}")
        return collection

    def load(self, dataset_id: str) -> Optional[FeatureCollection]:
        return self.load_path(self.resolve(dataset_id))

    def load_boundary(self) -> Optional[FeatureCollection]:
        return self.load_path(Path(self.config.data_root) / self.config.boundary_path)

    async def load_async(self, dataset_id: str) -> Optional[FeatureCollection]:
        """Load a dataset without blocking the event loop."""
        path = self.resolve(dataset_id)
        return await asyncio.to_thread(self.load_path, path)


@dataclass(frozen=True)
class LoadTicket:
    """Tag attached to one dataset load request."""
    sequence: int
    dataset_id: str


@dataclass(frozen=True)
class LoadOutcome:
    ticket: LoadTicket
    collection: Optional[FeatureCollection]


class DatasetLoadCoordinator:
    """Sequences dataset loads so that the latest request always wins.

    Each request gets a monotonically increasing ticket. A completion is
    accepted only if its ticket is still the latest one issued; anything
    older is discarded, whatever order the loads resolve in.

    Parameters
    ----------
    loader
        Any object with ``async load_async(dataset_id)``.
    """

    def __init__(self, loader):
        self._loader = loader
        self._sequence = itertools.count(1)
        self._latest: Optional[LoadTicket] = None

    @property
    def latest(self) -> Optional[LoadTicket]:
        return self._latest

    def request(self, dataset_id: str) -> LoadTicket:
        """Issue a ticket for a new load, superseding all earlier tickets."""
        ticket = LoadTicket(next(self._sequence), dataset_id)
        self._latest = ticket
        return ticket

    def is_current(self, ticket: LoadTicket) -> bool:
        return ticket == self._latest

    async def run(self, ticket: LoadTicket) -> Optional[LoadOutcome]:
        """Run the load for ``ticket``.

        Returns
        -------
        Optional[LoadOutcome]
            The outcome if the ticket is still current on completion,
            otherwise None (the result is discarded). A load that raises
            is logged and completes with no collection.
        """
        try:
            collection = await self._loader.load_async(ticket.dataset_id)
        except Exception as e:
            logger.error(f"Load #{ticket.sequence} ({ticket.dataset_id}) failed: {e!r}")
            collection = None
        if not self.is_current(ticket):
            logger.info(
                f"Discarding stale load #{ticket.sequence} ({ticket.dataset_id}); "
                f"latest is #{self._latest.sequence} ({self._latest.dataset_id})"
            )
            return None
        return LoadOutcome(ticket, collection)

    async def load(self, dataset_id: str) -> Optional[LoadOutcome]:
        """Request and run a load in one step."""
        return await self.run(self.request(dataset_id))
