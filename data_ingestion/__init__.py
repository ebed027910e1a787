"""
Data Ingestion Module for the Projection Map Renderer.

Loads GeoJSON boundary and point datasets and sequences asynchronous
dataset loads.
"""

from data_ingestion.loaders import (
    DataIngestionConfig,
    GeoJSONLoader,
    DatasetLoadCoordinator,
    LoadTicket,
    LoadOutcome,
    DATASET_PATHS,
    parse_feature,
    parse_feature_collection,
)

__all__ = [
    "DataIngestionConfig",
    "GeoJSONLoader",
    "DatasetLoadCoordinator",
    "LoadTicket",
    "LoadOutcome",
    "DATASET_PATHS",
    "parse_feature",
    "parse_feature_collection",
]
