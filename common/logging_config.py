"""
Logging Configuration and Render Audit Trail.

This module provides the package logger factory and a small audit facility
that records what every render pass produced: how many primitives each
layer received and which inputs were omitted (undefined projections,
off-canvas points, failed dataset loads).

Audit Contents
--------------
Every render pass records:
- Configuration hash
- Projection and dataset identifiers
- Primitive counts per layer
- Omission counts per layer and reason
"""

import json
import logging
import sys
import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

# Render passes kept by AuditLogger before the oldest is evicted
DEFAULT_MAX_RUNS = 256


# Configure root logger for the package
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the map renderer.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


@dataclass
class OmissionRecord:
    """Record of inputs dropped from one layer during a render pass.

    Attributes
    ----------
    timestamp : datetime
        When the omission was recorded.
    layer : str
        Layer name (e.g. ``dataset-layer``).
    count : int
        Number of omitted inputs.
    reason : str
        Why they were omitted (e.g. ``undefined``, ``out_of_bounds``).
    """
    timestamp: datetime
    layer: str
    count: int
    reason: str


@dataclass
class RenderRecord:
    """Metadata for one render pass."""
    run_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    config_hash: str = ""
    projection_id: str = ""
    dataset_id: str = ""
    layer_counts: Dict[str, int] = field(default_factory=dict)
    omissions: List[OmissionRecord] = field(default_factory=list)


class AuditLogger:
    """Central facility for render audit records.

    Thread Safety
    -------------
    Instance creation is guarded by a lock; renders themselves are
    single-threaded.

    Retention
    ---------
    At most ``max_runs`` render passes are kept; starting a new pass beyond
    that evicts the oldest record.

    Examples
    --------
    >>> audit = AuditLogger()
    >>> with audit.render_context("render_001", config_hash="abc") as record:
    ...     audit.log_layer("route-layer", 2)
    ...     audit.log_omission("dataset-layer", 3, "out_of_bounds")
    >>> summary = audit.get_run_summary("render_001")
    """

    _instance: Optional['AuditLogger'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'AuditLogger':
        """Singleton pattern for global audit logger."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._runs: "OrderedDict[str, RenderRecord]" = OrderedDict()
        self.max_runs = DEFAULT_MAX_RUNS
        self._current_run_id: Optional[str] = None
        self._logger = get_logger("audit")
        self._initialized = True

    @contextmanager
    def render_context(
        self,
        run_id: str,
        config_hash: str = "",
        projection_id: str = "",
        dataset_id: str = ""
    ):
        """Context manager for a render pass.

        Parameters
        ----------
        run_id : str
            Unique identifier for this render pass.
        config_hash : str
            Hash of the active configuration.
        projection_id, dataset_id : str
            Active selections.

        Yields
        ------
        RenderRecord
            The record for this render pass.
        """
        record = RenderRecord(
            run_id=run_id,
            start_time=datetime.now(),
            config_hash=config_hash,
            projection_id=projection_id,
            dataset_id=dataset_id
        )
        self._runs.pop(run_id, None)
        self._runs[run_id] = record
        while len(self._runs) > self.max_runs:
            self._runs.popitem(last=False)
        self._current_run_id = run_id

        self._logger.debug(f"Starting render {run_id} ({projection_id}, {dataset_id})")

        try:
            yield record
        finally:
            record.end_time = datetime.now()
            self._current_run_id = None
            self._logger.info(
                f"Completed render {run_id}. "
                f"Primitives: {sum(record.layer_counts.values())}, "
                f"Omitted: {sum(o.count for o in record.omissions)}"
            )

    def log_layer(self, layer: str, count: int) -> None:
        """Record the number of primitives emitted for a layer."""
        if self._current_run_id and self._current_run_id in self._runs:
            self._runs[self._current_run_id].layer_counts[layer] = count

    def log_omission(self, layer: str, count: int, reason: str) -> None:
        """Record inputs omitted from a layer.

        Parameters
        ----------
        layer : str
            Layer name.
        count : int
            Number of omitted inputs; zero counts are ignored.
        reason : str
            Short machine-readable reason.
        """
        if count <= 0:
            return
        record = OmissionRecord(
            timestamp=datetime.now(),
            layer=layer,
            count=count,
            reason=reason
        )
        if self._current_run_id and self._current_run_id in self._runs:
            self._runs[self._current_run_id].omissions.append(record)

        self._logger.debug(f"OMITTED | {layer} | {reason} | count={count}")

    def get_run_summary(self, run_id: str) -> Dict[str, Any]:
        """Get a summary of a render pass.

        Raises
        ------
        KeyError
            If no render pass with this id was recorded.
        """
        if run_id not in self._runs:
            raise KeyError(f"No render found with ID {run_id}")

        record = self._runs[run_id]

        omission_counts: Dict[str, int] = {}
        for o in record.omissions:
            key = f"{o.layer}:{o.reason}"
            omission_counts[key] = omission_counts.get(key, 0) + o.count

        return {
            "run_id": run_id,
            "config_hash": record.config_hash,
            "projection_id": record.projection_id,
            "dataset_id": record.dataset_id,
            "start_time": record.start_time.isoformat(),
            "end_time": record.end_time.isoformat() if record.end_time else None,
            "layer_counts": dict(record.layer_counts),
            "omission_counts": omission_counts,
        }

    def export_run_artifacts(self, run_id: str, output_path: Path) -> None:
        """Export the summary of a render pass to JSON."""
        summary = self.get_run_summary(run_id)
        with open(output_path, 'w') as f:
            json.dump(summary, f, indent=2)

        self._logger.info(f"Exported render audit to {output_path}")

    def clear(self) -> None:
        """Forget all recorded render passes."""
        self._runs.clear()
        self._current_run_id = None
