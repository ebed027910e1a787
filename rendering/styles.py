"""Drawing styles per layer: fill, stroke and text attributes."""

from dataclasses import dataclass, fields
from typing import Dict, Optional


@dataclass(frozen=True)
class Style:
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: Optional[str] = None
    opacity: Optional[str] = None
    stroke_dasharray: Optional[str] = None
    font_size: Optional[str] = None
    font_weight: Optional[str] = None
    paint_order: Optional[str] = None

    def as_attributes(self) -> Dict[str, str]:
        """SVG attribute names (dash-separated) for every set field."""
        return {
            f.name.replace("_", "-"): getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


BOUNDARY_STYLE = Style(fill="#f2f2f2", stroke="#999", stroke_width="0.4")

DATASET_POINT_STYLE = Style(fill="#3498db", opacity="0.6")
DATASET_POINT_RADIUS = 2.0

INDICATRIX_STYLE = Style(
    fill="rgba(255,0,0,0.12)",
    stroke="#ff0000",
    stroke_width="1.5",
    stroke_dasharray="3,2",
)

ROUTE_STROKE_WIDTH = "2.5"

AIRPORT_MARKER_STYLE = Style(fill="#e63946", stroke="white", stroke_width="1.5")
AIRPORT_MARKER_RADIUS = 5.0

AIRPORT_LABEL_STYLE = Style(
    fill="#000",
    stroke="#fff",
    stroke_width="0.5px",
    font_size="18px",
    font_weight="700",
    paint_order="stroke fill",
)
# Label sits to the right of the marker.
AIRPORT_LABEL_OFFSET_X = 8.0


def route_style(color: str) -> Style:
    return Style(fill="none", stroke=color, stroke_width=ROUTE_STROKE_WIDTH)
