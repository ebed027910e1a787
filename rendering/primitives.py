"""
Drawable primitives emitted by the layer compositor.

The rendering surface is external; these dataclasses are the whole contract
with it. Each primitive carries its position, a ``Style`` and a CSS class
name, plus optional free-form metadata that surfaces may expose (the SVG
serializer writes it as ``data-*`` attributes).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple, Union

from common.types import PathData
from rendering.styles import Style


@dataclass(frozen=True)
class PathPrimitive:
    css_class: str
    path: PathData
    style: Style
    meta: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def d(self) -> str:
        """The SVG path string."""
        return self.path.to_svg()


@dataclass(frozen=True)
class CirclePrimitive:
    css_class: str
    cx: float
    cy: float
    r: float
    style: Style
    meta: Dict[str, str] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class TextPrimitive:
    css_class: str
    x: float
    y: float
    text: str
    style: Style


Primitive = Union[PathPrimitive, CirclePrimitive, TextPrimitive]


@dataclass(frozen=True)
class Layer:
    """A named, ordered group of primitives."""
    name: str
    primitives: Tuple[Primitive, ...] = ()

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self.primitives)

    def __len__(self) -> int:
        return len(self.primitives)


# Bottom to top
LAYER_ORDER = ("map-layer", "dataset-layer", "tissot-layer", "route-layer", "airport-layer")


@dataclass(frozen=True)
class RenderedMap:
    """Complete output of one render pass, layers in z-order."""
    width: float
    height: float
    projection_id: str
    layers: Tuple[Layer, ...]

    def layer(self, name: str) -> Layer:
        """Look up a layer by name.

        Raises
        ------
        KeyError
            If no layer has this name.
        """
        for layer in self.layers:
            if layer.name == name:
                return layer
        raise KeyError(name)

    @property
    def layer_names(self) -> Tuple[str, ...]:
        return tuple(layer.name for layer in self.layers)
