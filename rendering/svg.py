"""SVG serialization of a rendered map: one ``<g>`` per layer, in z-order."""

from pathlib import Path
from typing import Dict
import xml.etree.ElementTree as ET

from rendering.primitives import CirclePrimitive, PathPrimitive, RenderedMap, TextPrimitive

SVG_NS = "http://www.w3.org/2000/svg"


def _fmt(value: float) -> str:
    return f"{value:.3f}"


def _meta_attributes(meta: Dict[str, str]) -> Dict[str, str]:
    return {f"data-{key}": str(value) for key, value in meta.items()}


def to_svg_element(rendered: RenderedMap) -> ET.Element:
    root = ET.Element("svg", {
        "xmlns": SVG_NS,
        "width": _fmt(rendered.width),
        "height": _fmt(rendered.height),
        "viewBox": f"0 0 {_fmt(rendered.width)} {_fmt(rendered.height)}",
        "data-projection": rendered.projection_id,
    })
    for layer in rendered.layers:
        group = ET.SubElement(root, "g", {"class": layer.name})
        for primitive in layer:
            if isinstance(primitive, PathPrimitive):
                attrs = {"class": primitive.css_class, "d": primitive.d}
                attrs.update(primitive.style.as_attributes())
                attrs.update(_meta_attributes(primitive.meta))
                ET.SubElement(group, "path", attrs)
            elif isinstance(primitive, CirclePrimitive):
                attrs = {
                    "class": primitive.css_class,
                    "cx": _fmt(primitive.cx),
                    "cy": _fmt(primitive.cy),
                    "r": _fmt(primitive.r),
                }
                attrs.update(primitive.style.as_attributes())
                attrs.update(_meta_attributes(primitive.meta))
                ET.SubElement(group, "circle", attrs)
            elif isinstance(primitive, TextPrimitive):
                attrs = {"class": primitive.css_class, "x": _fmt(primitive.x), "y": _fmt(primitive.y)}
                attrs.update(primitive.style.as_attributes())
                text = ET.SubElement(group, "text", attrs)
                text.text = primitive.text
            else:
                raise TypeError(f"Unsupported primitive {type(primitive).__name__}")
    return root


def to_svg(rendered: RenderedMap) -> str:
    """Serialize a rendered map to an SVG document string."""
    return ET.tostring(to_svg_element(rendered), encoding="unicode")


def write_svg(rendered: RenderedMap, path: Path) -> None:
    Path(path).write_text(to_svg(rendered), encoding="utf-8")
